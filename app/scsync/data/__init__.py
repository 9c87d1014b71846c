"""Bundled data files for scsync."""
