"""scsync - declarative package state synchronization for pacman-based systems."""

__version__ = "0.1.0"
