"""Exception hierarchy and error chain rendering.

Every error raised by the reconciliation engine derives from ScsyncError,
so the CLI can catch a single type, render the full causal chain and exit
with a failure status.
"""


class ScsyncError(Exception):
    """Base exception for all scsync errors."""


class ConfigError(ScsyncError):
    """Base exception for configuration loading errors."""


class ConfigNotFoundError(ConfigError):
    """Raised when the configuration file is not found."""


class ConfigParseError(ConfigError):
    """Raised when the configuration file is not valid TOML."""


class ConfigSchemaError(ConfigError):
    """Raised on unknown keys or values of the wrong type."""


class BlacklistConflictError(ScsyncError):
    """Raised when literal packages also appear in the blacklist.

    Attributes:
        names: Sorted conflicting package names.
    """

    def __init__(self, names: tuple[str, ...]) -> None:
        self.names = names
        super().__init__(f"Packages are both declared and blacklisted: {', '.join(names)}")


class TemplateRenderError(ScsyncError):
    """Raised when a group() macro in a package file is malformed."""


class QueryCommandError(ScsyncError):
    """Raised when a package query command fails."""


class GroupQueryError(ScsyncError):
    """Raised when a package group cannot be expanded."""


class CommandFailureError(ScsyncError):
    """Raised when a mutating command exits non-zero or cannot be spawned."""


def format_error_chain(err: BaseException, skip_first: bool = False) -> str:
    """Render an exception and its causes as a single message.

    Causes are followed through ``__cause__``. If any message in the chain
    spans several lines, every message is put on its own line (with a
    leading newline); otherwise they are joined inline with ": ".

    Args:
        err: The outermost exception.
        skip_first: Omit the outermost message (useful when the caller
            already printed a context prefix that says the same thing).

    Returns:
        The rendered chain.
    """
    messages: list[str] = []
    current: BaseException | None = err
    while current is not None:
        if not skip_first:
            messages.append(str(current))
        skip_first = False
        current = current.__cause__

    if any("\n" in m for m in messages):
        return "\n" + "\n".join(messages)
    return ": ".join(messages)
