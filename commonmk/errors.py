"""
Exception hierarchy for commonmk.

Every error carries the process exit code the CLI should return.
"""


class CommonMkError(Exception):
    """Base class for all commonmk errors."""
    exit_code = 1


class ConfigError(CommonMkError):
    """Raised for invalid project files or variable definitions."""
    pass


class UsageError(CommonMkError):
    """Raised when a target's required variable is missing or malformed."""
    pass


class CommandFailedError(CommonMkError):
    """Raised when an external command exits non-zero."""

    def __init__(self, message: str, exit_code: int = 1):
        super().__init__(message)
        self.exit_code = exit_code


class CommandNotFoundError(CommandFailedError):
    """Raised when an external binary is not on PATH."""

    def __init__(self, binary: str):
        super().__init__(f"{binary}: command not found", exit_code=127)
        self.binary = binary


class NoSuchTargetError(CommonMkError):
    exit_code = 2


class CircularDependencyError(CommonMkError):
    exit_code = 2
