"""Errors specific to the briefing module."""

from __future__ import annotations


class BriefingError(Exception):
    """Base class for briefing module errors."""


class BatchRenderError(BriefingError):
    """Raised when rendering fails for one or more projects in a batch.

    All projects are joined before this is raised; no per-project isolation
    is applied, so one failure fails the batch.

    Parameters
    ----------
    exceptions
        Exceptions raised by the failed project tasks.

    Attributes
    ----------
    exceptions
        Immutable tuple of the underlying exceptions.

    """

    exceptions: tuple[Exception, ...]

    def __init__(self, exceptions: list[Exception]) -> None:
        """Initialize with the exceptions collected from the batch."""
        self.exceptions = tuple(exceptions)
        count = len(self.exceptions)
        message = f"Briefing batch rendering failed: {count} error(s) occurred"
        super().__init__(message)


class BriefingConfigError(BriefingError):
    """Raised when briefing settings read from the environment are invalid."""

    @classmethod
    def invalid_timezone(cls, value: str) -> BriefingConfigError:
        """Create error for an unknown IANA time zone name."""
        return cls(f"MATINS_TIMEZONE must be an IANA time zone name, got: {value!r}")

    @classmethod
    def empty_value(cls, env_var: str) -> BriefingConfigError:
        """Create error for a variable that is set but blank."""
        return cls(f"{env_var} must not be blank when set")
