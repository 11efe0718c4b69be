# errors.py
from __future__ import annotations

from dataclasses import dataclass


class ProvisioningError(Exception):
    """Base class for every error that halts a provisioning run."""

    def __init__(self, message: str, *, hint: str | None = None):
        super().__init__(message)
        self.message = message
        self.hint = hint


class PreflightError(ProvisioningError):
    """Missing tool, missing configuration or missing certificate/key file."""


class UserAbort(ProvisioningError):
    """The operator declined a confirmation gate."""


class ResourceLookupError(ProvisioningError):
    """A resource name could not be recovered from the CLI's tabular output."""


class EmptyOutputError(ResourceLookupError):
    pass


class IndexOutOfRangeError(ResourceLookupError):
    pass


class TableShapeError(ResourceLookupError):
    """The table does not have the header or row layout a resolver expects."""


class NoMatchingRuleError(ResourceLookupError):
    pass


class ContextKeyError(KeyError):
    """A step read an EnvironmentContext key before any step produced it."""

    def __str__(self) -> str:
        return f"{self.args[0]!r} has not been produced by an earlier step"


@dataclass
class ExternalCommandFailure(Exception):
    """Non-zero exit status from a provisioning call (strict mode only)."""
    cmd: str
    exit_code: int

    def __str__(self) -> str:
        return f"command failed (exit={self.exit_code}): {self.cmd}"
