"""Error taxonomy for the inquiry intake flow.

Every failure raised below the HTTP layer is an ``IntakeError``. The intake
router turns it into the single structured failure body returned to callers.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class WrittenRecord:
    """A row committed by the persistence chain."""

    table: str
    id: str


class IntakeError(Exception):
    """Base class for intake failures."""

    def __init__(self, message: str, code: str | int | None = None):
        super().__init__(message)
        self.message = message
        self.code = code


class ConfigurationError(IntakeError):
    """A required credential or address is missing or malformed."""


class ValidationFailure(IntakeError):
    """The normalized draft cannot be persisted."""


class UpstreamFailure(IntakeError):
    """Mail source, AI service or data store failed or returned unusable data.

    When raised by the persistence chain after the inquiry row was written,
    ``partial_write`` is set and ``committed`` lists what was left behind (or,
    with ``compensated`` set, what was written and then deleted again).
    """

    def __init__(
        self,
        message: str,
        code: str | int | None = None,
        *,
        partial_write: bool = False,
        compensated: bool = False,
        committed: list[WrittenRecord] | None = None,
    ):
        super().__init__(message, code)
        self.partial_write = partial_write
        self.compensated = compensated
        self.committed = list(committed or [])


class LookupFailure(UpstreamFailure):
    """A read-only lookup (brand alias, price list) failed at the transport level."""
