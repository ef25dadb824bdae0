"""Error taxonomy raised by the intake workflow.

The server maps each class to an HTTP status in ``intake_server.errors``;
none of them are caught inside the SDK.
"""


class IntakeError(Exception):
    """Base class for all workflow errors."""


class ValidationError(IntakeError, ValueError):
    """A required field is missing or a value has the wrong type/range."""


class NotFound(IntakeError, LookupError):
    """A session token or patient id does not resolve to a record."""


class StorageFailure(IntakeError, RuntimeError):
    """The database rejected or failed an operation."""
