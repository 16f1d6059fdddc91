"""Exception hierarchy for shuttlehub.

Validation errors are raised before any state is touched. Store failures are
wrapped into PersistenceError by the store implementations.
"""


class ShuttlehubError(Exception):
    """Base class for all shuttlehub errors."""


class ValidationError(ShuttlehubError, ValueError):
    """Input rejected before any mutation was attempted."""


class EmptyNameError(ValidationError):
    """A roster name was empty after trimming."""

    def __init__(self) -> None:
        super().__init__("Name must not be empty")


class DuplicateNameError(ValidationError):
    """The name is already on the roster or the waiting list."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"'{name}' is already signed up for this session")


class InvalidTimeRangeError(ValidationError):
    """The session time range has no positive duration."""


class MissingLocationError(ValidationError):
    """No location given, or an unregistered venue without a court fee."""


class PermissionDeniedError(ShuttlehubError):
    """The operation requires an administrator."""

    def __init__(self, action: str) -> None:
        self.action = action
        super().__init__(f"Admin access required to {action}")


class SessionNotFoundError(ShuttlehubError):
    """No session with the given id."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"Session not found: {session_id}")


class SessionCompletedError(ShuttlehubError):
    """The session is completed and can no longer be edited."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"Session {session_id} is completed")


class ConfirmationRequiredError(ShuttlehubError):
    """A destructive operation was requested without confirmation."""


class PersistenceError(ShuttlehubError):
    """The backing store failed to read or write."""


class BackupFormatError(ShuttlehubError):
    """A backup document could not be parsed."""
