class DomainError(Exception):
    """Base error for check tracking operations."""


class ValidationError(DomainError, ValueError):
    """Caller-side draft validation failed."""


class MalformedSnapshotError(DomainError, ValueError):
    """Snapshot payload does not have a ``checks`` list."""


class SyncError(DomainError):
    """Synchronizer could not make the snapshot durable."""


class CredentialsMissingError(SyncError):
    def __init__(self, message: str = "No GitHub token configured. Set it in settings first.") -> None:
        super().__init__(message)


class RemoteApiError(SyncError):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ConflictError(RemoteApiError):
    """Remote document changed since the held version token."""


class SyncBusyError(SyncError):
    def __init__(self, message: str = "Another write is already in progress") -> None:
        super().__init__(message)


class PersistenceError(DomainError):
    """A store mutation could not be committed."""

    def __init__(self, cause: BaseException, message: str | None = None) -> None:
        super().__init__(message or str(cause) or type(cause).__name__)
        self.cause = cause
