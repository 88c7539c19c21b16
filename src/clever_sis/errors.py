"""Exception types shared by the store, the record services and the sync pipeline."""


class ValidationError(ValueError):
    """Raised when a record is missing required fields or repeats a business key."""


class StorageError(RuntimeError):
    """Raised when a collection file exists but cannot be read as a JSON array."""


class TransferError(RuntimeError):
    """Raised when an SFTP connect, list, get or put fails."""
