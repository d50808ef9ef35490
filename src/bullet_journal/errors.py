"""Exceptions raised by journal operations."""


class JournalError(Exception):
    """Base exception for journal operations."""
    pass


class EntryNotFoundError(JournalError):
    """Raised when a visible id does not resolve to an entry on a date."""
    pass


class AlreadyCompletedError(JournalError):
    """Raised when migrating an entry that is already done."""
    pass


class InvalidOperationError(JournalError):
    """Raised when an operation is not meaningful, e.g. migrating a date onto itself."""
    pass


class StorageUnavailableError(JournalError):
    """Raised when a day file or state file cannot be resolved, read or written."""
    pass
