"""Error handling utilities."""


class TodoAppError(Exception):
    """Base exception for the todo backend."""
    pass


class ValidationError(TodoAppError):
    """Caller-supplied todo input failed shape checks."""
    pass


class StorageError(TodoAppError):
    """Supabase operation error."""
    pass


class StorageTimeoutError(StorageError):
    """Supabase operation did not complete within the configured timeout."""
    pass
