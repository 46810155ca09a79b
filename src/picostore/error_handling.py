"""
Standardized Error Handling for picostore
=========================================

Every failure surfaced by a backend is a ``StoreError`` carrying an explicit
``ErrorKind`` discriminator. Composite backends switch on that kind (or on the
matching subclass) to tell "key not found" apart from real failures:

- KEY_NOT_FOUND: the key has no value in the queried backend
- INVALID_KEY:   the key cannot be mapped to a single file under the root
- IO_FAILURE:    any storage, filesystem or compression failure
- CONFIGURATION: the store was configured with invalid options

Errors are raised, never logged and swallowed: the caller sees exactly one
exception per failed operation.
"""

import enum
import logging
from contextlib import contextmanager
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class ErrorKind(enum.Enum):
    """Discriminator carried by every StoreError."""

    KEY_NOT_FOUND = "key_not_found"
    INVALID_KEY = "invalid_key"
    IO_FAILURE = "io_failure"
    CONFIGURATION = "configuration"


# Kinds whose identity is fully described by (kind, key)
_KEYED_KINDS = {ErrorKind.KEY_NOT_FOUND, ErrorKind.INVALID_KEY}


class StoreError(Exception):
    """Base exception for all store-related errors."""

    kind: ErrorKind = ErrorKind.IO_FAILURE

    def __init__(
        self,
        message: str,
        key: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.key = key
        self.context = context or {}
        super().__init__(message)

    def __str__(self) -> str:
        return self.message

    def __eq__(self, other):
        if not isinstance(other, StoreError):
            return NotImplemented
        if self.kind in _KEYED_KINDS:
            return self.kind is other.kind and self.key == other.key
        return self is other

    def __hash__(self):
        if self.kind in _KEYED_KINDS:
            return hash((self.kind, self.key))
        return id(self)


class KeyNotFoundError(StoreError, KeyError):
    """Raised when a key has no value in the queried backend."""

    kind = ErrorKind.KEY_NOT_FOUND

    def __init__(self, key: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(f"Key not found: {key!r}", key=key, context=context)


class InvalidKeyError(StoreError, ValueError):
    """Raised when a key cannot be used as a single path segment."""

    kind = ErrorKind.INVALID_KEY

    def __init__(
        self, key: str, reason: str = "", context: Optional[Dict[str, Any]] = None
    ):
        message = f"Invalid key: {key!r}"
        if reason:
            message += f" ({reason})"
        super().__init__(message, key=key, context=context)
        self.reason = reason


class StorageIOError(StoreError):
    """Raised when an underlying storage operation fails."""

    kind = ErrorKind.IO_FAILURE

    def __init__(
        self,
        message: str,
        key: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        errno: Optional[int] = None,
    ):
        super().__init__(message, key=key, context=context)
        self.errno = errno


class CorruptDataError(StorageIOError):
    """Raised when persisted bytes cannot be decoded by the store's codec."""

    pass


class StoreConfigurationError(StoreError, ValueError):
    """Raised when store configuration is invalid."""

    kind = ErrorKind.CONFIGURATION


def is_key_not_found(error: BaseException) -> bool:
    """Check whether an exception signals absence rather than failure."""
    return isinstance(error, StoreError) and error.kind is ErrorKind.KEY_NOT_FOUND


@contextmanager
def storage_operation_context(operation: str, key: Optional[str] = None, **context):
    """
    Context manager converting OS-level failures into StorageIOError.

    StoreErrors raised inside the block pass through untouched; any OSError
    is re-raised as a StorageIOError chained to the original exception.

    Args:
        operation: Description of the operation, e.g. "write"
        key: Key being operated on, if any
        **context: Additional context attached to the raised error
    """
    try:
        yield
    except StoreError:
        raise
    except OSError as e:
        error_context = dict(context)
        error_context.update(
            {
                "operation": operation,
                "original_error": str(e),
                "original_error_type": type(e).__name__,
            }
        )
        logger.debug(f"Storage operation failed: {operation} key={key!r}: {e}")
        raise StorageIOError(
            f"File system error during {operation}: {e}",
            key=key,
            context=error_context,
            errno=e.errno,
        ) from e
