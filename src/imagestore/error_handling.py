"""
Standardized Error Handling for imagestore
==========================================

This module provides the exception hierarchy and the small set of helpers used
by every store operation to report failures consistently.
"""

import functools
import logging
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Type

logger = logging.getLogger(__name__)


class ImageStoreError(Exception):
    """Base exception for all image store errors."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        self.message = message
        self.context = context or {}
        super().__init__(message)

        # Log error with context for debugging
        context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
        logger.error(
            f"Image store error: {message}"
            + (f" ({context_str})" if context_str else "")
        )


class ImageStoreConfigurationError(ImageStoreError, ValueError):
    """Raised when store configuration is invalid."""

    pass


class NoStorageAvailableError(ImageStoreError):
    """Raised when neither cache directory is available."""

    pass


class StoreIOError(ImageStoreError):
    """Raised when reading, writing, copying or creating a file fails."""

    pass


class DecodeError(ImageStoreError):
    """Raised when image bytes cannot be decoded."""

    pass


class UnresolvableSourceError(ImageStoreError):
    """Raised when a source URI cannot be mapped to a local file."""

    pass


class InvalidInputError(ImageStoreError, ValueError):
    """Raised when input bytes or text are empty or malformed."""

    pass


def close_quietly(closeable: Any) -> None:
    """Close a resource, ignoring failures so they never mask the real outcome."""
    if closeable is None:
        return
    try:
        closeable.close()
    except OSError as e:
        logger.debug(f"Ignored error while closing {closeable!r}: {e}")


def with_error_handling(
    error_type: Type[ImageStoreError] = ImageStoreError,
    context: Optional[Dict[str, Any]] = None,
):
    """
    Decorator converting unexpected exceptions into store errors.

    Store errors raised inside the wrapped function pass through unchanged.

    Args:
        error_type: Type of ImageStoreError to raise
        context: Additional context to include in the error
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except ImageStoreError:
                raise
            except Exception as e:
                error_context = (context or {}).copy()
                error_context.update(
                    {
                        "function": func.__name__,
                        "original_error": str(e),
                        "original_error_type": type(e).__name__,
                    }
                )
                raise error_type(f"Error in {func.__name__}: {e}", error_context) from e

        return wrapper

    return decorator


@contextmanager
def store_operation_context(operation: str, **context):
    """
    Context manager for store operations with standardized logging.

    Args:
        operation: Description of the operation
        **context: Additional context for logging
    """
    logger.debug(f"Starting store operation: {operation}", extra=context)
    start_time = time.time()

    try:
        yield
        duration = time.time() - start_time
        logger.debug(
            f"Store operation completed: {operation} ({duration:.3f}s)",
            extra=context,
        )
    except ImageStoreError:
        logger.error(f"Store operation failed: {operation}", extra=context)
        raise
    except Exception as e:
        logger.error(
            f"Unexpected error in store operation: {operation} - {e}", extra=context
        )
        raise


def safe_file_operation(
    operation: str, file_path: Path, func: Callable, *args, **kwargs
):
    """
    Perform a file operation, translating OS failures into StoreIOError.

    Args:
        operation: Description of the operation
        file_path: File being operated on
        func: Function to call
        *args, **kwargs: Arguments for the function

    Returns:
        Result of the function call
    """
    with store_operation_context(operation, file_path=str(file_path)):
        try:
            return func(*args, **kwargs)
        except ImageStoreError:
            raise
        except PermissionError as e:
            raise StoreIOError(
                f"Permission denied for {operation}: {file_path}",
                {"operation": operation, "file_path": str(file_path)},
            ) from e
        except OSError as e:
            raise StoreIOError(
                f"File system error during {operation}: {e}",
                {"operation": operation, "file_path": str(file_path)},
            ) from e
