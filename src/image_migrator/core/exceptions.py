"""Custom exceptions and error handling utilities for the image migrator."""

from __future__ import annotations

from functools import wraps
from typing import Any, Callable, Type, TypeVar

from .logging_config import get_logger


class ImageMigratorError(Exception):
    """Base exception for all image migrator errors."""


class ConfigurationError(ImageMigratorError):
    """Error raised when a required setting is missing or left at its placeholder."""


class RecordStoreError(ImageMigratorError):
    """Error raised for record store (PostgREST) failures."""


class ListingError(RecordStoreError):
    """Error raised when the candidate records cannot be enumerated."""


class RecordFetchError(RecordStoreError):
    """Error raised when a single record cannot be re-fetched by id."""


class WriteBackError(RecordStoreError):
    """Error raised when the store rejects the new image URL."""


class DecodeError(ImageMigratorError):
    """Error raised for a malformed inline image payload."""


class DownloadError(ImageMigratorError):
    """Error raised when a remote image cannot be downloaded."""


class GatewayError(ImageMigratorError):
    """Error raised when the upload gateway rejects or fails an upload."""


F = TypeVar("F", bound=Callable[..., Any])


def with_error_handling(error_type: Type[ImageMigratorError]) -> Callable[[F], F]:
    """Wrap a collaborator call so unexpected exceptions surface as ``error_type``.

    Errors that already belong to the migrator hierarchy pass through untouched.
    """

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            logger = get_logger()
            try:
                return func(*args, **kwargs)
            except ImageMigratorError:
                raise
            except Exception as exc:  # noqa: BLE001
                logger.debug(f"Unhandled error in {func.__name__}: {exc}", exc_info=True)
                raise error_type(f"{func.__name__} failed: {exc}") from exc

        return wrapper  # type: ignore[return-value]

    return decorator
