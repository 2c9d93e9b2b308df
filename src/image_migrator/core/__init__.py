"""Core utilities and shared components for the image migrator."""

from .classifier import classify, looks_inline
from .image_utils import build_public_id, decode_inline_image, describe_image
from .logging_config import get_logger, setup_logger
from .exceptions import (
    ImageMigratorError,
    ConfigurationError,
    RecordStoreError,
    ListingError,
    RecordFetchError,
    WriteBackError,
    DownloadError,
    DecodeError,
    GatewayError,
    with_error_handling,
)
from .models import (
    Action,
    BatchOutcome,
    CloudinarySettings,
    DecodedImage,
    Decision,
    ErrorDetail,
    MigrationConfig,
    ProductRecord,
    RecordResult,
    RunResult,
    Settings,
    StoreSettings,
    UploadResult,
)

__all__ = [
    "classify",
    "looks_inline",
    "build_public_id",
    "decode_inline_image",
    "describe_image",
    "get_logger",
    "setup_logger",
    "ImageMigratorError",
    "ConfigurationError",
    "RecordStoreError",
    "ListingError",
    "RecordFetchError",
    "WriteBackError",
    "DownloadError",
    "DecodeError",
    "GatewayError",
    "with_error_handling",
    "Action",
    "BatchOutcome",
    "CloudinarySettings",
    "DecodedImage",
    "Decision",
    "ErrorDetail",
    "MigrationConfig",
    "ProductRecord",
    "RecordResult",
    "RunResult",
    "Settings",
    "StoreSettings",
    "UploadResult",
]
