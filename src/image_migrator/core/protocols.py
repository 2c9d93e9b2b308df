"""Protocol definitions for dependency injection and testability."""

from abc import ABC, abstractmethod
from typing import Any, List, Optional, Protocol, Sequence

from .models import DecodedImage, MigrationConfig, ProductRecord, RecordResult, UploadResult


class RecordSourceProtocol(Protocol):
    """Protocol for the product record store."""

    def list_candidates(
        self,
        columns: Sequence[str],
        limit: Optional[int] = None,
        with_image_only: bool = True,
    ) -> List[ProductRecord]:
        """List records in insertion order, by default only those with a non-null image."""
        ...

    def count_records(self) -> int:
        """Exact number of rows in the table."""
        ...

    def fetch_record(self, record_id: str) -> ProductRecord:
        """Fetch id, name and image of a single record."""
        ...

    def update_image(self, record_id: str, url: str) -> None:
        """Point a record's image column at ``url``."""
        ...


class UploadGatewayProtocol(Protocol):
    """Protocol for the CDN upload endpoint."""

    def upload(
        self,
        data: bytes,
        mime: str,
        folder: str,
        public_id: str,
        upload_preset: str,
    ) -> UploadResult:
        """Upload ``data`` and return where the CDN stored it."""
        ...


class ImageFetcherProtocol(Protocol):
    """Protocol for downloading an image referenced by URL."""

    def fetch(self, url: str) -> DecodedImage:
        """Download the image behind ``url``."""
        ...


class LoggerProtocol(Protocol):
    """Protocol for logging operations."""

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log debug message."""
        ...

    def info(self, message: str, **kwargs: Any) -> None:
        """Log info message."""
        ...

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log warning message."""
        ...

    def error(self, message: str, **kwargs: Any) -> None:
        """Log error message."""
        ...


class FetchStrategy(ABC):
    """How candidate records are listed and loaded."""

    name: str = ""

    @abstractmethod
    def list_candidates(self, limit: Optional[int]) -> List[ProductRecord]:
        """List the records to consider, in store order."""
        ...

    @abstractmethod
    def load(self, record: ProductRecord) -> ProductRecord:
        """Return the record with its image field populated."""
        ...


class RecordMigrator(ABC):
    """Abstract per-record migration service."""

    @abstractmethod
    def migrate_record(
        self, record: ProductRecord, config: MigrationConfig
    ) -> RecordResult:
        """Migrate a single record; never raises for per-record failures."""
        ...
