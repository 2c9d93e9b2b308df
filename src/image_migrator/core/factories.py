"""Factory classes for creating configured service instances."""

import logging
import time
from typing import Any, List, Optional

import boto3

from ..clients.cloudinary_gateway import CloudinaryUploadGateway
from ..clients.remote_fetch import RemoteImageFetcher
from ..clients.supabase_store import SupabaseRecordSource
from .logging_config import setup_logger
from .models import Settings
from .protocols import (
    ImageFetcherProtocol,
    LoggerProtocol,
    RecordSourceProtocol,
    UploadGatewayProtocol,
)
from .services import (
    MigrationOrchestrator,
    MigrationService,
    SerialBatchProcessor,
    Sleep,
    StorageAnalyzer,
    create_fetch_strategy,
)


class LoggerAdapter:
    """Adapter to make standard logger compatible with LoggerProtocol."""

    def __init__(self, logger: logging.Logger):
        self._logger = logger

    def debug(self, message: str, **kwargs: Any) -> None:
        self._logger.debug(message)

    def info(self, message: str, **kwargs: Any) -> None:
        self._logger.info(message)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._logger.warning(message)

    def error(self, message: str, **kwargs: Any) -> None:
        self._logger.error(message)


class LoggerFactory:
    """Factory for creating logger instances."""

    @staticmethod
    def create_logger(name: str = "image-migrator", level: Optional[str] = None) -> LoggerProtocol:
        return LoggerAdapter(setup_logger(name, level=level))


class S3ClientFactory:
    """Factory for creating S3 client instances."""

    @staticmethod
    def create_s3_client(endpoint_url: Optional[str] = None, **kwargs: Any) -> Any:
        """Create S3 client; ``endpoint_url`` targets S3-compatible storage such as Supabase."""
        session = boto3.Session()
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        return session.client("s3", **kwargs)


class MigrationPipelineFactory:
    """Factory for creating the complete migration pipeline."""

    @staticmethod
    def create_pipeline(
        settings: Settings,
        record_source: Optional[RecordSourceProtocol] = None,
        gateway: Optional[UploadGatewayProtocol] = None,
        image_fetcher: Optional[ImageFetcherProtocol] = None,
        logger: Optional[LoggerProtocol] = None,
        sleep: Sleep = time.sleep,
    ) -> MigrationOrchestrator:
        """
        Create a fully configured orchestrator; collaborators default to the real clients.

        Clients created here are closed by ``MigrationOrchestrator.close``;
        injected collaborators are left to the caller.
        """
        owned: List[Any] = []
        if record_source is None:
            record_source = SupabaseRecordSource(settings.store)
            owned.append(record_source)

        if gateway is None:
            gateway = CloudinaryUploadGateway(
                settings.cloudinary, timeout=settings.store.timeout
            )
            owned.append(gateway)

        if image_fetcher is None and settings.migration.mode == "remote":
            endpoint_url = settings.store.s3_endpoint_url
            image_fetcher = RemoteImageFetcher(
                s3_client_factory=lambda: S3ClientFactory.create_s3_client(endpoint_url),
                timeout=settings.store.timeout,
            )
            owned.append(image_fetcher)

        if logger is None:
            logger = LoggerFactory.create_logger()

        fetch_strategy = create_fetch_strategy(
            settings.migration.fetch_strategy, record_source
        )
        migrator = MigrationService(
            fetch_strategy,
            record_source,
            gateway,
            settings.cloudinary,
            logger,
            image_fetcher=image_fetcher,
        )
        batch_processor = SerialBatchProcessor(migrator, logger, sleep=sleep)

        return MigrationOrchestrator(
            settings=settings,
            fetch_strategy=fetch_strategy,
            batch_processor=batch_processor,
            logger=logger,
            sleep=sleep,
            closeables=owned,
        )

    @staticmethod
    def create_analyzer(
        settings: Settings,
        record_source: Optional[RecordSourceProtocol] = None,
        logger: Optional[LoggerProtocol] = None,
    ) -> StorageAnalyzer:
        """Create the storage census; only the record store is needed."""
        owned: List[Any] = []
        if record_source is None:
            record_source = SupabaseRecordSource(settings.store)
            owned.append(record_source)
        return StorageAnalyzer(
            record_source, logger or LoggerFactory.create_logger(), closeables=owned
        )
