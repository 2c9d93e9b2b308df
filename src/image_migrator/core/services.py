"""Migration driver: fetch strategies, per-record migration, the run orchestrator and the storage census."""

import time
from typing import Any, Callable, List, Optional, Sequence, Tuple

from .classifier import classify
from .error_handling import BatchErrorCollector, error_detail
from .exceptions import ImageMigratorError, ListingError, WriteBackError
from .image_utils import build_public_id, decode_inline_image, describe_image, format_size
from .models import (
    DEFAULT_CDN_MARKER,
    Action,
    BatchOutcome,
    CloudinarySettings,
    DecodedImage,
    MigrationConfig,
    ProductRecord,
    RecordResult,
    RunResult,
    Settings,
    Stage,
    StorageReport,
)
from .protocols import (
    FetchStrategy,
    ImageFetcherProtocol,
    LoggerProtocol,
    RecordMigrator,
    RecordSourceProtocol,
    UploadGatewayProtocol,
)
from .reporting import (
    log_batch_progress,
    log_configuration,
    log_final_statistics,
    log_storage_report,
)
from .settings import validate_settings

Sleep = Callable[[float], None]

SKIP_REASONS = {
    Action.SKIP_ABSENT: "no image",
    Action.SKIP_ALREADY_MIGRATED: "already on Cloudinary",
    Action.SKIP_NOT_INLINE: "not an inline payload (external URL)",
}


class BulkFetchStrategy(FetchStrategy):
    """Lists full records in one query; nothing to load afterwards."""

    name = "bulk"
    columns = ("id", "name", "image")

    def __init__(self, record_source: RecordSourceProtocol):
        self._record_source = record_source

    def list_candidates(self, limit: Optional[int]) -> List[ProductRecord]:
        return self._record_source.list_candidates(self.columns, limit)

    def load(self, record: ProductRecord) -> ProductRecord:
        return record


class PerRecordFetchStrategy(FetchStrategy):
    """Lists ids and names only, then fetches each image on its own.

    Keeps the listing query small when image columns hold large payloads.
    """

    name = "per-record"
    columns = ("id", "name")

    def __init__(self, record_source: RecordSourceProtocol):
        self._record_source = record_source

    def list_candidates(self, limit: Optional[int]) -> List[ProductRecord]:
        return self._record_source.list_candidates(self.columns, limit)

    def load(self, record: ProductRecord) -> ProductRecord:
        return self._record_source.fetch_record(record.id)


def create_fetch_strategy(name: str, record_source: RecordSourceProtocol) -> FetchStrategy:
    strategies = {
        BulkFetchStrategy.name: BulkFetchStrategy,
        PerRecordFetchStrategy.name: PerRecordFetchStrategy,
    }
    if name not in strategies:
        raise ValueError(f"Unknown fetch strategy: {name}")
    return strategies[name](record_source)


def partition(records: Sequence[ProductRecord], batch_size: int) -> List[List[ProductRecord]]:
    """Split records into contiguous batches, preserving order."""
    if batch_size <= 0:
        raise ValueError("batch_size must be positive")
    return [list(records[i : i + batch_size]) for i in range(0, len(records), batch_size)]


def _listing(list_call: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    try:
        return list_call(*args, **kwargs)
    except ListingError:
        raise
    except Exception as exc:
        raise ListingError(f"Could not list records: {exc}") from exc


class MigrationService(RecordMigrator):
    """Moves a single record's image to Cloudinary and writes the URL back."""

    def __init__(
        self,
        fetch_strategy: FetchStrategy,
        record_source: RecordSourceProtocol,
        gateway: UploadGatewayProtocol,
        cloudinary: CloudinarySettings,
        logger: LoggerProtocol,
        image_fetcher: Optional[ImageFetcherProtocol] = None,
    ):
        self._fetch_strategy = fetch_strategy
        self._record_source = record_source
        self._gateway = gateway
        self._cloudinary = cloudinary
        self._logger = logger
        self._image_fetcher = image_fetcher

    def migrate_record(
        self, record: ProductRecord, config: MigrationConfig
    ) -> RecordResult:
        """
        Classify, upload and write back one record.

        Any failure is converted into ``RecordResult.error`` with the stage it
        happened in; nothing is raised to the caller.
        """
        result = RecordResult(record_id=record.id, name=record.name)
        stage: Stage = "fetch"

        try:
            record = self._fetch_strategy.load(record)
            result.name = record.name or result.name

            decision = classify(
                record.image, config.cdn_marker, allow_remote=config.mode == "remote"
            )
            result.action = decision.action

            if decision.is_skip:
                self._logger.info(f"  Skipped {record.name}: {SKIP_REASONS[decision.action]}")
                return result

            payload = decision.payload or ""
            if decision.action == Action.MIGRATE_REMOTE:
                stage = "download"
                self._logger.info(f"  Downloading {payload[:60]}")
                image = self._download(payload)
            else:
                stage = "decode"
                self._logger.info(f"  Inline payload detected ({len(payload)} characters)")
                image = decode_inline_image(payload)
                result.payload_size = len(payload)

            metadata = describe_image(image.data)
            dimensions = (
                f", {metadata['width']}x{metadata['height']} {metadata['format']}"
                if metadata
                else ""
            )
            self._logger.info(f"  Size: {format_size(image.size)}{dimensions}")

            stage = "gateway"
            public_id = build_public_id(self._cloudinary.public_id_prefix, record.id)
            upload = self._gateway.upload(
                image.data,
                image.mime,
                self._cloudinary.folder,
                public_id,
                self._cloudinary.upload_preset,
            )

            stage = "write_back"
            try:
                self._record_source.update_image(record.id, upload.url)
            except Exception as exc:
                self._logger.warning(
                    f"  Uploaded asset {upload.public_id or public_id} is not referenced "
                    "by any record"
                )
                if isinstance(exc, ImageMigratorError):
                    raise
                raise WriteBackError(str(exc)) from exc

            result.success = True
            result.url = upload.url
            self._logger.info(f"  Migrated: {upload.url[:60]}...")

        except Exception as exc:  # noqa: BLE001
            result.error = error_detail(record, exc, stage)
            self._logger.error(
                f"  Failed {record.name} (ID: {record.id}) at {result.error.stage}: "
                f"{result.error.message}"
            )

        return result

    def _download(self, url: str) -> DecodedImage:
        if self._image_fetcher is None:
            raise ImageMigratorError("Remote migration requires an image fetcher")
        return self._image_fetcher.fetch(url)


class SerialBatchProcessor:
    """Migrates the records of a batch one after another."""

    def __init__(
        self, migrator: RecordMigrator, logger: LoggerProtocol, sleep: Sleep = time.sleep
    ):
        self._migrator = migrator
        self._logger = logger
        self._sleep = sleep

    def process_batch(
        self,
        records: List[ProductRecord],
        config: MigrationConfig,
        offset: int = 0,
        total: Optional[int] = None,
    ) -> BatchOutcome:
        outcome = BatchOutcome()
        total = total if total is not None else len(records)

        for index, record in enumerate(records, start=offset + 1):
            self._logger.info(f"[{index}/{total}] {record.name or record.id}")
            result = self._migrator.migrate_record(record, config)
            outcome.record(result)

            if result.success and config.record_delay > 0:
                self._sleep(config.record_delay)

        return outcome


class MigrationOrchestrator:
    """Runs a full migration: gate, list, batch, pace, tally."""

    def __init__(
        self,
        settings: Settings,
        fetch_strategy: FetchStrategy,
        batch_processor: SerialBatchProcessor,
        logger: LoggerProtocol,
        sleep: Sleep = time.sleep,
        closeables: Sequence[Any] = (),
    ):
        self._settings = settings
        self._fetch_strategy = fetch_strategy
        self._batch_processor = batch_processor
        self._logger = logger
        self._sleep = sleep
        self._closeables = list(closeables)

    def close(self) -> None:
        """Release the HTTP clients the factory opened for this pipeline."""
        while self._closeables:
            self._closeables.pop().close()

    def run(self, config: Optional[MigrationConfig] = None) -> RunResult:
        """
        Migrate every candidate record.

        Raises:
            ConfigurationError: If the destination or store is not configured;
                raised before the store is touched
            ListingError: If the candidate records cannot be listed
        """
        config = config or self._settings.migration
        start_time = time.time()

        validate_settings(self._settings)
        log_configuration(self._logger, config, self._settings.cloudinary)

        records, listed = self._list(config)
        result = RunResult(total=len(records))
        # Judged on the raw listing: duplicates still count against the cap
        result.limit_reached = config.limit is not None and listed >= config.limit

        if not records:
            self._logger.warning("No records with an image were found")
            return result

        batches = partition(records, config.batch_size)
        result.batches = len(batches)
        self._logger.info(
            f"Processing {len(records)} records in {len(batches)} batches of {config.batch_size}"
        )

        done = 0
        with BatchErrorCollector(self._logger, "Image migration") as collector:
            for number, batch in enumerate(batches, start=1):
                self._logger.info(f"Batch {number}/{len(batches)}")
                outcome = self._batch_processor.process_batch(
                    batch, config, offset=done, total=len(records)
                )
                done += len(batch)
                result.merge(outcome)
                collector.add_errors(outcome.error_details)
                log_batch_progress(self._logger, number, len(batches), done, result)

                if number < len(batches) and config.batch_delay > 0:
                    self._logger.info(
                        f"Waiting {config.batch_delay:.1f}s before the next batch..."
                    )
                    self._sleep(config.batch_delay)

        result.processing_time = time.time() - start_time
        log_final_statistics(self._logger, result, config.mode)
        return result

    def _list(self, config: MigrationConfig) -> Tuple[List[ProductRecord], int]:
        """Listed records without duplicate ids, and how many rows the store returned."""
        self._logger.info(f"Listing records ({self._fetch_strategy.name})...")
        records = _listing(self._fetch_strategy.list_candidates, config.limit)

        unique: List[ProductRecord] = []
        seen = set()
        for record in records:
            if record.id in seen:
                self._logger.warning(f"Record {record.id} listed twice; processing it once")
                continue
            seen.add(record.id)
            unique.append(record)

        self._logger.info(f"Found {len(unique)} records with an image")
        return unique, len(records)


class StorageAnalyzer:
    """
    Census of the image column: what is already on the CDN, what is still
    inline, what points elsewhere and what is empty.

    Runs the same classifier as a migration but never uploads or writes.
    """

    columns = ("id", "name", "image")

    def __init__(
        self,
        record_source: RecordSourceProtocol,
        logger: LoggerProtocol,
        closeables: Sequence[Any] = (),
    ):
        self._record_source = record_source
        self._logger = logger
        self._closeables = list(closeables)

    def close(self) -> None:
        while self._closeables:
            self._closeables.pop().close()

    def run(
        self, limit: Optional[int] = 100, cdn_marker: str = DEFAULT_CDN_MARKER
    ) -> StorageReport:
        """
        Count and sample the table, then log the report.

        Args:
            limit: Maximum records to sample; None samples the whole table
            cdn_marker: Substring that identifies an image already on the CDN

        Raises:
            ListingError: If the table cannot be counted or listed
        """
        total = _listing(self._record_source.count_records)
        records = _listing(
            self._record_source.list_candidates, self.columns, limit, with_image_only=False
        )

        report = StorageReport(
            total_records=total,
            sampled=len(records),
            sample_limited=limit is not None and len(records) >= limit and total > len(records),
        )
        for record in records:
            decision = classify(record.image, cdn_marker)
            if decision.action == Action.SKIP_ABSENT:
                report.empty += 1
            elif decision.action == Action.SKIP_ALREADY_MIGRATED:
                report.on_cdn += 1
            elif decision.action == Action.SKIP_NOT_INLINE:
                report.external += 1
            else:
                report.inline += 1
                report.inline_bytes += len(decision.payload or "")

        log_storage_report(self._logger, report)
        return report
