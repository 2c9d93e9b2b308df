"""Console reporting for migration runs and storage analysis."""

from .models import (
    AVG_CDN_URL_BYTES,
    AVG_RECORD_BYTES,
    FREE_TIER_BYTES,
    CloudinarySettings,
    MigrationConfig,
    RunResult,
    StorageReport,
)
from .protocols import LoggerProtocol

RULE = "=" * 60


def log_configuration(
    logger: LoggerProtocol, config: MigrationConfig, cloudinary: CloudinarySettings
) -> None:
    """Log the destination and tunables of a run."""
    logger.info(RULE)
    title = "INLINE BASE64" if config.mode == "inline" else "REMOTE STORAGE"
    logger.info(f"{title} IMAGE MIGRATION -> CLOUDINARY")
    logger.info(RULE)
    logger.info(f"  Cloud name:     {cloudinary.cloud_name}")
    logger.info(f"  Upload preset:  {cloudinary.upload_preset}")
    logger.info(f"  Folder:         {cloudinary.folder}")
    logger.info(f"  Fetch strategy: {config.fetch_strategy}")
    logger.info(f"  Batch size:     {config.batch_size}")
    logger.info(f"  Batch delay:    {config.batch_delay:.1f}s")
    if config.record_delay:
        logger.info(f"  Record delay:   {config.record_delay:.1f}s")
    logger.info(f"  Record limit:   {config.limit or 'none'}")
    logger.info(RULE)


def log_batch_progress(
    logger: LoggerProtocol,
    batch_number: int,
    total_batches: int,
    done: int,
    result: RunResult,
) -> None:
    progress = (done / result.total) * 100 if result.total else 100.0
    logger.info(
        f"Batch {batch_number}/{total_batches} done - {done}/{result.total} "
        f"({progress:.1f}%) - Migrated: {result.migrated}, "
        f"Skipped: {result.skipped}, Errors: {result.errors}"
    )


def log_final_statistics(logger: LoggerProtocol, result: RunResult, mode: str) -> None:
    """Log the tally of a finished run."""
    logger.info(RULE)
    logger.info("MIGRATION COMPLETED")
    logger.info(RULE)
    logger.info(f"Total records: {result.total}")
    logger.info(f"Migrated:      {result.migrated}")
    logger.info(f"Skipped:       {result.skipped}")
    logger.info(f"Errors:        {result.errors}")
    logger.info(f"Elapsed:       {result.processing_time:.1f}s")

    if mode == "inline" and result.migrated_payload_bytes:
        saved_mb = result.migrated_payload_bytes / (1024 * 1024)
        logger.info(f"Database space freed: ~{saved_mb:.2f} MB of inline payloads")

    if result.limit_reached:
        logger.warning(
            f"Record limit reached after {result.total} records; "
            "more records may remain. Run the migration again to continue."
        )
    logger.info(RULE)


def _mb(size: float) -> str:
    return f"{size / (1024 * 1024):.2f} MB"


def log_storage_report(logger: LoggerProtocol, report: StorageReport) -> None:
    """Log the census of the image column with sizing and a recommendation."""
    logger.info(RULE)
    logger.info("IMAGE STORAGE ANALYSIS")
    logger.info(RULE)
    logger.info(f"Total records:     {report.total_records}")
    logger.info(f"Analyzed:          {report.sampled}")
    logger.info(f"  On Cloudinary:   {report.on_cdn}")
    logger.info(f"  Inline base64:   {report.inline}")
    logger.info(f"  External URLs:   {report.external}")
    logger.info(f"  No image:        {report.empty}")
    if report.sample_limited:
        logger.warning(
            f"Only the first {report.sampled} of {report.total_records} records were "
            "analyzed; raise --limit for a full census."
        )

    logger.info(f"Current size:      {_mb(report.current_bytes)}")
    logger.info(f"Optimized size:    {_mb(report.optimized_bytes)}")
    logger.info(f"Potential savings: {_mb(report.potential_savings)}")

    max_records = FREE_TIER_BYTES // (AVG_RECORD_BYTES + AVG_CDN_URL_BYTES)
    usage = report.usage_percentage
    logger.info(f"Free tier usage:   {usage:.2f}% of {_mb(FREE_TIER_BYTES)}")
    logger.info(f"Capacity:          {report.total_records}/~{max_records} records")
    if usage < 50:
        logger.info("Status: EXCELLENT - plenty of space left")
    elif usage < 80:
        logger.warning("Status: GOOD - keep an eye on growth")
    else:
        logger.warning("Status: CRITICAL - consider a larger plan")

    if report.inline:
        logger.warning(
            f"{report.inline} records hold inline base64 images "
            f"(average {report.average_inline_size / 1024:.2f} KB). "
            "Run: image-migrator migrate"
        )
    logger.info(RULE)
