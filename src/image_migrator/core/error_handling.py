"""Per-record error attribution and end-of-run error reporting."""

from typing import Dict, List, Type

from .exceptions import (
    DecodeError,
    DownloadError,
    GatewayError,
    RecordFetchError,
    WriteBackError,
)
from .models import ErrorDetail, ProductRecord, Stage
from .protocols import LoggerProtocol

_STAGE_BY_ERROR: Dict[Type[Exception], Stage] = {
    RecordFetchError: "fetch",
    DownloadError: "download",
    DecodeError: "decode",
    GatewayError: "gateway",
    WriteBackError: "write_back",
}


def stage_for(exc: Exception, current: Stage) -> Stage:
    """Stage an exception belongs to; ``current`` for errors outside the hierarchy."""
    for error_type, stage in _STAGE_BY_ERROR.items():
        if isinstance(exc, error_type):
            return stage
    return current


def error_detail(record: ProductRecord, exc: Exception, current: Stage) -> ErrorDetail:
    return ErrorDetail(
        record_id=record.id,
        name=record.name,
        message=str(exc) or type(exc).__name__,
        stage=stage_for(exc, current),
    )


class BatchErrorCollector:
    """
    Context manager for a migration run to collect and summarize errors.

    Per-record errors are reported with ``add_errors`` while the run is in
    progress and listed together when the block exits, so operators can
    re-investigate specific records. Exceptions raised inside the block are
    logged and propagated.
    """

    def __init__(self, logger: LoggerProtocol, operation_name: str = "Migration"):
        self.operation_name = operation_name
        self.errors: List[ErrorDetail] = []
        self._logger = logger

    def __enter__(self) -> "BatchErrorCollector":
        self._logger.info(f"Starting {self.operation_name}.")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if exc_type is not None:
            self._logger.error(
                f"{self.operation_name} aborted by an unhandled exception: {exc_val}"
            )
        elif self.errors:
            self._logger.warning(
                f"{self.operation_name} completed with {len(self.errors)} error(s):"
            )
            for i, detail in enumerate(self.errors, start=1):
                self._logger.error(
                    f"  {i}/{len(self.errors)} {detail.name or '(unnamed)'} "
                    f"(ID: {detail.record_id}) [{detail.stage}] {detail.message}"
                )
        else:
            self._logger.info(f"{self.operation_name} completed without errors.")
        return False

    def add_errors(self, details: List[ErrorDetail]) -> None:
        self.errors.extend(details)
