"""Tests for serial batch processor functionality."""

from unittest.mock import Mock

from image_migrator.core.models import (
    Action,
    ErrorDetail,
    MigrationConfig,
    ProductRecord,
    RecordResult,
)
from image_migrator.core.services import SerialBatchProcessor
from image_migrator.testing.fakes import FakeLogger, FakeSleep


def migrated(record, config):
    return RecordResult(
        record_id=record.id,
        name=record.name,
        action=Action.MIGRATE,
        success=True,
        url=f"https://res.cloudinary.com/demo/{record.id}.jpg",
        payload_size=100,
    )


class TestSerialBatchProcessor:
    """Tests for SerialBatchProcessor.process_batch."""

    def test_process_batch_empty_list(self):
        """Test process_batch with empty batch list."""
        migrator = Mock()
        processor = SerialBatchProcessor(migrator, FakeLogger(), sleep=FakeSleep())

        outcome = processor.process_batch([], MigrationConfig())

        assert outcome.migrated == outcome.skipped == outcome.errors == 0
        migrator.migrate_record.assert_not_called()

    def test_process_batch_single_item(self):
        """Test process_batch with single item."""
        migrator = Mock()
        migrator.migrate_record.side_effect = migrated
        config = MigrationConfig()
        record = ProductRecord(id="1", name="Mug")
        processor = SerialBatchProcessor(migrator, FakeLogger(), sleep=FakeSleep())

        outcome = processor.process_batch([record], config)

        assert outcome.migrated == 1
        assert outcome.migrated_payload_bytes == 100
        migrator.migrate_record.assert_called_once_with(record, config)

    def test_process_batch_mixed_results(self):
        """Test that skips and failures are tallied apart from migrations."""
        failure = ErrorDetail(record_id="3", name="Bowl", message="boom", stage="gateway")
        results = {
            "1": lambda r, c: migrated(r, c),
            "2": lambda r, c: RecordResult(
                record_id=r.id, name=r.name, action=Action.SKIP_ALREADY_MIGRATED
            ),
            "3": lambda r, c: RecordResult(
                record_id=r.id, name=r.name, action=Action.MIGRATE, success=False, error=failure
            ),
        }
        migrator = Mock()
        migrator.migrate_record.side_effect = lambda r, c: results[r.id](r, c)
        sleep = FakeSleep()
        processor = SerialBatchProcessor(migrator, FakeLogger(), sleep=sleep)
        batch = [ProductRecord(id=i, name=f"Item {i}") for i in ("1", "2", "3")]

        outcome = processor.process_batch(batch, MigrationConfig(record_delay=0.5))

        assert (outcome.migrated, outcome.skipped, outcome.errors) == (1, 1, 1)
        assert outcome.error_details == [failure]
        assert sleep.calls == [0.5]

    def test_progress_uses_offset_and_total(self):
        migrator = Mock()
        migrator.migrate_record.side_effect = migrated
        logger = FakeLogger()
        processor = SerialBatchProcessor(migrator, logger, sleep=FakeSleep())
        batch = [ProductRecord(id="6", name="Cup"), ProductRecord(id="7", name="")]

        processor.process_batch(batch, MigrationConfig(), offset=5, total=7)

        progress = [m for m in logger.messages("INFO") if m.startswith("[")]
        assert progress == ["[6/7] Cup", "[7/7] 7"]
