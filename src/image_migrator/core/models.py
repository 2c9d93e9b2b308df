"""Shared data models for the image migrator."""

from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

PLACEHOLDER_CLOUD_NAME = "your-cloud-name"
# "tu-cloud-name" is the placeholder of the storefront config that .env files are copied from
PLACEHOLDER_CLOUD_NAMES = frozenset({PLACEHOLDER_CLOUD_NAME, "tu-cloud-name"})
DEFAULT_CDN_MARKER = "cloudinary.com"

MigrationMode = Literal["inline", "remote"]
FetchStrategyName = Literal["bulk", "per-record"]
Stage = Literal["fetch", "download", "decode", "gateway", "write_back"]


class CloudinarySettings(BaseModel):
    """Destination of the uploads: an unsigned Cloudinary upload preset."""

    cloud_name: str = PLACEHOLDER_CLOUD_NAME
    upload_preset: str = "products_preset"
    folder: str = "products"
    public_id_prefix: str = "product"

    @property
    def upload_url(self) -> str:
        return f"https://api.cloudinary.com/v1_1/{self.cloud_name}/image/upload"

    @property
    def is_configured(self) -> bool:
        return bool(self.cloud_name) and self.cloud_name not in PLACEHOLDER_CLOUD_NAMES


class StoreSettings(BaseModel):
    """Connection details for the PostgREST record store."""

    url: str = ""
    key: str = ""
    table: str = "products"
    timeout: float = 30.0
    s3_endpoint_url: Optional[str] = None

    @property
    def is_configured(self) -> bool:
        return bool(self.url) and bool(self.key)


class MigrationConfig(BaseModel):
    """Tunables for a single migration run."""

    mode: MigrationMode = "inline"
    fetch_strategy: FetchStrategyName = "bulk"
    batch_size: int = Field(default=5, gt=0)
    batch_delay: float = Field(default=3.0, ge=0)
    record_delay: float = Field(default=0.0, ge=0)
    limit: Optional[int] = Field(default=None, gt=0)
    cdn_marker: str = DEFAULT_CDN_MARKER

    @classmethod
    def for_mode(
        cls, mode: MigrationMode = "inline", fetch_strategy: FetchStrategyName = "bulk", **overrides
    ) -> "MigrationConfig":
        """Build a config with the defaults that suit ``mode`` and ``fetch_strategy``.

        Inline payloads are heavy, so inline runs use smaller batches and a longer
        pause. Fetching record by record caps the listing at 100 and waits a little
        after every migrated record.
        """
        defaults = {"batch_size": 5, "batch_delay": 3.0} if mode == "inline" else {
            "batch_size": 10,
            "batch_delay": 2.0,
        }
        if fetch_strategy == "per-record":
            defaults.update(limit=100, record_delay=0.5)
        defaults.update({k: v for k, v in overrides.items() if v is not None})
        return cls(mode=mode, fetch_strategy=fetch_strategy, **defaults)


class Settings(BaseModel):
    """Everything a run needs, loaded once at process start."""

    cloudinary: CloudinarySettings = Field(default_factory=CloudinarySettings)
    store: StoreSettings = Field(default_factory=StoreSettings)
    migration: MigrationConfig = Field(default_factory=MigrationConfig)


class ProductRecord(BaseModel):
    """A product row as read from the store."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str
    name: str = ""
    image: Optional[str] = None


class Action(str, Enum):
    SKIP_ABSENT = "skip_absent"
    SKIP_ALREADY_MIGRATED = "skip_already_migrated"
    SKIP_NOT_INLINE = "skip_not_inline"
    MIGRATE = "migrate"
    MIGRATE_REMOTE = "migrate_remote"


class Decision(BaseModel):
    """Outcome of classifying an image field."""

    action: Action
    payload: Optional[str] = None

    @property
    def is_skip(self) -> bool:
        return self.action in (
            Action.SKIP_ABSENT,
            Action.SKIP_ALREADY_MIGRATED,
            Action.SKIP_NOT_INLINE,
        )


class DecodedImage(BaseModel):
    """Binary image ready to be uploaded."""

    data: bytes
    mime: str = "image/jpeg"

    @property
    def size(self) -> int:
        return len(self.data)


class UploadResult(BaseModel):
    """Metadata returned by the CDN for a stored asset."""

    url: str
    public_id: str
    format: str = ""
    width: int = 0
    height: int = 0
    bytes: int = 0


class ErrorDetail(BaseModel):
    """A failed record, kept so operators can investigate it after the run."""

    record_id: str
    name: str = ""
    message: str
    stage: Stage


class RecordResult(BaseModel):
    """Result of migrating a single record."""

    record_id: str
    name: str = ""
    action: Optional[Action] = None
    success: bool = False
    url: str = ""
    payload_size: int = 0
    error: Optional[ErrorDetail] = None

    @property
    def skipped(self) -> bool:
        return self.action is not None and self.error is None and not self.success


class BatchOutcome(BaseModel):
    """Tally of one batch."""

    migrated: int = 0
    skipped: int = 0
    errors: int = 0
    error_details: List[ErrorDetail] = Field(default_factory=list)
    migrated_payload_bytes: int = 0

    def record(self, result: RecordResult) -> None:
        if result.error is not None:
            self.errors += 1
            self.error_details.append(result.error)
        elif result.success:
            self.migrated += 1
            self.migrated_payload_bytes += result.payload_size
        else:
            self.skipped += 1

    def merge(self, other: "BatchOutcome") -> None:
        self.migrated += other.migrated
        self.skipped += other.skipped
        self.errors += other.errors
        self.error_details.extend(other.error_details)
        self.migrated_payload_bytes += other.migrated_payload_bytes


class RunResult(BatchOutcome):
    """Tally of a whole run."""

    total: int = 0
    batches: int = 0
    limit_reached: bool = False
    processing_time: float = 0.0


# Sizing assumptions of the storage census
AVG_RECORD_BYTES = 2000
AVG_CDN_URL_BYTES = 150
FREE_TIER_BYTES = 500 * 1024 * 1024


class StorageReport(BaseModel):
    """What the image column holds, counted without migrating anything."""

    total_records: int = 0
    sampled: int = 0
    sample_limited: bool = False
    on_cdn: int = 0
    inline: int = 0
    external: int = 0
    empty: int = 0
    inline_bytes: int = 0

    @property
    def average_inline_size(self) -> float:
        return self.inline_bytes / self.inline if self.inline else 0.0

    @property
    def current_bytes(self) -> int:
        return (
            self.total_records * AVG_RECORD_BYTES
            + self.on_cdn * AVG_CDN_URL_BYTES
            + self.inline_bytes
        )

    @property
    def optimized_bytes(self) -> int:
        return self.total_records * AVG_RECORD_BYTES + (self.on_cdn + self.inline) * AVG_CDN_URL_BYTES

    @property
    def potential_savings(self) -> int:
        return self.current_bytes - self.optimized_bytes

    @property
    def usage_percentage(self) -> float:
        return self.current_bytes / FREE_TIER_BYTES * 100
