"""Fake implementations for testing purposes."""

import base64
import io
import time
from typing import Any, Dict, List, Optional, Sequence, Set

from PIL import Image

from ..core.exceptions import DownloadError, GatewayError, ListingError, RecordFetchError
from ..core.models import DecodedImage, ProductRecord, UploadResult
from ..core.image_utils import describe_image, extension_for_mime


class FakeRecordSource:
    """In-memory product table with the record store interface."""

    def __init__(self, records: Optional[Sequence[ProductRecord]] = None):
        self.records: Dict[str, ProductRecord] = {}
        for record in records or []:
            self.add(record.id, record.name, record.image)

        self.operation_count = 0
        self.list_calls: List[Dict[str, Any]] = []
        self.updates: List[Dict[str, str]] = []
        self.fail_listing = False
        self.failing_fetch_ids: Set[str] = set()
        self.failing_update_ids: Set[str] = set()
        self.failure_message = "Simulated store failure"

    def add(self, record_id: str, name: str = "", image: Optional[str] = None) -> ProductRecord:
        record = ProductRecord(id=record_id, name=name or f"Product {record_id}", image=image)
        self.records[record.id] = record
        return record

    def image_of(self, record_id: str) -> Optional[str]:
        return self.records[record_id].image

    def list_candidates(
        self,
        columns: Sequence[str],
        limit: Optional[int] = None,
        with_image_only: bool = True,
    ) -> List[ProductRecord]:
        self.operation_count += 1
        self.list_calls.append({"columns": tuple(columns), "limit": limit})

        if self.fail_listing:
            raise ListingError(self.failure_message)

        rows = list(self.records.values())
        if with_image_only:
            rows = [r for r in rows if r.image is not None]
        if limit:
            rows = rows[:limit]

        include_image = "image" in columns
        return [
            ProductRecord(id=r.id, name=r.name, image=r.image if include_image else None)
            for r in rows
        ]

    def count_records(self) -> int:
        self.operation_count += 1
        if self.fail_listing:
            raise ListingError(self.failure_message)
        return len(self.records)

    def fetch_record(self, record_id: str) -> ProductRecord:
        self.operation_count += 1
        if record_id in self.failing_fetch_ids:
            raise RecordFetchError(self.failure_message)
        record = self.records.get(record_id)
        if record is None:
            raise RecordFetchError(f"Record {record_id} not found")
        return record.model_copy()

    def update_image(self, record_id: str, url: str) -> None:
        self.operation_count += 1
        if record_id in self.failing_update_ids:
            raise Exception(self.failure_message)
        self.records[record_id].image = url
        self.updates.append({"id": record_id, "url": url})


class FakeUploadGateway:
    """Upload gateway that stores assets in memory and answers like Cloudinary."""

    def __init__(self, cloud_name: str = "demo"):
        self.cloud_name = cloud_name
        self.assets: Dict[str, bytes] = {}
        self.calls: List[Dict[str, Any]] = []
        self.failing_public_ids: Set[str] = set()
        self.failure_message = "Upload preset not found"

    def upload(
        self,
        data: bytes,
        mime: str,
        folder: str,
        public_id: str,
        upload_preset: str,
    ) -> UploadResult:
        self.calls.append(
            {
                "data": data,
                "mime": mime,
                "folder": folder,
                "public_id": public_id,
                "upload_preset": upload_preset,
            }
        )
        if public_id in self.failing_public_ids:
            raise GatewayError(self.failure_message)

        full_id = f"{folder}/{public_id}" if folder else public_id
        # Same public id overwrites the previous asset
        self.assets[full_id] = data

        ext = extension_for_mime(mime)
        metadata = describe_image(data)
        return UploadResult(
            url=f"https://res.cloudinary.com/{self.cloud_name}/image/upload/v1/{full_id}.{ext}",
            public_id=full_id,
            format=ext,
            width=metadata.get("width", 0),
            height=metadata.get("height", 0),
            bytes=len(data),
        )


class FakeImageFetcher:
    """Serves remote images from a dict of URL -> bytes."""

    def __init__(self, images: Optional[Dict[str, bytes]] = None, mime: str = "image/jpeg"):
        self.images = dict(images or {})
        self.mime = mime
        self.fetched: List[str] = []

    def fetch(self, url: str) -> DecodedImage:
        self.fetched.append(url)
        if url not in self.images:
            raise DownloadError(f"HTTP 404: Not Found ({url})")
        return DecodedImage(data=self.images[url], mime=self.mime)


class FakeLogger:
    """Fake logger for testing."""

    def __init__(self, name: str = "test_logger"):
        self.name = name
        self.logs: List[Dict[str, Any]] = []

    def _log(self, level: str, message: str, **kwargs: Any) -> None:
        self.logs.append(
            {"level": level, "message": message, "timestamp": time.time(), **kwargs}
        )

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log("DEBUG", message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log("INFO", message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log("WARNING", message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log("ERROR", message, **kwargs)

    def get_logs(self, level: Optional[str] = None) -> List[Dict[str, Any]]:
        """Get logged messages, optionally filtered by level."""
        if level:
            return [log for log in self.logs if log["level"] == level]
        return self.logs.copy()

    def messages(self, level: Optional[str] = None) -> List[str]:
        return [log["message"] for log in self.get_logs(level)]

    def clear_logs(self) -> None:
        self.logs.clear()


class FakeSleep:
    """Records requested pauses instead of sleeping."""

    def __init__(self):
        self.calls: List[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


def create_test_image(
    width: int = 64, height: int = 48, image_format: str = "PNG", color: str = "red"
) -> bytes:
    """Create a small test image in memory."""
    image = Image.new("RGB", (width, height), color=color)
    for x in range(0, width, 8):
        image.putpixel((x, x % height), (0, 0, 255))

    buffer = io.BytesIO()
    image.save(buffer, format=image_format)
    return buffer.getvalue()


def to_data_uri(data: bytes, mime: str = "image/png") -> str:
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


def setup_test_store() -> FakeRecordSource:
    """
    Set up a product table covering every classification branch.

    ids 1-2 need migration (data URI and bare base64), 3 is already on the CDN,
    4 is an external URL, 5 has an empty image and 6 has no image at all.
    """
    store = FakeRecordSource()
    store.add("1", "Red mug", to_data_uri(create_test_image(), "image/png"))
    store.add(
        "2",
        "Blue plate",
        base64.b64encode(create_test_image(400, 300, "JPEG", "blue")).decode("ascii"),
    )
    store.add("3", "Green bowl", "https://res.cloudinary.com/demo/image/upload/v1/products/product-3.jpg")
    store.add("4", "Yellow cup", "https://example.com/images/cup.jpg")
    store.add("5", "Empty", "")
    store.add("6", "No image", None)
    return store
