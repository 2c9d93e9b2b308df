"""Product record store backed by the Supabase PostgREST API."""

from typing import Any, Dict, List, Optional, Sequence, Type

import httpx

from ..core.exceptions import (
    ListingError,
    RecordFetchError,
    RecordStoreError,
    WriteBackError,
    with_error_handling,
)
from ..core.models import ProductRecord, StoreSettings

ID_COLUMN = "id"
IMAGE_COLUMN = "image"


def _error_message(response: httpx.Response) -> str:
    """PostgREST puts a human readable ``message`` in error bodies."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return f"HTTP {response.status_code}: {body['message']}"
    return f"HTTP {response.status_code}: {response.reason_phrase}"


def _check(response: httpx.Response, error_type: Type[RecordStoreError]) -> None:
    if response.is_error:
        raise error_type(_error_message(response))


class SupabaseRecordSource:
    """Reads and updates product rows through ``/rest/v1/<table>``."""

    def __init__(self, settings: StoreSettings, client: Optional[httpx.Client] = None):
        self._settings = settings
        self._client = client or httpx.Client(timeout=settings.timeout)
        self._endpoint = f"{settings.url.rstrip('/')}/rest/v1/{settings.table}"
        self._headers = {
            "apikey": settings.key,
            "Authorization": f"Bearer {settings.key}",
        }

    def close(self) -> None:
        self._client.close()

    @with_error_handling(ListingError)
    def list_candidates(
        self,
        columns: Sequence[str],
        limit: Optional[int] = None,
        with_image_only: bool = True,
    ) -> List[ProductRecord]:
        """List rows oldest first, by default only those with a non-null image."""
        params: Dict[str, Any] = {
            "select": ",".join(columns),
            "order": f"{ID_COLUMN}.asc",
        }
        if with_image_only:
            params[IMAGE_COLUMN] = "not.is.null"
        if limit:
            params["limit"] = limit

        response = self._client.get(self._endpoint, params=params, headers=self._headers)
        _check(response, ListingError)

        rows = response.json()
        if not isinstance(rows, list):
            raise ListingError(f"Unexpected listing response: {type(rows).__name__}")
        return [ProductRecord.model_validate(row) for row in rows]

    @with_error_handling(ListingError)
    def count_records(self) -> int:
        """Row count from the ``Content-Range`` header of a ``count=exact`` HEAD request."""
        response = self._client.head(
            self._endpoint,
            params={"select": ID_COLUMN},
            headers={**self._headers, "Prefer": "count=exact"},
        )
        _check(response, ListingError)

        # "0-24/3573", or "*/0" for an empty table
        content_range = response.headers.get("content-range", "")
        _, _, total = content_range.rpartition("/")
        if not total.isdigit():
            raise ListingError(f"Unexpected Content-Range: {content_range!r}")
        return int(total)

    @with_error_handling(RecordFetchError)
    def fetch_record(self, record_id: str) -> ProductRecord:
        response = self._client.get(
            self._endpoint,
            params={"select": "id,name,image", ID_COLUMN: f"eq.{record_id}"},
            headers={**self._headers, "Accept": "application/vnd.pgrst.object+json"},
        )
        _check(response, RecordFetchError)
        return ProductRecord.model_validate(response.json())

    @with_error_handling(WriteBackError)
    def update_image(self, record_id: str, url: str) -> None:
        response = self._client.patch(
            self._endpoint,
            params={ID_COLUMN: f"eq.{record_id}", "select": ID_COLUMN},
            json={IMAGE_COLUMN: url},
            headers={**self._headers, "Prefer": "return=representation"},
        )
        _check(response, WriteBackError)

        # Row level security turns a forbidden update into an empty 200
        if not response.json():
            raise WriteBackError(f"No row updated for id {record_id}")
