"""Download images that are referenced by URL instead of stored inline."""

from typing import Any, Callable, Optional, Tuple

import httpx

from ..core.exceptions import DownloadError, with_error_handling
from ..core.image_utils import DEFAULT_MIME
from ..core.models import DecodedImage


def split_s3_url(url: str) -> Tuple[str, str]:
    """``s3://bucket/path/key.jpg`` -> ``("bucket", "path/key.jpg")``."""
    bucket, _, key = url[len("s3://"):].partition("/")
    if not bucket or not key:
        raise DownloadError(f"Invalid S3 reference: {url}")
    return bucket, key


def _mime_from_header(content_type: Optional[str]) -> str:
    mime = (content_type or "").split(";")[0].strip()
    return mime or DEFAULT_MIME


class RemoteImageFetcher:
    """Fetches ``http(s)://`` URLs with httpx and ``s3://`` references with boto3."""

    def __init__(
        self,
        http_client: Optional[httpx.Client] = None,
        s3_client_factory: Optional[Callable[[], Any]] = None,
        timeout: float = 30.0,
    ):
        self._http_client = http_client or httpx.Client(timeout=timeout, follow_redirects=True)
        self._s3_client_factory = s3_client_factory
        self._s3_client: Any = None

    def close(self) -> None:
        self._http_client.close()

    def fetch(self, url: str) -> DecodedImage:
        if url.startswith("s3://"):
            return self._fetch_s3(url)
        if url.startswith(("http://", "https://")):
            return self._fetch_http(url)
        raise DownloadError(f"Unsupported image reference: {url[:50]}")

    @with_error_handling(DownloadError)
    def _fetch_http(self, url: str) -> DecodedImage:
        response = self._http_client.get(url)
        if response.is_error:
            raise DownloadError(f"HTTP {response.status_code}: {response.reason_phrase}")
        return DecodedImage(
            data=response.content,
            mime=_mime_from_header(response.headers.get("content-type")),
        )

    @with_error_handling(DownloadError)
    def _fetch_s3(self, url: str) -> DecodedImage:
        bucket, key = split_s3_url(url)
        if self._s3_client is None:
            if self._s3_client_factory is None:
                raise DownloadError("No S3 client configured for s3:// references")
            self._s3_client = self._s3_client_factory()

        response = self._s3_client.get_object(Bucket=bucket, Key=key)
        return DecodedImage(
            data=response["Body"].read(),
            mime=_mime_from_header(response.get("ContentType")),
        )
