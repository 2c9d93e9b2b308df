"""Unsigned uploads to the Cloudinary upload API."""

from typing import Any, Optional

import httpx

from ..core.exceptions import GatewayError
from ..core.image_utils import extension_for_mime
from ..core.models import CloudinarySettings, UploadResult


def parse_upload_response(status_code: int, body: Any) -> UploadResult:
    """
    Turn a decoded upload response into an UploadResult.

    Cloudinary can answer HTTP 200 and still carry an ``error`` object, so the
    body is checked before the status code.

    Raises:
        GatewayError: If the body carries an error or lacks ``secure_url``
    """
    if not isinstance(body, dict):
        raise GatewayError(f"HTTP {status_code}: unexpected upload response")

    error = body.get("error")
    if error:
        message = error.get("message") if isinstance(error, dict) else str(error)
        raise GatewayError(message or f"HTTP {status_code}: upload failed")

    if status_code >= 400:
        raise GatewayError(f"HTTP {status_code}: upload failed")

    secure_url = body.get("secure_url")
    if not secure_url:
        raise GatewayError("Upload response has no secure_url")

    return UploadResult(
        url=secure_url,
        public_id=body.get("public_id", ""),
        format=body.get("format") or "",
        width=body.get("width") or 0,
        height=body.get("height") or 0,
        bytes=body.get("bytes") or 0,
    )


class CloudinaryUploadGateway:
    """Posts one multipart upload per image to ``settings.upload_url``."""

    def __init__(
        self,
        settings: CloudinarySettings,
        client: Optional[httpx.Client] = None,
        timeout: float = 30.0,
    ):
        self._upload_url = settings.upload_url
        self._client = client or httpx.Client(timeout=timeout)

    def close(self) -> None:
        self._client.close()

    def upload(
        self,
        data: bytes,
        mime: str,
        folder: str,
        public_id: str,
        upload_preset: str,
    ) -> UploadResult:
        filename = f"{public_id}.{extension_for_mime(mime)}"
        try:
            response = self._client.post(
                self._upload_url,
                files={"file": (filename, data, mime)},
                data={
                    "upload_preset": upload_preset,
                    "folder": folder,
                    "public_id": public_id,
                },
            )
        except httpx.HTTPError as exc:
            raise GatewayError(f"Upload request failed: {exc}") from exc

        try:
            body = response.json()
        except ValueError as exc:
            raise GatewayError(
                f"HTTP {response.status_code}: response is not JSON"
            ) from exc

        return parse_upload_response(response.status_code, body)
