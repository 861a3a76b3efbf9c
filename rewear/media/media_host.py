"""
Media host client - proxies item image uploads to a Cloudinary-compatible API.
Uploads happen on the request path (the item needs the URLs); deletions are
queued to Celery and use the sync helpers below.
"""

import hashlib
import logging
import time
from dataclasses import dataclass

import httpx
from fastapi import UploadFile

from rewear.config import Settings, get_settings
from rewear.core.exceptions import InvalidOperationError, UpstreamError

logger = logging.getLogger(__name__)


@dataclass
class UploadedImage:
    url: str
    public_id: str


def sign_params(params: dict[str, str | int], api_secret: str) -> str:
    """Cloudinary request signature: sha1 of sorted key=value pairs + secret."""
    to_sign = "&".join(f"{k}={params[k]}" for k in sorted(params))
    return hashlib.sha1(f"{to_sign}{api_secret}".encode("utf-8")).hexdigest()


def validate_image(content_type: str | None, size: int, settings: Settings | None = None) -> None:
    """Reject non-image or oversized uploads before they leave the process."""
    settings = settings or get_settings()
    if content_type not in settings.media_allowed_types:
        raise InvalidOperationError(
            "Invalid file type. Only JPEG, PNG, and WebP images are allowed.", error="Invalid image"
        )
    if size > settings.media_max_bytes:
        raise InvalidOperationError(
            f"File too large. Maximum size is {settings.media_max_bytes // (1024 * 1024)}MB.",
            error="Invalid image",
        )


class MediaHost:
    """Thin HTTP client; one instance per process."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()

    def _signed(self, params: dict[str, str | int]) -> dict[str, str | int]:
        params = {**params, "timestamp": int(time.time())}
        return {
            **params,
            "api_key": self.settings.media_api_key,
            "signature": sign_params(params, self.settings.media_api_secret),
        }

    async def upload_images(self, files: list[UploadFile]) -> list[UploadedImage]:
        """Validate and upload every file; all-or-nothing from the caller's view."""
        payloads: list[tuple[UploadFile, bytes]] = []
        for f in files:
            content = await f.read()
            validate_image(f.content_type, len(content), self.settings)
            payloads.append((f, content))

        uploaded: list[UploadedImage] = []
        async with httpx.AsyncClient(timeout=30.0) as client:
            for f, content in payloads:
                try:
                    r = await client.post(
                        self.settings.media_upload_url,
                        data=self._signed({"folder": self.settings.media_folder}),
                        files={"file": (f.filename or "image", content, f.content_type)},
                    )
                    r.raise_for_status()
                    body = r.json()
                except (httpx.HTTPError, ValueError) as e:
                    logger.warning("media upload failed: file=%s error=%s", f.filename, e)
                    raise UpstreamError("Failed to upload images", error="Upload failed") from e
                uploaded.append(UploadedImage(url=body["secure_url"], public_id=body["public_id"]))
        return uploaded

    def destroy_sync(self, public_id: str) -> bool:
        """Delete one image. Called from Celery workers."""
        try:
            with httpx.Client(timeout=30.0) as client:
                r = client.post(self.settings.media_destroy_url, data=self._signed({"public_id": public_id}))
                r.raise_for_status()
            return True
        except httpx.HTTPError as e:
            logger.warning("media destroy failed: public_id=%s error=%s", public_id, e)
            return False


_media_host: MediaHost | None = None


def get_media_host() -> MediaHost:
    """FastAPI dependency; overridden in tests."""
    global _media_host
    if _media_host is None:
        _media_host = MediaHost()
    return _media_host
