"""Media host adapter: uploads spooled files and removes them afterwards."""

from __future__ import annotations

import logging
import uuid
from pathlib import Path
from typing import Any, Literal, Protocol

import cloudinary.uploader
from fastapi import UploadFile

from storefront.api.errors import ApiError, ApiErrorCode
from storefront.core.config import MediaConfig
from storefront.core.documents import MediaAsset

LOGGER = logging.getLogger(__name__)

MediaKind = Literal["image", "video", "auto"]

_CHUNK_SIZE = 1024 * 1024


class MediaUploaderProtocol(Protocol):
    """Narrow media host interface used by resource services."""

    def upload(
        self, local_path: str | Path | None, kind: MediaKind = "auto"
    ) -> MediaAsset | None:
        """Upload file and return its asset reference, or ``None`` on failure."""

    def delete(self, public_id: str, kind: MediaKind = "image") -> bool:
        """Remove an uploaded asset, best-effort."""


def remove_local_file(path: Path) -> None:
    try:
        path.unlink()
        LOGGER.debug("Local upload removed: %s", path)
    except FileNotFoundError:
        pass
    except OSError:
        LOGGER.exception("Failed to remove local upload: %s", path)


class CloudinaryUploader:
    """Cloudinary-backed implementation of the media host interface."""

    def __init__(self, config: MediaConfig) -> None:
        self._credentials: dict[str, Any] = {
            "cloud_name": config.cloud_name,
            "api_key": config.api_key,
            "api_secret": config.api_secret,
            "secure": True,
        }

    def upload(
        self, local_path: str | Path | None, kind: MediaKind = "auto"
    ) -> MediaAsset | None:
        if not local_path:
            LOGGER.warning("Media upload skipped: no file path provided")
            return None
        path = Path(local_path)
        if not path.is_file():
            LOGGER.warning("Media upload skipped: file does not exist: %s", path)
            return None

        try:
            response = cloudinary.uploader.upload(
                str(path), resource_type=kind, **self._credentials
            )
            url = str(response.get("secure_url") or response.get("url") or "")
            if not url:
                LOGGER.error("Media host returned no url for %s", path.name)
                return None
            duration = response.get("duration")
            return MediaAsset(
                url=url,
                public_id=str(response.get("public_id") or ""),
                duration=float(duration) if duration is not None else None,
            )
        except Exception:
            LOGGER.exception("Media upload failed for %s", path.name)
            return None
        finally:
            remove_local_file(path)

    def delete(self, public_id: str, kind: MediaKind = "image") -> bool:
        if not public_id:
            return False
        resource_type = "image" if kind == "auto" else kind
        try:
            response = cloudinary.uploader.destroy(
                public_id, resource_type=resource_type, **self._credentials
            )
        except Exception:
            LOGGER.exception("Media delete failed for %s", public_id)
            return False
        return str(response.get("result") or "") == "ok"


def spool_upload(upload: UploadFile, tmp_dir: Path, max_bytes: int) -> Path:
    """Copy an incoming upload into the temp dir, enforcing the size limit."""
    tmp_dir.mkdir(parents=True, exist_ok=True)
    suffix = Path(upload.filename or "").suffix.lower()
    target = tmp_dir / f"{uuid.uuid4().hex}{suffix}"
    written = 0
    try:
        with target.open("wb") as handle:
            while True:
                chunk = upload.file.read(_CHUNK_SIZE)
                if not chunk:
                    break
                written += len(chunk)
                if written > max_bytes:
                    raise ApiError(
                        status_code=413,
                        error_code=ApiErrorCode.REQUEST_TOO_LARGE,
                        message=(
                            "Uploaded file exceeds configured limit "
                            f"({max_bytes} bytes)."
                        ),
                    )
                handle.write(chunk)
    except BaseException:
        remove_local_file(target)
        raise
    return target


def spool_optional(upload: UploadFile | None, config: MediaConfig) -> Path | None:
    """Spool an optional form file, returning ``None`` when none was sent."""
    if upload is None or not upload.filename:
        return None
    return spool_upload(upload, Path(config.upload_tmp_dir), config.upload_max_bytes)
