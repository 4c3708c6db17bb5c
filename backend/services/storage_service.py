"""
Storage Service - Blob storage for photos, illustrations and print PDFs.

Objects live under MEDIA_STORAGE_PATH and are served by the /media static mount.
Keys are relative POSIX paths: {user_id}/{book_id}/{kind}/{uuid}{ext}
"""
import logging
import mimetypes
import os
import uuid
from typing import Optional

from config import get_settings

logger = logging.getLogger(__name__)


def _media_root() -> str:
    return get_settings().media_storage_path


def _resolve(key: str) -> str:
    root = os.path.abspath(_media_root())
    path = os.path.abspath(os.path.join(root, key))
    if os.path.commonpath([root, path]) != root:
        raise ValueError(f"Invalid storage key: {key}")
    return path


def build_key(user_id, book_id, kind: str, extension: str) -> str:
    if extension and not extension.startswith("."):
        extension = f".{extension}"
    return f"{user_id}/{book_id}/{kind}/{uuid.uuid4()}{extension}"


def extension_for(mime_type: Optional[str], default: str = ".bin") -> str:
    if not mime_type:
        return default
    if mime_type == "image/jpeg":
        return ".jpg"
    return mimetypes.guess_extension(mime_type) or default


def save_bytes(key: str, data: bytes) -> str:
    """Write `data` under `key` and return the key."""
    path = _resolve(key)
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "wb") as f:
        f.write(data)
    logger.info(f"Stored {len(data)} bytes at {key}")
    return key


def read_bytes(key: str) -> bytes:
    path = _resolve(key)
    if not os.path.isfile(path):
        raise FileNotFoundError(f"Storage object not found: {key}")
    with open(path, "rb") as f:
        return f.read()


def exists(key: Optional[str]) -> bool:
    return bool(key) and os.path.isfile(_resolve(key))


def delete(key: Optional[str]) -> None:
    if not key:
        return
    path = _resolve(key)
    if os.path.isfile(path):
        os.remove(path)
        logger.info(f"Deleted storage object {key}")


def public_url(key: Optional[str]) -> Optional[str]:
    if not key:
        return None
    base = get_settings().public_base_url.rstrip("/")
    return f"{base}/media/{key}"
