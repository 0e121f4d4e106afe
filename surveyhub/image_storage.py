"""Data-URI image decoding and file-based blob storage."""
import base64
import binascii
import logging
import re
import uuid
from pathlib import Path
from typing import Tuple

from . import config
from .errors import DecodeFailure, InvalidImageType

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = {"jpg", "jpeg", "gif", "png"}
IMAGES_SUBDIR = "images"

_DATA_URI_RE = re.compile(r"^data:image/(\w+);base64,(.*)$", re.DOTALL)
_LINE_BREAKS_RE = re.compile(r"[\r\n\t]+")


def decode_image_data_uri(data_uri: str) -> Tuple[bytes, str]:
    """Returns ``(bytes, extension)`` for a ``data:image/<ext>;base64,...`` URI."""
    match = _DATA_URI_RE.match(data_uri or "")
    if not match:
        raise DecodeFailure("did not match data URI with image data")

    ext = match.group(1).lower()
    if ext not in ALLOWED_IMAGE_TYPES:
        raise InvalidImageType(ext)

    # Zeilenumbrüche (MIME-Umbruch) entfernen; Formular-Encoding macht aus '+' ein Leerzeichen
    payload = _LINE_BREAKS_RE.sub("", match.group(2)).replace(" ", "+")
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        raise DecodeFailure("base64 decode failed")
    return data, ext


class ImageStorage:
    """Stores image bytes and hands back an opaque relative path token."""

    def put(self, data: bytes, ext: str) -> str:
        raise NotImplementedError

    def delete(self, token: str) -> None:
        raise NotImplementedError


class LocalImageStorage(ImageStorage):
    def __init__(self, root: Path):
        self.root = Path(root)

    def put(self, data: bytes, ext: str) -> str:
        directory = self.root / IMAGES_SUBDIR
        directory.mkdir(parents=True, exist_ok=True)
        filename = f"{uuid.uuid4().hex}.{ext}"
        (directory / filename).write_bytes(data)
        token = f"{IMAGES_SUBDIR}/{filename}"
        logger.info("Stored image %s (%d bytes)", token, len(data))
        return token

    def delete(self, token: str) -> None:
        root = self.root.resolve()
        path = (root / token).resolve()
        if root not in path.parents:
            raise ValueError(f"image path outside storage root: {token}")
        path.unlink(missing_ok=True)
        logger.info("Deleted image %s", token)


def store_image_data_uri(storage: ImageStorage, data_uri: str) -> str:
    data, ext = decode_image_data_uri(data_uri)
    return storage.put(data, ext)


def delete_image_quietly(storage: ImageStorage, token: str) -> None:
    """Best-effort delete: failures are logged, never raised."""
    try:
        storage.delete(token)
    except (OSError, ValueError) as e:
        logger.warning("Could not delete image %s: %s", token, e)


def get_image_storage() -> ImageStorage:
    """FastAPI dependency; tests override it with a temporary root."""
    return LocalImageStorage(config.PUBLIC_DIR)
