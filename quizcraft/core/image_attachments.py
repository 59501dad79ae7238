"""Attach images to questions via the blob store.

Images are downscaled and re-encoded as JPEG before upload; when Pillow cannot
decode or encode the file, the original bytes are used and a warning is
returned. Uploads go to the image bucket under a random file name. When the
blob store cannot take the file, the image is embedded in the question as a
base64 data URL instead, again with a warning.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass
import io
import logging
import secrets
import time

from PIL import Image

from quizcraft.constants.quiz_constants import (
    ALLOWED_IMAGE_TYPES,
    COMPRESSED_MAX_BYTES,
    COMPRESSED_MAX_DIMENSION,
    COMPRESSED_MIN_QUALITY,
    COMPRESSED_QUALITY,
    IMAGE_BUCKET,
    MAX_IMAGE_BYTES,
)
from quizcraft.core.blob_store import BlobStore, BlobStoreError
from quizcraft.core.models import QuestionImage

logger = logging.getLogger(__name__)

COMPRESSION_WARNING = "Image compression failed, using the original file."
UPLOAD_WARNING = "We couldn't upload to the cloud, storing image locally instead."

_SIGNATURES: dict[str, tuple[bytes, ...]] = {
    "image/jpeg": (b"\xff\xd8\xff",),
    "image/png": (b"\x89PNG\r\n\x1a\n",),
    "image/gif": (b"GIF87a", b"GIF89a"),
}


class ImageValidationError(ValueError):
    """Raised for files that are not a supported, readable image."""


class ImageCompressionError(Exception):
    """Raised when Pillow cannot decode or re-encode an image."""


@dataclass(slots=True)
class AttachResult:
    image: QuestionImage
    warning: str | None = None

    @property
    def uploaded(self) -> bool:
        return self.image.path is not None


def sniff_image_type(data: bytes) -> str | None:
    """Identify the image format from its leading bytes."""
    if len(data) >= 12 and data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    for content_type, signatures in _SIGNATURES.items():
        if any(data.startswith(signature) for signature in signatures):
            return content_type
    return None


def _detect_image_type(name: str, content_type: str, data: bytes) -> str:
    if (content_type or "").lower() not in ALLOWED_IMAGE_TYPES:
        raise ImageValidationError(
            "Invalid file type. Only JPEG, PNG, GIF, and WebP images are allowed."
        )
    detected = sniff_image_type(data)
    if detected is None:
        raise ImageValidationError(f"{name} is not a valid image.")
    return detected


def _check_size(data: bytes) -> None:
    if len(data) > MAX_IMAGE_BYTES:
        raise ImageValidationError("File size exceeds the maximum allowed (5MB).")


def validate_image(name: str, content_type: str, data: bytes) -> str:
    """Check type, size and contents; returns the sniffed content type."""
    detected = _detect_image_type(name, content_type, data)
    _check_size(data)
    return detected


def compress_image(data: bytes) -> bytes:
    """Fit the image within the maximum dimension and re-encode it as JPEG.

    Quality steps down from ``COMPRESSED_QUALITY`` until the result fits
    ``COMPRESSED_MAX_BYTES`` or the quality floor is reached.
    """
    try:
        with Image.open(io.BytesIO(data)) as image:
            image.load()
            image.thumbnail((COMPRESSED_MAX_DIMENSION, COMPRESSED_MAX_DIMENSION))
            rgb = image.convert("RGB")
        quality = COMPRESSED_QUALITY
        while True:
            buffer = io.BytesIO()
            rgb.save(buffer, format="JPEG", quality=quality, optimize=True)
            if buffer.tell() <= COMPRESSED_MAX_BYTES or quality <= COMPRESSED_MIN_QUALITY:
                return buffer.getvalue()
            quality -= 10
    except (OSError, ValueError, Image.DecompressionBombError) as exc:
        raise ImageCompressionError(str(exc)) from exc


def _extension(name: str) -> str:
    if "." in name:
        extension = name.rsplit(".", 1)[1].lower()
        if extension:
            return extension
    return "jpg"


def to_data_url(data: bytes, content_type: str) -> str:
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{content_type};base64,{encoded}"


class ImageAttachmentService:
    def __init__(self, blob_store: BlobStore, bucket: str = IMAGE_BUCKET) -> None:
        self._blob_store = blob_store
        self._bucket = bucket

    async def attach(self, name: str, content_type: str, data: bytes) -> AttachResult:
        detected_type = _detect_image_type(name, content_type, data)
        warnings: list[str] = []
        try:
            payload = compress_image(data)
            payload_type, extension = "image/jpeg", "jpg"
        except ImageCompressionError as exc:
            logger.warning("Image compression failed, using the original %s: %s", name, exc)
            payload, payload_type, extension = data, detected_type, _extension(name)
            warnings.append(COMPRESSION_WARNING)
        _check_size(payload)

        path = f"{secrets.token_hex(6)}_{int(time.time() * 1000)}.{extension}"
        try:
            public_url = await self._blob_store.upload(self._bucket, path, payload, payload_type)
        except BlobStoreError as exc:
            logger.warning("Image upload failed, storing %s inline: %s", name, exc)
            warnings.append(UPLOAD_WARNING)
            return AttachResult(
                image=QuestionImage(data=to_data_url(payload, payload_type), name=name),
                warning=" ".join(warnings),
            )
        logger.info("Image uploaded successfully: %s", public_url)
        return AttachResult(
            image=QuestionImage(data=public_url, name=name, path=path),
            warning=" ".join(warnings) or None,
        )

    async def detach(self, image: QuestionImage | None) -> None:
        """Remove an uploaded image's blob; inline images need no cleanup."""
        if image is None or not image.path:
            return
        await self._blob_store.remove(self._bucket, [image.path])
        logger.info("Image deleted successfully: %s", image.path)

    async def aclose(self) -> None:
        await self._blob_store.aclose()
