"""Staff photo payloads: file uploads, webcam frames, validation and staging.

Both a file picked in the browser and a frame captured from the webcam reach
the service layer as an ``UploadableImage``; the service never needs to know
which one it got.
"""

import logging
import os
import tempfile
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO

from app.errors import ValidationError

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/jpg", "image/png"}
KNOWN_EXTENSIONS = {"jpg", "jpeg", "png"}
DEFAULT_EXTENSION = "jpg"

JPEG_MAGIC = b"\xff\xd8\xff"
PNG_MAGIC = b"\x89PNG\r\n\x1a\n"

_COPY_CHUNK = 64 * 1024


class UploadableImage(ABC):
    """An image payload with a filename and a declared content type."""

    filename: str
    content_type: str

    @abstractmethod
    def read(self) -> bytes:
        """Return the full image content."""

    @property
    def extension(self) -> str:
        """File extension used for the storage key."""
        suffix = Path(self.filename or "").suffix.lower().lstrip(".")
        if suffix in KNOWN_EXTENSIONS:
            return suffix
        if (self.content_type or "").lower() == "image/png":
            return "png"
        return DEFAULT_EXTENSION


class FileUpload(UploadableImage):
    """A user-selected file, staged on local disk."""

    def __init__(self, path: str | Path, filename: str, content_type: str):
        self.path = Path(path)
        self.filename = filename
        self.content_type = content_type

    def read(self) -> bytes:
        return self.path.read_bytes()


class CapturedFrame(UploadableImage):
    """A webcam frame captured in the browser, held in memory."""

    DEFAULT_FILENAME = "webcam_capture.jpg"

    def __init__(
        self,
        data: bytes,
        content_type: str = "image/jpeg",
        filename: str = DEFAULT_FILENAME,
    ):
        self.data = data
        self.content_type = content_type
        self.filename = filename

    def read(self) -> bytes:
        return self.data

    @classmethod
    def from_stream(
        cls,
        stream: BinaryIO,
        content_type: str | None,
        filename: str | None = None,
        max_bytes: int | None = None,
    ) -> "CapturedFrame":
        """Read a ``canvas.toBlob`` frame sent as a multipart file part.

        At most ``max_bytes + 1`` bytes are read, so an oversized frame is
        still caught by ``validate_image``.
        """
        data = stream.read() if max_bytes is None else stream.read(max_bytes + 1)
        content_type = content_type or "image/jpeg"
        if Path(filename or "").suffix.lower().lstrip(".") not in KNOWN_EXTENSIONS:
            # Browsers name blob parts "blob"
            filename = cls.DEFAULT_FILENAME
            if content_type.lower() == "image/png":
                filename = "webcam_capture.png"
        return cls(data=data, content_type=content_type, filename=filename)


def sniff_image_type(data: bytes) -> str | None:
    """Content type implied by the leading bytes, if JPEG or PNG."""
    if data.startswith(JPEG_MAGIC):
        return "image/jpeg"
    if data.startswith(PNG_MAGIC):
        return "image/png"
    return None


def check_content_type(content_type: str | None) -> None:
    """Reject any declared type other than JPEG or PNG."""
    if (content_type or "").lower() not in ALLOWED_CONTENT_TYPES:
        raise ValidationError("Invalid file type. Only JPG and PNG allowed.")


def validate_image(image: UploadableImage | None, max_bytes: int) -> tuple[bytes, str]:
    """Check an image before it goes anywhere near storage.

    Args:
        image: The payload to check.
        max_bytes: Size limit.

    Returns:
        Tuple of (image bytes, content type detected from the bytes).

    Raises:
        ValidationError: If the image is missing, empty, too large, or not
            a JPEG/PNG both by declared type and by content.
    """
    if image is None:
        raise ValidationError("Picture required")

    check_content_type(image.content_type)

    data = image.read()
    if not data:
        raise ValidationError("Picture is empty")
    if len(data) > max_bytes:
        raise ValidationError(f"File too large. Maximum size: {max_bytes // (1024 * 1024)}MB")

    detected = sniff_image_type(data)
    declared = image.content_type.lower().replace("image/jpg", "image/jpeg")
    if detected is None or detected != declared:
        raise ValidationError("File content is not a JPG or PNG image")
    return data, detected


@contextmanager
def stage_upload(
    stream: BinaryIO,
    filename: str,
    content_type: str,
    staging_dir: str | Path,
    max_bytes: int,
) -> Iterator[FileUpload]:
    """Copy an uploaded stream into a staging temp file.

    The temp file is removed when the block exits, whether it returns or
    raises.

    Raises:
        ValidationError: If the stream is larger than ``max_bytes``.
    """
    staging_path = Path(staging_dir)
    staging_path.mkdir(parents=True, exist_ok=True)

    suffix = Path(filename or "").suffix.lower()
    if suffix.lstrip(".") not in KNOWN_EXTENSIONS:
        suffix = ""
    fd, temp_name = tempfile.mkstemp(prefix="staff-", suffix=suffix, dir=staging_path)
    try:
        copied = 0
        with os.fdopen(fd, "wb") as out:
            while True:
                chunk = stream.read(_COPY_CHUNK)
                if not chunk:
                    break
                copied += len(chunk)
                if copied > max_bytes:
                    raise ValidationError(
                        f"File too large. Maximum size: {max_bytes // (1024 * 1024)}MB"
                    )
                out.write(chunk)
        logger.debug("Staged upload %s as %s (%d bytes)", filename, temp_name, copied)
        yield FileUpload(temp_name, filename, content_type)
    finally:
        Path(temp_name).unlink(missing_ok=True)
