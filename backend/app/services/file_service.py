"""
NoteMap Backend: Temporary Upload Storage
==========================================

What:  Validates an uploaded image and holds it on disk only for as long as
       the transcription takes.
How:   Validates extension, size and the sniffed MIME type, writes the bytes to
       `<upload_dir>/<uuid>.<ext>` with aiofiles, and removes the file when
       the caller is done.
Who:   EntryService, which always calls cleanup_file() in a `finally` block.

Validation order (cheapest first):
    1. Extension   png, jpg, jpeg, webp
    2. Empty file  zero bytes is rejected
    3. Size        Content-Length header, then the actual byte count
    4. MIME type   detected from the bytes with libmagic (python-magic);
                   must be one of the allowed image types

UUID filenames keep user input out of the path, so concurrent uploads
never collide and a crafted filename cannot escape upload_dir.
"""

import logging
import uuid
from pathlib import Path
from typing import Optional, Tuple

import aiofiles
import aiofiles.os
import magic

from app.config import settings
from app.exceptions import FileStorageError, ValidationError

logger = logging.getLogger(__name__)

# Extension → MIME type sent to the vision provider
ALLOWED_EXTENSIONS = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".webp": "image/webp",
}
ALLOWED_MIME_TYPES = frozenset(ALLOWED_EXTENSIONS.values())

# libmagic only needs the header
SNIFF_BYTES = 2048


class FileService:
    """
    Temp-file lifecycle for uploads.

    Args:
        upload_dir: Override the configured directory (used in tests).
    """

    def __init__(self, upload_dir: Optional[str] = None):
        self.upload_dir = Path(upload_dir or settings.upload_dir).resolve()
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        logger.info("FileService initialized with upload_dir=%s", self.upload_dir)

    def validate_extension(self, filename: str) -> str:
        """Returns the normalized extension (lowercase, with dot)."""
        ext = Path(filename or "").suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message=(
                    f"File type '{ext or 'none'}' is not supported. "
                    f"Allowed types: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
                ),
                field="image",
                context={"extension": ext, "allowed": sorted(ALLOWED_EXTENSIONS)},
            )
        return ext

    def validate_size(self, content_length: Optional[int], actual_size: int) -> None:
        if actual_size == 0:
            raise ValidationError(message="Uploaded image is empty.", field="image")

        max_mb = settings.max_file_size / (1024 * 1024)
        if content_length and content_length > settings.max_file_size:
            raise ValidationError(
                message=f"File size exceeds maximum of {max_mb:.0f}MB. Please upload a smaller image.",
                field="image",
                context={"max_size_mb": max_mb, "reported_size": content_length},
            )
        if actual_size > settings.max_file_size:
            raise ValidationError(
                message=f"File size ({actual_size / (1024 * 1024):.1f}MB) exceeds maximum of {max_mb:.0f}MB.",
                field="image",
                context={"max_size_mb": max_mb, "actual_size": actual_size},
            )

    def validate_mime_type(self, content: bytes, filename: str) -> str:
        """
        Returns the MIME type detected from the file's leading bytes.

        The client's Content-Type header and the extension are never trusted
        for this: a renamed text file or PDF is rejected here.
        """
        try:
            detected = magic.from_buffer(content[:SNIFF_BYTES], mime=True)
        except magic.MagicException as e:
            logger.error("MIME type detection failed for %s: %s", filename, str(e))
            raise FileStorageError(
                message="Could not verify file type. Please try again.",
                context={"error": str(e)},
            ) from e

        if detected not in ALLOWED_MIME_TYPES:
            raise ValidationError(
                message=f"File content type '{detected}' is not an image this service accepts.",
                field="image",
                context={"detected_mime": detected, "allowed": sorted(ALLOWED_MIME_TYPES)},
            )
        return detected

    async def write_temp(self, content: bytes, extension: str) -> str:
        """Writes the bytes to a uniquely named file and returns its absolute path."""
        path = self.upload_dir / f"{uuid.uuid4()}{extension}"
        try:
            async with aiofiles.open(path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to write upload to %s: %s", path, str(e))
            raise FileStorageError(
                message="Failed to save uploaded image. Please try again.",
                context={"os_error": str(e)},
            ) from e
        logger.debug("Upload written: %s (%d bytes)", path.name, len(content))
        return str(path)

    async def cleanup_file(self, file_path: str) -> None:
        """
        Removes a temp file. Missing files are fine; other OS errors are
        logged and not raised so they never mask the request's own outcome.
        """
        try:
            await aiofiles.os.remove(file_path)
            logger.debug("Cleaned up upload: %s", Path(file_path).name)
        except FileNotFoundError:
            logger.debug("Cleanup: file already gone: %s", Path(file_path).name)
        except OSError as e:
            logger.warning("Failed to clean up file %s: %s", file_path, str(e))

    async def validate_and_store(
        self,
        filename: str,
        content: bytes,
        content_type: Optional[str] = None,
        content_length: Optional[int] = None,
    ) -> Tuple[str, str]:
        """
        Full pipeline. Returns (absolute_path, mime_type); nothing is written
        when validation fails.
        """
        ext = self.validate_extension(filename)
        self.validate_size(content_length, len(content))
        mime_type = self.validate_mime_type(content, filename)
        if content_type and content_type.split(";")[0].strip().lower() != mime_type:
            logger.debug("Declared content type %s differs from detected %s", content_type, mime_type)
        path = await self.write_temp(content, ext)
        return path, mime_type


# ── Singleton Instance ────────────────────────────────────────────────────
file_service = FileService()
