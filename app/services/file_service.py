"""Image handling for prescription and food photo uploads."""
import io
import logging
from pathlib import Path
from typing import Optional

from fastapi import UploadFile
from PIL import Image, UnidentifiedImageError

from app.config import settings
from app.services.ai_schemas import ImageAttachment


logger = logging.getLogger(__name__)

MEDIA_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
}

# Pillow format name for re-encoding a downscaled image
PIL_FORMATS = {
    "image/jpeg": "JPEG",
    "image/png": "PNG",
    "image/gif": "GIF",
    "image/webp": "WEBP",
}


class InvalidImageError(ValueError):
    """Uploaded file is not an image the assistant can send."""

    pass


class FileService:
    """Turns uploaded or on-disk images into attachments for the assistant."""

    def __init__(
        self,
        max_bytes: Optional[int] = None,
        max_width: Optional[int] = None,
    ):
        self.max_bytes = max_bytes or settings.max_image_bytes
        self.max_width = max_width or settings.max_image_width

    async def load_upload(self, file: UploadFile) -> ImageAttachment:
        """
        Read an uploaded image into an attachment.

        Args:
            file: Uploaded file from FastAPI

        Returns:
            ImageAttachment with validated, possibly downscaled bytes

        Raises:
            InvalidImageError: If file type, size or content is invalid
        """
        media_type = file.content_type
        if media_type == "image/jpg":
            media_type = "image/jpeg"
        if media_type not in PIL_FORMATS:
            media_type = self.get_media_type(file.filename or "")

        contents = await file.read()
        return self.prepare(contents, media_type)

    def load_path(self, image_path: str) -> ImageAttachment:
        """Read an image file from disk into an attachment."""
        path = Path(image_path)
        if not path.is_file():
            raise InvalidImageError(f"Image not found: {image_path}")
        return self.prepare(path.read_bytes(), self.get_media_type(image_path))

    def prepare(self, contents: bytes, media_type: Optional[str]) -> ImageAttachment:
        """
        Validate image bytes and build an attachment.

        The declared media type only gates obvious non-images; the attachment
        carries the type of the decoded image, so a PNG named ``.jpg`` is sent
        as ``image/png``.
        """
        if media_type not in PIL_FORMATS:
            allowed = sorted(PIL_FORMATS)
            raise InvalidImageError(
                f"Invalid file type: {media_type}. Allowed: {allowed}"
            )
        if not contents:
            raise InvalidImageError("Image file is empty")
        if len(contents) > self.max_bytes:
            raise InvalidImageError(
                f"Image too large: {len(contents)} bytes (max {self.max_bytes})"
            )

        data, detected_type = self._optimize_image(contents)
        if detected_type != media_type:
            logger.info(
                "Image declared as %s decoded as %s", media_type, detected_type
            )
        return ImageAttachment(data=data, media_type=detected_type)

    def _optimize_image(self, contents: bytes) -> tuple[bytes, str]:
        """
        Decode the image and downscale it if wide, maintaining aspect ratio.

        Args:
            contents: Raw image bytes

        Returns:
            (bytes, media type of the decoded format); the original bytes
            unless the image was resized

        Raises:
            InvalidImageError: If the bytes are not a readable image in an
                allowed format, or decode to an oversized pixel count
        """
        try:
            with Image.open(io.BytesIO(contents)) as img:
                media_type = Image.MIME.get(img.format or "")
                if media_type not in PIL_FORMATS:
                    raise InvalidImageError(
                        f"Unsupported image format: {img.format}. "
                        f"Allowed: {sorted(PIL_FORMATS)}"
                    )

                img.load()
                if img.width <= self.max_width:
                    return contents, media_type

                ratio = self.max_width / img.width
                new_height = max(1, int(img.height * ratio))
                resized = img.resize(
                    (self.max_width, new_height), Image.Resampling.LANCZOS
                )

                buffer = io.BytesIO()
                resized.save(
                    buffer, format=PIL_FORMATS[media_type], optimize=True, quality=85
                )
                logger.info(
                    "Downscaled image from %dpx to %dpx wide", img.width, self.max_width
                )
                return buffer.getvalue(), media_type

        except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
            raise InvalidImageError(f"Could not read image: {e}") from e

    def get_media_type(self, image_path: str) -> str:
        """Determine media type from file extension."""
        suffix = Path(image_path).suffix.lower()
        return MEDIA_TYPES.get(suffix, "image/jpeg")


# Singleton instance
file_service = FileService()
