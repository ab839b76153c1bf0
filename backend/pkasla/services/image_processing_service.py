"""
ImageProcessingService

Compresses uploaded images before they are stored:
- Fit inside a bounding box without enlarging
- PNG input stays PNG (transparency), everything else re-encodes to the
  requested format
- Progressive JPEG, optimized PNG, WebP
"""

from dataclasses import dataclass
import io
import logging
from typing import Optional

from PIL import Image, ImageOps, UnidentifiedImageError

from ..core.exceptions import ServiceException, ValidationException

logger = logging.getLogger(__name__)


AVATAR_CONTENT_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/webp"}
_PIL_FORMATS = {"jpeg": "JPEG", "png": "PNG", "webp": "WEBP"}


@dataclass
class CompressedImage:
    data: bytes
    mimetype: str
    size: int
    original_size: int

    @property
    def extension(self) -> str:
        return ".jpg" if self.mimetype == "image/jpeg" else "." + self.mimetype.split("/", 1)[1]

    @property
    def compression_ratio(self) -> str:
        if not self.original_size:
            return "0.00%"
        return f"{(1 - self.size / self.original_size) * 100:.2f}%"


class ImageProcessingService:
    def __init__(self, max_width: int = 800, max_height: int = 800, quality: int = 80) -> None:
        self.max_width = max_width
        self.max_height = max_height
        self.quality = quality

    def _detect_format(self, data: bytes) -> str:
        try:
            with Image.open(io.BytesIO(data)) as img:
                kind = (img.format or "").lower()
        except (UnidentifiedImageError, OSError):
            raise ValidationException("File must be an image")
        if kind not in _PIL_FORMATS and kind != "gif":
            raise ValidationException("Unsupported image type")
        return kind

    def _encode(self, img: Image.Image, output_format: str, quality: int) -> bytes:
        out = io.BytesIO()
        if output_format == "jpeg":
            if img.mode not in ("RGB", "L"):
                # Flatten transparency to white
                rgba = img.convert("RGBA")
                background = Image.new("RGBA", rgba.size, (255, 255, 255, 255))
                img = Image.alpha_composite(background, rgba).convert("RGB")
            img.save(out, format="JPEG", quality=quality, optimize=True, progressive=True)
        elif output_format == "png":
            img.save(out, format="PNG", optimize=True, compress_level=9)
        else:
            img.save(out, format="WEBP", quality=quality)
        return out.getvalue()

    def compress_image(
        self,
        data: bytes,
        *,
        max_width: Optional[int] = None,
        max_height: Optional[int] = None,
        quality: Optional[int] = None,
        output_format: str = "jpeg",
    ) -> CompressedImage:
        """
        Shrink ``data`` to fit the bounding box and re-encode it.

        Raises:
            ValidationException: Not a readable image
            ServiceException: Encoding failed
        """
        source_format = self._detect_format(data)
        if source_format == "png" and output_format == "jpeg":
            output_format = "png"

        box = (max_width or self.max_width, max_height or self.max_height)
        try:
            with Image.open(io.BytesIO(data)) as img:
                work = ImageOps.exif_transpose(img)
                # thumbnail() keeps aspect ratio and never enlarges
                work.thumbnail(box, Image.LANCZOS)
                encoded = self._encode(work, output_format, quality or self.quality)
        except (OSError, ValueError) as exc:
            logger.error(f"Image compression failed: {exc}")
            raise ServiceException(f"Failed to compress image: {exc}")

        return CompressedImage(
            data=encoded,
            mimetype=f"image/{output_format}",
            size=len(encoded),
            original_size=len(data),
        )

    def compress_avatar(self, data: bytes) -> CompressedImage:
        return self.compress_image(data, max_width=400, max_height=400, quality=85, output_format="jpeg")


def is_image_mimetype(mimetype: Optional[str]) -> bool:
    return bool(mimetype) and mimetype.startswith("image/") and mimetype != "image/svg+xml"
