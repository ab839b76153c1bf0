"""Upload record schemas."""

from typing import Optional

from .base import ORMResponse


class UploadResponse(ORMResponse):
    user_id: str
    original_filename: str
    filename: str
    url: str
    key: str
    provider: str
    mimetype: str
    size: int
    folder: str = "general"
    original_size: Optional[int] = None
    compression_ratio: Optional[str] = None
