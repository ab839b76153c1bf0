# backend/pkasla/services/storage_service.py
"""
StorageService: puts file bytes on local disk or in Cloudflare R2.

Keys are ``<folder>/<epoch-ms>-<random><ext>``. Local files are served by
the app under ``/uploads``; R2 objects use the bucket's public URL.
"""

from dataclasses import dataclass
import logging
import os
from pathlib import Path
import re
import secrets
from typing import Optional

from ..core.config import settings
from ..core.exceptions import ValidationException
from ..utils.time_utils import epoch_ms
from .r2_storage_client import R2StorageClient

logger = logging.getLogger(__name__)

_FOLDER_PATTERN = re.compile(r"^[A-Za-z0-9_-]+(/[A-Za-z0-9_-]+)*$")


@dataclass
class StoredFile:
    url: str
    key: str
    provider: str


def build_object_key(folder: str, original_filename: str, custom_name: Optional[str] = None) -> str:
    if not _FOLDER_PATTERN.match(folder or ""):
        raise ValidationException("Invalid folder name")
    if custom_name:
        name = os.path.basename(custom_name)
    else:
        ext = os.path.splitext(original_filename or "")[1].lower()
        name = f"{epoch_ms()}-{secrets.token_hex(4)}{ext}"
    return f"{folder}/{name}"


class StorageService:
    def __init__(self, provider: Optional[str] = None, local_path: Optional[str] = None) -> None:
        self.provider = provider or settings.storage_provider
        self.local_root = Path(local_path or settings.storage_local_path)
        self._r2: Optional[R2StorageClient] = None

    @property
    def r2(self) -> R2StorageClient:
        if self._r2 is None:
            self._r2 = R2StorageClient()
        return self._r2

    def _local_file(self, key: str) -> Path:
        root = self.local_root.resolve()
        target = (root / key).resolve()
        if root not in target.parents:
            raise ValidationException("Invalid file key")
        return target

    def upload(
        self,
        data: bytes,
        *,
        original_filename: str,
        content_type: str,
        folder: str = "general",
        custom_name: Optional[str] = None,
    ) -> StoredFile:
        key = build_object_key(folder, original_filename, custom_name)
        if self.provider == "r2":
            url = self.r2.upload_bytes(key, data, content_type)
            logger.info(f"Stored {key} in R2")
            return StoredFile(url=url, key=key, provider="r2")

        target = self._local_file(key)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        url = f"{settings.api_base_url.rstrip('/')}/uploads/{key}"
        logger.info(f"Stored {key} on local disk")
        return StoredFile(url=url, key=key, provider="local")

    def delete(self, key: str) -> None:
        if self.provider == "r2":
            if not self.r2.delete_object(key):
                logger.warning(f"R2 delete failed for {key}")
            return
        target = self._local_file(key)
        try:
            target.unlink()
        except FileNotFoundError:
            logger.debug(f"Local file already gone: {key}")

    def get_signed_url(self, key: str, expires_in: int = 3600) -> str:
        if self.provider != "r2":
            raise ValidationException("Signed URLs only available for R2 storage")
        return self.r2.presign("GET", key, expires_in).url
