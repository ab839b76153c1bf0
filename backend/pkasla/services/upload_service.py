# backend/pkasla/services/upload_service.py
"""
Upload Service for the PKASLA platform

Validates incoming files, compresses images, stores the bytes through
StorageService and keeps an Upload record per stored object.
"""

from dataclasses import dataclass
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import ForbiddenException, NotFoundException, ValidationException
from ..models.upload import Upload
from ..models.user import User, UserRole
from ..repositories.factory import RepositoryFactory
from ..utils.time_utils import epoch_ms
from .base import BaseService
from .cache_service import CacheService
from .image_processing_service import AVATAR_CONTENT_TYPES, ImageProcessingService, is_image_mimetype
from .storage_service import StorageService

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = (
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/gif",
    "image/webp",
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
)
MAX_FILES_PER_REQUEST = 10
# Animated GIFs lose their frames when re-encoded
_COMPRESSIBLE = {"image/jpeg", "image/jpg", "image/png", "image/webp"}


@dataclass
class IncomingFile:
    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


class UploadService(BaseService):
    def __init__(
        self,
        db: Session,
        cache: Optional[CacheService] = None,
        storage: Optional[StorageService] = None,
        images: Optional[ImageProcessingService] = None,
    ):
        super().__init__(db, cache)
        self.repository = RepositoryFactory.create_upload_repository(db)
        self.storage = storage or StorageService()
        self.images = images or ImageProcessingService()

    def _validate(self, file: IncomingFile, allowed=ALLOWED_CONTENT_TYPES) -> None:
        if not file.data:
            raise ValidationException("No file provided")
        if file.content_type not in allowed:
            raise ValidationException(f"Invalid file type. Allowed types: {', '.join(allowed)}")
        if file.size > settings.max_upload_size:
            limit_mb = settings.max_upload_size // (1024 * 1024)
            raise ValidationException(f"File too large. Maximum size is {limit_mb}MB")

    def _store(
        self,
        owner: User,
        file: IncomingFile,
        folder: str,
        *,
        custom_name: Optional[str] = None,
    ) -> Upload:
        data, mimetype, filename = file.data, file.content_type, file.filename
        original_size = file.size
        ratio = None
        if mimetype in _COMPRESSIBLE:
            compressed = self.images.compress_image(data)
            data, mimetype, ratio = compressed.data, compressed.mimetype, compressed.compression_ratio

        stored = self.storage.upload(
            data,
            original_filename=filename,
            content_type=mimetype,
            folder=folder,
            custom_name=custom_name,
        )
        with self.transaction():
            record = self.repository.create(
                user_id=owner.id,
                original_filename=file.filename,
                filename=stored.key.rsplit("/", 1)[-1],
                url=stored.url,
                key=stored.key,
                provider=stored.provider,
                mimetype=mimetype,
                size=len(data),
                folder=folder,
            )
        record.original_size = original_size
        record.compression_ratio = ratio
        return record

    @BaseService.measure_operation("upload_single")
    def upload_single(self, owner: User, file: Optional[IncomingFile], folder: str = "general") -> Upload:
        if file is None:
            raise ValidationException("No file provided")
        self._validate(file)
        return self._store(owner, file, folder or "general")

    @BaseService.measure_operation("upload_multiple")
    def upload_multiple(self, owner: User, files: List[IncomingFile], folder: str = "general") -> List[Upload]:
        if not files:
            raise ValidationException("No files provided")
        if len(files) > MAX_FILES_PER_REQUEST:
            raise ValidationException(f"Too many files. Maximum is {MAX_FILES_PER_REQUEST}")
        for file in files:
            self._validate(file)
        return [self._store(owner, file, folder or "general") for file in files]

    @BaseService.measure_operation("upload_avatar")
    def upload_avatar(self, owner: User, file: Optional[IncomingFile]) -> Upload:
        """Compress to a 400x400 JPEG, store under ``avatars/`` and set it as the user's avatar."""
        if file is None:
            raise ValidationException("No file provided")
        if not is_image_mimetype(file.content_type):
            raise ValidationException("File must be an image")
        self._validate(file, allowed=tuple(sorted(AVATAR_CONTENT_TYPES)))

        compressed = self.images.compress_avatar(file.data)
        stored = self.storage.upload(
            compressed.data,
            original_filename=file.filename,
            content_type=compressed.mimetype,
            folder="avatars",
            custom_name=f"avatar-{owner.id}-{epoch_ms()}{compressed.extension}",
        )
        with self.transaction():
            record = self.repository.create(
                user_id=owner.id,
                original_filename=file.filename,
                filename=stored.key.rsplit("/", 1)[-1],
                url=stored.url,
                key=stored.key,
                provider=stored.provider,
                mimetype=compressed.mimetype,
                size=compressed.size,
                folder="avatars",
            )
            owner.avatar = stored.url
        record.original_size = compressed.original_size
        record.compression_ratio = compressed.compression_ratio
        self.logger.info(f"Avatar updated for user {owner.id}")
        return record

    def store_image_field(self, owner: User, file: IncomingFile, folder: str) -> str:
        """Store an image sent alongside a form (event cover, receipt) and return its URL."""
        self._validate(file, allowed=ALLOWED_CONTENT_TYPES[:5])
        return self._store(owner, file, folder).url

    def get_upload(self, upload_id: str, user: User) -> Upload:
        record = self.repository.get_by_id(upload_id)
        if not record:
            raise NotFoundException("Upload not found")
        if record.user_id != user.id and user.role != UserRole.ADMIN.value:
            raise ForbiddenException("You do not have permission to view this file")
        return record

    def list_for_user(self, user: User, folder: Optional[str] = None, page: int = 1, limit: int = 50) -> List[Upload]:
        items, _ = self.repository.list_for_user(
            user.id, folder=folder, skip=(page - 1) * limit, limit=limit
        )
        return items

    def _delete(self, record: Optional[Upload], user: User) -> None:
        if not record:
            raise NotFoundException("Upload record not found")
        if record.user_id != user.id and user.role != UserRole.ADMIN.value:
            raise ForbiddenException("You do not have permission to delete this file")
        self.storage.delete(record.key)
        with self.transaction():
            self.repository.delete(record.id)
        self.logger.info(f"Deleted upload {record.key}")

    @BaseService.measure_operation("delete_upload")
    def delete_by_id(self, upload_id: str, user: User) -> None:
        self._delete(self.repository.get_by_id(upload_id), user)

    @BaseService.measure_operation("delete_upload_by_key")
    def delete_by_key(self, key: str, user: User) -> None:
        self._delete(self.repository.get_by_key(key), user)

    def get_signed_url(self, key: str, expires_in: int = 3600) -> Dict[str, Any]:
        return {"url": self.storage.get_signed_url(key, expires_in), "expiresIn": expires_in}

    def storage_info(self) -> Dict[str, Any]:
        return {
            "provider": self.storage.provider,
            "maxFileSize": settings.max_upload_size,
            "maxFiles": MAX_FILES_PER_REQUEST,
            "allowedTypes": list(ALLOWED_CONTENT_TYPES),
        }
