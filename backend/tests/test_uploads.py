# backend/tests/test_uploads.py
"""
Test uploads: validation, compression, ownership and local storage.
"""

import io
from pathlib import Path

from fastapi.testclient import TestClient
from PIL import Image
import pytest
from sqlalchemy.orm import Session

from pkasla.core.config import settings
from pkasla.core.exceptions import ValidationException
from pkasla.models.upload import Upload
from pkasla.models.user import User
from pkasla.services.image_processing_service import ImageProcessingService
from pkasla.services.storage_service import StorageService, build_object_key
from tests.helpers.api import png_bytes


def jpeg_bytes(size=(1600, 1200)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, (10, 120, 200)).save(buf, format="JPEG", quality=95)
    return buf.getvalue()


class TestImageProcessing:
    def test_fits_inside_bounding_box(self):
        result = ImageProcessingService().compress_image(jpeg_bytes())

        with Image.open(io.BytesIO(result.data)) as img:
            assert img.size == (800, 600)
            assert img.format == "JPEG"
        assert result.mimetype == "image/jpeg"
        assert result.compression_ratio.endswith("%")

    def test_never_enlarges_and_keeps_png(self):
        result = ImageProcessingService().compress_image(png_bytes(size=(50, 20)))

        with Image.open(io.BytesIO(result.data)) as img:
            assert img.size == (50, 20)
            assert img.format == "PNG"

    def test_avatar_box(self):
        result = ImageProcessingService().compress_avatar(jpeg_bytes(size=(1000, 500)))

        with Image.open(io.BytesIO(result.data)) as img:
            assert img.size == (400, 200)

    def test_rejects_non_image(self):
        with pytest.raises(ValidationException, match="File must be an image"):
            ImageProcessingService().compress_image(b"%PDF-1.4 not an image")


class TestStorage:
    def test_object_key_format(self):
        key = build_object_key("events", "Cover.PNG")

        folder, name = key.split("/")
        assert folder == "events"
        assert name.endswith(".png")
        assert name.split("-")[0].isdigit()

    def test_invalid_folder(self):
        with pytest.raises(ValidationException, match="Invalid folder name"):
            build_object_key("../etc", "x.txt")

    def test_local_round_trip(self, tmp_path: Path):
        storage = StorageService(provider="local", local_path=str(tmp_path))

        stored = storage.upload(b"hello", original_filename="a.txt", content_type="text/plain")

        assert stored.url == f"{settings.api_base_url.rstrip('/')}/uploads/{stored.key}"
        assert (tmp_path / stored.key).read_bytes() == b"hello"
        storage.delete(stored.key)
        assert not (tmp_path / stored.key).exists()

    def test_signed_urls_need_r2(self, tmp_path: Path):
        storage = StorageService(provider="local", local_path=str(tmp_path))

        with pytest.raises(ValidationException, match="Signed URLs only available for R2 storage"):
            storage.get_signed_url("general/a.txt")


class TestUploadRoutes:
    def test_info_is_public(self, client: TestClient):
        response = client.get("/api/v1/upload/info")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["provider"] == "local"
        assert data["maxFiles"] == 10
        assert "application/pdf" in data["allowedTypes"]

    def test_single_upload_compresses_images(self, client: TestClient, auth_headers: dict):
        original = jpeg_bytes()

        response = client.post(
            "/api/v1/upload/single",
            files={"file": ("photo.jpg", original, "image/jpeg")},
            data={"folder": "gallery"},
            headers=auth_headers,
        )

        assert response.status_code == 201, response.text
        data = response.json()["data"]
        assert data["folder"] == "gallery"
        assert data["key"].startswith("gallery/")
        assert data["originalSize"] == len(original)
        assert data["size"] < len(original)

    def test_pdf_is_stored_as_is(self, client: TestClient, auth_headers: dict):
        response = client.post(
            "/api/v1/upload/single",
            files={"file": ("cv.pdf", b"%PDF-1.4 minimal", "application/pdf")},
            headers=auth_headers,
        )

        assert response.status_code == 201
        assert response.json()["data"]["mimetype"] == "application/pdf"
        assert response.json()["data"]["folder"] == "general"

    def test_rejects_unknown_type(self, client: TestClient, auth_headers: dict):
        response = client.post(
            "/api/v1/upload/single",
            files={"file": ("run.exe", b"MZ", "application/x-msdownload")},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["message"].startswith("Invalid file type.")

    def test_missing_file(self, client: TestClient, auth_headers: dict):
        response = client.post("/api/v1/upload/single", headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["message"] == "No file provided"

    def test_avatar_updates_profile(
        self, client: TestClient, db: Session, test_user: User, auth_headers: dict
    ):
        response = client.post(
            "/api/v1/upload/avatar",
            files={"avatar": ("me.jpg", jpeg_bytes(), "image/jpeg")},
            headers=auth_headers,
        )

        assert response.status_code == 201, response.text
        data = response.json()["data"]
        assert data["upload"]["folder"] == "avatars"
        assert data["user"]["avatar"] == data["upload"]["url"]
        db.refresh(test_user)
        assert test_user.avatar == data["upload"]["url"]

    def test_avatar_must_be_image(self, client: TestClient, auth_headers: dict):
        response = client.post(
            "/api/v1/upload/avatar",
            files={"file": ("cv.pdf", b"%PDF", "application/pdf")},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["message"] == "File must be an image"

    def test_multiple_and_listing(self, client: TestClient, auth_headers: dict):
        response = client.post(
            "/api/v1/upload/multiple",
            files=[
                ("files", ("a.png", png_bytes(), "image/png")),
                ("files", ("b.pdf", b"%PDF-1.4", "application/pdf")),
            ],
            headers=auth_headers,
        )

        assert response.status_code == 201, response.text
        assert len(response.json()["data"]) == 2
        mine = client.get("/api/v1/upload/my-uploads", headers=auth_headers).json()["data"]
        assert len(mine) == 2

    def test_delete_requires_owner(
        self,
        client: TestClient,
        db: Session,
        auth_headers: dict,
        other_headers: dict,
        admin_headers: dict,
    ):
        upload = client.post(
            "/api/v1/upload/single",
            files={"file": ("cv.pdf", b"%PDF-1.4", "application/pdf")},
            headers=auth_headers,
        ).json()["data"]

        denied = client.delete(f"/api/v1/upload/{upload['id']}", headers=other_headers)
        assert denied.status_code == 403
        assert denied.json()["message"] == "You do not have permission to delete this file"

        by_admin = client.delete(f"/api/v1/upload/key/{upload['key']}", headers=admin_headers)
        assert by_admin.status_code == 200
        assert db.query(Upload).count() == 0

        gone = client.delete(f"/api/v1/upload/{upload['id']}", headers=auth_headers)
        assert gone.status_code == 404
        assert gone.json()["message"] == "Upload record not found"

    def test_signed_url_route_on_local_storage(self, client: TestClient, auth_headers: dict):
        response = client.get("/api/v1/upload/signed-url/general/a.pdf", headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["message"] == "Signed URLs only available for R2 storage"
