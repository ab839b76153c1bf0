# backend/tests/test_auth.py
"""
Test authentication: registration, login, 2FA, OAuth, refresh and logout.
"""

from fastapi.testclient import TestClient
import pyotp
from sqlalchemy.orm import Session

from pkasla.auth import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)
from pkasla.models.site_settings import SiteSettings
from pkasla.models.user import User, UserRole, UserStatus


class TestPasswordsAndTokens:
    def test_password_hashing(self):
        password = "TestPassword123!"
        hashed = get_password_hash(password)

        assert hashed != password
        assert verify_password(password, hashed) is True
        assert verify_password("WrongPassword", hashed) is False
        assert verify_password(password, None) is False

    def test_access_token_round_trip(self):
        token = create_access_token({"sub": "01HZX", "email": "a@b.co", "role": "user"})
        payload = decode_access_token(token)

        assert payload["sub"] == "01HZX"
        assert payload["typ"] == "access"
        assert "jti" in payload


class TestRegister:
    def test_register_new_user(self, client: TestClient, db: Session):
        response = client.post(
            "/api/v1/auth/register",
            json={"name": "New Host", "email": "New@Example.com", "password": "SecurePass1"},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["data"]["user"]["email"] == "new@example.com"
        assert body["data"]["user"]["role"] == "user"
        assert body["data"]["tokens"]["accessToken"]
        assert "hashedPassword" not in body["data"]["user"]

        user = db.query(User).filter(User.email == "new@example.com").first()
        assert user is not None
        assert user.role == UserRole.USER.value

    def test_register_duplicate_email(self, client: TestClient, test_user: User):
        response = client.post(
            "/api/v1/auth/register",
            json={"name": "Dupe", "email": test_user.email, "password": "SecurePass1"},
        )

        assert response.status_code == 409
        assert response.json() == {"success": False, "message": "Email already in use"}

    def test_register_weak_password_is_validation_error(self, client: TestClient):
        response = client.post(
            "/api/v1/auth/register",
            json={"name": "Weak", "email": "weak@example.com", "password": "alllowercase"},
        )

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Validation error"
        assert "password" in body["errors"]["fieldErrors"]

    def test_register_blocked_when_disabled(self, client: TestClient, db: Session):
        db.add(SiteSettings(allow_registration=False))
        db.commit()

        response = client.post(
            "/api/v1/auth/register",
            json={"name": "Late", "email": "late@example.com", "password": "SecurePass1"},
        )

        assert response.status_code == 403
        assert response.json()["message"] == "Registration is currently disabled"


class TestLogin:
    def test_login_success_sets_session(
        self, client: TestClient, test_user: User, test_password: str
    ):
        response = client.post(
            "/api/v1/auth/login", json={"email": test_user.email, "password": test_password}
        )

        assert response.status_code == 200
        assert response.json()["data"]["user"]["id"] == test_user.id
        assert "pkasla.sid" in response.cookies

        # The session cookie alone authenticates follow-up requests
        me = client.get("/api/v1/auth/me")
        assert me.status_code == 200
        assert me.json()["data"]["email"] == test_user.email

    def test_login_wrong_password(self, client: TestClient, test_user: User):
        response = client.post(
            "/api/v1/auth/login", json={"email": test_user.email, "password": "Nope12345"}
        )

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid credentials"

    def test_login_suspended_user(
        self, client: TestClient, db: Session, test_user: User, test_password: str
    ):
        test_user.status = UserStatus.SUSPENDED.value
        db.commit()

        response = client.post(
            "/api/v1/auth/login", json={"email": test_user.email, "password": test_password}
        )

        assert response.status_code == 403
        assert response.json()["message"] == "Account is suspended"

    def test_me_requires_authentication(self, client: TestClient):
        response = client.get("/api/v1/auth/me")

        assert response.status_code == 401
        assert response.json()["message"] == "Authentication required"

    def test_session_for_deleted_account(
        self, client: TestClient, db: Session, test_user: User, test_password: str
    ):
        client.post(
            "/api/v1/auth/login", json={"email": test_user.email, "password": test_password}
        )
        db.delete(test_user)
        db.commit()

        response = client.get("/api/v1/auth/me")

        assert response.status_code == 401
        assert response.json()["message"] == "Account not found"
        # The stale session is dropped
        again = client.get("/api/v1/auth/me")
        assert again.json()["message"] == "Authentication required"

    def test_suspended_account_loses_access(
        self, client: TestClient, db: Session, test_user: User, auth_headers: dict
    ):
        assert client.get("/api/v1/auth/me", headers=auth_headers).status_code == 200

        test_user.status = UserStatus.SUSPENDED.value
        db.commit()

        response = client.get("/api/v1/auth/me", headers=auth_headers)
        assert response.status_code == 403
        assert response.json()["message"] == "Account is suspended"

    def test_me_rejects_garbage_token(self, client: TestClient):
        response = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid or expired token"


class TestTwoFactor:
    def _enable(self, client: TestClient, headers: dict) -> dict:
        setup = client.post("/api/v1/auth/2fa/setup", headers=headers)
        assert setup.status_code == 200
        data = setup.json()["data"]
        code = pyotp.TOTP(data["secret"]).now()
        verify = client.post("/api/v1/auth/2fa/verify", json={"token": code}, headers=headers)
        assert verify.status_code == 200
        return data

    def test_setup_returns_qr_and_backup_codes(self, client: TestClient, auth_headers: dict):
        response = client.post("/api/v1/auth/2fa/setup", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["qrCodeUrl"].startswith("data:image/png;base64,")
        assert len(data["backupCodes"]) == 10

    def test_verify_without_setup(self, client: TestClient, auth_headers: dict):
        response = client.post(
            "/api/v1/auth/2fa/verify", json={"token": "123456"}, headers=auth_headers
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Two-factor setup not initiated"

    def test_login_requires_second_factor(
        self, client: TestClient, test_user: User, auth_headers: dict, test_password: str
    ):
        secrets = self._enable(client, auth_headers)

        first = client.post(
            "/api/v1/auth/login", json={"email": test_user.email, "password": test_password}
        )
        assert first.status_code == 200
        assert first.json()["data"]["requiresTwoFactor"] is True

        second = client.post(
            "/api/v1/auth/login/verify-2fa",
            json={"token": pyotp.TOTP(secrets["secret"]).now()},
        )
        assert second.status_code == 200
        assert second.json()["data"]["usedBackupCode"] is False
        assert second.json()["data"]["tokens"]["accessToken"]

    def test_backup_code_is_single_use(
        self, client: TestClient, test_user: User, auth_headers: dict, test_password: str
    ):
        secrets = self._enable(client, auth_headers)
        backup = secrets["backupCodes"][0]
        credentials = {"email": test_user.email, "password": test_password}

        client.post("/api/v1/auth/login", json=credentials)
        ok = client.post("/api/v1/auth/login/verify-2fa", json={"token": backup.lower()})
        assert ok.status_code == 200
        assert ok.json()["data"]["usedBackupCode"] is True

        client.post("/api/v1/auth/login", json=credentials)
        reused = client.post("/api/v1/auth/login/verify-2fa", json={"token": backup})
        assert reused.status_code == 401

    def test_disable_requires_password(self, client: TestClient, auth_headers: dict):
        self._enable(client, auth_headers)

        wrong = client.post(
            "/api/v1/auth/2fa/disable", json={"password": "Wrong1234"}, headers=auth_headers
        )
        assert wrong.status_code == 401

        right = client.post(
            "/api/v1/auth/2fa/disable",
            json={"password": "TestPassword123!"},
            headers=auth_headers,
        )
        assert right.status_code == 200
        assert right.json()["data"] == {"enabled": False}


class TestOAuthAndTokens:
    def test_oauth_creates_job_seeker(self, client: TestClient, db: Session):
        response = client.post(
            "/api/v1/auth/login/oauth",
            json={
                "email": "oauth@example.com",
                "name": "OAuth Person",
                "provider": "google",
                "providerId": "g-123",
                "accessToken": "provider-token",
            },
        )

        assert response.status_code == 200
        assert response.json()["data"]["user"]["role"] == UserRole.JOB_SEEKER.value
        user = db.query(User).filter(User.email == "oauth@example.com").one()
        assert user.provider == "google"
        assert user.hashed_password is None

    def test_oauth_links_existing_password_account(
        self, client: TestClient, db: Session, test_user: User
    ):
        response = client.post(
            "/api/v1/auth/login/oauth",
            json={
                "email": test_user.email,
                "name": test_user.name,
                "provider": "github",
                "providerId": "gh-1",
                "accessToken": "t",
            },
        )

        assert response.status_code == 200
        db.refresh(test_user)
        assert test_user.provider == "github"
        assert test_user.role == UserRole.USER.value

    def test_refresh_rotates_and_revokes(
        self, client: TestClient, test_user: User, test_password: str
    ):
        login = client.post(
            "/api/v1/auth/login", json={"email": test_user.email, "password": test_password}
        )
        refresh_token = login.json()["data"]["tokens"]["refreshToken"]

        rotated = client.post("/api/v1/auth/refresh", json={"refreshToken": refresh_token})
        assert rotated.status_code == 200
        assert rotated.json()["data"]["tokens"]["refreshToken"] != refresh_token

        replay = client.post("/api/v1/auth/refresh", json={"refreshToken": refresh_token})
        assert replay.status_code == 401
        assert replay.json()["message"] == "Token has been revoked"

    def test_logout_revokes_bearer_token(self, client: TestClient, auth_headers: dict):
        response = client.post("/api/v1/auth/logout", headers=auth_headers)
        assert response.status_code == 200

        again = client.get("/api/v1/auth/me", headers=auth_headers)
        assert again.status_code == 401
        assert again.json()["message"] == "Token has been revoked"
