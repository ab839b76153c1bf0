import base64
import hashlib
import io
import logging
import secrets
from typing import Dict, List, Tuple

from cryptography.fernet import Fernet, InvalidToken
import pyotp
import qrcode
from sqlalchemy.orm import Session

from ..auth import get_password_hash, verify_password
from ..core.config import settings
from ..core.exceptions import UnauthorizedException, ValidationException
from ..models.user import User

from .base import BaseService

logger = logging.getLogger(__name__)

BACKUP_CODE_COUNT = 10
_BACKUP_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"


def _fernet_from_settings() -> Fernet:
    key = settings.totp_encryption_key.get_secret_value()
    if key:
        return Fernet(key)
    # Dev fallback: derive a stable key so secrets survive across requests and restarts
    digest = hashlib.sha256(settings.session_secret.get_secret_value().encode("utf-8")).digest()
    return Fernet(base64.urlsafe_b64encode(digest))


class TwoFactorAuthService(BaseService):
    """TOTP enrolment, verification and backup codes."""

    def __init__(self, db: Session):
        super().__init__(db)
        self._fernet = _fernet_from_settings()
        self._totp_valid_window = 1

    def _encrypt(self, value: str) -> str:
        return self._fernet.encrypt(value.encode("utf-8")).decode("utf-8")

    def _decrypt(self, token: str) -> str:
        return self._fernet.decrypt(token.encode("utf-8")).decode("utf-8")

    @BaseService.measure_operation("tfa_generate_qr")
    def generate_qr_code(self, email: str, secret: str) -> Tuple[str, str]:
        totp = pyotp.TOTP(secret)
        otpauth_url = totp.provisioning_uri(name=email, issuer_name=settings.totp_issuer)
        img = qrcode.make(otpauth_url)
        buf = io.BytesIO()
        img.save(buf, format="PNG")
        data_url = "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode("utf-8")
        return data_url, otpauth_url

    def generate_backup_codes(self, count: int = BACKUP_CODE_COUNT) -> List[str]:
        return [
            "-".join("".join(secrets.choice(_BACKUP_ALPHABET) for _ in range(4)) for __ in range(3))
            for _ in range(count)
        ]

    @BaseService.measure_operation("tfa_setup_initiate")
    def setup_initiate(self, user: User) -> Dict[str, object]:
        """
        Start enrolment: store an encrypted secret plus hashed backup codes.

        2FA stays disabled until ``setup_verify`` confirms a code from the
        authenticator app. Plain backup codes are only returned here.
        """
        secret = pyotp.random_base32()
        data_url, otpauth_url = self.generate_qr_code(email=user.email, secret=secret)
        backup_codes = self.generate_backup_codes()
        with self.transaction():
            user.two_factor_secret = self._encrypt(secret)
            user.two_factor_enabled = False
            user.two_factor_backup_codes = [get_password_hash(code) for code in backup_codes]
        self.logger.info(f"2FA setup initiated for user {user.id}")
        return {
            "secret": secret,
            "qr_code_url": data_url,
            "otpauth_url": otpauth_url,
            "backup_codes": backup_codes,
        }

    def verify_totp_code(self, user: User, code: str) -> bool:
        if not user.two_factor_secret:
            return False
        try:
            secret = self._decrypt(user.two_factor_secret)
        except InvalidToken:
            self.logger.warning(f"Could not decrypt TOTP secret for user {user.id}")
            return False
        token = (code or "").strip()
        if not token.isdigit():
            return False
        return bool(pyotp.TOTP(secret).verify(token, valid_window=self._totp_valid_window))

    @BaseService.measure_operation("tfa_setup_verify")
    def setup_verify(self, user: User, code: str) -> None:
        if not user.two_factor_secret:
            raise ValidationException("Two-factor setup not initiated")
        if not self.verify_totp_code(user, code):
            raise ValidationException("Invalid verification code")
        with self.transaction():
            user.two_factor_enabled = True
        self.logger.info(f"2FA enabled for user {user.id}")

    @BaseService.measure_operation("tfa_disable")
    def disable(self, user: User, current_password: str) -> None:
        if not verify_password(current_password, user.hashed_password):
            raise UnauthorizedException("Invalid password")
        with self.transaction():
            user.two_factor_enabled = False
            user.two_factor_secret = None
            user.two_factor_backup_codes = None
        self.logger.info(f"2FA disabled for user {user.id}")

    @BaseService.measure_operation("tfa_verify_login")
    def verify_login(self, user: User, token: str) -> Tuple[bool, bool]:
        """
        Check a login code.

        Returns ``(valid, used_backup_code)``; a matching backup code is
        consumed.
        """
        if self.verify_totp_code(user, token):
            return True, False

        candidate = (token or "").strip().upper()
        hashed_codes = list(user.two_factor_backup_codes or [])
        for idx, hashed in enumerate(hashed_codes):
            if verify_password(candidate, hashed):
                with self.transaction():
                    hashed_codes.pop(idx)
                    user.two_factor_backup_codes = hashed_codes
                self.logger.info(f"Backup code used for user {user.id}")
                return True, True
        return False, False
