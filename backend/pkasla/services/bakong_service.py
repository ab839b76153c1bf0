# backend/pkasla/services/bakong_service.py
"""
Bakong KHQR payments.

KHQR strings are generated offline with ``bakong_khqr`` and rendered as PNG
data URLs; the Bakong REST API is used for deeplinks, transaction status lookups and the
webhook signature secret.
"""

import base64
from datetime import datetime, timedelta, timezone
import hashlib
import hmac
import io
import json
import logging
import secrets
import string
import time
from typing import Any, Dict, Optional, Union

from bakong_khqr import KHQR
import qrcode
import requests

from ..core.config import settings
from ..core.exceptions import (
    BadGatewayException,
    NotFoundException,
    ServiceException,
    ServiceUnavailableException,
    ValidationException,
)
from ..models.payment_log import PaymentEventType, PaymentLogStatus, PaymentMethod, PaymentType
from ..schemas.payment import BakongPaymentResponse, BakongTransactionStatus
from .base import BaseService
from .payment_log_service import PaymentLogService

logger = logging.getLogger(__name__)

PAYMENT_EXPIRY_SECONDS = 15 * 60
QR_IMAGE_SIZE = 512
MERCHANT_NAME_LENGTH = 25
MERCHANT_CITY_LENGTH = 15
STORE_LABEL_LENGTH = 25
REQUEST_TIMEOUT_SECONDS = 30

STATUS_MAP = {
    "PENDING": "pending",
    "PROCESSING": "pending",
    "SUCCESS": "completed",
    "COMPLETED": "completed",
    "FAILED": "failed",
    "CANCELLED": "failed",
    "EXPIRED": "expired",
    "REJECTED": "failed",
}

_ID_ALPHABET = string.ascii_lowercase + string.digits


def map_bakong_status(status: Optional[str]) -> str:
    return STATUS_MAP.get((status or "").upper(), "pending")


def generate_transaction_id() -> str:
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(7))
    return f"TXN-{int(time.time() * 1000)}-{suffix}"


def render_qr_data_url(data: str, size: int = QR_IMAGE_SIZE) -> str:
    """Render ``data`` as a square PNG data URL roughly ``size`` pixels wide."""
    qr = qrcode.QRCode(error_correction=qrcode.constants.ERROR_CORRECT_M, border=1)
    qr.add_data(data)
    qr.make(fit=True)
    qr.box_size = max(1, size // (qr.modules_count + 2 * qr.border))
    img = qr.make_image(fill_color="#000000", back_color="#FFFFFF")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode("utf-8")


def build_khqr(
    *,
    account_id: str,
    amount: float,
    currency: str,
    bill_number: Optional[str] = None,
    store_label: Optional[str] = None,
) -> Any:
    """
    Build a dynamic individual-account KHQR string.

    Returns the library response exposing ``.qr`` and ``.md5``. The embedded
    expiry is the library minimum of one day; payment expiry is tracked by
    ``expiresAt`` instead.

    Raises:
        ServiceException: If the merchant settings or amount are rejected
    """
    try:
        return KHQR().create_qr(
            amount=amount,
            account_id=account_id,
            merchant_name=(settings.bakong_merchant_name or "Merchant")[:MERCHANT_NAME_LENGTH],
            merchant_city=(settings.bakong_merchant_city or "Phnom Penh")[:MERCHANT_CITY_LENGTH],
            currency=currency,
            bill_number=bill_number,
            store_label=store_label[:STORE_LABEL_LENGTH] if store_label else None,
            expiration=1,
        )
    except (ValueError, TypeError) as e:
        logger.error(f"Failed to generate KHQR code for {bill_number}: {e}")
        raise ServiceException(f"Failed to generate KHQR code: {e}")


class BakongService(BaseService):
    def __init__(self, payment_logs: Optional[PaymentLogService] = None):
        super().__init__(None)
        self.payment_logs = payment_logs
        if not settings.bakong_access_token.get_secret_value():
            self.logger.warning(
                "Bakong access token not configured. Bakong payment features will not work."
            )

    def _ensure_configured(self) -> Dict[str, str]:
        token = settings.bakong_access_token.get_secret_value()
        if not token:
            raise ServiceUnavailableException("Bakong is not configured")
        if not settings.bakong_merchant_account_id:
            raise ServiceUnavailableException("Bakong merchant account ID is not configured")
        return {"Authorization": f"Bearer {token}", "Content-Type": "application/json"}

    def _url(self, path: str) -> str:
        return f"{settings.bakong_api_url.rstrip('/')}{path}"

    def _log(self, event_type: str, status: str, **fields: Any) -> None:
        if self.payment_logs:
            self.payment_logs.log_payment_event(
                event_type, status, payment_method=PaymentMethod.BAKONG.value, **fields
            )

    @BaseService.measure_operation("bakong_create_payment")
    def create_payment(
        self,
        *,
        user_id: str,
        amount: float,
        currency: str = "KHR",
        description: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> BakongPaymentResponse:
        """
        Create a dynamic KHQR payment that expires in 15 minutes.

        KHR amounts are whole riels; USD amounts keep two decimals.
        """
        headers = self._ensure_configured()
        metadata = dict(metadata or {})
        currency = (currency or "KHR").upper()
        charge_amount = round(amount) if currency == "KHR" else round(amount, 2)
        transaction_id = generate_transaction_id()
        merchant_account_id = settings.bakong_merchant_account_id
        description = description or f"Payment for {metadata.get('type') or 'service'}"

        payload = build_khqr(
            account_id=merchant_account_id,
            amount=charge_amount,
            currency=currency,
            bill_number=transaction_id,
            store_label=description,
        )

        try:
            qr_image = render_qr_data_url(payload.qr)
        except (ValueError, OSError) as e:
            self.logger.error(f"Failed to generate QR code image for {transaction_id}: {e}")
            raise ServiceException("Failed to generate QR code image")

        expires_at = (
            datetime.now(timezone.utc) + timedelta(seconds=PAYMENT_EXPIRY_SECONDS)
        ).isoformat()
        deeplink: Dict[str, Any] = {}
        try:
            response = requests.post(
                self._url("/v1/generate_deeplink_by_qr"),
                json={
                    "merchantAccountId": merchant_account_id,
                    "amount": charge_amount,
                    "currency": currency,
                    "transactionId": transaction_id,
                    "description": description,
                    "metadata": {"userId": user_id, **metadata},
                    "qrCode": payload.qr,
                },
                headers=headers,
                timeout=REQUEST_TIMEOUT_SECONDS,
            )
            response.raise_for_status()
            body = response.json()
            if isinstance(body, dict):
                deeplink = body
        except (requests.RequestException, ValueError) as e:
            self.logger.warning(
                f"Bakong API deeplink generation failed for {transaction_id}, using local KHQR: {e}"
            )

        result = BakongPaymentResponse(
            qr_code=deeplink.get("qrCode") or qr_image,
            qr_code_data=payload.qr,
            transaction_id=transaction_id,
            merchant_account_id=merchant_account_id,
            amount=amount,
            currency=currency,
            expires_at=deeplink.get("expiresAt") or expires_at,
        )
        self.logger.info(
            f"Bakong payment {transaction_id} created for user {user_id} ({amount} {currency})"
        )

        self._log(
            PaymentEventType.PAYMENT_CREATED.value,
            PaymentLogStatus.PENDING.value,
            user_id=user_id,
            transaction_id=transaction_id,
            payment_type=metadata.get("type"),
            amount=amount,
            currency=currency,
            plan_id=metadata.get("planId"),
            template_id=metadata.get("templateId"),
            metadata={**metadata, "md5": payload.md5},
        )
        return result

    @BaseService.measure_operation("bakong_transaction_status")
    def get_transaction_status(
        self, transaction_id: str, md5: Optional[str] = None
    ) -> BakongTransactionStatus:
        """Look up a transaction by id, or by the KHQR md5 hash when given."""
        headers = self._ensure_configured()
        try:
            if md5:
                response = requests.post(
                    self._url("/v1/check_transaction_by_md5"),
                    json={"md5": md5},
                    headers=headers,
                    timeout=REQUEST_TIMEOUT_SECONDS,
                )
            else:
                response = requests.get(
                    self._url(f"/v1/transactions/{transaction_id}"),
                    headers=headers,
                    timeout=REQUEST_TIMEOUT_SECONDS,
                )
        except requests.RequestException as e:
            self.logger.error(f"Failed to get Bakong transaction status for {transaction_id}: {e}")
            raise ServiceException(f"Failed to get transaction status: {e}")

        if response.status_code == 404:
            raise NotFoundException("Transaction not found")
        if response.status_code >= 400:
            raise BadGatewayException(f"Bakong API error: {_error_message(response)}")

        body = response.json() or {}
        if md5:
            data = body.get("data") or {}
            raw_status = "COMPLETED" if body.get("responseCode") == 0 and data else "PENDING"
        else:
            data = body
            raw_status = body.get("status")

        status = map_bakong_status(raw_status)
        result = BakongTransactionStatus(
            transaction_id=data.get("transactionId") or transaction_id,
            status=status,
            amount=data.get("amount") or 0,
            currency=data.get("currency") or "KHR",
            timestamp=_as_str(data.get("timestamp")),
            payer_account_id=data.get("payerAccountId") or data.get("fromAccountId"),
            payer_name=data.get("payerName"),
        )
        self._log(
            PaymentEventType.TRANSACTION_STATUS_CHECKED.value,
            status,
            transaction_id=transaction_id,
            amount=result.amount,
            currency=result.currency,
            metadata={
                "payerAccountId": result.payer_account_id,
                "payerName": result.payer_name,
                "timestamp": result.timestamp,
            },
        )
        return result

    def create_subscription_payment(
        self,
        *,
        user_id: str,
        amount: float,
        currency: str = "USD",
        metadata: Optional[Dict[str, Any]] = None,
        description: Optional[str] = None,
    ) -> BakongPaymentResponse:
        metadata = {**(metadata or {}), "type": PaymentType.SUBSCRIPTION.value}
        return self.create_payment(
            user_id=user_id,
            amount=amount,
            currency=currency,
            metadata=metadata,
            description=description or f"Subscription: {metadata.get('planName') or 'Plan'}",
        )

    def create_template_payment(
        self,
        *,
        user_id: str,
        amount: float,
        currency: str = "USD",
        metadata: Optional[Dict[str, Any]] = None,
        description: Optional[str] = None,
    ) -> BakongPaymentResponse:
        metadata = {**(metadata or {}), "type": PaymentType.TEMPLATE.value}
        return self.create_payment(
            user_id=user_id,
            amount=amount,
            currency=currency,
            metadata=metadata,
            description=description
            or f"Template Purchase: {metadata.get('templateName') or 'Template'}",
        )

    def verify_webhook_signature(
        self, payload: Union[bytes, str, Dict[str, Any]], signature: str
    ) -> bool:
        """
        Check an HMAC-SHA256 hex signature over the webhook body.

        Raises:
            ValidationException: If the webhook secret is not configured
        """
        secret = settings.bakong_webhook_secret.get_secret_value()
        if not secret:
            self.logger.error("Bakong webhook secret not configured")
            raise ValidationException(
                "Webhook signature verification failed: Bakong webhook secret not configured"
            )
        if isinstance(payload, dict):
            body = json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
        elif isinstance(payload, str):
            body = payload.encode("utf-8")
        else:
            body = payload
        expected = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
        valid = hmac.compare_digest(expected.encode("utf-8"), (signature or "").encode("utf-8"))
        if not valid:
            self.logger.warning("Bakong webhook signature verification failed")
        return valid


def _error_message(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.reason or str(response.status_code)


def _as_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)
