"""
R2StorageClient - Cloudflare R2 (S3-compatible) client

SigV4 query-string presigning for GET/PUT/DELETE plus helpers that move
bytes through those presigned URLs with requests.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
import hashlib
import hmac
import logging
from typing import Dict, Optional
from urllib.parse import quote

import requests

from ..core.config import settings
from ..core.exceptions import BadGatewayException, ServiceException

logger = logging.getLogger(__name__)

_UNSIGNED_PAYLOAD = "UNSIGNED-PAYLOAD"


def _hmac(key: bytes, msg: str) -> bytes:
    return hmac.new(key, msg.encode("utf-8"), hashlib.sha256).digest()


def _canonical_query(params: Dict[str, str]) -> str:
    return "&".join(
        f"{quote(k, safe='-_.~')}={quote(str(params[k]), safe='-_.~')}" for k in sorted(params)
    )


@dataclass
class PresignedUrl:
    url: str
    headers: Dict[str, str]
    expires_at: str


class R2StorageClient:
    """Presigned access to one R2 bucket."""

    region = "auto"
    service = "s3"
    algorithm = "AWS4-HMAC-SHA256"

    def __init__(self, timeout: int = 30) -> None:
        if not settings.r2_configured:
            raise ServiceException("R2 storage not configured")

        self.account_id = settings.r2_account_id
        self.access_key_id = settings.r2_access_key_id
        self.secret_key = settings.r2_secret_access_key.get_secret_value()
        self.bucket_name = settings.r2_bucket_name
        self.public_base_url = settings.r2_public_url.rstrip("/")
        self.host = f"{self.account_id}.r2.cloudflarestorage.com"
        self.timeout = timeout

    def _signing_key(self, datestamp: str) -> bytes:
        k_date = _hmac(("AWS4" + self.secret_key).encode("utf-8"), datestamp)
        k_region = _hmac(k_date, self.region)
        k_service = _hmac(k_region, self.service)
        return _hmac(k_service, "aws4_request")

    def presign(
        self,
        method: str,
        object_key: str,
        expires_seconds: int,
        content_type: Optional[str] = None,
    ) -> PresignedUrl:
        now = datetime.now(timezone.utc)
        amz_date = now.strftime("%Y%m%dT%H%M%SZ")
        datestamp = now.strftime("%Y%m%d")

        canonical_uri = "/" + quote(f"{self.bucket_name}/{object_key}", safe="/-_.~")
        credential_scope = f"{datestamp}/{self.region}/{self.service}/aws4_request"
        params: Dict[str, str] = {
            "X-Amz-Algorithm": self.algorithm,
            "X-Amz-Credential": f"{self.access_key_id}/{credential_scope}",
            "X-Amz-Date": amz_date,
            "X-Amz-Expires": str(expires_seconds),
            "X-Amz-SignedHeaders": "host",
        }
        canonical_querystring = _canonical_query(params)
        canonical_request = "\n".join(
            [
                method.upper(),
                canonical_uri,
                canonical_querystring,
                f"host:{self.host}\n",
                "host",
                _UNSIGNED_PAYLOAD,
            ]
        )
        string_to_sign = "\n".join(
            [
                self.algorithm,
                amz_date,
                credential_scope,
                hashlib.sha256(canonical_request.encode("utf-8")).hexdigest(),
            ]
        )
        signature = hmac.new(
            self._signing_key(datestamp), string_to_sign.encode("utf-8"), hashlib.sha256
        ).hexdigest()

        url = f"https://{self.host}{canonical_uri}?{canonical_querystring}&X-Amz-Signature={signature}"
        expires_at = (now + timedelta(seconds=expires_seconds)).replace(microsecond=0).isoformat()
        headers = {"Content-Type": content_type} if content_type else {}
        return PresignedUrl(url=url, headers=headers, expires_at=expires_at)

    def public_url(self, object_key: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url}/{object_key}"
        return f"https://{self.bucket_name}.{self.host}/{object_key}"

    def upload_bytes(self, object_key: str, data: bytes, content_type: str) -> str:
        pre = self.presign("PUT", object_key, 300, content_type=content_type)
        try:
            resp = requests.put(pre.url, data=data, headers=pre.headers, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Failed to upload {object_key}: {e}")
            raise BadGatewayException(f"Failed to upload file to storage: {e}")
        if not 200 <= resp.status_code < 300:
            logger.error(f"R2 rejected upload of {object_key}: status={resp.status_code}")
            raise BadGatewayException(f"Storage rejected upload (status {resp.status_code})")
        return self.public_url(object_key)

    def delete_object(self, object_key: str) -> bool:
        pre = self.presign("DELETE", object_key, 300)
        try:
            resp = requests.delete(pre.url, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Failed to delete {object_key}: {e}")
            return False
        return 200 <= resp.status_code < 300 or resp.status_code == 404
