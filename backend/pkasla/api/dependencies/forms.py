# backend/pkasla/api/dependencies/forms.py
"""
Request body helpers for endpoints that take either JSON or multipart forms.

Multipart values arrive as strings; nested JSON fields are decoded and blank
values are dropped so optional fields validate the same way in both forms.
"""

import json
import logging
from typing import Any, Dict, Iterable, Tuple

from fastapi import Request
from starlette.datastructures import UploadFile

from ...core.exceptions import ValidationException
from ...services.upload_service import IncomingFile

logger = logging.getLogger(__name__)

JSON_FORM_FIELDS = {"userTemplateConfig", "salaryRange", "tags", "guests", "selectors"}


def is_multipart(request: Request) -> bool:
    return request.headers.get("content-type", "").startswith("multipart/form-data")


async def read_upload(upload: UploadFile) -> IncomingFile:
    data = await upload.read()
    await upload.close()
    return IncomingFile(
        filename=upload.filename or "upload",
        content_type=(upload.content_type or "application/octet-stream").lower(),
        data=data,
    )


def _decode_form_value(key: str, value: str) -> Any:
    if key in JSON_FORM_FIELDS:
        try:
            return json.loads(value)
        except ValueError:
            raise ValidationException(f"{key} must be valid JSON")
    return value


async def read_json_body(request: Request) -> Any:
    raw = await request.body()
    if not raw:
        return {}
    try:
        return json.loads(raw)
    except ValueError:
        raise ValidationException("Invalid JSON body")


async def read_body(
    request: Request, file_fields: Iterable[str] = ()
) -> Tuple[Dict[str, Any], Dict[str, IncomingFile]]:
    """
    Return ``(fields, files)`` for a JSON or multipart request.

    Only names listed in ``file_fields`` are collected as files; an empty
    file part counts as absent.
    """
    if not is_multipart(request):
        body = await read_json_body(request)
        if not isinstance(body, dict):
            raise ValidationException("Request body must be an object")
        return body, {}

    wanted = set(file_fields)
    fields: Dict[str, Any] = {}
    files: Dict[str, IncomingFile] = {}
    form = await request.form()
    for key, value in form.multi_items():
        if isinstance(value, UploadFile):
            if key in wanted and value.filename:
                incoming = await read_upload(value)
                if incoming.size:
                    files[key] = incoming
            continue
        if value == "":
            continue
        fields[key] = _decode_form_value(key, value)
    return fields, files
