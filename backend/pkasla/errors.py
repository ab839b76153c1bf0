# backend/pkasla/errors.py
"""Exception handlers rendering every error in the ``{success: false, message}`` envelope."""

import logging
from typing import Any, Dict, List, Optional, Tuple

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.exceptions import DomainException, RepositoryException

logger = logging.getLogger(__name__)

_LOCATION_PREFIX = {"query": "query", "path": "params", "header": "headers", "cookie": "cookies"}


def _parse_detail(detail: Any) -> Tuple[Optional[str], Optional[str], Optional[Any]]:
    if isinstance(detail, dict):
        code = detail.get("code") if isinstance(detail.get("code"), str) else None
        message = detail.get("message") or detail.get("detail")
        detail_text = message if isinstance(message, str) else None
        errors = detail.get("details") or detail.get("errors")
        return detail_text, code, errors
    if isinstance(detail, str):
        return detail, None, None
    if detail is None:
        return None, None, None
    return str(detail), None, None


def _clean_message(msg: str) -> str:
    for prefix in ("Value error, ", "Assertion failed, "):
        if msg.startswith(prefix):
            return msg[len(prefix) :]
    return msg


def flatten_validation_errors(errors: List[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Collapse pydantic error entries into ``{formErrors, fieldErrors}``.

    Body fields are keyed by their dotted path; query/path parameters are
    prefixed with ``query.`` / ``params.``.
    """
    form_errors: List[str] = []
    field_errors: Dict[str, List[str]] = {}
    for err in errors:
        loc = [str(part) for part in err.get("loc", ())]
        message = _clean_message(str(err.get("msg", "Invalid value")))
        if loc and loc[0] == "body":
            loc = loc[1:]
        elif loc and loc[0] in _LOCATION_PREFIX:
            loc = [_LOCATION_PREFIX[loc[0]]] + loc[1:]
        if not loc:
            form_errors.append(message)
            continue
        field_errors.setdefault(".".join(loc), []).append(message)
    return {"formErrors": form_errors, "fieldErrors": field_errors}


def _validation_response(errors: List[Dict[str, Any]]) -> JSONResponse:
    return JSONResponse(
        {
            "success": False,
            "message": "Validation error",
            "errors": flatten_validation_errors(errors),
        },
        status_code=400,
    )


def _http_error_response(status_code: int, detail: Any, headers: Any = None) -> JSONResponse:
    detail_text, code, errors = _parse_detail(detail)
    body: Dict[str, Any] = {"success": False, "message": detail_text or "Request failed"}
    if code:
        body["error"] = code
    if errors is not None:
        body["errors"] = jsonable_encoder(errors)
    return JSONResponse(body, status_code=status_code, headers=headers)


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(DomainException)
    async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(f"{exc.__class__.__name__} on {request.url.path}: {exc.message}")
        return JSONResponse(jsonable_encoder(exc.to_dict()), status_code=exc.status_code)

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        return _http_error_response(exc.status_code, exc.detail, exc.headers)

    @app.exception_handler(StarletteHTTPException)
    async def starlette_http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        detail = exc.detail
        if exc.status_code == 404 and detail == "Not Found":
            detail = f"Route {request.method} {request.url.path} not found"
        return _http_error_response(exc.status_code, detail, getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def request_validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return _validation_response(list(exc.errors()))

    @app.exception_handler(ValidationError)
    async def validation_exception_handler(request: Request, exc: ValidationError) -> JSONResponse:
        return _validation_response(list(exc.errors()))

    @app.exception_handler(RepositoryException)
    async def repository_exception_handler(
        request: Request, exc: RepositoryException
    ) -> JSONResponse:
        logger.error(f"Repository failure on {request.url.path}: {exc}")
        return JSONResponse({"success": False, "message": "Internal server error"}, status_code=500)

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse({"success": False, "message": "Internal server error"}, status_code=500)
