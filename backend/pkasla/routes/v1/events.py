# backend/pkasla/routes/v1/events.py
"""
Event routes - API v1

Endpoints:
    GET    /                         → Filtered, paginated events
    GET    /my                       → Events hosted by the current user
    GET    /categories               → Known event types
    GET    /type/{event_type}        → Events of one type
    GET    /qr/{token}               → Event behind a public QR token
    GET    /{event_id}               → One event
    POST   /                         → Create (JSON or multipart with images)
    PATCH  /{event_id}               → Update (host only)
    DELETE /{event_id}               → Delete (host only)
    POST   /{event_id}/qr-code/generate → New public QR token
"""

from datetime import datetime
import logging
from typing import Dict, Optional

from fastapi import APIRouter, Depends, Query, Request, status

from ...api.dependencies.auth import get_current_user
from ...api.dependencies.forms import read_body
from ...api.dependencies.services import get_event_service, get_upload_service
from ...models.user import User
from ...schemas.base import build_success_response, dump
from ...schemas.event import EventCreate, EventResponse, EventUpdate
from ...services.event_service import EventService
from ...services.upload_service import IncomingFile, UploadService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["events"])

# multipart field name -> model attribute
IMAGE_FIELDS = {"coverImage": "cover_image", "khqrUsd": "khqr_usd", "khqrKhr": "khqr_khr"}
EVENT_UPLOAD_FOLDER = "events"


def _store_images(
    fields: Dict[str, object],
    files: Dict[str, IncomingFile],
    owner: User,
    uploads: UploadService,
) -> None:
    for form_name, incoming in files.items():
        fields[form_name] = uploads.store_image_field(owner, incoming, EVENT_UPLOAD_FOLDER)


@router.get("")
def list_events(
    host_id: Optional[str] = Query(None, alias="hostId"),
    event_status: Optional[str] = Query(None, alias="status"),
    event_type: Optional[str] = Query(None, alias="eventType"),
    search: Optional[str] = None,
    date_from: Optional[datetime] = Query(None, alias="dateFrom"),
    date_to: Optional[datetime] = Query(None, alias="dateTo"),
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100, alias="pageSize"),
    events: EventService = Depends(get_event_service),
):
    result = events.list_events(
        page=page,
        page_size=page_size,
        host_id=host_id,
        status=event_status,
        event_type=event_type,
        search=search,
        date_from=date_from,
        date_to=date_to,
    )
    result["items"] = dump(EventResponse, result["items"])
    return build_success_response(result)


@router.get("/my")
def list_my_events(
    current_user: User = Depends(get_current_user),
    events: EventService = Depends(get_event_service),
):
    return build_success_response(dump(EventResponse, events.list_for_host(current_user.id)))


@router.get("/categories")
def list_categories():
    return build_success_response(EventService.get_categories())


@router.get("/type/{event_type}")
def list_events_by_type(
    event_type: str,
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100, alias="pageSize"),
    events: EventService = Depends(get_event_service),
):
    result = events.list_by_type(event_type, page=page, page_size=page_size)
    result["items"] = dump(EventResponse, result["items"])
    return build_success_response(result)


@router.get("/qr/{token}")
def get_event_by_qr_token(token: str, events: EventService = Depends(get_event_service)):
    return build_success_response(EventResponse.model_validate(events.get_by_qr_token(token)))


@router.get("/{event_id}")
def get_event(event_id: str, events: EventService = Depends(get_event_service)):
    return build_success_response(EventResponse.model_validate(events.get_event(event_id)))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_event(
    request: Request,
    current_user: User = Depends(get_current_user),
    events: EventService = Depends(get_event_service),
    uploads: UploadService = Depends(get_upload_service),
):
    fields, files = await read_body(request, IMAGE_FIELDS)
    _store_images(fields, files, current_user, uploads)
    data = EventCreate.model_validate(fields)
    event = events.create_event(data, current_user)
    return build_success_response(EventResponse.model_validate(event), "Event created")


@router.patch("/{event_id}")
async def update_event(
    event_id: str,
    request: Request,
    current_user: User = Depends(get_current_user),
    events: EventService = Depends(get_event_service),
    uploads: UploadService = Depends(get_upload_service),
):
    fields, files = await read_body(request, IMAGE_FIELDS)
    # ownership is checked before any file is stored
    event = events.get_event(event_id)
    if event.host_id == current_user.id:
        _store_images(fields, files, current_user, uploads)
    changes = EventUpdate.model_validate(fields).model_dump(exclude_unset=True)
    event = events.update_event(event_id, changes, current_user)
    return build_success_response(EventResponse.model_validate(event), "Event updated")


@router.delete("/{event_id}")
def delete_event(
    event_id: str,
    current_user: User = Depends(get_current_user),
    events: EventService = Depends(get_event_service),
):
    events.delete_event(event_id, current_user)
    return build_success_response(None, "Event deleted")


@router.post("/{event_id}/qr-code/generate")
def generate_qr_code(
    event_id: str,
    current_user: User = Depends(get_current_user),
    events: EventService = Depends(get_event_service),
):
    token = events.generate_qr_token(event_id, current_user)
    return build_success_response({"token": token, "eventId": event_id}, "QR code generated")
