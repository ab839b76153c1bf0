# backend/pkasla/routes/v1/guests.py
"""
Guest routes - API v1

Endpoints:
    GET    /                          → Guests (admin: all; hosts: their events)
    GET    /my                        → Invitations held by the current user
    GET    /event/{event_id}          → Guests of one event (host only)
    GET    /invite/{invite_token}     → Invitation with its event (public)
    POST   /qr/{token}/join           → Public self-registration by event QR
    GET    /{guest_id}                → One guest
    POST   /                          → Add a guest
    POST   /bulk                      → CSV upload or JSON list of guests
    POST   /{guest_id}/regenerate-token
    PATCH  /{guest_id}
    DELETE /{guest_id}
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status

from ...api.dependencies.auth import get_current_user, get_current_user_optional
from ...api.dependencies.forms import read_body
from ...api.dependencies.services import get_event_service, get_guest_service
from ...core.exceptions import ForbiddenException, ValidationException
from ...models.user import User, UserRole
from ...schemas.base import build_success_response, dump
from ...schemas.guest import (
    GuestBulkCreate,
    GuestCreate,
    GuestResponse,
    GuestUpdate,
    InvitationResponse,
    JoinByQRRequest,
)
from ...services.event_service import EventService
from ...services.guest_service import GuestService, parse_guest_csv

logger = logging.getLogger(__name__)

router = APIRouter(tags=["guests"])

CSV_FILE_FIELD = "file"


def _is_admin(user: User) -> bool:
    return user.role == UserRole.ADMIN.value


@router.get("")
def list_guests(
    event_id: Optional[str] = Query(None, alias="eventId"),
    user_id: Optional[str] = Query(None, alias="userId"),
    guest_status: Optional[str] = Query(None, alias="status"),
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100, alias="pageSize"),
    current_user: User = Depends(get_current_user),
    guests: GuestService = Depends(get_guest_service),
    events: EventService = Depends(get_event_service),
):
    event_ids = None
    if not _is_admin(current_user):
        event_ids = [event.id for event in events.list_for_host(current_user.id)]
    result = guests.list_guests(
        page=page,
        page_size=page_size,
        event_id=event_id,
        event_ids=event_ids,
        user_id=user_id,
        status=guest_status,
        search=search,
    )
    result["items"] = dump(GuestResponse, result["items"])
    return build_success_response(result)


@router.get("/my")
def list_my_invitations(
    event_id: Optional[str] = Query(None, alias="eventId"),
    current_user: User = Depends(get_current_user),
    guests: GuestService = Depends(get_guest_service),
):
    items = guests.list_for_user(current_user.id, event_id=event_id)
    return build_success_response(dump(InvitationResponse, items))


@router.get("/event/{event_id}")
def list_event_guests(
    event_id: str,
    current_user: User = Depends(get_current_user),
    guests: GuestService = Depends(get_guest_service),
    events: EventService = Depends(get_event_service),
):
    event = events.get_event(event_id)
    if event.host_id != current_user.id and not _is_admin(current_user):
        raise ForbiddenException("You can only view guests of your own events")
    return build_success_response(dump(GuestResponse, guests.list_for_event(event_id)))


@router.get("/invite/{invite_token}")
def get_invitation(invite_token: str, guests: GuestService = Depends(get_guest_service)):
    guest = guests.get_by_invite_token(invite_token)
    return build_success_response(InvitationResponse.model_validate(guest))


@router.post("/qr/{token}/join", status_code=status.HTTP_201_CREATED)
def join_by_qr(
    token: str,
    payload: JoinByQRRequest,
    current_user: Optional[User] = Depends(get_current_user_optional),
    guests: GuestService = Depends(get_guest_service),
):
    guest = guests.join_by_qr(token, payload, current_user)
    return build_success_response(GuestResponse.model_validate(guest), "Joined event")


@router.get("/{guest_id}")
def get_guest(
    guest_id: str,
    current_user: User = Depends(get_current_user),
    guests: GuestService = Depends(get_guest_service),
):
    guest = guests.get_guest(guest_id)
    if (
        guest.event.host_id != current_user.id
        and guest.user_id != current_user.id
        and not _is_admin(current_user)
    ):
        raise ForbiddenException("You can only view guests of your own events")
    return build_success_response(GuestResponse.model_validate(guest))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_guest(
    payload: GuestCreate,
    current_user: User = Depends(get_current_user),
    guests: GuestService = Depends(get_guest_service),
):
    guest = guests.create_guest(payload, current_user)
    return build_success_response(GuestResponse.model_validate(guest), "Guest created")


@router.post("/bulk", status_code=status.HTTP_201_CREATED)
async def create_guests_bulk(
    request: Request,
    current_user: User = Depends(get_current_user),
    guests: GuestService = Depends(get_guest_service),
):
    fields, files = await read_body(request, [CSV_FILE_FIELD])
    if CSV_FILE_FIELD in files:
        event_id = fields.get("eventId") or fields.get("event_id")
        if not event_id:
            raise ValidationException("eventId is required")
        try:
            content = files[CSV_FILE_FIELD].data.decode("utf-8")
        except UnicodeDecodeError:
            raise ValidationException("CSV file must be UTF-8 encoded")
        rows = parse_guest_csv(content)
        if not rows:
            raise ValidationException("CSV file contains no guests")
    else:
        data = GuestBulkCreate.model_validate(fields)
        event_id, rows = data.event_id, data.guests

    created, errors = guests.create_bulk(event_id, rows, current_user)
    return build_success_response(
        {"created": dump(GuestResponse, created), "count": len(created), "errors": errors},
        f"{len(created)} guests created",
    )


@router.post("/{guest_id}/regenerate-token")
def regenerate_invite_token(
    guest_id: str,
    current_user: User = Depends(get_current_user),
    guests: GuestService = Depends(get_guest_service),
):
    token = guests.regenerate_token(guest_id, current_user)
    return build_success_response({"inviteToken": token}, "Invite token regenerated")


@router.patch("/{guest_id}")
def update_guest(
    guest_id: str,
    payload: GuestUpdate,
    current_user: User = Depends(get_current_user),
    guests: GuestService = Depends(get_guest_service),
):
    guest = guests.update_guest(guest_id, payload.model_dump(exclude_unset=True), current_user)
    return build_success_response(GuestResponse.model_validate(guest), "Guest updated")


@router.delete("/{guest_id}")
def delete_guest(
    guest_id: str,
    current_user: User = Depends(get_current_user),
    guests: GuestService = Depends(get_guest_service),
):
    guests.delete_guest(guest_id, current_user)
    return build_success_response(None, "Guest deleted")
