# backend/pkasla/routes/v1/gifts.py
"""
Gift routes - API v1, mounted under /guests/gifts

Endpoints:
    GET    /                     → Gifts filtered by guest, event, method, currency
    GET    /guest/{guest_id}     → Gifts of one guest
    GET    /event/{event_id}     → Gifts of one event with per-currency totals
    GET    /{gift_id}
    POST   /                     → Record a gift (JSON or multipart with receiptImage)
    PATCH  /{gift_id}
    DELETE /{gift_id}
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status

from ...api.dependencies.auth import get_current_user
from ...api.dependencies.forms import read_body
from ...api.dependencies.services import get_gift_service, get_upload_service
from ...models.user import User
from ...schemas.base import build_success_response, dump
from ...schemas.gift import GiftCreate, GiftResponse, GiftUpdate
from ...services.gift_service import GiftService
from ...services.upload_service import UploadService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["gifts"])

RECEIPT_FIELD = "receiptImage"
RECEIPT_FOLDER = "receipts"


@router.get("")
def list_gifts(
    guest_id: Optional[str] = Query(None, alias="guestId"),
    event_id: Optional[str] = Query(None, alias="eventId"),
    payment_method: Optional[str] = Query(None, alias="paymentMethod"),
    currency: Optional[str] = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100, alias="pageSize"),
    _user: User = Depends(get_current_user),
    gifts: GiftService = Depends(get_gift_service),
):
    result = gifts.list_gifts(
        page=page,
        page_size=page_size,
        guest_id=guest_id,
        event_id=event_id,
        payment_method=payment_method,
        currency=currency,
    )
    result["items"] = dump(GiftResponse, result["items"])
    return build_success_response(result)


@router.get("/guest/{guest_id}")
def list_guest_gifts(
    guest_id: str,
    _user: User = Depends(get_current_user),
    gifts: GiftService = Depends(get_gift_service),
):
    return build_success_response(dump(GiftResponse, gifts.list_for_guest(guest_id)))


@router.get("/event/{event_id}")
def list_event_gifts(
    event_id: str,
    _user: User = Depends(get_current_user),
    gifts: GiftService = Depends(get_gift_service),
):
    result = gifts.list_for_event(event_id)
    result["items"] = dump(GiftResponse, result["items"])
    return build_success_response(result)


@router.get("/{gift_id}")
def get_gift(
    gift_id: str,
    _user: User = Depends(get_current_user),
    gifts: GiftService = Depends(get_gift_service),
):
    return build_success_response(GiftResponse.model_validate(gifts.get_gift(gift_id)))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_gift(
    request: Request,
    current_user: User = Depends(get_current_user),
    gifts: GiftService = Depends(get_gift_service),
    uploads: UploadService = Depends(get_upload_service),
):
    fields, files = await read_body(request, [RECEIPT_FIELD])
    data = GiftCreate.model_validate(fields)
    if RECEIPT_FIELD in files:
        data.receipt_image = uploads.store_image_field(
            current_user, files[RECEIPT_FIELD], RECEIPT_FOLDER
        )
    gift = gifts.create_gift(data, current_user)
    return build_success_response(GiftResponse.model_validate(gift), "Gift recorded")


@router.patch("/{gift_id}")
def update_gift(
    gift_id: str,
    payload: GiftUpdate,
    current_user: User = Depends(get_current_user),
    gifts: GiftService = Depends(get_gift_service),
):
    gift = gifts.update_gift(gift_id, payload.model_dump(exclude_unset=True), current_user)
    return build_success_response(GiftResponse.model_validate(gift), "Gift updated")


@router.delete("/{gift_id}")
def delete_gift(
    gift_id: str,
    current_user: User = Depends(get_current_user),
    gifts: GiftService = Depends(get_gift_service),
):
    gifts.delete_gift(gift_id, current_user)
    return build_success_response(None, "Gift deleted")
