# backend/pkasla/services/guest_service.py
"""
Guest Service for the PKASLA platform

Guests belong to one event; only the event's host may add, change or
remove them. Each guest gets a personal invite token, and an event's
public QR token lets people add themselves.
"""

import csv
import io
import logging
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError
from sqlalchemy.orm import Session

from ..core.exceptions import (
    ConflictException,
    DomainException,
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from ..models.event import Event
from ..models.guest import Guest, GuestStatus
from ..models.user import User
from ..repositories.factory import RepositoryFactory
from ..schemas.guest import GuestCreate, JoinByQRRequest
from .base import BaseService
from .cache_service import CacheService
from .event_service import EventService, generate_public_token

logger = logging.getLogger(__name__)

CSV_COLUMNS = ("name", "email", "phone", "occupation", "notes", "tag", "address", "province")


def _first_validation_message(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid row"
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()))
    message = str(first.get("msg", "Invalid value")).replace("Value error, ", "")
    return f"{field}: {message}" if field else message


def parse_guest_csv(content: str) -> List[Dict[str, str]]:
    """
    Read guest rows from CSV text with a header line.

    Header names are matched case-insensitively; unknown columns are ignored.
    """
    reader = csv.DictReader(io.StringIO(content.lstrip("\ufeff")))
    rows: List[Dict[str, str]] = []
    for raw in reader:
        row = {
            (key or "").strip().lower(): (value or "").strip()
            for key, value in raw.items()
            if key is not None
        }
        if not any(row.values()):
            continue
        rows.append({column: row[column] for column in CSV_COLUMNS if row.get(column)})
    return rows


class GuestService(BaseService):
    def __init__(self, db: Session, cache: Optional[CacheService] = None):
        super().__init__(db, cache)
        self.repository = RepositoryFactory.create_guest_repository(db)
        self.events = EventService(db, cache)

    def get_guest(self, guest_id: str) -> Guest:
        guest = self.repository.get_by_id(guest_id)
        if not guest:
            raise NotFoundException("Guest not found")
        return guest

    def _check_duplicates(
        self,
        event: Event,
        *,
        name: Optional[str],
        email: Optional[str],
        phone: Optional[str],
        exclude_id: Optional[str] = None,
    ) -> None:
        if email and self.repository.find_in_event_by_email(event.id, email, exclude_id):
            raise ConflictException("Guest with this email already exists for this event")
        if phone and self.repository.find_in_event_by_phone(event.id, phone, exclude_id):
            raise ConflictException("Guest with this phone number already exists for this event")
        if (
            name
            and event.restrict_duplicate_names
            and self.repository.find_in_event_by_name(event.id, name, exclude_id)
        ):
            raise ConflictException("Guest with this name already exists for this event")

    def _insert(self, event: Event, fields: Dict[str, Any], created_by: Optional[str]) -> Guest:
        self._check_duplicates(
            event, name=fields.get("name"), email=fields.get("email"), phone=fields.get("phone")
        )
        with self.transaction():
            guest = self.repository.create(
                created_by=created_by,
                invite_token=generate_public_token(),
                **fields,
            )
            self.events.adjust_guest_count(event, 1)
        return guest

    @BaseService.measure_operation("create_guest")
    def create_guest(self, data: GuestCreate, host: User) -> Guest:
        event = self.events.get_event(data.event_id)
        if event.host_id != host.id:
            raise ForbiddenException("You can only add guests to your own events")
        guest = self._insert(event, data.model_dump(), created_by=host.id)
        self.logger.info(f"Guest {guest.id} added to event {event.id}")
        return guest

    @BaseService.measure_operation("create_guests_bulk")
    def create_bulk(
        self, event_id: str, rows: List[Dict[str, Any]], host: User
    ) -> Tuple[List[Guest], List[str]]:
        """
        Create one guest per row, collecting per-row failures.

        Fails as a whole only when no row could be created.
        """
        created: List[Guest] = []
        errors: List[str] = []
        for index, row in enumerate(rows, start=1):
            try:
                data = GuestCreate.model_validate({**row, "eventId": event_id})
                created.append(self.create_guest(data, host))
            except ValidationError as exc:
                errors.append(f"Row {index}: {_first_validation_message(exc)}")
            except DomainException as exc:
                errors.append(f"Row {index}: {exc.message}")

        if not created and errors:
            raise ValidationException(f"Failed to create guests: {'; '.join(errors)}")
        return created, errors

    @BaseService.measure_operation("join_event_by_qr")
    def join_by_qr(self, token: str, data: JoinByQRRequest, user: Optional[User] = None) -> Guest:
        event = self.events.repository.get_by_qr_token(token)
        if not event:
            raise NotFoundException("Invalid or expired QR code")
        fields = {
            "name": data.name.strip(),
            "email": data.email.lower() if data.email else None,
            "phone": data.phone,
            "event_id": event.id,
            "user_id": user.id if user else None,
            "status": GuestStatus.PENDING.value,
        }
        guest = self._insert(event, fields, created_by=None)
        self.logger.info(f"Guest {guest.id} joined event {event.id} by QR code")
        return guest

    @BaseService.measure_operation("update_guest")
    def update_guest(self, guest_id: str, changes: Dict[str, Any], host: User) -> Guest:
        guest = self.get_guest(guest_id)
        event = self.events.get_event(guest.event_id)
        if event.host_id != host.id:
            raise ForbiddenException("You can only update guests for your own events")

        self._check_duplicates(
            event,
            name=changes.get("name"),
            email=changes.get("email"),
            phone=changes.get("phone"),
            exclude_id=guest.id,
        )
        with self.transaction():
            for key, value in changes.items():
                setattr(guest, key, value)
        return guest

    @BaseService.measure_operation("delete_guest")
    def delete_guest(self, guest_id: str, host: User) -> None:
        guest = self.get_guest(guest_id)
        event = self.events.get_event(guest.event_id)
        if event.host_id != host.id:
            raise ForbiddenException("You can only delete guests from your own events")
        with self.transaction():
            self.repository.delete(guest.id)
            self.events.adjust_guest_count(event, -1)
        self.logger.info(f"Guest {guest_id} removed from event {event.id}")

    @BaseService.measure_operation("regenerate_invite_token")
    def regenerate_token(self, guest_id: str, host: User) -> str:
        guest = self.get_guest(guest_id)
        event = self.events.get_event(guest.event_id)
        if event.host_id != host.id:
            raise ForbiddenException("You can only regenerate tokens for your own event guests")
        token = generate_public_token()
        with self.transaction():
            guest.invite_token = token
        return token

    def get_by_invite_token(self, token: str) -> Guest:
        guest = self.repository.get_by_invite_token(token)
        if not guest:
            raise NotFoundException("Invitation not found")
        return guest

    @BaseService.measure_operation("list_guests")
    def list_guests(self, *, page: int = 1, page_size: int = 10, **filters: Any) -> Dict[str, Any]:
        items, total = self.repository.list_guests(
            skip=(page - 1) * page_size, limit=page_size, **filters
        )
        return {"items": items, "total": total, "page": page, "pageSize": page_size}

    def list_for_event(self, event_id: str) -> List[Guest]:
        items, _ = self.repository.list_guests(event_id=event_id, skip=0, limit=10000)
        return items

    def list_for_user(self, user_id: str, event_id: Optional[str] = None) -> List[Guest]:
        """Guests linked to ``user_id``, i.e. the invitations that user holds."""
        items, _ = self.repository.list_guests(
            user_id=user_id, event_id=event_id, skip=0, limit=10000
        )
        return items
