"""
Owner-scoped contact operations.

Every lookup is keyed on (owner, contact id). A contact owned by someone else
is reported exactly like a missing one, so ids do not leak across users.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

from contacts_api.db import (
    ContactRecord,
    DbClient,
    StoreError,
    StoreErrorKind,
    UserRecord,
)
from contacts_api.errors import ConflictError, NotFoundError, ValidationError
from contacts_api.validation import (
    FieldError,
    clean_contact_fields,
    validate_contact,
)

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

# Query parameter name -> store column.
SORT_FIELDS = {
    "name": "name",
    "email": "email",
    "phone": "phone",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
}

CONTACT_NOT_FOUND = "Contact not found"
EMAIL_TAKEN_MESSAGE = "A contact with this email already exists"


@dataclass
class Pagination:
    current_page: int
    limit: int
    total_pages: int
    total_contacts: int
    has_next: bool
    has_prev: bool

    @classmethod
    def compute(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(
            current_page=page,
            limit=limit,
            total_pages=math.ceil(total / limit),
            total_contacts=total,
            has_next=page * limit < total,
            has_prev=page > 1,
        )

    def as_dict(self) -> dict:
        return {
            "currentPage": self.current_page,
            "limit": self.limit,
            "totalPages": self.total_pages,
            "totalContacts": self.total_contacts,
            "hasNext": self.has_next,
            "hasPrev": self.has_prev,
        }


@dataclass
class ContactPage:
    contacts: list[ContactRecord]
    pagination: Pagination


class ContactService:
    def __init__(self, db: DbClient):
        self.db = db

    def list(
        self,
        user: UserRecord,
        *,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
        search: Optional[str] = None,
        sort_by: str = "name",
        sort_order: str = "asc",
    ) -> ContactPage:
        errors = []
        if page < 1:
            errors.append(FieldError("page", "Page must be at least 1"))
        if not 1 <= limit <= MAX_PAGE_SIZE:
            errors.append(
                FieldError("limit", f"Limit must be between 1 and {MAX_PAGE_SIZE}")
            )
        if sort_by not in SORT_FIELDS:
            errors.append(
                FieldError(
                    "sortBy", f"Sort field must be one of {', '.join(SORT_FIELDS)}"
                )
            )
        if errors:
            raise ValidationError(errors=errors)

        search = search or None
        contacts = self.db.list_contacts(
            user.user_id,
            search=search,
            sort_by=SORT_FIELDS[sort_by],
            descending=sort_order == "desc",
            offset=(page - 1) * limit,
            limit=limit,
        )
        total = self.db.count_contacts(user.user_id, search=search)
        return ContactPage(
            contacts=contacts, pagination=Pagination.compute(page, limit, total)
        )

    def get(self, user: UserRecord, contact_id: str) -> ContactRecord:
        contact = self.db.get_contact(user.user_id, contact_id)
        if not contact:
            raise NotFoundError(CONTACT_NOT_FOUND)
        return contact

    def create(self, user: UserRecord, fields: dict) -> ContactRecord:
        errors = validate_contact(fields)
        if errors:
            raise ValidationError(errors=errors)
        cleaned = clean_contact_fields(fields)
        try:
            contact = self.db.create_contact(
                user.user_id, cleaned["name"], cleaned["email"], cleaned["phone"]
            )
        except StoreError as exc:
            if exc.kind is StoreErrorKind.DUPLICATE:
                raise ConflictError(EMAIL_TAKEN_MESSAGE) from exc
            raise
        logger.info("User %s created contact %s", user.user_id, contact.contact_id)
        return contact

    def update(self, user: UserRecord, contact_id: str, fields: dict) -> ContactRecord:
        # Check ownership first so a malformed body on someone else's id
        # still reads as 404.
        self.get(user, contact_id)
        errors = validate_contact(fields, partial=True)
        if errors:
            raise ValidationError(errors=errors)
        try:
            contact = self.db.update_contact(
                user.user_id, contact_id, clean_contact_fields(fields)
            )
        except StoreError as exc:
            if exc.kind is StoreErrorKind.DUPLICATE:
                raise ConflictError(EMAIL_TAKEN_MESSAGE) from exc
            raise
        if not contact:
            raise NotFoundError(CONTACT_NOT_FOUND)
        logger.info("User %s updated contact %s", user.user_id, contact_id)
        return contact

    def delete(self, user: UserRecord, contact_id: str) -> None:
        if not self.db.delete_contact(user.user_id, contact_id):
            raise NotFoundError(CONTACT_NOT_FOUND)
        logger.info("User %s deleted contact %s", user.user_id, contact_id)
