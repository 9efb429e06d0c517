"""
Field validation for users and contacts.

Each entity has one function that returns a list of ``FieldError``; an empty
list means the input is acceptable. Nothing here touches the store.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Mapping, Optional

EMAIL_PATTERN = re.compile(r"^\w+([.-]?\w+)*@\w+([.-]?\w+)*(\.\w{2,3})+$")
PHONE_PATTERN = re.compile(r"^(\+33|0)[1-9](\d{8})$")

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 50
PASSWORD_MIN_LENGTH = 6

CONTACT_FIELDS = ("name", "email", "phone")


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str

    def as_dict(self) -> dict:
        return {"field": self.field, "message": self.message}


def normalize_email(value: str) -> str:
    return value.strip().lower()


def _check_name(value: Optional[str], label: str) -> Optional[FieldError]:
    if value is None or not value.strip():
        return FieldError("name", f"{label} is required")
    length = len(value.strip())
    if length < NAME_MIN_LENGTH:
        return FieldError(
            "name", f"{label} must be at least {NAME_MIN_LENGTH} characters"
        )
    if length > NAME_MAX_LENGTH:
        return FieldError(
            "name", f"{label} must be at most {NAME_MAX_LENGTH} characters"
        )
    return None


def _check_email(value: Optional[str], label: str) -> Optional[FieldError]:
    if value is None or not value.strip():
        return FieldError("email", f"{label} is required")
    if not EMAIL_PATTERN.match(normalize_email(value)):
        return FieldError("email", "Please enter a valid email address")
    return None


def _check_phone(value: Optional[str]) -> Optional[FieldError]:
    if value is None or not value.strip():
        return FieldError("phone", "Phone number is required")
    if not PHONE_PATTERN.match(value.strip()):
        return FieldError("phone", "Please enter a valid French phone number")
    return None


def validate_registration(name: str, email: str, password: str) -> list[FieldError]:
    errors = [
        _check_name(name, "Name"),
        _check_email(email, "Email"),
    ]
    if len(password) < PASSWORD_MIN_LENGTH:
        errors.append(
            FieldError(
                "password",
                f"Password must be at least {PASSWORD_MIN_LENGTH} characters",
            )
        )
    return [error for error in errors if error]


def validate_profile(fields: Mapping[str, Optional[str]]) -> list[FieldError]:
    if fields.get("name") is None:
        return []
    error = _check_name(fields["name"], "Name")
    return [error] if error else []


def validate_contact(
    fields: Mapping[str, Optional[str]], *, partial: bool = False
) -> list[FieldError]:
    """
    Validate contact fields.

    With ``partial=True`` only the keys present with a non-None value are
    checked, which is what updates need.
    """
    checks = {
        "name": lambda value: _check_name(value, "Contact name"),
        "email": lambda value: _check_email(value, "Contact email"),
        "phone": _check_phone,
    }
    errors: list[FieldError] = []
    for field_name in CONTACT_FIELDS:
        value = fields.get(field_name)
        if partial and value is None:
            continue
        error = checks[field_name](value)
        if error:
            errors.append(error)
    return errors


def clean_contact_fields(fields: Mapping[str, Optional[str]]) -> dict[str, str]:
    """Return the supplied contact fields trimmed, with the email lower-cased."""
    cleaned: dict[str, str] = {}
    for field_name in CONTACT_FIELDS:
        value = fields.get(field_name)
        if value is None:
            continue
        cleaned[field_name] = (
            normalize_email(value) if field_name == "email" else value.strip()
        )
    return cleaned
