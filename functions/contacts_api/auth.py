"""
Registration, login and token verification.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from contacts_api.config import Settings
from contacts_api.db import DbClient, StoreError, StoreErrorKind, UserRecord
from contacts_api.errors import (
    AccountDisabled,
    ConflictError,
    InvalidCredentials,
    UserNotFound,
    ValidationError,
)
from contacts_api.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from contacts_api.validation import (
    normalize_email,
    validate_profile,
    validate_registration,
)

logger = logging.getLogger(__name__)

EMAIL_TAKEN_MESSAGE = "A user with this email already exists"


@dataclass
class AuthResult:
    user: UserRecord
    token: str


class AuthService:
    def __init__(self, db: DbClient, settings: Settings):
        self.db = db
        self.settings = settings

    def register(
        self,
        name: Optional[str],
        email: Optional[str],
        password: Optional[str],
    ) -> AuthResult:
        if not name or not email or not password:
            raise ValidationError("All fields are required")
        errors = validate_registration(name, email, password)
        if errors:
            raise ValidationError(errors=errors)

        email = normalize_email(email)
        if self.db.get_user_by_email(email):
            raise ConflictError(EMAIL_TAKEN_MESSAGE)
        try:
            user = self.db.create_user(name.strip(), email, hash_password(password))
        except StoreError as exc:
            # Lost a race against a concurrent registration.
            if exc.kind is StoreErrorKind.DUPLICATE:
                raise ConflictError(EMAIL_TAKEN_MESSAGE) from exc
            raise

        logger.info("Registered user %s", user.user_id)
        return AuthResult(user=user, token=create_access_token(user.user_id, self.settings))

    def login(self, email: Optional[str], password: Optional[str]) -> AuthResult:
        if not email or not password:
            raise ValidationError("Email and password are required")

        user = self.db.get_user_by_email(normalize_email(email))
        if not user or not verify_password(password, user.password_hash):
            logger.info("Rejected login: bad credentials")
            raise InvalidCredentials()
        if not user.is_active:
            logger.info("Rejected login for disabled user %s", user.user_id)
            raise AccountDisabled()

        logger.info("User %s logged in", user.user_id)
        return AuthResult(user=user, token=create_access_token(user.user_id, self.settings))

    def verify_token(self, token: str) -> UserRecord:
        user_id = decode_access_token(token, self.settings)
        user = self.db.get_user(user_id)
        if not user:
            raise UserNotFound()
        if not user.is_active:
            raise AccountDisabled()
        return user

    def update_profile(self, user: UserRecord, name: Optional[str] = None) -> UserRecord:
        if not name:
            return user
        errors = validate_profile({"name": name})
        if errors:
            raise ValidationError(errors=errors)
        updated = self.db.update_user(user.user_id, name=name.strip())
        if not updated:
            raise UserNotFound()
        return updated
