"""
Dependency wiring for the FastAPI app.

The store handle lives on ``app.state`` (created with the app, closed at
shutdown) and is handed to the services per request.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from contacts_api.auth import AuthService
from contacts_api.config import Settings
from contacts_api.contacts import ContactService
from contacts_api.db import DbClient, UserRecord
from contacts_api.errors import ApiError, AuthenticationError

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_db_client(request: Request) -> DbClient:
    return request.app.state.db


def get_auth_service(
    db: DbClient = Depends(get_db_client),
    settings: Settings = Depends(get_app_settings),
) -> AuthService:
    return AuthService(db, settings)


def get_contact_service(db: DbClient = Depends(get_db_client)) -> ContactService:
    return ContactService(db)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth: AuthService = Depends(get_auth_service),
) -> UserRecord:
    """Required mode: reject the request with 401 unless the bearer token resolves."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Token required")
    return auth.verify_token(credentials.credentials)


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth: AuthService = Depends(get_auth_service),
) -> Optional[UserRecord]:
    """Optional mode: any token problem just leaves the request anonymous."""
    if credentials is None or not credentials.credentials:
        return None
    try:
        return auth.verify_token(credentials.credentials)
    except ApiError as exc:
        logger.debug("Ignoring unusable token: %s", exc.message)
        return None
