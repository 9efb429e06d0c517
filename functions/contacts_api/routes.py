"""
HTTP routes for the contacts API.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from contacts_api.auth import AuthService
from contacts_api.contacts import DEFAULT_PAGE_SIZE, ContactService
from contacts_api.db import DbClient, UserRecord
from contacts_api.dependencies import (
    get_auth_service,
    get_contact_service,
    get_current_user,
    get_db_client,
)
from contacts_api.schemas import (
    AuthResponse,
    ContactCreateRequest,
    ContactListResponse,
    ContactResponse,
    ContactUpdateRequest,
    HealthResponse,
    LoginRequest,
    MessageResponse,
    ProfileUpdateRequest,
    RegisterRequest,
    UserResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()
auth_router = APIRouter(prefix="/auth", tags=["auth"])
contacts_router = APIRouter(prefix="/contacts", tags=["contacts"])


@router.get("/health", response_model=HealthResponse)
def health(db: DbClient = Depends(get_db_client)):
    connected = db.ping()
    return HealthResponse(
        status="ok" if connected else "degraded",
        database="connected" if connected else "disconnected",
    )


@auth_router.post("/register", response_model=AuthResponse, status_code=201)
def register(payload: RegisterRequest, auth: AuthService = Depends(get_auth_service)):
    result = auth.register(payload.name, payload.email, payload.password)
    return {
        "message": "User created",
        "data": {"user": result.user.public_profile(), "token": result.token},
    }


@auth_router.post("/login", response_model=AuthResponse)
def login(payload: LoginRequest, auth: AuthService = Depends(get_auth_service)):
    result = auth.login(payload.email, payload.password)
    return {
        "message": "Login successful",
        "data": {"user": result.user.public_profile(), "token": result.token},
    }


@auth_router.get("/me", response_model=UserResponse)
def me(user: UserRecord = Depends(get_current_user)):
    return {"data": {"user": user.public_profile()}}


@auth_router.put("/profile", response_model=UserResponse)
def update_profile(
    payload: ProfileUpdateRequest,
    user: UserRecord = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
):
    updated = auth.update_profile(user, name=payload.name)
    return {
        "message": "Profile updated",
        "data": {"user": updated.public_profile()},
    }


@contacts_router.get("", response_model=ContactListResponse)
def list_contacts(
    page: int = Query(1),
    limit: int = Query(DEFAULT_PAGE_SIZE),
    search: Optional[str] = Query(None),
    sort_by: str = Query("name", alias="sortBy"),
    sort_order: str = Query("asc", alias="sortOrder"),
    user: UserRecord = Depends(get_current_user),
    contacts: ContactService = Depends(get_contact_service),
):
    result = contacts.list(
        user,
        page=page,
        limit=limit,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return {
        "data": {
            "contacts": [contact.as_dict() for contact in result.contacts],
            "pagination": result.pagination.as_dict(),
        }
    }


@contacts_router.get("/{contact_id}", response_model=ContactResponse)
def get_contact(
    contact_id: str,
    user: UserRecord = Depends(get_current_user),
    contacts: ContactService = Depends(get_contact_service),
):
    contact = contacts.get(user, contact_id)
    return {"data": {"contact": contact.as_dict()}}


@contacts_router.post("", response_model=ContactResponse, status_code=201)
def create_contact(
    payload: ContactCreateRequest,
    user: UserRecord = Depends(get_current_user),
    contacts: ContactService = Depends(get_contact_service),
):
    contact = contacts.create(user, payload.model_dump())
    return {
        "message": "Contact created",
        "data": {"contact": contact.as_dict()},
    }


@contacts_router.put("/{contact_id}", response_model=ContactResponse)
def update_contact(
    contact_id: str,
    payload: ContactUpdateRequest,
    user: UserRecord = Depends(get_current_user),
    contacts: ContactService = Depends(get_contact_service),
):
    contact = contacts.update(user, contact_id, payload.model_dump(exclude_none=True))
    return {
        "message": "Contact updated",
        "data": {"contact": contact.as_dict()},
    }


@contacts_router.delete("/{contact_id}", response_model=MessageResponse)
def delete_contact(
    contact_id: str,
    user: UserRecord = Depends(get_current_user),
    contacts: ContactService = Depends(get_contact_service),
):
    contacts.delete(user, contact_id)
    return MessageResponse(message="Contact deleted")


router.include_router(auth_router)
router.include_router(contacts_router)
