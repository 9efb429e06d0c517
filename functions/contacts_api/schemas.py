"""
Pydantic schemas for the contacts API.

Request bodies accept every field as optional; presence and format checks
happen in ``contacts_api.validation`` so error messages stay uniform.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel


class RegisterRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class ProfileUpdateRequest(BaseModel):
    name: Optional[str] = None


class ContactCreateRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class ContactUpdateRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class PublicUser(BaseModel):
    id: str
    name: str
    email: str
    isActive: bool
    createdAt: str
    updatedAt: str


class Contact(BaseModel):
    id: str
    name: str
    email: str
    phone: str
    user: str
    createdAt: str
    updatedAt: str


class PaginationInfo(BaseModel):
    currentPage: int
    limit: int
    totalPages: int
    totalContacts: int
    hasNext: bool
    hasPrev: bool


class AuthData(BaseModel):
    user: PublicUser
    token: str


class UserData(BaseModel):
    user: PublicUser


class ContactData(BaseModel):
    contact: Contact


class ContactListData(BaseModel):
    contacts: list[Contact]
    pagination: PaginationInfo


class AuthResponse(BaseModel):
    success: Literal[True] = True
    message: Optional[str] = None
    data: AuthData


class UserResponse(BaseModel):
    success: Literal[True] = True
    message: Optional[str] = None
    data: UserData


class ContactResponse(BaseModel):
    success: Literal[True] = True
    message: Optional[str] = None
    data: ContactData


class ContactListResponse(BaseModel):
    success: Literal[True] = True
    data: ContactListData


class MessageResponse(BaseModel):
    success: Literal[True] = True
    message: str


class HealthResponse(BaseModel):
    status: str
    database: str
