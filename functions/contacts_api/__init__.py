"""
Contacts API package.

A FastAPI service for per-user contact books: registration and login with
bearer tokens, and owner-scoped CRUD, search and pagination over contacts.
"""

__version__ = "1.0.0"
