"""
Database abstraction for SQL stores and an in-memory test implementation.
"""

from __future__ import annotations

import enum
import threading
import time
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Dict, Optional, Protocol

from sqlalchemy import (
    Boolean,
    Column,
    Float,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    create_engine,
    func,
    or_,
    select,
    text,
)
from sqlalchemy.engine import make_url
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

SORTABLE_FIELDS = ("name", "email", "phone", "created_at", "updated_at")
SEARCHABLE_FIELDS = ("name", "email", "phone")


class StoreErrorKind(enum.Enum):
    DUPLICATE = "duplicate"


class StoreError(Exception):
    """Store failure tagged with a kind callers can branch on."""

    def __init__(self, kind: StoreErrorKind, detail: str = ""):
        self.kind = kind
        self.detail = detail
        super().__init__(f"{kind.value}: {detail}" if detail else kind.value)


def _iso(timestamp: float) -> str:
    return (
        datetime.fromtimestamp(timestamp, tz=timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


@dataclass
class UserRecord:
    user_id: str
    name: str
    email: str
    password_hash: str
    is_active: bool = True
    created_at: float = field(default_factory=lambda: time.time())
    updated_at: float = field(default_factory=lambda: time.time())

    def public_profile(self) -> dict:
        return {
            "id": self.user_id,
            "name": self.name,
            "email": self.email,
            "isActive": self.is_active,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


@dataclass
class ContactRecord:
    contact_id: str
    user_id: str
    name: str
    email: str
    phone: str
    created_at: float = field(default_factory=lambda: time.time())
    updated_at: float = field(default_factory=lambda: time.time())

    def as_dict(self) -> dict:
        return {
            "id": self.contact_id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "user": self.user_id,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


class DbClient(Protocol):
    """Interface for database access."""

    def create_user(self, name: str, email: str, password_hash: str) -> UserRecord:
        ...

    def get_user(self, user_id: str) -> Optional[UserRecord]:
        ...

    def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        ...

    def update_user(
        self, user_id: str, *, name: Optional[str] = None
    ) -> Optional[UserRecord]:
        ...

    def set_user_active(self, user_id: str, active: bool) -> Optional[UserRecord]:
        ...

    def create_contact(
        self, user_id: str, name: str, email: str, phone: str
    ) -> ContactRecord:
        ...

    def get_contact(self, user_id: str, contact_id: str) -> Optional[ContactRecord]:
        ...

    def list_contacts(
        self,
        user_id: str,
        *,
        search: Optional[str] = None,
        sort_by: str = "name",
        descending: bool = False,
        offset: int = 0,
        limit: int = 10,
    ) -> list[ContactRecord]:
        ...

    def count_contacts(self, user_id: str, *, search: Optional[str] = None) -> int:
        ...

    def update_contact(
        self, user_id: str, contact_id: str, changes: dict
    ) -> Optional[ContactRecord]:
        ...

    def delete_contact(self, user_id: str, contact_id: str) -> bool:
        ...

    def ping(self) -> bool:
        ...

    def close(self) -> None:
        ...


class InMemoryDbClient:
    """Simple in-memory database for development and tests."""

    def __init__(self):
        self.users: Dict[str, UserRecord] = {}
        self.contacts: Dict[str, ContactRecord] = {}
        self._lock = threading.Lock()

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        with self._lock:
            self.users.clear()
            self.contacts.clear()

    def create_user(self, name: str, email: str, password_hash: str) -> UserRecord:
        with self._lock:
            if any(user.email == email for user in self.users.values()):
                raise StoreError(StoreErrorKind.DUPLICATE, "users.email")
            record = UserRecord(
                user_id=uuid.uuid4().hex,
                name=name,
                email=email,
                password_hash=password_hash,
            )
            self.users[record.user_id] = record
            return replace(record)

    def get_user(self, user_id: str) -> Optional[UserRecord]:
        with self._lock:
            user = self.users.get(user_id)
            return replace(user) if user else None

    def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        with self._lock:
            for user in self.users.values():
                if user.email == email:
                    return replace(user)
        return None

    def update_user(
        self, user_id: str, *, name: Optional[str] = None
    ) -> Optional[UserRecord]:
        with self._lock:
            user = self.users.get(user_id)
            if not user:
                return None
            if name is not None:
                user.name = name
            user.updated_at = time.time()
            return replace(user)

    def set_user_active(self, user_id: str, active: bool) -> Optional[UserRecord]:
        with self._lock:
            user = self.users.get(user_id)
            if not user:
                return None
            user.is_active = active
            user.updated_at = time.time()
            return replace(user)

    def _email_taken(
        self, user_id: str, email: str, exclude: Optional[str] = None
    ) -> bool:
        return any(
            contact.user_id == user_id
            and contact.email == email
            and contact.contact_id != exclude
            for contact in self.contacts.values()
        )

    def create_contact(
        self, user_id: str, name: str, email: str, phone: str
    ) -> ContactRecord:
        with self._lock:
            if self._email_taken(user_id, email):
                raise StoreError(StoreErrorKind.DUPLICATE, "contacts.user_id,email")
            record = ContactRecord(
                contact_id=uuid.uuid4().hex,
                user_id=user_id,
                name=name,
                email=email,
                phone=phone,
            )
            self.contacts[record.contact_id] = record
            return replace(record)

    def get_contact(self, user_id: str, contact_id: str) -> Optional[ContactRecord]:
        with self._lock:
            contact = self.contacts.get(contact_id)
            if not contact or contact.user_id != user_id:
                return None
            return replace(contact)

    def _matching(self, user_id: str, search: Optional[str]) -> list[ContactRecord]:
        # Callers hold the lock. Dict order is insertion order, which the
        # stable sort below preserves for equal keys.
        needle = search.lower() if search else None
        matches = []
        for contact in self.contacts.values():
            if contact.user_id != user_id:
                continue
            if needle and not any(
                needle in getattr(contact, name).lower()
                for name in SEARCHABLE_FIELDS
            ):
                continue
            matches.append(replace(contact))
        return matches

    def list_contacts(
        self,
        user_id: str,
        *,
        search: Optional[str] = None,
        sort_by: str = "name",
        descending: bool = False,
        offset: int = 0,
        limit: int = 10,
    ) -> list[ContactRecord]:
        if sort_by not in SORTABLE_FIELDS:
            raise ValueError(f"Cannot sort contacts by {sort_by!r}")
        with self._lock:
            matches = self._matching(user_id, search)
        ordered = sorted(matches, key=lambda contact: getattr(contact, sort_by))
        if descending:
            # Reverse the keys only, so ties keep insertion order.
            groups: dict = {}
            for contact in ordered:
                groups.setdefault(getattr(contact, sort_by), []).append(contact)
            ordered = [
                contact for key in reversed(list(groups)) for contact in groups[key]
            ]
        return ordered[offset : offset + limit]

    def count_contacts(self, user_id: str, *, search: Optional[str] = None) -> int:
        with self._lock:
            return len(self._matching(user_id, search))

    def update_contact(
        self, user_id: str, contact_id: str, changes: dict
    ) -> Optional[ContactRecord]:
        with self._lock:
            contact = self.contacts.get(contact_id)
            if not contact or contact.user_id != user_id:
                return None
            new_email = changes.get("email")
            if new_email and self._email_taken(user_id, new_email, exclude=contact_id):
                raise StoreError(StoreErrorKind.DUPLICATE, "contacts.user_id,email")
            for name, value in changes.items():
                setattr(contact, name, value)
            contact.updated_at = time.time()
            return replace(contact)

    def delete_contact(self, user_id: str, contact_id: str) -> bool:
        with self._lock:
            contact = self.contacts.get(contact_id)
            if not contact or contact.user_id != user_id:
                return False
            del self.contacts[contact_id]
            return True

    def ping(self) -> bool:
        return True

    def close(self) -> None:
        return None


class SqlDbClient:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for SqlDbClient")
        url = make_url(database_url)
        engine_kwargs: dict = {"future": True, "pool_pre_ping": True}
        if url.get_backend_name() == "sqlite":
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if url.database in (None, "", ":memory:"):
                # One shared connection, otherwise every thread sees an empty db.
                engine_kwargs["poolclass"] = StaticPool
        else:
            engine_kwargs["pool_recycle"] = 1800
        self.engine = create_engine(url, **engine_kwargs)
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    def _to_user_record(self, row: "UserRow") -> UserRecord:
        return UserRecord(
            user_id=row.user_id,
            name=row.name,
            email=row.email,
            password_hash=row.password_hash,
            is_active=row.is_active,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def _to_contact_record(self, row: "ContactRow") -> ContactRecord:
        return ContactRecord(
            contact_id=row.contact_id,
            user_id=row.user_id,
            name=row.name,
            email=row.email,
            phone=row.phone,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def _commit(self, session: Session, detail: str) -> None:
        try:
            session.commit()
        except IntegrityError as exc:
            session.rollback()
            raise StoreError(StoreErrorKind.DUPLICATE, detail) from exc

    def create_user(self, name: str, email: str, password_hash: str) -> UserRecord:
        now = time.time()
        with self.Session() as session:
            row = UserRow(
                user_id=uuid.uuid4().hex,
                name=name,
                email=email,
                password_hash=password_hash,
                is_active=True,
                created_at=now,
                updated_at=now,
            )
            session.add(row)
            self._commit(session, "users.email")
            session.refresh(row)
            return self._to_user_record(row)

    def get_user(self, user_id: str) -> Optional[UserRecord]:
        with self.Session() as session:
            row = session.get(UserRow, user_id)
            return self._to_user_record(row) if row else None

    def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        with self.Session() as session:
            stmt = select(UserRow).where(UserRow.email == email)
            row = session.execute(stmt).scalar_one_or_none()
            return self._to_user_record(row) if row else None

    def update_user(
        self, user_id: str, *, name: Optional[str] = None
    ) -> Optional[UserRecord]:
        with self.Session() as session:
            row = session.get(UserRow, user_id)
            if not row:
                return None
            if name is not None:
                row.name = name
            row.updated_at = time.time()
            session.commit()
            session.refresh(row)
            return self._to_user_record(row)

    def set_user_active(self, user_id: str, active: bool) -> Optional[UserRecord]:
        with self.Session() as session:
            row = session.get(UserRow, user_id)
            if not row:
                return None
            row.is_active = active
            row.updated_at = time.time()
            session.commit()
            session.refresh(row)
            return self._to_user_record(row)

    def create_contact(
        self, user_id: str, name: str, email: str, phone: str
    ) -> ContactRecord:
        now = time.time()
        with self.Session() as session:
            row = ContactRow(
                contact_id=uuid.uuid4().hex,
                user_id=user_id,
                name=name,
                email=email,
                phone=phone,
                created_at=now,
                updated_at=now,
            )
            session.add(row)
            self._commit(session, "contacts.user_id,email")
            session.refresh(row)
            return self._to_contact_record(row)

    def _owned(self, session: Session, user_id: str, contact_id: str):
        stmt = select(ContactRow).where(
            ContactRow.contact_id == contact_id, ContactRow.user_id == user_id
        )
        return session.execute(stmt).scalar_one_or_none()

    def get_contact(self, user_id: str, contact_id: str) -> Optional[ContactRecord]:
        with self.Session() as session:
            row = self._owned(session, user_id, contact_id)
            return self._to_contact_record(row) if row else None

    def _filtered(self, stmt, user_id: str, search: Optional[str]):
        stmt = stmt.where(ContactRow.user_id == user_id)
        if search:
            needle = search.lower()
            stmt = stmt.where(
                or_(
                    *(
                        func.lower(getattr(ContactRow, name)).contains(
                            needle, autoescape=True
                        )
                        for name in SEARCHABLE_FIELDS
                    )
                )
            )
        return stmt

    def list_contacts(
        self,
        user_id: str,
        *,
        search: Optional[str] = None,
        sort_by: str = "name",
        descending: bool = False,
        offset: int = 0,
        limit: int = 10,
    ) -> list[ContactRecord]:
        if sort_by not in SORTABLE_FIELDS:
            raise ValueError(f"Cannot sort contacts by {sort_by!r}")
        column = getattr(ContactRow, sort_by)
        stmt = (
            self._filtered(select(ContactRow), user_id, search)
            .order_by(column.desc() if descending else column.asc(), ContactRow.seq.asc())
            .offset(offset)
            .limit(limit)
        )
        with self.Session() as session:
            rows = session.execute(stmt).scalars().all()
            return [self._to_contact_record(row) for row in rows]

    def count_contacts(self, user_id: str, *, search: Optional[str] = None) -> int:
        stmt = self._filtered(select(func.count(ContactRow.seq)), user_id, search)
        with self.Session() as session:
            return session.execute(stmt).scalar_one()

    def update_contact(
        self, user_id: str, contact_id: str, changes: dict
    ) -> Optional[ContactRecord]:
        with self.Session() as session:
            row = self._owned(session, user_id, contact_id)
            if not row:
                return None
            for name, value in changes.items():
                setattr(row, name, value)
            row.updated_at = time.time()
            self._commit(session, "contacts.user_id,email")
            session.refresh(row)
            return self._to_contact_record(row)

    def delete_contact(self, user_id: str, contact_id: str) -> bool:
        with self.Session() as session:
            row = self._owned(session, user_id, contact_id)
            if not row:
                return False
            session.delete(row)
            session.commit()
            return True

    def ping(self) -> bool:
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError:
            return False

    def close(self) -> None:
        self.engine.dispose()


Base = declarative_base()


class UserRow(Base):
    __tablename__ = "users"

    user_id = Column(String, primary_key=True)
    name = Column(String(50), nullable=False)
    email = Column(String, nullable=False, unique=True, index=True)
    password_hash = Column(String, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(Float, nullable=False)
    updated_at = Column(Float, nullable=False)


class ContactRow(Base):
    __tablename__ = "contacts"
    __table_args__ = (
        UniqueConstraint("user_id", "email", name="uq_contacts_user_email"),
    )

    seq = Column(Integer, primary_key=True, autoincrement=True)
    contact_id = Column(String, nullable=False, unique=True, index=True)
    user_id = Column(
        String, ForeignKey("users.user_id"), nullable=False, index=True
    )
    name = Column(String(50), nullable=False)
    email = Column(String, nullable=False)
    phone = Column(String, nullable=False)
    created_at = Column(Float, nullable=False)
    updated_at = Column(Float, nullable=False)


def build_db_client(database_url: Optional[str], *, in_memory: bool = False) -> DbClient:
    """Pick the store implementation for the given settings."""
    if in_memory or not database_url:
        return InMemoryDbClient()
    return SqlDbClient(database_url)
