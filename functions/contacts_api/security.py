"""
Password hashing and bearer token helpers.

Tokens are stateless JWTs: there is no server-side session, so a token stays
valid until it expires. Logging out only means the client forgets it.
"""

from __future__ import annotations

import datetime
from typing import Any, Dict

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from contacts_api.config import Settings
from contacts_api.errors import ExpiredToken, InvalidToken

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(raw_password: str) -> str:
    return pwd_context.hash(raw_password)


def verify_password(raw_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(raw_password, hashed_password)


def create_access_token(user_id: str, settings: Settings) -> str:
    """Issue a signed token whose ``sub`` claim is the user id."""
    now = datetime.datetime.now(datetime.timezone.utc)
    claims: Dict[str, Any] = {
        "sub": user_id,
        "iat": now,
        "exp": now + datetime.timedelta(minutes=settings.jwt_expire_minutes),
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str, settings: Settings) -> str:
    """
    Check signature and expiry and return the user id the token was issued to.

    Raises ExpiredToken or InvalidToken.
    """
    try:
        payload = jwt.decode(
            token, settings.jwt_secret, algorithms=[settings.jwt_algorithm]
        )
    except ExpiredSignatureError as exc:
        raise ExpiredToken() from exc
    except JWTError as exc:
        raise InvalidToken() from exc

    user_id = payload.get("sub")
    if not isinstance(user_id, str) or not user_id:
        raise InvalidToken()
    return user_id
