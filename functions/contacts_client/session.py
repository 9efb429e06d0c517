"""
Client-side session persisted as JSON between invocations.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_SESSION_FILE = "~/.contacts_session.json"


@dataclass
class Session:
    token: Optional[str] = None
    user: Optional[dict] = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def start(self, token: str, user: dict) -> None:
        self.token = token
        self.user = user

    def clear(self) -> None:
        self.token = None
        self.user = None


class SessionStore:
    """Loads and saves a ``Session`` at a fixed path."""

    def __init__(self, path: str | os.PathLike = DEFAULT_SESSION_FILE):
        self.path = Path(path).expanduser()

    def load(self) -> Session:
        if not self.path.exists():
            return Session()
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable session file %s: %s", self.path, exc)
            return Session()
        return Session(token=payload.get("token"), user=payload.get("user"))

    def save(self, session: Session) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(asdict(session), indent=2), encoding="utf-8")
        try:
            self.path.chmod(0o600)
        except OSError:
            logger.debug("Could not restrict permissions on %s", self.path)

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()
