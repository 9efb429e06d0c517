"""
HTTP client for the contacts API.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import requests

from contacts_client.session import Session

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:8000/api"


class ApiClientError(Exception):
    """Non-2xx response, or no response at all."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        errors: Optional[list] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.errors = errors or []
        super().__init__(message)


class ContactsApiClient:
    """
    Thin wrapper over the REST API.

    ``http`` is anything with a requests-style ``request(method, url, ...)``
    method; it defaults to a ``requests.Session``. The token is read from and
    written to the ``Session`` passed in, never from global state.
    """

    def __init__(
        self,
        session: Session,
        base_url: str = DEFAULT_API_URL,
        http: Any = None,
        timeout: float = 10.0,
    ):
        self.session = session
        self.base_url = base_url.rstrip("/")
        self.http = http if http is not None else requests.Session()
        self.timeout = timeout

    def _request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[dict] = None,
        params: Optional[dict] = None,
    ) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.session.token:
            headers["Authorization"] = f"Bearer {self.session.token}"
        kwargs: dict = {"headers": headers}
        if json is not None:
            kwargs["json"] = json
        if params:
            kwargs["params"] = params
        if isinstance(self.http, requests.Session):
            kwargs["timeout"] = self.timeout

        url = f"{self.base_url}{path}"
        try:
            response = self.http.request(method, url, **kwargs)
        except requests.RequestException as exc:
            raise ApiClientError(f"Could not reach {self.base_url}: {exc}") from exc

        try:
            payload = response.json()
        except ValueError:
            payload = {}
        if response.status_code >= 400:
            raise ApiClientError(
                payload.get("message") or f"Request failed ({response.status_code})",
                status_code=response.status_code,
                errors=payload.get("errors"),
            )
        return payload

    def register(self, name: str, email: str, password: str) -> dict:
        payload = self._request(
            "POST",
            "/auth/register",
            json={"name": name, "email": email, "password": password},
        )
        data = payload["data"]
        self.session.start(data["token"], data["user"])
        return data["user"]

    def login(self, email: str, password: str) -> dict:
        payload = self._request(
            "POST", "/auth/login", json={"email": email, "password": password}
        )
        data = payload["data"]
        self.session.start(data["token"], data["user"])
        return data["user"]

    def logout(self) -> None:
        # Tokens are stateless; forgetting it is all logout means.
        self.session.clear()

    def me(self) -> dict:
        user = self._request("GET", "/auth/me")["data"]["user"]
        self.session.user = user
        return user

    def update_profile(self, name: str) -> dict:
        user = self._request("PUT", "/auth/profile", json={"name": name})["data"]["user"]
        self.session.user = user
        return user

    def list_contacts(
        self,
        *,
        page: int = 1,
        limit: int = 10,
        search: Optional[str] = None,
        sort_by: str = "name",
        sort_order: str = "asc",
    ) -> dict:
        params = {
            "page": page,
            "limit": limit,
            "sortBy": sort_by,
            "sortOrder": sort_order,
        }
        if search:
            params["search"] = search
        return self._request("GET", "/contacts", params=params)["data"]

    def get_contact(self, contact_id: str) -> dict:
        return self._request("GET", f"/contacts/{contact_id}")["data"]["contact"]

    def create_contact(self, name: str, email: str, phone: str) -> dict:
        payload = self._request(
            "POST",
            "/contacts",
            json={"name": name, "email": email, "phone": phone},
        )
        return payload["data"]["contact"]

    def update_contact(self, contact_id: str, **fields: Optional[str]) -> dict:
        changes = {key: value for key, value in fields.items() if value is not None}
        payload = self._request("PUT", f"/contacts/{contact_id}", json=changes)
        return payload["data"]["contact"]

    def delete_contact(self, contact_id: str) -> str:
        return self._request("DELETE", f"/contacts/{contact_id}")["message"]
