import unittest
from unittest.mock import MagicMock

import requests
from fastapi.testclient import TestClient

from contacts_api.app import create_app
from contacts_api.config import Settings
from contacts_api.db import InMemoryDbClient
from contacts_client.api import ApiClientError, ContactsApiClient
from contacts_client.session import Session

BASE_URL = "http://testserver/api"


class ContactsApiClientTests(unittest.TestCase):
    """Drives the real app in-process; the TestClient stands in for requests."""

    def setUp(self):
        app = create_app(Settings(jwt_secret="client-secret"), InMemoryDbClient())
        self.http = TestClient(app)
        self.session = Session()
        self.client = ContactsApiClient(self.session, base_url=BASE_URL, http=self.http)

    def test_register_stores_session(self):
        user = self.client.register("Alice", "alice@example.com", "secret1")
        self.assertEqual(user["email"], "alice@example.com")
        self.assertTrue(self.session.is_authenticated)
        self.assertEqual(self.session.user["id"], user["id"])
        self.assertEqual(self.client.me()["id"], user["id"])

    def test_end_to_end_contact_flow(self):
        self.client.register("Alice", "alice@example.com", "secret1")
        self.client.logout()
        self.assertFalse(self.session.is_authenticated)
        self.client.login("alice@example.com", "secret1")

        contact = self.client.create_contact("Jo", "jo@x.com", "0601020304")
        with self.assertRaises(ApiClientError) as ctx:
            self.client.create_contact("Jo", "jo@x.com", "0601020304")
        self.assertEqual(ctx.exception.status_code, 400)

        listing = self.client.list_contacts(search="jo")
        self.assertEqual([c["id"] for c in listing["contacts"]], [contact["id"]])
        self.assertEqual(listing["pagination"]["totalContacts"], 1)

        edited = self.client.update_contact(contact["id"], name="Joanna", phone=None)
        self.assertEqual(edited["name"], "Joanna")
        self.assertEqual(edited["phone"], "0601020304")

        self.assertEqual(self.client.delete_contact(contact["id"]), "Contact deleted")
        with self.assertRaises(ApiClientError) as ctx:
            self.client.get_contact(contact["id"])
        self.assertEqual(ctx.exception.status_code, 404)

    def test_field_errors_are_surfaced(self):
        self.client.register("Alice", "alice@example.com", "secret1")
        with self.assertRaises(ApiClientError) as ctx:
            self.client.create_contact("J", "jo@x.com", "0601020304")
        self.assertEqual(ctx.exception.message, "Invalid data")
        self.assertEqual(ctx.exception.errors[0]["field"], "name")

    def test_requests_without_token_are_rejected(self):
        with self.assertRaises(ApiClientError) as ctx:
            self.client.list_contacts()
        self.assertEqual(ctx.exception.status_code, 401)

    def test_update_profile_refreshes_cached_user(self):
        self.client.register("Alice", "alice@example.com", "secret1")
        self.client.update_profile("Alicia")
        self.assertEqual(self.session.user["name"], "Alicia")


class TransportErrorTests(unittest.TestCase):
    def test_connection_failure_becomes_client_error(self):
        http = MagicMock(spec=requests.Session)
        http.request.side_effect = requests.ConnectionError("refused")
        client = ContactsApiClient(Session(token="abc"), base_url=BASE_URL, http=http)

        with self.assertRaises(ApiClientError) as ctx:
            client.me()
        self.assertIsNone(ctx.exception.status_code)

        _, kwargs = http.request.call_args
        self.assertEqual(kwargs["headers"]["Authorization"], "Bearer abc")
        self.assertEqual(kwargs["timeout"], 10.0)


if __name__ == "__main__":
    unittest.main()
