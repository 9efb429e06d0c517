import io
import json
import tempfile
import unittest
from pathlib import Path

from fastapi.testclient import TestClient

from contacts_api.app import create_app
from contacts_api.config import Settings
from contacts_api.db import InMemoryDbClient
from contacts_client.cli import main
from contacts_client.session import Session, SessionStore


class SessionStoreTests(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.path = Path(self.tmp.name) / "nested" / "session.json"
        self.store = SessionStore(self.path)

    def tearDown(self):
        self.tmp.cleanup()

    def test_missing_file_gives_empty_session(self):
        self.assertFalse(self.store.load().is_authenticated)

    def test_save_load_clear(self):
        self.store.save(Session(token="tok", user={"name": "Alice"}))
        loaded = self.store.load()
        self.assertEqual(loaded.token, "tok")
        self.assertEqual(loaded.user, {"name": "Alice"})
        self.store.clear()
        self.assertFalse(self.path.exists())

    def test_corrupt_file_is_ignored(self):
        self.path.parent.mkdir(parents=True)
        self.path.write_text("{oops", encoding="utf-8")
        self.assertFalse(self.store.load().is_authenticated)


class CliTests(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.session_file = str(Path(self.tmp.name) / "session.json")
        self.db = InMemoryDbClient()
        self.http = TestClient(create_app(Settings(jwt_secret="cli-secret"), self.db))

    def tearDown(self):
        self.tmp.cleanup()

    def run_cli(self, *args):
        out, err = io.StringIO(), io.StringIO()
        code = main(
            ["--api-url", "http://testserver/api", "--session-file", self.session_file, *args],
            http=self.http,
            out=out,
            err=err,
        )
        return code, out.getvalue(), err.getvalue()

    def test_full_session(self):
        code, out, _ = self.run_cli(
            "register", "Alice", "alice@example.com", "--password", "secret1"
        )
        self.assertEqual(code, 0)
        self.assertIn("Registered", out)
        stored = json.loads(Path(self.session_file).read_text(encoding="utf-8"))
        self.assertTrue(stored["token"])
        self.assertEqual(stored["user"]["email"], "alice@example.com")

        code, out, _ = self.run_cli("add", "Jo", "jo@x.com", "0601020304")
        self.assertEqual(code, 0)
        contact_id = out.strip().split()[-1].rstrip(".")

        code, _, err = self.run_cli("add", "Jo", "jo@x.com", "0601020304")
        self.assertEqual(code, 1)
        self.assertIn("already exists", err)

        code, out, _ = self.run_cli("list", "--search", "JO")
        self.assertEqual(code, 0)
        self.assertIn("jo@x.com", out)
        self.assertIn("1 contact(s)", out)

        code, out, _ = self.run_cli("edit", contact_id, "--name", "Joanna")
        self.assertIn("Joanna <jo@x.com>", out)

        code, out, _ = self.run_cli("whoami")
        self.assertIn("Alice <alice@example.com> (active)", out)

        self.assertEqual(self.run_cli("delete", contact_id)[0], 0)
        code, _, err = self.run_cli("show", contact_id)
        self.assertEqual(code, 1)
        self.assertIn("Contact not found", err)

        self.assertEqual(self.run_cli("logout")[0], 0)
        self.assertFalse(Path(self.session_file).exists())
        code, _, err = self.run_cli("list")
        self.assertEqual(code, 1)
        self.assertIn("Not logged in", err)

    def test_field_errors_printed(self):
        self.run_cli("register", "Alice", "alice@example.com", "--password", "secret1")
        code, _, err = self.run_cli("add", "J", "nope", "12")
        self.assertEqual(code, 1)
        self.assertIn("name:", err)
        self.assertIn("email:", err)
        self.assertIn("phone:", err)

    def test_rejected_token_clears_session(self):
        self.run_cli("register", "Alice", "alice@example.com", "--password", "secret1")
        user = self.db.get_user_by_email("alice@example.com")
        self.db.set_user_active(user.user_id, False)

        code, _, err = self.run_cli("list")
        self.assertEqual(code, 1)
        self.assertIn("Account disabled", err)
        self.assertFalse(Path(self.session_file).exists())

    def test_login_with_bad_password(self):
        self.run_cli("register", "Alice", "alice@example.com", "--password", "secret1")
        self.run_cli("logout")
        code, _, err = self.run_cli("login", "alice@example.com", "--password", "wrong!")
        self.assertEqual(code, 1)
        self.assertIn("Invalid email or password", err)
        code, out, _ = self.run_cli("login", "alice@example.com", "--password", "secret1")
        self.assertEqual(code, 0)
        self.assertIn("Logged in as Alice", out)


if __name__ == "__main__":
    unittest.main()
