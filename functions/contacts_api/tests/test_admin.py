import io
import unittest
from contextlib import redirect_stderr, redirect_stdout

from contacts_api.admin import main
from contacts_api.db import InMemoryDbClient


class AdminCliTests(unittest.TestCase):
    def setUp(self):
        self.db = InMemoryDbClient()
        self.user = self.db.create_user("Alice", "alice@example.com", "hash")

    def test_deactivate_and_activate(self):
        with redirect_stdout(io.StringIO()) as out:
            self.assertEqual(main(["deactivate", "Alice@Example.com"], db=self.db), 0)
        self.assertIn("Deactivated alice@example.com", out.getvalue())
        self.assertFalse(self.db.get_user(self.user.user_id).is_active)

        with redirect_stdout(io.StringIO()):
            self.assertEqual(main(["activate", "alice@example.com"], db=self.db), 0)
        self.assertTrue(self.db.get_user(self.user.user_id).is_active)

    def test_unknown_email(self):
        with redirect_stderr(io.StringIO()) as err:
            self.assertEqual(main(["deactivate", "bob@example.com"], db=self.db), 1)
        self.assertIn("No user", err.getvalue())


if __name__ == "__main__":
    unittest.main()
