import unittest

from contacts_api.validation import (
    FieldError,
    clean_contact_fields,
    validate_contact,
    validate_profile,
    validate_registration,
)


class ContactValidationTests(unittest.TestCase):
    def test_valid_contact(self):
        fields = {"name": "Jo", "email": "jo@x.com", "phone": "0601020304"}
        self.assertEqual(validate_contact(fields), [])

    def test_missing_fields_reported_individually(self):
        errors = validate_contact({})
        self.assertEqual([e.field for e in errors], ["name", "email", "phone"])

    def test_name_length_bounds(self):
        self.assertEqual(validate_contact({"name": "J"}, partial=True)[0].field, "name")
        self.assertEqual(validate_contact({"name": "x" * 50}, partial=True), [])
        self.assertEqual(len(validate_contact({"name": "x" * 51}, partial=True)), 1)
        # Surrounding whitespace does not count toward the length.
        self.assertEqual(len(validate_contact({"name": " J "}, partial=True)), 1)

    def test_phone_formats(self):
        for phone in ("0601020304", "+33601020304", " 0123456789 "):
            self.assertEqual(validate_contact({"phone": phone}, partial=True), [], phone)
        for phone in ("0001020304", "060102030", "06 01 02 03 04", "+44601020304"):
            errors = validate_contact({"phone": phone}, partial=True)
            self.assertEqual([e.field for e in errors], ["phone"], phone)

    def test_email_formats(self):
        for email in ("jo@x.com", "first.last@sub.example.fr", "JO@X.COM"):
            self.assertEqual(validate_contact({"email": email}, partial=True), [], email)
        for email in ("jo", "jo@", "@x.com", "jo@x.c", "jo@x.commerce"):
            errors = validate_contact({"email": email}, partial=True)
            self.assertEqual([e.field for e in errors], ["email"], email)

    def test_partial_skips_absent_fields(self):
        self.assertEqual(validate_contact({"name": "Jo"}, partial=True), [])
        self.assertEqual(validate_contact({}, partial=True), [])

    def test_clean_contact_fields(self):
        cleaned = clean_contact_fields(
            {"name": "  Jo ", "email": " JO@X.com", "phone": None}
        )
        self.assertEqual(cleaned, {"name": "Jo", "email": "jo@x.com"})


class UserValidationTests(unittest.TestCase):
    def test_registration(self):
        self.assertEqual(validate_registration("Alice", "a@example.com", "secret"), [])
        errors = validate_registration("Alice", "a@example.com", "short")
        self.assertEqual(errors, [FieldError("password", "Password must be at least 6 characters")])

    def test_profile(self):
        self.assertEqual(validate_profile({}), [])
        self.assertEqual(validate_profile({"name": "Al"}), [])
        self.assertEqual(validate_profile({"name": "A"})[0].as_dict()["field"], "name")


if __name__ == "__main__":
    unittest.main()
