"""
Command-line client for the contacts API.

    contacts register "Ada Lovelace" ada@example.com
    contacts login ada@example.com
    contacts add "Jo" jo@example.com 0601020304
    contacts list --search jo
"""

from __future__ import annotations

import argparse
import getpass
import logging
import os
import sys
from typing import Callable, Optional, Sequence, TextIO

from contacts_client.api import DEFAULT_API_URL, ApiClientError, ContactsApiClient
from contacts_client.session import DEFAULT_SESSION_FILE, Session, SessionStore

logger = logging.getLogger(__name__)

PUBLIC_COMMANDS = {"register", "login", "logout"}


def _read_password(args: argparse.Namespace) -> str:
    return args.password or getpass.getpass("Password: ")


def _format_contacts(contacts: list[dict]) -> list[str]:
    if not contacts:
        return ["No contacts."]
    headers = ("ID", "NAME", "EMAIL", "PHONE")
    rows = [(c["id"], c["name"], c["email"], c["phone"]) for c in contacts]
    widths = [max(len(str(row[i])) for row in [headers, *rows]) for i in range(4)]
    return [
        "  ".join(str(value).ljust(width) for value, width in zip(row, widths)).rstrip()
        for row in [headers, *rows]
    ]


def _format_contact(contact: dict) -> list[str]:
    return [
        f"{contact['name']} <{contact['email']}>",
        f"  phone:   {contact['phone']}",
        f"  id:      {contact['id']}",
        f"  updated: {contact['updatedAt']}",
    ]


def _format_user(user: dict) -> list[str]:
    status = "active" if user.get("isActive", True) else "disabled"
    return [f"{user['name']} <{user['email']}> ({status})"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="contacts", description="Manage your contacts")
    parser.add_argument(
        "--api-url",
        default=os.environ.get("CONTACTS_API_URL", DEFAULT_API_URL),
        help="Base URL of the contacts API",
    )
    parser.add_argument(
        "--session-file",
        default=os.environ.get("CONTACTS_SESSION_FILE", DEFAULT_SESSION_FILE),
        help="Where the login token is kept between runs",
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    sub = parser.add_subparsers(dest="command", required=True)

    register = sub.add_parser("register", help="Create an account and log in")
    register.add_argument("name")
    register.add_argument("email")
    register.add_argument("--password")

    login = sub.add_parser("login", help="Log in")
    login.add_argument("email")
    login.add_argument("--password")

    sub.add_parser("logout", help="Forget the stored token")
    sub.add_parser("whoami", help="Show the logged-in user")

    profile = sub.add_parser("profile", help="Change your display name")
    profile.add_argument("name")

    listing = sub.add_parser("list", help="List contacts")
    listing.add_argument("--page", type=int, default=1)
    listing.add_argument("--limit", type=int, default=10)
    listing.add_argument("--search")
    listing.add_argument(
        "--sort-by",
        default="name",
        choices=["name", "email", "phone", "createdAt", "updatedAt"],
    )
    listing.add_argument("--desc", action="store_true", help="Sort descending")

    show = sub.add_parser("show", help="Show one contact")
    show.add_argument("contact_id")

    add = sub.add_parser("add", help="Create a contact")
    add.add_argument("name")
    add.add_argument("email")
    add.add_argument("phone")

    edit = sub.add_parser("edit", help="Change fields of a contact")
    edit.add_argument("contact_id")
    edit.add_argument("--name")
    edit.add_argument("--email")
    edit.add_argument("--phone")

    delete = sub.add_parser("delete", help="Delete a contact")
    delete.add_argument("contact_id")
    return parser


def run_command(
    args: argparse.Namespace, client: ContactsApiClient
) -> list[str]:
    """Execute one parsed command and return the lines to print."""
    command = args.command
    if command == "register":
        user = client.register(args.name, args.email, _read_password(args))
        return [f"Registered and logged in as {user['name']}."]
    if command == "login":
        user = client.login(args.email, _read_password(args))
        return [f"Logged in as {user['name']}."]
    if command == "logout":
        client.logout()
        return ["Logged out."]
    if command == "whoami":
        return _format_user(client.me())
    if command == "profile":
        return _format_user(client.update_profile(args.name))
    if command == "list":
        data = client.list_contacts(
            page=args.page,
            limit=args.limit,
            search=args.search,
            sort_by=args.sort_by,
            sort_order="desc" if args.desc else "asc",
        )
        pagination = data["pagination"]
        footer = (
            f"Page {pagination['currentPage']}/{max(pagination['totalPages'], 1)}"
            f" - {pagination['totalContacts']} contact(s)"
        )
        return [*_format_contacts(data["contacts"]), footer]
    if command == "show":
        return _format_contact(client.get_contact(args.contact_id))
    if command == "add":
        contact = client.create_contact(args.name, args.email, args.phone)
        return [f"Created contact {contact['id']}."]
    if command == "edit":
        contact = client.update_contact(
            args.contact_id, name=args.name, email=args.email, phone=args.phone
        )
        return _format_contact(contact)
    if command == "delete":
        return [client.delete_contact(args.contact_id)]
    raise ValueError(f"Unknown command {command!r}")


def main(
    argv: Optional[Sequence[str]] = None,
    *,
    http=None,
    out: TextIO = sys.stdout,
    err: TextIO = sys.stderr,
    store_factory: Callable[[str], SessionStore] = SessionStore,
) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    store = store_factory(args.session_file)
    session: Session = store.load()
    if args.command not in PUBLIC_COMMANDS and not session.is_authenticated:
        print("Not logged in. Run `contacts login EMAIL` first.", file=err)
        return 1

    client = ContactsApiClient(session, base_url=args.api_url, http=http)
    try:
        lines = run_command(args, client)
    except ApiClientError as exc:
        print(f"Error: {exc.message}", file=err)
        for error in exc.errors:
            if isinstance(error, dict):
                print(f"  {error.get('field')}: {error.get('message')}", file=err)
            else:
                print(f"  {error}", file=err)
        if exc.status_code == 401 and args.command not in PUBLIC_COMMANDS:
            # Stored token expired or the account was disabled.
            session.clear()
            store.clear()
        return 1

    if session.is_authenticated:
        store.save(session)
    else:
        store.clear()
    for line in lines:
        print(line, file=out)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
