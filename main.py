#!/usr/bin/env python3
"""
Main entry point for Phone Companion.

Provides a command-line interface over the synced contacts, address
validation, saved conversation records and the local API server.
"""
from typing import List, Optional
import argparse
import json
import logging
import sys
from pathlib import Path

from phone_companion.config import get_config
from phone_companion.contacts import ContactLookup
from phone_companion.logger_config import setup_logging
from phone_companion.sms.messages import list_thread, summarize
from phone_companion.sms.normalizers import canonicalize, is_valid_address
from phone_companion.sms.variant import Variant
from phone_companion.utils import Colors, format_timestamp

logger = logging.getLogger(__name__)


def print_section(title: str) -> None:
    """Print a formatted section title."""
    print(f"\n{Colors.BOLD}{Colors.HEADER}{'=' * 60}{Colors.ENDC}")
    print(f"{Colors.BOLD}{Colors.HEADER}{title}{Colors.ENDC}")
    print(f"{Colors.BOLD}{Colors.HEADER}{'=' * 60}{Colors.ENDC}\n")


def _parse_args(argv: List[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Phone companion tools (contacts, SMS records).")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    contacts = sub.add_parser("contacts", help="List or search a device's synced contacts.")
    contacts.add_argument("device_id")
    contacts.add_argument("--search", default=None, help="Case-insensitive name substring.")
    contacts.add_argument("--limit", type=int, default=20)

    lookup = sub.add_parser("lookup", help="Resolve a phone number to a contact name.")
    lookup.add_argument("device_id")
    lookup.add_argument("phone")

    validate = sub.add_parser("validate", help="Check whether an address can receive SMS.")
    validate.add_argument("address")

    conversations = sub.add_parser(
        "conversations",
        help="Summarize SMS records saved as a JSON list of positional records.",
    )
    conversations.add_argument("records_file")
    conversations.add_argument("--thread", type=int, default=None, help="Show one thread.")
    conversations.add_argument("--device-id", default=None, help="Label addresses from contacts.")

    serve = sub.add_parser("serve", help="Run the local HTTP API.")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)

    return parser.parse_args(argv)


def _load_records(path: Path) -> List[Variant]:
    """
    Read records from a JSON file.

    Malformed entries are kept as-is; the message decoder drops them.

    Raises:
        ValueError: If the file is not valid JSON or not a JSON list.
    """
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError("expected a JSON list of positional records")
    return [Variant.from_json_record(record) for record in data]


def _cmd_contacts(args: argparse.Namespace) -> int:
    lookup = ContactLookup.load_for_device(args.device_id, get_config())
    if args.search:
        contacts = lookup.search_by_name(args.search, args.limit)
    else:
        contacts = list(lookup.all_contacts()[: args.limit])

    print_section(f"Contacts ({len(contacts)})")
    for contact in contacts:
        print(f"  {contact.name:30s} {', '.join(contact.phone_numbers)}")
    return 0


def _cmd_lookup(args: argparse.Namespace) -> int:
    lookup = ContactLookup.load_for_device(args.device_id, get_config())
    print(lookup.name_or_number(args.phone))
    return 0 if lookup.name_for(args.phone) else 1


def _cmd_validate(args: argparse.Namespace) -> int:
    if is_valid_address(args.address):
        print(f"{Colors.OKGREEN}valid{Colors.ENDC} ({canonicalize(args.address)})")
        return 0
    print(f"{Colors.FAIL}invalid{Colors.ENDC}")
    return 1


def _cmd_conversations(args: argparse.Namespace) -> int:
    try:
        records = _load_records(Path(args.records_file))
    except (OSError, ValueError) as e:
        print(f"{Colors.FAIL}Error: cannot read records: {e}{Colors.ENDC}")
        return 1

    lookup = (
        ContactLookup.load_for_device(args.device_id, get_config())
        if args.device_id
        else ContactLookup()
    )

    if args.thread is not None:
        print_section(f"Thread {args.thread}")
        for msg in list_thread(records, args.thread):
            who = lookup.name_or_number(msg.address) if msg.is_received else "You"
            print(f"[{format_timestamp(msg.date)}] {who}: {msg.body}")
        return 0

    summaries = summarize(records, get_config().max_conversations)
    print_section(f"Conversations ({len(summaries)})")
    for i, summary in enumerate(summaries, 1):
        marker = f"{Colors.BOLD}*{Colors.ENDC}" if summary.unread else " "
        label = lookup.name_or_number(summary.address)
        print(
            f"{i:2d}.{marker}[{format_timestamp(summary.timestamp)}] "
            f"{label:25s} {summary.last_message[:60]}"
        )
    return 0


def _cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("phone_companion.api:app", host=args.host, port=args.port)
    return 0


COMMANDS = {
    "contacts": _cmd_contacts,
    "lookup": _cmd_lookup,
    "validate": _cmd_validate,
    "conversations": _cmd_conversations,
    "serve": _cmd_serve,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main function."""
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)

    setup_logging(level=logging.DEBUG if args.verbose else None)

    return COMMANDS[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
