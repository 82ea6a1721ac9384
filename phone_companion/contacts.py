"""
Contact directory built from the vCards the phone-sync daemon writes.

The daemon mirrors the phone's address book into one ``.vcf`` file per
contact under ``<contacts_dir>/kdeconnect-<device_id>/``. We read those
files, keep the display name and phone numbers, and build a reverse
phone → name index for labelling conversations.

Design Decisions:
    1. Loading is best-effort: missing or unreadable files shrink the
       index, they never fail the caller
    2. Lookup keys are normalize()d numbers, so formatting differences
       between the card and the SMS address do not matter
    3. A loaded ContactLookup is an immutable snapshot; reload to refresh
    4. Encoded (quoted-printable) TEL values are skipped, not decoded
"""

from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple
import logging

from phone_companion.config import Config, get_config
from phone_companion.sms.normalizers import normalize

logger = logging.getLogger(__name__)

VCARD_SUFFIX = ".vcf"


@dataclass(frozen=True)
class Contact:
    """A contact with a display name and its phone numbers."""

    name: str
    phone_numbers: Tuple[str, ...]


def parse_vcard_text(text: str) -> Optional[Contact]:
    """
    Extract name and phone numbers from vCard text.

    Handles the TEL variants seen in synced cards::

        TEL:5551234567
        TEL;CELL:5551234567
        TEL;TYPE=CELL:+1 555 123 4567

    Args:
        text: Contents of one vCard file.

    Returns:
        Contact, or None if the card has no name or no usable number.
    """
    name = ""
    phone_numbers: List[str] = []

    for line in text.splitlines():
        if line.startswith("FN:"):
            name = line[3:].strip()
        elif line.startswith("TEL"):
            _, sep, value = line.partition(":")
            number = value.strip()
            # '=' means an encoded value, e.g. ENCODING=QUOTED-PRINTABLE
            if sep and number and "=" not in number:
                phone_numbers.append(number)

    if not name or not phone_numbers:
        return None

    return Contact(name=name, phone_numbers=tuple(phone_numbers))


def parse_vcard(path: Path) -> Optional[Contact]:
    """
    Parse one vCard file.

    Returns:
        Contact, or None if the file is unreadable or incomplete.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.debug(f"Skipping unreadable vCard {path}: {e}")
        return None
    return parse_vcard_text(text)


class ContactLookup:
    """
    Phone → name index plus a name-sorted contact list.

    Instances are read-only once built. Use ``load`` or
    ``load_for_device`` to get a fresh snapshot.
    """

    def __init__(
        self,
        phone_to_name: Optional[Dict[str, str]] = None,
        contacts: Optional[List[Contact]] = None,
    ):
        self._phone_to_name: Mapping[str, str] = MappingProxyType(dict(phone_to_name or {}))
        self._contacts: Tuple[Contact, ...] = tuple(contacts or ())

    @classmethod
    def from_contacts(cls, contacts: List[Contact]) -> "ContactLookup":
        """
        Build the index from parsed contacts.

        Later contacts overwrite earlier ones for the same normalized
        number. The contact list is sorted case-insensitively by name.
        """
        phone_to_name: Dict[str, str] = {}
        for contact in contacts:
            for phone in contact.phone_numbers:
                key = normalize(phone)
                if key:
                    phone_to_name[key] = contact.name

        ordered = sorted(contacts, key=lambda c: c.name.lower())
        return cls(phone_to_name, ordered)

    @classmethod
    def load(cls, directory: Path) -> "ContactLookup":
        """
        Load every ``.vcf`` file in a directory.

        Args:
            directory: A device's vCard directory.

        Returns:
            ContactLookup; empty if the directory is missing or unreadable.
        """
        directory = Path(directory)
        try:
            if not directory.is_dir():
                logger.debug(f"vCard directory does not exist: {directory}")
                return cls()
            paths = sorted(p for p in directory.iterdir() if p.suffix == VCARD_SUFFIX)
        except OSError as e:
            logger.warning(f"Failed to read vCard directory {directory}: {e}")
            return cls()

        contacts = []
        for path in paths:
            contact = parse_vcard(path)
            if contact is not None:
                contacts.append(contact)

        lookup = cls.from_contacts(contacts)
        logger.info(
            f"Loaded {len(lookup.all_contacts())} contacts with {len(lookup)} phone mappings"
        )
        return lookup

    @classmethod
    def load_for_device(
        cls,
        device_id: str,
        config: Optional[Config] = None,
    ) -> "ContactLookup":
        """Load the contacts synced from one paired device."""
        config = config or get_config()
        return cls.load(config.contacts_dir_for_device(device_id))

    @property
    def phone_to_name(self) -> Mapping[str, str]:
        """Read-only view of the normalized phone → name index."""
        return self._phone_to_name

    def name_for(self, phone_number: str) -> Optional[str]:
        """Look up a contact name by phone number, in any format."""
        return self._phone_to_name.get(normalize(phone_number))

    def name_or_number(self, phone_number: str) -> str:
        """
        Get a display label for a phone number.

        Returns:
            The contact name, or the phone number exactly as given if there
            is no match or the stored name is blank.
        """
        name = self.name_for(phone_number)
        if name and name.strip():
            return name
        return phone_number

    def search_by_name(self, query: str, limit: int) -> List[Contact]:
        """
        Find contacts whose name contains ``query`` (case-insensitive).

        An empty query matches nothing.
        """
        if not query or limit <= 0:
            return []

        query_lower = query.lower()
        matches = []
        for contact in self._contacts:
            if query_lower in contact.name.lower():
                matches.append(contact)
                if len(matches) >= limit:
                    break
        return matches

    def all_contacts(self) -> Tuple[Contact, ...]:
        return self._contacts

    def is_empty(self) -> bool:
        return not self._phone_to_name

    def __len__(self) -> int:
        """Number of phone mappings in the index."""
        return len(self._phone_to_name)
