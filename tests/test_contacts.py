"""
Tests for the contact directory.

Tests vCard parsing, index building and name lookup/search against
temporary vCard directories laid out like the daemon's.
"""

import errno
import os
from pathlib import Path

import pytest

from phone_companion.config import Config
from phone_companion.contacts import Contact, ContactLookup, parse_vcard, parse_vcard_text


class TestParseVcardText:
    """Tests for single-card parsing."""

    def test_basic_card(self):
        contact = parse_vcard_text("BEGIN:VCARD\nFN:Alice\nTEL:5551234567\nEND:VCARD\n")
        assert contact == Contact(name="Alice", phone_numbers=("5551234567",))

    def test_tel_variants(self):
        text = (
            "BEGIN:VCARD\n"
            "FN:Multi\n"
            "TEL;CELL:111\n"
            "TEL;TYPE=CELL:222\n"
            "TEL;TYPE=HOME;VALUE=uri:tel:+1-555-333-4444\n"
            "END:VCARD\n"
        )
        contact = parse_vcard_text(text)
        assert contact.phone_numbers == ("111", "222", "tel:+1-555-333-4444")

    def test_encoded_values_skipped(self):
        text = (
            "FN:Encoded\n"
            "TEL;ENCODING=QUOTED-PRINTABLE:=35=35=35\n"
            "TEL:5551234567\n"
        )
        assert parse_vcard_text(text).phone_numbers == ("5551234567",)

    def test_name_is_trimmed(self):
        assert parse_vcard_text("FN:  Spaced Out  \nTEL:123\n").name == "Spaced Out"

    def test_crlf_line_endings(self):
        contact = parse_vcard_text("FN:Win\r\nTEL:123\r\n")
        assert contact == Contact(name="Win", phone_numbers=("123",))

    def test_missing_name_discarded(self):
        assert parse_vcard_text("TEL:5551234567\n") is None

    def test_missing_phone_discarded(self):
        assert parse_vcard_text("FN:Nobody\n") is None

    def test_empty_tel_value_ignored(self):
        assert parse_vcard_text("FN:Empty\nTEL;CELL:   \n") is None

    def test_tel_without_colon_ignored(self):
        assert parse_vcard_text("FN:Odd\nTEL5551234567\n") is None

    def test_lowercase_fields_not_recognized(self):
        assert parse_vcard_text("fn:lower\ntel:123\n") is None

    def test_last_fn_wins(self):
        assert parse_vcard_text("FN:First\nFN:Second\nTEL:1\n").name == "Second"


class TestParseVcardFile:
    """Tests for parse_vcard on disk."""

    def test_missing_file(self, tmp_path: Path):
        assert parse_vcard(tmp_path / "missing.vcf") is None

    def test_non_utf8_file(self, tmp_path: Path):
        path = tmp_path / "latin1.vcf"
        path.write_bytes(b"FN:Jos\xe9\nTEL:123\n")
        assert parse_vcard(path) is None


class TestContactLookupLoad:
    """Tests for loading a device directory."""

    def test_loads_only_complete_vcf_cards(self, device_dir: Path):
        lookup = ContactLookup.load(device_dir)
        names = [c.name for c in lookup.all_contacts()]
        assert names == ["Alice Anderson", "bob builder", "Carol"]

    def test_phone_mapping_count(self, device_dir: Path):
        # alice 1 + bob 2 + carol 1
        assert len(ContactLookup.load(device_dir)) == 4

    def test_missing_directory_is_empty(self, tmp_path: Path):
        lookup = ContactLookup.load(tmp_path / "nope")
        assert lookup.is_empty()
        assert len(lookup) == 0
        assert lookup.all_contacts() == ()
        assert lookup.name_for("5551234567") is None

    def test_path_is_a_file(self, tmp_path: Path):
        file_path = tmp_path / "file.vcf"
        file_path.write_text("FN:X\nTEL:1\n")
        assert ContactLookup.load(file_path).is_empty()

    @pytest.mark.skipif(os.geteuid() == 0, reason="root ignores directory permissions")
    def test_unreadable_directory_is_empty(self, device_dir: Path):
        device_dir.chmod(0o000)
        try:
            assert ContactLookup.load(device_dir).is_empty()
        finally:
            device_dir.chmod(0o755)

    def test_untraversable_directory_is_empty(self, device_dir: Path, monkeypatch):
        real_stat = Path.stat

        def denied_stat(path, *args, **kwargs):
            if path == device_dir:
                raise PermissionError(errno.EACCES, "Permission denied", str(path))
            return real_stat(path, *args, **kwargs)

        def denied_iterdir(path):
            raise PermissionError(errno.EACCES, "Permission denied", str(path))

        monkeypatch.setattr(Path, "stat", denied_stat)
        monkeypatch.setattr(Path, "iterdir", denied_iterdir)
        assert ContactLookup.load(device_dir).is_empty()

    def test_load_for_device(self, contacts_root: Path):
        config = Config(contacts_dir=str(contacts_root))
        lookup = ContactLookup.load_for_device("abc123", config)
        assert lookup.name_for("5551234567") == "Alice Anderson"

    def test_load_for_unknown_device(self, contacts_root: Path):
        config = Config(contacts_dir=str(contacts_root))
        assert ContactLookup.load_for_device("other", config).is_empty()

    def test_duplicate_number_maps_to_one_name(self, tmp_path: Path):
        (tmp_path / "a.vcf").write_text("FN:A\nTEL:5551234567\n")
        (tmp_path / "b.vcf").write_text("FN:B\nTEL:+1 555 123 4567\n")
        lookup = ContactLookup.load(tmp_path)
        assert len(lookup) == 1
        assert lookup.name_for("5551234567") == "B"
        assert len(lookup.all_contacts()) == 2

    def test_snapshot_is_read_only(self, device_dir: Path):
        lookup = ContactLookup.load(device_dir)
        with pytest.raises(TypeError):
            lookup.phone_to_name["1"] = "x"  # type: ignore[index]


class TestFromContacts:
    """Tests for index building from parsed contacts."""

    def test_later_insertion_wins(self):
        lookup = ContactLookup.from_contacts(
            [Contact("First", ("5551234567",)), Contact("Second", ("15551234567",))]
        )
        assert lookup.name_for("5551234567") == "Second"

    def test_numbers_without_digits_not_indexed(self):
        lookup = ContactLookup.from_contacts([Contact("Letters", ("ABC",))])
        assert lookup.is_empty()
        assert len(lookup.all_contacts()) == 1

    def test_sorted_case_insensitively(self):
        lookup = ContactLookup.from_contacts(
            [Contact("zed", ("1",)), Contact("Amy", ("2",)), Contact("bob", ("3",))]
        )
        assert [c.name for c in lookup.all_contacts()] == ["Amy", "bob", "zed"]


class TestLookup:
    """Tests for name_for / name_or_number / search_by_name."""

    @pytest.fixture
    def lookup(self, device_dir: Path) -> ContactLookup:
        return ContactLookup.load(device_dir)

    def test_name_for_any_format(self, lookup):
        assert lookup.name_for("+15551234567") == "Alice Anderson"
        assert lookup.name_for("(555) 123-4567") == "Alice Anderson"
        assert lookup.name_for("5559876543") == "bob builder"
        assert lookup.name_for("+44 20 7946 0958") is None
        assert lookup.name_for("02079460958") == "bob builder"
        assert lookup.name_for("555-000-1111") == "Carol"

    def test_name_for_unknown(self, lookup):
        assert lookup.name_for("5550000000") is None

    def test_name_or_number_match(self, lookup):
        assert lookup.name_or_number("+1 555 123 4567") == "Alice Anderson"

    def test_name_or_number_falls_back_to_raw_string(self, lookup):
        assert lookup.name_or_number("+1 (555) 000-0000") == "+1 (555) 000-0000"

    def test_name_or_number_blank_name(self):
        lookup = ContactLookup({"5551234567": "   "}, [])
        assert lookup.name_or_number("555-123-4567") == "555-123-4567"

    def test_search_substring_case_insensitive(self, lookup):
        assert [c.name for c in lookup.search_by_name("AN", 10)] == ["Alice Anderson"]
        assert [c.name for c in lookup.search_by_name("o", 10)] == ["Alice Anderson", "bob builder", "Carol"]

    def test_search_respects_limit(self, lookup):
        assert [c.name for c in lookup.search_by_name("o", 2)] == ["Alice Anderson", "bob builder"]

    def test_search_empty_query_returns_nothing(self, lookup):
        assert lookup.search_by_name("", 10) == []

    def test_search_zero_limit(self, lookup):
        assert lookup.search_by_name("a", 0) == []

    def test_search_no_match(self, lookup):
        assert lookup.search_by_name("zzz", 10) == []
