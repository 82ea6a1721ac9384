"""
Pytest fixtures for Phone Companion tests.

Fixture Categories:
    1. SMS record fixtures (positional Variant records as the daemon sends them)
    2. Contact fixtures (vCard directories laid out like the daemon's)
    3. Config / dedup fixtures (isolated temporary paths)

Design Notes:
    - Fixtures use tmp_path for isolation between tests
    - make_record() builds records field by field so tests can drop,
      retype or truncate fields
"""

from pathlib import Path
from typing import List, Optional

import pytest

from phone_companion.config import Config, set_config
from phone_companion.sms.variant import Variant


def pytest_configure(config):
    config.addinivalue_line("markers", "property: Hypothesis property-based tests")
    config.addinivalue_line("markers", "integration: tests spanning processes or components")


def make_record(
    direction: int = 1,
    body: str = "Hello",
    address: Optional[str] = "+15551234567",
    date: int = 1_700_000_000_000,
    read: int = 1,
    thread_id: int = 1,
) -> Variant:
    """
    Build an SMS record with the daemon's positional layout.

    Positions 5, 7 and 8 carry filler values the decoder must ignore.
    """
    addresses = Variant.array(
        [Variant.struct(Variant.string(address))] if address is not None else []
    )
    return Variant.struct(
        Variant.int32(direction),
        Variant.string(body),
        addresses,
        Variant.int64(date),
        Variant.int32(read),
        Variant.int64(-1),
        Variant.int64(thread_id),
        Variant.int32(0),
        Variant.int32(0),
    )


# =============================================================================
# SMS record fixtures
# =============================================================================


@pytest.fixture
def sample_records() -> List[Variant]:
    """
    Three threads with interleaved timestamps, in no particular order.

    Thread 10: 1000 (in), 3000 (out)
    Thread 20: 2000 (in, unread), 5000 (in, unread)
    Thread 30: 4000 (out)
    """
    return [
        make_record(body="t10 first", address="5551110000", date=1000, thread_id=10),
        make_record(
            direction=2, body="t10 reply", address="5551110000", date=3000, thread_id=10
        ),
        make_record(body="t20 first", address="5552220000", date=2000, read=0, thread_id=20),
        make_record(body="t20 latest", address="5552220000", date=5000, read=0, thread_id=20),
        make_record(
            direction=2, body="t30 only", address="5553330000", date=4000, thread_id=30
        ),
    ]


# =============================================================================
# Contact fixtures
# =============================================================================

VCARDS = {
    "alice.vcf": "BEGIN:VCARD\nVERSION:3.0\nFN:Alice Anderson\nTEL;CELL:+1 (555) 123-4567\nEND:VCARD\n",
    "bob.vcf": (
        "BEGIN:VCARD\r\nVERSION:3.0\r\nFN:bob builder\r\n"
        "TEL;TYPE=CELL:555-987-6543\r\nTEL:020 7946 0958\r\nEND:VCARD\r\n"
    ),
    "carol.vcf": "BEGIN:VCARD\nVERSION:2.1\nFN:Carol\nTEL:15550001111\nEND:VCARD\n",
    "noname.vcf": "BEGIN:VCARD\nVERSION:3.0\nTEL:5554443333\nEND:VCARD\n",
    "nophone.vcf": "BEGIN:VCARD\nVERSION:3.0\nFN:Dave NoPhone\nEND:VCARD\n",
    "notes.txt": "FN:Not A Card\nTEL:5556667777\n",
}


@pytest.fixture
def contacts_root(tmp_path: Path) -> Path:
    """Root directory holding one device's synced vCards (device id 'abc123')."""
    root = tmp_path / "kpeoplevcard"
    device_dir = root / "kdeconnect-abc123"
    device_dir.mkdir(parents=True)
    for name, text in VCARDS.items():
        (device_dir / name).write_text(text, encoding="utf-8")
    return root


@pytest.fixture
def device_dir(contacts_root: Path) -> Path:
    return contacts_root / "kdeconnect-abc123"


# =============================================================================
# Config fixtures
# =============================================================================


@pytest.fixture
def test_config(tmp_path: Path, contacts_root: Path):
    """Global config pointing at temporary contacts and runtime dirs."""
    runtime = tmp_path / "runtime"
    runtime.mkdir()
    config = Config(contacts_dir=str(contacts_root), runtime_dir=str(runtime))
    set_config(config)
    yield config
    set_config(None)


@pytest.fixture
def dedup_path(tmp_path: Path) -> Path:
    return tmp_path / "dedup"
