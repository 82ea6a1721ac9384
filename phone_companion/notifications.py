"""
Cross-process notification deduplication.

Several client processes may run at once (one per panel, one per
session...) and each receives the same bus signal for a new SMS or an
incoming file. Without coordination every one of them would raise the
same desktop alert. There is no shared memory between them, so they
rendezvous on a small file per event class:

    1. Open (create if absent) the event class's dedup file
    2. Take an exclusive flock on it (blocking)
    3. Read "key\\ntimestamp_ms"; empty or corrupt means no prior record
    4. Allow unless the stored key matches and is younger than the window
    5. If allowed, overwrite the file with the new key and current time
    6. Release the lock

The lock covers exactly steps 3-5, so at most one process allows a given
key per window. Any failure to open or lock the file allows the
notification: a duplicate alert is better than a lost one.

The blocking flock is held for the few microseconds it takes to read and
rewrite ~50 bytes on a tmpfs, and contention only happens when processes
receive the same signal at the same moment.
"""

import fcntl
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Callable, Optional
import logging

from phone_companion.config import Config, get_config

logger = logging.getLogger(__name__)

DEDUP_WINDOW_MS = Config.DEDUP_WINDOW_MS


def _now_ms() -> int:
    """Current wall-clock time in milliseconds since the Unix epoch."""
    return time.time_ns() // 1_000_000


@dataclass(frozen=True)
class DedupRecord:
    """The last notification allowed for one event class."""

    key: str
    timestamp_ms: int

    @classmethod
    def parse(cls, text: str) -> Optional["DedupRecord"]:
        """
        Parse dedup file contents.

        Returns:
            DedupRecord, or None if the text is empty or malformed.
        """
        key, sep, stamp = text.rpartition("\n")
        stamp = stamp.strip()
        if not sep or not stamp.isascii() or not stamp.isdigit():
            return None
        return cls(key=key, timestamp_ms=int(stamp))

    def serialize(self) -> str:
        return f"{self.key}\n{self.timestamp_ms}"


class NotificationGate:
    """
    Decides whether a notification is a cross-process duplicate.

    Args:
        path: Dedup file shared by all processes for this event class.
        window_ms: Same-key notifications closer than this are suppressed.
        clock: Returns the current time in ms (injectable for tests).
    """

    def __init__(
        self,
        path: Path,
        window_ms: int = DEDUP_WINDOW_MS,
        clock: Optional[Callable[[], int]] = None,
    ):
        self.path = Path(path)
        self.window_ms = window_ms
        self._clock = clock or _now_ms

    def should_show(self, key: str) -> bool:
        """
        Decide whether to show the notification identified by ``key``.

        Returns:
            True if this is the first notification for ``key`` within the
            window (or if the check could not be performed).
        """
        now_ms = self._clock()

        try:
            fd = os.open(self.path, os.O_RDWR | os.O_CREAT, 0o644)
        except OSError as e:
            logger.warning(f"Cannot open dedup file {self.path}, allowing notification: {e}")
            return True

        with os.fdopen(fd, "r+b") as handle:
            try:
                fcntl.flock(handle.fileno(), fcntl.LOCK_EX)
            except OSError as e:
                logger.warning(f"Cannot lock dedup file {self.path}, allowing notification: {e}")
                return True

            try:
                return self._decide(handle, key, now_ms)
            finally:
                fcntl.flock(handle.fileno(), fcntl.LOCK_UN)

    def _decide(self, handle: BinaryIO, key: str, now_ms: int) -> bool:
        """Read-decide-write step; caller holds the lock."""
        try:
            contents = handle.read().decode("utf-8", errors="replace")
        except OSError as e:
            logger.debug(f"Cannot read dedup file {self.path}: {e}")
            contents = ""

        record = DedupRecord.parse(contents)
        if record is not None and record.key == key:
            elapsed = max(0, now_ms - record.timestamp_ms)
            if elapsed < self.window_ms:
                logger.debug(f"Suppressing duplicate notification for {key!r}")
                return False

        try:
            handle.seek(0)
            handle.truncate()
            handle.write(DedupRecord(key, now_ms).serialize().encode("utf-8"))
            handle.flush()
        except OSError as e:
            logger.warning(f"Cannot update dedup file {self.path}: {e}")

        return True


def should_show_file_notification(file_url: str, config: Optional[Config] = None) -> bool:
    """
    Check whether to announce a received file.

    Keyed on the file's URL so each transfer is announced once.
    """
    config = config or get_config()
    gate = NotificationGate(config.file_dedup_path, config.dedup_window_ms)
    return gate.should_show(file_url)


def should_show_sms_notification(
    thread_id: int,
    message_date: int,
    config: Optional[Config] = None,
) -> bool:
    """
    Check whether to announce an incoming SMS.

    Keyed on thread id and message timestamp, which together identify a
    message across processes.
    """
    config = config or get_config()
    gate = NotificationGate(config.sms_dedup_path, config.dedup_window_ms)
    return gate.should_show(f"{thread_id}:{message_date}")
