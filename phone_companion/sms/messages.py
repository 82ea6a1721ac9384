"""
Message model building for SMS records from the phone.

Turns positional bus records (see ``variant.py``) into immutable Message
values and derives the two views the client needs: the conversation list
(one summary per thread, most recent first) and a single thread's history
(oldest first).

Design Decisions:
    1. Undecodable records are dropped, never raised
    2. The phone's richer status model collapses to inbox vs. sent
    3. Field defaults follow what the daemon's own consumer assumes
    4. All functions are pure: same records in, same models out
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional
import logging

from phone_companion.sms.variant import (
    MessageField,
    Variant,
    field_at,
    get_bool,
    get_first_struct_string,
    get_int32,
    get_int64,
    get_string,
    struct_fields,
)

logger = logging.getLogger(__name__)

# Maximum number of conversations in the summary list
MAX_CONVERSATIONS = 25

# Android SMS type constant for a received message
INBOX_TYPE_CODE = 1

UNKNOWN_ADDRESS = "Unknown"


class MessageDirection(Enum):
    """Whether a message was received or sent."""

    INBOX = "inbox"
    SENT = "sent"

    @classmethod
    def from_code(cls, code: int) -> "MessageDirection":
        """
        Map an Android message type code to a direction.

        1 = inbox. Everything else (2 sent, 3 draft, 4 outbox, 5 failed,
        6 queued) originated on the phone, so it counts as sent.
        """
        return cls.INBOX if code == INBOX_TYPE_CODE else cls.SENT


@dataclass(frozen=True)
class Message:
    """A single SMS message."""

    body: str
    address: str
    date: int  # ms since Unix epoch
    direction: MessageDirection
    read: bool
    thread_id: int

    @property
    def is_received(self) -> bool:
        return self.direction is MessageDirection.INBOX


@dataclass(frozen=True)
class ConversationSummary:
    """Latest state of one conversation thread, for the conversation list."""

    thread_id: int
    address: str
    last_message: str
    timestamp: int  # ms since Unix epoch
    unread: bool


def decode_message(record: Variant) -> Optional[Message]:
    """
    Decode one SMS record.

    Args:
        record: Positional struct as delivered by the daemon.

    Returns:
        Message, or None if the record is not a structure at all.
    """
    if struct_fields(record) is None:
        logger.debug(f"Dropping SMS record that is not a struct: {record!r}")
        return None

    direction_code = get_int32(field_at(record, MessageField.DIRECTION), INBOX_TYPE_CODE)

    return Message(
        body=get_string(field_at(record, MessageField.BODY)),
        address=get_first_struct_string(field_at(record, MessageField.ADDRESSES), UNKNOWN_ADDRESS),
        date=get_int64(field_at(record, MessageField.DATE)),
        direction=MessageDirection.from_code(direction_code),
        # A missing read flag must not light up the unread badge
        read=get_bool(field_at(record, MessageField.READ), True),
        thread_id=get_int64(field_at(record, MessageField.THREAD_ID)),
    )


def decode_messages(records: Iterable[Variant]) -> List[Message]:
    """Decode a batch of records, skipping undecodable ones."""
    messages = []
    for record in records:
        message = decode_message(record)
        if message is not None:
            messages.append(message)
    return messages


def summarize(
    records: Iterable[Variant],
    limit: int = MAX_CONVERSATIONS,
) -> List[ConversationSummary]:
    """
    Build the conversation list from a batch of records.

    Keeps the most recent message of each thread, newest thread first,
    stopping after ``limit`` distinct threads.

    Args:
        records: Records from the daemon, in any order.
        limit: Maximum number of conversations to return.

    Returns:
        ConversationSummary list, most recent first.
    """
    messages = decode_messages(records)
    messages.sort(key=lambda m: m.date, reverse=True)

    seen_threads = set()
    summaries: List[ConversationSummary] = []

    for msg in messages:
        if len(summaries) >= limit:
            break
        if msg.thread_id in seen_threads:
            continue
        seen_threads.add(msg.thread_id)

        summaries.append(
            ConversationSummary(
                thread_id=msg.thread_id,
                address=msg.address,
                last_message=msg.body,
                timestamp=msg.date,
                unread=not msg.read,
            )
        )

    logger.info(f"Summarized {len(messages)} messages into {len(summaries)} conversations")
    return summaries


def list_thread(records: Iterable[Variant], thread_id: int) -> List[Message]:
    """
    Get one thread's messages in display order (oldest first).

    Args:
        records: Records from the daemon, in any order.
        thread_id: Conversation thread to keep.

    Returns:
        Messages of that thread sorted by date ascending.
    """
    messages = [msg for msg in decode_messages(records) if msg.thread_id == thread_id]
    messages.sort(key=lambda m: m.date)
    return messages
