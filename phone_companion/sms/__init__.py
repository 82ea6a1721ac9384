"""
SMS model layer for Phone Companion.

Translates the phone-sync daemon's loosely-typed bus records into a stable
domain model the client can render and query.

Architecture Overview:
    bus records (Variant)  →  decode_message  →  Message
                                              ├── summarize    → ConversationSummary list
                                              └── list_thread  → Message history

Key Design Decisions:
    1. The daemon's record layout is treated as an unstable external API
    2. Shape mismatches default instead of failing
    3. Phone numbers have separate lookup (normalize) and outbound
       (canonicalize) forms
"""

from phone_companion.sms.variant import (
    Variant,
    VariantKind,
    MessageField,
    encode_addresses,
    field_at,
    get_bool,
    get_first_struct_string,
    get_int32,
    get_int64,
    get_string,
)
from phone_companion.sms.messages import (
    MAX_CONVERSATIONS,
    ConversationSummary,
    Message,
    MessageDirection,
    decode_message,
    decode_messages,
    list_thread,
    summarize,
)
from phone_companion.sms.normalizers import canonicalize, is_valid_address, normalize

__all__ = [
    # Variant decoding
    "Variant",
    "VariantKind",
    "MessageField",
    "encode_addresses",
    "field_at",
    "get_bool",
    "get_first_struct_string",
    "get_int32",
    "get_int64",
    "get_string",
    # Message model
    "MAX_CONVERSATIONS",
    "ConversationSummary",
    "Message",
    "MessageDirection",
    "decode_message",
    "decode_messages",
    "list_thread",
    "summarize",
    # Normalizers
    "canonicalize",
    "is_valid_address",
    "normalize",
]
