"""
Phone Companion - client-side model layer for a paired phone.

This package provides functionality to:
- Decode SMS records delivered by the phone-sync daemon over the bus
- Build conversation summaries and thread histories
- Label phone numbers from the contacts the daemon syncs as vCards
- Suppress duplicate alerts across independent client processes
"""

__version__ = "0.1.0"

from phone_companion.config import get_config, set_config, Config
from phone_companion.contacts import Contact, ContactLookup
from phone_companion.notifications import (
    NotificationGate,
    should_show_file_notification,
    should_show_sms_notification,
)

__all__ = [
    "get_config",
    "set_config",
    "Config",
    "Contact",
    "ContactLookup",
    "NotificationGate",
    "should_show_file_notification",
    "should_show_sms_notification",
]
