"""
Phone number normalization utilities.

Two different jobs, deliberately kept apart:

    normalize(): lookup keys. Digits only, with US numbers folded so that
        "+1 555 123 4567", "15551234567" and "(555) 123-4567" all match.
    canonicalize(): outbound addressing. Strips formatting characters only,
        keeping leading zeros and any digit count, for validation before
        a number is handed to the phone.

Examples:
    >>> normalize("+1-555-123-4567")
    '5551234567'
    >>> canonicalize("+1 (555) 123-4567")
    '15551234567'
"""

import re

NON_DIGIT_PATTERN = re.compile(r"[^0-9]")
FORMATTING_PATTERN = re.compile(r"[ \-()+]")
PHONE_DIGITS_PATTERN = re.compile(r"[0-9]{3,15}")


def normalize(raw: str) -> str:
    """
    Normalize a phone number to a digits-only lookup key.

    An 11-digit number starting with 1 (US/NANP with country code) drops
    the leading 1.

    Args:
        raw: Phone number in any format.

    Returns:
        Digits-only string; empty if the input has no digits.

    Examples:
        >>> normalize("(555) 123-4567")
        '5551234567'
        >>> normalize("15551234567")
        '5551234567'
        >>> normalize("+44 20 7946 0958")
        '442079460958'
    """
    if not raw:
        return ""

    digits = NON_DIGIT_PATTERN.sub("", raw)

    if len(digits) == 11 and digits.startswith("1"):
        return digits[1:]
    return digits


def canonicalize(raw: str) -> str:
    """
    Strip spaces, hyphens, parentheses and plus signs from an address.

    Leading zeros are kept because they are significant in some regions.
    """
    if not raw:
        return ""
    return FORMATTING_PATTERN.sub("", raw)


def is_valid_address(raw: str) -> bool:
    """
    Check whether an address can be used as an SMS recipient.

    Valid addresses are phone numbers of 3-15 digits once formatting is
    stripped, or email-like values with exactly one @ and text on both
    sides (MMS gateways accept these).

    Examples:
        >>> is_valid_address("123")
        True
        >>> is_valid_address("a@")
        False
    """
    if not raw:
        return False

    if PHONE_DIGITS_PATTERN.fullmatch(canonicalize(raw)):
        return True

    parts = raw.split("@")
    return len(parts) == 2 and bool(parts[0]) and bool(parts[1])
