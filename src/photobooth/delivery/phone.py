"""
Recipient Numbers
=================

Normalization of kiosk-entered phone numbers and captions before they
are handed to the messaging gateway.

Accepted input forms: +628xxx, 628xxx, 08xxx, 8xxx (spaces allowed).
Normalized form: international digits without '+', e.g. 628123456789.
"""

import re
from typing import Iterable, List


COUNTRY_CODE = "62"

MIN_DIGITS = 9
MAX_DIGITS = 14

_CONTROL_CHARS = re.compile(r"[\x00-\x09\x0B\x0C\x0E-\x1F\x7F]")


def is_valid_phone_number(number: str) -> bool:
    """Digit count within [9, 14] after removing whitespace and symbols."""
    if not number or not isinstance(number, str):
        return False
    digits = re.sub(r"\D", "", number)
    return MIN_DIGITS <= len(digits) <= MAX_DIGITS


def normalize_phone_number(number: str) -> str:
    """
    Convert a kiosk-entered number to international form.

    Raises:
        ValueError: If the number is not valid
    """
    if not is_valid_phone_number(number):
        raise ValueError(f"Invalid phone number: {number!r}")

    clean = re.sub(r"\s+", "", number)
    if clean.startswith("+"):
        clean = clean[1:]
    if clean.startswith(COUNTRY_CODE):
        return clean
    if clean.startswith("0"):
        return COUNTRY_CODE + clean[1:]
    return COUNTRY_CODE + clean


def normalize_recipients(numbers: Iterable[str]) -> List[str]:
    """
    Normalize and de-duplicate recipients, keeping the first occurrence.

    Raises:
        ValueError: Listing every invalid number
    """
    numbers = list(numbers)
    invalid = [n for n in numbers if not is_valid_phone_number(n)]
    if invalid:
        raise ValueError(f"Invalid numbers: {', '.join(map(str, invalid))}")

    recipients: List[str] = []
    for number in numbers:
        normalized = normalize_phone_number(number)
        if normalized not in recipients:
            recipients.append(normalized)
    return recipients


def sanitize_caption(text: str) -> str:
    """Strip control characters, keeping newlines and carriage returns."""
    if not text:
        return ""
    return _CONTROL_CHARS.sub("", text)


def build_caption(caption: str, default_message: str) -> str:
    """Append the default message to the user's caption and sanitize."""
    combined = f"{caption}{default_message}" if caption else default_message
    return sanitize_caption(combined)
