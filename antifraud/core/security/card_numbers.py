"""Card number checks and PCI-safe previews.

Card numbers are accepted as exactly 16 digits that pass the Luhn
(mod-10) checksum. Full numbers must never reach the logs; use
``mask_card_number`` for any log line that mentions a card.
"""

from __future__ import annotations

import re

CARD_NUMBER_PATTERN = re.compile(r"^[0-9]{16}$")


def passes_luhn(number: str) -> bool:
    """Validate a digit string using the Luhn algorithm."""
    if not number or not number.isdigit():
        return False

    digits = [int(d) for d in number]
    odd_digits = digits[-1::-2]
    even_digits = digits[-2::-2]

    checksum = sum(odd_digits)
    for d in even_digits:
        doubled = d * 2
        checksum += doubled - 9 if doubled > 9 else doubled

    return checksum % 10 == 0


def is_valid_card_number(number: str | None) -> bool:
    """Check the 16-digit shape and the Luhn checksum."""
    if not isinstance(number, str) or not CARD_NUMBER_PATTERN.fullmatch(number):
        return False
    return passes_luhn(number)


def mask_card_number(number: str | None) -> str:
    """Create a safe preview of a card number for logs and error details."""
    if not number or len(number) <= 8:
        return "***"
    return number[:4] + "***" + number[-4:]
