"""Identity and format validation of submitted transactions.

Rules run in a fixed order (amount, ip, number, region, date) and the
first failing rule raises ``ValidationError`` naming the field. Nothing
is constructed or persisted before every rule has passed.
"""

from __future__ import annotations

import re
from collections.abc import Collection, Mapping
from datetime import UTC, datetime
from typing import Any

from antifraud.core.config import MAX_AMOUNT
from antifraud.core.errors import ValidationError
from antifraud.core.security.card_numbers import is_valid_card_number
from antifraud.domain.models.transaction import Transaction

AMOUNT_PATTERN = re.compile(r"^[0-9]+$")
IPV4_PATTERN = re.compile(r"^([0-9]{1,3})\.([0-9]{1,3})\.([0-9]{1,3})\.([0-9]{1,3})$")

# A full date-time needs a time part after the date: "2022-10-13T14:34:41"
DATE_TIME_PREFIX = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}[T ][0-9]{2}:[0-9]{2}")


def is_valid_ip(ip: Any) -> bool:
    """Check for four dot-separated decimal octets in 0-255."""
    if not isinstance(ip, str):
        return False
    match = IPV4_PATTERN.fullmatch(ip)
    if match is None:
        return False
    return all(int(octet) <= 255 for octet in match.groups())


def parse_amount(value: Any) -> int:
    """Parse a positive integer amount from an int or a digit string.

    Amounts above ``MAX_AMOUNT`` cannot be stored and are rejected.
    """
    if isinstance(value, bool):
        raise _invalid("amount", "Amount must be a positive integer")

    if isinstance(value, int):
        amount = value
    elif isinstance(value, str) and AMOUNT_PATTERN.fullmatch(value.strip()):
        amount = int(value.strip())
    else:
        raise _invalid("amount", "Amount must be a positive integer")

    if amount <= 0:
        raise _invalid("amount", "Amount must be a positive integer")
    if amount > MAX_AMOUNT:
        raise _invalid("amount", "Amount is too large", maximum=MAX_AMOUNT)
    return amount


def parse_date(value: Any) -> datetime:
    """Parse a full ISO-8601 date-time at second precision.

    A date without a time part is rejected. Aware values are converted to
    naive UTC so that window arithmetic compares like with like.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and DATE_TIME_PREFIX.match(value.strip()):
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            raise _invalid("date", "Date must be a full date-time") from None
    else:
        raise _invalid("date", "Date must be a full date-time")

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(UTC).replace(tzinfo=None)
    return parsed.replace(microsecond=0)


def validate_transaction(raw: Mapping[str, Any], regions: Collection[str]) -> Transaction:
    """Turn raw submitted fields into a validated ``Transaction``.

    Args:
        raw: Mapping with ``amount``, ``ip``, ``number``, ``region`` and ``date``.
        regions: The closed set of accepted region codes.

    Raises:
        ValidationError: For the first field that fails its rule.
    """
    amount = parse_amount(raw.get("amount"))

    ip = raw.get("ip")
    if not is_valid_ip(ip):
        raise _invalid("ip", "IP must be a dotted-quad IPv4 address")

    number = raw.get("number")
    if not is_valid_card_number(number):
        raise _invalid("number", "Card number must be 16 digits with a valid checksum")

    region = raw.get("region")
    if not isinstance(region, str) or region not in regions:
        raise _invalid("region", "Unknown region code", allowed=sorted(regions))

    date = parse_date(raw.get("date"))

    return Transaction(amount=amount, ip=ip, number=number, region=region, date=date)


def _invalid(field: str, message: str, **extra: Any) -> ValidationError:
    return ValidationError(message, details={"field": field, **extra})
