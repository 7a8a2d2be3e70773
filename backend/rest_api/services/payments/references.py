"""
Order numbers and payment references.

    order number:       TLR2501010042           prefix + YYMMDD + 4 digits
    payment reference:  TLR_1735689600000_K3J9QZ prefix _ epoch ms _ 6 base-36 chars
"""

import re
import secrets
import string
import time
from datetime import date

from shared.utils.exceptions import ValidationError

ORDER_PREFIX_PATTERN = re.compile(r"^[A-Z]{3}$")
ORDER_NUMBER_PATTERN = re.compile(r"^[A-Z]{3}\d{6}\d{4}$")
REFERENCE_PATTERN = re.compile(r"^[A-Z0-9]+_\d{13,}_[0-9A-Z]{6}$")

_BASE36 = string.digits + string.ascii_uppercase


def generate_order_number(prefix: str, today: date | None = None) -> str:
    """
    Human-readable order number; unique enough per day, callers retry on clash.

    Raises:
        ValidationError: prefix is not three uppercase letters
    """
    if not ORDER_PREFIX_PATTERN.match(prefix):
        raise ValidationError(
            "Le préfixe de commande doit contenir 3 lettres majuscules",
            prefix=prefix,
        )
    today = today or date.today()
    return f"{prefix}{today:%y%m%d}{secrets.randbelow(10_000):04d}"


def generate_payment_reference(prefix: str = "TLR", now_ms: int | None = None) -> str:
    """Unique reference handed to the gateway widget and stored on the order."""
    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000
    suffix = "".join(secrets.choice(_BASE36) for _ in range(6))
    return f"{prefix.upper()}_{now_ms}_{suffix}"
