import secrets
import time

ORDER_NUMBER_PREFIX = "ORD"
_DIGITS = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"


def to_base36(value: int) -> str:
    if value < 0:
        raise ValueError("base36 value must be non-negative")
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_DIGITS[rem])
    return "".join(reversed(digits))


def generate_order_number(now_ms: int = None) -> str:
    """ORD-<base36 millis>-<6 hex chars>. Uniqueness is enforced by the order table."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    random_part = secrets.token_hex(3).upper()
    return f"{ORDER_NUMBER_PREFIX}-{to_base36(now_ms)}-{random_part}"
