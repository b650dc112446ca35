"""
Argument coercion and result formatting.

Token amounts use a fixed 18-decimal convention: ``parse_units("1.5")`` is
``1_500_000_000_000_000_000``.  Scaling is exact (Decimal with a wide context),
never float.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, localcontext
from typing import Any

from .config import is_address
from .errors import ValidationError

TOKEN_DECIMALS = 18

ADDRESS = "address"
BYTES32 = "bytes32"
BYTES4 = "bytes4"
UINT = "uint"
AMOUNT = "amount"
BOOL = "bool"
ADDRESS_LIST = "address[]"
UINT_LIST = "uint[]"
AMOUNT_LIST = "amount[]"

ARG_KINDS = (
    ADDRESS, BYTES32, BYTES4, UINT, AMOUNT, BOOL, ADDRESS_LIST, UINT_LIST, AMOUNT_LIST,
)

_TRUE = {"true", "1", "yes", "y"}
_FALSE = {"false", "0", "no", "n"}


def parse_units(text: str, decimals: int = TOKEN_DECIMALS) -> int:
    """
    Scale a decimal string to an integer amount.

    Raises:
        ValidationError: Non-numeric, negative, or too many fractional digits
    """
    with localcontext() as ctx:
        ctx.prec = 100
        try:
            amount = Decimal(text.strip())
        except InvalidOperation:
            raise ValidationError(f"Not a decimal amount: {text!r}") from None
        if not amount.is_finite() or amount < 0:
            raise ValidationError(f"Amount must be a non-negative number: {text!r}")

        scaled = amount.scaleb(decimals)
        if scaled != scaled.to_integral_value():
            raise ValidationError(
                f"Amount {text!r} has more than {decimals} decimal places"
            )
        return int(scaled)


def format_units(value: int, decimals: int = TOKEN_DECIMALS) -> str:
    """Inverse of ``parse_units``; trailing fractional zeros are trimmed."""
    sign = "-" if value < 0 else ""
    whole, frac = divmod(abs(int(value)), 10**decimals)
    frac_text = str(frac).rjust(decimals, "0").rstrip("0") if decimals else ""
    if frac_text:
        return f"{sign}{whole}.{frac_text}"
    return f"{sign}{whole}"


def _parse_uint(text: str) -> int:
    try:
        value = int(text.strip(), 0)
    except ValueError:
        raise ValidationError(f"Not an integer: {text!r}") from None
    if value < 0:
        raise ValidationError(f"Integer must be non-negative: {text!r}")
    return value


def _parse_address(text: str) -> str:
    text = text.strip()
    if not is_address(text):
        raise ValidationError(f"Not a 20-byte hex address: {text!r}")
    return text


def _parse_fixed_bytes(text: str, size: int) -> bytes:
    text = text.strip()
    body = text[2:] if text.lower().startswith("0x") else text
    try:
        value = bytes.fromhex(body)
    except ValueError:
        raise ValidationError(f"Not a hex string: {text!r}") from None
    if len(value) != size:
        raise ValidationError(f"Expected {size} bytes, got {len(value)}: {text!r}")
    return value


def _split(text: str) -> list[str]:
    return [part.strip() for part in text.split(",") if part.strip()]


def coerce_argument(kind: str, text: str, raw_units: bool = False) -> Any:
    """
    Convert one user-supplied string into the value the ABI encoder expects.

    Args:
        kind: One of ``ARG_KINDS``
        text: User input
        raw_units: Take amounts as integers already in the smallest unit

    Raises:
        ValidationError: If the text doesn't fit the kind
    """
    if raw_units and kind in (AMOUNT, AMOUNT_LIST):
        kind = UINT if kind == AMOUNT else UINT_LIST

    if kind == ADDRESS:
        return _parse_address(text)
    if kind == BYTES32:
        return _parse_fixed_bytes(text, 32)
    if kind == BYTES4:
        return _parse_fixed_bytes(text, 4)
    if kind == UINT:
        return _parse_uint(text)
    if kind == AMOUNT:
        return parse_units(text)
    if kind == BOOL:
        lowered = text.strip().lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
        raise ValidationError(f"Not a boolean: {text!r}")
    if kind == ADDRESS_LIST:
        return [_parse_address(p) for p in _split(text)]
    if kind == UINT_LIST:
        return [_parse_uint(p) for p in _split(text)]
    if kind == AMOUNT_LIST:
        return [parse_units(p) for p in _split(text)]
    raise ValueError(f"Unknown argument kind: {kind}")


def render_value(value: Any) -> Any:
    """
    Make a decoded result printable / JSON-serialisable.

    bytes become lower-case 0x-hex, ints become decimal strings (uint256
    overflows JSON numbers), bools stay bools, containers are rendered
    recursively.
    """
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    if isinstance(value, bool) or value is None:
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, dict):
        return {k: render_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [render_value(v) for v in value]
    return value
