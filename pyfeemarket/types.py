"""Type definitions and coercion helpers for fee-market transfers.

The ``as_*`` helpers accept loosely typed input (hex strings, bytes, decimal
strings) and either return a validated value or raise ``ValidationError``.
"""

from decimal import Decimal, DecimalException, InvalidOperation, localcontext
from typing import NewType, Union

from eth_utils import is_checksum_address, is_hex_address, to_bytes, to_wei

from .errors import ValidationError

Address = NewType("Address", bytes)
Hash32 = NewType("Hash32", bytes)

BytesLike = Union[bytes, str]

UINT64_MAX = 2**64 - 1
UINT256_MAX = 2**256 - 1


def as_bytes(value: BytesLike) -> bytes:
    """Convert hex string, bytes, bytearray, or memoryview to bytes."""
    if isinstance(value, str):
        if value == "" or value == "0x":
            return b""
        try:
            return to_bytes(hexstr=value)
        except ValueError as exc:
            raise ValidationError(f"invalid hex string: {value!r}") from exc
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    raise TypeError(f"expected str, bytes, bytearray or memoryview, got {type(value).__name__}")


def as_address(value: BytesLike) -> Address:
    """Convert hex string or bytes to a validated 20-byte address.

    Hex input must be ``0x`` followed by 40 hex digits. Mixed-case input must
    carry a valid EIP-55 checksum.
    """
    if isinstance(value, str):
        if not is_hex_address(value) or not value.startswith(("0x", "0X")):
            raise ValidationError(f"address must be 0x-prefixed 20-byte hex, got {value!r}")
        body = value[2:]
        if body != body.lower() and body != body.upper() and not is_checksum_address(value):
            raise ValidationError(f"address has an invalid EIP-55 checksum: {value}")
        return Address(to_bytes(hexstr=value))

    b = as_bytes(value)
    if len(b) != 20:
        raise ValidationError(f"address must be 20 bytes, got {len(b)}")
    return Address(b)


def as_hash32(value: BytesLike) -> Hash32:
    """Convert hex string or bytes to a validated 32-byte hash."""
    b = as_bytes(value)
    if len(b) != 32:
        raise ValidationError(f"hash32 must be 32 bytes, got {len(b)}")
    return Hash32(b)


def as_uint(value: int, name: str, maximum: int = UINT256_MAX) -> int:
    """Check that ``value`` is an int in ``[0, maximum]``.

    bool is refused even though it subclasses int.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name} must be an integer, got {type(value).__name__}")
    if value < 0:
        raise ValidationError(f"{name} must be >= 0, got {value}")
    if value > maximum:
        raise ValidationError(f"{name} overflows uint{maximum.bit_length()}: {value}")
    return value


def as_uint256(value: int, name: str = "value") -> int:
    return as_uint(value, name, UINT256_MAX)


def as_uint64(value: int, name: str = "value") -> int:
    return as_uint(value, name, UINT64_MAX)


def _as_decimal(value: Union[str, Decimal, int], name: str) -> Decimal:
    if isinstance(value, float):
        raise ValidationError(f"{name} must be given as a decimal string, not a float")
    try:
        d = Decimal(value.strip() if isinstance(value, str) else value)
    except (InvalidOperation, TypeError) as exc:
        raise ValidationError(f"{name} is not a decimal number: {value!r}") from exc
    if not d.is_finite():
        raise ValidationError(f"{name} must be finite, got {value!r}")
    if d < 0:
        raise ValidationError(f"{name} must be >= 0, got {value!r}")
    return d


def parse_units(value: Union[str, Decimal, int], unit: str, name: str = "amount") -> int:
    """Convert a decimal amount in ``unit`` (``"ether"``, ``"gwei"``, ...) to wei.

    Raises ValidationError if the amount is negative, not a number, has
    precision finer than one wei, or does not fit in uint256.
    """
    d = _as_decimal(value, name)
    with localcontext() as ctx:
        ctx.prec = 999
        try:
            scaled = d * to_wei(1, unit)
        except DecimalException as exc:
            raise ValidationError(f"{name} {value!r} {unit} is out of range") from exc
        if scaled != scaled.to_integral_value():
            raise ValidationError(f"{name} {value!r} {unit} is not a whole number of wei")
        if scaled > UINT256_MAX:
            raise ValidationError(f"{name} {value!r} {unit} overflows uint256")
        return int(scaled)


def parse_ether(value: Union[str, Decimal, int]) -> int:
    """Parse a decimal ether amount (e.g. ``"0.01"``) into wei."""
    return parse_units(value, "ether", name="amount")
