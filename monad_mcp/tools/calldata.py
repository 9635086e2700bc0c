"""
Fixed-layout calldata encoding for the bridge contract calls.

Only the static argument shapes used by the bridge tools are supported:
``uint256``, ``uint16`` and ``address``, each occupying one 32-byte word.
New call shapes are added by extending ``_WIDTHS``, not by turning this into
a general ABI encoder.
"""

from __future__ import annotations

from typing import Iterable, Tuple, Union

WORD_SIZE = 32
SELECTOR_SIZE = 4
ADDRESS_SIZE = 20

# Bit width of each supported integer type tag.
_WIDTHS = {
    "uint256": 256,
    "uint16": 16,
}

AddressLike = Union[str, bytes]


class EncodingError(ValueError):
    """Raised when calldata cannot be encoded."""


class UnsupportedTypeError(EncodingError):
    """Raised for a type tag outside the supported set."""


class ValueOutOfRangeError(EncodingError):
    """Raised when a value does not fit its slot."""


def _to_bytes(value: AddressLike, *, what: str) -> bytes:
    if isinstance(value, bytes):
        return value
    if isinstance(value, str):
        text = value[2:] if value[:2].lower() == "0x" else value
        try:
            return bytes.fromhex(text)
        except ValueError:
            raise ValueOutOfRangeError(f"Invalid hex {what}: {value!r}") from None
    raise ValueOutOfRangeError(f"Unsupported {what} value: {value!r}")


def selector_bytes(selector: AddressLike) -> bytes:
    raw = _to_bytes(selector, what="selector")
    if len(raw) != SELECTOR_SIZE:
        raise EncodingError(f"Selector must be {SELECTOR_SIZE} bytes, got {len(raw)}")
    return raw


def address_bytes(address: AddressLike) -> bytes:
    raw = _to_bytes(address, what="address")
    if len(raw) != ADDRESS_SIZE:
        raise ValueOutOfRangeError(f"Address must be {ADDRESS_SIZE} bytes, got {len(raw)}")
    return raw


def pad_address(address: AddressLike, width: int = WORD_SIZE) -> bytes:
    """Left-pad a 20-byte address with zeros to ``width`` bytes."""
    raw = address_bytes(address)
    if width < ADDRESS_SIZE:
        raise ValueOutOfRangeError(f"Cannot pad an address into {width} bytes")
    return raw.rjust(width, b"\x00")


def encode_uint(value: int, bits: int) -> bytes:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueOutOfRangeError(f"uint{bits} value must be an integer, got {value!r}")
    if value < 0 or value >= 1 << bits:
        raise ValueOutOfRangeError(f"Value {value} does not fit in uint{bits}")
    return value.to_bytes(WORD_SIZE, "big")


def encode_argument(type_tag: str, value: object) -> bytes:
    if type_tag == "address":
        return pad_address(value)  # type: ignore[arg-type]
    bits = _WIDTHS.get(type_tag)
    if bits is None:
        raise UnsupportedTypeError(f"Unsupported type: {type_tag}")
    return encode_uint(value, bits)  # type: ignore[arg-type]


def encode_calldata(selector: AddressLike, args: Iterable[Tuple[str, object]]) -> bytes:
    """
    Concatenate a 4-byte selector with one 32-byte word per argument.

    Args:
        selector: function selector as bytes or a ``0x``-prefixed hex string.
        args: ordered ``(type_tag, value)`` pairs.

    Returns:
        Exactly ``4 + 32 * len(args)`` bytes.
    """
    parts = [selector_bytes(selector)]
    for type_tag, value in args:
        parts.append(encode_argument(type_tag, value))
    return b"".join(parts)
