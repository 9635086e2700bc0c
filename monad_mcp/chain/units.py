"""Conversions between decimal token amounts and 18-decimal base units."""

from __future__ import annotations

from decimal import Decimal
from typing import Union

from web3 import Web3


def to_wei(amount: Union[Decimal, str, int]) -> int:
    return int(Web3.to_wei(Decimal(str(amount)), "ether"))


def format_amount(amount: Union[Decimal, int]) -> str:
    """Render like ``1.0`` or ``0.25``: no exponent, at least one decimal."""
    text = format(Decimal(amount).normalize(), "f")
    if "." not in text:
        text += ".0"
    return text


def format_ether(wei: int) -> str:
    return format_amount(Decimal(Web3.from_wei(int(wei), "ether")))
