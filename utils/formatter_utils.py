# MIT License
#
# Copyright (c) 2018 Evgeny Medvedev, evge.medvedev@gmail.com
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in all
# copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.
#
# Modified by: Cuong CT, 6/12/2025
# Change Description: using eth_utils library for implement some formatter utilities
# - Added unit scaling helpers for proposal reports (votes, ether values).

from decimal import Decimal
from typing import Any, Optional, Union

from eth_utils import from_wei, is_address
from eth_utils import to_checksum_address as eth_to_checksum_address
from hexbytes import HexBytes

from utils.logger_utils import get_logger

logger = get_logger("Formatter Utils")


def to_checksum_address(address: Optional[str]) -> Optional[str]:
    """
    Convert address to its EIP-55 checksum form.
    Safe-guards against None or invalid types.
    """
    if address is None or not isinstance(address, str):
        return None

    if not is_address(address):
        raise ValueError(f"Invalid address: {address}")
    return eth_to_checksum_address(address)


def format_units(amount: int, decimals: int) -> Decimal:
    """Scales a raw integer token amount down by `decimals` (e.g. 10**18 -> 1)."""
    return Decimal(amount).scaleb(-decimals)


def format_ether(wei: int) -> Union[int, Decimal]:
    return from_wei(wei, "ether")


def format_arg(value: Any) -> str:
    """Renders a decoded ABI value for display (bytes as 0x-hex, sequences bracketed)."""
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(format_arg(item) for item in value) + "]"
    return str(value)


def to_hex_str(value: Union[bytes, str, None]) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    return "0x" + HexBytes(value).hex().removeprefix("0x")
