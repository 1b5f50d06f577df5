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

from decimal import ROUND_HALF_UP, Context, Decimal, localcontext
from typing import Any, Optional, Union

from eth_utils import to_checksum_address as eth_to_normalized_address
from eth_utils import to_int

from utils.logger_utils import get_logger

logger = get_logger("Formatter Utils")

# Enough precision for uint256 amounts
DECIMAL_CONTEXT = Context(prec=96)

FIXED_POINT_SCALE = Decimal(10) ** 18
TWO_PLACES = Decimal("0.01")


def hex_to_dec(hex_string: Optional[str]) -> Optional[int]:
    """
    Converts a hex string to decimal integer.
    """
    if hex_string is None:
        return None
    try:
        return to_int(hexstr=hex_string)
    except (ValueError, TypeError):
        logger.warning(f"Invalid hex string for conversion: {hex_string}")
        return None


def to_normalized_address(address: Optional[str]) -> Optional[str]:
    """
    Converts an address to its checksummed form.
    Safe-guards against None or invalid types.
    """
    if address is None or not isinstance(address, str):
        return None

    try:
        return eth_to_normalized_address(address)
    except ValueError:
        return address.lower()


def _to_decimal(value: Union[int, str, Decimal]) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, str) and value.startswith("0x"):
        return Decimal(int(value, 16))
    return Decimal(value)


def _two_places(value: Decimal) -> str:
    return f"{value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP):f}"


def defactor(amount: Union[int, str, Decimal], decimals: int) -> str:
    """
    Converts an integer token amount to human units with two decimal places.

    >>> defactor(1_000_000, 6)
    '1.00'
    """
    with localcontext(DECIMAL_CONTEXT):
        scaled = _to_decimal(amount) / (Decimal(10) ** int(decimals))
        return _two_places(scaled)


def get_percentage_for_factor(factor: Union[int, str, Decimal]) -> str:
    """
    Renders a 1e18-scaled fixed point ratio as a percentage.

    >>> get_percentage_for_factor(5 * 10**16)
    '5.00%'
    """
    with localcontext(DECIMAL_CONTEXT):
        percentage = (_to_decimal(factor) / FIXED_POINT_SCALE) * 100
        return f"{_two_places(percentage)}%"


def format_arg(value: Any) -> str:
    """Renders a decoded ABI value as text."""
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(format_arg(item) for item in value) + "]"
    return str(value)
