"""
General use constants.
"""

from __future__ import annotations
from typing import Final

DECIMAL: Final[frozenset[str]] = frozenset({"0", "1", "2", "3", "4", "5", "6", "7", "8", "9"})
HEXADECIMAL: Final[frozenset[str]] = DECIMAL | {"a", "b", "c", "d", "e", "f", "A", "B", "C", "D", "E", "F"}
SIGNS: Final[tuple[str, ...]] = ("-", "+")

INT64_MAX: Final[int] = 2**63 - 1
"""Default upper bound for `integer()`. Larger values fail instead of wrapping."""

EXCERPT_LENGTH: Final[int] = 20
"""How many characters of the input a failure message quotes."""

EITHER_CONNECTIVE: Final[str] = " AND "
CHOICE_NOTICE: Final[str] = "choice: No parsers matched."

GENERAL_ESCAPES: Final[dict[str, str]] = {
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
}
