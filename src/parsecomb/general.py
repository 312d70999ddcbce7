from __future__ import annotations

from collections.abc import Mapping

import parsecomb.const as const
from parsecomb.main import (
    FailureKind,
    Failed,
    Matched,
    ParseOutcome,
    Parser,
    character,
    choice,
    digits,
    integer,
    between,
    string_matching,
)

def any_character() -> Parser[str]:
    """Matches any single character. Fails on empty input."""
    def attempt(src: str) -> ParseOutcome[str]:
        if not src:
            return Failed("String is empty, expected any character.", FailureKind.EMPTY_INPUT)
        return Matched(src[0], src[1:])
    return Parser(attempt, "any_character()")

def one_of(chars: str) -> Parser[str]:
    """Matches a single character that's in `chars`."""
    if len(chars) <= 0:
        raise ValueError("At least one character required.")
    return choice(*(character(c) for c in chars)).named(f"one_of({chars!r})")

def sign() -> Parser[str]:
    """`-` or `+`."""
    return one_of("".join(const.SIGNS)).named("sign()")

# numbers

def signed_integer(max_value: int | None = const.INT64_MAX) -> Parser[int]:
    """
    An optional sign followed by an integer.

    With a `max_value`, values outside of `-max_value-1 .. max_value` fail.
    """
    def apply_sign(pair: tuple[str, int]) -> int:
        return -pair[1] if pair[0] == "-" else pair[1]

    if max_value is None:
        return sign().optional("+").followed_by(integer(max_value=None)).map(apply_sign).named("signed_integer()")

    def in_range(value: int) -> bool:
        return -max_value - 1 <= value <= max_value

    # the magnitude bound leaves room for the most negative value
    magnitude = integer(max_value=max_value + 1)
    return (
        sign().optional("+").followed_by(magnitude).map(apply_sign)
        .where(in_range)
        .named(f"signed_integer(max_value={max_value!r})" if max_value != const.INT64_MAX else "signed_integer()")
    )

def decimal_number() -> Parser[float]:
    """
    A decimal number with an optional sign, fraction and exponent.

    `12`, `-1.5`, `3.0e-2`, `+7E3`

    At least one digit is required before the point. A point or an exponent marker that isn't followed by digits is left in the remainder.
    """
    optional_sign = sign().optional("")
    fraction = digits().preceded_by(character(".")).map(lambda d: "." + d).optional("")
    exponent = (
        one_of("eE").followed_by(optional_sign).followed_by(digits())
        .map(lambda t: "e" + t[0][1] + t[1])
        .optional("")
    )
    return (
        optional_sign.followed_by(digits()).followed_by(fraction).followed_by(exponent)
        .map(lambda t: float(t[0][0][0] + t[0][0][1] + t[0][1] + t[1]))
        .named("decimal_number()")
    )

# quoted string

def unicode_escape() -> Parser[str]:
    """`u` followed by exactly 4 hexadecimal digits."""
    hex_digit = one_of("".join(sorted(const.HEXADECIMAL)))
    code = hex_digit
    for _ in range(3):
        code = code.followed_by(hex_digit).map(lambda pair: pair[0] + pair[1])
    return code.preceded_by(character("u")).map(lambda h: chr(int(h, base=16))).named("unicode_escape()")

def quoted_string(
    quote: str = '"',
    *,
    escape: str = "\\",
    custom_escapes: Mapping[str, str] = const.GENERAL_ESCAPES,
) -> Parser[str]:
    """
    A string between two `quote` characters. The value doesn't include the quotes.

    After `escape`:
    - A key of `custom_escapes` is replaced with its value.
    - `u` and 4 hexadecimal digits is replaced with that code point.
    - Any other character is kept as-is. (Including the quote and the escape character.)

    Fails if there's no closing quote.
    """
    if len(quote) != 1 or len(escape) != 1:
        raise ValueError("The quote and escape must be single characters.")
    if quote == escape:
        raise ValueError("The quote and escape must be different characters.")
    plain = string_matching(lambda c: c != quote and c != escape, "unquoted text")
    escaped = choice(
        unicode_escape(),
        *(character(key).map_constant(value) for key, value in custom_escapes.items()),
        any_character(),
    ).preceded_by(character(escape))
    body = choice(plain, escaped).zero_or_more().map("".join)
    return between(quote, body, quote).named(f"quoted_string({quote!r})")
