"""
The implementations of the main classes and combinators.
"""

from __future__ import annotations
from typing import overload, Any, Self, Literal, TypeVar, Generic, Callable, Protocol, Union, runtime_checkable

from dataclasses import dataclass
import enum
import logging

import parsecomb.const as const

logger = logging.getLogger(__name__)


_T = TypeVar("_T")
_U = TypeVar("_U")
_D = TypeVar("_D")
_LeftT = TypeVar("_LeftT")
_RightT = TypeVar("_RightT")
_ValueCovT = TypeVar("_ValueCovT", covariant=True)



class FailureKind(enum.Enum):
    """
    Why a parser failed.

    Failures are always returned as `Failed` values. The kind is an addition to the message, so callers don't have to inspect message text to branch on it.
    """
    EMPTY_INPUT = "empty_input"
    """A parser required at least one character and had none."""
    MISMATCH = "mismatch"
    """The input differs from what was expected."""
    EXHAUSTED = "exhausted"
    """Every alternative of an `either()` or `choice()` failed."""
    REJECTED = "rejected"
    """The underlying parser matched, but a predicate rejected the value."""


class ParseError(Exception):
    """
    The exception that's raised when a failure has to be turned into an error.

    Parsers never raise this themselves. It's raised by `Parser.parse()`, or created from a failure with `Failed.error()`.
    """

    def __init__(self, msg: str, kind: FailureKind = FailureKind.MISMATCH, remainder: str | None = None) -> None:
        """
        `msg`: The reason for the error.
        `kind`: The kind of the failure that caused the error.
        `remainder`: The unconsumed input, if the parser matched.
        """
        super().__init__(msg)
        self.msg: str = msg
        self.kind: FailureKind = kind
        self.remainder: str | None = remainder

class ExcessInput(ParseError):
    """Raised by `Parser.parse()` when the parser matched but didn't consume the whole input."""


@dataclass(frozen=True)
class Matched(Generic[_ValueCovT]):
    """
    When returned from a parser, indicates that it has succeeded.

    ```
    r = parser.run("blablabla")
    if r:
        ... # `r` is a `Matched` object
    else:
        ... # `r` is a `Failed` object
    ```
    """
    value: _ValueCovT
    remainder: str
    """The unconsumed suffix of the input."""

    def __bool__(self) -> Literal[True]:
        return True

@dataclass(frozen=True)
class Failed:
    """
    When returned from a parser, indicates that it has failed.

    Carries no remainder. To try an alternative, start again from the original input.
    """
    message: str
    kind: FailureKind = FailureKind.MISMATCH

    def error(self) -> ParseError:
        """Converts this to a ParseError."""
        return ParseError(self.message, self.kind)

    def __bool__(self) -> Literal[False]:
        return False

ParseOutcome = Union[Matched[_T], Failed]


@dataclass(frozen=True)
class Left(Generic[_ValueCovT]):
    """The value of the first parser of an `either()`."""
    value: _ValueCovT

@dataclass(frozen=True)
class Right(Generic[_ValueCovT]):
    """The value of the second parser of an `either()`."""
    value: _ValueCovT

Either = Union[Left[_LeftT], Right[_RightT]]


def _describe(obj: Any) -> str:
    if isinstance(obj, Parser):
        return obj.name
    return getattr(obj, "__name__", repr(obj))

def _excerpt(src: str) -> str:
    """The start of `src` for failure messages."""
    if len(src) <= const.EXCERPT_LENGTH:
        return repr(src)
    return repr(src[:const.EXCERPT_LENGTH]) + "..."



class Parser(Generic[_ValueCovT]):
    """
    Wraps a function that attempts to consume a prefix of a string.

    Parsers are immutable and hold no state between runs, so they can be stored, shared and combined freely.
    Build them using the primitive parsers and combinators instead of calling the constructor directly.

    ```
    numbers = between("[", integer().separated_by(","), "]")

    r = numbers.run("[1,2,3]")
    if r:
        r.value         # [1, 2, 3]
        r.remainder     # ""
    else:
        r.message       # The reason for the failure.
    ```
    """

    def __init__(self, attempt: Callable[[str], ParseOutcome[_ValueCovT]], name: str = "parser") -> None:
        """
        `attempt`: The parsing function. Must return a `Matched` whose remainder is a suffix of its input, or a `Failed`.
        `name`: Describes how the parser was built. Used by `repr()` and `debug()`.
        """
        self._attempt: Callable[[str], ParseOutcome[_ValueCovT]] = attempt
        self.name: str = name

    def attempt(self, src: str) -> ParseOutcome[_ValueCovT]:
        """Runs the wrapped parsing function on `src`."""
        return self._attempt(src)

    def run(self, src: str) -> ParseOutcome[_ValueCovT]:
        """
        Runs the parser. Usually only called on the outermost parser.

        Doesn't require the whole input to be consumed. Check the remainder, or use `parse()` instead.
        """
        return self._attempt(src)

    def __call__(self, src: str) -> ParseOutcome[_ValueCovT]:
        """Same as `Parser.run()`."""
        return self._attempt(src)

    def parse(self, src: str) -> _ValueCovT:
        """
        Runs the parser and returns the value.

        Raises a `ParseError` if the parser fails, and an `ExcessInput` if any input is left over.
        """
        outcome = self._attempt(src)
        if isinstance(outcome, Failed):
            raise outcome.error()
        if outcome.remainder:
            raise ExcessInput(f"Unconsumed input after {self.name}: {_excerpt(outcome.remainder)}", FailureKind.MISMATCH, outcome.remainder)
        return outcome.value

    def named(self, name: str) -> Parser[_ValueCovT]:
        """Creates a copy of this parser with the provided name."""
        return Parser(self._attempt, name)

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"

    # transforms

    def map(self, transformer: Callable[[_ValueCovT], _U]) -> Parser[_U]:
        """Maps the value to a new value. Failures are propagated unchanged."""
        def attempt(src: str) -> ParseOutcome[_U]:
            outcome = self._attempt(src)
            if isinstance(outcome, Failed):
                return outcome
            return Matched(transformer(outcome.value), outcome.remainder)
        return Parser(attempt, f"{self.name}.map({_describe(transformer)})")

    def map_error(self, transformer: Callable[[str], str]) -> Parser[_ValueCovT]:
        """Maps the failure message. Matches are returned unchanged."""
        def attempt(src: str) -> ParseOutcome[_ValueCovT]:
            outcome = self._attempt(src)
            if isinstance(outcome, Failed):
                return Failed(transformer(outcome.message), outcome.kind)
            return outcome
        return Parser(attempt, f"{self.name}.map_error({_describe(transformer)})")

    def map_constant(self, constant: _U) -> Parser[_U]:
        """Discards the value and always returns `constant` when matched."""
        return self.map(lambda _: constant).named(f"{self.name}.map_constant({constant!r})")

    def map_to_int(self) -> Parser[int]:
        """
        Converts the matched text with `int()`.

        The matched text must be convertible. Anything else raises `ValueError`, which is a usage error and not a parse failure.
        """
        return self.map(int).named(f"{self.name}.map_to_int()")

    def where(self, predicate: Callable[[_ValueCovT], bool]) -> Parser[_ValueCovT]:
        """
        Filters the value.

        Matches only if this parser matches and `predicate` holds for the value.
        Otherwise fails with a message naming the rejected value.
        """
        def attempt(src: str) -> ParseOutcome[_ValueCovT]:
            outcome = self._attempt(src)
            if isinstance(outcome, Failed):
                return outcome
            if not predicate(outcome.value):
                return Failed(f"{outcome.value!r} was rejected by {_describe(predicate)}.", FailureKind.REJECTED)
            return outcome
        return Parser(attempt, f"{self.name}.where({_describe(predicate)})")

    def debug(self, label: str | None = None) -> Parser[_ValueCovT]:
        """
        Logs the outcome at DEBUG level without altering it.

        Enable the output with `logging.basicConfig(level=logging.DEBUG)`.
        """
        tag = self.name if label is None else label
        def attempt(src: str) -> ParseOutcome[_ValueCovT]:
            outcome = self._attempt(src)
            if isinstance(outcome, Matched):
                logger.debug("%s matched %r, remainder %r", tag, outcome.value, outcome.remainder)
            else:
                logger.debug("%s failed on %r: %s", tag, src, outcome.message)
            return outcome
        return Parser(attempt, self.name)

    @overload
    def optional(self) -> Parser[_ValueCovT | None]: ...
    @overload
    def optional(self, default: _D) -> Parser[_ValueCovT | _D]: ...

    def optional(self, default: Any = None) -> Parser[Any]:
        """
        Never fails.

        If this parser fails, matches `default` without consuming anything.
        """
        def attempt(src: str) -> ParseOutcome[Any]:
            outcome = self._attempt(src)
            if isinstance(outcome, Failed):
                return Matched(default, src)
            return outcome
        return Parser(attempt, f"{self.name}.optional({default!r})")

    # sequencing

    def followed_by(self, other: Parser[_U]) -> Parser[tuple[_ValueCovT, _U]]:
        """
        Runs `other` on the remainder of this parser.

        Returns a tuple of both values. Fails with whichever failure happened first.
        """
        def attempt(src: str) -> ParseOutcome[tuple[_ValueCovT, _U]]:
            first = self._attempt(src)
            if isinstance(first, Failed):
                return first
            second = other.attempt(first.remainder)
            if isinstance(second, Failed):
                return second
            return Matched((first.value, second.value), second.remainder)
        return Parser(attempt, f"{self.name}.followed_by({other.name})")

    def skipping(self, other: Parser[Any]) -> Parser[_ValueCovT]:
        """
        Same as `followed_by()`, but ignores the value of `other`.

        You could use this to skip a separator after some other parser.
        """
        return self.followed_by(other).map(lambda pair: pair[0]).named(f"{self.name}.skipping({other.name})")

    def preceded_by(self, other: Parser[Any]) -> Parser[_ValueCovT]:
        """Runs `other` first and ignores its value."""
        return other.followed_by(self).map(lambda pair: pair[1]).named(f"{self.name}.preceded_by({other.name})")

    def skipping_whitespace(self) -> Parser[_ValueCovT]:
        """Skips zero or more whitespaces after this parser. Doesn't fail if there aren't any."""
        return self.skipping(whitespace().optional("")).named(f"{self.name}.skipping_whitespace()")

    def skipping_at_least_one_whitespace(self) -> Parser[_ValueCovT]:
        """Skips one or more whitespaces after this parser. Fails if there aren't any."""
        return self.skipping(whitespace()).named(f"{self.name}.skipping_at_least_one_whitespace()")

    # repetition

    def zero_or_more(self) -> Parser[list[_ValueCovT]]:
        """Repeatedly matches this parser until it fails. Never fails."""
        return _repetition(self, None, at_least_one=False, name=f"{self.name}.zero_or_more()")

    def one_or_more(self) -> Parser[list[_ValueCovT]]:
        """Repeatedly matches this parser until it fails. Fails if it didn't match at least once."""
        return _repetition(self, None, at_least_one=True, name=f"{self.name}.one_or_more()")

    def separated_by(self, separator: FactoryParameter) -> Parser[list[_ValueCovT]]:
        """
        Matches this parser repeatedly, with `separator` in between. The values of the separator are ignored.

        Never fails. Zero elements results in an empty list.

        After each element the separator is attempted, and looping stops when it fails. A trailing separator is consumed.
        """
        sep = convert_factory_parameter(separator)
        return _repetition(self, sep, at_least_one=False, name=f"{self.name}.separated_by({sep.name})")

    def separated_by1(self, separator: FactoryParameter) -> Parser[list[_ValueCovT]]:
        """Same as `separated_by()`, but fails if there are zero elements."""
        sep = convert_factory_parameter(separator)
        return _repetition(self, sep, at_least_one=True, name=f"{self.name}.separated_by1({sep.name})")


def _repetition(element: Parser[_T], separator: Parser[Any] | None, *, at_least_one: bool, name: str) -> Parser[list[_T]]:
    def attempt(src: str) -> ParseOutcome[list[_T]]:
        values: list[_T] = []
        remainder = src
        failure: Failed | None = None
        while True:
            outcome = element.attempt(remainder)
            if isinstance(outcome, Failed):
                failure = outcome
                break
            rest = outcome.remainder
            separated = separator is None
            if separator is not None:
                sep = separator.attempt(rest)
                if isinstance(sep, Matched):
                    rest = sep.remainder
                    separated = True
            # a remainder is a suffix, so an unchanged length means no progress
            if len(rest) >= len(remainder):
                logger.warning("%s: an iteration matched without consuming input, stopping.", name)
                break
            values.append(outcome.value)
            remainder = rest
            if not separated:
                break
        if at_least_one and not values:
            if failure is None:
                return Failed(f"{name}: Expected at least one element that consumes input.")
            return Failed(f"{name}: Expected at least one element. {failure.message}", failure.kind)
        return Matched(values, remainder)
    return Parser(attempt, name)



# primitive parsers

def character(value: str) -> Parser[str]:
    """Matches exactly one character equal to `value`."""
    if len(value) != 1:
        raise ValueError(f"Expected a single character, got {value!r}.")
    def attempt(src: str) -> ParseOutcome[str]:
        if not src:
            return Failed(f"String is empty, expected {value!r}.", FailureKind.EMPTY_INPUT)
        if src[0] != value:
            return Failed(f"{src[0]!r} from {_excerpt(src)} is not {value!r}.")
        return Matched(value, src[1:])
    return Parser(attempt, repr(value))

def string_matching(predicate: Callable[[str], bool], description: str | None = None) -> Parser[str]:
    """
    Matches the longest run of leading characters for which `predicate` holds.

    Fails if the run is empty, including on empty input.
    """
    desc = _describe(predicate) if description is None else description
    def attempt(src: str) -> ParseOutcome[str]:
        if not src:
            return Failed(f"String is empty, expected {desc}.", FailureKind.EMPTY_INPUT)
        end = 0
        while end < len(src) and predicate(src[end]):
            end += 1
        if end == 0:
            return Failed(f"Didn't find any leading {desc} in {_excerpt(src)}.")
        return Matched(src[:end], src[end:])
    return Parser(attempt, f"string_matching({desc})")

def letters() -> Parser[str]:
    """Leading letters, as classified by `str.isalpha()`."""
    return string_matching(str.isalpha, "letters").named("letters()")

def whitespace() -> Parser[str]:
    """Leading whitespace (spaces, tabs, newlines, etc.), as classified by `str.isspace()`."""
    return string_matching(str.isspace, "whitespace").named("whitespace()")

def digits() -> Parser[str]:
    """Leading decimal digits, as classified by `str.isdecimal()`. Any such run is accepted by `int()`."""
    return string_matching(str.isdecimal, "digits").named("digits()")

def literal(value: str) -> Parser[str]:
    """Matches the given string exactly. Case sensitive."""
    if len(value) <= 0:
        raise ValueError("Literal can't be empty.")
    def attempt(src: str) -> ParseOutcome[str]:
        if not src:
            return Failed(f"String is empty, expected {value!r}.", FailureKind.EMPTY_INPUT)
        if not src.startswith(value):
            return Failed(f"Expected {value!r}, found {src[:len(value)]!r}.")
        return Matched(value, src[len(value):])
    return Parser(attempt, f"literal({value!r})")

def text_up_to(delimiter: str) -> Parser[str]:
    """
    Matches the text before the first occurrence of `delimiter`.

    The delimiter is left in the remainder. The matched text can be empty. Fails if the delimiter isn't found.
    """
    if len(delimiter) <= 0:
        raise ValueError("Delimiter can't be empty.")
    def attempt(src: str) -> ParseOutcome[str]:
        index = src.find(delimiter)
        if index < 0:
            return Failed(f"Delimiter {delimiter!r} not found in {_excerpt(src)}.", FailureKind.EMPTY_INPUT if not src else FailureKind.MISMATCH)
        return Matched(src[:index], src[index:])
    return Parser(attempt, f"text_up_to({delimiter!r})")

def text_through(delimiter: str) -> Parser[str]:
    """
    Matches the text up to and including the first occurrence of `delimiter`.

    The delimiter is consumed and is part of the value. Fails if the delimiter isn't found.
    """
    if len(delimiter) <= 0:
        raise ValueError("Delimiter can't be empty.")
    def attempt(src: str) -> ParseOutcome[str]:
        index = src.find(delimiter)
        if index < 0:
            return Failed(f"Delimiter {delimiter!r} not found in {_excerpt(src)}.", FailureKind.EMPTY_INPUT if not src else FailureKind.MISMATCH)
        end = index + len(delimiter)
        return Matched(src[:end], src[end:])
    return Parser(attempt, f"text_through({delimiter!r})")

def integer(max_value: int | None = const.INT64_MAX) -> Parser[int]:
    """
    Leading decimal digits as an unsigned integer.

    Fails when there are no leading digits, or when the value is greater than `max_value`. Pass `None` to allow any size.

    Without a bound, a run of digits too long for `int()` to convert fails instead of raising.
    """
    digit_run = digits()
    name = "integer()" if max_value == const.INT64_MAX else f"integer(max_value={max_value!r})"
    def attempt(src: str) -> ParseOutcome[int]:
        outcome = digit_run.attempt(src)
        if isinstance(outcome, Failed):
            return outcome
        text = outcome.value
        # checked before converting, so overlong runs never reach int()
        if max_value is not None and len(text.lstrip("0")) > len(str(max_value)):
            return Failed(f"Integer with {len(text)} digits is greater than the maximum {max_value}.")
        try:
            value = int(text)
        except ValueError:
            return Failed(f"Integer with {len(text)} digits can't be converted.")
        if max_value is not None and value > max_value:
            return Failed(f"Integer {value} is greater than the maximum {max_value}.")
        return Matched(value, outcome.remainder)
    return Parser(attempt, name)


FactoryParameter = Union[Parser[Any], str]

def convert_factory_parameter(parser: FactoryParameter) -> Parser[Any]:
    """Single characters become `character()` parsers, longer strings become `literal()` parsers."""
    if isinstance(parser, str):
        if len(parser) == 1:
            return character(parser)
        return literal(parser)
    else:
        assert isinstance(parser, Parser)
        return parser



# bounding

def between(left: FactoryParameter, content: Parser[_T], right: FactoryParameter) -> Parser[_T]:
    """
    Returns a parser for the content in between the left and right bounding parsers.

    The bounds can also be given as strings. You might use this for parsing content between `(` and `)`:
    ```
    between("(", integer(), ")")
    ```
    """
    left_parser = convert_factory_parameter(left)
    right_parser = convert_factory_parameter(right)
    return (
        left_parser.followed_by(content).followed_by(right_parser)
        .map(lambda nested: nested[0][1])
        .named(f"between({left_parser.name}, {content.name}, {right_parser.name})")
    )

def split(left: Parser[_T], separator: FactoryParameter, right: Parser[_U]) -> Parser[tuple[_T, _U]]:
    """Like `between()`, but keeps the outer values and ignores the value of the separator in the middle."""
    separator_parser = convert_factory_parameter(separator)
    return (
        left.skipping(separator_parser).followed_by(right)
        .named(f"split({left.name}, {separator_parser.name}, {right.name})")
    )



# alternation

def either(first: Parser[_LeftT], second: Parser[_RightT]) -> Parser[Either[_LeftT, _RightT]]:
    """
    Matches one or the other of the two parsers, trying `first` first.

    `second` is tried on the original input. If both fail, the failure contains both messages.
    """
    def attempt(src: str) -> ParseOutcome[Either[_LeftT, _RightT]]:
        first_outcome = first.attempt(src)
        if isinstance(first_outcome, Matched):
            return Matched(Left(first_outcome.value), first_outcome.remainder)
        second_outcome = second.attempt(src)
        if isinstance(second_outcome, Matched):
            return Matched(Right(second_outcome.value), second_outcome.remainder)
        return Failed(f"{first_outcome.message}{const.EITHER_CONNECTIVE}{second_outcome.message}", FailureKind.EXHAUSTED)
    return Parser(attempt, f"either({first.name}, {second.name})")

def choice(*parsers: Parser[_T]) -> Parser[_T]:
    """
    Attempts to match any of the parsers, in order, until one matches. Each one is tried on the original input.

    If none match, fails with a generic notice followed by each of the failure messages.
    """
    if len(parsers) <= 0:
        raise ValueError("At least one parser required.")
    def attempt(src: str) -> ParseOutcome[_T]:
        messages: list[str] = []
        for parser in parsers:
            outcome = parser.attempt(src)
            if isinstance(outcome, Matched):
                return outcome
            messages.append(outcome.message)
        return Failed(f"{const.CHOICE_NOTICE} ({'; '.join(messages)})", FailureKind.EXHAUSTED)
    return Parser(attempt, f"choice({', '.join(p.name for p in parsers)})")



# recursion

def lazily_provided(factory: Callable[[], Parser[_T]]) -> Parser[_T]:
    """
    Calls `factory` each time the parser runs, and runs the parser it returns.

    Useful when a parser has to refer to itself. The factory isn't called at construction time, and is called again on every run, so it should be cheap and have no side effects.
    """
    return Parser(lambda src: factory().attempt(src), f"lazily_provided({_describe(factory)})")

class Forward(Parser[_T]):
    """
    A placeholder for a parser that's defined later.

    ```
    value = Forward("value")
    array = between("[", value.separated_by(","), "]")
    value.define(choice(integer(), array))
    ```
    """

    def __init__(self, name: str = "forward") -> None:
        super().__init__(self._attempt_definition, name)
        self.definition: Parser[_T] | None = None

    def define(self, parser: Parser[_T]) -> Self:
        """Registers the real parser. Can only be done once."""
        if self.definition is not None:
            raise RuntimeError(f"Forward parser {self.name!r} is already defined.")
        self.definition = parser
        logger.debug("Defined forward parser %s as %s", self.name, parser.name)
        return self

    def _attempt_definition(self, src: str) -> ParseOutcome[_T]:
        if self.definition is None:
            raise RuntimeError(f"Forward parser {self.name!r} was used before being defined.")
        return self.definition.attempt(src)



# capability

@runtime_checkable
class ParserProviding(Protocol):
    """
    A protocol for types that can provide a parser for themselves.

    ```
    class Point:
        @classmethod
        def parser(cls) -> Parser[Point]:
            return split(integer(), ",", integer()).map(lambda xy: cls(*xy))
    ```
    """
    @classmethod
    def parser(cls) -> Parser[Self]: ...

def provided(cls: type[ParserProviding]) -> Parser[Any]:
    """A lazily provided parser for a `ParserProviding` type. Lets recursive types refer to their own parser."""
    return lazily_provided(cls.parser).named(f"provided({cls.__name__})")



def run(parser: Parser[_T], src: str) -> ParseOutcome[_T]:
    """Same as `Parser.run()`."""
    return parser.run(src)
