"""Tests for recursive grammars and the ParserProviding protocol."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import pytest

from parsecomb import (
    Forward,
    Matched,
    Parser,
    ParserProviding,
    between,
    either,
    integer,
    lazily_provided,
    provided,
    split,
)


class TestLazilyProvided:
    def test_recursive_array(self) -> None:
        node: Parser[Any] = lazily_provided(lambda: either(integer(), array).map(lambda e: e.value))
        array = between("[", node.separated_by(","), "]")

        result = node.run("[1,[2,3],4,5]")

        assert isinstance(result, Matched)
        assert result.remainder == ""
        assert len(result.value) == 4
        assert result.value == [1, [2, 3], 4, 5]

    def test_deeper_nesting(self) -> None:
        node: Parser[Any] = lazily_provided(lambda: either(integer(), array).map(lambda e: e.value))
        array = between("[", node.separated_by(","), "]")

        assert node.run("[[[]],[1]]") == Matched([[[]], [1]], "")

    def test_factory_called_per_run_only(self) -> None:
        calls: list[int] = []

        def factory() -> Parser[int]:
            calls.append(1)
            return integer()

        parser = lazily_provided(factory)
        assert calls == []

        parser.run("1")
        parser.run("2")
        assert len(calls) == 2


class TestForward:
    def test_recursive_array(self) -> None:
        value: Forward[Any] = Forward("value")
        array = between("[", value.separated_by(","), "]")
        value.define(either(integer(), array).map(lambda e: e.value))

        assert value.run("[1,[2,3],4,5]") == Matched([1, [2, 3], 4, 5], "")

    def test_undefined_raises(self) -> None:
        with pytest.raises(RuntimeError):
            Forward("value").run("1")

    def test_define_once(self) -> None:
        value: Forward[int] = Forward("value")
        value.define(integer())

        with pytest.raises(RuntimeError):
            value.define(integer())

    def test_define_returns_placeholder(self) -> None:
        value: Forward[int] = Forward("value")

        assert value.define(integer()) is value


@dataclass(frozen=True)
class Point:
    x: int
    y: int

    @classmethod
    def parser(cls) -> Parser[Point]:
        return split(integer(), ",", integer()).map(lambda xy: cls(*xy))


@dataclass(frozen=True)
class Tree:
    children: tuple[Tree, ...]

    @classmethod
    def parser(cls) -> Parser[Tree]:
        return between("(", provided(Tree).zero_or_more(), ")").map(lambda cs: cls(tuple(cs)))


class TestParserProviding:
    def test_conforming_type(self) -> None:
        assert isinstance(Point(0, 0), ParserProviding)

    def test_parses_itself(self) -> None:
        assert Point.parser().run("3,4 rest") == Matched(Point(3, 4), " rest")

    def test_recursive_type(self) -> None:
        assert Tree.parser().parse("(()(()))") == Tree((Tree(()), Tree((Tree(()),))))

    def test_provided_name(self) -> None:
        assert provided(Point).name == "provided(Point)"
