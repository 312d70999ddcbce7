"""Tests for the primitive parsers."""

from __future__ import annotations

import pytest

from parsecomb import (
    Failed,
    FailureKind,
    Matched,
    character,
    const,
    digits,
    integer,
    letters,
    literal,
    string_matching,
    text_through,
    text_up_to,
    whitespace,
)


class TestCharacter:
    def test_matches(self) -> None:
        assert character("A").run("ABC") == Matched("A", "BC")

    def test_does_not_match(self) -> None:
        result = character("A").run("ZBC")

        assert isinstance(result, Failed)
        assert result.kind is FailureKind.MISMATCH
        assert "'Z'" in result.message
        assert "'A'" in result.message

    def test_long_input_is_shortened_in_message(self) -> None:
        result = character("A").run("Z" * 1000)

        assert isinstance(result, Failed)
        assert len(result.message) < 100
        assert "..." in result.message

    def test_short_input_is_quoted_whole(self) -> None:
        result = character("A").run("ZBC")

        assert isinstance(result, Failed)
        assert "'ZBC'" in result.message
        assert "..." not in result.message

    def test_empty_input(self) -> None:
        result = character("A").run("")

        assert isinstance(result, Failed)
        assert result.kind is FailureKind.EMPTY_INPUT

    def test_rejects_more_than_one_character(self) -> None:
        with pytest.raises(ValueError):
            character("AB")


class TestStringMatching:
    def test_takes_maximal_run(self) -> None:
        assert string_matching(lambda c: c in "ab").run("abbac") == Matched("abba", "c")

    def test_consumes_whole_input(self) -> None:
        assert letters().run("hello") == Matched("hello", "")

    def test_fails_on_empty_run(self) -> None:
        result = letters().run("123")

        assert isinstance(result, Failed)
        assert result.kind is FailureKind.MISMATCH

    def test_fails_on_empty_input(self) -> None:
        result = digits().run("")

        assert isinstance(result, Failed)
        assert result.kind is FailureKind.EMPTY_INPUT

    def test_letters_are_unicode_aware(self) -> None:
        assert letters().run("héllo wörld") == Matched("héllo", " wörld")

    def test_whitespace(self) -> None:
        assert whitespace().run(" \t\nx") == Matched(" \t\n", "x")

    def test_digits(self) -> None:
        assert digits().run("42abc") == Matched("42", "abc")


class TestLiteral:
    def test_matches_prefix(self) -> None:
        assert literal("let").run("let x") == Matched("let", " x")

    def test_mismatch(self) -> None:
        result = literal("let").run("lex")

        assert isinstance(result, Failed)
        assert result.kind is FailureKind.MISMATCH

    def test_shorter_input(self) -> None:
        assert not literal("let").run("le")

    def test_empty_input(self) -> None:
        result = literal("let").run("")

        assert isinstance(result, Failed)
        assert result.kind is FailureKind.EMPTY_INPUT

    def test_rejects_empty_literal(self) -> None:
        with pytest.raises(ValueError):
            literal("")


class TestDelimitedText:
    def test_up_to_leaves_delimiter(self) -> None:
        assert text_up_to(",").run("abc,def") == Matched("abc", ",def")

    def test_up_to_stops_at_first_occurrence(self) -> None:
        assert text_up_to("--").run("a--b--c") == Matched("a", "--b--c")

    def test_up_to_can_match_nothing(self) -> None:
        assert text_up_to(",").run(",x") == Matched("", ",x")

    def test_up_to_fails_without_delimiter(self) -> None:
        assert not text_up_to(",").run("abc")

    def test_through_consumes_delimiter(self) -> None:
        assert text_through("*/").run("comment */rest") == Matched("comment */", "rest")

    def test_through_fails_without_delimiter(self) -> None:
        result = text_through("*/").run("")

        assert isinstance(result, Failed)
        assert result.kind is FailureKind.EMPTY_INPUT


class TestInteger:
    def test_parses_leading_digits(self) -> None:
        assert integer().run("123abc") == Matched(123, "abc")

    def test_fails_without_digits(self) -> None:
        assert not integer().run("abc")

    def test_no_sign_handling(self) -> None:
        assert not integer().run("-5")

    def test_fails_exactly_like_digits(self) -> None:
        for src in ["", "x1", " 1"]:
            result = integer().run(src)
            expected = digits().run(src)
            assert isinstance(result, Failed)
            assert isinstance(expected, Failed)
            assert result.kind is expected.kind

    def test_maximum_is_accepted(self) -> None:
        assert integer().run(str(const.INT64_MAX)) == Matched(const.INT64_MAX, "")

    def test_overflow_fails(self) -> None:
        result = integer().run(str(const.INT64_MAX + 1))

        assert isinstance(result, Failed)
        assert "maximum" in result.message

    def test_custom_maximum(self) -> None:
        assert integer(max_value=255).run("255") == Matched(255, "")
        assert not integer(max_value=255).run("256")

    def test_unbounded(self) -> None:
        big = "1" + "0" * 40

        assert integer(max_value=None).run(big) == Matched(10**40, "")

    def test_leading_zeros_do_not_count_towards_maximum(self) -> None:
        assert integer().run("0" * 30 + "7") == Matched(7, "")

    def test_overlong_digit_run_fails_against_maximum(self) -> None:
        result = integer().run("1" * 5000)

        assert isinstance(result, Failed)
        assert "maximum" in result.message

    def test_overlong_digit_run_fails_without_maximum(self) -> None:
        result = integer(max_value=None).run("1" * 5000)

        assert isinstance(result, Failed)
        assert result.kind is FailureKind.MISMATCH

    def test_name_shows_custom_maximum(self) -> None:
        assert integer().name == "integer()"
        assert integer(max_value=255).name == "integer(max_value=255)"
        assert integer(max_value=None).name == "integer(max_value=None)"
