"""Test number lexing, including decimals and scientific notation."""

import pytest

from mathexpr.tokens import TokenType, is_digit

from .conftest import assert_types, assert_values


class TestIsDigit:
    def test_ascii_digits(self):
        for ch in "0123456789":
            assert is_digit(ch)

    def test_non_digits(self):
        for ch in ["a", ".", "", " ", "٣"]:
            assert not is_digit(ch)


class TestIntegers:
    def test_single_digit(self, lex):
        tokens = lex("7")
        assert_types(tokens, [TokenType.NUMBER])
        assert tokens[0].value == "7"

    def test_multi_digit(self, lex):
        tokens = lex("12345")
        assert_values(tokens, ["12345"])
        assert tokens[0].end == 4


class TestDecimals:
    def test_decimal(self, lex):
        assert_values(lex("3.14"), ["3.14"])

    def test_leading_dot(self, lex):
        tokens = lex(".5")
        assert_types(tokens, [TokenType.NUMBER])
        assert_values(tokens, [".5"])

    def test_trailing_dot(self, lex):
        assert_values(lex("2."), ["2."])

    def test_at_most_one_dot(self, lex):
        tokens = lex("1.2.3")
        assert_types(tokens, [TokenType.NUMBER, TokenType.NUMBER])
        assert_values(tokens, ["1.2", ".3"])

    def test_lone_dot_is_unknown(self, lex):
        assert_types(lex("."), [TokenType.UNKNOWN])

    def test_dot_before_letter_is_unknown(self, lex):
        assert_types(lex(".x"), [TokenType.UNKNOWN, TokenType.VARIABLE])


class TestScientific:
    @pytest.mark.parametrize("source", ["1e5", "1E5", "1e+5", "1e-5", "2.5e10", ".5e-3"])
    def test_valid_exponent(self, lex, source):
        tokens = lex(source)
        assert_types(tokens, [TokenType.NUMBER])
        assert tokens[0].value == source

    def test_bare_e_rolls_back(self, lex):
        tokens = lex("1e")
        assert_types(tokens, [TokenType.NUMBER, TokenType.VARIABLE])
        assert_values(tokens, ["1", "e"])

    def test_signed_without_digits_rolls_back(self, lex):
        tokens = lex("2e+")
        assert_types(tokens, [TokenType.NUMBER, TokenType.VARIABLE, TokenType.OPERATOR])
        assert_values(tokens, ["2", "e", "+"])

    def test_exponent_followed_by_letter(self, lex):
        tokens = lex("3e-x")
        assert_values(tokens, ["3", "e", "-", "x"])

    def test_exponent_stops_at_dot(self, lex):
        tokens = lex("1e2.5")
        assert_values(tokens, ["1e2", ".5"])

    def test_e_as_call_after_number(self, lex):
        tokens = lex("2exp(1)")
        assert_types(
            tokens,
            [
                TokenType.NUMBER,
                TokenType.FUNCTION,
                TokenType.LEFT_PAREN,
                TokenType.NUMBER,
                TokenType.RIGHT_PAREN,
            ],
        )
        assert_values(tokens, ["2", "exp", "(", "1", ")"])
