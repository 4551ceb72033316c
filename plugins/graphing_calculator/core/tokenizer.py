"""Lexical analysis for calculator expressions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from .errors import LexError

TokenKind = Literal["number", "identifier", "operator", "lparen", "rparen", "comma", "end"]

_OPERATORS = frozenset("+-*/^")
_PUNCTUATION: dict[str, TokenKind] = {"(": "lparen", ")": "rparen", ",": "comma"}
_MAX_EXPR_LENGTH = 1024


@dataclass(frozen=True, slots=True)
class Token:
    """A single lexical token with its offset in the source text."""

    kind: TokenKind
    value: float | str | None = None
    position: int = 0


def _is_digit(char: str) -> bool:
    return "0" <= char <= "9"


def _is_letter(char: str) -> bool:
    return "a" <= char <= "z" or "A" <= char <= "Z"


def _read_number(text: str, start: int) -> tuple[Token, int]:
    index = start
    digits = 0
    seen_point = False
    while index < len(text):
        char = text[index]
        if _is_digit(char):
            digits += 1
        elif char == "." and not seen_point:
            seen_point = True
        else:
            break
        index += 1
    if digits == 0:
        raise LexError(
            f"Number at position {start} has no digits",
            kind="bad_number",
            position=start,
        )
    return Token("number", float(text[start:index]), start), index


def _read_identifier(text: str, start: int) -> tuple[Token, int]:
    index = start
    while index < len(text) and _is_letter(text[index]):
        index += 1
    return Token("identifier", text[start:index], start), index


def tokenize(text: str) -> list[Token]:
    """Split ``text`` into tokens, always terminated by an ``end`` token."""

    if not isinstance(text, str):
        raise LexError("Expression must be a string", kind="bad_character", position=0)
    if len(text) > _MAX_EXPR_LENGTH:
        raise LexError("Expression is too long", kind="bad_character", position=_MAX_EXPR_LENGTH)

    tokens: list[Token] = []
    index = 0
    while index < len(text):
        char = text[index]
        if char.isspace() and char.isascii():
            index += 1
        elif _is_digit(char) or char == ".":
            token, index = _read_number(text, index)
            tokens.append(token)
        elif _is_letter(char):
            token, index = _read_identifier(text, index)
            tokens.append(token)
        elif char in _OPERATORS:
            tokens.append(Token("operator", char, index))
            index += 1
        elif char in _PUNCTUATION:
            tokens.append(Token(_PUNCTUATION[char], char, index))
            index += 1
        else:
            raise LexError(
                f"Unexpected character {char!r} at position {index}",
                kind="bad_character",
                position=index,
            )
    tokens.append(Token("end", None, len(text)))
    return tokens


__all__ = ["Token", "TokenKind", "tokenize"]
