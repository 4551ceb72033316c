"""Recursive descent parser turning tokens into an immutable syntax tree.

Grammar, from loosest to tightest binding::

    expr  := term (('+' | '-') term)*
    term  := unary (('*' | '/') unary)*
    unary := '-' unary | power
    power := atom ('^' unary)?
    atom  := number | 'x' | 'pi' | 'e' | function '(' expr ')' | '(' expr ')'

``^`` is right associative and unary minus wraps a whole power, so ``-2^2``
is ``-(2^2)`` while ``2^-1`` is still accepted.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Sequence

from .errors import ParseError
from .nodes import (
    CONSTANT_NAMES,
    FUNCTION_NAMES,
    VARIABLE_NAME,
    BinaryOp,
    Call,
    Constant,
    Node,
    Number,
    UnaryOp,
    Variable,
)
from .tokenizer import Token, tokenize

_ADDITIVE = {"+": "add", "-": "sub"}
_MULTIPLICATIVE = {"*": "mul", "/": "div"}
_MAX_DEPTH = 64


def _describe(token: Token) -> str:
    if token.kind == "end":
        return "end of expression"
    if token.kind == "number":
        return f"number {token.value:g}"
    return f"{token.value!r}"


class _Parser:
    def __init__(self, tokens: Sequence[Token]) -> None:
        if not tokens or tokens[-1].kind != "end":
            raise ParseError("Token stream must end with an end marker", kind="unexpected_token", position=0)
        self._tokens = tokens
        self._index = 0
        self._depth = 0

    def _peek(self) -> Token:
        return self._tokens[self._index]

    def _advance(self) -> Token:
        token = self._tokens[self._index]
        if token.kind != "end":
            self._index += 1
        return token

    def _is_operator(self, symbols) -> bool:
        token = self._peek()
        return token.kind == "operator" and token.value in symbols

    def _unexpected(self, token: Token) -> ParseError:
        return ParseError(
            f"Unexpected {_describe(token)} at position {token.position}",
            kind="unexpected_token",
            position=token.position,
        )

    def parse(self) -> Node:
        if self._peek().kind == "end":
            raise ParseError("Expression is empty", kind="empty_input", position=0)
        node = self._expr()
        token = self._peek()
        if token.kind == "rparen":
            raise ParseError(
                f"Unmatched ')' at position {token.position}",
                kind="unmatched_parenthesis",
                position=token.position,
            )
        if token.kind != "end":
            raise self._unexpected(token)
        return node

    def _expr(self) -> Node:
        node = self._term()
        while self._is_operator(_ADDITIVE):
            op = _ADDITIVE[self._advance().value]
            node = BinaryOp(op, node, self._term())
        return node

    def _term(self) -> Node:
        node = self._unary()
        while self._is_operator(_MULTIPLICATIVE):
            op = _MULTIPLICATIVE[self._advance().value]
            node = BinaryOp(op, node, self._unary())
        return node

    def _unary(self) -> Node:
        self._depth += 1
        if self._depth > _MAX_DEPTH:
            token = self._peek()
            raise ParseError(
                f"Expression is nested too deeply at position {token.position}",
                kind="unexpected_token",
                position=token.position,
            )
        try:
            if self._is_operator({"-"}):
                self._advance()
                return UnaryOp("negate", self._unary())
            return self._power()
        finally:
            self._depth -= 1

    def _power(self) -> Node:
        base = self._atom()
        if self._is_operator({"^"}):
            self._advance()
            return BinaryOp("pow", base, self._unary())
        return base

    def _close_paren(self, opening: Token) -> None:
        token = self._peek()
        if token.kind == "rparen":
            self._advance()
            return
        if token.kind == "end":
            raise ParseError(
                f"Unmatched '(' at position {opening.position}",
                kind="unmatched_parenthesis",
                position=opening.position,
            )
        raise self._unexpected(token)

    def _atom(self) -> Node:
        token = self._advance()
        if token.kind == "number":
            return Number(float(token.value))
        if token.kind == "lparen":
            node = self._expr()
            self._close_paren(token)
            return node
        if token.kind == "identifier":
            return self._identifier(token)
        raise self._unexpected(token)

    def _identifier(self, token: Token) -> Node:
        name = str(token.value)
        if self._peek().kind == "lparen":
            if name not in FUNCTION_NAMES:
                raise ParseError(
                    f"Unknown function '{name}' at position {token.position}",
                    kind="unknown_identifier",
                    position=token.position,
                )
            opening = self._advance()
            argument = self._expr()
            self._close_paren(opening)
            return Call(name, argument)
        if name == VARIABLE_NAME:
            return Variable()
        if name in CONSTANT_NAMES:
            return Constant(name)
        raise ParseError(
            f"Unknown identifier '{name}' at position {token.position}",
            kind="unknown_identifier",
            position=token.position,
        )


def parse(tokens: Sequence[Token]) -> Node:
    """Build a syntax tree from ``tokens`` or raise :class:`ParseError`."""

    return _Parser(tokens).parse()


@lru_cache(maxsize=256)
def compile_expression(text: str) -> Node:
    """Tokenize and parse ``text``; trees are immutable so results are cached."""

    return parse(tokenize(text))


__all__ = ["compile_expression", "parse"]
