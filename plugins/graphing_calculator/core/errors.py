"""Error taxonomy for the expression engine and graph transforms."""

from __future__ import annotations

from typing import Literal

LexErrorKind = Literal["bad_character", "bad_number"]
ParseErrorKind = Literal[
    "empty_input",
    "unexpected_token",
    "unknown_identifier",
    "unmatched_parenthesis",
]
EvalErrorKind = Literal["division_by_zero", "domain_error", "non_finite_result"]


class ExpressionError(ValueError):
    """Raised when an expression cannot be tokenized, parsed or evaluated."""

    kind: str = "expression_error"

    def __init__(self, message: str, *, kind: str | None = None, position: int | None = None):
        super().__init__(message)
        if kind is not None:
            self.kind = kind
        self.position = position

    def to_details(self) -> dict[str, object]:
        details: dict[str, object] = {"kind": self.kind}
        if self.position is not None:
            details["position"] = self.position
        return details


class LexError(ExpressionError):
    """Raised for characters or number literals the tokenizer rejects."""

    kind: LexErrorKind = "bad_character"


class ParseError(ExpressionError):
    """Raised when the token stream does not match the grammar."""

    kind: ParseErrorKind = "unexpected_token"


class EvalError(ExpressionError):
    """Raised when a well formed tree has no finite value at the given point."""

    kind: EvalErrorKind = "non_finite_result"


class ViewError(ValueError):
    """Raised for degenerate views and out-of-range graph arguments."""


__all__ = [
    "EvalError",
    "EvalErrorKind",
    "ExpressionError",
    "LexError",
    "LexErrorKind",
    "ParseError",
    "ParseErrorKind",
    "ViewError",
]
