"""Immutable syntax tree nodes produced by the parser."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Union

BinaryOperator = Literal["add", "sub", "mul", "div", "pow"]
UnaryOperator = Literal["negate"]
FunctionName = Literal["sin", "cos", "tan", "sqrt", "log", "ln", "exp", "abs"]
ConstantName = Literal["pi", "e"]

VARIABLE_NAME = "x"
FUNCTION_NAMES: frozenset[str] = frozenset({"sin", "cos", "tan", "sqrt", "log", "ln", "exp", "abs"})
CONSTANT_NAMES: frozenset[str] = frozenset({"pi", "e"})


@dataclass(frozen=True, slots=True)
class Number:
    value: float


@dataclass(frozen=True, slots=True)
class Variable:
    name: str = VARIABLE_NAME


@dataclass(frozen=True, slots=True)
class Constant:
    name: ConstantName


@dataclass(frozen=True, slots=True)
class UnaryOp:
    op: UnaryOperator
    operand: "Node"


@dataclass(frozen=True, slots=True)
class BinaryOp:
    op: BinaryOperator
    left: "Node"
    right: "Node"


@dataclass(frozen=True, slots=True)
class Call:
    function: FunctionName
    argument: "Node"


Node = Union[Number, Variable, Constant, UnaryOp, BinaryOp, Call]

_SYMBOLS: dict[str, str] = {"add": "+", "sub": "-", "mul": "*", "div": "/", "pow": "^"}


def _format_number(value: float) -> str:
    if value.is_integer() and abs(value) < 1e15:
        return str(int(value))
    return f"{value:.12g}"


def format_expression(node: Node) -> str:
    """Render ``node`` as a fully parenthesized canonical string."""

    if isinstance(node, Number):
        return _format_number(node.value)
    if isinstance(node, Variable):
        return node.name
    if isinstance(node, Constant):
        return node.name
    if isinstance(node, UnaryOp):
        return f"(-{format_expression(node.operand)})"
    if isinstance(node, BinaryOp):
        return f"({format_expression(node.left)} {_SYMBOLS[node.op]} {format_expression(node.right)})"
    if isinstance(node, Call):
        return f"{node.function}({format_expression(node.argument)})"
    raise TypeError(f"Unsupported node type: {type(node).__name__}")


__all__ = [
    "BinaryOp",
    "BinaryOperator",
    "Call",
    "CONSTANT_NAMES",
    "Constant",
    "ConstantName",
    "FUNCTION_NAMES",
    "FunctionName",
    "Number",
    "Node",
    "UnaryOp",
    "UnaryOperator",
    "VARIABLE_NAME",
    "Variable",
    "format_expression",
]
