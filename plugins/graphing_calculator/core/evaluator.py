"""Pure evaluation of syntax trees at a point."""

from __future__ import annotations

import math
from typing import Callable

from .errors import EvalError
from .nodes import BinaryOp, Call, Constant, Node, Number, UnaryOp, Variable

_CONSTANTS: dict[str, float] = {"pi": math.pi, "e": math.e}


def _domain_error(name: str, value: float) -> EvalError:
    return EvalError(f"{name}({value:g}) is undefined", kind="domain_error")


def _sqrt(value: float) -> float:
    if value < 0:
        raise _domain_error("sqrt", value)
    return math.sqrt(value)


def _natural_log(name: str) -> Callable[[float], float]:
    def wrapped(value: float) -> float:
        if value <= 0:
            raise _domain_error(name, value)
        return math.log(value)

    return wrapped


_FUNCTIONS: dict[str, Callable[[float], float]] = {
    "sin": math.sin,
    "cos": math.cos,
    "tan": math.tan,
    "sqrt": _sqrt,
    "log": _natural_log("log"),
    "ln": _natural_log("ln"),
    "exp": math.exp,
    "abs": abs,
}


def _power(base: float, exponent: float) -> float:
    try:
        return math.pow(base, exponent)
    except OverflowError as exc:
        raise EvalError("Result is not finite", kind="non_finite_result") from exc
    except ValueError as exc:
        # Negative base with fractional exponent, or zero to a negative power.
        raise EvalError("Result is not finite", kind="non_finite_result") from exc


def _binary(op: str, left: float, right: float) -> float:
    if op == "add":
        return left + right
    if op == "sub":
        return left - right
    if op == "mul":
        return left * right
    if op == "div":
        if right == 0:
            raise EvalError("Division by zero", kind="division_by_zero")
        return left / right
    if op == "pow":
        return _power(left, right)
    raise TypeError(f"Unsupported operator: {op}")


def _eval_node(node: Node, x: float) -> float:
    if isinstance(node, Number):
        value = node.value
    elif isinstance(node, Variable):
        value = x
    elif isinstance(node, Constant):
        value = _CONSTANTS[node.name]
    elif isinstance(node, UnaryOp):
        value = -_eval_node(node.operand, x)
    elif isinstance(node, BinaryOp):
        value = _binary(node.op, _eval_node(node.left, x), _eval_node(node.right, x))
    elif isinstance(node, Call):
        argument = _eval_node(node.argument, x)
        try:
            value = _FUNCTIONS[node.function](argument)
        except OverflowError as exc:
            raise EvalError(f"{node.function}({argument:g}) overflows", kind="non_finite_result") from exc
    else:
        raise TypeError(f"Unsupported node type: {type(node).__name__}")

    if math.isnan(value) or math.isinf(value):
        raise EvalError("Result is not finite", kind="non_finite_result")
    return float(value)


def evaluate(node: Node, x: float = 0.0) -> float:
    """Evaluate ``node`` with the free variable bound to ``x``.

    Always returns a finite float; every failure raises :class:`EvalError`
    whose ``kind`` is ``division_by_zero``, ``domain_error`` or
    ``non_finite_result``.
    """

    x = float(x)
    if math.isnan(x) or math.isinf(x):
        raise EvalError("x must be finite", kind="non_finite_result")
    return _eval_node(node, x)


__all__ = ["evaluate"]
