"""High level evaluation and plotting entry points returning JSON-ready payloads."""

from __future__ import annotations

from .evaluator import evaluate
from .export import render_svg
from .graph import DEFAULT_COLUMNS, DEFAULT_HEIGHT, DEFAULT_VIEW, DEFAULT_WIDTH, View, sample_path
from .nodes import format_expression
from .parser import compile_expression


def _normalize_expression(expression: str) -> str:
    # Type and emptiness are reported by the tokenizer/parser.
    return expression.strip() if isinstance(expression, str) else expression


def evaluate_expression(expression: str, *, x: float = 0.0) -> dict[str, object]:
    """Evaluate ``expression`` at ``x`` and return its value plus a canonical form."""

    normalized = _normalize_expression(expression)
    tree = compile_expression(normalized)
    result = evaluate(tree, x)
    return {
        "expression": normalized,
        "canonical": format_expression(tree),
        "x": float(x),
        "result": result,
    }


def plot_expression(
    expression: str,
    *,
    view: View = DEFAULT_VIEW,
    width: float = DEFAULT_WIDTH,
    height: float = DEFAULT_HEIGHT,
    columns: int = DEFAULT_COLUMNS,
) -> dict[str, object]:
    """Sample ``expression`` across ``view`` for a ``width`` x ``height`` canvas."""

    normalized = _normalize_expression(expression)
    tree = compile_expression(normalized)
    path = sample_path(tree, view, width, height, columns)
    return {
        "expression": normalized,
        "canonical": format_expression(tree),
        "view": view.to_dict(),
        "width": width,
        "height": height,
        **path.to_dict(),
    }


def export_expression_svg(
    expression: str,
    *,
    view: View = DEFAULT_VIEW,
    width: float = DEFAULT_WIDTH,
    height: float = DEFAULT_HEIGHT,
    columns: int = DEFAULT_COLUMNS,
) -> str:
    normalized = _normalize_expression(expression)
    tree = compile_expression(normalized)
    path = sample_path(tree, view, width, height, columns)
    return render_svg(path, view, width, height, title=f"y = {normalized}")


__all__ = ["evaluate_expression", "export_expression_svg", "plot_expression"]
