"""Command line interface for the Graphing Calculator plugin."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from .core import (
    DEFAULT_COLUMNS,
    DEFAULT_HEIGHT,
    DEFAULT_WIDTH,
    ExpressionError,
    HistoryError,
    HistoryStore,
    TextCipher,
    View,
    ViewError,
    evaluate_expression,
    export_expression_svg,
    plot_expression,
)


def _print(payload: Any) -> None:
    print(json.dumps(payload, indent=2, sort_keys=True))


def _history(args: argparse.Namespace) -> HistoryStore:
    if not args.history:
        return HistoryStore()
    history_path = Path(args.history)
    key_path = Path(args.key) if args.key else history_path.with_suffix(".key")
    return HistoryStore(history_path, TextCipher(key_path))


def _view(args: argparse.Namespace) -> View:
    return View(args.x_min, args.x_max, args.y_min, args.y_max)


def command_evaluate(args: argparse.Namespace) -> None:
    result = evaluate_expression(args.expression, x=args.x)
    if args.history:
        result["history_item"] = _history(args).add(result["expression"], result["result"]).to_dict()
    _print(result)


def command_plot(args: argparse.Namespace) -> None:
    _print(
        plot_expression(
            args.expression,
            view=_view(args),
            width=args.width,
            height=args.height,
            columns=args.columns,
        )
    )


def command_export(args: argparse.Namespace) -> None:
    svg = export_expression_svg(
        args.expression,
        view=_view(args),
        width=args.width,
        height=args.height,
        columns=args.columns,
    )
    Path(args.output).write_text(svg, encoding="utf-8")
    _print({"output": str(args.output), "bytes": len(svg.encode("utf-8"))})


def command_history(args: argparse.Namespace) -> None:
    store = _history(args)
    if args.action == "list":
        _print({"items": [item.to_dict() for item in store.load()]})
    elif args.action == "clear":
        store.clear()
        _print({"items": []})
    elif args.action == "rotate-key":
        _print({"reencrypted": store.rotate_key()})
    else:  # pragma: no cover - argparse guards
        raise SystemExit(f"Unknown history action: {args.action}")


def _add_view_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--x-min", dest="x_min", type=float, default=-10.0, help="Left edge of the view")
    parser.add_argument("--x-max", dest="x_max", type=float, default=10.0, help="Right edge of the view")
    parser.add_argument("--y-min", dest="y_min", type=float, default=-10.0, help="Bottom edge of the view")
    parser.add_argument("--y-max", dest="y_max", type=float, default=10.0, help="Top edge of the view")
    parser.add_argument("--width", type=float, default=DEFAULT_WIDTH, help="Canvas width in pixels")
    parser.add_argument("--height", type=float, default=DEFAULT_HEIGHT, help="Canvas height in pixels")
    parser.add_argument("--columns", type=int, default=DEFAULT_COLUMNS, help="Number of sample columns")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Graphing Calculator CLI")
    parser.add_argument("--history", help="Encrypted history file (in-memory when omitted)")
    parser.add_argument("--key", help="Key file for the history cipher (defaults beside the history file)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    evaluate_parser = subparsers.add_parser("evaluate", help="Evaluate an expression at a point")
    evaluate_parser.add_argument("expression", help="Expression in x, e.g. 'sin(x)^2'")
    evaluate_parser.add_argument("--x", type=float, default=0.0, help="Value bound to x")
    evaluate_parser.set_defaults(func=command_evaluate)

    plot_parser = subparsers.add_parser("plot", help="Sample an expression across a view")
    plot_parser.add_argument("expression", help="Expression in x")
    _add_view_arguments(plot_parser)
    plot_parser.set_defaults(func=command_plot)

    export_parser = subparsers.add_parser("export", help="Write the plotted curve as SVG")
    export_parser.add_argument("expression", help="Expression in x")
    export_parser.add_argument("--output", required=True, help="Destination .svg file")
    _add_view_arguments(export_parser)
    export_parser.set_defaults(func=command_export)

    history_parser = subparsers.add_parser("history", help="Inspect the stored history")
    history_parser.add_argument("action", choices=["list", "clear", "rotate-key"], help="History operation")
    history_parser.set_defaults(func=command_history)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        args.func(args)
    except (ExpressionError, ViewError, HistoryError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
