"""Exports for the graphing calculator core."""

from .cipher import CipherError, TextCipher
from .engine import evaluate_expression, export_expression_svg, plot_expression
from .errors import EvalError, ExpressionError, LexError, ParseError, ViewError
from .evaluator import evaluate
from .export import path_data, render_svg
from .graph import (
    DEFAULT_COLUMNS,
    DEFAULT_HEIGHT,
    DEFAULT_VIEW,
    DEFAULT_WIDTH,
    MAX_COLUMNS,
    GraphViewport,
    Path,
    Sample,
    View,
    pan,
    sample_path,
    screen_to_world,
    world_to_screen,
    zoom,
)
from .history import HistoryError, HistoryItem, HistoryStore
from .nodes import BinaryOp, Call, Constant, Node, Number, UnaryOp, Variable, format_expression
from .parser import compile_expression, parse
from .sessions import GraphSession, GraphSessionStore
from .tokenizer import Token, tokenize

__all__ = [
    "BinaryOp",
    "Call",
    "CipherError",
    "Constant",
    "DEFAULT_COLUMNS",
    "DEFAULT_HEIGHT",
    "DEFAULT_VIEW",
    "DEFAULT_WIDTH",
    "EvalError",
    "ExpressionError",
    "GraphSession",
    "GraphSessionStore",
    "GraphViewport",
    "HistoryError",
    "HistoryItem",
    "HistoryStore",
    "LexError",
    "MAX_COLUMNS",
    "Node",
    "Number",
    "ParseError",
    "Path",
    "Sample",
    "TextCipher",
    "Token",
    "UnaryOp",
    "Variable",
    "View",
    "ViewError",
    "compile_expression",
    "evaluate",
    "evaluate_expression",
    "export_expression_svg",
    "format_expression",
    "pan",
    "parse",
    "path_data",
    "plot_expression",
    "render_svg",
    "sample_path",
    "screen_to_world",
    "tokenize",
    "world_to_screen",
    "zoom",
]
