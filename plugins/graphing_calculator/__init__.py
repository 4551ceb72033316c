"""Graphing Calculator plugin manifest."""

manifest = {
    "title": "Graphing Calculator",
    "summary": "Evaluate expressions in x, plot them with pan and zoom, export SVG, and keep an encrypted history.",
    "category": "General Utilities",
    "blueprint": "graphing_calculator",
}

__all__ = ["manifest"]
