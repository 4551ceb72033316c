"""Standalone SVG rendering of a sampled curve."""

from __future__ import annotations

from xml.sax.saxutils import escape

from .graph import Path, View, world_to_screen

_GRID_ROWS = 20
_GRID_COLUMNS = 30
_GRID_COLOR = "#e5e7eb"
_AXIS_COLOR = "#888888"
_CURVE_COLOR = "#003d82"


def _fmt(value: float) -> str:
    return f"{value:.2f}"


def path_data(path: Path) -> list[str]:
    """Return one SVG ``d`` attribute per run of ``path``."""

    commands: list[str] = []
    for run in path.runs:
        parts = [
            f"{'M' if index == 0 else 'L'} {_fmt(sample.screen_x)} {_fmt(sample.screen_y)}"
            for index, sample in enumerate(run)
        ]
        commands.append(" ".join(parts))
    return commands


def render_svg(
    path: Path,
    view: View,
    canvas_width: float,
    canvas_height: float,
    *,
    title: str | None = None,
) -> str:
    """Serialize the grid, axes and curve as an SVG document sized to the canvas."""

    width, height = _fmt(canvas_width), _fmt(canvas_height)
    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        (
            f'<svg xmlns="http://www.w3.org/2000/svg" width="{width}" height="{height}" '
            f'viewBox="0 0 {width} {height}" role="img">'
        ),
    ]
    if title:
        lines.append(f"  <title>{escape(title)}</title>")
    lines.append(f'  <rect x="0" y="0" width="{width}" height="{height}" fill="#ffffff"/>')

    lines.append(f'  <g stroke="{_GRID_COLOR}" stroke-width="1">')
    for row in range(_GRID_ROWS + 1):
        y = _fmt(row * canvas_height / _GRID_ROWS)
        lines.append(f'    <line x1="0" y1="{y}" x2="{width}" y2="{y}"/>')
    for column in range(_GRID_COLUMNS + 1):
        x = _fmt(column * canvas_width / _GRID_COLUMNS)
        lines.append(f'    <line x1="{x}" y1="0" x2="{x}" y2="{height}"/>')
    lines.append("  </g>")

    origin_x, origin_y = world_to_screen(view, canvas_width, canvas_height, 0.0, 0.0)
    lines.append(f'  <g stroke="{_AXIS_COLOR}" stroke-width="1">')
    if view.y_min <= 0.0 <= view.y_max:
        lines.append(f'    <line x1="0" y1="{_fmt(origin_y)}" x2="{width}" y2="{_fmt(origin_y)}"/>')
    if view.x_min <= 0.0 <= view.x_max:
        lines.append(f'    <line x1="{_fmt(origin_x)}" y1="0" x2="{_fmt(origin_x)}" y2="{height}"/>')
    lines.append("  </g>")

    lines.append(f'  <g fill="none" stroke="{_CURVE_COLOR}" stroke-width="2">')
    for data in path_data(path):
        lines.append(f'    <path d="{data}"/>')
    lines.append("  </g>")
    lines.append("</svg>")
    return "\n".join(lines) + "\n"


__all__ = ["path_data", "render_svg"]
