"""World/screen transforms, pan and zoom arithmetic, and curve sampling."""

from __future__ import annotations

import math
import threading
from dataclasses import dataclass, field, replace
from typing import Literal

import numpy as np

from .errors import EvalError, ViewError
from .evaluator import evaluate
from .nodes import Node

DEFAULT_WIDTH = 600
DEFAULT_HEIGHT = 400
DEFAULT_COLUMNS = 200
MAX_COLUMNS = 4000
MIN_SPAN = 1e-9
MAX_SPAN = 1e12
WHEEL_ZOOM_OUT = 1.1
WHEEL_ZOOM_IN = 0.9

ViewportState = Literal["idle", "panning"]


def _require_finite(name: str, value: float) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError) as exc:
        raise ViewError(f"{name} must be a number") from exc
    if not math.isfinite(value):
        raise ViewError(f"{name} must be finite")
    return value


def _require_extent(name: str, value: float) -> float:
    value = _require_finite(name, value)
    if value <= 0:
        raise ViewError(f"{name} must be greater than zero")
    return value


@dataclass(frozen=True, slots=True)
class View:
    """Visible world rectangle; ``x_min < x_max`` and ``y_min < y_max`` always hold."""

    x_min: float = -10.0
    x_max: float = 10.0
    y_min: float = -10.0
    y_max: float = 10.0

    def __post_init__(self) -> None:
        for name in ("x_min", "x_max", "y_min", "y_max"):
            object.__setattr__(self, name, _require_finite(name, getattr(self, name)))
        if not self.x_min < self.x_max:
            raise ViewError("x_min must be less than x_max")
        if not self.y_min < self.y_max:
            raise ViewError("y_min must be less than y_max")

    @property
    def width(self) -> float:
        return self.x_max - self.x_min

    @property
    def height(self) -> float:
        return self.y_max - self.y_min

    def to_dict(self) -> dict[str, float]:
        return {"x_min": self.x_min, "x_max": self.x_max, "y_min": self.y_min, "y_max": self.y_max}


DEFAULT_VIEW = View()


@dataclass(frozen=True, slots=True)
class Sample:
    screen_x: float
    screen_y: float


@dataclass(frozen=True, slots=True)
class Path:
    """Sampled curve: runs of contiguous samples separated by gaps.

    ``gaps`` counts maximal spans of undrawable columns, leading and trailing
    spans included, plus every break where the curve jumps between two
    drawable columns.
    """

    runs: tuple[tuple[Sample, ...], ...] = ()
    gaps: int = 0
    columns: int = 0

    @property
    def points(self) -> int:
        return sum(len(run) for run in self.runs)

    def to_dict(self) -> dict[str, object]:
        return {
            "runs": [[{"x": s.screen_x, "y": s.screen_y} for s in run] for run in self.runs],
            "gaps": self.gaps,
            "columns": self.columns,
            "points": self.points,
        }


def world_to_screen(
    view: View, canvas_width: float, canvas_height: float, world_x: float, world_y: float
) -> tuple[float, float]:
    """Map a world point to pixel coordinates; screen rows grow downward."""

    screen_x = (world_x - view.x_min) / view.width * canvas_width
    screen_y = canvas_height - (world_y - view.y_min) / view.height * canvas_height
    return screen_x, screen_y


def screen_to_world(
    view: View, canvas_width: float, canvas_height: float, screen_x: float, screen_y: float
) -> tuple[float, float]:
    """Inverse of :func:`world_to_screen`."""

    world_x = view.x_min + screen_x / canvas_width * view.width
    world_y = view.y_min + (canvas_height - screen_y) / canvas_height * view.height
    return world_x, world_y


def _checked_span(x_min: float, x_max: float, y_min: float, y_max: float) -> View:
    for span in (x_max - x_min, y_max - y_min):
        if not math.isfinite(span) or not MIN_SPAN <= span <= MAX_SPAN:
            raise ViewError("Resulting view is outside the supported range")
    return View(x_min, x_max, y_min, y_max)


def pan(view: View, delta_screen_x: float, canvas_width: float) -> View:
    """Shift the x-range by ``delta_screen_x`` pixels converted to world units."""

    canvas_width = _require_extent("canvas_width", canvas_width)
    delta_screen_x = _require_finite("delta_screen_x", delta_screen_x)
    shift = delta_screen_x * view.width / canvas_width
    x_min, x_max = view.x_min + shift, view.x_max + shift
    if not (math.isfinite(x_min) and math.isfinite(x_max)) or not x_min < x_max:
        raise ViewError("Pan moves the view outside the supported range")
    return replace(view, x_min=x_min, x_max=x_max)


def zoom(view: View, cursor_screen_x: float, canvas_width: float, factor: float) -> View:
    """Rescale the view by ``factor`` keeping the world x under the cursor fixed.

    ``factor < 1`` zooms in. The y-range is scaled by the same factor around
    zero rather than around the cursor's world y.
    """

    canvas_width = _require_extent("canvas_width", canvas_width)
    cursor_screen_x = _require_finite("cursor_screen_x", cursor_screen_x)
    factor = _require_extent("factor", factor)
    anchor = view.x_min + cursor_screen_x / canvas_width * view.width
    x_min = anchor - (anchor - view.x_min) * factor
    x_max = anchor + (view.x_max - anchor) * factor
    return _checked_span(x_min, x_max, view.y_min * factor, view.y_max * factor)


def _column_count(columns: int) -> int:
    if isinstance(columns, bool) or not isinstance(columns, (int, np.integer)):
        raise ViewError("columns must be an integer")
    if not 2 <= columns <= MAX_COLUMNS:
        raise ViewError(f"columns must be between 2 and {MAX_COLUMNS}")
    return int(columns)


def _screen_y(node: Node, view: View, canvas_width: float, canvas_height: float, world_x: float) -> float | None:
    """Screen row of ``node`` at ``world_x``, or ``None`` where nothing can be drawn."""

    try:
        world_y = evaluate(node, world_x)
    except EvalError:
        return None
    _, screen_y = world_to_screen(view, canvas_width, canvas_height, world_x, world_y)
    # Values near the float limit overflow once scaled to pixels.
    return screen_y if math.isfinite(screen_y) else None


def _jumps(
    node: Node,
    view: View,
    canvas_width: float,
    canvas_height: float,
    left: tuple[float, float],
    right: tuple[float, float],
) -> bool:
    """True when the curve is discontinuous between two neighbouring samples.

    Only pairs sitting off-canvas on opposite sides are candidates. The curve
    jumps if it cannot be drawn at the midpoint or the midpoint value escapes
    the range of its neighbours, which is what a pole such as ``tan(x)`` at
    ``pi/2`` looks like.
    """

    (left_x, left_y), (right_x, right_y) = left, right
    crosses = (left_y < 0 and right_y > canvas_height) or (left_y > canvas_height and right_y < 0)
    if not crosses:
        return False
    world_x, _ = screen_to_world(view, canvas_width, canvas_height, (left_x + right_x) / 2, 0.0)
    middle_y = _screen_y(node, view, canvas_width, canvas_height, world_x)
    if middle_y is None:
        return True
    return not min(left_y, right_y) <= middle_y <= max(left_y, right_y)


def sample_path(
    node: Node,
    view: View,
    canvas_width: float,
    canvas_height: float,
    columns: int = DEFAULT_COLUMNS,
) -> Path:
    """Evaluate ``node`` once per screen column and split the curve at gaps.

    Columns whose evaluation fails, or whose value cannot be placed on the
    canvas, become gaps. A run is also broken between two columns where the
    curve jumps across the canvas (see :func:`_jumps`).
    """

    canvas_width = _require_extent("canvas_width", canvas_width)
    canvas_height = _require_extent("canvas_height", canvas_height)
    columns = _column_count(columns)

    runs: list[tuple[Sample, ...]] = []
    current: list[Sample] = []
    gaps = 0
    in_gap = False

    for screen_x in np.linspace(0.0, canvas_width, columns):
        screen_x = float(screen_x)
        world_x, _ = screen_to_world(view, canvas_width, canvas_height, screen_x, 0.0)
        screen_y = _screen_y(node, view, canvas_width, canvas_height, world_x)
        if screen_y is None:
            if not in_gap:
                gaps += 1
                in_gap = True
            if current:
                runs.append(tuple(current))
                current = []
            continue
        in_gap = False
        if current:
            previous = (current[-1].screen_x, current[-1].screen_y)
            if _jumps(node, view, canvas_width, canvas_height, previous, (screen_x, screen_y)):
                gaps += 1
                runs.append(tuple(current))
                current = []
        current.append(Sample(screen_x, screen_y))

    if current:
        runs.append(tuple(current))
    return Path(runs=tuple(runs), gaps=gaps, columns=columns)


@dataclass
class GraphViewport:
    """Single-owner graph view with an idle/panning pointer state machine."""

    canvas_width: float = DEFAULT_WIDTH
    canvas_height: float = DEFAULT_HEIGHT
    view: View = DEFAULT_VIEW
    columns: int = DEFAULT_COLUMNS
    state: ViewportState = "idle"
    _lock: threading.RLock = field(default_factory=threading.RLock, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self.canvas_width = _require_extent("canvas_width", self.canvas_width)
        self.canvas_height = _require_extent("canvas_height", self.canvas_height)
        self.columns = _column_count(self.columns)

    def press(self) -> ViewportState:
        with self._lock:
            self.state = "panning"
            return self.state

    def drag(self, movement_x: float) -> View:
        """Pan while the pointer is held; dragging right reveals smaller x."""

        with self._lock:
            if self.state == "panning":
                self.view = pan(self.view, -_require_finite("movement_x", movement_x), self.canvas_width)
            return self.view

    def release(self) -> ViewportState:
        with self._lock:
            self.state = "idle"
            return self.state

    def zoom(self, cursor_x: float, factor: float) -> View:
        with self._lock:
            self.view = zoom(self.view, cursor_x, self.canvas_width, factor)
            return self.view

    def wheel(self, cursor_x: float, delta_y: float) -> View:
        factor = WHEEL_ZOOM_OUT if _require_finite("delta_y", delta_y) > 0 else WHEEL_ZOOM_IN
        return self.zoom(cursor_x, factor)

    def resize(self, canvas_width: float, canvas_height: float) -> None:
        with self._lock:
            self.canvas_width = _require_extent("canvas_width", canvas_width)
            self.canvas_height = _require_extent("canvas_height", canvas_height)

    def sample(self, node: Node) -> Path:
        with self._lock:
            return sample_path(node, self.view, self.canvas_width, self.canvas_height, self.columns)

    def snapshot(self) -> dict[str, object]:
        with self._lock:
            return {
                "state": self.state,
                "view": self.view.to_dict(),
                "width": self.canvas_width,
                "height": self.canvas_height,
                "columns": self.columns,
            }


__all__ = [
    "DEFAULT_COLUMNS",
    "DEFAULT_HEIGHT",
    "DEFAULT_VIEW",
    "DEFAULT_WIDTH",
    "GraphViewport",
    "MAX_COLUMNS",
    "Path",
    "Sample",
    "View",
    "ViewportState",
    "pan",
    "sample_path",
    "screen_to_world",
    "world_to_screen",
    "zoom",
]
