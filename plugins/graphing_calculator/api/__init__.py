"""API routes for the Graphing Calculator plugin."""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path
from typing import Any, Literal

from flask import Blueprint, Response, current_app, request
from pydantic import Field

from common.errors import InternalAppError, NotFoundAppError, UnprocessableAppError, ValidationAppError
from common.logging import get_logger
from common.responses import attachment, fail, ok
from common.validation import SchemaModel, ValidationError, parse_model

from ..core import (
    DEFAULT_COLUMNS,
    DEFAULT_HEIGHT,
    DEFAULT_VIEW,
    DEFAULT_WIDTH,
    MAX_COLUMNS,
    EvalError,
    ExpressionError,
    GraphSessionStore,
    GraphViewport,
    HistoryError,
    HistoryStore,
    LexError,
    TextCipher,
    View,
    ViewError,
    compile_expression,
    evaluate_expression,
    export_expression_svg,
    plot_expression,
    render_svg,
)

_SETTINGS_KEY = "graphing_calculator"
_HISTORY_EXTENSION = "graphing_calculator.history"
_SESSIONS_EXTENSION = "graphing_calculator.sessions"
_EXPORT_NAME = "nimbus_graph.svg"
_DEFAULT_MAX_HISTORY = 500
_DEFAULT_SHORTCUTS = {"evaluate": "Ctrl+Enter", "clear": "Ctrl+L"}

logger = get_logger(__name__)


class ViewPayload(SchemaModel):
    x_min: float
    x_max: float
    y_min: float
    y_max: float


class CanvasPayload(SchemaModel):
    width: float | None = Field(default=None, gt=0)
    height: float | None = Field(default=None, gt=0)
    columns: int | None = Field(default=None, ge=2, le=MAX_COLUMNS)


class EvaluatePayload(SchemaModel):
    expression: str
    x: float = 0.0
    record: bool = True


class PlotPayload(CanvasPayload):
    expression: str
    view: ViewPayload | None = None


class GraphCreatePayload(CanvasPayload):
    view: ViewPayload | None = None


class ExpressionPayload(SchemaModel):
    expression: str


class PointerPayload(SchemaModel):
    event: Literal["press", "move", "release"]
    movement_x: float = 0.0


class ZoomPayload(SchemaModel):
    cursor_x: float
    factor: float | None = Field(default=None, gt=0)
    wheel_delta: float | None = None


api_bp = Blueprint("graphing_calculator_api", __name__, url_prefix="/api/graphing_calculator")


def _settings() -> dict[str, Any]:
    return current_app.config.get("PLUGIN_SETTINGS", {}).get(_SETTINGS_KEY, {}) or {}


def _repo_root() -> Path:
    return Path(current_app.root_path).resolve().parent


def _graph_defaults() -> dict[str, Any]:
    graph = _settings().get("graph", {}) or {}
    try:
        width = float(graph.get("width", DEFAULT_WIDTH))
        height = float(graph.get("height", DEFAULT_HEIGHT))
        columns = int(graph.get("columns", DEFAULT_COLUMNS))
    except (TypeError, ValueError):
        width, height, columns = DEFAULT_WIDTH, DEFAULT_HEIGHT, DEFAULT_COLUMNS
    if width <= 0 or height <= 0 or not 2 <= columns <= MAX_COLUMNS:
        width, height, columns = DEFAULT_WIDTH, DEFAULT_HEIGHT, DEFAULT_COLUMNS
    return {"width": width, "height": height, "columns": columns}


def _resolve_path(raw: str | None) -> Path | None:
    if not raw:
        return None
    path = Path(raw)
    return path if path.is_absolute() else _repo_root() / path


def _history_store() -> HistoryStore:
    store = current_app.extensions.get(_HISTORY_EXTENSION)
    if store is None:
        history = _settings().get("history", {}) or {}
        try:
            max_items = int(history.get("max_items", _DEFAULT_MAX_HISTORY))
        except (TypeError, ValueError):
            logger.warning("ignoring invalid history.max_items=%r", history.get("max_items"))
            max_items = _DEFAULT_MAX_HISTORY
        if max_items < 1:
            max_items = _DEFAULT_MAX_HISTORY
        if current_app.config.get("HISTORY_STORAGE") == "memory":
            store = HistoryStore(max_items=max_items)
        else:
            store = HistoryStore(
                _resolve_path(history.get("path", "instance/history.enc")),
                TextCipher(_resolve_path(history.get("key_path", "instance/history.key"))),
                max_items=max_items,
            )
        current_app.extensions[_HISTORY_EXTENSION] = store
    return store


def _session_store() -> GraphSessionStore:
    store = current_app.extensions.get(_SESSIONS_EXTENSION)
    if store is None:
        graph = _settings().get("graph", {}) or {}
        try:
            ttl = timedelta(minutes=float(graph.get("session_ttl_minutes", 30)))
        except (TypeError, ValueError):
            ttl = timedelta(minutes=30)
        store = GraphSessionStore(ttl=ttl)
        current_app.extensions[_SESSIONS_EXTENSION] = store
    return store


def _invalid_request(exc: ValidationError) -> Response:
    return fail(
        ValidationAppError(
            message=str(exc),
            code="calc.invalid_request",
            details=getattr(exc, "details", None),
        )
    )


def _expression_failure(exc: ExpressionError) -> Response:
    logger.debug("rejected expression: %s", exc)
    if isinstance(exc, EvalError):
        return fail(UnprocessableAppError(message=str(exc), code="calc.eval_error", details=exc.to_details()))
    code = "calc.lex_error" if isinstance(exc, LexError) else "calc.parse_error"
    return fail(ValidationAppError(message=str(exc), code=code, details=exc.to_details()))


def _view_failure(exc: ViewError) -> Response:
    return fail(ValidationAppError(message=str(exc), code="calc.invalid_view"))


def _graph_not_found(exc: KeyError) -> Response:
    return fail(NotFoundAppError(message=str(exc.args[0]) if exc.args else "Graph not found", code="calc.graph_not_found"))


def _history_failure(exc: HistoryError) -> Response:
    logger.warning("history unavailable: %s", exc)
    return fail(InternalAppError(message=str(exc), code="calc.history_error"))


def _to_view(payload: ViewPayload | None) -> View:
    if payload is None:
        return DEFAULT_VIEW
    return View(payload.x_min, payload.x_max, payload.y_min, payload.y_max)


def _canvas(payload: CanvasPayload) -> dict[str, Any]:
    defaults = _graph_defaults()
    return {
        "width": payload.width if payload.width is not None else defaults["width"],
        "height": payload.height if payload.height is not None else defaults["height"],
        "columns": payload.columns if payload.columns is not None else defaults["columns"],
    }


def _svg_response(svg: str) -> Response:
    return attachment(svg, mimetype="image/svg+xml", filename=_EXPORT_NAME)


@api_bp.post("/evaluate")
def evaluate() -> Response:
    raw_payload = request.get_json(silent=True) or {}
    try:
        payload = parse_model(EvaluatePayload, raw_payload)
    except ValidationError as exc:
        return _invalid_request(exc)
    try:
        result = evaluate_expression(payload.expression, x=payload.x)
    except ExpressionError as exc:
        return _expression_failure(exc)

    result["history_item"] = None
    if payload.record:
        try:
            item = _history_store().add(result["expression"], result["result"])
        except HistoryError as exc:
            return _history_failure(exc)
        result["history_item"] = item.to_dict()
    return ok(result)


@api_bp.post("/plot")
def plot() -> Response:
    raw_payload = request.get_json(silent=True) or {}
    try:
        payload = parse_model(PlotPayload, raw_payload)
    except ValidationError as exc:
        return _invalid_request(exc)
    try:
        view = _to_view(payload.view)
        result = plot_expression(payload.expression, view=view, **_canvas(payload))
    except ExpressionError as exc:
        return _expression_failure(exc)
    except ViewError as exc:
        return _view_failure(exc)
    return ok(result)


@api_bp.post("/export")
def export() -> Response:
    raw_payload = request.get_json(silent=True) or {}
    try:
        payload = parse_model(PlotPayload, raw_payload)
    except ValidationError as exc:
        return _invalid_request(exc)
    try:
        view = _to_view(payload.view)
        svg = export_expression_svg(payload.expression, view=view, **_canvas(payload))
    except ExpressionError as exc:
        return _expression_failure(exc)
    except ViewError as exc:
        return _view_failure(exc)
    return _svg_response(svg)


@api_bp.get("/settings")
def settings() -> Response:
    shortcuts = dict(_DEFAULT_SHORTCUTS)
    shortcuts.update(_settings().get("shortcuts", {}) or {})
    return ok({"view": DEFAULT_VIEW.to_dict(), **_graph_defaults(), "shortcuts": shortcuts})


@api_bp.post("/graphs")
def create_graph() -> Response:
    raw_payload = request.get_json(silent=True) or {}
    try:
        payload = parse_model(GraphCreatePayload, raw_payload)
    except ValidationError as exc:
        return _invalid_request(exc)
    canvas = _canvas(payload)
    try:
        viewport = GraphViewport(
            canvas_width=canvas["width"],
            canvas_height=canvas["height"],
            view=_to_view(payload.view),
            columns=canvas["columns"],
        )
    except ViewError as exc:
        return _view_failure(exc)
    session = _session_store().create(viewport)
    return ok({"id": session.session_id, **viewport.snapshot()}, status=201)


@api_bp.get("/graphs/<graph_id>")
def get_graph(graph_id: str) -> Response:
    try:
        session = _session_store().get(graph_id)
    except KeyError as exc:
        return _graph_not_found(exc)
    return ok({"id": graph_id, **session.viewport.snapshot()})


@api_bp.delete("/graphs/<graph_id>")
def delete_graph(graph_id: str) -> Response:
    try:
        _session_store().delete(graph_id)
    except KeyError as exc:
        return _graph_not_found(exc)
    return ok({"id": graph_id, "deleted": True})


@api_bp.post("/graphs/<graph_id>/pointer")
def pointer(graph_id: str) -> Response:
    raw_payload = request.get_json(silent=True) or {}
    try:
        payload = parse_model(PointerPayload, raw_payload)
    except ValidationError as exc:
        return _invalid_request(exc)
    try:
        viewport = _session_store().get(graph_id).viewport
    except KeyError as exc:
        return _graph_not_found(exc)
    try:
        if payload.event == "press":
            viewport.press()
        elif payload.event == "move":
            viewport.drag(payload.movement_x)
        else:
            viewport.release()
    except ViewError as exc:
        return _view_failure(exc)
    return ok({"id": graph_id, **viewport.snapshot()})


@api_bp.post("/graphs/<graph_id>/zoom")
def zoom_graph(graph_id: str) -> Response:
    raw_payload = request.get_json(silent=True) or {}
    try:
        payload = parse_model(ZoomPayload, raw_payload)
    except ValidationError as exc:
        return _invalid_request(exc)
    if (payload.factor is None) == (payload.wheel_delta is None):
        return fail(
            ValidationAppError(message="Provide exactly one of factor or wheel_delta", code="calc.invalid_request")
        )
    try:
        viewport = _session_store().get(graph_id).viewport
    except KeyError as exc:
        return _graph_not_found(exc)
    try:
        if payload.factor is not None:
            viewport.zoom(payload.cursor_x, payload.factor)
        else:
            viewport.wheel(payload.cursor_x, payload.wheel_delta)
    except ViewError as exc:
        return _view_failure(exc)
    return ok({"id": graph_id, **viewport.snapshot()})


@api_bp.post("/graphs/<graph_id>/plot")
def plot_graph(graph_id: str) -> Response:
    raw_payload = request.get_json(silent=True) or {}
    try:
        payload = parse_model(ExpressionPayload, raw_payload)
    except ValidationError as exc:
        return _invalid_request(exc)
    try:
        viewport = _session_store().get(graph_id).viewport
    except KeyError as exc:
        return _graph_not_found(exc)
    try:
        tree = compile_expression(payload.expression)
    except ExpressionError as exc:
        return _expression_failure(exc)
    path = viewport.sample(tree)
    return ok({"id": graph_id, "expression": payload.expression, **viewport.snapshot(), **path.to_dict()})


@api_bp.post("/graphs/<graph_id>/export")
def export_graph(graph_id: str) -> Response:
    raw_payload = request.get_json(silent=True) or {}
    try:
        payload = parse_model(ExpressionPayload, raw_payload)
    except ValidationError as exc:
        return _invalid_request(exc)
    try:
        viewport = _session_store().get(graph_id).viewport
    except KeyError as exc:
        return _graph_not_found(exc)
    try:
        tree = compile_expression(payload.expression)
    except ExpressionError as exc:
        return _expression_failure(exc)
    path = viewport.sample(tree)
    svg = render_svg(
        path,
        viewport.view,
        viewport.canvas_width,
        viewport.canvas_height,
        title=f"y = {payload.expression}",
    )
    return _svg_response(svg)


@api_bp.get("/history")
def list_history() -> Response:
    try:
        items = _history_store().load()
    except HistoryError as exc:
        return _history_failure(exc)
    return ok({"items": [item.to_dict() for item in items]})


@api_bp.delete("/history")
def clear_history() -> Response:
    _history_store().clear()
    return ok({"items": []})


@api_bp.delete("/history/<item_id>")
def delete_history_item(item_id: str) -> Response:
    try:
        _history_store().delete(item_id)
    except KeyError:
        return fail(NotFoundAppError(message="History item not found", code="calc.history_not_found"))
    except HistoryError as exc:
        return _history_failure(exc)
    return ok({"id": item_id, "deleted": True})


@api_bp.post("/history/rotate-key")
def rotate_history_key() -> Response:
    try:
        count = _history_store().rotate_key()
    except HistoryError as exc:
        return _history_failure(exc)
    return ok({"reencrypted": count})


blueprints = [api_bp]


__all__ = [
    "blueprints",
    "evaluate",
    "plot",
    "export",
    "settings",
    "create_graph",
    "get_graph",
    "delete_graph",
    "pointer",
    "zoom_graph",
    "plot_graph",
    "export_graph",
    "list_history",
    "clear_history",
    "delete_history_item",
    "rotate_history_key",
]
