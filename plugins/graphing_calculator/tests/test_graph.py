import math

import pytest

from plugins.graphing_calculator.core import (
    DEFAULT_VIEW,
    GraphViewport,
    View,
    ViewError,
    compile_expression,
    pan,
    sample_path,
    screen_to_world,
    world_to_screen,
    zoom,
)


def test_default_view():
    assert DEFAULT_VIEW.to_dict() == {"x_min": -10.0, "x_max": 10.0, "y_min": -10.0, "y_max": 10.0}


@pytest.mark.parametrize(
    "bounds",
    [(1, 1, -1, 1), (2, 1, -1, 1), (-1, 1, 3, 3), (-1, 1, math.nan, 1), (-math.inf, 1, -1, 1)],
)
def test_degenerate_views_are_rejected(bounds):
    with pytest.raises(ViewError):
        View(*bounds)


def test_world_to_screen_inverts_y():
    assert world_to_screen(DEFAULT_VIEW, 600, 400, -10, -10) == (0.0, 400.0)
    assert world_to_screen(DEFAULT_VIEW, 600, 400, 10, 10) == (600.0, 0.0)
    assert world_to_screen(DEFAULT_VIEW, 600, 400, 0, 0) == (300.0, 200.0)


@pytest.mark.parametrize("point", [(-3.25, 7.5), (0.0, 0.0), (9.9, -9.9)])
def test_screen_to_world_is_inverse(point):
    view = View(-4, 12, -2, 3)
    screen = world_to_screen(view, 800, 500, *point)
    world = screen_to_world(view, 800, 500, *screen)
    assert world == pytest.approx(point)


def test_pan_shifts_by_world_units():
    moved = pan(DEFAULT_VIEW, 30, 600)
    assert moved.x_min == pytest.approx(-9.0)
    assert moved.x_max == pytest.approx(11.0)
    assert (moved.y_min, moved.y_max) == (-10.0, 10.0)


@pytest.mark.parametrize("delta", [-250.0, -1.5, 0.0, 17.0, 480.0])
def test_pan_round_trip(delta):
    view = View(-3.7, 5.2, -1, 1)
    back = pan(pan(view, delta, 640), -delta, 640)
    assert back.x_min == pytest.approx(view.x_min)
    assert back.x_max == pytest.approx(view.x_max)


def test_pan_requires_positive_canvas():
    with pytest.raises(ViewError):
        pan(DEFAULT_VIEW, 10, 0)


@pytest.mark.parametrize("cursor", [0.0, 123.0, 300.0, 599.0, 750.0])
@pytest.mark.parametrize("factor", [0.5, 0.9, 1.1, 3.0])
def test_zoom_keeps_world_point_under_cursor(cursor, factor):
    view = View(-7.5, 2.25, -4, 6)
    before = screen_to_world(view, 600, 400, cursor, 0)[0]
    zoomed = zoom(view, cursor, 600, factor)
    after = screen_to_world(zoomed, 600, 400, cursor, 0)[0]
    assert after == pytest.approx(before, abs=1e-9)
    assert zoomed.width == pytest.approx(view.width * factor)


def test_zoom_scales_y_range_around_zero():
    zoomed = zoom(View(-1, 1, 2, 6), 0, 100, 0.5)
    assert (zoomed.y_min, zoomed.y_max) == (1.0, 3.0)


@pytest.mark.parametrize("factor", [0, -1, math.nan, math.inf])
def test_zoom_rejects_invalid_factor(factor):
    with pytest.raises(ViewError):
        zoom(DEFAULT_VIEW, 300, 600, factor)


def test_zoom_rejects_collapsed_view():
    with pytest.raises(ViewError):
        zoom(DEFAULT_VIEW, 300, 600, 1e-12)


def test_sample_path_continuous_curve():
    path = sample_path(compile_expression("x"), DEFAULT_VIEW, 600, 400, 7)
    assert len(path.runs) == 1
    assert path.gaps == 0
    assert [s.screen_x for s in path.runs[0]] == pytest.approx([0, 100, 200, 300, 400, 500, 600])
    assert [s.screen_y for s in path.runs[0]] == pytest.approx([400, 400 - 400 / 6, 400 - 800 / 6, 200, 800 / 6, 400 / 6, 0])


def test_sample_path_breaks_at_evaluation_failures():
    path = sample_path(compile_expression("1/x"), View(-1, 1, -10, 10), 400, 300, 201)
    assert len(path.runs) == 2
    assert path.gaps >= 1
    assert path.runs[0][-1].screen_x < 200 < path.runs[1][0].screen_x
    assert path.points == 200


def test_sample_path_breaks_near_tan_pole():
    path = sample_path(compile_expression("tan(x)"), View(1, 2, -10, 10), 500, 400, 101)
    assert len(path.runs) == 2
    boundary = path.runs[0][-1].screen_x
    pole_x = world_to_screen(View(1, 2, -10, 10), 500, 400, math.pi / 2, 0)[0]
    assert abs(boundary - pole_x) <= 500 / 100


def test_sample_path_over_default_view_splits_every_tan_branch():
    path = sample_path(compile_expression("tan(x)"), DEFAULT_VIEW, 600, 400, 200)
    # Poles at +/- pi/2, +/- 3pi/2, +/- 5pi/2 all lie inside [-10, 10].
    assert len(path.runs) >= 7


def test_sample_path_skips_undefined_region():
    path = sample_path(compile_expression("sqrt(x)"), DEFAULT_VIEW, 600, 400, 201)
    assert len(path.runs) == 1
    assert path.runs[0][0].screen_x == pytest.approx(300.0)


@pytest.mark.parametrize("columns", [0, 1, 10_000])
def test_sample_path_column_bounds(columns):
    with pytest.raises(ViewError):
        sample_path(compile_expression("x"), DEFAULT_VIEW, 600, 400, columns)


def test_viewport_pans_only_while_pressed():
    viewport = GraphViewport(canvas_width=600, canvas_height=400)
    assert viewport.state == "idle"
    assert viewport.drag(60) == DEFAULT_VIEW

    assert viewport.press() == "panning"
    moved = viewport.drag(60)
    assert moved.x_min == pytest.approx(-12.0)
    assert moved.x_max == pytest.approx(8.0)

    assert viewport.release() == "idle"
    assert viewport.drag(60) == moved


def test_viewport_wheel_zoom():
    viewport = GraphViewport(canvas_width=600, canvas_height=400)
    out = viewport.wheel(300, 120)
    assert out.width == pytest.approx(22.0)
    back_in = viewport.wheel(300, -120)
    assert back_in.width == pytest.approx(22.0 * 0.9)


def test_viewport_rejected_zoom_keeps_previous_view():
    viewport = GraphViewport()
    before = viewport.view
    with pytest.raises(ViewError):
        viewport.zoom(300, -2)
    assert viewport.view == before


def test_viewport_snapshot_and_sample():
    viewport = GraphViewport(canvas_width=300, canvas_height=200, columns=50)
    snapshot = viewport.snapshot()
    assert snapshot["state"] == "idle"
    assert snapshot["columns"] == 50
    path = viewport.sample(compile_expression("x^2"))
    assert path.columns == 50
    assert path.points == 50


def test_steep_line_stays_one_run():
    path = sample_path(compile_expression("1000*x"), DEFAULT_VIEW, 600, 400, 200)
    assert len(path.runs) == 1
    assert path.gaps == 0
    assert path.points == 200


def test_tan_pole_splits_exactly_once():
    path = sample_path(compile_expression("tan(x)"), View(1, 2, -10, 10), 500, 400, 101)
    assert len(path.runs) == 2
    assert path.gaps == 1


def test_values_beyond_screen_range_become_gaps():
    path = sample_path(compile_expression("10^308"), DEFAULT_VIEW, 600, 400, 50)
    assert path.runs == ()
    assert path.gaps == 1
    huge = sample_path(compile_expression("10^308 * x"), DEFAULT_VIEW, 600, 400, 51)
    assert all(math.isfinite(s.screen_y) for run in huge.runs for s in run)


@pytest.mark.parametrize("expression", ["sqrt(x)", "sqrt(-x)"])
def test_gap_count_is_symmetric(expression):
    path = sample_path(compile_expression(expression), DEFAULT_VIEW, 600, 400, 201)
    assert len(path.runs) == 1
    assert path.gaps == 1


def test_every_failed_span_is_counted():
    # sqrt(sin(x)) is undefined on alternating half periods across [-10, 10].
    path = sample_path(compile_expression("sqrt(sin(x))"), DEFAULT_VIEW, 600, 400, 400)
    assert path.gaps == 4
    assert len(path.runs) == 4
