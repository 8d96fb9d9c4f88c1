"""
Tests for pan, pinch-zoom and tap-to-inspect gestures
"""

import math
import random

import pytest

from candleview.chart.gestures import (
    FINGER_MARGIN,
    PanSnapshot,
    PinchSnapshot,
    hit_test,
    overlay_position,
    pan_begin,
    pan_update,
    pinch_start,
    pinch_update,
    pointer_release,
)
from candleview.chart.slicer import slice_viewport
from candleview.chart.viewport import (
    MIN_VISIBLE_CANDLES,
    candle_width_bounds,
    max_start_offset,
    resize,
)
from candleview.models.candle import Candle, CandleBatch
from candleview.models.viewport import CandleSelection, HighlightState, ViewportState

CHART_WIDTH = 500.0
CANDLE_COUNT = 200


def make_batch(count):
    return CandleBatch(
        candles=[
            Candle(timestamp=1_700_000_000_000 + i * 60_000, open=1.0, high=2.0, low=0.5, close=1.5, volume=100.0)
            for i in range(count)
        ]
    )


def candle_under(viewport, x):
    """Fractional candle index under drawable-area x."""
    return (viewport.start_offset + x) / viewport.candle_width


@pytest.fixture
def zoomed():
    """10px candles scrolled 50 candles in (offset 500px)."""
    return ViewportState.derive(10.0, 500.0, CHART_WIDTH)


# -----------------------------------------------------------------------------
# Pan
# -----------------------------------------------------------------------------


class TestPan:
    """Tests for pan_begin() / pan_update()"""

    def test_snapshot(self, zoomed):
        assert pan_begin(zoomed) == PanSnapshot(start_offset=500.0)

    def test_drag_right_reveals_older_candles(self, zoomed):
        state = pan_update(pan_begin(zoomed), 100.0, zoomed, CHART_WIDTH, CANDLE_COUNT)

        assert state.start_offset == pytest.approx(400.0)
        assert state.candle_width == 10.0
        assert state.visible_count == pytest.approx(50.0)

    def test_drag_left_reveals_newer_candles(self, zoomed):
        state = pan_update(pan_begin(zoomed), -250.0, zoomed, CHART_WIDTH, CANDLE_COUNT)
        assert state.start_offset == pytest.approx(750.0)

    def test_translation_is_total_not_incremental(self, zoomed):
        snapshot = pan_begin(zoomed)
        first = pan_update(snapshot, 50.0, zoomed, CHART_WIDTH, CANDLE_COUNT)
        second = pan_update(snapshot, 80.0, first, CHART_WIDTH, CANDLE_COUNT)

        assert second.start_offset == pytest.approx(420.0)

    def test_clamped_at_oldest(self, zoomed):
        state = pan_update(pan_begin(zoomed), 10_000.0, zoomed, CHART_WIDTH, CANDLE_COUNT)
        assert state.start_offset == 0.0

    def test_clamped_at_newest(self, zoomed):
        state = pan_update(pan_begin(zoomed), -10_000.0, zoomed, CHART_WIDTH, CANDLE_COUNT)
        assert state.start_offset == pytest.approx(max_start_offset(CHART_WIDTH, 10.0, CANDLE_COUNT))

    def test_resize_mid_gesture_uses_new_width(self, zoomed):
        """Clamp follows the chart width passed to the update"""
        state = pan_update(pan_begin(zoomed), -10_000.0, zoomed, 1000.0, CANDLE_COUNT)

        assert state.start_offset == pytest.approx(10.0 * (CANDLE_COUNT - 100))
        assert state.visible_count == pytest.approx(100.0)

    def test_non_finite_translation_clamps(self, zoomed):
        state = pan_update(pan_begin(zoomed), math.nan, zoomed, CHART_WIDTH, CANDLE_COUNT)
        assert state.start_offset == 0.0


# -----------------------------------------------------------------------------
# Pinch
# -----------------------------------------------------------------------------


class TestPinch:
    """Tests for pinch_start() / pinch_update()"""

    def test_snapshot_clamps_focal(self, zoomed):
        assert pinch_start(zoomed, 900.0, CHART_WIDTH).focal_x == CHART_WIDTH
        assert pinch_start(zoomed, -5.0, CHART_WIDTH).focal_x == 0.0
        assert pinch_start(zoomed, 120.0, CHART_WIDTH) == PinchSnapshot(
            candle_width=10.0, start_offset=500.0, focal_x=120.0
        )

    def test_zoom_in_at_midpoint_keeps_anchor(self, zoomed):
        snapshot = pinch_start(zoomed, 250.0, CHART_WIDTH)

        state = pinch_update(snapshot, 1.5, 250.0, zoomed, CHART_WIDTH, CANDLE_COUNT)

        assert state.candle_width == pytest.approx(15.0)
        assert state.start_offset == pytest.approx(875.0)
        assert candle_under(state, 250.0) == pytest.approx(candle_under(zoomed, 250.0))

    def test_zoom_in_off_center_keeps_anchor(self, zoomed):
        snapshot = pinch_start(zoomed, 100.0, CHART_WIDTH)

        state = pinch_update(snapshot, 1.5, 100.0, zoomed, CHART_WIDTH, CANDLE_COUNT)

        assert state.start_offset == pytest.approx(800.0)
        assert candle_under(state, 100.0) == pytest.approx(60.0)

    @pytest.mark.parametrize("scale", [0.6, 0.8, 1.2, 2.0, 3.0])
    @pytest.mark.parametrize("focal", [0.0, 125.0, 250.0, 400.0, 500.0])
    def test_anchor_within_one_candle(self, zoomed, scale, focal):
        """Unclamped zooms keep the focal candle under the finger"""
        snapshot = pinch_start(zoomed, focal, CHART_WIDTH)

        state = pinch_update(snapshot, scale, focal, zoomed, CHART_WIDTH, CANDLE_COUNT)

        assert abs(candle_under(state, focal) - candle_under(zoomed, focal)) <= 1.0

    def test_zoom_in_clamped_to_minimum_visible(self, zoomed):
        snapshot = pinch_start(zoomed, 250.0, CHART_WIDTH)

        state = pinch_update(snapshot, 100.0, 250.0, zoomed, CHART_WIDTH, CANDLE_COUNT)

        assert state.candle_width == pytest.approx(CHART_WIDTH / MIN_VISIBLE_CANDLES)
        assert state.visible_count == pytest.approx(MIN_VISIBLE_CANDLES)

    def test_zoom_out_clamped_to_all_candles(self, zoomed):
        snapshot = pinch_start(zoomed, 250.0, CHART_WIDTH)

        state = pinch_update(snapshot, 0.01, 250.0, zoomed, CHART_WIDTH, CANDLE_COUNT)

        assert state.candle_width == pytest.approx(CHART_WIDTH / CANDLE_COUNT)
        assert state.start_offset == 0.0

    def test_focal_movement_pans(self, zoomed):
        snapshot = pinch_start(zoomed, 250.0, CHART_WIDTH)

        state = pinch_update(snapshot, 1.0, 300.0, zoomed, CHART_WIDTH, CANDLE_COUNT)

        assert state.candle_width == pytest.approx(10.0)
        assert state.start_offset == pytest.approx(450.0)

    def test_zero_snapshot_width_uses_current(self, zoomed):
        snapshot = PinchSnapshot(candle_width=0.0, start_offset=500.0, focal_x=250.0)

        state = pinch_update(snapshot, 1.5, 250.0, zoomed, CHART_WIDTH, CANDLE_COUNT)

        assert state.candle_width == pytest.approx(15.0)

    def test_zero_chart_width_is_noop(self, zoomed):
        snapshot = pinch_start(zoomed, 250.0, CHART_WIDTH)

        assert pinch_update(snapshot, 2.0, 250.0, zoomed, 0.0, CANDLE_COUNT) is zoomed


class TestViewportInvariants:
    """Random gesture sequences never break the viewport bounds"""

    @pytest.mark.parametrize("candle_count", [1, 5, 50, 300])
    def test_random_sequence(self, candle_count):
        rng = random.Random(candle_count)
        chart_width = 400.0
        state = resize(None, chart_width, candle_count)

        for _ in range(300):
            action = rng.choice(["resize", "pan", "pinch"])
            if action == "resize":
                chart_width = rng.uniform(50.0, 1000.0)
                state = resize(state, chart_width, candle_count)
            elif action == "pan":
                state = pan_update(
                    pan_begin(state), rng.uniform(-2000.0, 2000.0), state, chart_width, candle_count
                )
            else:
                snapshot = pinch_start(state, rng.uniform(-100.0, 1200.0), chart_width)
                state = pinch_update(
                    snapshot,
                    rng.uniform(0.1, 5.0),
                    rng.uniform(-100.0, 1200.0),
                    state,
                    chart_width,
                    candle_count,
                )

            min_width, max_width = candle_width_bounds(chart_width, candle_count)
            assert state.candle_width > 0
            assert min_width - 1e-9 <= state.candle_width <= max_width + 1e-9
            assert 0.0 <= state.start_offset
            assert state.start_offset <= max_start_offset(chart_width, state.candle_width, candle_count) + 1e-9
            assert state.visible_count == pytest.approx(chart_width / state.candle_width)


# -----------------------------------------------------------------------------
# Tap / drag-to-inspect
# -----------------------------------------------------------------------------


@pytest.fixture
def tap_setup():
    """10 candles of 50px in a 250px chart (candle centers at 25, 75, ...)."""
    batch = make_batch(10)
    viewport = ViewportState.derive(50.0, 0.0, 250.0)
    return batch, viewport, slice_viewport(batch, viewport)


class TestHitTest:
    """Tests for hit_test()"""

    @pytest.mark.parametrize("x,expected", [(0.0, 0), (49.9, 0), (50.0, 1), (60.0, 1), (249.0, 4)])
    def test_maps_x_to_candle(self, tap_setup, x, expected):
        _, viewport, viewport_slice = tap_setup

        highlight = hit_test(viewport_slice, viewport, x, 100.0, 250.0)

        assert highlight.index == expected
        assert highlight.global_index == expected
        assert highlight.screen_x == pytest.approx(25.0 + 50.0 * expected)
        assert highlight.local_x == pytest.approx(50.0 * expected)
        assert highlight.y == 100.0

    def test_global_index_when_scrolled(self):
        batch = make_batch(10)
        viewport = ViewportState.derive(50.0, 100.0, 250.0)
        viewport_slice = slice_viewport(batch, viewport)

        highlight = hit_test(viewport_slice, viewport, 10.0, 0.0, 250.0)

        assert highlight.index == 0
        assert highlight.global_index == 2
        assert highlight.candle is batch.candles[2]

    @pytest.mark.parametrize("x", [250.0, 300.0, -30.0, math.nan, math.inf])
    def test_outside_chart_clears(self, tap_setup, x):
        _, viewport, viewport_slice = tap_setup
        assert hit_test(viewport_slice, viewport, x, 10.0, 250.0) is None

    def test_non_finite_y_clears(self, tap_setup):
        _, viewport, viewport_slice = tap_setup
        assert hit_test(viewport_slice, viewport, 10.0, math.nan, 250.0) is None

    def test_default_overlay_fields(self, tap_setup):
        _, viewport, viewport_slice = tap_setup

        highlight = hit_test(viewport_slice, viewport, 10.0, 10.0, 250.0)

        assert list(highlight.fields) == ["Date", "Open", "High", "Low", "Close", "Volume"]
        assert highlight.fields["Close"] == "1.50"

    def test_custom_overlay_formatter(self, tap_setup):
        _, viewport, viewport_slice = tap_setup

        highlight = hit_test(
            viewport_slice,
            viewport,
            10.0,
            10.0,
            250.0,
            overlay_formatter=lambda candle: {"Time": str(candle.timestamp)},
        )

        assert highlight.fields == {"Time": "1700000000000"}


class TestPointerRelease:
    """Tests for pointer_release()"""

    def test_no_highlight(self):
        assert pointer_release(None) is None

    def test_reports_selected_candle(self, tap_setup):
        batch, viewport, viewport_slice = tap_setup
        highlight = hit_test(viewport_slice, viewport, 60.0, 10.0, 250.0)

        selection = pointer_release(highlight)

        assert selection == CandleSelection(candle=batch.candles[1], global_index=1)


class TestOverlayPosition:
    """Tests for overlay_position()"""

    @staticmethod
    def highlight_at(screen_x, y):
        return HighlightState(
            index=0,
            global_index=0,
            candle=Candle(timestamp=0),
            local_x=screen_x,
            screen_x=screen_x,
            y=y,
        )

    def place(self, screen_x, y, overlay_width=120.0, overlay_height=100.0):
        return overlay_position(
            self.highlight_at(screen_x, y),
            overlay_width,
            overlay_height,
            layout_width=400.0,
            layout_height=300.0,
            chart_height=276.0,
            time_label_height=24.0,
        )

    def test_left_half_places_right_of_finger(self):
        position = self.place(50.0, 200.0)

        assert position.left == pytest.approx(50.0 + FINGER_MARGIN)
        assert position.top == pytest.approx(200.0 - 100.0 - FINGER_MARGIN)

    def test_right_half_places_left_of_finger(self):
        position = self.place(300.0, 200.0)
        assert position.left == pytest.approx(300.0 - 120.0 - FINGER_MARGIN)

    def test_top_clamped_to_zero(self):
        assert self.place(50.0, 50.0).top == 0.0

    def test_stays_inside_layout(self):
        position = self.place(190.0, 10.0, overlay_width=300.0, overlay_height=280.0)

        assert 0.0 <= position.left <= 400.0 - 300.0
        assert 0.0 <= position.top <= 300.0 - 280.0

    def test_right_edge(self):
        position = self.place(399.0, 150.0)

        assert position.left == pytest.approx(399.0 - 120.0 - FINGER_MARGIN)
        assert position.left + 120.0 <= 400.0
