"""
Interactive chart: owner of one chart's session state.

Wires layout, gesture and pointer callbacks from a host UI to the pure
viewport/gesture functions, and produces ChartFrame snapshots for the
renderer. All calls are synchronous and expected on a single thread.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from candleview.chart.extents import (
    EMPTY_PRICE_EXTREMES,
    EMPTY_VOLUME_EXTREMES,
    price_extremes,
    volume_extremes,
)
from candleview.chart.formatters import (
    OverlayFormatter,
    PriceLabelFormatter,
    TimeLabelFormatter,
    default_overlay_formatter,
    default_price_label,
    default_time_label,
)
from candleview.chart.geometry import (
    INDICATOR_PANEL_HEIGHT,
    CandleGeometry,
    GridLevel,
    IndicatorPanel,
    Point,
    TimeLabel,
    candle_geometry,
    indicator_panel_geometry,
    price_grid_levels,
    price_mapper,
    time_labels,
    trend_polylines,
    volume_mapper,
)
from candleview.chart.gestures import (
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
from candleview.chart.slicer import slice_viewport, x_shift
from candleview.chart.viewport import resize
from candleview.config.chart_config import ChartConfig
from candleview.models.candle import CandleBatch
from candleview.models.viewport import (
    CandleSelection,
    HighlightState,
    OverlayPosition,
    PriceExtremes,
    ViewportSlice,
    ViewportState,
    VolumeExtremes,
)


@dataclass(frozen=True)
class ChartFrame:
    """
    Everything a renderer needs to draw one frame.

    Candle and trend-line x coordinates are slice-local; translate them by
    x_shift. Price axis labels are already formatted.
    """

    chart_width: float
    chart_height: float
    price_height: float
    volume_height: float
    viewport: Optional[ViewportState]
    viewport_slice: Optional[ViewportSlice]
    price_extremes: PriceExtremes
    volume_extremes: VolumeExtremes
    x_shift: float
    candles: List[CandleGeometry] = field(default_factory=list)
    price_grid: List[GridLevel] = field(default_factory=list)
    price_labels: List[str] = field(default_factory=list)
    time_labels: List[TimeLabel] = field(default_factory=list)
    trend_lines: Dict[str, List[List[Point]]] = field(default_factory=dict)
    highlight: Optional[HighlightState] = None

    @property
    def overlay_entries(self) -> List[Tuple[str, str]]:
        if self.highlight is None:
            return []
        return list(self.highlight.fields.items())


class InteractiveChart:
    """
    Candlestick chart session with pan, pinch-zoom and tap-to-inspect.

    Usage:
        chart = InteractiveChart(batch, on_candle_selected=handle_selection)
        chart.on_layout(400, 300)
        chart.on_pinch_start(focal_x=120)
        chart.on_pinch_update(scale=1.4, focal_x=120)
        frame = chart.frame()

    The viewport is initialized once both a positive layout width and at
    least one candle are known, and re-derived on every resize, new batch,
    pan or pinch. It is never persisted.
    """

    def __init__(
        self,
        batch: Optional[CandleBatch] = None,
        config: Optional[ChartConfig] = None,
        time_label_formatter: Optional[TimeLabelFormatter] = None,
        price_label_formatter: Optional[PriceLabelFormatter] = None,
        overlay_formatter: Optional[OverlayFormatter] = None,
        on_candle_selected: Optional[Callable[[CandleSelection], None]] = None,
        on_candle_width_change: Optional[Callable[[float], None]] = None,
    ):
        self.config = config or ChartConfig()
        self.logger = logging.getLogger(self.__class__.__name__)

        self.time_label_formatter = time_label_formatter or default_time_label
        self.price_label_formatter = price_label_formatter or default_price_label
        self.overlay_formatter = overlay_formatter or default_overlay_formatter
        self._on_candle_selected = on_candle_selected
        self._on_candle_width_change = on_candle_width_change

        self._batch = batch or CandleBatch()
        self._layout_width = 0.0
        self._layout_height = 0.0
        self._viewport: Optional[ViewportState] = None
        self._pan: Optional[PanSnapshot] = None
        self._pinch: Optional[PinchSnapshot] = None
        self._highlight: Optional[HighlightState] = None

    # -------------------------------------------------------------------------
    # State accessors
    # -------------------------------------------------------------------------

    @property
    def batch(self) -> CandleBatch:
        return self._batch

    @property
    def viewport(self) -> Optional[ViewportState]:
        return self._viewport

    @property
    def highlight(self) -> Optional[HighlightState]:
        return self._highlight

    @property
    def candle_count(self) -> int:
        return len(self._batch.candles)

    @property
    def chart_width(self) -> float:
        """Drawable width (layout minus the price axis)."""
        return max(self._layout_width - self.config.price_label_width, 0.0)

    @property
    def chart_height(self) -> float:
        """Drawable height (layout minus the time axis)."""
        return max(self._layout_height - self.config.time_label_height, 0.0)

    @property
    def price_height(self) -> float:
        return self.chart_height * (1 - self.config.volume_height_factor)

    @property
    def volume_height(self) -> float:
        return self.chart_height - self.price_height

    # -------------------------------------------------------------------------
    # Data and layout
    # -------------------------------------------------------------------------

    def set_batch(self, batch: CandleBatch) -> None:
        """Replace the candles; keeps zoom/scroll where the new data allows."""
        self._batch = batch
        self._highlight = None
        self.logger.debug(f"New batch: {len(batch.candles)} candles, {len(batch.definitions)} indicator line(s)")
        self._apply_viewport(self._resized_viewport())

    def on_layout(self, width: float, height: float) -> None:
        """Handle a layout change of the whole chart view."""
        if width == self._layout_width and height == self._layout_height:
            return
        self._layout_width = width
        self._layout_height = height
        self._highlight = None
        self._apply_viewport(self._resized_viewport())

    def _resized_viewport(self) -> Optional[ViewportState]:
        return resize(
            self._viewport,
            self.chart_width,
            self.candle_count,
            self.config.initial_visible_candle_count,
        )

    def _apply_viewport(self, viewport: Optional[ViewportState]) -> None:
        previous_width = self._viewport.candle_width if self._viewport else None
        self._viewport = viewport
        if viewport is None or viewport.candle_width <= 0:
            return
        if viewport.candle_width != previous_width and self._on_candle_width_change:
            self._on_candle_width_change(viewport.candle_width)

    # -------------------------------------------------------------------------
    # Gestures
    # -------------------------------------------------------------------------

    def on_pan_begin(self) -> None:
        self._highlight = None
        if self._viewport is None:
            return
        self._pan = pan_begin(self._viewport)

    def on_pan_update(self, translation_x: float) -> None:
        if self._viewport is None or self._pan is None:
            return
        self._apply_viewport(
            pan_update(self._pan, translation_x, self._viewport, self.chart_width, self.candle_count)
        )

    def on_pan_end(self) -> None:
        if self._pan is not None and self._viewport is not None:
            self.logger.debug(f"Pan ended at start_offset={self._viewport.start_offset:.1f}")
        self._pan = None

    def on_pinch_start(self, focal_x: float) -> None:
        self._highlight = None
        if self._viewport is None:
            return
        self._pinch = pinch_start(self._viewport, focal_x, self.chart_width)

    def on_pinch_update(self, scale: float, focal_x: float) -> None:
        if self._viewport is None or self._pinch is None:
            return
        self._apply_viewport(
            pinch_update(
                self._pinch,
                scale,
                focal_x,
                self._viewport,
                self.chart_width,
                self.candle_count,
            )
        )

    def on_pinch_end(self) -> None:
        if self._pinch is not None and self._viewport is not None:
            self.logger.debug(
                f"Pinch ended: candle_width={self._viewport.candle_width:.2f}, "
                f"visible_count={self._viewport.visible_count:.1f}"
            )
        self._pinch = None

    # -------------------------------------------------------------------------
    # Pointer (tap / drag-to-inspect)
    # -------------------------------------------------------------------------

    def on_pointer_down(self, x: float, y: float) -> Optional[HighlightState]:
        return self._inspect(x, y)

    def on_pointer_move(self, x: float, y: float) -> Optional[HighlightState]:
        return self._inspect(x, y)

    def _inspect(self, x: float, y: float) -> Optional[HighlightState]:
        viewport_slice = self.current_slice()
        if viewport_slice is None or self._viewport is None:
            self._highlight = None
        else:
            self._highlight = hit_test(
                viewport_slice,
                self._viewport,
                x,
                y,
                self.chart_width,
                self.overlay_formatter,
            )
        return self._highlight

    def on_pointer_up(self) -> Optional[CandleSelection]:
        """Clear the highlight and report the candle it was on, if any."""
        selection = pointer_release(self._highlight)
        self._highlight = None
        if selection is not None and self._on_candle_selected:
            self._on_candle_selected(selection)
        return selection

    def on_pointer_cancel(self) -> Optional[CandleSelection]:
        return self.on_pointer_up()

    def overlay_position(self, overlay_width: float, overlay_height: float) -> Optional[OverlayPosition]:
        """Where to put an overlay panel of the measured size, if one is shown."""
        if self._highlight is None:
            return None
        return overlay_position(
            self._highlight,
            overlay_width,
            overlay_height,
            self._layout_width,
            self._layout_height,
            self.chart_height,
            self.config.time_label_height,
            self.config.overlay_finger_margin,
        )

    # -------------------------------------------------------------------------
    # Rendering output
    # -------------------------------------------------------------------------

    def current_slice(self) -> Optional[ViewportSlice]:
        viewport = self._viewport
        if viewport is None or self.candle_count == 0 or self.chart_width <= 0 or viewport.candle_width <= 0:
            return None
        return slice_viewport(self._batch, viewport)

    def frame(self) -> ChartFrame:
        """Snapshot of everything needed to draw the current state."""
        viewport_slice = self.current_slice()
        if viewport_slice is None or self._viewport is None:
            return ChartFrame(
                chart_width=self.chart_width,
                chart_height=self.chart_height,
                price_height=self.price_height,
                volume_height=self.volume_height,
                viewport=self._viewport,
                viewport_slice=None,
                price_extremes=EMPTY_PRICE_EXTREMES,
                volume_extremes=EMPTY_VOLUME_EXTREMES,
                x_shift=0.0,
            )

        prices = price_extremes(viewport_slice.candles)
        volumes = volume_extremes(viewport_slice.candles)
        to_price_y = price_mapper(prices, self.price_height)
        grid = price_grid_levels(prices, self.price_height)
        return ChartFrame(
            chart_width=self.chart_width,
            chart_height=self.chart_height,
            price_height=self.price_height,
            volume_height=self.volume_height,
            viewport=self._viewport,
            viewport_slice=viewport_slice,
            price_extremes=prices,
            volume_extremes=volumes,
            x_shift=x_shift(viewport_slice, self._viewport),
            candles=candle_geometry(
                viewport_slice,
                self._viewport.candle_width,
                to_price_y,
                volume_mapper(volumes, self.price_height, self.volume_height),
                self.chart_height,
            ),
            price_grid=grid,
            price_labels=[self.price_label_formatter(level.price) for level in grid],
            time_labels=time_labels(
                viewport_slice,
                self._viewport,
                self.chart_width,
                self.config.time_label_spacing,
                self.time_label_formatter,
            ),
            trend_lines=trend_polylines(
                viewport_slice,
                self._viewport.candle_width,
                to_price_y,
            ),
            highlight=self._highlight,
        )

    def indicator_panel(
        self,
        line_ids: Sequence[str],
        width: float,
        height: float = INDICATOR_PANEL_HEIGHT,
        min_value: Optional[float] = None,
        max_value: Optional[float] = None,
        reference_lines: Sequence[float] = (),
    ) -> IndicatorPanel:
        """
        Whole-batch panel for indicator lines drawn outside the price chart.

        Usage:
            chart.indicator_panel(["rsi14"], 360, min_value=0, max_value=100,
                                  reference_lines=[30, 70])
        """
        series = {line_id: self._batch.trend_series(line_id) for line_id in line_ids}
        return indicator_panel_geometry(
            series,
            width,
            height,
            min_value=min_value,
            max_value=max_value,
            reference_lines=reference_lines,
        )
