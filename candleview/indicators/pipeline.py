"""
Attach computed indicator lines to a candle batch.

Each configured line becomes an IndicatorDefinition on the batch and a
keyed entry in every candle's trends mapping, so later stages resolve
values by indicator id rather than by position.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, Optional, Tuple

from candleview.core.exceptions import InvalidArgumentError
from candleview.indicators.registry import IndicatorRegistry
from candleview.models.candle import CandleBatch, IndicatorDefinition
from candleview.utils.logger import log_execution_time

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IndicatorSpec:
    """
    One configured indicator line.

    Attributes:
        id: Unique line id (key into Candle.trends)
        name: Registered indicator name ('sma', 'rsi', 'macd')
        params: Indicator parameters, validated by its ParamSchema
        label: Display label
        output: Output line to take (None = indicator's primary output)
    """

    id: str
    name: str
    params: Dict[str, Any] = field(default_factory=dict)
    label: Optional[str] = None
    output: Optional[str] = None


def default_indicator_specs() -> List[IndicatorSpec]:
    """Moving averages, RSI and MACD lines shown on the stock chart screen."""
    return [
        IndicatorSpec(id="ma7", name="sma", params={"period": 7}, label="MA(7)"),
        IndicatorSpec(id="ma25", name="sma", params={"period": 25}, label="MA(25)"),
        IndicatorSpec(id="rsi14", name="rsi", params={"period": 14}, label="RSI(14)"),
        IndicatorSpec(id="macd", name="macd", label="MACD", output="macd"),
        IndicatorSpec(id="macdSignal", name="macd", label="MACD Signal", output="signal"),
    ]


def _cache_key(spec: IndicatorSpec) -> Tuple[str, Tuple[Tuple[str, Any], ...]]:
    return spec.name, tuple(sorted(spec.params.items()))


def attach_indicators(
    batch: CandleBatch,
    specs: Iterable[IndicatorSpec],
    strict: bool = False,
    registry: Optional[IndicatorRegistry] = None,
) -> CandleBatch:
    """
    Compute indicator lines and merge them into the batch.

    Indicators sharing name and params are computed once (MACD line and
    signal line come from the same run).

    Args:
        batch: Source candles and existing definitions
        specs: Lines to add, in display order
        strict: Propagate computation errors instead of skipping the line
        registry: Indicator registry (default: singleton)

    Returns:
        New batch with extended definitions and candle trends

    Raises:
        InvalidArgumentError: On duplicate line ids, or any failure when strict
    """
    registry = registry or IndicatorRegistry.get_instance()
    specs = list(specs)

    seen = set(batch.indicator_ids)
    for spec in specs:
        if spec.id in seen:
            raise InvalidArgumentError(f"Duplicate indicator id: {spec.id}")
        seen.add(spec.id)

    if not specs:
        return batch

    # (name, params) -> (outputs, primary output name)
    computed: Dict[Tuple[str, Tuple[Tuple[str, Any], ...]], Tuple[Dict[str, List[Optional[float]]], str]] = {}
    definitions = list(batch.definitions)
    columns: Dict[str, List[Optional[float]]] = {}

    for spec in specs:
        try:
            key = _cache_key(spec)
            if key not in computed:
                indicator = registry.create(spec.name, spec.params)
                with log_execution_time(f"indicator:{spec.id}"):
                    computed[key] = (indicator.compute(batch.candles), indicator.primary_output)

            outputs, primary = computed[key]
            output_name = spec.output or primary
            if output_name not in outputs:
                raise InvalidArgumentError(
                    f"Indicator '{spec.name}' has no output '{output_name}'. "
                    f"Available: {sorted(outputs)}"
                )
        except Exception:
            if strict:
                raise
            logger.warning(f"Failed to compute indicator '{spec.id}', skipping", exc_info=True)
            continue

        columns[spec.id] = outputs[output_name]
        definitions.append(IndicatorDefinition(id=spec.id, label=spec.label))

    candles = [
        candle.with_trends({line_id: values[i] for line_id, values in columns.items()})
        for i, candle in enumerate(batch.candles)
    ]

    logger.debug(f"Attached {len(columns)} indicator line(s) to {len(candles)} candles")
    return replace(batch, candles=candles, definitions=definitions)
