"""
Heuristic extreme-weather likelihoods from monthly climatology.

There are no standard deviations in a monthly climatology, so each condition
is approximated by comparing the monthly mean against a threshold with a
linear ramp between "starts to register" (0%) and "saturated" (100%).
"""

import logging
import math
from datetime import datetime

from climatology import ClimatologyRecord
from config import THRESHOLDS, Thresholds
from models import ProbabilityResult, RawValues

logger = logging.getLogger(__name__)

DEFAULT_MONTH = 7


def clamp_pct(value: float) -> int:
    """Round half up and clamp to 0-100. NaN counts as 0."""
    if math.isnan(value):
        return 0
    return math.floor(min(max(value, 0), 100) + 0.5)


def ramp_up(x: float, start: float, full: float) -> int:
    """0% at start, 100% at full, linear in between."""
    if full == start:
        # Degenerate ramp: a step at the threshold
        return 100 if x >= full else 0
    return clamp_pct((x - start) / (full - start) * 100)


def ramp_down(x: float, start: float, full: float) -> int:
    """Mirror of ramp_up for quantities where lower means more likely (full < start)."""
    if full == start:
        return 100 if x <= full else 0
    return clamp_pct((start - x) / (start - full) * 100)


def month_from_iso(date_str: str) -> int:
    # "2025-07-15" -> 7
    try:
        return datetime.fromisoformat(date_str.strip()).month
    except (AttributeError, TypeError, ValueError):
        pass
    try:
        return datetime.strptime(date_str.strip(), "%Y-%m").month
    except (AttributeError, TypeError, ValueError):
        logger.info("Unparsable date %r, defaulting to month %d", date_str, DEFAULT_MONTH)
        return DEFAULT_MONTH


def estimate_probabilities(
    month: int,
    record: ClimatologyRecord | None,
    thresholds: Thresholds = THRESHOLDS,
) -> ProbabilityResult:
    """Turn one month of climatology into six 0-100 scores.

    A missing record or missing parameter yields 0 for the conditions that
    depend on it; this function never raises on absent data.
    """
    if record is None:
        record = ClimatologyRecord()

    temperature = record.value("temperature", month)
    humidity = record.value("humidity", month)
    precipitation = record.value("precipitation", month)
    wind_speed = record.value("wind", month)

    very_hot = 0
    very_cold = 0
    if temperature is not None:
        very_hot = ramp_up(temperature, thresholds.very_hot_c, thresholds.very_hot_full_c)
        very_cold = ramp_down(
            temperature, thresholds.very_cold_c, thresholds.very_cold_full_c
        )

    very_windy = 0
    if wind_speed is not None:
        very_windy = ramp_up(
            wind_speed, thresholds.very_windy_ms, thresholds.very_windy_full_ms
        )

    very_humid = 0
    if humidity is not None:
        very_humid = ramp_up(
            humidity, thresholds.very_humid_pct, thresholds.very_humid_full_pct
        )

    very_uncomfortable = clamp_pct(
        thresholds.uncomfortable_hot_weight * very_hot
        + thresholds.uncomfortable_humid_weight * very_humid
        + thresholds.uncomfortable_windy_weight * very_windy
    )

    rainy = 0
    if precipitation is not None:
        rainy = ramp_up(precipitation, thresholds.rainy_mm, thresholds.rainy_full_mm)

    return ProbabilityResult(
        month=month,
        very_hot=very_hot,
        very_cold=very_cold,
        very_windy=very_windy,
        very_humid=very_humid,
        very_uncomfortable=very_uncomfortable,
        rainy=rainy,
        raw=RawValues(
            temperature=temperature,
            humidity=humidity,
            precipitation=precipitation,
            wind_speed=wind_speed,
        ),
    )
