import logging
import math
from typing import Any, Literal

import httpx
from pydantic import BaseModel, ConfigDict

from config import (
    POWER_BASE_URL,
    POWER_COMMUNITY,
    POWER_END,
    POWER_START,
    POWER_TIMEOUT_SECONDS,
)

logger = logging.getLogger(__name__)

Parameter = Literal["temperature", "humidity", "precipitation", "wind"]

# POWER parameter name -> record field
POWER_PARAMETERS: dict[str, Parameter] = {
    "T2M": "temperature",
    "RH2M": "humidity",
    "PRECTOTCORR": "precipitation",
    "WS10M": "wind",
}

# POWER uses -999 for "no data"
POWER_FILL_VALUE = -999.0

_MONTH_NAMES = {
    name: index
    for index, name in enumerate(
        ["JAN", "FEB", "MAR", "APR", "MAY", "JUN",
         "JUL", "AUG", "SEP", "OCT", "NOV", "DEC"],
        start=1,
    )
}


class ClimatologyUnavailableError(Exception):
    pass


class ClimatologyRecord(BaseModel):
    """Monthly averages per parameter, keyed by month of year (1-12)."""

    model_config = ConfigDict(frozen=True)

    temperature: dict[int, float] = {}
    humidity: dict[int, float] = {}
    precipitation: dict[int, float] = {}
    wind: dict[int, float] = {}

    def value(self, parameter: Parameter, month: int) -> float | None:
        value = getattr(self, parameter).get(month)
        if value is None or not math.isfinite(value):
            return None
        return value

    @classmethod
    def from_power_parameters(cls, parameters: dict[str, Any]) -> "ClimatologyRecord":
        fields = {}
        for power_name, field in POWER_PARAMETERS.items():
            fields[field] = _parse_monthly_series(parameters.get(power_name))
        return cls(**fields)


def _month_index(key: Any) -> int | None:
    if isinstance(key, bool):
        return None
    if isinstance(key, int):
        month = key
    elif isinstance(key, str):
        key = key.strip()
        if key.upper() in _MONTH_NAMES:
            return _MONTH_NAMES[key.upper()]
        if not key.isdigit():
            return None
        month = int(key)
    else:
        return None
    return month if 1 <= month <= 12 else None


def _monthly_value(raw: Any) -> float | None:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        return None
    try:
        value = float(raw)
    except OverflowError:
        return None
    if not math.isfinite(value) or value == POWER_FILL_VALUE:
        return None
    return value


def _parse_monthly_series(series: Any) -> dict[int, float]:
    """Normalise one parameter block to {month: value}, dropping anything unusable."""
    if isinstance(series, list):
        items = enumerate(series[:12], start=1)
    elif isinstance(series, dict):
        items = series.items()
    else:
        return {}

    monthly: dict[int, float] = {}
    for key, raw in items:
        month = _month_index(key)
        value = _monthly_value(raw)
        if month is not None and value is not None:
            monthly[month] = value
    return monthly


async def fetch_climatology(
    latitude: float | str, longitude: float | str
) -> ClimatologyRecord | None:
    """Fetch POWER monthly climatology for a point.

    Coordinates are forwarded as given. Returns None when the response carries
    no parameter block. Raises ClimatologyUnavailableError when the upstream
    cannot be reached, answers with a non-success status, or returns
    something that is not JSON.
    """
    params = {
        "parameters": ",".join(POWER_PARAMETERS),
        "community": POWER_COMMUNITY,
        "longitude": longitude,
        "latitude": latitude,
        "start": POWER_START,
        "end": POWER_END,
        "format": "JSON",
    }

    try:
        async with httpx.AsyncClient() as client:
            response = await client.get(
                POWER_BASE_URL, params=params, timeout=POWER_TIMEOUT_SECONDS
            )
            response.raise_for_status()
    except httpx.TimeoutException as exc:
        logger.error("POWER request timed out for lat=%r lon=%r", latitude, longitude)
        raise ClimatologyUnavailableError("Climatology service timed out.") from exc
    except httpx.HTTPStatusError as exc:
        logger.error(
            "POWER HTTP error %s for lat=%r lon=%r",
            exc.response.status_code,
            latitude,
            longitude,
        )
        raise ClimatologyUnavailableError("POWER API error") from exc
    except httpx.RequestError as exc:
        logger.error("POWER unreachable for lat=%r lon=%r: %s", latitude, longitude, exc)
        raise ClimatologyUnavailableError("Climatology service is unreachable.") from exc

    try:
        data = response.json()
    except ValueError as exc:
        logger.error("POWER returned a non-JSON body for lat=%r lon=%r", latitude, longitude)
        raise ClimatologyUnavailableError("Climatology response could not be parsed.") from exc

    # Structure: properties.parameter.{PARAM}.{month}
    properties = data.get("properties") if isinstance(data, dict) else None
    parameters = properties.get("parameter") if isinstance(properties, dict) else None
    if not isinstance(parameters, dict):
        logger.warning("POWER response has no parameter block for lat=%r lon=%r", latitude, longitude)
        return None

    return ClimatologyRecord.from_power_parameters(parameters)
