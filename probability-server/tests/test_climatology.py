import os
import sys

# Ensure probability-server/ is on the path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import httpx
import pytest
import respx
from pydantic import ValidationError

import climatology
from climatology import (
    ClimatologyRecord,
    ClimatologyUnavailableError,
    fetch_climatology,
)

MONTH_NAMES = ["JAN", "FEB", "MAR", "APR", "MAY", "JUN",
               "JUL", "AUG", "SEP", "OCT", "NOV", "DEC"]


def _series(values, keys=MONTH_NAMES, annual=None):
    series = dict(zip(keys, values))
    if annual is not None:
        series["ANN"] = annual
    return series


MOCK_POWER_SUCCESS = {
    "type": "Feature",
    "geometry": {"type": "Point", "coordinates": [2.35, 48.86, 43.0]},
    "properties": {
        "parameter": {
            "T2M": _series(
                [4.1, 5.0, 8.2, 11.3, 15.0, 18.4, 20.6, 20.1, 16.6, 12.5, 7.6, 4.7],
                annual=12.0,
            ),
            "RH2M": _series(
                [86.1, 82.4, 76.9, 71.3, 72.0, 70.2, 68.5, 70.4, 75.8, 82.3, 86.5, 87.9],
                annual=77.5,
            ),
            "PRECTOTCORR": _series(
                [1.8, 1.6, 1.5, 1.6, 2.2, 1.9, 1.9, 1.7, 1.6, 2.0, 1.9, 2.0],
                annual=1.8,
            ),
            "WS10M": _series(
                [5.4, 5.1, 4.9, 4.5, 4.1, 3.9, 3.8, 3.7, 4.0, 4.6, 5.0, 5.4],
                annual=4.5,
            ),
        }
    },
    "header": {"title": "NASA/POWER Climatology"},
}


# ── Parsing ──────────────────────────────────────────────────────────────────

def test_from_power_parameters_month_names():
    record = ClimatologyRecord.from_power_parameters(MOCK_POWER_SUCCESS["properties"]["parameter"])
    assert record.value("temperature", 7) == 20.6
    assert record.value("humidity", 1) == 86.1
    assert record.value("precipitation", 5) == 2.2
    assert record.value("wind", 12) == 5.4
    # Annual mean is not a month
    assert set(record.temperature) == set(range(1, 13))


def test_from_power_parameters_numeric_keys():
    record = ClimatologyRecord.from_power_parameters(
        {"T2M": {"1": -3.0, "7": 25.0, 12: -1.5}}
    )
    assert record.value("temperature", 1) == -3.0
    assert record.value("temperature", 7) == 25.0
    assert record.value("temperature", 12) == -1.5


def test_from_power_parameters_list_is_january_first():
    values = [float(i) for i in range(1, 13)]
    record = ClimatologyRecord.from_power_parameters({"WS10M": values})
    assert record.value("wind", 1) == 1.0
    assert record.value("wind", 12) == 12.0


def test_fill_values_and_garbage_are_absent():
    record = ClimatologyRecord.from_power_parameters(
        {
            "T2M": {"JUL": -999.0, "AUG": "n/a", "SEP": None, "OCT": 10.0, "XYZ": 5.0, "13": 1.0},
        }
    )
    assert record.value("temperature", 7) is None
    assert record.value("temperature", 8) is None
    assert record.value("temperature", 9) is None
    assert record.value("temperature", 10) == 10.0
    assert set(record.temperature) == {10}


def test_non_finite_values_are_absent():
    record = ClimatologyRecord.from_power_parameters(
        {
            "T2M": {"JAN": float("nan"), "FEB": float("inf"), "MAR": float("-inf"), "APR": 1e308},
            "WS10M": {"JUL": 10**400},
        }
    )
    assert record.value("temperature", 1) is None
    assert record.value("temperature", 2) is None
    assert record.value("temperature", 3) is None
    assert record.value("temperature", 4) == 1e308
    assert record.wind == {}


def test_value_treats_non_finite_as_absent():
    record = ClimatologyRecord(wind={7: float("nan"), 8: float("inf")})
    assert record.value("wind", 7) is None
    assert record.value("wind", 8) is None


def test_missing_parameters_are_empty():
    record = ClimatologyRecord.from_power_parameters({"T2M": {"JAN": 1.0}})
    assert record.value("wind", 1) is None
    assert record.humidity == {}


def test_record_is_immutable():
    record = ClimatologyRecord()
    with pytest.raises(ValidationError):
        record.temperature = {1: 1.0}


# ── fetch_climatology ────────────────────────────────────────────────────────

@respx.mock
async def test_fetch_success_builds_record():
    respx.get(climatology.POWER_BASE_URL).mock(
        return_value=httpx.Response(200, json=MOCK_POWER_SUCCESS)
    )

    record = await fetch_climatology(48.86, 2.35)

    assert isinstance(record, ClimatologyRecord)
    assert record.value("temperature", 7) == 20.6


@respx.mock
async def test_fetch_sends_fixed_query():
    route = respx.get(climatology.POWER_BASE_URL).mock(
        return_value=httpx.Response(200, json=MOCK_POWER_SUCCESS)
    )

    await fetch_climatology("48.86", "2.35")

    assert route.called
    params = dict(route.calls.last.request.url.params)
    assert params["parameters"] == "T2M,RH2M,PRECTOTCORR,WS10M"
    assert params["community"] == "RE"
    assert params["latitude"] == "48.86"
    assert params["longitude"] == "2.35"
    assert params["start"] == "20100101"
    assert params["end"] == "20101231"
    assert params["format"] == "JSON"


@respx.mock
async def test_fetch_forwards_invalid_coordinates_unchanged():
    route = respx.get(climatology.POWER_BASE_URL).mock(
        return_value=httpx.Response(422, json={"messages": ["latitude out of range"]})
    )

    with pytest.raises(ClimatologyUnavailableError):
        await fetch_climatology("999", "abc")

    params = dict(route.calls.last.request.url.params)
    assert params["latitude"] == "999"
    assert params["longitude"] == "abc"


@respx.mock
async def test_fetch_http_error_raises():
    respx.get(climatology.POWER_BASE_URL).mock(return_value=httpx.Response(503))

    with pytest.raises(ClimatologyUnavailableError):
        await fetch_climatology(0, 0)


@respx.mock
async def test_fetch_timeout_raises():
    respx.get(climatology.POWER_BASE_URL).mock(
        side_effect=httpx.TimeoutException("timed out")
    )

    with pytest.raises(ClimatologyUnavailableError):
        await fetch_climatology(0, 0)


@respx.mock
async def test_fetch_connection_error_raises():
    respx.get(climatology.POWER_BASE_URL).mock(
        side_effect=httpx.ConnectError("connection refused")
    )

    with pytest.raises(ClimatologyUnavailableError):
        await fetch_climatology(0, 0)


@respx.mock
async def test_fetch_non_json_body_raises():
    respx.get(climatology.POWER_BASE_URL).mock(
        return_value=httpx.Response(200, text="<html>maintenance</html>")
    )

    with pytest.raises(ClimatologyUnavailableError):
        await fetch_climatology(0, 0)


@pytest.mark.parametrize(
    "body",
    [
        {"type": "Feature"},
        {"properties": {}},
        {"properties": {"parameter": None}},
        [],
    ],
)
@respx.mock
async def test_fetch_without_parameter_block_returns_none(body):
    respx.get(climatology.POWER_BASE_URL).mock(
        return_value=httpx.Response(200, json=body)
    )

    assert await fetch_climatology(0, 0) is None
