"""
Tests for shaping AccuWeather and PAGASA responses into the dashboard forecast.
"""

import httpx
import pytest
from datetime import datetime
from unittest.mock import patch
from boohk.services import weather
from boohk.services.weather import (
    build_cyclone_report,
    build_forecast,
    condition_icon,
    cyclone_severity,
    describe_error,
    find_location,
    rain_chance,
    wind_direction,
    map_icon,
)

NOW = datetime(2024, 7, 1, 0, 0)


def current_conditions():
    return {
        "LocalObservationDateTime": "2024-07-01T08:00:00+08:00",
        "WeatherText": "Partly sunny",
        "WeatherIcon": 3,
        "Temperature": {"Metric": {"Value": 30.6}},
        "RealFeelTemperature": {"Metric": {"Value": 35.2}},
        "RelativeHumidity": 78,
        "Wind": {"Speed": {"Metric": {"Value": 11.1}}, "Direction": {"Degrees": 225, "Localized": ""}},
    }


def daily(day, rain_day=False, rain_night=False):
    return {
        "Date": f"2024-07-{day:02d}T07:00:00+08:00",
        "Temperature": {"Minimum": {"Value": 25.4}, "Maximum": {"Value": 32.5}},
        "Day": {"Icon": 12, "IconPhrase": "Showers", "HasPrecipitation": rain_day},
        "Night": {"Icon": 35, "HasPrecipitation": rain_night},
    }


class TestBuildForecast:
    """Tests for the forecast payload."""

    def test_pads_to_seven_days(self):
        location = find_location("264885")
        days = [daily(d) for d in range(1, 6)]
        result = build_forecast(location, current_conditions(), days, [], now=NOW)

        forecast = result["forecast"]
        assert len(forecast) == 7
        assert [d["date"] for d in forecast[-3:]] == ["2024-07-05", "2024-07-06", "2024-07-07"]
        assert forecast[5]["dayOfWeek"] == "Sat"
        assert forecast[6]["condition"] == forecast[4]["condition"]

    def test_current_conditions(self):
        location = find_location("264885")
        result = build_forecast(location, current_conditions(), [daily(1, rain_day=True)], [], now=NOW)

        assert result["location"] == "Manila"
        assert result["temperature"]["current"] == 31
        assert result["temperature"]["feels_like"] == 35
        assert result["temperature"]["min"] == 25
        assert result["windDirection"] == "SW"
        assert result["icon"] == "cloud-sun"
        assert result["rainChance"] == 50
        assert result["source"] == "AccuWeather"

    def test_alerts_mapped(self):
        location = find_location("264308")
        alerts = [{"Type": "Typhoon", "Level": "Severe", "Description": {"Localized": "Signal No. 2"}}]
        result = build_forecast(location, current_conditions(), [daily(1)], alerts, now=NOW)

        assert result["alerts"] == [{
            "type": "Typhoon",
            "severity": "severe",
            "description": "Signal No. 2",
            "issuedAt": NOW.isoformat(),
        }]


class TestHelpers:
    """Tests for small weather helpers."""

    @pytest.mark.parametrize("degrees,expected", [
        (0, "N"), (22.5, "NNE"), (90, "E"), (180, "S"), (350, "N"), (None, "N"),
    ])
    def test_wind_direction(self, degrees, expected):
        assert wind_direction(degrees) == expected

    def test_rain_chance(self):
        assert rain_chance(False, False) == 0
        assert rain_chance(True, False) == 50
        assert rain_chance(True, True) == 70

    def test_unknown_icon(self):
        assert map_icon(99) == "cloud"

    @pytest.mark.parametrize("message,expected", [
        ("AccuWeather API rate limit exceeded", "Weather API rate limit exceeded"),
        ("Network error (fetch failed): timeout", "Network error while fetching weather data"),
        ("AccuWeather API returned invalid JSON response", "Invalid response from weather service"),
        ("AccuWeather API error: 500", "AccuWeather service error"),
        ("something else", "Failed to fetch weather data"),
    ])
    def test_describe_error(self, message, expected):
        assert describe_error(Exception(message)) == expected


class TestCyclones:
    """Tests for PAGASA tropical cyclone alerts."""

    @pytest.fixture(autouse=True)
    def empty_cache(self):
        weather.cyclone_cache.clear()
        yield
        weather.cyclone_cache.clear()

    def _response(self, status_code, **kwargs):
        return httpx.Response(status_code, request=httpx.Request("GET", weather.PAGASA_CYCLONE_URL), **kwargs)

    @pytest.mark.parametrize("category,expected", [
        ("Super Typhoon", "severe"),
        ("Typhoon", "high"),
        ("Severe Tropical Storm", "moderate"),
        ("Tropical Depression", "low"),
        (None, "low"),
    ])
    def test_severity(self, category, expected):
        assert cyclone_severity(category) == expected

    @pytest.mark.parametrize("condition,expected", [
        ("Light rain", "cloud-rain"),
        ("Thunderstorms", "cloud-lightning"),
        ("Partly cloudy", "cloud-sun"),
        ("Cloudy", "cloud"),
        ("Sunny", "sun"),
        (None, "cloud"),
    ])
    def test_condition_icon(self, condition, expected):
        assert condition_icon(condition) == expected

    def test_report_shape(self):
        cyclones = [{"name": "Carina", "category": "Typhoon", "details": "Signal No. 3 over Batanes"}, {}]
        result = build_cyclone_report("NCR", cyclones, now=NOW)

        assert result["location"] == "Metro Manila"
        assert result["source"] == "PAGASA Tropical Cyclone Data"
        assert result["temperature"] == {"current": None, "min": None, "max": None}
        assert result["alerts"] == [{
            "type": "Tropical Cyclone: Carina",
            "severity": "high",
            "description": "Signal No. 3 over Batanes",
            "issuedAt": NOW.isoformat(),
        }]

    def test_unknown_region(self):
        assert build_cyclone_report("ATLANTIS", [], now=NOW)["location"] == "Philippines"

    def test_fetch_cached(self):
        with patch.object(weather.httpx, "get", return_value=self._response(200, json=[{"name": "Carina"}])) as get:
            assert weather.fetch_cyclones() == [{"name": "Carina"}]
            assert weather.fetch_cyclones() == [{"name": "Carina"}]
        assert get.call_count == 1

    def test_fetch_failure_yields_nothing(self):
        with patch.object(weather.httpx, "get", return_value=self._response(503, text="down")):
            assert weather.fetch_cyclones() == []
        assert weather.cyclone_cache.get(weather.PAGASA_CYCLONE_URL) is None

    def test_route(self, sales_client):
        with patch.object(weather, "fetch_cyclones", return_value=[{"name": "Carina", "category": "Super Typhoon"}]):
            response = sales_client.get("/api/weather/pagasa?region=REGION_VII")
        assert response.status_code == 200
        body = response.json()
        assert body["location"] == "Central Visayas"
        assert body["alerts"][0]["severity"] == "severe"
