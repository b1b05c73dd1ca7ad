"""
Weather Service

Fetches Philippine weather from AccuWeather and shapes it into the
forecast format used by the logistics dashboard. Forecasts are cached
in process memory for 30 minutes per location.

Tropical cyclone alerts come from PAGASA and are cached the same way.
"""

import os
import logging
import time
from datetime import date, datetime, timedelta
from typing import Optional

import httpx

from boohk.timeutil import utc_now

logger = logging.getLogger(__name__)

ACCUWEATHER_API_KEY = os.getenv("ACCUWEATHER_API_KEY")
ACCUWEATHER_BASE_URL = os.getenv("ACCUWEATHER_BASE_URL", "https://dataservice.accuweather.com")
WEATHER_TIMEOUT_SECONDS = float(os.getenv("WEATHER_TIMEOUT_SECONDS", "10"))

CACHE_TTL_SECONDS = 30 * 60
DEFAULT_LOCATION_KEY = "264885"  # Manila
FORECAST_DAYS = 7

PHILIPPINES_LOCATIONS = [
    {"key": "264885", "name": "Manila", "region": "NCR"},
    {"key": "264886", "name": "Quezon City", "region": "NCR"},
    {"key": "264308", "name": "Cebu City", "region": "Central Visayas"},
    {"key": "264312", "name": "Davao City", "region": "Davao Region"},
    {"key": "264870", "name": "Iloilo City", "region": "Western Visayas"},
    {"key": "264873", "name": "Bacolod", "region": "Western Visayas"},
    {"key": "264874", "name": "Cagayan de Oro", "region": "Northern Mindanao"},
    {"key": "264875", "name": "Zamboanga City", "region": "Zamboanga Peninsula"},
    {"key": "264876", "name": "Baguio", "region": "Cordillera Administrative Region"},
    {"key": "264877", "name": "Tacloban", "region": "Eastern Visayas"},
]

# AccuWeather icon number -> dashboard icon name
ICON_MAP = {
    1: "sun", 2: "cloud-sun", 3: "cloud-sun", 4: "cloud", 5: "cloud",
    6: "cloud", 7: "cloud", 8: "cloud", 11: "cloud-fog",
    12: "cloud-rain", 13: "cloud-rain", 14: "cloud-rain",
    15: "cloud-lightning", 16: "cloud-lightning", 17: "cloud-lightning",
    18: "cloud-rain", 19: "cloud-snow", 20: "cloud-snow", 21: "cloud-snow",
    22: "cloud-snow", 23: "cloud-snow", 24: "cloud-snow", 25: "cloud-snow",
    26: "cloud-rain", 29: "cloud-rain", 30: "sun", 31: "sun", 32: "wind",
    33: "sun", 34: "cloud-sun", 35: "cloud-sun", 36: "cloud", 37: "cloud",
    38: "cloud", 39: "cloud-rain", 40: "cloud-rain",
    41: "cloud-lightning", 42: "cloud-lightning", 43: "cloud-snow", 44: "cloud-snow",
}

COMPASS_POINTS = [
    "N", "NNE", "NE", "ENE", "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW", "W", "WNW", "NW", "NNW",
]

ALERT_SEVERITY = {"Severe": "severe", "High": "high", "Moderate": "moderate"}


class WeatherServiceError(Exception):
    """Raised when weather data cannot be fetched or parsed."""


class TTLCache:
    """Keyed cache whose entries go stale after ttl_seconds. Last write wins."""

    def __init__(self, ttl_seconds: float, clock=time.monotonic):
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._entries = {}

    def get(self, key, now: Optional[float] = None):
        now = self.clock() if now is None else now
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, stored_at = entry
        if now - stored_at >= self.ttl_seconds:
            return None
        return value

    def set(self, key, value, now: Optional[float] = None):
        now = self.clock() if now is None else now
        self._entries[key] = (value, now)

    def clear(self):
        self._entries.clear()


forecast_cache = TTLCache(CACHE_TTL_SECONDS)


def find_location(location_key: str) -> Optional[dict]:
    for location in PHILIPPINES_LOCATIONS:
        if location["key"] == location_key:
            return location
    return None


def map_icon(icon_number) -> str:
    return ICON_MAP.get(icon_number, "cloud")


def wind_direction(degrees) -> str:
    """Convert wind degrees to a 16-point compass direction."""
    if degrees is None:
        return "N"
    index = int(round((float(degrees) % 360) / 22.5)) % 16
    return COMPASS_POINTS[index]


def alert_severity(level: str) -> str:
    return ALERT_SEVERITY.get(level, "low")


def rain_chance(day_precipitation: bool, night_precipitation: bool) -> int:
    """Rough rain probability from AccuWeather's daily precipitation flags."""
    flags = int(bool(day_precipitation)) + int(bool(night_precipitation))
    if flags == 0:
        return 0
    return 30 + 20 * flags


def _get(path: str, params: Optional[dict] = None):
    if not ACCUWEATHER_API_KEY:
        raise WeatherServiceError("AccuWeather API key is not configured")

    query = {"apikey": ACCUWEATHER_API_KEY}
    query.update(params or {})
    try:
        response = httpx.get(
            f"{ACCUWEATHER_BASE_URL}{path}", params=query, timeout=WEATHER_TIMEOUT_SECONDS
        )
    except httpx.HTTPError as e:
        raise WeatherServiceError(f"Network error (fetch failed): {e}") from e

    if response.status_code == 503 or "quota" in response.text.lower():
        raise WeatherServiceError("AccuWeather API rate limit exceeded")
    if response.status_code >= 400:
        raise WeatherServiceError(f"AccuWeather API error: {response.status_code}")

    try:
        return response.json()
    except ValueError as e:
        raise WeatherServiceError("AccuWeather API returned invalid JSON response") from e


def fetch_alerts() -> list:
    """PH weather alerts. Missing alerts never fail the forecast."""
    try:
        return _get("/alerts/v1/PH") or []
    except WeatherServiceError as e:
        logger.warning(f"Failed to fetch weather alerts, continuing without them: {e}")
        return []


def build_forecast(location: dict, current: dict, daily: list, alerts: list, now: Optional[datetime] = None) -> dict:
    """
    Shape AccuWeather payloads into the dashboard forecast.

    The daily forecast is padded to seven days by repeating the last day
    with advancing dates.
    """
    now = now or utc_now()
    days = []
    for day in daily[:FORECAST_DAYS]:
        day_date = date.fromisoformat(day["Date"][:10])
        days.append({
            "date": day_date.isoformat(),
            "dayOfWeek": day_date.strftime("%a"),
            "temperature": {
                "min": round(day["Temperature"]["Minimum"]["Value"]),
                "max": round(day["Temperature"]["Maximum"]["Value"]),
            },
            "condition": day["Day"]["IconPhrase"],
            "icon": map_icon(day["Day"]["Icon"]),
            "rainChance": rain_chance(
                day["Day"].get("HasPrecipitation"), day["Night"].get("HasPrecipitation")
            ),
            "humidity": 0,
            "windSpeed": 0,
        })

    while days and len(days) < FORECAST_DAYS:
        last = days[-1]
        next_date = date.fromisoformat(last["date"]) + timedelta(days=1)
        days.append({
            **last,
            "date": next_date.isoformat(),
            "dayOfWeek": next_date.strftime("%a"),
        })

    temperature = round(current["Temperature"]["Metric"]["Value"])
    return {
        "location": location["name"],
        "locationKey": location["key"],
        "date": current.get("LocalObservationDateTime") or now.isoformat(),
        "temperature": {
            "current": temperature,
            "min": days[0]["temperature"]["min"] if days else temperature - 5,
            "max": days[0]["temperature"]["max"] if days else temperature + 5,
            "feels_like": round(current["RealFeelTemperature"]["Metric"]["Value"]),
        },
        "humidity": current.get("RelativeHumidity", 0),
        "windSpeed": round(current["Wind"]["Speed"]["Metric"]["Value"]),
        "windDirection": current["Wind"]["Direction"].get("Localized")
        or wind_direction(current["Wind"]["Direction"].get("Degrees")),
        "condition": current.get("WeatherText"),
        "icon": map_icon(current.get("WeatherIcon")),
        "rainChance": days[0]["rainChance"] if days else 0,
        "alerts": [
            {
                "type": alert.get("Type"),
                "severity": alert_severity(alert.get("Level")),
                "description": (alert.get("Description") or {}).get("Localized", ""),
                "issuedAt": now.isoformat(),
            }
            for alert in alerts
        ],
        "forecast": days,
        "source": "AccuWeather",
    }


def fetch_forecast(location: dict) -> dict:
    """Fetch current conditions, the 5-day forecast and alerts for a location."""
    key = location["key"]
    current = _get(f"/currentconditions/v1/{key}", {"details": "true"})
    forecast = _get(f"/forecasts/v1/daily/5day/{key}", {"details": "true", "metric": "true"})

    if not current or not forecast or not forecast.get("DailyForecasts"):
        raise WeatherServiceError("Failed to fetch weather data from AccuWeather API")

    try:
        return build_forecast(location, current[0], forecast["DailyForecasts"], fetch_alerts())
    except (KeyError, TypeError, IndexError, ValueError) as e:
        raise WeatherServiceError(f"Unexpected AccuWeather API response format: {e}") from e


def get_forecast(location_key: str = DEFAULT_LOCATION_KEY, cache: TTLCache = None) -> dict:
    """
    Return the forecast for a location, from cache when fresh.

    Raises:
        ValueError: If the location key is not a supported location
        WeatherServiceError: If the upstream service fails
    """
    cache = cache or forecast_cache
    location = find_location(location_key)
    if location is None:
        raise ValueError("Invalid location key")

    cached = cache.get(location_key)
    if cached is not None:
        logger.info(f"Weather cache HIT for {location['name']}")
        return cached

    logger.info(f"Weather cache MISS for {location['name']}")
    data = fetch_forecast(location)
    cache.set(location_key, data)
    return data


def describe_error(error: Exception) -> str:
    """Pick a user-facing message for a weather failure."""
    message = str(error)
    lowered = message.lower()
    if "rate limit" in lowered or "quota" in lowered:
        return "Weather API rate limit exceeded"
    if "fetch" in lowered or "network" in lowered:
        return "Network error while fetching weather data"
    if "json" in lowered:
        return "Invalid response from weather service"
    if "accuweather api" in lowered:
        return "AccuWeather service error"
    return "Failed to fetch weather data"


# PAGASA tropical cyclone bulletins

PAGASA_CYCLONE_URL = os.getenv(
    "PAGASA_CYCLONE_URL", "https://bagong.pagasa.dost.gov.ph/tropical-cyclone/api"
)

PAGASA_REGIONS = {
    "NCR": "Metro Manila",
    "REGION_I": "Ilocos Region",
    "REGION_II": "Cagayan Valley",
    "REGION_III": "Central Luzon",
    "REGION_IV_A": "CALABARZON",
    "REGION_IV_B": "MIMAROPA",
    "REGION_V": "Bicol Region",
    "REGION_VI": "Western Visayas",
    "REGION_VII": "Central Visayas",
    "REGION_VIII": "Eastern Visayas",
    "REGION_IX": "Zamboanga Peninsula",
    "REGION_X": "Northern Mindanao",
    "REGION_XI": "Davao Region",
    "REGION_XII": "SOCCSKSARGEN",
    "REGION_XIII": "Caraga",
    "CAR": "Cordillera Administrative Region",
    "BARMM": "Bangsamoro Autonomous Region in Muslim Mindanao",
}

cyclone_cache = TTLCache(CACHE_TTL_SECONDS)


def cyclone_severity(category: Optional[str]) -> str:
    category = category or ""
    if "Super Typhoon" in category:
        return "severe"
    if "Typhoon" in category:
        return "high"
    if "Storm" in category:
        return "moderate"
    return "low"


def condition_icon(condition: Optional[str]) -> str:
    """Dashboard icon for a free-text condition such as 'Partly cloudy'."""
    if not condition:
        return "cloud"
    lowered = condition.lower()
    if "rain" in lowered or "shower" in lowered:
        return "cloud-rain"
    if "thunder" in lowered or "storm" in lowered:
        return "cloud-lightning"
    if "cloud" in lowered:
        return "cloud-sun" if "partly" in lowered else "cloud"
    if "clear" in lowered or "sunny" in lowered:
        return "sun"
    return "cloud"


def fetch_cyclones() -> list:
    """
    Active cyclones from PAGASA. A failed fetch yields no cyclones.

    Results are cached for 30 minutes.
    """
    cached = cyclone_cache.get(PAGASA_CYCLONE_URL)
    if cached is not None:
        return cached

    try:
        response = httpx.get(
            PAGASA_CYCLONE_URL,
            headers={"Accept": "application/json"},
            timeout=WEATHER_TIMEOUT_SECONDS,
        )
        response.raise_for_status()
        data = response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"Error fetching PAGASA cyclone data: {e}")
        return []

    cyclones = data if isinstance(data, list) else []
    cyclone_cache.set(PAGASA_CYCLONE_URL, cyclones)
    return cyclones


def build_cyclone_report(region_id: str, cyclones: list, now: Optional[datetime] = None) -> dict:
    """Shape PAGASA cyclone data into the forecast payload, with one alert per cyclone."""
    now = now or utc_now()
    alerts = [
        {
            "type": f"Tropical Cyclone: {cyclone.get('name') or 'Unnamed'}",
            "severity": cyclone_severity(cyclone.get("category")),
            "description": cyclone.get("details")
            or "Tropical cyclone detected in the Philippine Area of Responsibility",
            "issuedAt": now.isoformat(),
        }
        for cyclone in cyclones
        if cyclone
    ]
    return {
        "location": PAGASA_REGIONS.get(region_id, "Philippines"),
        "date": now.isoformat(),
        "temperature": {"current": None, "min": None, "max": None},
        "humidity": None,
        "windSpeed": None,
        "windDirection": None,
        "condition": None,
        "icon": condition_icon(None),
        "rainChance": None,
        "alerts": alerts,
        "forecast": [],
        "source": "PAGASA Tropical Cyclone Data",
        "raw": cyclones,
    }
