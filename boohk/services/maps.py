"""Google Maps geocoding for site addresses."""
import logging
import os

import httpx

logger = logging.getLogger(__name__)

GOOGLE_MAPS_API_KEY = os.getenv("GOOGLE_MAPS_API_KEY")
GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"
MAPS_TIMEOUT_SECONDS = float(os.getenv("MAPS_TIMEOUT_SECONDS", "10"))


class MapsServiceError(Exception):
    pass


def geocode(address: str, region: str = "ph") -> list:
    """
    Resolve an address to coordinates.

    Returns:
        List of dicts with formatted_address, lat, lng and place_id.
        Empty when Google finds nothing.

    Raises:
        MapsServiceError: If the key is missing or Google rejects the request
    """
    if not GOOGLE_MAPS_API_KEY:
        raise MapsServiceError("Google Maps API key is not configured")

    try:
        response = httpx.get(
            GEOCODE_URL,
            params={"address": address, "region": region, "key": GOOGLE_MAPS_API_KEY},
            timeout=MAPS_TIMEOUT_SECONDS,
        )
        response.raise_for_status()
        data = response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"Geocoding request failed for '{address}': {e}")
        raise MapsServiceError("Geocoding request failed") from e

    status = data.get("status")
    if status == "ZERO_RESULTS":
        return []
    if status != "OK":
        logger.error(f"Geocoding error for '{address}': {status} {data.get('error_message', '')}")
        raise MapsServiceError(f"Geocoding failed: {status}")

    return [
        {
            "formatted_address": result.get("formatted_address"),
            "lat": result["geometry"]["location"]["lat"],
            "lng": result["geometry"]["location"]["lng"],
            "place_id": result.get("place_id"),
        }
        for result in data.get("results", [])
    ]
