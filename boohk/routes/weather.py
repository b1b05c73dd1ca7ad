import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from boohk.auth import require_auth
from boohk.models import User
from boohk.services import weather as weather_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/weather", tags=["weather"])


@router.get("/forecast")
async def get_forecast(
    region: str = weather_service.DEFAULT_LOCATION_KEY,
    user: User = Depends(require_auth),
):
    """Forecast for a supported Philippine location."""
    if weather_service.find_location(region) is None:
        return JSONResponse(status_code=400, content={"error": "Invalid location key"})

    try:
        data = weather_service.get_forecast(region)
    except weather_service.WeatherServiceError as e:
        logger.error(f"Weather API error for {region}: {e}")
        return JSONResponse(
            status_code=500,
            content={"error": weather_service.describe_error(e), "details": str(e)},
        )

    return {"success": True, "data": data}


@router.get("/locations")
async def list_locations(user: User = Depends(require_auth)):
    return {"locations": weather_service.PHILIPPINES_LOCATIONS}


@router.get("/pagasa")
async def get_pagasa_weather(region: str = "NCR", user: User = Depends(require_auth)):
    """Tropical cyclone alerts for a region from PAGASA."""
    return weather_service.build_cyclone_report(region, weather_service.fetch_cyclones())
