"""
Google Maps script proxy.
Serves the Maps JavaScript loader so the API key never ships with the frontend.
"""

import httpx
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse, Response

from app.config import settings
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["maps"])

GOOGLE_MAPS_JS_URL = "https://maps.googleapis.com/maps/api/js"
MAPS_CALLBACK = "onGoogleMapsApiLoaded"
REQUEST_TIMEOUT = 10  # seconds


@router.get("/google-maps-api")
async def google_maps_api():
    """Fetch the Maps loader script with places + core libraries."""
    api_key = settings.GOOGLE_MAPS_API_KEY
    if not api_key:
        logger.error("GOOGLE_MAPS_API_KEY not configured")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "API key not configured on the server"},
        )

    params = {
        "key": api_key,
        "libraries": "places,core",
        "callback": MAPS_CALLBACK,
        "loading": "async",
    }

    try:
        async with httpx.AsyncClient(timeout=REQUEST_TIMEOUT) as client:
            upstream = await client.get(GOOGLE_MAPS_JS_URL, params=params)
            upstream.raise_for_status()
    except httpx.HTTPError as e:
        logger.error("Error fetching Google Maps API script", error=str(e))
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Failed to load Google Maps API script"},
        )

    return Response(content=upstream.text, media_type="application/javascript")
