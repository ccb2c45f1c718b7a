"""Client side of the try-on feature: call the try-on function and normalise its reply."""

import logging

import httpx

from virtual_tryon.config import Settings, get_settings
from virtual_tryon.models import DEFAULT_GARMENT_DESCRIPTION, GarmentCategory, TryOnResult

logger = logging.getLogger(__name__)

CONNECT_FAILURE_MESSAGE = "Failed to connect to AI service"

# The function may hold the request for the full 5 minute polling window
INVOKE_TIMEOUT = httpx.Timeout(330.0, connect=10.0)


async def generate_tryon(
    user_photo: str,
    clothing_photo: str,
    garment_description: str | None = None,
    category: GarmentCategory = "upper_body",
    *,
    settings: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> TryOnResult:
    """Run a virtual try-on. Never raises; failures come back as ``success=False``."""
    try:
        settings = settings or get_settings()
        headers = {}
        if settings.tryon_service_key:
            headers["Authorization"] = f"Bearer {settings.tryon_service_key}"
            headers["apikey"] = settings.tryon_service_key

        payload = {
            "userPhoto": user_photo,
            "clothingPhoto": clothing_photo,
            "garmentDescription": garment_description or DEFAULT_GARMENT_DESCRIPTION,
            "category": category,
        }

        try:
            async with httpx.AsyncClient(timeout=INVOKE_TIMEOUT, transport=transport) as client:
                resp = await client.post(settings.tryon_function_url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            logger.error("Try-on function error: %s", e)
            return TryOnResult(success=False, error=str(e) or CONNECT_FAILURE_MESSAGE)

        try:
            data = resp.json()
        except ValueError:
            data = None
        if not isinstance(data, dict):
            logger.error("Try-on function returned %s with a non-JSON body", resp.status_code)
            return TryOnResult(success=False, error=CONNECT_FAILURE_MESSAGE)

        if data.get("error"):
            logger.error("Try-on function reported an error: %s", data["error"])
            details = data.get("details")
            return TryOnResult(
                success=False,
                error=str(data["error"]),
                details=None if details is None else str(details),
            )

        return TryOnResult(success=True, image=data.get("image"), message=data.get("message"))
    except Exception as e:
        logger.exception("Try-on service error")
        return TryOnResult(success=False, error=str(e) or "An unexpected error occurred")
