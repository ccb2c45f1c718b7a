import asyncio
import logging
from collections.abc import Awaitable, Callable

import httpx

from virtual_tryon.config import Settings
from virtual_tryon.errors import ErrorKind, TryOnError
from virtual_tryon.images import detect_mime_type, to_data_uri
from virtual_tryon.models import PredictionJob, PredictionStatus, TryOnRequest, TryOnResult
from virtual_tryon.predictions import ReplicateClient

logger = logging.getLogger(__name__)

IDMVTON_MODEL = "cuuupid/idm-vton:0513734a452173b8173e907e3a59d19a36266e55b48528559432bd21c7d7e985"
IDMVTON_VERSION = IDMVTON_MODEL.split(":", 1)[1]

POLL_INTERVAL_SECONDS = 5.0
MAX_POLL_ATTEMPTS = 60  # 5 minutes at the default interval

SUCCESS_MESSAGE = "Virtual try-on generated successfully with IDM-VTON!"
MISSING_PHOTOS_MESSAGE = "Both user photo and clothing photo are required"


def validate_request(request: TryOnRequest) -> TryOnRequest:
    """Reject requests missing either photo and fill in description/category defaults."""
    if not request.userPhoto or not request.clothingPhoto:
        logger.error("Missing required images")
        raise TryOnError(ErrorKind.VALIDATION, MISSING_PHOTOS_MESSAGE)
    return request.with_defaults()


class TryOnOrchestrator:
    """Runs one IDM-VTON prediction to completion per call to :meth:`run`."""

    def __init__(
        self,
        settings: Settings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
        poll_interval: float = POLL_INTERVAL_SECONDS,
        max_attempts: int = MAX_POLL_ATTEMPTS,
    ) -> None:
        self.settings = settings
        self.transport = transport
        self.sleep = sleep
        self.poll_interval = poll_interval
        self.max_attempts = max_attempts

    async def run(self, request: TryOnRequest) -> TryOnResult:
        request = validate_request(request)

        logger.info("Starting IDM-VTON virtual try-on...")
        logger.info("User photo size: %d", len(request.userPhoto))
        logger.info("Clothing photo size: %d", len(request.clothingPhoto))
        logger.info("Category: %s", request.category)

        if not self.settings.replicate_api_token:
            logger.error("REPLICATE_API_TOKEN is not configured")
            raise TryOnError(ErrorKind.CONFIG, "REPLICATE_API_TOKEN is not configured")

        async with ReplicateClient(
            self.settings.replicate_api_token, transport=self.transport
        ) as client:
            logger.info("Creating Replicate prediction...")
            prediction = await client.create_prediction(
                IDMVTON_VERSION,
                {
                    "human_img": request.userPhoto,
                    "garm_img": request.clothingPhoto,
                    "garment_des": request.garmentDescription,
                    "category": request.category,
                },
            )
            logger.info("Prediction created: %s Status: %s", prediction.id, prediction.status.value)

            prediction = await self._wait_for_completion(client, prediction)
            output_url = _require_output(prediction)

            logger.info("Fetching generated image...")
            content, content_type = await client.fetch_output(output_url)

        image = to_data_uri(content, detect_mime_type(content, content_type))
        logger.info("Virtual try-on completed successfully!")
        return TryOnResult(success=True, image=image, message=SUCCESS_MESSAGE)

    async def _wait_for_completion(
        self, client: ReplicateClient, prediction: PredictionJob
    ) -> PredictionJob:
        attempts = 0
        while not prediction.status.is_terminal:
            if attempts >= self.max_attempts:
                logger.error("Prediction %s timed out after %d polls", prediction.id, attempts)
                raise TryOnError(
                    ErrorKind.TIMEOUT,
                    "Generation timed out. Please try again with simpler images.",
                )
            await self.sleep(self.poll_interval)
            prediction = await client.get_prediction(prediction.id)
            attempts += 1
            logger.info("Poll attempt %d - Status: %s", attempts, prediction.status.value)
        return prediction


def _require_output(prediction: PredictionJob) -> str:
    """Map a terminal prediction to its output URL or the matching error."""
    if prediction.status is PredictionStatus.FAILED:
        logger.error("Prediction failed: %s", prediction.error)
        raise TryOnError(
            ErrorKind.JOB_FAILED,
            "AI generation failed",
            details=prediction.error or "Unknown error during processing",
        )
    if prediction.status is PredictionStatus.CANCELED:
        raise TryOnError(ErrorKind.CANCELED, "Generation was canceled")

    output_url = prediction.output_url
    if not output_url:
        logger.error("No output URL in prediction result")
        raise TryOnError(ErrorKind.NO_OUTPUT, "No image was generated")
    logger.info("IDM-VTON generation successful! Output: %s", output_url)
    return output_url
