"""Thin async wrapper over the Replicate predictions HTTP API."""

import logging
from typing import Any

import httpx

from virtual_tryon.errors import ErrorKind, TryOnError
from virtual_tryon.models import PredictionJob

logger = logging.getLogger(__name__)

REPLICATE_API_URL = "https://api.replicate.com/v1"

# Prefer: wait holds the create call open for up to 60s, so the read timeout must outlast it
REQUEST_TIMEOUT = httpx.Timeout(90.0, connect=10.0)


class ReplicateClient:
    """Submit, poll and download for a single try-on request.

    Use as an async context manager; the underlying connections are closed on exit.
    The output download goes through a separate client so the API token is never
    sent to the file host.
    """

    def __init__(
        self,
        api_token: str,
        *,
        base_url: str = REPLICATE_API_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api = httpx.AsyncClient(
            base_url=base_url,
            headers={"Authorization": f"Bearer {api_token}"},
            timeout=REQUEST_TIMEOUT,
            transport=transport,
        )
        self._files = httpx.AsyncClient(timeout=REQUEST_TIMEOUT, transport=transport)

    async def __aenter__(self) -> "ReplicateClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._api.aclose()
        await self._files.aclose()

    async def create_prediction(
        self, version: str, input: dict[str, Any], *, wait: bool = True
    ) -> PredictionJob:
        headers = {"Prefer": "wait"} if wait else {}
        resp = await self._api.post(
            "/predictions",
            json={"version": version, "input": input},
            headers=headers,
        )
        if resp.is_error:
            logger.error("Replicate API error: %s %s", resp.status_code, resp.text)
            raise _creation_error(resp.status_code)
        return PredictionJob.model_validate(resp.json())

    async def get_prediction(self, prediction_id: str) -> PredictionJob:
        resp = await self._api.get(f"/predictions/{prediction_id}")
        if resp.is_error:
            logger.error("Poll error: %s %s", resp.status_code, resp.text)
            raise TryOnError(
                ErrorKind.TRANSPORT, f"Failed to poll prediction: {resp.status_code}"
            )
        return PredictionJob.model_validate(resp.json())

    async def fetch_output(self, url: str) -> tuple[bytes, str | None]:
        """Download a generated file. Returns (content, Content-Type header)."""
        resp = await self._files.get(url, follow_redirects=True)
        if resp.is_error:
            logger.error("Output fetch error: %s %s", resp.status_code, url)
            raise TryOnError(ErrorKind.TRANSPORT, "Failed to fetch generated image")
        return resp.content, resp.headers.get("content-type")


def _creation_error(status_code: int) -> TryOnError:
    if status_code in (401, 403):
        return TryOnError(
            ErrorKind.AUTH, "Invalid Replicate API token. Please check your API key."
        )
    if status_code == 422:
        return TryOnError(
            ErrorKind.INVALID_INPUT,
            "Invalid input images. Please ensure both images are valid.",
        )
    return TryOnError(ErrorKind.UPSTREAM, f"Replicate API error: {status_code}")
