"""Network-free fakes for the Replicate API and the poll delay."""

import io

import httpx
import pytest
from PIL import Image

from virtual_tryon.config import Settings

OUTPUT_URL = "https://replicate.delivery/pbxt/abc123/output.png"
PREDICTION_ID = "pred-123"


def png_bytes(size: tuple[int, int] = (4, 6)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color=(200, 30, 30)).save(buf, format="PNG")
    return buf.getvalue()


class FakeReplicate:
    """Scripted predictions API.

    ``statuses`` are handed out one per create/poll call; the last one repeats.
    """

    def __init__(
        self,
        statuses: list[str],
        *,
        create_status: int = 201,
        poll_status: int = 200,
        fetch_status: int = 200,
        output=OUTPUT_URL,
        error=None,
        image: bytes = b"",
        content_type: str = "image/png",
    ) -> None:
        self.statuses = list(statuses)
        self.create_status = create_status
        self.poll_status = poll_status
        self.fetch_status = fetch_status
        self.output = output
        self.error = error
        self.image = image or png_bytes()
        self.content_type = content_type
        self.requests: list[httpx.Request] = []

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def creates(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == "POST"]

    @property
    def polls(self) -> list[httpx.Request]:
        return [
            r for r in self.requests
            if r.method == "GET" and r.url.host == "api.replicate.com"
        ]

    @property
    def fetches(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.host != "api.replicate.com"]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.host != "api.replicate.com":
            return httpx.Response(
                self.fetch_status,
                content=self.image,
                headers={"content-type": self.content_type},
            )
        if request.method == "POST":
            if self.create_status >= 400:
                return httpx.Response(self.create_status, json={"detail": "rejected"})
            return httpx.Response(self.create_status, json=self._next_job())
        if self.poll_status >= 400:
            return httpx.Response(self.poll_status, text="poll exploded")
        return httpx.Response(200, json=self._next_job())

    def _next_job(self) -> dict:
        status = self.statuses.pop(0) if len(self.statuses) > 1 else self.statuses[0]
        job = {"id": PREDICTION_ID, "status": status, "output": None, "error": None}
        if status == "succeeded":
            job["output"] = self.output
        if status == "failed":
            job["error"] = self.error
        return job


class RecordingSleep:
    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def settings() -> Settings:
    return Settings(replicate_api_token="r8_test_token")


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()
