"""Shared fakes for the google-genai client, Veo operations and video downloads."""

from types import SimpleNamespace
from unittest.mock import AsyncMock

import httpx
import pytest
import pytest_asyncio

from animlogo.schemas.media import GeneratedImage

API_KEY = "test-key-123"
RESULT_URI = "https://generativelanguage.googleapis.com/v1beta/files/X:download?alt=media"
VIDEO_BYTES = b"\x00\x00\x00\x18ftypmp42fake-video"
PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-logo"


# ---------------------------------------------------------------------------
# Response builders
# ---------------------------------------------------------------------------
def image_part(data: bytes = PNG_BYTES, mime_type: str | None = "image/png"):
    return SimpleNamespace(text=None, inline_data=SimpleNamespace(data=data, mime_type=mime_type))


def text_part(text: str = "Here is your logo."):
    return SimpleNamespace(text=text, inline_data=None)


def content_response(*parts):
    return SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=list(parts)))])


def pending_operation(name: str = "models/veo/operations/op-1"):
    return SimpleNamespace(name=name, done=False, error=None, response=None)


def finished_operation(
    uri: str | None = RESULT_URI,
    video_bytes: bytes | None = None,
    name: str = "models/veo/operations/op-1",
    error=None,
    filtered_count: int | None = None,
):
    videos = []
    if uri or video_bytes:
        videos.append(SimpleNamespace(video=SimpleNamespace(uri=uri, video_bytes=video_bytes, mime_type=None)))
    response = SimpleNamespace(generated_videos=videos, rai_media_filtered_count=filtered_count)
    return SimpleNamespace(name=name, done=True, error=error, response=response)


class FakeGenaiClient:
    """Mimics the ``client.aio`` surface used by the pipeline."""

    def __init__(self):
        self.aio = SimpleNamespace(
            models=SimpleNamespace(generate_content=AsyncMock(), generate_videos=AsyncMock()),
            operations=SimpleNamespace(get=AsyncMock()),
        )

    @property
    def generate_content(self) -> AsyncMock:
        return self.aio.models.generate_content

    @property
    def generate_videos(self) -> AsyncMock:
        return self.aio.models.generate_videos

    @property
    def get_operation(self) -> AsyncMock:
        return self.aio.operations.get


class VideoServer:
    """httpx MockTransport handler serving the finished video."""

    def __init__(self, status_code: int = 200, content: bytes = VIDEO_BYTES):
        self.status_code = status_code
        self.content = content
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(
            self.status_code,
            content=self.content,
            headers={"content-type": "video/mp4"},
        )


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture
def fake_client() -> FakeGenaiClient:
    return FakeGenaiClient()


@pytest.fixture
def fake_sleep() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def video_server() -> VideoServer:
    return VideoServer()


@pytest_asyncio.fixture
async def http_client(video_server):
    async with httpx.AsyncClient(transport=httpx.MockTransport(video_server)) as client:
        yield client


@pytest.fixture
def logo_image() -> GeneratedImage:
    return GeneratedImage(data=PNG_BYTES, mime_type="image/png")
