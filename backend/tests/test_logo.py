"""Tests for logo image generation (animlogo.pipeline.logo)."""

from types import SimpleNamespace

import pytest

from animlogo.errors import ImageGenerationError, NoImageDataError
from animlogo.pipeline.logo import LOGO_STYLE_DIRECTIVE, LogoGenerator, build_logo_prompt
from animlogo.schemas.media import ImageSize, LogoAspectRatio, LogoRequest

from conftest import PNG_BYTES, content_response, image_part, text_part


def _request(**overrides) -> LogoRequest:
    fields = {
        "description": "A tech startup called Aura",
        "image_size": ImageSize.MEDIUM,
        "aspect_ratio": LogoAspectRatio.SQUARE,
    }
    fields.update(overrides)
    return LogoRequest(**fields)


def test_prompt_starts_with_style_directive():
    prompt = build_logo_prompt("  A tech startup called Aura ")
    assert prompt.startswith(LOGO_STYLE_DIRECTIVE)
    assert prompt.endswith("A tech startup called Aura")
    for keyword in ("professional", "minimalist", "vector", "Clean lines", "white background"):
        assert keyword in prompt


@pytest.mark.asyncio
async def test_returns_first_inline_image_part(fake_client):
    fake_client.generate_content.return_value = content_response(
        text_part(),
        image_part(PNG_BYTES, "image/png"),
        image_part(b"second", "image/jpeg"),
    )

    image = await LogoGenerator(fake_client, model="gemini-test-image").generate_image(_request())

    assert image.data == PNG_BYTES
    assert image.mime_type == "image/png"
    fake_client.generate_content.assert_awaited_once()


@pytest.mark.asyncio
async def test_sends_prompt_size_and_aspect_ratio(fake_client):
    fake_client.generate_content.return_value = content_response(image_part())

    await LogoGenerator(fake_client, model="gemini-test-image").generate_image(
        _request(image_size=ImageSize.LARGE, aspect_ratio=LogoAspectRatio.LANDSCAPE_16_9)
    )

    kwargs = fake_client.generate_content.await_args.kwargs
    assert kwargs["model"] == "gemini-test-image"
    assert "A tech startup called Aura" in kwargs["contents"]
    assert kwargs["config"].image_config.image_size == "4K"
    assert kwargs["config"].image_config.aspect_ratio == "16:9"


@pytest.mark.asyncio
async def test_missing_mime_type_defaults_to_png(fake_client):
    fake_client.generate_content.return_value = content_response(image_part(PNG_BYTES, None))

    image = await LogoGenerator(fake_client).generate_image(_request())

    assert image.mime_type == "image/png"


@pytest.mark.asyncio
async def test_skips_empty_and_non_image_parts(fake_client):
    fake_client.generate_content.return_value = content_response(
        image_part(b"", "image/png"),
        image_part(b"{}", "application/json"),
        image_part(b"real", "image/webp"),
    )

    image = await LogoGenerator(fake_client).generate_image(_request())

    assert image.data == b"real"
    assert image.mime_type == "image/webp"


@pytest.mark.asyncio
async def test_text_only_response_raises_no_image_data(fake_client):
    fake_client.generate_content.return_value = content_response(text_part("I cannot draw that."))

    with pytest.raises(NoImageDataError):
        await LogoGenerator(fake_client).generate_image(_request())


@pytest.mark.asyncio
@pytest.mark.parametrize("response", [
    SimpleNamespace(candidates=[]),
    SimpleNamespace(candidates=None),
    SimpleNamespace(candidates=[SimpleNamespace(content=None)]),
])
async def test_empty_response_raises_no_image_data(fake_client, response):
    fake_client.generate_content.return_value = response

    with pytest.raises(NoImageDataError):
        await LogoGenerator(fake_client).generate_image(_request())


@pytest.mark.asyncio
async def test_request_failure_is_wrapped_and_not_retried(fake_client):
    fake_client.generate_content.side_effect = RuntimeError("429 RESOURCE_EXHAUSTED")

    with pytest.raises(ImageGenerationError, match="RESOURCE_EXHAUSTED"):
        await LogoGenerator(fake_client).generate_image(_request())

    assert fake_client.generate_content.await_count == 1
