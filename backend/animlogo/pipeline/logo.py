"""Logo image generation with Gemini image models.

One generate_content() round trip per request: the user's description is
combined with a fixed house style directive, and the first inline image part
of the response becomes the GeneratedImage. Failures are surfaced to the
caller; nothing is retried here.

Usage:
    from animlogo.pipeline.logo import LogoGenerator

    image = await LogoGenerator(client).generate_image(request)
"""

import logging
from typing import Optional

from google.genai import types

from animlogo.config import settings
from animlogo.errors import ImageGenerationError, NoImageDataError
from animlogo.schemas.media import GeneratedImage, LogoRequest

logger = logging.getLogger(__name__)

# Fixed style directive, not user-configurable
LOGO_STYLE_DIRECTIVE = (
    "A professional, high-quality, modern minimalist corporate logo. "
    "Clean lines, vector style, white background."
)

DEFAULT_IMAGE_MIME_TYPE = "image/png"


def build_logo_prompt(description: str) -> str:
    """Prepend the house style directive to the user's description."""
    return f"{LOGO_STYLE_DIRECTIVE} The logo is for: {description.strip()}"


def extract_image(response) -> Optional[GeneratedImage]:
    """Return the first inline image part of a generate_content response.

    Parts are scanned in order. Parts with no inline data, empty data or a
    non-image MIME type are skipped. Returns None if nothing qualifies.
    """
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return None
    content = getattr(candidates[0], "content", None)
    parts = getattr(content, "parts", None) or []

    for part in parts:
        inline = getattr(part, "inline_data", None)
        if not inline or not inline.data:
            continue
        mime_type = inline.mime_type or DEFAULT_IMAGE_MIME_TYPE
        if not mime_type.startswith("image/"):
            continue
        return GeneratedImage(data=inline.data, mime_type=mime_type)

    return None


class LogoGenerator:
    """Issues a single image generation request for a LogoRequest."""

    def __init__(self, client, model: Optional[str] = None) -> None:
        """
        Args:
            client: google-genai client (or any object exposing
                    ``aio.models.generate_content``)
            model: Image model ID. Defaults to settings.models.image_gen.
        """
        self.client = client
        self.model = model or settings.models.image_gen

    async def generate_image(self, request: LogoRequest) -> GeneratedImage:
        """Generate a logo image.

        Args:
            request: Description, size tier and aspect ratio

        Returns:
            GeneratedImage with non-empty bytes and an image/* MIME type

        Raises:
            NoImageDataError: If no response part contains image data
            ImageGenerationError: If the request itself fails
        """
        prompt = build_logo_prompt(request.description)
        logger.info(
            f"Generating logo with {self.model} "
            f"(size={request.image_size.value}, aspect_ratio={request.aspect_ratio.value})"
        )

        try:
            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    response_modalities=["TEXT", "IMAGE"],
                    image_config=types.ImageConfig(
                        aspect_ratio=request.aspect_ratio.value,
                        image_size=request.image_size.value,
                    ),
                ),
            )
        except Exception as e:
            logger.error(f"Image generation request failed: {type(e).__name__}: {e}")
            raise ImageGenerationError(str(e)) from e

        image = extract_image(response)
        if image is None:
            raise NoImageDataError("No image data found in response")

        logger.info(f"Logo generated: {len(image.data)} bytes ({image.mime_type})")
        return image
