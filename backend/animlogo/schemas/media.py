"""Pydantic models for the requests and media handled by the pipeline.

Requests are created by the presentation host and consumed once. Media
handles (GeneratedImage, GeneratedVideo) are opaque byte payloads owned by
the workflow; nothing in the pipeline decodes or re-encodes them.
"""

import base64
import binascii
import re
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from animlogo.config import settings

_DATA_URI_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<payload>.*)$", re.DOTALL)


class ImageSize(str, Enum):
    """Output resolution tier for the logo image."""

    SMALL = "1K"
    MEDIUM = "2K"
    LARGE = "4K"


class LogoAspectRatio(str, Enum):
    SQUARE = "1:1"
    PORTRAIT_3_4 = "3:4"
    LANDSCAPE_4_3 = "4:3"
    PORTRAIT_9_16 = "9:16"
    LANDSCAPE_16_9 = "16:9"


class VideoAspectRatio(str, Enum):
    LANDSCAPE_16_9 = "16:9"
    PORTRAIT_9_16 = "9:16"


class VideoResolution(str, Enum):
    P720 = "720p"
    P1080 = "1080p"


class LogoRequest(BaseModel):
    """User's logo description plus image output settings."""

    model_config = ConfigDict(frozen=True)

    description: str = Field(min_length=1, description="What the logo should depict")
    image_size: ImageSize = ImageSize.SMALL
    aspect_ratio: LogoAspectRatio = LogoAspectRatio.SQUARE

    @field_validator("description")
    @classmethod
    def _strip_description(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("description must not be blank")
        return v


class AnimationRequest(BaseModel):
    """Motion prompt and video output settings."""

    model_config = ConfigDict(frozen=True)

    motion_prompt: str = Field(default_factory=lambda: settings.pipeline.default_motion_prompt)
    aspect_ratio: VideoAspectRatio = VideoAspectRatio.LANDSCAPE_16_9
    resolution: VideoResolution = VideoResolution.P1080


class GeneratedImage(BaseModel):
    """Logo image bytes with their MIME type."""

    model_config = ConfigDict(frozen=True)

    data: bytes = Field(min_length=1)
    mime_type: str = "image/png"

    @field_validator("mime_type")
    @classmethod
    def _require_image_mime(cls, v: str) -> str:
        if not v.startswith("image/"):
            raise ValueError(f"not an image MIME type: {v}")
        return v

    @property
    def data_uri(self) -> str:
        """Self-describing ``data:`` handle for hosts that render inline images."""
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"

    @classmethod
    def from_data_uri(cls, payload: str, default_mime_type: str = "image/png") -> "GeneratedImage":
        """Build an image from a data URI or a bare base64 string.

        The ``data:<mime>;base64,`` header is stripped when present.

        Raises:
            ValueError: If the payload is not valid base64.
        """
        mime_type = default_mime_type
        match = _DATA_URI_RE.match(payload.strip())
        if match:
            mime_type = match.group("mime")
            payload = match.group("payload")
        try:
            data = base64.b64decode(payload, validate=True)
        except binascii.Error as e:
            raise ValueError(f"Invalid base64 image payload: {e}") from e
        return cls(data=data, mime_type=mime_type)


class GeneratedVideo(BaseModel):
    """Finished animation held in memory."""

    model_config = ConfigDict(frozen=True)

    data: bytes = Field(min_length=1)
    mime_type: str = "video/mp4"
    source_uri: Optional[str] = None

    @property
    def data_uri(self) -> str:
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"


class VideoJob(BaseModel):
    """Snapshot of a remote video generation operation.

    Built from each operation returned by the SDK. The SDK operation object
    itself is kept by the animator as the handle for status refreshes.
    """

    handle: Optional[str] = None
    done: bool = False
    result_uri: Optional[str] = None
    video_bytes: Optional[bytes] = None
    video_mime_type: Optional[str] = None
    error: Optional[str] = None
    filtered_count: int = 0

    @classmethod
    def from_operation(cls, operation: Any) -> "VideoJob":
        """Read the fields this pipeline cares about from an SDK operation."""
        job = cls(
            handle=getattr(operation, "name", None),
            done=bool(getattr(operation, "done", False)),
        )
        error = getattr(operation, "error", None)
        if error:
            job.error = error.get("message", str(error)) if isinstance(error, dict) else str(error)

        response = getattr(operation, "response", None)
        if response is None:
            return job

        job.filtered_count = getattr(response, "rai_media_filtered_count", None) or 0
        generated_videos = getattr(response, "generated_videos", None) or []
        if generated_videos:
            video = getattr(generated_videos[0], "video", None)
            if video is not None:
                job.result_uri = getattr(video, "uri", None)
                job.video_bytes = getattr(video, "video_bytes", None)
                job.video_mime_type = getattr(video, "mime_type", None)
        return job

    @property
    def has_result(self) -> bool:
        return bool(self.video_bytes or self.result_uri)
