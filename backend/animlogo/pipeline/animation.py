"""Logo animation using Veo image-to-video generation.

Lifecycle of a single video job:
- Submit one Veo job seeded with the logo image (exactly one output video)
- Poll the long-running operation at a fixed interval until it is done
- Classify poll failures: "entity not found" means the API key that created
  the job can no longer read it (CredentialExpiredError); anything else
  aborts the loop (JobPollError)
- Take the first generated video and download it with the same API key

Only the poll loop repeats calls. Submit and fetch failures propagate
immediately.

Usage:
    from animlogo.pipeline.animation import VideoAnimator

    animator = VideoAnimator(client, api_key)
    video = await animator.animate(image, request, on_progress=reporter)
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Union

import httpx
from google.genai import types

from animlogo.config import settings
from animlogo.errors import (
    AssetFetchError,
    CredentialExpiredError,
    JobPollError,
    JobSubmitError,
    NoVideoResultError,
    PollTimeoutError,
)
from animlogo.orchestrator.progress import PROCESSING, SUBMITTING
from animlogo.schemas.media import AnimationRequest, GeneratedImage, GeneratedVideo, VideoJob

logger = logging.getLogger(__name__)

DEFAULT_VIDEO_MIME_TYPE = "video/mp4"

# Message the API returns when an operation is read with a key that cannot see it
ENTITY_NOT_FOUND_SIGNATURE = "requested entity was not found"


# ---------------------------------------------------------------------------
# Error classification
# ---------------------------------------------------------------------------
def is_entity_not_found(exc: BaseException) -> bool:
    """Return True if a poll failure means the job's credential has expired."""
    # google.genai APIError keeps the server message apart from str(exc)
    message = f"{getattr(exc, 'message', None) or ''} {exc}"
    return ENTITY_NOT_FOUND_SIGNATURE in message.lower()


def _describe_failed_job(job: VideoJob) -> str:
    if job.error:
        return f"Video generation failed: {job.error}"
    if job.filtered_count:
        return f"Video generation failed: {job.filtered_count} video(s) filtered by responsible AI"
    return "Video generation failed: no video in response"


class VideoAnimator:
    """Drives one Veo job from submission to downloaded video."""

    def __init__(
        self,
        client,
        api_key: str,
        *,
        model: Optional[str] = None,
        poll_interval: Optional[float] = None,
        max_polls: Optional[int] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        fetch_timeout: Optional[float] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """
        Args:
            client: google-genai client (``aio.models.generate_videos`` and
                    ``aio.operations.get`` are used)
            api_key: Key appended to the result locator when downloading
            model: Video model ID. Defaults to settings.models.video_gen.
            poll_interval: Seconds between status refreshes.
                           Defaults to settings.pipeline.video_poll_interval.
            max_polls: Optional ceiling on status refreshes.
                       Defaults to settings.pipeline.video_poll_max (unbounded when None).
            http_client: Optional shared httpx client for the download
            fetch_timeout: Download timeout when no http_client is given
            sleep: Awaitable used between polls
        """
        self.client = client
        self.api_key = api_key
        self.model = model or settings.models.video_gen
        self.poll_interval = poll_interval if poll_interval is not None else settings.pipeline.video_poll_interval
        self.max_polls = max_polls if max_polls is not None else settings.pipeline.video_poll_max
        self.fetch_timeout = fetch_timeout or settings.pipeline.fetch_timeout
        self._http_client = http_client
        self._sleep = sleep

    async def animate(
        self,
        image: Union[GeneratedImage, str],
        request: AnimationRequest,
        on_progress: Optional[Callable[[str], None]] = None,
    ) -> GeneratedVideo:
        """Animate a logo image into a short video.

        Args:
            image: Logo image, or a data URI / base64 string of one
            request: Motion prompt, aspect ratio and resolution
            on_progress: Receives "submitting" before the job is created and
                         "processing" once before polling starts

        Returns:
            GeneratedVideo held in memory

        Raises:
            JobSubmitError: Job creation failed
            CredentialExpiredError: Status refresh reported the job as not found
            JobPollError: Status refresh failed for any other reason
            PollTimeoutError: max_polls refreshes without completion
            NoVideoResultError: Job finished without a video
            AssetFetchError: Video download failed
        """
        report = on_progress or (lambda label: None)
        if isinstance(image, str):
            image = GeneratedImage.from_data_uri(image)

        report(SUBMITTING)
        operation = await self._submit(image, request)

        report(PROCESSING)
        operation = await self._poll_until_done(operation)

        job = VideoJob.from_operation(operation)
        if job.video_bytes:
            logger.info(f"Video job {job.handle}: result returned inline ({len(job.video_bytes)} bytes)")
            return GeneratedVideo(
                data=job.video_bytes,
                mime_type=job.video_mime_type or DEFAULT_VIDEO_MIME_TYPE,
            )
        if not job.result_uri:
            raise NoVideoResultError(_describe_failed_job(job))

        return await self._fetch(job.result_uri, job.video_mime_type)

    async def _submit(self, image: GeneratedImage, request: AnimationRequest):
        """Create the Veo job. Not retried."""
        video_config = types.GenerateVideosConfig(
            number_of_videos=1,
            resolution=request.resolution.value,
            aspect_ratio=request.aspect_ratio.value,
        )
        try:
            operation = await self.client.aio.models.generate_videos(
                model=self.model,
                prompt=request.motion_prompt,
                image=types.Image(image_bytes=image.data, mime_type=image.mime_type),
                config=video_config,
            )
        except Exception as e:
            logger.error(f"Video job submission failed: {type(e).__name__}: {e}")
            raise JobSubmitError(str(e)) from e

        logger.info(
            f"Submitted video job {getattr(operation, 'name', None)} with {self.model} "
            f"({request.resolution.value}, {request.aspect_ratio.value})"
        )
        return operation

    async def _poll_until_done(self, operation):
        """Refresh the operation every poll_interval seconds until done."""
        poll_count = 0

        while not operation.done:
            if self.max_polls is not None and poll_count >= self.max_polls:
                raise PollTimeoutError(
                    f"Video job did not complete after {poll_count * self.poll_interval:.0f} seconds"
                )

            await self._sleep(self.poll_interval)

            try:
                operation = await self.client.aio.operations.get(operation=operation)
            except Exception as e:
                if is_entity_not_found(e):
                    logger.warning(f"Video job not found on refresh, credential likely expired: {e}")
                    raise CredentialExpiredError(
                        "The API key used for this video job is no longer valid"
                    ) from e
                logger.error(f"Video job refresh failed: {type(e).__name__}: {e}")
                raise JobPollError(str(e)) from e

            poll_count += 1
            logger.debug(f"Video job poll {poll_count}: done={bool(operation.done)}")

        logger.info(f"Video job finished after {poll_count} poll(s)")
        return operation

    async def _fetch(self, uri: str, mime_type: Optional[str]) -> GeneratedVideo:
        """Download the result locator with the API key as access parameter."""
        owns_client = self._http_client is None
        http_client = self._http_client or httpx.AsyncClient(timeout=self.fetch_timeout)

        try:
            # keep the locator's own query (alt=media)
            url = httpx.URL(uri).copy_add_param("key", self.api_key)
            response = await http_client.get(url, follow_redirects=True)
            response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error(f"Video download failed: {type(e).__name__}: {e}")
            raise AssetFetchError(f"Failed to download video: {e}") from e
        finally:
            if owns_client:
                await http_client.aclose()

        if not response.content:
            raise AssetFetchError("Failed to download video: empty response body")

        content_type = response.headers.get("content-type", "").split(";")[0].strip()
        if not mime_type and content_type.startswith("video/"):
            mime_type = content_type

        logger.info(f"Downloaded video: {len(response.content)} bytes")
        return GeneratedVideo(
            data=response.content,
            mime_type=mime_type or DEFAULT_VIDEO_MIME_TYPE,
            source_uri=uri,
        )
