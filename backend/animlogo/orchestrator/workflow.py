"""Workflow orchestrator for the logo → animation pipeline.

Sequences credential gate → logo generation → animation → result while
holding the single piece of pipeline state:
- State machine transitions (see animlogo.orchestrator.state)
- State changes only after the awaited operation settles
- Pipeline errors caught here and converted to user-facing text
- At most one action (and therefore one video job) in flight at a time
- Progress reporter interface for CLI/host integration
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Awaitable, Callable, Optional

import httpx

from animlogo.errors import CredentialExpiredError, WorkflowBusyError, WorkflowStateError
from animlogo.orchestrator.progress import ProgressReporter
from animlogo.orchestrator.state import (
    ANIMATION_FAILED_PREFIX,
    CREDENTIAL_EXPIRED_MESSAGE,
    LOGO_FAILED_PREFIX,
    STATES_WITH_IMAGE,
    STATES_WITH_VIDEO,
    WorkflowState,
    can_transition,
)
from animlogo.pipeline.animation import VideoAnimator
from animlogo.pipeline.logo import LogoGenerator
from animlogo.schemas.media import AnimationRequest, GeneratedImage, GeneratedVideo, LogoRequest
from animlogo.services.credentials import CredentialGate
from animlogo.services.genai_client import clear_client_cache, get_genai_client

logger = logging.getLogger(__name__)


class LogoWorkflow:
    """Client-side state machine for one logo design session.

    The presentation host reads ``state``, ``error``, ``progress.latest``,
    ``image`` and ``video`` and triggers the action methods.
    """

    def __init__(
        self,
        gate: CredentialGate,
        *,
        client_factory: Callable[[str], object] = get_genai_client,
        progress: Optional[ProgressReporter] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        image_model: Optional[str] = None,
        video_model: Optional[str] = None,
        poll_interval: Optional[float] = None,
        max_polls: Optional[int] = None,
    ) -> None:
        """
        Args:
            gate: Credential gate wrapping the host's key provider
            client_factory: Builds a google-genai client for an API key
            progress: Reporter receiving animation stage labels
            http_client: Optional shared httpx client for video downloads
            sleep: Awaitable used between video job polls
            image_model / video_model: Override configured model IDs
            poll_interval / max_polls: Override configured poll cadence and ceiling
        """
        self.gate = gate
        self.progress = progress or ProgressReporter()
        self._client_factory = client_factory
        self._http_client = http_client
        self._sleep = sleep
        self._image_model = image_model
        self._video_model = video_model
        self._poll_interval = poll_interval
        self._max_polls = max_polls
        self._lock = asyncio.Lock()

        self.state = WorkflowState.AWAITING_CREDENTIAL
        self.image: Optional[GeneratedImage] = None
        self.video: Optional[GeneratedVideo] = None
        self.error: Optional[str] = None

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    @asynccontextmanager
    async def _exclusive(self):
        if self._lock.locked():
            raise WorkflowBusyError("Another action is still running")
        async with self._lock:
            yield

    def _require_state(self, action: str, *allowed: WorkflowState) -> None:
        if self.state not in allowed:
            raise WorkflowStateError(f"Cannot {action} while {self.state.value}")

    def _transition(self, target: WorkflowState) -> None:
        """Move to target, discarding media that the target state does not hold."""
        if not can_transition(self.state, target):
            raise WorkflowStateError(f"Invalid transition {self.state.value} -> {target.value}")

        if target in (WorkflowState.AWAITING_CREDENTIAL, WorkflowState.COMPOSING_LOGO):
            self.image = None
            self.video = None
        elif target == WorkflowState.COMPOSING_ANIMATION:
            self.video = None

        if target in STATES_WITH_IMAGE and self.image is None:
            raise WorkflowStateError(f"{target.value} requires a generated image")
        if target in STATES_WITH_VIDEO and self.video is None:
            raise WorkflowStateError(f"{target.value} requires a generated video")

        if target != self.state:
            logger.info(f"Workflow: {self.state.value} -> {target.value}")
        self.state = target

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------
    async def start(self) -> WorkflowState:
        """Check once for a selected key and leave AWAITING_CREDENTIAL if there is one."""
        async with self._exclusive():
            self._require_state("start", WorkflowState.AWAITING_CREDENTIAL)
            if await self.gate.has_credential():
                self._transition(WorkflowState.COMPOSING_LOGO)
            return self.state

    async def select_credential(self) -> WorkflowState:
        """Open the host key picker.

        From AWAITING_CREDENTIAL this moves to COMPOSING_LOGO. In any other
        state the key is switched and the state kept.
        """
        async with self._exclusive():
            self.error = None
            try:
                await self.gate.request_credential()
            except Exception as e:
                logger.error(f"Credential selection failed: {type(e).__name__}: {e}")
                self.error = f"Failed to select API key. {e}"
                return self.state

            if self.state == WorkflowState.AWAITING_CREDENTIAL:
                self._transition(WorkflowState.COMPOSING_LOGO)
            return self.state

    async def submit_logo(self, request: LogoRequest) -> WorkflowState:
        """Generate the logo image; on success move to COMPOSING_ANIMATION."""
        async with self._exclusive():
            self._require_state("generate a logo", WorkflowState.COMPOSING_LOGO)
            self.error = None

            try:
                api_key = await self.gate.require_credential()
                generator = LogoGenerator(self._client_factory(api_key), model=self._image_model)
                image = await generator.generate_image(request)
            except Exception as e:
                logger.error(f"Logo generation failed: {type(e).__name__}: {e}")
                self.error = f"{LOGO_FAILED_PREFIX} {e}"
                return self.state

            self.image = image
            self._transition(WorkflowState.COMPOSING_ANIMATION)
            return self.state

    async def submit_animation(self, request: AnimationRequest) -> WorkflowState:
        """Animate the held logo image; on success move to COMPLETE.

        An expired credential discards the image and returns to
        AWAITING_CREDENTIAL. Any other failure keeps the image so the user
        can retry without regenerating the logo.
        """
        async with self._exclusive():
            self._require_state("animate the logo", WorkflowState.COMPOSING_ANIMATION)
            self.error = None

            try:
                api_key = await self.gate.require_credential()
                animator = VideoAnimator(
                    self._client_factory(api_key),
                    api_key,
                    model=self._video_model,
                    poll_interval=self._poll_interval,
                    max_polls=self._max_polls,
                    http_client=self._http_client,
                    sleep=self._sleep,
                )
                video = await animator.animate(self.image, request, on_progress=self.progress.report)
            except CredentialExpiredError as e:
                logger.warning(f"Credential expired during animation: {e}")
                clear_client_cache()
                self._transition(WorkflowState.AWAITING_CREDENTIAL)
                self.error = CREDENTIAL_EXPIRED_MESSAGE
                return self.state
            except Exception as e:
                logger.error(f"Animation failed: {type(e).__name__}: {e}")
                self.error = f"{ANIMATION_FAILED_PREFIX} {e}"
                return self.state
            finally:
                self.progress.clear()

            self.video = video
            self._transition(WorkflowState.COMPLETE)
            return self.state

    def redesign(self) -> WorkflowState:
        """Discard the logo image and go back to describing a new one."""
        if self.busy:
            raise WorkflowBusyError("Another action is still running")
        self._require_state("redesign", WorkflowState.COMPOSING_ANIMATION)
        self.error = None
        self._transition(WorkflowState.COMPOSING_LOGO)
        return self.state

    def reset(self) -> WorkflowState:
        """Start a new design: clear image, video and error. Safe to repeat."""
        if self.busy:
            raise WorkflowBusyError("Another action is still running")
        self._require_state(
            "reset",
            WorkflowState.COMPOSING_LOGO,
            WorkflowState.COMPOSING_ANIMATION,
            WorkflowState.COMPLETE,
        )
        self.error = None
        self._transition(WorkflowState.COMPOSING_LOGO)
        return self.state
