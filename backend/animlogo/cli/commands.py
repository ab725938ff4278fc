"""CLI commands for animlogo using Typer and Rich.

Implements 3 CLI commands:
- design: Generate a logo image and save it
- create: Generate a logo, animate it and save both files
- animate: Animate an existing image file
"""

import asyncio
import logging
import mimetypes
import uuid
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.prompt import Prompt

from animlogo.config import settings
from animlogo.errors import AnimLogoError
from animlogo.orchestrator.progress import describe
from animlogo.orchestrator.state import WorkflowState
from animlogo.orchestrator.workflow import LogoWorkflow
from animlogo.pipeline.animation import VideoAnimator
from animlogo.schemas.media import (
    AnimationRequest,
    GeneratedImage,
    ImageSize,
    LogoAspectRatio,
    LogoRequest,
    VideoAspectRatio,
    VideoResolution,
)
from animlogo.services.credentials import CredentialGate, EnvCredentialProvider
from animlogo.services.file_manager import FileManager
from animlogo.services.genai_client import get_genai_client

app = typer.Typer(name="animlogo", help="Generate a logo with Gemini and animate it with Veo")
console = Console()


class InteractivePromptCredentialProvider(EnvCredentialProvider):
    """Environment key provider whose picker asks for a key on the terminal."""

    def __init__(self, dotenv_path: Optional[str] = None) -> None:
        super().__init__(dotenv_path)
        self._entered: Optional[str] = None

    async def select_credential(self) -> None:
        key = await asyncio.to_thread(Prompt.ask, "Gemini API key", password=True, console=console)
        self._entered = key.strip() or None
        if self._entered is None:
            # blank entry: fall back to a key written to .env or the environment
            await super().select_credential()

    async def get_credential(self) -> Optional[str]:
        return self._entered or await super().get_credential()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    """Configure logging for all commands."""
    logging.basicConfig(
        level="DEBUG" if verbose else settings.logging.level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _run(coro, interrupted_message: str = "Interrupted.") -> None:
    """Run an async command body; Ctrl-C exits with code 130."""
    try:
        asyncio.run(coro)
    except KeyboardInterrupt:
        console.print()
        console.print(f"[yellow]{interrupted_message}[/yellow]")
        raise typer.Exit(code=130)


async def _ensure_credential(workflow: LogoWorkflow) -> None:
    """Prompt for a key until the workflow leaves AWAITING_CREDENTIAL."""
    while workflow.state == WorkflowState.AWAITING_CREDENTIAL:
        if workflow.error:
            console.print(f"[red]Error:[/red] {workflow.error}")
        console.print("[yellow]No Gemini API key selected.[/yellow] Set GEMINI_API_KEY or enter one now.")
        await workflow.select_credential()


async def _design(workflow: LogoWorkflow, request: LogoRequest) -> bool:
    with console.status("[bold green]Designing logo..."):
        await workflow.submit_logo(request)
    if workflow.state != WorkflowState.COMPOSING_ANIMATION:
        console.print(f"[red]✗[/red] {workflow.error}")
        return False
    console.print("[green]✓[/green] Logo generated")
    return True


async def _animate(workflow: LogoWorkflow, request: AnimationRequest) -> None:
    with console.status("[bold green]Starting animation...") as status:
        def on_label(label: Optional[str]) -> None:
            if label:
                status.update(f"[bold green]{describe(label)}")

        unsubscribe = workflow.progress.subscribe(on_label)
        try:
            await workflow.submit_animation(request)
        finally:
            unsubscribe()


@app.command()
def design(
    description: str = typer.Argument(..., help="What the logo is for"),
    size: ImageSize = typer.Option(ImageSize.SMALL, "--size", "-s", help="Image size"),
    aspect_ratio: LogoAspectRatio = typer.Option(LogoAspectRatio.SQUARE, "--aspect-ratio", "-a", help="Image aspect ratio"),
    output_dir: Optional[Path] = typer.Option(None, "--output-dir", "-o", help="Where to save the logo"),
):
    """Generate a logo image and save it."""
    request = LogoRequest(description=description, image_size=size, aspect_ratio=aspect_ratio)
    _run(_design_async(request, output_dir))


async def _design_async(request: LogoRequest, output_dir: Optional[Path]):
    """Async implementation of design command."""
    workflow = LogoWorkflow(CredentialGate(InteractivePromptCredentialProvider()))
    await workflow.start()
    await _ensure_credential(workflow)

    if not await _design(workflow, request):
        raise typer.Exit(code=1)

    session_id = uuid.uuid4().hex[:12]
    path = FileManager(output_dir).save_logo(session_id, workflow.image)
    console.print(f"[green]Logo:[/green] {path}")


@app.command()
def create(
    description: str = typer.Argument(..., help="What the logo is for"),
    size: ImageSize = typer.Option(ImageSize.SMALL, "--size", "-s", help="Image size"),
    aspect_ratio: LogoAspectRatio = typer.Option(LogoAspectRatio.SQUARE, "--aspect-ratio", "-a", help="Image aspect ratio"),
    motion: Optional[str] = typer.Option(None, "--motion", "-m", help="How the logo should move"),
    video_aspect_ratio: VideoAspectRatio = typer.Option(VideoAspectRatio.LANDSCAPE_16_9, "--video-aspect-ratio", help="Video aspect ratio"),
    resolution: VideoResolution = typer.Option(VideoResolution.P1080, "--resolution", "-r", help="Video resolution"),
    output_dir: Optional[Path] = typer.Option(None, "--output-dir", "-o", help="Where to save the logo and video"),
):
    """Generate a logo, animate it and save both files."""
    logo_request = LogoRequest(description=description, image_size=size, aspect_ratio=aspect_ratio)
    animation_request = AnimationRequest(
        motion_prompt=motion or settings.pipeline.default_motion_prompt,
        aspect_ratio=video_aspect_ratio,
        resolution=resolution,
    )
    _run(
        _create_async(logo_request, animation_request, output_dir),
        "Interrupted. The remote video job may still finish; its result is discarded.",
    )


async def _create_async(logo_request: LogoRequest, animation_request: AnimationRequest, output_dir: Optional[Path]):
    """Async implementation of create command."""
    workflow = LogoWorkflow(CredentialGate(InteractivePromptCredentialProvider()))
    file_mgr = FileManager(output_dir)
    session_id = uuid.uuid4().hex[:12]
    await workflow.start()

    while True:
        await _ensure_credential(workflow)

        if not await _design(workflow, logo_request):
            raise typer.Exit(code=1)
        logo_path = file_mgr.save_logo(session_id, workflow.image)
        console.print(f"[green]Logo:[/green] {logo_path}")

        await _animate(workflow, animation_request)

        if workflow.state == WorkflowState.COMPLETE:
            break
        if workflow.state == WorkflowState.AWAITING_CREDENTIAL:
            console.print(f"[red]✗[/red] {workflow.error}")
            if typer.confirm("Select a new API key and start over?", default=True):
                continue
            raise typer.Exit(code=1)

        console.print(f"[red]✗[/red] {workflow.error}")
        console.print(f"[yellow]You can retry the animation with:[/yellow] python -m animlogo animate {logo_path}")
        raise typer.Exit(code=1)

    video_path = file_mgr.save_animation(session_id, workflow.video)
    console.print(Panel.fit(
        f"[green]Logo:[/green] {logo_path}\n[green]Animation:[/green] {video_path}",
        title="Animated logo ready",
    ))


@app.command()
def animate(
    image_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Logo image to animate"),
    motion: Optional[str] = typer.Option(None, "--motion", "-m", help="How the logo should move"),
    video_aspect_ratio: VideoAspectRatio = typer.Option(VideoAspectRatio.LANDSCAPE_16_9, "--video-aspect-ratio", help="Video aspect ratio"),
    resolution: VideoResolution = typer.Option(VideoResolution.P1080, "--resolution", "-r", help="Video resolution"),
    output_dir: Optional[Path] = typer.Option(None, "--output-dir", "-o", help="Where to save the video"),
):
    """Animate an existing image file."""
    mime_type = mimetypes.guess_type(image_path.name)[0] or "image/png"
    try:
        image = GeneratedImage(data=image_path.read_bytes(), mime_type=mime_type)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {image_path} is not a usable image: {e}")
        raise typer.Exit(code=1)

    request = AnimationRequest(
        motion_prompt=motion or settings.pipeline.default_motion_prompt,
        aspect_ratio=video_aspect_ratio,
        resolution=resolution,
    )
    _run(
        _animate_file_async(image, request, output_dir),
        "Interrupted. The remote video job may still finish; its result is discarded.",
    )


async def _animate_file_async(image: GeneratedImage, request: AnimationRequest, output_dir: Optional[Path]):
    """Async implementation of animate command."""
    gate = CredentialGate(InteractivePromptCredentialProvider())
    if not await gate.has_credential():
        console.print("[yellow]No Gemini API key selected.[/yellow] Set GEMINI_API_KEY or enter one now.")
        await gate.request_credential()

    try:
        api_key = await gate.require_credential()
        animator = VideoAnimator(get_genai_client(api_key), api_key)
        with console.status("[bold green]Starting animation...") as status:
            video = await animator.animate(
                image, request,
                on_progress=lambda label: status.update(f"[bold green]{describe(label)}"),
            )
    except AnimLogoError as e:
        console.print(f"[red]✗ Failed to animate logo:[/red] {e}")
        raise typer.Exit(code=1)

    path = FileManager(output_dir).save_animation(uuid.uuid4().hex[:12], video)
    console.print(f"[green]Animation:[/green] {path}")
