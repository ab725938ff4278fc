"""
File management service for animlogo.

Saves generated logos and animations to a per-session directory with path
traversal protection. This is how the CLI hands media to the user; the
pipeline itself keeps everything in memory.
"""
import mimetypes
from pathlib import Path

from animlogo.config import settings
from animlogo.schemas.media import GeneratedImage, GeneratedVideo

# mimetypes tables vary by platform for these
_EXTENSIONS = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/webp": ".webp",
    "video/mp4": ".mp4",
}


class FileManager:
    """
    Manage saved media for logo sessions.

    Creates structured directories:
    - {base_dir}/{session_id}/logo.<ext> - Generated logo image
    - {base_dir}/{session_id}/animation.mp4 - Animated logo video
    """

    def __init__(self, base_dir: str | Path | None = None):
        """
        Initialize FileManager with base directory.

        Args:
            base_dir: Root directory for all saved media.
                     If None, uses settings.storage.output_dir
        """
        if base_dir is None:
            base_dir = settings.storage.output_dir

        self.base_dir = Path(base_dir).resolve()
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def get_session_dir(self, session_id: str) -> Path:
        """
        Get or create the directory for one session.

        Raises:
            ValueError: If session_id creates path outside base_dir (traversal attack)
        """
        session_dir = (self.base_dir / str(session_id)).resolve()

        if not session_dir.is_relative_to(self.base_dir) or session_dir == self.base_dir:
            raise ValueError("Invalid session path")

        session_dir.mkdir(exist_ok=True)
        return session_dir

    def save_logo(self, session_id: str, image: GeneratedImage) -> Path:
        """
        Save the logo image, using an extension that matches its MIME type.

        Returns:
            Path to saved image file
        """
        ext = _EXTENSIONS.get(image.mime_type) or mimetypes.guess_extension(image.mime_type) or ".png"
        filepath = self.get_session_dir(session_id) / f"logo{ext}"
        filepath.write_bytes(image.data)
        return filepath

    def save_animation(self, session_id: str, video: GeneratedVideo) -> Path:
        """
        Save the animated logo video.

        Returns:
            Path to saved video file
        """
        ext = _EXTENSIONS.get(video.mime_type) or mimetypes.guess_extension(video.mime_type) or ".mp4"
        filepath = self.get_session_dir(session_id) / f"animation{ext}"
        filepath.write_bytes(video.data)
        return filepath
