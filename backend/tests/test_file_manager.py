"""Tests for saving logos and animations to disk."""

import pytest

from animlogo.schemas.media import GeneratedImage, GeneratedVideo
from animlogo.services.file_manager import FileManager

from conftest import PNG_BYTES, VIDEO_BYTES


def test_saves_logo_and_animation_in_session_dir(tmp_path):
    file_mgr = FileManager(tmp_path)

    logo = file_mgr.save_logo("abc123", GeneratedImage(data=PNG_BYTES, mime_type="image/png"))
    video = file_mgr.save_animation("abc123", GeneratedVideo(data=VIDEO_BYTES))

    assert logo == tmp_path.resolve() / "abc123" / "logo.png"
    assert logo.read_bytes() == PNG_BYTES
    assert video.name == "animation.mp4"
    assert video.read_bytes() == VIDEO_BYTES


def test_logo_extension_follows_mime_type(tmp_path):
    path = FileManager(tmp_path).save_logo("s1", GeneratedImage(data=b"x", mime_type="image/webp"))

    assert path.suffix == ".webp"


@pytest.mark.parametrize("session_id", ["../escape", "..", "."])
def test_rejects_paths_outside_base_dir(tmp_path, session_id):
    with pytest.raises(ValueError):
        FileManager(tmp_path / "out").get_session_dir(session_id)
