"""Shared fixtures for the conversion tests."""

from pathlib import Path

import pytest
from loguru import logger
from PIL import Image


@pytest.fixture
def make_image(tmp_path):
    """Factory writing a solid-colour image under tmp_path and returning its path."""

    def _make(name: str, size=(200, 100), color="red", mode="RGB", **save_kwargs) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        Image.new(mode, size, color).save(path, **save_kwargs)
        return path

    return _make


@pytest.fixture
def make_animated_gif(tmp_path):
    """Factory writing a GIF whose frames are red, green and blue (in that order)."""

    def _make(name: str = "anim.gif", size=(200, 100)) -> Path:
        path = tmp_path / name
        frames = [Image.new("RGB", size, color) for color in ("red", "green", "blue")]
        frames[0].save(path, save_all=True, append_images=frames[1:], duration=100, loop=0)
        return path

    return _make


@pytest.fixture
def log_messages():
    """Collects the messages logged through loguru while the test runs."""
    messages = []
    handler_id = logger.add(lambda message: messages.append(message.record["message"]), level="TRACE")
    yield messages
    logger.remove(handler_id)
