"""Tests for services/still_extractor.py and the `still` entry point."""

import subprocess
from pathlib import Path

import pytest
from PIL import Image

from downsize.domain.exceptions import ImageReadException, ToolNotFoundException
from downsize.pipeline.conversion import still
from downsize.services.still_extractor import ExtractionAttempt, extract_frame


class FakeFfmpeg:
    """
    Records ffmpeg invocations. `outcomes` lists, per call, a
    (writes_frame, returncode) pair.
    """

    def __init__(self, *outcomes, frame_size=(640, 360)):
        self.outcomes = list(outcomes)
        self.frame_size = frame_size
        self.calls = []

    def __call__(self, cmd):
        writes_frame, returncode = self.outcomes[len(self.calls)]
        self.calls.append([str(part) for part in cmd])
        if writes_frame:
            Image.new("RGB", self.frame_size, "blue").save(Path(cmd[-1]), format="JPEG")
        return subprocess.CompletedProcess(cmd, returncode, stdout="", stderr="" if returncode == 0 else "error")


@pytest.fixture
def fake_ffmpeg(monkeypatch):
    def _install(*outcomes, **kwargs):
        fake = FakeFfmpeg(*outcomes, **kwargs)
        monkeypatch.setattr("downsize.services.still_extractor.run_cmd", fake)
        return fake

    return _install


class TestExtractFrame:
    def test_offset_attempt_succeeds(self, fake_ffmpeg, tmp_path):
        fake = fake_ffmpeg((True, 0))
        target = tmp_path / "frame.jpg"

        assert extract_frame(tmp_path / "clip.mp4", target) is ExtractionAttempt.OFFSET
        assert len(fake.calls) == 1
        assert fake.calls[0][1:3] == ["-ss", "0.1"]
        assert target.exists()

    def test_falls_back_to_first_frame(self, fake_ffmpeg, tmp_path):
        fake = fake_ffmpeg((False, 1), (True, 0))
        target = tmp_path / "frame.jpg"

        assert extract_frame(tmp_path / "short.mp4", target) is ExtractionAttempt.DEFAULT
        assert len(fake.calls) == 2
        assert "-ss" in fake.calls[0]
        assert "-ss" not in fake.calls[1]
        assert target.exists()

    def test_nonzero_exit_with_output_does_not_retry(self, fake_ffmpeg, tmp_path):
        fake = fake_ffmpeg((True, 1))
        assert extract_frame(tmp_path / "clip.mp4", tmp_path / "frame.jpg") is ExtractionAttempt.OFFSET
        assert len(fake.calls) == 1

    def test_at_most_two_attempts(self, fake_ffmpeg, tmp_path):
        fake = fake_ffmpeg((False, 1), (False, 1))
        target = tmp_path / "frame.jpg"

        assert extract_frame(tmp_path / "broken.mp4", target) is ExtractionAttempt.DEFAULT
        assert len(fake.calls) == 2
        assert not target.exists()

    def test_missing_ffmpeg_propagates(self, monkeypatch, tmp_path):
        def missing(cmd):
            raise ToolNotFoundException("Could not start 'ffmpeg'")

        monkeypatch.setattr("downsize.services.still_extractor.run_cmd", missing)
        with pytest.raises(ToolNotFoundException):
            extract_frame(tmp_path / "clip.mp4", tmp_path / "frame.jpg")


class TestStillEntryPoint:
    def test_frame_is_resized_in_place(self, fake_ffmpeg, tmp_path):
        fake_ffmpeg((True, 0))
        target = tmp_path / "thumbs" / "clip.jpg"

        still(tmp_path / "clip.mp4", target, {"height": 200})

        with Image.open(target) as result:
            assert result.size == (356, 200)

    def test_fallback_frame_is_processed(self, fake_ffmpeg, tmp_path):
        fake = fake_ffmpeg((False, 1), (True, 0), frame_size=(100, 100))
        target = tmp_path / "clip.png"

        still(tmp_path / "clip.mp4", target, {"width": 50, "height": 20})

        assert len(fake.calls) == 2
        with Image.open(target) as result:
            assert result.size == (50, 20)

    def test_no_frame_raises_read_error(self, fake_ffmpeg, tmp_path):
        fake_ffmpeg((False, 1), (False, 1))
        with pytest.raises(ImageReadException):
            still(tmp_path / "broken.mp4", tmp_path / "clip.jpg", None)
