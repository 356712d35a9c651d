"""Tests for services/video_converter.py and the `video` entry point."""

import threading
from pathlib import Path

import pytest

from downsize.domain.exceptions import (
    EngineInvocationException,
    EngineProcessException,
    FilesystemException,
    InvalidOptionsException,
    ToolNotFoundException,
)
from downsize.pipeline.conversion import video
from downsize.services.video_converter import VideoJob


def progress_lines(*out_times_us, end=True):
    lines = []
    for us in out_times_us:
        lines += ["frame=10\n", f"out_time_us={us}\n", "progress=continue\n"]
    if end:
        lines[-1] = "progress=end\n"
    return lines


class FakePopen:
    """Stands in for subprocess.Popen: replays stdout lines, writes stderr and the target."""

    def __init__(self, lines, returncode=0, stderr_text="", write_target=True):
        self.lines = lines
        self.returncode_to_return = returncode
        self.stderr_text = stderr_text
        self.write_target = write_target
        self.calls = []

    def __call__(self, cmd, **kwargs):
        self.calls.append((cmd, kwargs))
        if self.stderr_text:
            kwargs["stderr"].write(self.stderr_text)
            kwargs["stderr"].flush()
        if self.write_target and self.returncode_to_return == 0:
            Path(cmd[-1]).write_bytes(b"\x00" * 2048)
        self.stdout = iter(self.lines)
        return self

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False

    def wait(self, timeout=None):
        return self.returncode_to_return


@pytest.fixture
def fake_popen(monkeypatch):
    def _install(*args, duration=10.0, **kwargs):
        popen = FakePopen(*args, **kwargs)
        monkeypatch.setattr("downsize.services.video_converter.subprocess.Popen", popen)
        monkeypatch.setattr("downsize.services.video_converter.media_duration", lambda path: duration)
        return popen

    return _install


class TestVideoJob:
    def test_reports_progress_and_completes(self, fake_popen, tmp_path):
        fake_popen(progress_lines(2_500_000, 5_000_000, 10_000_000))
        target = tmp_path / "out" / "clip.mp4"
        seen = []

        job = VideoJob(tmp_path / "in.mov", target).on_progress(seen.append)
        job.start().wait(timeout=5)

        assert seen == [25, 50, 100]
        assert job.done
        assert job.progress == 100
        assert job.exception() is None
        assert target.exists()

    def test_out_of_order_updates_are_dropped(self, fake_popen, tmp_path):
        fake_popen(progress_lines(5_000_000, 2_500_000, 7_500_000, 7_500_000, end=False))
        seen = []

        job = VideoJob(tmp_path / "in.mov", tmp_path / "out.mp4").on_progress(seen.append)
        job.start().wait(timeout=5)

        assert seen == [50, 75]

    def test_no_hundred_without_end_marker(self, fake_popen, tmp_path):
        fake_popen(progress_lines(9_900_000, end=False))
        seen = []
        VideoJob(tmp_path / "in.mov", tmp_path / "out.mp4").on_progress(seen.append).start().wait(timeout=5)
        assert seen == [99]

    def test_unknown_duration_reports_only_completion(self, fake_popen, tmp_path):
        fake_popen(progress_lines(2_500_000, 5_000_000), duration=None)
        seen = []
        VideoJob(tmp_path / "in.mov", tmp_path / "out.mp4").on_progress(seen.append).start().wait(timeout=5)
        assert seen == [100]

    def test_nonzero_exit_raises_process_error(self, fake_popen, tmp_path):
        fake_popen(progress_lines(2_500_000, end=False), returncode=1, stderr_text="Unknown encoder 'libfoo'")
        seen = []

        job = VideoJob(tmp_path / "in.mov", tmp_path / "out.mp4").on_progress(seen.append).start()

        with pytest.raises(EngineProcessException) as exc_info:
            job.wait(timeout=5)
        assert exc_info.value.returncode == 1
        assert "libfoo" in exc_info.value.stderr
        assert isinstance(job.exception(), EngineProcessException)
        assert 100 not in seen

    def test_missing_ffmpeg(self, monkeypatch, tmp_path):
        def raise_not_found(cmd, **kwargs):
            raise FileNotFoundError(2, "No such file or directory", cmd[0])

        monkeypatch.setattr("downsize.services.video_converter.subprocess.Popen", raise_not_found)
        monkeypatch.setattr("downsize.services.video_converter.media_duration", lambda path: None)

        job = VideoJob(tmp_path / "in.mov", tmp_path / "out.mp4").start()
        with pytest.raises(ToolNotFoundException):
            job.wait(timeout=5)

    def test_unexpected_error_is_wrapped(self, monkeypatch, tmp_path):
        def explode(path):
            raise ValueError("boom")

        monkeypatch.setattr("downsize.services.video_converter.media_duration", explode)
        job = VideoJob(tmp_path / "in.mov", tmp_path / "out.mp4").start()

        with pytest.raises(EngineInvocationException) as exc_info:
            job.wait(timeout=5)
        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_unwritable_directory_fails_the_job(self, fake_popen, tmp_path):
        popen = fake_popen(progress_lines(1_000_000))
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")

        job = VideoJob(tmp_path / "in.mov", blocker / "out.mp4").start()

        with pytest.raises(FilesystemException):
            job.wait(timeout=5)
        assert popen.calls == []

    def test_failing_listener_does_not_fail_job(self, fake_popen, tmp_path):
        fake_popen(progress_lines(5_000_000, 10_000_000))
        seen = []

        def broken(value):
            raise RuntimeError("listener bug")

        job = VideoJob(tmp_path / "in.mov", tmp_path / "out.mp4")
        job.on_progress(broken).on_progress(seen.append)
        job.start().wait(timeout=5)

        assert seen == [50, 100]
        assert job.exception() is None

    def test_wait_times_out_on_unstarted_job(self, tmp_path):
        job = VideoJob(tmp_path / "in.mov", tmp_path / "out.mp4")
        with pytest.raises(TimeoutError):
            job.wait(timeout=0.01)
        assert not job.done

    def test_cannot_start_twice(self, fake_popen, tmp_path):
        fake_popen(progress_lines(1_000_000))
        job = VideoJob(tmp_path / "in.mov", tmp_path / "out.mp4").start()
        with pytest.raises(RuntimeError):
            job.start()
        job.wait(timeout=5)

    def test_done_callbacks(self, fake_popen, tmp_path):
        fake_popen(progress_lines(1_000_000))
        called = []
        finished = threading.Event()

        job = VideoJob(tmp_path / "in.mov", tmp_path / "out.mp4")
        job.add_done_callback(lambda j: (called.append(("before", j)), finished.set()))
        job.start().wait(timeout=5)
        assert finished.wait(timeout=5)

        job.add_done_callback(lambda j: called.append(("after", j)))

        assert called == [("before", job), ("after", job)]

    def test_command_includes_progress_options(self, fake_popen, tmp_path):
        popen = fake_popen(progress_lines(1_000_000))
        source, target = tmp_path / "in.MTS", tmp_path / "out.mp4"

        VideoJob(source, target, {"bitrate": "500k"}).start().wait(timeout=5)

        cmd, kwargs = popen.calls[0]
        assert cmd[1:7] == ["-hide_banner", "-loglevel", "error", "-progress", "pipe:1", "-nostats"]
        assert cmd[7:9] == ["-i", str(source)]
        assert "yadif=1" in cmd
        assert "-b:v" not in cmd
        assert cmd[-1] == str(target)
        assert kwargs["stdin"] is not None
        assert kwargs["text"] is True


class TestVideoEntryPoint:
    def test_quality_reaches_ffmpeg_as_crf(self, fake_popen, tmp_path):
        popen = fake_popen(progress_lines(1_000_000))

        video(tmp_path / "in.mov", tmp_path / "out.mp4", {"quality": 40}).wait(timeout=5)

        cmd, _ = popen.calls[0]
        assert cmd[cmd.index("-crf") + 1] == "31"
        assert "-b:v" not in cmd

    def test_returns_started_job_with_listener(self, fake_popen, tmp_path):
        fake_popen(progress_lines(5_000_000, 10_000_000))
        seen = []

        job = video(tmp_path / "in.mov", tmp_path / "sub" / "out.webm", {"format": "webm"}, on_progress=seen.append)
        job.wait(timeout=5)

        assert isinstance(job, VideoJob)
        assert seen == [50, 100]
        assert "libvpx-vp9" in job.args

    def test_invalid_options_raise_immediately(self, tmp_path):
        with pytest.raises(InvalidOptionsException):
            video(tmp_path / "in.mov", tmp_path / "out.mp4", {"width": -1})
