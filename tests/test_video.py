"""Tests for the ffmpeg merge step (uses a fake ffmpeg shell script)."""

import os
import time
from pathlib import Path

import pytest

from backend.app.core.config import settings
from backend.app.core.errors import (
    OutputVerificationError,
    StageTimeoutError,
    ToolExecutionError,
    ToolUnavailableError,
)
from backend.app.services.video import (
    build_merge_command,
    check_ffmpeg,
    merge_audio_video,
    verify_output,
)


@pytest.fixture
def inputs(tmp_path):
    video = tmp_path / "video_1.tmp"
    audio = tmp_path / "audio_1.tmp"
    video.write_bytes(b"video")
    audio.write_bytes(b"audio")
    return video, audio, tmp_path / "merged_1.mp4"


def test_merge_command_contract(monkeypatch):
    monkeypatch.setattr(settings, "FFMPEG_BIN", "ffmpeg")

    cmd = build_merge_command(Path("v.tmp"), Path("a.tmp"), Path("out.mp4"))

    assert cmd == [
        "ffmpeg",
        "-i", "v.tmp",
        "-i", "a.tmp",
        "-c:v", "copy",
        "-c:a", "aac",
        "-b:a", "192k",
        "-shortest",
        "-avoid_negative_ts", "make_zero",
        "-fflags", "+genpts",
        "-movflags", "+faststart",
        "-y",
        "out.mp4",
    ]


def test_check_ffmpeg_reports_version(fake_ffmpeg):
    assert check_ffmpeg() == "ffmpeg version 6.0-fake"


def test_check_ffmpeg_missing(missing_ffmpeg):
    with pytest.raises(ToolUnavailableError, match="not installed or not available in PATH"):
        check_ffmpeg()


def test_check_ffmpeg_broken_probe(fake_ffmpeg):
    fake_ffmpeg("noprobe")

    with pytest.raises(ToolUnavailableError):
        check_ffmpeg()


def test_merge_success(fake_ffmpeg, inputs):
    video, audio, out = inputs

    result = merge_audio_video(video, audio, out)

    assert result == out
    assert out.read_bytes() == b"merged-bytes"


def test_merge_overwrites_existing_output(fake_ffmpeg, inputs):
    video, audio, out = inputs
    out.write_bytes(b"stale")

    merge_audio_video(video, audio, out)

    assert out.read_bytes() == b"merged-bytes"


def test_large_diagnostic_output_does_not_stall(fake_ffmpeg, inputs, monkeypatch):
    fake_ffmpeg("noisy")
    monkeypatch.setattr(settings, "MUX_TIMEOUT", 20)
    video, audio, out = inputs

    assert merge_audio_video(video, audio, out) == out


def test_missing_tool_before_merge(missing_ffmpeg, inputs):
    video, audio, out = inputs

    with pytest.raises(ToolUnavailableError):
        merge_audio_video(video, audio, out)

    assert not out.exists()


def test_nonzero_exit_carries_diagnostics(fake_ffmpeg, inputs):
    fake_ffmpeg("fail")
    video, audio, out = inputs

    with pytest.raises(ToolExecutionError) as exc:
        merge_audio_video(video, audio, out)

    assert exc.value.exit_code == 1
    assert "Invalid data found when processing input" in exc.value.diagnostics
    assert str(exc.value).startswith("FFmpeg failed with code 1. Error: ")


@pytest.mark.parametrize("mode", ["nooutput", "empty"])
def test_zero_exit_without_output_is_not_success(fake_ffmpeg, inputs, mode):
    fake_ffmpeg(mode)
    video, audio, out = inputs

    with pytest.raises(OutputVerificationError, match="not created or is empty"):
        merge_audio_video(video, audio, out)


def test_timeout_kills_process(fake_ffmpeg, inputs, tmp_path, monkeypatch):
    fake_ffmpeg("hang")
    pidfile = tmp_path / "ffmpeg.pid"
    monkeypatch.setenv("FAKE_FFMPEG_PIDFILE", str(pidfile))
    monkeypatch.setattr(settings, "MUX_TIMEOUT", 1)
    video, audio, out = inputs

    started = time.monotonic()
    with pytest.raises(StageTimeoutError) as exc:
        merge_audio_video(video, audio, out)
    elapsed = time.monotonic() - started

    assert exc.value.stage == "mux"
    assert str(exc.value) == "FFmpeg process timeout"
    assert elapsed < 10

    pid = int(pidfile.read_text().strip())
    with pytest.raises(ProcessLookupError):
        os.kill(pid, 0)


def test_verify_output(tmp_path):
    good = tmp_path / "good.mp4"
    good.write_bytes(b"1234")
    empty = tmp_path / "empty.mp4"
    empty.write_bytes(b"")

    assert verify_output(good) == 4
    with pytest.raises(OutputVerificationError):
        verify_output(empty)
    with pytest.raises(OutputVerificationError):
        verify_output(tmp_path / "missing.mp4")
    with pytest.raises(OutputVerificationError):
        verify_output(tmp_path)
