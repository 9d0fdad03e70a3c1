import os
import stat
import sys
from pathlib import Path

import pytest

from backend.app.core.config import settings
from backend.app.core.errors import UploadError
from backend.app.schemas import CloudinaryInfo


FAKE_FFMPEG = """#!/bin/sh
if [ "$1" = "-version" ]; then
    if [ "$FAKE_FFMPEG_MODE" = "noprobe" ]; then
        echo "broken install" >&2
        exit 1
    fi
    echo "ffmpeg version 6.0-fake"
    exit 0
fi

for last; do :; done

case "$FAKE_FFMPEG_MODE" in
    ok)
        echo "frame=1 size=1kB" >&2
        printf 'merged-bytes' > "$last"
        exit 0
        ;;
    noisy)
        head -c 500000 /dev/zero | tr '\\000' 'x' >&2
        head -c 500000 /dev/zero | tr '\\000' 'y'
        printf 'merged-bytes' > "$last"
        exit 0
        ;;
    empty)
        : > "$last"
        exit 0
        ;;
    nooutput)
        exit 0
        ;;
    fail)
        echo "Invalid data found when processing input" >&2
        exit 1
        ;;
    hang)
        echo $$ > "$FAKE_FFMPEG_PIDFILE"
        exec sleep 30
        ;;
esac
exit 2
"""


@pytest.fixture(autouse=True)
def temp_dir(tmp_path, monkeypatch) -> Path:
    """Every test gets its own scratch directory."""
    scratch = tmp_path / "scratch"
    monkeypatch.setattr(settings, "TEMP_DIR", str(scratch))
    return scratch


@pytest.fixture
def fake_ffmpeg(tmp_path, monkeypatch):
    """Install a shell script that behaves like ffmpeg; returns a mode setter."""
    if sys.platform.startswith("win"):
        pytest.skip("fake ffmpeg is a POSIX shell script")

    script = tmp_path / "bin" / "ffmpeg"
    script.parent.mkdir()
    script.write_text(FAKE_FFMPEG)
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    monkeypatch.setattr(settings, "FFMPEG_BIN", str(script))

    def set_mode(mode: str) -> Path:
        monkeypatch.setenv("FAKE_FFMPEG_MODE", mode)
        return script

    set_mode("ok")
    return set_mode


@pytest.fixture
def missing_ffmpeg(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "FFMPEG_BIN", str(tmp_path / "no-such-ffmpeg"))


class FakeUploader:
    def __init__(self, fail: Exception = None):
        self.fail = fail
        self.calls = []

    def upload(self, file_path, folder=None):
        path = Path(file_path)
        self.calls.append((path, folder, path.exists() and path.stat().st_size))
        if self.fail is not None:
            raise self.fail
        return CloudinaryInfo(
            url="https://res.cloudinary.com/demo/video/upload/v1/finalVideo/merged.mp4",
            public_id="text-to-video/finalVideo/merged",
            duration=12.5,
            format="mp4",
            bytes=path.stat().st_size,
        )


@pytest.fixture
def uploader() -> FakeUploader:
    return FakeUploader()


@pytest.fixture
def failing_uploader() -> FakeUploader:
    return FakeUploader(fail=UploadError("Invalid cloud_name"))


@pytest.fixture
def fake_download(monkeypatch):
    """Replace network downloads inside the pipeline with local writes."""
    from backend.app.services import pipeline

    calls = []

    def _download(url, dest_path):
        calls.append(url)
        Path(dest_path).write_bytes(b"media:" + url.encode())
        return Path(dest_path)

    monkeypatch.setattr(pipeline, "download_file", _download)
    return calls


@pytest.fixture
def leftover_files(temp_dir):
    """Names of files still present in the scratch directory."""
    def _list():
        if not temp_dir.exists():
            return []
        return sorted(os.listdir(temp_dir))
    return _list
