"""
영상 + 오디오 머지 - FFmpeg

고정 커맨드 (호환성 때문에 그대로 유지):
  ffmpeg -i <video> -i <audio>
         -c:v copy -c:a aac -b:a 192k
         -shortest
         -avoid_negative_ts make_zero -fflags +genpts
         -movflags +faststart
         -y <output>

- video는 재인코딩 없이 복사, audio만 AAC로 인코딩
- 둘 중 짧은 쪽 길이에 맞춤(-shortest)
- 출력은 웹 스트리밍용으로 moov를 앞으로(+faststart)

실행 규칙
- 실행 전에 `ffmpeg -version`으로 존재 확인 (없으면 ToolUnavailableError)
- stdout/stderr는 communicate()가 계속 읽어줌 (파이프가 차서 멈추는 일 없음)
- settings.MUX_TIMEOUT 넘으면 kill → StageTimeoutError(stage="mux")
- returncode 0이어도 출력 파일이 없거나 0바이트면 실패
"""

from __future__ import annotations

import subprocess
import time
from pathlib import Path

from backend.app.core.config import settings
from backend.app.core.errors import (
    OutputVerificationError,
    StageTimeoutError,
    ToolExecutionError,
    ToolUnavailableError,
)
from backend.app.core.logger import get_logger

logger = get_logger(__name__)

STAGE = "mux"
PROBE_TIMEOUT = 30


def check_ffmpeg() -> str:
    """ffmpeg가 실행 가능한지 확인하고 버전 첫 줄을 돌려준다"""
    cmd = [settings.FFMPEG_BIN, "-version"]
    try:
        p = subprocess.run(cmd, capture_output=True, text=True, timeout=PROBE_TIMEOUT)
    except (OSError, subprocess.TimeoutExpired) as e:
        raise ToolUnavailableError(e) from e
    if p.returncode != 0:
        raise ToolUnavailableError(p.stderr.strip() or f"exit code {p.returncode}")

    version = (p.stdout or "").splitlines()[0] if p.stdout else ""
    logger.debug("FFmpeg 확인: %s", version)
    return version


def build_merge_command(video_path: Path, audio_path: Path, output_path: Path) -> list[str]:
    return [
        settings.FFMPEG_BIN,
        "-i", str(video_path),   # 입력 0: video
        "-i", str(audio_path),   # 입력 1: audio
        "-c:v", "copy",
        "-c:a", "aac",
        "-b:a", settings.AUDIO_BITRATE,
        "-shortest",
        "-avoid_negative_ts", "make_zero",
        "-fflags", "+genpts",
        "-movflags", "+faststart",
        "-y",
        str(output_path),
    ]


def verify_output(output_path: Path, diagnostics: str = "") -> int:
    """출력 파일이 있고 0바이트가 아니면 크기를 반환"""
    path = Path(output_path)
    try:
        size = path.stat().st_size if path.is_file() else 0
    except OSError:
        size = 0
    if size <= 0:
        raise OutputVerificationError(diagnostics)
    return size


def _run_with_timeout(cmd: list[str], timeout: float) -> tuple[int, str, str]:
    try:
        p = subprocess.Popen(
            cmd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            errors="replace",
        )
    except OSError as e:
        raise ToolUnavailableError(e) from e

    try:
        stdout, stderr = p.communicate(timeout=timeout)
    except subprocess.TimeoutExpired:
        p.kill()
        # 좀비 안 남게 회수까지
        p.communicate()
        logger.error("FFmpeg %.0f초 초과로 강제 종료 (pid=%s)", timeout, p.pid)
        raise StageTimeoutError(STAGE, "FFmpeg process timeout")
    except BaseException:
        p.kill()
        p.wait()
        raise

    return p.returncode, stdout or "", stderr or ""


def merge_audio_video(video_path: Path, audio_path: Path, output_path: Path) -> Path:
    check_ffmpeg()

    cmd = build_merge_command(video_path, audio_path, output_path)
    logger.info("FFmpeg 실행: %s", " ".join(cmd))

    started = time.monotonic()
    returncode, _stdout, stderr = _run_with_timeout(cmd, float(settings.MUX_TIMEOUT))

    if returncode != 0:
        raise ToolExecutionError(returncode, stderr)

    size = verify_output(output_path, stderr)
    logger.info("머지 완료: %s (%d bytes, %.1fs)", output_path, size, time.monotonic() - started)
    return Path(output_path)
