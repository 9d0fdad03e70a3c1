"""
스토리지(작업 폴더) 유틸

- job 하나 = 파일 3개 (video/audio 입력 + merged 출력)
- 전부 settings.TEMP_DIR 아래, job_id로 이름을 나눠서 동시 요청끼리 안 겹침
- 입력은 포맷을 모르니 .tmp, 출력은 ffmpeg 출력 컨테이너에 맞춰 .mp4
- 정리(cleanup)는 이 모듈 한 곳에서만 한다
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional, Tuple

from backend.app.core.config import settings
from backend.app.core.logger import get_logger

logger = get_logger(__name__)

OUTPUT_EXT = ".mp4"


@dataclass
class Job:
    job_id: str
    video_url: str
    audio_url: str
    video_path: Path
    audio_path: Path
    output_path: Path
    cleaned: bool = field(default=False, repr=False)

    @property
    def paths(self) -> Tuple[Path, Path, Path]:
        return (self.video_path, self.audio_path, self.output_path)


def temp_root() -> Path:
    return Path(settings.TEMP_DIR)


def job_paths(job_id: str) -> Tuple[Path, Path, Path]:
    # job_id -> (video, audio, output) 경로 규칙
    root = temp_root()
    return (
        root / f"video_{job_id}.tmp",
        root / f"audio_{job_id}.tmp",
        root / f"merged_{job_id}{OUTPUT_EXT}",
    )


def prepare_job(video_url: str, audio_url: str, job_id: Optional[str] = None) -> Job:
    """임시 폴더를 만들고(이미 있으면 그대로) job 경로를 발급"""
    job_id = job_id or str(uuid.uuid4())
    temp_root().mkdir(parents=True, exist_ok=True)

    video_path, audio_path, output_path = job_paths(job_id)
    return Job(
        job_id=job_id,
        video_url=video_url,
        audio_url=audio_url,
        video_path=video_path,
        audio_path=audio_path,
        output_path=output_path,
    )


def cleanup_files(paths: Iterable[Path]) -> None:
    """있으면 지우고, 실패해도 경고만 남긴다 (원래 에러를 가리면 안 됨)"""
    for p in paths:
        path = Path(p)
        try:
            if path.exists():
                path.unlink()
                logger.info("Cleaned up: %s", path)
        except OSError as e:
            logger.warning("Failed to cleanup file %s: %s", path, e)


def cleanup_job(job: Job) -> None:
    if job.cleaned:
        return
    job.cleaned = True
    cleanup_files(job.paths)

