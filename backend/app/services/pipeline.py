"""
머지 파이프라인

순서 (상태):
  CREATED -> DOWNLOADING_VIDEO -> DOWNLOADING_AUDIO -> MUXING -> UPLOADING -> CLEANUP -> DONE

- 어느 단계든 처음 실패하면 남은 단계는 건너뛰고 바로 CLEANUP
- CLEANUP은 성공/실패 상관없이 항상 실행, 끝나면 DONE
- 재시도 없음
"""

from __future__ import annotations

import enum
from typing import Optional

from backend.app.core.config import settings
from backend.app.core.logger import get_logger
from backend.app.schemas import CloudinaryInfo
from backend.app.services.fetcher import download_file
from backend.app.services.storage import Job, cleanup_job, prepare_job
from backend.app.services.uploader import CloudinaryUploader
from backend.app.services.video import merge_audio_video, verify_output

logger = get_logger(__name__)


class JobState(str, enum.Enum):
    CREATED = "created"
    DOWNLOADING_VIDEO = "downloading_video"
    DOWNLOADING_AUDIO = "downloading_audio"
    MUXING = "muxing"
    UPLOADING = "uploading"
    CLEANUP = "cleanup"
    DONE = "done"


_ORDER = list(JobState)


class JobRun:
    """job 하나의 상태 기록 (앞으로만 진행, 같은 상태 재진입 불가)"""

    def __init__(self, job: Job):
        self.job = job
        self.state = JobState.CREATED
        self.history = [JobState.CREATED]
        self.error: Optional[BaseException] = None
        self.result: Optional[CloudinaryInfo] = None

    def advance(self, state: JobState) -> None:
        if _ORDER.index(state) <= _ORDER.index(self.state):
            raise RuntimeError(f"invalid transition {self.state.value} -> {state.value}")
        logger.info("[%s] %s -> %s", self.job.job_id, self.state.value, state.value)
        self.state = state
        self.history.append(state)


def execute_job(
    run: JobRun,
    uploader: CloudinaryUploader,
    folder: Optional[str] = None,
) -> CloudinaryInfo:
    job = run.job
    try:
        logger.info("[%s] Starting merge process...", job.job_id)

        # 1) 다운로드 (video -> audio 순서)
        run.advance(JobState.DOWNLOADING_VIDEO)
        download_file(job.video_url, job.video_path)

        run.advance(JobState.DOWNLOADING_AUDIO)
        download_file(job.audio_url, job.audio_path)

        # 2) 머지
        run.advance(JobState.MUXING)
        merge_audio_video(job.video_path, job.audio_path, job.output_path)

        # 3) 업로드 (출력 파일 확인 후에만)
        run.advance(JobState.UPLOADING)
        verify_output(job.output_path)
        run.result = uploader.upload(job.output_path, folder or settings.CLOUDINARY_FOLDER)
    except Exception as e:
        run.error = e
        logger.error("[%s] Merge process failed at %s: %s", job.job_id, run.state.value, e)
        raise
    finally:
        run.advance(JobState.CLEANUP)
        cleanup_job(job)
        run.advance(JobState.DONE)

    logger.info("[%s] Merge completed successfully!", job.job_id)
    return run.result


def merge_video_and_audio(
    video_url: str,
    audio_url: str,
    uploader: CloudinaryUploader,
    folder: Optional[str] = None,
) -> CloudinaryInfo:
    """영상+오디오 URL -> 머지 -> 업로드 결과. 실패하면 MergeError 계열 예외"""
    job = prepare_job(video_url, audio_url)
    return execute_job(JobRun(job), uploader, folder=folder)
