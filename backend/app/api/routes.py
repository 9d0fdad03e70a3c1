"""
API 라우터

- POST /v1/api/mergeVideoAudio  {videoUrl, audioUrl}
- 다운로드 -> FFmpeg 머지 -> Cloudinary 업로드 -> 결과 반환
- 핸들러는 일반 def: 블로킹 작업이라 FastAPI가 스레드풀에서 돌린다
- 바디는 어떤 JSON이든 받는다: 필드가 비면 400, 이상한 값이면 파이프라인에서 500
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from backend.app.core.errors import InvalidMergeRequest
from backend.app.core.logger import get_logger
from backend.app.schemas import MergeErrorResponse, MergeRequest, MergeResponse
from backend.app.services.pipeline import merge_video_and_audio
from backend.app.services.uploader import CloudinaryUploader, get_uploader

logger = get_logger(__name__)
router = APIRouter(prefix="/v1/api", tags=["merge"])


def _as_url(value: Any) -> str:
    # 빈 값(None, "", 0, false, 공백)은 누락으로 본다
    if isinstance(value, str):
        return value.strip()
    return str(value) if value else ""


def _require_urls(payload: Any) -> tuple[str, str]:
    req = MergeRequest.model_validate(payload if isinstance(payload, dict) else {})
    video_url = _as_url(req.videoUrl)
    audio_url = _as_url(req.audioUrl)
    if not video_url or not audio_url:
        raise InvalidMergeRequest()
    return video_url, audio_url


@router.post("/mergeVideoAudio", response_model=MergeResponse)
def merge_video_audio(
    payload: Any = Body(default=None),
    uploader: CloudinaryUploader = Depends(get_uploader),
):
    # 0) 입력 검증 (파이프라인까지 안 감)
    try:
        video_url, audio_url = _require_urls(payload)
    except InvalidMergeRequest as e:
        return JSONResponse(status_code=400, content={"error": str(e)})

    # 1) 머지 + 업로드
    try:
        info = merge_video_and_audio(video_url, audio_url, uploader)
    except Exception as e:
        logger.exception("Merge process failed")
        body = MergeErrorResponse(details=str(e))
        return JSONResponse(status_code=500, content=body.model_dump())

    return MergeResponse(cloudinary=info)
