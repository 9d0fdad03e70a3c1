"""
Pydantic 스키마

- 요청/응답 필드 이름은 기존 클라이언트와 맞춰 camelCase 그대로(videoUrl, audioUrl)
- 요청 필드는 파싱 단계에선 아무 값이나 허용 → 라우터가 400/500을 직접 정한다
"""

from typing import Any, Optional

from pydantic import BaseModel, Field


class MergeRequest(BaseModel):
    videoUrl: Optional[Any] = Field(default=None, description="원본 영상 URL")
    audioUrl: Optional[Any] = Field(default=None, description="덮어씌울 오디오 URL")


class CloudinaryInfo(BaseModel):
    url: Optional[str] = Field(default=None, description="업로드된 파일 URL (https)")
    public_id: Optional[str] = None
    duration: Optional[float] = None
    format: Optional[str] = None
    bytes: Optional[int] = None


class MergeResponse(BaseModel):
    success: bool = True
    message: str = "Audio and video merged and uploaded successfully"
    cloudinary: CloudinaryInfo


class MergeErrorResponse(BaseModel):
    success: bool = False
    error: str = "Failed to merge audio and video"
    details: str
