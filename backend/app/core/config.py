"""
설정 로더

목표
- Python 3.9+에서도 문제 없이 돌아가게(= `str | None` 같은 3.10+ 문법 금지)
- .env가 좀 지저분해도, 깨지지 않게(extra ignore)
- 값은 호출 시점에 settings에서 읽는다 (테스트에서 덮어쓰기 가능)
"""

from __future__ import annotations

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # .env 사용 + 알 수 없는 키 무시
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # --- Server ---
    HOST: str = "127.0.0.1"
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"

    # --- Paths ---
    # 작업용 임시 폴더 (job마다 파일 3개: video/audio/merged)
    TEMP_DIR: str = "temp"

    # --- Download ---
    DOWNLOAD_CONNECT_TIMEOUT: float = 30.0  # 연결/소켓 읽기 1회 제한(초)
    DOWNLOAD_TOTAL_TIMEOUT: float = 60.0    # 다운로드 전체 제한(초)
    DOWNLOAD_CHUNK_SIZE: int = 64 * 1024

    # --- FFmpeg ---
    FFMPEG_BIN: str = "ffmpeg"
    AUDIO_BITRATE: str = "192k"
    MUX_TIMEOUT: float = 300.0  # 5분

    # --- Cloudinary ---
    # 셋 다 비어 있으면 SDK가 CLOUDINARY_URL 환경변수를 직접 읽는다
    CLOUDINARY_CLOUD_NAME: Optional[str] = Field(default=None)
    CLOUDINARY_API_KEY: Optional[str] = Field(default=None)
    CLOUDINARY_API_SECRET: Optional[str] = Field(default=None)
    CLOUDINARY_FOLDER: str = "/text-to-video/finalVideo"


settings = Settings()
