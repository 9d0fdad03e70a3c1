"""
Cloudinary 업로드

- 로컬 파일 경로 -> Cloudinary(video) 업로드 -> CloudinaryInfo
- 파일이 없거나 0바이트면 업로드하지 않고 UploadError
- 나중에 S3 등으로 바꿀 때는 upload(path, folder) 모양만 맞추면 됨
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import cloudinary
import cloudinary.uploader

from backend.app.core.config import settings
from backend.app.core.errors import UploadError
from backend.app.core.logger import get_logger
from backend.app.schemas import CloudinaryInfo

logger = get_logger(__name__)


def _configure() -> None:
    # 키가 비어 있으면 SDK 기본값(CLOUDINARY_URL) 사용
    if settings.CLOUDINARY_CLOUD_NAME:
        cloudinary.config(
            cloud_name=settings.CLOUDINARY_CLOUD_NAME,
            api_key=settings.CLOUDINARY_API_KEY,
            api_secret=settings.CLOUDINARY_API_SECRET,
            secure=True,
        )


class CloudinaryUploader:
    def __init__(self) -> None:
        _configure()

    def upload(self, file_path: Path, folder: Optional[str] = None) -> CloudinaryInfo:
        path = Path(file_path)
        if not path.exists():
            raise UploadError("Output file does not exist")

        size = path.stat().st_size
        if size == 0:
            raise UploadError("Output file is empty")

        logger.info("Uploading file of size: %d bytes", size)
        try:
            result = cloudinary.uploader.upload(
                str(path),
                resource_type="video",
                folder=folder or settings.CLOUDINARY_FOLDER,
            )
        except Exception as e:
            # SDK가 던지는 예외 종류가 다양해서 한 번에 감싼다
            raise UploadError(e) from e

        return CloudinaryInfo(
            url=result.get("secure_url") or result.get("url"),
            public_id=result.get("public_id"),
            duration=result.get("duration"),
            format=result.get("format"),
            bytes=result.get("bytes"),
        )


def get_uploader() -> CloudinaryUploader:
    return CloudinaryUploader()
