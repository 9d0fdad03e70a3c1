"""
머지 파이프라인 예외

- 전부 MergeError를 상속 → 라우터에서 한 번에 잡아서 500으로 변환
- str(e)가 그대로 응답의 details로 나가므로 메시지는 사람이 읽을 수 있게
"""

from __future__ import annotations

from typing import Optional


class MergeError(Exception):
    """Base error for the merge pipeline."""


class InvalidMergeRequest(MergeError):
    """Raised at the API boundary when videoUrl/audioUrl is missing."""

    def __init__(self, message: str = "Both videoUrl and audioUrl are required"):
        super().__init__(message)


class FetchError(MergeError):
    """Raised when a remote resource cannot be downloaded."""

    def __init__(self, url: str, cause: object):
        self.url = url
        self.cause = cause
        super().__init__(f"Failed to download file from {url}: {cause}")


class StageTimeoutError(MergeError):
    """Raised when a pipeline stage exceeds its time budget."""

    def __init__(self, stage: str, message: str, url: Optional[str] = None):
        self.stage = stage
        self.url = url
        super().__init__(message)


class ToolUnavailableError(MergeError):
    """Raised when the ffmpeg executable cannot be invoked at all."""

    def __init__(self, cause: object = None):
        self.cause = cause
        super().__init__("FFmpeg is not installed or not available in PATH")


class ToolExecutionError(MergeError):
    """Raised when ffmpeg exits with a non-zero code."""

    def __init__(self, exit_code: int, diagnostics: str):
        self.exit_code = exit_code
        self.diagnostics = diagnostics
        super().__init__(f"FFmpeg failed with code {exit_code}. Error: {diagnostics}")


class OutputVerificationError(MergeError):
    """Raised when ffmpeg reports success but the output file is missing or empty."""

    def __init__(self, diagnostics: str = ""):
        self.diagnostics = diagnostics
        super().__init__("Output file was not created or is empty")


class UploadError(MergeError):
    """Raised when the delivery service rejects or cannot receive the file."""

    def __init__(self, cause: object):
        self.cause = cause
        super().__init__(f"Cloudinary upload failed: {cause}")
