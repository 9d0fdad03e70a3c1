"""
원격 파일 다운로드 (requests 스트리밍)

타임아웃 규칙
- 연결/소켓 읽기 1회: settings.DOWNLOAD_CONNECT_TIMEOUT (기본 30초)
- 다운로드 전체: settings.DOWNLOAD_TOTAL_TIMEOUT (기본 60초), 타이머 + 청크마다 확인
- 어떤 타임아웃이든 StageTimeoutError(stage="download")
- 그 밖의 네트워크 실패/비 2xx 응답은 FetchError

중간에 실패해서 남은 파일은 여기서 지우지 않는다 (정리는 storage.cleanup_files 담당)
"""

from __future__ import annotations

import socket
import threading
import time
from pathlib import Path

import requests
from urllib3.exceptions import ReadTimeoutError

from backend.app.core.config import settings
from backend.app.core.errors import FetchError, StageTimeoutError
from backend.app.core.logger import get_logger

logger = get_logger(__name__)

STAGE = "download"


def _timeout_error(url: str) -> StageTimeoutError:
    return StageTimeoutError(STAGE, f"Download timeout: {url}", url=url)


def _is_read_timeout(e: requests.exceptions.ConnectionError) -> bool:
    # 스트리밍 도중 읽기 타임아웃은 requests가 ConnectionError로 감싸서 던진다
    return any(isinstance(arg, ReadTimeoutError) for arg in e.args)


def _abort_stream(r: requests.Response, expired: threading.Event) -> None:
    """전체 제한 시간 초과: 소켓을 끊어서 막혀 있는 read를 깨운다"""
    expired.set()
    conn = getattr(getattr(r, "raw", None), "connection", None)
    sock = getattr(conn, "sock", None)
    if sock is None:
        r.close()
        return
    try:
        sock.shutdown(socket.SHUT_RDWR)
    except OSError as e:
        # 이미 닫힌 소켓
        logger.debug("소켓 shutdown 실패: %s", e)


def download_file(url: str, dest_path: Path) -> Path:
    dest_path = Path(dest_path)
    connect_timeout = float(settings.DOWNLOAD_CONNECT_TIMEOUT)
    total_timeout = float(settings.DOWNLOAD_TOTAL_TIMEOUT)
    chunk_size = int(settings.DOWNLOAD_CHUNK_SIZE)

    started = time.monotonic()
    expired = threading.Event()
    written = 0

    try:
        with requests.get(url, stream=True, timeout=(connect_timeout, connect_timeout)) as r:
            r.raise_for_status()

            # read는 청크가 다 찰 때까지 블록됨 → 전체 제한은 타이머가 소켓을 끊어서 건다
            remaining = max(0.0, total_timeout - (time.monotonic() - started))
            timer = threading.Timer(remaining, _abort_stream, args=(r, expired))
            timer.daemon = True
            timer.start()
            try:
                with open(dest_path, "wb") as f:
                    for chunk in r.iter_content(chunk_size=chunk_size):
                        if chunk:
                            f.write(chunk)
                            written += len(chunk)
                        if expired.is_set() or time.monotonic() - started > total_timeout:
                            raise _timeout_error(url)
            finally:
                timer.cancel()

            # 길이 모르는 응답은 소켓이 끊기면 그냥 EOF로 끝난다
            if expired.is_set():
                raise _timeout_error(url)
    except requests.exceptions.Timeout as e:
        raise _timeout_error(url) from e
    except requests.exceptions.ConnectionError as e:
        if expired.is_set() or _is_read_timeout(e):
            raise _timeout_error(url) from e
        raise FetchError(url, e) from e
    except (requests.exceptions.RequestException, OSError) as e:
        # OSError: 로컬 파일 쓰기 실패
        if expired.is_set():
            raise _timeout_error(url) from e
        raise FetchError(url, e) from e
    except ValueError as e:
        # 타이머가 닫은 스트림을 읽은 경우
        if expired.is_set():
            raise _timeout_error(url) from e
        raise

    logger.info("다운로드 완료: %s -> %s (%d bytes, %.1fs)",
                url, dest_path, written, time.monotonic() - started)
    return dest_path
