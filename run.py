#!/usr/bin/env python3
"""
API 서버 실행 스크립트.

- uvicorn을 서브프로세스로 띄우고, Ctrl+C/SIGTERM 받으면 같이 정리
- 포트/호스트는 .env(또는 환경변수)의 HOST, PORT

실행:
  python run.py
"""

import signal
import subprocess
import sys
from pathlib import Path

from backend.app.core.config import settings

PROJECT_ROOT = Path(__file__).parent

processes: list[subprocess.Popen] = []


def shutdown(*_):
    print("\n🛑 종료 신호 받음. 프로세스 정리 중...")
    for p in processes:
        if p.poll() is None:
            p.terminate()
    for p in processes:
        try:
            p.wait(timeout=5)
        except subprocess.TimeoutExpired:
            p.kill()
    print("✅ 종료 완료")
    sys.exit(0)


def main():
    # Ctrl+C / 종료 시그널 처리
    signal.signal(signal.SIGINT, shutdown)
    signal.signal(signal.SIGTERM, shutdown)

    api_cmd = [
        sys.executable, "-m", "uvicorn",
        "backend.app.main:app",
        "--host", settings.HOST,
        "--port", str(settings.PORT),
    ]
    print("🚀 Starting FastAPI:", " ".join(api_cmd))
    processes.append(subprocess.Popen(api_cmd, cwd=str(PROJECT_ROOT)))
    print(f"✅ Server Started On Port:- {settings.PORT}")

    for p in processes:
        p.wait()


if __name__ == "__main__":
    main()
