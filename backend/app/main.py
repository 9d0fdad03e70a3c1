"""
FastAPI 엔트리포인트

- /v1/api/mergeVideoAudio : 영상 + 오디오 머지 후 Cloudinary 업로드
- /health                 : 헬스체크
"""

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.app.core.config import settings
from backend.app.api.routes import router as api_router
from backend.app.core.logger import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    # 임시 폴더는 시작할 때 한 번 만들어 둔다 (job마다 다시 확인함)
    Path(settings.TEMP_DIR).mkdir(parents=True, exist_ok=True)
    logger.info("Server started, temp dir: %s", settings.TEMP_DIR)
    yield


app = FastAPI(title="Video Audio Merger", version="0.1.0", lifespan=lifespan)

# CORS: 다른 오리진의 프론트에서 바로 호출
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


@app.get("/health")
def health():
    return {"ok": True}
