import uvicorn
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from vocaman.api.api import api_router
from vocaman.core.config import settings
from vocaman.core.exceptions import VocamanError
from vocaman.db.database import SessionLocal
from vocaman.db.init_db import init_db

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    应用启动时建表（已存在的表不受影响）。
    """
    logger.info("初始化数据库表")
    init_db()
    yield
    logger.info("应用关闭")


app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_V2_STR}/openapi.json",
    lifespan=lifespan,
)

# Set all CORS enabled origins
if settings.BACKEND_CORS_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(origin) for origin in settings.BACKEND_CORS_ORIGINS],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"code": status_code, "message": message, "data": None},
    )


@app.exception_handler(VocamanError)
async def vocaman_error_handler(request: Request, exc: VocamanError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return _error_response(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    details = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', []) if part != 'body')}: {err.get('msg')}"
        for err in exc.errors()
    )
    return _error_response(status.HTTP_400_BAD_REQUEST, f"Invalid request: {details}")


@app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception(f"{request.method} {request.url.path} store error: {exc}")
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "The server could not complete the request")


app.include_router(api_router, prefix=settings.API_V2_STR)

# 音频文件静态访问
app.mount(
    f"{settings.API_V2_STR}/audio",
    StaticFiles(directory=settings.AUDIO_DIR, check_dir=False),
    name="audio",
)


@app.get("/api/health", tags=["health"])
def health_check():
    """数据库连通性检查"""
    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Health check failed: {e}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "ERROR", "dbConnection": False},
        )
    finally:
        db.close()
    return {"status": "OK", "dbConnection": True}


@app.get("/", tags=["health"])
def root():
    return {"message": f"Welcome to {settings.PROJECT_NAME}"}


if __name__ == '__main__':
    uvicorn.run(
        'vocaman.main:app',
        host='0.0.0.0',
        port=settings.BACKEND_PORT,
        reload=True
    )
