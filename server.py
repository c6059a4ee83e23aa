# server.py
import logging
import os
from contextlib import asynccontextmanager

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from tortoise import Tortoise

from exceptions import (
    AuthorizationError,
    ConflictError,
    EconomyError,
    InvalidRequestError,
    ResourceNotFoundError,
)
from routers import admin_router, economy_router, trade_router
from service.background_tasks import BackgroundTasks

# 로그 기본 설정
logging.basicConfig(
    level=logging.INFO,  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)

load_dotenv()

logger = logging.getLogger(__name__)

ERROR_STATUS = (
    (InvalidRequestError, 400),
    (ConflictError, 409),
    (ResourceNotFoundError, 404),
    (AuthorizationError, 403),
)


def get_database_url() -> str:
    """환경변수로 DB URL 구성 (DATABASE_DSN이 있으면 그대로 사용)"""
    dsn = os.getenv("DATABASE_DSN")
    if dsn:
        return dsn

    host = os.getenv("DATABASE_URL")
    user = os.getenv("DATABASE_USER")
    password = os.getenv("DATABASE_PASSWORD")
    port = int(os.getenv("DATABASE_PORT") or 0)
    database = os.getenv("DATABASE_TABLE")

    if not host or not user or not password or not port or not database:
        raise RuntimeError("데이터 베이스 설정에 필요한 정보가 부족합니다 .env를 확인해주세요")

    return f"postgres://{user}:{password}@{host}:{port}/{database}"


def status_for(error: EconomyError) -> int:
    for error_type, status_code in ERROR_STATUS:
        if isinstance(error, error_type):
            return status_code
    return 500


async def economy_error_handler(request: Request, exc: EconomyError) -> JSONResponse:
    status_code = status_for(exc)
    if status_code == 500:
        logger.error(f"Unhandled economy error on {request.url.path}: {exc.message}", exc_info=exc)
    return JSONResponse(status_code=status_code, content={"error": exc.message})


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = errors[0].get("msg", "잘못된 요청입니다") if errors else "잘못된 요청입니다"
    return JSONResponse(status_code=400, content={"error": message})


def create_app(init_db: bool = True, run_background_tasks: bool = True) -> FastAPI:
    """
    FastAPI 앱 생성

    Args:
        init_db: 시작 시 Tortoise 연결 여부 (테스트는 직접 초기화)
        run_background_tasks: 일괄 저장/거래 만료 작업 실행 여부
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if init_db:
            logging.info("데이터 베이스 연결 시작")
            await Tortoise.init(
                db_url=get_database_url(),
                modules={"models": ["models"]}
            )
            await Tortoise.generate_schemas()
            logging.info("데이터 베이스 연결")

        background = BackgroundTasks() if run_background_tasks else None
        if background:
            background.start()

        try:
            yield
        finally:
            if background:
                await background.stop()
            if init_db:
                await Tortoise.close_connections()
            logging.info("Stop Server")

    app = FastAPI(title="Economy Engine", lifespan=lifespan)
    app.add_exception_handler(EconomyError, economy_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    app.include_router(economy_router)
    app.include_router(trade_router)
    app.include_router(admin_router)
    return app


if __name__ == "__main__":
    uvicorn.run(
        create_app(),
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT") or 8080),
    )
