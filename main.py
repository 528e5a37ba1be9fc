"""
FileNote FastAPI Application
메인 애플리케이션 파일 - 서버 설정 및 라우트 구성
"""

from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.responses import JSONResponse

# .env 파일 로드 (최우선)
load_dotenv()

from src.config.resources import ResourceConfig
from src.resources.logging import initialize_logging, shutdown_logging
from src.middlewares import log_requests
from src.resources.resource_provider import ResourceProvider
from src.routes.helpers.response_helper import register_exception_handlers
from src.routes.route_for_api import router as api_router

# 애플리케이션 메타데이터
APP_INFO = {
    "title": "FileNote API",
    "description": "FileNote - 개인 파일 보관함 및 노트 API Server",
    "version": "1.0.0",
}


def create_app(config: Optional[ResourceConfig] = None, start_reconciler: bool = True) -> FastAPI:
    """
    FastAPI 애플리케이션 생성

    Args:
        config: 리소스 설정 (생략 시 환경변수)
        start_reconciler: 주기 Reconciler 실행 여부 (테스트에서는 끔)
    """
    config = config or ResourceConfig.from_env()
    initialize_logging(config.logging)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        애플리케이션 라이프사이클 관리
        시작 시 리소스 초기화, 종료 시 정리
        """
        resources = ResourceProvider(config)
        await resources.initialize_all(start_reconciler=start_reconciler)
        app.state.resources = resources
        try:
            yield
        finally:
            # 모든 리소스 정리
            await resources.close_all()
            shutdown_logging()

    # FastAPI 애플리케이션 인스턴스 생성
    app = FastAPI(
        **APP_INFO,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json"
    )

    # 미들웨어 / 예외 핸들러 등록
    app.middleware("http")(log_requests)
    register_exception_handlers(app)

    # 루트 엔드포인트
    @app.get("/", response_model=Dict[str, Any])
    async def root():
        """
        API 루트 엔드포인트
        서비스 정보 및 상태 반환
        """
        return {
            "service": APP_INFO["title"],
            "version": APP_INFO["version"],
            "status": "healthy",
            "message": "Welcome to FileNote API"
        }

    # 헬스체크 엔드포인트
    @app.get("/health", response_model=Dict[str, Any])
    async def health_check():
        """
        서비스 헬스체크 엔드포인트
        모든 리소스의 상태를 확인하고 반환
        """
        resources: ResourceProvider = app.state.resources
        try:
            health_results = await resources.health_check_all()

            return {
                "status": "healthy" if health_results.get("overall", False) else "unhealthy",
                "resources": health_results,
                "initialized": resources.get_status(),
                "service": {
                    "name": APP_INFO["title"],
                    "version": APP_INFO["version"]
                }
            }

        except Exception as e:
            return JSONResponse(
                status_code=503,
                content={
                    "status": "unhealthy",
                    "error": "Health check failed",
                    "message": str(e)
                }
            )

    # API 정보 엔드포인트
    @app.get("/info", response_model=Dict[str, Any])
    async def api_info():
        """
        API 정보 엔드포인트
        서비스 메타데이터 반환
        """
        return {
            **APP_INFO,
            "endpoints": {
                "docs": "/docs",
                "redoc": "/redoc",
                "openapi": "/openapi.json",
                "health": "/health",
                "files": "/api/files",
                "notes": "/api/notes",
                "search": "/api/search",
                "dashboard": "/api/dashboard/stats"
            }
        }

    # 라우터 등록
    app.include_router(api_router)
    return app


if __name__ == "__main__":
    import argparse

    import uvicorn

    parser = argparse.ArgumentParser(add_help=True)
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload for development")
    args = parser.parse_args()

    server_config = ResourceConfig.from_env().server
    uvicorn.run(
        "main:create_app" if args.reload else create_app(),
        factory=args.reload,
        host=server_config.host,
        port=server_config.port,
        log_level="info",
        access_log=True,
        reload=args.reload
    )
