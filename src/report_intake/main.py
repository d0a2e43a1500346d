"""
FastAPI 应用入口

客户回报接收服务主应用
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .api.routes import report_router
from .api.schemas.response import HealthCheckResponse
from .config import Settings
from .pipeline import ReportPipeline
from .utils.logger import get_logger, setup_logging

logger = get_logger(__name__)

APP_VERSION = "1.0.0"


def create_app(pipeline: Optional[ReportPipeline] = None) -> FastAPI:
    """
    创建 FastAPI 应用

    Args:
        pipeline: 预先创建的流水线（测试时注入）；为空时启动阶段按环境配置创建
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.pipeline is None:
            settings = Settings()
            setup_logging(
                log_level=settings.log.log_level,
                log_file=settings.log.log_file,
                log_format=settings.log.log_format,
            )
            app.state.pipeline = ReportPipeline(settings)
            logger.info(
                f"启动 {settings.app.app_name} v{settings.app.app_version} "
                f"(环境: {settings.app.app_env})"
            )

        yield

        logger.info("关闭客户回报接收服务")

    app = FastAPI(
        title="report-intake",
        version=APP_VERSION,
        description="客户回报接收、AI 摘要与 Discord 通知服务",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.pipeline = pipeline

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """全局异常处理器"""
        logger.error(f"未处理的异常: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "code": 500,
                "message": "内部服务器错误",
                "data": {"error": str(exc)},
            },
        )

    @app.get("/health", response_model=HealthCheckResponse)
    async def health_check():
        """健康检查接口"""
        return HealthCheckResponse(
            status="healthy",
            version=APP_VERSION,
            timestamp=datetime.now(timezone.utc),
        )

    @app.get("/")
    async def root():
        """根路径"""
        return {
            "name": "report-intake",
            "version": APP_VERSION,
            "status": "running",
            "docs": "/docs",
        }

    app.include_router(report_router)
    return app


app = create_app()

# 如果直接运行此文件
if __name__ == "__main__":
    import uvicorn

    _settings = Settings()
    uvicorn.run(
        "report_intake.main:app",
        host=_settings.app.host,
        port=_settings.app.port,
        reload=_settings.app.app_env == "development",
    )
