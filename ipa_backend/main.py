"""
IPA Lookup Backend 主程序入口
FastAPI 应用程序启动和配置
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ipa_backend.config.settings import settings
from ipa_backend.core.app_state import AppState
from ipa_backend.routers import audio_router, suggest_ws, word_router

# 配置应用日志
logging.basicConfig(
    level=settings.log_level.upper(),
    format='%(levelname)s:%(name)s:%(message)s'
)

logger = logging.getLogger(__name__)


def create_app(state: Optional[AppState] = None) -> FastAPI:
    """
    创建 FastAPI 应用

    Args:
        state: 应用状态，默认按全局设置创建（测试时注入）
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """应用程序生命周期管理"""
        logger.info(f"🚀 {settings.app_name} 正在启动... 版本: {settings.version}")
        app_state = state if state is not None else AppState(settings)
        app_state.startup()
        app.state.ipa = app_state

        yield

        await app_state.shutdown()
        logger.info(f"👋 {settings.app_name} 正在关闭...")

    app = FastAPI(
        title=settings.app_name,
        description=settings.description,
        version=settings.version,
        debug=settings.debug,
        lifespan=lifespan
    )

    # 配置 CORS 中间件
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # 注册路由
    app.include_router(word_router.router)
    app.include_router(audio_router.router)
    app.include_router(suggest_ws.router)

    @app.get("/")
    async def root():
        """根路径 - 健康检查"""
        return {
            "app": settings.app_name,
            "version": settings.version,
            "status": "running",
            "message": "IPA Lookup Backend API 正在运行"
        }

    @app.get("/health")
    async def health_check():
        """健康检查端点"""
        return {
            "status": "healthy",
            "service": settings.app_name,
            "version": settings.version
        }

    return app


app = create_app()


def run():
    """命令行启动入口"""
    logger.info(f"🌐 服务地址: http://{settings.host}:{settings.port}")
    logger.info(f"📚 API文档: http://{settings.host}:{settings.port}/docs")

    uvicorn.run(
        "ipa_backend.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level
    )


if __name__ == "__main__":
    run()
