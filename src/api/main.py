# src/api/main.py
"""FastAPI 应用入口"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from src.api.routes import admin, feedback, health, key, search
from src.api.deps import init_services, cleanup_services
from src.config import get_settings


logger = logging.getLogger(__name__)


def _configure_logging() -> None:
    try:
        level = get_settings().log_level.upper()
    except ValidationError:
        # 缺少必需配置时由 init_services 记录具体错误
        level = "INFO"
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    _configure_logging()
    # 启动时初始化服务
    try:
        await init_services()
        logger.info("Services initialized successfully")
    except Exception:
        logger.exception("Failed to initialize services")
    yield
    # 关闭时清理资源
    await cleanup_services()


app = FastAPI(
    title="Furniture Visual Search API",
    description="上传家具图片，返回商品目录中相似商品的排序列表",
    version="1.0.0",
    lifespan=lifespan
)

# CORS 配置
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 注册路由
app.include_router(health.router, tags=["Health"])
app.include_router(search.router, prefix="/api", tags=["Search"])
app.include_router(key.router, prefix="/api", tags=["API Key"])
app.include_router(feedback.router, prefix="/api", tags=["Feedback"])
app.include_router(admin.router, prefix="/api/admin", tags=["Admin"])
