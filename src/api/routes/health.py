# src/api/routes/health.py
"""健康检查路由"""

from fastapi import APIRouter
from pydantic import BaseModel

from src.api import deps


router = APIRouter()

VERSION = "1.0.0"


class HealthResponse(BaseModel):
    """健康检查响应"""
    status: str
    version: str
    services_ready: bool


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    健康检查端点

    进程存活即返回 healthy；services_ready 表示目录与模型客户端是否已初始化
    （启动时初始化失败的实例仍可响应管理端接口）。
    """
    try:
        deps.get_search_pipeline()
        ready = True
    except RuntimeError:
        ready = False

    return HealthResponse(status="healthy", version=VERSION, services_ready=ready)
