# tests/test_deps.py
"""依赖注入测试"""

import pytest
from unittest.mock import patch

from src.api import deps


def test_get_settings_returns_singleton():
    """测试配置单例"""
    from src.config import get_settings

    # 两次调用返回相同实例
    settings1 = get_settings()
    settings2 = get_settings()

    assert settings1 is settings2


def test_getters_raise_before_init(monkeypatch):
    """测试未初始化时获取服务报错"""
    monkeypatch.setattr(deps, "_search_pipeline", None)
    monkeypatch.setattr(deps, "_vision_client", None)
    monkeypatch.setattr(deps, "_taxonomy", None)

    with pytest.raises(RuntimeError):
        deps.get_search_pipeline()
    with pytest.raises(RuntimeError):
        deps.get_vision_client()
    with pytest.raises(RuntimeError):
        deps.get_taxonomy()


def test_in_process_stores_always_available():
    """测试配置与反馈存储不依赖外部服务"""
    assert deps.get_config_store() is deps.get_config_store()
    assert deps.get_feedback_store() is deps.get_feedback_store()


@pytest.mark.asyncio
async def test_init_services_creates_search_pipeline():
    """测试服务初始化"""
    with patch("src.api.deps.MilvusClientWrapper") as mock_milvus:
        await deps.init_services()
        try:
            # 验证 Milvus 客户端被创建
            mock_milvus.assert_called_once()
            assert mock_milvus.call_args[1]["collection_name"] == "test_products"

            pipeline = deps.get_search_pipeline()
            assert pipeline.config_store is deps.get_config_store()
            assert deps.get_vision_client() is not None
            assert deps.get_taxonomy() is not None
        finally:
            await deps.cleanup_services()

    mock_milvus.return_value.close.assert_called_once()
    with pytest.raises(RuntimeError):
        deps.get_search_pipeline()
