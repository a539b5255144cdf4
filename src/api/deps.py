# src/api/deps.py
"""FastAPI 依赖注入"""

from typing import Optional

from src.config import get_settings
from src.generators.vision_client import VisionClient
from src.search.pipeline import SearchPipeline, TokenLimits
from src.search.taxonomy import TaxonomyIndex
from src.storage.catalog import CatalogStore
from src.storage.config_store import ConfigStore
from src.storage.feedback_store import FeedbackStore
from src.storage.milvus_client import MilvusClientWrapper


# 全局服务实例
_milvus_client: Optional[MilvusClientWrapper] = None
_vision_client: Optional[VisionClient] = None
_taxonomy: Optional[TaxonomyIndex] = None
_search_pipeline: Optional[SearchPipeline] = None

# 进程内存储，不依赖外部服务
_config_store = ConfigStore()
_feedback_store = FeedbackStore()


async def init_services() -> None:
    """初始化所有服务"""
    global _milvus_client, _vision_client, _taxonomy, _search_pipeline

    settings = get_settings()

    # 初始化 Milvus 客户端
    _milvus_client = MilvusClientWrapper(
        uri=settings.zilliz_cloud_uri,
        token=settings.zilliz_cloud_token,
        collection_name=settings.zilliz_cloud_collection
    )
    catalog = CatalogStore(_milvus_client)

    _vision_client = VisionClient(
        endpoint=settings.vision_api_base,
        model=settings.vision_model,
        timeout=settings.vision_timeout
    )
    _taxonomy = TaxonomyIndex(catalog, ttl_seconds=settings.taxonomy_cache_ttl)

    _search_pipeline = SearchPipeline(
        vision=_vision_client,
        catalog=catalog,
        taxonomy=_taxonomy,
        config_store=_config_store,
        token_limits=TokenLimits(
            analysis=settings.analysis_max_tokens,
            rerank=settings.rerank_max_tokens
        )
    )


async def cleanup_services() -> None:
    """清理所有服务资源"""
    global _milvus_client, _vision_client, _taxonomy, _search_pipeline

    _search_pipeline = None
    _taxonomy = None
    if _milvus_client:
        _milvus_client.close()
        _milvus_client = None
    if _vision_client:
        await _vision_client.close()
        _vision_client = None


def get_search_pipeline() -> SearchPipeline:
    """获取检索流水线（FastAPI 依赖）"""
    if _search_pipeline is None:
        raise RuntimeError("Services not initialized. Call init_services() first.")
    return _search_pipeline


def get_vision_client() -> VisionClient:
    """获取视觉模型客户端（FastAPI 依赖）"""
    if _vision_client is None:
        raise RuntimeError("Services not initialized. Call init_services() first.")
    return _vision_client


def get_taxonomy() -> TaxonomyIndex:
    """获取品类索引（FastAPI 依赖）"""
    if _taxonomy is None:
        raise RuntimeError("Services not initialized. Call init_services() first.")
    return _taxonomy


def get_config_store() -> ConfigStore:
    return _config_store


def get_feedback_store() -> FeedbackStore:
    return _feedback_store
