# src/config.py
"""配置管理模块"""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """应用配置"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Zilliz Cloud (Milvus) 商品目录
    zilliz_cloud_uri: str
    zilliz_cloud_token: str
    zilliz_cloud_collection: str = "products"

    # 视觉大模型（OpenAI 兼容接口，默认智谱 GLM-4V）
    vision_api_base: str = "https://open.bigmodel.cn/api/paas/v4/chat/completions"
    vision_model: str = "glm-4v-flash"
    vision_timeout: float = 60.0
    analysis_max_tokens: int = 1024
    rerank_max_tokens: int = 4096

    # 品类索引缓存（秒）
    taxonomy_cache_ttl: float = 300.0

    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """获取配置单例"""
    return Settings()
