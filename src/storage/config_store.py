# src/storage/config_store.py
"""流水线可调参数（进程内存储，重启后恢复默认值）"""

import logging
from typing import Optional

from src.generators.templates import DEFAULT_IMAGE_ANALYSIS_PROMPT, DEFAULT_RERANKING_PROMPT
from src.models.schemas import PipelineConfig, PipelineConfigUpdate


logger = logging.getLogger(__name__)


def default_config() -> PipelineConfig:
    return PipelineConfig(
        image_analysis_prompt=DEFAULT_IMAGE_ANALYSIS_PROMPT,
        reranking_prompt=DEFAULT_RERANKING_PROMPT,
    )


class ConfigStore:
    """
    可调参数存储

    get() 总是返回完整且合法的配置副本。更新不与进行中的请求做原子同步：
    请求在每个阶段开始时读取当时的值。
    """

    def __init__(self, initial: Optional[PipelineConfig] = None):
        self._config = initial or default_config()

    def get(self) -> PipelineConfig:
        """返回当前配置的副本"""
        return self._config.model_copy()

    def update(self, updates: PipelineConfigUpdate) -> PipelineConfig:
        """
        合并部分更新

        合并后的结果会重新校验；校验失败时当前配置保持不变。
        """
        changes = updates.model_dump(exclude_unset=True, exclude_none=True)
        merged = PipelineConfig.model_validate(
            {**self._config.model_dump(), **changes}
        )
        self._config = merged
        logger.info("Pipeline config updated: %s", sorted(changes))
        return merged.model_copy()
