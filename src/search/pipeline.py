# src/search/pipeline.py
"""两阶段检索流水线：属性抽取 -> 级联召回 -> 重排序"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Union

from src.generators.extraction import extract_attributes
from src.generators.reranking import rerank_candidates
from src.generators.vision_client import VisionModel
from src.models.schemas import CatalogItem, ImageAnalysisResult, ScoredItem
from src.search.cascade import retrieve_candidates
from src.search.taxonomy import TaxonomyIndex
from src.storage.catalog import CatalogStore
from src.storage.config_store import ConfigStore


logger = logging.getLogger(__name__)


class PipelineState(str, Enum):
    """流水线状态"""
    START = "start"
    EXTRACTING = "extracting"
    NOT_FURNITURE = "not-furniture"
    CANDIDATES_READY = "candidates-ready"
    RANKING = "ranking"
    DONE = "done"
    ERROR = "error"


@dataclass(frozen=True)
class SearchInput:
    """单次检索请求的输入（仅在本次请求内有效）"""
    api_key: str
    image_base64: str
    mime_type: str
    user_prompt: Optional[str] = None


@dataclass(frozen=True)
class NotFurnitureResult:
    analysis: ImageAnalysisResult
    is_furniture: bool = False


@dataclass(frozen=True)
class CandidatesResult:
    analysis: ImageAnalysisResult
    candidates: List[CatalogItem]
    is_furniture: bool = True


Phase1Result = Union[NotFurnitureResult, CandidatesResult]


@dataclass
class TokenLimits:
    """两次模型调用的最大输出 token"""
    analysis: int = 1024
    rerank: int = 4096


class SearchPipeline:
    """
    检索流水线

    配置与品类索引以依赖注入的方式传入；每个阶段开始时读取当时的配置，
    两个阶段之间不做快照。
    """

    def __init__(
        self,
        vision: VisionModel,
        catalog: CatalogStore,
        taxonomy: TaxonomyIndex,
        config_store: ConfigStore,
        token_limits: Optional[TokenLimits] = None
    ):
        self.vision = vision
        self.catalog = catalog
        self.taxonomy = taxonomy
        self.config_store = config_store
        self.token_limits = token_limits or TokenLimits()

    async def phase1(self, search_input: SearchInput) -> Phase1Result:
        """
        阶段一：图片属性抽取 + 候选召回

        非家具图片直接返回，不查询商品目录。
        """
        start_time = time.time()
        config = self.config_store.get()
        grounding_text = await self.taxonomy.grounding_text()

        analysis = await extract_attributes(
            vision=self.vision,
            config=config,
            grounding_text=grounding_text,
            api_key=search_input.api_key,
            image_base64=search_input.image_base64,
            mime_type=search_input.mime_type,
            max_tokens=self.token_limits.analysis
        )

        if not analysis.is_furniture:
            logger.info("Phase 1 finished: not furniture (%d ms)", _elapsed_ms(start_time))
            return NotFurnitureResult(analysis=analysis)

        candidates = await retrieve_candidates(self.catalog, analysis, config.max_candidates)
        logger.info(
            "Phase 1 finished: %d candidates (%d ms)",
            len(candidates), _elapsed_ms(start_time)
        )
        return CandidatesResult(analysis=analysis, candidates=candidates)

    async def phase2(
        self,
        search_input: SearchInput,
        candidates: List[CatalogItem]
    ) -> List[ScoredItem]:
        """阶段二：对候选商品重排序"""
        start_time = time.time()
        config = self.config_store.get()

        results = await rerank_candidates(
            vision=self.vision,
            config=config,
            api_key=search_input.api_key,
            image_base64=search_input.image_base64,
            mime_type=search_input.mime_type,
            candidates=candidates,
            user_prompt=search_input.user_prompt,
            max_tokens=self.token_limits.rerank
        )
        logger.info(
            "Phase 2 finished: %d/%d scored (%d ms)",
            len(results), len(candidates), _elapsed_ms(start_time)
        )
        return results

    def current_score_threshold(self) -> float:
        return self.config_store.get().score_threshold


def _elapsed_ms(start_time: float) -> int:
    return int((time.time() - start_time) * 1000)
