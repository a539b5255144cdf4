# src/search/cascade.py
"""候选商品级联检索"""

import logging
from typing import List, Set

from src.models.schemas import CatalogItem, ImageAnalysisResult
from src.storage.catalog import CatalogStore


logger = logging.getLogger(__name__)


async def retrieve_candidates(
    catalog: CatalogStore,
    analysis: ImageAnalysisResult,
    max_candidates: int
) -> List[CatalogItem]:
    """
    级联检索候选商品

    每一级只填充剩余容量（max_candidates - 已收集数量）:
        1. 类型完全匹配
        2. 同品类、不同类型
        3. 排除已收集 ID 的任意商品（至少已收集一件时）
        4. 前三级一无所获（type 与 category 均缺失）时，不加过滤取前 N 件

    各级内部顺序由存储决定；结果不含重复 ID，可以为空。

    Args:
        catalog: 商品目录
        analysis: 图片抽取结果（is_furniture 为 True）
        max_candidates: 候选数量上限

    Returns:
        候选商品列表，长度在 [0, max_candidates]
    """
    candidates: List[CatalogItem] = []
    seen_ids: Set[str] = set()

    def collect(items: List[CatalogItem]) -> int:
        added = 0
        for item in items:
            if len(candidates) >= max_candidates:
                break
            if item.id in seen_ids:
                continue
            candidates.append(item)
            seen_ids.add(item.id)
            added += 1
        return added

    # 1. 类型匹配
    if analysis.type:
        added = collect(await catalog.find_by_type(analysis.type, max_candidates))
        logger.debug("Tier 1 (type=%r): %d items", analysis.type, added)

    # 2. 同品类（排除已匹配的类型）
    remaining = max_candidates - len(candidates)
    if remaining > 0 and analysis.category:
        added = collect(await catalog.find_by_category(
            analysis.category, remaining, exclude_type=analysis.type
        ))
        logger.debug("Tier 2 (category=%r): %d items", analysis.category, added)

    # 3. 兜底：任意未选商品
    remaining = max_candidates - len(candidates)
    if remaining > 0 and seen_ids:
        added = collect(await catalog.find_excluding(
            [item.id for item in candidates], remaining
        ))
        logger.debug("Tier 3 (broad): %d items", added)

    # 4. 抽取结果没有任何信号
    if not candidates:
        collect(await catalog.find_any(max_candidates))

    logger.info(
        "Retrieved %d candidates (max=%d, type=%r, category=%r)",
        len(candidates), max_candidates, analysis.type, analysis.category
    )
    return candidates
