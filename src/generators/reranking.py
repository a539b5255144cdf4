# src/generators/reranking.py
"""候选商品重排序"""

import logging
from typing import List, Optional, Set

from pydantic import TypeAdapter, ValidationError

from src.errors import ParseError
from src.generators.parsing import extract_json
from src.generators.prompt import render_prompt
from src.generators.vision_client import VisionModel
from src.models.schemas import CatalogItem, PipelineConfig, RankedEntry, ScoredItem


logger = logging.getLogger(__name__)

_RANKED_ENTRIES = TypeAdapter(List[RankedEntry])


def _format_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def _format_price(price: float) -> str:
    return f"{price:,.3f}".rstrip("0").rstrip(".")


def format_candidates(candidates: List[CatalogItem]) -> str:
    """将候选商品序列化为每行一条的紧凑文本"""
    lines = [
        f'[{i}] ID: {c.id}, Title: "{c.title}", Category: {c.category}, '
        f"Type: {c.type}, Price: ${_format_price(c.price)}, "
        f"Dimensions: {_format_number(c.width)}×{_format_number(c.height)}×{_format_number(c.depth)} cm, "
        f'Description: "{c.description}"'
        for i, c in enumerate(candidates, 1)
    ]
    return "Product candidates:\n" + "\n".join(lines)


def join_ranked_entries(
    entries: List[RankedEntry],
    candidates: List[CatalogItem]
) -> List[ScoredItem]:
    """
    将模型打分与候选商品按 ID 关联

    未知 ID（模型幻觉）直接丢弃；同一 ID 重复出现时只保留第一条。
    按分数降序稳定排序，同分保持模型输出顺序。
    """
    by_id = {c.id: c for c in candidates}

    scored: List[ScoredItem] = []
    seen: Set[str] = set()
    dropped = 0
    for entry in entries:
        item = by_id.get(entry.product_id)
        if item is None or item.id in seen:
            dropped += 1
            continue
        scored.append(ScoredItem(
            **item.model_dump(),
            score=entry.score,
            justification=entry.justification
        ))
        seen.add(item.id)

    if dropped:
        logger.info("Dropped %d ranked entries with unknown or duplicate product IDs", dropped)

    scored.sort(key=lambda x: x.score, reverse=True)
    return scored


async def rerank_candidates(
    vision: VisionModel,
    config: PipelineConfig,
    api_key: str,
    image_base64: str,
    mime_type: str,
    candidates: List[CatalogItem],
    user_prompt: Optional[str] = None,
    max_tokens: int = 4096
) -> List[ScoredItem]:
    """
    一次批量调用，对全部候选打分并给出理由

    Args:
        vision: 视觉模型客户端
        config: 当前流水线配置（重排序模板与 results_count）
        api_key: 调用方的 API Key
        image_base64: 参考图片
        mime_type: 图片 MIME 类型
        candidates: 候选商品
        user_prompt: 用户补充描述（可选）
        max_tokens: 最大输出 token

    Returns:
        按分数降序排列的 ScoredItem 列表，长度不超过候选数量
    """
    if not candidates:
        return []

    system_prompt = render_prompt(
        config.reranking_prompt,
        resultsCount=config.results_count,
        userPrompt=user_prompt
    )

    response = await vision.complete(
        api_key=api_key,
        system_prompt=system_prompt,
        image_base64=image_base64,
        mime_type=mime_type,
        text=format_candidates(candidates),
        max_tokens=max_tokens
    )

    parsed = extract_json(response.text)
    try:
        entries = _RANKED_ENTRIES.validate_python(parsed)
    except ValidationError as e:
        logger.warning("Ranking response failed validation: %s", e)
        raise ParseError("Ranking response does not match expected shape", response.text) from e

    return join_ranked_entries(entries, candidates)
