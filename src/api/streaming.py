# src/api/streaming.py
"""NDJSON 流式事件"""

import json
import logging
from typing import AsyncIterator

from src.errors import map_error
from src.models.schemas import (
    CandidatesEvent,
    ErrorEvent,
    NotFurnitureEvent,
    ResultsEvent,
    SearchEvent,
)
from src.search.pipeline import NotFurnitureResult, PipelineState, SearchInput, SearchPipeline


logger = logging.getLogger(__name__)

NDJSON_MEDIA_TYPE = "application/x-ndjson"


def encode_event(event: SearchEvent) -> bytes:
    """序列化为一行 JSON（以换行结尾）"""
    payload = event.model_dump(mode="json", by_alias=True, exclude_none=True)
    return (json.dumps(payload, ensure_ascii=False) + "\n").encode("utf-8")


async def search_events(
    pipeline: SearchPipeline,
    search_input: SearchInput
) -> AsyncIterator[SearchEvent]:
    """
    按顺序产出检索事件

    至多一个 candidates 事件（非终止），随后恰好一个终止事件：
    not-furniture / results / error。出错时用 error 事件截断后续输出，
    已发出的 candidates 事件保持有效。
    """
    state = PipelineState.EXTRACTING
    try:
        phase1 = await pipeline.phase1(search_input)

        if isinstance(phase1, NotFurnitureResult):
            yield NotFurnitureEvent(analysis=phase1.analysis)
            return

        state = PipelineState.CANDIDATES_READY
        yield CandidatesEvent(analysis=phase1.analysis, candidates=phase1.candidates)

        state = PipelineState.RANKING
        results = await pipeline.phase2(search_input, phase1.candidates)
        yield ResultsEvent(
            results=results,
            score_threshold=pipeline.current_score_threshold()
        )
    except Exception as e:
        api_error = map_error(e)
        logger.warning(
            "Search failed during %s: %s (%s)",
            state.value, type(e).__name__, api_error.status
        )
        yield ErrorEvent(message=api_error.message)


async def ndjson_stream(
    pipeline: SearchPipeline,
    search_input: SearchInput
) -> AsyncIterator[bytes]:
    """StreamingResponse 使用的字节流"""
    async for event in search_events(pipeline, search_input):
        yield encode_event(event)
