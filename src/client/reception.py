# src/client/reception.py
"""客户端接收状态机：把流式事件折叠为可观察的界面状态"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Mapping, Optional, Tuple, Union

from pydantic import TypeAdapter, ValidationError

from src.models.schemas import (
    CandidatesEvent,
    CatalogItem,
    ErrorEvent,
    ImageAnalysisResult,
    NotFurnitureEvent,
    ResultsEvent,
    ScoredItem,
    SearchEvent,
)


logger = logging.getLogger(__name__)


class SearchStatus(str, Enum):
    IDLE = "idle"
    ANALYZING = "analyzing"
    NOT_FURNITURE = "not-furniture"
    RANKING = "ranking"
    DONE = "done"
    ERROR = "error"


IN_FLIGHT = frozenset({SearchStatus.ANALYZING, SearchStatus.RANKING})


@dataclass(frozen=True)
class SearchState:
    """界面可观察的检索状态"""
    status: SearchStatus = SearchStatus.IDLE
    analysis: Optional[ImageAnalysisResult] = None
    candidates: Tuple[CatalogItem, ...] = ()
    results: Tuple[ScoredItem, ...] = ()
    score_threshold: float = 0
    error: Optional[str] = None

    @property
    def is_searching(self) -> bool:
        return self.status in IN_FLIGHT

    @property
    def all_below_threshold(self) -> bool:
        """全部结果低于相关性阈值（界面提示用，空结果不算）"""
        return bool(self.results) and all(r.score < self.score_threshold for r in self.results)


# ---- 动作 ----

@dataclass(frozen=True)
class SearchStarted:
    pass


@dataclass(frozen=True)
class NotFurnitureReceived:
    analysis: ImageAnalysisResult


@dataclass(frozen=True)
class CandidatesReceived:
    analysis: ImageAnalysisResult
    candidates: Tuple[CatalogItem, ...]


@dataclass(frozen=True)
class ResultsReceived:
    results: Tuple[ScoredItem, ...]
    score_threshold: float


@dataclass(frozen=True)
class ErrorReceived:
    message: str


@dataclass(frozen=True)
class Reset:
    pass


SearchAction = Union[
    SearchStarted, NotFurnitureReceived, CandidatesReceived,
    ResultsReceived, ErrorReceived, Reset
]


def reduce(state: SearchState, action: SearchAction) -> SearchState:
    """
    状态转移函数

        idle -> analyzing -> {not-furniture | ranking} -> {done | error}

    error 可在 analyzing 或 ranking 中任意时刻到达。空闲或已终止时收到的
    服务端事件被忽略；新的检索总是从干净状态开始。
    """
    if isinstance(action, SearchStarted):
        return SearchState(status=SearchStatus.ANALYZING)

    if isinstance(action, Reset):
        return SearchState()

    if isinstance(action, NotFurnitureReceived):
        if state.status is not SearchStatus.ANALYZING:
            return state
        return replace(state, status=SearchStatus.NOT_FURNITURE, analysis=action.analysis)

    if isinstance(action, CandidatesReceived):
        if state.status is not SearchStatus.ANALYZING:
            return state
        return replace(
            state,
            status=SearchStatus.RANKING,
            analysis=action.analysis,
            candidates=tuple(action.candidates)
        )

    if isinstance(action, ResultsReceived):
        if state.status not in IN_FLIGHT:
            return state
        return replace(
            state,
            status=SearchStatus.DONE,
            results=tuple(action.results),
            score_threshold=action.score_threshold
        )

    if isinstance(action, ErrorReceived):
        if state.status not in IN_FLIGHT:
            return state
        return replace(state, status=SearchStatus.ERROR, error=action.message)

    raise TypeError(f"Unknown action: {action!r}")


_EVENT_ADAPTER = TypeAdapter(SearchEvent)


def action_from_event(payload: Mapping[str, Any]) -> Optional[SearchAction]:
    """
    将一行流式事件转换为动作

    无法识别的 phase 返回 None（由调用方忽略）。
    """
    try:
        event = _EVENT_ADAPTER.validate_python(payload)
    except ValidationError as e:
        logger.debug("Ignoring unrecognised search event: %s", e)
        return None

    if isinstance(event, NotFurnitureEvent):
        return NotFurnitureReceived(analysis=event.analysis)
    if isinstance(event, CandidatesEvent):
        return CandidatesReceived(analysis=event.analysis, candidates=tuple(event.candidates))
    if isinstance(event, ResultsEvent):
        return ResultsReceived(results=tuple(event.results), score_threshold=event.score_threshold)
    if isinstance(event, ErrorEvent):
        return ErrorReceived(message=event.message)
    return None
