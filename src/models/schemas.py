# src/models/schemas.py
"""Pydantic 数据模型定义"""

from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


# 上传限制
ALLOWED_IMAGE_TYPES = ("image/jpeg", "image/png", "image/webp")
MAX_IMAGE_SIZE_BYTES = 10 * 1024 * 1024
MAX_PROMPT_LENGTH = 500


class CamelModel(BaseModel):
    """对外字段使用 camelCase（与前端 / 模型输出约定一致）"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PriceRange(CamelModel):
    """价格区间"""
    min: float
    max: float


class ImageAnalysisResult(CamelModel):
    """
    图片属性抽取结果

    is_furniture 为 False 时其余属性必须全部为空。
    """
    is_furniture: bool
    category: Optional[str] = None
    type: Optional[str] = None
    style: Optional[str] = None
    material: Optional[str] = None
    color: Optional[str] = None
    price_range: Optional[PriceRange] = None

    @model_validator(mode="after")
    def _check_consistency(self) -> "ImageAnalysisResult":
        if not self.is_furniture:
            attributes = (
                self.category, self.type, self.style,
                self.material, self.color, self.price_range
            )
            if any(value is not None for value in attributes):
                raise ValueError("non-furniture analysis must not carry attributes")
        return self


class CatalogItem(CamelModel):
    """商品目录条目（只读）"""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    id: str
    title: str
    description: str
    category: str
    type: str
    price: float
    width: float
    height: float
    depth: float


class ScoredItem(CatalogItem):
    """重排序后的商品（带分数与理由）"""
    score: float = Field(ge=0, le=100)
    justification: str


class RankedEntry(CamelModel):
    """重排序模型输出的单条记录"""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, coerce_numbers_to_str=True
    )

    product_id: str
    score: float = Field(ge=0, le=100)
    justification: str


class TaxonomyCategory(BaseModel):
    """品类及其下属类型"""
    category: str
    types: List[str]


class PipelineConfig(CamelModel):
    """检索流水线可调参数"""
    image_analysis_prompt: str = Field(min_length=1)
    reranking_prompt: str = Field(min_length=1)
    results_count: int = Field(default=6, ge=3, le=12)
    max_candidates: int = Field(default=50, ge=10, le=100)
    score_threshold: float = Field(default=0, ge=0, le=100)


class PipelineConfigUpdate(CamelModel):
    """管理端的部分更新"""
    image_analysis_prompt: Optional[str] = Field(default=None, min_length=1)
    reranking_prompt: Optional[str] = Field(default=None, min_length=1)
    results_count: Optional[int] = Field(default=None, ge=3, le=12)
    max_candidates: Optional[int] = Field(default=None, ge=10, le=100)
    score_threshold: Optional[float] = Field(default=None, ge=0, le=100)


# ---- 流式事件（按 phase 区分） ----

class NotFurnitureEvent(CamelModel):
    phase: Literal["not-furniture"] = "not-furniture"
    analysis: ImageAnalysisResult


class CandidatesEvent(CamelModel):
    phase: Literal["candidates"] = "candidates"
    analysis: ImageAnalysisResult
    candidates: List[CatalogItem]


class ResultsEvent(CamelModel):
    phase: Literal["results"] = "results"
    results: List[ScoredItem]
    score_threshold: float


class ErrorEvent(CamelModel):
    phase: Literal["error"] = "error"
    message: str


SearchEvent = Annotated[
    Union[NotFurnitureEvent, CandidatesEvent, ResultsEvent, ErrorEvent],
    Field(discriminator="phase"),
]


# ---- 其他接口 ----

class FeedbackRequest(CamelModel):
    """商品反馈（点赞 / 点踩）"""
    product_id: str = Field(min_length=1)
    rating: Literal["up", "down"]


class FeedbackCounts(BaseModel):
    up: int
    down: int


class FeedbackResponse(BaseModel):
    success: bool = True
    counts: FeedbackCounts


class ApiKeyRequest(CamelModel):
    api_key: str = Field(min_length=1)


class ApiKeyResponse(BaseModel):
    valid: bool


class ErrorResponse(BaseModel):
    """错误响应"""
    error: str
