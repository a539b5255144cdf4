# tests/test_schemas.py
"""数据模型测试"""

import pytest
from pydantic import ValidationError

from src.models.schemas import (
    CatalogItem,
    ImageAnalysisResult,
    PipelineConfig,
    PipelineConfigUpdate,
    RankedEntry,
    ResultsEvent,
)


def test_analysis_accepts_camel_case():
    """测试抽取结果按 camelCase 解析"""
    analysis = ImageAnalysisResult.model_validate({
        "isFurniture": True,
        "category": "Bedroom Furniture",
        "type": "Beds",
        "priceRange": {"min": 300, "max": 900}
    })

    assert analysis.is_furniture is True
    assert analysis.price_range.min == 300
    assert analysis.style is None


def test_not_furniture_must_have_no_attributes():
    """测试非家具结果不允许携带属性"""
    with pytest.raises(ValidationError):
        ImageAnalysisResult(is_furniture=False, color="Red")


def test_not_furniture_with_nulls_is_valid():
    """测试非家具且属性全为 null"""
    analysis = ImageAnalysisResult.model_validate({"isFurniture": False, "category": None})

    assert analysis.is_furniture is False


def test_catalog_item_is_immutable(make_item):
    """测试目录条目只读"""
    item = make_item("a")

    with pytest.raises(ValidationError):
        item.price = 1


def test_catalog_item_coerces_numeric_strings():
    """测试 CSV 中的数字字符串"""
    item = CatalogItem.model_validate({
        "id": "x", "title": "T", "description": "D", "category": "C", "type": "Y",
        "price": "199.99", "width": "10", "height": "20", "depth": "30"
    })

    assert item.price == 199.99
    assert item.depth == 30.0


def test_ranked_entry_score_bounds():
    """测试分数必须在 0-100 之间"""
    with pytest.raises(ValidationError):
        RankedEntry.model_validate({"productId": "a", "score": -1, "justification": "x"})


def test_pipeline_config_defaults():
    """测试配置默认值"""
    config = PipelineConfig(image_analysis_prompt="a", reranking_prompt="b")

    assert config.results_count == 6
    assert config.max_candidates == 50
    assert config.score_threshold == 0


@pytest.mark.parametrize("field, value", [
    ("results_count", 2),
    ("results_count", 13),
    ("max_candidates", 9),
    ("max_candidates", 101),
    ("score_threshold", 100.5),
    ("image_analysis_prompt", ""),
])
def test_pipeline_config_bounds(field, value):
    """测试配置取值范围"""
    values = {"image_analysis_prompt": "a", "reranking_prompt": "b", field: value}

    with pytest.raises(ValidationError):
        PipelineConfig(**values)


def test_config_update_tracks_only_given_fields():
    """测试部分更新只包含显式给出的字段"""
    update = PipelineConfigUpdate.model_validate({"resultsCount": 8})

    assert update.model_dump(exclude_unset=True) == {"results_count": 8}


def test_results_event_serializes_camel_case():
    """测试事件序列化使用 camelCase"""
    event = ResultsEvent(results=[], score_threshold=40)

    assert event.model_dump(by_alias=True) == {
        "phase": "results", "results": [], "scoreThreshold": 40
    }
