# tests/test_catalog_store.py
"""商品目录存储测试"""

import pytest
from unittest.mock import MagicMock
from pymilvus import MilvusException

from src.errors import CatalogUnavailableError
from src.storage.catalog import CatalogStore


ROW = {
    "id": "p-1", "title": "Oslo Sofa", "description": "Three-seater",
    "category": "Living Room Furniture", "type": "Sofas",
    "price": 1299.0, "width": 220.0, "height": 85.0, "depth": 95.0
}


@pytest.fixture
def mock_milvus():
    mock = MagicMock()
    mock.query.return_value = [ROW]
    return mock


@pytest.mark.asyncio
async def test_find_by_type_builds_filter(mock_milvus):
    """测试类型过滤表达式"""
    store = CatalogStore(mock_milvus)

    items = await store.find_by_type("Sofas", 10)

    assert items[0].id == "p-1"
    assert items[0].price == 1299.0
    call_kwargs = mock_milvus.query.call_args[1]
    assert call_kwargs["filter"] == 'type == "Sofas"'
    assert call_kwargs["limit"] == 10
    assert "category" in call_kwargs["output_fields"]


@pytest.mark.asyncio
async def test_find_by_category_excludes_type(mock_milvus):
    """测试品类过滤并排除类型"""
    store = CatalogStore(mock_milvus)

    await store.find_by_category("Living Room Furniture", 5, exclude_type="Sofas")

    call_kwargs = mock_milvus.query.call_args[1]
    assert call_kwargs["filter"] == 'category == "Living Room Furniture" and type != "Sofas"'
    assert call_kwargs["limit"] == 5


@pytest.mark.asyncio
async def test_find_excluding_ids(mock_milvus):
    """测试排除已收集 ID"""
    store = CatalogStore(mock_milvus)

    await store.find_excluding(["a", "b"], 3)

    assert mock_milvus.query.call_args[1]["filter"] == 'id not in ["a", "b"]'


@pytest.mark.asyncio
async def test_string_literals_are_escaped(mock_milvus):
    """测试字符串中的引号被转义"""
    store = CatalogStore(mock_milvus)

    await store.find_by_type('Sofa" or type != "', 10)

    assert mock_milvus.query.call_args[1]["filter"] == 'type == "Sofa\\" or type != \\""'


@pytest.mark.asyncio
async def test_find_any_has_no_filter(mock_milvus):
    """测试无过滤查询"""
    store = CatalogStore(mock_milvus)

    await store.find_any(10)

    assert mock_milvus.query.call_args[1]["filter"] == ""


@pytest.mark.asyncio
async def test_zero_limit_skips_query(mock_milvus):
    """测试容量为 0 时不查询"""
    store = CatalogStore(mock_milvus)

    assert await store.find_any(0) == []
    mock_milvus.query.assert_not_called()


@pytest.mark.asyncio
async def test_milvus_error_maps_to_catalog_unavailable(mock_milvus):
    """测试 Milvus 异常转换为目录不可用"""
    mock_milvus.query.side_effect = MilvusException(code=2, message="connection refused")
    store = CatalogStore(mock_milvus)

    with pytest.raises(CatalogUnavailableError):
        await store.find_by_type("Sofas", 10)


@pytest.mark.asyncio
async def test_category_type_pairs_reads_whole_catalog(mock_milvus):
    """测试品类组合遍历整个目录，而不是单次有上限的查询"""
    mock_milvus.query_all.return_value = [{"category": "Bedroom Furniture", "type": "Beds"}]
    store = CatalogStore(mock_milvus)

    pairs = await store.category_type_pairs()

    assert pairs == [{"category": "Bedroom Furniture", "type": "Beds"}]
    mock_milvus.query_all.assert_called_once_with(filter="", output_fields=["category", "type"])
    mock_milvus.query.assert_not_called()


@pytest.mark.asyncio
async def test_category_type_pairs_milvus_error(mock_milvus):
    """测试遍历失败转换为目录不可用"""
    mock_milvus.query_all.side_effect = MilvusException(code=2, message="timeout")
    store = CatalogStore(mock_milvus)

    with pytest.raises(CatalogUnavailableError):
        await store.category_type_pairs()
