# tests/conftest.py
"""pytest 配置和 fixtures"""

import io
import os
import sys
from typing import Iterable, List, Optional

import pytest
from PIL import Image

# 确保项目根目录在 Python 路径中
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.models.schemas import CatalogItem


@pytest.fixture(autouse=True)
def setup_test_env(monkeypatch):
    """为所有测试设置测试环境变量"""
    monkeypatch.setenv("ZILLIZ_CLOUD_URI", "https://test.zillizcloud.com")
    monkeypatch.setenv("ZILLIZ_CLOUD_TOKEN", "test_token")
    monkeypatch.setenv("ZILLIZ_CLOUD_COLLECTION", "test_products")


@pytest.fixture
def sample_image_bytes():
    """生成测试用的有效 PNG"""
    buffer = io.BytesIO()
    Image.new("RGB", (8, 8), color=(120, 80, 40)).save(buffer, format="PNG")
    return buffer.getvalue()


def _make_item(
    id: str,
    category: str = "Living Room Furniture",
    type: str = "Sofas",
    price: float = 999,
    title: Optional[str] = None
) -> CatalogItem:
    return CatalogItem(
        id=id,
        title=title or f"{type} {id}",
        description=f"A {type.lower()} for testing",
        category=category,
        type=type,
        price=price,
        width=200,
        height=85,
        depth=90
    )


@pytest.fixture
def make_item():
    """商品构造器"""
    return _make_item


class InMemoryCatalog:
    """与 CatalogStore 接口一致的内存目录，记录每次查询"""

    def __init__(self, items: Iterable[CatalogItem]):
        self.items: List[CatalogItem] = list(items)
        self.calls: List[tuple] = []

    async def find_by_type(self, type, limit):
        self.calls.append(("type", type, limit))
        return [i for i in self.items if i.type == type][:limit]

    async def find_by_category(self, category, limit, exclude_type=None):
        self.calls.append(("category", category, limit, exclude_type))
        return [
            i for i in self.items
            if i.category == category and (not exclude_type or i.type != exclude_type)
        ][:limit]

    async def find_excluding(self, ids, limit):
        excluded = set(ids)
        self.calls.append(("excluding", tuple(ids), limit))
        return [i for i in self.items if i.id not in excluded][:limit]

    async def find_any(self, limit):
        self.calls.append(("any", limit))
        return self.items[:limit]

    async def category_type_pairs(self):
        self.calls.append(("taxonomy",))
        return [{"category": i.category, "type": i.type} for i in self.items]


@pytest.fixture
def catalog_factory():
    """内存目录构造器"""
    return InMemoryCatalog


@pytest.fixture
def sample_catalog(make_item):
    """5 件沙发 + 20 件其他客厅家具 + 5 件卧室家具"""
    items = [make_item(f"sofa-{i}") for i in range(5)]
    items += [make_item(f"living-{i}", type="Coffee Tables") for i in range(20)]
    items += [make_item(f"bed-{i}", category="Bedroom Furniture", type="Beds") for i in range(5)]
    return InMemoryCatalog(items)
