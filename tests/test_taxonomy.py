# tests/test_taxonomy.py
"""品类索引测试"""

import pytest

from src.search.taxonomy import TaxonomyIndex


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


@pytest.fixture
def catalog(catalog_factory, make_item):
    return catalog_factory([
        make_item("1", category="Living Room Furniture", type="Sofas"),
        make_item("2", category="Bedroom Furniture", type="Beds"),
        make_item("3", category="Living Room Furniture", type="Armchairs"),
        make_item("4", category="Living Room Furniture", type="Sofas"),
        make_item("5", category="Bedroom Furniture", type="Dressers"),
    ])


@pytest.mark.asyncio
async def test_taxonomy_sorted_and_deduplicated(catalog):
    """测试品类与类型按字典序排列且去重"""
    index = TaxonomyIndex(catalog)

    taxonomy = await index.get()

    assert [entry.category for entry in taxonomy] == ["Bedroom Furniture", "Living Room Furniture"]
    assert taxonomy[0].types == ["Beds", "Dressers"]
    assert taxonomy[1].types == ["Armchairs", "Sofas"]


@pytest.mark.asyncio
async def test_grounding_text_format(catalog):
    """测试注入 prompt 的品类文本格式"""
    index = TaxonomyIndex(catalog)

    text = await index.grounding_text()

    assert text == (
        "Categories and types:\n"
        "- Bedroom Furniture: Beds, Dressers\n"
        "- Living Room Furniture: Armchairs, Sofas"
    )


@pytest.mark.asyncio
async def test_cache_reused_within_ttl(catalog):
    """测试 TTL 内复用缓存"""
    clock = FakeClock()
    index = TaxonomyIndex(catalog, ttl_seconds=300, clock=clock)

    await index.get()
    clock.now += 299
    await index.get()

    assert catalog.calls.count(("taxonomy",)) == 1


@pytest.mark.asyncio
async def test_cache_rebuilt_after_ttl(catalog, make_item):
    """测试缓存过期后惰性重建"""
    clock = FakeClock()
    index = TaxonomyIndex(catalog, ttl_seconds=300, clock=clock)

    await index.get()
    catalog.items.append(make_item("6", category="Office Furniture", type="Desks"))
    clock.now += 300
    taxonomy = await index.get()

    assert catalog.calls.count(("taxonomy",)) == 2
    assert "Office Furniture" in [entry.category for entry in taxonomy]


@pytest.mark.asyncio
async def test_invalidate_forces_rebuild(catalog):
    """测试手动失效"""
    index = TaxonomyIndex(catalog)

    await index.get()
    index.invalidate()

    assert index.is_stale()
