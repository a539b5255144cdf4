# src/search/taxonomy.py
"""品类索引（category -> types），带 TTL 缓存"""

import logging
import time
from typing import Callable, Dict, List, Optional, Set, Tuple

from src.models.schemas import TaxonomyCategory
from src.storage.catalog import CatalogStore


logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 5 * 60


class TaxonomyIndex:
    """
    从商品目录派生的品类索引

    缓存过期后在下一次读取时惰性重建。并发请求共享缓存，不加锁：
    过期瞬间可能有多个请求同时重建，结果相同。
    """

    def __init__(
        self,
        catalog: CatalogStore,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic
    ):
        self.catalog = catalog
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._cache: Optional[Tuple[float, List[TaxonomyCategory]]] = None

    def is_stale(self) -> bool:
        if self._cache is None:
            return True
        built_at, _ = self._cache
        return self._clock() - built_at >= self.ttl_seconds

    async def get(self) -> List[TaxonomyCategory]:
        """返回品类列表（category 与 types 均按字典序排列，types 去重）"""
        if not self.is_stale():
            return self._cache[1]

        rows = await self.catalog.category_type_pairs()
        grouped: Dict[str, Set[str]] = {}
        for row in rows:
            category, item_type = row.get("category"), row.get("type")
            if not category:
                continue
            types = grouped.setdefault(category, set())
            if item_type:
                types.add(item_type)

        taxonomy = [
            TaxonomyCategory(category=category, types=sorted(types))
            for category, types in sorted(grouped.items())
        ]
        self._cache = (self._clock(), taxonomy)
        logger.info("Taxonomy rebuilt: %d categories from %d rows", len(taxonomy), len(rows))
        return taxonomy

    async def grounding_text(self) -> str:
        """
        生成注入到抽取 prompt 中的品类文本

        示例:
            Categories and types:
            - Bedroom Furniture: Beds, Dressers, Nightstands
            - Living Room Furniture: Armchairs, Coffee Tables, Sofas
        """
        taxonomy = await self.get()
        lines = [f"- {entry.category}: {', '.join(entry.types)}" for entry in taxonomy]
        return "Categories and types:\n" + "\n".join(lines)

    def invalidate(self) -> None:
        self._cache = None
