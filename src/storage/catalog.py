# src/storage/catalog.py
"""商品目录只读访问"""

import asyncio
import json
import logging
from typing import Callable, Dict, Iterable, List, Optional

from pymilvus import MilvusException

from src.errors import CatalogUnavailableError
from src.models.schemas import CatalogItem
from src.storage.milvus_client import MilvusClientWrapper


logger = logging.getLogger(__name__)


def _literal(value: str) -> str:
    """字符串字面量（转义引号与反斜杠）"""
    return json.dumps(value, ensure_ascii=False)


class CatalogStore:
    """
    商品目录存储

    只提供带过滤、带数量上限、可排除 ID 的读取。pymilvus 是同步接口，
    查询在线程池中执行，避免阻塞事件循环。
    """

    ITEM_FIELDS = [
        "id", "title", "description", "category", "type",
        "price", "width", "height", "depth"
    ]

    def __init__(self, milvus_client: MilvusClientWrapper):
        self.milvus = milvus_client

    async def find(self, filter: str, limit: int) -> List[CatalogItem]:
        """按 Milvus 表达式读取商品"""
        if limit <= 0:
            return []
        rows = await self._query(filter, limit, self.ITEM_FIELDS)
        return [CatalogItem.model_validate(row) for row in rows]

    async def find_by_type(self, type: str, limit: int) -> List[CatalogItem]:
        return await self.find(f"type == {_literal(type)}", limit)

    async def find_by_category(
        self,
        category: str,
        limit: int,
        exclude_type: Optional[str] = None
    ) -> List[CatalogItem]:
        expr = f"category == {_literal(category)}"
        if exclude_type:
            expr += f" and type != {_literal(exclude_type)}"
        return await self.find(expr, limit)

    async def find_excluding(self, ids: Iterable[str], limit: int) -> List[CatalogItem]:
        id_list = list(ids)
        expr = f"id not in {json.dumps(id_list, ensure_ascii=False)}" if id_list else ""
        return await self.find(expr, limit)

    async def find_any(self, limit: int) -> List[CatalogItem]:
        return await self.find("", limit)

    async def category_type_pairs(self) -> List[Dict[str, str]]:
        """读取全部 (category, type) 组合，用于构建品类索引（遍历整个目录）"""
        return await self._run(self.milvus.query_all, "", output_fields=["category", "type"])

    async def _query(self, filter: str, limit: int, output_fields: List[str]) -> List[Dict]:
        return await self._run(self.milvus.query, filter, limit=limit, output_fields=output_fields)

    async def _run(self, method: Callable[..., List[Dict]], filter: str, **kwargs) -> List[Dict]:
        try:
            return await asyncio.to_thread(method, filter=filter, **kwargs)
        except MilvusException as e:
            logger.error("Catalog query failed (filter=%r): %s", filter, e)
            raise CatalogUnavailableError(str(e)) from e
