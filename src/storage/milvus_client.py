# src/storage/milvus_client.py
"""Zilliz Cloud (Milvus) 客户端封装"""

from typing import List, Dict, Any
from pymilvus import MilvusClient, DataType


# Milvus 单次 query 的最大返回条数（offset + limit 上限）
MAX_QUERY_WINDOW = 16384


class MilvusClientWrapper:
    """Milvus 客户端封装类"""

    def __init__(self, uri: str, token: str, collection_name: str):
        self.client = MilvusClient(uri=uri, token=token)
        self.collection_name = collection_name
        self.uri = uri
        self.token = token

    def has_collection(self) -> bool:
        """检查 collection 是否存在"""
        return self.client.has_collection(self.collection_name)

    def create_collection(self, schema, index_params) -> None:
        """创建 collection"""
        self.client.create_collection(
            collection_name=self.collection_name,
            schema=schema,
            index_params=index_params
        )

    def drop_collection(self) -> None:
        """删除 collection（包括全部商品）"""
        self.client.drop_collection(self.collection_name)

    def insert(self, data: List[Dict[str, Any]]) -> None:
        """插入数据"""
        self.client.insert(
            collection_name=self.collection_name,
            data=data
        )

    def query(
        self,
        filter: str,
        limit: int,
        output_fields: List[str]
    ) -> List[Dict]:
        """
        标量过滤查询

        Args:
            filter: Milvus 布尔表达式，空字符串表示不过滤
            limit: 最大返回条数
            output_fields: 输出字段

        Returns:
            记录列表（顺序由存储决定）
        """
        results = self.client.query(
            collection_name=self.collection_name,
            filter=filter,
            limit=min(limit, MAX_QUERY_WINDOW),
            output_fields=output_fields
        )
        return [dict(row) for row in results]

    def query_all(
        self,
        filter: str,
        output_fields: List[str],
        batch_size: int = 1000
    ) -> List[Dict]:
        """
        分批读取全部匹配记录（不受单次查询窗口限制）

        Args:
            filter: Milvus 布尔表达式，空字符串表示不过滤
            output_fields: 输出字段
            batch_size: 每批条数

        Returns:
            全部匹配记录
        """
        iterator = self.client.query_iterator(
            collection_name=self.collection_name,
            batch_size=batch_size,
            filter=filter,
            output_fields=output_fields
        )
        rows: List[Dict] = []
        try:
            while True:
                batch = iterator.next()
                if not batch:
                    break
                rows.extend(dict(row) for row in batch)
        finally:
            iterator.close()
        return rows

    def close(self) -> None:
        """关闭连接"""
        self.client.close()


def get_collection_schema(client: MilvusClient):
    """
    获取商品目录 collection schema

    字段说明：
    - id: 商品 ID（字符串主键）
    - title / description: 商品名称与描述
    - category / type: 品类与类型（检索级联使用）
    - price: 价格（美元）
    - width / height / depth: 尺寸（cm）
    - placeholder_vector: Milvus 要求至少一个向量字段，目录只做标量过滤
    """
    schema = client.create_schema(auto_id=False, enable_dynamic_field=False)

    schema.add_field("id", DataType.VARCHAR, is_primary=True, max_length=64)
    schema.add_field("title", DataType.VARCHAR, max_length=256)
    schema.add_field("description", DataType.VARCHAR, max_length=4096)
    schema.add_field("category", DataType.VARCHAR, max_length=128)
    schema.add_field("type", DataType.VARCHAR, max_length=128)
    schema.add_field("price", DataType.DOUBLE)
    schema.add_field("width", DataType.DOUBLE)
    schema.add_field("height", DataType.DOUBLE)
    schema.add_field("depth", DataType.DOUBLE)
    schema.add_field("placeholder_vector", DataType.FLOAT_VECTOR, dim=2)

    return schema


def get_index_params(client: MilvusClient):
    """获取索引参数"""
    index_params = client.prepare_index_params()

    index_params.add_index(
        field_name="placeholder_vector",
        index_type="FLAT",
        metric_type="L2"
    )
    index_params.add_index(field_name="category", index_type="INVERTED")
    index_params.add_index(field_name="type", index_type="INVERTED")

    return index_params
