# scripts/import_catalog.py
"""批量导入商品目录（JSON / CSV）"""

import argparse
import csv
import json
import os
import sys
import uuid
from pathlib import Path
from typing import Dict, Iterable, List

# 将项目根目录添加到 Python 路径
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
from pydantic import ValidationError
from tqdm import tqdm

from src.models.schemas import CatalogItem
from src.storage.milvus_client import MilvusClientWrapper


PLACEHOLDER_VECTOR = [0.0, 0.0]


def load_rows(path: Path) -> List[Dict]:
    """读取 JSON 数组或 CSV 文件"""
    if path.suffix.lower() == ".csv":
        with open(path, 'r', encoding='utf-8') as f:
            return list(csv.DictReader(f))

    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a JSON array of products")
    return data


def to_record(row: Dict) -> Dict:
    """
    将一行原始数据转换为 collection 记录

    缺少 id 时生成一个；_id（Mongo 导出）也被接受。数值字段由 CatalogItem 校验。
    """
    raw_id = row.get("id") or row.get("_id") or uuid.uuid4().hex
    item = CatalogItem.model_validate({**row, "id": str(raw_id)})
    return {**item.model_dump(), "placeholder_vector": PLACEHOLDER_VECTOR}


def batched(records: List[Dict], size: int) -> Iterable[List[Dict]]:
    for start in range(0, len(records), size):
        yield records[start:start + size]


def import_catalog(path: Path, batch_size: int = 100) -> int:
    """导入文件中的全部商品，返回成功条数"""
    load_dotenv()

    uri = os.getenv("ZILLIZ_CLOUD_URI")
    token = os.getenv("ZILLIZ_CLOUD_TOKEN")
    collection_name = os.getenv("ZILLIZ_CLOUD_COLLECTION", "products")
    if not uri or not token:
        print("Error: ZILLIZ_CLOUD_URI and ZILLIZ_CLOUD_TOKEN must be set")
        sys.exit(1)

    records = []
    skipped = 0
    for i, row in enumerate(load_rows(path), 1):
        try:
            records.append(to_record(row))
        except ValidationError as e:
            skipped += 1
            print(f"  ✗ Row {i} skipped: {e.errors()[0]['msg']}")

    milvus = MilvusClientWrapper(uri=uri, token=token, collection_name=collection_name)
    try:
        if not milvus.has_collection():
            print(f"Error: collection '{collection_name}' does not exist. Run init_collection.py first.")
            sys.exit(1)

        with tqdm(total=len(records), desc="Importing") as progress:
            for batch in batched(records, batch_size):
                milvus.insert(batch)
                progress.update(len(batch))
    finally:
        milvus.close()

    print(f"Imported {len(records)} products, skipped {skipped}.")
    return len(records)


def main():
    parser = argparse.ArgumentParser(description="Import products into the catalog collection")
    parser.add_argument("path", type=Path, help="JSON array or CSV file")
    parser.add_argument("--batch-size", type=int, default=100)
    args = parser.parse_args()

    import_catalog(args.path, batch_size=args.batch_size)


if __name__ == "__main__":
    main()
