# scripts/init_collection.py
"""创建商品目录 collection（标量字段 + 品类 / 类型倒排索引）"""

import argparse
import os
import sys

# 将项目根目录添加到 Python 路径
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv

from src.storage.milvus_client import MilvusClientWrapper, get_collection_schema, get_index_params


def init_catalog(recreate: bool = False) -> bool:
    """
    创建目录 collection

    已存在时默认跳过；recreate=True 时先删除再创建（已导入的商品会丢失）。

    Returns:
        是否新建了 collection
    """
    load_dotenv()

    uri = os.getenv("ZILLIZ_CLOUD_URI")
    token = os.getenv("ZILLIZ_CLOUD_TOKEN")
    collection_name = os.getenv("ZILLIZ_CLOUD_COLLECTION", "products")
    if not uri or not token:
        print("Error: ZILLIZ_CLOUD_URI and ZILLIZ_CLOUD_TOKEN must be set")
        sys.exit(1)

    milvus = MilvusClientWrapper(uri=uri, token=token, collection_name=collection_name)
    try:
        if milvus.has_collection():
            if not recreate:
                print(f"Catalog '{collection_name}' already exists, nothing to do (use --recreate to rebuild).")
                return False
            milvus.drop_collection()
            print(f"Dropped catalog '{collection_name}'; re-run import_catalog.py afterwards.")

        milvus.create_collection(
            schema=get_collection_schema(milvus.client),
            index_params=get_index_params(milvus.client)
        )
    finally:
        milvus.close()

    print(f"Catalog '{collection_name}' ready: category/type filters indexed.")
    return True


def main():
    parser = argparse.ArgumentParser(description="Create the furniture catalog collection")
    parser.add_argument(
        "--recreate",
        action="store_true",
        help="drop an existing catalog first (all products are lost)"
    )
    args = parser.parse_args()

    init_catalog(recreate=args.recreate)


if __name__ == "__main__":
    main()
