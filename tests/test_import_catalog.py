# tests/test_import_catalog.py
"""商品导入脚本测试"""

import json

import pytest
from pydantic import ValidationError

from scripts.import_catalog import PLACEHOLDER_VECTOR, batched, load_rows, to_record


ROW = {
    "title": "Oslo Sofa",
    "description": "Three-seat sofa",
    "category": "Living Room Furniture",
    "type": "Sofas",
    "price": 1299,
    "width": 210,
    "height": 80,
    "depth": 95
}


def test_to_record_keeps_id():
    """测试保留已有 id 并附加占位向量"""
    record = to_record({**ROW, "id": 17})

    assert record["id"] == "17"
    assert record["price"] == 1299.0
    assert record["placeholder_vector"] == PLACEHOLDER_VECTOR


def test_to_record_accepts_mongo_id():
    """测试接受 _id"""
    assert to_record({**ROW, "_id": "abc"})["id"] == "abc"


def test_to_record_generates_missing_id():
    """测试缺少 id 时自动生成"""
    first = to_record(ROW)
    second = to_record(ROW)

    assert first["id"] and second["id"]
    assert first["id"] != second["id"]


def test_to_record_rejects_bad_price():
    """测试非数字价格"""
    with pytest.raises(ValidationError):
        to_record({**ROW, "price": "call us"})


def test_load_rows_json(tmp_path):
    path = tmp_path / "products.json"
    path.write_text(json.dumps([ROW]), encoding="utf-8")

    assert load_rows(path) == [ROW]


def test_load_rows_json_must_be_array(tmp_path):
    path = tmp_path / "products.json"
    path.write_text(json.dumps(ROW), encoding="utf-8")

    with pytest.raises(ValueError):
        load_rows(path)


def test_load_rows_csv(tmp_path):
    """测试 CSV 读取后可直接转换"""
    path = tmp_path / "products.csv"
    path.write_text(
        "id,title,description,category,type,price,width,height,depth\n"
        "s1,Oslo Sofa,Soft,Living Room Furniture,Sofas,1299.5,210,80,95\n",
        encoding="utf-8"
    )

    rows = load_rows(path)

    assert rows[0]["price"] == "1299.5"
    assert to_record(rows[0])["price"] == 1299.5


def test_batched():
    assert [len(b) for b in batched(list(range(7)), 3)] == [3, 3, 1]
