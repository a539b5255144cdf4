# tests/test_parsing.py
"""模型输出解析测试"""

import pytest

from src.errors import EmptyResponseError, ParseError
from src.generators.parsing import extract_json, strip_code_fence


def test_plain_json():
    assert extract_json('{"isFurniture": false}') == {"isFurniture": False}


@pytest.mark.parametrize("text", [
    '```json\n{"a": 1}\n```',
    '```\n{"a": 1}\n```',
    '  ```json{"a": 1}```  ',
])
def test_code_fences_are_stripped(text):
    """测试去掉 markdown 代码块"""
    assert extract_json(text) == {"a": 1}


def test_inner_backticks_untouched():
    """测试只去掉最外层代码块"""
    assert strip_code_fence('{"note": "use `x`"}') == '{"note": "use `x`"}'


def test_invalid_json_raises_parse_error():
    """测试非法 JSON"""
    with pytest.raises(ParseError) as exc_info:
        extract_json("Sure! Here are the results: [1, 2")

    assert "Sure!" in exc_info.value.raw_text


def test_empty_text_raises_empty_response_error():
    """测试空输出与非法 JSON 区分"""
    with pytest.raises(EmptyResponseError):
        extract_json("```json\n```")
