# src/generators/parsing.py
"""模型输出解析"""

import json
import logging
import re
from typing import Any

from src.errors import EmptyResponseError, ParseError


logger = logging.getLogger(__name__)

# 模型有时会无视指令，用 ```json ... ``` 包裹输出
_FENCE_RE = re.compile(r"^```(?:json)?\s*\n?(.*?)\n?\s*```$", re.DOTALL)


def strip_code_fence(text: str) -> str:
    """去掉包裹在外层的 markdown 代码块"""
    cleaned = text.strip()
    match = _FENCE_RE.match(cleaned)
    if match:
        cleaned = match.group(1)
    return cleaned


def extract_json(text: str) -> Any:
    """
    从模型输出中解析 JSON

    Raises:
        EmptyResponseError: 输出为空
        ParseError: 输出不是合法 JSON
    """
    cleaned = strip_code_fence(text)
    if not cleaned:
        raise EmptyResponseError("Model response is empty", text)

    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.warning("Failed to parse model response as JSON: %r", text[:500])
        raise ParseError("Failed to parse model response as JSON", text) from e
