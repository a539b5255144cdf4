# src/generators/prompt.py
"""Prompt 模板渲染"""

import re
from typing import Any, Mapping, Optional


# 只允许出现在条件块内部的变量（用户输入）
CONDITIONAL_ONLY = frozenset({"userPrompt"})

# 条件块优先匹配；非贪婪，允许跨行
_TOKEN_RE = re.compile(
    r"\{\{#([^{}]+)\}\}(.*?)\{\{/\1\}\}"
    r"|\{\{([^{}#/]+)\}\}",
    re.DOTALL,
)
_PLACEHOLDER_RE = re.compile(r"\{\{([^{}#/]+)\}\}")


def _is_present(value: Any) -> bool:
    return value is not None and str(value) != ""


def _lookup(
    name: str,
    variables: Mapping[str, Any],
    block: Optional[str],
    original: str,
) -> str:
    if name in CONDITIONAL_ONLY and name != block:
        return original
    value = variables.get(name)
    if value is None:
        return original
    return str(value)


def _substitute(text: str, variables: Mapping[str, Any], block: str) -> str:
    return _PLACEHOLDER_RE.sub(
        lambda m: _lookup(m.group(1), variables, block, m.group(0)), text
    )


def render_prompt(template: str, **variables: Any) -> str:
    """
    渲染 prompt 模板

    支持的语法:
        {{name}}                 -> 替换为变量值；未绑定的变量保持原样
        {{#name}}...{{/name}}    -> 条件块；变量非空时保留内部文本（并替换其中的
                                    {{name}}），否则整个块被删除

    userPrompt 只在自己的条件块内替换。用户未提供补充描述时，最终指令中不存在
    任何可被注入的区域。模板只扫描一遍，插入的变量值不会被再次解析。

    Args:
        template: 模板文本
        **variables: 变量绑定

    Returns:
        渲染后的 prompt
    """
    def replace(match: re.Match) -> str:
        block_name = match.group(1)
        if block_name is None:
            name = match.group(3)
            return _lookup(name, variables, None, match.group(0))

        if not _is_present(variables.get(block_name)):
            return ""
        return _substitute(match.group(2), variables, block_name)

    return _TOKEN_RE.sub(replace, template)
