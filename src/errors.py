# src/errors.py
"""异常定义与对外错误映射"""

import logging
from dataclasses import dataclass


logger = logging.getLogger(__name__)


class SearchError(Exception):
    """检索服务异常基类"""


class ProviderError(SearchError):
    """大模型服务调用失败"""


class AuthenticationError(ProviderError):
    """API Key 无效"""


class RateLimitError(ProviderError):
    """触发限流"""


class ProviderConnectionError(ProviderError):
    """无法连接到模型服务"""


class ProviderTimeoutError(ProviderConnectionError):
    """模型服务请求超时"""


class ProviderServerError(ProviderError):
    """模型服务端 5xx"""


class ParseError(SearchError):
    """模型输出无法解析或结构不符"""

    def __init__(self, message: str, raw_text: str = ""):
        super().__init__(message)
        self.raw_text = raw_text


class EmptyResponseError(ParseError):
    """模型输出中没有任何文本"""


class CatalogUnavailableError(SearchError):
    """商品目录不可用"""


@dataclass(frozen=True)
class ApiError:
    """对外错误：HTTP 状态码 + 面向用户的提示"""
    status: int
    message: str


# 子类必须排在父类之前
_ERROR_TABLE = [
    (AuthenticationError, ApiError(401, "Invalid API key. Please check your key and try again.")),
    (RateLimitError, ApiError(429, "Rate limit exceeded. Please wait a moment and try again.")),
    (ProviderTimeoutError, ApiError(504, "AI service request timed out. Please try again.")),
    (ProviderConnectionError, ApiError(502, "Could not connect to AI service.")),
    (ProviderServerError, ApiError(502, "AI service is temporarily unavailable. Please try again.")),
    (ProviderError, ApiError(502, "AI service request failed. Please try again.")),
    (ParseError, ApiError(502, "Unexpected response from AI service.")),
    (CatalogUnavailableError, ApiError(503, "Product catalog is temporarily unavailable.")),
]

_FALLBACK = ApiError(500, "An unexpected error occurred.")


def map_error(error: BaseException) -> ApiError:
    """
    将内部异常映射为 HTTP 状态码与用户安全的提示信息

    不会把模型原始输出或底层异常文本透传给调用方。
    """
    for error_type, api_error in _ERROR_TABLE:
        if isinstance(error, error_type):
            return api_error

    logger.error("Unmapped error: %r", error)
    return _FALLBACK
