# src/generators/vision_client.py
"""视觉大模型客户端（OpenAI 兼容的 chat/completions 接口）"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Protocol

import httpx

from src.errors import (
    AuthenticationError,
    EmptyResponseError,
    ParseError,
    ProviderConnectionError,
    ProviderError,
    ProviderServerError,
    ProviderTimeoutError,
    RateLimitError,
)


logger = logging.getLogger(__name__)


@dataclass
class ModelResponse:
    """模型返回的文本与 token 用量"""
    text: str
    usage: Dict[str, int] = field(default_factory=dict)


class VisionModel(Protocol):
    """视觉模型协议"""

    async def complete(
        self,
        api_key: str,
        system_prompt: str,
        image_base64: str,
        mime_type: str,
        text: str,
        max_tokens: int,
    ) -> ModelResponse:
        """发送一张图片 + 文本，返回模型输出"""
        ...


class VisionClient:
    """
    视觉大模型客户端

    API Key 由调用方逐请求传入（用户自带 Key），客户端本身不保存凭证。
    单次请求 / 响应，不做任何重试。
    """

    def __init__(
        self,
        endpoint: str = "https://open.bigmodel.cn/api/paas/v4/chat/completions",
        model: str = "glm-4v-flash",
        timeout: float = 60.0,
    ):
        self.endpoint = endpoint
        self.model = model
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """获取 HTTP 客户端（懒加载）"""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def complete(
        self,
        api_key: str,
        system_prompt: str,
        image_base64: str,
        mime_type: str,
        text: str,
        max_tokens: int = 1024,
    ) -> ModelResponse:
        """
        发送图片与指令，返回模型文本输出

        Args:
            api_key: 调用方的模型服务 API Key
            system_prompt: 渲染后的系统指令
            image_base64: base64 编码的图片
            mime_type: 图片 MIME 类型
            text: 用户消息文本（指令或候选商品列表）
            max_tokens: 最大输出 token 数

        Returns:
            ModelResponse
        """
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {
                    "role": "user",
                    "content": [
                        {
                            "type": "image_url",
                            "image_url": {"url": f"data:{mime_type};base64,{image_base64}"}
                        },
                        {"type": "text", "text": text}
                    ]
                }
            ],
            "max_tokens": max_tokens
        }

        result = await self._post(api_key, payload)
        response = ModelResponse(
            text=self._extract_text(result),
            usage=dict(result.get("usage") or {}),
        )
        logger.info("Vision call finished, model=%s usage=%s", self.model, response.usage)
        return response

    async def validate_api_key(self, api_key: str) -> bool:
        """
        用最小请求验证 API Key 是否有效

        Key 无效返回 False，其他错误继续抛出。
        """
        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": "Hi"}],
            "max_tokens": 10
        }
        try:
            await self._post(api_key, payload)
        except AuthenticationError:
            return False
        return True

    async def _post(self, api_key: str, payload: dict) -> dict:
        client = await self._get_client()
        try:
            response = await client.post(
                self.endpoint,
                headers={
                    "Authorization": f"Bearer {api_key}",
                    "Content-Type": "application/json"
                },
                json=payload
            )
        except httpx.TimeoutException as e:
            raise ProviderTimeoutError("Vision request timed out") from e
        except httpx.TransportError as e:
            raise ProviderConnectionError(f"Vision request failed: {e}") from e

        self._raise_for_status(response)

        try:
            result = response.json()
        except ValueError as e:
            raise ParseError("Vision response is not JSON", response.text) from e
        if not isinstance(result, dict):
            raise ParseError("Vision response is not an object", response.text)
        return result

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        status = response.status_code
        if status < 400:
            return

        logger.warning("[VisionClient] Error %s: %s", status, response.text[:500])
        if status in (401, 403):
            raise AuthenticationError(f"Provider rejected credentials ({status})")
        if status == 429:
            raise RateLimitError("Provider rate limit exceeded")
        if status >= 500:
            raise ProviderServerError(f"Provider server error ({status})")
        raise ProviderError(f"Provider request failed ({status})")

    @staticmethod
    def _extract_text(result: dict) -> str:
        """拼接 choices[0].message.content 中的文本"""
        try:
            content = result["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise ParseError("Vision response has no message content", str(result)) from e

        if isinstance(content, list):
            content = "".join(
                part.get("text", "")
                for part in content
                if isinstance(part, dict) and part.get("type") == "text"
            )
        if not isinstance(content, str) or not content.strip():
            raise EmptyResponseError("Vision response contains no text")
        return content

    async def close(self) -> None:
        """关闭 HTTP 客户端"""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
