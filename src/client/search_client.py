# src/client/search_client.py
"""检索客户端：发起请求、读取 NDJSON 流并驱动接收状态机"""

import json
import logging
from typing import Any, AsyncIterator, Dict, Optional

import httpx

from src.client.reception import (
    ErrorReceived,
    IN_FLIGHT,
    Reset,
    SearchAction,
    SearchStarted,
    SearchState,
    action_from_event,
    reduce,
)


logger = logging.getLogger(__name__)


async def iter_ndjson(lines: AsyncIterator[str]) -> AsyncIterator[Dict[str, Any]]:
    """逐行解析 NDJSON，跳过空行"""
    async for line in lines:
        stripped = line.strip()
        if stripped:
            yield json.loads(stripped)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and isinstance(body.get("error"), str):
        return body["error"]
    return f"Search failed ({response.status_code})"


class SearchSession:
    """
    单个界面会话的检索客户端

    每次 search() 分配新的代号；被新请求取代或被 abort() 的请求，其后续事件
    一律丢弃，不会影响可观察状态，也不会被当作错误。
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None
    ):
        self.api_key = api_key
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)
        self._generation = 0
        self.state = SearchState()

    def _dispatch(self, generation: int, action: SearchAction) -> None:
        if generation == self._generation:
            self.state = reduce(self.state, action)

    async def search(
        self,
        image_bytes: bytes,
        filename: str,
        mime_type: str,
        prompt: Optional[str] = None
    ) -> SearchState:
        """
        发起一次检索并消费事件流

        Returns:
            请求结束（或被取代）时的会话状态
        """
        self._generation += 1
        generation = self._generation
        self._dispatch(generation, SearchStarted())

        files = {"image": (filename, image_bytes, mime_type)}
        data = {"prompt": prompt} if prompt else None

        try:
            async with self._client.stream(
                "POST",
                "/api/search",
                files=files,
                data=data,
                headers={"X-API-Key": self.api_key}
            ) as response:
                if not response.is_success:
                    await response.aread()
                    self._dispatch(generation, ErrorReceived(_error_message(response)))
                    return self.state

                async for event in iter_ndjson(response.aiter_lines()):
                    if generation != self._generation:
                        logger.debug("Discarding events of superseded request %d", generation)
                        break
                    action = action_from_event(event)
                    if action is not None:
                        self._dispatch(generation, action)
        except httpx.HTTPError as e:
            self._dispatch(generation, ErrorReceived(str(e) or "Search request failed"))
            return self.state
        except ValueError:
            self._dispatch(generation, ErrorReceived("Malformed response stream"))
            return self.state

        # 流在终止事件之前关闭
        if generation == self._generation and self.state.status in IN_FLIGHT:
            self._dispatch(generation, ErrorReceived("Search stream ended unexpectedly"))
        return self.state

    def abort(self) -> None:
        """放弃当前请求；其后续事件被丢弃"""
        self._generation += 1

    def reset(self) -> None:
        """放弃当前请求并回到空闲状态"""
        self.abort()
        self.state = reduce(self.state, Reset())

    async def close(self) -> None:
        await self._client.aclose()
