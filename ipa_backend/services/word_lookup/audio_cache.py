# -*- coding: utf-8 -*-
"""
发音音频缓存 - IPA Lookup V1.0

- AudioCache: 按 (口音, 小写文本) 缓存 Base64 PCM 音频
- InFlightRegistry: 同一个键的并发请求合并为一次外部调用
"""

import asyncio
import logging
from collections import OrderedDict
from typing import Awaitable, Callable, Dict, Hashable, Optional, Tuple, TypeVar

from ipa_backend.models.word_models import Accent

logger = logging.getLogger(__name__)

T = TypeVar("T")

AudioKey = Tuple[Accent, str]


def make_audio_key(accent: Accent, text: str) -> AudioKey:
    """音频缓存键：口音 + 去空格小写文本"""
    return Accent(accent), (text or "").strip().lower()


class AudioCache:
    """
    音频缓存

    max_entries 为 0 时不限制大小（会话内一直增长）；
    大于 0 时按最近最少使用淘汰。
    """

    def __init__(self, max_entries: int = 0):
        self.max_entries = max(0, max_entries)
        self._cache: "OrderedDict[AudioKey, str]" = OrderedDict()

    def get(self, accent: Accent, text: str) -> Optional[str]:
        key = make_audio_key(accent, text)
        payload = self._cache.get(key)
        if payload is not None and self.max_entries:
            self._cache.move_to_end(key)
        return payload

    def put(self, accent: Accent, text: str, payload: str) -> None:
        key = make_audio_key(accent, text)
        self._cache[key] = payload
        self._cache.move_to_end(key)
        if self.max_entries:
            while len(self._cache) > self.max_entries:
                evicted, _ = self._cache.popitem(last=False)
                logger.debug(f"🗑️ 音频缓存已满，淘汰: {evicted[0].value}:{evicted[1]}")

    def contains(self, accent: Accent, text: str) -> bool:
        return make_audio_key(accent, text) in self._cache

    def clear(self) -> None:
        self._cache.clear()

    def size(self) -> int:
        return len(self._cache)

    def __len__(self) -> int:
        return len(self._cache)


class InFlightRegistry:
    """
    进行中请求登记表（single-flight）

    同一个键在第一次请求完成之前的所有调用共享同一个 Future，
    所有等待者拿到相同的结果或相同的异常。请求结束（无论成功失败）后
    立即移除登记，之后的调用会重新发起请求。
    """

    def __init__(self):
        self._in_flight: Dict[Hashable, "asyncio.Future"] = {}
        self.joined = 0  # 合并到已有请求的次数

    async def run(self, key: Hashable, factory: Callable[[], Awaitable[T]]) -> T:
        """
        以 single-flight 语义执行请求

        Args:
            key: 请求键
            factory: 创建实际请求协程的函数，只会在没有进行中请求时调用

        Returns:
            请求结果
        """
        future = self._in_flight.get(key)
        if future is not None:
            self.joined += 1
            logger.debug(f"🔁 合并进行中的请求: {key}")
        else:
            future = asyncio.ensure_future(factory())
            self._in_flight[key] = future
            future.add_done_callback(lambda done: self._forget(key, done))

        # shield: 某个等待者被取消不会取消共享请求
        return await asyncio.shield(future)

    def _forget(self, key: Hashable, future: "asyncio.Future") -> None:
        if self._in_flight.get(key) is future:
            del self._in_flight[key]
        # 标记异常已读取，避免无人等待时出现 "exception was never retrieved"
        if not future.cancelled():
            future.exception()

    def is_in_flight(self, key: Hashable) -> bool:
        return key in self._in_flight

    def size(self) -> int:
        return len(self._in_flight)

    def cancel_all(self) -> None:
        """取消所有进行中的请求（应用关闭时使用）"""
        for future in list(self._in_flight.values()):
            future.cancel()
        self._in_flight.clear()
