# -*- coding: utf-8 -*-
"""
联想词防抖 - IPA Lookup V1.0

每次输入都会重置计时器，只有静默期（默认400ms）之后最后一次输入才会触发查询。
已经发出的查询不会被取消，过期结果仍可能返回。
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, List, Optional, Set

from ipa_backend.services.word_lookup.errors import LookupServiceError

logger = logging.getLogger(__name__)

SuggestionCallback = Callable[[str, List[str]], Awaitable[None]]


class CancellableTimer:
    """可取消的延时任务"""

    def __init__(self, delay: float, callback: Callable[..., Awaitable[Any]]):
        """
        Args:
            delay: 延时（秒）
            callback: 到时执行的协程函数
        """
        self.delay = delay
        self.callback = callback
        self._pending: Optional[asyncio.Task] = None
        self._running: Set[asyncio.Task] = set()
        self.closed = False

    def schedule(self, *args: Any) -> None:
        """取消尚未触发的任务并重新计时"""
        if self.closed:
            raise RuntimeError("timer is closed")
        self.cancel()
        self._pending = asyncio.ensure_future(self._wait_and_fire(args))

    async def _wait_and_fire(self, args: tuple) -> None:
        await asyncio.sleep(self.delay)
        task = asyncio.current_task()
        # 已触发：之后的 cancel() 不再影响本次执行
        if self._pending is task:
            self._pending = None
        self._running.add(task)
        try:
            await self.callback(*args)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"❌ 延时任务执行失败: {e}", exc_info=True)
        finally:
            self._running.discard(task)

    @property
    def pending(self) -> bool:
        return self._pending is not None and not self._pending.done()

    def cancel(self) -> None:
        """取消尚未触发的任务"""
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    async def close(self) -> None:
        """释放：取消等待中和执行中的任务"""
        self.closed = True
        tasks = [t for t in (self._pending, *self._running) if t is not None]
        self._pending = None
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)


class SuggestionDebouncer:
    """输入框联想词防抖"""

    def __init__(
        self,
        agent,
        on_result: SuggestionCallback,
        delay: float = 0.4,
        min_length: int = 2,
    ):
        """
        Args:
            agent: 提供 suggest_words(prefix) 的Agent
            on_result: 结果回调 (query, suggestions)
            delay: 静默期（秒）
            min_length: 触发查询的最小长度
        """
        self.agent = agent
        self.on_result = on_result
        self.min_length = min_length
        self.timer = CancellableTimer(delay, self._fire)

    async def on_input(self, text: str) -> None:
        """处理一次输入"""
        query = (text or "").strip()
        if len(query) < self.min_length:
            self.timer.cancel()
            await self.on_result(query, [])
            return
        self.timer.schedule(query)

    async def _fire(self, query: str) -> None:
        try:
            suggestions = await self.agent.suggest_words(query)
        except LookupServiceError as e:
            logger.warning(f"⚠️ 联想词查询失败: {query}: {e}")
            suggestions = []
        await self.on_result(query, suggestions)

    async def close(self) -> None:
        await self.timer.close()
