# -*- coding: utf-8 -*-
"""
发音请求协调器 - IPA Lookup V1.0

- fetch: 前台播放用，先查音频缓存，未命中时发起一次合成（并发相同请求合并）
- warm: 后台预取美音和英音，失败静默丢弃，不重试，不阻塞调用方
"""

import asyncio
import logging
from typing import Optional, Protocol, Set

from ipa_backend.models.word_models import Accent
from ipa_backend.services.word_lookup.audio_cache import AudioCache, InFlightRegistry, make_audio_key
from ipa_backend.services.word_lookup.errors import SynthesisFailed

logger = logging.getLogger(__name__)


class SpeechSynthesizer(Protocol):
    async def synthesize(self, text: str, accent: Accent) -> str: ...


class PronunciationCoordinator:
    """发音请求协调器"""

    def __init__(
        self,
        synthesizer: SpeechSynthesizer,
        audio_cache: Optional[AudioCache] = None,
        in_flight: Optional[InFlightRegistry] = None,
    ):
        self.synthesizer = synthesizer
        self.audio_cache = audio_cache if audio_cache is not None else AudioCache()
        self.in_flight = in_flight if in_flight is not None else InFlightRegistry()
        self._background: Set[asyncio.Task] = set()

    async def fetch(self, text: str, accent: Accent = Accent.US) -> str:
        """
        获取发音音频

        Args:
            text: 文本
            accent: 口音

        Returns:
            str: Base64 PCM 音频

        Raises:
            SynthesisFailed: 合成服务没有返回音频
            ServiceUnavailable: 合成服务不可用
        """
        accent = Accent(accent)
        if not text or not text.strip():
            raise ValueError("text must not be empty")

        cached = self.audio_cache.get(accent, text)
        if cached is not None:
            logger.debug(f"🎵 [TTS] 从缓存返回: {text[:50]} ({accent.value})")
            return cached

        key = make_audio_key(accent, text)
        return await self.in_flight.run(key, lambda: self._synthesize(text, accent))

    async def _synthesize(self, text: str, accent: Accent) -> str:
        payload = await self.synthesizer.synthesize(text, accent)
        if not payload:
            raise SynthesisFailed("TTS Failed")
        self.audio_cache.put(accent, text, payload)
        logger.debug(f"💾 [TTS] 音频已缓存: {text[:50]} ({accent.value})")
        return payload

    def warm(self, word: str) -> None:
        """后台预取单词的美音和英音"""
        for accent in (Accent.US, Accent.UK):
            self.warm_text(word, accent)

    def warm_text(self, text: str, accent: Accent = Accent.US) -> None:
        """后台预取一段文本的发音（立即返回）"""
        if not text or not text.strip():
            return
        if self.audio_cache.contains(accent, text):
            return
        task = asyncio.ensure_future(self._prefetch(text, Accent(accent)))
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _prefetch(self, text: str, accent: Accent) -> None:
        try:
            await self.fetch(text, accent)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            # 预取失败不影响界面
            logger.debug(f"预取发音失败（忽略）: {text[:50]} ({accent.value}): {e}")

    @property
    def pending_prefetches(self) -> int:
        return len(self._background)

    async def drain(self) -> None:
        """等待所有后台预取结束"""
        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    async def close(self) -> None:
        """取消后台预取和进行中的请求"""
        for task in list(self._background):
            task.cancel()
        if self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)
        self.in_flight.cancel_all()

    def clear(self) -> None:
        self.audio_cache.clear()
