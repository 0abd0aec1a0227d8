# -*- coding: utf-8 -*-
"""
单词查询控制器 - IPA Lookup V1.0

串联单词缓存、AI查询、历史记录和发音预取，维护前端需要的查询状态。

流程：
1. 检查缓存，命中直接返回（不调用AI）
2. 调用Gemini获取音标、释义和例句
3. 写入缓存和历史记录
4. 后台预取美音和英音
"""

import logging
from typing import List, Optional

from ipa_backend.models.word_models import (
    Accent,
    AppStatus,
    HistoryItem,
    LookupState,
    TranscriptionToken,
    WordDetails,
)
from ipa_backend.services.word_lookup.errors import PlaybackBusy
from ipa_backend.services.word_lookup.history_store import HistoryStore
from ipa_backend.services.word_lookup.lookup_cache import LookupCache
from ipa_backend.services.word_lookup.pcm_decoder import AudioBuffer, decode_base64_pcm
from ipa_backend.services.word_lookup.pronunciation_coordinator import PronunciationCoordinator

logger = logging.getLogger(__name__)

LOOKUP_ERROR_MESSAGE = "Error fetching word."
PARAGRAPH_ERROR_MESSAGE = "Failed to process paragraph."


class WordLookupController:
    """单词查询控制器"""

    def __init__(
        self,
        agent,
        coordinator: PronunciationCoordinator,
        cache: LookupCache,
        history: HistoryStore,
        sample_rate: int = 24000,
        channels: int = 1,
    ):
        self.agent = agent
        self.coordinator = coordinator
        self.cache = cache
        self.history = history
        self.sample_rate = sample_rate
        self.channels = channels
        self._state = LookupState()

    def state(self) -> LookupState:
        """当前状态快照"""
        return self._state.model_copy()

    def _update(self, **changes) -> None:
        self._state = self._state.model_copy(update=changes)

    def _show_word(self, details: WordDetails) -> None:
        self._update(
            status=AppStatus.SUCCESS,
            current_word=details,
            paragraph_result=None,
            error_message="",
        )

    async def search(self, word: str) -> Optional[WordDetails]:
        """
        查询单词

        Args:
            word: 单词（空白输入直接忽略）

        Returns:
            Optional[WordDetails]: 单词详情，空输入返回None

        Raises:
            LookupServiceError: AI查询失败（状态同时置为 ERROR）
        """
        word = (word or "").strip()
        if not word:
            return None

        cached = self.cache.get(word)
        if cached is not None:
            logger.info(f"✅ 从缓存返回: {word}")
            self._show_word(cached)
            self.history.record(cached)
            # 音频缓存可能已被清空，命中时也预取
            self.coordinator.warm(cached.word)
            return cached

        self._update(status=AppStatus.LOADING, error_message="")
        try:
            details = await self.agent.lookup_word(word)
        except Exception as e:
            logger.error(f"❌ 查询单词失败: {word}: {e}")
            self._update(status=AppStatus.ERROR, error_message=str(e) or LOOKUP_ERROR_MESSAGE)
            raise

        # 查询词作为别名，AI返回的拼写不同时再次查询仍能命中
        self.cache.put(details, word)
        self.history.record(details)
        self.coordinator.warm(details.word)
        self._show_word(details)

        logger.info(f"✅ 查询完成: {details.word}")
        return details

    async def submit_paragraph(self, text: str) -> List[TranscriptionToken]:
        """
        段落音标转写，成功后在后台生成整段美音

        Raises:
            ValueError: 段落为空
            LookupServiceError: 转写失败（状态同时置为 ERROR）
        """
        text = (text or "").strip()
        if not text:
            raise ValueError("段落不能为空")

        self._update(paragraph_text=text, status=AppStatus.LOADING, error_message="")
        try:
            tokens = await self.agent.transcribe_paragraph(text)
        except Exception as e:
            logger.error(f"❌ 段落转写失败: {e}")
            self._update(status=AppStatus.ERROR, error_message=PARAGRAPH_ERROR_MESSAGE)
            raise

        self._update(
            status=AppStatus.SUCCESS,
            paragraph_result=tokens,
            current_word=None,
            error_message="",
        )
        self.coordinator.warm_text(text, Accent.US)
        return tokens

    async def play(self, text: str, accent: Accent = Accent.US) -> AudioBuffer:
        """
        前台播放：获取音频并解码

        播放失败只抛给调用方，不改变查询状态。

        Raises:
            SynthesisFailed: 没有返回音频
            ServiceUnavailable: 合成服务不可用
        """
        payload = await self.coordinator.fetch(text, accent)
        return decode_base64_pcm(payload, self.sample_rate, self.channels)

    async def play_paragraph(self) -> AudioBuffer:
        """
        播放最近一次转写的段落（美音）

        Raises:
            ValueError: 还没有转写过段落
            PlaybackBusy: 上一次播放还没完成
        """
        text = self._state.paragraph_text
        if not text:
            raise ValueError("没有可播放的段落")
        if self._state.is_paragraph_playing:
            raise PlaybackBusy("段落音频正在播放")

        self._update(is_paragraph_playing=True)
        try:
            return await self.play(text, Accent.US)
        except Exception as e:
            logger.error(f"❌ 段落音频播放失败: {e}")
            raise
        finally:
            self._update(is_paragraph_playing=False)

    def select_history(self, item_id: str) -> Optional[HistoryItem]:
        """从历史记录中选择单词（不调用AI）"""
        item = self.history.get(item_id)
        if item is None:
            return None
        self._show_word(item)
        self.coordinator.warm(item.word)
        return item

    def clear_history(self, clear_cache: bool = False) -> None:
        """清空历史记录（可选同时清空单词缓存）"""
        self.history.clear()
        if clear_cache:
            self.cache.clear()

    def reset(self) -> None:
        """状态回到 IDLE"""
        self._state = LookupState()
