# -*- coding: utf-8 -*-
"""
应用状态容器 - IPA Lookup V1.0
集中创建并持有缓存、历史记录和各个服务，挂在 app.state 上注入到路由
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from ipa_backend.config.settings import Settings
from ipa_backend.models.word_models import CacheStatsResponse
from ipa_backend.services.word_lookup.audio_cache import AudioCache, InFlightRegistry
from ipa_backend.services.word_lookup.gemini_api import GeminiAPI
from ipa_backend.services.word_lookup.gemini_tts_client import GeminiTTSClient
from ipa_backend.services.word_lookup.gemini_word_agent import GeminiWordAgent
from ipa_backend.services.word_lookup.history_store import HistoryStore, JsonFileKeyValueStore, KeyValueStore
from ipa_backend.services.word_lookup.local_tts_engine import LocalTTSEngine
from ipa_backend.services.word_lookup.lookup_cache import LookupCache
from ipa_backend.services.word_lookup.lookup_controller import WordLookupController
from ipa_backend.services.word_lookup.pronunciation_coordinator import PronunciationCoordinator
from ipa_backend.utils.api_config_loader import api_config_loader

logger = logging.getLogger(__name__)

HISTORY_FILE_NAME = "history.json"


class AppState:
    """应用状态（每个应用实例一份，测试之间互不影响）"""

    def __init__(
        self,
        settings: Settings,
        agent=None,
        synthesizer=None,
        local_tts=None,
        store: Optional[KeyValueStore] = None,
        gemini_config: Optional[Dict[str, Any]] = None,
    ):
        """
        Args:
            settings: 应用设置
            agent: 单词查询Agent，默认 GeminiWordAgent
            synthesizer: 语音合成客户端，默认 GeminiTTSClient
            local_tts: 本地TTS引擎，默认 LocalTTSEngine
            store: 历史记录键值存储，默认 data_dir 下的 JSON 文件
            gemini_config: Gemini配置，默认从 external_apis.yaml 读取
        """
        self.settings = settings

        if agent is None or synthesizer is None:
            config = gemini_config or api_config_loader.get_gemini_config()
            api_key = config.get('api_key', '') if config.get('enabled', True) else ''
            if not api_key:
                logger.warning("⚠️ Gemini API 未启用或未配置 GEMINI_API_KEY，单词查询和语音合成将不可用")
            api = GeminiAPI(
                api_key=api_key,
                base_url=config['base_url'],
                timeout=config.get('timeout', 30),
            )
            if agent is None:
                agent = GeminiWordAgent(api, model=config['text_model'])
            if synthesizer is None:
                synthesizer = GeminiTTSClient(api, model=config['tts_model'], voices=config.get('voices'))

        self.agent = agent
        self.synthesizer = synthesizer
        self.local_tts = local_tts if local_tts is not None else LocalTTSEngine()
        self.store = store if store is not None else JsonFileKeyValueStore(
            Path(settings.data_dir) / HISTORY_FILE_NAME
        )

        self.cache = LookupCache()
        self.audio_cache = AudioCache(max_entries=settings.audio_cache_max_entries)
        self.in_flight = InFlightRegistry()
        self.coordinator = PronunciationCoordinator(self.synthesizer, self.audio_cache, self.in_flight)
        self.history = HistoryStore(
            self.store,
            cache=self.cache,
            key=settings.history_key,
            max_size=settings.history_max_size,
        )
        self.controller = WordLookupController(
            self.agent,
            self.coordinator,
            self.cache,
            self.history,
            sample_rate=settings.audio_sample_rate,
            channels=settings.audio_channels,
        )

    def startup(self) -> None:
        """启动：恢复历史记录并回填缓存"""
        self.history.restore()
        logger.info(f"✅ 应用状态已就绪: 缓存 {self.cache.size()} 个单词")

    async def shutdown(self) -> None:
        """关闭：取消后台预取"""
        await self.coordinator.close()
        logger.info("👋 后台任务已取消")

    def reset(self) -> None:
        """清空所有缓存、历史记录和查询状态"""
        self.cache.clear()
        self.audio_cache.clear()
        self.history.clear()
        self.controller.reset()

    def cache_stats(self) -> CacheStatsResponse:
        word_stats = self.cache.stats()
        return CacheStatsResponse(
            word_cache_size=word_stats["size"],
            word_cache_hits=word_stats["hits"],
            word_cache_misses=word_stats["misses"],
            audio_cache_size=self.audio_cache.size(),
            audio_cache_max_entries=self.audio_cache.max_entries,
            audio_in_flight=self.in_flight.size(),
            history_size=len(self.history),
        )
