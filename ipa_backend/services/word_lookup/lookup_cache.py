# -*- coding: utf-8 -*-
"""
单词查询缓存 - IPA Lookup V1.0
按小写单词缓存查询结果，避免重复调用AI
"""

import logging
from typing import Dict, Iterable, Optional

from ipa_backend.models.word_models import WordDetails

logger = logging.getLogger(__name__)


def normalize_word(word: str) -> str:
    """缓存键：去首尾空格并转小写"""
    return (word or "").strip().lower()


class LookupCache:
    """
    单词缓存管理器（内存版）

    单用户单会话使用，不做淘汰；多用户或长时间运行的部署需要加上容量限制。
    """

    def __init__(self):
        self._cache: Dict[str, WordDetails] = {}
        self.hits = 0
        self.misses = 0

    def get(self, word: str) -> Optional[WordDetails]:
        """
        从缓存获取单词

        Args:
            word: 单词（大小写、首尾空格不敏感）

        Returns:
            Optional[WordDetails]: 缓存的单词数据，不存在返回None
        """
        details = self._cache.get(normalize_word(word))
        if details is None:
            self.misses += 1
        else:
            self.hits += 1
        return details

    def put(self, details: WordDetails, *aliases: str) -> None:
        """
        写入缓存，同一单词直接覆盖（后一次查询刷新释义）

        Args:
            details: 单词数据
            aliases: 额外的缓存键（如用户输入的查询词）
        """
        keys = {normalize_word(details.word), *(normalize_word(a) for a in aliases)}
        keys.discard("")
        if not keys:
            logger.warning("⚠️ 忽略空单词的缓存写入")
            return
        for key in keys:
            self._cache[key] = details
        logger.debug(f"💾 缓存单词: {details.word} (总数: {len(self._cache)})")

    def exists(self, word: str) -> bool:
        """检查单词是否在缓存中（不计入命中统计）"""
        return normalize_word(word) in self._cache

    def rehydrate(self, items: Iterable[WordDetails]) -> int:
        """
        用历史记录回填缓存

        Returns:
            int: 回填条数
        """
        count = 0
        for item in items:
            self.put(item)
            count += 1
        if count:
            logger.info(f"✅ 从历史记录回填缓存: {count} 个单词")
        return count

    def clear(self) -> None:
        """清空缓存"""
        self._cache.clear()
        self.hits = 0
        self.misses = 0
        logger.info("🗑️ 单词缓存已清空")

    def stats(self) -> Dict[str, int]:
        """缓存统计"""
        return {"size": len(self._cache), "hits": self.hits, "misses": self.misses}

    def size(self) -> int:
        """获取缓存大小"""
        return len(self._cache)

    def __len__(self) -> int:
        return len(self._cache)

    def __contains__(self, word: str) -> bool:
        return self.exists(word)
