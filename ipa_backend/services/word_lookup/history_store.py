# -*- coding: utf-8 -*-
"""
查询历史存储服务 - IPA Lookup V1.0

最近查询在前，按小写单词去重，最多保留50条；持久化到键值存储，
启动时恢复并回填单词缓存。
"""

import json
import logging
import time
import uuid
from pathlib import Path
from typing import Callable, Dict, List, Optional, Protocol

from pydantic import ValidationError

from ipa_backend.models.word_models import HistoryItem, WordDetails
from ipa_backend.services.word_lookup.errors import PersistenceCorrupt
from ipa_backend.services.word_lookup.lookup_cache import LookupCache, normalize_word

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_KEY = "ipa_history"
DEFAULT_MAX_SIZE = 50


class KeyValueStore(Protocol):
    """持久化键值存储（类似浏览器 localStorage）"""

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class InMemoryKeyValueStore:
    """内存键值存储"""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileKeyValueStore:
    """JSON文件键值存储"""

    def __init__(self, file_path: Path):
        """
        初始化存储

        Args:
            file_path: 数据文件路径
        """
        self.file_path = Path(file_path)
        self.file_path.parent.mkdir(parents=True, exist_ok=True)

        # 确保文件存在
        self._ensure_file()

    def _ensure_file(self):
        """确保数据文件存在"""
        if not self.file_path.exists():
            self._save_data({})
            logger.info(f"✅ 创建数据文件: {self.file_path}")

    def _load_data(self) -> Dict[str, str]:
        """加载数据"""
        try:
            data = json.loads(self.file_path.read_text(encoding='utf-8'))
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"❌ 加载数据文件失败: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _save_data(self, data: Dict[str, str]) -> bool:
        """保存数据"""
        try:
            self.file_path.write_text(
                json.dumps(data, indent=2, ensure_ascii=False),
                encoding='utf-8'
            )
            return True
        except OSError as e:
            logger.error(f"❌ 保存数据文件失败: {e}")
            return False

    def get(self, key: str) -> Optional[str]:
        value = self._load_data().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._load_data()
        data[key] = value
        self._save_data(data)

    def remove(self, key: str) -> None:
        data = self._load_data()
        if data.pop(key, None) is not None:
            self._save_data(data)


def _now_ms() -> int:
    return int(time.time() * 1000)


class HistoryStore:
    """查询历史存储服务"""

    def __init__(
        self,
        store: KeyValueStore,
        cache: Optional[LookupCache] = None,
        key: str = DEFAULT_HISTORY_KEY,
        max_size: int = DEFAULT_MAX_SIZE,
        clock: Callable[[], int] = _now_ms,
    ):
        """
        Args:
            store: 持久化键值存储
            cache: 需要同步的单词缓存
            key: 存储键
            max_size: 最多保留条数
            clock: 毫秒时间戳函数
        """
        self.store = store
        self.cache = cache
        self.key = key
        self.max_size = max_size
        self.clock = clock
        self._items: List[HistoryItem] = []

    def record(self, details: WordDetails) -> HistoryItem:
        """
        记录一次成功查询

        同一单词（不区分大小写）的旧记录会被移除，新记录放在最前面。

        Returns:
            HistoryItem: 新的历史记录
        """
        fields = details.model_dump(include=set(WordDetails.model_fields))
        item = HistoryItem(**fields, id=str(uuid.uuid4()), timestamp=self.clock())

        if self.cache is not None:
            self.cache.put(details)

        key = normalize_word(details.word)
        remaining = [h for h in self._items if normalize_word(h.word) != key]
        self._items = [item, *remaining][:self.max_size]
        self._persist()

        logger.debug(f"📝 记录历史: {details.word} (总数: {len(self._items)})")
        return item

    def list(self) -> List[HistoryItem]:
        """最近查询在前的历史记录"""
        return list(self._items)

    def get(self, item_id: str) -> Optional[HistoryItem]:
        for item in self._items:
            if item.id == item_id:
                return item
        return None

    def clear(self) -> None:
        """清空内存和持久化的历史记录"""
        self._items = []
        try:
            self.store.remove(self.key)
        except OSError as e:
            logger.error(f"❌ 删除历史记录失败: {e}")
        logger.info("🗑️ 历史记录已清空")

    def restore(self) -> List[HistoryItem]:
        """
        启动时恢复历史记录

        数据损坏时记录错误并以空历史启动。
        """
        try:
            self._items = self._load()
        except PersistenceCorrupt as e:
            logger.error(f"❌ 历史记录已损坏，使用空历史: {e}")
            self._items = []

        if self.cache is not None:
            self.cache.rehydrate(self._items)

        logger.info(f"✅ 恢复历史记录: {len(self._items)} 条")
        return list(self._items)

    def _load(self) -> List[HistoryItem]:
        raw = self.store.get(self.key)
        if raw is None:
            return []

        try:
            data = json.loads(raw)
            if not isinstance(data, list):
                raise PersistenceCorrupt("历史记录不是列表")
            items = [HistoryItem(**entry) for entry in data]
        except (json.JSONDecodeError, TypeError, ValidationError) as e:
            raise PersistenceCorrupt(str(e)) from e

        return items[:self.max_size]

    def _persist(self) -> None:
        """写入持久化存储，失败只记录日志，内存中的历史记录保持不变"""
        payload = [item.model_dump(by_alias=True) for item in self._items]
        try:
            self.store.set(self.key, json.dumps(payload, ensure_ascii=False))
        except OSError as e:
            logger.error(f"❌ 保存历史记录失败: {e}")

    def __len__(self) -> int:
        return len(self._items)
