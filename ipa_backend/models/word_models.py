# -*- coding: utf-8 -*-
"""
单词查询相关数据模型 - IPA Lookup V1.0
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class Accent(str, Enum):
    """发音口音"""
    US = "US"
    UK = "UK"

    @classmethod
    def parse(cls, value: str) -> "Accent":
        """宽松解析（接受 us/uk/en-US/en-GB）"""
        normalized = (value or "").strip().upper()
        if normalized in ("UK", "GB", "EN-GB"):
            return cls.UK
        if normalized in ("US", "EN-US"):
            return cls.US
        raise ValueError(f"unsupported accent: {value!r}")


class AppStatus(str, Enum):
    """查询界面状态"""
    IDLE = "IDLE"
    LOADING = "LOADING"
    ERROR = "ERROR"
    SUCCESS = "SUCCESS"


class WordDetails(BaseModel):
    """单词详情（AI生成，生成后不可变）"""
    word: str
    ipa_us: str
    ipa_uk: str
    definition: str
    example: str
    parts_of_speech: List[str] = Field(alias="partsOfSpeech")

    class Config:
        frozen = True
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "word": "resume",
                "ipa_us": "/rɪˈzuːm/",
                "ipa_uk": "/rɪˈzjuːm/",
                "definition": "To begin again after a pause or interruption.",
                "example": "The meeting will resume after lunch.",
                "partsOfSpeech": ["verb"]
            }
        }


class HistoryItem(WordDetails):
    """历史记录条目"""
    id: str
    timestamp: int  # 毫秒时间戳


class TranscriptionToken(BaseModel):
    """段落音标转写的单个词"""
    original: str
    ipa: str


class ParagraphRequest(BaseModel):
    """段落转写请求模型"""
    text: str

    class Config:
        json_schema_extra = {
            "example": {"text": "The quick brown fox jumps over the lazy dog."}
        }


class SpeakRequest(BaseModel):
    """本地发音请求模型"""
    text: str
    accent: Accent = Accent.US


class ParagraphResponse(BaseModel):
    """段落转写响应模型"""
    text: str
    tokens: List[TranscriptionToken]


class SuggestionResponse(BaseModel):
    """联想词响应模型"""
    query: str
    suggestions: List[str]


class HistoryListResponse(BaseModel):
    """历史记录列表响应模型"""
    items: List[HistoryItem]
    total: int


class LookupState(BaseModel):
    """当前查询状态快照"""
    status: AppStatus = AppStatus.IDLE
    current_word: Optional[WordDetails] = None
    paragraph_result: Optional[List[TranscriptionToken]] = None
    paragraph_text: str = ""
    error_message: str = ""
    is_paragraph_playing: bool = False


class AudioPayloadResponse(BaseModel):
    """Base64 PCM 音频响应模型"""
    text: str
    accent: Accent
    sample_rate: int
    channels: int
    audio_base64: str


class CacheStatsResponse(BaseModel):
    """缓存统计响应模型"""
    word_cache_size: int
    word_cache_hits: int
    word_cache_misses: int
    audio_cache_size: int
    audio_cache_max_entries: int
    audio_in_flight: int
    history_size: int
