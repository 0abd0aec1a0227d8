# -*- coding: utf-8 -*-
"""
测试公共夹具：假的AI Agent和TTS客户端
"""

import asyncio
import base64
import struct
from typing import Dict, List, Optional

import pytest

from ipa_backend.config.settings import Settings
from ipa_backend.models.word_models import Accent, TranscriptionToken, WordDetails
from ipa_backend.services.word_lookup.errors import WordNotFound
from ipa_backend.services.word_lookup.history_store import InMemoryKeyValueStore

# 4个单声道采样: 0, 16384, -16384, 32767
PCM_SAMPLES = (0, 16384, -16384, 32767)
PCM_BASE64 = base64.b64encode(struct.pack("<4h", *PCM_SAMPLES)).decode("ascii")


def make_details(word: str, **overrides) -> WordDetails:
    data = {
        "word": word,
        "ipa_us": f"/{word.lower()}-us/",
        "ipa_uk": f"/{word.lower()}-uk/",
        "definition": f"definition of {word}",
        "example": f"An example with {word}.",
        "partsOfSpeech": ["noun"],
    }
    data.update(overrides)
    return WordDetails(**data)


class FakeWordAgent:
    """记录调用次数的假Agent"""

    def __init__(self, words: Optional[Dict[str, WordDetails]] = None, suggestions: Optional[List[str]] = None):
        self.words = {k.lower(): v for k, v in (words or {}).items()}
        self.suggestions = suggestions or []
        self.error: Optional[Exception] = None
        self.lookup_calls: List[str] = []
        self.suggest_calls: List[str] = []
        self.paragraph_calls: List[str] = []

    async def lookup_word(self, word: str) -> WordDetails:
        self.lookup_calls.append(word)
        if self.error is not None:
            raise self.error
        details = self.words.get(word.strip().lower())
        if details is None:
            raise WordNotFound(f"没有找到单词: {word}")
        return details

    async def suggest_words(self, prefix: str) -> List[str]:
        self.suggest_calls.append(prefix)
        if self.error is not None:
            raise self.error
        return [s for s in self.suggestions if s.lower().startswith(prefix.lower())][:5]

    async def transcribe_paragraph(self, text: str) -> List[TranscriptionToken]:
        self.paragraph_calls.append(text)
        if self.error is not None:
            raise self.error
        return [TranscriptionToken(original=token, ipa=f"/{token.lower()}/") for token in text.split()]


class FakeSynthesizer:
    """记录调用的假TTS客户端，gate 用于控制请求何时完成"""

    def __init__(self, payload: str = PCM_BASE64, error: Optional[Exception] = None):
        self.payload = payload
        self.error = error
        self.gate: Optional[asyncio.Event] = None
        self.calls: List[tuple] = []

    async def synthesize(self, text: str, accent: Accent) -> str:
        self.calls.append((text, Accent(accent)))
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.payload


class FakeLocalTTS:
    def __init__(self):
        self.spoken: List[tuple] = []

    async def speak(self, text: str, accent: Accent = Accent.US) -> Optional[str]:
        self.spoken.append((text, Accent(accent)))
        return f"voice-{Accent(accent).value.lower()}"


class FailingKeyValueStore(InMemoryKeyValueStore):
    """写入总是失败的存储（模拟磁盘已满）"""

    def set(self, key: str, value: str) -> None:
        raise OSError("disk full")


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(data_dir=str(tmp_path), suggestion_debounce_seconds=0.05)


@pytest.fixture
def kv_store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def agent() -> FakeWordAgent:
    return FakeWordAgent(
        words={
            "resume": make_details("resume", ipa_us="/rɪˈzuːm/", ipa_uk="/rɪˈzjuːm/", partsOfSpeech=["verb"]),
            "hello": make_details("hello", ipa_us="/həˈloʊ/", ipa_uk="/həˈləʊ/", partsOfSpeech=["interjection"]),
        },
        suggestions=["hello", "help", "helmet", "helicopter", "hellish", "helium"],
    )


@pytest.fixture
def synthesizer() -> FakeSynthesizer:
    return FakeSynthesizer()
