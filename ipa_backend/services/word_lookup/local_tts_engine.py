# -*- coding: utf-8 -*-
"""
本地语音合成 - IPA Lookup V1.0
使用系统TTS引擎（pyttsx3）即时发音，不走网络
"""

import asyncio
import logging
from typing import Any, Callable, Iterable, Optional

import pyttsx3

from ipa_backend.models.word_models import Accent

logger = logging.getLogger(__name__)

# 口音对应的语言标记（小写匹配 voice.languages / voice.id / voice.name）
ACCENT_MARKERS = {
    Accent.US: ("en-us", "en_us", "united states", "american"),
    Accent.UK: ("en-gb", "en_gb", "great britain", "british", "en-uk"),
}
SPEECH_RATE_FACTOR = 0.9  # 语速稍慢，便于听清


def _voice_tokens(voice: Any) -> str:
    parts = []
    for lang in getattr(voice, "languages", None) or []:
        if isinstance(lang, bytes):
            lang = lang.decode("utf-8", errors="ignore")
        parts.append(str(lang))
    parts.append(str(getattr(voice, "id", "") or ""))
    parts.append(str(getattr(voice, "name", "") or ""))
    return " ".join(parts).lower()


def select_voice(voices: Iterable[Any], accent: Accent) -> Optional[Any]:
    """选择与口音匹配的发音人，没有则返回None（使用默认发音人）"""
    markers = ACCENT_MARKERS[Accent(accent)]
    for voice in voices or []:
        tokens = _voice_tokens(voice)
        if any(marker in tokens for marker in markers):
            return voice
    return None


class LocalTTSEngine:
    """本地TTS引擎"""

    def __init__(self, engine_factory: Callable[[], Any] = pyttsx3.init):
        self.engine_factory = engine_factory

    def _speak_blocking(self, text: str, accent: Accent) -> Optional[str]:
        engine = self.engine_factory()
        try:
            voice = select_voice(engine.getProperty("voices"), accent)
            if voice is not None:
                engine.setProperty("voice", voice.id)
            else:
                logger.debug(f"没有找到 {accent.value} 发音人，使用默认发音人")

            rate = engine.getProperty("rate")
            if rate:
                engine.setProperty("rate", int(rate * SPEECH_RATE_FACTOR))

            engine.say(text)
            engine.runAndWait()
        finally:
            engine.stop()
        return voice.id if voice is not None else None

    async def speak(self, text: str, accent: Accent = Accent.US) -> Optional[str]:
        """
        朗读文本，朗读结束后返回

        Returns:
            Optional[str]: 使用的发音人ID，默认发音人返回None
        """
        logger.info(f"🗣️ 本地发音: '{text[:50]}' ({Accent(accent).value})")
        return await asyncio.to_thread(self._speak_blocking, text, Accent(accent))
