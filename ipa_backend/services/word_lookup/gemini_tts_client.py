# -*- coding: utf-8 -*-
"""
Gemini语音合成(TTS)客户端 - IPA Lookup V1.0
返回 Base64 编码的 24kHz 单声道 16-bit PCM
"""

import logging
from typing import Dict, Optional

from ipa_backend.models.word_models import Accent
from ipa_backend.services.word_lookup.errors import SynthesisFailed
from ipa_backend.services.word_lookup.gemini_api import GeminiAPI

logger = logging.getLogger(__name__)

DEFAULT_VOICES = {Accent.US: "Kore", Accent.UK: "Puck"}


class GeminiTTSClient:
    """Gemini TTS客户端"""

    def __init__(
        self,
        api: GeminiAPI,
        model: str = "gemini-2.5-flash-preview-tts",
        voices: Optional[Dict[str, str]] = None,
    ):
        """
        初始化TTS客户端

        Args:
            api: Gemini API客户端
            model: TTS模型名称
            voices: 口音到预置发音人的映射，如 {"US": "Kore", "UK": "Puck"}
        """
        self.api = api
        self.model = model
        self.voices = dict(DEFAULT_VOICES)
        for accent, voice_name in (voices or {}).items():
            self.voices[Accent.parse(accent)] = voice_name

    async def synthesize(self, text: str, accent: Accent = Accent.US) -> str:
        """
        合成语音

        Args:
            text: 要合成的文本（单词、短语或段落）
            accent: 口音

        Returns:
            str: Base64 PCM 音频

        Raises:
            ServiceUnavailable: 调用失败
            SynthesisFailed: 没有返回音频
        """
        voice_name = self.voices[Accent(accent)]
        payload = {
            'contents': [{'parts': [{'text': text}]}],
            'generationConfig': {
                'responseModalities': ['AUDIO'],
                'speechConfig': {
                    'voiceConfig': {'prebuiltVoiceConfig': {'voiceName': voice_name}}
                },
            },
        }

        logger.info(f"🔊 [TTS] 合成语音: '{text[:50]}' (发音人:{voice_name})")
        data = await self.api.generate_content(self.model, payload)

        audio = GeminiAPI.extract_inline_audio(data)
        if not audio:
            logger.error(f"❌ [TTS] 合成失败: 没有返回音频 ({text[:50]})")
            raise SynthesisFailed("TTS Failed")

        logger.info(f"✅ [TTS] 合成成功: {len(audio)} base64字符")
        return audio
