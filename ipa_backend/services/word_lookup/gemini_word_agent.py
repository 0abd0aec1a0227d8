# -*- coding: utf-8 -*-
"""
Gemini单词查询Agent - IPA Lookup V1.0
调用Gemini生成单词音标、释义、例句、联想词和段落音标
"""

import logging
from typing import List

from pydantic import ValidationError

from ipa_backend.models.word_models import TranscriptionToken, WordDetails
from ipa_backend.services.word_lookup.errors import MalformedResponse, WordNotFound
from ipa_backend.services.word_lookup.gemini_api import GeminiAPI, parse_json_text

logger = logging.getLogger(__name__)

MAX_SUGGESTIONS = 5

WORD_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "word": {"type": "STRING"},
        "ipa_us": {"type": "STRING"},
        "ipa_uk": {"type": "STRING"},
        "definition": {"type": "STRING"},
        "example": {"type": "STRING"},
        "partsOfSpeech": {"type": "ARRAY", "items": {"type": "STRING"}},
    },
    "required": ["word", "ipa_us", "ipa_uk", "definition", "example", "partsOfSpeech"],
}

SUGGESTION_SCHEMA = {"type": "ARRAY", "items": {"type": "STRING"}}

PARAGRAPH_SCHEMA = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {"original": {"type": "STRING"}, "ipa": {"type": "STRING"}},
        "required": ["original", "ipa"],
    },
}


class GeminiWordAgent:
    """Gemini AI单词查询Agent"""

    def __init__(self, api: GeminiAPI, model: str = "gemini-3-flash-preview"):
        """
        初始化Agent

        Args:
            api: Gemini API客户端
            model: 文本模型名称
        """
        self.api = api
        self.model = model

    async def _generate_json(self, prompt: str, schema: dict):
        payload = {
            'contents': [{'parts': [{'text': prompt}]}],
            'generationConfig': {
                'responseMimeType': 'application/json',
                'responseSchema': schema,
            },
        }
        data = await self.api.generate_content(self.model, payload)
        return parse_json_text(GeminiAPI.extract_text(data))

    async def lookup_word(self, word: str) -> WordDetails:
        """
        查询单词音标、释义和例句

        Args:
            word: 要查询的英文单词

        Returns:
            WordDetails: 单词详情

        Raises:
            ServiceUnavailable: 调用失败
            WordNotFound: AI没有返回数据
            MalformedResponse: 返回数据不完整
        """
        word = word.strip()
        logger.info(f"🤖 Gemini查询单词: {word}")

        prompt = f'Provide linguistic data (IPA, definition, example) for the English word: "{word}"'
        data = await self._generate_json(prompt, WORD_SCHEMA)

        if not isinstance(data, dict):
            raise MalformedResponse("AI返回数据不是对象")
        if not data:
            raise WordNotFound(f"没有找到单词: {word}")

        try:
            details = WordDetails(**data)
        except ValidationError as e:
            logger.warning(f"⚠️ Gemini返回缺少必要字段: {data}")
            raise MalformedResponse("AI返回数据格式不完整") from e

        logger.info(f"✅ 解析成功: {details.word} {details.ipa_us}")
        return details

    async def suggest_words(self, prefix: str) -> List[str]:
        """联想以 prefix 开头的单词（最多5个）"""
        prompt = f'Suggest 5 English words starting with: "{prefix}"'
        data = await self._generate_json(prompt, SUGGESTION_SCHEMA)

        if not isinstance(data, list):
            raise MalformedResponse("联想词返回格式错误")

        return [item.strip() for item in data if isinstance(item, str) and item.strip()][:MAX_SUGGESTIONS]

    async def transcribe_paragraph(self, text: str) -> List[TranscriptionToken]:
        """
        段落逐词音标转写

        Returns:
            List[TranscriptionToken]: 按输入顺序，每个词一项
        """
        logger.info(f"🤖 Gemini段落转写: {len(text)}字符")
        prompt = f'IPA transcription for: "{text}"'
        data = await self._generate_json(prompt, PARAGRAPH_SCHEMA)

        if not isinstance(data, list):
            raise MalformedResponse("段落转写返回格式错误")

        try:
            return [TranscriptionToken(**item) for item in data]
        except (TypeError, ValidationError) as e:
            raise MalformedResponse("段落转写数据格式不完整") from e
