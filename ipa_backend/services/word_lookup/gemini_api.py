# -*- coding: utf-8 -*-
"""
Gemini generateContent 调用封装 - IPA Lookup V1.0
单词查询Agent和TTS客户端共用
"""

import json
import logging
from typing import Any, Dict, Optional

import httpx

from ipa_backend.services.word_lookup.errors import MalformedResponse, ServiceUnavailable

logger = logging.getLogger(__name__)


class GeminiAPI:
    """Gemini REST API客户端"""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: float = 30,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        初始化Gemini客户端

        Args:
            api_key: Gemini API密钥
            base_url: API基础URL
            timeout: 请求超时时间（秒）
            transport: 自定义 httpx transport（测试时注入 MockTransport）
        """
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    async def generate_content(self, model: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        调用 models/{model}:generateContent

        Returns:
            Dict: API返回的JSON

        Raises:
            ServiceUnavailable: 网络错误、超时、非200响应
            MalformedResponse: 响应不是JSON
        """
        if not self.api_key:
            raise ServiceUnavailable("Gemini API密钥未配置")

        url = f"{self.base_url}/models/{model}:generateContent"
        headers = {
            'x-goog-api-key': self.api_key,
            'Content-Type': 'application/json'
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(url, headers=headers, json=payload)
        except httpx.TimeoutException as e:
            logger.error(f"⏱️ Gemini请求超时: {model}")
            raise ServiceUnavailable("Gemini请求超时") from e
        except httpx.HTTPError as e:
            logger.error(f"❌ Gemini API调用异常: {e}")
            raise ServiceUnavailable(f"Gemini请求失败: {e}") from e

        if response.status_code != 200:
            logger.error(f"❌ Gemini API错误: HTTP {response.status_code} - {response.text[:200]}")
            raise ServiceUnavailable(f"Gemini API错误: HTTP {response.status_code}")

        try:
            return response.json()
        except json.JSONDecodeError as e:
            raise MalformedResponse("Gemini返回的不是JSON") from e

    @staticmethod
    def first_parts(data: Dict[str, Any]) -> list:
        """取第一个候选结果的 parts 列表"""
        candidates = data.get('candidates') or []
        if not candidates:
            return []
        content = candidates[0].get('content') or {}
        return content.get('parts') or []

    @classmethod
    def extract_text(cls, data: Dict[str, Any]) -> str:
        """拼接第一个候选结果中的文本"""
        return "".join(part.get('text', '') for part in cls.first_parts(data)).strip()

    @classmethod
    def extract_inline_audio(cls, data: Dict[str, Any]) -> Optional[str]:
        """取第一个候选结果中的 inlineData（Base64音频）"""
        for part in cls.first_parts(data):
            inline = part.get('inlineData') or part.get('inline_data')
            if inline and inline.get('data'):
                return inline['data']
        return None


def parse_json_text(text: str) -> Any:
    """
    解析模型返回的JSON文本（去掉可能的markdown代码块标记）

    Raises:
        MalformedResponse: 解析失败
    """
    cleaned_text = (text or "").strip()
    if cleaned_text.startswith('```json'):
        cleaned_text = cleaned_text[7:]
    if cleaned_text.startswith('```'):
        cleaned_text = cleaned_text[3:]
    if cleaned_text.endswith('```'):
        cleaned_text = cleaned_text[:-3]
    cleaned_text = cleaned_text.strip()

    if not cleaned_text:
        raise MalformedResponse("AI返回为空")

    try:
        return json.loads(cleaned_text)
    except json.JSONDecodeError as e:
        logger.error(f"❌ JSON解析失败: {e}, 原始文本: {cleaned_text[:200]}...")
        raise MalformedResponse(f"AI返回格式错误: {e}") from e
