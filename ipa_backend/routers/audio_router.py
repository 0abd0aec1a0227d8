# -*- coding: utf-8 -*-
"""
发音路由 - IPA Lookup V1.0
Gemini TTS 发音（带缓存）和本地即时发音
"""

import logging
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response

from ipa_backend.core.app_state import AppState
from ipa_backend.deps.dependencies import get_app_state, to_http_exception
from ipa_backend.models.word_models import Accent, AudioPayloadResponse, SpeakRequest
from ipa_backend.services.word_lookup.errors import LookupServiceError
from ipa_backend.services.word_lookup.pcm_decoder import AudioBuffer, encode_wav

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/audio", tags=["audio"])

AUDIO_HEADERS = {
    "Cache-Control": "public, max-age=86400",  # 缓存1天
}


def _wav_response(buffer: AudioBuffer) -> Response:
    return Response(content=encode_wav(buffer), media_type="audio/wav", headers=AUDIO_HEADERS)


@router.get("/tts")
async def generate_tts(
    text: str = Query(..., description="要合成语音的文本"),
    voice: Literal["us", "uk", "US", "UK"] = Query("us", description="口音：us=美式, uk=英式"),
    state: AppState = Depends(get_app_state),
):
    """
    使用Gemini TTS生成发音

    Returns:
        音频文件流（WAV格式）

    Raises:
        HTTPException: 400 - 文本为空
        HTTPException: 502 - TTS没有返回音频
        HTTPException: 503 - TTS服务不可用
    """
    if not text or not text.strip():
        raise HTTPException(status_code=400, detail="文本不能为空")

    try:
        buffer = await state.controller.play(text.strip(), Accent.parse(voice))
    except LookupServiceError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"❌ [TTS] 生成异常: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"TTS生成失败: {str(e)}")

    return _wav_response(buffer)


@router.get("/tts/raw", response_model=AudioPayloadResponse)
async def generate_tts_raw(
    text: str = Query(..., description="要合成语音的文本"),
    voice: Literal["us", "uk", "US", "UK"] = Query("us"),
    state: AppState = Depends(get_app_state),
):
    """返回原始 Base64 PCM（前端自行解码播放）"""
    if not text or not text.strip():
        raise HTTPException(status_code=400, detail="文本不能为空")

    accent = Accent.parse(voice)
    try:
        payload = await state.coordinator.fetch(text.strip(), accent)
    except LookupServiceError as e:
        raise to_http_exception(e)

    return AudioPayloadResponse(
        text=text.strip(),
        accent=accent,
        sample_rate=state.settings.audio_sample_rate,
        channels=state.settings.audio_channels,
        audio_base64=payload,
    )


@router.post("/paragraph/play")
async def play_paragraph(state: AppState = Depends(get_app_state)):
    """
    播放最近一次转写的段落

    Raises:
        HTTPException: 400 - 还没有转写段落
        HTTPException: 409 - 正在播放
    """
    try:
        buffer = await state.controller.play_paragraph()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LookupServiceError as e:
        raise to_http_exception(e)

    return _wav_response(buffer)


@router.post("/speak-local")
async def speak_local(request: SpeakRequest, state: AppState = Depends(get_app_state)):
    """使用本机TTS引擎即时发音"""
    if not request.text or not request.text.strip():
        raise HTTPException(status_code=400, detail="文本不能为空")

    try:
        voice_id = await state.local_tts.speak(request.text.strip(), request.accent)
    except (RuntimeError, OSError) as e:
        logger.error(f"❌ 本地发音失败: {e}")
        raise HTTPException(status_code=503, detail="本地TTS引擎不可用")

    return {"success": True, "voice": voice_id}
