# -*- coding: utf-8 -*-
"""
联想词 WebSocket 路由 - IPA Lookup V1.0

前端每次按键发送当前输入，服务端在静默期结束后推送联想词：
{"type": "suggestions", "query": "...", "suggestions": [...]}
"""

import logging
from typing import List

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from ipa_backend.deps.dependencies import get_app_state
from ipa_backend.services.word_lookup.debounce import SuggestionDebouncer

logger = logging.getLogger(__name__)

router = APIRouter(tags=["suggest"])


@router.websocket("/ws/suggest")
async def suggest_websocket(websocket: WebSocket):
    """联想词 WebSocket（每个连接一个防抖计时器，断开时取消）"""
    await websocket.accept()
    state = get_app_state(websocket)
    logger.info("WebSocket客户端已连接")

    async def send_suggestions(query: str, suggestions: List[str]) -> None:
        await websocket.send_json({
            "type": "suggestions",
            "query": query,
            "suggestions": suggestions
        })

    debouncer = SuggestionDebouncer(
        state.agent,
        send_suggestions,
        delay=state.settings.suggestion_debounce_seconds,
        min_length=state.settings.suggestion_min_length,
    )

    try:
        while True:
            text = await websocket.receive_text()
            await debouncer.on_input(text)
    except WebSocketDisconnect:
        logger.info("WebSocket客户端已断开")
    finally:
        await debouncer.close()
        logger.info("WebSocket连接已关闭")
