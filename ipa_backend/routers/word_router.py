# -*- coding: utf-8 -*-
"""
单词查询路由 - IPA Lookup V1.0
提供单词查询、联想词、段落转写和历史记录接口
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from ipa_backend.core.app_state import AppState
from ipa_backend.deps.dependencies import get_app_state, to_http_exception
from ipa_backend.models.word_models import (
    CacheStatsResponse,
    HistoryItem,
    HistoryListResponse,
    LookupState,
    ParagraphRequest,
    ParagraphResponse,
    SuggestionResponse,
    WordDetails,
)
from ipa_backend.services.word_lookup.errors import LookupServiceError

logger = logging.getLogger(__name__)

# 创建路由器
router = APIRouter(prefix="/api/word", tags=["word"])


@router.get("/lookup", response_model=WordDetails)
async def lookup_word(word: str, state: AppState = Depends(get_app_state)):
    """
    查询单词音标、释义和例句

    流程：
    1. 检查缓存（不区分大小写）
    2. 调用Gemini获取数据
    3. 写入缓存和历史记录
    4. 后台预取美音和英音

    Raises:
        HTTPException: 400 - 单词为空
        HTTPException: 404 - 没有找到该单词
        HTTPException: 502 - AI返回格式错误
        HTTPException: 503 - AI服务不可用
    """
    if not word or not word.strip():
        raise HTTPException(status_code=400, detail="单词不能为空")

    logger.info(f"📖 收到单词查询请求: {word.strip()}")

    try:
        return await state.controller.search(word)
    except LookupServiceError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"❌ 查询单词异常: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"查询失败: {str(e)}")


@router.get("/suggest", response_model=SuggestionResponse)
async def suggest_words(q: str, state: AppState = Depends(get_app_state)):
    """联想以 q 开头的单词（输入太短返回空列表）"""
    query = (q or "").strip()
    if len(query) < state.settings.suggestion_min_length:
        return SuggestionResponse(query=query, suggestions=[])

    try:
        suggestions = await state.agent.suggest_words(query)
    except LookupServiceError as e:
        raise to_http_exception(e)

    return SuggestionResponse(query=query, suggestions=suggestions)


@router.post("/paragraph", response_model=ParagraphResponse)
async def transcribe_paragraph(request: ParagraphRequest, state: AppState = Depends(get_app_state)):
    """
    段落逐词音标转写

    成功后后台生成整段美音，供 /api/audio/paragraph/play 使用
    """
    if not request.text or not request.text.strip():
        raise HTTPException(status_code=400, detail="段落不能为空")

    try:
        tokens = await state.controller.submit_paragraph(request.text)
    except LookupServiceError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"❌ 段落转写异常: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to process paragraph.")

    return ParagraphResponse(text=request.text.strip(), tokens=tokens)


@router.get("/state", response_model=LookupState)
async def get_lookup_state(state: AppState = Depends(get_app_state)):
    """当前查询状态"""
    return state.controller.state()


@router.get("/history", response_model=HistoryListResponse)
async def get_history(state: AppState = Depends(get_app_state)):
    """获取查询历史（最近在前）"""
    items = state.history.list()
    return HistoryListResponse(items=items, total=len(items))


@router.post("/history/{item_id}/select", response_model=HistoryItem)
async def select_history_item(item_id: str, state: AppState = Depends(get_app_state)):
    """选择历史记录中的单词（不调用AI，后台预取发音）"""
    item = state.controller.select_history(item_id)
    if item is None:
        raise HTTPException(status_code=404, detail="历史记录不存在")
    return item


@router.delete("/history")
async def clear_history(clear_cache: bool = False, state: AppState = Depends(get_app_state)):
    """清空查询历史"""
    state.controller.clear_history(clear_cache=clear_cache)
    return {"success": True, "message": "历史记录已清空"}


@router.get("/cache/stats", response_model=CacheStatsResponse)
async def get_cache_stats(state: AppState = Depends(get_app_state)):
    """获取缓存统计信息"""
    return state.cache_stats()


@router.delete("/cache/clear")
async def clear_cache(state: AppState = Depends(get_app_state)):
    """清空单词缓存和音频缓存（历史记录依赖单词缓存，一并清空）"""
    state.controller.clear_history(clear_cache=True)
    state.coordinator.clear()
    return {"success": True, "message": "缓存和历史记录已清空"}
