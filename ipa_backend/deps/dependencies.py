# -*- coding: utf-8 -*-
"""
依赖项 - IPA Lookup V1.0
用于 FastAPI 路由的依赖注入和异常转换
"""

from fastapi import HTTPException, status
from starlette.requests import HTTPConnection

from ipa_backend.core.app_state import AppState
from ipa_backend.services.word_lookup.errors import (
    LookupServiceError,
    MalformedResponse,
    PlaybackBusy,
    ServiceUnavailable,
    SynthesisFailed,
    WordNotFound,
)


def get_app_state(connection: HTTPConnection) -> AppState:
    """获取应用状态（HTTP 和 WebSocket 通用）"""
    return connection.app.state.ipa


def to_http_exception(error: LookupServiceError) -> HTTPException:
    """
    把服务异常转换为 HTTP 异常

    - WordNotFound → 404
    - PlaybackBusy → 409
    - MalformedResponse / SynthesisFailed → 502
    - ServiceUnavailable → 503
    """
    if isinstance(error, WordNotFound):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error) or "没有找到该单词")
    if isinstance(error, PlaybackBusy):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(error))
    if isinstance(error, (MalformedResponse, SynthesisFailed)):
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(error) or "AI返回数据异常")
    if isinstance(error, ServiceUnavailable):
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(error) or "AI服务不可用")
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(error))
