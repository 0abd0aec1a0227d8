# -*- coding: utf-8 -*-
"""
单词查询服务异常定义 - IPA Lookup V1.0
"""


class LookupServiceError(Exception):
    """单词查询服务异常基类"""
    pass


class ServiceUnavailable(LookupServiceError):
    """外部服务不可用（网络错误、HTTP错误、未配置）"""
    pass


class MalformedResponse(LookupServiceError):
    """外部服务返回内容无法解析"""
    pass


class WordNotFound(MalformedResponse):
    """AI没有返回该单词的数据"""
    pass


class SynthesisFailed(LookupServiceError):
    """语音合成没有返回音频"""
    pass


class PersistenceCorrupt(LookupServiceError):
    """保存的历史记录无法读取"""
    pass


class PlaybackBusy(LookupServiceError):
    """段落音频正在生成/播放"""
    pass
