# -*- coding: utf-8 -*-
"""
IPA Lookup Backend
单词音标查询与发音服务
"""

__version__ = "1.0.0"
