"""
IPA Lookup Backend Configuration Settings
配置管理模块，负责加载环境变量和项目设置
"""

import os
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# 加载环境变量
load_dotenv()


class Settings(BaseSettings):
    """应用程序设置类"""

    # 服务器配置
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "8000"))
    debug: bool = os.getenv("DEBUG", "false").lower() == "true"

    # 日志配置
    log_level: str = os.getenv("LOG_LEVEL", "info")

    # 数据存储
    data_dir: str = os.getenv("DATA_DIR", "data")
    history_key: str = "ipa_history"
    history_max_size: int = 50

    # 音频配置（Gemini TTS 输出 24kHz 单声道 16-bit PCM）
    audio_sample_rate: int = 24000
    audio_channels: int = 1
    # 0 表示不限制音频缓存大小
    audio_cache_max_entries: int = int(os.getenv("AUDIO_CACHE_MAX_ENTRIES", "0"))

    # 联想词查询
    suggestion_debounce_seconds: float = 0.4
    suggestion_min_length: int = 2

    # 项目信息
    app_name: str = "IPA Lookup Backend"
    version: str = "1.0.0"
    description: str = "English word IPA, definitions and pronunciation backed by Gemini"

    class Config:
        env_file = ".env"


# 全局设置实例
settings = Settings()
