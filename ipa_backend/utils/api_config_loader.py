# -*- coding: utf-8 -*-
"""
API配置加载器 - IPA Lookup V1.0
从 YAML 文件中加载第三方API配置
"""

import logging
import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)

DEFAULT_GEMINI_CONFIG: Dict[str, Any] = {
    'enabled': True,
    'api_key': '',
    'base_url': 'https://generativelanguage.googleapis.com/v1beta',
    'text_model': 'gemini-3-flash-preview',
    'tts_model': 'gemini-2.5-flash-preview-tts',
    'timeout': 30,
    'voices': {'US': 'Kore', 'UK': 'Puck'},
}


class APIConfigLoader:
    """API配置加载器"""

    def __init__(self, config_file: Optional[Path] = None):
        """
        初始化配置加载器

        Args:
            config_file: 配置文件路径，默认 config/external_apis.yaml
        """
        if config_file is None:
            package_dir = Path(__file__).parent.parent
            config_file = package_dir / "config" / "external_apis.yaml"
        self.config_file = Path(config_file)

        # 加载配置
        self.config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """从YAML文件加载配置"""
        if not self.config_file.exists():
            logger.warning(f"⚠️ 配置文件不存在: {self.config_file}，使用默认配置")
            return {}

        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"❌ 加载配置文件失败: {e}")
            return {}

        logger.info(f"✅ API配置加载成功: {self.config_file}")
        return config or {}

    def get_gemini_config(self) -> Dict[str, Any]:
        """获取Gemini API配置（环境变量 GEMINI_API_KEY 优先）"""
        config = {**DEFAULT_GEMINI_CONFIG, **(self.config.get('gemini') or {})}
        env_key = os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY")
        if env_key:
            config['api_key'] = env_key
        return config


# 创建全局单例
api_config_loader = APIConfigLoader()
