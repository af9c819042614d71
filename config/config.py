"""
配置管理系统

支持从 YAML 文件、环境变量加载配置，支持密钥管理
"""

import os
import yaml
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field
from dotenv import load_dotenv

# 加载 .env 文件
load_dotenv()


class LLMConfig(BaseModel):
    """LLM 模型配置（用于策略摘要）"""

    provider: str = Field(default="anthropic", description="LLM 提供商 (anthropic, openai)")
    model: str = Field(default="claude-sonnet-4-5-20250929", description="模型名称")
    api_key: str = Field(default="", description="API 密钥")
    base_url: Optional[str] = Field(default=None, description="API 基础 URL")
    temperature: float = Field(default=0.5, ge=0.0, le=1.0, description="温度参数")
    max_tokens: int = Field(default=4096, description="最大生成 tokens")
    timeout: int = Field(default=120, description="请求超时时间（秒）")


class PolicyStoreConfig(BaseModel):
    """策略存储服务配置"""

    base_url: str = Field(default="http://localhost:8787", description="策略服务基础 URL")
    request_timeout_ms: int = Field(default=15000, ge=0, description="单次 HTTP 请求超时（毫秒）")
    tenant_header: str = Field(default="X-COMPANY-ID", description="租户 ID 请求头")


class PolicySummaryConfig(BaseModel):
    """策略摘要与缓存配置"""

    cache_ttl_seconds: int = Field(default=3600, gt=0, description="摘要缓存有效期（秒）")
    summary_timeout_ms: int = Field(default=60000, ge=0, description="AI 摘要超时（毫秒）")
    max_input_chars: int = Field(default=24000, gt=0, description="发送给模型的最大策略字符数")
    raw_fallback_max_chars: int = Field(default=6000, gt=0, description="原文回退的最大字符数")
    heuristic_max_sections: int = Field(default=5, gt=0, description="启发式摘要最多节选段数")
    heuristic_excerpt_max_chars: int = Field(default=1200, gt=0, description="每段节选最大字符数")
    temperature: float = Field(default=0.5, ge=0.0, le=1.0, description="摘要生成温度")


class RetryConfig(BaseModel):
    """重试配置"""

    max_attempts: int = Field(default=3, ge=1, le=10, description="最大尝试次数")
    base_delay_ms: int = Field(default=1000, ge=0, description="指数退避基础延迟（毫秒）")
    max_delay_ms: int = Field(default=10000, ge=0, description="单次退避最大延迟（毫秒）")
    jitter_enabled: bool = Field(default=True, description="是否启用抖动")


class AuthConfig(BaseModel):
    """认证配置"""

    tenant_claim: str = Field(
        default="user_company_resourceid",
        description="JWT 中携带租户 ID 的声明名称"
    )


class LoggingConfig(BaseModel):
    """日志配置"""

    level: str = Field(default="INFO", description="日志级别")
    format: str = Field(
        default="%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s",
        description="日志格式"
    )
    file: Optional[str] = Field(default="./logs/policy_digest.log", description="日志文件路径")
    max_bytes: int = Field(default=10485760, description="日志文件最大大小（10MB）")
    backup_count: int = Field(default=5, description="日志备份数量")


class Config(BaseModel):
    """Policy Digest 总配置"""

    debug: bool = Field(default=False, description="调试模式（日志级别强制为 DEBUG）")

    # 各模块配置
    llm: LLMConfig = Field(default_factory=LLMConfig)
    policy_store: PolicyStoreConfig = Field(default_factory=PolicyStoreConfig)
    policy_summary: PolicySummaryConfig = Field(default_factory=PolicySummaryConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


class ConfigManager:
    """
    配置管理器

    支持从 YAML 文件加载配置，支持环境变量覆盖
    """

    ENV_PREFIX = "PD_"

    def __init__(self, config_path: Optional[str] = None):
        """
        初始化配置管理器

        Args:
            config_path: YAML 配置文件路径，默认为 config/settings.yaml
        """
        self.config_path = config_path or self._find_config_file()
        self._config: Optional[Config] = None

    @staticmethod
    def _find_config_file() -> str:
        """
        查找配置文件

        按以下顺序查找：
        1. ./config/settings.yaml
        2. ./settings.yaml
        3. ~/.config/policy_digest/settings.yaml
        """
        possible_paths = [
            "./config/settings.yaml",
            "./settings.yaml",
            os.path.expanduser("~/.config/policy_digest/settings.yaml"),
        ]

        for path in possible_paths:
            if os.path.exists(path):
                return path

        return "./config/settings.yaml"

    def load_yaml(self) -> Dict[str, Any]:
        """
        从 YAML 文件加载配置

        Returns:
            配置字典
        """
        if not os.path.exists(self.config_path):
            return {}

        with open(self.config_path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}

    def _override_from_env(self, config_dict: Dict[str, Any]) -> Dict[str, Any]:
        """
        从环境变量覆盖配置

        使用 __ 分隔层级，例如：
        PD_POLICY_SUMMARY__CACHE_TTL_SECONDS=600
        PD_LLM__API_KEY=sk-xxx

        Args:
            config_dict: 原始配置字典

        Returns:
            覆盖后的配置字典
        """
        result = config_dict.copy()

        for env_key, env_value in os.environ.items():
            if not env_key.startswith(self.ENV_PREFIX):
                continue

            key = env_key[len(self.ENV_PREFIX):].replace("__", ".").lower()
            parts = key.split(".")

            # 仅接受已知的顶层配置段，避免 PD_ANTHROPIC_API_KEY 之类的密钥变量污染配置
            if parts[0] not in Config.model_fields:
                continue

            current = result
            for part in parts[:-1]:
                if not isinstance(current.get(part), dict):
                    current[part] = {}
                current = current[part]
            current[parts[-1]] = self._parse_env_value(env_value)

        return result

    @staticmethod
    def _parse_env_value(value: str) -> Any:
        """
        解析环境变量值

        Args:
            value: 环境变量值

        Returns:
            解析后的值
        """
        if value.lower() in ("true", "yes"):
            return True
        if value.lower() in ("false", "no"):
            return False

        try:
            if "." in value:
                return float(value)
            return int(value)
        except ValueError:
            pass

        return value

    def load(self) -> Config:
        """
        加载配置

        从 YAML 文件加载配置，并使用环境变量覆盖

        Returns:
            配置对象
        """
        if self._config is not None:
            return self._config

        yaml_config = self.load_yaml()
        merged_config = self._override_from_env(yaml_config)

        self._config = Config(**merged_config)
        return self._config

    def reload(self) -> Config:
        """
        重新加载配置

        Returns:
            配置对象
        """
        self._config = None
        return self.load()

    def get_api_key(self, provider: str) -> Optional[str]:
        """
        获取 API 密钥

        优先级：
        1. 环境变量 {PROVIDER}_API_KEY
        2. 环境变量 PD_{PROVIDER}_API_KEY
        3. 配置文件中的值

        Args:
            provider: 提供商名称 (anthropic, openai)

        Returns:
            API 密钥
        """
        for env_key in (f"{provider.upper()}_API_KEY", f"{self.ENV_PREFIX}{provider.upper()}_API_KEY"):
            api_key = os.environ.get(env_key)
            if api_key and api_key.strip():
                return api_key.strip()

        config = self.load()
        if config.llm.provider == provider and config.llm.api_key:
            return config.llm.api_key
        return None


# 全局配置管理器实例
_config_manager: Optional[ConfigManager] = None


def get_config(config_path: Optional[str] = None) -> Config:
    """
    获取全局配置对象

    Args:
        config_path: 可选的配置文件路径

    Returns:
        配置对象
    """
    global _config_manager

    if _config_manager is None:
        _config_manager = ConfigManager(config_path)

    return _config_manager.load()


def get_config_manager() -> ConfigManager:
    """
    获取全局配置管理器

    Returns:
        配置管理器
    """
    global _config_manager

    if _config_manager is None:
        _config_manager = ConfigManager()

    return _config_manager


def reload_config() -> Config:
    """
    重新加载全局配置

    Returns:
        配置对象
    """
    global _config_manager

    if _config_manager is not None:
        return _config_manager.reload()

    return get_config()
