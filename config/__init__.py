"""
配置管理模块

导出配置相关的类和函数
"""

from .config import (
    Config,
    ConfigManager,
    LLMConfig,
    PolicyStoreConfig,
    PolicySummaryConfig,
    RetryConfig,
    AuthConfig,
    LoggingConfig,
    get_config,
    get_config_manager,
    reload_config,
)

__all__ = [
    "Config",
    "ConfigManager",
    "LLMConfig",
    "PolicyStoreConfig",
    "PolicySummaryConfig",
    "RetryConfig",
    "AuthConfig",
    "LoggingConfig",
    "get_config",
    "get_config_manager",
    "reload_config",
]
