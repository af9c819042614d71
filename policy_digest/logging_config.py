"""
日志配置模块

为 Policy Digest 提供统一的日志配置，支持文件和控制台输出。
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

from config import LoggingConfig, get_config


def setup_logging(config: Optional[LoggingConfig] = None, debug: Optional[bool] = None) -> None:
    """
    设置应用日志配置

    Args:
        config: 日志配置，默认使用全局配置中的 logging 段
        debug: 调试模式，开启时日志级别为 DEBUG；默认读取全局配置的 debug
    """
    config = config or get_config().logging
    if debug is None:
        debug = get_config().debug
    level = logging.DEBUG if debug else getattr(logging, config.level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # 清除现有的处理器
    root_logger.handlers.clear()

    log_format = logging.Formatter(fmt=config.format, datefmt='%Y-%m-%d %H:%M:%S')

    # 控制台处理器
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(log_format)
    root_logger.addHandler(console_handler)

    # 文件处理器 (轮转)
    if config.file:
        log_path = Path(config.file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            filename=str(log_path),
            maxBytes=config.max_bytes,
            backupCount=config.backup_count,
            encoding='utf-8'
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(log_format)
        root_logger.addHandler(file_handler)

    # 设置第三方库的日志级别
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("anthropic").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)
    logging.getLogger("langchain").setLevel(logging.WARNING)

    root_logger.info(f"日志系统初始化完成: level={logging.getLevelName(level)}, file={config.file}")


__all__ = ["setup_logging"]
