# vistas_addons/core_logging/__init__.py
import logging
import logging.config
import os
from pathlib import Path

import yaml

from vistas.core.contracts import Container, HookManager

ADDON_DIR = Path(__file__).parent
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def load_logging_config(config_path: Path = ADDON_DIR / "logging_config.yaml") -> dict:
    with open(config_path, "r", encoding="utf-8") as f:
        logging_config = yaml.safe_load(f)

    env_log_level = (os.getenv("LOG_LEVEL") or "").upper()
    if env_log_level in LOG_LEVELS:
        logging_config["root"]["level"] = env_log_level
        for logger_config in logging_config.get("loggers", {}).values():
            if logger_config.get("level") == "INFO":
                logger_config["level"] = env_log_level
    return logging_config


def register_plugin(container: Container, hook_manager: HookManager):
    """core_logging 的注册入口：其它插件的日志都依赖这里的配置。"""
    print("--> Registering [core_logging] addon...")

    logging.config.dictConfig(load_logging_config())

    logger = logging.getLogger(__name__)
    logger.info("Addon [core_logging] registered.")
