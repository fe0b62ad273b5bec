"""Configuration module for simplemq."""

from simplemq.config.logging import configure_logging, get_logger
from simplemq.config.settings import Settings, get_settings

__all__ = ["Settings", "configure_logging", "get_logger", "get_settings"]
