"""
日誌處理模組
"""

from .logger import (
    ROOT_LOGGER_NAME,
    Logger,
    LoggingSettings,
    StructuredLogger,
    ColoredFormatter,
    logger_manager,
    get_logger,
    get_structured_logger,
)

__all__ = [
    'ROOT_LOGGER_NAME',
    'Logger',
    'LoggingSettings',
    'StructuredLogger',
    'ColoredFormatter',
    'logger_manager',
    'get_logger',
    'get_structured_logger',
]
