"""
工具模組
提供日誌、配置管理與檔案工具
"""
from .config import (
    config_manager,
    ConfigManager,
    get_project_root,
    get_config,
    get_path,
)
from .logging import (
    get_logger,
    get_structured_logger,
    Logger,
    StructuredLogger,
    logger_manager,
)
from .helpers import (
    get_file_extension,
    ensure_directory_exists,
    get_safe_filename,
    build_output_filename,
)

__all__ = [
    'config_manager',
    'ConfigManager',
    'get_project_root',
    'get_config',
    'get_path',
    'get_logger',
    'get_structured_logger',
    'Logger',
    'StructuredLogger',
    'logger_manager',
    'get_file_extension',
    'ensure_directory_exists',
    'get_safe_filename',
    'build_output_filename',
]
