"""
配置管理模組
"""

from .config_manager import (
    ConfigManager,
    config_manager,
    get_project_root,
    get_config,
    get_path,
)

__all__ = [
    'ConfigManager',
    'config_manager',
    'get_project_root',
    'get_config',
    'get_path',
]
