"""
數據源模組
提供統一的數據源抽象層
"""

from .config import DataSourceConfig, DataSourceType
from .base import DataSource
from .csv_source import CSVSource
from .excel_source import ExcelSource
from .factory import DataSourceFactory

__all__ = [
    # 配置
    'DataSourceConfig',
    'DataSourceType',
    # 基類
    'DataSource',
    # 實現
    'CSVSource',
    'ExcelSource',
    # 工廠
    'DataSourceFactory',
]
