"""
數據源基礎類

所有數據源一律以 header=None 讀取原始表格：第一列保留為表頭文字，
欄位對應交由表頭解析器處理。
"""

from abc import ABC, abstractmethod
from typing import Any, Dict

import pandas as pd

from meter_billing.utils.logging import get_logger
from meter_billing.tasks.meter_billing.exceptions import SourceFileError
from .config import DataSourceConfig


class DataSource(ABC):
    """
    數據源抽象基類，可作為上下文管理器使用

    Raises:
        SourceFileError: 建立時檔案不存在
    """

    def __init__(self, config: DataSourceConfig):
        self.config = config
        self.file_path = config.file_path
        self.logger = get_logger(f"datasource.{type(self).__name__}")

        if not self.file_path.is_file():
            raise SourceFileError(str(self.file_path), f"檔案不存在: {self.file_path}")

    @abstractmethod
    def read(self, **kwargs) -> pd.DataFrame:
        """讀取原始表格：欄名為整數，第 0 列為表頭"""

    def get_metadata(self) -> Dict[str, Any]:
        stat = self.file_path.stat()
        return {
            'file_path': str(self.file_path),
            'source_type': self.config.source_type.value,
            'file_size': stat.st_size,
            'file_modified': stat.st_mtime,
        }

    def close(self) -> None:
        self.logger.debug(f"關閉數據源: {self.file_path.name}")

    def __enter__(self) -> 'DataSource':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.file_path.name})"
