"""
數據源工廠
依副檔名建立 .xlsx / .csv 數據源
"""

from pathlib import Path
from typing import Dict, List, Type

from meter_billing.utils.logging import get_logger
from meter_billing.utils.config import config_manager
from meter_billing.utils.helpers import get_file_extension
from meter_billing.tasks.meter_billing.exceptions import SourceFileError, UnsupportedFileTypeError
from .base import DataSource
from .config import DataSourceConfig, DataSourceType
from .excel_source import ExcelSource
from .csv_source import CSVSource


class DataSourceFactory:
    """
    數據源工廠

    Example:
        >>> with DataSourceFactory.create_from_file('meters.xlsx') as source:
        ...     df = source.read()
    """

    _sources: Dict[DataSourceType, Type[DataSource]] = {
        DataSourceType.EXCEL: ExcelSource,
        DataSourceType.CSV: CSVSource,
    }

    _extensions: Dict[str, DataSourceType] = {
        '.xlsx': DataSourceType.EXCEL,
        '.csv': DataSourceType.CSV,
    }

    logger = get_logger("datasource.factory")

    @classmethod
    def create(cls, config: DataSourceConfig) -> DataSource:
        """
        Raises:
            SourceFileError: 配置無效或檔案不存在
            NotImplementedError: 數據源類型未註冊
        """
        errors = config.validate()
        if errors:
            cls.logger.error(f"數據源配置無效: {'; '.join(errors)}")
            raise SourceFileError(str(config.file_path), '; '.join(errors))

        try:
            source_class = cls._sources[config.source_type]
        except KeyError:
            raise NotImplementedError(f"未實作的數據源類型: {config.source_type}") from None

        cls.logger.debug(f"建立 {config.source_type.value} 數據源: {config.file_path.name}")
        return source_class(config)

    @classmethod
    def detect_type(cls, file_path) -> DataSourceType:
        """
        依副檔名判斷數據源類型（不分大小寫）

        Raises:
            UnsupportedFileTypeError: 不支援的副檔名
        """
        extension = get_file_extension(file_path)
        if extension not in cls._extensions:
            raise UnsupportedFileTypeError(str(file_path), extension)
        return cls._extensions[extension]

    @classmethod
    def _default_options(cls, source_type: DataSourceType) -> Dict[str, str]:
        if source_type == DataSourceType.CSV:
            return {'sep': config_manager.get('datasource', 'csv_separator', ',')}
        return {'engine': config_manager.get('datasource', 'excel_engine', 'openpyxl')}

    @classmethod
    def create_from_file(cls, file_path, **options) -> DataSource:
        """
        根據副檔名建立數據源

        Args:
            file_path: 輸入檔案
            **options: 讀取選項，覆寫 [datasource] 預設值（sheet_name、sep 等）

        Raises:
            UnsupportedFileTypeError: 不支援的副檔名
            SourceFileError: 檔案不存在
        """
        source_type = cls.detect_type(file_path)
        config = DataSourceConfig(
            source_type=source_type,
            file_path=Path(file_path),
            encoding=config_manager.get('datasource', 'default_encoding', 'utf-8-sig'),
            options={**cls._default_options(source_type), **options},
        )
        return cls.create(config)

    @classmethod
    def get_supported_extensions(cls) -> List[str]:
        return sorted(cls._extensions)
