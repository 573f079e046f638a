"""
Excel (.xlsx) 數據源
"""

import zipfile
from typing import List

import pandas as pd
from openpyxl.utils.exceptions import InvalidFileException

from meter_billing.tasks.meter_billing.exceptions import SourceFileError, SheetNotFoundError
from .base import DataSource
from .config import DataSourceConfig

_BROKEN_WORKBOOK_ERRORS = (zipfile.BadZipFile, InvalidFileException, KeyError, OSError)


class ExcelSource(DataSource):
    """Excel 數據源，預設讀取第一個工作表"""

    def __init__(self, config: DataSourceConfig):
        super().__init__(config)
        self.sheet_name = config.option('sheet_name', 0)
        self.engine = config.option('engine', 'openpyxl')

    def read(self, **kwargs) -> pd.DataFrame:
        """
        Args:
            sheet_name: 覆寫工作表名稱或索引
            nrows: 只讀取前 n 列（含表頭列）

        Raises:
            SheetNotFoundError: 工作表不存在
            SourceFileError: 檔案不是有效的活頁簿
        """
        sheet_name = kwargs.get('sheet_name', self.sheet_name)
        self.logger.info(f"讀取 Excel: {self.file_path} (sheet={sheet_name})")
        try:
            df = pd.read_excel(self.file_path, sheet_name=sheet_name, header=None,
                               engine=self.engine, nrows=kwargs.get('nrows'))
        except IndexError as e:
            raise SheetNotFoundError(str(self.file_path), sheet_name) from e
        except ValueError as e:
            # pandas 以 ValueError 回報不存在的工作表名稱
            if 'not found' in str(e):
                raise SheetNotFoundError(str(self.file_path), sheet_name) from e
            raise SourceFileError(str(self.file_path), f"Excel 檔案讀取失敗: {e}") from e
        except _BROKEN_WORKBOOK_ERRORS as e:
            raise SourceFileError(str(self.file_path), f"無效的 Excel 檔案: {e}") from e

        self.logger.info(f"Excel 讀取完成: {len(df)} 列")
        return df

    def get_sheet_names(self) -> List[str]:
        try:
            with pd.ExcelFile(self.file_path, engine=self.engine) as workbook:
                return list(workbook.sheet_names)
        except _BROKEN_WORKBOOK_ERRORS as e:
            raise SourceFileError(str(self.file_path), f"無效的 Excel 檔案: {e}") from e

    def get_metadata(self):
        metadata = super().get_metadata()
        try:
            metadata['sheet_names'] = self.get_sheet_names()
        except SourceFileError as e:
            self.logger.warning(f"無法讀取工作表清單: {e}")
            metadata['sheet_names'] = []
        return metadata
