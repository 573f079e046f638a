"""
CSV 數據源
"""

from typing import Any, Dict

import pandas as pd

from meter_billing.tasks.meter_billing.exceptions import SourceFileError
from .base import DataSource
from .config import DataSourceConfig


class CSVSource(DataSource):
    """
    CSV 數據源：所有儲存格以文字讀入，空白儲存格為空字串

    欄數以表頭列為準：較長的資料列截去多出的欄位，較短的資料列以空值補齊。
    """

    def __init__(self, config: DataSourceConfig):
        super().__init__(config)
        self.encoding = config.encoding or 'utf-8-sig'
        self.sep = config.option('sep', ',')

    def _read_kwargs(self) -> Dict[str, Any]:
        return {
            'sep': self.sep,
            'encoding': self.encoding,
            'header': None,
            'dtype': str,
            'keep_default_na': False,
            'skip_blank_lines': True,
        }

    def read(self, **kwargs) -> pd.DataFrame:
        """
        Args:
            nrows: 只讀取前 n 列（含表頭列）

        Raises:
            SourceFileError: 編碼或格式錯誤
        """
        self.logger.info(f"讀取 CSV: {self.file_path} (encoding={self.encoding})")
        try:
            width = len(pd.read_csv(self.file_path, nrows=1, **self._read_kwargs()).columns)
            df = pd.read_csv(
                self.file_path,
                engine='python',
                on_bad_lines=lambda fields: fields[:width],
                nrows=kwargs.get('nrows'),
                **self._read_kwargs(),
            )
        except pd.errors.EmptyDataError:
            self.logger.warning(f"CSV 檔案為空: {self.file_path}")
            return pd.DataFrame()
        except (UnicodeDecodeError, pd.errors.ParserError) as e:
            raise SourceFileError(str(self.file_path), f"CSV 檔案格式錯誤: {e}") from e

        self.logger.info(f"CSV 讀取完成: {len(df)} 列 x {width} 欄")
        return df

    def get_metadata(self):
        return {**super().get_metadata(), 'encoding': self.encoding, 'separator': self.sep}
