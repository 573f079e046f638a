"""
數據源配置
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List


class DataSourceType(Enum):
    """數據源類型"""
    EXCEL = "excel"
    CSV = "csv"


@dataclass
class DataSourceConfig:
    """
    數據源配置

    Attributes:
        source_type: 數據源類型
        file_path: 輸入檔案
        encoding: 文字編碼（僅 CSV 使用）
        options: 讀取選項（sheet_name、engine、sep 等）
    """
    source_type: DataSourceType
    file_path: Path
    encoding: str = 'utf-8-sig'
    options: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        self.file_path = Path(self.file_path)

    def option(self, key: str, default: Any = None) -> Any:
        return self.options.get(key, default)

    def validate(self) -> List[str]:
        """回傳錯誤訊息列表，空列表表示有效"""
        if not str(self.file_path) or str(self.file_path) == '.':
            return ["缺少 file_path"]
        if not self.file_path.is_file():
            return [f"檔案不存在: {self.file_path}"]
        return []
