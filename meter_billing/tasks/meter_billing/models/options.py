"""
文件產生選項
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class GenerateOptions:
    """
    通知單排版選項

    Attributes:
        custom_title: 自訂標題，未提供時使用「YYYY年MM月抄表计费通知单」
        per_page: 每頁商戶數，0 表示不分頁
        meter_reader: 抄表人
        meter_date: 抄表日期
    """
    custom_title: Optional[str] = None
    per_page: int = 1
    meter_reader: Optional[str] = None
    meter_date: Optional[str] = None

    def __post_init__(self):
        if self.per_page is None or int(self.per_page) < 0:
            raise ValueError(f"per_page 不可為負數: {self.per_page}")
        object.__setattr__(self, 'per_page', int(self.per_page))
        for attr in ('custom_title', 'meter_reader', 'meter_date'):
            value = getattr(self, attr)
            if value is not None and not str(value).strip():
                object.__setattr__(self, attr, None)

    def title_for(self, year: str, month: str) -> str:
        if self.custom_title:
            return self.custom_title
        return f"{year}年{int(month):02d}月抄表计费通知单"
