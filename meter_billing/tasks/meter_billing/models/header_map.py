"""
表頭欄位對應模型
"""

from dataclasses import dataclass, field
from typing import Dict, Tuple

# 邏輯欄位名稱
MERCHANT_NAME = 'merchant_name'
SHOP_CODE = 'shop_code'
PREV_WATER = 'prev_water'
CURR_WATER = 'curr_water'
WATER_PRICE = 'water_price'
ELECTRICITY_PRICE = 'electricity_price'
LABOR_FEE = 'labor_fee'
GARBAGE_FEE = 'garbage_fee'
# 電表 1 的別名僅在前綴找不到任何電表欄位時使用
METER1_PREV = 'meter1_prev'
METER1_CURR = 'meter1_curr'

REQUIRED_FIELDS = (
    SHOP_CODE,
    MERCHANT_NAME,
    PREV_WATER,
    CURR_WATER,
    WATER_PRICE,
    ELECTRICITY_PRICE,
    LABOR_FEE,
    GARBAGE_FEE,
)


@dataclass(frozen=True)
class HeaderColumnMap:
    """
    邏輯欄位 → 欄位索引

    Attributes:
        fields: 邏輯欄位名稱對應的 0 起算欄位索引
        meter_columns: 依發現順序排列的 (上期索引, 本期索引)
        headers: 原始表頭文字
    """
    fields: Dict[str, int]
    meter_columns: Tuple[Tuple[int, int], ...]
    headers: Tuple[str, ...] = field(default=())

    def index_of(self, field_name: str) -> int:
        """
        取得邏輯欄位的索引

        Raises:
            KeyError: 未知的邏輯欄位
        """
        return self.fields[field_name]

    @property
    def meter_count(self) -> int:
        return len(self.meter_columns)

    def describe(self) -> str:
        fields = ', '.join(f"{name}={idx}" for name, idx in self.fields.items())
        return f"{fields}; meters={list(self.meter_columns)}"
