"""
資料列解析器

把原始資料列（儲存格序列）轉為 MerchantBillingRecord。
儲存格層級的格式問題不拋出異常：數值無法解析時為 0.0，文字空值為空字串。
"""

import logging
from datetime import datetime
from numbers import Number
from typing import Any, Iterable, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from meter_billing.utils.config import config_manager
from meter_billing.utils.logging import get_logger
from ..models.billing import MerchantBillBuilder, MerchantBillingRecord
from ..models.header_map import (
    HeaderColumnMap,
    MERCHANT_NAME,
    SHOP_CODE,
    PREV_WATER,
    CURR_WATER,
    WATER_PRICE,
    ELECTRICITY_PRICE,
    LABOR_FEE,
    GARBAGE_FEE,
)
from ..models.options import GenerateOptions

DEFAULT_MIN_ROW_FIELDS = 5


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _finite_or_zero(number: float) -> float:
    return number if np.isfinite(number) else 0.0


def coerce_number(value: Any) -> float:
    """
    儲存格轉為數值

    - bool 不視為數值，回傳 0.0
    - int / float / numpy 數值直接使用，NaN 為 0.0
    - 文字去除空白與千分位逗號後解析，失敗為 0.0
    """
    if value is None or isinstance(value, (bool, np.bool_)):
        return 0.0
    if isinstance(value, Number):
        try:
            return _finite_or_zero(float(value))
        except (TypeError, ValueError):
            return 0.0
    if isinstance(value, str):
        text = value.strip().replace(',', '')
        if not text:
            return 0.0
        try:
            return _finite_or_zero(float(text))
        except ValueError:
            return 0.0
    return 0.0


def coerce_text(value: Any) -> str:
    """
    儲存格轉為文字

    整數值的浮點數（試算表中以數字輸入的編號）輸出為 "12" 而非 "12.0"。
    """
    if _is_missing(value):
        return ''
    if isinstance(value, (bool, np.bool_)):
        return str(value)
    if isinstance(value, Number):
        try:
            number = float(value)
        except (TypeError, ValueError):
            return str(value).strip()
        if number.is_integer():
            return str(int(number))
        return str(value).strip()
    return str(value).strip()


def _cell(row: Sequence[Any], index: int) -> Any:
    return row[index] if 0 <= index < len(row) else None


def is_blank_row(row: Sequence[Any]) -> bool:
    return all(coerce_text(cell) == '' for cell in row)


def present_field_count(row: Sequence[Any]) -> int:
    """
    實際存在的欄位數

    表格讀入時短列會以 None / NaN 補齊，這裡去掉尾端的補齊值；
    明確存在的空字串欄位仍計入。
    """
    count = len(row)
    while count > 0 and _is_missing(row[count - 1]):
        count -= 1
    return count


class RowParser:
    """
    資料列解析器

    Attributes:
        column_map: 表頭對應
        options: 排版選項（抄表人、抄表日期）
        now: 記錄月份的參考時間
        min_row_fields: 最少欄位數，不足的列略過
    """

    def __init__(self,
                 column_map: HeaderColumnMap,
                 options: Optional[GenerateOptions] = None,
                 min_row_fields: Optional[int] = None,
                 now: Optional[datetime] = None,
                 logger: logging.Logger = None):
        self.column_map = column_map
        self.now = now
        self.options = options or GenerateOptions()
        self.min_row_fields = (
            min_row_fields if min_row_fields is not None
            else config_manager.get_int('billing', 'min_row_fields', DEFAULT_MIN_ROW_FIELDS)
        )
        self.logger = logger or get_logger('tasks.meter_billing.row_parser')

    def parse_row(self, row: Sequence[Any], row_number: Optional[int] = None) -> Optional[MerchantBillingRecord]:
        """
        解析單一資料列

        Args:
            row: 儲存格序列
            row_number: 來源列號（僅用於日誌）

        Returns:
            Optional[MerchantBillingRecord]: 應略過的列回傳 None
        """
        row = list(row)
        label = f"第 {row_number} 列" if row_number is not None else "資料列"

        if not row or is_blank_row(row):
            self.logger.debug(f"{label}: 空白列，略過")
            return None
        field_count = present_field_count(row)
        if field_count < self.min_row_fields:
            self.logger.debug(f"{label}: 欄位數 {field_count} 少於 {self.min_row_fields}，略過")
            return None

        cm = self.column_map
        merchant_name = coerce_text(_cell(row, cm.index_of(MERCHANT_NAME)))
        if not merchant_name:
            self.logger.debug(f"{label}: 商戶名稱為空，略過")
            return None

        def number(field_name: str) -> float:
            return coerce_number(_cell(row, cm.index_of(field_name)))

        builder = MerchantBillBuilder(
            merchant_name,
            water_unit_price=number(WATER_PRICE),
            electricity_unit_price=number(ELECTRICITY_PRICE),
            now=self.now,
        )
        builder.set_water_readings(number(PREV_WATER), number(CURR_WATER))
        builder.set_shop_code(coerce_text(_cell(row, cm.index_of(SHOP_CODE))))

        for position, (prev_idx, curr_idx) in enumerate(cm.meter_columns, start=1):
            prev_reading = coerce_number(_cell(row, prev_idx))
            curr_reading = coerce_number(_cell(row, curr_idx))
            if prev_reading > 0 or curr_reading > 0:
                builder.add_meter(str(position), prev_reading, curr_reading)

        builder.set_fees(number(LABOR_FEE), number(GARBAGE_FEE))
        builder.set_meter_info(self.options.meter_reader, self.options.meter_date)
        return builder.build()

    def parse_rows(self, rows: Iterable[Sequence[Any]],
                   first_row_number: int = 2) -> Tuple[List[MerchantBillingRecord], int]:
        """
        解析多列資料

        Args:
            rows: 資料列（不含表頭）
            first_row_number: 第一筆資料的來源列號

        Returns:
            Tuple[List[MerchantBillingRecord], int]: (記錄, 略過的列數)
        """
        records: List[MerchantBillingRecord] = []
        skipped = 0
        for offset, row in enumerate(rows):
            record = self.parse_row(row, first_row_number + offset)
            if record is None:
                skipped += 1
            else:
                records.append(record)
        return records, skipped
