"""
表頭解析器

把表格第一列的表頭文字對應到邏輯欄位，並找出所有電表讀數欄位對。

匹配規則:
- 表頭與別名都先正規化（移除所有空白、不分大小寫）
- 正規化後的表頭「包含」正規化後的別名即視為匹配
- 每個邏輯欄位依別名順序嘗試，第一個有匹配的別名勝出；同一別名取最左邊的欄位

Example:
    >>> resolver = HeaderResolver()
    >>> column_map = resolver.resolve(['铺面编号', '店铺名称', ...])
"""

import logging
import re
from typing import Any, Dict, List, Optional, Sequence, Tuple

from meter_billing.utils.config import config_manager
from meter_billing.utils.logging import get_logger
from ..exceptions import ColumnNotFoundError, NoMeterColumnsError
from ..models.header_map import (
    HeaderColumnMap,
    REQUIRED_FIELDS,
    MERCHANT_NAME,
    SHOP_CODE,
    PREV_WATER,
    CURR_WATER,
    WATER_PRICE,
    ELECTRICITY_PRICE,
    LABOR_FEE,
    GARBAGE_FEE,
    METER1_PREV,
    METER1_CURR,
)

DEFAULT_METER_PREFIX = '电表'

DEFAULT_ALIASES: Dict[str, Tuple[str, ...]] = {
    SHOP_CODE: ('铺面编号', '店铺编号'),
    MERCHANT_NAME: ('店铺名称', '商家名称', '商户名称'),
    METER1_PREV: ('电表1上期读数',),
    METER1_CURR: ('电表1本期读数',),
    PREV_WATER: ('上期水表读数',),
    CURR_WATER: ('本期水表读数',),
    WATER_PRICE: ('水费单价',),
    ELECTRICITY_PRICE: ('电费单价',),
    LABOR_FEE: ('水电人工费',),
    GARBAGE_FEE: ('垃圾处理费',),
}

_WHITESPACE = re.compile(r'\s+', re.UNICODE)


def normalize_header(text: Any) -> str:
    """
    正規化表頭文字：移除所有空白（含全形空白）並轉為小寫

    Example:
        >>> normalize_header(' 店铺 名称 ')
        '店铺名称'
    """
    if text is None:
        return ''
    return _WHITESPACE.sub('', str(text)).casefold()


def header_text(cell: Any) -> str:
    """儲存格轉為表頭文字，空值（None / NaN）為空字串"""
    if cell is None:
        return ''
    if isinstance(cell, float) and cell != cell:
        return ''
    return str(cell)


class HeaderResolver:
    """
    表頭解析器

    Attributes:
        aliases: 邏輯欄位 → 別名清單
        meter_prefix: 電表欄位前綴
    """

    def __init__(self,
                 aliases: Optional[Dict[str, Sequence[str]]] = None,
                 meter_prefix: Optional[str] = None,
                 logger: logging.Logger = None):
        """
        初始化解析器，未傳入的設定由 [headers] 配置段落讀取

        Args:
            aliases: 覆寫的別名（僅覆寫有給的欄位）
            meter_prefix: 電表欄位前綴
            logger: 外部日誌器
        """
        self.logger = logger or get_logger('tasks.meter_billing.header_resolver')

        merged = {name: tuple(values) for name, values in DEFAULT_ALIASES.items()}
        configured = config_manager.get_nested('headers', 'aliases', fallback={}) or {}
        for source in (configured, aliases or {}):
            for name, values in source.items():
                if isinstance(values, str):
                    values = [values]
                merged[name] = tuple(str(v) for v in values)
        self.aliases = merged

        self.meter_prefix = meter_prefix or config_manager.get(
            'headers', 'meter_prefix', DEFAULT_METER_PREFIX)

    def resolve(self, headers: Sequence[Any]) -> HeaderColumnMap:
        """
        解析表頭

        Args:
            headers: 第一列的儲存格

        Returns:
            HeaderColumnMap: 欄位對應

        Raises:
            ColumnNotFoundError: 必要欄位缺失
            NoMeterColumnsError: 找不到任何電表欄位對
        """
        texts = [header_text(h) for h in headers]
        normalized = [normalize_header(t) for t in texts]

        fields: Dict[str, int] = {}
        for name in REQUIRED_FIELDS:
            candidates = self.aliases.get(name, ())
            index = self._find_first(normalized, candidates)
            if index is None:
                raise ColumnNotFoundError(name, candidates, texts)
            fields[name] = index

        meter_columns = self.discover_meter_columns(normalized)
        if not meter_columns:
            # 前綴找不到時，改用電表 1 的別名
            prev_idx = self._find_first(normalized, self.aliases.get(METER1_PREV, ()))
            curr_idx = self._find_first(normalized, self.aliases.get(METER1_CURR, ()))
            if prev_idx is None or curr_idx is None:
                raise NoMeterColumnsError(self.meter_prefix, texts)
            meter_columns = [(prev_idx, curr_idx)]

        column_map = HeaderColumnMap(
            fields=fields,
            meter_columns=tuple(meter_columns),
            headers=tuple(texts),
        )
        self.logger.debug(f"表頭對應: {column_map.describe()}")
        return column_map

    def discover_meter_columns(self, normalized_headers: Sequence[str]) -> List[Tuple[int, int]]:
        """
        依序尋找 {prefix}N上期读数 / {prefix}N本期读数，遇到第一個缺漏的 N 即停止

        Args:
            normalized_headers: 已正規化的表頭

        Returns:
            List[Tuple[int, int]]: (上期索引, 本期索引)
        """
        columns: List[Tuple[int, int]] = []
        meter_no = 1
        while True:
            prev_idx = self._find_first(normalized_headers, (f"{self.meter_prefix}{meter_no}上期读数",))
            curr_idx = self._find_first(normalized_headers, (f"{self.meter_prefix}{meter_no}本期读数",))
            if prev_idx is None or curr_idx is None:
                break
            columns.append((prev_idx, curr_idx))
            meter_no += 1
        return columns

    @staticmethod
    def _find_first(normalized_headers: Sequence[str], candidates: Sequence[str]) -> Optional[int]:
        for candidate in candidates:
            needle = normalize_header(candidate)
            if not needle:
                continue
            for index, header in enumerate(normalized_headers):
                if needle in header:
                    return index
        return None


def resolve_headers(headers: Sequence[Any], **kwargs) -> HeaderColumnMap:
    """以預設設定解析表頭的便利函數"""
    return HeaderResolver(**kwargs).resolve(headers)
