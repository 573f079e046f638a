"""
模板佔位符替換

佔位符為封閉集合：鍵名 → 取值函數。未知的 {token} 原樣保留。
數量（讀數、用量）不帶多餘的 ".0"；單價與金額一律兩位小數。
"""

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, Optional, Set

from ..models.billing import MerchantBillingRecord, format_quantity
from .currency_formatter import to_chinese_uppercase

PLACEHOLDER_PATTERN = re.compile(r'\{([A-Za-z_][A-Za-z0-9_]*)\}')

DATETIME_FORMAT = '%Y-%m-%d %H:%M:%S'


@dataclass(frozen=True)
class PlaceholderContext:
    """替換時需要的批次層級資訊"""
    year: str
    month: str
    now: datetime


def _money(value: float) -> str:
    return f"{value:.2f}"


Accessor = Callable[[MerchantBillingRecord, PlaceholderContext], str]

PLACEHOLDERS: Dict[str, Accessor] = {
    'merchant_name': lambda r, c: r.merchant_name,
    'shop_code': lambda r, c: r.shop_code,
    'year': lambda r, c: str(c.year),
    'month': lambda r, c: str(int(c.month)),
    'prev_water_reading': lambda r, c: format_quantity(r.prev_water_reading),
    'curr_water_reading': lambda r, c: format_quantity(r.curr_water_reading),
    'water_usage': lambda r, c: format_quantity(r.water_usage),
    'electricity_usage': lambda r, c: format_quantity(r.electricity_usage),
    'water_unit_price': lambda r, c: _money(r.water_unit_price),
    'electricity_unit_price': lambda r, c: _money(r.electricity_unit_price),
    'water_amount': lambda r, c: _money(r.water_amount),
    'electricity_amount': lambda r, c: _money(r.electricity_amount),
    'total_amount': lambda r, c: _money(r.total_fee),
    'labor_fee': lambda r, c: _money(r.labor_fee),
    'garbage_fee': lambda r, c: _money(r.garbage_fee),
    'total_amount_upper': lambda r, c: to_chinese_uppercase(r.total_fee),
    'electricity_details': lambda r, c: r.electricity_details(),
    'electricity_meter_count': lambda r, c: str(r.meter_count),
    'datetime': lambda r, c: c.now.strftime(DATETIME_FORMAT),
}

KNOWN_PLACEHOLDERS = frozenset(PLACEHOLDERS)


def find_placeholders(text: Optional[str]) -> Set[str]:
    """找出文字中所有 {token} 的名稱"""
    if not text:
        return set()
    return set(PLACEHOLDER_PATTERN.findall(text))


def find_unknown_placeholders(text: Optional[str]) -> Set[str]:
    return find_placeholders(text) - KNOWN_PLACEHOLDERS


def render_placeholders(text: str, record: Optional[MerchantBillingRecord],
                        context: PlaceholderContext) -> str:
    """
    替換文字中的佔位符

    Args:
        text: 模板文字
        record: 商戶記錄；為 None 時只替換 {datetime}
        context: 批次層級資訊

    Returns:
        str: 替換後的文字
    """
    if not text:
        return text or ""

    def _replace(match: re.Match) -> str:
        key = match.group(1)
        accessor = PLACEHOLDERS.get(key)
        if accessor is None:
            return match.group(0)
        if record is None and key != 'datetime':
            return match.group(0)
        return accessor(record, context)

    return PLACEHOLDER_PATTERN.sub(_replace, text)
