"""
人民幣金額中文大寫

將金額（元，最多兩位小數）轉為發票使用的大寫金額，例如
10050 → 壹万零伍拾元整、100.5 → 壹佰元伍角。
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import List, Union

DIGITS = ("零", "壹", "贰", "叁", "肆", "伍", "陆", "柒", "捌", "玖")
UNITS = ("分", "角", "元", "拾", "佰", "仟", "万", "拾", "佰", "仟", "亿", "拾", "佰", "仟", "万")
MAJOR_UNITS = ("元", "万", "亿")

# 「万」所在的位數（以分為第 0 位）
_WAN_INDEX = 6

MAX_CENTS = 10 ** len(UNITS)
NEGATIVE_SIGN = "负"


def to_cents(amount: Union[int, float, Decimal]) -> int:
    """金額轉為整數分（0.5 分遠離零進位）"""
    value = amount if isinstance(amount, Decimal) else Decimal(repr(float(amount)))
    return int((value * 100).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def to_chinese_uppercase(amount: Union[int, float, Decimal]) -> str:
    """
    金額轉中文大寫

    Args:
        amount: 金額（元），負數以「负」開頭

    Returns:
        str: 大寫金額，沒有角分時以「整」結尾

    Raises:
        ValueError: 超出「万亿」位數上限

    Example:
        >>> to_chinese_uppercase(-12.5)
        '负壹拾贰元伍角'
    """
    cents = to_cents(amount)
    if abs(cents) >= MAX_CENTS:
        raise ValueError(f"金額超出可轉換範圍: {amount}")
    if cents < 0:
        return NEGATIVE_SIGN + _cents_to_uppercase(-cents)
    return _cents_to_uppercase(cents)


def _cents_to_uppercase(cents: int) -> str:
    if cents == 0:
        return "零元整"

    parts: List[str] = []
    num = cents
    unit_idx = 0
    last_zero = False

    # 由分位往高位處理，最後再反轉
    while num > 0:
        digit = num % 10
        unit = UNITS[unit_idx]
        if digit == 0:
            if unit in MAJOR_UNITS and not any(unit in p for p in parts):
                # 整組「万」位皆為零時不輸出万，避免出現「壹亿万元」
                wan_group_empty = unit_idx == _WAN_INDEX and (cents // 10 ** _WAN_INDEX) % 10000 == 0
                if not wan_group_empty:
                    parts.append(unit)
            if not last_zero:
                parts.append("零")
            last_zero = True
        else:
            parts.append(DIGITS[digit] + unit)
            last_zero = False
        num //= 10
        unit_idx += 1

    text = "".join(reversed(parts))
    while "零零" in text:
        text = text.replace("零零", "零")
    for major in ("亿", "万", "元"):
        text = text.replace("零" + major, major)
    if text.endswith("零"):
        text = text[:-1]
    if "角" not in text and "分" not in text:
        text += "整"
    return text
