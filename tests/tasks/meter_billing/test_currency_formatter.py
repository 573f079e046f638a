"""
人民幣大寫金額測試
"""

from decimal import Decimal

import pytest

from meter_billing.tasks.meter_billing.utils import to_chinese_uppercase, to_cents


@pytest.mark.parametrize('amount, expected', [
    (0, '零元整'),
    (1, '壹元整'),
    (0.05, '伍分'),
    (3.5, '叁元伍角'),
    (100.5, '壹佰元伍角'),
    (135, '壹佰叁拾伍元整'),
    (1234.56, '壹仟贰佰叁拾肆元伍角陆分'),
    (10000, '壹万元整'),
    (10050, '壹万零伍拾元整'),
    (100000000, '壹亿元整'),
])
def test_uppercase_references(amount, expected):
    assert to_chinese_uppercase(amount) == expected


def test_decimal_input():
    assert to_chinese_uppercase(Decimal('3.50')) == '叁元伍角'


def test_to_cents_rounds_half_up():
    assert to_cents(0.125) == 13
    assert to_cents(2.675) == 268
    assert to_cents(100) == 10000


@pytest.mark.parametrize('amount, expected', [
    (-1, '负壹元整'),
    (-12.5, '负壹拾贰元伍角'),
    (-395, '负叁佰玖拾伍元整'),
    (-0.004, '零元整'),
])
def test_negative_amount_has_sign(amount, expected):
    assert to_chinese_uppercase(amount) == expected


def test_amount_out_of_range():
    with pytest.raises(ValueError):
        to_chinese_uppercase(10 ** 13)
    with pytest.raises(ValueError):
        to_chinese_uppercase(-10 ** 13)
