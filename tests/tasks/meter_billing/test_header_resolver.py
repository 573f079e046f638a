"""
表頭解析測試
"""

import pytest

from meter_billing.tasks.meter_billing.exceptions import ColumnNotFoundError, NoMeterColumnsError
from meter_billing.tasks.meter_billing.models.header_map import (
    MERCHANT_NAME,
    SHOP_CODE,
    PREV_WATER,
    GARBAGE_FEE,
)
from meter_billing.tasks.meter_billing.utils.header_resolver import (
    HeaderResolver,
    normalize_header,
    resolve_headers,
)


def test_normalize_header_strips_all_whitespace():
    assert normalize_header(' 店铺 名称 ') == '店铺名称'
    assert normalize_header('Meter\t1') == 'meter1'
    assert normalize_header(None) == ''


def test_resolves_required_fields(headers):
    column_map = resolve_headers(headers)
    assert column_map.index_of(SHOP_CODE) == 0
    assert column_map.index_of(MERCHANT_NAME) == 1
    assert column_map.index_of(PREV_WATER) == 6
    assert column_map.index_of(GARBAGE_FEE) == 11


def test_whitespace_in_header_still_matches(headers):
    headers[1] = ' 店铺 名称 '
    column_map = resolve_headers(headers)
    assert column_map.index_of(MERCHANT_NAME) == 1


def test_alias_contained_in_longer_header(headers):
    headers[1] = '商家名称（全称）'
    assert resolve_headers(headers).index_of(MERCHANT_NAME) == 1


def test_discovers_meter_pairs_in_order(headers):
    column_map = resolve_headers(headers)
    assert column_map.meter_columns == ((2, 3), (4, 5))
    assert column_map.meter_count == 2


def test_meter_discovery_stops_at_first_gap(headers):
    headers += ['电表4上期读数', '电表4本期读数']
    column_map = resolve_headers(headers)
    assert column_map.meter_count == 2


def test_single_meter(headers):
    headers[4] = '备注'
    headers[5] = '备注2'
    column_map = resolve_headers(headers)
    assert column_map.meter_columns == ((2, 3),)


def test_missing_required_field_reports_candidates(headers):
    headers[10] = '其他'
    with pytest.raises(ColumnNotFoundError) as exc_info:
        resolve_headers(headers)
    error = exc_info.value
    assert error.field_name == 'labor_fee'
    assert '水电人工费' in error.candidates
    assert '其他' in error.available_headers


def test_no_meter_columns_raises(headers):
    for index in range(2, 6):
        headers[index] = f'备注{index}'
    with pytest.raises(NoMeterColumnsError) as exc_info:
        resolve_headers(headers)
    assert exc_info.value.prefix == '电表'
    assert '备注2' in exc_info.value.available_headers


def test_custom_prefix_discovers_pairs(headers):
    headers[2:6] = ['表计1上期读数', '表计1本期读数', '表计2上期读数', '表计2本期读数']
    column_map = HeaderResolver(meter_prefix='表计').resolve(headers)
    assert column_map.meter_columns == ((2, 3), (4, 5))


def test_meter1_aliases_used_when_prefix_finds_nothing(headers):
    headers[2:6] = ['上月电表', '本月电表', '备注', '备注2']
    resolver = HeaderResolver(aliases={'meter1_prev': ['上月电表'], 'meter1_curr': ['本月电表']})
    assert resolver.resolve(headers).meter_columns == ((2, 3),)


def test_alias_override(headers):
    headers[1] = '租户'
    resolver = HeaderResolver(aliases={MERCHANT_NAME: ['租户']})
    assert resolver.resolve(headers).index_of(MERCHANT_NAME) == 1
