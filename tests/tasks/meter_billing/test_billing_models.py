"""
計費模型測試：用量截斷、取整規則、批次合計
"""

from dataclasses import FrozenInstanceError

import pytest

from meter_billing.tasks.meter_billing.models import (
    BillingBatch,
    ElectricityMeterReading,
    MerchantBillBuilder,
    round_currency,
    clamp_usage,
    format_quantity,
)


class TestRoundingAndUsage:
    """取整與用量"""

    @pytest.mark.parametrize('value, expected', [
        (0.5, 1.0),
        (1.5, 2.0),
        (2.5, 3.0),
        (2.4999, 2.0),
        (-0.5, -1.0),
        (134.5, 135.0),
    ])
    def test_round_half_away_from_zero(self, value, expected):
        assert round_currency(value) == expected

    def test_usage_never_negative(self):
        assert clamp_usage(150, 100) == 0.0
        assert clamp_usage(100, 150) == 50.0
        assert clamp_usage(100, 100) == 0.0

    def test_usage_keeps_fraction(self):
        assert clamp_usage(10.2, 12.7) == pytest.approx(2.5)

    def test_format_quantity(self):
        assert format_quantity(100.0) == '100'
        assert format_quantity(12.5) == '12.5'


class TestElectricityMeterReading:
    def test_create_computes_usage_and_line_amount(self):
        meter = ElectricityMeterReading.create('1', 100, 150, 1.2)
        assert meter.usage == 50.0
        assert meter.line_amount == 60.0

    def test_reversed_readings_clamp_to_zero(self):
        meter = ElectricityMeterReading.create('1', 150, 100, 1.2)
        assert meter.usage == 0.0
        assert meter.line_amount == 0.0

    def test_describe(self):
        meter = ElectricityMeterReading.create('2', 100, 150, 1.2)
        assert meter.describe() == '电表2: 上期100度, 本期150度, 用量50度, 费用60.00元'


class TestMerchantBillBuilder:
    """建構器與不可變記錄"""

    def test_basic_record(self, make_record):
        record = make_record()
        assert record.water_usage == 10.0
        assert record.water_amount == 35.0
        assert record.electricity_usage == 50.0
        assert record.electricity_amount == 60.0
        assert record.total_fee == 135.0
        assert record.water_electricity_subtotal == 95.0
        assert record.month == '2024年03月'

    def test_electricity_rounds_combined_usage_once(self, make_record):
        """兩個電表各用 1 度、單價 0.5：合併取整為 1，逐表取整加總為 2"""
        record = make_record(meters=((0, 1), (0, 1)), electricity_price=0.5)
        per_line = sum(round_currency(m.usage * 0.5) for m in record.electricity_meters)

        assert record.electricity_usage == 2.0
        assert record.electricity_amount == 1.0
        assert per_line == 2.0
        assert record.electricity_amount != per_line

    def test_water_amount_rounded_at_readings(self):
        builder = MerchantBillBuilder('商户', water_unit_price=2.5, electricity_unit_price=1)
        builder.set_water_readings(0, 3)
        assert builder.water_amount == 8.0

    def test_record_is_frozen(self, make_record):
        record = make_record()
        with pytest.raises(FrozenInstanceError):
            record.total_fee = 0

    def test_empty_merchant_name_rejected(self):
        with pytest.raises(ValueError):
            MerchantBillBuilder('  ', 1, 1)

    def test_setters_are_idempotent(self):
        builder = MerchantBillBuilder('商户', 3.5, 1.2)
        builder.set_water_readings(10, 20)
        builder.set_fees(30, 10)
        first = builder.build()
        builder.set_water_readings(10, 20)
        builder.set_fees(30, 10)
        assert builder.build() == first

    def test_no_meters(self, make_record):
        record = make_record(meters=())
        assert record.meter_count == 0
        assert record.electricity_amount == 0.0
        assert record.electricity_details() == '无电表数据'

    def test_meter_info_blank_becomes_none(self, make_record):
        record = make_record(reader='  ', date='2024年03月01日')
        assert record.meter_reader_name is None
        assert record.meter_read_date == '2024年03月01日'

        updated = record.with_meter_info('王五', '')
        assert updated.meter_reader_name == '王五'
        assert updated.meter_read_date is None

    def test_to_dict(self, make_record):
        data = make_record().to_dict()
        assert data['merchant_name'] == '张三商店'
        assert data['electricity_meters'][0]['usage'] == 50.0
        assert data['total_fee'] == 135.0


class TestBillingBatch:
    """批次合計"""

    def test_three_merchant_totals(self, make_batch):
        batch = make_batch(3)
        records = batch.records

        assert len(batch) == 3
        assert batch.grand_total == pytest.approx(sum(r.total_fee for r in records))
        assert batch.total_water_amount == pytest.approx(sum(r.water_amount for r in records))
        assert batch.total_electric_amount == pytest.approx(sum(r.electricity_amount for r in records))
        assert batch.total_labor_fee == 90.0
        assert batch.total_garbage_fee == 30.0

    def test_for_now_sets_year_and_month(self, fixed_now):
        batch = BillingBatch.for_now(fixed_now)
        assert batch.year == '2024'
        assert batch.month == '03'
        assert batch.is_empty

    def test_records_are_read_only_view(self, make_batch):
        batch = make_batch(2)
        assert isinstance(batch.records, tuple)
        assert [r.merchant_name for r in batch] == ['商户1', '商户2']

    def test_summary_dict(self, make_batch):
        summary = make_batch(2).to_summary_dict()
        assert summary['merchant_count'] == 2
        assert summary['year'] == '2024'
