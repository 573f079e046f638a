"""
抄表計費資料模型

計費規則：
- 用量 = max(本期 - 上期, 0)，只截斷不取整
- 水費 = round(水用量 × 水費單價)，在設定讀數時即取整到「元」
- 電費 = round(Σ 各電表用量 × 電費單價)，先合計用量、再乘單價、最後取整一次
- 總費用 = 水費 + 電費 + 水電人工費 + 垃圾處理費
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Dict, Any, Tuple, List, Iterator


def round_currency(value: float) -> float:
    """
    四捨五入到整數（0.5 遠離零進位）

    以 float 的十進位表示進行進位，避免 2.675 這類二進位誤差造成的偏差。

    Args:
        value: 原始金額

    Returns:
        float: 取整後的金額
    """
    return float(Decimal(repr(float(value))).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def clamp_usage(prev: float, curr: float) -> float:
    """用量 = max(本期 - 上期, 0)"""
    return max(curr - prev, 0.0)


def format_quantity(value: float) -> str:
    """數量顯示：整數不帶小數點（100.0 → '100'），其餘保留原值"""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


@dataclass(frozen=True)
class ElectricityMeterReading:
    """單一電表的讀數"""
    meter_id: str
    prev_reading: float
    curr_reading: float
    usage: float
    line_amount: float  # 單表金額，僅供顯示

    @classmethod
    def create(cls, meter_id: str, prev: float, curr: float,
               unit_price: float) -> 'ElectricityMeterReading':
        usage = clamp_usage(prev, curr)
        return cls(
            meter_id=str(meter_id),
            prev_reading=float(prev),
            curr_reading=float(curr),
            usage=usage,
            line_amount=round_currency(usage * unit_price),
        )

    def describe(self) -> str:
        return (
            f"电表{self.meter_id}: 上期{format_quantity(self.prev_reading)}度, "
            f"本期{format_quantity(self.curr_reading)}度, "
            f"用量{format_quantity(self.usage)}度, 费用{self.line_amount:.2f}元"
        )


@dataclass(frozen=True)
class MerchantBillingRecord:
    """
    單一商戶的計費記錄（不可變）

    只能透過 MerchantBillBuilder.build() 產生，所有衍生欄位在建立時已計算完成。
    """
    merchant_name: str
    shop_code: str
    water_unit_price: float
    electricity_unit_price: float
    prev_water_reading: float
    curr_water_reading: float
    water_usage: float
    water_amount: float
    electricity_meters: Tuple[ElectricityMeterReading, ...]
    electricity_usage: float
    electricity_amount: float
    labor_fee: float  # 水电人工费
    garbage_fee: float  # 垃圾处理费
    total_fee: float
    month: str  # YYYY年MM月
    meter_reader_name: Optional[str] = None
    meter_read_date: Optional[str] = None

    @property
    def water_electricity_subtotal(self) -> float:
        """水電費合計（不含人工費與垃圾處理費）"""
        return self.water_amount + self.electricity_amount

    @property
    def meter_count(self) -> int:
        return len(self.electricity_meters)

    def electricity_details(self) -> str:
        """
        電表明細，每個電表一行

        Returns:
            str: 明細文字，無電表時為「无电表数据」
        """
        if not self.electricity_meters:
            return "无电表数据"
        return "\n".join(meter.describe() for meter in self.electricity_meters)

    def with_meter_info(self, reader: Optional[str], date: Optional[str]) -> 'MerchantBillingRecord':
        """返回帶有抄表人與抄表日期的新記錄（空白字串視為未提供）"""
        return replace(
            self,
            meter_reader_name=_blank_to_none(reader),
            meter_read_date=_blank_to_none(date),
        )

    def to_dict(self) -> Dict[str, Any]:
        """
        轉為完整字典

        Returns:
            Dict: 完整資料
        """
        return {
            'merchant_name': self.merchant_name,
            'shop_code': self.shop_code,
            'month': self.month,
            'water_unit_price': self.water_unit_price,
            'electricity_unit_price': self.electricity_unit_price,
            'prev_water_reading': self.prev_water_reading,
            'curr_water_reading': self.curr_water_reading,
            'water_usage': self.water_usage,
            'water_amount': self.water_amount,
            'electricity_meters': [
                {
                    'meter_id': m.meter_id,
                    'prev_reading': m.prev_reading,
                    'curr_reading': m.curr_reading,
                    'usage': m.usage,
                    'line_amount': m.line_amount,
                }
                for m in self.electricity_meters
            ],
            'electricity_usage': self.electricity_usage,
            'electricity_amount': self.electricity_amount,
            'labor_fee': self.labor_fee,
            'garbage_fee': self.garbage_fee,
            'total_fee': self.total_fee,
            'meter_reader_name': self.meter_reader_name,
            'meter_read_date': self.meter_read_date,
        }

    def __repr__(self) -> str:
        return (f"MerchantBillingRecord(merchant={self.merchant_name}, "
                f"meters={self.meter_count}, total={self.total_fee:,.2f})")


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


class MerchantBillBuilder:
    """
    商戶計費記錄建構器

    每個設定方法都會由已儲存的輸入重新計算所有衍生欄位，重複呼叫結果相同。
    """

    def __init__(self, merchant_name: str, water_unit_price: float,
                 electricity_unit_price: float, now: Optional[datetime] = None):
        if not merchant_name or not str(merchant_name).strip():
            raise ValueError("merchant_name 不可為空")
        self.merchant_name = str(merchant_name).strip()
        self.water_unit_price = float(water_unit_price)
        self.electricity_unit_price = float(electricity_unit_price)
        self.month = (now or datetime.now()).strftime("%Y年%m月")

        self.shop_code = ""
        self.prev_water_reading = 0.0
        self.curr_water_reading = 0.0
        self.water_usage = 0.0
        self.water_amount = 0.0
        self.meters: List[ElectricityMeterReading] = []
        self.electricity_usage = 0.0
        self.electricity_amount = 0.0
        self.labor_fee = 0.0
        self.garbage_fee = 0.0
        self.total_fee = 0.0
        self.meter_reader_name: Optional[str] = None
        self.meter_read_date: Optional[str] = None

    def set_shop_code(self, code: str) -> 'MerchantBillBuilder':
        self.shop_code = "" if code is None else str(code).strip()
        return self

    def set_water_readings(self, prev: float, curr: float) -> 'MerchantBillBuilder':
        """設定水表讀數，水費在此取整到元"""
        self.prev_water_reading = float(prev)
        self.curr_water_reading = float(curr)
        self.water_usage = clamp_usage(self.prev_water_reading, self.curr_water_reading)
        self.water_amount = round_currency(self.water_usage * self.water_unit_price)
        return self.update_totals()

    def add_meter(self, meter_id: str, prev: float, curr: float) -> 'MerchantBillBuilder':
        self.meters.append(
            ElectricityMeterReading.create(meter_id, prev, curr, self.electricity_unit_price)
        )
        return self.update_totals()

    def set_fees(self, labor: float, garbage: float) -> 'MerchantBillBuilder':
        self.labor_fee = float(labor)
        self.garbage_fee = float(garbage)
        return self.update_totals()

    def set_meter_info(self, reader: Optional[str], date: Optional[str]) -> 'MerchantBillBuilder':
        self.meter_reader_name = _blank_to_none(reader)
        self.meter_read_date = _blank_to_none(date)
        return self

    def update_totals(self) -> 'MerchantBillBuilder':
        """重新計算總用電量、電費與總費用"""
        self.electricity_usage = sum(m.usage for m in self.meters)
        # 先合計用量再乘單價，只取整一次
        self.electricity_amount = round_currency(self.electricity_usage * self.electricity_unit_price)
        self.total_fee = (self.water_amount + self.electricity_amount
                          + self.labor_fee + self.garbage_fee)
        return self

    def build(self) -> MerchantBillingRecord:
        self.update_totals()
        return MerchantBillingRecord(
            merchant_name=self.merchant_name,
            shop_code=self.shop_code,
            water_unit_price=self.water_unit_price,
            electricity_unit_price=self.electricity_unit_price,
            prev_water_reading=self.prev_water_reading,
            curr_water_reading=self.curr_water_reading,
            water_usage=self.water_usage,
            water_amount=self.water_amount,
            electricity_meters=tuple(self.meters),
            electricity_usage=self.electricity_usage,
            electricity_amount=self.electricity_amount,
            labor_fee=self.labor_fee,
            garbage_fee=self.garbage_fee,
            total_fee=self.total_fee,
            month=self.month,
            meter_reader_name=self.meter_reader_name,
            meter_read_date=self.meter_read_date,
        )


@dataclass
class BillingBatch:
    """
    一次批次的計費記錄集合

    只能追加，不能移除；追加時同步累加各項合計。
    """
    year: str
    month: str
    _records: List[MerchantBillingRecord] = field(default_factory=list, repr=False)
    total_water_usage: float = 0.0
    total_electric_usage: float = 0.0
    total_water_amount: float = 0.0
    total_electric_amount: float = 0.0
    total_labor_fee: float = 0.0
    total_garbage_fee: float = 0.0
    grand_total: float = 0.0

    @classmethod
    def for_now(cls, now: Optional[datetime] = None) -> 'BillingBatch':
        now = now or datetime.now()
        return cls(year=str(now.year), month=f"{now.month:02d}")

    def append(self, record: MerchantBillingRecord) -> None:
        self.total_water_usage += record.water_usage
        self.total_electric_usage += record.electricity_usage
        self.total_water_amount += record.water_amount
        self.total_electric_amount += record.electricity_amount
        self.total_labor_fee += record.labor_fee
        self.total_garbage_fee += record.garbage_fee
        self.grand_total += record.total_fee
        self._records.append(record)

    def extend(self, records) -> None:
        for record in records:
            self.append(record)

    @property
    def records(self) -> Tuple[MerchantBillingRecord, ...]:
        return tuple(self._records)

    @property
    def is_empty(self) -> bool:
        return not self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[MerchantBillingRecord]:
        return iter(tuple(self._records))

    def to_summary_dict(self) -> Dict[str, Any]:
        """
        轉為摘要字典

        Returns:
            Dict: 摘要資料
        """
        return {
            'year': self.year,
            'month': self.month,
            'merchant_count': len(self),
            'total_water_usage': self.total_water_usage,
            'total_electric_usage': self.total_electric_usage,
            'total_water_amount': self.total_water_amount,
            'total_electric_amount': self.total_electric_amount,
            'total_labor_fee': self.total_labor_fee,
            'total_garbage_fee': self.total_garbage_fee,
            'grand_total': self.grand_total,
        }
