"""
共用測試夾具
"""

import csv
from datetime import datetime
from io import BytesIO

import pytest
from docx import Document
from docx.oxml.ns import qn
from openpyxl import Workbook

from meter_billing.tasks.meter_billing.models import BillingBatch, MerchantBillBuilder

FIXED_NOW = datetime(2024, 3, 15, 9, 30, 0)

HEADERS = [
    '铺面编号', '店铺名称',
    '电表1上期读数', '电表1本期读数', '电表2上期读数', '电表2本期读数',
    '上期水表读数', '本期水表读数', '水费单价', '电费单价',
    '水电人工费', '垃圾处理费',
]

# 水費 10 × 3.5 = 35；電費 50 × 1.2 = 60；合計 35 + 60 + 30 + 10 = 135
SAMPLE_ROWS = [
    ['A01', '张三商店', 100, 150, 0, 0, 10, 20, 3.5, 1.2, 30, 10],
    ['A02', '李四餐馆', 200, 260, 50, 80, 5, 25, 3.5, 1.2, 30, 10],
    ['A03', '', 1, 2, 0, 0, 1, 2, 3.5, 1.2, 30, 10],
]


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def headers():
    return list(HEADERS)


@pytest.fixture
def sample_rows():
    return [list(row) for row in SAMPLE_ROWS]


@pytest.fixture
def make_record():
    """建立商戶記錄的工廠"""

    def _make(name='张三商店', shop_code='A01', water=(10, 20), meters=((100, 150),),
              water_price=3.5, electricity_price=1.2, labor=30, garbage=10,
              reader=None, date=None):
        builder = MerchantBillBuilder(name, water_price, electricity_price, now=FIXED_NOW)
        builder.set_water_readings(*water)
        builder.set_shop_code(shop_code)
        for position, (prev, curr) in enumerate(meters, start=1):
            builder.add_meter(str(position), prev, curr)
        builder.set_fees(labor, garbage)
        builder.set_meter_info(reader, date)
        return builder.build()

    return _make


@pytest.fixture
def make_batch(make_record):
    """建立 N 個商戶的批次"""

    def _make(count=3):
        batch = BillingBatch.for_now(FIXED_NOW)
        for index in range(count):
            batch.append(make_record(name=f'商户{index + 1}', shop_code=f'A{index + 1:02d}',
                                     water=(0, 10 + index), meters=((0, 100 + index * 10),)))
        return batch

    return _make


@pytest.fixture
def write_csv(tmp_path):
    def _write(rows, header=HEADERS, name='meters.csv', encoding='utf-8-sig'):
        path = tmp_path / name
        with open(path, 'w', newline='', encoding=encoding) as f:
            writer = csv.writer(f)
            writer.writerow(header)
            writer.writerows(rows)
        return path

    return _write


@pytest.fixture
def write_xlsx(tmp_path):
    def _write(rows, header=HEADERS, name='meters.xlsx', sheet_title='抄表'):
        path = tmp_path / name
        workbook = Workbook()
        sheet = workbook.active
        sheet.title = sheet_title
        sheet.append(header)
        for row in rows:
            sheet.append(row)
        workbook.save(path)
        return path

    return _write


def load_document(data: bytes):
    return Document(BytesIO(data))


def count_page_breaks(document) -> int:
    return sum(
        1 for br in document.element.body.iter(qn('w:br'))
        if br.get(qn('w:type')) == 'page'
    )


def document_text(document) -> str:
    texts = [p.text for p in document.paragraphs]
    for table in document.tables:
        for row in table.rows:
            texts.extend(cell.text for cell in row.cells)
    return '\n'.join(texts)


@pytest.fixture
def docx_reader():
    """讀取 .docx 位元組的輔助函數集合"""

    class _Reader:
        load = staticmethod(load_document)
        page_breaks = staticmethod(count_page_breaks)
        text = staticmethod(document_text)

    return _Reader
