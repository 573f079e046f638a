"""
通知單排版測試
"""

import pytest

from meter_billing.tasks.meter_billing.exceptions import EmptyBatchError
from meter_billing.tasks.meter_billing.models import BillingBatch, GenerateOptions
from meter_billing.tasks.meter_billing.utils.notice_assembler import (
    NoticeDocumentAssembler,
    render_notice_document,
    SUMMARY_TITLE,
)


@pytest.fixture
def assembler_factory(fixed_now):
    def _make(**option_kwargs):
        return NoticeDocumentAssembler(GenerateOptions(**option_kwargs), now=fixed_now)
    return _make


def test_default_title_and_summary(assembler_factory, make_batch, docx_reader):
    data = assembler_factory().render(make_batch(2))
    document = docx_reader.load(data)
    paragraphs = [p.text for p in document.paragraphs]

    assert paragraphs.count('2024年03月抄表计费通知单') == 2
    assert SUMMARY_TITLE in paragraphs
    # 每個商戶一張明細表，最後一張為匯總表
    assert len(document.tables) == 3


def test_custom_title_and_meter_info(assembler_factory, make_batch, docx_reader):
    assembler = assembler_factory(custom_title='三月水电费', meter_reader='王五')
    text = docx_reader.text(docx_reader.load(assembler.render(make_batch(1))))

    assert '三月水电费' in text
    assert '抄表人：\t王五' in text
    assert '抄表日期：2024年03月15日' in text


@pytest.mark.parametrize('per_page, count, expected_breaks', [
    (2, 5, 3),
    (1, 3, 3),
    (0, 4, 1),
    (3, 3, 1),
])
def test_page_breaks(assembler_factory, make_batch, docx_reader, per_page, count, expected_breaks):
    data = assembler_factory(per_page=per_page).render(make_batch(count))
    assert docx_reader.page_breaks(docx_reader.load(data)) == expected_breaks


def test_summary_rows_and_totals(assembler_factory, make_batch, docx_reader):
    batch = make_batch(3)
    document = docx_reader.load(assembler_factory().render(batch))
    summary = document.tables[-1]

    assert len(summary.rows) == 5
    assert summary.cell(1, 0).text == '商户1'
    assert summary.cell(4, 0).text == '合计'
    assert summary.cell(4, 4).text == f"{batch.grand_total:.2f}"


def test_multi_meter_table_is_merged(assembler_factory, make_record, docx_reader):
    batch = BillingBatch.for_now()
    batch.append(make_record(meters=((0, 10), (0, 20))))
    table = docx_reader.load(assembler_factory().render(batch)).tables[0]
    assert table.cell(1, 6)._tc is table.cell(2, 6)._tc


def test_empty_batch_raises(assembler_factory, fixed_now):
    with pytest.raises(EmptyBatchError):
        assembler_factory().render(BillingBatch.for_now(fixed_now))


def test_negative_total_rendered_with_sign(assembler_factory, make_record, fixed_now, docx_reader):
    batch = BillingBatch.for_now(fixed_now)
    batch.append(make_record(labor=-500))
    document = docx_reader.load(assembler_factory().render(batch))

    fee_table = document.tables[0]
    assert fee_table.rows[-1].cells[1].text == '大写：负叁佰玖拾伍元整    小写：-395.00'
    assert document.tables[-1].rows[-1].cells[-1].text == '-395.00'


def test_render_from_record_list(make_record, docx_reader):
    records = [make_record(name='甲'), make_record(name='乙')]
    document = docx_reader.load(render_notice_document(records, GenerateOptions(custom_title='测试通知单')))
    paragraphs = [p.text for p in document.paragraphs]

    assert paragraphs.count('测试通知单') == 2
    assert docx_reader.page_breaks(document) == 2
