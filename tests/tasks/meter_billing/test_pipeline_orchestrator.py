"""
端到端流程測試：檔案 → Pipeline → .docx
"""

import pytest

from meter_billing.tasks.meter_billing.exceptions import (
    ColumnNotFoundError,
    EmptyBatchError,
    SourceFileError,
    UnsupportedFileTypeError,
)
from meter_billing.tasks.meter_billing.models import GenerateOptions, TemplateConfig
from meter_billing.tasks.meter_billing.pipeline_orchestrator import (
    BillingRunResult,
    MeterBillingTask,
    run_meter_billing,
)


def test_xlsx_notice_end_to_end(write_xlsx, sample_rows, fixed_now, docx_reader):
    path = write_xlsx(sample_rows)
    result = run_meter_billing(path, now=fixed_now)

    assert isinstance(result, BillingRunResult)
    assert [r.merchant_name for r in result.batch] == ['张三商店', '李四餐馆']
    assert result.skipped_rows == 1
    assert result.batch.grand_total == 135.0 + 218.0
    assert result.filename == 'report_032024.docx'
    assert '2024年03月抄表计费通知单' in docx_reader.text(docx_reader.load(result.document_bytes))


def test_csv_template_end_to_end(write_csv, sample_rows, fixed_now, docx_reader):
    path = write_csv(sample_rows)
    result = run_meter_billing(path, mode='template',
                               template_config=TemplateConfig.load_default(), now=fixed_now)

    text = docx_reader.text(docx_reader.load(result.document_bytes))
    assert '2024年3月 李四餐馆 水电费账单' in text
    assert result.batch.records[1].meter_count == 2


def test_custom_title_filename(write_csv, sample_rows, fixed_now):
    options = GenerateOptions(custom_title='2024年3月 水电费')
    result = run_meter_billing(write_csv(sample_rows), options=options, now=fixed_now)
    assert result.filename == '20243_水电费.docx'


def test_missing_column_propagates(write_csv, sample_rows, headers, fixed_now):
    headers[9] = '单价'
    with pytest.raises(ColumnNotFoundError):
        run_meter_billing(write_csv(sample_rows, header=headers), now=fixed_now)


def test_batch_without_merchants(write_csv, sample_rows, fixed_now):
    with pytest.raises(EmptyBatchError) as exc_info:
        run_meter_billing(write_csv([sample_rows[2]]), now=fixed_now)
    assert exc_info.value.skipped_rows == 1


def test_missing_file(tmp_path, fixed_now):
    with pytest.raises(SourceFileError):
        run_meter_billing(tmp_path / 'nope.xlsx', now=fixed_now)


def test_unsupported_extension(tmp_path, fixed_now):
    path = tmp_path / 'meters.txt'
    path.write_text('x', encoding='utf-8')
    with pytest.raises(UnsupportedFileTypeError):
        run_meter_billing(path, now=fixed_now)


def test_template_mode_requires_config():
    with pytest.raises(ValueError):
        MeterBillingTask().build_pipeline(mode='template')


def test_invalid_mode():
    with pytest.raises(ValueError):
        MeterBillingTask().build_pipeline(mode='pdf')


def test_pipeline_steps():
    assert MeterBillingTask().get_pipeline_steps() == [
        'Load_Table', 'Resolve_Headers', 'Parse_Rows', 'Render_Document',
    ]


def test_csv_with_trailing_comma_row(write_csv, sample_rows, fixed_now):
    rows = [sample_rows[0], sample_rows[1] + ['']]
    result = run_meter_billing(write_csv(rows), now=fixed_now)

    assert [r.merchant_name for r in result.batch] == ['张三商店', '李四餐馆']
    assert result.batch.records[1].total_fee == 218.0


def test_negative_fee_still_renders(write_csv, sample_rows, fixed_now, docx_reader):
    sample_rows[1][10] = -300
    result = run_meter_billing(write_csv(sample_rows[:2]), now=fixed_now)

    assert result.batch.records[1].total_fee == -112.0
    assert '负壹佰壹拾贰元整' in docx_reader.text(docx_reader.load(result.document_bytes))
