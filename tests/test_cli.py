"""
命令列測試
"""

import json

import pytest

from meter_billing import cli


def test_notice_writes_output(write_xlsx, sample_rows, tmp_path, docx_reader, capsys):
    output = tmp_path / 'out' / 'notice.docx'
    code = cli.main(['notice', '-i', str(write_xlsx(sample_rows)), '-o', str(output),
                     '--title', '三月通知单', '--per-page', '2', '--meter-reader', '王五'])

    assert code == 0
    assert output.is_file()
    assert str(output) in capsys.readouterr().out
    text = docx_reader.text(docx_reader.load(output.read_bytes()))
    assert '三月通知单' in text
    assert '王五' in text


def test_template_uses_default_template(write_csv, sample_rows, tmp_path, docx_reader):
    output = tmp_path / 'bills.docx'
    code = cli.main(['template', '-i', str(write_csv(sample_rows)), '-o', str(output)])

    assert code == 0
    assert '商户水电费账单' in docx_reader.text(docx_reader.load(output.read_bytes()))


def test_template_with_custom_config(write_csv, sample_rows, tmp_path, docx_reader):
    config_path = tmp_path / 'template.json'
    config_path.write_text(json.dumps({
        'document_title': '自定义账单',
        'merchant_template': {'sections': [{'name': 't', 'type': 'text', 'content': '{merchant_name}'}]},
    }, ensure_ascii=False), encoding='utf-8')
    output = tmp_path / 'custom.docx'

    code = cli.main(['template', '-i', str(write_csv(sample_rows)), '-o', str(output),
                     '--config', str(config_path)])

    assert code == 0
    paragraphs = [p.text for p in docx_reader.load(output.read_bytes()).paragraphs]
    assert paragraphs[:2] == ['自定义账单', '张三商店']


def test_missing_input_exits_with_error(tmp_path, capsys):
    code = cli.main(['notice', '-i', str(tmp_path / 'missing.xlsx'), '-o', str(tmp_path / 'x.docx')])
    assert code == 1
    assert 'missing.xlsx' in capsys.readouterr().err


def test_unsupported_extension_exits_with_error(tmp_path, capsys):
    path = tmp_path / 'meters.txt'
    path.write_text('x', encoding='utf-8')
    assert cli.main(['notice', '-i', str(path)]) == 1
    assert '.txt' in capsys.readouterr().err


def test_missing_template_config(write_csv, sample_rows, tmp_path):
    code = cli.main(['template', '-i', str(write_csv(sample_rows)),
                     '--config', str(tmp_path / 'nope.json'), '-o', str(tmp_path / 'x.docx')])
    assert code == 1


def test_subcommand_required():
    with pytest.raises(SystemExit):
        cli.main([])
