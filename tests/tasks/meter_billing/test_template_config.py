"""
JSON 模板配置測試
"""

import json

import pytest

from meter_billing.tasks.meter_billing.exceptions import TemplateConfigError
from meter_billing.tasks.meter_billing.models import TemplateConfig


def _minimal(**overrides):
    data = {
        'document_title': '账单',
        'merchant_template': {
            'sections': [{'name': 'title', 'type': 'title', 'content': '{merchant_name}'}],
        },
    }
    data.update(overrides)
    return data


def test_load_default():
    config = TemplateConfig.load_default()
    assert config.document_title == '商户水电费账单'
    assert config.summary_sections is not None
    assert [s.type for s in config.merchant_sections][0] == 'title'
    assert config.unknown_placeholders() == set()


def test_from_dict_defaults():
    config = TemplateConfig.from_dict(_minimal())
    assert config.summary_sections is None
    assert config.title_font_size == 16
    assert config.title_alignment == 'center'
    assert config.section_font_size == 12


def test_load_from_file(tmp_path):
    path = tmp_path / 'template.json'
    path.write_text(json.dumps(_minimal(title_font_size=20), ensure_ascii=False), encoding='utf-8')
    config = TemplateConfig.load_from_file(path)
    assert config.title_font_size == 20
    assert config.source_path == str(path)


def test_missing_file(tmp_path):
    with pytest.raises(TemplateConfigError):
        TemplateConfig.load_from_file(tmp_path / 'missing.json')


def test_invalid_json(tmp_path):
    path = tmp_path / 'broken.json'
    path.write_text('{ not json', encoding='utf-8')
    with pytest.raises(TemplateConfigError):
        TemplateConfig.load_from_file(path)


def test_missing_merchant_sections():
    with pytest.raises(TemplateConfigError):
        TemplateConfig.from_dict({'document_title': 'x'})


def test_unknown_placeholders_and_types_reported():
    data = _minimal()
    data['merchant_template']['sections'].append(
        {'name': 'odd', 'type': 'image', 'content': '{logo}'})
    config = TemplateConfig.from_dict(data)
    assert config.unknown_placeholders() == {'logo'}
    assert config.unknown_section_types() == {'image'}
