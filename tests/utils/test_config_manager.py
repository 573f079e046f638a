"""
ConfigManager 測試
"""

import threading
from pathlib import Path

import pytest

from meter_billing.utils.config import ConfigManager, config_manager, get_config, get_path


@pytest.fixture
def restore_config():
    snapshot = {k: dict(v) if isinstance(v, dict) else v for k, v in config_manager.to_dict().items()}
    yield config_manager
    config_manager._config_data = snapshot


def test_singleton():
    assert ConfigManager() is config_manager


def test_singleton_thread_safe():
    instances = []
    threads = [threading.Thread(target=lambda: instances.append(ConfigManager())) for _ in range(10)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert all(instance is config_manager for instance in instances)


def test_billing_and_document_defaults():
    assert config_manager.get_int('billing', 'per_page') == 1
    assert config_manager.get_int('billing', 'min_row_fields') == 5
    assert config_manager.get('headers', 'meter_prefix') == '电表'
    assert config_manager.get('document', 'font_name') == '宋体'
    assert config_manager.get_float('document', 'title_font_size') == 16.0
    assert config_manager.get('datasource', 'default_encoding') == 'utf-8-sig'


def test_fallbacks():
    assert config_manager.get('missing', 'key', 'x') == 'x'
    assert config_manager.get_int('billing', 'missing', 7) == 7
    assert config_manager.get_nested('headers', 'aliases', 'merchant_name', fallback=None) is None
    assert get_config('missing', 'key') is None


def test_dotted_path():
    assert config_manager.get('billing.per_page') == 1


def test_typed_accessors(restore_config):
    restore_config.set_config('runtime', 'flag', 'yes')
    restore_config.set_config('runtime', 'items', 'a, b ,c')
    restore_config.set_config('runtime', 'count', 'not-a-number')

    assert restore_config.get_boolean('runtime', 'flag') is True
    assert restore_config.get_list('runtime', 'items') == ['a', 'b', 'c']
    assert restore_config.get_int('runtime', 'count', 3) == 3
    assert restore_config.has_option('runtime', 'flag')
    assert restore_config.has_section('runtime')


def test_get_path():
    assert get_path('paths', 'output_path') == Path('./output')
    assert config_manager.get_path('paths', 'missing') is None


def test_reload_from_env_file(tmp_path, monkeypatch):
    config_file = tmp_path / 'custom.toml'
    config_file.write_text('[billing]\nper_page = 4\n', encoding='utf-8')
    monkeypatch.setenv('METER_BILLING_CONFIG', str(config_file))
    try:
        config_manager.reload_config()
        assert config_manager.config_path == config_file
        assert config_manager.get_int('billing', 'per_page') == 4
        # 未覆寫的鍵沿用預設值
        assert config_manager.get_int('billing', 'min_row_fields') == 5
    finally:
        monkeypatch.delenv('METER_BILLING_CONFIG')
        config_manager.reload_config()


def test_invalid_toml_falls_back_to_defaults(tmp_path, monkeypatch):
    config_file = tmp_path / 'broken.toml'
    config_file.write_text('[billing\nper_page = ', encoding='utf-8')
    monkeypatch.setenv('METER_BILLING_CONFIG', str(config_file))
    try:
        config_manager.reload_config()
        assert config_manager.config_path is None
        assert config_manager.get_int('billing', 'per_page') == 1
    finally:
        monkeypatch.delenv('METER_BILLING_CONFIG')
        config_manager.reload_config()
