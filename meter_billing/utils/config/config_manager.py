"""
配置管理器
讀取 config/config.toml，未提供的段落與鍵沿用內建預設值
"""

import os
import sys
import copy
import logging
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional

try:
    import tomllib  # Python 3.11+
except ImportError:
    import tomli as tomllib  # Python 3.10 及以下需要安裝 tomli


CONFIG_ENV_VAR = 'METER_BILLING_CONFIG'
CONFIG_RELATIVE_PATH = Path('config') / 'config.toml'

DEFAULT_CONFIG: Dict[str, Dict[str, Any]] = {
    'general': {
        'project_name': 'meter_billing',
        'version': '1.0.0',
    },
    'logging': {
        'level': 'INFO',
        'detailed': True,
        'color': True,
        'max_file_size_mb': 10,
        'backup_count': 5,
        'log_to_file': False,
        'log_to_console': True,
    },
    'paths': {
        'log_path': './logs',
        'output_path': './output',
    },
    'datasource': {
        'default_encoding': 'utf-8-sig',
        'excel_engine': 'openpyxl',
        'csv_separator': ',',
    },
    'billing': {
        'per_page': 1,
        'min_row_fields': 5,
    },
    'headers': {
        'meter_prefix': '电表',
    },
    'document': {
        'font_name': '宋体',
        'title_font_size': 16,
        'body_font_size': 11,
        'table_font_size': 11,
        'notice_font_size': 9,
        'summary_title_font_size': 18,
    },
}

_TRUE_VALUES = ('true', '1', 'yes', 'on')


def get_project_root() -> Path:
    """
    獲取專案根目錄：由本檔案向上尋找第一個含 config/config.toml 的目錄，
    找不到時使用當前工作目錄
    """
    for parent in Path(__file__).resolve().parents:
        if (parent / CONFIG_RELATIVE_PATH).is_file():
            return parent
    return Path.cwd()


def _bootstrap_logger() -> logging.Logger:
    """配置載入早於日誌模組，使用獨立的簡易記錄器"""
    logger = logging.getLogger('config_manager')
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter('[%(asctime)s] %(levelname)s %(name)s: %(message)s',
                                               datefmt='%Y-%m-%d %H:%M:%S'))
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
        logger.propagate = False
    return logger


class ConfigManager:
    """
    配置管理器（線程安全單例）

    Example:
        >>> config_manager.get('billing', 'per_page')
        1
        >>> config_manager.get('billing.per_page')
        1
    """

    _instance = None
    _lock = threading.RLock()

    def __new__(cls):
        with cls._lock:
            if cls._instance is None:
                instance = super().__new__(cls)
                instance._ready = False
                cls._instance = instance
        return cls._instance

    def __init__(self):
        with self._lock:
            if self._ready:
                return
            self._logger = _bootstrap_logger()
            self._config_data: Dict[str, Any] = {}
            self._config_path: Optional[Path] = None
            self._load_config()
            self._ready = True

    # --- 載入 ---

    @staticmethod
    def candidate_paths() -> List[Path]:
        """搜尋順序：環境變數 → 專案根目錄 → 當前工作目錄"""
        paths = []
        env_path = os.environ.get(CONFIG_ENV_VAR)
        if env_path:
            paths.append(Path(env_path))
        paths.append(get_project_root() / CONFIG_RELATIVE_PATH)
        paths.append(Path.cwd() / CONFIG_RELATIVE_PATH)
        return paths

    def _load_config(self) -> None:
        self._config_data = copy.deepcopy(DEFAULT_CONFIG)
        self._config_path = None

        candidates = self.candidate_paths()
        config_path = next((p for p in candidates if p.is_file()), None)
        if config_path is None:
            self._logger.warning(f"找不到配置檔案，使用預設配置。嘗試路徑: {[str(p) for p in candidates]}")
            return

        try:
            with open(config_path, 'rb') as f:
                loaded = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            self._logger.error(f"載入配置檔案 {config_path} 失敗，使用預設配置: {e}")
            return

        self._merge(loaded)
        self._config_path = config_path
        self._logger.info(f"成功載入配置檔案: {config_path}")

    def _merge(self, loaded: Dict[str, Any]) -> None:
        for section, values in loaded.items():
            current = self._config_data.get(section)
            if isinstance(values, dict) and isinstance(current, dict):
                current.update(values)
            else:
                self._config_data[section] = values

    def reload_config(self) -> None:
        """重新載入配置檔案（丟棄 set_config 的運行時設定）"""
        with self._lock:
            self._load_config()

    @property
    def config_path(self) -> Optional[Path]:
        """實際載入的配置檔案路徑（使用預設配置時為 None）"""
        return self._config_path

    # --- 讀取 ---

    def get(self, section: str, key: str = None, fallback: Any = None) -> Any:
        """
        獲取配置值

        支援 get('section', 'key') 與點號路徑 get('section.key')；
        key 為 None 且無點號時回傳整個段落。
        """
        if key is None and '.' in section:
            return self.get_nested(*section.split('.'), fallback=fallback)
        if key is None:
            return self._config_data.get(section, fallback)
        section_data = self._config_data.get(section)
        if not isinstance(section_data, dict):
            return fallback
        return section_data.get(key, fallback)

    def get_nested(self, *keys: str, fallback: Any = None) -> Any:
        """
        獲取多層配置值

        Example:
            config_manager.get_nested('headers', 'aliases', 'merchant_name')
        """
        value: Any = self._config_data
        for key in keys:
            if not isinstance(value, dict) or key not in value:
                return fallback
            value = value[key]
        return value

    def _typed(self, section: str, key: Optional[str], cast, fallback):
        value = self.get(section, key)
        if value is None:
            return fallback
        try:
            return cast(value)
        except (TypeError, ValueError):
            return fallback

    def get_int(self, section: str, key: str = None, fallback: int = 0) -> int:
        return self._typed(section, key, int, fallback)

    def get_float(self, section: str, key: str = None, fallback: float = 0.0) -> float:
        return self._typed(section, key, float, fallback)

    def get_boolean(self, section: str, key: str = None, fallback: bool = False) -> bool:
        value = self.get(section, key)
        if value is None:
            return fallback
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in _TRUE_VALUES

    def get_list(self, section: str, key: str = None, fallback: List = None) -> List:
        """列表值；字串以逗號分隔"""
        value = self.get(section, key)
        if isinstance(value, list):
            return value
        if isinstance(value, str):
            return [item.strip() for item in value.split(',') if item.strip()]
        return [] if fallback is None else fallback

    def get_path(self, section: str, key: str = None, fallback: str = None) -> Optional[Path]:
        """路徑配置值，空值回傳 None"""
        value = self.get(section, key, fallback)
        return Path(value) if value else None

    def get_section(self, section: str) -> Dict[str, Any]:
        return self._config_data.get(section, {})

    def has_section(self, section: str) -> bool:
        return section in self._config_data

    def has_option(self, section: str, key: str) -> bool:
        return key in self._config_data.get(section, {})

    # --- 寫入 ---

    def set_config(self, section: str, key: str, value: Any) -> None:
        """設定運行時配置值"""
        with self._lock:
            self._config_data.setdefault(section, {})[key] = value

    def to_dict(self) -> Dict[str, Any]:
        return copy.deepcopy(self._config_data)

    def __repr__(self) -> str:
        return f"ConfigManager(path={self._config_path}, sections={list(self._config_data)})"


config_manager = ConfigManager()


def get_config(section: str, key: str = None, fallback: Any = None) -> Any:
    """獲取配置值的便利函數"""
    return config_manager.get(section, key, fallback)


def get_path(section: str, key: str = None, fallback: str = None) -> Optional[Path]:
    """獲取路徑配置值的便利函數"""
    return config_manager.get_path(section, key, fallback)
