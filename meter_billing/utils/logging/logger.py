"""
日誌處理模組

所有記錄器都掛在 meter_billing 根記錄器之下；根記錄器的 handler
依 [logging] 配置建立（控制台彩色輸出、可選的輪替檔案）。
"""

import sys
import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Dict, Optional

from ..config.config_manager import config_manager


ROOT_LOGGER_NAME = 'meter_billing'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class ColorCodes:
    """終端顏色代碼"""
    GREY = '\033[90m'
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    RED = '\033[91m'
    BOLD_RED = '\033[1;91m'
    CYAN = '\033[96m'
    RESET = '\033[0m'


class ColoredFormatter(logging.Formatter):
    """為級別與記錄器名稱上色；非 TTY 輸出時退化為一般格式"""

    LEVEL_COLORS = {
        logging.DEBUG: ColorCodes.GREY,
        logging.INFO: ColorCodes.GREEN,
        logging.WARNING: ColorCodes.YELLOW,
        logging.ERROR: ColorCodes.RED,
        logging.CRITICAL: ColorCodes.BOLD_RED,
    }

    def __init__(self, fmt: str = None, datefmt: str = DATE_FORMAT, use_color: bool = True,
                 stream=None):
        super().__init__(fmt, datefmt)
        stream = stream if stream is not None else sys.stdout
        self.use_color = use_color and getattr(stream, 'isatty', lambda: False)()

    def format(self, record: logging.LogRecord) -> str:
        if not self.use_color:
            return super().format(record)

        saved = record.levelname, record.name
        color = self.LEVEL_COLORS.get(record.levelno, ColorCodes.RESET)
        record.levelname = f"{color}{record.levelname}{ColorCodes.RESET}"
        record.name = f"{ColorCodes.CYAN}{record.name}{ColorCodes.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname, record.name = saved


@dataclass
class LoggingSettings:
    """[logging] 區段的設定值"""
    level: str = 'INFO'
    detailed: bool = True
    color: bool = True
    log_to_console: bool = True
    log_to_file: bool = False
    log_path: Optional[str] = None
    max_file_size_mb: int = 10
    backup_count: int = 5

    @classmethod
    def from_config(cls) -> 'LoggingSettings':
        return cls(
            level=config_manager.get('logging', 'level', 'INFO'),
            detailed=config_manager.get_boolean('logging', 'detailed', True),
            color=config_manager.get_boolean('logging', 'color', True),
            log_to_console=config_manager.get_boolean('logging', 'log_to_console', True),
            log_to_file=config_manager.get_boolean('logging', 'log_to_file', False),
            log_path=config_manager.get('paths', 'log_path'),
            max_file_size_mb=config_manager.get_int('logging', 'max_file_size_mb', 10),
            backup_count=config_manager.get_int('logging', 'backup_count', 5),
        )

    @property
    def level_value(self) -> int:
        return getattr(logging, str(self.level).upper(), logging.INFO)


class Logger:
    """
    日誌管理器（線程安全單例）

    Example:
        >>> log = Logger().get_logger('pipeline.Load_Table')
        >>> log.name
        'meter_billing.pipeline.Load_Table'
    """

    CONSOLE_DETAILED = '%(asctime)s | %(levelname)-8s | %(name)s | %(funcName)s:%(lineno)d | %(message)s'
    CONSOLE_SIMPLE = '%(asctime)s %(levelname)s: %(message)s'
    FILE_FORMAT = ('%(asctime)s | %(levelname)-8s | %(name)s | '
                   '%(module)s.%(funcName)s:%(lineno)d | %(process)d-%(thread)d | %(message)s')

    _instance = None
    _lock = threading.RLock()

    def __new__(cls):
        with cls._lock:
            if cls._instance is None:
                instance = super().__new__(cls)
                instance._configured = False
                cls._instance = instance
        return cls._instance

    def __init__(self):
        with self._lock:
            if self._configured:
                return
            self._loggers: Dict[str, logging.Logger] = {}
            self.root = logging.getLogger(ROOT_LOGGER_NAME)
            self.root.propagate = False
            self.configure(LoggingSettings.from_config())
            self._configured = True

    def configure(self, settings: LoggingSettings) -> None:
        """依設定重新掛載根記錄器的 handler"""
        with self._lock:
            self._clear_handlers()
            self.root.setLevel(settings.level_value)

            if settings.log_to_console:
                fmt = self.CONSOLE_DETAILED if settings.detailed else self.CONSOLE_SIMPLE
                console = logging.StreamHandler(sys.stdout)
                console.setLevel(settings.level_value)
                console.setFormatter(ColoredFormatter(fmt, use_color=settings.color, stream=sys.stdout))
                self.root.addHandler(console)

            if settings.log_to_file and settings.log_path:
                self._add_file_handler(settings)

    def _add_file_handler(self, settings: LoggingSettings) -> None:
        log_dir = Path(settings.log_path)
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
            handler = RotatingFileHandler(
                log_dir / f"meter_billing_{datetime.now():%Y%m%d_%H%M%S}.log",
                maxBytes=settings.max_file_size_mb * 1024 * 1024,
                backupCount=settings.backup_count,
                encoding='utf-8',
            )
        except OSError as e:
            sys.stderr.write(f"建立日誌檔案失敗 ({log_dir}): {e}\n")
            return
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(logging.Formatter(self.FILE_FORMAT, datefmt=DATE_FORMAT))
        self.root.addHandler(handler)

    def _clear_handlers(self) -> None:
        for handler in list(self.root.handlers):
            self.root.removeHandler(handler)
            handler.close()

    def get_logger(self, name: Optional[str] = None) -> logging.Logger:
        """取得 meter_billing.<name> 記錄器；name 為 None 時回傳根記錄器"""
        if not name or name == 'root':
            return self.root
        with self._lock:
            logger = self._loggers.get(name)
            if logger is None:
                logger = logging.getLogger(f'{ROOT_LOGGER_NAME}.{name}')
                self._loggers[name] = logger
            return logger

    def set_level(self, level: str) -> None:
        """調整根記錄器與控制台輸出的級別（檔案輸出維持 DEBUG）"""
        value = getattr(logging, level.upper(), logging.INFO)
        with self._lock:
            self.root.setLevel(value)
            for handler in self.root.handlers:
                if not isinstance(handler, RotatingFileHandler):
                    handler.setLevel(value)


class StructuredLogger:
    """
    以固定格式記錄操作起訖、步驟結果與處理筆數

    訊息格式為「<圖示> <主體> | key=value ...」。
    """

    STEP_ICONS = {
        'success': '✅',
        'failed': '❌',
        'skipped': '⏭️',
        'pending': '⏳',
        'running': '🔄',
    }

    def __init__(self, logger_name: str = None):
        self.logger = Logger().get_logger(logger_name)

    def _emit(self, level: int, message: str, details: Dict) -> None:
        if details:
            message += " | " + ' '.join(f"{k}={v}" for k, v in details.items())
        self.logger.log(level, message)

    def log_operation_start(self, operation: str, **kwargs) -> None:
        self._emit(logging.INFO, f"▶ 開始執行: {operation}", kwargs)

    def log_operation_end(self, operation: str, success: bool = True, **kwargs) -> None:
        if success:
            self._emit(logging.INFO, f"✓ 成功: {operation}", kwargs)
        else:
            self._emit(logging.ERROR, f"✗ 失敗: {operation}", kwargs)

    def log_data_processing(self, data_type: str, record_count: int,
                            processing_time: float = None, **kwargs) -> None:
        message = f"📊 處理 {data_type}: {record_count:,} 筆"
        if processing_time is not None:
            message += f" | 耗時 {processing_time:.2f}s"
        self._emit(logging.INFO, message, kwargs)

    def log_step_result(self, step_name: str, status: str,
                        duration: float = None, **kwargs) -> None:
        status = status.lower()
        message = f"{self.STEP_ICONS.get(status, '•')} 步驟 [{step_name}]: {status}"
        if duration is not None:
            message += f" ({duration:.2f}s)"
        self._emit(logging.ERROR if status == 'failed' else logging.INFO, message, kwargs)


logger_manager = Logger()


def get_logger(name: str = None) -> logging.Logger:
    """
    獲取日誌記錄器

    Args:
        name: 日誌記錄器名稱，會掛在 meter_billing 根記錄器之下
    """
    return logger_manager.get_logger(name)


def get_structured_logger(name: str = None) -> StructuredLogger:
    """獲取結構化日誌記錄器"""
    return StructuredLogger(name)
