"""
Meter Billing - 商戶抄表計費通知單產生工具

讀取商戶水電抄表資料（.xlsx / .csv），計算費用並產生 Word 通知單。

主要模組：
- core.datasources: 統一的資料源抽象層
- core.pipeline: 資料處理流程管理
- tasks.meter_billing: 計費模型、排版與任務流程
- utils: 日誌、配置等工具函數
"""

__version__ = "1.0.0"
__author__ = "SEA Team"

from .utils import get_logger, get_structured_logger, config_manager

__all__ = [
    # 版本
    '__version__',
    # 工具
    'get_logger',
    'get_structured_logger',
    'config_manager',
]
