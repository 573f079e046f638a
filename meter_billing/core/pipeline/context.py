"""
處理上下文

在步驟之間傳遞原始表格（data）、共享變數、警告／錯誤訊息與執行紀錄。
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

import pandas as pd

from meter_billing.utils.logging import get_logger


@dataclass(frozen=True)
class StepRecord:
    """單一步驟的執行紀錄"""
    step: str
    status: str
    timestamp: datetime = field(default_factory=datetime.now)


class ProcessingContext:
    """
    處理上下文

    Example:
        >>> context = ProcessingContext(task_name='meter_billing')
        >>> context.set_variable('input_path', 'meters.xlsx')
        >>> context.require('input_path')
        'meters.xlsx'
    """

    def __init__(self,
                 data: Optional[pd.DataFrame] = None,
                 task_name: str = "default_task",
                 task_type: str = "report"):
        self.data = data if data is not None else pd.DataFrame()
        self.task_name = task_name
        self.task_type = task_type
        self.created_at = datetime.now()
        self.updated_at = self.created_at

        self._variables: Dict[str, Any] = {}
        self._history: List[StepRecord] = []
        self.errors: List[str] = []
        self.warnings: List[str] = []

        self.logger = get_logger(f"context.{task_name}")

    def update_data(self, data: pd.DataFrame) -> None:
        self.data = data
        self.updated_at = datetime.now()

    # --- 共享變數 ---

    def set_variable(self, key: str, value: Any) -> None:
        self._variables[key] = value

    def get_variable(self, key: str, default: Any = None) -> Any:
        return self._variables.get(key, default)

    def has_variable(self, key: str) -> bool:
        return key in self._variables

    def require(self, key: str) -> Any:
        """
        取得必要變數

        Raises:
            KeyError: 變數尚未由前面的步驟設定
        """
        if key not in self._variables:
            raise KeyError(f"上下文缺少變數 '{key}'，可用: {sorted(self._variables)}")
        return self._variables[key]

    # --- 訊息 ---

    def add_error(self, error: str) -> None:
        self.errors.append(error)
        self.logger.error(error)

    def add_warning(self, warning: str) -> None:
        self.warnings.append(warning)
        self.logger.warning(warning)

    def has_errors(self) -> bool:
        return bool(self.errors)

    def has_warnings(self) -> bool:
        return bool(self.warnings)

    # --- 執行紀錄 ---

    def add_history(self, step_name: str, status: str) -> None:
        self._history.append(StepRecord(step_name, status))

    def get_history(self) -> List[StepRecord]:
        return list(self._history)

    def get_last_step(self) -> Optional[StepRecord]:
        return self._history[-1] if self._history else None

    def to_dict(self) -> Dict[str, Any]:
        """摘要（不含變數值）"""
        return {
            'task_name': self.task_name,
            'task_type': self.task_type,
            'data_shape': self.data.shape,
            'variables': sorted(self._variables),
            'errors': len(self.errors),
            'warnings': len(self.warnings),
            'history_steps': len(self._history),
        }

    def __repr__(self) -> str:
        return f"ProcessingContext(task={self.task_name}, type={self.task_type}, rows={len(self.data)})"
