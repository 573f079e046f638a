"""
Pipeline 步驟基類

步驟只需實作 execute()；計時、輸入驗證、後置動作與例外包裝由 __call__ 統一處理。
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from meter_billing.utils.logging import get_logger
from .context import ProcessingContext


class StepStatus(Enum):
    """步驟執行狀態"""
    PENDING = "pending"
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class StepResult:
    """
    步驟執行結果

    失敗時 error 保留原始例外，呼叫端可原樣重新拋出。
    """
    step_name: str
    status: StepStatus
    message: Optional[str] = None
    error: Optional[BaseException] = None
    duration: float = 0.0
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def succeeded(cls, step_name: str, message: str = None, **metadata) -> 'StepResult':
        return cls(step_name=step_name, status=StepStatus.SUCCESS, message=message, metadata=metadata)

    @classmethod
    def failed(cls, step_name: str, error: BaseException) -> 'StepResult':
        return cls(step_name=step_name, status=StepStatus.FAILED, message=str(error), error=error)

    @property
    def is_success(self) -> bool:
        return self.status == StepStatus.SUCCESS

    @property
    def is_failed(self) -> bool:
        return self.status == StepStatus.FAILED

    def to_dict(self) -> Dict[str, Any]:
        return {
            'step_name': self.step_name,
            'status': self.status.value,
            'message': self.message,
            'duration': round(self.duration, 4),
            'metadata': dict(self.metadata),
            'error': None if self.error is None else f"{type(self.error).__name__}: {self.error}",
        }


class PipelineStep(ABC):
    """
    Pipeline 步驟基類

    Attributes:
        name: 步驟名稱（也是日誌記錄器名稱 pipeline.<name>）
        description: 步驟描述
        required: 輸入驗證失敗時，必要步驟回報 FAILED，非必要步驟回報 SKIPPED
    """

    def __init__(self, name: str, description: str = "", required: bool = True):
        self.name = name
        self.description = description
        self.required = required
        self.logger = get_logger(f"pipeline.{name}")
        self._post_actions: List[Callable[[ProcessingContext], None]] = []

    @abstractmethod
    def execute(self, context: ProcessingContext) -> StepResult:
        """執行步驟邏輯；可直接拋出例外，由 __call__ 轉為 FAILED"""

    def validate_input(self, context: ProcessingContext) -> bool:
        return True

    def add_post_action(self, action: Callable[[ProcessingContext], None]) -> 'PipelineStep':
        """新增成功後執行的動作，可串接"""
        self._post_actions.append(action)
        return self

    def __call__(self, context: ProcessingContext) -> StepResult:
        started = time.perf_counter()
        try:
            if not self.validate_input(context):
                if self.required:
                    raise ValueError(f"步驟 {self.name} 的輸入驗證失敗")
                self.logger.warning(f"輸入驗證失敗，略過步驟 {self.name}")
                result = StepResult(self.name, StepStatus.SKIPPED, message="輸入驗證失敗")
            else:
                result = self.execute(context)
                if result.is_success:
                    for action in self._post_actions:
                        action(context)
        except Exception as e:
            self.logger.error(f"步驟 {self.name} 失敗: {e}")
            result = StepResult.failed(self.name, e)

        result.duration = time.perf_counter() - started
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"
