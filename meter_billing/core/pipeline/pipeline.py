"""
Pipeline 主類

依序執行步驟，預設遇到第一個失敗步驟即停止（不重試），
結果以 PipelineRun 回傳，失敗步驟保留原始例外。
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from meter_billing.utils.logging import get_logger
from .base import PipelineStep, StepResult, StepStatus
from .context import ProcessingContext


@dataclass
class PipelineConfig:
    """Pipeline 配置"""
    name: str
    description: str = ""
    task_type: str = "report"
    stop_on_error: bool = True
    log_level: str = "INFO"


@dataclass
class PipelineRun:
    """單次 Pipeline 執行結果"""
    pipeline: str
    started_at: datetime
    finished_at: datetime
    step_results: List[StepResult] = field(default_factory=list)
    total_steps: int = 0

    @property
    def success(self) -> bool:
        return not any(r.is_failed for r in self.step_results)

    @property
    def duration(self) -> float:
        return (self.finished_at - self.started_at).total_seconds()

    @property
    def first_failure(self) -> Optional[StepResult]:
        return next((r for r in self.step_results if r.is_failed), None)

    def count(self, status: StepStatus) -> int:
        return sum(1 for r in self.step_results if r.status == status)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'pipeline': self.pipeline,
            'success': self.success,
            'duration': self.duration,
            'total_steps': self.total_steps,
            'executed_steps': len(self.step_results),
            'successful_steps': self.count(StepStatus.SUCCESS),
            'failed_steps': self.count(StepStatus.FAILED),
            'skipped_steps': self.count(StepStatus.SKIPPED),
            'results': [r.to_dict() for r in self.step_results],
        }


class Pipeline:
    """
    步驟序列

    Example:
        >>> pipeline = Pipeline(PipelineConfig(name='meter_billing'))
        >>> pipeline.add_steps([LoadTableStep(), ResolveHeadersStep()])
        >>> run = pipeline.execute(ProcessingContext())
        >>> run.success
    """

    def __init__(self, config: PipelineConfig):
        self.config = config
        self.steps: List[PipelineStep] = []
        self.logger = get_logger(f"pipeline.{config.name}")
        self.logger.setLevel(getattr(logging, config.log_level.upper(), logging.INFO))

    def add_step(self, step: PipelineStep) -> 'Pipeline':
        self.steps.append(step)
        return self

    def add_steps(self, steps: List[PipelineStep]) -> 'Pipeline':
        self.steps.extend(steps)
        return self

    def get_step(self, step_name: str) -> Optional[PipelineStep]:
        return next((s for s in self.steps if s.name == step_name), None)

    @property
    def step_names(self) -> List[str]:
        return [s.name for s in self.steps]

    def execute(self, context: ProcessingContext) -> PipelineRun:
        run = PipelineRun(
            pipeline=self.config.name,
            started_at=datetime.now(),
            finished_at=datetime.now(),
            total_steps=len(self.steps),
        )
        self.logger.info(f"開始執行 Pipeline {self.config.name}: {len(self.steps)} 個步驟")

        for index, step in enumerate(self.steps, 1):
            self.logger.info(f"執行步驟 {index}/{len(self.steps)}: {step.name}")
            result = step(context)
            run.step_results.append(result)
            context.add_history(step.name, result.status.value)

            if result.is_failed and self.config.stop_on_error:
                self.logger.error(f"步驟 {step.name} 失敗，停止 Pipeline")
                break

        run.finished_at = datetime.now()
        if run.success:
            self.logger.info(f"Pipeline 完成，耗時 {run.duration:.2f} 秒")
        else:
            self.logger.error(f"Pipeline 失敗: {run.count(StepStatus.FAILED)} 個步驟失敗")
        return run

    def __repr__(self) -> str:
        return f"Pipeline(name={self.config.name}, steps={len(self.steps)})"


class PipelineBuilder:
    """
    流式建構 Pipeline

    Example:
        >>> pipeline = (PipelineBuilder('demo')
        ...             .with_stop_on_error(False)
        ...             .add_steps(step_a, step_b)
        ...             .build())
    """

    def __init__(self, name: str, task_type: str = "report"):
        self.config = PipelineConfig(name=name, task_type=task_type)
        self.steps: List[PipelineStep] = []

    def with_description(self, description: str) -> 'PipelineBuilder':
        self.config.description = description
        return self

    def with_stop_on_error(self, stop: bool = True) -> 'PipelineBuilder':
        self.config.stop_on_error = stop
        return self

    def add_step(self, step: PipelineStep) -> 'PipelineBuilder':
        self.steps.append(step)
        return self

    def add_steps(self, *steps: PipelineStep) -> 'PipelineBuilder':
        self.steps.extend(steps)
        return self

    def build(self) -> Pipeline:
        return Pipeline(self.config).add_steps(self.steps)
