"""
Pipeline 模組
提供數據處理流程管理
"""

from .base import PipelineStep, StepResult, StepStatus
from .context import ProcessingContext, StepRecord
from .pipeline import Pipeline, PipelineBuilder, PipelineConfig, PipelineRun

__all__ = [
    # 基類
    'PipelineStep',
    'StepResult',
    'StepStatus',
    # 上下文
    'ProcessingContext',
    'StepRecord',
    # Pipeline
    'Pipeline',
    'PipelineBuilder',
    'PipelineConfig',
    'PipelineRun',
]
