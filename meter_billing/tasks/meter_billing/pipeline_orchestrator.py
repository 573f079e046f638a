"""
Meter Billing Pipeline 定義
組裝所有步驟形成完整的處理流程

流程：
1. LoadTableStep - 讀取 .xlsx / .csv
2. ResolveHeadersStep - 解析表頭
3. ParseRowsStep - 解析資料列為 BillingBatch
4. RenderDocumentStep - 產生通知單或模板文件
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from meter_billing.core.pipeline import Pipeline, PipelineConfig, ProcessingContext
from meter_billing.utils import config_manager, get_structured_logger, build_output_filename
from .exceptions import MeterBillingError
from .models.billing import BillingBatch
from .models.options import GenerateOptions
from .models.template_config import TemplateConfig
from .steps import (
    LoadTableStep,
    ResolveHeadersStep,
    ParseRowsStep,
    RenderDocumentStep,
)


@dataclass(frozen=True)
class BillingRunResult:
    """
    單次執行結果

    Attributes:
        document_bytes: 產生的 .docx 內容
        batch: 解析後的商戶批次
        filename: 建議的輸出檔名
        skipped_rows: 被略過的資料列數
    """
    document_bytes: bytes
    batch: BillingBatch
    filename: str
    skipped_rows: int = 0


class MeterBillingTask:
    """
    抄表計費主任務類

    Example:
        >>> task = MeterBillingTask()
        >>> result = task.execute('meters.xlsx', options=GenerateOptions(per_page=2))
        >>> Path(result.filename).write_bytes(result.document_bytes)
        >>>
        >>> # JSON 模板模式
        >>> result = task.execute('meters.csv', mode='template',
        ...                       template_config=TemplateConfig.load_default())
    """

    SUPPORTED_MODES = RenderDocumentStep.SUPPORTED_MODES

    def __init__(self, name: str = 'meter_billing', now: Optional[datetime] = None):
        """
        初始化任務

        Args:
            name: 任務名稱
            now: 年月、抄表日期與時間戳的參考時間，預設為執行當下
        """
        self.name = name
        self.now = now
        self.structured_logger = get_structured_logger(self.__class__.__name__)
        self.logger = self.structured_logger.logger
        self.logger.info(f"MeterBillingTask 已初始化: {self.name}")

    def _get_pipeline_config(self) -> PipelineConfig:
        return PipelineConfig(
            name=self.name,
            description='抄表計費通知單產生',
            task_type='report',
            stop_on_error=True,
            log_level=config_manager.get('logging', 'level', 'INFO'),
        )

    def build_pipeline(self,
                       mode: str = 'notice',
                       options: Optional[GenerateOptions] = None,
                       template_config: Optional[TemplateConfig] = None) -> Pipeline:
        """
        構建處理 Pipeline

        Args:
            mode: 'notice' 或 'template'
            options: 排版選項
            template_config: 模板配置（template 模式必填）

        Raises:
            ValueError: 無效的 mode 或缺少模板
        """
        if mode not in self.SUPPORTED_MODES:
            raise ValueError(f"無效的 mode: {mode}. 可用選項: {', '.join(self.SUPPORTED_MODES)}")

        options = options or GenerateOptions()
        pipeline = Pipeline(self._get_pipeline_config())
        pipeline.add_steps([
            LoadTableStep(),
            ResolveHeadersStep(),
            ParseRowsStep(options=options, now=self.now),
            RenderDocumentStep(mode=mode, options=options,
                               template_config=template_config, now=self.now),
        ])
        self.logger.info(f"Pipeline 構建完成: {pipeline.config.name} ({len(pipeline.steps)} 個步驟)")
        return pipeline

    def prepare_context(self, input_path, **kwargs) -> ProcessingContext:
        """準備處理上下文"""
        context = ProcessingContext(task_name=self.name, task_type='report')
        context.set_variable('input_path', str(input_path))
        for key, value in kwargs.items():
            context.set_variable(key, value)
        return context

    def execute(self,
                input_path,
                mode: str = 'notice',
                options: Optional[GenerateOptions] = None,
                template_config: Optional[TemplateConfig] = None) -> BillingRunResult:
        """
        執行任務

        Args:
            input_path: 輸入的 .xlsx / .csv 檔案
            mode: 'notice' 或 'template'
            options: 排版選項
            template_config: 模板配置（template 模式必填）

        Returns:
            BillingRunResult: 執行結果

        Raises:
            MeterBillingError: 第一個失敗步驟的原始異常
        """
        options = options or GenerateOptions()
        self.structured_logger.log_operation_start(self.name, mode=mode, input=input_path)

        pipeline = self.build_pipeline(mode=mode, options=options, template_config=template_config)
        context = self.prepare_context(input_path)
        run = pipeline.execute(context)
        for step_result in run.step_results:
            self.structured_logger.log_step_result(step_result.step_name, step_result.status.value,
                                                   step_result.duration)

        failed = run.first_failure
        if failed is not None:
            self.structured_logger.log_operation_end(self.name, success=False, failed_step=failed.step_name)
            if failed.error is not None:
                raise failed.error
            raise MeterBillingError(failed.message or f"步驟 {failed.step_name} 失敗")

        for warning in context.warnings:
            self.logger.warning(warning)

        today = (self.now or datetime.now()).date()
        run_result = BillingRunResult(
            document_bytes=context.get_variable('document_bytes'),
            batch=context.get_variable('batch'),
            filename=build_output_filename(options.custom_title, today=today),
            skipped_rows=context.get_variable('skipped_rows', 0),
        )
        self.structured_logger.log_data_processing(
            'merchant', len(run_result.batch), run.duration, skipped=run_result.skipped_rows)
        self.structured_logger.log_operation_end(self.name, success=True, output=run_result.filename)
        return run_result

    def get_pipeline_steps(self, mode: str = 'notice',
                           template_config: Optional[TemplateConfig] = None) -> List[str]:
        """獲取 Pipeline 步驟名稱列表"""
        pipeline = self.build_pipeline(mode=mode, template_config=template_config)
        return pipeline.step_names


# ============================================================================
# 便捷函數
# ============================================================================

def run_meter_billing(input_path,
                      mode: str = 'notice',
                      options: Optional[GenerateOptions] = None,
                      template_config: Optional[TemplateConfig] = None,
                      now: Optional[datetime] = None) -> BillingRunResult:
    """
    便捷函數：執行抄表計費任務

    Example:
        >>> from meter_billing.tasks.meter_billing.pipeline_orchestrator import run_meter_billing
        >>> result = run_meter_billing('meters.xlsx', options=GenerateOptions(custom_title='2024年3月'))
        >>> result.filename
        '20243.docx'
    """
    task = MeterBillingTask(now=now)
    return task.execute(input_path, mode=mode, options=options, template_config=template_config)
