"""
Step 1: 載入原始表格
依副檔名選擇數據源，讀取 .xlsx / .csv 為原始 DataFrame（第 0 列為表頭）
"""

from typing import Any, Dict, Optional

from meter_billing.core.pipeline import PipelineStep, StepResult, StepStatus
from meter_billing.core.pipeline.context import ProcessingContext
from meter_billing.core.datasources import DataSourceFactory
from meter_billing.utils import get_logger


class LoadTableStep(PipelineStep):
    """
    載入表格步驟

    功能:
    1. 從 Context 取得輸入檔案路徑（變數 input_path）
    2. 由 DataSourceFactory 依副檔名建立數據源
    3. 讀取原始表格並更新為 Context 主數據
    """

    def __init__(self, read_options: Optional[Dict[str, Any]] = None, **kwargs):
        kwargs.setdefault('name', 'Load_Table')
        kwargs.setdefault('description', '讀取輸入表格')
        super().__init__(**kwargs)
        self.read_options = read_options or {}
        self.logger = get_logger("LoadTableStep")

    def validate_input(self, context: ProcessingContext) -> bool:
        return bool(context.get_variable('input_path'))

    def execute(self, context: ProcessingContext) -> StepResult:
        """
        執行表格載入

        Args:
            context: 處理上下文

        Returns:
            StepResult: 執行結果
        """
        try:
            file_path = context.get_variable('input_path')
            self.logger.info(f"開始讀取: {file_path}")

            with DataSourceFactory.create_from_file(file_path, **self.read_options) as source:
                df = source.read()
                metadata = source.get_metadata()

            context.update_data(df)
            self.logger.info(f"讀取完成: {len(df)} 列 x {len(df.columns)} 欄")

            return StepResult(
                step_name=self.name,
                status=StepStatus.SUCCESS,
                message=f"已讀取 {len(df)} 列",
                metadata={
                    'file_path': str(file_path),
                    'rows': len(df),
                    'columns': len(df.columns),
                    'source_type': metadata.get('source_type'),
                }
            )

        except Exception as e:
            self.logger.error(f"讀取表格失敗: {e}")
            return StepResult(
                step_name=self.name,
                status=StepStatus.FAILED,
                error=e,
                message=str(e)
            )
