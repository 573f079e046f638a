"""
Step 2: 解析表頭
以原始表格的第一列建立邏輯欄位 → 欄索引的對應
"""

from typing import Dict, Optional, Sequence

from meter_billing.core.pipeline import PipelineStep, StepResult, StepStatus
from meter_billing.core.pipeline.context import ProcessingContext
from meter_billing.utils import get_logger
from ..exceptions import EmptyBatchError
from ..utils.header_resolver import HeaderResolver


class ResolveHeadersStep(PipelineStep):
    """
    表頭解析步驟

    功能:
    1. 取出原始表格的第一列作為表頭
    2. 以 HeaderResolver 找出必要欄位與所有電表欄位對
    3. 將 HeaderColumnMap 存入 Context（變數 column_map）
    """

    def __init__(self,
                 aliases: Optional[Dict[str, Sequence[str]]] = None,
                 meter_prefix: Optional[str] = None,
                 **kwargs):
        kwargs.setdefault('name', 'Resolve_Headers')
        kwargs.setdefault('description', '解析表頭欄位')
        super().__init__(**kwargs)
        self.aliases = aliases
        self.meter_prefix = meter_prefix
        self.logger = get_logger("ResolveHeadersStep")

    def execute(self, context: ProcessingContext) -> StepResult:
        try:
            df = context.data
            if df is None or df.empty:
                raise EmptyBatchError(context.get_variable('input_path'))

            headers = df.iloc[0].tolist()
            resolver = HeaderResolver(aliases=self.aliases, meter_prefix=self.meter_prefix)
            column_map = resolver.resolve(headers)

            context.set_variable('column_map', column_map)
            self.logger.info(f"表頭解析完成: {len(column_map.fields)} 個欄位, "
                             f"{column_map.meter_count} 組電表")

            return StepResult(
                step_name=self.name,
                status=StepStatus.SUCCESS,
                message=f"找到 {column_map.meter_count} 組電表欄位",
                metadata={
                    'header_count': len(headers),
                    'meter_count': column_map.meter_count,
                }
            )

        except Exception as e:
            self.logger.error(f"表頭解析失敗: {e}")
            return StepResult(
                step_name=self.name,
                status=StepStatus.FAILED,
                error=e,
                message=str(e)
            )
