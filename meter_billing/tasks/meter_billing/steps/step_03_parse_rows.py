"""
Step 3: 解析資料列
將表頭以下的每一列轉為商戶計費記錄並收集為批次
"""

from datetime import datetime
from typing import Optional

from meter_billing.core.pipeline import PipelineStep, StepResult, StepStatus
from meter_billing.core.pipeline.context import ProcessingContext
from meter_billing.utils import get_logger
from ..exceptions import EmptyBatchError
from ..models.billing import BillingBatch
from ..models.options import GenerateOptions
from ..utils.row_parser import RowParser


class ParseRowsStep(PipelineStep):
    """
    資料列解析步驟

    功能:
    1. 依 column_map 解析第 1 列之後的資料
    2. 略過空白列、欄位不足或商戶名稱為空的列
    3. 產生 BillingBatch（變數 batch）與略過列數（變數 skipped_rows）

    沒有任何有效記錄時以 EmptyBatchError 中止。
    """

    def __init__(self,
                 options: Optional[GenerateOptions] = None,
                 now: Optional[datetime] = None,
                 min_row_fields: Optional[int] = None,
                 **kwargs):
        kwargs.setdefault('name', 'Parse_Rows')
        kwargs.setdefault('description', '解析商戶資料列')
        super().__init__(**kwargs)
        self.options = options or GenerateOptions()
        self.now = now
        self.min_row_fields = min_row_fields
        self.logger = get_logger("ParseRowsStep")

    def validate_input(self, context: ProcessingContext) -> bool:
        return context.has_variable('column_map')

    def execute(self, context: ProcessingContext) -> StepResult:
        try:
            column_map = context.require('column_map')
            parser = RowParser(column_map, options=self.options,
                               min_row_fields=self.min_row_fields, now=self.now)

            rows = context.data.iloc[1:].values.tolist()
            records, skipped = parser.parse_rows(rows, first_row_number=2)

            if not records:
                raise EmptyBatchError(context.get_variable('input_path'), skipped)

            batch = BillingBatch.for_now(self.now)
            batch.extend(records)

            context.set_variable('batch', batch)
            context.set_variable('skipped_rows', skipped)
            if skipped:
                context.add_warning(f"略過 {skipped} 列無效資料")
            self.logger.info(f"解析完成: {len(batch)} 筆記錄, 略過 {skipped} 列, "
                             f"總計 {batch.grand_total:.2f} 元")

            return StepResult(
                step_name=self.name,
                status=StepStatus.SUCCESS,
                message=f"解析 {len(batch)} 筆記錄",
                metadata={
                    'record_count': len(batch),
                    'skipped_rows': skipped,
                    'grand_total': batch.grand_total,
                }
            )

        except Exception as e:
            self.logger.error(f"資料列解析失敗: {e}")
            return StepResult(
                step_name=self.name,
                status=StepStatus.FAILED,
                error=e,
                message=str(e)
            )
