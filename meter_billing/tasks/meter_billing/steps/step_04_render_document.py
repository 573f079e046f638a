"""
Step 4: 產生文件
依模式選擇通知單或 JSON 模板排版器，輸出 .docx 位元組
"""

from datetime import datetime
from typing import Optional

from meter_billing.core.pipeline import PipelineStep, StepResult
from meter_billing.core.pipeline.context import ProcessingContext
from meter_billing.utils import get_logger
from ..models.options import GenerateOptions
from ..models.template_config import TemplateConfig
from ..utils.notice_assembler import NoticeDocumentAssembler
from ..utils.template_assembler import TemplateDocumentAssembler


class RenderDocumentStep(PipelineStep):
    """
    文件產生步驟

    Attributes:
        mode: 'notice'（固定版面通知單）或 'template'（JSON 模板）
        options: 排版選項
        template_config: 模板配置，template 模式必填
    """

    SUPPORTED_MODES = ('notice', 'template')

    def __init__(self,
                 mode: str = 'notice',
                 options: Optional[GenerateOptions] = None,
                 template_config: Optional[TemplateConfig] = None,
                 now: Optional[datetime] = None,
                 **kwargs):
        if mode not in self.SUPPORTED_MODES:
            raise ValueError(f"不支援的模式: {mode}，可用: {', '.join(self.SUPPORTED_MODES)}")
        if mode == 'template' and template_config is None:
            raise ValueError("template 模式必須提供 template_config")
        kwargs.setdefault('name', 'Render_Document')
        kwargs.setdefault('description', '產生 Word 文件')
        super().__init__(**kwargs)
        self.mode = mode
        self.options = options or GenerateOptions()
        self.template_config = template_config
        self.now = now
        self.logger = get_logger("RenderDocumentStep")

    def validate_input(self, context: ProcessingContext) -> bool:
        return context.has_variable('batch')

    def execute(self, context: ProcessingContext) -> StepResult:
        try:
            batch = context.require('batch')

            if self.mode == 'template':
                assembler = TemplateDocumentAssembler(self.template_config, now=self.now)
            else:
                assembler = NoticeDocumentAssembler(self.options, now=self.now)
            document_bytes = assembler.render(batch)

            context.set_variable('document_bytes', document_bytes)

            return StepResult.succeeded(
                self.name,
                f"{self.mode} 文件已產生",
                mode=self.mode,
                record_count=len(batch),
                size_bytes=len(document_bytes),
            )

        except Exception as e:
            self.logger.error(f"文件產生失敗: {e}")
            return StepResult.failed(self.name, e)
