"""
JSON 模板排版

依 TemplateConfig 的區塊定義逐一輸出每個商戶的帳單，可選擇附加匯總頁。
"""

import logging
import re
from datetime import datetime
from typing import Optional

from meter_billing.utils.logging import get_logger
from ..exceptions import EmptyBatchError, RenderingError
from ..models.billing import BillingBatch, MerchantBillingRecord
from ..models.template_config import TemplateConfig, TemplateSection
from .docx_helpers import (
    DocumentStyle,
    new_document,
    add_text_paragraph,
    add_page_break,
    document_to_bytes,
)
from .placeholders import PlaceholderContext, render_placeholders
from .table_layout import CellSpec, TableLayout, render_table_layout

TEMPLATE_SUMMARY_HEADERS = ('序号', '商家名称', '水费(元)', '电费(元)', '合计(元)')

_COLOR_PATTERN = re.compile(r'^#?[0-9A-Fa-f]{6}$')


def build_template_summary_layout(batch: BillingBatch) -> TableLayout:
    """模板匯總表：序號、商家名稱、水費、電費、合計，最後一列為粗體合計"""
    layout = TableLayout(columns=len(TEMPLATE_SUMMARY_HEADERS))
    layout.add_row(*(CellSpec(h, True) for h in TEMPLATE_SUMMARY_HEADERS))
    for index, record in enumerate(batch.records, start=1):
        layout.add_row(
            CellSpec(str(index)),
            CellSpec(record.merchant_name),
            CellSpec(f"{record.water_amount:.2f}"),
            CellSpec(f"{record.electricity_amount:.2f}"),
            CellSpec(f"{record.total_fee:.2f}"),
        )
    layout.add_row(
        CellSpec('合计', True),
        CellSpec('', True),
        CellSpec(f"{batch.total_water_amount:.2f}", True),
        CellSpec(f"{batch.total_electric_amount:.2f}", True),
        CellSpec(f"{batch.grand_total:.2f}", True),
    )
    return layout


class TemplateDocumentAssembler:
    """
    模板文件排版器

    模板必須由呼叫端顯式傳入（TemplateConfig.load_from_file / load_default）。

    Example:
        >>> assembler = TemplateDocumentAssembler(TemplateConfig.load_default())
        >>> data = assembler.render(batch)
    """

    def __init__(self, config: TemplateConfig,
                 now: Optional[datetime] = None,
                 style: Optional[DocumentStyle] = None,
                 logger: logging.Logger = None):
        """
        Args:
            config: 模板配置
            now: {datetime} 與時間戳使用的時間，預設為呼叫當下
            style: 字型設定（僅使用字型名稱，字級由模板決定）
            logger: 外部日誌器
        """
        if config is None:
            raise ValueError("config 不可為 None，請使用 TemplateConfig.load_default() 取得預設模板")
        self.config = config
        self.now = now
        self.style = style or DocumentStyle.from_config()
        self.logger = logger or get_logger('tasks.meter_billing.template_assembler')

    def _context(self, batch: BillingBatch) -> PlaceholderContext:
        return PlaceholderContext(year=batch.year, month=batch.month, now=self.now or datetime.now())

    def render(self, batch: BillingBatch) -> bytes:
        """
        產生完整文件：文件標題、每個商戶的帳單（商戶間分頁）、可選的匯總頁

        Raises:
            EmptyBatchError: 批次沒有任何記錄
            RenderingError: 排版失敗
        """
        records = batch.records
        if not records:
            raise EmptyBatchError()

        context = self._context(batch)
        try:
            document = new_document(self.style)
            add_text_paragraph(document, self.config.document_title,
                               size=self.config.title_font_size, alignment='center',
                               font_name=self.style.font_name)

            for index, record in enumerate(records):
                self._render_merchant(document, record, context)
                if index < len(records) - 1:
                    add_page_break(document)

            if self.config.summary_sections is not None:
                add_page_break(document)
                self._render_summary(document, batch, context)

            data = document_to_bytes(document)
        except ValueError as e:
            raise RenderingError(f"模板排版失敗: {e}") from e

        self.logger.info(f"模板排版完成: {len(records)} 個商戶, {len(data):,} bytes")
        return data

    def render_single_bill(self, record: MerchantBillingRecord,
                           batch: Optional[BillingBatch] = None) -> bytes:
        """
        產生單一商戶的帳單文件（結尾附分頁符）

        Args:
            record: 商戶記錄
            batch: 提供年、月資訊的批次，預設為當下
        """
        context = self._context(batch or BillingBatch.for_now(self.now))
        try:
            document = new_document(self.style)
            self._render_merchant(document, record, context)
            add_page_break(document)
            return document_to_bytes(document)
        except ValueError as e:
            raise RenderingError(f"模板排版失敗: {e}") from e

    def _render_merchant(self, document, record: MerchantBillingRecord,
                         context: PlaceholderContext) -> None:
        for section in self.config.merchant_sections:
            self._render_section(document, section, record, context)

    def _render_summary(self, document, batch: BillingBatch, context: PlaceholderContext) -> None:
        first = batch.records[0]
        for section in self.config.summary_sections:
            if section.type == 'table':
                render_table_layout(document, build_template_summary_layout(batch),
                                    font_size=self.config.section_font_size,
                                    font_name=self.style.font_name)
            elif section.type == 'title':
                self._render_title(document, section, None, context)
            else:
                self._render_section(document, section, first, context)

    def _render_section(self, document, section: TemplateSection,
                        record: Optional[MerchantBillingRecord],
                        context: PlaceholderContext) -> None:
        config = self.config
        font_name = self.style.font_name

        if section.type == 'title':
            self._render_title(document, section, record, context)

        elif section.type == 'text':
            if section.content is None:
                return
            add_text_paragraph(
                document,
                render_placeholders(section.content, record, context),
                size=section.font_size or config.section_font_size,
                bold=section.bold,
                color=self._color(section),
                alignment=section.alignment,
                font_name=font_name,
            )

        elif section.type == 'section':
            if section.title:
                add_text_paragraph(document, render_placeholders(section.title, record, context),
                                   size=config.section_font_size + 4,
                                   bold=True, font_name=font_name)
            for item in section.items:
                add_text_paragraph(document, render_placeholders(item, record, context),
                                   size=config.section_font_size, font_name=font_name)

        elif section.type == 'timestamp':
            if section.content is None:
                return
            add_text_paragraph(
                document,
                render_placeholders(section.content, None, context),
                size=config.timestamp_font_size,
                alignment=section.alignment or 'right',
                font_name=font_name,
            )

        else:
            self.logger.debug(f"略過區塊 '{section.name}'：不支援的類型 {section.type}")

    def _render_title(self, document, section: TemplateSection,
                      record: Optional[MerchantBillingRecord],
                      context: PlaceholderContext) -> None:
        if section.content is None:
            return
        add_text_paragraph(
            document,
            render_placeholders(section.content, record, context),
            size=self.config.title_font_size,
            alignment=self.config.title_alignment,
            font_name=self.style.font_name,
        )

    def _color(self, section: TemplateSection) -> Optional[str]:
        if section.color and not _COLOR_PATTERN.match(section.color):
            self.logger.warning(f"區塊 '{section.name}' 的顏色 '{section.color}' 無效，已忽略")
            return None
        return section.color
