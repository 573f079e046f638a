"""
抄表計費通知單排版（固定版面）

每個商戶一份通知單：標題、編號資訊列、費用明細表、說明文字；
最後獨立一頁輸出費用匯總表。
"""

import logging
from datetime import datetime
from typing import Optional, Sequence

from meter_billing.utils.logging import get_logger
from ..exceptions import EmptyBatchError, RenderingError
from ..models.billing import BillingBatch, MerchantBillingRecord
from ..models.options import GenerateOptions
from .docx_helpers import (
    DocumentStyle,
    new_document,
    add_text_paragraph,
    add_page_break,
    document_to_bytes,
)
from .table_layout import build_fee_table_layout, build_summary_table_layout, render_table_layout

NOTICE_TEXT = (
    "1、此单可对账不做凭证；\n\n"
    "2、每月5日前为收费时间，超期按5%收滞纳金或停电；\n\n"
    "3、以上费用如有不明或差\n"
    "请到管理处核对。"
)
SEPARATOR = "=" * 40
SUMMARY_TITLE = "费用汇总表"


class NoticeDocumentAssembler:
    """
    通知單文件排版器

    Example:
        >>> assembler = NoticeDocumentAssembler(GenerateOptions(per_page=2))
        >>> data = assembler.render(batch)
    """

    def __init__(self, options: Optional[GenerateOptions] = None,
                 style: Optional[DocumentStyle] = None,
                 now: Optional[datetime] = None,
                 logger: logging.Logger = None):
        """
        Args:
            options: 排版選項
            style: 字型設定，預設讀取 [document] 配置
            now: 預設抄表日期的參考時間，預設為呼叫 render 的當下
            logger: 外部日誌器
        """
        self.options = options or GenerateOptions()
        self.style = style or DocumentStyle.from_config()
        self.now = now
        self.logger = logger or get_logger('tasks.meter_billing.notice_assembler')

    def render(self, batch: BillingBatch) -> bytes:
        """
        產生 .docx 位元組

        Raises:
            EmptyBatchError: 批次沒有任何記錄
            RenderingError: 排版失敗
        """
        records = batch.records
        if not records:
            raise EmptyBatchError()

        now = self.now or datetime.now()
        per_page = self.options.per_page
        title = self.options.title_for(batch.year, batch.month)
        default_date = f"{now.year}年{now.month:02d}月{now.day:02d}日"

        try:
            document = new_document(self.style)
            for index, record in enumerate(records):
                self._add_notice(document, record, title, default_date)

                if index < len(records) - 1:
                    add_text_paragraph(document, SEPARATOR)
                    if per_page != 0 and (index + 1) % per_page == 0:
                        add_page_break(document)

            # 匯總表固定獨立一頁
            add_page_break(document)
            self._add_summary(document, batch)
            data = document_to_bytes(document)
        except ValueError as e:
            raise RenderingError(f"通知單排版失敗: {e}") from e

        self.logger.info(f"通知單排版完成: {len(records)} 個商戶, per_page={per_page}, {len(data):,} bytes")
        return data

    def _add_notice(self, document, record: MerchantBillingRecord, title: str, default_date: str) -> None:
        style = self.style
        add_text_paragraph(document, title, size=style.title_font_size, bold=True,
                           alignment='center', font_name=style.font_name)

        reader = record.meter_reader_name or self.options.meter_reader or ''
        read_date = record.meter_read_date or self.options.meter_date or default_date
        info = (f"编号：\t{record.shop_code}\t姓名\t{record.merchant_name}"
                f"\t抄表人：\t{reader}\t抄表日期：{read_date}")
        add_text_paragraph(document, info, size=style.body_font_size, font_name=style.font_name)
        add_text_paragraph(document)

        render_table_layout(document, build_fee_table_layout(record),
                            font_size=style.table_font_size, font_name=style.font_name)

        add_text_paragraph(document)
        add_text_paragraph(document, NOTICE_TEXT, size=style.notice_font_size, font_name=style.font_name)

    def _add_summary(self, document, batch: BillingBatch) -> None:
        style = self.style
        add_text_paragraph(document, SUMMARY_TITLE, size=style.summary_title_font_size, bold=True,
                           alignment='center', font_name=style.font_name)
        totals = (
            batch.total_water_amount + batch.total_electric_amount,
            batch.total_labor_fee,
            batch.total_garbage_fee,
            batch.grand_total,
        )
        render_table_layout(document, build_summary_table_layout(batch.records, totals),
                            font_size=style.table_font_size, font_name=style.font_name)


def render_notice_document(records: Sequence[MerchantBillingRecord],
                           options: Optional[GenerateOptions] = None,
                           style: Optional[DocumentStyle] = None) -> bytes:
    """以記錄列表直接排版的便利函數"""
    batch = BillingBatch.for_now()
    batch.extend(records)
    return NoticeDocumentAssembler(options, style).render(batch)
