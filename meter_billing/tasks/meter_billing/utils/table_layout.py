"""
表格版面描述

費用明細表的合併儲存格以宣告式的 TableLayout 描述：
先由 build_fee_table_layout() 產生版面，再交給 render_table_layout() 寫入文件。
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from docx.table import Table

from ..models.billing import MerchantBillingRecord
from .currency_formatter import to_chinese_uppercase
from .docx_helpers import set_cell_text

FEE_TABLE_HEADERS = ('项目', '上月表底', '本月抄表数', '实用度数', '公共分摊', '单价（元）', '金额')
UNIT_PRICE_COLUMN = 5
AMOUNT_COLUMN = 6

SUMMARY_TABLE_HEADERS = ('店铺名称', '水电费合计（元）', '水电人工费', '垃圾处理费', '总价')


@dataclass(frozen=True)
class CellSpec:
    """單一儲存格內容"""
    text: str = ''
    bold: bool = False


@dataclass
class TableLayout:
    """
    表格版面

    Attributes:
        rows: 每列的儲存格內容（列數 × 欄數）
        vertical_spans: 欄索引 → [(起始列, 結束列)]，含兩端
        horizontal_spans: [(列, 起始欄, 結束欄)]，含兩端
    """
    columns: int
    rows: List[List[CellSpec]] = field(default_factory=list)
    vertical_spans: Dict[int, List[Tuple[int, int]]] = field(default_factory=dict)
    horizontal_spans: List[Tuple[int, int, int]] = field(default_factory=list)

    def add_row(self, *cells: CellSpec) -> int:
        """新增一列，不足欄數以空白補齊；回傳列索引"""
        row = list(cells) + [CellSpec()] * (self.columns - len(cells))
        self.rows.append(row[:self.columns])
        return len(self.rows) - 1

    def merge_vertical(self, column: int, start_row: int, end_row: int) -> None:
        if end_row > start_row:
            self.vertical_spans.setdefault(column, []).append((start_row, end_row))

    def merge_horizontal(self, row: int, start_col: int, end_col: int) -> None:
        if end_col > start_col:
            self.horizontal_spans.append((row, start_col, end_col))

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def covered_cells(self) -> Set[Tuple[int, int]]:
        """被合併覆蓋（非起始格）的儲存格座標"""
        covered = set()
        for column, spans in self.vertical_spans.items():
            for start, end in spans:
                covered.update((r, column) for r in range(start + 1, end + 1))
        for row, start, end in self.horizontal_spans:
            covered.update((row, c) for c in range(start + 1, end + 1))
        return covered

    def text_at(self, row: int, column: int) -> str:
        return self.rows[row][column].text


def _text_row(*values: str, bold: bool = False) -> List[CellSpec]:
    return [CellSpec(v, bold) for v in values]


def build_fee_table_layout(record: MerchantBillingRecord) -> TableLayout:
    """
    產生單一商戶的費用明細表版面

    多個電表時，單價與金額兩欄在電表列之間縱向合併，只在第一列顯示數值；
    金額為合併計算後的電費總額。
    """
    layout = TableLayout(columns=len(FEE_TABLE_HEADERS))
    layout.add_row(*_text_row(*FEE_TABLE_HEADERS, bold=True))

    unit_price = f"{record.electricity_unit_price:.2f}"
    amount = f"{record.electricity_amount:.0f}"
    meters = record.electricity_meters

    if meters:
        first_meter_row = None
        for position, meter in enumerate(meters, start=1):
            label = '电表' if len(meters) == 1 else f'电表{position}'
            show_values = position == 1
            row_index = layout.add_row(*_text_row(
                label,
                f"{meter.prev_reading:.0f}",
                f"{meter.curr_reading:.0f}",
                f"{meter.usage:.0f}",
                '',
                unit_price if show_values else '',
                amount if show_values else '',
            ))
            if first_meter_row is None:
                first_meter_row = row_index
        last_meter_row = layout.row_count - 1
        layout.merge_vertical(UNIT_PRICE_COLUMN, first_meter_row, last_meter_row)
        layout.merge_vertical(AMOUNT_COLUMN, first_meter_row, last_meter_row)
    else:
        layout.add_row(*_text_row('电表', '0', '0', '0', '', unit_price, '0'))

    layout.add_row(*_text_row(
        '水费',
        f"{record.prev_water_reading:.0f}",
        f"{record.curr_water_reading:.0f}",
        f"{record.water_usage:.0f}",
        '',
        f"{record.water_unit_price:.3f}",
        f"{record.water_amount:.0f}",
    ))
    layout.add_row(*_text_row('水电人工费', '', '', '', '', '', f"{record.labor_fee:.2f}"))
    layout.add_row(*_text_row('垃圾处理费', '', '', '', '', '', f"{record.garbage_fee:.2f}"))
    layout.add_row(*_text_row('滞纳金', '', '', '', '', '', '0.00'))
    layout.add_row(*_text_row('广告费', '', '', '', '', '', '0.00'))

    total_text = f"大写：{to_chinese_uppercase(record.total_fee)}    小写：{record.total_fee:.2f}"
    total_row = layout.add_row(CellSpec('合计', True), CellSpec(total_text, True))
    layout.merge_horizontal(total_row, 1, layout.columns - 1)
    return layout


def build_summary_table_layout(records, totals: Optional[Tuple[float, float, float, float]] = None) -> TableLayout:
    """
    費用匯總表版面：每個商戶一列，最後一列為粗體合計

    Args:
        records: 商戶記錄
        totals: (水電費合計, 人工費合計, 垃圾處理費合計, 總價合計)，未提供時由記錄加總
    """
    records = list(records)
    layout = TableLayout(columns=len(SUMMARY_TABLE_HEADERS))
    layout.add_row(*_text_row(*SUMMARY_TABLE_HEADERS, bold=True))

    for record in records:
        layout.add_row(*_text_row(
            record.merchant_name,
            f"{record.water_electricity_subtotal:.2f}",
            f"{record.labor_fee:.2f}",
            f"{record.garbage_fee:.2f}",
            f"{record.total_fee:.2f}",
        ))

    if totals is None:
        totals = (
            sum(r.water_electricity_subtotal for r in records),
            sum(r.labor_fee for r in records),
            sum(r.garbage_fee for r in records),
            sum(r.total_fee for r in records),
        )
    layout.add_row(*_text_row('合计', *(f"{value:.2f}" for value in totals), bold=True))
    return layout


def render_table_layout(document, layout: TableLayout, font_size: Optional[float] = None,
                        font_name: Optional[str] = None, table_style: str = 'Table Grid',
                        alignment: Optional[str] = 'center') -> Table:
    """
    依版面建立表格：先合併儲存格，再只在起始格寫入文字
    """
    table = document.add_table(rows=layout.row_count, cols=layout.columns)
    if table_style:
        table.style = table_style

    for column, spans in layout.vertical_spans.items():
        for start, end in spans:
            table.cell(start, column).merge(table.cell(end, column))
    for row, start, end in layout.horizontal_spans:
        table.cell(row, start).merge(table.cell(row, end))

    covered = layout.covered_cells()
    for r, row in enumerate(layout.rows):
        for c, spec in enumerate(row):
            if (r, c) in covered:
                continue
            set_cell_text(table.cell(r, c), spec.text, size=font_size, bold=spec.bold,
                          alignment=alignment, font_name=font_name)
    return table
