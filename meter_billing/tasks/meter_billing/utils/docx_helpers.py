"""
python-docx 排版輔助函數
"""

from dataclasses import dataclass
from io import BytesIO
from typing import Optional

from docx import Document
from docx.document import Document as DocumentObject
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.oxml.ns import qn
from docx.shared import Pt, RGBColor
from docx.table import _Cell
from docx.text.paragraph import Paragraph
from docx.text.run import Run

from meter_billing.utils.config import config_manager

ALIGNMENTS = {
    'left': WD_ALIGN_PARAGRAPH.LEFT,
    'center': WD_ALIGN_PARAGRAPH.CENTER,
    'right': WD_ALIGN_PARAGRAPH.RIGHT,
}


@dataclass(frozen=True)
class DocumentStyle:
    """字型設定（單位：pt）"""
    font_name: str = '宋体'
    title_font_size: float = 16
    body_font_size: float = 11
    table_font_size: float = 11
    notice_font_size: float = 9
    summary_title_font_size: float = 18

    @classmethod
    def from_config(cls) -> 'DocumentStyle':
        """由 [document] 配置段落建立"""
        defaults = cls()
        return cls(
            font_name=config_manager.get('document', 'font_name', defaults.font_name),
            title_font_size=config_manager.get_float('document', 'title_font_size', defaults.title_font_size),
            body_font_size=config_manager.get_float('document', 'body_font_size', defaults.body_font_size),
            table_font_size=config_manager.get_float('document', 'table_font_size', defaults.table_font_size),
            notice_font_size=config_manager.get_float('document', 'notice_font_size', defaults.notice_font_size),
            summary_title_font_size=config_manager.get_float(
                'document', 'summary_title_font_size', defaults.summary_title_font_size),
        )


def resolve_alignment(alignment: Optional[str], default: Optional[str] = None):
    """對齊字串轉為 WD_ALIGN_PARAGRAPH，未知值視為靠左"""
    key = (alignment or default or '').lower()
    if not key:
        return None
    return ALIGNMENTS.get(key, WD_ALIGN_PARAGRAPH.LEFT)


def set_run_font(run: Run, font_name: Optional[str] = None, size: Optional[float] = None,
                 bold: bool = False, color: Optional[str] = None) -> Run:
    """設定 run 的字型，中文字型需另外寫入 eastAsia 屬性"""
    if font_name:
        run.font.name = font_name
        run._element.get_or_add_rPr().get_or_add_rFonts().set(qn('w:eastAsia'), font_name)
    if size:
        run.font.size = Pt(size)
    if bold:
        run.bold = True
    if color:
        run.font.color.rgb = RGBColor.from_string(color.lstrip('#').upper())
    return run


def new_document(style: DocumentStyle) -> DocumentObject:
    """建立文件並設定預設字型"""
    document = Document()
    normal = document.styles['Normal']
    normal.font.name = style.font_name
    normal.font.size = Pt(style.body_font_size)
    normal.element.get_or_add_rPr().get_or_add_rFonts().set(qn('w:eastAsia'), style.font_name)
    return document


def add_text_paragraph(document, text: str = '', size: Optional[float] = None,
                       bold: bool = False, color: Optional[str] = None,
                       alignment: Optional[str] = None,
                       font_name: Optional[str] = None) -> Paragraph:
    """
    新增段落；文字中的 \\t 與 \\n 會轉為定位點與換行

    Args:
        document: Document 或 _Cell
        text: 文字
        size: 字級（pt）
        bold: 粗體
        color: 顏色 RRGGBB
        alignment: left / center / right
        font_name: 字型
    """
    paragraph = document.add_paragraph()
    if text:
        set_run_font(paragraph.add_run(text), font_name, size, bold, color)
    align = resolve_alignment(alignment)
    if align is not None:
        paragraph.alignment = align
    return paragraph


def add_page_break(document) -> None:
    document.add_page_break()


def set_cell_text(cell: _Cell, text: str, size: Optional[float] = None, bold: bool = False,
                  alignment: Optional[str] = 'center', font_name: Optional[str] = None) -> None:
    """寫入儲存格文字（取代原有內容）"""
    paragraph = cell.paragraphs[0]
    for run in list(paragraph.runs):
        run._element.getparent().remove(run._element)
    if text:
        set_run_font(paragraph.add_run(text), font_name, size, bold)
    align = resolve_alignment(alignment)
    if align is not None:
        paragraph.alignment = align


def document_to_bytes(document) -> bytes:
    buffer = BytesIO()
    document.save(buffer)
    return buffer.getvalue()
