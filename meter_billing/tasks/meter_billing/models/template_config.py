"""
JSON 模板配置模型

模板只能顯式載入（load_from_file / load_default），排版器不會自行讀取任何檔案。
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Tuple

from meter_billing.utils.logging import get_logger
from ..exceptions import TemplateConfigError
from ..utils.placeholders import find_unknown_placeholders

logger = get_logger('tasks.meter_billing.template_config')

DEFAULT_TEMPLATE_PATH = Path(__file__).resolve().parent.parent / 'templates' / 'template_config.json'

SECTION_TYPES = ('title', 'text', 'section', 'timestamp', 'table')
ALIGNMENTS = ('left', 'center', 'right')


@dataclass(frozen=True)
class TemplateSection:
    """模板中的單一區塊"""
    name: str
    type: str
    content: Optional[str] = None
    title: Optional[str] = None
    items: Tuple[str, ...] = ()
    font_size: Optional[int] = None
    bold: bool = False
    color: Optional[str] = None
    alignment: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], path=None) -> 'TemplateSection':
        if not isinstance(data, dict):
            raise TemplateConfigError(path, f"區塊必須是物件: {data!r}")
        if 'type' not in data:
            raise TemplateConfigError(path, f"區塊缺少 type: {data!r}")

        items = data.get('items') or ()
        if not isinstance(items, (list, tuple)):
            raise TemplateConfigError(path, f"區塊 '{data.get('name')}' 的 items 必須是陣列")

        return cls(
            name=str(data.get('name', '')),
            type=str(data['type']),
            content=data.get('content'),
            title=data.get('title'),
            items=tuple(str(item) for item in items),
            font_size=data.get('font_size'),
            bold=bool(data.get('bold', False)),
            color=data.get('color'),
            alignment=data.get('alignment'),
        )

    def texts(self) -> List[str]:
        """區塊內所有會被替換的文字"""
        texts = [t for t in (self.content, self.title) if t]
        texts.extend(self.items)
        return texts


@dataclass(frozen=True)
class TemplateConfig:
    """
    模板配置

    對應 JSON 結構：
        document_title, title_font_size, title_alignment, section_font_size,
        timestamp_font_size, merchant_template.sections,
        summary_template.sections（可選）, output_format, default_output_name,
        individual_bills
    """
    document_title: str
    merchant_sections: Tuple[TemplateSection, ...]
    summary_sections: Optional[Tuple[TemplateSection, ...]] = None
    title_font_size: int = 16
    title_alignment: str = 'center'
    section_font_size: int = 12
    timestamp_font_size: int = 10
    output_format: str = 'docx'
    default_output_name: str = 'merchant_bills'
    individual_bills: bool = False
    source_path: Optional[str] = field(default=None, compare=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], path=None) -> 'TemplateConfig':
        """
        由字典建立配置

        Raises:
            TemplateConfigError: 結構不符
        """
        if not isinstance(data, dict):
            raise TemplateConfigError(path, "模板根節點必須是物件")

        merchant = data.get('merchant_template')
        if not isinstance(merchant, dict) or not isinstance(merchant.get('sections'), list):
            raise TemplateConfigError(path, "缺少 merchant_template.sections")

        summary_sections = None
        summary = data.get('summary_template')
        if summary is not None:
            if not isinstance(summary, dict) or not isinstance(summary.get('sections'), list):
                raise TemplateConfigError(path, "summary_template 必須包含 sections 陣列")
            summary_sections = tuple(TemplateSection.from_dict(s, path) for s in summary['sections'])

        title_alignment = str(data.get('title_alignment', 'center')).lower()
        try:
            config = cls(
                document_title=str(data.get('document_title', '')),
                merchant_sections=tuple(TemplateSection.from_dict(s, path) for s in merchant['sections']),
                summary_sections=summary_sections,
                title_font_size=int(data.get('title_font_size', 16)),
                title_alignment=title_alignment,
                section_font_size=int(data.get('section_font_size', 12)),
                timestamp_font_size=int(data.get('timestamp_font_size', 10)),
                output_format=str(data.get('output_format', 'docx')),
                default_output_name=str(data.get('default_output_name', 'merchant_bills')),
                individual_bills=bool(data.get('individual_bills', False)),
                source_path=str(path) if path is not None else None,
            )
        except (TypeError, ValueError) as e:
            raise TemplateConfigError(path, f"模板數值欄位格式錯誤: {e}") from e

        config._report_unknown()
        return config

    @classmethod
    def load_from_file(cls, path) -> 'TemplateConfig':
        """
        從 JSON 檔案載入模板

        Raises:
            TemplateConfigError: 檔案不存在、JSON 無效或結構不符
        """
        path = Path(path)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except FileNotFoundError as e:
            raise TemplateConfigError(path, f"模板檔案不存在: {path}") from e
        except json.JSONDecodeError as e:
            raise TemplateConfigError(path, f"模板 JSON 格式錯誤: {e}") from e
        except OSError as e:
            raise TemplateConfigError(path, f"無法讀取模板檔案: {e}") from e

        logger.info(f"載入模板: {path}")
        return cls.from_dict(data, path)

    @classmethod
    def load_default(cls) -> 'TemplateConfig':
        """載入內建的預設模板"""
        return cls.load_from_file(DEFAULT_TEMPLATE_PATH)

    def all_sections(self) -> List[TemplateSection]:
        sections = list(self.merchant_sections)
        if self.summary_sections:
            sections.extend(self.summary_sections)
        return sections

    def unknown_placeholders(self) -> Set[str]:
        """模板中出現但不在佔位符集合內的 token"""
        unknown = set(find_unknown_placeholders(self.document_title))
        for section in self.all_sections():
            for text in section.texts():
                unknown |= find_unknown_placeholders(text)
        return unknown

    def unknown_section_types(self) -> Set[str]:
        return {s.type for s in self.all_sections() if s.type not in SECTION_TYPES}

    def _report_unknown(self) -> None:
        unknown = self.unknown_placeholders()
        if unknown:
            logger.warning(f"模板含有未知佔位符，將原樣輸出: {sorted(unknown)}")
        unknown_types = self.unknown_section_types()
        if unknown_types:
            logger.warning(f"模板含有未知區塊類型，將略過: {sorted(unknown_types)}")
