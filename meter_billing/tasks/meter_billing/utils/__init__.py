"""
抄表計費工具模組

排版器（notice_assembler / template_assembler）請直接由各自模組匯入。
"""

from .currency_formatter import to_chinese_uppercase, to_cents
from .placeholders import (
    PLACEHOLDERS,
    KNOWN_PLACEHOLDERS,
    PlaceholderContext,
    render_placeholders,
    find_placeholders,
    find_unknown_placeholders,
)

__all__ = [
    'to_chinese_uppercase',
    'to_cents',
    'PLACEHOLDERS',
    'KNOWN_PLACEHOLDERS',
    'PlaceholderContext',
    'render_placeholders',
    'find_placeholders',
    'find_unknown_placeholders',
]
