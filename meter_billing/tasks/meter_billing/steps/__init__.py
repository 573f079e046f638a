"""
處理步驟模組
"""

from .step_01_load_table import LoadTableStep
from .step_02_resolve_headers import ResolveHeadersStep
from .step_03_parse_rows import ParseRowsStep
from .step_04_render_document import RenderDocumentStep

__all__ = [
    'LoadTableStep',
    'ResolveHeadersStep',
    'ParseRowsStep',
    'RenderDocumentStep',
]
