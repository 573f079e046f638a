"""
抄表計費自定義異常模組

輸入結構錯誤（缺欄、檔案無法讀取、空批次）屬致命錯誤，會中止整批處理；
儲存格層級的格式問題不會拋出異常，一律在解析時轉為 0.0 或空字串。
"""

from typing import Iterable, Optional, Sequence


def _preview(headers: Iterable[str], limit: int = 20) -> str:
    items = [str(h) for h in headers]
    if len(items) > limit:
        return ', '.join(items[:limit]) + f", ...（共 {len(items)} 欄）"
    return ', '.join(items)


class MeterBillingError(Exception):
    """抄表計費基礎異常類"""
    pass


class InputStructureError(MeterBillingError):
    """輸入表格結構錯誤的基礎類"""
    pass


class ColumnNotFoundError(InputStructureError):
    """
    找不到必要欄位

    Attributes:
        field_name: 邏輯欄位名稱
        candidates: 嘗試過的表頭別名
        available_headers: 實際存在的表頭
    """

    def __init__(self, field_name: str, candidates: Sequence[str],
                 available_headers: Sequence[str]):
        self.field_name = field_name
        self.candidates = list(candidates)
        self.available_headers = list(available_headers)
        super().__init__(
            f"找不到欄位 '{field_name}'（嘗試: {', '.join(self.candidates)}）"
            f"，可用表頭: {_preview(self.available_headers)}"
        )


class NoMeterColumnsError(InputStructureError):
    """
    找不到任何電表讀數欄位

    Attributes:
        prefix: 電表欄位前綴
        available_headers: 實際存在的表頭
    """

    def __init__(self, prefix: str, available_headers: Sequence[str]):
        self.prefix = prefix
        self.available_headers = list(available_headers)
        super().__init__(
            f"找不到任何 '{prefix}N上期读数/{prefix}N本期读数' 欄位"
            f"，可用表頭: {_preview(self.available_headers)}"
        )


class SourceFileError(InputStructureError):
    """
    來源檔案無法讀取

    Attributes:
        file_path: 檔案路徑
        message: 錯誤訊息
    """

    def __init__(self, file_path: str, message: str = None):
        self.file_path = str(file_path)
        self.message = message or f"無法讀取檔案: {file_path}"
        super().__init__(self.message)


class SheetNotFoundError(SourceFileError):
    """工作表不存在"""

    def __init__(self, file_path: str, sheet_name):
        self.sheet_name = sheet_name
        super().__init__(
            file_path,
            f"檔案 '{file_path}' 中找不到工作表 '{sheet_name}'"
        )


class UnsupportedFileTypeError(SourceFileError, ValueError):
    """不支援的檔案類型"""

    def __init__(self, file_path: str, extension: str):
        self.extension = extension
        super().__init__(
            file_path,
            f"不支援的檔案類型: '{extension or '(無副檔名)'}'，僅支援 .xlsx 與 .csv"
        )


class EmptyBatchError(InputStructureError):
    """
    沒有任何可計費的商戶資料

    Attributes:
        file_path: 來源檔案（直接呼叫排版時為 None）
        skipped_rows: 被略過的列數
    """

    def __init__(self, file_path: Optional[str] = None, skipped_rows: int = 0):
        self.file_path = str(file_path) if file_path is not None else None
        self.skipped_rows = skipped_rows
        source = f"'{self.file_path}' " if self.file_path else ""
        super().__init__(
            f"{source}沒有可計費的商戶資料（略過 {skipped_rows} 列）"
        )


class RenderingError(MeterBillingError):
    """文件排版錯誤"""
    pass


class TemplateConfigError(MeterBillingError):
    """
    模板配置錯誤

    Attributes:
        path: 模板檔案路徑
        message: 錯誤訊息
    """

    def __init__(self, path, message: str = None):
        self.path = str(path) if path is not None else None
        self.message = message or f"模板配置無效: {path}"
        super().__init__(self.message)
