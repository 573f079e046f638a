"""
檔案操作相關工具函數
"""

import os
import re
from datetime import date
from pathlib import Path
from typing import Optional

_UNSAFE_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')
_DATE_TOKENS = ('年', '月', '日')


def get_file_extension(file_path) -> str:
    """小寫副檔名（包含點號），無法解析時回傳空字串"""
    try:
        return Path(file_path).suffix.lower()
    except TypeError:
        return ''


def ensure_directory_exists(directory_path) -> bool:
    """
    確保目錄存在，如不存在則創建

    Returns:
        bool: 操作是否成功
    """
    try:
        Path(directory_path).mkdir(parents=True, exist_ok=True)
    except OSError:
        return False
    return True


def get_safe_filename(filename: str, max_length: int = 255) -> str:
    """替換路徑分隔符、保留字元與控制字元，並限制長度（保留副檔名）"""
    safe = _UNSAFE_CHARS.sub('_', filename).strip(' .')
    if len(safe) > max_length:
        stem, ext = os.path.splitext(safe)
        safe = stem[:max_length - len(ext)] + ext
    return safe


def build_output_filename(custom_title: Optional[str] = None,
                          today: Optional[date] = None,
                          extension: str = '.docx') -> str:
    """
    產生輸出文件名稱

    有自訂標題時移除「年」「月」「日」、空白改為底線並清除不安全字元；
    否則為 report_{MM}{YYYY}.docx

    Example:
        >>> build_output_filename('2024年3月 水电费')
        '20243_水电费.docx'
        >>> build_output_filename(today=date(2024, 3, 5))
        'report_032024.docx'
    """
    stem = (custom_title or '').strip()
    for token in _DATE_TOKENS:
        stem = stem.replace(token, '')
    stem = get_safe_filename(re.sub(r'\s+', '_', stem))
    if stem:
        return f"{stem}{extension}"

    today = today or date.today()
    return f"report_{today.month:02d}{today.year}{extension}"
