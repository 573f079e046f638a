"""
幫助函數模組
"""

from .file_utils import (
    get_file_extension,
    ensure_directory_exists,
    get_safe_filename,
    build_output_filename,
)


__all__ = [
    'get_file_extension',
    'ensure_directory_exists',
    'get_safe_filename',
    'build_output_filename',
]
