"""
Meter Billing Task 模組
抄表計費：讀取商戶抄表資料，計算水電費並產生 Word 通知單

Pipeline 與步驟請由 pipeline_orchestrator 匯入：
    >>> from meter_billing.tasks.meter_billing.pipeline_orchestrator import run_meter_billing
"""

from .exceptions import (
    MeterBillingError,
    InputStructureError,
    ColumnNotFoundError,
    NoMeterColumnsError,
    SourceFileError,
    SheetNotFoundError,
    UnsupportedFileTypeError,
    EmptyBatchError,
    RenderingError,
    TemplateConfigError,
)
from .models import (
    ElectricityMeterReading,
    MerchantBillingRecord,
    MerchantBillBuilder,
    BillingBatch,
    HeaderColumnMap,
    GenerateOptions,
    TemplateConfig,
    TemplateSection,
)

__all__ = [
    'MeterBillingError',
    'InputStructureError',
    'ColumnNotFoundError',
    'NoMeterColumnsError',
    'SourceFileError',
    'SheetNotFoundError',
    'UnsupportedFileTypeError',
    'EmptyBatchError',
    'RenderingError',
    'TemplateConfigError',
    'ElectricityMeterReading',
    'MerchantBillingRecord',
    'MerchantBillBuilder',
    'BillingBatch',
    'HeaderColumnMap',
    'GenerateOptions',
    'TemplateConfig',
    'TemplateSection',
]
