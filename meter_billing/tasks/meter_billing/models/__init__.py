"""
抄表計費資料模型
"""

from .billing import (
    round_currency,
    clamp_usage,
    format_quantity,
    ElectricityMeterReading,
    MerchantBillingRecord,
    MerchantBillBuilder,
    BillingBatch,
)
from .header_map import HeaderColumnMap, REQUIRED_FIELDS
from .options import GenerateOptions
from .template_config import TemplateConfig, TemplateSection

__all__ = [
    'round_currency',
    'clamp_usage',
    'format_quantity',
    'ElectricityMeterReading',
    'MerchantBillingRecord',
    'MerchantBillBuilder',
    'BillingBatch',
    'HeaderColumnMap',
    'REQUIRED_FIELDS',
    'GenerateOptions',
    'TemplateConfig',
    'TemplateSection',
]
