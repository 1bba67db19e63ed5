"""
Data models for instant-ink.
"""
from .config import PersistedConfig
from .printer import (
    AttributedCapture,
    ConsumableRecord,
    ConsumableSubunit,
    ImpressionCapture,
    NestedCapture,
    PlainCapture,
    PrinterReading,
    ProductUsageDocument,
    parse_non_negative_int,
)

__all__ = [
    'PersistedConfig',
    'AttributedCapture',
    'ConsumableRecord',
    'ConsumableSubunit',
    'ImpressionCapture',
    'NestedCapture',
    'PlainCapture',
    'PrinterReading',
    'ProductUsageDocument',
    'parse_non_negative_int',
]
