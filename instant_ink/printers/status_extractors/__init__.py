"""
Status extractors for printer status data.

This module provides extractor classes for turning raw status documents
served by printers into telemetry readings.
"""

from .usage_status_extractor import InkLevels, UsageStatusExtractor

__all__ = [
    "InkLevels",
    "UsageStatusExtractor",
]
