"""
Printer integrations for instant-ink.
Contains the HP status endpoint client and URL handling.
"""
from .hp_printer import HPPrinterClient
from .url import normalize_printer_url

__all__ = [
    'HPPrinterClient',
    'normalize_printer_url',
]
