"""
instant-ink - query HP printers for page usage and ink levels.
"""

__version__ = "0.1.0"
