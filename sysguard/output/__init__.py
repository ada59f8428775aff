"""
SysGuard - Output Formatters

This package provides output formatting capabilities for scan results.
"""

from .json_formatter import JSONFormatter, DateTimeEncoder
from .text_formatter import TextFormatter
from .progress import ScanProgress

__all__ = [
    "JSONFormatter",
    "DateTimeEncoder",
    "TextFormatter",
    "ScanProgress",
]
