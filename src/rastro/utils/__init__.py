"""Utility modules for rastro.

Provides:
- logger: get_logger for namespaced library logging
"""

from rastro.utils.logger import get_logger

__all__ = [
    "get_logger",
]
