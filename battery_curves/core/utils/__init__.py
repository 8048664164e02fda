"""
Utilities
=========

Author: Battery Analysis Team
Date: 2026-10-19
"""

from .logger import logger, get_logger

__all__ = ['logger', 'get_logger']
