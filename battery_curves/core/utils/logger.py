"""
Logger
======

battery_curves 패키지 공용 로거입니다.

Author: Battery Analysis Team
Date: 2026-10-19
"""

import logging
import sys

logger = logging.getLogger("battery_curves")

if not logger.handlers:
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.WARNING)

    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    console_handler.setFormatter(formatter)

    logger.addHandler(console_handler)
    logger.setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """모듈 로거 반환 (battery_curves 하위 로거)"""
    if name == logger.name or name.startswith(logger.name + '.'):
        return logging.getLogger(name)
    return logger.getChild(name)


__all__ = ["logger", "get_logger"]
