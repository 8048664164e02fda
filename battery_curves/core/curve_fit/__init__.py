"""
Curve Fit Module
================

배터리 측정 데이터 커브 피팅 모듈입니다.

주요 기능:
- 공통 피팅 인터페이스 (lsq / fmin / both)
- 방전 곡선 피팅 (3구간 9-파라미터 모델)
- 수명 사이클 곡선 피팅 (Woehler 곡선)

Author: Battery Analysis Team
Date: 2026-10-19
"""

from .exceptions import (
    CurveFitError,
    DimensionMismatch,
    InvalidMode,
    InsufficientCurves,
    KeyNotFound,
    NonConvergence,
)

from .base import (
    FitMode,
    FitOptions,
    FitResult,
    CurveFit,
)

from .discharge_fit import (
    discharge_voltage,
    DischargeParameters,
    DischargeFit,
)

from .cycle_fit import (
    woehler_cycles,
    CycleLifeFit,
)

__all__ = [
    # Exceptions
    'CurveFitError',
    'DimensionMismatch',
    'InvalidMode',
    'InsufficientCurves',
    'KeyNotFound',
    'NonConvergence',

    # Base
    'FitMode',
    'FitOptions',
    'FitResult',
    'CurveFit',

    # Discharge
    'discharge_voltage',
    'DischargeParameters',
    'DischargeFit',

    # Cycle life
    'woehler_cycles',
    'CycleLifeFit',
]

__version__ = '0.1.0'
