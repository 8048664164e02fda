"""
Collection Module
=================

커브 피팅 객체의 정렬 컬렉션 및 커브 간 보간 모듈입니다.

주요 기능:
- 키(z) 기준 정렬 컬렉션 (추가, 삭제, 순회)
- z 축 보간 (cubic spline 기본)
- 전류별 방전 곡선 컬렉션 (전류 제한, 결과 캐시)

Author: Battery Analysis Team
Date: 2026-10-19
"""

from .curvefit_collection import (
    INTERP_METHODS,
    CurveFitCollection,
)

from .discharge_curves import (
    InterpCache,
    DischargeCurves,
)

__all__ = [
    # Generic collection
    'INTERP_METHODS',
    'CurveFitCollection',

    # Discharge curves
    'InterpCache',
    'DischargeCurves',
]

__version__ = '0.1.0'
