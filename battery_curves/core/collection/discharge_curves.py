"""
Discharge Curves Module
=======================

전류별 방전 곡선 컬렉션입니다.

각 DischargeFit 객체는 측정 전류의 절댓값을 키로 저장되며,
임의의 전류/용량에서의 전압을 커브 간 보간으로 계산합니다.

NOTE:
    저/고전류 외삽은 낮은 SOC에서 결과가 나빠지므로
    전류는 측정된 최소/최대 전류(i_min, i_max)로 제한됩니다.

Author: Battery Analysis Team
Date: 2026-10-19
"""

from typing import NamedTuple, Optional

import numpy as np

from .curvefit_collection import CurveFitCollection
from ..constants import T_ROOM
from ..curve_fit.base import CurveFit
from ..curve_fit.discharge_fit import DischargeFit


class InterpCache(NamedTuple):
    """마지막 interp 호출 결과"""
    current: float
    capacity: float
    voltage: float


class DischargeCurves(CurveFitCollection):
    """
    방전 곡선 컬렉션

    사용 예시:
        >>> d = DischargeCurves()
        >>> d.discharge_fit(V1, C1, 1.0)
        >>> d.discharge_fit(V2, C2, 5.0)
        >>> d.discharge_fit(V3, C3, 10.0)
        >>> v = d.interp(-3.0, 1.2)   # 3 A 방전, 1.2 Ah 방전 후 전압
    """

    def __init__(self, *curves: CurveFit,
                 interp_method: str = 'spline',
                 min_funs: int = 3):
        self.i_min: Optional[float] = None
        self.i_max: Optional[float] = None
        self._cache: Optional[InterpCache] = None
        super().__init__(*curves, interp_method=interp_method, min_funs=min_funs)

    def normalize_key(self, z: float) -> float:
        # 방전 곡선은 전류 부호와 무관
        return abs(float(z))

    def discharge_fit(self,
                      voltage: np.ndarray,
                      capacity: np.ndarray,
                      current: float,
                      temperature: float = T_ROOM,
                      **options) -> DischargeFit:
        """
        방전 곡선을 피팅하여 컬렉션에 추가

        Args:
            voltage: 전압 (V) = f(capacity)
            capacity: 방전 용량 (Ah)
            current: 측정 전류 (A)
            temperature: 측정 온도 (K)
            **options: x0 (9개 초기값, 기본 0), mode ('lsq', 'fmin', 'both')

        Returns:
            추가된 DischargeFit 객체
        """
        curve = DischargeFit(voltage, capacity, current, temperature, **options)
        self.add(curve)
        return curve

    def _on_change(self):
        self._set_current_lims()
        self._cache = None

    def _set_current_lims(self):
        if self._z:
            self.i_min = self._z[0]
            self.i_max = self._z[-1]
        else:
            self.i_min = None
            self.i_max = None

    def interp(self, current: float, capacity):
        """
        전류 current, 방전 용량 capacity에서의 전압 (V)

        Args:
            current: 전류 (A), 절댓값 사용
            capacity: 방전 용량 (Ah), 스칼라 또는 배열

        스칼라 질의는 직전 호출과 입력이 같으면 캐시 값을 반환합니다.
        """
        current = float(current)
        if np.ndim(capacity) != 0:
            return super().interp(current, capacity)

        capacity = float(capacity)
        cache = self._cache
        if cache is not None and cache.current == current and cache.capacity == capacity:
            return cache.voltage

        voltage = super().interp(current, capacity)
        self._cache = InterpCache(current, capacity, voltage)
        return voltage
