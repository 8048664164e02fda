"""
Cycle Life Curve Fitting Module
===============================

방전 심도(DoD)에 따른 수명 사이클 수 피팅 모듈입니다.

핵심 수식 (Woehler 곡선):
    N(DoD) = a * DoD^(-b)

    - DoD: 방전 심도 (0-1)
    - N: 고장까지의 사이클 수
    - a, b: 피팅 파라미터

Author: Battery Analysis Team
Date: 2026-10-19
"""

from typing import Dict, Optional

import numpy as np

from .base import CurveFit, FitOptions
from .exceptions import DimensionMismatch


def woehler_cycles(dod: np.ndarray, a: float, b: float) -> np.ndarray:
    """Woehler 곡선 N = a * DoD^(-b)"""
    dod = np.asarray(dod, dtype=float)
    with np.errstate(divide='ignore'):
        return a * dod ** (-b)


class CycleLifeFit(CurveFit):
    """
    수명 사이클 곡선 피팅 클래스

    사용 예시:
        >>> c = CycleLifeFit(dod, cycles, x0=[3000, 1.0])
        >>> c.evaluate(0.8)
    """

    n_params = 2
    xlabel = 'DoD'
    ylabel = 'Cycles to failure N'
    xlim = (0.0, np.inf)
    ylim = (0.0, np.inf)

    def __init__(self,
                 dod: np.ndarray,
                 cycles: np.ndarray,
                 z: float = 0.0,
                 options: Optional[FitOptions] = None,
                 **kwargs):
        """
        Args:
            dod: 방전 심도
            cycles: 고장까지의 사이클 수
            z: 컬렉션 내 키 값 (예: 온도)
            options: FitOptions
            **kwargs: x0 (2개 초기값), mode 등
        """
        super().__init__(dod, cycles, z, options, **kwargs)

    def function(self, params: np.ndarray, x: np.ndarray) -> np.ndarray:
        return woehler_cycles(x, *params)

    @property
    def params(self) -> np.ndarray:
        return self._params.copy()

    @params.setter
    def params(self, values: np.ndarray):
        """파라미터 지정 후 해당 값을 초기값으로 재피팅"""
        values = np.atleast_1d(np.asarray(values, dtype=float)).ravel()
        if len(values) != self.n_params:
            raise DimensionMismatch(f"CycleLifeFit takes {self.n_params} params, got {len(values)}")
        self.fit(x0=values)

    def plot_hints(self) -> Dict:
        hints = super().plot_hints()
        # 두 자릿수 이상 차이나면 로그 스케일
        y_min = np.min(self._raw_y)
        if y_min > 0 and np.max(self._raw_y) / y_min > 100:
            hints['yscale'] = 'log'
        return hints
