"""
Discharge Curve Fitting Module
==============================

리튬이온 배터리 방전 곡선 피팅 모듈입니다.

방전 전압을 방전 용량 C의 함수로 세 구간의 합으로 표현합니다:
    1. Nernst 항:     e0 - ea * (R*T/F) * ln(1 + exp(eb) * C)
    2. 말단 급락 항:  -a_ex * exp(b_ex * (C - c_ex))
    3. 초기 강하 항:  x0 / (1 + exp(v0 * (C - delta)))

    V(C) = Nernst + 말단 급락 + 초기 강하

파라미터 벡터:
    [e0, ea, eb, a_ex, b_ex, c_ex, x0, v0, delta]

    e0, ea, eb:       Nernst 항 (개방 전압 영역)
    a_ex, b_ex, c_ex: 방전 말단의 지수적 전압 급락
    x0, v0, delta:    방전 초기의 전압 강하

Author: Battery Analysis Team
Date: 2026-10-19
"""

from dataclasses import dataclass
from typing import Dict, Optional

import numpy as np

from .base import CurveFit, FitOptions
from ..constants import F, R, T_ROOM


def discharge_voltage(capacity: np.ndarray,
                      e0: float, ea: float, eb: float,
                      a_ex: float, b_ex: float, c_ex: float,
                      x0: float, v0: float, delta: float,
                      temperature: float = T_ROOM) -> np.ndarray:
    """
    3구간 방전 전압 모델

    Args:
        capacity: 방전 용량 (Ah)
        e0 ~ delta: 모델 파라미터
        temperature: 온도 (K)

    Returns:
        전압 (V)
    """
    capacity = np.asarray(capacity, dtype=float)
    thermal_voltage = R * temperature / F

    # Nernst 항 (온도 의존)
    nernst = e0 - ea * thermal_voltage * np.log1p(np.exp(eb) * capacity)

    # 방전 말단 급락
    collapse = -a_ex * np.exp(b_ex * (capacity - c_ex))

    # 방전 초기 강하
    activation = x0 / (1 + np.exp(v0 * (capacity - delta)))

    return nernst + collapse + activation


@dataclass
class DischargeParameters:
    """방전 곡선 모델 파라미터"""
    e0: float = 0.0
    ea: float = 0.0
    eb: float = 0.0
    a_ex: float = 0.0
    b_ex: float = 0.0
    c_ex: float = 0.0
    x0: float = 0.0
    v0: float = 0.0
    delta: float = 0.0

    def to_array(self) -> np.ndarray:
        """배열로 변환 (피팅 초기값용)"""
        return np.array([self.e0, self.ea, self.eb,
                         self.a_ex, self.b_ex, self.c_ex,
                         self.x0, self.v0, self.delta])

    @classmethod
    def from_array(cls, arr: np.ndarray) -> 'DischargeParameters':
        """배열에서 생성"""
        return cls(
            e0=arr[0], ea=arr[1], eb=arr[2],
            a_ex=arr[3], b_ex=arr[4], c_ex=arr[5],
            x0=arr[6], v0=arr[7], delta=arr[8]
        )


class DischargeFit(CurveFit):
    """
    방전 곡선 피팅 클래스

    하나의 전류에서 측정된 V = f(C) 곡선을 피팅합니다.
    z는 전류의 절댓값입니다 (방전이므로 부호 무관).

    사용 예시:
        >>> d = DischargeFit(voltage, capacity, current=1.0, temperature=298.15)
        >>> d.evaluate(0.5)
        >>> d.mode = 'fmin'   # 현재 파라미터로 재피팅
    """

    n_params = 9
    xlabel = 'Discharge capacity (Ah)'
    ylabel = 'Voltage (V)'
    xlim = (0.0, np.inf)
    ylim = (0.0, np.inf)

    def __init__(self,
                 voltage: np.ndarray,
                 capacity: np.ndarray,
                 current: float,
                 temperature: float = T_ROOM,
                 options: Optional[FitOptions] = None,
                 **kwargs):
        """
        Args:
            voltage: 전압 (V) = f(capacity)
            capacity: 방전 용량 (Ah)
            current: 측정 전류 (A)
            temperature: 측정 온도 (K)
            options: FitOptions
            **kwargs: x0 (9개 초기값), mode ('lsq', 'fmin', 'both') 등
        """
        self.current = float(current)
        self.temperature = float(temperature)
        super().__init__(capacity, voltage, abs(self.current), options, **kwargs)

    def function(self, params: np.ndarray, x: np.ndarray) -> np.ndarray:
        return discharge_voltage(x, *params, temperature=self.temperature)

    @property
    def parameters(self) -> DischargeParameters:
        """현재 파라미터 (이름 있는 형태)"""
        return DischargeParameters.from_array(self._params)

    def plot_hints(self) -> Dict:
        hints = super().plot_hints()
        hints['title'] = f'I = {self.current:g} A, T = {self.temperature:g} K'
        return hints
