"""
Curve Fit Collection Module
===========================

키(z) 기준으로 정렬된 커브 피팅 객체 컬렉션입니다.

여러 커브 사이의 값은 z 축 방향 보간으로 계산합니다:
    1. z를 저장된 키 범위 [min(z), max(z)]로 제한 (외삽 금지)
    2. z가 저장된 키와 같으면 해당 커브의 evaluate(x) 반환
    3. 그 외에는 모든 커브의 evaluate(x)를 계산한 뒤 z 축으로 보간

Author: Battery Analysis Team
Date: 2026-10-19
"""

from bisect import bisect_left
from typing import Iterator, List, Optional, Tuple

import numpy as np
import pandas as pd
from scipy.interpolate import (
    Akima1DInterpolator,
    CubicSpline,
    PchipInterpolator,
    make_interp_spline,
)

from ..curve_fit.base import CurveFit
from ..curve_fit.exceptions import InsufficientCurves, InvalidMode, KeyNotFound
from ..utils.logger import get_logger

logger = get_logger(__name__)

INTERP_METHODS = ('spline', 'pchip', 'akima', 'linear')


def _make_interpolator(method: str, z: np.ndarray, y: np.ndarray):
    """z 축 보간 함수 생성"""
    if method == 'spline':
        return CubicSpline(z, y, axis=0)
    elif method == 'pchip':
        return PchipInterpolator(z, y, axis=0)
    elif method == 'akima':
        return Akima1DInterpolator(z, y, axis=0)
    elif method == 'linear':
        return make_interp_spline(z, y, k=1, axis=0)
    raise InvalidMode(f"Unknown interp method: {method}")


class CurveFitCollection:
    """
    정렬된 커브 피팅 컬렉션

    같은 키의 커브가 추가되면 기존 커브를 대체합니다 (나중 커브 우선).

    사용 예시:
        >>> c = CurveFitCollection(fit1, fit2, fit3)
        >>> c.remove(5.0)
        >>> for z, curve in c:
        ...     print(z, curve.rmse)
        >>> y = c.interp(7.5, x)
    """

    def __init__(self, *curves: CurveFit,
                 interp_method: str = 'spline',
                 min_funs: int = 3):
        """
        Args:
            *curves: 초기 커브 피팅 객체들
            interp_method: z 축 보간 방법 ('spline', 'pchip', 'akima', 'linear')
            min_funs: 보간에 필요한 최소 커브 수
        """
        self._z: List[float] = []
        self._curves: List[CurveFit] = []
        self.interp_method = interp_method
        self.min_funs = min_funs

        for curve in curves:
            self.add(curve)

    # --------------------------------------------------------
    # 속성
    # --------------------------------------------------------

    @property
    def interp_method(self) -> str:
        return self._interp_method

    @interp_method.setter
    def interp_method(self, method: str):
        if method not in INTERP_METHODS:
            raise InvalidMode(f"interp_method must be one of {INTERP_METHODS}, got {method!r}")
        self._interp_method = method

    @property
    def z(self) -> np.ndarray:
        """정렬된 키 배열"""
        return np.array(self._z)

    @property
    def curves(self) -> List[CurveFit]:
        return list(self._curves)

    def normalize_key(self, z: float) -> float:
        """질의/삭제에 사용하는 키 정규화"""
        return float(z)

    def key(self, curve: CurveFit) -> float:
        """커브의 컬렉션 키"""
        return self.normalize_key(curve.z)

    # --------------------------------------------------------
    # 추가 / 삭제 / 순회
    # --------------------------------------------------------

    def add(self, curve: CurveFit):
        """
        커브 추가

        같은 키의 커브가 이미 있으면 대체합니다.
        """
        if not callable(getattr(curve, 'evaluate', None)):
            raise TypeError(f"{type(curve).__name__} does not implement evaluate()")

        z = self.key(curve)
        idx = bisect_left(self._z, z)
        if idx < len(self._z) and self._z[idx] == z:
            logger.debug("Replacing curve at z=%g", z)
            self._curves[idx] = curve
        else:
            self._z.insert(idx, z)
            self._curves.insert(idx, curve)
        self._on_change()

    def remove(self, z: float):
        """
        키 z의 커브 삭제

        Raises:
            KeyNotFound: 해당 키가 없을 때
        """
        idx = self._index(self.normalize_key(z))
        if idx is None:
            raise KeyNotFound(f"No curve with z={z}")
        del self._z[idx]
        del self._curves[idx]
        self._on_change()

    def get(self, z: float) -> CurveFit:
        """키 z의 커브 반환"""
        idx = self._index(self.normalize_key(z))
        if idx is None:
            raise KeyNotFound(f"No curve with z={z}")
        return self._curves[idx]

    def iterate(self) -> Iterator[Tuple[float, CurveFit]]:
        """
        (z, curve) 오름차순 이터레이터

        호출 시점의 스냅샷을 순회합니다. 매 호출마다 새 이터레이터를 반환합니다.
        """
        snapshot = list(zip(self._z, self._curves))
        return (item for item in snapshot)

    def __iter__(self) -> Iterator[Tuple[float, CurveFit]]:
        return self.iterate()

    def __len__(self) -> int:
        return len(self._z)

    def __contains__(self, z) -> bool:
        return self._index(self.normalize_key(z)) is not None

    def __getitem__(self, z: float) -> CurveFit:
        return self.get(z)

    def _index(self, z: float) -> Optional[int]:
        idx = bisect_left(self._z, z)
        if idx < len(self._z) and self._z[idx] == z:
            return idx
        return None

    def _on_change(self):
        """추가/삭제 후 호출 (서브클래스 파생 상태 갱신용)"""

    # --------------------------------------------------------
    # 보간
    # --------------------------------------------------------

    def _clamp(self, z: float) -> float:
        return float(min(max(self.normalize_key(z), self._z[0]), self._z[-1]))

    def interp(self, z: float, x):
        """
        커브 간 보간

        Args:
            z: 키 값 (저장된 키 범위로 제한됨)
            x: 각 커브의 입력값 (스칼라 또는 배열)

        Returns:
            보간된 값 (x가 스칼라면 float)

        Raises:
            ValueError: z가 유한한 값이 아닐 때
            KeyNotFound: 컬렉션이 비어 있을 때
            InsufficientCurves: 보간이 필요한데 커브 수가 min_funs 미만일 때
        """
        if not np.isfinite(z):
            raise ValueError(f"Query key must be finite, got {z}")
        if not self._z:
            raise KeyNotFound("Cannot interpolate in an empty collection")

        z = self._clamp(z)
        idx = self._index(z)
        if idx is not None:
            return self._curves[idx].evaluate(x)

        if len(self._z) < self.min_funs:
            raise InsufficientCurves(
                f"Interpolation needs at least {self.min_funs} curves, got {len(self._z)}")

        x = np.asarray(x, dtype=float)
        y = np.array([curve.evaluate(x) for curve in self._curves], dtype=float)
        interpolator = _make_interpolator(self._interp_method, np.array(self._z), y)
        result = np.asarray(interpolator(z))
        if result.ndim == 0:
            return float(result)
        return result

    def to_dataframe(self) -> pd.DataFrame:
        """커브 요약 DataFrame (z, 타입, 샘플 수, rmse)"""
        rows = []
        for z, curve in self.iterate():
            rows.append({
                'z': z,
                'type': type(curve).__name__,
                'n_samples': len(curve.raw_x),
                'mode': curve.mode.value,
                'rmse': curve.rmse,
            })
        return pd.DataFrame(rows, columns=['z', 'type', 'n_samples', 'mode', 'rmse'])

    def __repr__(self) -> str:
        return f"{type(self).__name__}(z={self._z}, interp_method='{self._interp_method}')"
