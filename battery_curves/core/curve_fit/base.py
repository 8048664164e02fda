"""
Curve Fit Base Module
=====================

커브 피팅 객체의 공통 인터페이스입니다.

하나의 CurveFit 객체는 원시 측정 데이터(raw_x, raw_y), 키 값(z),
파라미터 벡터, 피팅 모드를 보유합니다.

피팅 모드:
    - lsq:  Levenberg-Marquardt (scipy.optimize.least_squares)
    - fmin: Nelder-Mead simplex (scipy.optimize.minimize)
    - both: lsq 수행 후 그 결과로 fmin 재수행 (기본값)

Author: Battery Analysis Team
Date: 2026-10-19
"""

import warnings
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple, Union

import numpy as np
import pandas as pd
from scipy.optimize import least_squares, minimize

from .exceptions import DimensionMismatch, InvalidMode, NonConvergence
from ..utils.logger import get_logger

logger = get_logger(__name__)

# 비유한 잔차를 대체하는 값 (최적화 중 overflow 방지)
_RESIDUAL_CAP = 1e10


class FitMode(Enum):
    """피팅 모드"""
    LSQ = 'lsq'
    SIMPLEX = 'fmin'
    BOTH = 'both'

    @classmethod
    def parse(cls, value: Union[str, 'FitMode']) -> 'FitMode':
        """문자열 또는 FitMode를 FitMode로 변환"""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            name = value.strip().lower()
            if name == 'simplex':
                return cls.SIMPLEX
            for mode in cls:
                if mode.value == name:
                    return mode
        raise InvalidMode(f"mode must be one of 'lsq', 'fmin', 'both', got {value!r}")


@dataclass
class FitOptions:
    """
    피팅 옵션

    Attributes:
        x0: 초기 파라미터 (None이면 0 벡터)
        mode: 피팅 모드
        max_nfev: lsq 최대 함수 호출 횟수
        max_iter: fmin 최대 반복 횟수
        xtol: lsq 파라미터 수렴 허용 오차
        ftol: lsq 목적 함수 수렴 허용 오차
        simplex_xatol: fmin 파라미터 수렴 허용 오차
        simplex_fatol: fmin 목적 함수 수렴 허용 오차
    """
    x0: Optional[np.ndarray] = None
    mode: Union[str, FitMode] = FitMode.BOTH
    max_nfev: int = 10000
    max_iter: int = 20000
    xtol: float = 1e-10
    ftol: float = 1e-10
    simplex_xatol: float = 1e-6
    simplex_fatol: float = 1e-10

    def __post_init__(self):
        self.mode = FitMode.parse(self.mode)
        if self.x0 is not None:
            self.x0 = np.atleast_1d(np.asarray(self.x0, dtype=float)).ravel()

    @classmethod
    def from_kwargs(cls, **kwargs) -> 'FitOptions':
        """키워드 옵션(x0=, mode=, ...)에서 생성"""
        unknown = set(kwargs) - set(cls.__dataclass_fields__)
        if unknown:
            raise TypeError(f"Unknown fit option(s): {', '.join(sorted(unknown))}")
        return cls(**kwargs)

    def seed(self, n_params: int) -> np.ndarray:
        """초기 파라미터 벡터 (길이 검증 포함)"""
        if self.x0 is None:
            return np.zeros(n_params)
        if len(self.x0) != n_params:
            raise DimensionMismatch(f"x0 must have {n_params} elements, got {len(self.x0)}")
        return self.x0.copy()


@dataclass
class FitResult:
    """피팅 결과"""
    params: np.ndarray
    rmse: float
    r_squared: float
    mode: FitMode
    success: bool = True
    nfev: int = 0
    message: str = ''
    residuals: Optional[np.ndarray] = field(default=None, repr=False)

    def to_dict(self) -> Dict:
        """딕셔너리로 변환"""
        result = {f'p{i}': float(p) for i, p in enumerate(self.params)}
        result.update({
            'rmse': self.rmse,
            'r_squared': self.r_squared,
            'mode': self.mode.value,
            'success': self.success,
            'nfev': self.nfev,
        })
        return result


class CurveFit(ABC):
    """
    커브 피팅 추상 기반 클래스

    서브클래스는 다음을 구현해야 합니다:
    - n_params: 파라미터 개수
    - function(): 파라미터 함수 f(params, x)

    생성 시 한 번 피팅을 수행합니다. mode를 다시 지정하면 현재 파라미터를
    초기값으로 재피팅합니다.
    """

    n_params: int = 0
    xlabel: str = 'x'
    ylabel: str = 'y'
    xlim: Tuple[float, float] = (-np.inf, np.inf)
    ylim: Tuple[float, float] = (-np.inf, np.inf)

    def __init__(self,
                 raw_x: np.ndarray,
                 raw_y: np.ndarray,
                 z: float = 0.0,
                 options: Optional[FitOptions] = None,
                 **kwargs):
        """
        Args:
            raw_x: 독립 변수 측정값
            raw_y: 종속 변수 측정값
            z: 컬렉션 내 키 값 (예: 전류)
            options: FitOptions (None이면 kwargs로 생성)
            **kwargs: FitOptions 필드 (x0, mode, max_nfev, ...)
        """
        raw_x = np.atleast_1d(np.asarray(raw_x, dtype=float)).ravel()
        raw_y = np.atleast_1d(np.asarray(raw_y, dtype=float)).ravel()
        if len(raw_x) != len(raw_y):
            raise DimensionMismatch(
                f"raw_x and raw_y must have same length: {len(raw_x)} vs {len(raw_y)}")
        if len(raw_x) == 0:
            raise DimensionMismatch("raw_x and raw_y must not be empty")

        if options is None:
            options = FitOptions.from_kwargs(**kwargs)
        elif kwargs:
            raise TypeError("Pass either options or keyword fit options, not both")

        self._raw_x = raw_x
        self._raw_y = raw_y
        self.z = float(z)
        self.options = options

        self._params = options.seed(self.n_params)
        self._mode = options.mode
        self._is_fitted = False
        self.fit_result: Optional[FitResult] = None

        self.fit()

    # --------------------------------------------------------
    # 속성
    # --------------------------------------------------------

    @property
    def raw_x(self) -> np.ndarray:
        return self._raw_x

    @property
    def raw_y(self) -> np.ndarray:
        return self._raw_y

    @property
    def params(self) -> np.ndarray:
        """현재 파라미터 (복사본)"""
        return self._params.copy()

    @property
    def rmse(self) -> float:
        """마지막 피팅의 RMSE"""
        return self.fit_result.rmse if self.fit_result is not None else np.inf

    @property
    def mode(self) -> FitMode:
        return self._mode

    @mode.setter
    def mode(self, value: Union[str, FitMode]):
        """모드 변경 시 현재 파라미터를 초기값으로 재피팅"""
        new_mode = FitMode.parse(value)
        previous = self._mode
        self._mode = new_mode
        try:
            self.fit()
        except Exception:
            self._mode = previous
            raise

    # --------------------------------------------------------
    # 모델
    # --------------------------------------------------------

    @abstractmethod
    def function(self, params: np.ndarray, x: np.ndarray) -> np.ndarray:
        """파라미터 함수 y = f(params, x)"""

    def evaluate(self, x):
        """
        현재 파라미터로 함수 계산

        x는 xlim으로, 결과는 ylim으로 제한됩니다.
        스칼라 입력이면 float를 반환합니다.
        """
        x_arr = np.clip(np.asarray(x, dtype=float), *self.xlim)
        with np.errstate(over='ignore', invalid='ignore', divide='ignore'):
            y = np.clip(self.function(self._params, x_arr), *self.ylim)
        if np.ndim(y) == 0:
            return float(y)
        return y

    def _residuals(self, params: np.ndarray) -> np.ndarray:
        with np.errstate(over='ignore', invalid='ignore', divide='ignore'):
            res = self.function(params, self._raw_x) - self._raw_y
        return np.nan_to_num(res, nan=_RESIDUAL_CAP, posinf=_RESIDUAL_CAP, neginf=-_RESIDUAL_CAP)

    def _rmse_of(self, params: np.ndarray) -> float:
        return float(np.sqrt(np.mean(self._residuals(params) ** 2)))

    # --------------------------------------------------------
    # 피팅
    # --------------------------------------------------------

    def fit(self, x0: Optional[np.ndarray] = None) -> FitResult:
        """
        원시 데이터에 파라미터 피팅

        Args:
            x0: 초기 파라미터. None이면 첫 피팅은 options.x0,
                이후에는 현재 파라미터를 사용합니다.

        Returns:
            FitResult

        파라미터는 피팅이 끝난 뒤에만 갱신됩니다. 최적화가 수렴하지 못하면
        NonConvergence 경고를 발생시키고 찾은 최적값을 유지합니다.
        """
        if x0 is None:
            seed = self._params.copy()
        else:
            seed = np.atleast_1d(np.asarray(x0, dtype=float)).ravel()
            if len(seed) != self.n_params:
                raise DimensionMismatch(f"x0 must have {self.n_params} elements, got {len(seed)}")

        mode = self._mode
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", RuntimeWarning)
            if mode is FitMode.LSQ:
                params, success, nfev, message = self._fit_lsq(seed)
            elif mode is FitMode.SIMPLEX:
                params, success, nfev, message = self._fit_simplex(seed)
            else:
                params, success, nfev, message = self._fit_lsq(seed)
                lsq_rmse = self._rmse_of(params)
                s_params, s_success, s_nfev, s_message = self._fit_simplex(params)
                nfev += s_nfev
                if self._rmse_of(s_params) <= lsq_rmse:
                    params, success, message = s_params, s_success, s_message

        result = self._make_result(params, mode, success, nfev, message)

        # 경고가 예외로 승격되면 기존 상태를 유지하도록 경고를 먼저 발생
        if not success:
            logger.warning("%s (z=%g) did not converge in mode '%s': %s (rmse=%.3g)",
                           type(self).__name__, self.z, mode.value, message, result.rmse)
            warnings.warn(
                f"{type(self).__name__} fit did not converge ({message}); rmse={result.rmse:.3g}",
                NonConvergence, stacklevel=2)
        else:
            logger.debug("%s (z=%g) fitted in mode '%s': rmse=%.3g, nfev=%d",
                         type(self).__name__, self.z, mode.value, result.rmse, nfev)

        self._params = params
        self.fit_result = result
        self._is_fitted = True
        return result

    def _fit_lsq(self, seed: np.ndarray):
        """Levenberg-Marquardt 피팅"""
        opts = self.options
        # method='lm'은 잔차 개수 >= 파라미터 개수일 때만 사용 가능
        method = 'lm' if len(self._raw_x) >= self.n_params else 'trf'
        res = least_squares(self._residuals, seed, method=method,
                            max_nfev=opts.max_nfev, xtol=opts.xtol, ftol=opts.ftol)
        params = res.x
        success = bool(res.success)
        message = str(res.message)
        rmse, seed_rmse = self._rmse_of(params), self._rmse_of(seed)
        if rmse > seed_rmse and not np.isclose(rmse, seed_rmse, rtol=1e-9, atol=1e-12):
            params = seed
            success = False
            message = f"{message} (result worse than seed, seed kept)"
        return params, success, int(res.nfev), message

    def _fit_simplex(self, seed: np.ndarray):
        """Nelder-Mead simplex 피팅"""
        opts = self.options

        def cost(params):
            return float(np.sum(self._residuals(params) ** 2))

        res = minimize(cost, seed, method='Nelder-Mead',
                       options={'maxiter': opts.max_iter, 'maxfev': opts.max_iter * 2,
                                'xatol': opts.simplex_xatol, 'fatol': opts.simplex_fatol})
        return np.asarray(res.x, dtype=float), bool(res.success), int(res.nfev), str(res.message)

    def _make_result(self, params, mode, success, nfev, message) -> FitResult:
        with np.errstate(over='ignore', invalid='ignore', divide='ignore'):
            residuals = self._raw_y - self.function(params, self._raw_x)
        rmse = self._rmse_of(params)
        ss_res = np.sum(residuals ** 2)
        ss_tot = np.sum((self._raw_y - np.mean(self._raw_y)) ** 2)
        r_squared = 1 - (ss_res / ss_tot) if ss_tot > 0 else 0.0
        return FitResult(
            params=params.copy(),
            rmse=rmse,
            r_squared=float(r_squared),
            mode=mode,
            success=success,
            nfev=nfev,
            message=message,
            residuals=residuals,
        )

    # --------------------------------------------------------
    # 시각화 / 출력 보조
    # --------------------------------------------------------

    def plot_hints(self) -> Dict:
        """시각화용 축 정보"""
        return {'xlabel': self.xlabel, 'ylabel': self.ylabel, 'yscale': 'linear'}

    def to_dataframe(self) -> pd.DataFrame:
        """원시 데이터와 피팅 결과를 DataFrame으로 변환"""
        y_fit = self.evaluate(self._raw_x)
        return pd.DataFrame({
            'x': self._raw_x,
            'y': self._raw_y,
            'y_fit': y_fit,
            'residual': self._raw_y - y_fit,
        })

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(z={self.z:g}, n={len(self._raw_x)}, "
                f"mode='{self._mode.value}', rmse={self.rmse:.4g})")
