"""
Curve Fit Exceptions
====================

커브 피팅 및 커브 컬렉션에서 사용하는 예외/경고 클래스입니다.

Author: Battery Analysis Team
Date: 2026-10-19
"""


class CurveFitError(Exception):
    """battery_curves 예외 기반 클래스"""


class DimensionMismatch(CurveFitError, ValueError):
    """원시 데이터 길이 불일치 또는 파라미터 개수 오류"""


class InvalidMode(CurveFitError, ValueError):
    """지원하지 않는 피팅 모드 / 보간 방법"""


class InsufficientCurves(CurveFitError, RuntimeError):
    """보간에 필요한 최소 커브 수(min_funs) 미달"""


class KeyNotFound(CurveFitError, KeyError):
    """컬렉션에 해당 키(z)가 없거나 컬렉션이 비어 있음"""


class NonConvergence(RuntimeWarning):
    """
    최적화가 반복 한도 내에 수렴하지 못함

    예외가 아닌 경고로 발생합니다. 최적 파라미터는 유지되고
    rmse 값으로 피팅 품질이 보고됩니다.
    """
