"""
모듈 기능 테스트 스크립트
========================

battery_curves 모듈들의 기본 기능을 검증합니다.
"""

import numpy as np

print("=" * 60)
print("Battery Curves Module Test")
print("=" * 60)

# 1. Curve Fit 모듈 테스트
print("\n[1] Curve Fit Module Test")
print("-" * 40)

try:
    from battery_curves.core.curve_fit import (
        DischargeFit,
        CycleLifeFit,
        discharge_voltage,
        woehler_cycles,
    )
    print("✅ curve_fit 모듈 import 성공")

    capacity = np.linspace(0, 2.5, 60)
    params = [3.35, 4.0, 0.5, 0.02, 3.0, 1.5, 0.15, 20.0, 0.1]
    voltage = discharge_voltage(capacity, *params)

    d = DischargeFit(voltage, capacity, 1.0, x0=params, mode='lsq')
    print(f"✅ DischargeFit 피팅: rmse={d.rmse:.2e}")

    dod = np.array([0.1, 0.2, 0.4, 0.6, 0.8, 1.0])
    c = CycleLifeFit(dod, woehler_cycles(dod, 3000, 1.5), x0=[1000, 1.0])
    print(f"✅ CycleLifeFit 피팅: a={c.params[0]:.1f}, b={c.params[1]:.3f}")

except Exception as e:
    print(f"❌ curve_fit 모듈 오류: {e}")
    import traceback
    traceback.print_exc()

# 2. Collection 모듈 테스트
print("\n[2] Collection Module Test")
print("-" * 40)

try:
    from battery_curves.core.collection import DischargeCurves
    print("✅ collection 모듈 import 성공")

    curves = DischargeCurves()
    for current in (1.0, 5.0, 10.0):
        p = list(params)
        p[0] -= 0.02 * current
        curves.discharge_fit(discharge_voltage(capacity, *p), capacity, current,
                             x0=p, mode='lsq')

    print(f"✅ 전류 범위: {curves.i_min} ~ {curves.i_max} A")
    print(f"✅ interp(7.5 A, 1.0 Ah) = {curves.interp(7.5, 1.0):.4f} V")
    print(curves.to_dataframe())

except Exception as e:
    print(f"❌ collection 모듈 오류: {e}")
    import traceback
    traceback.print_exc()

print("\n" + "=" * 60)
print("Test Complete")
print("=" * 60)
