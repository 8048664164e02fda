"""
Physical Constants
==================

피팅 모델이 생성 시점에 사용하는 물리 상수 모음입니다.

Author: Battery Analysis Team
Date: 2026-10-19
"""

from scipy import constants

T_ROOM = 298.15                 # 실온 (K), 25°C
R = constants.gas_constant      # 기체 상수 (J/(mol*K))
F = constants.Avogadro * constants.elementary_charge  # 패러데이 상수 (C/mol)
