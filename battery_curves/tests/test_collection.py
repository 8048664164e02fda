"""
Collection 모듈 단위 테스트
===========================
"""

import pytest
import numpy as np
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))


class LinearCurve:
    """y = slope * x + offset 스텁 커브 (evaluate 호출 횟수 기록)"""

    def __init__(self, z, slope=1.0, offset=0.0):
        self.z = z
        self.slope = slope
        self.offset = offset
        self.calls = 0

    def evaluate(self, x):
        self.calls += 1
        return self.slope * np.asarray(x, dtype=float) + self.offset


def make_collection(keys, **kwargs):
    """키 z에서 기울기 z인 스텁 커브 컬렉션"""
    from battery_curves.core.collection import CurveFitCollection
    return CurveFitCollection(*[LinearCurve(z, slope=z) for z in keys], **kwargs)


class TestCurveFitCollection:
    """정렬 컬렉션 테스트"""

    def test_sorted_iteration(self):
        """삽입 순서와 무관하게 오름차순 순회"""
        c = make_collection([20, 5, 10])

        keys = [z for z, _ in c.iterate()]

        assert keys == [5.0, 10.0, 20.0]
        np.testing.assert_array_equal(c.z, [5.0, 10.0, 20.0])

    def test_duplicate_key_replaced(self):
        """같은 키 추가 시 나중 커브로 대체"""
        from battery_curves.core.collection import CurveFitCollection

        first = LinearCurve(10, slope=1.0)
        second = LinearCurve(10, slope=2.0)
        third = LinearCurve(10, slope=3.0)

        c = CurveFitCollection(first, second)
        assert len(c) == 1
        assert c[10] is second

        c.add(third)
        assert len(c) == 1
        assert c.get(10) is third

    def test_scenario_c_replace_at_current(self):
        """전류 10에 두 번째 커브 추가 시 한 개만 남음"""
        c = make_collection([5, 10, 20])
        newer = LinearCurve(10, slope=-1.0)

        c.add(newer)

        entries = [(z, curve) for z, curve in c if z == 10]
        assert len(entries) == 1
        assert entries[0][1] is newer
        assert len(c) == 3

    def test_scenario_d_remove(self):
        """remove(5) 후 [10, 20]만 남음"""
        c = make_collection([5, 10, 20])

        c.remove(5)

        assert [z for z, _ in c.iterate()] == [10.0, 20.0]
        assert 5 not in c

    def test_remove_missing_key(self):
        """없는 키 삭제 시 KeyNotFound"""
        from battery_curves.core.collection import CurveFitCollection
        from battery_curves.core.curve_fit import KeyNotFound

        c = make_collection([5, 10])

        with pytest.raises(KeyNotFound):
            c.remove(7)

        with pytest.raises(KeyError):
            CurveFitCollection().remove(1)

    def test_iterator_is_snapshot(self):
        """이터레이터는 호출 시점 스냅샷이며 재시작 가능"""
        c = make_collection([5, 10])

        it = c.iterate()
        c.add(LinearCurve(20))

        assert [z for z, _ in it] == [5.0, 10.0]
        assert [z for z, _ in c.iterate()] == [5.0, 10.0, 20.0]
        assert list(c.iterate()) == list(c.iterate())

    def test_reject_non_curve(self):
        """evaluate가 없는 객체 추가 거부"""
        from battery_curves.core.collection import CurveFitCollection

        with pytest.raises(TypeError):
            CurveFitCollection().add(object())


class TestCollectionInterp:
    """커브 간 보간 테스트"""

    def test_scenario_a_exact_match(self):
        """저장된 키에서는 해당 커브 값 그대로"""
        c = make_collection([5, 10, 20])
        curve10 = c[10]

        for x in [0.0, 0.3, 1.7, 42.0]:
            assert c.interp(10, x) == curve10.evaluate(x)

    def test_exact_match_no_blending(self):
        """정확히 일치하면 다른 커브는 계산하지 않음"""
        c = make_collection([5, 10, 20])

        c.interp(10, 1.0)

        assert c[5].calls == 0
        assert c[20].calls == 0
        assert c[10].calls == 1

    def test_scenario_b_clamp_above(self):
        """최대 키 초과 질의는 최대 키 결과와 같음"""
        c = make_collection([5, 20])

        for x in [0.0, 1.0, 2.5]:
            assert c.interp(30, x) == c.interp(20, x)

    def test_clamp_below(self):
        """최소 키 미만 질의는 최소 키 결과와 같음"""
        c = make_collection([5, 10, 20])

        assert c.interp(1, 2.0) == c.interp(5, 2.0)
        assert c.interp(-100, 2.0) == pytest.approx(10.0)

    def test_non_finite_key(self):
        """NaN/inf 키 질의는 ValueError"""
        c = make_collection([5, 10, 20])

        for z in [np.nan, np.inf, -np.inf]:
            with pytest.raises(ValueError):
                c.interp(z, 2.0)

    def test_spline_between_curves(self):
        """키 사이 값은 전체 커브를 통한 spline 보간"""
        c = make_collection([5, 10, 20])

        # 모든 커브가 y = z * x 이므로 z 방향으로 선형
        assert c.interp(7.5, 2.0) == pytest.approx(15.0)
        assert c.interp(15.0, 1.0) == pytest.approx(15.0)

    def test_spline_uses_all_curves(self):
        """양 옆 두 커브가 아닌 모든 커브를 사용"""
        from battery_curves.core.collection import CurveFitCollection

        # y(z) = z^2 (x = 1)
        curves = [LinearCurve(z, slope=z ** 2) for z in [1, 2, 3, 4]]
        c = CurveFitCollection(*curves)

        # 선형 보간이면 6.5, spline은 정확히 2.5^2
        assert c.interp(2.5, 1.0) == pytest.approx(6.25)

    @pytest.mark.parametrize("method", ['linear', 'pchip', 'akima'])
    def test_other_interp_methods(self, method):
        """다른 보간 방법"""
        c = make_collection([5, 10, 20, 40], interp_method=method)

        assert c.interp(15.0, 1.0) == pytest.approx(15.0)

    def test_invalid_interp_method(self):
        """지원하지 않는 보간 방법"""
        from battery_curves.core.curve_fit import InvalidMode

        with pytest.raises(InvalidMode):
            make_collection([5, 10, 20], interp_method='nearest')

    def test_vector_query(self):
        """배열 x 질의"""
        c = make_collection([5, 10, 20])
        x = np.array([0.0, 1.0, 2.0])

        result = c.interp(7.5, x)

        assert result.shape == (3,)
        np.testing.assert_allclose(result, 7.5 * x)

    def test_empty_collection(self):
        """빈 컬렉션 질의 시 KeyNotFound"""
        from battery_curves.core.collection import CurveFitCollection
        from battery_curves.core.curve_fit import KeyNotFound

        with pytest.raises(KeyNotFound):
            CurveFitCollection().interp(1.0, 1.0)

    def test_insufficient_curves(self):
        """보간이 필요한데 커브 수 부족"""
        from battery_curves.core.curve_fit import InsufficientCurves

        c = make_collection([5, 20])

        with pytest.raises(InsufficientCurves):
            c.interp(10, 1.0)

        # 키와 일치하면 보간 불필요
        assert c.interp(5, 1.0) == pytest.approx(5.0)

    def test_min_funs_configurable(self):
        """min_funs 조정"""
        c = make_collection([5, 20], min_funs=2)

        assert c.interp(10, 1.0) == pytest.approx(10.0)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
