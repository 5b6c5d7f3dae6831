"""Тесты Монте-Карло расчета геометрического фактора"""
import math
import threading

import numpy as np
import pytest

from thomsonsource import (CalculationInterrupted, CancellationToken, ElectronBunch,
                           InvalidConfigurationError, LaserPulse, LinearThomsonSource, SourceSettings, Vector)
from thomsonsource.geometric_factor import sampling_box


def _crossing_source(angle, width, length, samples):
    eb = ElectronBunch()
    eb.length = length
    eb.set_x_width(width)
    eb.set_y_width(width)
    lp = LaserPulse()
    lp.length = length
    lp.direction = Vector(0.0, math.sin(angle), math.cos(angle))
    lp.set_width(width)
    settings = SourceSettings(np_geometric_factor=samples, thread_number=2)
    return LinearThomsonSource(lp, eb, settings=settings, calculate=False)


class TestGeometricFactor:

    def test_head_on_equals_one(self):
        src = _crossing_source(0.0, 1.0e-5, 1.0e-5, 50000)
        result = src.calculate_geometric_factor(seed=1)
        assert result.complete
        assert result.samples == 50000
        assert result.value == pytest.approx(1.0, rel=0.05)
        assert src.geometric_factor == result.value

    def test_crossing_angle_matches_approximation(self):
        """При малом угле и большой рэлеевской длине Монте-Карло близко к приближению"""
        width = 5.0e-5
        length = 1.5e-3
        angle = 0.052
        src = _crossing_source(angle, width, length, 40000)
        expected = 1.0 / math.sqrt(1.0 + math.sin(angle) ** 2 * 2.0 * length ** 2 / (8.0 * width ** 2))
        assert src.approx_geometric_factor() == pytest.approx(expected, rel=1e-2)
        assert src.calculate_geometric_factor(seed=7).value == pytest.approx(expected, rel=0.1)

    def test_same_seed_same_value(self, source):
        first = source.calculate_geometric_factor(seed=42).value
        second = source.calculate_geometric_factor(seed=42).value
        assert first == pytest.approx(second, rel=1e-12)

    def test_samples_rounded_to_threads(self, source):
        source.np_geometric_factor = 1001
        source.thread_number = 2
        assert source.calculate_geometric_factor(seed=3).samples == 1000

    def test_cancelled_calculation_raises(self, source):
        token = CancellationToken()
        token.cancel()
        before = source.geometric_factor
        with pytest.raises(CalculationInterrupted):
            source.calculate_geometric_factor(token=token)
        assert source.geometric_factor == before

    def test_partial_result_allowed(self, source):
        token = CancellationToken()
        token.cancel()
        before = source.geometric_factor
        result = source.calculate_geometric_factor(token=token, allow_partial=True)
        assert not result.complete
        assert result.samples == 0
        assert result.value == before

    def test_invalid_sample_number(self, source):
        source.np_geometric_factor = 0
        with pytest.raises(InvalidConfigurationError):
            source.calculate_geometric_factor()

    def test_spread_shrinks_with_samples(self, source):
        """Разброс оценок по разным зернам убывает с ростом числа точек"""
        def spread_of_estimates(samples):
            source.np_geometric_factor = samples
            return np.std([source.calculate_geometric_factor(seed=s).value for s in range(12)])

        assert spread_of_estimates(30000) < 0.5 * spread_of_estimates(1000)


class TestCancellationDuringRun:

    @pytest.fixture
    def long_source(self, source):
        source.np_geometric_factor = 10 ** 7
        return source

    def _run_with_timer(self, src, **kwargs):
        token = CancellationToken()
        timer = threading.Timer(0.2, token.cancel)
        timer.start()
        try:
            return src.calculate_geometric_factor(token=token, seed=5, **kwargs)
        finally:
            timer.cancel()

    def test_interrupted(self, long_source):
        before = long_source.geometric_factor
        with pytest.raises(CalculationInterrupted):
            self._run_with_timer(long_source)
        assert long_source.geometric_factor == before

    def test_partial_estimate(self, long_source):
        result = self._run_with_timer(long_source, allow_partial=True)
        assert not result.complete
        assert 0 < result.samples < long_source.np_geometric_factor
        assert result.value > 0.0
        assert long_source.geometric_factor == result.value


class TestApproximation:

    def test_head_on_approximation_is_one(self, collinear_source):
        assert collinear_source.approx_geometric_factor() == pytest.approx(1.0)

    def test_approximation_decreases_with_angle(self, source):
        values = []
        for angle in (0.0, 0.05, 0.2, 0.5):
            src = source.copy()
            src.lp.direction = Vector(0.0, math.sin(angle), math.cos(angle))
            values.append(src.approx_geometric_factor())
        assert all(a > b for a, b in zip(values, values[1:]))
        assert all(0.0 < v <= 1.0 for v in values)


class TestSamplingBox:

    def test_box_contains_shifted_bunch(self, source):
        source.eb.shift = Vector(1.0e-4, 0.0, 2.0e-3)
        wdx, wdy, length = sampling_box(source)
        assert wdx >= source.eb.get_x_width(0.0) + 0.5e-4
        assert wdy >= source.lp.get_width(0.0)
        assert length >= source.eb.length + 1.0e-3
