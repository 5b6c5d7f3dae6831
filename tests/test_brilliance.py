"""Тесты спектральной яркости"""
import math

import numpy as np
import pytest

from thomsonsource import LinearThomsonSource, Vector, brilliance
from thomsonsource.accumulators import FallbackStatistics


class TestLineIntegral:

    def test_head_on_line_integral(self, collinear_source, axis):
        """Для встречных пучков интеграл вдоль оси равен w^2 / (pi we^2 wl^2)"""
        src = collinear_source
        we2 = src.eb.get_width2(0.0)
        wl2 = src.lp.get_width2(0.0)
        expected = (we2 + wl2) / (math.pi * we2 * wl2)
        res = brilliance.line_integral(src, Vector(), axis, 30000)
        assert res == pytest.approx(expected, rel=5e-3)

    def test_zero_direction(self, source):
        assert brilliance.line_integral(source, Vector(), Vector(), 30000) == 0.0
        assert source.direction_frequency_brilliance(Vector(), Vector(), Vector(0.0, 0.0, 1.0), 1.0e-15) == 0.0

    def test_budget_exceeded_gives_zero(self, source, axis, monkeypatch):
        monkeypatch.setattr(brilliance, "BRILLIANCE_NUMBER_OF_EVALUATIONS", 3)
        e = source.direction_energy(axis, axis)
        assert source.direction_frequency_brilliance_no_spread(Vector(), axis, axis, e) == 0.0
        assert source.fallback_stats.count(FallbackStatistics.QUADRATURE_BUDGET_EXCEEDED) == 1


class TestBrilliance:

    def test_brilliance_is_line_integral_times_flux(self, source, axis):
        e = source.direction_energy(axis, axis)
        u = brilliance.line_integral(source, Vector(), axis, 30000)
        assert source.direction_frequency_brilliance(Vector(), axis, axis, e) == pytest.approx(
            u * source.direction_frequency_flux_no_spread(axis, axis, e))

    def test_brilliance_drops_off_center(self, source, axis):
        e = source.direction_energy(axis, axis)
        center = source.direction_frequency_brilliance(Vector(), axis, axis, e)
        w = source.lp.get_width(0.0)
        off = source.direction_frequency_brilliance(Vector(3.0 * w, 0.0, 0.0), axis, axis, e)
        assert center > 0.0
        assert off < 1e-2 * center

    def test_polarization_brilliance_intensity(self, source, axis):
        e = source.direction_energy(axis, axis)
        stokes = source.direction_frequency_polarization_brilliance(Vector(), axis, axis, e)
        assert stokes[0] == pytest.approx(source.direction_frequency_brilliance(Vector(), axis, axis, e))
        np.testing.assert_allclose(stokes[1:], np.array(source.lp.polarization) * stokes[0])

    def test_spread_brilliance_with_small_spread(self, pulse, bunch, fast_settings, axis):
        bunch.set_eps(1.0e-12)
        src = LinearThomsonSource(pulse, bunch, settings=fast_settings, calculate=False)
        src.calculate_total_flux()
        e = src.direction_energy(axis, axis)
        expected = src.direction_frequency_brilliance_no_spread(Vector(), axis, axis, e)
        src.e_spread = True
        assert src.direction_frequency_brilliance(Vector(), axis, axis, e) == pytest.approx(expected, rel=1e-2)
        stokes = src.direction_frequency_polarization_brilliance(Vector(), axis, axis, e)
        assert stokes[0] == pytest.approx(expected, rel=1e-2)
