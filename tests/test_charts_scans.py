"""Тесты массивов графиков и сканирования параметров"""
import math

import numpy as np
import pytest

from thomsonsource import CalculationInterrupted, CancellationToken, InvalidConfigurationError, Vector
from thomsonsource.charts import FunctionColorChartParam, LinearChartParam
from thomsonsource.scans import (GEOMETRY_PARAMETERS, brilliance_scan, energy_map, flux_map,
                                 geometric_factor_scan)


class TestLinearChartParam:

    def test_setup_from_functions(self):
        chart = LinearChartParam()
        chart.setup_from_functions([lambda x: x * x, lambda x: -x], 5, 1.0, -2.0)
        assert chart.data.shape == (2, 5)
        np.testing.assert_allclose(chart.abscissas(), [-2.0, -1.0, 0.0, 1.0, 2.0])
        np.testing.assert_allclose(chart.data[0], [4.0, 1.0, 0.0, 1.0, 4.0])
        assert chart.umax == 4.0
        assert chart.umin == -2.0

    def test_setup_from_data(self):
        data = np.arange(12.0).reshape(3, 4)
        row = LinearChartParam()
        row.setup_from_data(data, 1, True, 4, 0.5, 0.0)
        np.testing.assert_allclose(row.data[0], [4.0, 5.0, 6.0, 7.0])
        column = LinearChartParam()
        column.setup_from_data(data, 2, False, 3, 0.5, 0.0)
        np.testing.assert_allclose(column.data[0], [2.0, 6.0, 10.0])
        assert column.umin == 2.0
        assert column.umax == 10.0

    def test_cancelled_setup_keeps_old_data(self):
        chart = LinearChartParam()
        token = CancellationToken()
        token.cancel()
        with pytest.raises(CalculationInterrupted):
            chart.setup_from_functions([math.sin], 10, 0.1, 0.0, token)
        assert chart.data is None


class TestColorChartParam:

    def test_grid_centered_on_offset(self):
        chart = FunctionColorChartParam(lambda x, y: x + 2.0 * y)
        chart.setup(4, 4, 1.0, 0.5, 1.0, 0.0)
        assert chart.udata.shape == (4, 4)
        assert chart.udata[2, 2] == pytest.approx(1.0)
        assert chart.umax == chart.udata[2, 2]
        assert chart.udata[0, 0] == pytest.approx(1.0 - 2.0 + 2.0 * (-1.0))

    def test_flux_map_center(self, source, axis):
        chart = flux_map(source, 4, 4, 1.0e-3, 1.0e-3)
        assert chart.umax == pytest.approx(source.direction_flux(axis, axis))
        assert np.all(chart.udata <= chart.umax * (1.0 + 1e-12))

    def test_energy_map_center(self, source, axis):
        chart = energy_map(source, 2, 2, 1.0e-3, 1.0e-3)
        assert chart.umax == pytest.approx(source.direction_energy(axis, axis))


class TestScans:

    def test_brilliance_energy_scan(self, source, axis):
        peak = source.direction_energy(axis, axis)
        values = [0.99 * peak, peak]
        res = brilliance_scan(source, "energy", values)
        assert res.shape == (2,)
        assert res[1] == pytest.approx(source.direction_frequency_brilliance(Vector(), axis, axis, peak))
        assert res[0] < res[1]

    def test_brilliance_angle_scan_defaults_to_direction_energy(self, source):
        gamma = source.eb.gamma
        progress = []
        res = brilliance_scan(source, "observation-angle", [0.0, 1.0 / gamma], progress=progress.append)
        assert np.all(res > 0.0)
        assert progress == [50, 100]

    def test_brilliance_delay_scan(self, source):
        res = brilliance_scan(source, "delay", [0.0, 10.0 * source.lp.length])
        assert res[0] > res[1]

    def test_geometric_factor_angle_scan(self, source):
        direction = source.lp.direction.copy()
        source.np_geometric_factor = 2000
        res = geometric_factor_scan(source, "angle", [0.02, 0.1, 0.3], seed=11)
        assert res.shape == (2, 3)
        assert np.all(res[0] > 0.0)
        assert res[1, 0] > res[1, 1] > res[1, 2]
        assert source.lp.direction == direction

    def test_scan_does_not_mutate_source(self, source):
        before = source.eb.shift.copy()
        brilliance_scan(source, "z-shift", [1.0e-4])
        assert source.eb.shift == before

    @pytest.mark.parametrize("scan", [brilliance_scan, geometric_factor_scan])
    def test_unknown_parameter(self, source, scan):
        with pytest.raises(InvalidConfigurationError):
            scan(source, "colour", [1.0])

    def test_observation_parameter_not_a_geometry(self, source):
        with pytest.raises(InvalidConfigurationError):
            geometric_factor_scan(source, "energy", [1.0])

    def test_known_geometry_parameters(self):
        assert {"angle", "delay", "z-shift", "beta", "emittance", "rayleigh", "waist",
                "energy-spread"} == set(GEOMETRY_PARAMETERS)

    def test_cancelled_scan(self, source):
        token = CancellationToken()
        token.cancel()
        with pytest.raises(CalculationInterrupted):
            brilliance_scan(source, "energy", [1.0e-15], token=token)
