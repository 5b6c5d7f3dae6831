"""Тесты синтеза поляризации и матрицы поворота"""
import math

import numpy as np
import pytest

from thomsonsource import InvalidConfigurationError, Vector, get_3d_transform, get_polarization, stokes_from_amplitudes


def _ensemble(ksi, rng, size=20000):
    return np.array([get_polarization(ksi, rng) for _ in range(size)])


class TestGetPolarization:

    @pytest.mark.parametrize("ksi", [(0.3, -0.4, 0.5), (0.0, 0.0, 0.0), (1.0, 0.0, 0.0),
                                     (-1.0, 0.0, 0.0), (0.0, 0.0, 1.0), (0.6, 0.8, 0.0)])
    def test_unit_intensity(self, ksi, rng):
        for _ in range(50):
            pol = get_polarization(ksi, rng)
            assert pol[0] ** 2 + pol[1] ** 2 == pytest.approx(1.0)
            assert -math.pi <= pol[2] <= 2.0 * math.pi

    @pytest.mark.parametrize("ksi", [(0.3, -0.4, 0.5), (0.0, 0.9, 0.0), (-0.2, 0.1, -0.7)])
    def test_ensemble_recovers_stokes(self, ksi, rng):
        np.testing.assert_allclose(stokes_from_amplitudes(_ensemble(ksi, rng)), ksi, atol=0.03)

    def test_unpolarized(self, rng):
        np.testing.assert_allclose(stokes_from_amplitudes(_ensemble((0.0, 0.0, 0.0), rng)),
                                   [0.0, 0.0, 0.0], atol=0.03)

    def test_first_axis_polarization(self, rng):
        pol = get_polarization((-1.0, 0.0, 0.0), rng)
        assert pol[0] == pytest.approx(1.0)
        assert pol[1] == pytest.approx(0.0)

    def test_rescaled_above_unit_degree(self, rng):
        pol = get_polarization((2.0, 0.0, 0.0), rng)
        assert pol[0] == pytest.approx(0.0, abs=1e-12)
        assert pol[1] == pytest.approx(1.0)

    def test_invalid_length(self, rng):
        with pytest.raises(InvalidConfigurationError):
            get_polarization((1.0, 0.0), rng)

    def test_seeded_generator_is_reproducible(self):
        a = get_polarization((0.1, 0.2, 0.3), np.random.default_rng(5))
        b = get_polarization((0.1, 0.2, 0.3), np.random.default_rng(5))
        assert a == b

    def test_stokes_of_empty_field(self):
        np.testing.assert_allclose(stokes_from_amplitudes(np.zeros((3, 4))), [0.0, 0.0, 0.0])


class TestTransform:

    @pytest.mark.parametrize("n", [Vector(0.0, 0.0, 1.0), Vector(0.3, 0.1, 0.9),
                                   Vector(1.0, 0.0, 0.0), Vector(-0.2, 0.9, 0.1)])
    def test_maps_axis_to_direction(self, n):
        n = n.normalize()
        n0 = Vector(0.0, 1.0, 0.0)
        t = get_3d_transform(n, n0)
        np.testing.assert_allclose(t @ n0.to_array(), n.to_array(), atol=1e-12)
        np.testing.assert_allclose(t @ t.T, np.eye(3), atol=1e-12)
        assert np.linalg.det(t) == pytest.approx(1.0)

    def test_identity_for_same_vector(self):
        n = Vector(0.0, 1.0, 0.0)
        np.testing.assert_array_equal(get_3d_transform(n, n), np.eye(3))

    def test_antiparallel_vectors(self):
        n0 = Vector(0.0, 1.0, 0.0)
        t = get_3d_transform(-n0, n0)
        np.testing.assert_allclose(t @ n0.to_array(), [0.0, -1.0, 0.0], atol=1e-12)
        np.testing.assert_allclose(t @ t.T, np.eye(3), atol=1e-12)
        assert np.linalg.det(t) == pytest.approx(1.0)
