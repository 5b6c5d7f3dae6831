"""Случайные амплитуды и фазы поля по параметрам Стокса"""
import cmath
import math
from typing import List, Optional, Sequence

import numpy as np

from .exceptions import InvalidConfigurationError
from .vector import Vector

# Порог, ниже которого знаменатель p + ksi1 считается нулевым
DEGENERATE_THRESHOLD = 1.0e-12


def get_polarization(ksi: Sequence[float], rng: Optional[np.random.Generator] = None) -> List[float]:
    """
    Амплитуды и фазы двух компонент поля для состояния поляризации ksi.

    Фазы случайны, но в среднем по ансамблю |E1|^2 = (1 - ksi1) / 2,
    |E2|^2 = (1 + ksi1) / 2 и 2 * E1 * conj(E2) = ksi2 + i * ksi3.
    Вектор с |ksi| > 1 приводится к единичной длине.

    :param ksi: (ksi1, ksi2, ksi3)
    :return: [|E1|, |E2|, arg E1, arg E2]
    """
    if ksi is None or len(ksi) != 3:
        raise InvalidConfigurationError("Polarization needs exactly three Stokes parameters")
    rng = rng or np.random.default_rng()
    ksi1, ksi2, ksi3 = (float(k) for k in ksi)
    p = math.sqrt(ksi1 * ksi1 + ksi2 * ksi2 + ksi3 * ksi3)
    if p > 1.0:
        ksi1, ksi2, ksi3 = ksi1 / p, ksi2 / p, ksi3 / p
        p = 1.0

    phase1 = 2.0 * math.pi * rng.random()
    phase2 = 2.0 * math.pi * rng.random()

    if p + ksi1 <= DEGENERATE_THRESHOLD:
        # Поляризация вдоль первой оси или неполяризованное излучение
        return [math.sqrt(max(0.0, (1.0 - ksi1) / 2.0)),
                math.sqrt(max(0.0, (1.0 + ksi1) / 2.0)),
                phase1, phase2]

    k1 = math.sqrt(1.0 - p)
    k2 = math.sqrt(1.0 + p)
    coef = math.sqrt((p + ksi1) / p) / 2.0
    ksi_d = complex(ksi2, ksi3)
    p1 = cmath.exp(1j * phase1)
    p2 = cmath.exp(1j * phase2)

    e1 = (p1 * k1 + p2 * ksi_d * k2 / (p + ksi1)) * coef
    e2 = (p2 * k2 - p1 * ksi_d.conjugate() * k1 / (p + ksi1)) * coef
    return [abs(e1), abs(e2), cmath.phase(e1), cmath.phase(e2)]


def stokes_from_amplitudes(amplitudes: np.ndarray) -> np.ndarray:
    """
    Средние параметры Стокса ансамбля лучей

    :param amplitudes: массив формы (N, 4) из строк [|E1|, |E2|, arg E1, arg E2]
    :return: (ksi1, ksi2, ksi3), нормированные на среднюю интенсивность
    """
    a = np.atleast_2d(np.asarray(amplitudes, dtype=float))
    e1 = a[:, 0] * np.exp(1j * a[:, 2])
    e2 = a[:, 1] * np.exp(1j * a[:, 3])
    intensity = np.mean(np.abs(e1) ** 2 + np.abs(e2) ** 2)
    if intensity == 0.0:
        return np.zeros(3)
    ksi1 = np.mean(np.abs(e2) ** 2 - np.abs(e1) ** 2)
    cross = 2.0 * np.mean(e1 * np.conj(e2))
    return np.array([ksi1, cross.real, cross.imag]) / intensity


def get_3d_transform(n: Vector, n0: Vector) -> np.ndarray:
    """
    Матрица поворота, переводящая единичный вектор n0 в единичный вектор n

    R = I + K + K^2 / (1 + c), где K = n x n0^T - n0 x n^T, c = (n, n0)
    """
    c = n.inner_product(n0)
    a = n.to_array()
    b = n0.to_array()
    identity = np.eye(3)
    if c >= 1.0 - DEGENERATE_THRESHOLD:
        return identity
    if c <= -1.0 + DEGENERATE_THRESHOLD:
        # Поворот на pi вокруг оси, перпендикулярной n0
        trial = np.array([1.0, 0.0, 0.0]) if abs(b[0]) < 0.9 else np.array([0.0, 1.0, 0.0])
        axis = np.cross(b, trial)
        axis /= np.linalg.norm(axis)
        return 2.0 * np.outer(axis, axis) - identity
    k = np.outer(a, b) - np.outer(b, a)
    return identity + k + k @ k / (1.0 + c)
