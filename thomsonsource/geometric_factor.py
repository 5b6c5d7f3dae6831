"""Геометрический фактор - интеграл объемной плотности по области взаимодействия"""
import concurrent.futures
import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Tuple

import numpy as np

from .accumulators import DoubleAdder
from .cancellation import CancellationToken, ensure_token
from .constants import GF_MULT
from .exceptions import CalculationInterrupted, InvalidConfigurationError
from .vector import Vector

if TYPE_CHECKING:
    from .source import AbstractThomsonSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeometricFactorResult:
    """Результат Монте-Карло оценки геометрического фактора"""
    value: float
    samples: int
    complete: bool = True


def sampling_box(source: 'AbstractThomsonSource') -> Tuple[float, float, float]:
    """Полуширины области выборки по x, y и z, центр в точке shift/2"""
    eb = source.eb
    lp = source.lp
    shift = eb.shift
    wl = lp.get_width(0.0)
    wdx = GF_MULT * max(eb.get_x_width(0.0) + abs(shift.x) / 2.0, wl + abs(shift.x) / 2.0)
    wdy = GF_MULT * max(eb.get_y_width(0.0) + abs(shift.y) / 2.0, wl + abs(shift.y) / 2.0)
    length = GF_MULT * max(eb.length + abs(shift.z) / 2.0, lp.length + abs(shift.z) / 2.0)
    return wdx, wdy, length


def _worker(source: 'AbstractThomsonSource', rng: np.random.Generator, box: Tuple[float, float, float],
            it_number: int, total: DoubleAdder, token: CancellationToken) -> int:
    """Сумма объемной плотности по it_number случайным точкам, возвращает число точек"""
    wdx, wdy, length = box
    shift = source.eb.shift
    cx, cy, cz = shift.x / 2.0, shift.y / 2.0, shift.z / 2.0
    psum = 0.0
    done = 0
    for _ in range(it_number):
        if token.cancelled:
            break
        u = 2.0 * rng.random(3) - 1.0
        psum += source.volume_flux(Vector(cx + wdx * u[0], cy + wdy * u[1], cz + length * u[2]))
        done += 1
    total.add(psum)
    return done


def estimate(source: 'AbstractThomsonSource', token: Optional[CancellationToken] = None,
             allow_partial: bool = False, seed: Optional[int] = None) -> GeometricFactorResult:
    """
    Многопоточная Монте-Карло оценка геометрического фактора.

    Каждый поток получает свой генератор случайных чисел, порожденный
    из общего SeedSequence, суммирует значения локально и добавляет
    сумму в общий сумматор.

    :param allow_partial: при остановке вернуть оценку по выбранным точкам
    :raises CalculationInterrupted: расчет остановлен и allow_partial ложно
    """
    token = ensure_token(token)
    if source.np_geometric_factor < 1:
        raise InvalidConfigurationError("Number of geometric factor samples must be positive")
    threads = source.thread_number
    it_number = max(1, int(round(source.np_geometric_factor / threads)))
    box = sampling_box(source)
    total = DoubleAdder()
    generators = [np.random.default_rng(s) for s in np.random.SeedSequence(seed).spawn(threads)]

    with concurrent.futures.ThreadPoolExecutor(max_workers=threads) as executor:
        futures = [executor.submit(_worker, source, rng, box, it_number, total, token)
                   for rng in generators]
        samples = sum(f.result() for f in futures)

    complete = samples == it_number * threads
    if not complete:
        if not allow_partial:
            raise CalculationInterrupted("Geometric factor calculation interrupted!")
        logger.info("Geometric factor calculation interrupted after %d of %d samples",
                    samples, it_number * threads)
    if samples == 0:
        return GeometricFactorResult(value=source.geometric_factor, samples=0, complete=False)

    wdx, wdy, length = box
    value = 8.0 * wdx * wdy * length * total.sum() / samples
    return GeometricFactorResult(value=value, samples=samples, complete=complete)


def approximate(source: 'AbstractThomsonSource') -> float:
    """
    Приближенный геометрический фактор без учета эффекта песочных часов.

    Принимает значения от 0 до 1.
    """
    cs = source.lp.direction.inner_product(Vector(0.0, 0.0, 1.0))
    cs2 = (1.0 + cs) / 2.0
    sn2 = (1.0 - cs) / 2.0
    w2 = source.lp.get_width2(0.0) + source.eb.get_width2(0.0)
    l2 = source.lp.length ** 2 + source.eb.length ** 2
    denominator = (l2 * sn2 + w2 * cs2) * cs2
    if denominator <= 0.0:
        return 0.0
    return math.sqrt(w2 / denominator)
