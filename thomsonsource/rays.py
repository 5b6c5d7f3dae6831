"""
Генерация лучей методом отбора из шестимерной плотности
(положение, направление, энергия) для трассировки в Shadow.
"""
import concurrent.futures
import logging
import math
import threading
from typing import TYPE_CHECKING, Callable, Optional

import numpy as np

from .cancellation import CancellationToken, ensure_token
from .constants import HC, NUMBER_OF_COLUMNS, RAY_MULT
from .exceptions import InvalidConfigurationError
from .polarization import get_3d_transform, get_polarization
from .vector import Vector

if TYPE_CHECKING:
    from .source import AbstractThomsonSource

logger = logging.getLogger(__name__)

# Ось, вдоль которой в Shadow направлен пучок
SHADOW_AXIS = Vector(0.0, 1.0, 0.0)


class RaySampler:
    """
    Генератор лучей для одного потока.

    Собственный генератор случайных чисел; счетчики и частичный поток
    накапливаются в общих потокобезопасных объектах источника.
    """

    def __init__(self, source: 'AbstractThomsonSource', rng: Optional[np.random.Generator] = None):
        self.source = source
        self._rng = rng or np.random.default_rng()

    def _uniform(self) -> float:
        """Случайное число в [-1, 1)"""
        return 2.0 * self._rng.random() - 1.0

    def get_ray(self, token: Optional[CancellationToken] = None) -> np.ndarray:
        """
        Один случайный луч из 18 колонок

        :raises CalculationInterrupted: генерация остановлена до принятия луча
        """
        token = ensure_token(token)
        src = self.source
        eb = src.eb
        lp = src.lp
        ray = np.zeros(NUMBER_OF_COLUMNS)
        axis = Vector(0.0, 0.0, 1.0)

        wx = max(eb.get_x_width(0.0), lp.get_width(0.0))
        wy = max(eb.get_y_width(0.0), lp.get_width(0.0))
        length = max(eb.length, lp.length)
        e_min = src.min_energy
        e_max = src.max_energy

        # Огибающая метода отбора - плотность в центре, на оси, при максимальной энергии
        peak_energy = src.direction_energy(axis, axis)
        factor = (32.0 * RAY_MULT ** 3 * wx * wy * length
                  * src.ray_x_angle_range * src.ray_y_angle_range * (e_max - e_min))
        prob0 = src.direction_frequency_volume_polarization_no_spread(Vector(), axis, axis, peak_energy)[0] / peak_energy
        if src.e_spread:
            prob0 *= eb.angle_distribution(0.0, 0.0)
            factor *= 4.0 * RAY_MULT ** 2 * eb.get_x_spread() * eb.get_y_spread()

        local_sum = 0.0
        while True:
            token.raise_if_cancelled("get_ray")
            ray[0] = RAY_MULT * self._uniform() * wx
            ray[2] = RAY_MULT * self._uniform() * wy
            ray[1] = RAY_MULT * self._uniform() * length
            r = Vector(ray[0], ray[2], ray[1])

            n = Vector(src.ray_x_angle_range * self._uniform(),
                       src.ray_y_angle_range * self._uniform(), 1.0).normalize()
            ray[3] = n.x
            ray[5] = n.y
            ray[4] = n.z
            ray[10] = self._rng.random() * (e_max - e_min) + e_min

            if src.e_spread:
                thetax = RAY_MULT * eb.get_x_spread() * self._uniform()
                thetay = RAY_MULT * eb.get_y_spread() * self._uniform()
                v = Vector(thetax, thetay, math.sqrt(1.0 - thetax * thetax - thetay * thetay))
                weight = eb.angle_distribution(thetax, thetay)
            else:
                v = axis
                weight = 1.0

            if src.ksi is None:
                pol_param = src.direction_frequency_volume_polarization_no_spread(r, n, v, ray[10])
            else:
                pol_param = [src.direction_frequency_volume_flux_no_spread(r, n, v, ray[10])] + list(src.ksi)
            prob = pol_param[0] * weight / ray[10]

            src.monte_carlo_counter.increment()
            if not math.isnan(prob):
                local_sum += prob
                ratio = prob / prob0 if prob0 > 0.0 else 1.0
                if prob > 0.0 and self._rng.random() <= min(ratio, 1.0):
                    break

        # Вектор n с продольной осью y, как в Shadow
        n = Vector(ray[3], ray[4], ray[5])
        T = get_3d_transform(n, SHADOW_AXIS)
        if src.ksi is not None:
            pol = get_polarization(src.ksi, self._rng)
        else:
            pol = get_polarization([s / pol_param[0] for s in pol_param[1:]], self._rng)

        ray[6:9] = T @ np.array([1.0, 0.0, 0.0]) * pol[0]
        ray[15:18] = T @ np.array([0.0, 0.0, 1.0]) * pol[1]
        ray[9] = 1.0
        ray[13] = pol[2]
        ray[14] = pol[3]

        src.partial_flux_adder.add(local_sum * factor)
        src.ray_counter.increment()
        return ray


def to_shadow_units(ray: np.ndarray, index: int) -> np.ndarray:
    """Перевод луча в единицы Shadow: сантиметры и волновое число в см^-1"""
    ray[0:3] *= 1.0e2
    ray[10] *= 1.0e-2 / HC
    ray[11] = index
    return ray


def generate_rays(source: 'AbstractThomsonSource', number: int, token: Optional[CancellationToken] = None,
                  progress: Optional[Callable[[int], None]] = None, seed: Optional[int] = None,
                  shadow_units: bool = False) -> np.ndarray:
    """
    Генерация number лучей в нескольких потоках.

    Число лучей округляется вниз до кратного числу потоков. У каждого
    потока свой генератор случайных чисел. Счетчики источника
    сбрасываются перед запуском.

    :param progress: вызывается с процентом готовности после каждого луча
    :return: массив формы (N, 18)
    :raises CalculationInterrupted: генерация остановлена
    """
    token = ensure_token(token)
    if number < 1:
        raise InvalidConfigurationError("Number of rays must be positive")
    if source.min_energy >= source.max_energy:
        raise InvalidConfigurationError("Minimal ray energy must be lower than maximal")
    threads = min(source.thread_number, number)
    per_thread = number // threads
    total = per_thread * threads
    rays = np.zeros((total, NUMBER_OF_COLUMNS))
    source.reset_counters()
    logger.info("Generating %d rays in %d threads", total, threads)

    # Ошибка в одном потоке останавливает остальные
    failed = threading.Event()

    def work(block: int, rng: np.random.Generator) -> None:
        sampler = RaySampler(source, rng)
        for i in range(per_thread):
            if failed.is_set():
                return
            ray = sampler.get_ray(token)
            if shadow_units:
                to_shadow_units(ray, block * per_thread + i)
            rays[block * per_thread + i] = ray
            if progress is not None:
                progress(100 * source.ray_counter.get() // total)

    generators = [np.random.default_rng(s) for s in np.random.SeedSequence(seed).spawn(threads)]
    with concurrent.futures.ThreadPoolExecutor(max_workers=threads) as executor:
        futures = [executor.submit(work, block, rng) for block, rng in enumerate(generators)]
        try:
            for future in concurrent.futures.as_completed(futures):
                future.result()
        except Exception:
            failed.set()
            for future in futures:
                future.cancel()
            logger.info("Ray generation interrupted after %d rays", source.ray_counter.get())
            raise

    logger.info("Generated %d rays, partial flux %.4e ph/s", total, source.partial_flux)
    return rays
