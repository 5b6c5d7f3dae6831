import logging
import math
import os
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, List, Optional, Sequence, Tuple

from . import brilliance, geometric_factor, spread
from .accumulators import AtomicCounter, DoubleAdder, FallbackStatistics
from .cancellation import CancellationToken
from .constants import E, NUMBER_OF_POL_PARAM, SIGMA_T
from .electron_bunch import ElectronBunch
from .exceptions import InvalidConfigurationError
from .laser_pulse import LaserPulse
from .vector import Vector

if TYPE_CHECKING:
    from .config import SourceSettings
    from .geometric_factor import GeometricFactorResult

logger = logging.getLogger(__name__)


class AbstractThomsonSource(ABC):
    """
    Источник рентгеновского излучения на основе томсоновского рассеяния.

    Наследники реализуют четыре элементарные функции сечения
    (спектральный поток, параметры Стокса, угловой поток и энергию
    в направлении), все остальное - объемная плотность, усреднение по
    угловому разбросу, яркость и генерация лучей - выражено через них.
    """

    def __init__(self, laser_pulse: LaserPulse, electron_bunch: ElectronBunch,
                 settings: Optional['SourceSettings'] = None, calculate: bool = True):
        if laser_pulse is None or electron_bunch is None:
            raise InvalidConfigurationError("Both a laser pulse and an electron bunch are required")
        self.lp = laser_pulse
        self.eb = electron_bunch

        # Параметры генерации лучей
        self.ray_x_angle_range = 3.0e-4
        self.ray_y_angle_range = 3.0e-4
        self.min_energy = 25.0e3 * E
        self.max_energy = 35.0e3 * E

        self.np_geometric_factor = 50000
        self.shift_factor = 1.0
        self.precision = 1.0e-3
        self.e_spread = False
        self.ksi: Optional[List[float]] = None
        self._thread_number = os.cpu_count() or 1

        # Кэшированные величины, пересчитываются только явно
        self.total_flux = 0.0
        self.geometric_factor = 1.0

        # Счетчики генерации лучей и статистика замен нулем
        self.ray_counter = AtomicCounter()
        self.monte_carlo_counter = AtomicCounter()
        self.partial_flux_adder = DoubleAdder()
        self.fallback_stats = FallbackStatistics()

        if settings is not None:
            settings.apply(self)
        if calculate:
            self.calculate_total_flux()
            self.calculate_geometric_factor()

    def copy(self) -> 'AbstractThomsonSource':
        """Глубокая копия источника с новыми счетчиками"""
        new_source = object.__new__(type(self))
        new_source.__dict__.update(self.__dict__)
        new_source.lp = self.lp.copy()
        new_source.eb = self.eb.copy()
        new_source.ksi = list(self.ksi) if self.ksi is not None else None
        new_source.ray_counter = AtomicCounter()
        new_source.monte_carlo_counter = AtomicCounter()
        new_source.partial_flux_adder = DoubleAdder()
        new_source.fallback_stats = FallbackStatistics()
        return new_source

    # ------------------------------------------
    # Свойства
    # ------------------------------------------

    @property
    def laser_pulse(self) -> LaserPulse:
        return self.lp

    @property
    def electron_bunch(self) -> ElectronBunch:
        return self.eb

    @property
    def thread_number(self) -> int:
        """Число рабочих потоков"""
        return self._thread_number

    @thread_number.setter
    def thread_number(self, value: int) -> None:
        if value is None or int(value) < 1:
            raise InvalidConfigurationError(f"Thread number must be positive, got {value}")
        self._thread_number = int(value)

    @property
    def partial_flux(self) -> float:
        """Оценка полного потока в диапазоне генерации лучей"""
        iterations = self.monte_carlo_counter.get()
        if iterations == 0:
            return 0.0
        return self.partial_flux_adder.sum() / iterations

    @property
    def acceptance_ratio(self) -> float:
        """Доля принятых итераций метода отбора"""
        iterations = self.monte_carlo_counter.get()
        if iterations == 0:
            return 0.0
        return self.ray_counter.get() / iterations

    def reset_counters(self) -> None:
        self.ray_counter.reset()
        self.monte_carlo_counter.reset()
        self.partial_flux_adder.reset()

    def set_ray_ranges(self, xangle: float, yangle: float, min_en: float, max_en: float) -> None:
        """Установка диапазонов для генерации лучей"""
        if min_en >= max_en:
            raise InvalidConfigurationError("Minimal ray energy must be lower than maximal")
        self.ray_x_angle_range = xangle
        self.ray_y_angle_range = yangle
        self.min_energy = min_en
        self.max_energy = max_en

    def set_polarization(self, ksi: Optional[Sequence[float]]) -> None:
        """
        Задать параметры Стокса лучей вместо рассчитанных по модели

        :param ksi: (ksi1, ksi2, ksi3) или None
        """
        if ksi is None:
            self.ksi = None
            return
        if len(ksi) != 3:
            raise InvalidConfigurationError("Stokes override needs exactly three parameters")
        self.ksi = [float(k) for k in ksi]

    # ------------------------------------------
    # Полный поток и геометрический фактор
    # ------------------------------------------

    def overlap_widths2(self) -> Optional[Tuple[float, float]]:
        """
        Суммы квадратов ширин импульса и сгустка в перетяжке по осям X и Y.

        None, если геометрия вырождена (нулевая бета-функция, рэлеевская
        длина или ширина).
        """
        try:
            w2l = self.lp.get_width2(0.0)
            w2x = w2l + self.eb.get_x_width2(0.0)
            w2y = w2l + self.eb.get_y_width2(0.0)
        except ZeroDivisionError:
            return None
        if w2x <= 0.0 or w2y <= 0.0:
            return None
        return w2x, w2y

    def calculate_total_flux(self) -> float:
        """Расчет полного потока излучения в линейном приближении"""
        widths = self.overlap_widths2()
        if widths is None:
            self.total_flux = 0.0
        else:
            w2x, w2y = widths
            self.total_flux = (SIGMA_T * self.eb.number * self.lp.photon_number * self.lp.fq
                               / math.pi / math.sqrt(w2x * w2y))
        logger.debug("Total flux: %.4e ph/s", self.total_flux)
        return self.total_flux

    def calculate_angle_total_flux(self, max_angle: float) -> float:
        """Поток в конусе с полууглом max_angle"""
        gamma2 = self.eb.gamma ** 2
        v = math.sqrt(1.0 - 1.0 / gamma2)
        cs = math.cos(max_angle)
        return (3.0 / 4.0 / gamma2 * ((1.0 - cs) / (1.0 - v * cs) / (1.0 - v)
                * (5.0 / 6.0 + 1.0 / 6.0 / v / v
                   - 1.0 / 6.0 / gamma2 / v / v * (1.0 - v * v * cs) / (1.0 - v) / (1.0 - v * cs))
                + 1.0 / 6.0 / gamma2 / v * (1.0 - cs * cs) / (1.0 - v * cs) ** 3)
                * self.total_flux * self.geometric_factor)

    def calculate_geometric_factor(self, token: Optional[CancellationToken] = None,
                                   allow_partial: bool = False,
                                   seed: Optional[int] = None) -> 'GeometricFactorResult':
        """
        Монте-Карло расчет геометрического фактора

        :param allow_partial: при остановке сохранить оценку по уже выбранным точкам
        :raises CalculationInterrupted: при остановке, если allow_partial ложно
        """
        result = geometric_factor.estimate(self, token=token, allow_partial=allow_partial, seed=seed)
        self.geometric_factor = result.value
        if result.complete:
            logger.info("Geometric factor: %.5f (%d samples)", result.value, result.samples)
        else:
            logger.info("Geometric factor estimated from %d samples only: %.5f",
                        result.samples, result.value)
        return result

    def approx_geometric_factor(self) -> float:
        """Приближенный геометрический фактор без учета эффекта песочных часов"""
        return geometric_factor.approximate(self)

    # ------------------------------------------
    # Объемная плотность
    # ------------------------------------------

    def volume_flux(self, r: Optional[Vector] = None) -> float:
        """
        Нормированная плотность перекрытия сгустка и импульса в точке r

        :param r: точка в лабораторной системе, None - начало координат
        """
        if r is None:
            r = Vector()
        length = math.sqrt(self.lp.length ** 2 + self.eb.length ** 2)
        widths = self.overlap_widths2()
        if length == 0.0 or widths is None:
            return 0.0
        w2x, w2y = widths
        r1 = self.lp.get_transformed_coordinates(r)
        K = ((r.z - r1.z - self.eb.shift.z + self.lp.delay) / length) ** 2
        try:
            u = (2.0 * math.sqrt(math.pi) * math.sqrt(w2x * w2y) / length * math.exp(-K)
                 * self.eb.t_spatial_distribution(r) * self.lp.t_spatial_distribution(r1))
        except ZeroDivisionError:
            return 0.0
        return self.nan_to_zero(u, "volume_flux")

    def nan_to_zero(self, value: float, where: str) -> float:
        """NaN заменяется нулем, замена учитывается в fallback_stats"""
        if math.isnan(value):
            self.fallback_stats.record(FallbackStatistics.NAN_SUBSTITUTED, where)
            return 0.0
        return value

    # ------------------------------------------
    # Элементарные функции сечения
    # ------------------------------------------

    @abstractmethod
    def direction_frequency_flux_no_spread(self, n: Vector, v: Vector, e: float) -> float:
        """Спектральная плотность потока для моноэнергетического направленного пучка"""

    @abstractmethod
    def direction_frequency_polarization_no_spread(self, n: Vector, v: Vector, e: float) -> List[float]:
        """Плотности параметров Стокса (I, I*ksi1, I*ksi2, I*ksi3)"""

    @abstractmethod
    def direction_flux(self, n: Vector, v: Vector) -> float:
        """Угловая плотность потока, проинтегрированная по энергии"""

    @abstractmethod
    def direction_energy(self, n: Vector, v: Vector) -> float:
        """Энергия рентгеновского фотона в направлении n"""

    def _stokes_from_matrix(self, n: Vector, v: Vector,
                            m11: float, m12: float, m22: float) -> List[float]:
        """
        Параметры Стокса в системе наблюдателя по элементам матрицы рассеяния
        и поляризации лазера
        """
        vn = v.inner_product(n)
        norm = math.sqrt(max(0.0, (1.0 - vn * vn) * (1.0 - n.x * n.x)))
        if norm != 0.0:
            cs = (v.x - n.x * vn) / norm
            sn = (n.y * v.z - n.z * v.y) / norm
        else:
            cs = 1.0
            sn = 0.0
        cs2 = 2.0 * cs * cs - 1.0
        sn2 = 2.0 * sn * cs
        cs2cs2 = cs2 * cs2
        sn2sn2 = sn2 * sn2
        cs2sn2 = cs2 * sn2
        p = self.lp.polarization

        stokes = [
            (m11 + m22 - (cs2 * p[0] + sn2 * p[1]) * (m11 - m22)) / 2.0,
            (cs2 * (m22 - m11) + p[0] * (cs2cs2 * (m11 + m22) + 2.0 * sn2sn2 * m12)
             + p[1] * cs2sn2 * (m11 + m22 - 2.0 * m12)) / 2.0,
            (sn2 * (m22 - m11) + p[1] * (sn2sn2 * (m11 + m22) + 2.0 * cs2cs2 * m12)
             + p[0] * cs2sn2 * (m11 + m22 - 2.0 * m12)) / 2.0,
            p[2] * m12,
        ]
        return self.sanitize_stokes(stokes, "stokes")

    def sanitize_stokes(self, stokes: List[float], where: str) -> List[float]:
        """Если интенсивность не положительна или NaN, все параметры равны нулю"""
        if math.isnan(stokes[0]):
            self.fallback_stats.record(FallbackStatistics.NAN_SUBSTITUTED, where)
            return [0.0] * NUMBER_OF_POL_PARAM
        if stokes[0] <= 0.0:
            return [0.0] * NUMBER_OF_POL_PARAM
        return [self.nan_to_zero(s, where) for s in stokes]

    # ------------------------------------------
    # Диспетчеры с учетом и без учета разброса
    # ------------------------------------------

    def direction_frequency_flux(self, n: Vector, v: Vector, e: float,
                                 token: Optional[CancellationToken] = None) -> float:
        if self.e_spread:
            return self.direction_frequency_flux_spread(n, v, e, token)
        return self.direction_frequency_flux_no_spread(n, v, e)

    def direction_frequency_polarization(self, n: Vector, v: Vector, e: float,
                                         token: Optional[CancellationToken] = None) -> List[float]:
        if self.e_spread:
            return self.direction_frequency_polarization_spread(n, v, e, token)
        return self.direction_frequency_polarization_no_spread(n, v, e)

    def direction_frequency_flux_spread(self, n: Vector, v0: Vector, e: float,
                                        token: Optional[CancellationToken] = None) -> float:
        """Спектральная плотность потока, усредненная по угловому разбросу электронов"""
        return spread.flux_spread(self, n, v0, e, token)

    def direction_frequency_polarization_spread(self, n: Vector, v0: Vector, e: float,
                                                token: Optional[CancellationToken] = None) -> List[float]:
        """Параметры Стокса, усредненные по угловому разбросу электронов"""
        return spread.polarization_spread(self, n, v0, e, token)

    def direction_frequency_volume_flux_no_spread(self, r: Optional[Vector], n: Vector,
                                                  v: Vector, e: float) -> float:
        return self.direction_frequency_flux_no_spread(n, v, e) * self.volume_flux(r)

    def direction_frequency_volume_polarization_no_spread(self, r: Optional[Vector], n: Vector,
                                                          v: Vector, e: float) -> List[float]:
        v_flux = self.volume_flux(r)
        return [s * v_flux for s in self.direction_frequency_polarization_no_spread(n, v, e)]

    def direction_frequency_volume_flux_spread(self, r: Optional[Vector], n: Vector, v: Vector, e: float,
                                               token: Optional[CancellationToken] = None) -> float:
        return self.direction_frequency_flux_spread(n, v, e, token) * self.volume_flux(r)

    def direction_frequency_volume_polarization_spread(self, r: Optional[Vector], n: Vector, v: Vector,
                                                       e: float,
                                                       token: Optional[CancellationToken] = None) -> List[float]:
        v_flux = self.volume_flux(r)
        return [s * v_flux for s in self.direction_frequency_polarization_spread(n, v, e, token)]

    def direction_frequency_volume_flux(self, r: Optional[Vector], n: Vector, v: Vector, e: float,
                                        token: Optional[CancellationToken] = None) -> float:
        if self.e_spread:
            return self.direction_frequency_volume_flux_spread(r, n, v, e, token)
        return self.direction_frequency_volume_flux_no_spread(r, n, v, e)

    def direction_frequency_volume_polarization(self, r: Optional[Vector], n: Vector, v: Vector, e: float,
                                                token: Optional[CancellationToken] = None) -> List[float]:
        if self.e_spread:
            return self.direction_frequency_volume_polarization_spread(r, n, v, e, token)
        return self.direction_frequency_volume_polarization_no_spread(r, n, v, e)

    # ------------------------------------------
    # Спектральная яркость
    # ------------------------------------------

    def direction_frequency_brilliance(self, r0: Vector, n: Vector, v: Vector, e: float,
                                       token: Optional[CancellationToken] = None) -> float:
        if self.e_spread:
            return self.direction_frequency_brilliance_spread(r0, n, v, e, token)
        return self.direction_frequency_brilliance_no_spread(r0, n, v, e)

    def direction_frequency_brilliance_no_spread(self, r0: Vector, n: Vector, v: Vector, e: float) -> float:
        return brilliance.brilliance_no_spread(self, r0, n, v, e)

    def direction_frequency_brilliance_spread(self, r0: Vector, n: Vector, v: Vector, e: float,
                                              token: Optional[CancellationToken] = None) -> float:
        return brilliance.brilliance_spread(self, r0, n, v, e, token)

    def direction_frequency_polarization_brilliance(self, r0: Vector, n: Vector, v: Vector, e: float,
                                                    token: Optional[CancellationToken] = None) -> List[float]:
        if self.e_spread:
            return self.direction_frequency_polarization_brilliance_spread(r0, n, v, e, token)
        return self.direction_frequency_polarization_brilliance_no_spread(r0, n, v, e)

    def direction_frequency_polarization_brilliance_no_spread(self, r0: Vector, n: Vector, v: Vector,
                                                              e: float) -> List[float]:
        return brilliance.polarization_brilliance_no_spread(self, r0, n, v, e)

    def direction_frequency_polarization_brilliance_spread(self, r0: Vector, n: Vector, v: Vector, e: float,
                                                           token: Optional[CancellationToken] = None
                                                           ) -> List[float]:
        return brilliance.polarization_brilliance_spread(self, r0, n, v, e, token)

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(total_flux={self.total_flux:.3e}, "
                f"geometric_factor={self.geometric_factor:.3f}, "
                f"e_spread={self.e_spread})")
