"""
Зависимости яркости и геометрического фактора от параметров пучков.

Каждая точка считается на собственной копии источника, исходный
источник не изменяется.
"""
import logging
import math
from typing import Callable, Dict, Iterable, Optional

import numpy as np

from .cancellation import CancellationToken, ensure_token
from .charts import FunctionColorChartParam
from .exceptions import InvalidConfigurationError
from .vector import Vector

logger = logging.getLogger(__name__)


def _set_angle(src, x: float) -> None:
    src.lp.direction = Vector(0.0, math.sin(x), math.cos(x))


def _set_delay(src, x: float) -> None:
    src.lp.delay = x


def _set_z_shift(src, x: float) -> None:
    shift = src.eb.shift.copy()
    shift.set(2, x)
    src.eb.shift = shift


def _set_beta(src, x: float) -> None:
    src.eb.betax = x
    src.eb.betay = x


def _set_emittance(src, x: float) -> None:
    src.eb.set_eps(x)


def _set_rayleigh(src, x: float) -> None:
    src.lp.rlength = x


def _set_waist(src, x: float) -> None:
    src.lp.set_width(x)
    src.eb.set_x_width(x)
    src.eb.set_y_width(x)


def _set_energy_spread(src, x: float) -> None:
    src.eb.delgamma = x


# Параметры геометрии, которые можно менять в сканировании (значения в СИ)
GEOMETRY_PARAMETERS: Dict[str, Callable] = {
    "angle": _set_angle,
    "delay": _set_delay,
    "z-shift": _set_z_shift,
    "beta": _set_beta,
    "emittance": _set_emittance,
    "rayleigh": _set_rayleigh,
    "waist": _set_waist,
    "energy-spread": _set_energy_spread,
}

# Параметры наблюдения, не меняющие источник
OBSERVATION_PARAMETERS = ("energy", "observation-angle")


def _observation_direction(angle: float) -> Vector:
    return Vector(math.sin(angle), 0.0, math.cos(angle))


def brilliance_scan(source, parameter: str, values: Iterable[float], angle: float = 0.0,
                    energy: Optional[float] = None, token: Optional[CancellationToken] = None,
                    progress: Optional[Callable[[int], None]] = None) -> np.ndarray:
    """
    Спектральная яркость в центре источника как функция параметра

    :param parameter: имя из GEOMETRY_PARAMETERS или OBSERVATION_PARAMETERS
    :param angle: угол наблюдения (рад), если сканируется не он
    :param energy: энергия фотона (Дж); по умолчанию - энергия в направлении наблюдения
    :raises CalculationInterrupted: расчет остановлен
    """
    token = ensure_token(token)
    if parameter not in GEOMETRY_PARAMETERS and parameter not in OBSERVATION_PARAMETERS:
        raise InvalidConfigurationError(f"Unknown scan parameter: {parameter}")
    values = np.asarray(list(values), dtype=float)
    result = np.zeros(len(values))
    axis = Vector(0.0, 0.0, 1.0)
    for i, x in enumerate(values):
        token.raise_if_cancelled("brilliance_scan")
        src = source.copy()
        ang = angle
        e = energy
        if parameter == "observation-angle":
            ang = x
        elif parameter == "energy":
            e = x
        else:
            GEOMETRY_PARAMETERS[parameter](src, x)
        src.calculate_total_flux()
        n = _observation_direction(ang)
        if e is None:
            e = src.direction_energy(n, axis)
        result[i] = src.direction_frequency_brilliance(Vector(), n, axis, e, token)
        if progress is not None:
            progress(100 * (i + 1) // len(values))
    logger.debug("Brilliance scan over %s finished (%d points)", parameter, len(values))
    return result


def geometric_factor_scan(source, parameter: str, values: Iterable[float],
                          token: Optional[CancellationToken] = None, seed: Optional[int] = None,
                          progress: Optional[Callable[[int], None]] = None) -> np.ndarray:
    """
    Геометрический фактор (Монте-Карло и приближенный) как функция параметра

    :return: массив формы (2, N): строка 0 - Монте-Карло, строка 1 - приближение
    :raises CalculationInterrupted: расчет остановлен
    """
    token = ensure_token(token)
    if parameter not in GEOMETRY_PARAMETERS:
        raise InvalidConfigurationError(f"Unknown scan parameter: {parameter}")
    values = np.asarray(list(values), dtype=float)
    result = np.zeros((2, len(values)))
    for i, x in enumerate(values):
        token.raise_if_cancelled("geometric_factor_scan")
        src = source.copy()
        GEOMETRY_PARAMETERS[parameter](src, x)
        result[0, i] = src.calculate_geometric_factor(token=token, seed=seed).value
        result[1, i] = src.approx_geometric_factor()
        if progress is not None:
            progress(100 * (i + 1) // len(values))
    return result


def flux_map(source, xsize: int, ysize: int, xstep: float, ystep: float,
             token: Optional[CancellationToken] = None) -> FunctionColorChartParam:
    """Угловое распределение потока на сетке углов (thetax, thetay) в радианах"""
    axis = Vector(0.0, 0.0, 1.0)
    chart = FunctionColorChartParam(
        lambda thetax, thetay: source.direction_flux(Vector(thetax, thetay, 1.0).normalize(), axis))
    chart.setup(xsize, ysize, xstep, ystep, 0.0, 0.0, token)
    return chart


def energy_map(source, xsize: int, ysize: int, xstep: float, ystep: float,
               token: Optional[CancellationToken] = None) -> FunctionColorChartParam:
    """Энергия фотонов (Дж) на сетке углов (thetax, thetay) в радианах"""
    axis = Vector(0.0, 0.0, 1.0)
    chart = FunctionColorChartParam(
        lambda thetax, thetay: source.direction_energy(Vector(thetax, thetay, 1.0).normalize(), axis))
    chart.setup(xsize, ysize, xstep, ystep, 0.0, 0.0, token)
    return chart
