"""Спектральная яркость - интеграл объемной плотности вдоль луча наблюдения"""
from typing import TYPE_CHECKING, List, Optional

from .accumulators import FallbackStatistics
from .cancellation import CancellationToken
from .constants import BRILLIANCE_NUMBER_OF_EVALUATIONS, MAXIMAL_NUMBER_OF_EVALUATIONS, NUMBER_OF_POL_PARAM
from .exceptions import TooManyEvaluationsError
from .integration import RombergIntegrator
from .vector import Vector

if TYPE_CHECKING:
    from .source import AbstractThomsonSource


def line_integral(source: 'AbstractThomsonSource', r0: Vector, n: Vector, max_eval: int) -> float:
    """
    Интеграл volume_flux(r0 + n * x) по x в пределах |r0| +- 3 длины сгустка.

    Для нулевого направления возвращает 0. При исчерпании бюджета
    вычислений тоже 0, событие учитывается в статистике источника.
    """
    if n.norm() == 0.0:
        return 0.0
    center = r0.norm()
    half_width = 3.0 * source.eb.length
    integrator = RombergIntegrator(
        source.precision,
        on_nan=lambda: source.fallback_stats.record(FallbackStatistics.NAN_SUBSTITUTED, "brilliance"))
    try:
        u = integrator.integrate(max_eval, lambda x: source.volume_flux(r0 + n * x),
                                 center - half_width, center + half_width)
    except TooManyEvaluationsError:
        source.fallback_stats.record(FallbackStatistics.QUADRATURE_BUDGET_EXCEEDED, "brilliance")
        return 0.0
    return source.nan_to_zero(u, "brilliance")


def brilliance_no_spread(source: 'AbstractThomsonSource', r0: Vector, n: Vector, v: Vector,
                         e: float) -> float:
    u = line_integral(source, r0, n, BRILLIANCE_NUMBER_OF_EVALUATIONS)
    if u == 0.0:
        return 0.0
    return u * source.direction_frequency_flux_no_spread(n, v, e)


def brilliance_spread(source: 'AbstractThomsonSource', r0: Vector, n: Vector, v: Vector, e: float,
                      token: Optional[CancellationToken] = None) -> float:
    """:raises CalculationInterrupted: расчет остановлен"""
    u = line_integral(source, r0, n, MAXIMAL_NUMBER_OF_EVALUATIONS)
    if u == 0.0:
        return 0.0
    return u * source.direction_frequency_flux_spread(n, v, e, token)


def polarization_brilliance_no_spread(source: 'AbstractThomsonSource', r0: Vector, n: Vector, v: Vector,
                                      e: float) -> List[float]:
    mlt = line_integral(source, r0, n, BRILLIANCE_NUMBER_OF_EVALUATIONS)
    if mlt == 0.0:
        return [0.0] * NUMBER_OF_POL_PARAM
    return [mlt * s for s in source.direction_frequency_polarization_no_spread(n, v, e)]


def polarization_brilliance_spread(source: 'AbstractThomsonSource', r0: Vector, n: Vector, v: Vector,
                                   e: float, token: Optional[CancellationToken] = None) -> List[float]:
    """:raises CalculationInterrupted: расчет остановлен"""
    mlt = line_integral(source, r0, n, BRILLIANCE_NUMBER_OF_EVALUATIONS)
    if mlt == 0.0:
        return [0.0] * NUMBER_OF_POL_PARAM
    return [mlt * s for s in source.direction_frequency_polarization_spread(n, v, e, token)]
