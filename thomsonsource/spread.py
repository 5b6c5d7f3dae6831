"""
Усреднение элементарных функций сечения по угловому разбросу электронов.

Двумерный интеграл по направлению скорости электрона берется вложенной
квадратурой Ромберга: внешний интеграл по азимуту phi в [0, 2pi],
внутренний по полярному углу theta в [0, INT_RANGE * spread]. К
подынтегральной функции добавляется постоянный сдвиг, улучшающий
сходимость вблизи нуля; после интегрирования он вычитается точно.
"""
import concurrent.futures
import logging
import math
from typing import TYPE_CHECKING, Callable, List, Optional

from .accumulators import FallbackStatistics
from .cancellation import CancellationToken, ensure_token
from .constants import INT_RANGE, MAXIMAL_NUMBER_OF_EVALUATIONS, NUMBER_OF_POL_PARAM, SHIFT
from .exceptions import CalculationInterrupted, TooManyEvaluationsError
from .integration import RombergIntegrator
from .vector import Vector

if TYPE_CHECKING:
    from .source import AbstractThomsonSource

logger = logging.getLogger(__name__)


def _spread_integral(source: 'AbstractThomsonSource', primitive: Callable[[Vector], float], v0: Vector,
                     token: CancellationToken, where: str) -> float:
    """
    Интеграл sin(theta) * primitive(v) * f(v - v0) по направлениям v

    :param primitive: функция направления скорости электрона
    :raises TooManyEvaluationsError: внешний интеграл не сошелся
    """
    eb = source.eb
    shift = source.shift_factor * SHIFT
    cutoff = INT_RANGE * eb.get_spread()

    def inner(theta: float, snphi: float, csphi: float) -> float:
        token.raise_if_cancelled(where)
        sn = math.sin(theta)
        v = Vector(sn * csphi, sn * snphi, math.cos(theta))
        dv = v - v0
        u = sn * primitive(v) * eb.angle_distribution(dv.x, dv.y) + shift
        return source.nan_to_zero(u, where)

    def nan_found() -> None:
        source.fallback_stats.record(FallbackStatistics.NAN_SUBSTITUTED, where)

    def outer(phi: float) -> float:
        token.raise_if_cancelled(where)
        snphi = math.sin(phi)
        csphi = math.cos(phi)
        integrator = RombergIntegrator(source.precision, on_nan=nan_found)
        try:
            tmp = integrator.integrate(MAXIMAL_NUMBER_OF_EVALUATIONS,
                                       lambda theta: inner(theta, snphi, csphi), 0.0, cutoff)
        except TooManyEvaluationsError:
            source.fallback_stats.record(FallbackStatistics.QUADRATURE_BUDGET_EXCEEDED, where)
            return 0.0
        return source.nan_to_zero(tmp, where)

    integrator = RombergIntegrator(source.precision, on_nan=nan_found)
    return (integrator.integrate(MAXIMAL_NUMBER_OF_EVALUATIONS, outer, 0.0, 2.0 * math.pi)
            - shift * 2.0 * math.pi * cutoff)


def _has_spread(source: 'AbstractThomsonSource') -> bool:
    eb = source.eb
    try:
        return eb.get_x_spread() > 0.0 and eb.get_y_spread() > 0.0
    except ZeroDivisionError:
        return False


def flux_spread(source: 'AbstractThomsonSource', n: Vector, v0: Vector, e: float,
                token: Optional[CancellationToken] = None) -> float:
    """
    Спектральная плотность потока, усредненная по угловому разбросу

    :raises CalculationInterrupted: расчет остановлен
    """
    token = ensure_token(token)
    token.raise_if_cancelled("flux_spread")
    if not _has_spread(source):
        # Нулевой разброс - предел интеграла совпадает с функцией без разброса
        return source.direction_frequency_flux_no_spread(n, v0, e)
    try:
        res = _spread_integral(source, lambda v: source.direction_frequency_flux_no_spread(n, v, e),
                               v0, token, "flux_spread")
    except TooManyEvaluationsError:
        source.fallback_stats.record(FallbackStatistics.QUADRATURE_BUDGET_EXCEEDED, "flux_spread")
        return 0.0
    return source.nan_to_zero(res, "flux_spread")


def polarization_component_spread(source: 'AbstractThomsonSource', n: Vector, v0: Vector, e: float,
                                  index: int, token: Optional[CancellationToken] = None) -> float:
    """Один параметр Стокса (index от 0 до 3), усредненный по угловому разбросу"""
    token = ensure_token(token)
    token.raise_if_cancelled("polarization_spread")
    where = f"polarization_spread[{index}]"
    try:
        res = _spread_integral(
            source,
            lambda v: source.direction_frequency_polarization_no_spread(n, v, e)[index],
            v0, token, where)
    except TooManyEvaluationsError:
        source.fallback_stats.record(FallbackStatistics.QUADRATURE_BUDGET_EXCEEDED, where)
        return 0.0
    return source.nan_to_zero(res, where)


def polarization_spread(source: 'AbstractThomsonSource', n: Vector, v0: Vector, e: float,
                        token: Optional[CancellationToken] = None) -> List[float]:
    """
    Параметры Стокса, усредненные по угловому разбросу.

    Четыре компоненты считаются параллельно, у каждой задачи свой
    интегратор. Остановка в любой из задач отменяет остальные и
    передается вызывающему коду.

    :raises CalculationInterrupted: расчет остановлен
    """
    token = ensure_token(token)
    token.raise_if_cancelled("polarization_spread")
    if not _has_spread(source):
        return source.direction_frequency_polarization_no_spread(n, v0, e)

    workers = max(1, min(NUMBER_OF_POL_PARAM, source.thread_number))
    stokes = [0.0] * NUMBER_OF_POL_PARAM
    with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
        futures = {
            executor.submit(polarization_component_spread, source, n, v0, e, i, token): i
            for i in range(NUMBER_OF_POL_PARAM)
        }
        try:
            for future in concurrent.futures.as_completed(futures):
                stokes[futures[future]] = future.result()
        except CalculationInterrupted:
            for future in futures:
                future.cancel()
            logger.info("Spread polarization calculation interrupted")
            raise

    return source.sanitize_stokes(stokes, "polarization_spread")
