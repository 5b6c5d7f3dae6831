"""Адаптивная квадратура Ромберга с ограничением числа вычислений"""
import math
from typing import Callable, Optional

import numpy as np
from scipy.integrate import romb

from .exceptions import TooManyEvaluationsError

DEFAULT_ABSOLUTE_ACCURACY = 1.0e-15
DEFAULT_MIN_ITERATIONS = 3
MAX_ITERATIONS = 32


class RombergIntegrator:
    """
    Интегратор Ромберга, удваивающий сетку до достижения заданной точности.

    На каждом шаге вычисляются только новые середины интервалов, уже
    посчитанные значения переиспользуются. Экстраполяция выполняется
    функцией scipy.integrate.romb.
    """

    def __init__(self, relative_accuracy: float,
                 absolute_accuracy: float = DEFAULT_ABSOLUTE_ACCURACY,
                 min_iterations: int = DEFAULT_MIN_ITERATIONS,
                 max_iterations: int = MAX_ITERATIONS,
                 on_nan: Optional[Callable[[], None]] = None):
        if min_iterations < 1 or max_iterations <= min_iterations:
            raise ValueError("Invalid iteration bounds for Romberg integrator")
        self.relative_accuracy = relative_accuracy
        self.absolute_accuracy = absolute_accuracy
        self.min_iterations = min_iterations
        self.max_iterations = max_iterations
        # Вызывается при каждой замене NaN нулем
        self.on_nan = on_nan
        self.evaluations = 0
        self.iterations = 0

    def integrate(self, max_eval: int, func: Callable[[float], float], a: float, b: float) -> float:
        """
        Интеграл func на отрезке [a, b]

        :param max_eval: максимальное число вычислений func
        :raises TooManyEvaluationsError: бюджет исчерпан до сходимости
        """
        self.evaluations = 0
        self.iterations = 0
        if a == b:
            return 0.0

        samples = np.array([self._value(func, a, max_eval), self._value(func, b, max_eval)])
        previous = romb(samples, dx=b - a)

        for k in range(1, self.max_iterations + 1):
            intervals = 2 ** k
            h = (b - a) / intervals
            # Новые точки - середины интервалов предыдущего уровня
            midpoints = a + h * np.arange(1, intervals, 2)
            fresh = np.array([self._value(func, x, max_eval) for x in midpoints])

            merged = np.empty(intervals + 1)
            merged[0::2] = samples
            merged[1::2] = fresh
            samples = merged

            estimate = romb(samples, dx=h)
            self.iterations = k
            if k >= self.min_iterations:
                delta = abs(estimate - previous)
                r_limit = self.relative_accuracy * (abs(previous) + abs(estimate)) * 0.5
                if delta <= r_limit or delta <= self.absolute_accuracy:
                    return float(estimate)
            previous = estimate

        raise TooManyEvaluationsError(max_eval)

    def _value(self, func: Callable[[float], float], x: float, max_eval: int) -> float:
        self.evaluations += 1
        if self.evaluations > max_eval:
            raise TooManyEvaluationsError(max_eval)
        u = func(x)
        if math.isnan(u):
            if self.on_nan is not None:
                self.on_nan()
            return 0.0
        return u
