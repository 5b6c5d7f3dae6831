"""Массивы значений для одномерных и двумерных графиков"""
from abc import ABC, abstractmethod
from typing import Callable, List, Optional

import numpy as np

from .cancellation import CancellationToken, ensure_token


class LinearChartParam:
    """Класс для линейных параметров графика с поддержкой данных и функций"""

    def __init__(self):
        """Инициализация параметров"""
        self._size: int = 0
        self._step: float = 0.0
        self._offset: float = 0.0
        self._data: Optional[np.ndarray] = None
        self._umax: float = 0.0
        self._umin: float = 0.0

    @property
    def size(self) -> int:
        """Количество точек данных"""
        return self._size

    @property
    def step(self) -> float:
        """Шаг между точками"""
        return self._step

    @property
    def offset(self) -> float:
        """Смещение по оси X"""
        return self._offset

    @property
    def data(self) -> Optional[np.ndarray]:
        """Двумерный массив данных (строки - функции, столбцы - точки)"""
        return self._data

    @property
    def umax(self) -> float:
        """Максимальное значение данных"""
        return self._umax

    @property
    def umin(self) -> float:
        """Минимальное значение данных"""
        return self._umin

    def abscissas(self) -> np.ndarray:
        return self._offset + self._step * np.arange(self._size)

    def setup_from_data(self, data: np.ndarray, index: int, row: bool, size: int, step: float,
                        offset: float, token: Optional[CancellationToken] = None) -> None:
        """
        Инициализация срезом двумерного массива

        :param data: Исходный массив данных
        :param index: Индекс строки/столбца для выборки
        :param row: True - выборка строки, False - выборка столбца
        :param size: Количество точек
        :param step: Шаг между точками
        :param offset: Смещение
        :raises CalculationInterrupted: расчет остановлен
        """
        token = ensure_token(token)
        self._size = size
        self._step = step
        self._offset = offset
        values = np.zeros((1, size))
        for i in range(size):
            token.raise_if_cancelled("setup_from_data")
            values[0, i] = data[index, i] if row else data[i, index]
        self._data = values
        self._set_extrema()

    def setup_from_functions(self, funcs: List[Callable[[float], float]], size: int, step: float,
                             offset: float, token: Optional[CancellationToken] = None) -> None:
        """
        Инициализация из списка функций

        :param funcs: Список функций f(x) -> y
        :param size: Количество точек
        :param step: Шаг между точками
        :param offset: Смещение
        :raises CalculationInterrupted: расчет остановлен, данные не сохраняются
        """
        token = ensure_token(token)
        self._size = size
        self._step = step
        self._offset = offset
        values = np.zeros((len(funcs), size))
        for i in range(size):
            xp = step * i + offset
            for j, func in enumerate(funcs):
                token.raise_if_cancelled("setup_from_functions")
                values[j, i] = func(xp)
        self._data = values
        self._set_extrema()

    def _set_extrema(self) -> None:
        """Вычисление минимального и максимального значений"""
        if self._data is None or self._data.size == 0:
            self._umax = 0.0
            self._umin = 0.0
            return
        self._umax = float(np.max(self._data))
        self._umin = float(np.min(self._data))

    def __repr__(self) -> str:
        return (f"LinearChartParam(size={self.size}, step={self.step}, "
                f"offset={self.offset}, umin={self.umin:.3e}, umax={self.umax:.3e})")


class ColorChartParam(ABC):
    """Двумерная карта значений func(x, y) на равномерной сетке"""

    def __init__(self) -> None:
        self._udata: Optional[np.ndarray] = None
        self._umax: float = 0.0
        self._xoffset: float = 0.0
        self._yoffset: float = 0.0
        self._xstep: float = 0.0
        self._ystep: float = 0.0
        self._xsize: int = 0
        self._ysize: int = 0

    def setup(self, xsize: int, ysize: int, xstep: float, ystep: float, xoffset: float, yoffset: float,
              token: Optional[CancellationToken] = None) -> None:
        """
        Заполняет udata значениями func(x, y), сетка центрирована на (xoffset, yoffset).

        :raises CalculationInterrupted: расчет остановлен
        """
        token = ensure_token(token)
        self._xoffset = xoffset
        self._yoffset = yoffset
        self._xstep = xstep
        self._ystep = ystep
        self._xsize = xsize
        self._ysize = ysize

        values = np.zeros((xsize, ysize))
        for j in range(xsize):
            for p in range(ysize):
                token.raise_if_cancelled("ColorChartParam.setup")
                x = xoffset + xstep * (j - xsize / 2)
                y = yoffset + ystep * (p - ysize / 2)
                values[j, p] = self.func(x, y)
        self._udata = values
        # Значение в центре сетки - нормировка цветовой шкалы
        self._umax = float(values[xsize // 2, ysize // 2])

    @abstractmethod
    def func(self, x: float, y: float) -> float:
        """Значение в точке (x, y)"""

    @property
    def udata(self) -> Optional[np.ndarray]:
        return self._udata

    @property
    def umax(self) -> float:
        return self._umax

    @property
    def xoffset(self) -> float:
        return self._xoffset

    @property
    def yoffset(self) -> float:
        return self._yoffset

    @property
    def xstep(self) -> float:
        return self._xstep

    @property
    def ystep(self) -> float:
        return self._ystep

    @property
    def xsize(self) -> int:
        return self._xsize

    @property
    def ysize(self) -> int:
        return self._ysize


class FunctionColorChartParam(ColorChartParam):
    """Двумерная карта произвольной функции двух переменных"""

    def __init__(self, func: Callable[[float, float], float]) -> None:
        super().__init__()
        self._function = func

    def func(self, x: float, y: float) -> float:
        return self._function(x, y)
