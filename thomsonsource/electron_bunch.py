import dataclasses
import math
from dataclasses import dataclass, field

from .constants import E, MC2
from .vector import Vector


@dataclass
class ElectronBunch:
    """
    Гауссов электронный сгусток.

    Ширины считаются по бета-функции и эмиттансу с учетом эффекта
    песочных часов, длина - полудлина по уровню 1/e.

    :param shift: смещение сгустка относительно лазерного импульса (м)
    :param gamma: гамма-фактор
    :param number: число электронов
    :param delgamma: относительный разброс энергии
    :param length: полудлина сгустка (м)
    :param epsx: нормированный эмиттанс по X (м·рад)
    :param betax: бета-функция в точке взаимодействия по X (м)
    """
    shift: Vector = field(default_factory=Vector)
    gamma: float = 50.0 / MC2
    number: float = 0.2 / E * 1e-9
    delgamma: float = 0.00125
    length: float = 0.0015
    epsx: float = 1.0e-6
    epsy: float = 1.0e-6
    betax: float = 0.02
    betay: float = 0.02

    def copy(self) -> 'ElectronBunch':
        return dataclasses.replace(self, shift=self.shift.copy())

    def set_eps(self, eps: float) -> None:
        """Одинаковый эмиттанс по обеим осям"""
        self.epsx = eps
        self.epsy = eps

    # Поперечные размеры

    def get_x_width2(self, z: float) -> float:
        return (self.betax + z ** 2 / self.betax) * self.epsx / self.gamma

    def get_y_width2(self, z: float) -> float:
        return (self.betay + z ** 2 / self.betay) * self.epsy / self.gamma

    def get_x_width(self, z: float) -> float:
        return math.sqrt(self.get_x_width2(z))

    def get_y_width(self, z: float) -> float:
        return math.sqrt(self.get_y_width2(z))

    def set_x_width(self, width: float) -> None:
        """Ширина в перетяжке задается через бета-функцию при заданном эмиттансе"""
        self.betax = width ** 2 / self.epsx * self.gamma

    def set_y_width(self, width: float) -> None:
        self.betay = width ** 2 / self.epsy * self.gamma

    def get_width2(self, z: float) -> float:
        """Среднее геометрическое квадратов ширин"""
        return math.sqrt(self.get_x_width2(z) * self.get_y_width2(z))

    def get_width(self, z: float) -> float:
        return math.sqrt(self.get_width2(z))

    # Угловой разброс

    def get_x_spread(self) -> float:
        return math.sqrt(self.epsx / self.gamma / self.betax)

    def get_y_spread(self) -> float:
        return math.sqrt(self.epsy / self.gamma / self.betay)

    def get_spread(self) -> float:
        return math.sqrt(self.get_x_spread() * self.get_y_spread())

    # Распределения

    def angle_distribution(self, theta_x: float, theta_y: float) -> float:
        """Нормированная плотность направлений скорости электронов"""
        dpx = self.get_x_spread()
        dpy = self.get_y_spread()
        return math.exp(-(theta_x / dpx) ** 2 - (theta_y / dpy) ** 2) / (dpx * dpy * math.pi)

    def t_spatial_distribution(self, r: Vector) -> float:
        """Поперечная плотность в точке r с учетом смещения сгустка"""
        dz = r.z - self.shift.z
        wx2 = self.get_x_width2(dz)
        wy2 = self.get_y_width2(dz)
        K = (r.x - self.shift.x) ** 2 / wx2 + (r.y - self.shift.y) ** 2 / wy2
        return math.exp(-K) / math.sqrt(wx2 * wy2) / math.pi

    def l_spatial_distribution(self, r: Vector) -> float:
        return math.exp(-(r.z / self.length) ** 2) / self.length / math.sqrt(math.pi)

    def gamma_distribution(self, g: float) -> float:
        """Распределение электронов по гамма-фактору"""
        dg = self.gamma * self.delgamma
        return math.exp(-((g - self.gamma) / dg) ** 2) / dg / math.sqrt(math.pi)
