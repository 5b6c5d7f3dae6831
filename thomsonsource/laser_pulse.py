import math
from typing import Sequence, Tuple

from .constants import C, E, HC
from .exceptions import InvalidConfigurationError
from .vector import Vector


class LaserPulse:
    """
    Гауссов лазерный импульс.

    Простые параметры хранятся атрибутами:
    photon_number - число фотонов, length - полудлина импульса (м),
    rlength - рэлеевская длина (м), fq - частота повторения (Гц),
    delay - задержка, выраженная в длине (м).
    Энергия фотона, направление и поляризация проверяются при установке.
    """

    def __init__(self, photon_energy: float = 1.204 * E, pulse_energy: float = 0.1):
        self._photon_energy = photon_energy
        self._rk = HC / photon_energy
        self.photon_number = pulse_energy / photon_energy
        self.length = 0.0015
        self.rlength = 3.5e-4
        self.fq = 1000.0
        self.delay = 0.0
        self._direction = Vector(0.0, math.sin(0.052), math.cos(0.052))
        self._polarization: Tuple[float, float, float] = (1.0, 0.0, 0.0)

    def copy(self) -> 'LaserPulse':
        new_pulse = LaserPulse.__new__(LaserPulse)
        new_pulse.__dict__.update(self.__dict__)
        new_pulse._direction = self._direction.copy()
        return new_pulse

    @property
    def photon_energy(self) -> float:
        """Энергия фотона (Дж); вместе с ней меняется приведенная длина волны"""
        return self._photon_energy

    @photon_energy.setter
    def photon_energy(self, value: float) -> None:
        if not value > 0.0:
            raise InvalidConfigurationError(f"Photon energy must be positive, got {value}")
        self._photon_energy = value
        self._rk = HC / value

    @property
    def pulse_energy(self) -> float:
        """Полная энергия импульса (Дж)"""
        return self.photon_number * self._photon_energy

    @pulse_energy.setter
    def pulse_energy(self, value: float) -> None:
        self.photon_number = value / self._photon_energy

    @property
    def direction(self) -> Vector:
        """Единичный вектор направления импульса"""
        return self._direction

    @direction.setter
    def direction(self, value: Vector) -> None:
        if value is None or value.norm() == 0.0:
            raise InvalidConfigurationError("Laser pulse direction must be a non-zero vector")
        self._direction = value.normalize()

    @property
    def polarization(self) -> Tuple[float, float, float]:
        """Параметры Стокса лазерного излучения (ksi1, ksi2, ksi3)"""
        return self._polarization

    @polarization.setter
    def polarization(self, value: Sequence[float]) -> None:
        if value is None or len(value) != 3:
            raise InvalidConfigurationError("Laser polarization needs exactly three Stokes parameters")
        self.set_polarization(*value)

    def set_polarization(self, ksi1: float, ksi2: float, ksi3: float) -> None:
        self._polarization = (float(ksi1), float(ksi2), float(ksi3))

    def get_width2(self, z: float) -> float:
        """Квадрат ширины пучка на расстоянии z от перетяжки (м²)"""
        return (self.rlength + z ** 2 / self.rlength) * self._rk

    def get_width(self, z: float) -> float:
        return math.sqrt(self.get_width2(z))

    def set_width(self, width: float) -> None:
        """Ширина в перетяжке задается через рэлеевскую длину"""
        self.rlength = width ** 2 / self._rk

    def t_spatial_distribution(self, r: Vector) -> float:
        """Поперечная плотность в собственных координатах импульса"""
        w2 = self.get_width2(r.z)
        return math.exp(-(r.x ** 2 + r.y ** 2) / w2) / w2 / math.pi

    def l_spatial_distribution(self, r: Vector) -> float:
        """Продольная плотность в собственных координатах импульса"""
        return math.exp(-((r.z - self.delay) / self.length) ** 2) / self.length / math.sqrt(math.pi)

    def get_transformed_coordinates(self, r: Vector) -> Vector:
        """
        Переход от лабораторных координат к координатам импульса.

        Импульс лежит в плоскости yz, ось z импульса направлена навстречу
        его движению.
        """
        sn = self._direction.y
        cs = self._direction.z
        return Vector(r.x, -sn * r.z + cs * r.y, -(cs * r.z + sn * r.y))

    @property
    def average_intensity(self) -> float:
        """Средняя интенсивность импульса (Вт/м²)"""
        return self.pulse_energy / self.length / math.pi / self.get_width2(0.0) * C

    def __repr__(self) -> str:
        return (f"LaserPulse(energy={self.pulse_energy:.3e} J, "
                f"photons={self.photon_number:.3e}, length={self.length:.3e} m)")
