import math
from typing import List, Optional

from .constants import E, MC2, NUMBER_OF_POL_PARAM
from .source import AbstractThomsonSource
from .vector import Vector


class LinearThomsonSource(AbstractThomsonSource):
    """Томсоновский источник в линейном режиме без учета отдачи"""

    def _energy_kernel(self, th: float, e: float) -> Optional[float]:
        """
        Общий множитель спектральных плотностей без учета отдачи.

        None, если энергия e недостижима в направлении с параметром th
        """
        eph = self.lp.photon_energy
        gamma = self.eb.gamma
        dg = self.eb.delgamma
        if e <= 0.0 or eph <= 0.0 or gamma <= 0.0 or dg <= 0.0:
            return None
        recoil = 1.0 - e * th / eph / 4.0
        if recoil <= 0.0:
            return None
        K = (math.sqrt(e / eph / recoil) - 2.0 * gamma) ** 2 / 4.0 / (gamma * dg) ** 2
        return (self.total_flux * e * 3.0 / 32.0 / math.pi / math.sqrt(math.pi) / dg / gamma / eph
                * math.sqrt(e / eph) / math.sqrt(recoil) * math.exp(-K))

    def direction_frequency_flux_no_spread(self, n: Vector, v: Vector, e: float) -> float:
        th = (1.0 - n.inner_product(v)) * 2.0
        m11 = self._energy_kernel(th, e)
        if m11 is None:
            return 0.0
        mlt = 1.0 - e * th / self.lp.photon_energy / 2.0
        res = m11 * (mlt * mlt + 1.0) / 2.0
        return self.nan_to_zero(res, "flux_no_spread")

    def direction_frequency_polarization_no_spread(self, n: Vector, v: Vector, e: float) -> List[float]:
        th = (1.0 - n.inner_product(v)) * 2.0
        m11 = self._energy_kernel(th, e)
        if m11 is None:
            return [0.0] * NUMBER_OF_POL_PARAM
        mlt = 1.0 - e * th / self.lp.photon_energy / 2.0
        m12 = m11 * mlt
        m22 = m12 * mlt
        return self._stokes_from_matrix(n, v, m11, m12, m22)

    def direction_flux(self, n: Vector, v: Vector) -> float:
        th = (1.0 - n.inner_product(v)) * 2.0
        gamma2 = self.eb.gamma ** 2
        return (self.total_flux * 3.0 / 2.0 / math.pi * gamma2 * (1.0 + (th * gamma2) ** 2)
                / (1.0 + gamma2 * th) ** 4 * self.geometric_factor)

    def direction_energy(self, n: Vector, v: Vector) -> float:
        mv = _velocity(self.eb.gamma)
        denominator = 1.0 - n.inner_product(v) * mv
        if denominator <= 0.0:
            return 0.0
        return 2.0 * self.lp.photon_energy / denominator


class ComptonThomsonSource(AbstractThomsonSource):
    """
    Источник с учетом отдачи электрона (комптоновский режим).

    Отличается от линейного только элементарными функциями сечения:
    энергия фотона и обратная зависимость гамма-фактора от энергии
    учитывают параметр отдачи ac = E_ph / mc^2.
    """

    @property
    def recoil_parameter(self) -> float:
        """ac = E_ph / mc^2"""
        return self.lp.photon_energy / (MC2 * 1.0e6 * E)

    def _resonant_gamma(self, th: float, e: float) -> Optional[float]:
        """Гамма-фактор электрона, излучающего энергию e в направлении th"""
        if e <= 0.0:
            return None
        ac = self.recoil_parameter
        koef = 4.0 * self.lp.photon_energy / e - th
        if koef <= 0.0:
            return None
        return (2.0 * ac + math.sqrt(4.0 * ac * ac + koef)) / koef

    def _matrix_kernel(self, th: float, e: float):
        gamma0 = self.eb.gamma
        dg = self.eb.delgamma
        gamma = self._resonant_gamma(th, e)
        if gamma is None or gamma0 <= 0.0 or dg <= 0.0:
            return None
        ac = self.recoil_parameter
        gamma2 = gamma * gamma
        K = ((gamma - gamma0) / (dg * gamma0)) ** 2
        m11 = (self.total_flux * e * 3.0 / math.pi ** 1.5 / dg / gamma0
               * self.lp.photon_energy / e ** 2
               * gamma0 ** 5 / (1.0 + gamma2 * th + 4.0 * ac * gamma0) ** 2
               / (1.0 + 2.0 * gamma * ac) * math.exp(-K))
        mlt = (1.0 - gamma2 * th) / (1.0 + gamma2 * th)
        return m11, mlt

    def direction_frequency_flux_no_spread(self, n: Vector, v: Vector, e: float) -> float:
        th = (1.0 - n.inner_product(v)) * 2.0
        kernel = self._matrix_kernel(th, e)
        if kernel is None:
            return 0.0
        m11, mlt = kernel
        res = m11 * (1.0 + mlt * mlt) / 2.0
        return self.nan_to_zero(res, "flux_no_spread")

    def direction_frequency_polarization_no_spread(self, n: Vector, v: Vector, e: float) -> List[float]:
        th = (1.0 - n.inner_product(v)) * 2.0
        kernel = self._matrix_kernel(th, e)
        if kernel is None:
            return [0.0] * NUMBER_OF_POL_PARAM
        m11, mlt = kernel
        m12 = m11 * mlt
        return self._stokes_from_matrix(n, v, m11, m12, m12 * mlt)

    def direction_flux(self, n: Vector, v: Vector) -> float:
        th = (1.0 - n.inner_product(v)) * 2.0
        gamma = self.eb.gamma
        gamma2 = gamma * gamma
        ac = self.recoil_parameter
        return (self.total_flux * 3.0 / 2.0 / math.pi * gamma2 * (1.0 + (th * gamma2) ** 2)
                / (1.0 + gamma2 * th) ** 2 / (1.0 + gamma2 * th + 4.0 * ac * gamma) ** 2
                * self.geometric_factor)

    def direction_energy(self, n: Vector, v: Vector) -> float:
        mv = _velocity(self.eb.gamma)
        cs = n.inner_product(v)
        denominator = 1.0 - cs * mv + self.recoil_parameter / self.eb.gamma * (1.0 + cs)
        if denominator <= 0.0:
            return 0.0
        return (1.0 + mv) * self.lp.photon_energy / denominator


def _velocity(gamma: float) -> float:
    """Скорость электрона в единицах c"""
    if gamma <= 1.0:
        return 0.0
    return math.sqrt(1.0 - 1.0 / gamma / gamma)
