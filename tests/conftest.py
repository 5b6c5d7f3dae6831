"""
Конфигурация pytest и общие фикстуры.

Источники создаются с небольшим числом точек Монте-Карло, чтобы
тесты выполнялись быстро.
"""
import numpy as np
import pytest

from thomsonsource import ElectronBunch, LaserPulse, LinearThomsonSource, SourceSettings, Vector


@pytest.fixture
def fast_settings():
    """Параметры расчета для быстрых тестов"""
    return SourceSettings(np_geometric_factor=4000, thread_number=2, precision=1.0e-3)


@pytest.fixture
def bunch():
    return ElectronBunch()


@pytest.fixture
def pulse():
    return LaserPulse()


@pytest.fixture
def source(pulse, bunch, fast_settings):
    """Линейный источник с параметрами по умолчанию"""
    return LinearThomsonSource(pulse, bunch, settings=fast_settings)


@pytest.fixture
def collinear_source():
    """
    Встречные пучки одинаковой ширины без смещения и без эффекта
    песочных часов: геометрический фактор равен единице.
    """
    width = 1.0e-5
    length = 1.0e-5
    eb = ElectronBunch()
    eb.length = length
    eb.set_x_width(width)
    eb.set_y_width(width)
    lp = LaserPulse()
    lp.length = length
    lp.direction = Vector(0.0, 0.0, 1.0)
    lp.set_width(width)
    settings = SourceSettings(np_geometric_factor=1000, thread_number=2)
    return LinearThomsonSource(lp, eb, settings=settings)


@pytest.fixture
def rng():
    return np.random.default_rng(12345)


@pytest.fixture
def axis():
    return Vector(0.0, 0.0, 1.0)
