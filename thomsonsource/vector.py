import math
from typing import Iterable

import numpy as np


class Vector:
    """Трехмерный вектор на основе numpy (замена org.la4j.Vector)"""

    __slots__ = ("_data",)

    def __init__(self, x: float = 0.0, y: float = 0.0, z: float = 0.0) -> None:
        self._data = np.array([x, y, z], dtype=float)

    @classmethod
    def from_iterable(cls, values: Iterable[float]) -> 'Vector':
        x, y, z = values
        return cls(x, y, z)

    @property
    def x(self) -> float:
        return float(self._data[0])

    @property
    def y(self) -> float:
        return float(self._data[1])

    @property
    def z(self) -> float:
        return float(self._data[2])

    def get(self, index: int) -> float:
        return float(self._data[index])

    def set(self, index: int, value: float) -> None:
        self._data[index] = value

    def inner_product(self, other: 'Vector') -> float:
        d = self._data
        o = other._data
        return float(d[0] * o[0] + d[1] * o[1] + d[2] * o[2])

    def norm(self) -> float:
        d = self._data
        return math.sqrt(d[0] * d[0] + d[1] * d[1] + d[2] * d[2])

    def normalize(self) -> 'Vector':
        """Единичный вектор того же направления (нулевой вектор остается нулевым)"""
        n = self.norm()
        return Vector(*(self._data / n)) if n > 0 else self.copy()

    def cross(self, other: 'Vector') -> 'Vector':
        return Vector(*np.cross(self._data, other._data))

    def outer_product(self, other: 'Vector') -> np.ndarray:
        return np.outer(self._data, other._data)

    def to_array(self) -> np.ndarray:
        return self._data.copy()

    def copy(self) -> 'Vector':
        return Vector(*self._data)

    def __mul__(self, scalar: float) -> 'Vector':
        return Vector(*(self._data * scalar))

    __rmul__ = __mul__

    def __truediv__(self, scalar: float) -> 'Vector':
        return Vector(*(self._data / scalar))

    def __add__(self, other: 'Vector') -> 'Vector':
        return Vector(*(self._data + other._data))

    def __sub__(self, other: 'Vector') -> 'Vector':
        return Vector(*(self._data - other._data))

    def __neg__(self) -> 'Vector':
        return Vector(*(-self._data))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vector):
            return NotImplemented
        return bool(np.array_equal(self._data, other._data))

    def __iter__(self):
        return iter(self._data.tolist())

    def __repr__(self) -> str:
        return f"Vector({self.x!r}, {self.y!r}, {self.z!r})"
