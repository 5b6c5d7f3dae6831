"""Численные параметры расчета и настройка логирования"""
import json
import logging
import os
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, List, Optional

from .constants import E
from .exceptions import InvalidConfigurationError


@dataclass
class SourceSettings:
    """
    Параметры расчета, не относящиеся к геометрии пучков.

    Загружаются из JSON-словаря, применяются к источнику через apply().
    Кэшированные величины (полный поток, геометрический фактор) после
    применения нужно пересчитать явно.
    """
    precision: float = 1.0e-3
    thread_number: int = os.cpu_count() or 1
    np_geometric_factor: int = 50000
    shift_factor: float = 1.0
    e_spread: bool = False
    ray_x_angle_range: float = 3.0e-4
    ray_y_angle_range: float = 3.0e-4
    min_energy: float = 25.0e3 * E
    max_energy: float = 35.0e3 * E
    ksi: Optional[List[float]] = None

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """:raises InvalidConfigurationError: параметры непригодны для расчета"""
        if not self.precision > 0.0:
            raise InvalidConfigurationError(f"Precision must be positive, got {self.precision}")
        if int(self.thread_number) < 1:
            raise InvalidConfigurationError(f"Thread number must be positive, got {self.thread_number}")
        if int(self.np_geometric_factor) < 1:
            raise InvalidConfigurationError("Number of geometric factor samples must be positive")
        if self.ray_x_angle_range < 0.0 or self.ray_y_angle_range < 0.0:
            raise InvalidConfigurationError("Ray angle ranges must not be negative")
        if self.min_energy >= self.max_energy:
            raise InvalidConfigurationError("Minimal ray energy must be lower than maximal")
        if self.ksi is not None and len(self.ksi) != 3:
            raise InvalidConfigurationError("Stokes override needs exactly three parameters")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SourceSettings':
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise InvalidConfigurationError(f"Unknown settings: {', '.join(sorted(unknown))}")
        return cls(**data)

    @classmethod
    def from_json(cls, path: str) -> 'SourceSettings':
        try:
            with open(path, 'r') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise InvalidConfigurationError(f"Failed to parse settings file {path}: {e}") from e
        if not isinstance(data, dict):
            raise InvalidConfigurationError(f"Settings file {path} must contain a JSON object")
        return cls.from_dict(data)

    @classmethod
    def from_source(cls, source) -> 'SourceSettings':
        return cls(
            precision=source.precision,
            thread_number=source.thread_number,
            np_geometric_factor=source.np_geometric_factor,
            shift_factor=source.shift_factor,
            e_spread=source.e_spread,
            ray_x_angle_range=source.ray_x_angle_range,
            ray_y_angle_range=source.ray_y_angle_range,
            min_energy=source.min_energy,
            max_energy=source.max_energy,
            ksi=list(source.ksi) if source.ksi is not None else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def apply(self, source) -> None:
        self.validate()
        source.precision = self.precision
        source.thread_number = self.thread_number
        source.np_geometric_factor = int(self.np_geometric_factor)
        source.shift_factor = self.shift_factor
        source.e_spread = bool(self.e_spread)
        source.set_ray_ranges(self.ray_x_angle_range, self.ray_y_angle_range,
                              self.min_energy, self.max_energy)
        source.set_polarization(self.ksi)


def configure_logging(level: int = logging.INFO) -> None:
    """Базовая настройка логирования для запуска из командной строки"""
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
