"""Расчет характеристик томсоновского источника рентгеновского излучения"""
from .cancellation import CancellationToken
from .config import SourceSettings, configure_logging
from .electron_bunch import ElectronBunch
from .exceptions import (CalculationInterrupted, InvalidConfigurationError, ThomsonSourceError,
                         TooManyEvaluationsError)
from .geometric_factor import GeometricFactorResult
from .laser_pulse import LaserPulse
from .linear import ComptonThomsonSource, LinearThomsonSource
from .polarization import get_3d_transform, get_polarization, stokes_from_amplitudes
from .rays import RaySampler, generate_rays
from .source import AbstractThomsonSource
from .vector import Vector

__version__ = "0.1.0"

__all__ = [
    "AbstractThomsonSource",
    "CalculationInterrupted",
    "CancellationToken",
    "ComptonThomsonSource",
    "ElectronBunch",
    "GeometricFactorResult",
    "InvalidConfigurationError",
    "LaserPulse",
    "LinearThomsonSource",
    "RaySampler",
    "SourceSettings",
    "ThomsonSourceError",
    "TooManyEvaluationsError",
    "Vector",
    "configure_logging",
    "generate_rays",
    "get_3d_transform",
    "get_polarization",
    "stokes_from_amplitudes",
]
