"""
Shared utilities: physical constants, exceptions and logging helpers.
"""

from .constants import (
    DIPOLAR_PREFACTOR,
    LORENTZ_PREFACTOR,
    CONTACT_PREFACTOR,
    EPS,
    CONT_SCALING_POWER,
    MIN_DISTANCE,
    EMPTY_RANK,
)
from .exceptions import DipfieldError, AllocationError, DegenerateGeometryError
from .logging import enable_console_logging, resolve_logger

__all__ = [
    'DIPOLAR_PREFACTOR',
    'LORENTZ_PREFACTOR',
    'CONTACT_PREFACTOR',
    'EPS',
    'CONT_SCALING_POWER',
    'MIN_DISTANCE',
    'EMPTY_RANK',
    'DipfieldError',
    'AllocationError',
    'DegenerateGeometryError',
    'enable_console_logging',
    'resolve_logger',
]
