"""
Magnetic structure module.

This module provides abstractions for magnetic ordering patterns, separate from
crystallographic lattice geometry.

Available structures:
- IncommensurateStructure: helix described by complex Fourier components
"""

from .base import AbstractMagneticStructure
from .incommensurate import (
    FC_LAYOUTS,
    MagneticAtom,
    IncommensurateStructure,
    split_fourier_components,
    join_fourier_components,
    decompose_fourier_components,
    check_phases,
)

__all__ = [
    'AbstractMagneticStructure',
    'FC_LAYOUTS',
    'MagneticAtom',
    'IncommensurateStructure',
    'split_fourier_components',
    'join_fourier_components',
    'decompose_fourier_components',
    'check_phases',
]
