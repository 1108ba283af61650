"""
Lattice geometry module.

This module provides abstract and concrete implementations of crystallographic
lattices. Lattices represent ONLY geometric structure - no magnetic information.

Available lattices:
- CubicLattice
- TetragonalLattice
- HexagonalLattice
- GenericLattice: any 3x3 cell matrix

Supercell wraps a unit cell with integer extents for real-space sums.
"""

from .base import AbstractLattice
from .presets import (
    CubicLattice,
    TetragonalLattice,
    HexagonalLattice,
    GenericLattice,
    LATTICE_REGISTRY,
    create_lattice
)
from .supercell import Supercell

__all__ = [
    'AbstractLattice',
    'CubicLattice',
    'TetragonalLattice',
    'HexagonalLattice',
    'GenericLattice',
    'LATTICE_REGISTRY',
    'create_lattice',
    'Supercell',
]
