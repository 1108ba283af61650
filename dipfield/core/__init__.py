"""
Core domain models for the dipfield package.

This module contains the fundamental abstractions:
- Lattice: crystallographic geometry and supercells
- MagneticStructure: helical moments described by Fourier components
- Pile: bounded nearest-neighbor selector used for the contact field
- ProbeSystem: lattice + magnetic structure + probe site

These are the building blocks used by the solvers.
"""

from .lattice import (
    AbstractLattice,
    CubicLattice,
    TetragonalLattice,
    HexagonalLattice,
    GenericLattice,
    LATTICE_REGISTRY,
    create_lattice,
    Supercell
)

from .magnetic_structure import (
    AbstractMagneticStructure,
    IncommensurateStructure,
    MagneticAtom
)

from .pile import Pile

from .probe_system import ProbeSystem

__all__ = [
    # Lattice
    'AbstractLattice',
    'CubicLattice',
    'TetragonalLattice',
    'HexagonalLattice',
    'GenericLattice',
    'LATTICE_REGISTRY',
    'create_lattice',
    'Supercell',

    # Magnetic Structure
    'AbstractMagneticStructure',
    'IncommensurateStructure',
    'MagneticAtom',

    # Selector
    'Pile',

    # Probe System
    'ProbeSystem',
]
