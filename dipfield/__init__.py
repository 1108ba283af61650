"""
dipfield: local magnetic fields of incommensurate magnetic structures

A Python package for computing the dipolar, Lorentz and contact fields at a
probe site (e.g. a muon stopping site) in a crystal with helical magnetic
order, sampled over all relative phases between probe and magnetic order.

Main Components
---------------
core : Core domain models (Lattice, Supercell, IncommensurateStructure, Pile, ProbeSystem)
solvers : Lattice summation engine, field synthesis, run configuration
physics : LocalFields result container
visualization : Field-vs-angle and field distribution plots
utils : Constants, exceptions, logging

Quick Start
-----------
>>> from dipfield import CubicLattice, IncommensurateStructure, ProbeSystem, LatticeSumConfig
>>>
>>> lattice = CubicLattice(lattice_constant=3.0)
>>>
>>> # Helix in the ab-plane propagating along c
>>> helix = IncommensurateStructure(
...     positions=[[0.0, 0.0, 0.0]],
...     fourier_components=[[2.0, 2.0j, 0.0]],
...     k_vector=[0.0, 0.0, 0.1234]
... )
>>>
>>> system = ProbeSystem(lattice, helix, probe_position=[0.5, 0.5, 0.25])
>>> config = LatticeSumConfig(supercell=(30, 30, 30), radius=40.0, nangles=180)
>>> fields = system.compute_local_fields(config)
>>> fields.norms('dipolar').shape
(180,)

Diagnostics go through the standard logging module and are silent unless
configured, e.g. with dipfield.utils.enable_console_logging().
"""

import logging

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

# High-level API exports
from .core import (
    # Lattice
    AbstractLattice,
    CubicLattice,
    TetragonalLattice,
    HexagonalLattice,
    GenericLattice,
    create_lattice,
    Supercell,

    # Magnetic Structure
    AbstractMagneticStructure,
    IncommensurateStructure,

    # Selector and system
    Pile,
    ProbeSystem,
)
from .solvers import LatticeSumConfig, LatticeSumEngine, FieldSynthesizer, fast_incomm_sum
from .physics import LocalFields
from .utils import DipfieldError, AllocationError, DegenerateGeometryError

__all__ = [
    # Version info
    '__version__',

    # Core abstractions
    'AbstractLattice',
    'CubicLattice',
    'TetragonalLattice',
    'HexagonalLattice',
    'GenericLattice',
    'create_lattice',
    'Supercell',
    'AbstractMagneticStructure',
    'IncommensurateStructure',
    'Pile',
    'ProbeSystem',

    # Solvers
    'LatticeSumConfig',
    'LatticeSumEngine',
    'FieldSynthesizer',
    'fast_incomm_sum',

    # Results
    'LocalFields',

    # Errors
    'DipfieldError',
    'AllocationError',
    'DegenerateGeometryError',
]
