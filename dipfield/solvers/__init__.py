"""
Numerical solvers.

- lattice_sum: real-space summation over the supercell (LatticeSumEngine,
  fast_incomm_sum entry point)
- synthesis: field reconstruction at arbitrary phase angles
- config: run parameters
"""

from .config import LatticeSumConfig
from .synthesis import FieldSynthesizer
from .lattice_sum import HelixAccumulators, LatticeSumEngine, fast_incomm_sum

__all__ = [
    'LatticeSumConfig',
    'FieldSynthesizer',
    'HelixAccumulators',
    'LatticeSumEngine',
    'fast_incomm_sum',
]
