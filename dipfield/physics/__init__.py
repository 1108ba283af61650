"""
Physical observables derived from the lattice sums.
"""

from .local_fields import LocalFields

__all__ = ['LocalFields']
