"""
Preset lattice implementations for common crystal systems.

This module provides concrete implementations of AbstractLattice for:
- Cubic lattice
- Tetragonal lattice
- Hexagonal lattice
- Generic lattice (any 3x3 cell matrix)
"""

import numpy as np
from .base import AbstractLattice


class CubicLattice(AbstractLattice):
    """
    Simple cubic Bravais lattice.

    Parameters
    ----------
    lattice_constant : float, optional
        Lattice constant 'a' in Angstrom (default: 1.0)

    Examples
    --------
    >>> lattice = CubicLattice(lattice_constant=4.0)
    >>> lattice.get_cell_volume()
    64.0
    """

    def __init__(self, lattice_constant: float = 1.0):
        if lattice_constant <= 0:
            raise ValueError("Lattice constant must be positive")

        self.lattice_constant = lattice_constant

    def get_lattice_vectors(self) -> np.ndarray:
        """a * identity."""
        return self.lattice_constant * np.eye(3)


class TetragonalLattice(AbstractLattice):
    """
    Tetragonal lattice with a = b ≠ c, all angles 90°.

    Parameters
    ----------
    a : float
        In-plane lattice constant in Angstrom
    c : float
        Out-of-plane lattice constant in Angstrom
    """

    def __init__(self, a: float = 1.0, c: float = 1.0):
        if a <= 0 or c <= 0:
            raise ValueError("Lattice constants must be positive")

        self.a = a
        self.c = c

    def get_lattice_vectors(self) -> np.ndarray:
        """diag(a, a, c)."""
        return np.diag([self.a, self.a, self.c])


class HexagonalLattice(AbstractLattice):
    """
    Hexagonal lattice with γ = 120°.

    Geometry
    --------
    Lattice vectors (for constants a, c):
        a1 = a * [1, 0, 0]
        a2 = a * [-1/2, √3/2, 0]
        a3 = c * [0, 0, 1]

    Parameters
    ----------
    a : float
        In-plane lattice constant in Angstrom
    c : float
        Out-of-plane lattice constant in Angstrom
    """

    def __init__(self, a: float = 1.0, c: float = 1.0):
        if a <= 0 or c <= 0:
            raise ValueError("Lattice constants must be positive")

        self.a = a
        self.c = c

    def get_lattice_vectors(self) -> np.ndarray:
        a, c = self.a, self.c
        return np.array([
            [a,         0.0,                    0.0],
            [-a / 2.0,  a * np.sqrt(3) / 2.0,   0.0],
            [0.0,       0.0,                    c]
        ])


class GenericLattice(AbstractLattice):
    """
    Lattice defined directly by its cell matrix.

    Parameters
    ----------
    cell : array_like, shape (3, 3) or (9,)
        Lattice vectors as rows: a_x, a_y, a_z, b_x, b_y, b_z, c_x, c_y, c_z

    Raises
    ------
    ValueError
        If the cell does not have 9 entries or is singular
    """

    def __init__(self, cell):
        cell = np.asarray(cell, dtype=float)
        if cell.size != 9:
            raise ValueError(f"cell must have 9 entries, got {cell.size}")
        cell = cell.reshape(3, 3)

        if abs(np.linalg.det(cell)) < 1e-12:
            raise ValueError("Lattice vectors are linearly dependent")

        self.cell = cell

    def get_lattice_vectors(self) -> np.ndarray:
        return self.cell.copy()


# Lattice registry for config-based construction
LATTICE_REGISTRY = {
    'cubic': CubicLattice,
    'tetragonal': TetragonalLattice,
    'hexagonal': HexagonalLattice,
    'generic': GenericLattice,
}


def create_lattice(lattice_type: str, **kwargs) -> AbstractLattice:
    """
    Factory function to create lattices from string names.

    Parameters
    ----------
    lattice_type : str
        Type of lattice ('cubic', 'tetragonal', 'hexagonal', 'generic')
    **kwargs
        Additional arguments passed to lattice constructor
        (e.g., lattice_constant=4.2)

    Returns
    -------
    lattice : AbstractLattice
        Instantiated lattice object

    Examples
    --------
    >>> lattice = create_lattice('cubic', lattice_constant=4.2)
    >>> isinstance(lattice, CubicLattice)
    True

    Raises
    ------
    ValueError
        If lattice_type is not recognized
    """
    if lattice_type not in LATTICE_REGISTRY:
        available = ', '.join(LATTICE_REGISTRY.keys())
        raise ValueError(f"Unknown lattice type '{lattice_type}'. "
                        f"Available types: {available}")

    lattice_class = LATTICE_REGISTRY[lattice_type]
    return lattice_class(**kwargs)
