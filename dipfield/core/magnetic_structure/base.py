"""
Abstract base classes for magnetic structures.

This module defines how magnetic moments are represented, separate from
the underlying crystallographic lattice geometry.

Key Distinction
---------------
Commensurate vs Incommensurate structures fundamentally differ:

Commensurate:
    - Finite magnetic supercell
    - Moments repeat after an integer number of unit cells
    - K is a rational fraction of the reciprocal lattice

Incommensurate:
    - No finite magnetic supercell
    - Moments rotate continuously with position (helix)
    - K is irrational, e.g. K = (0.1234, 0, 0)

For local-field calculations the distinction decides whether a single
lattice sum is enough (commensurate) or the field has to be sampled over
all relative phases between probe and magnetic order (incommensurate).
"""

import numpy as np
from abc import ABC, abstractmethod
from typing import Optional, Tuple, Dict


class AbstractMagneticStructure(ABC):
    """
    Abstract base class for magnetic ordering patterns.

    This represents HOW moments are arranged, independent of the underlying
    lattice geometry (handled by AbstractLattice).
    """

    @abstractmethod
    def get_moment(self,
                   site_index: int,
                   unit_cell: Tuple[int, int, int] = (0, 0, 0),
                   angle: float = 0.0) -> np.ndarray:
        """
        Get the magnetic moment at a specific site and unit cell.

        Parameters
        ----------
        site_index : int
            Index of the magnetic atom in the unit cell
        unit_cell : Tuple[int, int, int], optional
            Which unit cell (n1, n2, n3) in lattice vector coordinates.
            Default is (0, 0, 0) for the origin unit cell.
        angle : float, optional
            Global phase θ of the magnetic order in radians (default: 0)

        Returns
        -------
        moment : np.ndarray, shape (3,)
            Moment (mx, my, mz) in Bohr magnetons, Cartesian frame of the lattice
        """
        pass

    @abstractmethod
    def get_num_atoms(self) -> int:
        """Number of magnetic atoms in the crystallographic unit cell."""
        pass

    @abstractmethod
    def get_magnetic_unit_cell_size(self) -> Optional[Tuple[int, int, int]]:
        """
        Get the size of the magnetic unit cell.

        Returns
        -------
        size : Tuple[int, int, int] or None
            Supercell size in units of lattice vectors, or None for
            incommensurate structures (no finite supercell)
        """
        pass

    @abstractmethod
    def to_dict(self) -> Dict:
        """
        Serialize magnetic structure to dictionary.

        Notes
        -----
        Must include 'type' field to distinguish commensurate/incommensurate.
        """
        pass

    def is_commensurate(self) -> bool:
        """
        Check if structure is commensurate.

        Returns
        -------
        is_commensurate : bool
            True if commensurate (finite supercell), False if incommensurate
        """
        return self.get_magnetic_unit_cell_size() is not None

    def __repr__(self) -> str:
        """String representation."""
        name = self.__class__.__name__
        if self.is_commensurate():
            size = self.get_magnetic_unit_cell_size()
            return f"{name}(supercell={size}, atoms={self.get_num_atoms()})"
        else:
            return f"{name}(incommensurate, atoms={self.get_num_atoms()})"
