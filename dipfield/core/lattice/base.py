"""
Abstract base class for crystallographic lattices.

This module defines the interface that all lattice types must implement.
Lattices are purely geometric objects - they contain NO magnetic information.
"""

import numpy as np
from abc import ABC, abstractmethod


class AbstractLattice(ABC):
    """
    Abstract base class for three-dimensional crystallographic lattices.

    This represents the GEOMETRIC structure of the crystal only. Magnetic
    atoms, Fourier components and the propagation vector are handled by the
    magnetic structure classes, and the probe site by ProbeSystem.

    Conventions
    -----------
    Lattice vectors are stored as ROWS of a (3, 3) matrix:
        cell = [[a_x, a_y, a_z],
                [b_x, b_y, b_z],
                [c_x, c_y, c_z]]

    so that a fractional row vector f maps to Cartesian coordinates as
        r = f @ cell

    Lengths are in Angstrom.
    """

    @abstractmethod
    def get_lattice_vectors(self) -> np.ndarray:
        """
        Get the lattice vectors in Cartesian coordinates.

        Returns
        -------
        vectors : np.ndarray, shape (3, 3)
            Lattice vectors [a, b, c], one per row.

        Examples
        --------
        For a cubic lattice with a = 2:
            [[2.0, 0.0, 0.0],
             [0.0, 2.0, 0.0],
             [0.0, 0.0, 2.0]]
        """
        pass

    def get_reciprocal_vectors(self) -> np.ndarray:
        """
        Get reciprocal lattice vectors.

        Returns
        -------
        vectors : np.ndarray, shape (3, 3)
            Reciprocal vectors [b1, b2, b3], one per row.

        Notes
        -----
        Defined by: a_i · b_j = 2π δ_ij, i.e. B = 2π (A⁻¹)ᵀ.
        """
        return 2.0 * np.pi * np.linalg.inv(self.get_lattice_vectors()).T

    def get_cell_volume(self) -> float:
        """
        Calculate the volume of the unit cell.

        Returns
        -------
        volume : float
            |a · (b × c)| in Angstrom³
        """
        a, b, c = self.get_lattice_vectors()
        return abs(float(np.dot(a, np.cross(b, c))))

    def get_lattice_constant(self) -> float:
        """Length of the first lattice vector."""
        return float(np.linalg.norm(self.get_lattice_vectors()[0]))

    def fractional_to_real(self, fractional: np.ndarray) -> np.ndarray:
        """
        Convert fractional coordinates to Cartesian coordinates.

        Parameters
        ----------
        fractional : np.ndarray, shape (3,) or (N, 3)
            Positions in units of the lattice vectors

        Returns
        -------
        position : np.ndarray
            Cartesian positions, same shape as the input
        """
        return np.asarray(fractional, dtype=float) @ self.get_lattice_vectors()

    def real_to_fractional(self, position: np.ndarray) -> np.ndarray:
        """
        Convert Cartesian coordinates to fractional coordinates.

        Parameters
        ----------
        position : np.ndarray, shape (3,) or (N, 3)
            Cartesian positions

        Returns
        -------
        fractional : np.ndarray
            Positions such that position = fractional @ cell
        """
        return np.asarray(position, dtype=float) @ np.linalg.inv(self.get_lattice_vectors())

    def to_dict(self) -> dict:
        """Serialize the lattice as its type name and lattice vectors."""
        return {
            'type': self.__class__.__name__,
            'lattice_vectors': self.get_lattice_vectors().tolist(),
        }

    def __repr__(self) -> str:
        """String representation of the lattice."""
        name = self.__class__.__name__
        a = self.get_lattice_constant()
        return f"{name}(a={a:.3f}, volume={self.get_cell_volume():.3f})"
