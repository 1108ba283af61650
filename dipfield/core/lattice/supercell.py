"""
Finite supercell used to approximate the infinite crystal in real space.
"""

from dataclasses import dataclass, field
from typing import Tuple

import numpy as np


@dataclass
class Supercell:
    """
    Integer replication of a unit cell.

    Attributes
    ----------
    extents : Tuple[int, int, int]
        Number of unit cells (nx, ny, nz) along each lattice vector
    cell : np.ndarray, shape (3, 3)
        Unit cell, lattice vectors as rows
    matrix : np.ndarray, shape (3, 3)
        Supercell lattice matrix diag(nx, ny, nz) @ cell
    inverse_cell : np.ndarray, shape (3, 3)
        Inverse of the UNIT cell; maps Cartesian displacements back to
        unit-cell fractional coordinates for phase evaluation

    Notes
    -----
    Positions are centered with integer half extents: a unit-cell fractional
    position f is placed at (f + n // 2) / n in supercell fractional units,
    i.e. in the cell with index n // 2 along each direction.
    """
    extents: Tuple[int, int, int]
    cell: np.ndarray
    matrix: np.ndarray = field(init=False, repr=False)
    inverse_cell: np.ndarray = field(init=False, repr=False)

    def __post_init__(self):
        extents = tuple(int(n) for n in np.asarray(self.extents).ravel())
        if len(extents) != 3:
            raise ValueError(f"Supercell needs 3 extents, got {len(extents)}")
        if min(extents) < 1:
            raise ValueError(f"Supercell extents must be at least 1, got {extents}")

        cell = np.asarray(self.cell, dtype=float)
        if cell.size != 9:
            raise ValueError(f"cell must have 9 entries, got {cell.size}")
        cell = cell.reshape(3, 3)

        if abs(np.linalg.det(cell)) < 1e-12:
            raise ValueError("Lattice vectors are linearly dependent")

        self.extents = extents
        self.cell = cell
        self.inverse_cell = np.linalg.inv(cell)
        self.matrix = np.diag(np.array(extents, dtype=float)) @ cell

    @property
    def num_cells(self) -> int:
        nx, ny, nz = self.extents
        return nx * ny * nz

    @property
    def half_extents(self) -> np.ndarray:
        """Integer index of the central cell along each direction."""
        return np.array([n // 2 for n in self.extents], dtype=float)

    def center_fractional(self, fractional: np.ndarray) -> np.ndarray:
        """
        Place unit-cell fractional positions in the central cell.

        Parameters
        ----------
        fractional : np.ndarray, shape (3,) or (N, 3)
            Unit-cell fractional coordinates

        Returns
        -------
        position : np.ndarray
            Cartesian positions inside the supercell
        """
        ext = np.array(self.extents, dtype=float)
        sc_frac = (np.asarray(fractional, dtype=float) + self.half_extents) / ext
        return sc_frac @ self.matrix

    def image_positions(self, fractional: np.ndarray, cells: np.ndarray) -> np.ndarray:
        """
        Cartesian positions of periodic images.

        Parameters
        ----------
        fractional : np.ndarray, shape (natoms, 3)
            Unit-cell fractional positions of the atoms
        cells : np.ndarray, shape (ncells, 3)
            Cell indices (i, j, k)

        Returns
        -------
        positions : np.ndarray, shape (ncells, natoms, 3)
        """
        ext = np.array(self.extents, dtype=float)
        sc_frac = (np.asarray(fractional, dtype=float)[None, :, :]
                   + np.asarray(cells, dtype=float)[:, None, :]) / ext
        return sc_frac @ self.matrix

    def inscribed_radius(self) -> float:
        """
        Half of the smallest distance between opposite supercell faces.

        A sphere centered in the supercell lies fully inside it only if its
        radius does not exceed this value.
        """
        a, b, c = self.matrix
        volume = abs(np.dot(a, np.cross(b, c)))
        heights = [
            volume / np.linalg.norm(np.cross(b, c)),
            volume / np.linalg.norm(np.cross(c, a)),
            volume / np.linalg.norm(np.cross(a, b)),
        ]
        return 0.5 * float(min(heights))

    def contains_sphere(self, radius: float) -> bool:
        """Check whether a centered sphere of `radius` fits in the supercell."""
        return radius <= self.inscribed_radius()
