"""
Exception hierarchy for dipfield.

Input inconsistencies are logged, never raised. Only faults that would make
the output meaningless end up here.
"""


class DipfieldError(Exception):
    """Base class for all dipfield errors."""


class AllocationError(DipfieldError, MemoryError):
    """Accumulator or selector storage could not be allocated."""


class DegenerateGeometryError(DipfieldError, ValueError):
    """
    The probe coincides with a magnetic atom image.

    Attributes
    ----------
    atom_index : int
        Index of the offending atom in the unit cell
    cell : tuple of int
        Supercell cell index (i, j, k) of the image
    distance : float
        Probe-image distance in Angstrom
    """

    def __init__(self, atom_index, cell, distance):
        self.atom_index = int(atom_index)
        self.cell = tuple(int(c) for c in cell)
        self.distance = float(distance)
        super().__init__(
            f"Probe coincides with atom {self.atom_index} in cell {self.cell} "
            f"(distance {self.distance:.3e} A). Move the probe off the atom site."
        )
