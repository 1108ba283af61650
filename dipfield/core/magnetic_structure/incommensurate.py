"""
Incommensurate magnetic structures (helices described by Fourier components).

Each magnetic atom carries a complex Fourier component F = Re F + i Im F.
For a helix, |Re F| = |Im F| = m and Re F ⟂ Im F, and the moment of the image
at lattice translation R is

    m(R, θ) = m [cos(θ + ψ) A + sin(θ + ψ) B],   ψ = 2π (K·R + φ)

with A = Re F / |Re F|, B = Im F / |Im F| and θ the global phase angle.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import numpy as np

from .base import AbstractMagneticStructure
from ...utils.constants import EPS
from ...utils.exceptions import AllocationError
from ...utils.logging import resolve_logger

module_logger = logging.getLogger(__name__)

# Supported orderings of the 6 real numbers describing one Fourier component
#   interleaved: Re x, Im x, Re y, Im y, Re z, Im z
#   split:       Re x, Re y, Re z, Im x, Im y, Im z
FC_LAYOUTS = ('interleaved', 'split')


def split_fourier_components(fc: np.ndarray,
                             fc_layout: str = 'interleaved') -> Tuple[np.ndarray, np.ndarray]:
    """
    Split flat Fourier components into real and imaginary 3-vectors.

    Parameters
    ----------
    fc : array_like, length 6 * natoms
        Fourier components, 6 numbers per atom
    fc_layout : str
        'interleaved' or 'split', see FC_LAYOUTS

    Returns
    -------
    real, imag : np.ndarray, shape (natoms, 3)
    """
    if fc_layout not in FC_LAYOUTS:
        raise ValueError(f"Unknown Fourier component layout '{fc_layout}'. "
                         f"Available layouts: {', '.join(FC_LAYOUTS)}")

    rows = np.asarray(fc, dtype=float).ravel()
    if rows.size % 6 != 0:
        raise ValueError(f"Fourier components need 6 numbers per atom, got {rows.size} values")
    rows = rows.reshape(-1, 6)

    if fc_layout == 'interleaved':
        return rows[:, 0::2].copy(), rows[:, 1::2].copy()
    return rows[:, 0:3].copy(), rows[:, 3:6].copy()


def join_fourier_components(real: np.ndarray,
                            imag: np.ndarray,
                            fc_layout: str = 'interleaved') -> np.ndarray:
    """Inverse of split_fourier_components; returns a flat array."""
    if fc_layout not in FC_LAYOUTS:
        raise ValueError(f"Unknown Fourier component layout '{fc_layout}'. "
                         f"Available layouts: {', '.join(FC_LAYOUTS)}")

    real = np.asarray(real, dtype=float).reshape(-1, 3)
    imag = np.asarray(imag, dtype=float).reshape(-1, 3)
    rows = np.empty((real.shape[0], 6))
    if fc_layout == 'interleaved':
        rows[:, 0::2] = real
        rows[:, 1::2] = imag
    else:
        rows[:, 0:3] = real
        rows[:, 3:6] = imag
    return rows.ravel()


def _normalize_rows(vectors: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Return (norms, unit vectors); zero rows stay zero."""
    norms = np.linalg.norm(vectors, axis=1)
    units = np.zeros_like(vectors)
    nonzero = norms > 0.0
    units[nonzero] = vectors[nonzero] / norms[nonzero, None]
    return norms, units


def decompose_fourier_components(fc: np.ndarray,
                                 fc_layout: str = 'interleaved',
                                 logger: Optional[logging.Logger] = None
                                 ) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Decompose Fourier components into staggered moments and helix vectors.

    Parameters
    ----------
    fc : array_like, length 6 * natoms
        Fourier components in the given layout
    fc_layout : str
        'interleaved' (default) or 'split'
    logger : logging.Logger, optional
        Sink for consistency warnings; the module logger by default

    Returns
    -------
    stagmom : np.ndarray, shape (natoms,)
        Staggered moment |Re F|
    a_helix : np.ndarray, shape (natoms, 3)
        Unit vector along Re F
    b_helix : np.ndarray, shape (natoms, 3)
        Unit vector along Im F

    Notes
    -----
    Inconsistent input is reported and the computation goes on:
    - |Re F| and |Im F| differ by more than EPS (not a helix)
    - A and B are not orthogonal within EPS
    A zero real or imaginary part yields a zero unit vector.
    """
    log = resolve_logger(logger, module_logger)
    real, imag = split_fourier_components(fc, fc_layout)

    try:
        stagmom, a_helix = _normalize_rows(real)
        imag_norm, b_helix = _normalize_rows(imag)
    except MemoryError as exc:
        raise AllocationError(f"Cannot allocate helix basis for {real.shape[0]} atoms") from exc

    for a in range(real.shape[0]):
        if abs(stagmom[a] - imag_norm[a]) > EPS:
            log.warning("Staggered moment differs in real (%e) and imaginary (%e) "
                        "parts of atom %d", stagmom[a], imag_norm[a], a)
        if stagmom[a] == 0.0 or imag_norm[a] == 0.0:
            log.warning("Atom %d has a vanishing real or imaginary Fourier part", a)

        overlap = float(np.dot(a_helix[a], b_helix[a]))
        if abs(overlap) > EPS:
            log.warning("Real and imaginary parts of atom %d are not orthogonal by %e",
                        a, overlap)

    return stagmom, a_helix, b_helix


def check_phases(phases: np.ndarray, logger: Optional[logging.Logger] = None) -> None:
    """Report atoms whose static phase is not negligible."""
    log = resolve_logger(logger, module_logger)
    for a, phi in enumerate(np.asarray(phases, dtype=float).ravel()):
        if abs(phi) > EPS:
            log.warning("Atom %d has a nonzero static phase %e; "
                        "nonzero phases are not fully validated, double check the results",
                        a, phi)


@dataclass
class MagneticAtom:
    """
    One magnetic site of the unit cell.

    Attributes
    ----------
    position : np.ndarray, shape (3,)
        Fractional position
    stagmom : float
        Staggered moment in Bohr magnetons
    a_helix : np.ndarray, shape (3,)
        Unit vector along Re F
    b_helix : np.ndarray, shape (3,)
        Unit vector along Im F
    phase : float
        Static phase φ in units of 2π
    """
    position: np.ndarray
    stagmom: float
    a_helix: np.ndarray
    b_helix: np.ndarray
    phase: float


class IncommensurateStructure(AbstractMagneticStructure):
    """
    Incommensurate magnetic structure with helical modulation.

    The structure is defined by:
    1. Fractional positions of the magnetic atoms
    2. One complex Fourier component per atom (Cartesian frame of the lattice)
    3. The propagation vector K in reciprocal lattice units
    4. A static phase φ per atom, in units of 2π

    Parameters
    ----------
    positions : array_like, shape (natoms, 3)
        Fractional positions
    fourier_components : array_like, shape (natoms, 3), complex
        Fourier components F = Re F + i Im F in Bohr magnetons
    k_vector : array_like, shape (3,)
        Propagation vector in reciprocal lattice units
    phases : array_like, shape (natoms,), optional
        Static phases (default: all zero)
    logger : logging.Logger, optional
        Sink for consistency warnings, reported once at construction

    Examples
    --------
    Planar helix in the xy-plane propagating along c:
    >>> structure = IncommensurateStructure(
    ...     positions=[[0.0, 0.0, 0.0]],
    ...     fourier_components=[[1.0, 1.0j, 0.0]],
    ...     k_vector=[0.0, 0.0, 0.1234]
    ... )
    >>> structure.get_moment(0, unit_cell=(0, 0, 0), angle=0.0)
    array([1., 0., 0.])
    """

    def __init__(self,
                 positions,
                 fourier_components,
                 k_vector,
                 phases=None,
                 logger: Optional[logging.Logger] = None):
        positions = np.atleast_2d(np.asarray(positions, dtype=float))
        if positions.shape[1] != 3:
            raise ValueError(f"positions must have shape (natoms, 3), got {positions.shape}")

        fourier_components = np.atleast_2d(np.asarray(fourier_components, dtype=complex))
        if fourier_components.shape != positions.shape:
            raise ValueError(
                f"fourier_components shape {fourier_components.shape} does not match "
                f"positions shape {positions.shape}"
            )

        k_vector = np.asarray(k_vector, dtype=float).ravel()
        if k_vector.size != 3:
            raise ValueError(f"k_vector must have 3 components, got {k_vector.size}")

        if phases is None:
            phases = np.zeros(positions.shape[0])
        phases = np.asarray(phases, dtype=float).ravel()
        if phases.size != positions.shape[0]:
            raise ValueError(f"Expected {positions.shape[0]} phases, got {phases.size}")

        self.positions = positions
        self.fourier_components = fourier_components
        self.k_vector = k_vector
        self.phases = phases

        # consistency warnings are emitted once, here
        self._stagmom, self._a_helix, self._b_helix = decompose_fourier_components(
            self.to_fc_array(), 'interleaved', logger)

    def to_fc_array(self, fc_layout: str = 'interleaved') -> np.ndarray:
        """
        Flatten the Fourier components into 6 real numbers per atom.

        Parameters
        ----------
        fc_layout : str
            'interleaved' (default) or 'split'

        Returns
        -------
        fc : np.ndarray, shape (6 * natoms,)
        """
        return join_fourier_components(self.fourier_components.real,
                                       self.fourier_components.imag,
                                       fc_layout)

    def helix_basis(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Staggered moments and helix unit vectors, see decompose_fourier_components."""
        return self._stagmom.copy(), self._a_helix.copy(), self._b_helix.copy()

    @property
    def atoms(self) -> List[MagneticAtom]:
        """Per-atom view of the structure."""
        stagmom, a_helix, b_helix = self.helix_basis()
        return [
            MagneticAtom(position=self.positions[a].copy(),
                         stagmom=float(stagmom[a]),
                         a_helix=a_helix[a],
                         b_helix=b_helix[a],
                         phase=float(self.phases[a]))
            for a in range(self.get_num_atoms())
        ]

    def get_num_atoms(self) -> int:
        return self.positions.shape[0]

    def get_moment(self,
                   site_index: int,
                   unit_cell: Tuple[int, int, int] = (0, 0, 0),
                   angle: float = 0.0) -> np.ndarray:
        """
        Moment of one atom image at global phase `angle`.

        Returns
        -------
        moment : np.ndarray, shape (3,)
            m [cos(θ + ψ) A + sin(θ + ψ) B] with ψ = 2π (K·R + φ)
        """
        stagmom, a_helix, b_helix = self.helix_basis()
        cell = np.asarray(unit_cell, dtype=float)
        psi = 2.0 * np.pi * (np.dot(self.k_vector, cell) + self.phases[site_index])
        return stagmom[site_index] * (np.cos(angle + psi) * a_helix[site_index]
                                      + np.sin(angle + psi) * b_helix[site_index])

    def get_magnetic_unit_cell_size(self) -> None:
        """Returns None - incommensurate structures have no finite supercell."""
        return None

    def to_dict(self) -> Dict:
        """
        Serialize to dictionary.

        Returns
        -------
        data : Dict
            Dictionary with keys:
            - 'type': 'incommensurate'
            - 'positions': list of [x, y, z]
            - 'fourier_components': 6 real numbers per atom, interleaved layout
            - 'k_vector': [kx, ky, kz]
            - 'phases': list of floats
        """
        return {
            'type': 'incommensurate',
            'positions': self.positions.tolist(),
            'fourier_components': self.to_fc_array().reshape(-1, 6).tolist(),
            'k_vector': self.k_vector.tolist(),
            'phases': self.phases.tolist(),
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'IncommensurateStructure':
        """
        Reconstruct from dictionary.

        Parameters
        ----------
        data : Dict
            Dictionary from to_dict()
        """
        if data.get('type') != 'incommensurate':
            raise ValueError(f"Expected type 'incommensurate', got '{data.get('type')}'")

        real, imag = split_fourier_components(data['fourier_components'], 'interleaved')
        return cls(
            positions=np.array(data['positions']),
            fourier_components=real + 1j * imag,
            k_vector=np.array(data['k_vector']),
            phases=np.array(data.get('phases', np.zeros(len(data['positions']))))
        )

    def __repr__(self) -> str:
        """String representation."""
        k = ', '.join(f"{x:.4f}" for x in self.k_vector)
        return f"IncommensurateStructure(atoms={self.get_num_atoms()}, K=({k}))"
