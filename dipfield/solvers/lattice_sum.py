"""
Real-space lattice summation for helically modulated magnetic order.

The field at the probe depends on the global phase θ of the helix. Instead
of summing the lattice once per angle, every image inside the Lorentz sphere
contributes once to a cosine and a sine accumulator per atom:

    CDip[a] += c T(A) + s T(B)        CLor[a] += c A + s B
    SDip[a] += s T(A) - c T(B)        SLor[a] += s A - c B

with c = cos 2πψ, s = sin 2πψ, T(m) = (3 (m·u) u - m) / n³ the dipole tensor
for a unit moment and ψ the local phase of the image. The field at any θ is
then cos θ C - sin θ S (see solvers.synthesis).

Workflow
--------
1. LatticeSumEngine preprocesses the input (supercell, centered probe and
   reference atoms, helix basis of every atom).
2. LatticeSumEngine.accumulate() runs the summation over all supercell
   cells and atoms on a thread pool and returns HelixAccumulators.
3. FieldSynthesizer turns the accumulators into fields at each angle.

fast_incomm_sum() chains the three steps on flat arrays.
"""

import logging
import math
import os
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import List, Optional, Tuple

import numpy as np
from tqdm import tqdm

from ..core.lattice import Supercell
from ..core.magnetic_structure import decompose_fourier_components, check_phases
from ..core.pile import Pile
from ..utils.constants import CONT_SCALING_POWER, MIN_DISTANCE
from ..utils.exceptions import AllocationError, DegenerateGeometryError
from ..utils.logging import resolve_logger
from .synthesis import FieldSynthesizer

module_logger = logging.getLogger(__name__)

# Upper bound on cell*atom pairs processed at once by a summation task
MAX_PAIRS_PER_TASK = 1 << 18


class HelixAccumulators:
    """
    Shared state written by the summation tasks.

    Three independent guards protect the three shared structures:
    - per-atom locks for the dipolar pair {cdip, sdip}
    - per-atom locks for the Lorentz pair {clor, slor}
    - one lock for the contact selector pair {ccont, scont}

    Attributes
    ----------
    cdip, sdip : np.ndarray, shape (natoms, 3)
        Cosine and sine dipolar sums
    clor, slor : np.ndarray, shape (natoms, 3)
        Cosine and sine Lorentz sums
    ccont, scont : Pile
        Nearest contact candidates with cosine and sine payloads
    num_contact_candidates : int
        Images offered to the contact selection
    """

    def __init__(self, natoms: int, nnn_for_cont: int):
        try:
            self.cdip = np.zeros((natoms, 3))
            self.sdip = np.zeros((natoms, 3))
            self.clor = np.zeros((natoms, 3))
            self.slor = np.zeros((natoms, 3))
        except MemoryError as exc:
            raise AllocationError(f"Cannot allocate accumulators for {natoms} atoms") from exc

        self.ccont = Pile(nnn_for_cont)
        self.scont = Pile(nnn_for_cont)
        self.num_contact_candidates = 0

        self._dipolar_locks = [threading.Lock() for _ in range(natoms)]
        self._lorentz_locks = [threading.Lock() for _ in range(natoms)]
        self._contact_lock = threading.Lock()

    @property
    def natoms(self) -> int:
        return self.cdip.shape[0]

    def add_dipolar(self, atom: int, cos_part: np.ndarray, sin_part: np.ndarray) -> None:
        with self._dipolar_locks[atom]:
            self.cdip[atom] += cos_part
            self.sdip[atom] += sin_part

    def add_lorentz(self, atom: int, cos_part: np.ndarray, sin_part: np.ndarray) -> None:
        with self._lorentz_locks[atom]:
            self.clor[atom] += cos_part
            self.slor[atom] += sin_part

    def add_contact(self,
                    ranks: np.ndarray,
                    cos_parts: np.ndarray,
                    sin_parts: np.ndarray,
                    num_candidates: int,
                    image_ids: Optional[np.ndarray] = None) -> None:
        """
        Offer candidates to both selectors; the two piles see identical ranks.

        `image_ids` break ties between equal ranks. With stable ids the kept
        set is independent of the order in which tasks reach the lock.
        """
        if image_ids is None:
            image_ids = [None] * len(ranks)
        with self._contact_lock:
            self.num_contact_candidates += num_candidates
            for rank, cvec, svec, image_id in zip(ranks, cos_parts, sin_parts, image_ids):
                self.ccont.add(rank, cvec, image_id)
                self.scont.add(rank, svec, image_id)


class LatticeSumEngine:
    """
    Lattice summation over every periodic image of every magnetic atom.

    Parameters
    ----------
    positions : array_like, length 3 * natoms
        Fractional positions of the magnetic atoms
    fourier_components : array_like, length 6 * natoms
        Fourier components in the Cartesian frame of `cell`
    k_vector : array_like, length 3
        Propagation vector in reciprocal lattice units
    phases : array_like, length natoms
        Static phase of each atom in units of 2π
    probe_position : array_like, length 3
        Fractional position of the probe
    supercell : array_like of int, length 3
        Supercell extents
    cell : array_like, length 9
        Lattice vectors as rows, Angstrom
    radius : float
        Lorentz sphere radius in Angstrom
    nnn_for_cont : int
        Number of nearest atoms for the contact field
    cont_radius : float
        Cutoff for contact candidates in Angstrom
    fc_layout : str, optional
        'interleaved' (default) or 'split'
    logger : logging.Logger, optional
        Sink for diagnostics; the module logger by default

    Notes
    -----
    The probe and the reference image of every atom are placed in the cell
    with index n // 2 along each direction. The local phase of an image is

        ψ = K · ((r_image - r_probe - r_ref) @ cell⁻¹) + φ

    with cell⁻¹ the inverse of the unit cell.
    """

    def __init__(self,
                 positions,
                 fourier_components,
                 k_vector,
                 phases,
                 probe_position,
                 supercell,
                 cell,
                 radius: float,
                 nnn_for_cont: int,
                 cont_radius: float,
                 fc_layout: str = 'interleaved',
                 logger: Optional[logging.Logger] = None):
        self.log = resolve_logger(logger, module_logger)

        positions = np.asarray(positions, dtype=float).ravel()
        if positions.size == 0 or positions.size % 3 != 0:
            raise ValueError(f"positions need 3 numbers per atom, got {positions.size} values")
        self.positions = positions.reshape(-1, 3)
        natoms = self.positions.shape[0]

        fc = np.asarray(fourier_components, dtype=float).ravel()
        if fc.size != 6 * natoms:
            raise ValueError(f"Expected {6 * natoms} Fourier component values, got {fc.size}")

        self.k_vector = np.asarray(k_vector, dtype=float).ravel()
        if self.k_vector.size != 3:
            raise ValueError(f"k_vector must have 3 components, got {self.k_vector.size}")

        self.phases = np.asarray(phases, dtype=float).ravel()
        if self.phases.size != natoms:
            raise ValueError(f"Expected {natoms} phases, got {self.phases.size}")

        probe_position = np.asarray(probe_position, dtype=float).ravel()
        if probe_position.size != 3:
            raise ValueError(f"probe_position must have 3 components, got {probe_position.size}")

        if radius <= 0:
            raise ValueError("radius must be positive")
        if nnn_for_cont < 0:
            raise ValueError("nnn_for_cont must be non-negative")
        if cont_radius < 0:
            raise ValueError("cont_radius must be non-negative")

        self.radius = float(radius)
        self.nnn_for_cont = int(nnn_for_cont)
        self.cont_radius = float(cont_radius)

        self.supercell = Supercell(extents=tuple(np.asarray(supercell).ravel()), cell=cell)
        self.log.debug("Supercell extents: %s", self.supercell.extents)
        self.log.debug("Inverse cell:\n%s", self.supercell.inverse_cell)

        self.probe = self.supercell.center_fractional(probe_position)
        self.ref_positions = self.supercell.center_fractional(self.positions)
        self.log.debug("Probe position (cart): %s", self.probe)

        self.stagmom, self.a_helix, self.b_helix = decompose_fourier_components(
            fc, fc_layout, self.log)
        check_phases(self.phases, self.log)

        for a in range(natoms):
            self.log.debug("Atom %d: stagmom %e, A %s, B %s",
                           a, self.stagmom[a], self.a_helix[a], self.b_helix[a])

        if not self.supercell.contains_sphere(self.radius):
            self.log.warning("Lorentz sphere of radius %.3f A does not fit in the supercell "
                             "(inscribed radius %.3f A); increase the supercell size",
                             self.radius, self.supercell.inscribed_radius())

    @property
    def natoms(self) -> int:
        return self.positions.shape[0]

    def task_ranges(self, n_workers: int, cells_per_task: Optional[int] = None) -> List[Tuple[int, int]]:
        """
        Split the flattened cell index range into summation tasks.

        Parameters
        ----------
        n_workers : int
            Number of workers the tasks are spread over
        cells_per_task : int, optional
            Explicit chunk size; by default about four tasks per worker,
            bounded by MAX_PAIRS_PER_TASK cell-atom pairs

        Returns
        -------
        ranges : List[Tuple[int, int]]
            Half-open [start, stop) ranges covering all cells exactly once
        """
        num_cells = self.supercell.num_cells
        if cells_per_task is None:
            cells_per_task = math.ceil(num_cells / (4 * max(1, n_workers)))
            cells_per_task = min(cells_per_task, max(1, MAX_PAIRS_PER_TASK // self.natoms))
        cells_per_task = max(1, int(cells_per_task))

        return [(start, min(start + cells_per_task, num_cells))
                for start in range(0, num_cells, cells_per_task)]

    def sum_cells(self, start: int, stop: int, acc: HelixAccumulators) -> int:
        """
        Accumulate the images of all atoms in cells [start, stop).

        The cells are vectorized; per-atom partial sums are formed locally
        and merged into `acc` under its locks.

        Returns
        -------
        num_images : int
            Number of images inside the Lorentz sphere

        Raises
        ------
        DegenerateGeometryError
            If an image coincides with the probe
        AllocationError
            If the per-task work arrays cannot be allocated
        """
        try:
            images = self._image_terms(start, stop)
        except MemoryError as exc:
            raise AllocationError(f"Cannot allocate work arrays for cells "
                                  f"[{start}, {stop})") from exc
        if images is None:
            return 0

        atom_idx, image_ids, n, partial, cos_lor, sin_lor = images

        for a in np.unique(atom_idx):
            acc.add_dipolar(a, partial[0, a], partial[1, a])
            acc.add_lorentz(a, partial[2, a], partial[3, a])

        contact = n < self.cont_radius
        num_candidates = int(np.count_nonzero(contact))
        if num_candidates > 0:
            ranks = n[contact] ** CONT_SCALING_POWER
            ids = image_ids[contact]
            moments = self.stagmom[atom_idx[contact]][:, None]
            # only the local nearest candidates can enter the global selection
            order = np.lexsort((ids, ranks))[:self.nnn_for_cont]
            acc.add_contact(ranks[order],
                            (moments * cos_lor[contact])[order],
                            (moments * sin_lor[contact])[order],
                            num_candidates,
                            ids[order])

        return int(atom_idx.size)

    def _image_terms(self, start: int, stop: int):
        """
        Per-image terms of cells [start, stop), or None if no image is inside the sphere.

        Returns atom indices, flat image ids (cell * natoms + atom), distances,
        per-atom partial sums (cdip, sdip, clor, slor) and the cosine/sine
        Lorentz vectors of every image.
        """
        flat_cells = np.arange(start, stop)
        cells = np.column_stack(
            np.unravel_index(flat_cells, self.supercell.extents)
        ).astype(float)

        r = self.supercell.image_positions(self.positions, cells) - self.probe
        n = np.linalg.norm(r, axis=-1)

        cell_idx, atom_idx = np.nonzero(n < self.radius)
        if atom_idx.size == 0:
            return None

        r = r[cell_idx, atom_idx]
        n = n[cell_idx, atom_idx]

        coincident = n <= MIN_DISTANCE
        if np.any(coincident):
            first = int(np.argmax(coincident))
            raise DegenerateGeometryError(atom_idx[first], cells[cell_idx[first]], n[first])

        image_ids = flat_cells[cell_idx] * self.natoms + atom_idx

        u = r / n[:, None]
        onebrcube = 1.0 / n ** 3

        # back to unit-cell fractional coordinates for the phase
        crysvec = (r - self.ref_positions[atom_idx]) @ self.supercell.inverse_cell
        arg = 2.0 * np.pi * (crysvec @ self.k_vector + self.phases[atom_idx])
        c = np.cos(arg)[:, None]
        s = np.sin(arg)[:, None]

        a_vec = self.a_helix[atom_idx]
        b_vec = self.b_helix[atom_idx]
        t_a = onebrcube[:, None] * (3.0 * np.sum(a_vec * u, axis=1)[:, None] * u - a_vec)
        t_b = onebrcube[:, None] * (3.0 * np.sum(b_vec * u, axis=1)[:, None] * u - b_vec)

        cos_lor = c * a_vec + s * b_vec
        sin_lor = s * a_vec - c * b_vec

        partial = np.zeros((4, self.natoms, 3))
        np.add.at(partial[0], atom_idx, c * t_a + s * t_b)
        np.add.at(partial[1], atom_idx, s * t_a - c * t_b)
        np.add.at(partial[2], atom_idx, cos_lor)
        np.add.at(partial[3], atom_idx, sin_lor)

        return atom_idx, image_ids, n, partial, cos_lor, sin_lor

    def accumulate(self,
                   executor: Optional[ThreadPoolExecutor] = None,
                   n_workers: Optional[int] = None,
                   cells_per_task: Optional[int] = None,
                   show_progress: bool = False) -> HelixAccumulators:
        """
        Run the summation over the whole supercell.

        Parameters
        ----------
        executor : ThreadPoolExecutor, optional
            Pool running the tasks; without one the tasks run in the calling thread
        n_workers : int, optional
            Used to size the tasks (default: os.cpu_count())
        cells_per_task : int, optional
            Explicit task size
        show_progress : bool
            Show a tqdm progress bar

        Returns
        -------
        acc : HelixAccumulators
            Complete accumulators; every task has finished when this returns
        """
        n_workers = n_workers or os.cpu_count() or 1
        acc = HelixAccumulators(self.natoms, self.nnn_for_cont)
        ranges = self.task_ranges(n_workers, cells_per_task)

        num_images = 0
        if executor is None:
            for start, stop in tqdm(ranges, desc="Summing lattice images", disable=not show_progress):
                num_images += self.sum_cells(start, stop, acc)
        else:
            futures = [executor.submit(self.sum_cells, start, stop, acc) for start, stop in ranges]
            try:
                for future in tqdm(as_completed(futures), total=len(futures),
                                   desc="Summing lattice images", disable=not show_progress):
                    num_images += future.result()
            except BaseException:
                for future in futures:
                    future.cancel()
                raise

        self.log.info("Summed %d images within %.3f A over %d cells (%d tasks); "
                      "%d contact candidates, %d kept",
                      num_images, self.radius, self.supercell.num_cells, len(ranges),
                      acc.num_contact_candidates, len(acc.ccont))
        return acc


def _output_array(out, nangles: int, name: str) -> np.ndarray:
    if out is None:
        try:
            return np.zeros(3 * nangles)
        except MemoryError as exc:
            raise AllocationError(f"Cannot allocate {name} for {nangles} angles") from exc

    if not isinstance(out, np.ndarray):
        raise TypeError(f"{name} must be a numpy array")
    if not np.issubdtype(out.dtype, np.floating):
        raise TypeError(f"{name} must have a floating dtype, got {out.dtype}")
    if out.size != 3 * nangles:
        raise ValueError(f"{name} must hold {3 * nangles} values, got {out.size}")
    return out


def fast_incomm_sum(positions,
                    fourier_components,
                    k_vector,
                    phases,
                    probe_position,
                    supercell,
                    cell,
                    radius: float,
                    nnn_for_cont: int,
                    cont_radius: float,
                    natoms: int,
                    nangles: int,
                    out_field_cont: Optional[np.ndarray] = None,
                    out_field_dip: Optional[np.ndarray] = None,
                    out_field_lor: Optional[np.ndarray] = None,
                    *,
                    fc_layout: str = 'interleaved',
                    n_workers: Optional[int] = None,
                    cells_per_task: Optional[int] = None,
                    show_progress: bool = False,
                    logger: Optional[logging.Logger] = None
                    ) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Contact, dipolar and Lorentz fields of a helical structure at the probe.

    The fields are sampled at `nangles` global phases θ_n = 2π n / nangles.

    Parameters
    ----------
    positions : array_like, length 3 * natoms
        Fractional positions of the magnetic atoms
    fourier_components : array_like, length 6 * natoms
        Fourier components, by default Re x, Im x, Re y, Im y, Re z, Im z
        per atom, in the Cartesian frame of `cell` (Bohr magnetons)
    k_vector : array_like, length 3
        Propagation vector in reciprocal lattice units
    phases : array_like, length natoms
        Static phase of each atom in units of 2π
    probe_position : array_like, length 3
        Fractional position of the probe
    supercell : array_like of int, length 3
        Supercell extents along the lattice vectors
    cell : array_like, length 9
        Lattice vectors a_x, a_y, a_z, b_x, b_y, b_z, c_x, c_y, c_z (Angstrom)
    radius : float
        Lorentz sphere radius (Angstrom)
    nnn_for_cont : int
        Number of nearest atoms entering the contact field
    cont_radius : float
        Only atoms closer than this may enter the contact field (Angstrom)
    natoms : int
        Number of magnetic atoms
    nangles : int
        Number of sampled angles
    out_field_cont, out_field_dip, out_field_lor : np.ndarray, optional
        Pre-allocated outputs of 3 * nangles values, filled in place with
        x, y, z of angle n at 3n, 3n + 1, 3n + 2
    fc_layout : str, optional
        'interleaved' (default) or 'split' (Re x, Re y, Re z, Im x, Im y, Im z)
    n_workers : int, optional
        Thread pool size (default: os.cpu_count())
    cells_per_task : int, optional
        Supercell cells per summation task
    show_progress : bool, optional
        Show a progress bar for the summation
    logger : logging.Logger, optional
        Sink for diagnostics (default: module logger, silent unless configured)

    Returns
    -------
    out_field_cont, out_field_dip, out_field_lor : np.ndarray
        Contact, dipolar and Lorentz fields in Tesla

    Raises
    ------
    ValueError
        If the inputs are inconsistent
    DegenerateGeometryError
        If the probe coincides with an atom image inside the Lorentz sphere
    AllocationError
        If the working storage cannot be allocated

    Examples
    --------
    >>> cont, dip, lor = fast_incomm_sum(
    ...     positions=[0.0, 0.0, 0.0],
    ...     fourier_components=[1.0, 0.0, 0.0, 1.0, 0.0, 0.0],
    ...     k_vector=[0.0, 0.0, 0.1],
    ...     phases=[0.0],
    ...     probe_position=[0.5, 0.5, 0.5],
    ...     supercell=[20, 20, 20],
    ...     cell=[2.0, 0, 0, 0, 2.0, 0, 0, 0, 2.0],
    ...     radius=15.0, nnn_for_cont=2, cont_radius=5.0,
    ...     natoms=1, nangles=36)
    >>> dip.reshape(-1, 3).shape
    (36, 3)
    """
    log = resolve_logger(logger, module_logger)

    natoms = int(natoms)
    nangles = int(nangles)
    if natoms < 1:
        raise ValueError("natoms must be at least 1")
    if nangles < 1:
        raise ValueError("nangles must be at least 1")
    if np.asarray(positions).size != 3 * natoms:
        raise ValueError(f"Expected {3 * natoms} position values, got {np.asarray(positions).size}")
    if n_workers is not None and n_workers < 1:
        raise ValueError("n_workers must be at least 1")

    out_field_cont = _output_array(out_field_cont, nangles, 'out_field_cont')
    out_field_dip = _output_array(out_field_dip, nangles, 'out_field_dip')
    out_field_lor = _output_array(out_field_lor, nangles, 'out_field_lor')

    engine = LatticeSumEngine(positions, fourier_components, k_vector, phases,
                              probe_position, supercell, cell,
                              radius, nnn_for_cont, cont_radius,
                              fc_layout=fc_layout, logger=log)

    n_workers = n_workers or os.cpu_count() or 1
    angles = FieldSynthesizer.sample_angles(nangles)

    with ThreadPoolExecutor(max_workers=n_workers) as executor:
        acc = engine.accumulate(executor, n_workers, cells_per_task, show_progress)

        synthesizer = FieldSynthesizer(acc, engine.stagmom, engine.radius, logger=log)
        dip_lor = executor.submit(synthesizer.dipolar_lorentz, angles)
        cont = executor.submit(synthesizer.contact, angles)
        dip_field, lor_field = dip_lor.result()
        cont_field = cont.result()

    out_field_dip[...] = dip_field.reshape(out_field_dip.shape)
    out_field_lor[...] = lor_field.reshape(out_field_lor.shape)
    out_field_cont[...] = cont_field.reshape(out_field_cont.shape)

    return out_field_cont, out_field_dip, out_field_lor
