"""
Run configuration for the lattice summation.
"""

from dataclasses import dataclass, asdict
from typing import Optional, Tuple, Dict

from ..core.magnetic_structure import FC_LAYOUTS


@dataclass
class LatticeSumConfig:
    """
    Parameters of one local-field calculation.

    Attributes
    ----------
    supercell : Tuple[int, int, int]
        Supercell extents along the three lattice vectors
    radius : float
        Lorentz sphere radius in Angstrom
    nnn_for_cont : int
        Number of nearest magnetic atoms used for the contact field
    cont_radius : float
        Only atoms closer than this (Angstrom) may contribute to the contact field
    nangles : int
        Number of phase angles sampled over one full turn
    fc_layout : str
        Ordering of the 6 numbers per Fourier component ('interleaved' or 'split')
    n_workers : int, optional
        Thread pool size (default: os.cpu_count())
    cells_per_task : int, optional
        Supercell cells handled by one summation task (default: automatic)
    show_progress : bool
        Show a progress bar over the summation tasks
    """
    supercell: Tuple[int, int, int] = (10, 10, 10)
    radius: float = 50.0
    nnn_for_cont: int = 2
    cont_radius: float = 10.0
    nangles: int = 360
    fc_layout: str = 'interleaved'
    n_workers: Optional[int] = None
    cells_per_task: Optional[int] = None
    show_progress: bool = False

    def __post_init__(self):
        self.supercell = tuple(int(n) for n in self.supercell)
        if len(self.supercell) != 3 or min(self.supercell) < 1:
            raise ValueError(f"supercell must be 3 positive integers, got {self.supercell}")

        if self.radius <= 0:
            raise ValueError("radius must be positive")

        if self.nnn_for_cont < 0:
            raise ValueError("nnn_for_cont must be non-negative")

        if self.cont_radius < 0:
            raise ValueError("cont_radius must be non-negative")

        if self.nangles < 1:
            raise ValueError("nangles must be at least 1")

        if self.fc_layout not in FC_LAYOUTS:
            raise ValueError(f"Choose fc_layout in {FC_LAYOUTS}")

        if self.n_workers is not None and self.n_workers < 1:
            raise ValueError("n_workers must be at least 1")

        if self.cells_per_task is not None and self.cells_per_task < 1:
            raise ValueError("cells_per_task must be at least 1")

    def to_dict(self) -> Dict:
        data = asdict(self)
        data['supercell'] = list(self.supercell)
        return data

    @classmethod
    def from_dict(cls, data: Dict) -> 'LatticeSumConfig':
        return cls(**data)
