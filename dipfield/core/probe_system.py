"""
ProbeSystem: a magnetic crystal together with a probe site.

This module defines the ProbeSystem class which combines:
- Crystallographic lattice (geometry)
- Magnetic structure (moments)
- Probe position (e.g. a muon stopping site)

This is the main object handed to the local-field calculation.
"""

import logging
from typing import Dict, Optional

import numpy as np

from .lattice import AbstractLattice
from .magnetic_structure import AbstractMagneticStructure, IncommensurateStructure
from ..physics.local_fields import LocalFields
from ..solvers.config import LatticeSumConfig
from ..solvers.lattice_sum import fast_incomm_sum
from ..solvers.synthesis import FieldSynthesizer


class ProbeSystem:
    """
    Complete description of a local-field calculation target.

    Parameters
    ----------
    lattice : AbstractLattice
        Crystallographic lattice defining geometry
    magnetic_structure : IncommensurateStructure
        Magnetic order (helix)
    probe_position : array_like, shape (3,)
        Fractional coordinates of the probe
    metadata : Dict, optional
        Additional information (compound, probe label, ...)

    Examples
    --------
    >>> from dipfield.core.lattice import CubicLattice
    >>> from dipfield.core.magnetic_structure import IncommensurateStructure
    >>> from dipfield.solvers import LatticeSumConfig
    >>>
    >>> lattice = CubicLattice(lattice_constant=3.0)
    >>> helix = IncommensurateStructure(
    ...     positions=[[0.0, 0.0, 0.0]],
    ...     fourier_components=[[1.0, 1.0j, 0.0]],
    ...     k_vector=[0.0, 0.0, 0.1]
    ... )
    >>> system = ProbeSystem(lattice, helix, probe_position=[0.5, 0.5, 0.5])
    >>> fields = system.compute_local_fields(LatticeSumConfig(supercell=(20, 20, 20),
    ...                                                       radius=25.0, nangles=90))
    """

    def __init__(self,
                 lattice: AbstractLattice,
                 magnetic_structure: IncommensurateStructure,
                 probe_position,
                 metadata: Optional[Dict] = None):
        # Validation
        if not isinstance(lattice, AbstractLattice):
            raise TypeError("lattice must be an AbstractLattice instance")

        if not isinstance(magnetic_structure, AbstractMagneticStructure):
            raise TypeError("magnetic_structure must be an AbstractMagneticStructure instance")

        if not isinstance(magnetic_structure, IncommensurateStructure):
            raise TypeError("Only IncommensurateStructure is supported by the lattice sum")

        probe_position = np.asarray(probe_position, dtype=float).ravel()
        if probe_position.size != 3:
            raise ValueError(f"probe_position must have 3 components, got {probe_position.size}")

        # Store components
        self.lattice = lattice
        self.magnetic_structure = magnetic_structure
        self.probe_position = probe_position
        self.metadata = metadata or {}

    @property
    def num_atoms(self) -> int:
        """Number of magnetic atoms in the unit cell."""
        return self.magnetic_structure.get_num_atoms()

    @property
    def probe_cartesian(self) -> np.ndarray:
        """Probe position in Cartesian coordinates of the unit cell."""
        return self.lattice.fractional_to_real(self.probe_position)

    def compute_local_fields(self,
                             config: Optional[LatticeSumConfig] = None,
                             contact_coupling: float = 0.0,
                             logger: Optional[logging.Logger] = None) -> LocalFields:
        """
        Run the lattice sum for this system.

        Parameters
        ----------
        config : LatticeSumConfig, optional
            Run parameters (default: LatticeSumConfig())
        contact_coupling : float, optional
            Contact coupling stored in the result (default: 0.0)
        logger : logging.Logger, optional
            Sink for diagnostics

        Returns
        -------
        fields : LocalFields
            Contact, dipolar and Lorentz fields at config.nangles angles
        """
        config = config or LatticeSumConfig()
        structure = self.magnetic_structure

        cont, dip, lor = fast_incomm_sum(
            positions=structure.positions.ravel(),
            fourier_components=structure.to_fc_array(config.fc_layout),
            k_vector=structure.k_vector,
            phases=structure.phases,
            probe_position=self.probe_position,
            supercell=config.supercell,
            cell=self.lattice.get_lattice_vectors().ravel(),
            radius=config.radius,
            nnn_for_cont=config.nnn_for_cont,
            cont_radius=config.cont_radius,
            natoms=self.num_atoms,
            nangles=config.nangles,
            fc_layout=config.fc_layout,
            n_workers=config.n_workers,
            cells_per_task=config.cells_per_task,
            show_progress=config.show_progress,
            logger=logger,
        )

        return LocalFields(FieldSynthesizer.sample_angles(config.nangles),
                           cont, dip, lor, contact_coupling=contact_coupling)

    def to_dict(self) -> Dict:
        """
        Serialize to dictionary.

        Returns
        -------
        data : Dict
            Snapshot of lattice, magnetic structure, probe and metadata,
            suitable for saving alongside results
        """
        return {
            'lattice': self.lattice.to_dict(),
            'magnetic_structure': self.magnetic_structure.to_dict(),
            'probe_position': self.probe_position.tolist(),
            'metadata': self.metadata
        }

    def __repr__(self) -> str:
        """String representation."""
        lattice_name = self.lattice.__class__.__name__
        probe = ', '.join(f"{x:.4f}" for x in self.probe_position)
        return (f"ProbeSystem(lattice={lattice_name}, "
                f"atoms={self.num_atoms}, "
                f"probe=({probe}))")

    def __str__(self) -> str:
        """Detailed string representation."""
        lines = [
            "="*50,
            "Probe System",
            "="*50,
            f"Lattice: {self.lattice}",
            f"Magnetic Structure: {self.magnetic_structure}",
            f"Probe (fractional): {self.probe_position}",
            f"Probe (Cartesian): {self.probe_cartesian}",
        ]

        if self.metadata:
            lines.append("")
            lines.append("Metadata:")
            for key, value in self.metadata.items():
                lines.append(f"  {key}: {value}")

        lines.append("="*50)

        return "\n".join(lines)
