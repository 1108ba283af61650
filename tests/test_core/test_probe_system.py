"""
Tests for ProbeSystem.
"""

import numpy as np
import pytest
from dipfield.core import CubicLattice, IncommensurateStructure, ProbeSystem
from dipfield.core.magnetic_structure import AbstractMagneticStructure
from dipfield.physics import LocalFields
from dipfield.solvers import LatticeSumConfig, fast_incomm_sum
from dipfield.utils.constants import CONTACT_PREFACTOR


class _StaticStructure(AbstractMagneticStructure):
    """Minimal commensurate structure for type checks."""

    def get_moment(self, site_index, unit_cell=(0, 0, 0), angle=0.0):
        return np.zeros(3)

    def get_num_atoms(self):
        return 1

    def get_magnetic_unit_cell_size(self):
        return (1, 1, 1)

    def to_dict(self):
        return {'type': 'static'}


@pytest.fixture
def system():
    lattice = CubicLattice(lattice_constant=2.0)
    helix = IncommensurateStructure(
        positions=[[0.0, 0.0, 0.0]],
        fourier_components=[[1.0, 1.0j, 0.0]],
        k_vector=[0.0, 0.0, 0.15],
    )
    return ProbeSystem(lattice, helix, probe_position=[0.5, 0.5, 0.5],
                       metadata={'compound': 'test'})


@pytest.fixture
def config():
    return LatticeSumConfig(supercell=(8, 8, 8), radius=6.0, nnn_for_cont=8,
                            cont_radius=2.0, nangles=16, n_workers=2)


class TestProbeSystem:

    def test_properties(self, system):
        assert system.num_atoms == 1
        assert np.allclose(system.probe_cartesian, [1.0, 1.0, 1.0])

    def test_type_checks(self):
        helix = IncommensurateStructure([[0, 0, 0]], [[1.0, 1.0j, 0.0]], [0, 0, 0.1])

        with pytest.raises(TypeError):
            ProbeSystem("cubic", helix, [0.5, 0.5, 0.5])
        with pytest.raises(TypeError):
            ProbeSystem(CubicLattice(), "helix", [0.5, 0.5, 0.5])
        with pytest.raises(TypeError):
            ProbeSystem(CubicLattice(), _StaticStructure(), [0.5, 0.5, 0.5])

    def test_probe_position_validation(self):
        helix = IncommensurateStructure([[0, 0, 0]], [[1.0, 1.0j, 0.0]], [0, 0, 0.1])
        with pytest.raises(ValueError):
            ProbeSystem(CubicLattice(), helix, [0.5, 0.5])

    def test_compute_local_fields(self, system, config):
        fields = system.compute_local_fields(config, contact_coupling=0.5)

        assert isinstance(fields, LocalFields)
        assert fields.nangles == 16
        assert fields.contact_coupling == 0.5
        assert np.allclose(fields.angles, 2 * np.pi * np.arange(16) / 16)

    def test_matches_entry_point(self, system, config):
        fields = system.compute_local_fields(config)
        cont, dip, lor = fast_incomm_sum(
            positions=[0.0, 0.0, 0.0],
            fourier_components=[1.0, 0.0, 0.0, 1.0, 0.0, 0.0],
            k_vector=[0.0, 0.0, 0.15],
            phases=[0.0],
            probe_position=[0.5, 0.5, 0.5],
            supercell=[8, 8, 8],
            cell=[2.0, 0, 0, 0, 2.0, 0, 0, 0, 2.0],
            radius=6.0, nnn_for_cont=8, cont_radius=2.0,
            natoms=1, nangles=16)

        assert np.allclose(fields.dipolar, dip.reshape(-1, 3))
        assert np.allclose(fields.lorentz, lor.reshape(-1, 3))
        assert np.allclose(fields.contact, cont.reshape(-1, 3))

    def test_contact_magnitude_in_plane(self, system, config):
        """Contact field of an xy-helix stays in the plane and is bounded."""
        fields = system.compute_local_fields(config)

        assert np.allclose(fields.contact[:, 2], 0.0)
        assert np.all(fields.norms('contact') <= CONTACT_PREFACTOR + 1e-12)

    def test_to_dict(self, system):
        data = system.to_dict()

        assert data['lattice']['type'] == 'CubicLattice'
        assert data['magnetic_structure']['type'] == 'incommensurate'
        assert data['probe_position'] == [0.5, 0.5, 0.5]
        assert data['metadata'] == {'compound': 'test'}

    def test_string_forms(self, system):
        assert "ProbeSystem(lattice=CubicLattice" in repr(system)
        text = str(system)
        assert "Probe System" in text
        assert "compound: test" in text
