"""
Unit tests for IncommensurateStructure and the Fourier component helpers.

Tests:
- Interleaved and split layouts
- Decomposition into staggered moment and helix vectors
- Consistency warnings
- Moment evaluation and serialization
"""

import logging

import numpy as np
import pytest
from dipfield.core.magnetic_structure import (
    IncommensurateStructure,
    MagneticAtom,
    split_fourier_components,
    join_fourier_components,
    decompose_fourier_components,
    check_phases,
)


class TestFourierLayouts:
    """Test the two flat orderings of Fourier components."""

    def test_interleaved_layout(self):
        fc = np.array([1.0, 2.0, 3.0, 4.0, 5.0, 6.0])
        real, imag = split_fourier_components(fc, 'interleaved')

        assert np.allclose(real, [[1.0, 3.0, 5.0]])
        assert np.allclose(imag, [[2.0, 4.0, 6.0]])

    def test_split_layout(self):
        fc = np.array([1.0, 2.0, 3.0, 4.0, 5.0, 6.0])
        real, imag = split_fourier_components(fc, 'split')

        assert np.allclose(real, [[1.0, 2.0, 3.0]])
        assert np.allclose(imag, [[4.0, 5.0, 6.0]])

    def test_join_matches_split(self):
        real = np.array([[1.0, 0.0, 0.0], [0.0, 0.5, 0.0]])
        imag = np.array([[0.0, 1.0, 0.0], [0.0, 0.0, 0.5]])

        for layout in ('interleaved', 'split'):
            fc = join_fourier_components(real, imag, layout)
            back_real, back_imag = split_fourier_components(fc, layout)
            assert np.allclose(back_real, real)
            assert np.allclose(back_imag, imag)

    def test_unknown_layout(self):
        with pytest.raises(ValueError, match="Unknown Fourier component layout"):
            split_fourier_components(np.zeros(6), 'columns')

    def test_wrong_length(self):
        with pytest.raises(ValueError):
            split_fourier_components(np.zeros(5))


class TestDecomposition:
    """Test staggered moment and helix vector extraction."""

    def test_planar_helix(self):
        fc = join_fourier_components([[2.0, 0.0, 0.0]], [[0.0, 2.0, 0.0]])
        stagmom, a_helix, b_helix = decompose_fourier_components(fc)

        assert np.allclose(stagmom, [2.0])
        assert np.allclose(a_helix, [[1.0, 0.0, 0.0]])
        assert np.allclose(b_helix, [[0.0, 1.0, 0.0]])

    def test_consistent_helix_is_silent(self, caplog):
        caplog.set_level(logging.WARNING, logger='dipfield')
        fc = join_fourier_components([[0.0, 3.0, 0.0]], [[0.0, 0.0, 3.0]])

        decompose_fourier_components(fc)

        assert not caplog.records

    def test_magnitude_mismatch_warns(self, caplog):
        caplog.set_level(logging.WARNING, logger='dipfield')
        fc = join_fourier_components([[2.0, 0.0, 0.0]], [[0.0, 1.0, 0.0]])

        stagmom, _, b_helix = decompose_fourier_components(fc)

        assert "Staggered moment differs" in caplog.text
        # the real part defines the moment
        assert np.allclose(stagmom, [2.0])
        assert np.allclose(b_helix, [[0.0, 1.0, 0.0]])

    def test_non_orthogonal_warns(self, caplog):
        caplog.set_level(logging.WARNING, logger='dipfield')
        fc = join_fourier_components([[1.0, 0.0, 0.0]], [[np.sqrt(0.5), np.sqrt(0.5), 0.0]])

        decompose_fourier_components(fc)

        assert "not orthogonal" in caplog.text

    def test_zero_imaginary_part(self, caplog):
        """A vanishing part yields a zero unit vector and a warning."""
        caplog.set_level(logging.WARNING, logger='dipfield')
        fc = join_fourier_components([[1.0, 0.0, 0.0]], [[0.0, 0.0, 0.0]])

        stagmom, a_helix, b_helix = decompose_fourier_components(fc)

        assert np.allclose(stagmom, [1.0])
        assert np.allclose(a_helix, [[1.0, 0.0, 0.0]])
        assert np.allclose(b_helix, 0.0)
        assert "vanishing" in caplog.text

    def test_custom_logger(self, caplog):
        """Warnings go to the supplied logger."""
        custom = logging.getLogger("helix-check")
        caplog.set_level(logging.WARNING, logger="helix-check")
        fc = join_fourier_components([[2.0, 0.0, 0.0]], [[0.0, 1.0, 0.0]])

        decompose_fourier_components(fc, logger=custom)

        assert any(r.name == "helix-check" for r in caplog.records)

    def test_nonzero_phase_warns(self, caplog):
        caplog.set_level(logging.WARNING, logger='dipfield')

        check_phases([0.0, 0.25])

        assert len(caplog.records) == 1
        assert "Atom 1" in caplog.records[0].getMessage()


class TestIncommensurateStructure:
    """Test the structure class."""

    @pytest.fixture
    def helix(self):
        return IncommensurateStructure(
            positions=[[0.0, 0.0, 0.0], [0.5, 0.5, 0.5]],
            fourier_components=[[1.0, 1.0j, 0.0], [0.0, 2.0, 2.0j]],
            k_vector=[0.0, 0.0, 0.25],
            phases=[0.0, 0.0],
        )

    def test_basic_properties(self, helix):
        assert helix.get_num_atoms() == 2
        assert helix.get_magnetic_unit_cell_size() is None
        assert not helix.is_commensurate()

    def test_default_phases(self):
        structure = IncommensurateStructure([[0, 0, 0]], [[1.0, 1.0j, 0.0]], [0, 0, 0.1])
        assert np.allclose(structure.phases, [0.0])

    def test_fc_array_layouts(self, helix):
        interleaved = helix.to_fc_array('interleaved')
        split = helix.to_fc_array('split')

        assert np.allclose(interleaved[:6], [1.0, 0.0, 0.0, 1.0, 0.0, 0.0])
        assert np.allclose(split[:6], [1.0, 0.0, 0.0, 0.0, 1.0, 0.0])

    def test_atoms_view(self, helix):
        atoms = helix.atoms

        assert len(atoms) == 2
        assert isinstance(atoms[1], MagneticAtom)
        assert np.isclose(atoms[1].stagmom, 2.0)
        assert np.allclose(atoms[1].a_helix, [0.0, 1.0, 0.0])
        assert np.allclose(atoms[1].b_helix, [0.0, 0.0, 1.0])

    def test_moment_rotates_along_k(self, helix):
        """Quarter turn per cell along c for K = (0, 0, 1/4)."""
        assert np.allclose(helix.get_moment(0, (0, 0, 0)), [1.0, 0.0, 0.0])
        assert np.allclose(helix.get_moment(0, (0, 0, 1)), [0.0, 1.0, 0.0])
        assert np.allclose(helix.get_moment(0, (0, 0, 2)), [-1.0, 0.0, 0.0])
        # translation perpendicular to K does nothing
        assert np.allclose(helix.get_moment(0, (3, 1, 0)), [1.0, 0.0, 0.0])

    def test_moment_global_angle(self, helix):
        moment = helix.get_moment(1, (0, 0, 0), angle=np.pi / 2)
        assert np.allclose(moment, [0.0, 0.0, 2.0])

    def test_moment_magnitude_constant(self, helix):
        for cell in [(0, 0, 0), (1, 2, 3), (-4, 0, 7)]:
            for angle in np.linspace(0, 2 * np.pi, 7):
                assert np.isclose(np.linalg.norm(helix.get_moment(1, cell, angle)), 2.0)

    def test_dict_roundtrip(self, helix):
        data = helix.to_dict()
        restored = IncommensurateStructure.from_dict(data)

        assert data['type'] == 'incommensurate'
        assert np.allclose(restored.positions, helix.positions)
        assert np.allclose(restored.fourier_components, helix.fourier_components)
        assert np.allclose(restored.k_vector, helix.k_vector)

    def test_from_dict_wrong_type(self):
        with pytest.raises(ValueError):
            IncommensurateStructure.from_dict({'type': 'commensurate'})

    def test_shape_validation(self):
        with pytest.raises(ValueError):
            IncommensurateStructure([[0, 0, 0]], [[1.0, 1.0j, 0.0], [1.0, 0, 0]], [0, 0, 0.1])
        with pytest.raises(ValueError):
            IncommensurateStructure([[0, 0, 0]], [[1.0, 1.0j, 0.0]], [0, 0.1])
        with pytest.raises(ValueError):
            IncommensurateStructure([[0, 0, 0]], [[1.0, 1.0j, 0.0]], [0, 0, 0.1], phases=[0, 0])

    def test_warnings_reported_once(self, caplog):
        """An inconsistent structure warns at construction, not on every access."""
        caplog.set_level(logging.WARNING, logger='dipfield')
        structure = IncommensurateStructure([[0, 0, 0]], [[2.0, 1.0j, 0.0]], [0, 0, 0.1])
        assert len(caplog.records) == 1

        caplog.clear()
        for cell in [(0, 0, 0), (0, 0, 1), (2, 0, 5)]:
            structure.get_moment(0, cell)
        structure.atoms
        structure.helix_basis()

        assert caplog.records == []

    def test_helix_basis_returns_copies(self, helix):
        stagmom, a_helix, _ = helix.helix_basis()
        stagmom[:] = 0.0
        a_helix[:] = 0.0

        assert np.allclose(helix.get_moment(0), [1.0, 0.0, 0.0])
