"""
Helix Demo: local fields at a muon site

This example walks through a full calculation:
- HexagonalLattice (geometry only)
- IncommensurateStructure (helix from Fourier components)
- ProbeSystem (combines everything, runs the lattice sum)

and finishes with the raw fast_incomm_sum entry point and the plots.
"""

import numpy as np
import sys
from pathlib import Path

# Add dipfield to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dipfield import (
    HexagonalLattice,
    IncommensurateStructure,
    ProbeSystem,
    LatticeSumConfig,
    fast_incomm_sum,
)
from dipfield.utils import enable_console_logging


def example_planar_helix():
    """Example 1: in-plane helix on a hexagonal lattice."""
    print("="*60)
    print("Example 1: In-plane helix propagating along c")
    print("="*60)

    lattice = HexagonalLattice(a=3.0, c=5.0)
    print(f"\nLattice: {lattice}")
    print(f"Cell volume: {lattice.get_cell_volume():.3f} A^3")

    # Moments of 2 muB rotating in the ab-plane
    helix = IncommensurateStructure(
        positions=[[0.0, 0.0, 0.0]],
        fourier_components=[[2.0, 2.0j, 0.0]],
        k_vector=[0.0, 0.0, 0.1234]
    )
    print(f"Magnetic structure: {helix}")

    print("\nMoments along c at θ = 0:")
    for n in range(4):
        m = helix.get_moment(0, unit_cell=(0, 0, n))
        print(f"  cell (0, 0, {n}): m = [{m[0]:+.3f}, {m[1]:+.3f}, {m[2]:+.3f}]")

    system = ProbeSystem(lattice, helix, probe_position=[1/3, 2/3, 0.25],
                         metadata={'probe': 'muon', 'site': '2d'})
    print(f"\n{system}")

    config = LatticeSumConfig(supercell=(20, 20, 12), radius=25.0, nnn_for_cont=3,
                              cont_radius=6.0, nangles=72)
    fields = system.compute_local_fields(config, contact_coupling=0.1)

    norms = fields.norms('dipolar')
    print(f"\nDipolar field: {norms.min():.4f} T .. {norms.max():.4f} T")
    print(f"Lorentz field: {fields.norms('lorentz').mean():.4f} T")
    print(f"Contact field (unit coupling): {fields.norms('contact').mean():.4f} T")

    return fields


def example_entry_point():
    """Example 2: the flat-array entry point with pre-allocated outputs."""
    print("\n" + "="*60)
    print("Example 2: fast_incomm_sum on flat arrays")
    print("="*60)

    nangles = 8
    cont = np.zeros(3 * nangles)
    dip = np.zeros(3 * nangles)
    lor = np.zeros(3 * nangles)

    # Two atoms, cycloid in the ac-plane, split Fourier component layout
    fast_incomm_sum(
        positions=[0.0, 0.0, 0.0, 0.5, 0.5, 0.5],
        fourier_components=[1.0, 0.0, 0.0, 0.0, 0.0, 1.0,
                            1.0, 0.0, 0.0, 0.0, 0.0, 1.0],
        k_vector=[0.21, 0.0, 0.0],
        phases=[0.0, 0.0],
        probe_position=[0.25, 0.0, 0.5],
        supercell=[16, 16, 16],
        cell=[4.0, 0.0, 0.0, 0.0, 4.0, 0.0, 0.0, 0.0, 4.0],
        radius=30.0,
        nnn_for_cont=2,
        cont_radius=5.0,
        natoms=2,
        nangles=nangles,
        out_field_cont=cont,
        out_field_dip=dip,
        out_field_lor=lor,
        fc_layout='split',
        n_workers=4,
    )

    print("\n  angle     B_dip (T)")
    for n, b in enumerate(dip.reshape(-1, 3)):
        print(f"  {360 * n / nangles:5.1f}   [{b[0]:+.4f}, {b[1]:+.4f}, {b[2]:+.4f}]")


def example_plots(fields):
    """Example 3: field versus angle and field distribution."""
    print("\n" + "="*60)
    print("Example 3: Plots")
    print("="*60)

    import matplotlib.pyplot as plt
    from dipfield.visualization import plot_field_vs_angle, plot_field_distribution

    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(11, 4))
    plot_field_vs_angle(fields, component='dipolar', ax=ax1)
    plot_field_distribution(fields, component='total', ax=ax2)
    fig.tight_layout()

    output = Path(__file__).parent / 'helix_demo_fields.png'
    fig.savefig(output, dpi=120)
    print(f"\nSaved {output}")

    df = fields.to_dataframe()
    print("\nFirst rows of the field table:")
    print(df[['angle', 'total_x', 'total_y', 'total_z', 'total_norm']].head())


if __name__ == '__main__':
    enable_console_logging()

    fields = example_planar_helix()
    example_entry_point()
    example_plots(fields)

    print("\n" + "="*60)
    print("Done!")
    print("="*60)
