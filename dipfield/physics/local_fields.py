"""
Local magnetic fields at the probe site.
"""

import numpy as np
import pandas as pd


class LocalFields:
    """
    Field components at the probe for every sampled phase angle.

    Parameters
    ----------
    angles : array_like, shape (nangles,)
        Phase angles in radians
    contact : array_like, shape (nangles, 3) or (3 * nangles,)
        Contact field in Tesla, per unit contact coupling
    dipolar : array_like, shape (nangles, 3) or (3 * nangles,)
        Dipolar field in Tesla
    lorentz : array_like, shape (nangles, 3) or (3 * nangles,)
        Lorentz field in Tesla
    contact_coupling : float, optional
        Scale of the contact term in the total field (default: 0.0)

    Notes
    -----
    total = dipolar + lorentz + contact_coupling * contact

    The contact field from the lattice sum assumes a unit coupling; the
    actual hyperfine coupling is material specific and usually fitted.
    """

    def __init__(self, angles, contact, dipolar, lorentz, contact_coupling: float = 0.0):
        self.angles = np.atleast_1d(np.asarray(angles, dtype=float))
        nangles = self.angles.size

        self.contact = np.asarray(contact, dtype=float).reshape(nangles, 3)
        self.dipolar = np.asarray(dipolar, dtype=float).reshape(nangles, 3)
        self.lorentz = np.asarray(lorentz, dtype=float).reshape(nangles, 3)
        self.contact_coupling = float(contact_coupling)

    @property
    def nangles(self) -> int:
        return self.angles.size

    @property
    def total(self) -> np.ndarray:
        """Total field, shape (nangles, 3)."""
        return self.dipolar + self.lorentz + self.contact_coupling * self.contact

    def norms(self, component: str = 'total') -> np.ndarray:
        """
        Field magnitude at every angle.

        Parameters
        ----------
        component : str
            'total', 'dipolar', 'lorentz' or 'contact'
        """
        return np.linalg.norm(self.get_component(component), axis=1)

    def get_component(self, component: str) -> np.ndarray:
        components = {
            'total': self.total,
            'dipolar': self.dipolar,
            'lorentz': self.lorentz,
            'contact': self.contact,
        }
        if component not in components:
            raise ValueError(f"Unknown field component '{component}'. "
                             f"Available: {', '.join(components)}")
        return components[component]

    def to_dataframe(self) -> pd.DataFrame:
        """
        Tabulate all components, one row per angle.

        Columns: angle, then {contact,dipolar,lorentz,total}_{x,y,z} and
        |total|.
        """
        data = {'angle': self.angles}
        for name in ('contact', 'dipolar', 'lorentz', 'total'):
            values = self.get_component(name)
            for i, axis in enumerate('xyz'):
                data[f"{name}_{axis}"] = values[:, i]
        data['total_norm'] = self.norms('total')
        return pd.DataFrame(data)

    def __repr__(self) -> str:
        return f"LocalFields(nangles={self.nangles}, contact_coupling={self.contact_coupling})"
