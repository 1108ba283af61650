"""
Field synthesis from the cosine/sine accumulators.

For a global phase θ the field of the helix is the linear combination

    B(θ) = cos θ C - sin θ S

of the angle-independent sums collected by the lattice summation, so any
number of angles costs O(natoms) each and no further lattice scan.
"""

import logging
from typing import Optional, Tuple

import numpy as np

from ..utils.constants import (
    DIPOLAR_PREFACTOR,
    LORENTZ_PREFACTOR,
    CONTACT_PREFACTOR,
    EPS,
)
from ..utils.logging import resolve_logger

module_logger = logging.getLogger(__name__)


class FieldSynthesizer:
    """
    Dipolar, Lorentz and contact fields as functions of the phase angle.

    The synthesizer only reads the accumulators, so the dipolar/Lorentz and
    contact parts can be evaluated concurrently once the summation is done.

    Parameters
    ----------
    accumulators : HelixAccumulators
        Finished lattice sums
    stagmom : np.ndarray, shape (natoms,)
        Staggered moment of every atom (Bohr magnetons)
    radius : float
        Lorentz sphere radius in Angstrom
    logger : logging.Logger, optional
        Sink for consistency warnings
    """

    def __init__(self, accumulators, stagmom: np.ndarray, radius: float,
                 logger: Optional[logging.Logger] = None):
        self.acc = accumulators
        self.stagmom = np.asarray(stagmom, dtype=float)
        self.radius = float(radius)
        self.log = resolve_logger(logger, module_logger)

    @staticmethod
    def sample_angles(nangles: int) -> np.ndarray:
        """Angles 2π n / nangles for n = 0 .. nangles - 1."""
        return 2.0 * np.pi * (np.arange(nangles) / nangles)

    def dipolar_lorentz(self, angles) -> Tuple[np.ndarray, np.ndarray]:
        """
        Dipolar and Lorentz fields.

        Parameters
        ----------
        angles : array_like, shape (nangles,)
            Phase angles in radians

        Returns
        -------
        dipolar, lorentz : np.ndarray, shape (nangles, 3)
            Fields in Tesla
        """
        angles = np.atleast_1d(np.asarray(angles, dtype=float))
        cos_t = np.cos(angles)[:, None]
        sin_t = np.sin(angles)[:, None]

        m = self.stagmom[:, None]
        cdip = np.sum(m * self.acc.cdip, axis=0)
        sdip = np.sum(m * self.acc.sdip, axis=0)
        clor = np.sum(m * self.acc.clor, axis=0)
        slor = np.sum(m * self.acc.slor, axis=0)

        dipolar = DIPOLAR_PREFACTOR * (cos_t * cdip - sin_t * sdip)

        sphere = 3.0 / (4.0 * np.pi * self.radius ** 3)
        lorentz = LORENTZ_PREFACTOR * sphere * (cos_t * clor - sin_t * slor)

        return dipolar, lorentz

    def contact_sums(self) -> Tuple[np.ndarray, np.ndarray, float, int]:
        """
        Reduce the contact selectors with weights 1 / rank.

        Returns
        -------
        cos_sum, sin_sum : np.ndarray, shape (3,)
            Weighted sums of the cosine and sine payloads
        sum_of_weights : float
        num_moments : int
            Number of kept slots whose cosine and sine ranks agree
        """
        cranks, celements = self.acc.ccont.finalize()
        sranks, selements = self.acc.scont.finalize()

        cos_sum = np.zeros(3)
        sin_sum = np.zeros(3)
        sum_of_weights = 0.0
        num_moments = 0

        if len(cranks) != len(sranks):
            self.log.warning("Contact selectors hold %d and %d entries",
                             len(cranks), len(sranks))

        for i in range(min(len(cranks), len(sranks))):
            if abs(cranks[i] - sranks[i]) < EPS:
                cos_sum += celements[i] / cranks[i]
                sin_sum += selements[i] / sranks[i]
                sum_of_weights += 1.0 / cranks[i]
                num_moments += 1
            else:
                self.log.warning("Contact selector ranks disagree in slot %d: %e vs %e",
                                 i, cranks[i], sranks[i])

        return cos_sum, sin_sum, sum_of_weights, num_moments

    def contact(self, angles) -> np.ndarray:
        """
        Contact field.

        Parameters
        ----------
        angles : array_like, shape (nangles,)
            Phase angles in radians

        Returns
        -------
        contact : np.ndarray, shape (nangles, 3)
            Field in Tesla; zero at every angle if no atom was selected
        """
        angles = np.atleast_1d(np.asarray(angles, dtype=float))
        cos_sum, sin_sum, sum_of_weights, num_moments = self.contact_sums()

        if num_moments == 0:
            return np.zeros((angles.size, 3))

        cos_t = np.cos(angles)[:, None]
        sin_t = np.sin(angles)[:, None]
        return (CONTACT_PREFACTOR / sum_of_weights) * (cos_t * cos_sum - sin_t * sin_sum)
