"""
Physical and numerical constants.

Lengths are in Angstrom, moments in Bohr magnetons and fields in Tesla.
"""

# mu_0 * mu_B / (4 pi)  [T Angstrom^3]
DIPOLAR_PREFACTOR = 0.9274009

# mu_0 * mu_B / 3  [T Angstrom^3], multiplied by 3 / (4 pi R^3) at synthesis
LORENTZ_PREFACTOR = 0.33333333333 * 11.654064

# 2 mu_0 * mu_B / 3  [T Angstrom^3]
CONTACT_PREFACTOR = 7.769376

# Tolerance for consistency checks on the input moments and the contact ranks
EPS = 1e-5

# Contact ranks are distance ** CONT_SCALING_POWER, weights are 1 / rank
CONT_SCALING_POWER = 4.0

# Images closer than this to the probe are treated as coincident [Angstrom]
MIN_DISTANCE = 1e-10

# Rank carried by unused selector slots
EMPTY_RANK = -1.0
