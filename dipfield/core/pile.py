"""
Bounded nearest-neighbor selector.

A Pile keeps the `capacity` entries with the smallest rank seen so far,
sorted by ascending rank, each with an attached 3-vector payload. The
contact field uses two piles fed with the same ranks (distance ** p), one
for the cosine and one for the sine projection of the moments.
"""

from typing import Optional, Tuple

import numpy as np

from ..utils.constants import EMPTY_RANK
from ..utils.exceptions import AllocationError


class Pile:
    """
    Fixed-capacity sorted collection of (rank, vector) pairs.

    Entries are ordered by (rank, key). The key breaks ties between equal
    ranks; callers that merge candidates from several threads pass a stable
    identifier (e.g. the flat image index) so the kept set does not depend on
    arrival order. Without an explicit key the arrival count is used, i.e.
    among equal ranks the earlier arrival stays first.

    Insertion is O(capacity): the new entry is placed at its sorted position
    and larger entries are shifted up. Once the pile is full a new entry is
    kept only if (rank, key) is strictly smaller than that of the current
    maximum, which is then evicted.

    Unused slots carry the sentinel rank EMPTY_RANK (-1), key -1 and a zero
    vector.

    The pile does no locking of its own; concurrent writers must serialize
    calls to `add`.

    Parameters
    ----------
    capacity : int
        Number of entries retained (may be 0, in which case nothing is kept)

    Raises
    ------
    ValueError
        If capacity is negative
    AllocationError
        If storage for `capacity` entries cannot be allocated

    Examples
    --------
    >>> pile = Pile(2)
    >>> pile.add(3.0, [1.0, 0.0, 0.0])
    True
    >>> pile.add(1.0, [0.0, 1.0, 0.0])
    True
    >>> pile.add(2.0, [0.0, 0.0, 1.0])
    True
    >>> pile.finalize()[0]
    array([1., 2.])
    """

    def __init__(self, capacity: int):
        capacity = int(capacity)
        if capacity < 0:
            raise ValueError(f"Pile capacity must be non-negative, got {capacity}")

        try:
            self._ranks = np.full(capacity, EMPTY_RANK, dtype=float)
            self._keys = np.full(capacity, -1, dtype=np.int64)
            self._elements = np.zeros((capacity, 3), dtype=float)
        except MemoryError as exc:
            raise AllocationError(f"Cannot allocate a pile of {capacity} entries") from exc

        self.capacity = capacity
        self.num_filled = 0
        self.num_seen = 0

    def _position(self, n: int, rank: float, key: int) -> int:
        """Index after the last of the first n entries with (rank, key) <= the given pair."""
        lo = int(np.searchsorted(self._ranks[:n], rank, side='left'))
        hi = int(np.searchsorted(self._ranks[:n], rank, side='right'))
        return lo + int(np.searchsorted(self._keys[lo:hi], key, side='right'))

    def add(self, rank: float, element, key: Optional[int] = None) -> bool:
        """
        Offer one entry to the pile.

        Parameters
        ----------
        rank : float
            Non-negative sorting key
        element : array_like, shape (3,)
            Payload vector
        key : int, optional
            Non-negative tie-break between equal ranks (default: arrival count)

        Returns
        -------
        kept : bool
            True if the entry is now part of the pile
        """
        rank = float(rank)
        if not rank >= 0.0:
            raise ValueError(f"Pile ranks must be non-negative numbers, got {rank}")

        key = self.num_seen if key is None else int(key)
        if key < 0:
            raise ValueError(f"Pile keys must be non-negative, got {key}")

        self.num_seen += 1
        if self.capacity == 0:
            return False

        n = self.num_filled
        if n < self.capacity:
            pos = self._position(n, rank, key)
            self._ranks[pos + 1:n + 1] = self._ranks[pos:n]
            self._keys[pos + 1:n + 1] = self._keys[pos:n]
            self._elements[pos + 1:n + 1] = self._elements[pos:n]
            self.num_filled += 1
        elif (rank, key) < (self._ranks[-1], self._keys[-1]):
            # evict the current maximum
            pos = self._position(n - 1, rank, key)
            self._ranks[pos + 1:] = self._ranks[pos:-1]
            self._keys[pos + 1:] = self._keys[pos:-1]
            self._elements[pos + 1:] = self._elements[pos:-1]
        else:
            return False

        self._ranks[pos] = rank
        self._keys[pos] = key
        self._elements[pos] = element
        return True

    @property
    def ranks(self) -> np.ndarray:
        """All `capacity` ranks, sentinel slots included (copy)."""
        return self._ranks.copy()

    @property
    def keys(self) -> np.ndarray:
        """All `capacity` tie-break keys, -1 in unused slots (copy)."""
        return self._keys.copy()

    @property
    def elements(self) -> np.ndarray:
        """All `capacity` payload vectors, shape (capacity, 3) (copy)."""
        return self._elements.copy()

    @property
    def max_rank(self) -> float:
        """Largest kept rank, or EMPTY_RANK if the pile is empty."""
        if self.num_filled == 0:
            return EMPTY_RANK
        return float(self._ranks[self.num_filled - 1])

    def is_full(self) -> bool:
        return self.num_filled == self.capacity

    def finalize(self) -> Tuple[np.ndarray, np.ndarray]:
        """
        Kept entries in ascending (rank, key) order.

        Returns
        -------
        ranks : np.ndarray, shape (n,)
        elements : np.ndarray, shape (n, 3)
            with n = min(num_seen, capacity)
        """
        n = self.num_filled
        return self._ranks[:n].copy(), self._elements[:n].copy()

    def __len__(self) -> int:
        return self.num_filled

    def __repr__(self) -> str:
        return f"Pile(capacity={self.capacity}, filled={self.num_filled}, seen={self.num_seen})"
