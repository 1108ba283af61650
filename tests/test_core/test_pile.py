"""
Unit tests for the bounded nearest-neighbor selector (Pile).

Tests selector properties:
- Sorted ranks and sentinel slots
- Capacity and eviction
- Ties and tie-break keys
- Agreement with a full sort on random streams
"""

import threading

import numpy as np
import pytest
from dipfield.core.pile import Pile
from dipfield.utils.constants import EMPTY_RANK
from dipfield.utils.exceptions import AllocationError


class TestPileCreation:
    """Test creation and initial state."""

    def test_empty_pile_has_sentinel_ranks(self):
        """Unused slots carry the sentinel rank and a zero payload."""
        pile = Pile(4)

        assert len(pile) == 0
        assert np.all(pile.ranks == EMPTY_RANK)
        assert np.allclose(pile.elements, 0.0)
        assert pile.max_rank == EMPTY_RANK

    def test_negative_capacity_rejected(self):
        with pytest.raises(ValueError):
            Pile(-1)

    def test_allocation_error_is_memory_error(self):
        """AllocationError can be caught as MemoryError."""
        assert issubclass(AllocationError, MemoryError)


class TestPileInsertion:
    """Test sorted insertion and eviction."""

    def test_insert_keeps_ascending_order(self):
        pile = Pile(5)
        for rank in [3.0, 1.0, 4.0, 2.0]:
            pile.add(rank, [rank, 0.0, 0.0])

        ranks, elements = pile.finalize()
        assert np.allclose(ranks, [1.0, 2.0, 3.0, 4.0])
        # payload travels with its rank
        assert np.allclose(elements[:, 0], ranks)
        # last slot still empty
        assert pile.ranks[-1] == EMPTY_RANK

    def test_full_pile_evicts_maximum(self):
        pile = Pile(3)
        for rank in [5.0, 3.0, 4.0]:
            pile.add(rank, [rank, 0.0, 0.0])

        assert pile.is_full()
        assert pile.add(1.0, [1.0, 0.0, 0.0])

        ranks, elements = pile.finalize()
        assert np.allclose(ranks, [1.0, 3.0, 4.0])
        assert np.allclose(elements[:, 0], [1.0, 3.0, 4.0])

    def test_full_pile_discards_larger_rank(self):
        pile = Pile(2)
        pile.add(1.0, [1.0, 0.0, 0.0])
        pile.add(2.0, [2.0, 0.0, 0.0])

        assert not pile.add(7.0, [7.0, 0.0, 0.0])
        assert np.allclose(pile.finalize()[0], [1.0, 2.0])

    def test_equal_to_maximum_is_discarded(self):
        """A full pile only accepts strictly smaller ranks."""
        pile = Pile(2)
        pile.add(1.0, [1.0, 0.0, 0.0])
        pile.add(2.0, [2.0, 0.0, 0.0])

        assert not pile.add(2.0, [9.0, 0.0, 0.0])
        assert np.allclose(pile.finalize()[1][:, 0], [1.0, 2.0])

    def test_ties_keep_arrival_order(self):
        pile = Pile(2)
        pile.add(1.0, [1.0, 0.0, 0.0])
        pile.add(1.0, [2.0, 0.0, 0.0])
        pile.add(1.0, [3.0, 0.0, 0.0])

        ranks, elements = pile.finalize()
        assert np.allclose(ranks, [1.0, 1.0])
        assert np.allclose(elements[:, 0], [1.0, 2.0])

    def test_ties_broken_by_key_not_arrival(self):
        """With explicit keys the kept tie does not depend on insertion order."""
        forward = Pile(1)
        forward.add(1.0, [5.0, 0.0, 0.0], key=5)
        forward.add(1.0, [2.0, 0.0, 0.0], key=2)

        backward = Pile(1)
        backward.add(1.0, [2.0, 0.0, 0.0], key=2)
        backward.add(1.0, [5.0, 0.0, 0.0], key=5)

        for pile in (forward, backward):
            assert pile.keys[0] == 2
            assert np.allclose(pile.finalize()[1], [[2.0, 0.0, 0.0]])

    def test_keys_sorted_within_equal_ranks(self):
        pile = Pile(4)
        for key in [7, 3, 9]:
            pile.add(1.0, [float(key), 0.0, 0.0], key=key)
        pile.add(0.5, [0.0, 0.0, 0.0], key=100)

        assert list(pile.keys) == [100, 3, 7, 9]
        assert np.allclose(pile.finalize()[1][:, 0], [0.0, 3.0, 7.0, 9.0])

    def test_unused_keys_are_sentinel(self):
        pile = Pile(3)
        pile.add(1.0, [1.0, 0.0, 0.0], key=4)

        assert list(pile.keys) == [4, -1, -1]

    def test_negative_key_rejected(self):
        pile = Pile(2)

        with pytest.raises(ValueError):
            pile.add(1.0, [0.0, 0.0, 0.0], key=-3)

    def test_zero_capacity_keeps_nothing(self):
        pile = Pile(0)

        assert not pile.add(1.0, [1.0, 0.0, 0.0])
        assert len(pile) == 0
        assert pile.num_seen == 1
        assert pile.finalize()[0].size == 0

    def test_invalid_rank_rejected(self):
        pile = Pile(2)

        with pytest.raises(ValueError):
            pile.add(-2.0, [0.0, 0.0, 0.0])
        with pytest.raises(ValueError):
            pile.add(np.nan, [0.0, 0.0, 0.0])

    def test_capacity_one(self):
        pile = Pile(1)
        for rank in [3.0, 5.0, 0.5, 0.7]:
            pile.add(rank, [rank, 0.0, 0.0])

        ranks, elements = pile.finalize()
        assert np.allclose(ranks, [0.5])
        assert np.allclose(elements, [[0.5, 0.0, 0.0]])


class TestPileAgainstSort:
    """Compare the pile with a full sort of the stream."""

    @pytest.mark.parametrize("capacity", [1, 3, 8, 50])
    def test_random_stream(self, capacity):
        rng = np.random.default_rng(7)
        ranks = rng.random(30)

        pile = Pile(capacity)
        for i, rank in enumerate(ranks):
            pile.add(rank, [float(i), 0.0, 0.0])

        kept_ranks, kept_elements = pile.finalize()

        assert len(pile) == min(len(ranks), capacity)
        assert np.all(np.diff(kept_ranks) >= 0.0)
        assert np.allclose(kept_ranks, np.sort(ranks)[:capacity])
        # payload index points back at its position in the stream
        assert np.allclose(ranks[kept_elements[:, 0].astype(int)], kept_ranks)

    def test_repeated_ranks_stay_sorted(self):
        rng = np.random.default_rng(3)
        ranks = rng.integers(0, 4, size=40).astype(float)

        pile = Pile(10)
        for rank in ranks:
            pile.add(rank, [rank, rank, rank])

        kept_ranks, _ = pile.finalize()
        assert np.all(np.diff(kept_ranks) >= 0.0)
        assert np.allclose(kept_ranks, np.sort(ranks)[:10])

    def test_concurrent_insertion_under_lock(self):
        """Serialized writers from several threads give the exact nearest-K set."""
        rng = np.random.default_rng(11)
        ranks = rng.random(400)
        pile = Pile(12)
        lock = threading.Lock()

        def worker(chunk):
            for rank in chunk:
                with lock:
                    pile.add(rank, [rank, 0.0, 0.0])

        threads = [threading.Thread(target=worker, args=(chunk,))
                   for chunk in np.array_split(ranks, 8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        kept_ranks, kept_elements = pile.finalize()
        assert pile.num_seen == 400
        assert np.allclose(kept_ranks, np.sort(ranks)[:12])
        assert np.allclose(kept_elements[:, 0], kept_ranks)
