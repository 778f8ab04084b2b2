"""Bucket — capacity-bounded, cost-ordered partition of the index.

Every bucket is anchored by the first vector it ever stores.  Members are
kept sorted by ``(cost, sequence)`` where ``cost`` is the distance to the
anchor and ``sequence`` is a per-bucket insertion counter, so the anchor is
always the first entry and the worst member is always the last.
"""

from __future__ import annotations

import bisect
import logging
import math
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from .distance import check_dimensions, distance
from .errors import EmptyVectorError
from .types import InsertOutcome, VectorRecord

logger = logging.getLogger(__name__)

_Key = Tuple[float, int]


class Bucket:
    """Capacity-bounded container of VectorRecords anchored to its first member.

    Parameters
    ----------
    capacity : int
        Maximum number of members.  Must be >= 1.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self.capacity: int = capacity
        self.cost_sum: float = 0.0

        self._keys: List[_Key] = []
        self._records: List[VectorRecord] = []
        self._anchor: Optional[Tuple[float, ...]] = None
        self._seq: int = 0

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _store(self, record: VectorRecord) -> None:
        key = (record.cost, self._seq)
        self._seq += 1
        pos = bisect.bisect_right(self._keys, key)
        self._keys.insert(pos, key)
        self._records.insert(pos, record)
        self.cost_sum += record.cost

    def _evict_worst(self) -> VectorRecord:
        self._keys.pop()
        evicted = self._records.pop()
        self.cost_sum -= evicted.cost
        return evicted

    def _replace(self, record: VectorRecord) -> VectorRecord:
        """Insert ``record`` and evict the maximum member in one step."""
        self._store(record)
        return self._evict_worst()

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def anchor(self) -> Optional[Tuple[float, ...]]:
        """Vector of the first record ever stored, or None while empty."""
        return self._anchor

    @property
    def dimension(self) -> Optional[int]:
        return None if self._anchor is None else len(self._anchor)

    @property
    def size(self) -> int:
        return len(self._records)

    @property
    def worst(self) -> Optional[VectorRecord]:
        """Member with the highest cost, or None while empty."""
        return self._records[-1] if self._records else None

    def is_full(self) -> bool:
        return self.size == self.capacity

    def is_empty(self) -> bool:
        return not self._records

    def records(self) -> List[VectorRecord]:
        """Members in ascending cost order."""
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[VectorRecord]:
        return iter(list(self._records))

    # ------------------------------------------------------------------
    # Insert
    # ------------------------------------------------------------------

    def insert(self, vector: Sequence[float]) -> InsertOutcome:
        """Offer ``vector`` to this bucket.

        The first vector becomes the anchor with cost 0.  Later vectors are
        stored with their distance to the anchor as cost while there is
        room.  Once full, a vector costlier than the current worst member
        is rejected; otherwise it is stored and the member holding the
        maximum cost afterwards is evicted.

        Raises
        ------
        EmptyVectorError   : ``vector`` has zero length.
        DimensionMismatch  : ``vector`` length differs from the anchor's.

        Returns
        -------
        InsertOutcome — ``STORED`` with no record, ``REJECTED`` carrying the
        incoming record, or ``DISPLACED`` carrying the evicted record.
        """
        if len(vector) == 0:
            raise EmptyVectorError()

        if self._anchor is None:
            record = VectorRecord.of(vector, 0.0)
            self._anchor = record.vector
            self._store(record)
            logger.debug("anchored bucket at dim=%d", len(record.vector))
            return InsertOutcome.ok()

        cost = distance(vector, self._anchor)
        record = VectorRecord.of(vector, cost)

        if not self.is_full():
            self._store(record)
            return InsertOutcome.ok()

        worst = self._records[-1]
        if cost > worst.cost:
            logger.debug("rejected vector cost=%.6g > worst=%.6g", cost, worst.cost)
            return InsertOutcome.rejected(record)

        evicted = self._replace(record)
        logger.debug("displaced member cost=%.6g with cost=%.6g", evicted.cost, cost)
        return InsertOutcome.displaced(evicted)

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def nearest(self, query: Sequence[float]) -> Optional[VectorRecord]:
        """Exhaustive scan for the member closest to ``query``.

        Members are visited in ascending cost order and the first one
        reaching the minimum distance wins.  The returned record carries
        the distance to ``query`` as its cost.  Returns None when the
        bucket or the query is empty.
        """
        if not self._records or len(query) == 0:
            return None
        check_dimensions(self._anchor, query)

        best: Optional[VectorRecord] = None
        best_cost = math.inf
        for member in self._records:
            d = distance(member.vector, query)
            if d < best_cost:
                best_cost = d
                best = member
        return VectorRecord(best.vector, best_cost)

    def distance_to_anchor(self, query: Sequence[float]) -> float:
        """Distance from the anchor to ``query``; ``inf`` for an empty bucket."""
        if self._anchor is None:
            return math.inf
        return distance(self._anchor, query)

    # ------------------------------------------------------------------
    # Stats
    # ------------------------------------------------------------------

    def stats(self) -> Dict[str, Any]:
        return {
            "capacity": self.capacity,
            "size": self.size,
            "dimension": self.dimension,
            "cost_sum": self.cost_sum,
            "max_cost": self.worst.cost if self._records else None,
        }

    def __repr__(self) -> str:
        return (
            f"Bucket(size={self.size}/{self.capacity} "
            f"dim={self.dimension} cost_sum={self.cost_sum:.4g})"
        )
