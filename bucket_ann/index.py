"""BucketIndex — approximate nearest-neighbour index over anchored buckets.

Public API
----------
BucketIndex
    .insert()  — route a vector into one or more buckets
    .query()   — nearest-anchor bucket selection, then exhaustive scan
    .buckets   — read-only view of buckets in creation order
    .stats()   — live statistics dict

Routing modes
-------------
faithful — the default.  Reproduces the reference routing: when the newest
           bucket is full the vector is offered to every bucket and only
           the last outcome is carried into a fresh bucket; otherwise the
           vector is offered bucket by bucket until one stores it without
           eviction.  Displaced and rejected records that are not carried
           forward are dropped, and a vector may land in several buckets.
strict   — every vector ends up stored exactly once.  Rejected vectors
           move on to the next bucket, evicted records are re-routed to the
           next bucket, and a new bucket is created only when no existing
           bucket will take the carried vector.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from .bucket import Bucket
from .distance import check_dimensions
from .errors import EmptyIndex, EmptyVectorError
from .types import InsertStatus, VectorRecord

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY: int = 100


class RoutingMode(str, Enum):
    """Supported cross-bucket routing strategies."""

    FAITHFUL = "faithful"
    STRICT = "strict"


class BucketIndex:
    """In-memory index of capacity-bounded, anchor-ordered buckets.

    Buckets are append-only: once created a bucket is never removed and
    creation order is preserved.  The index is not safe for concurrent
    mutation; callers must serialise access.

    Parameters
    ----------
    capacity : int
        Capacity shared by every bucket.  Non-positive values fall back
        to ``DEFAULT_CAPACITY``.
    routing : RoutingMode or str
        Cross-bucket insertion strategy, ``"faithful"`` by default.
    """

    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        routing: Union[RoutingMode, str] = RoutingMode.FAITHFUL,
    ) -> None:
        if capacity <= 0:
            logger.debug("capacity %d normalised to %d", capacity, DEFAULT_CAPACITY)
            capacity = DEFAULT_CAPACITY
        try:
            self.routing: RoutingMode = RoutingMode(routing)
        except ValueError:
            raise ValueError(
                f"Unknown routing {routing!r}. Valid options: 'faithful', 'strict'."
            ) from None
        self.capacity: int = capacity
        self._buckets: List[Bucket] = []

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _new_bucket(self) -> Bucket:
        bucket = Bucket(self.capacity)
        self._buckets.append(bucket)
        logger.debug("created bucket #%d (capacity=%d)", len(self._buckets) - 1, self.capacity)
        return bucket

    def _insert_faithful(self, vector: Sequence[float]) -> None:
        if self._buckets[-1].is_full():
            outcome = None
            for i, bucket in enumerate(self._buckets):
                if outcome:
                    logger.debug(
                        "dropped %s record from bucket #%d", outcome.status.value, i - 1
                    )
                outcome = bucket.insert(vector)

            fresh = self._new_bucket()
            if outcome:
                fresh.insert(outcome.record.vector)
            return

        for i, bucket in enumerate(self._buckets):
            outcome = bucket.insert(vector)
            if outcome.stored:
                return
            logger.debug(
                "bucket #%d returned %s record; offering vector to next bucket",
                i,
                outcome.status.value,
            )

    def _insert_strict(self, vector: Sequence[float]) -> None:
        check_dimensions(self._buckets[0].anchor, vector)

        carried: Sequence[float] = vector
        for i, bucket in enumerate(self._buckets):
            outcome = bucket.insert(carried)
            if outcome.stored:
                return
            if outcome.status is InsertStatus.DISPLACED:
                logger.debug("re-routing record evicted from bucket #%d", i)
            carried = outcome.record.vector

        self._new_bucket().insert(carried)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def buckets(self) -> Tuple[Bucket, ...]:
        return tuple(self._buckets)

    def insert(self, vector: Sequence[float]) -> None:
        """Insert ``vector`` into the index.

        Raises
        ------
        EmptyVectorError  : ``vector`` has zero length; nothing is changed.
        DimensionMismatch : ``vector`` length differs from a bucket anchor.
            In faithful mode buckets visited earlier in the same call may
            already have been modified.
        """
        if len(vector) == 0:
            raise EmptyVectorError()

        if not self._buckets:
            self._new_bucket().insert(vector)
            return

        if self.routing is RoutingMode.STRICT:
            self._insert_strict(vector)
        else:
            self._insert_faithful(vector)

    def query(self, vector: Sequence[float]) -> Optional[VectorRecord]:
        """Approximate nearest neighbour of ``vector``.

        Picks the bucket whose anchor is closest to ``vector`` (earliest
        bucket on ties) and returns that bucket's nearest member, with the
        distance to ``vector`` as its cost.

        Raises
        ------
        EmptyIndex        : no bucket exists yet.
        DimensionMismatch : ``vector`` length differs from a bucket anchor.

        Returns
        -------
        VectorRecord, or None when the query is empty or the selected
        bucket has no members.
        """
        if not self._buckets:
            raise EmptyIndex()
        if len(vector) == 0:
            return None

        best = self._buckets[0]
        best_dist = best.distance_to_anchor(vector)
        for bucket in self._buckets[1:]:
            d = bucket.distance_to_anchor(vector)
            if d < best_dist:
                best, best_dist = bucket, d
        return best.nearest(vector)

    # ------------------------------------------------------------------
    # Stats
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return sum(len(b) for b in self._buckets)

    def stats(self) -> Dict[str, Any]:
        """Return live statistics for monitoring / debugging."""
        return {
            "capacity": self.capacity,
            "routing": self.routing.value,
            "bucket_count": len(self._buckets),
            "record_count": len(self),
            "bucket_sizes": [b.size for b in self._buckets],
            "cost_sums": [b.cost_sum for b in self._buckets],
        }

    def __repr__(self) -> str:
        return (
            f"BucketIndex(capacity={self.capacity} routing={self.routing.value} "
            f"buckets={len(self._buckets)} records={len(self)})"
        )
