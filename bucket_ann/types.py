"""Core record types for bucket-ann.

VectorRecord   — immutable (vector, cost) pair ordered by cost.
InsertStatus   — what a bucket did with an offered vector.
InsertOutcome  — status plus the record handed back to the caller, if any.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple


# ---------------------------------------------------------------------------
# VectorRecord
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class VectorRecord:
    """A vector paired with the cost used to order it.

    Schema
    ------
    vector : Tuple[float, ...]  — the stored vector, copied on construction
    cost   : float              — distance to the bucket anchor while stored,
                                  or to the query vector when returned by
                                  a lookup

    Ordering compares ``cost`` only, so two records with equal cost are
    order-equivalent.  ``==`` compares both fields.
    """

    vector: Tuple[float, ...]
    cost: float = 0.0

    def __post_init__(self) -> None:
        # frozen: bypass __setattr__ to normalise the inputs
        object.__setattr__(self, "vector", tuple(float(x) for x in self.vector))
        object.__setattr__(self, "cost", float(self.cost))

    # ------------------------------------------------------------------
    # Ordering
    # ------------------------------------------------------------------

    def __lt__(self, other: "VectorRecord") -> bool:
        if not isinstance(other, VectorRecord):
            return NotImplemented
        return self.cost < other.cost

    def __le__(self, other: "VectorRecord") -> bool:
        if not isinstance(other, VectorRecord):
            return NotImplemented
        return self.cost <= other.cost

    def __gt__(self, other: "VectorRecord") -> bool:
        if not isinstance(other, VectorRecord):
            return NotImplemented
        return self.cost > other.cost

    def __ge__(self, other: "VectorRecord") -> bool:
        if not isinstance(other, VectorRecord):
            return NotImplemented
        return self.cost >= other.cost

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @property
    def dimension(self) -> int:
        return len(self.vector)

    @property
    def np_vector(self):
        """Return the vector as a numpy float64 array."""
        import numpy as np
        return np.array(self.vector, dtype=np.float64)

    def to_dict(self) -> Dict[str, Any]:
        return {"vector": list(self.vector), "cost": self.cost}

    @classmethod
    def of(cls, vector: Sequence[float], cost: float = 0.0) -> "VectorRecord":
        """Factory: build a record from any sequence of numbers."""
        return cls(vector=tuple(vector), cost=cost)


# ---------------------------------------------------------------------------
# Insert outcome
# ---------------------------------------------------------------------------


class InsertStatus(str, Enum):
    """What a bucket did with an offered vector."""

    STORED = "stored"
    REJECTED = "rejected"
    DISPLACED = "displaced"


@dataclass(frozen=True)
class InsertOutcome:
    """Result of ``Bucket.insert``.

    ``record`` is ``None`` when the vector was stored without eviction.
    On rejection it is the incoming record itself; on displacement it is
    the evicted resident.  Callers that only need to know whether the
    offered vector found a home without side effects should test
    ``outcome.stored``.
    """

    status: InsertStatus
    record: Optional[VectorRecord] = None

    def __post_init__(self) -> None:
        if self.status is InsertStatus.STORED and self.record is not None:
            raise ValueError("stored outcome must not carry a record")
        if self.status is not InsertStatus.STORED and self.record is None:
            raise ValueError(f"{self.status.value} outcome must carry a record")

    @property
    def stored(self) -> bool:
        return self.status is InsertStatus.STORED

    def __bool__(self) -> bool:
        return self.record is not None

    @classmethod
    def ok(cls) -> "InsertOutcome":
        return cls(InsertStatus.STORED)

    @classmethod
    def rejected(cls, record: VectorRecord) -> "InsertOutcome":
        return cls(InsertStatus.REJECTED, record)

    @classmethod
    def displaced(cls, record: VectorRecord) -> "InsertOutcome":
        return cls(InsertStatus.DISPLACED, record)
