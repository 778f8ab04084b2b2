"""bucket-ann — anchored-bucket approximate nearest-neighbour index.

Vectors are partitioned into fixed-capacity buckets, each anchored by its
first member.  Queries pick the bucket with the closest anchor and scan it
exhaustively.

Public API::

    from bucket_ann import BucketIndex, VectorRecord
"""

from .types import InsertOutcome, InsertStatus, VectorRecord
from .distance import distance
from .errors import BucketIndexError, DimensionMismatch, EmptyIndex, EmptyVectorError
from .bucket import Bucket
from .index import DEFAULT_CAPACITY, BucketIndex, RoutingMode

__version__ = "0.1.0"
__all__ = [
    "Bucket",
    "BucketIndex",
    "BucketIndexError",
    "DEFAULT_CAPACITY",
    "DimensionMismatch",
    "EmptyIndex",
    "EmptyVectorError",
    "InsertOutcome",
    "InsertStatus",
    "RoutingMode",
    "VectorRecord",
    "distance",
]
