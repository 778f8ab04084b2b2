"""Unit tests for bucket_ann.index.BucketIndex."""

import logging

import numpy as np
import pytest

from bucket_ann import __main__ as demo
from bucket_ann.distance import distance
from bucket_ann.errors import DimensionMismatch, EmptyIndex, EmptyVectorError
from bucket_ann.index import DEFAULT_CAPACITY, BucketIndex, RoutingMode


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_index():
    idx = BucketIndex(10)
    for v in ([1, 2, 3], [4, 5, 6], [7, 8, 9], [0, 0, 0]):
        idx.insert(v)
    return idx


def split_index(routing=RoutingMode.FAITHFUL):
    """Capacity-2 index: bucket 0 = {[0,0], [1,1]}, bucket 1 = {[10,10]}."""
    idx = BucketIndex(2, routing=routing)
    idx.insert([0.0, 0.0])
    idx.insert([10.0, 10.0])
    idx.insert([1.0, 1.0])
    return idx


def contents(idx):
    return [[r.vector for r in b] for b in idx.buckets]


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


def test_construction():
    idx = BucketIndex(5)
    assert idx.capacity == 5
    assert idx.routing is RoutingMode.FAITHFUL
    assert idx.buckets == ()
    assert len(idx) == 0


@pytest.mark.parametrize("capacity", [0, -3])
def test_non_positive_capacity_defaults(capacity):
    assert BucketIndex(capacity).capacity == DEFAULT_CAPACITY == 100


def test_routing_from_string():
    assert BucketIndex(3, routing="strict").routing is RoutingMode.STRICT


def test_unknown_routing():
    with pytest.raises(ValueError, match="Unknown routing"):
        BucketIndex(3, routing="greedy")


# ---------------------------------------------------------------------------
# Query
# ---------------------------------------------------------------------------


def test_query_empty_index():
    with pytest.raises(EmptyIndex):
        BucketIndex(5).query([1.0])


def test_query_sample(sample_index):
    hit = sample_index.query([0.9, 2.0, 2.8])
    assert hit.vector == (1.0, 2.0, 3.0)
    assert hit.cost == pytest.approx(0.3)
    assert len(sample_index.buckets) == 1


def test_query_round_trip():
    idx = BucketIndex(4)
    idx.insert([3.0, 4.0])
    hit = idx.query([3.0, 4.0])
    assert hit.vector == (3.0, 4.0)
    assert hit.cost == 0.0


def test_query_empty_vector_returns_none(sample_index):
    assert sample_index.query([]) is None


def test_query_dimension_mismatch(sample_index):
    with pytest.raises(DimensionMismatch):
        sample_index.query([1.0, 2.0])


def test_query_selects_nearest_anchor_bucket():
    idx = BucketIndex(1)
    for v in ([0.0, 0.0], [10.0, 10.0], [20.0, 20.0]):
        idx.insert(v)
    assert [b.anchor for b in idx.buckets] == [(0.0, 0.0), (10.0, 10.0), (20.0, 20.0)]
    hit = idx.query([9.0, 9.0])
    assert hit.vector == (10.0, 10.0)
    assert hit.cost == pytest.approx(2.0)


def test_query_anchor_tie_prefers_earliest_bucket():
    idx = BucketIndex(1)
    idx.insert([0.0, 0.0])
    idx.insert([10.0, 10.0])
    hit = idx.query([5.0, 5.0])
    assert hit.vector == (0.0, 0.0)


def test_query_matches_selected_bucket_scan():
    rng = np.random.default_rng(3)
    idx = BucketIndex(4)
    for _ in range(40):
        idx.insert(rng.uniform(0, 10, size=2).tolist())
    for _ in range(10):
        q = rng.uniform(0, 10, size=2).tolist()
        anchors = [distance(b.anchor, q) for b in idx.buckets]
        chosen = idx.buckets[anchors.index(min(anchors))]
        assert idx.query(q) == chosen.nearest(q)


# ---------------------------------------------------------------------------
# Insert: shared behaviour
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("routing", list(RoutingMode))
def test_insert_empty_vector(routing):
    idx = BucketIndex(2, routing=routing)
    with pytest.raises(EmptyVectorError):
        idx.insert([])
    assert idx.buckets == ()


@pytest.mark.parametrize("routing", list(RoutingMode))
def test_insert_dimension_mismatch(routing):
    idx = BucketIndex(2, routing=routing)
    idx.insert([0.0, 0.0])
    with pytest.raises(DimensionMismatch):
        idx.insert([1.0, 2.0, 3.0])
    assert len(idx) == 1


@pytest.mark.parametrize("routing", list(RoutingMode))
def test_displaced_record_seeds_new_bucket(routing):
    idx = split_index(routing)
    assert contents(idx) == [[(0.0, 0.0), (1.0, 1.0)], [(10.0, 10.0)]]
    assert idx.buckets[1].anchor == (10.0, 10.0)


@pytest.mark.parametrize("routing", list(RoutingMode))
def test_bucket_capacity_never_exceeded(routing):
    rng = np.random.default_rng(5)
    idx = BucketIndex(3, routing=routing)
    for _ in range(60):
        idx.insert(rng.normal(size=3).tolist())
        assert all(b.size <= 3 for b in idx.buckets)
        assert idx.buckets


# ---------------------------------------------------------------------------
# Insert: faithful routing
# ---------------------------------------------------------------------------


def test_faithful_rejection_opens_bucket_for_incoming():
    idx = BucketIndex(1)
    idx.insert([0.0, 0.0])
    idx.insert([1.0, 1.0])
    assert contents(idx) == [[(0.0, 0.0)], [(1.0, 1.0)]]


def test_faithful_open_bucket_pass_duplicates_and_drops():
    idx = split_index()
    # bucket 1 has room: bucket 0 displaces [1,1], then bucket 1 also stores
    idx.insert([0.5, 0.5])
    assert contents(idx) == [
        [(0.0, 0.0), (0.5, 0.5)],
        [(10.0, 10.0), (0.5, 0.5)],
    ]
    assert all((1.0, 1.0) not in c for c in contents(idx))


def test_faithful_open_bucket_pass_stops_at_first_store():
    idx = split_index()
    # bucket 0 rejects (cost 4 > 2), bucket 1 stores
    idx.insert([2.0, 2.0])
    assert contents(idx) == [
        [(0.0, 0.0), (1.0, 1.0)],
        [(10.0, 10.0), (2.0, 2.0)],
    ]


def test_faithful_full_pass_keeps_only_last_outcome():
    idx = split_index()
    idx.insert([2.0, 2.0])
    # every bucket is full now; bucket 0 displaces [1,1] (dropped),
    # bucket 1 rejects the vector, which then anchors a new bucket
    idx.insert([0.5, 0.5])
    assert contents(idx) == [
        [(0.0, 0.0), (0.5, 0.5)],
        [(10.0, 10.0), (2.0, 2.0)],
        [(0.5, 0.5)],
    ]
    assert len(idx) == 5


def test_faithful_only_last_bucket_checked_for_fullness():
    idx = split_index()
    idx.insert([2.0, 2.0])
    idx.insert([0.5, 0.5])
    # bucket 2 has room, so the vector walks buckets 0 -> 1 -> 2 even
    # though bucket 0 and bucket 1 are full
    idx.insert([0.1, 0.1])
    assert contents(idx) == [
        [(0.0, 0.0), (0.1, 0.1)],
        [(10.0, 10.0), (2.0, 2.0)],
        [(0.5, 0.5), (0.1, 0.1)],
    ]


# ---------------------------------------------------------------------------
# Insert: strict routing
# ---------------------------------------------------------------------------


def test_strict_reroutes_evicted_record():
    idx = split_index(RoutingMode.STRICT)
    idx.insert([0.5, 0.5])
    assert contents(idx) == [
        [(0.0, 0.0), (0.5, 0.5)],
        [(10.0, 10.0), (1.0, 1.0)],
    ]
    assert len(idx) == 4


def test_strict_rejected_everywhere_opens_bucket():
    idx = split_index(RoutingMode.STRICT)
    idx.insert([0.5, 0.5])
    idx.insert([50.0, 50.0])
    assert contents(idx)[2] == [(50.0, 50.0)]
    assert len(idx) == 5


def test_strict_keeps_every_vector_exactly_once():
    rng = np.random.default_rng(9)
    idx = BucketIndex(4, routing=RoutingMode.STRICT)
    inserted = [tuple(rng.uniform(0, 100, size=2).round(6).tolist()) for _ in range(50)]
    for v in inserted:
        idx.insert(v)
    stored = sorted(r.vector for b in idx.buckets for r in b)
    assert stored == sorted(inserted)


def test_strict_dimension_checked_before_mutation():
    idx = split_index(RoutingMode.STRICT)
    before = contents(idx)
    with pytest.raises(DimensionMismatch):
        idx.insert([0.5, 0.5, 0.5])
    assert contents(idx) == before


# ---------------------------------------------------------------------------
# Stats
# ---------------------------------------------------------------------------


def test_stats():
    idx = split_index()
    s = idx.stats()
    assert s["capacity"] == 2
    assert s["routing"] == "faithful"
    assert s["bucket_count"] == 2
    assert s["record_count"] == 3
    assert s["bucket_sizes"] == [2, 1]
    assert s["cost_sums"] == pytest.approx([2.0, 0.0])


def test_repr():
    r = repr(split_index())
    assert "BucketIndex" in r
    assert "buckets=2" in r


# ---------------------------------------------------------------------------
# Demo
# ---------------------------------------------------------------------------


def test_demo_prints_neighbours(caplog):
    caplog.set_level(logging.INFO)
    demo.main()
    assert caplog.text.count("Nearest neighbour for query") == 3
    assert "vector=(1.0, 2.0, 3.0)" in caplog.text
