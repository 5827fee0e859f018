from collections import Counter

from countdown.engine import LevelPlan, depth_pairs, estimate_iterations, iter_candidates


def test_depth_pairs():
    assert depth_pairs(1) == [(0, 0)]
    assert depth_pairs(2) == [(0, 1), (1, 0)]
    assert depth_pairs(3) == [(0, 2), (1, 1), (2, 0)]
    assert all(d1 + d2 + 1 == 5 for d1, d2 in depth_pairs(5))


def test_estimate_iterations():
    buckets = {0: [2, 3], 1: [5, 6, 9]}
    # (2, 2) and (3, 3) are never produced for single-copy sources
    assert estimate_iterations(depth_pairs(1), buckets, 2, Counter({2: 1, 3: 1})) == 2 * 2
    assert estimate_iterations(depth_pairs(1), buckets, 2, Counter({2: 1, 3: 2})) == 2 * 3
    assert estimate_iterations(depth_pairs(2), buckets, 3) == 3 * (6 + 6)
    assert estimate_iterations(depth_pairs(3), buckets, 1) == 9


def test_source_value_pairs_with_itself_only_when_duplicated():
    buckets = {0: [2, 3]}
    pairs = list(iter_candidates(depth_pairs(1), buckets, Counter({2: 1, 3: 2})))
    assert pairs == [(2, 3), (3, 2), (3, 3)]


def test_intermediate_values_can_pair_with_themselves():
    buckets = {0: [1], 1: [4]}
    assert list(iter_candidates(depth_pairs(3), buckets, Counter({1: 1}))) == [(4, 4)]


def test_missing_depths_yield_nothing():
    assert list(iter_candidates(depth_pairs(4), {0: [1, 2]}, Counter({1: 1, 2: 1}))) == []


def test_level_plan_is_lazy_and_ordered():
    plan = LevelPlan(2, {0: [1, 2], 1: [3]}, Counter({1: 1, 2: 1}), n_operators=2)
    assert plan.max_iterations == 2 * (2 + 2)
    assert next(plan) == (1, 3)
    assert list(plan) == [(2, 3), (3, 1), (3, 2)]
    assert next(plan, None) is None


def test_estimate_matches_what_the_cursor_yields():
    counts = Counter({1: 1, 2: 2, 5: 1})
    buckets = {0: [1, 2, 5], 1: [3, 4]}
    for level in (1, 2, 3):
        pairs = depth_pairs(level)
        assert estimate_iterations(pairs, buckets, 3, counts) == 3 * len(list(iter_candidates(pairs, buckets, counts)))
