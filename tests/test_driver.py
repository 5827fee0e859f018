import asyncio

import pytest

from countdown.engine import (
    ALL_OPERATORS,
    BinaryExpression,
    InvalidSearchOptions,
    Operator,
    Search,
    SearchOptions,
    SearchState,
    SearchStateError,
    evaluate_expression,
    expression_depth,
    find_best,
    get_operator,
)

from conftest import Recorder, run_search


def test_two_times_three_is_found_at_depth_one():
    rec = run_search(target=6, values=[2, 3], operators=[Operator.ADD, Operator.MULTIPLY])

    assert rec.search.state is SearchState.COMPLETED
    assert rec.events[-2:] == ["solution", "complete"]
    assert rec.count("solution") == 1
    assert rec.count("cancel") == 0
    handle = rec.solutions[0]
    assert handle.depth == 1
    assert handle.expressions() == [BinaryExpression(Operator.MULTIPLY, 2, 3)]

    first = rec.progress[0]
    assert (first.current_depth, first.iterations, first.max_iterations) == (1, 0, 4)


def test_unreachable_target_keeps_deepening_until_cancelled():
    def hook(rec, p):
        if p.current_depth >= 5:
            rec.search.cancel()

    rec = Recorder()
    rec.on_progress_hook = hook
    run_search(rec, target=1, values=[5], operators=[Operator.ADD], slice_ms=5)

    assert rec.search.state is SearchState.CANCELLED
    assert rec.count("cancel") == 1
    assert rec.count("solution") == 0
    assert rec.count("complete") == 0
    depths = [p.current_depth for p in rec.progress]
    assert depths[0] == 1
    assert max(depths) >= 5
    assert depths == sorted(depths)


def test_hundred_from_one_to_nine_with_all_operators():
    rec = run_search(target=100, values=list(range(1, 10)), operators=ALL_OPERATORS)

    assert rec.count("solution") == 1
    handle = rec.solutions[0]
    assert handle.depth == 2
    # (5 ^ 2) * 4
    assert (4, Operator.MULTIPLY, 25) in handle.index.derivations(100)
    trees = handle.expressions()
    assert trees
    for tree in trees:
        assert evaluate_expression(tree) == 100
        assert expression_depth(tree) == handle.depth


def test_recorded_derivations_are_minimal():
    rec = run_search(target=100, values=list(range(1, 10)), operators=ALL_OPERATORS)
    idx = rec.search.index
    for value, entry in idx.items():
        for a, op, b in entry.derivations:
            assert idx.depth(a) + idx.depth(b) + 1 == entry.depth
            assert get_operator(op).evaluate(a, b) == value
            if get_operator(op).commutative:
                assert a <= b


def test_depths_never_decrease():
    snapshots = []

    def hook(rec, p):
        snapshots.append({v: e.depth for v, e in rec.search.index.items()})

    rec = Recorder()
    rec.on_progress_hook = hook
    run_search(rec, target=97, values=[1, 3, 7, 10], operators=["+", "-", "*"], slice_ms=1)

    assert rec.count("solution") == 1
    snapshots.append({v: e.depth for v, e in rec.search.index.items()})
    for before, after in zip(snapshots, snapshots[1:]):
        for v, d in before.items():
            assert after[v] >= d


def test_no_solution_is_reported_below_the_minimal_depth():
    shallow = run_search(target=24, values=[1, 2, 3, 4], operators=["+", "*"], max_depth=1)
    assert shallow.events[-1] == "complete"
    assert shallow.count("solution") == 0

    full = run_search(target=24, values=[1, 2, 3, 4], operators=["+", "*"])
    assert full.solutions[0].depth == 2


def test_tiny_slices_give_the_same_answer():
    kwargs = dict(target=100, values=list(range(1, 10)), operators=ALL_OPERATORS)
    coarse = run_search(**kwargs)
    fine = run_search(slice_ms=0.01, **kwargs)

    assert len(fine.progress) > len(coarse.progress)
    assert fine.search.index.derivations(100) == coarse.search.index.derivations(100)
    assert set(fine.solutions[0].expressions()) == set(coarse.solutions[0].expressions())


def test_duplicate_sources_are_meaningful():
    rec = run_search(target=6, values=[3, 3], operators=["+"])
    assert rec.solutions[0].expressions() == [BinaryExpression(Operator.ADD, 3, 3)]


def test_target_among_sources_is_a_leaf_solution():
    rec = run_search(target=5, values=[1, 5], operators=["+"])
    assert rec.events == ["progress", "solution", "complete"]
    assert rec.solutions[0].depth == 0
    assert rec.solutions[0].expressions() == [5]


def test_cancel_before_first_slice():
    rec = run_search(cancel_before_start=True, target=6, values=[2, 3], operators=["*"])
    assert rec.events == ["cancel"]
    assert rec.search.state is SearchState.CANCELLED


def test_cancel_during_the_solving_level_suppresses_the_solution():
    def hook(rec, p):
        if p.current_depth == 1:
            rec.search.cancel()

    rec = Recorder()
    rec.on_progress_hook = hook
    run_search(rec, settle=0.1, slice_ms=0.01,
               target=100, values=list(range(1, 10)), operators=ALL_OPERATORS)

    assert rec.count("cancel") == 1
    assert rec.count("solution") == 0
    assert rec.count("complete") == 0
    assert rec.events[-1] == "cancel"


def test_cancel_after_completion_is_a_no_op():
    rec = run_search(target=6, values=[2, 3], operators=["*"])
    rec.search.cancel()
    assert rec.search.state is SearchState.COMPLETED
    assert rec.count("cancel") == 0


def test_start_twice_raises():
    async def main():
        search = Search(SearchOptions(target=6, values=[2, 3], operators=["*"]))
        search.start()
        with pytest.raises(SearchStateError):
            search.start()
        search.cancel()
        await asyncio.sleep(0.01)
        return search

    assert asyncio.run(main()).state is SearchState.CANCELLED


def test_empty_operators_never_produce_candidates():
    def hook(rec, p):
        assert p.max_iterations == 0
        if p.current_depth >= 3:
            rec.search.cancel()

    rec = Recorder()
    rec.on_progress_hook = hook
    run_search(rec, target=10, values=[1, 2], operators=[], slice_ms=1)
    assert rec.events[-1] == "cancel"
    assert rec.count("solution") == 0


def test_find_best_returns_start_and_cancel():
    seen = []

    async def main():
        loop = asyncio.get_running_loop()
        done = loop.create_future()
        control = find_best(
            target=6, values=[2, 3], operators=["*"],
            on_solution=lambda h: seen.append(h.depth),
            on_complete=lambda: done.set_result(True),
        )
        control.start()
        return await done

    assert asyncio.run(main())
    assert seen == [1]


def test_concurrent_searches_do_not_share_state():
    a, b = Recorder(), Recorder()

    async def main():
        loop = asyncio.get_running_loop()
        for rec, target in ((a, 6), (b, 5)):
            rec._done = loop.create_future()
            rec.search = Search(rec.options(target=target, values=[2, 3], operators=["+", "*"]))
            rec.search.start()
        await asyncio.gather(a._done, b._done)

    asyncio.run(main())
    assert a.search.index is not b.search.index
    assert a.solutions[0].expressions() == [BinaryExpression(Operator.MULTIPLY, 2, 3)]
    assert b.solutions[0].expressions() == [BinaryExpression(Operator.ADD, 2, 3)]


def test_callback_errors_reach_on_error():
    errors = []

    def boom(_p):
        raise RuntimeError("progress sink broke")

    async def main():
        search = Search(SearchOptions(target=6, values=[2, 3], operators=["*"],
                                      on_progress=boom, on_error=errors.append))
        search.start()
        await asyncio.sleep(0.01)
        return search

    assert asyncio.run(main()).state is SearchState.FAILED
    assert isinstance(errors[0], RuntimeError)


@pytest.mark.parametrize("kwargs", [
    dict(target=0, values=[1], operators=["+"]),
    dict(target=-4, values=[1], operators=["+"]),
    dict(target=2.5, values=[1], operators=["+"]),
    dict(target=6, values=[2, 0], operators=["+"]),
    dict(target=6, values=[2, True], operators=["+"]),
    dict(target=6, values=[2, 3], operators=["?"]),
    dict(target=6, values=[2, 3], operators=["+"], max_depth=0),
    dict(target=6, values=[2, 3], operators=["+"], slice_ms=0),
])
def test_invalid_options(kwargs):
    with pytest.raises(InvalidSearchOptions):
        SearchOptions(**kwargs)


def test_level_iterations_reach_the_estimate():
    rec = run_search(target=6, values=[2, 3], operators=["+", "*"])
    assert rec.search.iterations == rec.search.max_iterations == 4


@pytest.mark.parametrize("kwargs", [
    dict(target=6, values=[2, 3], operators=["+", "*"]),
    dict(target=5, values=[5], operators=["+"]),
])
def test_cancel_from_a_callback_in_the_final_slice(kwargs):
    def hook(rec, p):
        rec.search.cancel()

    rec = Recorder()
    rec.on_progress_hook = hook
    run_search(rec, **kwargs)

    assert rec.search.state is SearchState.CANCELLED
    assert rec.count("cancel") == 1
    assert rec.count("solution") == 0
    assert rec.count("complete") == 0


def test_cancel_from_a_callback_before_max_depth_runs_out():
    def hook(rec, p):
        if p.current_depth == 2:
            rec.search.cancel()

    rec = Recorder()
    rec.on_progress_hook = hook
    run_search(rec, target=1, values=[5], operators=["+"], max_depth=2)

    assert rec.events[-1] == "cancel"
    assert rec.count("complete") == 0
