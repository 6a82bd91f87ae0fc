from rondo.core.models import Status
from rondo.lib.deps import has_cycle, is_blocked


def graph(edges: dict[int, list[int]]):
    return lambda tid: edges.get(tid, [])


def test_blocker_that_already_waits_on_task_is_a_cycle():
    assert has_cycle(1, [2], graph({2: [1]}))


def test_unrelated_blocker_is_not_a_cycle():
    assert not has_cycle(1, [2], graph({2: [3], 3: []}))


def test_task_cannot_block_itself():
    assert has_cycle(4, [4], graph({}))


def test_transitive_cycle_detected():
    assert has_cycle(1, [4], graph({4: [3], 3: [2], 2: [1]}))


def test_existing_cycle_elsewhere_terminates():
    """A loop that never reaches task_id must not spin forever."""
    assert not has_cycle(1, [2], graph({2: [3], 3: [2]}))


def test_no_proposed_blockers():
    assert not has_cycle(1, [], graph({2: [1]}))


def test_any_proposed_blocker_can_close_the_loop():
    assert has_cycle(1, [5, 2], graph({2: [1], 5: []}))


def test_is_blocked_while_any_blocker_open():
    statuses = {1: Status.DONE, 2: Status.IN_PROGRESS}
    assert is_blocked([1, 2], statuses.__getitem__)


def test_not_blocked_once_all_blockers_done():
    statuses = {1: Status.DONE, 2: Status.DONE}
    assert not is_blocked([1, 2], statuses.__getitem__)


def test_no_blockers_is_not_blocked():
    assert not is_blocked([], lambda tid: Status.PENDING)
