from collections.abc import Callable, Iterable

from rondo.core.models import Status

__all__ = ["has_cycle", "is_blocked"]


def has_cycle(
    task_id: int, proposed: Iterable[int], get_blockers: Callable[[int], Iterable[int]]
) -> bool:
    """True if any proposed blocker already reaches task_id through the blocker graph.

    A task proposed as its own blocker counts as a cycle.
    """
    for candidate in proposed:
        visited: set[int] = set()
        stack = [candidate]
        while stack:
            node = stack.pop()
            if node == task_id:
                return True
            if node in visited:
                continue
            visited.add(node)
            stack.extend(get_blockers(node))
    return False


def is_blocked(blocked_by: Iterable[int], get_status: Callable[[int], Status]) -> bool:
    return any(get_status(b) is not Status.DONE for b in blocked_by)
