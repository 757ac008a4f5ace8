"""Graph algorithms for ancestry searches."""

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Hashable, Iterable

T = TypeVar("T")


async def breadth_first_search(
    roots: Iterable[T],
    neighbors: Callable[[T], Awaitable[Iterable[T] | None]],
    is_goal: Callable[[T], bool],
    key: Callable[[T], Hashable],
) -> T | None:
    """Return the first node satisfying ``is_goal`` in breadth-first order.

    Args:
        roots: Starting nodes, visited in the given order
        neighbors: Coroutine producing a node's successors; None means none
        is_goal: Predicate checked once per distinct node
        key: Identity used to deduplicate nodes

    Returns:
        The goal node, or None when the frontier is exhausted.
    """
    visited: set[Hashable] = set()
    frontier: deque[T] = deque()

    for root in roots:
        if key(root) not in visited:
            visited.add(key(root))
            frontier.append(root)

    while frontier:
        node = frontier.popleft()
        if is_goal(node):
            return node
        for successor in await neighbors(node) or ():
            successor_key = key(successor)
            if successor_key in visited:
                continue
            visited.add(successor_key)
            frontier.append(successor)

    return None


async def depth_first_search(
    root: T,
    expand: Callable[[T], Awaitable[tuple[bool, Iterable[T]]]],
    key: Callable[[T], Hashable],
) -> bool:
    """Walk nodes depth-first with an explicit stack until ``expand`` reports a hit.

    ``expand`` returns ``(found, successors)``. Each distinct key is expanded
    at most once, so cyclic graphs terminate after one visit per node.
    """
    visited: set[Hashable] = set()
    stack: list[T] = [root]

    while stack:
        node = stack.pop()
        node_key = key(node)
        if node_key in visited:
            continue
        visited.add(node_key)
        found, successors = await expand(node)
        if found:
            return True
        stack.extend(reversed(list(successors)))

    return False


__all__ = ["breadth_first_search", "depth_first_search"]
