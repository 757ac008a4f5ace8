"""Graph traversal helpers."""

from graph.algos import breadth_first_search, depth_first_search

__all__ = ["breadth_first_search", "depth_first_search"]
