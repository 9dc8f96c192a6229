from __future__ import annotations

from collections import Counter
from typing import Any

from .batch_index import NodeCollection, as_index
from .lineage_walk import relative_distances


def _links_for(direction: str) -> str:
    if direction == "ancestors":
        return "parent_ids"
    if direction == "descendants":
        return "child_ids"
    raise ValueError("direction must be 'ancestors' or 'descendants'")


def lineage_summary(
    all_nodes: NodeCollection,
    *,
    root_id: str,
    direction: str = "ancestors",
    max_depth: int | None = None,
) -> tuple[dict[str, Any], dict[int, int]]:
    """
    UNIQUE relative summary (deduplicated by batch id).
    Returns:
      summary: {total_nodes, max_distance, terminal_nodes, open_nodes}
        terminal_nodes = no resolvable link in this direction
                         (founders for ancestors, leaves for descendants)
        open_nodes     = some but not all links resolve
      dist_counts: {distance: count}, root at distance 0
    """
    links = _links_for(direction)
    index = as_index(all_nodes)

    if root_id not in index:
        return (
            {"total_nodes": 0, "max_distance": 0, "terminal_nodes": 0, "open_nodes": 0},
            {},
        )

    dist = relative_distances(root_id, index, direction=direction, max_depth=max_depth)
    dist_counts = Counter(dist.values())

    terminal_nodes = 0
    open_nodes = 0
    for bid in dist:
        refs = getattr(index[bid], links)
        known = [r for r in refs if r in index]
        if not known:
            terminal_nodes += 1
        elif len(known) < len(refs):
            open_nodes += 1

    summary = {
        "total_nodes": len(dist),
        "max_distance": max(dist_counts) if dist_counts else 0,
        "terminal_nodes": terminal_nodes,
        "open_nodes": open_nodes,
    }
    return summary, dict(sorted(dist_counts.items()))


def appearance_summary(
    all_nodes: NodeCollection,
    *,
    root_id: str,
    direction: str = "ancestors",
    max_depth: int = 12,
) -> tuple[dict[int, int], dict[int, int]]:
    """
    APPEARANCE-based summary (does NOT deduplicate).
    Returns:
      appearances_per_distance[d] = number of appearances at distance d
      unique_per_distance[d]      = unique batch ids at distance d

    A ratio below 1.0 at some distance means shared ancestry (or shared
    offspring) converges there.
    """
    links = _links_for(direction)
    index = as_index(all_nodes)

    if root_id not in index:
        return {}, {}

    # frontier[id] = number of distinct paths reaching id at this distance
    frontier: Counter[str] = Counter({root_id: 1})
    appearances: dict[int, int] = {0: 1}
    unique: dict[int, int] = {0: 1}

    for d in range(1, max_depth + 1):
        reached: Counter[str] = Counter()
        for bid, paths in frontier.items():
            for rid in getattr(index[bid], links):
                if rid in index:
                    reached[rid] += paths

        if not reached:
            break

        appearances[d] = sum(reached.values())
        unique[d] = len(reached)
        frontier = reached

    return appearances, unique
