from __future__ import annotations

from collections import deque
from typing import Dict, FrozenSet, List, Mapping, Set

from .batch_index import NodeCollection, as_index
from .models import BatchNode

# Generations followed below the root by the tree builder and the walkers.
DEFAULT_MAX_DEPTH = 64


def _walk(
    node_id: str,
    index: Mapping[str, BatchNode],
    *,
    links: str,
    dedupe: bool,
    max_depth: int,
) -> List[BatchNode]:
    """
    Shared walker over parent_ids or child_ids.

    Order for a node X: X's resolved relatives first (link order), then
    each relative's own walk in turn.

    "out" is a LIST: without dedupe, a batch reached by two paths (diamond
    ancestry, or a shared child) is listed once per path. A relative that is
    already on the current path (a cycle) is never listed or followed.
    """
    out: List[BatchNode] = []
    seen: Set[str] = set()

    def walk(batch_id: str, depth: int, path: FrozenSet[str]) -> None:
        node = index.get(batch_id)
        if node is None or depth >= max_depth:
            return

        to_expand: List[BatchNode] = []
        for rid in getattr(node, links):
            rel = index.get(rid)
            if rel is None or rid in path:
                continue
            if dedupe:
                if rid in seen:
                    continue
                seen.add(rid)
            out.append(rel)
            to_expand.append(rel)

        for rel in to_expand:
            walk(rel.id, depth + 1, path | {rel.id})

    if dedupe:
        seen.add(node_id)
    walk(node_id, 0, frozenset([node_id]))
    return out


def get_ancestors(
    node_id: str,
    all_nodes: NodeCollection,
    *,
    dedupe: bool = False,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> List[BatchNode]:
    """
    Every ancestor reachable through parent_ids.

    dedupe=False keeps multiplicity (an ancestor reached via both parents
    appears twice). dedupe=True lists each batch once, first occurrence kept,
    and never lists node_id itself.

    Unknown node, founder, or parents not present in all_nodes -> [].
    """
    return _walk(
        node_id,
        as_index(all_nodes),
        links="parent_ids",
        dedupe=dedupe,
        max_depth=max_depth,
    )


def get_descendants(
    node_id: str,
    all_nodes: NodeCollection,
    *,
    dedupe: bool = False,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> List[BatchNode]:
    """
    Mirror of get_ancestors() over child_ids.
    """
    return _walk(
        node_id,
        as_index(all_nodes),
        links="child_ids",
        dedupe=dedupe,
        max_depth=max_depth,
    )


def relative_distances(
    node_id: str,
    all_nodes: NodeCollection,
    *,
    direction: str = "ancestors",
    max_depth: int | None = None,
) -> Dict[str, int]:
    """
    UNIQUE relatives with their nearest distance (BFS), root at 0.
    """
    if direction not in ("ancestors", "descendants"):
        raise ValueError("direction must be 'ancestors' or 'descendants'")

    index = as_index(all_nodes)
    if node_id not in index:
        return {}

    links = "parent_ids" if direction == "ancestors" else "child_ids"

    q = deque([(node_id, 0)])
    dist: Dict[str, int] = {node_id: 0}

    while q:
        bid, d = q.popleft()
        if max_depth is not None and d >= max_depth:
            continue

        for rid in getattr(index[bid], links):
            if rid in index and rid not in dist:
                dist[rid] = d + 1
                q.append((rid, d + 1))

    return dist


def ancestor_generations(
    node_id: str,
    all_nodes: NodeCollection,
    *,
    max_depth: int | None = None,
) -> Dict[int, List[str]]:
    """
    {distance: [ancestor ids]} with the root at distance 0.
    """
    by_distance: Dict[int, List[str]] = {}
    for bid, d in relative_distances(node_id, all_nodes, max_depth=max_depth).items():
        by_distance.setdefault(d, []).append(bid)
    return dict(sorted(by_distance.items()))
