from __future__ import annotations

from collections import deque
from typing import Any, Dict, List, Optional

from .models import TreeNode


def flatten_layout(tree: Optional[TreeNode]) -> List[Dict[str, Any]]:
    """
    Convert a (positioned) TreeNode into a flat list of node dicts.
    Order is breadth-first: root first, then depth 1, 2, 3...

    Output format example:
    {
        "id": "BST-2023-087",
        "generation": 2,
        "level": 2,
        "depth": 1,                   # distance from the tree root
        "x": 300.0,                   # None when hidden / not laid out
        "y": 150.0,
        "visible": true,
        "collapsed": false,
        "has_children": true,
        "parent_id": "BST-2023-001",  # tree parent, None for the root
        "species": "Pacific White Shrimp (Litopenaeus vannamei)",
        "health_status": "excellent",
    }

    parent_id is the parent in THIS tree, not the batch's full parent list
    (a two-parent batch only hangs under the parent it was reached from).
    """
    flat: List[Dict[str, Any]] = []
    if tree is None:
        return flat

    queue: deque[tuple[TreeNode, int, Optional[str]]] = deque([(tree, 0, None)])

    while queue:
        t, depth, parent_id = queue.popleft()

        flat.append({
            "id": t.id,
            "generation": t.node.generation,
            "level": t.level,
            "depth": depth,
            "x": t.x,
            "y": t.y,
            "visible": t.visible,
            "collapsed": t.collapsed,
            "has_children": bool(t.children),
            "parent_id": parent_id,
            "species": t.node.species,
            "health_status": t.node.health_status,
        })

        for child in t.children:
            queue.append((child, depth + 1, t.id))

    return flat


def edges(tree: Optional[TreeNode], *, visible_only: bool = True) -> List[tuple[str, str]]:
    """
    (parent_id, child_id) pairs of the tree, for connector drawing.
    """
    out: List[tuple[str, str]] = []
    if tree is None:
        return out

    stack = [tree]
    while stack:
        t = stack.pop()
        for child in t.children:
            if visible_only and not (t.visible and child.visible):
                continue
            out.append((t.id, child.id))
        stack.extend(reversed(t.children))
    return out
