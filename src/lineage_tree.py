from __future__ import annotations

from typing import Iterable, List, Optional, Set, Tuple

from .batch_index import NodeCollection, as_index
from .lineage_walk import DEFAULT_MAX_DEPTH
from .models import TreeBuildReport, TreeNode


def build_tree_with_report(
    root_id: str,
    all_nodes: NodeCollection,
    *,
    expanded: Optional[Set[str]] = None,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> Tuple[Optional[TreeNode], TreeBuildReport]:
    """
    Materialize the descendant tree under root_id.

    Return:
      1) the tree (None if root_id is not in the collection)
      2) a report of ids that were dropped along the way

    Rules:
      - children follow child_ids input order
      - ids missing from the collection are skipped (report.dangling)
      - the visited set is shared by the whole call, so a batch reachable
        through two lineage paths appears once, at its first pre-order
        encounter; a true cycle stops at the repeated id (report.repeated)
      - below max_depth generations nothing is materialized (report.truncated)
      - expanded=None: nothing collapsed; otherwise a node is collapsed
        unless its id is in expanded. Collapsed nodes keep their children.
    """
    index = as_index(all_nodes)
    report = TreeBuildReport()
    visited: Set[str] = set()

    def walk(batch_id: str, depth: int) -> Optional[TreeNode]:
        if batch_id in visited:
            report.repeated.append(batch_id)
            return None

        node = index.get(batch_id)
        if node is None:
            report.dangling.append(batch_id)
            return None

        visited.add(batch_id)

        children: List[TreeNode] = []
        for child_id in node.child_ids:
            # --- depth cut ---
            if depth >= max_depth:
                report.truncated.append(child_id)
                continue
            child = walk(child_id, depth + 1)
            if child is not None:
                children.append(child)

        return TreeNode(
            node=node,
            children=children,
            level=node.generation,
            collapsed=expanded is not None and batch_id not in expanded,
        )

    if root_id not in index:
        return None, report

    return walk(root_id, depth=0), report


def build_tree(
    root_id: str,
    all_nodes: NodeCollection,
    *,
    expanded: Optional[Set[str]] = None,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> Optional[TreeNode]:
    """
    Build the genealogy tree rooted at root_id, or None if it is unknown.

    See build_tree_with_report() for the rules; this drops the report.
    """
    tree, _ = build_tree_with_report(
        root_id,
        all_nodes,
        expanded=expanded,
        max_depth=max_depth,
    )
    return tree


def tree_ids(tree: Optional[TreeNode]) -> List[str]:
    """
    Batch ids of the tree in pre-order (collapsed subtrees included).
    """
    out: List[str] = []
    if tree is None:
        return out

    stack = [tree]
    while stack:
        t = stack.pop()
        out.append(t.id)
        stack.extend(reversed(t.children))
    return out


# ---------------------------------------------------------------------------
# Expand / collapse state
# ---------------------------------------------------------------------------

def toggle_node(expanded: Iterable[str], node_id: str) -> Set[str]:
    """
    Return a new expanded-set with node_id flipped.
    """
    out = set(expanded)
    if node_id in out:
        out.discard(node_id)
    else:
        out.add(node_id)
    return out


def expand_all(all_nodes: NodeCollection) -> Set[str]:
    return set(as_index(all_nodes))


def collapse_all() -> Set[str]:
    return set()
