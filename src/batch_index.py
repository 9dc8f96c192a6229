from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from .models import BatchNode, ConsistencyIssue


BatchIndex = Dict[str, BatchNode]
NodeCollection = Union[Mapping[str, BatchNode], Iterable[BatchNode]]

# Two-parent breeding is the maximum
MAX_PARENTS = 2


class LineageConsistencyError(ValueError):
    """
    Raised by strict ingestion when parent/child links disagree.
    """

    def __init__(self, issues: List[ConsistencyIssue]):
        self.issues = issues
        lines = [f"  - {i.kind}: {i.message}" for i in issues[:20]]
        if len(issues) > 20:
            lines.append(f"  ... and {len(issues) - 20} more")
        super().__init__(
            f"{len(issues)} lineage consistency issue(s):\n" + "\n".join(lines)
        )


# ---------------------------------------------------------------------------
# Arena construction
# ---------------------------------------------------------------------------

def as_index(nodes: NodeCollection) -> BatchIndex:
    """
    Return an id -> BatchNode mapping for either a mapping or a flat sequence.

    For sequences the first occurrence of an id wins, matching a linear
    "find first" lookup over the same list.
    """
    if isinstance(nodes, Mapping):
        return dict(nodes)

    index: BatchIndex = {}
    for node in nodes:
        if node.id not in index:
            index[node.id] = node
    return index


def build_batch_index(
    records: Iterable[Union[Dict[str, Any], BatchNode]],
    *,
    strict: bool = False,
) -> BatchIndex:
    """
    Build the batch arena from loose records.

    - dict records go through BatchNode.from_record()
    - records without an id are skipped
    - duplicate ids: first occurrence wins

    Parent/child asymmetry is tolerated by default. With strict=True the
    index is checked and LineageConsistencyError is raised if anything is off.
    """
    index: BatchIndex = {}

    for rec in records:
        if isinstance(rec, BatchNode):
            node = rec
        else:
            if not BatchNode.record_has_id(rec):
                continue
            node = BatchNode.from_record(rec)

        if node.id in index:
            continue
        index[node.id] = node

    if strict:
        issues = check_consistency(index)
        if issues:
            raise LineageConsistencyError(issues)

    return index


# ---------------------------------------------------------------------------
# Consistency checks
# ---------------------------------------------------------------------------

def check_consistency(index: Mapping[str, BatchNode]) -> List[ConsistencyIssue]:
    """
    Report every disagreement between parent_ids and child_ids.

    Checks (per batch):
      - dangling_parent / dangling_child: id referenced but not present
      - missing_child_link: B lists A as parent, A does not list B as child
      - missing_parent_link: A lists B as child, B does not list A as parent
      - too_many_parents: more than two parent ids
      - generation_order: generation not strictly greater than the
        youngest (lowest) generation among its resolved parents

    Nothing is repaired; callers decide what to do with the list.
    """
    issues: List[ConsistencyIssue] = []

    for bid, node in index.items():
        if len(node.parent_ids) > MAX_PARENTS:
            issues.append(ConsistencyIssue(
                kind="too_many_parents",
                batch_id=bid,
                message=f"{bid} lists {len(node.parent_ids)} parents (max {MAX_PARENTS})",
            ))

        parent_generations: List[int] = []

        for pid in node.parent_ids:
            parent = index.get(pid)
            if parent is None:
                issues.append(ConsistencyIssue(
                    kind="dangling_parent",
                    batch_id=bid,
                    other_id=pid,
                    message=f"{bid} lists unknown parent {pid}",
                ))
                continue

            parent_generations.append(parent.generation)
            if bid not in parent.child_ids:
                issues.append(ConsistencyIssue(
                    kind="missing_child_link",
                    batch_id=bid,
                    other_id=pid,
                    message=f"{bid} lists parent {pid}, but {pid} does not list {bid} as child",
                ))

        for cid in node.child_ids:
            child = index.get(cid)
            if child is None:
                issues.append(ConsistencyIssue(
                    kind="dangling_child",
                    batch_id=bid,
                    other_id=cid,
                    message=f"{bid} lists unknown child {cid}",
                ))
                continue

            if bid not in child.parent_ids:
                issues.append(ConsistencyIssue(
                    kind="missing_parent_link",
                    batch_id=bid,
                    other_id=cid,
                    message=f"{bid} lists child {cid}, but {cid} does not list {bid} as parent",
                ))

        if parent_generations and node.generation <= min(parent_generations):
            issues.append(ConsistencyIssue(
                kind="generation_order",
                batch_id=bid,
                message=(
                    f"{bid} is generation {node.generation}, "
                    f"not after its parents (min parent generation {min(parent_generations)})"
                ),
            ))

    return issues


# ---------------------------------------------------------------------------
# Selection helpers
# ---------------------------------------------------------------------------

def filter_batches(
    index: Mapping[str, BatchNode],
    *,
    search: Optional[str] = None,
    generation: Optional[int] = None,
) -> List[BatchNode]:
    """
    Case-insensitive substring search over id, species and origin,
    optionally restricted to one generation. Index order is preserved.
    """
    needle = (search or "").casefold()
    out: List[BatchNode] = []

    for node in index.values():
        if needle:
            haystacks = (node.id, node.species or "", node.origin or "")
            if not any(needle in h.casefold() for h in haystacks):
                continue
        if generation is not None and node.generation != generation:
            continue
        out.append(node)

    return out


def founders(index: Mapping[str, BatchNode]) -> List[BatchNode]:
    """
    Batches usable as tree roots: generation 1 or no parents.
    """
    return [n for n in index.values() if n.generation == 1 or n.is_founder]


def group_by_generation(index: Mapping[str, BatchNode]) -> Dict[int, List[BatchNode]]:
    by_gen: Dict[int, List[BatchNode]] = {}
    for node in index.values():
        by_gen.setdefault(node.generation, []).append(node)
    return dict(sorted(by_gen.items()))
