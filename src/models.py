from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any


# ---------------------------------------------------------------------------
# Batch records
# ---------------------------------------------------------------------------

# Accepted id keys, in priority order
ID_KEYS = ("id", "batch_id", "batchId", "batch_code")


def _first_present(record: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in record and record[key] is not None:
            return record[key]
    return None


def _id_list(value: Any) -> List[str]:
    """
    Normalize a parent/child reference field into a list of string ids.

    Accepts a list of ids, a single id, or None. Empty entries are dropped,
    order is preserved.
    """
    if value is None:
        return []
    if isinstance(value, (str, int)):
        value = [value]
    out: List[str] = []
    for v in value:
        if v is None:
            continue
        s = str(v).strip()
        if s:
            out.append(s)
    return out


@dataclass
class BatchNode:
    """
    One breeding batch (cohort) in the broodstock genealogy.

    Relations are stored as id lists, never as object references:
      - parent_ids: 0 (founder), 1 (single-parent) or 2 (two-parent breeding)
      - child_ids: batches produced from this one

    Everything after child_ids is display-only and never consulted by the
    tree builder, layout or walkers.
    """
    id: str                            # e.g. "BST-2023-001"
    generation: int = 1                # 1 = founder stock
    parent_ids: List[str] = field(default_factory=list)
    child_ids: List[str] = field(default_factory=list)

    species: Optional[str] = None      # e.g. "Pacific White Shrimp (Litopenaeus vannamei)"
    quantity: Optional[int] = None
    health_status: Optional[str] = None   # "excellent" | "good" | "fair" | "poor" | "critical"
    genetic_markers: Dict[str, str] = field(default_factory=dict)
    origin: Optional[str] = None
    location: Optional[str] = None
    birth_date: Optional[str] = None   # ISO date string, kept as given
    breeding_value: Optional[float] = None
    notes: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_founder(self) -> bool:
        return not self.parent_ids

    def label(self) -> str:
        """
        Short human-readable label for CLI output.
        """
        parts: List[str] = [self.id, f"G{self.generation}"]
        if self.health_status:
            parts.append(f"[{self.health_status}]")
        return " ".join(parts)

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "BatchNode":
        """
        Build a BatchNode from a loose dict record.

        Both the dashboard's camelCase shape (parents / parentBatches /
        parentIds, children / childBatches / childIds, healthStatus ...)
        and snake_case keys are accepted.
        """
        raw_id = _first_present(record, *ID_KEYS)
        if raw_id is None or not str(raw_id).strip():
            raise ValueError(f"Batch record has no id: {record!r}")

        generation_raw = _first_present(record, "generation", "gen")
        try:
            generation = int(generation_raw) if generation_raw is not None else 1
        except (TypeError, ValueError):
            raise ValueError(f"Batch {raw_id!r}: generation must be an integer, got {generation_raw!r}")

        markers_raw = _first_present(record, "genetic_markers", "geneticMarkers") or {}
        markers: Dict[str, str] = {}
        if isinstance(markers_raw, dict):
            markers = {str(k): str(v) for k, v in markers_raw.items()}
        elif isinstance(markers_raw, list):
            # Lineage-tracker shape: [{"marker": ..., "value": ..., "confidence": ...}]
            for m in markers_raw:
                if isinstance(m, dict) and m.get("marker") is not None:
                    markers[str(m["marker"])] = str(m.get("value", ""))

        quantity = _first_present(record, "quantity", "available_quantity")
        breeding_value = _first_present(record, "breeding_value", "breedingValue")

        return cls(
            id=str(raw_id).strip(),
            generation=generation,
            parent_ids=_id_list(
                _first_present(record, "parent_ids", "parentIds", "parents", "parentBatches")
            ),
            child_ids=_id_list(
                _first_present(record, "child_ids", "childIds", "children", "childBatches")
            ),
            species=_first_present(record, "species"),
            quantity=int(quantity) if isinstance(quantity, (int, float)) else None,
            health_status=_first_present(record, "health_status", "healthStatus"),
            genetic_markers=markers,
            origin=_first_present(record, "origin", "hatchery_origin"),
            location=_first_present(record, "location", "currentLocation"),
            birth_date=_first_present(record, "birth_date", "birthDate", "arrival_date"),
            breeding_value=float(breeding_value) if isinstance(breeding_value, (int, float)) else None,
            notes=_first_present(record, "notes", "lineageNotes"),
            raw=dict(record),
        )

    @staticmethod
    def record_has_id(record: Dict[str, Any]) -> bool:
        raw_id = _first_present(record, *ID_KEYS)
        return raw_id is not None and bool(str(raw_id).strip())


# ---------------------------------------------------------------------------
# Tree representation
# ---------------------------------------------------------------------------

@dataclass
class TreeNode:
    """
    One node of a materialized genealogy tree.

    Shape mirrors the child_ids edges reachable from the chosen root.
    x / y stay None until the layout engine positions the node; nodes
    hidden under a collapsed ancestor keep x = y = None and visible = False.
    """
    node: BatchNode
    children: List["TreeNode"] = field(default_factory=list)
    level: int = 1                     # node.generation
    collapsed: bool = False
    x: Optional[float] = None
    y: Optional[float] = None
    visible: bool = True

    @property
    def id(self) -> str:
        return self.node.id

    def to_dict(self) -> Dict[str, Any]:
        """
        Nested plain-dict form: {"id", "generation", "x", "y", "collapsed",
        "visible", "children": [...]}.
        """
        return {
            "id": self.node.id,
            "generation": self.node.generation,
            "x": self.x,
            "y": self.y,
            "collapsed": self.collapsed,
            "visible": self.visible,
            "children": [c.to_dict() for c in self.children],
        }


@dataclass(frozen=True)
class Spacing:
    x: float = 200.0                   # horizontal gap between siblings
    y: float = 100.0                   # vertical gap between generations


@dataclass
class TreeBuildReport:
    """
    Ids the tree builder dropped, by reason.

    The tree itself does not distinguish these cases; the report does.
    """
    dangling: List[str] = field(default_factory=list)    # referenced but not in the collection
    repeated: List[str] = field(default_factory=list)    # already visited (cycle or second path)
    truncated: List[str] = field(default_factory=list)   # beyond max_depth

    @property
    def clean(self) -> bool:
        return not (self.dangling or self.repeated or self.truncated)


@dataclass
class ConsistencyIssue:
    kind: str                          # e.g. "missing_child_link", "dangling_parent"
    batch_id: str
    other_id: Optional[str] = None
    message: str = ""
