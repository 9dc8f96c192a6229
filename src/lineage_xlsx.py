from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, Mapping, Optional

from openpyxl import Workbook, load_workbook
from openpyxl.styles import Font
from openpyxl.worksheet.worksheet import Worksheet

from .lineage_walk import get_ancestors, get_descendants
from .models import BatchNode


KEY_HEADER = "BatchId"

LINEAGE_HEADERS: list[str] = [
    "BatchId",
    "Generation",
    "Species",
    "HealthStatus",
    "Quantity",
    "Parents",
    "Children",
    "AncestorCount",
    "UniqueAncestorCount",
    "DescendantCount",
    "UniqueDescendantCount",
]

# Columns backfilled with 0 when added to an existing sheet
_NUMERIC_PREFIXES = ("Generation", "Quantity", "AncestorCount", "UniqueAncestorCount",
                     "DescendantCount", "UniqueDescendantCount")


# ----------------------------
# Row construction
# ----------------------------

def lineage_row(index: Mapping[str, BatchNode], batch_id: str) -> Optional[dict[str, Any]]:
    """
    One export row for a batch, or None if it is not in the index.

    AncestorCount / DescendantCount preserve multiplicity (diamonds count
    once per path); the Unique* columns count each batch once.
    """
    node = index.get(batch_id)
    if node is None:
        return None

    return {
        "BatchId": node.id,
        "Generation": node.generation,
        "Species": node.species or "",
        "HealthStatus": node.health_status or "",
        "Quantity": node.quantity if node.quantity is not None else "",
        "Parents": ", ".join(node.parent_ids),
        "Children": ", ".join(node.child_ids),
        "AncestorCount": len(get_ancestors(batch_id, index)),
        "UniqueAncestorCount": len(get_ancestors(batch_id, index, dedupe=True)),
        "DescendantCount": len(get_descendants(batch_id, index)),
        "UniqueDescendantCount": len(get_descendants(batch_id, index, dedupe=True)),
    }


def lineage_rows(
    index: Mapping[str, BatchNode],
    batch_ids: Optional[Iterable[str]] = None,
) -> list[dict[str, Any]]:
    """
    Rows for the given batch ids (default: every batch, index order).
    Unknown ids are skipped.
    """
    ids = list(index) if batch_ids is None else list(batch_ids)
    rows: list[dict[str, Any]] = []
    for bid in ids:
        row = lineage_row(index, bid)
        if row is not None:
            rows.append(row)
    return rows


# ----------------------------
# Sheet helpers
# ----------------------------

def _header_row(ws: Worksheet) -> list[str]:
    first = next(ws.iter_rows(min_row=1, max_row=1, values_only=True), ())
    headers = ["" if v is None else str(v) for v in first]
    while headers and not headers[-1]:
        headers.pop()
    return headers


def _blank_value(header: str) -> Any:
    return 0 if header.startswith(_NUMERIC_PREFIXES) else ""


def _sync_headers(ws: Worksheet, required: list[str]) -> list[str]:
    """
    Existing columns keep their order; missing required columns are added
    to the right (bold) and older data rows get a blank value in them.
    """
    headers = _header_row(ws)
    last_data_row = ws.max_row if headers else 1
    added = [h for h in required if h not in headers]

    for col, h in enumerate(added, start=len(headers) + 1):
        ws.cell(row=1, column=col, value=h).font = Font(bold=True)
        for r in range(2, last_data_row + 1):
            ws.cell(row=r, column=col, value=_blank_value(h))

    return headers + added


def _find_rows_by_key(ws: Worksheet, key_col: int) -> dict[str, list[int]]:
    rows: dict[str, list[int]] = {}
    for r in range(2, ws.max_row + 1):
        v = ws.cell(row=r, column=key_col).value
        if v is None or str(v).strip() == "":
            continue
        rows.setdefault(str(v).strip(), []).append(r)
    return rows


# ----------------------------
# Public API
# ----------------------------

def write_lineage_rows(
    *,
    xlsx_path: Path,
    sheet_name: str,
    rows: list[dict[str, Any]],
) -> int:
    """
    UPSERT lineage rows into an Excel sheet, keyed by BatchId.

    Behavior:
      - If file doesn't exist: create with headers.
      - Existing BatchId: overwrite that row; duplicate rows for the same
        id are deleted (keep first).
      - Unknown BatchId: append.
      - Columns present in rows but not in the sheet are appended and
        backfilled on older rows.

    Returns the number of rows written.
    """
    xlsx_path = Path(xlsx_path)
    created = not xlsx_path.exists()

    required = list(LINEAGE_HEADERS)
    for row in rows:
        for h in row:
            if h not in required:
                required.append(h)

    wb = Workbook() if created else load_workbook(xlsx_path)
    ws = wb[sheet_name] if sheet_name in wb.sheetnames else wb.create_sheet(title=sheet_name)

    # Drop the empty default sheet of a fresh workbook
    if created and "Sheet" in wb.sheetnames and sheet_name != "Sheet":
        wb.remove(wb["Sheet"])

    headers = _sync_headers(ws, required)
    header_to_col = {h: i + 1 for i, h in enumerate(headers)}
    key_col = header_to_col[KEY_HEADER]

    written = 0
    for row in rows:
        key = str(row.get(KEY_HEADER) or "").strip()
        if not key:
            continue

        existing_rows = _find_rows_by_key(ws, key_col).get(key, [])

        if existing_rows:
            target_row = existing_rows[0]
            for r in sorted(existing_rows[1:], reverse=True):
                ws.delete_rows(r, 1)
        else:
            target_row = ws.max_row + 1 if ws.max_row >= 1 else 2

        for h, v in row.items():
            col = header_to_col.get(h)
            if col is not None:
                ws.cell(row=target_row, column=col, value=v)
        written += 1

    xlsx_path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(xlsx_path)
    print(f"[lineage-xlsx] Wrote {written} rows -> {xlsx_path} [{sheet_name}]")
    return written
