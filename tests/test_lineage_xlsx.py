from __future__ import annotations

from pathlib import Path

from openpyxl import load_workbook

from src.batch_index import build_batch_index
from src.lineage_xlsx import LINEAGE_HEADERS, lineage_row, lineage_rows, write_lineage_rows
from src.sample_batches import sample_records


def _read_rows(path: Path, sheet: str) -> list[dict[str, object]]:
    wb = load_workbook(path)
    ws = wb[sheet]
    headers = [c.value for c in ws[1]]
    out = []
    for r in range(2, ws.max_row + 1):
        out.append({headers[i]: ws.cell(row=r, column=i + 1).value for i in range(len(headers))})
    return out


def test_lineage_row_counts_multiplicity_and_unique() -> None:
    index = build_batch_index(sample_records())

    row = lineage_row(index, "BST-2024-001")
    assert row is not None
    assert row["Parents"] == "BST-2023-087, BST-2023-089"
    # both founders reached through both parents
    assert row["AncestorCount"] == 6
    assert row["UniqueAncestorCount"] == 4
    assert row["DescendantCount"] == 0

    founder = lineage_row(index, "BST-2023-001")
    assert founder is not None
    assert founder["DescendantCount"] == 5
    assert founder["UniqueDescendantCount"] == 4

    assert lineage_row(index, "NOPE") is None


def test_lineage_rows_finish_on_cyclic_records() -> None:
    index = build_batch_index([
        {"id": "A", "generation": 2, "parents": ["B", "C"], "children": ["B", "C"]},
        {"id": "B", "generation": 1, "parents": ["A"], "children": ["A"]},
        {"id": "C", "generation": 1, "parents": ["A"], "children": ["A"]},
    ])

    rows = {r["BatchId"]: r for r in lineage_rows(index, ["A", "B", "C"])}

    assert rows["A"]["AncestorCount"] == 2
    assert rows["A"]["DescendantCount"] == 2
    assert rows["B"]["AncestorCount"] == 2
    assert rows["B"]["UniqueAncestorCount"] == 2


def test_write_creates_sheet_with_headers(tmp_path: Path) -> None:
    xlsx = tmp_path / "lineage.xlsx"
    index = build_batch_index(sample_records())

    written = write_lineage_rows(xlsx_path=xlsx, sheet_name="Lineage", rows=lineage_rows(index))
    assert written == len(index)

    wb = load_workbook(xlsx)
    assert wb.sheetnames == ["Lineage"]
    assert [c.value for c in wb["Lineage"][1]] == LINEAGE_HEADERS

    rows = _read_rows(xlsx, "Lineage")
    assert [r["BatchId"] for r in rows] == list(index)


def test_write_upserts_by_batch_id(tmp_path: Path) -> None:
    xlsx = tmp_path / "lineage.xlsx"
    index = build_batch_index(sample_records())

    write_lineage_rows(xlsx_path=xlsx, sheet_name="Lineage", rows=lineage_rows(index, ["BST-2023-001"]))

    row = lineage_row(index, "BST-2023-001")
    assert row is not None
    row["Quantity"] = 150
    write_lineage_rows(xlsx_path=xlsx, sheet_name="Lineage", rows=[row])

    rows = _read_rows(xlsx, "Lineage")
    assert len(rows) == 1
    assert rows[0]["Quantity"] == 150

    # A new batch is appended
    write_lineage_rows(xlsx_path=xlsx, sheet_name="Lineage", rows=lineage_rows(index, ["BST-2023-002"]))
    rows = _read_rows(xlsx, "Lineage")
    assert [r["BatchId"] for r in rows] == ["BST-2023-001", "BST-2023-002"]


def test_write_adds_new_columns_and_backfills(tmp_path: Path) -> None:
    xlsx = tmp_path / "lineage.xlsx"
    index = build_batch_index(sample_records())

    write_lineage_rows(xlsx_path=xlsx, sheet_name="Lineage", rows=lineage_rows(index, ["BST-2023-001"]))

    row = lineage_row(index, "BST-2023-002")
    assert row is not None
    row["Location"] = "Broodstock Tank A-02"
    write_lineage_rows(xlsx_path=xlsx, sheet_name="Lineage", rows=[row])

    rows = _read_rows(xlsx, "Lineage")
    assert len(rows) == 2
    assert rows[1]["Location"] == "Broodstock Tank A-02"
    # backfilled text column stays empty on the older row
    assert rows[0]["Location"] in ("", None)
