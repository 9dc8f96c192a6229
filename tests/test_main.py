from __future__ import annotations

import json
from pathlib import Path

import pytest
from openpyxl import load_workbook

from src.main import MAX_DEPTH_LIMIT, main
from src.sample_batches import SAMPLE_BATCHES


def test_json_output_is_clean_and_positioned(capsys) -> None:
    code = main(["--sample", "--json", "--ancestors", "--root", "BST-2023-001"])
    captured = capsys.readouterr()

    assert code == 0
    result = json.loads(captured.out)
    assert result["root_id"] == "BST-2023-001"
    assert result["tree"]["x"] == 400
    assert result["tree"]["y"] == 50
    assert [n["id"] for n in result["nodes"]] == [
        "BST-2023-001",
        "BST-2023-087",
        "BST-2023-089",
        "BST-2024-001",
        "BST-2024-002",
    ]
    assert result["ancestors"] == []
    assert result["report"]["repeated"] == ["BST-2024-001"]
    # logs went to stderr
    assert "[main]" in captured.err


def test_ascii_and_walkers_from_file(tmp_path: Path, capsys) -> None:
    path = tmp_path / "batches.json"
    path.write_text(json.dumps({"batches": SAMPLE_BATCHES}), encoding="utf-8")

    code = main([
        "--batches", str(path),
        "--root", "BST-2024-001",
        "--ascii",
        "--ancestors",
        "--dedupe",
    ])
    out = capsys.readouterr().out

    assert code == 0
    assert "Ancestors of BST-2024-001 (4)" in out
    assert "BST-2024-001 G3 [excellent]" in out


def test_check_exits_nonzero_on_dangling_links(capsys) -> None:
    code = main(["--sample", "--check"])
    out = capsys.readouterr().out

    assert code == 1
    assert "Consistency check: 4 issue(s)" in out


def test_strict_refuses_inconsistent_data(capsys) -> None:
    assert main(["--sample", "--strict"]) == 1
    assert "inconsistent batch data" in capsys.readouterr().out


def test_unknown_root_is_empty_result(capsys) -> None:
    code = main(["--sample", "--json", "--root", "NONEXISTENT"])
    result = json.loads(capsys.readouterr().out)

    assert code == 0
    assert result["tree"] is None
    assert result["nodes"] == []


def test_missing_batch_file_fails(tmp_path: Path, capsys) -> None:
    assert main(["--batches", str(tmp_path / "nope.json")]) == 1
    assert "ERROR loading batches" in capsys.readouterr().out


def test_export_xlsx(tmp_path: Path, capsys) -> None:
    xlsx = tmp_path / "out" / "lineage.xlsx"
    assert main(["--sample", "--export-xlsx", str(xlsx), "--export-sheet", "Genealogy"]) == 0

    wb = load_workbook(xlsx)
    ws = wb["Genealogy"]
    assert ws.max_row == len(SAMPLE_BATCHES) + 1


def test_max_depth_above_limit_is_rejected(capsys) -> None:
    with pytest.raises(SystemExit) as exc:
        main(["--sample", "--max-depth", "5000"])
    assert exc.value.code == 2
    assert "--max-depth" in capsys.readouterr().err

    assert main(["--sample", "--max-depth", str(MAX_DEPTH_LIMIT)]) == 0
