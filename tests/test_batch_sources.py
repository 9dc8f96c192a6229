from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
import requests

from src.batch_api import ApiError, build_client, fetch_batch, fetch_batches, unwrap_envelope
from src.batch_store import load_batches_json


class _FakeResponse:
    def __init__(self, payload: Any, status_code: int = 200):
        self._payload = payload
        self.status_code = status_code

    def json(self) -> Any:
        return self._payload

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class _FakeSession:
    def __init__(self, response: _FakeResponse):
        self.response = response
        self.calls: list[tuple[str, Any]] = []

    def get(self, url: str, params: Any = None, timeout: float | None = None) -> _FakeResponse:
        self.calls.append((url, params))
        return self.response


_RECORDS = [
    {"id": "BST-2023-001", "generation": 1, "children": ["BST-2023-087"]},
    {"id": "BST-2023-087", "generation": 2, "parents": ["BST-2023-001"]},
]


# ---------------------------------------------------------------------------
# JSON files
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "payload",
    [
        _RECORDS,
        {"batches": _RECORDS},
        {"success": True, "data": {"batches": _RECORDS}},
        {"success": True, "data": _RECORDS},
    ],
)
def test_load_batches_json_supported_shapes(tmp_path: Path, payload: Any) -> None:
    path = tmp_path / "batches.json"
    path.write_text(json.dumps(payload), encoding="utf-8")

    assert load_batches_json(path) == _RECORDS


def test_load_batches_json_errors(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_batches_json(tmp_path / "missing.json")

    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")
    with pytest.raises(ValueError):
        load_batches_json(bad)

    failed = tmp_path / "failed.json"
    failed.write_text(json.dumps({"success": False, "message": "nope"}), encoding="utf-8")
    with pytest.raises(ValueError):
        load_batches_json(failed)

    wrong = tmp_path / "wrong.json"
    wrong.write_text(json.dumps({"data": {"customers": []}}), encoding="utf-8")
    with pytest.raises(ValueError):
        load_batches_json(wrong)

    not_objects = tmp_path / "ids.json"
    not_objects.write_text(json.dumps(["BST-2023-001"]), encoding="utf-8")
    with pytest.raises(ValueError):
        load_batches_json(not_objects)


# ---------------------------------------------------------------------------
# REST envelope
# ---------------------------------------------------------------------------

def test_unwrap_envelope() -> None:
    assert unwrap_envelope({"success": True, "data": {"batch": {"id": "X"}}}) == {"batch": {"id": "X"}}

    with pytest.raises(ApiError):
        unwrap_envelope({"success": False, "message": "Not authorized"})
    with pytest.raises(ApiError):
        unwrap_envelope({"success": True})
    with pytest.raises(ApiError):
        unwrap_envelope([1, 2, 3])


def test_fetch_batches_unwraps_and_builds_url() -> None:
    session = _FakeSession(_FakeResponse({"success": True, "data": {"batches": _RECORDS, "total": 2}}))

    batches = fetch_batches(session, "http://api.local/", params={"limit": 50})

    assert batches == _RECORDS
    assert session.calls == [("http://api.local/api/v1/batches", {"limit": 50})]


def test_fetch_batches_http_error_propagates() -> None:
    session = _FakeSession(_FakeResponse({}, status_code=500))
    with pytest.raises(requests.HTTPError):
        fetch_batches(session, "http://api.local")


def test_fetch_batch_single_and_404() -> None:
    session = _FakeSession(_FakeResponse({"success": True, "data": {"batch": _RECORDS[0]}}))
    assert fetch_batch(session, "http://api.local", "BST-2023-001") == _RECORDS[0]
    assert session.calls[0][0] == "http://api.local/api/v1/batches/BST-2023-001"

    missing = _FakeSession(_FakeResponse({}, status_code=404))
    assert fetch_batch(missing, "http://api.local", "NOPE") is None


def test_build_client_headers() -> None:
    session = build_client("secret")
    assert session.headers["Accept"] == "application/json"
    assert session.headers["Authorization"] == "Bearer secret"
    assert "Authorization" not in build_client().headers
