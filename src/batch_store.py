from __future__ import annotations

import json
from pathlib import Path
from typing import Any

# Default location of a local batch export (relative to project root)
BATCHES_PATH = Path("data") / "batches.json"


def _extract_batch_list(data: Any) -> list[dict] | None:
    """
    Pull the batch record list out of any supported JSON shape.

    Supports:
      - a top-level list[dict]
      - {"batches": [...]}
      - the REST envelope {"success": true, "data": {"batches": [...]}}
        (or "data" directly holding the list)
    """
    if isinstance(data, list):
        return data

    if not isinstance(data, dict):
        return None

    if isinstance(data.get("batches"), list):
        return data["batches"]

    inner = data.get("data")
    if isinstance(inner, list):
        return inner
    if isinstance(inner, dict) and isinstance(inner.get("batches"), list):
        return inner["batches"]

    return None


def load_batches_json(path: Path = BATCHES_PATH) -> list[dict]:
    """
    Load batch records from a JSON file.

    Raises:
      - FileNotFoundError if the file does not exist
      - ValueError if the JSON is invalid or holds no batch list
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Batch file not found: {path}")

    with path.open("r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Batch file is not valid JSON: {path} ({e})") from e

    if isinstance(data, dict) and data.get("success") is False:
        raise ValueError(f"Batch file holds a failed API response: {path}")

    batches = _extract_batch_list(data)
    if batches is None:
        raise ValueError(
            f"Malformed batch file {path}: expected a list, {{'batches': [...]}} "
            f"or an API envelope"
        )

    for i, rec in enumerate(batches):
        if not isinstance(rec, dict):
            raise ValueError(
                f"Malformed batch record #{i} in {path}: expected object, got {type(rec).__name__}"
            )

    print(f"[batch-store] Loaded {len(batches)} batch records from {path}")
    return batches
