# src/batch_api.py

from typing import Any, Dict, List, Optional
import requests


DEFAULT_API_URL = "http://localhost:3001"
BATCHES_ENDPOINT = "/api/v1/batches"


class ApiError(RuntimeError):
    """
    The dashboard API answered, but not with a usable success envelope.
    """


# -------------------------------
# HTTP Client Builder
# -------------------------------

def build_client(token: Optional[str] = None) -> requests.Session:
    """
    Build and return a configured HTTP session for dashboard API calls.
    """
    session = requests.Session()
    session.headers.update({
        "User-Agent": "batch-lineage/1.0",
        "Accept": "application/json",
    })
    if token:
        session.headers["Authorization"] = f"Bearer {token}"
    return session


# -------------------------------
# Envelope handling
# -------------------------------

def unwrap_envelope(payload: Any) -> Any:
    """
    Return the "data" member of a {"success": bool, "data": {...}} response.

    Raises ApiError when success is not true or the shape is wrong.
    """
    if not isinstance(payload, dict):
        raise ApiError(
            f"Unexpected response structure: expected object, got {type(payload).__name__}"
        )

    if payload.get("success") is not True:
        message = payload.get("message") or payload.get("error") or "request failed"
        raise ApiError(f"API reported failure: {message}")

    if "data" not in payload:
        raise ApiError("API envelope has no 'data' member")

    return payload["data"]


def _batch_list(data: Any) -> List[Dict[str, Any]]:
    if isinstance(data, list):
        batches = data
    elif isinstance(data, dict) and isinstance(data.get("batches"), list):
        batches = data["batches"]
    else:
        raise ApiError("API data has no batch list")

    return [b for b in batches if isinstance(b, dict)]


# -------------------------------
# Batch fetches
# -------------------------------

def fetch_batches(
    session: requests.Session,
    base_url: str = DEFAULT_API_URL,
    *,
    params: Optional[Dict[str, Any]] = None,
) -> List[Dict[str, Any]]:
    """
    GET <base_url>/api/v1/batches and return the batch records.

    HTTP errors propagate (raise_for_status); a failed envelope raises ApiError.
    """
    url = base_url.rstrip("/") + BATCHES_ENDPOINT

    print(f"[batch_api] Fetching batches:")
    print(f"  GET {url}")

    resp = session.get(url, params=params, timeout=10)
    resp.raise_for_status()

    batches = _batch_list(unwrap_envelope(resp.json()))
    print(f"[batch_api] Received {len(batches)} batch records")
    return batches


def fetch_batch(
    session: requests.Session,
    base_url: str,
    batch_id: str,
) -> Optional[Dict[str, Any]]:
    """
    GET <base_url>/api/v1/batches/<batch_id>.
    Returns None on 404.
    """
    url = f"{base_url.rstrip('/')}{BATCHES_ENDPOINT}/{batch_id}"

    resp = session.get(url, timeout=10)
    if resp.status_code == 404:
        return None
    resp.raise_for_status()

    data = unwrap_envelope(resp.json())
    if isinstance(data, dict) and isinstance(data.get("batch"), dict):
        return data["batch"]
    if isinstance(data, dict):
        return data
    raise ApiError("API data has no batch object")
