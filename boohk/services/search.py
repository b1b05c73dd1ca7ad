"""
Search index client.

Wraps the Algolia REST API for saving, deleting and querying records.
Writes are issued synchronously within the request. Callers that must not
fail on indexing errors use the try_* helpers, which log and swallow.
"""
import os
import logging
from urllib.parse import urlencode, quote

import httpx

logger = logging.getLogger(__name__)

ALGOLIA_APP_ID = os.getenv("ALGOLIA_APP_ID")
ALGOLIA_ADMIN_API_KEY = os.getenv("ALGOLIA_ADMIN_API_KEY")
DEFAULT_INDEX_NAME = os.getenv("ALGOLIA_INDEX_NAME", "proposals")
SEARCH_TIMEOUT_SECONDS = float(os.getenv("ALGOLIA_TIMEOUT_SECONDS", "10"))

KNOWN_INDEXES = [
    "products",
    "service_assignments",
    "cost_estimates",
    "collectibles",
    "quotations",
    "booking",
    "reports",
    "proposals",
    "emails",
]


class SearchServiceError(Exception):
    """Raised when the search service is unconfigured or rejects a request."""


def resolve_index_name(index: str = None) -> str:
    """Map a logical index to its configured name (ALGOLIA_<INDEX>_INDEX_NAME)."""
    if index in KNOWN_INDEXES:
        return os.getenv(f"ALGOLIA_{index.upper()}_INDEX_NAME", index)
    return DEFAULT_INDEX_NAME


def is_configured() -> bool:
    return bool(ALGOLIA_APP_ID and ALGOLIA_ADMIN_API_KEY)


def _headers() -> dict:
    return {
        "X-Algolia-Application-Id": ALGOLIA_APP_ID,
        "X-Algolia-API-Key": ALGOLIA_ADMIN_API_KEY,
        "Content-Type": "application/json",
    }


def _request(method: str, url: str, json_body: dict = None) -> dict:
    if not is_configured():
        raise SearchServiceError(
            "Algolia configuration is incomplete. Please check your environment variables."
        )
    try:
        response = httpx.request(
            method, url, headers=_headers(), json=json_body, timeout=SEARCH_TIMEOUT_SECONDS
        )
    except httpx.HTTPError as e:
        raise SearchServiceError(f"Search request failed: {e}") from e

    if response.status_code >= 400:
        try:
            message = response.json().get("message", response.text)
        except ValueError:
            message = response.text
        raise SearchServiceError(f"Algolia error {response.status_code}: {message}")
    return response.json()


def _object_url(index_name: str, object_id: str) -> str:
    return (
        f"https://{ALGOLIA_APP_ID}.algolia.net/1/indexes/"
        f"{quote(index_name, safe='')}/{quote(str(object_id), safe='')}"
    )


def save_object(index: str, record: dict) -> dict:
    """Create or replace a record. The record must carry an objectID."""
    object_id = record.get("objectID")
    if not object_id:
        raise SearchServiceError("Record is missing objectID")
    index_name = resolve_index_name(index)
    result = _request("PUT", _object_url(index_name, object_id), record)
    logger.info(f"Indexed {object_id} in {index_name}")
    return result


def delete_object(index: str, object_id: str) -> dict:
    index_name = resolve_index_name(index)
    result = _request("DELETE", _object_url(index_name, object_id))
    logger.info(f"Removed {object_id} from {index_name}")
    return result


def try_save_object(index: str, record: dict) -> bool:
    """Index a record, logging instead of raising on failure."""
    try:
        save_object(index, record)
        return True
    except Exception as e:
        logger.warning(f"Could not index {record.get('objectID')} in {index}: {e}")
        return False


def try_delete_object(index: str, object_id: str) -> bool:
    try:
        delete_object(index, object_id)
        return True
    except Exception as e:
        logger.warning(f"Could not remove {object_id} from {index}: {e}")
        return False


def empty_result(query: str = "", page: int = 0, hits_per_page: int = 10, error: str = None) -> dict:
    """The response shape returned when a search cannot run."""
    result = {
        "hits": [],
        "nbHits": 0,
        "page": page,
        "nbPages": 0,
        "hitsPerPage": hits_per_page,
        "processingTimeMS": 0,
        "query": query,
    }
    if error:
        result["error"] = error
    return result


def search(index: str, query: str, filters: str = None, page: int = 0, hits_per_page: int = 10) -> dict:
    """
    Query an index.

    Returns:
        Dictionary with hits, nbHits, page, nbPages, hitsPerPage,
        processingTimeMS and query
    """
    index_name = resolve_index_name(index)
    params = {"query": query, "page": page, "hitsPerPage": hits_per_page}
    if filters:
        params["filters"] = filters

    url = f"https://{ALGOLIA_APP_ID}-dsn.algolia.net/1/indexes/{quote(index_name, safe='')}/query"
    data = _request("POST", url, {"params": urlencode(params)})

    return {
        "hits": data.get("hits", []),
        "nbHits": data.get("nbHits", 0),
        "page": data.get("page", page),
        "nbPages": data.get("nbPages", 0),
        "hitsPerPage": data.get("hitsPerPage", hits_per_page),
        "processingTimeMS": data.get("processingTimeMS", 0),
        "query": data.get("query", query),
    }
