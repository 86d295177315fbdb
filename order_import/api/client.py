from __future__ import annotations

import logging
from typing import Any

import requests

from ..models.import_result import BulkImportResponse

"""HTTP client for the warehouse backend's order bulk-import endpoint.

POST {base_url}/orders/bulk with ``{"orders": [...]}``. The endpoint answers
with a per-record summary (total / created / failed / skipped) and optional
per-order details. The POST is not retried automatically: a second attempt
could create the same orders twice.
"""

__all__ = [
    "BULK_IMPORT_ENDPOINT",
    "DEFAULT_TIMEOUT",
    "ApiError",
    "BulkImportClient",
]

logger = logging.getLogger(__name__)

BULK_IMPORT_ENDPOINT = "/orders/bulk"
DEFAULT_TIMEOUT = 30.0  # seconds


class ApiError(Exception):
    """Raised for any failed request. ``status`` is 0 when no HTTP response arrived."""

    def __init__(self, status: int, message: str) -> None:
        super().__init__(message)
        self.status = status
        self.message = message

    def __str__(self) -> str:
        return f"[{self.status}] {self.message}" if self.status else self.message


def _error_message(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return "Request failed"
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return "Request failed"


class BulkImportClient:
    """Thin wrapper around a requests.Session bound to one backend base URL."""

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.session = session or requests.Session()

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def bulk_import_orders(self, payload: dict[str, Any]) -> BulkImportResponse:
        """Submit ``{"orders": [...]}`` and return the parsed response.

        Raises:
            ApiError: non-2xx status, transport failure, timeout or a body that
                is not the expected JSON object
        """
        url = f"{self.base_url}{BULK_IMPORT_ENDPOINT}"
        orders = payload.get("orders") or []
        logger.info(f"Sending {len(orders)} order(s) to {url}")
        try:
            response = self.session.post(url, json=payload, headers=self._headers(), timeout=self.timeout)
        except requests.Timeout as e:
            logger.error(f"bulk import request timed out after {self.timeout}s")
            raise ApiError(0, "Request timed out") from e
        except requests.RequestException as e:
            logger.error(f"bulk import request failed: {e}")
            raise ApiError(0, f"Network error: {e}") from e

        if not response.ok:
            raise ApiError(response.status_code, _error_message(response))

        try:
            return BulkImportResponse.from_json(response.json())
        except ValueError as e:
            raise ApiError(response.status_code, f"Invalid response body: {e}") from e

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> BulkImportClient:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
