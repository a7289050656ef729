"""
Client for the internship records API.

Endpoints:
    GET  /filter-options  -> {"data": {"status": [...], "cursos": [...], ...}}
    POST /student-data    -> {"data": [row, ...], "stats": {...}}
    POST /update-grades   -> {"message": "..."}

Every call carries the stored bearer token. HTTP runs on requests in a worker
thread so callers can await it from the event loop.
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional

import requests

from estagios.config import API_URL, REQUEST_TIMEOUT
from estagios.errors import ApiError, AuthError, NetworkError
from estagios.log import get_logger
from estagios.model import (
    FilterCriteria,
    FilterOptions,
    GradeEditDraft,
    SearchResult,
    SearchStats,
    StudentRecord,
)
from estagios.session import SessionStore

logger = get_logger(__name__)

UNKNOWN_ERROR = "Unknown API error."


class ApiClient:
    def __init__(
        self,
        store: Optional[SessionStore] = None,
        base_url: str = API_URL,
        timeout: float = REQUEST_TIMEOUT,
        http: Optional[requests.Session] = None,
    ) -> None:
        self.store = store if store is not None else SessionStore()
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.http = http if http is not None else requests.Session()

    # -----------------------------------------------------------------------
    # Transport
    # -----------------------------------------------------------------------

    async def call_api(self, endpoint: str, payload: Optional[dict[str, Any]] = None, method: str = "POST") -> Any:
        return await asyncio.to_thread(self._request, endpoint, payload, method)

    def _request(self, endpoint: str, payload: Optional[dict[str, Any]], method: str) -> Any:
        headers = {"Content-Type": "application/json"}
        token = self.store.token()
        if token:
            headers["Authorization"] = f"Bearer {token}"

        kwargs: dict[str, Any] = {"headers": headers, "timeout": self.timeout}
        if method != "GET":
            kwargs["json"] = payload if payload is not None else {}

        url = f"{self.base_url}{endpoint}"
        logger.debug("%s %s", method, url)

        try:
            resp = self.http.request(method, url, **kwargs)
        except requests.RequestException as exc:
            logger.error("%s %s failed: %s", method, url, exc)
            raise NetworkError(f"Could not reach the API: {exc}") from exc

        if not resp.ok:
            message = _error_message(resp)
            if resp.status_code in (401, 403):
                logger.warning("%s %s -> %s, clearing session", method, url, resp.status_code)
                self.store.clear()
                raise AuthError(message, resp.status_code)
            logger.error("%s %s -> %s: %s", method, url, resp.status_code, message)
            raise ApiError(message, resp.status_code)

        try:
            return resp.json()
        except ValueError as exc:
            raise ApiError("Invalid response from the API.", resp.status_code) from exc

    # -----------------------------------------------------------------------
    # Endpoints
    # -----------------------------------------------------------------------

    async def fetch_filter_options(self) -> FilterOptions:
        body = await self.call_api("/filter-options", None, "GET")
        return FilterOptions.from_api(_get(body, "data"))

    async def fetch_student_data(self, criteria: FilterCriteria) -> SearchResult:
        body = await self.call_api("/student-data", criteria.to_payload())
        rows = _get(body, "data") or []
        if not isinstance(rows, list):
            raise ApiError("Invalid response from the API.")

        records = [StudentRecord.from_api(row) for row in rows]

        stats_raw = _get(body, "stats")
        if isinstance(stats_raw, dict):
            stats = SearchStats.from_api(stats_raw)
        else:
            stats = SearchStats.from_records(records)
        return SearchResult(records=records, stats=stats)

    async def update_grades(self, draft: GradeEditDraft) -> str:
        body = await self.call_api("/update-grades", draft.to_payload())
        message = _get(body, "message")
        return str(message) if message else "Grades saved."


def _get(body: Any, key: str) -> Any:
    return body.get(key) if isinstance(body, dict) else None


def _error_message(resp: requests.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return UNKNOWN_ERROR
    message = _get(body, "message")
    if message:
        return str(message)
    return f"Error {resp.status_code}"
