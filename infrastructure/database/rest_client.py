"""
PostgREST Client
================

Thin ``requests`` wrapper over a PostgREST-compatible table API (the
Supabase data API at ``<project>/rest/v1``). One HTTP request per call; no
retries, no caching.

Every failure, transport or HTTP, is raised as
:class:`~app.domain.exceptions.RepositoryError` whose message is the
backend's own ``message`` field when the response carries one.

Query shape::

    GET    /rest/v1/plants?select=*&userId=eq.alice@example.com&order=created_at.desc
    POST   /rest/v1/plants                 (Prefer: return=representation)
    PATCH  /rest/v1/plants?id=eq.<uuid>
    DELETE /rest/v1/plants?id=eq.<uuid>
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from app.domain.exceptions import RepositoryError

logger = logging.getLogger(__name__)


def eq(value: Any) -> str:
    """PostgREST equality filter value."""
    return f"eq.{value}"


class PostgrestClient:
    """Minimal table client for a PostgREST endpoint."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        session: Optional[requests.Session] = None,
        timeout: float = 10.0,
    ) -> None:
        self._rest_url = base_url.rstrip("/") + "/rest/v1"
        self._api_key = api_key
        self._session = session or requests.Session()
        self._timeout = timeout
        self._access_token: Optional[str] = None

    def set_access_token(self, token: Optional[str]) -> None:
        """Authorize subsequent calls as a signed-in user (``None`` = anon key)."""
        self._access_token = token

    def _headers(self, prefer: Optional[str] = None) -> Dict[str, str]:
        headers = {
            "apikey": self._api_key,
            "Authorization": f"Bearer {self._access_token or self._api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if prefer:
            headers["Prefer"] = prefer
        return headers

    def _request(
        self,
        method: str,
        table: str,
        *,
        params: Optional[Dict[str, str]] = None,
        payload: Any = None,
        prefer: Optional[str] = None,
    ) -> Any:
        url = f"{self._rest_url}/{table}"
        try:
            response = self._session.request(
                method,
                url,
                params=params,
                json=payload,
                headers=self._headers(prefer),
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            logger.error("%s %s failed: %s", method, url, exc)
            raise RepositoryError(str(exc) or "Network error", detail={"table": table}) from exc

        if not 200 <= response.status_code < 300:
            message = _error_message(response)
            logger.error("%s %s rejected (%s): %s", method, url, response.status_code, message)
            raise RepositoryError(message, detail={"table": table, "status": response.status_code})

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise RepositoryError(f"Invalid JSON from {table}: {exc}", detail={"table": table}) from exc

    # Table operations --------------------------------------------------------
    def select(
        self,
        table: str,
        *,
        filters: Optional[Dict[str, Any]] = None,
        order: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        params: Dict[str, str] = {"select": "*"}
        for column, value in (filters or {}).items():
            params[column] = eq(value)
        if order:
            params["order"] = order
        rows = self._request("GET", table, params=params)
        return list(rows or [])

    def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        rows = self._request("POST", table, payload=[row], prefer="return=representation")
        if not rows:
            raise RepositoryError(f"Insert into {table} returned no row", detail={"table": table})
        return rows[0] if isinstance(rows, list) else rows

    def update(self, table: str, row: Dict[str, Any], *, match: Dict[str, Any]) -> None:
        self._request(
            "PATCH",
            table,
            params={column: eq(value) for column, value in match.items()},
            payload=row,
            prefer="return=minimal",
        )

    def delete(self, table: str, *, match: Dict[str, Any]) -> None:
        self._request(
            "DELETE",
            table,
            params={column: eq(value) for column, value in match.items()},
            prefer="return=minimal",
        )


def _error_message(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("message", "error_description", "msg", "error"):
            if body.get(key):
                return str(body[key])
    text = (response.text or "").strip()
    return text or f"HTTP {response.status_code}"
