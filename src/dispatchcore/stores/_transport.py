"""PostgREST-style table client over aiohttp."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

import aiohttp

from dispatchcore._constants import USER_AGENT
from dispatchcore.config import DispatchConfig
from dispatchcore.exceptions import StoreError, TableNotProvisionedError

_logger = logging.getLogger(__name__)

#: Postgres "undefined_table".
_UNDEFINED_TABLE_CODE = "42P01"


def _error_details(text: str) -> tuple[str, str]:
    """Extract ``(code, message)`` from a PostgREST error body."""
    try:
        body = json.loads(text)
    except json.JSONDecodeError:
        return "", text[:200]
    if not isinstance(body, dict):
        return "", text[:200]
    return str(body.get("code") or ""), str(body.get("message") or body.get("error") or text[:200])


class RestTableClient:
    """Read-only client for a hosted PostgREST table API.

    Usage::

        async with RestTableClient(config) as client:
            rows = await client.select("driver_locations", limit=50)

    Parameters
    ----------
    config : DispatchConfig
        ``base_url``, ``api_key`` and ``request_timeout`` are used.
    session : aiohttp.ClientSession, optional
        Shared HTTP session. When omitted the client opens its own on
        ``__aenter__`` and closes it on exit.
    """

    def __init__(self, config: DispatchConfig, *, session: aiohttp.ClientSession | None = None) -> None:
        self._config = config
        self._external_session = session is not None
        self._http = session

    async def __aenter__(self) -> RestTableClient:
        if self._http is None:
            self._http = aiohttp.ClientSession()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()

    async def close(self) -> None:
        if self._http is not None and not self._external_session:
            await self._http.close()
            self._http = None

    def _headers(self) -> dict[str, str]:
        headers = {
            "accept": "application/json",
            "user-agent": USER_AGENT,
        }
        if self._config.api_key:
            headers["apikey"] = self._config.api_key
            headers["authorization"] = f"Bearer {self._config.api_key}"
        return headers

    def table_url(self, table: str) -> str:
        return f"{self._config.base_url.rstrip('/')}/rest/v1/{table}"

    async def select(
        self,
        table: str,
        *,
        columns: str = "*",
        filters: Mapping[str, str] | None = None,
        order: str | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """Return rows of *table* as dicts.

        *filters* maps column names to PostgREST operators, e.g.
        ``{"pickup_date": "eq.2024-01-15"}``.

        Raises
        ------
        TableNotProvisionedError
            If the table does not exist (code ``42P01`` or HTTP 404).
        StoreError
            On any other failure. ``status_code`` is ``None`` when no HTTP
            response was received.
        """
        if self._http is None:
            raise StoreError("RestTableClient is not open; use 'async with'", table=table)
        if not self._config.base_url:
            raise StoreError("No base URL configured for the REST store", table=table)

        params: dict[str, str] = {"select": columns}
        if filters:
            params.update(filters)
        if order:
            params["order"] = order
        if limit is not None:
            params["limit"] = str(limit)

        url = self.table_url(table)
        _logger.debug("GET %s params=%s", url, params)
        timeout = aiohttp.ClientTimeout(total=self._config.request_timeout)

        try:
            async with self._http.get(url, params=params, headers=self._headers(), timeout=timeout) as resp:
                status = resp.status
                text = await resp.text()
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise StoreError(f"Request to {table} failed: {exc!r}", table=table) from exc

        if status >= 400:
            code, message = _error_details(text)
            if code == _UNDEFINED_TABLE_CODE or status == 404 or "does not exist" in message:
                raise TableNotProvisionedError(
                    f"Table {table!r} does not exist: {message}",
                    status_code=status,
                    code=code or _UNDEFINED_TABLE_CODE,
                    table=table,
                )
            raise StoreError(
                f"HTTP {status} from {table}: {message}",
                status_code=status,
                code=code,
                table=table,
            )

        try:
            body = json.loads(text)
        except json.JSONDecodeError as exc:
            raise StoreError(f"Invalid JSON from {table}: {text[:200]}", status_code=status, table=table) from exc
        if not isinstance(body, list):
            raise StoreError(f"Expected a JSON array from {table}", status_code=status, table=table)
        return [row for row in body if isinstance(row, dict)]
