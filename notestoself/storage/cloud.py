"""HTTP remote store.

Talks to a REST backend holding one private database per user:

- ``GET    /account/status``              -> ``{"status": "available" | ...}``
- ``GET    /records/{type}``              -> ``{"records": [wire, ...]}``
- ``POST   /records/{type}/modify``       body ``{"records": [wire, ...]}``
                                          -> ``{"results": {id: null | "error"}}``
- ``DELETE /records/{type}/{id}``

Auth is a bearer token. Transport errors and 401/403 raise
``RemoteUnavailableError``; other non-2xx responses raise ``RemoteStoreError``.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from notestoself.protocols import RemoteStoreError, RemoteUnavailableError
from notestoself.storage.remote import BATCH_CEILING, RemoteStore

logger = logging.getLogger(__name__)


class HttpRemoteStore(RemoteStore):
    """Remote store backed by ``httpx.AsyncClient``.

    Args:
        backend_url: Base URL, already validated.
        auth_token: Bearer token.
        timeout: Per-request timeout in seconds.
        transport: Optional httpx transport (tests pass ``httpx.MockTransport``).
    """

    def __init__(
        self,
        backend_url: str,
        auth_token: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        batch_size: int = BATCH_CEILING,
    ):
        self.backend_url = backend_url.rstrip("/")
        self.batch_size = batch_size
        self._client = httpx.AsyncClient(
            base_url=self.backend_url,
            headers={
                "Authorization": f"Bearer {auth_token}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    async def _request(self, method: str, path: str, ok_statuses=(), **kwargs) -> httpx.Response:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise RemoteUnavailableError(f"{method} {path} failed: {e}") from e

        if response.status_code in ok_statuses:
            return response
        if response.status_code in (401, 403):
            raise RemoteUnavailableError(f"{method} {path}: not authenticated ({response.status_code})")
        if response.status_code >= 400:
            raise RemoteStoreError(f"{method} {path}: HTTP {response.status_code}: {response.text[:200]}")
        return response

    @staticmethod
    def _json(response: httpx.Response) -> Dict[str, Any]:
        try:
            payload = response.json()
        except ValueError as e:
            raise RemoteStoreError(f"Invalid JSON from backend: {e}") from e
        if not isinstance(payload, dict):
            raise RemoteStoreError("Backend response must be a JSON object")
        return payload

    async def _account_status(self) -> str:
        response = await self._request("GET", "/account/status")
        return str(self._json(response).get("status", "unknown"))

    async def _query(self, record_type: str) -> List[Dict[str, Any]]:
        response = await self._request("GET", f"/records/{record_type}")
        records = self._json(response).get("records", [])
        if not isinstance(records, list):
            raise RemoteStoreError(f"Malformed record list for {record_type}")
        return records

    async def _modify(
        self, record_type: str, wire_records: List[Dict[str, Any]]
    ) -> Dict[str, Optional[str]]:
        response = await self._request(
            "POST", f"/records/{record_type}/modify", json={"records": wire_records}
        )
        results = self._json(response).get("results", {})
        if not isinstance(results, dict):
            raise RemoteStoreError(f"Malformed modify results for {record_type}")
        return {str(k): (str(v) if v else None) for k, v in results.items()}

    async def _delete_record(self, record_type: str, record_id: str) -> None:
        response = await self._request(
            "DELETE", f"/records/{record_type}/{record_id}", ok_statuses=(404,)
        )
        if response.status_code == 404:
            logger.debug(f"{record_type}:{record_id} already absent remotely")

    async def close(self) -> None:
        await self._client.aclose()
