"""Sui JSON-RPC chain client used as the pavilion's read/inspect collaborator."""
from __future__ import annotations

import asyncio
import base64
import logging
import random
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol

import httpx

from pavilion.chain.transactions import ZERO_ADDRESS, Transaction
from pavilion.config import runtime_config
from pavilion.scene_config.models import KioskItem

logger = logging.getLogger(__name__)

KIOSK_ITEM_TYPE = "0x2::kiosk::Item"
RETRYABLE_STATUS = {429, 500, 502, 503, 504}

TransactionSerializer = Callable[[Transaction], str]
SleepFunction = Callable[[float], Awaitable[None]]


class ChainClientError(RuntimeError):
    """Raised when the chain cannot be reached or rejects a request."""

    def __init__(self, message: str, *, retryable: bool = False) -> None:
        super().__init__(message)
        self.retryable = retryable


@dataclass(frozen=True)
class ChainRetryPolicy:
    max_attempts: int = 3
    initial_backoff: float = 0.25
    backoff_multiplier: float = 2.0
    max_backoff: float = 8.0
    jitter: float = 0.2

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.initial_backoff < 0:
            raise ValueError("initial_backoff must be non-negative")
        if self.backoff_multiplier < 1:
            raise ValueError("backoff_multiplier must be >= 1")
        if self.jitter < 0:
            raise ValueError("jitter must be non-negative")

    def compute_backoff(self, attempt: int, *, random_func: Optional[Callable[[], float]] = None) -> float:
        """Return the backoff delay for ``attempt`` (1-indexed)."""
        if attempt < 1:
            raise ValueError("attempt must be >= 1")
        delay = min(self.initial_backoff * (self.backoff_multiplier ** (attempt - 1)), self.max_backoff)
        if self.jitter <= 0 or delay == 0:
            return delay
        rng = random_func or random.random
        offset = (rng() * 2 - 1) * (delay * self.jitter)
        return max(0.0, delay + offset)


class ChainClient(Protocol):
    async def get_dynamic_field_object(self, parent_id: str, name: Dict[str, Any]) -> Dict[str, Any]: ...

    async def get_dynamic_fields(self, parent_id: str, cursor: Optional[str] = None) -> Dict[str, Any]: ...

    async def dev_inspect(self, transaction: Transaction, sender: str = ZERO_ADDRESS) -> Dict[str, Any]: ...


class SuiRpcClient:
    """Async JSON-RPC 2.0 client for a Sui fullnode."""

    def __init__(
        self,
        rpc_url: Optional[str] = None,
        *,
        http: Optional[httpx.AsyncClient] = None,
        retry_policy: Optional[ChainRetryPolicy] = None,
        serializer: Optional[TransactionSerializer] = None,
        sleep: Optional[SleepFunction] = None,
    ) -> None:
        self.rpc_url = rpc_url or runtime_config.get_sui_rpc_url()
        self._http = http or httpx.AsyncClient(timeout=runtime_config.get_chain_timeout_seconds())
        self._retry = retry_policy or ChainRetryPolicy(max_attempts=runtime_config.get_chain_max_attempts())
        self._serializer = serializer
        self._sleep = sleep or asyncio.sleep
        self._request_id = 0

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _post(self, method: str, params: List[Any]) -> Any:
        self._request_id += 1
        body = {"jsonrpc": "2.0", "id": self._request_id, "method": method, "params": params}
        try:
            resp = await self._http.post(self.rpc_url, json=body)
        except httpx.TransportError as exc:
            raise ChainClientError(f"{method} transport failure: {exc}", retryable=True) from exc
        if resp.status_code >= 400:
            raise ChainClientError(
                f"{method} failed: {resp.status_code} - {resp.text}",
                retryable=resp.status_code in RETRYABLE_STATUS,
            )
        try:
            payload = resp.json()
        except ValueError as exc:
            raise ChainClientError(f"{method} returned non-JSON body") from exc
        if payload.get("error"):
            error = payload["error"]
            raise ChainClientError(f"{method} rpc error {error.get('code')}: {error.get('message')}")
        return payload.get("result")

    async def call(self, method: str, params: List[Any]) -> Any:
        attempt = 1
        while True:
            try:
                return await self._post(method, params)
            except ChainClientError as exc:
                if not exc.retryable or attempt >= self._retry.max_attempts:
                    raise
                delay = self._retry.compute_backoff(attempt)
                logger.warning("Retrying %s after attempt %s (%.2fs): %s", method, attempt, delay, exc)
                if delay > 0:
                    await self._sleep(delay)
                attempt += 1

    async def get_dynamic_field_object(self, parent_id: str, name: Dict[str, Any]) -> Dict[str, Any]:
        return await self.call("suix_getDynamicFieldObject", [parent_id, name]) or {}

    async def get_dynamic_fields(self, parent_id: str, cursor: Optional[str] = None) -> Dict[str, Any]:
        return await self.call("suix_getDynamicFields", [parent_id, cursor, None]) or {}

    async def multi_get_objects(self, object_ids: List[str]) -> List[Dict[str, Any]]:
        if not object_ids:
            return []
        options = {"showType": True, "showContent": True, "showDisplay": True}
        return await self.call("sui_multiGetObjects", [object_ids, options]) or []

    async def get_kiosk_items(self, kiosk_id: str) -> List[KioskItem]:
        """Holdings snapshot: every item placed in ``kiosk_id``."""
        item_ids: List[str] = []
        cursor: Optional[str] = None
        while True:
            page = await self.get_dynamic_fields(kiosk_id, cursor)
            for entry in page.get("data") or []:
                name = entry.get("name") or {}
                if name.get("type") != KIOSK_ITEM_TYPE:
                    continue
                value = name.get("value") or {}
                object_id = value.get("id") if isinstance(value, dict) else None
                if object_id:
                    item_ids.append(object_id)
            if not page.get("hasNextPage"):
                break
            cursor = page.get("nextCursor")

        items: List[KioskItem] = []
        for response in await self.multi_get_objects(item_ids):
            data = response.get("data")
            if not data:
                continue
            items.append(
                KioskItem(
                    objectId=data["objectId"],
                    type=data.get("type") or "",
                    data={"display": data.get("display") or {}, "content": data.get("content") or {}},
                )
            )
        return items

    async def dev_inspect(self, transaction: Transaction, sender: str = ZERO_ADDRESS) -> Dict[str, Any]:
        if self._serializer is None:
            raise ChainClientError("dev_inspect requires a transaction serializer")
        tx_bytes = self._serializer(transaction)
        return await self.call("sui_devInspectTransactionBlock", [sender, tx_bytes, None, None]) or {}


def extract_return_bytes(result: Dict[str, Any]) -> Optional[bytes]:
    """First return value of the first command in a devInspect result."""
    results = result.get("results") or []
    if not results:
        return None
    return_values = results[0].get("returnValues") or []
    if not return_values or not return_values[0]:
        return None
    raw = return_values[0][0]
    if isinstance(raw, str):
        try:
            return base64.b64decode(raw)
        except ValueError:
            return None
    try:
        return bytes(raw)
    except (TypeError, ValueError):
        return None
