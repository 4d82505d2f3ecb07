"""Readers for pavilion dynamic fields stored on a kiosk."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from pavilion.chain.client import ChainClient

logger = logging.getLogger(__name__)

SCENE_CONFIG_FIELD = "SceneConfig"
PAVILION_NAME_FIELD = "PavilionName"


def _string_value(response: Dict[str, Any]) -> Optional[str]:
    data = response.get("data") or {}
    content = data.get("content") or {}
    fields = content.get("fields") or {}
    value = fields.get("value")
    if isinstance(value, str) and value:
        return value
    return None


async def read_pavilion_field(client: ChainClient, package_id: str, kiosk_id: str, field: str) -> Optional[str]:
    """Return the string stored under ``{package}::pavilion::{field}``.

    Falls back to scanning the kiosk's dynamic fields when the direct lookup
    comes back empty (older packages registered the key under another
    package id). Chain errors propagate.
    """
    name = {"type": f"{package_id}::pavilion::{field}", "value": {}}
    direct = await client.get_dynamic_field_object(kiosk_id, name)
    value = _string_value(direct)
    if value is not None:
        return value

    cursor: Optional[str] = None
    while True:
        page = await client.get_dynamic_fields(kiosk_id, cursor)
        for entry in page.get("data") or []:
            entry_name = entry.get("name") or {}
            entry_type = entry_name.get("type") or ""
            if entry_type.endswith(f"::pavilion::{field}") and entry_type != name["type"]:
                logger.info("Found %s under %s", field, entry_type)
                return _string_value(await client.get_dynamic_field_object(kiosk_id, entry_name))
        if not page.get("hasNextPage"):
            return None
        cursor = page.get("nextCursor")


async def read_scene_config(client: ChainClient, package_id: str, kiosk_id: str) -> Optional[str]:
    return await read_pavilion_field(client, package_id, kiosk_id, SCENE_CONFIG_FIELD)


async def read_pavilion_name(client: ChainClient, package_id: str, kiosk_id: str) -> Optional[str]:
    return await read_pavilion_field(client, package_id, kiosk_id, PAVILION_NAME_FIELD)
