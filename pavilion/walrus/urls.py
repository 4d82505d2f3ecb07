"""Walrus aggregator URLs for blob-backed collectibles."""
from __future__ import annotations

from typing import Optional
from urllib.parse import quote

from pavilion.config import runtime_config
from pavilion.scene_config.models import ResourceDescriptor, ResourceType


def get_walrus_url(blob_id: str, aggregator: Optional[str] = None) -> str:
    base = (aggregator or runtime_config.get_walrus_aggregator_url()).rstrip("/")
    # the aggregator rejects 0x-prefixed ids
    clean = blob_id[2:] if blob_id.startswith("0x") else blob_id
    return f"{base}/v1/blobs/{quote(clean, safe='')}"


def resolve_resource_url(descriptor: ResourceDescriptor, aggregator: Optional[str] = None) -> Optional[str]:
    if descriptor.type == ResourceType.WALRUS and descriptor.blobId:
        return get_walrus_url(descriptor.blobId, aggregator)
    if descriptor.type in (ResourceType.DIRECT, ResourceType.IMAGE):
        return descriptor.modelUrl
    return None
