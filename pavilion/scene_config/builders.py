"""Constructors and wire-format validators for scene configs."""
from __future__ import annotations

import time
from collections import Counter
from enum import Enum
from typing import Any, List, Optional

from pavilion.scene_config.classifier import classify_resource, resolve_item_name
from pavilion.scene_config.models import (
    KioskItem,
    ResourceDescriptor,
    ResourceType,
    SceneConfig,
    SceneMetadata,
    SceneObject,
    SceneObjectType,
    SceneResource,
    Vector3,
)

ITEMS_PER_ROW = 5
GRID_SPACING = 3.0
ROW_RISE = 2.0
ROW_DEPTH = -2.0
BASE_HEIGHT = 1.0

RESOURCE_OBJECT_TYPES = {
    ResourceType.WALRUS: SceneObjectType.WALRUS_BLOB,
    ResourceType.DIRECT: SceneObjectType.EXTERNAL_MODEL,
    ResourceType.IMAGE: SceneObjectType.IMAGE_2D,
    ResourceType.GEOMETRY: SceneObjectType.KIOSK_NFT,
}


class SceneConfigFormat(str, Enum):
    COMPACT = "compact"
    FULL = "full"
    UNKNOWN = "unknown"


def now_ms() -> int:
    return int(time.time() * 1000)


def grid_position(index: int) -> Vector3:
    """Default layout slot: rows of five, later rows raised and pushed back."""
    row, col = divmod(index, ITEMS_PER_ROW)
    return Vector3(
        x=(col - (ITEMS_PER_ROW - 1) / 2) * GRID_SPACING,
        y=BASE_HEIGHT + row * ROW_RISE,
        z=row * ROW_DEPTH,
    )


def _resource_from_descriptor(descriptor: ResourceDescriptor) -> Optional[SceneResource]:
    if descriptor.type == ResourceType.WALRUS:
        return SceneResource(blobId=descriptor.blobId, format=descriptor.modelFormat or "glb")
    if descriptor.type in (ResourceType.DIRECT, ResourceType.IMAGE):
        return SceneResource(url=descriptor.modelUrl, format=descriptor.modelFormat)
    return None


def create_scene_object_from_kiosk_item(item: KioskItem, index: int = 0) -> SceneObject:
    descriptor = classify_resource(item)
    return SceneObject(
        id=item.objectId,
        name=resolve_item_name(item, index),
        type=RESOURCE_OBJECT_TYPES[descriptor.type],
        displayed=False,
        position=grid_position(index),
        rotation=Vector3(),
        scale=1.0,
        resource=_resource_from_descriptor(descriptor),
        updatedAt=now_ms(),
    )


def create_scene_config(objects: List[SceneObject], metadata: Optional[SceneMetadata] = None) -> SceneConfig:
    """Wrap ``objects`` in a fresh config. Duplicate ids are not removed."""
    ts = now_ms()
    return SceneConfig(objects=list(objects), createdAt=ts, updatedAt=ts, metadata=metadata)


def find_duplicate_ids(config: SceneConfig) -> List[str]:
    counts = Counter(obj.id for obj in config.objects)
    return [object_id for object_id, count in counts.items() if count > 1]


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_triple(value: Any) -> bool:
    return isinstance(value, list) and len(value) == 3 and all(_is_number(v) for v in value)


def _valid_compact_object(obj: Any) -> bool:
    if not isinstance(obj, dict):
        return False
    object_id = obj.get("id", obj.get("i"))
    if not isinstance(object_id, str) or not object_id:
        return False
    if obj.get("d") not in (True, False, 0, 1):
        return False
    if not _is_triple(obj.get("p")):
        return False
    if "r" in obj and not _is_triple(obj["r"]):
        return False
    if "s" in obj and not _is_number(obj["s"]):
        return False
    if "n" in obj and not isinstance(obj["n"], str):
        return False
    return True


def validate_compact_scene_config(data: Any) -> bool:
    if not isinstance(data, dict) or not isinstance(data.get("o"), list):
        return False
    for key in ("v", "t", "c"):
        if key in data and not _is_number(data[key]):
            return False
    if "m" in data and not isinstance(data["m"], dict):
        return False
    return all(_valid_compact_object(obj) for obj in data["o"])


def validate_scene_config(data: Any) -> bool:
    if not isinstance(data, dict):
        return False
    for key in ("version", "createdAt", "updatedAt"):
        if not _is_number(data.get(key)):
            return False
    if not isinstance(data.get("objects"), list):
        return False
    if not all(isinstance(obj, dict) and isinstance(obj.get("id"), str) for obj in data["objects"]):
        return False
    for key in ("camera", "environment", "metadata"):
        if data.get(key) is not None and not isinstance(data[key], dict):
            return False
    return True


def probe_scene_config_format(data: Any) -> SceneConfigFormat:
    if validate_compact_scene_config(data):
        return SceneConfigFormat.COMPACT
    if validate_scene_config(data):
        return SceneConfigFormat.FULL
    return SceneConfigFormat.UNKNOWN
