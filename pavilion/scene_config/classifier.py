"""Resource classification for kiosk items.

Inspects the free-form display/content metadata of a collectible and picks
the rendering strategy. Checks run in priority order: walrus blob, direct
model URL, image URL, then a procedural placeholder. Classification never
fails; unknown metadata degrades to the placeholder.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple

from pavilion.scene_config.models import (
    KioskItem,
    KioskItemAnalysis,
    ResourceDescriptor,
    ResourceType,
)

BLOB_KEYS: Tuple[str, ...] = ("blob_id", "walrus_blob_id", "blob", "walrus_id", "id")
MODEL_KEYS: Tuple[str, ...] = (
    "glb_url",
    "model_url",
    "3d_url",
    "obj_url",
    "stl_url",
    "glb",
    "obj",
    "stl",
    "model",
)
IMAGE_KEYS: Tuple[str, ...] = ("image_url", "image", "img", "picture", "photo", "url")
IMAGE_SENTINELS = frozenset({"None", "null", "undefined"})

DEFAULT_MODEL_FORMAT = "glb"

Metadata = Optional[Dict[str, Any]]


def extract_metadata(item: KioskItem) -> Tuple[Metadata, Metadata]:
    """Return ``(display_data, content_fields)`` for nested or flat item data."""
    data = item.data
    if not isinstance(data, dict):
        return None, None

    display = data.get("display")
    content = data.get("content")
    display_data = display.get("data") if isinstance(display, dict) else None
    content_fields = content.get("fields") if isinstance(content, dict) else None
    if not isinstance(display_data, dict):
        display_data = None
    if not isinstance(content_fields, dict):
        content_fields = None

    if display_data is None and content_fields is None and data:
        # flat shape: the map itself carries the fields
        return data, data
    return display_data, content_fields


def _first_string(sources: Sequence[Metadata], keys: Sequence[str], reject: frozenset = frozenset()) -> Optional[str]:
    for source in sources:
        if not source:
            continue
        for key in keys:
            value = source.get(key)
            if isinstance(value, str) and value and value not in reject:
                return value
    return None


def detect_model_format(url: str) -> str:
    lowered = url.lower()
    if ".glb" in lowered or ".gltf" in lowered:
        return "glb"
    if ".obj" in lowered:
        return "obj"
    if ".stl" in lowered:
        return "stl"
    return DEFAULT_MODEL_FORMAT


def color_from_id(object_id: str) -> int:
    """Deterministic placeholder color (0..0xFFFFFE) for a collectible id.

    Same string hash the web viewer uses, so both pick the same color: the
    shift operates on a 32-bit signed view of the running hash, the
    subtraction does not.
    """
    h = 0
    for ch in object_id:
        shifted = _to_int32(_to_int32(h) << 5)
        h = ord(ch) + (shifted - h)
    return abs(h) % 0xFFFFFF


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value >= 0x80000000 else value


def classify_resource(item: KioskItem) -> ResourceDescriptor:
    display_data, content_fields = extract_metadata(item)
    sources = (display_data, content_fields)

    blob_id = _first_string(sources, BLOB_KEYS)
    if blob_id:
        return ResourceDescriptor(type=ResourceType.WALRUS, blobId=blob_id, modelFormat=DEFAULT_MODEL_FORMAT)

    model_url = _first_string(sources, MODEL_KEYS)
    if model_url:
        return ResourceDescriptor(
            type=ResourceType.DIRECT,
            modelUrl=model_url,
            modelFormat=detect_model_format(model_url),
        )

    image_url = _first_string(sources, IMAGE_KEYS, reject=IMAGE_SENTINELS)
    if image_url:
        return ResourceDescriptor(type=ResourceType.IMAGE, modelUrl=image_url)

    return ResourceDescriptor(type=ResourceType.GEOMETRY, color=color_from_id(item.objectId))


def resolve_item_name(item: KioskItem, index: int = 0) -> str:
    display_data, content_fields = extract_metadata(item)
    sources = (display_data, content_fields)

    name = _first_string(sources, ("name",)) or _first_string(sources, ("title",))
    if name:
        return name

    type_tail = item.type.split("::")[-1] if item.type else ""
    if type_tail:
        return type_tail
    return f"Item {index + 1}"


def analyze_kiosk_items(items: List[KioskItem]) -> List[KioskItemAnalysis]:
    return [
        KioskItemAnalysis(
            objectId=item.objectId,
            name=resolve_item_name(item, index),
            descriptor=classify_resource(item),
        )
        for index, item in enumerate(items)
    ]


__all__ = [
    "BLOB_KEYS",
    "MODEL_KEYS",
    "IMAGE_KEYS",
    "extract_metadata",
    "detect_model_format",
    "color_from_id",
    "classify_resource",
    "resolve_item_name",
    "analyze_kiosk_items",
]
