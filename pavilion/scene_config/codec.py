"""Fixed-point transform codec.

Two encodings live here and must not be mixed up:

* persistence (compact JSON blob): position, rotation and scale as
  ``round(value * 1000)``; rotation stays in radians.
* contract calls (per-object properties): position and scale as milli-units,
  rotation converted to degrees first, all carried as u64 words.
"""
from __future__ import annotations

import logging
import math
import struct
from typing import Any, Dict, List, Optional, Tuple

from pavilion.scene_config.models import (
    CompactMetadata,
    CompactSceneConfig,
    CompactSceneObject,
    ContractTransform,
    ParsedObjectProperties,
    SceneConfig,
    SceneMetadata,
    SceneObject,
    SceneObjectType,
    SceneResource,
    Vector3,
)

logger = logging.getLogger(__name__)

SCALE_FACTOR = 1000
DEFAULT_FORMAT = "glb"

TYPE_CODES: Dict[SceneObjectType, str] = {
    SceneObjectType.KIOSK_NFT: "k",
    SceneObjectType.WALRUS_BLOB: "w",
    SceneObjectType.EXTERNAL_MODEL: "e",
    SceneObjectType.IMAGE_2D: "i",
    SceneObjectType.SCULPTURE: "s",
}
CODE_TYPES: Dict[str, SceneObjectType] = {code: kind for kind, code in TYPE_CODES.items()}

_U64_MASK = (1 << 64) - 1


def to_milli(value: float) -> int:
    """``value * 1000`` rounded half away from zero."""
    if not math.isfinite(value):
        raise ValueError(f"cannot encode non-finite value {value!r}")
    scaled = abs(value) * SCALE_FACTOR
    rounded = int(math.floor(scaled + 0.5))
    return -rounded if value < 0 else rounded


def from_milli(value: int) -> float:
    return value / SCALE_FACTOR


def _vector_to_milli(vector: Vector3) -> List[int]:
    return [to_milli(vector.x), to_milli(vector.y), to_milli(vector.z)]


def _vector_from_milli(values: List[int]) -> Vector3:
    return Vector3(x=from_milli(values[0]), y=from_milli(values[1]), z=from_milli(values[2]))


# --- persistence path ---------------------------------------------------------


def compress_scene_object(obj: SceneObject) -> CompactSceneObject:
    resource = obj.resource or SceneResource()
    fmt = resource.format if resource.format and resource.format != DEFAULT_FORMAT else None
    return CompactSceneObject(
        id=obj.id,
        n=obj.name,
        y=TYPE_CODES.get(obj.type, "k"),
        d=obj.displayed,
        p=_vector_to_milli(obj.position),
        r=_vector_to_milli(obj.rotation),
        s=to_milli(obj.scale),
        t=obj.updatedAt,
        b=resource.blobId or None,
        u=resource.url or None,
        f=fmt,
    )


def compress_scene_config(config: SceneConfig) -> CompactSceneConfig:
    meta = None
    if config.metadata is not None:
        meta = CompactMetadata(
            k=config.metadata.kioskId,
            c=config.metadata.creator,
            d=config.metadata.description,
        )
    return CompactSceneConfig(
        v=config.version,
        t=config.updatedAt,
        c=config.createdAt,
        m=meta,
        o=[compress_scene_object(obj) for obj in config.objects],
    )


def decompress_scene_object(compact: CompactSceneObject, fallback_ts: int) -> SceneObject:
    obj_type = CODE_TYPES.get(compact.y)
    if obj_type is None:
        # blobs written before type codes existed
        obj_type = (
            SceneObjectType.WALRUS_BLOB
            if compact.b
            else SceneObjectType.EXTERNAL_MODEL if compact.u else SceneObjectType.KIOSK_NFT
        )
    resource = None
    if compact.b or compact.u or compact.f:
        # images carry no model format
        default_format = None if obj_type == SceneObjectType.IMAGE_2D else DEFAULT_FORMAT
        resource = SceneResource(blobId=compact.b, url=compact.u, format=compact.f or default_format)
    return SceneObject(
        id=compact.id,
        name=compact.n,
        type=obj_type,
        displayed=compact.d,
        position=_vector_from_milli(compact.p),
        rotation=_vector_from_milli(compact.r),
        scale=from_milli(compact.s),
        resource=resource,
        updatedAt=compact.t if compact.t is not None else fallback_ts,
    )


def decompress_scene_config(compact: CompactSceneConfig, base: Optional[SceneConfig] = None) -> SceneConfig:
    """Inverse of :func:`compress_scene_config`.

    ``base`` supplies the fields the compact form does not carry (camera,
    environment, name); metadata from the blob overrides the base's.
    """
    metadata = base.metadata.model_copy() if base and base.metadata else None
    if compact.m is not None:
        metadata = metadata or SceneMetadata()
        if compact.m.k is not None:
            metadata.kioskId = compact.m.k
        if compact.m.c is not None:
            metadata.creator = compact.m.c
        if compact.m.d is not None:
            metadata.description = compact.m.d

    created_at = compact.c if compact.c is not None else compact.t
    fields: Dict[str, Any] = {
        "version": compact.v,
        "createdAt": base.createdAt if base else created_at,
        "updatedAt": compact.t,
        "objects": [decompress_scene_object(o, compact.t) for o in compact.o],
        "metadata": metadata,
    }
    if base is not None:
        return base.model_copy(update=fields)
    return SceneConfig(**fields)


def normalize_compact_payload(data: Dict[str, Any]) -> Dict[str, Any]:
    """Accept the layout written by older savers.

    Those used ``i`` for object ids and kept the kiosk id in a top-level
    ``k`` rather than under ``m``.
    """
    objects = []
    for raw in data.get("o", []):
        if isinstance(raw, dict) and "id" not in raw and "i" in raw:
            raw = {**{k: v for k, v in raw.items() if k != "i"}, "id": raw["i"]}
        objects.append(raw)
    normalized = {key: value for key, value in data.items() if key != "k"}
    normalized["o"] = objects

    legacy_kiosk = data.get("k")
    if isinstance(legacy_kiosk, str) and legacy_kiosk:
        meta = data.get("m")
        meta = dict(meta) if isinstance(meta, dict) else {}
        if not meta.get("k"):
            meta["k"] = legacy_kiosk
        normalized["m"] = meta
    return normalized


# --- contract path ------------------------------------------------------------


def _to_u64(value: int) -> int:
    return value & _U64_MASK


def _from_u64(word: int) -> int:
    return word - (1 << 64) if word >= (1 << 63) else word


def to_contract_transform(position: Vector3, rotation: Vector3, scale: float) -> ContractTransform:
    """Encode a transform as u64 words for ``set_object_properties``.

    Rotation is radians in, degree milli-units out. Negative components are
    carried as 64-bit two's complement.
    """
    if scale < 0:
        raise ValueError("scale must be non-negative")
    degrees = [math.degrees(rotation.x), math.degrees(rotation.y), math.degrees(rotation.z)]
    return ContractTransform(
        position=[_to_u64(v) for v in _vector_to_milli(position)],
        rotation=[_to_u64(to_milli(d)) for d in degrees],
        scale=to_milli(scale),
    )


def from_contract_transform(
    position: List[int], rotation: List[int], scale: int
) -> Tuple[Vector3, Vector3, float]:
    pos = _vector_from_milli([_from_u64(w) for w in position])
    rot_deg = [from_milli(_from_u64(w)) for w in rotation]
    rot = Vector3(x=math.radians(rot_deg[0]), y=math.radians(rot_deg[1]), z=math.radians(rot_deg[2]))
    return pos, rot, from_milli(scale)


class _Reader:
    """Cursor over a BCS byte string; raises ValueError on overrun."""

    def __init__(self, raw: bytes) -> None:
        self._raw = raw
        self._pos = 0

    def take(self, size: int) -> bytes:
        end = self._pos + size
        if end > len(self._raw):
            raise ValueError("unexpected end of data")
        chunk = self._raw[self._pos:end]
        self._pos = end
        return chunk

    def u8(self) -> int:
        return self.take(1)[0]

    def u64(self) -> int:
        return struct.unpack("<Q", self.take(8))[0]

    def uleb128(self) -> int:
        result = 0
        shift = 0
        while True:
            byte = self.u8()
            result |= (byte & 0x7F) << shift
            if not byte & 0x80:
                return result
            shift += 7
            if shift > 35:
                raise ValueError("uleb128 length too long")

    def bool(self) -> bool:
        flag = self.u8()
        if flag not in (0, 1):
            raise ValueError(f"invalid bool byte {flag}")
        return flag == 1

    def u64_vector(self, expected: int) -> List[int]:
        length = self.uleb128()
        if length != expected:
            raise ValueError(f"expected vector of {expected}, got {length}")
        return [self.u64() for _ in range(length)]

    def done(self) -> bool:
        return self._pos == len(self._raw)


def _uleb128(value: int) -> bytes:
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def decode_object_properties(raw: Optional[bytes]) -> Optional[ParsedObjectProperties]:
    """Decode a BCS ``Option<ObjectProperties>`` contract return value.

    Absent and corrupt payloads both come back as ``None``.
    """
    if not raw:
        return None
    try:
        reader = _Reader(bytes(raw))
        tag = reader.u8()
        if tag == 0:
            if not reader.done():
                raise ValueError("trailing bytes after none")
            return None
        if tag != 1:
            raise ValueError(f"bad option tag {tag}")
        displayed = reader.bool()
        position = reader.u64_vector(3)
        rotation = reader.u64_vector(3)
        scale = reader.u64()
        updated_at = reader.u64()
        if not reader.done():
            raise ValueError("trailing bytes after record")
    except ValueError as exc:
        logger.debug("Discarding malformed object properties payload: %s", exc)
        return None

    pos, rot, scale_value = from_contract_transform(position, rotation, scale)
    return ParsedObjectProperties(
        displayed=displayed,
        position=pos,
        rotation=rot,
        scale=scale_value,
        updated_at=updated_at,
    )


def encode_object_properties(props: Optional[ParsedObjectProperties]) -> bytes:
    if props is None:
        return b"\x00"
    words = to_contract_transform(props.position, props.rotation, props.scale)
    out = bytearray(b"\x01")
    out.append(1 if props.displayed else 0)
    for vector in (words.position, words.rotation):
        out += _uleb128(len(vector))
        for word in vector:
            out += struct.pack("<Q", word)
    out += struct.pack("<Q", words.scale)
    out += struct.pack("<Q", props.updated_at)
    return bytes(out)
