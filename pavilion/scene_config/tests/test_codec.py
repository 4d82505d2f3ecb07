"""Tests for the fixed-point transform codec (compact blobs and contract words)."""

import math
import struct

import pytest

from pavilion.scene_config.codec import (
    compress_scene_config,
    decode_object_properties,
    decompress_scene_config,
    encode_object_properties,
    from_contract_transform,
    normalize_compact_payload,
    to_contract_transform,
    to_milli,
)
from pavilion.scene_config.models import (
    CameraConfig,
    CompactSceneConfig,
    ParsedObjectProperties,
    SceneConfig,
    SceneMetadata,
    SceneObject,
    SceneObjectType,
    SceneResource,
    Vector3,
)


def _config():
    return SceneConfig(
        name="Gallery",
        createdAt=1000,
        updatedAt=2000,
        objects=[
            SceneObject(
                id="0xaaa",
                name="Statue",
                type=SceneObjectType.WALRUS_BLOB,
                displayed=True,
                position=Vector3(x=1.23456, y=-2.5, z=0.3333),
                rotation=Vector3(x=0.0, y=math.pi / 4, z=-0.1),
                scale=1.75,
                resource=SceneResource(blobId="blob-1", format="glb"),
                updatedAt=1500,
            ),
            SceneObject(
                id="0xbbb",
                name="Poster",
                type=SceneObjectType.IMAGE_2D,
                resource=SceneResource(url="https://img/p.png", format="png"),
                updatedAt=1600,
            ),
        ],
        metadata=SceneMetadata(kioskId="0xkiosk", creator="0xme", description="two things"),
    )


def test_to_milli_rounds_half_away_from_zero():
    assert to_milli(1.5) == 1500
    assert to_milli(-1.5) == -1500
    assert to_milli(2.0004) == 2000
    assert to_milli(-2.0006) == -2001
    assert to_milli(0.0) == 0


def test_compress_emits_short_keys():
    wire = compress_scene_config(_config()).to_wire()
    assert wire["v"] == 1
    assert wire["t"] == 2000
    assert wire["c"] == 1000
    assert wire["m"] == {"k": "0xkiosk", "c": "0xme", "d": "two things"}
    statue, poster = wire["o"]
    assert statue["id"] == "0xaaa"
    assert statue["y"] == "w"
    assert statue["d"] is True
    assert statue["p"] == [1235, -2500, 333]
    assert statue["s"] == 1750
    assert statue["b"] == "blob-1"
    assert "f" not in statue
    assert "u" not in statue
    assert poster["y"] == "i"
    assert poster["f"] == "png"


def test_round_trip_within_fixed_point_precision():
    original = _config()
    restored = decompress_scene_config(compress_scene_config(original))
    assert restored.updatedAt == original.updatedAt
    assert restored.createdAt == original.createdAt
    assert restored.metadata.kioskId == "0xkiosk"
    for before, after in zip(original.objects, restored.objects):
        assert after.id == before.id
        assert after.name == before.name
        assert after.type == before.type
        assert after.displayed == before.displayed
        for axis in ("x", "y", "z"):
            assert abs(getattr(after.position, axis) - getattr(before.position, axis)) <= 0.0005
            assert abs(getattr(after.rotation, axis) - getattr(before.rotation, axis)) <= 0.0005
        assert abs(after.scale - before.scale) <= 0.0005
    assert restored.objects[0].resource.blobId == "blob-1"
    assert restored.objects[0].resource.format == "glb"


def test_decompress_minimal_blob_uses_defaults():
    compact = CompactSceneConfig.model_validate({"o": [{"id": "0xabc", "d": True, "p": [1000, 2000, 0]}]})
    config = decompress_scene_config(compact)
    obj = config.objects[0]
    assert obj.position == Vector3(x=1.0, y=2.0, z=0.0)
    assert obj.rotation == Vector3()
    assert obj.scale == 1.0
    assert obj.displayed is True
    assert obj.type == SceneObjectType.KIOSK_NFT
    assert obj.resource is None


def test_decompress_infers_type_for_unknown_code():
    compact = CompactSceneConfig.model_validate(
        {"t": 5, "o": [{"id": "0x1", "y": "?", "p": [0, 0, 0], "u": "https://m/x.glb"}]}
    )
    obj = decompress_scene_config(compact).objects[0]
    assert obj.type == SceneObjectType.EXTERNAL_MODEL
    assert obj.updatedAt == 5


def test_decompress_onto_base_keeps_camera_and_name():
    base = SceneConfig(name="Base", createdAt=1, updatedAt=1, camera=CameraConfig(fov=40))
    compact = compress_scene_config(_config())
    merged = decompress_scene_config(compact, base)
    assert merged.name == "Base"
    assert merged.camera.fov == 40
    assert merged.createdAt == 1
    assert merged.updatedAt == 2000
    assert len(merged.objects) == 2


def test_normalize_accepts_i_alias():
    data = normalize_compact_payload({"o": [{"i": "0x9", "d": False, "p": [0, 0, 0]}]})
    assert data["o"][0] == {"id": "0x9", "d": False, "p": [0, 0, 0]}


def test_contract_transform_uses_degrees_and_twos_complement():
    words = to_contract_transform(Vector3(x=-1.5, y=2.0, z=0.0), Vector3(x=math.pi / 2), 1.25)
    assert words.position == [(1 << 64) - 1500, 2000, 0]
    assert words.rotation[0] == 90000
    assert words.scale == 1250

    pos, rot, scale = from_contract_transform(words.position, words.rotation, words.scale)
    assert pos == Vector3(x=-1.5, y=2.0, z=0.0)
    assert rot.x == pytest.approx(math.pi / 2)
    assert scale == 1.25


def test_contract_transform_rejects_negative_scale():
    with pytest.raises(ValueError):
        to_contract_transform(Vector3(), Vector3(), -1.0)


def test_object_properties_encode_decode():
    props = ParsedObjectProperties(
        displayed=True,
        position=Vector3(x=1.0, y=-2.0, z=3.0),
        rotation=Vector3(y=math.pi),
        scale=0.5,
        updated_at=1700000000000,
    )
    decoded = decode_object_properties(encode_object_properties(props))
    assert decoded.displayed is True
    assert decoded.position == Vector3(x=1.0, y=-2.0, z=3.0)
    assert decoded.rotation.y == pytest.approx(math.pi, abs=1e-4)
    assert decoded.scale == 0.5
    assert decoded.updated_at == 1700000000000


def test_decode_object_properties_absent_or_malformed():
    assert decode_object_properties(None) is None
    assert decode_object_properties(b"") is None
    assert decode_object_properties(encode_object_properties(None)) is None
    assert decode_object_properties(b"\x02") is None

    good = encode_object_properties(
        ParsedObjectProperties(displayed=False, position=Vector3(), rotation=Vector3(), scale=1.0, updated_at=1)
    )
    assert decode_object_properties(good) is not None
    assert decode_object_properties(good[:-3]) is None
    assert decode_object_properties(good + b"\x00") is None
    assert decode_object_properties(b"\x01\x07" + good[2:]) is None

    short_vector = b"\x01\x01\x02" + struct.pack("<QQ", 1, 2)
    assert decode_object_properties(short_vector) is None


def test_to_milli_rejects_non_finite():
    for bad in (float("nan"), float("inf"), float("-inf")):
        with pytest.raises(ValueError):
            to_milli(bad)


def test_compress_rejects_non_finite_transform():
    config = _config()
    config.objects[0].position.x = float("nan")
    with pytest.raises(ValueError):
        compress_scene_config(config)


def test_image_resource_keeps_empty_format():
    config = SceneConfig(
        createdAt=1,
        updatedAt=1,
        objects=[
            SceneObject(
                id="0ximg",
                name="Poster",
                type=SceneObjectType.IMAGE_2D,
                resource=SceneResource(url="https://img/p.png"),
            )
        ],
    )
    restored = decompress_scene_config(compress_scene_config(config))
    assert restored.objects[0].resource.url == "https://img/p.png"
    assert restored.objects[0].resource.format is None


def test_legacy_top_level_kiosk_id():
    legacy = {
        "v": 1,
        "t": 5,
        "k": "0xkiosk",
        "o": [{"i": "0x1", "n": "A", "d": 1, "p": [1000, 0, 0], "r": [0, 0, 0], "s": 1000}],
    }
    normalized = normalize_compact_payload(legacy)
    assert "k" not in normalized
    assert normalized["m"] == {"k": "0xkiosk"}

    config = decompress_scene_config(CompactSceneConfig.model_validate(normalized))
    assert config.metadata.kioskId == "0xkiosk"
    assert config.objects[0].id == "0x1"
    assert config.objects[0].displayed is True


def test_nested_kiosk_id_wins_over_legacy_key():
    normalized = normalize_compact_payload({"k": "0xold", "m": {"k": "0xnew", "c": "0xme"}, "o": []})
    assert normalized["m"] == {"k": "0xnew", "c": "0xme"}
