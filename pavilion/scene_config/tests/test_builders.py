"""Tests for scene config constructors and wire-format validators."""

from pavilion.scene_config.builders import (
    SceneConfigFormat,
    create_scene_config,
    create_scene_object_from_kiosk_item,
    find_duplicate_ids,
    grid_position,
    probe_scene_config_format,
    validate_compact_scene_config,
    validate_scene_config,
)
from pavilion.scene_config.models import KioskItem, SceneMetadata, SceneObjectType, Vector3


def test_grid_position_rows_of_five():
    assert grid_position(0) == Vector3(x=-6.0, y=1.0, z=0.0)
    assert grid_position(2) == Vector3(x=0.0, y=1.0, z=0.0)
    assert grid_position(4) == Vector3(x=6.0, y=1.0, z=0.0)
    assert grid_position(7) == Vector3(x=0.0, y=3.0, z=-2.0)


def test_create_scene_object_from_walrus_item():
    item = KioskItem(objectId="0x1", data={"display": {"data": {"name": "Vase", "blob_id": "b1"}}})
    obj = create_scene_object_from_kiosk_item(item, 1)
    assert obj.id == "0x1"
    assert obj.name == "Vase"
    assert obj.type == SceneObjectType.WALRUS_BLOB
    assert obj.displayed is False
    assert obj.position == grid_position(1)
    assert obj.scale == 1.0
    assert obj.resource.blobId == "b1"
    assert obj.resource.format == "glb"
    assert obj.updatedAt > 0


def test_create_scene_object_types_per_resource():
    direct = create_scene_object_from_kiosk_item(KioskItem(objectId="0x2", data={"glb_url": "https://m/a.glb"}))
    image = create_scene_object_from_kiosk_item(KioskItem(objectId="0x3", data={"image_url": "https://i/a.png"}))
    geometry = create_scene_object_from_kiosk_item(KioskItem(objectId="0x4"))
    assert direct.type == SceneObjectType.EXTERNAL_MODEL
    assert direct.resource.url == "https://m/a.glb"
    assert image.type == SceneObjectType.IMAGE_2D
    assert geometry.type == SceneObjectType.KIOSK_NFT
    assert geometry.resource is None


def test_create_scene_config_keeps_duplicates():
    first = create_scene_object_from_kiosk_item(KioskItem(objectId="0xdup"))
    config = create_scene_config([first, first.model_copy()], SceneMetadata(kioskId="0xk"))
    assert config.version == 1
    assert config.createdAt == config.updatedAt
    assert len(config.objects) == 2
    assert find_duplicate_ids(config) == ["0xdup"]


def test_validate_compact_scene_config():
    assert validate_compact_scene_config({"o": []})
    assert validate_compact_scene_config({"o": [{"id": "0x1", "d": True, "p": [1000, 2000, 0]}]})
    assert validate_compact_scene_config({"v": 1, "t": 5, "o": [{"i": "0x1", "d": 0, "p": [0, 0, 0]}]})

    assert not validate_compact_scene_config([])
    assert not validate_compact_scene_config({"o": "nope"})
    assert not validate_compact_scene_config({"o": [{"d": True, "p": [0, 0, 0]}]})
    assert not validate_compact_scene_config({"o": [{"id": "0x1", "d": "yes", "p": [0, 0, 0]}]})
    assert not validate_compact_scene_config({"o": [{"id": "0x1", "d": True, "p": [0, 0]}]})
    assert not validate_compact_scene_config({"o": [{"id": "0x1", "d": True, "p": [True, 0, 0]}]})
    assert not validate_compact_scene_config({"o": [{"id": "0x1", "d": True, "p": [0, 0, 0], "r": [0]}]})
    assert not validate_compact_scene_config({"t": "later", "o": []})


def test_validate_scene_config():
    assert validate_scene_config({"version": 1, "createdAt": 1, "updatedAt": 2, "objects": []})
    assert validate_scene_config(
        {"version": 1, "createdAt": 1, "updatedAt": 2, "objects": [{"id": "0x1"}], "camera": {"fov": 60}}
    )
    assert not validate_scene_config({"version": 1, "createdAt": 1, "objects": []})
    assert not validate_scene_config({"version": 1, "createdAt": 1, "updatedAt": 2, "objects": [{"id": 5}]})
    assert not validate_scene_config({"version": 1, "createdAt": 1, "updatedAt": 2, "objects": [], "camera": []})


def test_probe_scene_config_format():
    assert probe_scene_config_format({"o": []}) == SceneConfigFormat.COMPACT
    assert (
        probe_scene_config_format({"version": 1, "createdAt": 1, "updatedAt": 1, "objects": []})
        == SceneConfigFormat.FULL
    )
    assert probe_scene_config_format({"foo": 1}) == SceneConfigFormat.UNKNOWN
    assert probe_scene_config_format("text") == SceneConfigFormat.UNKNOWN
