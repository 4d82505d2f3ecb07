import asyncio

from unittest.mock import AsyncMock

from pavilion.chain.fields import read_pavilion_name, read_scene_config


def _field(value):
    return {"data": {"content": {"fields": {"value": value}}}}


def test_read_scene_config_direct_lookup():
    client = AsyncMock()
    client.get_dynamic_field_object.return_value = _field('{"o":[]}')
    assert asyncio.run(read_scene_config(client, "0xpkg", "0xkiosk")) == '{"o":[]}'
    client.get_dynamic_field_object.assert_awaited_once_with(
        "0xkiosk", {"type": "0xpkg::pavilion::SceneConfig", "value": {}}
    )
    client.get_dynamic_fields.assert_not_awaited()


def test_read_pavilion_name_scans_when_direct_lookup_is_empty():
    legacy = {"type": "0xold::pavilion::PavilionName", "value": {}}
    client = AsyncMock()
    client.get_dynamic_field_object.side_effect = [{}, _field("My Pavilion")]
    client.get_dynamic_fields.return_value = {"data": [{"name": legacy}], "hasNextPage": False}
    assert asyncio.run(read_pavilion_name(client, "0xpkg", "0xkiosk")) == "My Pavilion"
    assert client.get_dynamic_field_object.await_args_list[1].args == ("0xkiosk", legacy)


def test_read_scene_config_absent():
    client = AsyncMock()
    client.get_dynamic_field_object.return_value = {}
    client.get_dynamic_fields.return_value = {"data": [], "hasNextPage": False}
    assert asyncio.run(read_scene_config(client, "0xpkg", "0xkiosk")) is None


def test_empty_string_counts_as_absent():
    client = AsyncMock()
    client.get_dynamic_field_object.return_value = _field("")
    client.get_dynamic_fields.return_value = {"data": [], "hasNextPage": False}
    assert asyncio.run(read_scene_config(client, "0xpkg", "0xkiosk")) is None
