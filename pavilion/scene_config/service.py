"""Scene config manager: build, capture, persist, load and project scene configs."""
from __future__ import annotations

import asyncio
import json
import logging
from collections import Counter
from typing import List, Optional

from pydantic import ValidationError

from pavilion.chain.client import ChainClient, extract_return_bytes
from pavilion.chain.fields import read_scene_config
from pavilion.chain.transactions import (
    ZERO_ADDRESS,
    Transaction,
    get_object_properties_tx,
    place_item_tx,
    set_object_properties_tx,
    set_scene_config_tx,
)
from pavilion.scene_config.builders import (
    SceneConfigFormat,
    create_scene_config,
    create_scene_object_from_kiosk_item,
    now_ms,
    probe_scene_config_format,
)
from pavilion.scene_config.codec import (
    compress_scene_config,
    decode_object_properties,
    decompress_scene_config,
    normalize_compact_payload,
    to_contract_transform,
)
from pavilion.scene_config.matcher import build_suffix_maps, find_scene_node
from pavilion.scene_config.models import (
    CompactSceneConfig,
    KioskItem,
    PanelState,
    PanelTransform,
    ParsedObjectProperties,
    SceneConfig,
    SceneMetadata,
    SceneObject,
    SceneStats,
    Vector3,
)
from pavilion.scene_config.scene_graph import SceneHandle, SceneNode

logger = logging.getLogger(__name__)


def _vector_from_node(node_vector, fallback: Vector3) -> Vector3:
    values = {}
    for axis in ("x", "y", "z"):
        value = getattr(node_vector, axis, None)
        values[axis] = getattr(fallback, axis) if value is None else value
    return Vector3(**values)


def _write_vector(node_vector, value: Vector3) -> None:
    node_vector.x = value.x
    node_vector.y = value.y
    node_vector.z = value.z


class SceneConfigManager:
    """Stateless pipeline between holdings, the live scene and the chain.

    Collaborators: a chain client for reads/devInspect, the pavilion package
    id, and optionally a handle on the live scene graph.
    """

    def __init__(
        self,
        chain_client: ChainClient,
        package_id: str,
        scene_handle: Optional[SceneHandle] = None,
    ) -> None:
        if not package_id:
            raise ValueError("package_id is required")
        self._client = chain_client
        self.package_id = package_id
        self.scene_handle = scene_handle

    def create_scene_config_from_kiosk_items(
        self,
        items: List[KioskItem],
        kiosk_id: Optional[str] = None,
        creator: Optional[str] = None,
    ) -> SceneConfig:
        objects = [create_scene_object_from_kiosk_item(item, index) for index, item in enumerate(items)]
        metadata = SceneMetadata(
            kioskId=kiosk_id,
            creator=creator,
            description=f"3D scene config - contains {len(objects)} objects",
        )
        return create_scene_config(objects, metadata)

    def _live_root(self) -> Optional[SceneNode]:
        if self.scene_handle is None:
            return None
        return self.scene_handle.get_scene()

    def capture_current_scene_state(self, base_config: SceneConfig, items: List[KioskItem]) -> SceneConfig:
        root = self._live_root()
        if root is None:
            logger.warning("Live scene not available, keeping base config")
            return base_config

        id_to_suffix, _ = build_suffix_maps(items)
        ts = now_ms()
        updated: List[SceneObject] = []
        for obj in base_config.objects:
            suffix = id_to_suffix.get(obj.id)
            if not suffix:
                updated.append(obj)
                continue

            node = find_scene_node(root, suffix)
            if node is None:
                updated.append(obj.model_copy(update={"displayed": False}))
                continue

            scale_x = getattr(node.scale, "x", None)
            updated.append(
                obj.model_copy(
                    update={
                        "displayed": node.visible is not False,
                        "position": _vector_from_node(node.position, obj.position),
                        "rotation": _vector_from_node(node.rotation, obj.rotation),
                        "scale": scale_x if scale_x is not None else obj.scale,
                        "updatedAt": ts,
                    }
                )
            )
        return base_config.model_copy(update={"objects": updated, "updatedAt": ts})

    def parse_scene_config(self, json_str: str) -> Optional[SceneConfig]:
        """Parse a stored blob in either wire format; ``None`` if unusable."""
        try:
            data = json.loads(json_str)
        except ValueError as exc:
            logger.error("Failed to parse scene config JSON: %s", exc)
            return None

        fmt = probe_scene_config_format(data)
        try:
            if fmt == SceneConfigFormat.COMPACT:
                compact = CompactSceneConfig.model_validate(normalize_compact_payload(data))
                logger.info("Loaded compact scene config with %s objects", len(compact.o))
                return decompress_scene_config(compact)
            if fmt == SceneConfigFormat.FULL:
                config = SceneConfig.model_validate(data)
                logger.info("Loaded full scene config with %s objects", len(config.objects))
                return config
        except ValidationError as exc:
            logger.error("Scene config failed validation: %s", exc)
            return None

        logger.error("Unrecognised scene config format")
        return None

    async def load_scene_config(self, kiosk_id: str) -> Optional[SceneConfig]:
        json_str = await read_scene_config(self._client, self.package_id, kiosk_id)
        if not json_str:
            logger.info("No scene config stored for kiosk %s", kiosk_id)
            return None
        return self.parse_scene_config(json_str)

    def serialize_scene_config(self, config: SceneConfig) -> str:
        compact = compress_scene_config(config)
        return json.dumps(compact.to_wire(), separators=(",", ":"))

    def create_save_transaction(self, config: SceneConfig, kiosk_id: str, kiosk_owner_cap_id: str) -> Transaction:
        return set_scene_config_tx(
            self.package_id,
            kiosk_id,
            kiosk_owner_cap_id,
            self.serialize_scene_config(config),
        )

    def create_object_properties_transaction(
        self, obj: SceneObject, kiosk_id: str, kiosk_owner_cap_id: str
    ) -> Transaction:
        transform = to_contract_transform(obj.position, obj.rotation, obj.scale)
        return set_object_properties_tx(
            self.package_id, kiosk_id, kiosk_owner_cap_id, obj.id, obj.displayed, transform
        )

    def create_place_item_transaction(self, item: KioskItem, kiosk_id: str, kiosk_owner_cap_id: str) -> Transaction:
        """Place a held collectible into the kiosk so the pavilion can show it."""
        return place_item_tx(kiosk_id, kiosk_owner_cap_id, item.objectId, item.type)

    async def fetch_object_properties(self, kiosk_id: str, object_id: str) -> Optional[ParsedObjectProperties]:
        tx = get_object_properties_tx(self.package_id, kiosk_id, object_id)
        result = await self._client.dev_inspect(tx, sender=tx.sender or ZERO_ADDRESS)
        return decode_object_properties(extract_return_bytes(result))

    def convert_scene_config_to_panel_state(self, config: SceneConfig, items: List[KioskItem]) -> PanelState:
        held = {item.objectId for item in items if item.objectId}
        state = PanelState()
        for obj in config.objects:
            if obj.id not in held:
                continue
            if obj.displayed:
                state.displayedItems.add(obj.id)
            state.transforms[obj.id] = PanelTransform(
                position=obj.position.model_copy(),
                rotation=obj.rotation.model_copy(),
                scale=Vector3(x=obj.scale, y=obj.scale, z=obj.scale),
            )
        logger.info(
            "Converted scene config to panel state: %s displayed, %s transforms",
            len(state.displayedItems),
            len(state.transforms),
        )
        return state

    def apply_scene_config(self, config: SceneConfig, items: List[KioskItem]) -> int:
        """Write displayed flags and transforms onto matching live nodes."""
        root = self._live_root()
        if root is None:
            logger.warning("Live scene not available, cannot apply scene config")
            return 0

        id_to_suffix, _ = build_suffix_maps(items)
        applied = 0
        for obj in config.objects:
            node = find_scene_node(root, id_to_suffix.get(obj.id, ""))
            if node is None:
                continue
            node.visible = obj.displayed
            _write_vector(node.position, obj.position)
            _write_vector(node.rotation, obj.rotation)
            _write_vector(node.scale, Vector3(x=obj.scale, y=obj.scale, z=obj.scale))
            applied += 1
        logger.info("Applied transforms to %s objects", applied)
        return applied

    async def apply_scene_config_when_ready(
        self,
        config: SceneConfig,
        items: List[KioskItem],
        ready: asyncio.Event,
        timeout: Optional[float] = None,
    ) -> int:
        """Apply once the renderer signals its models are in the scene."""
        try:
            await asyncio.wait_for(ready.wait(), timeout)
        except asyncio.TimeoutError:
            logger.warning("Scene never signalled ready, config not applied")
            return 0
        return self.apply_scene_config(config, items)

    def get_scene_stats(self, config: SceneConfig) -> SceneStats:
        counts = Counter(obj.type.value for obj in config.objects)
        return SceneStats(
            totalObjects=len(config.objects),
            displayedObjects=sum(1 for obj in config.objects if obj.displayed),
            objectTypes=dict(counts),
        )
