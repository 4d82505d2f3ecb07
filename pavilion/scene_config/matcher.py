"""Match persistent collectible ids to live scene-graph nodes.

The renderer names each node after the collectible it shows, ending in the
last eight characters of the object id. Lookups walk the graph every time;
nothing is cached because the graph changes underneath us.

Known limitation: two nodes whose names share an 8-character suffix resolve
to whichever comes first in depth-first pre-order.
"""
from __future__ import annotations

from typing import Dict, Iterator, List, Optional, Tuple

from pavilion.scene_config.models import KioskItem
from pavilion.scene_config.scene_graph import SceneNode

SUFFIX_LENGTH = 8


def id_suffix(object_id: str) -> str:
    return object_id[-SUFFIX_LENGTH:]


def build_suffix_maps(items: List[KioskItem]) -> Tuple[Dict[str, str], Dict[str, str]]:
    """Return ``(object_id -> suffix, suffix -> object_id)`` for the holdings."""
    id_to_suffix: Dict[str, str] = {}
    suffix_to_id: Dict[str, str] = {}
    for item in items:
        if not item.objectId:
            continue
        suffix = id_suffix(item.objectId)
        id_to_suffix[item.objectId] = suffix
        suffix_to_id.setdefault(suffix, item.objectId)
    return id_to_suffix, suffix_to_id


def iter_scene_nodes(root: Optional[SceneNode]) -> Iterator[SceneNode]:
    """Depth-first pre-order walk: a node before its children."""
    if root is None:
        return
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        children = list(getattr(node, "children", None) or [])
        stack.extend(reversed(children))


def find_scene_node(root: Optional[SceneNode], suffix: str) -> Optional[SceneNode]:
    if not suffix:
        return None
    for node in iter_scene_nodes(root):
        name = getattr(node, "name", None)
        if isinstance(name, str) and name and name.endswith(suffix):
            return node
    return None


def object_id_for_node(node_name: str, suffix_to_id: Dict[str, str]) -> Optional[str]:
    if not node_name:
        return None
    return suffix_to_id.get(node_name[-SUFFIX_LENGTH:])
