"""Live scene-graph handle seen by the scene config manager.

The renderer owns the real graph; this module only describes the shape the
manager reads and writes, plus a plain in-memory graph for headless hosts.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Protocol


class NodeVector(Protocol):
    x: float
    y: float
    z: float


class SceneNode(Protocol):
    name: str
    visible: bool
    position: NodeVector
    rotation: NodeVector
    scale: NodeVector
    children: Iterable["SceneNode"]


class SceneHandle(Protocol):
    def get_scene(self) -> Optional[SceneNode]:
        """Root of the live graph, or ``None`` before the renderer is ready."""


@dataclass
class Vec3:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def set(self, x: float, y: float, z: float) -> None:
        self.x, self.y, self.z = x, y, z


@dataclass
class LiveNode:
    name: str = ""
    visible: bool = True
    position: Vec3 = field(default_factory=Vec3)
    rotation: Vec3 = field(default_factory=Vec3)
    scale: Vec3 = field(default_factory=lambda: Vec3(1.0, 1.0, 1.0))
    children: List["LiveNode"] = field(default_factory=list)

    def add(self, child: "LiveNode") -> "LiveNode":
        self.children.append(child)
        return child


class StaticSceneHandle:
    """Handle over a graph held in memory."""

    def __init__(self, root: Optional[SceneNode] = None) -> None:
        self.root = root

    def get_scene(self) -> Optional[SceneNode]:
        return self.root
