"""Scene configuration models for the kiosk pavilion."""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional, Set

from pydantic import BaseModel, Field


class Vector3(BaseModel):
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def as_list(self) -> List[float]:
        return [self.x, self.y, self.z]

    @classmethod
    def from_list(cls, values: List[float]) -> Vector3:
        return cls(x=values[0], y=values[1], z=values[2])


class SceneObjectType(str, Enum):
    KIOSK_NFT = "kiosk_nft"
    WALRUS_BLOB = "walrus_blob"
    EXTERNAL_MODEL = "external_model"
    IMAGE_2D = "2d_image"
    SCULPTURE = "sculpture"


class ResourceType(str, Enum):
    WALRUS = "walrus"
    DIRECT = "direct"
    IMAGE = "image"
    GEOMETRY = "geometry"


class ResourceDescriptor(BaseModel):
    """Rendering strategy picked for one collectible."""

    type: ResourceType
    blobId: Optional[str] = None
    modelUrl: Optional[str] = None
    modelFormat: Optional[str] = None
    color: Optional[int] = None


class KioskItem(BaseModel):
    """One held collectible as returned by the holdings provider."""

    objectId: str
    type: str = ""
    data: Optional[Dict[str, Any]] = None


class KioskItemAnalysis(BaseModel):
    objectId: str
    name: str
    descriptor: ResourceDescriptor


class SceneResource(BaseModel):
    blobId: Optional[str] = None
    url: Optional[str] = None
    format: Optional[str] = None


class SceneObject(BaseModel):
    id: str
    name: str
    type: SceneObjectType = SceneObjectType.KIOSK_NFT
    displayed: bool = False
    position: Vector3 = Field(default_factory=Vector3)
    rotation: Vector3 = Field(default_factory=Vector3)
    scale: float = 1.0
    resource: Optional[SceneResource] = None
    updatedAt: int = 0


class CameraConfig(BaseModel):
    position: Vector3 = Field(default_factory=lambda: Vector3(x=0, y=1, z=20))
    target: Vector3 = Field(default_factory=Vector3)
    fov: float = 75.0
    near: float = 0.1
    far: float = 1000.0


class EnvironmentConfig(BaseModel):
    backgroundColor: int = 0x1A1A1A
    ambientLightIntensity: float = 0.6
    directionalLightIntensity: float = 1.0
    directionalLightPosition: Vector3 = Field(default_factory=lambda: Vector3(x=5, y=10, z=5))
    enableShadows: bool = True
    showGallery: bool = True


class SceneMetadata(BaseModel):
    kioskId: Optional[str] = None
    creator: Optional[str] = None
    description: Optional[str] = None
    tags: Optional[List[str]] = None


class SceneConfig(BaseModel):
    version: int = 1
    name: Optional[str] = None
    createdAt: int
    updatedAt: int
    objects: List[SceneObject] = Field(default_factory=list)
    camera: CameraConfig = Field(default_factory=CameraConfig)
    environment: EnvironmentConfig = Field(default_factory=EnvironmentConfig)
    metadata: Optional[SceneMetadata] = None


class CompactMetadata(BaseModel):
    k: Optional[str] = None
    c: Optional[str] = None
    d: Optional[str] = None


class CompactSceneObject(BaseModel):
    id: str
    n: str = ""
    y: str = "k"
    d: bool = False
    p: List[int]
    r: List[int] = Field(default_factory=lambda: [0, 0, 0])
    s: int = 1000
    t: Optional[int] = None
    b: Optional[str] = None
    u: Optional[str] = None
    f: Optional[str] = None


class CompactSceneConfig(BaseModel):
    v: int = 1
    t: int = 0
    c: Optional[int] = None
    m: Optional[CompactMetadata] = None
    o: List[CompactSceneObject] = Field(default_factory=list)

    def to_wire(self) -> Dict[str, Any]:
        """Dump with unset optional keys dropped to keep the blob small."""
        return self.model_dump(exclude_none=True)


class ContractTransform(BaseModel):
    """Transform as raw u64 words for pavilion contract calls."""

    position: List[int]
    rotation: List[int]
    scale: int


class ParsedObjectProperties(BaseModel):
    displayed: bool
    position: Vector3
    rotation: Vector3
    scale: float
    updated_at: int


class PanelTransform(BaseModel):
    position: Vector3
    rotation: Vector3
    scale: Vector3


class PanelState(BaseModel):
    displayedItems: Set[str] = Field(default_factory=set)
    transforms: Dict[str, PanelTransform] = Field(default_factory=dict)


class SceneStats(BaseModel):
    totalObjects: int
    displayedObjects: int
    objectTypes: Dict[str, int] = Field(default_factory=dict)


__all__ = [
    "Vector3",
    "SceneObjectType",
    "ResourceType",
    "ResourceDescriptor",
    "KioskItem",
    "KioskItemAnalysis",
    "SceneResource",
    "SceneObject",
    "CameraConfig",
    "EnvironmentConfig",
    "SceneMetadata",
    "SceneConfig",
    "CompactMetadata",
    "CompactSceneObject",
    "CompactSceneConfig",
    "ContractTransform",
    "ParsedObjectProperties",
    "PanelTransform",
    "PanelState",
    "SceneStats",
]
