"""Request/response bodies for the pavilion HTTP service."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from pavilion.scene_config.models import (
    KioskItem,
    KioskItemAnalysis,
    PanelTransform,
    SceneConfig,
)


class ClassifyRequest(BaseModel):
    items: List[KioskItem]


class ClassifiedItem(KioskItemAnalysis):
    resourceUrl: Optional[str] = None


class ClassifyResult(BaseModel):
    items: List[ClassifiedItem] = Field(default_factory=list)


class BuildSceneConfigRequest(BaseModel):
    items: List[KioskItem]
    kioskId: Optional[str] = None
    creator: Optional[str] = None


class PanelStateRequest(BaseModel):
    config: SceneConfig
    items: List[KioskItem]


class PanelStateResult(BaseModel):
    displayedItems: List[str]
    transforms: Dict[str, PanelTransform]


class SaveTransactionRequest(BaseModel):
    config: SceneConfig
    kioskId: str
    kioskOwnerCapId: str


class SaveTransactionResult(BaseModel):
    transaction: Dict[str, Any]
    totalObjects: int
    displayedObjects: int


class PlaceItemRequest(BaseModel):
    item: KioskItem
    kioskId: str
    kioskOwnerCapId: str
