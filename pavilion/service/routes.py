"""HTTP routes for the pavilion scene config service."""
from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from pydantic import ValidationError

from pavilion.chain.client import ChainClientError, SuiRpcClient
from pavilion.common.error_envelope import error_response
from pavilion.config import runtime_config
from pavilion.scene_config.builders import validate_compact_scene_config
from pavilion.scene_config.classifier import analyze_kiosk_items
from pavilion.scene_config.codec import (
    compress_scene_config,
    decompress_scene_config,
    normalize_compact_payload,
)
from pavilion.scene_config.models import CompactSceneConfig, SceneConfig, SceneStats
from pavilion.scene_config.service import SceneConfigManager
from pavilion.service.schemas import (
    BuildSceneConfigRequest,
    ClassifiedItem,
    ClassifyRequest,
    ClassifyResult,
    PanelStateRequest,
    PanelStateResult,
    PlaceItemRequest,
    SaveTransactionRequest,
    SaveTransactionResult,
)
from pavilion.walrus.urls import resolve_resource_url

router = APIRouter()

_manager: Optional[SceneConfigManager] = None


def get_scene_config_manager() -> SceneConfigManager:
    global _manager
    if _manager is not None:
        return _manager
    package_id = runtime_config.get_pavilion_package_id()
    if not package_id:
        error_response(
            code="scene_config.missing_package",
            message="PAVILION_PACKAGE_ID is not configured",
            status_code=503,
            resource_kind="scene_config",
        )
    _manager = SceneConfigManager(SuiRpcClient(), package_id)
    return _manager


@router.get("/health")
def health() -> dict:
    return {"status": "ok"}


@router.post("/resources/classify", response_model=ClassifyResult)
def classify_items(request: ClassifyRequest) -> ClassifyResult:
    aggregator = runtime_config.get_walrus_aggregator_url()
    items = [
        ClassifiedItem(**analysis.model_dump(), resourceUrl=resolve_resource_url(analysis.descriptor, aggregator))
        for analysis in analyze_kiosk_items(request.items)
    ]
    return ClassifyResult(items=items)


@router.post("/scene-config/build", response_model=SceneConfig)
def build_scene_config(
    request: BuildSceneConfigRequest,
    manager: SceneConfigManager = Depends(get_scene_config_manager),
) -> SceneConfig:
    return manager.create_scene_config_from_kiosk_items(request.items, request.kioskId, request.creator)


@router.post("/scene-config/compress")
def compress(config: SceneConfig) -> Dict[str, Any]:
    try:
        return compress_scene_config(config).to_wire()
    except ValueError as exc:
        error_response(code="scene_config.invalid_transform", message=str(exc), status_code=422, resource_kind="scene_config")


@router.post("/scene-config/decompress", response_model=SceneConfig)
def decompress(payload: Dict[str, Any]) -> SceneConfig:
    if not validate_compact_scene_config(payload):
        error_response(
            code="scene_config.invalid_compact",
            message="Payload is not a compact scene config",
            status_code=422,
            resource_kind="scene_config",
        )
    try:
        compact = CompactSceneConfig.model_validate(normalize_compact_payload(payload))
    except ValidationError as exc:
        error_response(
            code="scene_config.invalid_compact",
            message="Compact scene config failed validation",
            status_code=422,
            resource_kind="scene_config",
            details={"errors": exc.errors(include_url=False, include_context=False)},
        )
    return decompress_scene_config(compact)


@router.post("/scene-config/panel-state", response_model=PanelStateResult)
def panel_state(
    request: PanelStateRequest,
    manager: SceneConfigManager = Depends(get_scene_config_manager),
) -> PanelStateResult:
    state = manager.convert_scene_config_to_panel_state(request.config, request.items)
    return PanelStateResult(displayedItems=sorted(state.displayedItems), transforms=state.transforms)


@router.post("/scene-config/stats", response_model=SceneStats)
def stats(
    config: SceneConfig,
    manager: SceneConfigManager = Depends(get_scene_config_manager),
) -> SceneStats:
    return manager.get_scene_stats(config)


@router.get("/scene-config/{kiosk_id}", response_model=SceneConfig)
async def load_scene_config(
    kiosk_id: str,
    manager: SceneConfigManager = Depends(get_scene_config_manager),
) -> SceneConfig:
    try:
        config = await manager.load_scene_config(kiosk_id)
    except ChainClientError as exc:
        error_response(
            code="scene_config.chain_unavailable",
            message=str(exc),
            status_code=502,
            resource_kind="scene_config",
            details={"kiosk_id": kiosk_id},
        )
    if config is None:
        error_response(
            code="scene_config.not_found",
            message=f"No usable scene config for kiosk {kiosk_id}",
            status_code=404,
            resource_kind="scene_config",
            details={"kiosk_id": kiosk_id},
        )
    return config


@router.post("/scene-config/save-transaction", response_model=SaveTransactionResult)
def save_transaction(
    request: SaveTransactionRequest,
    manager: SceneConfigManager = Depends(get_scene_config_manager),
) -> SaveTransactionResult:
    try:
        tx = manager.create_save_transaction(request.config, request.kioskId, request.kioskOwnerCapId)
    except ValueError as exc:
        error_response(code="scene_config.invalid_request", message=str(exc), status_code=400, resource_kind="scene_config")
    summary = manager.get_scene_stats(request.config)
    return SaveTransactionResult(
        transaction=tx.to_dict(),
        totalObjects=summary.totalObjects,
        displayedObjects=summary.displayedObjects,
    )


@router.post("/kiosk/place-transaction")
def place_item_transaction(
    request: PlaceItemRequest,
    manager: SceneConfigManager = Depends(get_scene_config_manager),
) -> Dict[str, Any]:
    try:
        tx = manager.create_place_item_transaction(request.item, request.kioskId, request.kioskOwnerCapId)
    except ValueError as exc:
        error_response(code="kiosk.invalid_request", message=str(exc), status_code=400, resource_kind="kiosk")
    return {"transaction": tx.to_dict()}
