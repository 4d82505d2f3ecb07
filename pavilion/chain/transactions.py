"""Unsigned transaction builders for pavilion contract calls.

Transactions are plain data: a list of move calls whose arguments are object
references or typed pure values. Signing and object-ref resolution happen in
the wallet collaborator.
"""
from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from pavilion.scene_config.models import ContractTransform

ZERO_ADDRESS = "0x" + "0" * 64


class ObjectArg(BaseModel):
    kind: Literal["object"] = "object"
    objectId: str


class PureArg(BaseModel):
    kind: Literal["pure"] = "pure"
    type: str
    value: Any


TxArgument = Union[ObjectArg, PureArg]


class MoveCall(BaseModel):
    target: str
    arguments: List[TxArgument] = Field(default_factory=list)
    typeArguments: List[str] = Field(default_factory=list)


class Transaction(BaseModel):
    calls: List[MoveCall] = Field(default_factory=list)
    sender: Optional[str] = None

    @staticmethod
    def object(object_id: str) -> ObjectArg:
        return ObjectArg(objectId=object_id)

    @staticmethod
    def pure(type_name: str, value: Any) -> PureArg:
        return PureArg(type=type_name, value=value)

    def move_call(
        self,
        target: str,
        arguments: Optional[List[TxArgument]] = None,
        type_arguments: Optional[List[str]] = None,
    ) -> MoveCall:
        call = MoveCall(target=target, arguments=arguments or [], typeArguments=type_arguments or [])
        self.calls.append(call)
        return call

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


def _require(value: Optional[str], label: str) -> str:
    if not value:
        raise ValueError(f"{label} is required")
    return value


def pavilion_target(package_id: str, function: str) -> str:
    return f"{_require(package_id, 'package_id')}::pavilion::{function}"


def set_scene_config_tx(package_id: str, kiosk_id: str, kiosk_owner_cap_id: str, json_str: str) -> Transaction:
    tx = Transaction()
    tx.move_call(
        pavilion_target(package_id, "set_scene_config"),
        [
            tx.object(_require(kiosk_id, "kiosk_id")),
            tx.object(_require(kiosk_owner_cap_id, "kiosk_owner_cap_id")),
            tx.pure("string", json_str),
        ],
    )
    return tx


def set_object_properties_tx(
    package_id: str,
    kiosk_id: str,
    kiosk_owner_cap_id: str,
    object_id: str,
    displayed: bool,
    transform: ContractTransform,
) -> Transaction:
    tx = Transaction()
    tx.move_call(
        pavilion_target(package_id, "set_object_properties"),
        [
            tx.object(_require(kiosk_id, "kiosk_id")),
            tx.object(_require(kiosk_owner_cap_id, "kiosk_owner_cap_id")),
            tx.pure("id", _require(object_id, "object_id")),
            tx.pure("bool", displayed),
            tx.pure("vector<u64>", list(transform.position)),
            tx.pure("vector<u64>", list(transform.rotation)),
            tx.pure("u64", transform.scale),
        ],
    )
    return tx


def get_object_properties_tx(package_id: str, kiosk_id: str, object_id: str) -> Transaction:
    """Read-only call meant for devInspect; returns ``Option<ObjectProperties>``."""
    tx = Transaction(sender=ZERO_ADDRESS)
    tx.move_call(
        pavilion_target(package_id, "get_object_properties"),
        [tx.object(_require(kiosk_id, "kiosk_id")), tx.pure("id", _require(object_id, "object_id"))],
    )
    return tx


def place_item_tx(kiosk_id: str, kiosk_owner_cap_id: str, item_id: str, item_type: str) -> Transaction:
    tx = Transaction()
    tx.move_call(
        "0x2::kiosk::place",
        [
            tx.object(_require(kiosk_id, "kiosk_id")),
            tx.object(_require(kiosk_owner_cap_id, "kiosk_owner_cap_id")),
            tx.object(_require(item_id, "item_id")),
        ],
        [_require(item_type, "item_type")],
    )
    return tx
