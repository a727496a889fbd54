"""文件与文件夹条目路由。

路由层只负责解析当前用户与请求参数，所有树约束都在 ``entry_store`` 中校验。
``owner_id`` 一律来自认证依赖，从不读取客户端传入的用户标识。
"""

from __future__ import annotations

from typing import Any, Iterable, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.packages.drive.api.v1.schemas.entries import (
    EntryCreate,
    EntryListResponse,
    EntryMutationResponse,
    EntryOut,
    EntryResponse,
    MoveBody,
    PurgeResponse,
    RenameBody,
    StarBody,
)
from app.packages.drive.core.dependencies import get_current_owner_id, get_db
from app.packages.drive.core.exceptions import NotFound
from app.packages.drive.core.responses import create_response
from app.packages.drive.models.entry import FileSystemEntry
from app.packages.drive.services.entry_store import entry_store

router = APIRouter(prefix="/entries", tags=["entries"])
# 收藏夹与回收站视图
collections_router = APIRouter(tags=["entries"])


def _serialize(entry: FileSystemEntry) -> dict[str, Any]:
    return EntryOut.model_validate(entry).model_dump(mode="json")


def _serialize_all(entries: Iterable[FileSystemEntry]) -> list[dict[str, Any]]:
    return [_serialize(e) for e in entries]


@router.post("", response_model=EntryResponse)
def create_entry(
    payload: EntryCreate,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id),
):
    entry = entry_store.create(
        db,
        owner_id=owner_id,
        name=payload.name,
        is_folder=payload.is_folder,
        parent_id=payload.parent_id,
        size_bytes=payload.size_bytes,
        mime_type=payload.mime_type,
        storage_url=payload.storage_url,
    )
    return create_response("创建成功", _serialize(entry))


@router.get("", response_model=EntryListResponse)
def list_children(
    parent_id: Optional[str] = Query(None, alias="parentId"),
    include_deleted: bool = Query(False, alias="includeDeleted"),
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id),
):
    items = entry_store.list_children(db, parent_id, owner_id, include_deleted=include_deleted)
    return create_response("获取文件列表成功", _serialize_all(items))


@router.get("/{entry_id}", response_model=EntryResponse)
def get_entry(
    entry_id: str,
    include_deleted: bool = Query(False, alias="includeDeleted"),
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id),
):
    entry = entry_store.get(db, entry_id, owner_id, include_deleted=include_deleted)
    if entry is None:
        raise NotFound(entry_id=entry_id)
    return create_response("获取成功", _serialize(entry))


@router.get("/{entry_id}/breadcrumbs", response_model=EntryListResponse)
def get_breadcrumbs(
    entry_id: str,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id),
):
    chain = entry_store.breadcrumbs(db, entry_id, owner_id)
    return create_response("获取成功", _serialize_all(chain))


@router.patch("/{entry_id}/name", response_model=EntryResponse)
def rename_entry(
    entry_id: str,
    payload: RenameBody,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id),
):
    entry = entry_store.rename(db, entry_id, payload.name, owner_id)
    return create_response("重命名成功", _serialize(entry))


@router.post("/{entry_id}/move", response_model=EntryResponse)
def move_entry(
    entry_id: str,
    payload: MoveBody,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id),
):
    entry = entry_store.move(db, entry_id, payload.parent_id, owner_id)
    return create_response("移动成功", _serialize(entry))


@router.delete("/{entry_id}", response_model=EntryMutationResponse)
def delete_entry(
    entry_id: str,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id),
):
    entry_store.soft_delete(db, entry_id, owner_id)
    return create_response("已移入回收站", {"id": entry_id})


@router.post("/{entry_id}/restore", response_model=EntryMutationResponse)
def restore_entry(
    entry_id: str,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id),
):
    entry_store.restore(db, entry_id, owner_id)
    return create_response("恢复成功", {"id": entry_id})


@router.put("/{entry_id}/star", response_model=EntryMutationResponse)
def star_entry(
    entry_id: str,
    payload: StarBody,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id),
):
    entry_store.star(db, entry_id, owner_id, payload.starred)
    return create_response("操作成功", {"id": entry_id, "starred": payload.starred})


@collections_router.get("/starred", response_model=EntryListResponse)
def list_starred(
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id),
):
    return create_response("获取收藏列表成功", _serialize_all(entry_store.list_starred(db, owner_id)))


@collections_router.get("/trash", response_model=EntryListResponse)
def list_trash(
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id),
):
    return create_response("获取回收站列表成功", _serialize_all(entry_store.list_trash(db, owner_id)))


@collections_router.delete("/trash/{entry_id}", response_model=PurgeResponse)
def purge_entry(
    entry_id: str,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id),
):
    purged = entry_store.purge(db, entry_id, owner_id)
    return create_response("已彻底删除", {"id": entry_id, "purged": purged})
