"""目录树完整性校验：在条目写入前拦截违反树约束的变更。

每个校验函数在通过时静默返回（部分返回已加载的实体以便复用），
失败时抛出对应的 ``EntryError`` 子类，由服务层回滚当前事务。
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy.orm import Session

from app.packages.drive.core.config import get_settings
from app.packages.drive.core.exceptions import (
    CycleDetected,
    Forbidden,
    InvalidParent,
    InvalidPurge,
    InvalidRestore,
    NameConflict,
)
from app.packages.drive.crud.entry import entry_crud
from app.packages.drive.models.entry import FileSystemEntry
from app.packages.drive.services.path_resolver import ancestors_of, subtree_height


def check_ownership(entry: FileSystemEntry, actor_id: str) -> None:
    if entry.owner_id != actor_id:
        raise Forbidden(entry_id=entry.id)


def check_kind_consistency(parent_candidate: FileSystemEntry) -> None:
    """只有目录可以拥有子节点。"""
    if not parent_candidate.is_folder:
        raise InvalidParent("目标不是文件夹", entry_id=parent_candidate.id)


def check_parent(db: Session, parent_id: str, owner_id: str) -> FileSystemEntry:
    """校验 ``parent_id`` 指向当前用户的、未删除的目录，并返回该目录。"""
    parent = entry_crud.get(db, parent_id, include_deleted=True)
    # 不存在与属于他人统一报 InvalidParent，避免泄露存在性
    if parent is None or parent.owner_id != owner_id:
        raise InvalidParent("目标文件夹不存在", entry_id=parent_id)
    if parent.is_deleted:
        raise InvalidParent("目标文件夹已在回收站中", entry_id=parent_id)
    check_kind_consistency(parent)
    return parent


def check_depth(depth: int, entry_id: Optional[str] = None) -> None:
    """``depth`` 为最深节点的祖先个数，不能超过 ``MAX_TREE_DEPTH``。"""
    max_depth = get_settings().max_tree_depth
    if depth > max_depth:
        raise InvalidParent(f"目录层级不能超过 {max_depth} 层", entry_id=entry_id, depth=depth)


def check_reparent(
    db: Session,
    entry_id: str,
    new_parent_id: Optional[str],
    owner_id: str,
) -> Optional[FileSystemEntry]:
    """校验把 ``entry_id`` 移动到 ``new_parent_id`` 下是否合法。

    新父目录为条目自身或其任意后代时报 ``CycleDetected``：沿新父目录的
    祖先链向上遍历到根，若途中出现 ``entry_id`` 即拒绝。移动后子树最深
    节点超出 ``MAX_TREE_DEPTH`` 时报 ``InvalidParent``。返回新父目录，
    移动到根目录时返回 ``None``。
    """
    if new_parent_id is None:
        return None
    if new_parent_id == entry_id:
        raise CycleDetected("不能将条目移动到其自身中", entry_id=entry_id)

    parent = entry_crud.get(db, new_parent_id, include_deleted=True)
    if parent is None or parent.owner_id != owner_id:
        raise InvalidParent("目标文件夹不存在", entry_id=new_parent_id)

    chain = ancestors_of(db, parent.id)
    if any(a.id == entry_id for a in chain):
        raise CycleDetected(entry_id=entry_id, target_id=new_parent_id)

    if parent.is_deleted:
        raise InvalidParent("目标文件夹已在回收站中", entry_id=new_parent_id)
    check_kind_consistency(parent)
    check_depth(len(chain) + 1 + subtree_height(db, entry_id), entry_id)
    return parent


def check_sibling_name(
    db: Session,
    owner_id: str,
    parent_id: Optional[str],
    name: str,
    *,
    exclude_id: Optional[str] = None,
) -> None:
    clash = entry_crud.live_sibling_named(
        db, owner_id=owner_id, parent_id=parent_id, name=name, exclude_id=exclude_id
    )
    if clash is not None:
        raise NameConflict(f"当前目录下已存在名为 '{name}' 的条目", entry_id=clash.id)


def check_restorable(db: Session, entry: FileSystemEntry) -> None:
    """恢复必须自上而下：任一祖先仍在回收站中时拒绝。"""
    for ancestor in ancestors_of(db, entry.id):
        if ancestor.is_deleted:
            raise InvalidRestore(entry_id=entry.id, blocking_id=ancestor.id)


def check_purgeable(entry: FileSystemEntry) -> None:
    # 仅允许 Deleted -> Purged，禁止直接彻底删除正常条目
    if not entry.is_deleted:
        raise InvalidPurge(entry_id=entry.id)
