"""条目存储服务：文件/文件夹树的事务性增删改查。

所有写操作都在单个事务内完成：先通过完整性校验，再级联更新路径或删除
标记，最后统一提交；任一步失败都会整体回滚，不留下部分写入。
在 PostgreSQL 上，写事务开始时按 owner_id 获取事务级咨询锁，同一用户的
树变更串行执行，不同用户之间互不阻塞。
"""

from __future__ import annotations

import hashlib
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.packages.drive.core.constants import DEFAULT_FILE_MIME_TYPE, FOLDER_MIME_TYPE
from app.packages.drive.core.exceptions import EntryError, InternalError, InvalidEntry, NotFound
from app.packages.drive.core.logger import logger
from app.packages.drive.core.timezone import now as tz_now
from app.packages.drive.crud.entry import entry_crud
from app.packages.drive.models.entry import FileSystemEntry
from app.packages.drive.services import integrity_guard as guard
from app.packages.drive.services.path_resolver import (
    ancestors_of,
    descendants_of,
    repath_subtree,
    resolve_path,
    validate_name,
)


def _owner_lock_key(owner_id: str) -> int:
    digest = hashlib.blake2b(owner_id.encode("utf-8"), digest_size=8).digest()
    return int.from_bytes(digest, "big", signed=True)


class EntryStore:
    # ----------------------------
    # 事务与加载
    # ----------------------------
    @contextmanager
    def _transaction(self, db: Session, owner_id: str) -> Iterator[None]:
        try:
            self._lock_owner(db, owner_id)
            yield
            db.commit()
        except EntryError:
            db.rollback()
            raise
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception("entry store persistence failure owner=%s", owner_id)
            raise InternalError() from exc
        except Exception:
            db.rollback()
            raise

    def _lock_owner(self, db: Session, owner_id: str) -> None:
        if db.get_bind().dialect.name != "postgresql":
            return
        db.execute(text("SELECT pg_advisory_xact_lock(:key)"), {"key": _owner_lock_key(owner_id)})

    def _load(
        self, db: Session, entry_id: str, actor_id: str, *, include_deleted: bool = False
    ) -> FileSystemEntry:
        entry = entry_crud.get(db, entry_id, include_deleted=include_deleted)
        # 属于其他用户的条目与不存在一样处理
        if entry is None or entry.owner_id != actor_id:
            raise NotFound(entry_id=entry_id)
        # 上面已把他人条目当作不存在，这里不会触发 Forbidden
        guard.check_ownership(entry, actor_id)
        return entry

    # ----------------------------
    # 查询
    # ----------------------------
    def get(
        self, db: Session, entry_id: str, owner_id: str, *, include_deleted: bool = False
    ) -> Optional[FileSystemEntry]:
        return entry_crud.get_owned(db, entry_id, owner_id=owner_id, include_deleted=include_deleted)

    def list_children(
        self,
        db: Session,
        parent_id: Optional[str],
        owner_id: str,
        *,
        include_deleted: bool = False,
    ) -> list[FileSystemEntry]:
        """返回直接子节点，按名称升序。"""
        if parent_id is not None and not include_deleted:
            if entry_crud.get_owned(db, parent_id, owner_id=owner_id) is None:
                return []
        return entry_crud.list_children(
            db, owner_id=owner_id, parent_id=parent_id, include_deleted=include_deleted
        )

    def list_starred(self, db: Session, owner_id: str) -> list[FileSystemEntry]:
        return entry_crud.list_starred(db, owner_id=owner_id)

    def list_trash(self, db: Session, owner_id: str) -> list[FileSystemEntry]:
        return entry_crud.list_trash(db, owner_id=owner_id)

    def breadcrumbs(self, db: Session, entry_id: str, owner_id: str) -> list[FileSystemEntry]:
        """返回从根到当前条目的完整链（含自身），用于面包屑导航。"""
        entry = entry_crud.get_owned(db, entry_id, owner_id=owner_id)
        if entry is None:
            raise NotFound(entry_id=entry_id)
        return [*ancestors_of(db, entry.id), entry]

    # ----------------------------
    # 写操作
    # ----------------------------
    def create(
        self,
        db: Session,
        *,
        owner_id: str,
        name: str,
        is_folder: bool,
        parent_id: Optional[str] = None,
        size_bytes: Optional[int] = None,
        mime_type: Optional[str] = None,
        storage_url: Optional[str] = None,
    ) -> FileSystemEntry:
        name = validate_name(name)
        if is_folder:
            size_bytes, mime_type, storage_url = 0, FOLDER_MIME_TYPE, ""
        else:
            size_bytes = 0 if size_bytes is None else int(size_bytes)
            if size_bytes < 0:
                raise InvalidEntry("文件大小不能为负数")
            mime_type = (mime_type or "").strip() or DEFAULT_FILE_MIME_TYPE
            if mime_type == FOLDER_MIME_TYPE:
                raise InvalidEntry("文件的 MIME 类型不能为 folder")
            storage_url = storage_url or ""

        with self._transaction(db, owner_id):
            ancestors: list[FileSystemEntry] = []
            if parent_id is not None:
                parent = guard.check_parent(db, parent_id, owner_id)
                ancestors = [*ancestors_of(db, parent.id), parent]
                guard.check_depth(len(ancestors))
            guard.check_sibling_name(db, owner_id, parent_id, name)
            entry = entry_crud.create(
                db,
                {
                    "name": name,
                    "path": resolve_path(name, ancestors),
                    "size_bytes": size_bytes,
                    "mime_type": mime_type,
                    "storage_url": storage_url,
                    "owner_id": owner_id,
                    "parent_id": parent_id,
                    "is_folder": is_folder,
                },
            )
        logger.info("entry.create owner=%s id=%s path=%s folder=%s", owner_id, entry.id, entry.path, is_folder)
        return entry

    def rename(self, db: Session, entry_id: str, new_name: str, actor_id: str) -> FileSystemEntry:
        """重命名条目，并级联更新其全部后代的路径。"""
        with self._transaction(db, actor_id):
            entry = self._load(db, entry_id, actor_id)
            name = validate_name(new_name)
            guard.check_sibling_name(db, actor_id, entry.parent_id, name, exclude_id=entry.id)
            entry.name = name
            updated = repath_subtree(db, entry)
        logger.info("entry.rename owner=%s id=%s path=%s repathed=%s", actor_id, entry_id, entry.path, updated)
        return entry

    def move(
        self, db: Session, entry_id: str, new_parent_id: Optional[str], actor_id: str
    ) -> FileSystemEntry:
        """把条目移动到新父目录（``None`` 表示根目录），并级联更新路径。"""
        with self._transaction(db, actor_id):
            entry = self._load(db, entry_id, actor_id)
            parent = guard.check_reparent(db, entry.id, new_parent_id, actor_id)
            guard.check_sibling_name(db, actor_id, new_parent_id, entry.name, exclude_id=entry.id)
            entry.parent_id = new_parent_id
            ancestors = [] if parent is None else [*ancestors_of(db, parent.id), parent]
            updated = repath_subtree(db, entry, ancestors=ancestors)
        logger.info("entry.move owner=%s id=%s path=%s repathed=%s", actor_id, entry_id, entry.path, updated)
        return entry

    def soft_delete(self, db: Session, entry_id: str, actor_id: str) -> None:
        """软删除条目及其整棵子树。"""
        with self._transaction(db, actor_id):
            entry = self._load(db, entry_id, actor_id)
            stamp = tz_now()
            subtree = [entry, *descendants_of(db, entry.id)]
            for node in subtree:
                node.is_deleted = True
                node.updated_at = stamp
            db.flush()
        logger.info("entry.soft_delete owner=%s id=%s count=%s", actor_id, entry_id, len(subtree))

    def restore(self, db: Session, entry_id: str, actor_id: str) -> None:
        """只恢复条目自身；子树需调用方自上而下逐个恢复。"""
        with self._transaction(db, actor_id):
            entry = self._load(db, entry_id, actor_id, include_deleted=True)
            if not entry.is_deleted:
                return
            guard.check_restorable(db, entry)
            guard.check_sibling_name(db, actor_id, entry.parent_id, entry.name, exclude_id=entry.id)
            entry.is_deleted = False
            entry.updated_at = tz_now()
            db.flush()
        logger.info("entry.restore owner=%s id=%s", actor_id, entry_id)

    def star(self, db: Session, entry_id: str, actor_id: str, starred: bool) -> None:
        with self._transaction(db, actor_id):
            entry = self._load(db, entry_id, actor_id)
            if entry.is_starred != starred:
                entry.is_starred = starred
                entry.updated_at = tz_now()
                db.flush()
        logger.info("entry.star owner=%s id=%s starred=%s", actor_id, entry_id, starred)

    def purge(self, db: Session, entry_id: str, actor_id: str) -> int:
        """彻底删除回收站中的条目及其子树，返回删除的行数。"""
        with self._transaction(db, actor_id):
            entry = self._load(db, entry_id, actor_id, include_deleted=True)
            guard.check_purgeable(entry)
            subtree = [entry, *descendants_of(db, entry.id)]
            # 叶子优先删除，满足 parent_id 外键约束
            for node in reversed(subtree):
                entry_crud.hard_delete(db, node)
        logger.info("entry.purge owner=%s id=%s count=%s", actor_id, entry_id, len(subtree))
        return len(subtree)


entry_store = EntryStore()
