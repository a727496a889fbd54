"""FileSystemEntry CRUD：所有查询都以 owner_id 为第一过滤条件。"""

from __future__ import annotations

from typing import Optional

from sqlalchemy.orm import Query, Session, aliased

from app.packages.drive.crud.base import CRUDBase
from app.packages.drive.models.entry import FileSystemEntry


class CRUDEntry(CRUDBase[FileSystemEntry]):
    def owned(self, db: Session, *, owner_id: str, include_deleted: bool = False) -> Query:
        return self.query(db, include_deleted=include_deleted).filter(FileSystemEntry.owner_id == owner_id)

    def get_owned(
        self, db: Session, id: str, *, owner_id: str, include_deleted: bool = False
    ) -> FileSystemEntry | None:
        return (
            self.owned(db, owner_id=owner_id, include_deleted=include_deleted)
            .filter(FileSystemEntry.id == id)
            .first()
        )

    def list_children(
        self,
        db: Session,
        *,
        owner_id: str,
        parent_id: Optional[str],
        include_deleted: bool = False,
    ) -> list[FileSystemEntry]:
        q = self.owned(db, owner_id=owner_id, include_deleted=include_deleted)
        if parent_id is None:
            q = q.filter(FileSystemEntry.parent_id.is_(None))
        else:
            q = q.filter(FileSystemEntry.parent_id == parent_id)
        return q.order_by(FileSystemEntry.name.asc(), FileSystemEntry.id.asc()).all()

    def live_sibling_named(
        self,
        db: Session,
        *,
        owner_id: str,
        parent_id: Optional[str],
        name: str,
        exclude_id: Optional[str] = None,
    ) -> FileSystemEntry | None:
        q = self.owned(db, owner_id=owner_id).filter(FileSystemEntry.name == name)
        if parent_id is None:
            q = q.filter(FileSystemEntry.parent_id.is_(None))
        else:
            q = q.filter(FileSystemEntry.parent_id == parent_id)
        if exclude_id is not None:
            q = q.filter(FileSystemEntry.id != exclude_id)
        return q.first()

    def list_starred(self, db: Session, *, owner_id: str) -> list[FileSystemEntry]:
        return (
            self.owned(db, owner_id=owner_id)
            .filter(FileSystemEntry.is_starred.is_(True))
            .order_by(FileSystemEntry.name.asc(), FileSystemEntry.id.asc())
            .all()
        )

    def list_trash(self, db: Session, *, owner_id: str) -> list[FileSystemEntry]:
        """回收站只展示已删除子树的顶层节点：自身已删除，父节点为空或未删除。"""
        parent = aliased(FileSystemEntry)
        return (
            db.query(FileSystemEntry)
            .outerjoin(parent, FileSystemEntry.parent_id == parent.id)
            .filter(FileSystemEntry.owner_id == owner_id)
            .filter(FileSystemEntry.is_deleted.is_(True))
            .filter((parent.id.is_(None)) | (parent.is_deleted.is_(False)))
            .order_by(FileSystemEntry.updated_at.desc(), FileSystemEntry.name.asc())
            .all()
        )


entry_crud = CRUDEntry(FileSystemEntry)
