"""统一的文件系统条目模型（文件与目录合并为一张自引用表）。

存储规则：
- path：以 '/' 开头，由根到当前节点的名称依次拼接，例如 "/Docs/a.pdf"；
- parent_id：为空表示位于根目录，否则指向同一用户的某个目录；
- is_folder：创建后不可变；目录的 size_bytes=0、mime_type="folder"、storage_url=""；
- owner_id：创建后不可变，所有查询都以它为第一过滤条件。
"""

import uuid
from typing import Optional

from sqlalchemy import BigInteger, Boolean, CheckConstraint, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import expression

from app.packages.drive.models.base import Base, SoftDeleteMixin, TimestampMixin


def _new_id() -> str:
    return str(uuid.uuid4())


class FileSystemEntry(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "file_system_entries"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    path: Mapped[str] = mapped_column(Text, nullable=False)
    size_bytes: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    mime_type: Mapped[str] = mapped_column(String(255), nullable=False)
    # 外部对象存储地址，本服务只做透传
    storage_url: Mapped[str] = mapped_column(Text, nullable=False, default="")
    owner_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    parent_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("file_system_entries.id", ondelete="RESTRICT"),
        nullable=True,
        index=True,
    )
    is_folder: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=expression.false()
    )
    is_starred: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=expression.false()
    )

    __table_args__ = (
        Index("ix_file_system_entries_owner_parent", "owner_id", "parent_id"),
        Index("ix_file_system_entries_owner_path", "owner_id", "path"),
        CheckConstraint("size_bytes >= 0", name="size_bytes_non_negative"),
    )

    def __repr__(self) -> str:
        kind = "folder" if self.is_folder else "file"
        return f"<FileSystemEntry {kind} {self.owner_id}:{self.path}>"
