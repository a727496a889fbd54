"""ORM 模型集合。"""

from app.packages.drive.models.base import Base
from app.packages.drive.models.entry import FileSystemEntry

__all__ = ["Base", "FileSystemEntry"]
