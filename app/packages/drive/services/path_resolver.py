"""路径解析：根据 parent_id 链推导条目的物化路径。

规则：
- path 以 '/' 开头，由根到当前节点的名称依次以 '/' 拼接；根目录本身不入库；
- 路径完全由祖先链推导，本模块不持有任何状态；
- 所有遍历都使用显式工作队列，并以已访问集合与最大深度防御脏数据造成的环。
"""

from __future__ import annotations

from collections import deque
from typing import Iterable, Optional, Sequence

from sqlalchemy.orm import Session

from app.packages.drive.core.config import get_settings
from app.packages.drive.core.constants import MAX_NAME_LENGTH, PATH_SEPARATOR
from app.packages.drive.core.exceptions import CycleDetected, InternalError, InvalidName, NotFound
from app.packages.drive.core.logger import logger
from app.packages.drive.core.timezone import now as tz_now
from app.packages.drive.models.entry import FileSystemEntry


def validate_name(name: Optional[str]) -> str:
    """校验并规范化条目名称，返回去除首尾空白后的名称。"""
    s = (name or "").strip()
    if not s:
        raise InvalidName("名称不能为空")
    if s in {".", ".."}:
        raise InvalidName("名称不能为 '.' 或 '..'")
    if PATH_SEPARATOR in s or "\\" in s:
        raise InvalidName("名称不能包含路径分隔符")
    if any(ord(ch) < 32 or ord(ch) == 127 for ch in s):
        raise InvalidName("名称不能包含控制字符")
    if len(s) > MAX_NAME_LENGTH:
        raise InvalidName(f"名称长度不能超过 {MAX_NAME_LENGTH} 个字符")
    return s


def resolve_path(entry_name: str, ancestors: Iterable[FileSystemEntry]) -> str:
    names = [a.name for a in ancestors]
    names.append(entry_name)
    return PATH_SEPARATOR + PATH_SEPARATOR.join(names)


def join_path(parent_path: Optional[str], name: str) -> str:
    if not parent_path:
        return PATH_SEPARATOR + name
    return parent_path.rstrip(PATH_SEPARATOR) + PATH_SEPARATOR + name


def _max_depth() -> int:
    return get_settings().max_tree_depth


def ancestors_of(db: Session, entry_id: str) -> list[FileSystemEntry]:
    """返回 ``entry_id`` 的祖先链（根在前，不含自身）。

    沿 parent_id 向上遍历直到根；若重复访问同一 ID 或深度超过
    ``MAX_TREE_DEPTH``，抛出 ``CycleDetected``。
    """
    start = db.get(FileSystemEntry, entry_id)
    if start is None:
        raise NotFound(entry_id=entry_id)

    max_depth = _max_depth()
    seen = {start.id}
    chain: list[FileSystemEntry] = []
    parent_id = start.parent_id
    while parent_id is not None:
        if parent_id in seen:
            logger.error("entry tree cycle detected at %s while walking up from %s", parent_id, entry_id)
            raise CycleDetected("目录结构存在循环引用", entry_id=entry_id)
        if len(chain) >= max_depth:
            logger.error("entry tree deeper than %s above %s", max_depth, entry_id)
            raise CycleDetected("目录层级过深", entry_id=entry_id)
        parent = db.get(FileSystemEntry, parent_id)
        if parent is None:
            # parent_id 指向不存在的行，说明数据已损坏
            logger.error("entry %s references missing parent %s", entry_id, parent_id)
            raise InternalError(entry_id=entry_id)
        seen.add(parent.id)
        chain.append(parent)
        parent_id = parent.parent_id
    chain.reverse()
    return chain


def descendants_of(db: Session, entry_id: str) -> list[FileSystemEntry]:
    """按广度优先顺序返回全部后代（含已删除的），不含自身。"""
    seen = {entry_id}
    result: list[FileSystemEntry] = []
    queue: deque[str] = deque([entry_id])
    while queue:
        current = queue.popleft()
        children = db.query(FileSystemEntry).filter(FileSystemEntry.parent_id == current).all()
        for child in children:
            if child.id in seen:
                logger.error("entry tree cycle detected at %s below %s", child.id, entry_id)
                raise CycleDetected("目录结构存在循环引用", entry_id=entry_id)
            seen.add(child.id)
            result.append(child)
            queue.append(child.id)
    return result


def subtree_height(db: Session, entry_id: str) -> int:
    """子树高度：叶子为 0，每多一层后代加 1。"""
    levels = {entry_id: 0}
    for node in descendants_of(db, entry_id):
        levels[node.id] = levels[node.parent_id] + 1
    return max(levels.values())


def repath_subtree(
    db: Session,
    root: FileSystemEntry,
    *,
    ancestors: Optional[Sequence[FileSystemEntry]] = None,
) -> int:
    """重新计算 ``root`` 及其全部后代的 path，返回被更新的行数。

    ``root`` 的路径由祖先链推导；后代的路径依次由父节点的新路径拼接。
    """
    if ancestors is None:
        ancestors = ancestors_of(db, root.id)
    stamp = tz_now()
    root.path = resolve_path(root.name, ancestors)
    root.updated_at = stamp
    updated = 1

    paths = {root.id: root.path}
    for node in descendants_of(db, root.id):
        new_path = join_path(paths[node.parent_id], node.name)
        paths[node.id] = new_path
        if node.path != new_path:
            node.path = new_path
            node.updated_at = stamp
            updated += 1
    db.flush()
    return updated
