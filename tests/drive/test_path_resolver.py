"""路径解析与遍历的单元测试。"""

from types import SimpleNamespace

import pytest

from app.packages.drive.core.config import get_settings
from app.packages.drive.core.exceptions import CycleDetected, InvalidName, NotFound
from app.packages.drive.services.entry_store import entry_store
from app.packages.drive.services.path_resolver import (
    ancestors_of,
    descendants_of,
    join_path,
    resolve_path,
    subtree_height,
    validate_name,
)


def _chain(db, owner, *names):
    parent_id = None
    created = []
    for name in names:
        entry = entry_store.create(db, owner_id=owner, name=name, is_folder=True, parent_id=parent_id)
        created.append(entry)
        parent_id = entry.id
    return created


def test_resolve_path_is_pure_concatenation():
    ancestors = [SimpleNamespace(name="Docs"), SimpleNamespace(name="2024")]
    assert resolve_path("a.pdf", ancestors) == "/Docs/2024/a.pdf"
    assert resolve_path("a.pdf", []) == "/a.pdf"


def test_join_path():
    assert join_path(None, "a") == "/a"
    assert join_path("/Docs", "a") == "/Docs/a"


@pytest.mark.parametrize("raw", ["", "   ", ".", "..", "a/b", "a\\b", "tab\tname", "x" * 256])
def test_validate_name_rejects(raw):
    with pytest.raises(InvalidName):
        validate_name(raw)


def test_validate_name_strips():
    assert validate_name("  report.pdf ") == "report.pdf"


def test_ancestors_root_first(db, owner):
    a, b, c = _chain(db, owner, "A", "B", "C")
    assert [e.id for e in ancestors_of(db, c.id)] == [a.id, b.id]
    assert ancestors_of(db, a.id) == []


def test_ancestors_of_missing_entry(db):
    with pytest.raises(NotFound):
        ancestors_of(db, "missing")


def test_ancestors_detects_corrupted_cycle(db, owner):
    a, b = _chain(db, owner, "A", "B")
    # 绕过服务层直接写入环，模拟数据损坏
    a.parent_id = b.id
    db.commit()

    with pytest.raises(CycleDetected):
        ancestors_of(db, b.id)
    with pytest.raises(CycleDetected):
        descendants_of(db, a.id)


def test_ancestors_bounded_depth(db, owner, monkeypatch):
    *_, leaf = _chain(db, owner, "L1", "L2", "L3", "L4")
    monkeypatch.setattr(get_settings(), "max_tree_depth", 2)

    with pytest.raises(CycleDetected):
        ancestors_of(db, leaf.id)


def test_descendants_breadth_first(db, owner):
    a, b, c = _chain(db, owner, "A", "B", "C")
    sibling = entry_store.create(db, owner_id=owner, name="S", is_folder=False, parent_id=a.id)

    ids = [e.id for e in descendants_of(db, a.id)]
    assert set(ids[:2]) == {b.id, sibling.id}
    assert ids[2:] == [c.id]


def test_subtree_height(db, owner):
    top, mid, leaf = _chain(db, owner, "H1", "H2", "H3")
    entry_store.create(db, owner_id=owner, name="side.txt", is_folder=False, parent_id=top.id)

    assert subtree_height(db, top.id) == 2
    assert subtree_height(db, mid.id) == 1
    assert subtree_height(db, leaf.id) == 0
