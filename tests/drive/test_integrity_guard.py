"""目录树完整性校验的单元测试。"""

from types import SimpleNamespace

import pytest

from app.packages.drive.core.config import get_settings
from app.packages.drive.core.exceptions import (
    CycleDetected,
    Forbidden,
    InvalidParent,
    InvalidPurge,
    InvalidRestore,
    NameConflict,
)
from app.packages.drive.services import integrity_guard as guard
from app.packages.drive.services.entry_store import entry_store


def _folder(db, owner, name, parent_id=None):
    return entry_store.create(db, owner_id=owner, name=name, is_folder=True, parent_id=parent_id)


def test_check_ownership():
    entry = SimpleNamespace(id="e1", owner_id="u1")
    guard.check_ownership(entry, "u1")
    with pytest.raises(Forbidden):
        guard.check_ownership(entry, "u2")


def test_check_kind_consistency():
    guard.check_kind_consistency(SimpleNamespace(id="d", is_folder=True))
    with pytest.raises(InvalidParent):
        guard.check_kind_consistency(SimpleNamespace(id="f", is_folder=False))


def test_check_reparent(db, owner, other_owner):
    a = _folder(db, owner, "A")
    b = _folder(db, owner, "B", a.id)
    target = _folder(db, owner, "T")
    foreign = _folder(db, other_owner, "X")

    assert guard.check_reparent(db, a.id, None, owner) is None
    assert guard.check_reparent(db, b.id, target.id, owner).id == target.id
    with pytest.raises(CycleDetected):
        guard.check_reparent(db, a.id, a.id, owner)
    with pytest.raises(CycleDetected):
        guard.check_reparent(db, a.id, b.id, owner)
    with pytest.raises(InvalidParent):
        guard.check_reparent(db, a.id, foreign.id, owner)


def test_check_sibling_name(db, owner):
    a = _folder(db, owner, "A")
    guard.check_sibling_name(db, owner, None, "B")
    guard.check_sibling_name(db, owner, None, "A", exclude_id=a.id)
    with pytest.raises(NameConflict):
        guard.check_sibling_name(db, owner, None, "A")


def test_check_restorable(db, owner):
    a = _folder(db, owner, "A")
    b = _folder(db, owner, "B", a.id)
    entry_store.soft_delete(db, a.id, owner)

    guard.check_restorable(db, a)
    with pytest.raises(InvalidRestore):
        guard.check_restorable(db, b)


def test_check_purgeable():
    guard.check_purgeable(SimpleNamespace(id="e", is_deleted=True))
    with pytest.raises(InvalidPurge):
        guard.check_purgeable(SimpleNamespace(id="e", is_deleted=False))


def test_check_depth(monkeypatch):
    monkeypatch.setattr(get_settings(), "max_tree_depth", 4)
    guard.check_depth(4)
    with pytest.raises(InvalidParent):
        guard.check_depth(5, "e")


def test_check_reparent_counts_subtree_height(db, owner, monkeypatch):
    a = _folder(db, owner, "A")
    b = _folder(db, owner, "B", a.id)
    _folder(db, owner, "C", b.id)
    target = _folder(db, owner, "T")
    monkeypatch.setattr(get_settings(), "max_tree_depth", 3)

    assert guard.check_reparent(db, a.id, target.id, owner).id == target.id
    deeper = _folder(db, owner, "U", target.id)
    with pytest.raises(InvalidParent):
        guard.check_reparent(db, a.id, deeper.id, owner)
