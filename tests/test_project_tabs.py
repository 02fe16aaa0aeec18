"""项目标签栏测试"""

import pytest

from presentation.project_tabs import ProjectTabBar
from resources.theme import TAB_MODIFIED_MARK


@pytest.fixture
def tabs(qapp, store, event_bus):
    bar = ProjectTabBar(store, event_bus=event_bus)
    yield bar
    bar.unsubscribe_events()
    bar.deleteLater()


def test_tabs_follow_store(tabs, store):
    a = store.create_project("A")
    b = store.create_project("B")
    assert tabs.count() == 2
    assert tabs.currentIndex() == tabs.index_of(b.id)
    store.switch_to(a.id)
    assert tabs.currentIndex() == tabs.index_of(a.id)


def test_selecting_tab_switches_project(tabs, store):
    a = store.create_project("A")
    store.create_project("B")
    tabs.setCurrentIndex(tabs.index_of(a.id))
    assert store.active_project_id == a.id


def test_modified_mark(tabs, store):
    project = store.create_project("A")
    store.mark_modified()
    assert tabs.tabText(0) == f"A {TAB_MODIFIED_MARK}"
    store.mark_saved(path="/tmp/a")
    assert tabs.tabText(0) == "A"
    assert tabs.tabToolTip(0) == "/tmp/a"
    store.rename_project(project.id, "Renamed")
    assert tabs.tabText(0).startswith("Renamed")


def test_close_unmodified(tabs, store):
    store.create_project("A")
    store.create_project("B")
    tabs.request_close(1)
    assert tabs.count() == 1
    assert [p.name for p in store.projects] == ["A"]
    assert tabs.currentIndex() == 0


def test_close_modified_declined(tabs, store, monkeypatch):
    store.create_project("A")
    store.mark_modified()
    monkeypatch.setattr(tabs, "confirm_close", lambda project: False)
    tabs.request_close(0)
    assert tabs.count() == 1
    assert len(store.projects) == 1


def test_close_modified_confirmed(tabs, store, monkeypatch):
    store.create_project("A")
    store.mark_modified()
    monkeypatch.setattr(tabs, "confirm_close", lambda project: True)
    tabs.request_close(0)
    assert tabs.count() == 0
    assert store.projects == []


def test_sync_from_store(qapp, store, event_bus):
    store.create_project("A")
    store.create_project("B")
    bar = ProjectTabBar(store, event_bus=event_bus)
    try:
        assert [bar.tabText(i) for i in range(bar.count())] == ["A", "B"]
        assert bar.currentIndex() == 1
    finally:
        bar.unsubscribe_events()
