"""项目状态仓库测试"""

from application.project_state_store import ProjectStateStore
from domain.canvas.canvas_state import PlacedComponent
from domain.canvas.geometry import Point
from shared.event_types import (
    EVENT_PROJECT_CLOSED,
    EVENT_PROJECT_CREATED,
    EVENT_PROJECT_MODIFIED,
    EVENT_PROJECT_RENAMED,
    EVENT_PROJECT_SAVED,
    EVENT_PROJECT_SWITCHED,
)


def add_to_canvas(store: ProjectStateStore, instance_id: str, x: float = 0.0):
    store.canvas.components.append(PlacedComponent(instance_id, "res", position=Point(x, 0)))


class TestCreate:
    def test_create_activates_with_default_viewport(self, store):
        project = store.create_project()
        assert project.id == 1
        assert store.active_project_id == 1
        assert project.name.endswith("1")
        assert store.viewport.to_dict() == {"scale": 1.0, "offsetX": 50.0, "offsetY": 550.0}

    def test_ids_are_monotonic(self, store):
        first = store.create_project()
        store.close(first.id)
        assert store.create_project().id == 2

    def test_create_publishes_switched_then_created(self, store, recorder):
        recorder.listen(EVENT_PROJECT_CREATED, EVENT_PROJECT_SWITCHED)
        store.create_project("Amp")
        assert recorder.types() == [EVENT_PROJECT_SWITCHED, EVENT_PROJECT_CREATED]
        assert recorder.of_type(EVENT_PROJECT_CREATED)[0]["name"] == "Amp"

    def test_new_project_starts_with_empty_canvas(self, store):
        store.create_project()
        add_to_canvas(store, "a")
        store.create_project()
        assert store.canvas.components == []

    def test_add_existing_project(self, store):
        store.add_existing_project({
            "projectName": "Loaded",
            "components": [{"id": "r1", "componentId": "res", "position": {"x": 3, "y": 4}}],
            "viewport": {"scale": 2, "offsetX": 1, "offsetY": 2},
        }, path="/tmp/loaded")
        project = store.active_project
        assert project.name == "Loaded"
        assert project.is_saved and not project.is_modified
        assert project.path == "/tmp/loaded"
        assert store.canvas.find_component("r1").position == Point(3, 4)
        assert store.viewport.scale == 2

    def test_add_existing_project_without_viewport_uses_default(self, store):
        store.add_existing_project({"components": []})
        assert store.viewport.offset_y == 550


class TestSwitch:
    def test_projects_do_not_alias(self, store):
        a = store.create_project("A")
        add_to_canvas(store, "a1")
        store.canvas.transform.pan(10, 0)
        b = store.create_project("B")
        add_to_canvas(store, "b1")

        store.switch_to(a.id)
        assert [c.instance_id for c in store.canvas.components] == ["a1"]
        assert store.viewport.offset_x == 60

        store.canvas.components[0].position = Point(77, 0)
        store.switch_to(b.id)
        assert [c.instance_id for c in store.canvas.components] == ["b1"]
        assert store.viewport.offset_x == 50

        store.switch_to(a.id)
        assert store.canvas.components[0].position == Point(77, 0)

    def test_snapshot_for_reads_live_canvas_for_active(self, store):
        a = store.create_project()
        add_to_canvas(store, "a1")
        assert [c.instance_id for c in store.snapshot_for(a.id).components] == ["a1"]
        assert store.snapshot_for(999) is None

    def test_switch_to_active_is_noop(self, store, recorder):
        project = store.create_project()
        recorder.listen(EVENT_PROJECT_SWITCHED)
        assert store.switch_to(project.id) is False
        assert recorder.events == []

    def test_switch_to_unknown(self, store):
        store.create_project()
        assert store.switch_to(42) is False
        assert store.active_project_id == 1

    def test_switch_redraws(self, canvas):
        redraws = []
        store = ProjectStateStore(canvas, request_redraw=lambda: redraws.append(1))
        a = store.create_project()
        store.create_project()
        redraws.clear()
        store.switch_to(a.id)
        assert redraws == [1]


class TestClose:
    def test_close_unmodified(self, store, recorder):
        project = store.create_project()
        recorder.listen(EVENT_PROJECT_CLOSED)
        assert store.close(project.id)
        assert store.projects == []
        assert store.active_project_id is None
        assert recorder.of_type(EVENT_PROJECT_CLOSED) == [{"project_id": 1, "active_id": None}]

    def test_close_last_project_clears_canvas(self, store):
        project = store.create_project()
        add_to_canvas(store, "a")
        store.canvas.transform.pan(100, 100)
        store.close(project.id)
        assert store.canvas.components == []
        assert store.viewport.offset_x == 50

    def test_modified_project_without_confirmation_stays_open(self, store):
        project = store.create_project()
        store.mark_modified()
        assert store.close(project.id) is False
        assert store.get_project(project.id) is project

    def test_cancelled_confirmation_changes_nothing(self, canvas, recorder):
        asked = []

        def decline(project):
            asked.append(project.id)
            return False

        store = ProjectStateStore(canvas, confirm_close=decline)
        project = store.create_project()
        add_to_canvas(store, "a")
        store.mark_modified()
        recorder.listen(EVENT_PROJECT_CLOSED)
        assert store.close(project.id) is False
        assert asked == [project.id]
        assert store.active_project_id == project.id
        assert [c.instance_id for c in store.canvas.components] == ["a"]
        assert recorder.events == []

    def test_confirmed_close(self, canvas):
        store = ProjectStateStore(canvas, confirm_close=lambda project: True)
        project = store.create_project()
        store.mark_modified()
        assert store.close(project.id) is True

    def test_force_skips_confirmation(self, store):
        project = store.create_project()
        store.mark_modified()
        assert store.close(project.id, force=True) is True

    def test_closing_active_promotes_first_remaining(self, store, recorder):
        a = store.create_project("A")
        add_to_canvas(store, "a1")
        store.create_project("B")
        c = store.create_project("C")
        recorder.listen(EVENT_PROJECT_CLOSED, EVENT_PROJECT_SWITCHED)

        store.close(c.id)
        assert store.active_project_id == a.id
        assert [comp.instance_id for comp in store.canvas.components] == ["a1"]
        assert recorder.types() == [EVENT_PROJECT_CLOSED, EVENT_PROJECT_SWITCHED]

    def test_closing_inactive_keeps_active(self, store):
        a = store.create_project("A")
        b = store.create_project("B")
        add_to_canvas(store, "b1")
        store.close(a.id)
        assert store.active_project_id == b.id
        assert [c.instance_id for c in store.canvas.components] == ["b1"]

    def test_close_unknown(self, store):
        assert store.close(123) is False


class TestFlags:
    def test_mark_modified_publishes_once(self, store, recorder):
        project = store.create_project()
        recorder.listen(EVENT_PROJECT_MODIFIED)
        store.mark_modified()
        store.mark_modified()
        assert len(recorder.of_type(EVENT_PROJECT_MODIFIED)) == 1
        assert project.revision == 2
        assert store.is_modified()
        assert store.has_unsaved_projects()

    def test_mark_saved(self, store, recorder):
        project = store.create_project()
        store.mark_modified()
        recorder.listen(EVENT_PROJECT_SAVED)
        store.mark_saved(path="/tmp/p")
        assert not project.is_modified
        assert project.is_saved
        assert project.path == "/tmp/p"
        assert recorder.of_type(EVENT_PROJECT_SAVED)[0]["is_modified"] is False

    def test_stale_revision_keeps_modified(self, store):
        project = store.create_project()
        store.mark_modified()
        revision = project.revision
        store.mark_modified()
        store.mark_saved(project.id, revision=revision)
        assert project.is_saved
        assert project.is_modified

    def test_flags_for_unknown_project(self, store):
        assert store.is_modified(5) is False
        assert store.is_saved(5) is False
        assert store.mark_modified(5) is False
        assert store.mark_saved(5) is False

    def test_rename(self, store, recorder):
        project = store.create_project()
        recorder.listen(EVENT_PROJECT_RENAMED)
        assert store.rename_project(project.id, "  Filter ")
        assert project.name == "Filter"
        assert project.is_modified
        assert store.rename_project(project.id, "Filter") is False
        assert store.rename_project(project.id, "   ") is False
        assert len(recorder.of_type(EVENT_PROJECT_RENAMED)) == 1

    def test_each_project_has_own_history(self, store):
        a = store.create_project()
        b = store.create_project()
        assert store.history_for(a.id) is not store.history_for(b.id)
