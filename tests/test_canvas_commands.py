"""画布命令与撤回栈测试"""

import pytest

from domain.canvas.canvas_commands import (
    AddComponentCommand,
    AddConnectionCommand,
    CommandHistory,
    MoveComponentCommand,
    RemoveComponentCommand,
    RemoveConnectionCommand,
    RotateComponentCommand,
    UpdatePropertiesCommand,
)
from domain.canvas.canvas_state import (
    CanvasSnapshot,
    CanvasState,
    Connection,
    PinRef,
    PlacedComponent,
    normalize_rotation,
)
from domain.canvas.geometry import Point


def place(canvas: CanvasState, history: CommandHistory, instance_id: str, x: float = 0, y: float = 0):
    component = PlacedComponent(instance_id, "res", {"name": "R"}, Point(x, y))
    assert history.execute(AddComponentCommand(component), canvas)


def wire(connection_id: str, source: str, target: str) -> Connection:
    return Connection(connection_id, PinRef(source, "1"), PinRef(target, "2"))


class TestPlacedComponent:
    def test_bounds_swap_when_rotated(self):
        component = PlacedComponent("c1", "res", {"dimensions": {"width": 100, "height": 40}}, Point(0, 0))
        assert (component.bounds.width, component.bounds.height) == (100, 40)
        component.rotation = 270
        assert (component.bounds.width, component.bounds.height) == (40, 100)

    def test_default_size(self):
        component = PlacedComponent("c1", "res")
        assert component.body_size == (80.0, 60.0)

    def test_from_dict_uses_direction_when_rotation_missing(self):
        component = PlacedComponent.from_dict({"id": "c1", "componentId": "res", "direction": "left"})
        assert component.rotation == 270
        assert component.to_dict()["direction"] == "left"

    def test_normalize_rotation(self):
        assert normalize_rotation(-90) == 270
        assert normalize_rotation(450) == 90
        assert normalize_rotation(44) == 0


class TestCommands:
    def test_add_rejects_duplicate_id(self):
        canvas, history = CanvasState(), CommandHistory()
        place(canvas, history, "c1")
        duplicate = PlacedComponent("c1", "res")
        assert not history.execute(AddComponentCommand(duplicate), canvas)
        assert history.undo_count == 1

    def test_remove_takes_connections_and_undo_restores_order(self):
        canvas, history = CanvasState(), CommandHistory()
        for name in ("a", "b", "c"):
            place(canvas, history, name)
        history.execute(AddConnectionCommand(wire("w1", "a", "b")), canvas)
        history.execute(AddConnectionCommand(wire("w2", "b", "c")), canvas)
        history.execute(AddConnectionCommand(wire("w3", "a", "c")), canvas)

        assert history.execute(RemoveComponentCommand("b"), canvas)
        assert [c.instance_id for c in canvas.components] == ["a", "c"]
        assert [c.connection_id for c in canvas.connections] == ["w3"]

        history.undo(canvas)
        assert [c.instance_id for c in canvas.components] == ["a", "b", "c"]
        assert [c.connection_id for c in canvas.connections] == ["w1", "w2", "w3"]

    def test_connection_requires_both_ends(self):
        canvas, history = CanvasState(), CommandHistory()
        place(canvas, history, "a")
        assert not history.execute(AddConnectionCommand(wire("w1", "a", "missing")), canvas)

    def test_remove_connection(self):
        canvas, history = CanvasState(), CommandHistory()
        place(canvas, history, "a")
        place(canvas, history, "b")
        history.execute(AddConnectionCommand(wire("w1", "a", "b")), canvas)
        assert history.execute(RemoveConnectionCommand("w1"), canvas)
        assert canvas.connections == []
        assert not history.execute(RemoveConnectionCommand("w1"), canvas)
        history.undo(canvas)
        assert canvas.find_connection("w1") is not None

    def test_rotate_steps_counter_clockwise(self):
        canvas, history = CanvasState(), CommandHistory()
        place(canvas, history, "a")
        history.execute(RotateComponentCommand("a"), canvas)
        assert canvas.find_component("a").rotation == 270
        history.undo(canvas)
        assert canvas.find_component("a").rotation == 0

    def test_update_properties_merges_and_reverts(self):
        canvas, history = CanvasState(), CommandHistory()
        place(canvas, history, "a")
        canvas.find_component("a").properties = {"value": "1k"}
        history.execute(UpdatePropertiesCommand("a", {"label": "R1"}), canvas)
        assert canvas.find_component("a").properties == {"value": "1k", "label": "R1"}
        history.undo(canvas)
        assert canvas.find_component("a").properties == {"value": "1k"}


class TestHistory:
    def test_moves_in_one_gesture_merge(self):
        canvas, history = CanvasState(), CommandHistory()
        place(canvas, history, "a", 10, 10)
        for step in range(1, 6):
            history.execute(MoveComponentCommand("a", Point(10 + step, 10), gesture_id=7), canvas)
        assert history.undo_count == 2
        assert canvas.find_component("a").position == Point(15, 10)
        history.undo(canvas)
        assert canvas.find_component("a").position == Point(10, 10)

    def test_moves_without_gesture_do_not_merge(self):
        canvas, history = CanvasState(), CommandHistory()
        place(canvas, history, "a")
        history.execute(MoveComponentCommand("a", Point(1, 0)), canvas)
        history.execute(MoveComponentCommand("a", Point(2, 0)), canvas)
        assert history.undo_count == 3

    def test_redo_and_new_command_clears_redo(self):
        canvas, history = CanvasState(), CommandHistory()
        place(canvas, history, "a")
        history.undo(canvas)
        assert canvas.components == []
        assert history.can_redo
        history.redo(canvas)
        assert canvas.find_component("a") is not None

        history.undo(canvas)
        place(canvas, history, "b")
        assert not history.can_redo

    def test_max_steps(self):
        canvas, history = CanvasState(), CommandHistory(max_steps=3)
        for index in range(5):
            place(canvas, history, f"c{index}")
        assert history.undo_count == 3
        while history.undo(canvas) is not None:
            pass
        assert [c.instance_id for c in canvas.components] == ["c0", "c1"]

    def test_empty_stacks(self):
        canvas, history = CanvasState(), CommandHistory()
        assert history.undo(canvas) is None
        assert history.redo(canvas) is None
        assert history.state().to_dict() == {
            "can_undo": False,
            "can_redo": False,
            "undo_description": "",
            "redo_description": "",
        }


class TestSnapshots:
    def test_snapshot_is_deep_copy(self):
        canvas, history = CanvasState(), CommandHistory()
        place(canvas, history, "a")
        snapshot = canvas.take_snapshot()
        canvas.find_component("a").position = Point(99, 99)
        assert snapshot.components[0].position == Point(0, 0)

    def test_load_snapshot_does_not_alias(self):
        canvas = CanvasState()
        snapshot = CanvasSnapshot(components=[PlacedComponent("a", "res")])
        canvas.load_snapshot(snapshot)
        canvas.components[0].position = Point(5, 5)
        assert snapshot.components[0].position == Point(0, 0)

    def test_from_dict_default_viewport(self):
        canvas = CanvasState(800, 400)
        snapshot = CanvasSnapshot.from_dict({"components": []}, canvas.default_viewport())
        assert snapshot.viewport.offset_y == 350

    def test_component_at_prefers_topmost(self):
        canvas, history = CanvasState(), CommandHistory()
        place(canvas, history, "below", 0, 0)
        place(canvas, history, "above", 10, 0)
        assert canvas.component_at(Point(5, 0)).instance_id == "above"
        assert canvas.component_at(Point(500, 500)) is None

    def test_connection_round_trip_keeps_extra_fields(self):
        data = {
            "id": "w1",
            "source": {"componentId": "a", "pinName": "1", "side": "side2"},
            "target": {"componentId": "b", "pinName": "2"},
            "path": [[0, 0], [10, 0]],
        }
        assert Connection.from_dict(data).to_dict() == data

    def test_pin_ref_prefers_instance_id(self):
        ref = PinRef.from_dict({"instanceId": "r1", "componentId": "res", "pinName": "A"})
        assert ref.instance_id == "r1"
        assert "componentId" not in ref.extra
        assert PinRef.from_dict({"componentId": "r2", "pinName": "A"}).instance_id == "r2"

    def test_export_format_component(self):
        component = PlacedComponent.from_dict({
            "instanceId": "r1",
            "componentFile": "res.json",
            "position": [10, 20],
            "orientation": "down",
        })
        assert component.instance_id == "r1"
        assert component.component_id == "res"
        assert component.position == Point(10, 20)
        assert component.rotation == 180

    def test_malformed_entries_raise_value_error(self):
        for bad in ("oops", {"position": "abc"}, {"data": [1, 2]}):
            with pytest.raises(ValueError):
                PlacedComponent.from_dict(bad)
        with pytest.raises(ValueError):
            Connection.from_dict({"source": "a", "target": {}})
