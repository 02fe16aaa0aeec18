"""电路画布视图测试"""

import json

import pytest
from PyQt6.QtCore import QByteArray, QEvent, QMimeData, QPoint, QPointF, Qt
from PyQt6.QtGui import QDropEvent, QMouseEvent, QWheelEvent
from PyQt6.QtTest import QTest

from domain.canvas.canvas_state import PinRef
from domain.canvas.geometry import Point
from presentation.canvas.canvas_view import COMPONENT_MIME_TYPE, CircuitCanvasView
from tests.helpers import make_definition


def mouse(kind, x, y, buttons=Qt.MouseButton.LeftButton):
    position = QPointF(x, y)
    return QMouseEvent(kind, position, position, Qt.MouseButton.LeftButton,
                       buttons, Qt.KeyboardModifier.NoModifier)


def wheel(x, y, delta):
    position = QPointF(x, y)
    return QWheelEvent(position, position, QPoint(0, 0), QPoint(0, delta),
                       Qt.MouseButton.NoButton, Qt.KeyboardModifier.NoModifier,
                       Qt.ScrollPhase.NoScrollPhase, False)


@pytest.fixture
def view(qapp, canvas, store, editor):
    widget = CircuitCanvasView(canvas, editor)
    widget.resize(800, 600)
    store.create_project()
    yield widget
    widget.close()
    widget.deleteLater()


def test_surface_ready_once(view):
    fired = []
    view.surface_ready.connect(lambda: fired.append(1))
    view.show()
    view.hide()
    view.show()
    assert fired == [1]
    assert view.is_ready


def test_wheel_zoom_keeps_anchor(view, canvas):
    before = canvas.transform.screen_to_world(Point(300, 200))
    changes = []
    view.viewport_changed.connect(changes.append)
    view.wheelEvent(wheel(300, 200, 120))
    after = canvas.transform.screen_to_world(Point(300, 200))
    assert canvas.transform.scale == pytest.approx(1.1)
    assert (after.x, after.y) == (pytest.approx(before.x), pytest.approx(before.y))
    assert changes[-1]["scale"] == pytest.approx(1.1)


def test_drag_on_blank_pans(view, canvas):
    view.mousePressEvent(mouse(QEvent.Type.MouseButtonPress, 400, 300))
    view.mouseMoveEvent(mouse(QEvent.Type.MouseMove, 420, 290))
    view.mouseReleaseEvent(mouse(QEvent.Type.MouseButtonRelease, 420, 290))
    assert canvas.transform.offset == Point(70, 540)


def test_drag_component_moves_with_single_undo_step(view, canvas, store, editor):
    instance_id = editor.add_component(make_definition(), Point(100, -100))
    screen = canvas.transform.world_to_screen(Point(100, -100))

    view.mousePressEvent(mouse(QEvent.Type.MouseButtonPress, screen.x, screen.y))
    for step in range(1, 6):
        view.mouseMoveEvent(mouse(QEvent.Type.MouseMove, screen.x + step * 5, screen.y))
    view.mouseReleaseEvent(mouse(QEvent.Type.MouseButtonRelease, screen.x + 25, screen.y))

    assert canvas.selected_instance_id == instance_id
    assert canvas.find_component(instance_id).position == Point(125, -100)
    assert store.history_for().undo_count == 2
    editor.undo()
    assert canvas.find_component(instance_id).position == Point(100, -100)


def test_keyboard_shortcuts(view, canvas, editor):
    view.show()
    instance_id = editor.add_component(make_definition(), Point(0, 0))
    editor.select(instance_id)

    QTest.keyClick(view, Qt.Key.Key_R)
    assert canvas.find_component(instance_id).rotation == 270
    QTest.keyClick(view, Qt.Key.Key_Z, Qt.KeyboardModifier.ControlModifier)
    assert canvas.find_component(instance_id).rotation == 0
    QTest.keyClick(view, Qt.Key.Key_Y, Qt.KeyboardModifier.ControlModifier)
    assert canvas.find_component(instance_id).rotation == 270
    QTest.keyClick(view, Qt.Key.Key_Delete)
    assert canvas.find_component(instance_id) is None


def test_drop_places_component(view, canvas):
    mime = QMimeData()
    mime.setData(COMPONENT_MIME_TYPE, QByteArray(json.dumps(make_definition()).encode("utf-8")))
    event = QDropEvent(QPointF(150, 450), Qt.DropAction.CopyAction, mime,
                       Qt.MouseButton.NoButton, Qt.KeyboardModifier.NoModifier)
    view.dropEvent(event)
    assert len(canvas.components) == 1
    assert canvas.components[0].position == Point(100, -100)


def test_reset_view(view, canvas):
    canvas.transform.pan(33, 33)
    view.reset_view()
    assert canvas.transform.offset == Point(50, 550)


def click(view, kind, canvas, world):
    screen = canvas.transform.world_to_screen(world)
    handler = {
        QEvent.Type.MouseButtonPress: view.mousePressEvent,
        QEvent.Type.MouseMove: view.mouseMoveEvent,
        QEvent.Type.MouseButtonRelease: view.mouseReleaseEvent,
    }[kind]
    handler(mouse(kind, screen.x, screen.y))


def test_drag_from_selected_pin_creates_wire(view, canvas, editor):
    a = editor.add_component(make_definition(), Point(0, 0))
    b = editor.add_component(make_definition(), Point(240, 0))
    editor.select(a)

    click(view, QEvent.Type.MouseButtonPress, canvas, Point(42, 2))
    assert view.is_wiring
    click(view, QEvent.Type.MouseMove, canvas, Point(120, 10))
    assert canvas.find_component(a).position == Point(0, 0)
    click(view, QEvent.Type.MouseButtonRelease, canvas, Point(198, -1))

    assert not view.is_wiring
    assert len(canvas.connections) == 1
    wire = canvas.connections[0]
    assert (wire.source.instance_id, wire.source.pin_name) == (a, "A")
    assert (wire.target.instance_id, wire.target.pin_name) == (b, "K")


def test_wire_released_off_pin_is_discarded(view, canvas, editor):
    a = editor.add_component(make_definition(), Point(0, 0))
    editor.add_component(make_definition(), Point(240, 0))
    editor.select(a)

    click(view, QEvent.Type.MouseButtonPress, canvas, Point(40, 0))
    click(view, QEvent.Type.MouseButtonRelease, canvas, Point(120, 200))
    assert not view.is_wiring
    assert canvas.connections == []


def test_click_selects_wire_and_delete_removes_it(view, canvas, editor):
    view.show()
    a = editor.add_component(make_definition(), Point(0, 0))
    b = editor.add_component(make_definition(), Point(240, 0))
    wire_id = editor.connect(PinRef(a, "A"), PinRef(b, "K"))
    editor.select(None)

    click(view, QEvent.Type.MouseButtonPress, canvas, Point(120, 3))
    click(view, QEvent.Type.MouseButtonRelease, canvas, Point(120, 3))
    assert canvas.selected_connection_id == wire_id
    assert canvas.selected_instance_id is None

    QTest.keyClick(view, Qt.Key.Key_Delete)
    assert canvas.connections == []
    editor.undo()
    assert canvas.find_connection(wire_id) is not None
