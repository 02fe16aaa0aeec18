"""元件设计器控制器测试"""

import asyncio

import pytest

from domain.canvas.geometry import Point, Side
from domain.designer.designer_shape import PinType
from infrastructure.config.settings import CONFIG_HIT_THRESHOLD
from infrastructure.persistence.project_repository import ProjectRepository
from presentation.designer.designer_canvas import DesignerCanvas
from presentation.designer.designer_controller import DesignerController
from shared.event_types import (
    EVENT_DESIGNER_SHAPE_CHANGED,
    EVENT_DESIGNER_SIDE_ACTIVATED,
)
from tests.helpers import make_definition


@pytest.fixture
def surface(qapp):
    widget = DesignerCanvas()
    widget.resize(800, 600)
    yield widget
    widget.close()
    widget.deleteLater()


@pytest.fixture
def controller(tmp_path):
    return DesignerController(repository=ProjectRepository(component_dir=tmp_path))


def test_shape_centered_on_default_surface(controller):
    rect = controller.shape_rect()
    assert (rect.x, rect.y, rect.width, rect.height) == (340, 260, 120, 80)


def test_clicks_ignored_until_surface_ready(controller, surface):
    assert controller.handle_click(400, 260) is None
    controller.attach_surface(surface)
    assert not controller.is_active
    assert controller.handle_click(400, 260) is None

    surface.show()
    assert controller.is_active
    assert controller.handle_click(400, 260) is Side.TOP


def test_missing_surface_disables(controller):
    assert controller.attach_surface(None) is False
    assert not controller.is_active


def test_surface_signal_drives_selection(controller, surface, recorder):
    recorder.listen(EVENT_DESIGNER_SIDE_ACTIVATED)
    surface.show()
    controller.attach_surface(surface)
    surface.clicked.emit(460.0, 300.0)
    assert controller.selected_side is Side.RIGHT
    assert recorder.of_type(EVENT_DESIGNER_SIDE_ACTIVATED)[0]["side"] == "side2"


def test_hit_test_stays_in_screen_space_when_zoomed(controller, surface):
    surface.show()
    controller.attach_surface(surface)
    controller.handle_wheel(0, 0, 120)
    rect = controller.screen_shape_rect()
    assert rect.width == pytest.approx(132)
    assert controller.handle_click(rect.x + 30, rect.bottom + 9) is Side.BOTTOM
    assert controller.handle_click(rect.x + 30, rect.bottom + 11) is None


def test_threshold_from_config(config_manager):
    config_manager.set(CONFIG_HIT_THRESHOLD, 4)
    assert DesignerController().interaction.threshold == 4


def test_wheel_and_reset(controller):
    controller.handle_wheel(100, 100, -120)
    assert controller.transform.scale == pytest.approx(0.9)
    anchor = controller.transform.screen_to_world(Point(100, 100))
    assert (anchor.x, anchor.y) == (pytest.approx(100), pytest.approx(100))
    controller.reset_view()
    assert controller.transform.snapshot().to_dict() == {"scale": 1.0, "offsetX": 0.0, "offsetY": 0.0}


def test_wheel_without_delta_keeps_scale(controller):
    before = controller.transform.snapshot().to_dict()
    controller.handle_wheel(100, 100, 0)
    assert controller.transform.snapshot().to_dict() == before


def test_drag_pans(controller):
    controller.handle_drag(15, -5)
    assert controller.transform.offset == Point(15, -5)


def test_pins_grow_shape_and_publish(controller, recorder):
    recorder.listen(EVENT_DESIGNER_SHAPE_CHANGED)
    for index in range(6):
        assert controller.add_pin(Side.TOP, f"P{index}", PinType.DIGITAL_IO)[0]
    assert controller.shape.width == 160
    assert recorder.of_type(EVENT_DESIGNER_SHAPE_CHANGED)[-1]["total_pins"] == 6

    ok, _ = controller.add_pin(Side.LEFT, "P0", PinType.POWER)
    assert not ok
    assert controller.remove_pin(Side.TOP, 1)
    assert controller.shape.total_pins == 5


def test_reset_designer_clears_selection(controller, surface):
    surface.show()
    controller.attach_surface(surface)
    controller.handle_click(400, 260)
    controller.add_pin(Side.TOP, "A", PinType.POWER)
    controller.reset_designer()
    assert controller.selected_side is None
    assert controller.shape.total_pins == 0


def test_load_definition(controller):
    assert controller.load_definition(make_definition()) == (True, "")
    assert controller.shape.name == "LED"
    ok, message = controller.load_definition(make_definition(pins={"side1": [{"pinName": "X", "type": "?"}]}))
    assert not ok
    assert message
    assert controller.shape.name == "LED"


def test_save_requires_valid_shape(controller):
    result = asyncio.run(controller.save_component())
    assert not result.success
    assert "名称" in result.error_message


def test_save_and_open_component(controller, tmp_path):
    controller.set_info(name="Button", category="input")
    controller.add_pin(Side.LEFT, "IN", PinType.DIGITAL_IO)
    path = tmp_path / "button.json"
    assert asyncio.run(controller.save_component(str(path))).success

    controller.reset_designer()
    result = asyncio.run(controller.open_component(str(path)))
    assert result.success
    assert controller.shape.name == "Button"
    assert controller.shape.category == "input"
    assert [p.name for p in controller.shape.pins_on(Side.LEFT)] == ["IN"]


def test_save_to_library_by_default(controller, tmp_path):
    controller.set_info(name="My Part")
    controller.add_pin(Side.TOP, "A", PinType.POWER)
    assert asyncio.run(controller.save_component()).success
    assert (tmp_path / "my-part.json").exists()


def test_render_into_widget(controller, surface, qapp):
    surface.show()
    controller.attach_surface(surface)
    controller.add_pin(Side.TOP, "A", PinType.POWER)
    controller.handle_click(400, 260)
    image = surface.grab().toImage()
    assert not image.isNull()
