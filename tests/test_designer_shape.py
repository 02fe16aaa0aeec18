"""元件定义与引脚布局测试"""

import pytest

from domain.canvas.canvas_state import PlacedComponent
from domain.canvas.geometry import Point, Rect, Side
from domain.designer.designer_shape import (
    DesignerShape,
    Pin,
    PinType,
    clamp_dimension,
    slugify_component_id,
)
from domain.designer.pin_layout import (
    PinLayoutCalculator,
    fit_shape_to_pins,
    pin_box,
    placed_pin_positions,
    required_length,
    required_size,
    rotate_about,
)
from tests.helpers import make_definition


class TestDesignerShape:
    def test_add_pin_numbers_in_order(self):
        shape = DesignerShape(name="IC")
        assert shape.add_pin(Side.TOP, "VCC", PinType.POWER) == (True, "")
        assert shape.add_pin(Side.TOP, "GND", PinType.GROUND)[0]
        assert [(p.name, p.order) for p in shape.pins_on(Side.TOP)] == [("VCC", 1), ("GND", 2)]
        assert shape.total_pins == 2

    def test_names_unique_across_sides(self):
        shape = DesignerShape()
        shape.add_pin(Side.LEFT, "A", PinType.DIGITAL_IO)
        ok, message = shape.add_pin(Side.RIGHT, "A", PinType.ANALOG_IO)
        assert not ok
        assert "A" in message
        assert shape.pins_on(Side.RIGHT) == []

    def test_empty_name_rejected(self):
        ok, _ = DesignerShape().add_pin(Side.TOP, "  ", PinType.SPECIAL)
        assert not ok

    def test_set_side_pins_may_reuse_names_of_same_side(self):
        shape = DesignerShape()
        shape.add_pin(Side.TOP, "A", PinType.POWER)
        ok, _ = shape.set_side_pins(Side.TOP, [Pin("B", PinType.POWER), Pin("A", PinType.GROUND)])
        assert ok
        assert [(p.name, p.order) for p in shape.pins_on(Side.TOP)] == [("B", 1), ("A", 2)]

    def test_remove_pin_renumbers(self):
        shape = DesignerShape()
        for name in ("A", "B", "C"):
            shape.add_pin(Side.BOTTOM, name, PinType.DIGITAL_IO)
        assert shape.remove_pin(Side.BOTTOM, 2)
        assert [(p.name, p.order) for p in shape.pins_on(Side.BOTTOM)] == [("A", 1), ("C", 2)]
        assert shape.remove_pin(Side.BOTTOM, 9) is False

    def test_pins_on_returns_copy(self):
        shape = DesignerShape()
        shape.add_pin(Side.TOP, "A", PinType.POWER)
        shape.pins_on(Side.TOP)[0].name = "changed"
        assert shape.pins_on(Side.TOP)[0].name == "A"

    def test_validate(self):
        shape = DesignerShape()
        ok, errors = shape.validate()
        assert not ok
        assert len(errors) == 2
        shape.name = "LED"
        shape.add_pin(Side.RIGHT, "A", PinType.DIGITAL_IO)
        assert shape.validate() == (True, [])

    def test_validate_detects_order_gap(self):
        shape = DesignerShape(name="X")
        shape.pins[Side.TOP] = [Pin("A", PinType.POWER, 1), Pin("B", PinType.POWER, 3)]
        ok, errors = shape.validate()
        assert not ok

    def test_dimensions_are_clamped(self):
        shape = DesignerShape()
        shape.set_dimensions(5, 900)
        assert (shape.width, shape.height) == (20, 500)
        assert clamp_dimension(99.6) == 100

    def test_dict_round_trip(self):
        definition = make_definition()
        shape = DesignerShape.from_dict(definition)
        assert shape.pins_on(Side.RIGHT)[0].type is PinType.DIGITAL_IO
        data = shape.to_dict()
        assert data["pins"] == definition["pins"]
        assert data["dimensions"] == definition["dimensions"]
        assert data["id"] == "led"

    def test_from_dict_rejects_unknown_pin_type(self):
        definition = make_definition(pins={"side1": [{"pinName": "X", "type": "laser"}]})
        with pytest.raises(ValueError):
            DesignerShape.from_dict(definition)

    def test_slugify(self):
        assert slugify_component_id("ESP32 DevKit v1") == "esp32-devkit-v1"
        assert slugify_component_id("!!!") == "component"

    def test_pin_type_colors(self):
        assert PinType.POWER.color == "#dc3545"
        assert PinType.from_value("nope") is None


class TestPinLayout:
    def test_required_length(self):
        assert required_length(0) == 0
        assert required_length(1) == 42
        assert required_length(5) == 130

    def test_single_pin_centered(self):
        calculator = PinLayoutCalculator(Rect(0, 0, 120, 80))
        assert calculator.pin_position(Side.TOP, 0, 1) == Point(60, 0)
        assert calculator.pin_position(Side.RIGHT, 0, 1) == Point(120, 40)
        assert calculator.pin_position(Side.BOTTOM, 0, 0) == Point(60, 80)

    def test_pins_symmetric_about_center(self):
        calculator = PinLayoutCalculator(Rect(0, 0, 120, 80))
        first = calculator.pin_position(Side.BOTTOM, 0, 2)
        second = calculator.pin_position(Side.BOTTOM, 1, 2)
        assert first.x + second.x == pytest.approx(120)
        assert second.x - first.x == pytest.approx(22)
        assert first.y == 80

    def test_all_placements_follow_order(self):
        shape = DesignerShape()
        shape.pins[Side.LEFT] = [Pin("B", PinType.POWER, 2), Pin("A", PinType.POWER, 1)]
        placements = PinLayoutCalculator(Rect(0, 0, 120, 80)).all_placements(shape)
        assert [p.pin.name for p in placements] == ["A", "B"]
        assert placements[0].position.y < placements[1].position.y

    def test_required_size_grows_in_steps(self):
        shape = DesignerShape()
        for index in range(5):
            shape.add_pin(Side.TOP, f"T{index}", PinType.DIGITAL_IO)
        for index in range(4):
            shape.add_pin(Side.LEFT, f"L{index}", PinType.DIGITAL_IO)
        assert required_size(shape) == (130, 110)
        assert fit_shape_to_pins(shape)
        assert (shape.width, shape.height) == (130, 110)
        assert fit_shape_to_pins(shape) is False

    def test_required_size_keeps_larger_shape(self):
        shape = DesignerShape(width=300, height=200)
        shape.add_pin(Side.TOP, "A", PinType.POWER)
        assert required_size(shape) == (300, 200)

    def test_pin_box_sticks_outward(self):
        assert pin_box(Side.TOP, Point(60, 0)) == Rect(54, -6, 12, 6)
        assert pin_box(Side.RIGHT, Point(120, 40)) == Rect(120, 34, 6, 12)

    def test_rotate_about(self):
        rotated = rotate_about(Point(10, 0), Point(0, 0), 90)
        assert rotated.x == pytest.approx(0, abs=1e-9)
        assert rotated.y == pytest.approx(10)
        assert rotate_about(Point(3, 4), Point(0, 0), 360) == Point(3, 4)

    def test_placed_pin_positions(self):
        component = PlacedComponent("c1", "led", make_definition(), Point(0, 0))
        positions = placed_pin_positions(component)
        side, point = positions["A"]
        assert side is Side.RIGHT
        assert point == Point(40, 0)
        assert positions["K"][1] == Point(-40, 0)

        component.rotation = 270
        _, rotated = placed_pin_positions(component)["A"]
        assert rotated.x == pytest.approx(0, abs=1e-9)
        assert rotated.y == pytest.approx(-40)
