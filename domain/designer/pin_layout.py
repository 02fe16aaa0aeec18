# Pin Layout - Pin Positions on Shape Sides
"""
引脚布局计算器

职责：
- 计算每个引脚在元件矩形边上的中心位置（每条边居中排布）
- 根据引脚数量自动扩展元件尺寸

布局参数：
- 引脚尺寸 PIN_SIZE = 12，间距 PIN_SPACING = 10，边界 PIN_MARGIN = 15
- 所需长度 = n * 12 + (n - 1) * 10 + 2 * 15
- 所需长度超过当前边长时，按 10 向上取整扩展，且不小于 60
"""

import math
from dataclasses import dataclass
from typing import Dict, List, Tuple

from domain.canvas.canvas_state import PlacedComponent
from domain.canvas.geometry import Point, Rect, Side, SIDE_PRIORITY
from domain.designer.designer_shape import DesignerShape, Pin, clamp_dimension
from infrastructure.config.settings import (
    PIN_AUTO_SIZE_MIN,
    PIN_AUTO_SIZE_STEP,
    PIN_MARGIN,
    PIN_SIZE,
    PIN_SPACING,
)


@dataclass(frozen=True)
class PinPlacement:
    """引脚及其在边上的中心位置"""

    pin: Pin
    side: Side
    position: Point


def required_length(pin_count: int) -> float:
    """容纳 pin_count 个引脚所需的边长"""
    if pin_count <= 0:
        return 0.0
    return pin_count * PIN_SIZE + (pin_count - 1) * PIN_SPACING + PIN_MARGIN * 2


class PinLayoutCalculator:
    """
    引脚布局计算器

    Args:
        rect: 元件矩形（世界坐标）
    """

    def __init__(self, rect: Rect):
        self._rect = rect

    def pin_position(self, side: Side, index: int, total: int) -> Point:
        """
        第 index 个引脚（从 0 开始）的中心位置

        Args:
            side: 所在边
            index: 引脚序号（从 0 开始）
            total: 该边引脚总数
        """
        rect = self._rect
        if total <= 0:
            if side.is_horizontal:
                y = rect.y if side is Side.TOP else rect.bottom
                return Point(rect.x + rect.width / 2, y)
            x = rect.right if side is Side.RIGHT else rect.x
            return Point(x, rect.y + rect.height / 2)

        layout_length = total * PIN_SIZE + (total - 1) * PIN_SPACING

        if side.is_horizontal:
            actual = min(layout_length, rect.width - 2 * PIN_MARGIN)
            start_x = rect.x + (rect.width - actual) / 2
            x = start_x + index * (PIN_SIZE + PIN_SPACING) + PIN_SIZE / 2
            y = rect.y if side is Side.TOP else rect.bottom
            return Point(x, y)

        actual = min(layout_length, rect.height - 2 * PIN_MARGIN)
        start_y = rect.y + (rect.height - actual) / 2
        x = rect.right if side is Side.RIGHT else rect.x
        y = start_y + index * (PIN_SIZE + PIN_SPACING) + PIN_SIZE / 2
        return Point(x, y)

    def side_placements(self, side: Side, pins: List[Pin]) -> List[PinPlacement]:
        ordered = sorted(pins, key=lambda p: p.order)
        return [
            PinPlacement(pin, side, self.pin_position(side, index, len(ordered)))
            for index, pin in enumerate(ordered)
        ]

    def all_placements(self, shape: DesignerShape) -> List[PinPlacement]:
        placements = []
        for side in SIDE_PRIORITY:
            placements.extend(self.side_placements(side, shape.pins.get(side, [])))
        return placements


def required_size(shape: DesignerShape) -> Tuple[int, int]:
    """
    计算容纳全部引脚所需的 (宽, 高)

    上下边的引脚决定宽度，左右边的引脚决定高度。不需要扩展的维度保持原值。
    """
    width, height = shape.width, shape.height

    horizontal = max(len(shape.pins.get(Side.TOP, [])), len(shape.pins.get(Side.BOTTOM, [])))
    need = required_length(horizontal)
    if need > width:
        width = max(math.ceil(need / PIN_AUTO_SIZE_STEP) * PIN_AUTO_SIZE_STEP, PIN_AUTO_SIZE_MIN)

    vertical = max(len(shape.pins.get(Side.RIGHT, [])), len(shape.pins.get(Side.LEFT, [])))
    need = required_length(vertical)
    if need > height:
        height = max(math.ceil(need / PIN_AUTO_SIZE_STEP) * PIN_AUTO_SIZE_STEP, PIN_AUTO_SIZE_MIN)

    return int(width), int(height)


def fit_shape_to_pins(shape: DesignerShape) -> bool:
    """
    按引脚数量扩展元件尺寸

    Returns:
        bool: 尺寸是否发生变化
    """
    width, height = required_size(shape)
    width, height = clamp_dimension(width), clamp_dimension(height)
    if (width, height) == (shape.width, shape.height):
        return False
    shape.set_dimensions(width, height)
    return True


def pin_box(side: Side, position: Point, size: float = PIN_SIZE) -> Rect:
    """
    引脚方块：与边线重合，向元件外侧突出半个引脚尺寸

    Args:
        side: 所在边
        position: 引脚中心（位于边线上）
        size: 引脚尺寸
    """
    half = size / 2
    if side is Side.TOP:
        return Rect(position.x - half, position.y - half, size, half)
    if side is Side.RIGHT:
        return Rect(position.x, position.y - half, half, size)
    if side is Side.BOTTOM:
        return Rect(position.x - half, position.y, size, half)
    return Rect(position.x - half, position.y - half, half, size)


def rotate_about(point: Point, center: Point, degrees: float) -> Point:
    """绕 center 顺时针（屏幕坐标系，Y 轴向下）旋转"""
    if degrees % 360 == 0:
        return point
    radians = math.radians(degrees)
    cos_a, sin_a = math.cos(radians), math.sin(radians)
    dx, dy = point.x - center.x, point.y - center.y
    return Point(
        center.x + dx * cos_a - dy * sin_a,
        center.y + dx * sin_a + dy * cos_a,
    )


def placed_pin_positions(component: PlacedComponent) -> Dict[str, Tuple[Side, Point]]:
    """
    画布上元件实例各引脚的世界坐标（已应用旋转）

    引脚定义取自 component.data["pins"]，格式与元件 JSON 一致；
    未知的边标识被忽略。

    Returns:
        {pinName: (所在边, 世界坐标)}
    """
    raw_pins = component.data.get("pins") or {}
    calculator = PinLayoutCalculator(component.body_rect)
    center = component.position
    positions: Dict[str, Tuple[Side, Point]] = {}
    for side in SIDE_PRIORITY:
        entries = sorted(raw_pins.get(side.value) or [], key=lambda p: p.get("order") or 0)
        for index, entry in enumerate(entries):
            local = calculator.pin_position(side, index, len(entries))
            name = str(entry.get("pinName", entry.get("name", "")))
            positions[name] = (side, rotate_about(local, center, component.rotation))
    return positions


__all__ = [
    "PinPlacement",
    "PinLayoutCalculator",
    "required_length",
    "required_size",
    "fit_shape_to_pins",
    "pin_box",
    "rotate_about",
    "placed_pin_positions",
]
