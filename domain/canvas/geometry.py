# Canvas Geometry - Points, Rectangles and Shape Sides
"""
画布几何基础类型

职责：
- 定义屏幕/世界坐标共用的点与矩形
- 定义元件矩形的四条边（side1..side4 = 上/右/下/左）

设计原则：
- 纯数据，不可变（frozen dataclass），可安全地在快照间共享
- 不依赖 Qt，便于在领域层单元测试
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


@dataclass(frozen=True)
class Point:
    """二维点（屏幕坐标或世界坐标，由上下文决定）"""

    x: float
    y: float

    def __add__(self, other: "Point") -> "Point":
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Point") -> "Point":
        return Point(self.x - other.x, self.y - other.y)

    def manhattan_length(self) -> float:
        return abs(self.x) + abs(self.y)

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data) -> "Point":
        """接受 {x, y} 或 [x, y]；其他形状抛出 ValueError"""
        if not data:
            return cls(0.0, 0.0)
        if isinstance(data, dict):
            return cls(float(data.get("x", 0)), float(data.get("y", 0)))
        if isinstance(data, (list, tuple)) and len(data) == 2:
            return cls(float(data[0]), float(data[1]))
        raise ValueError(f"无法解析坐标: {data!r}")


@dataclass(frozen=True)
class Rect:
    """轴对齐矩形，(x, y) 为左上角"""

    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> Point:
        return Point(self.x + self.width / 2, self.y + self.height / 2)

    def contains(self, point: Point) -> bool:
        """点是否在矩形内（含边界）"""
        return self.x <= point.x <= self.right and self.y <= point.y <= self.bottom

    def intersects(self, other: "Rect") -> bool:
        return not (
            other.x > self.right or other.right < self.x
            or other.y > self.bottom or other.bottom < self.y
        )

    def adjusted(self, padding: float) -> "Rect":
        """四周扩展 padding 后的矩形"""
        return Rect(
            self.x - padding,
            self.y - padding,
            self.width + 2 * padding,
            self.height + 2 * padding,
        )

    @classmethod
    def centered_at(cls, center: Point, width: float, height: float) -> "Rect":
        return cls(center.x - width / 2, center.y - height / 2, width, height)


class Side(Enum):
    """
    元件矩形的边

    取值与元件 JSON 中 pins 字段的键一致。
    """

    TOP = "side1"
    RIGHT = "side2"
    BOTTOM = "side3"
    LEFT = "side4"

    @property
    def display_name(self) -> str:
        return _SIDE_DISPLAY_NAMES[self]

    @property
    def is_horizontal(self) -> bool:
        """引脚沿水平方向排布（上/下边）"""
        return self in (Side.TOP, Side.BOTTOM)

    @classmethod
    def from_value(cls, value: str) -> Optional["Side"]:
        """由 side1..side4 字符串解析，未知值返回 None"""
        try:
            return cls(value)
        except ValueError:
            return None


_SIDE_DISPLAY_NAMES = {
    Side.TOP: "上边",
    Side.RIGHT: "右边",
    Side.BOTTOM: "下边",
    Side.LEFT: "左边",
}

# 命中测试的固定优先级（角点同时靠近两条边时先测到的边胜出）
SIDE_PRIORITY = (Side.TOP, Side.RIGHT, Side.BOTTOM, Side.LEFT)


__all__ = [
    "Point",
    "Rect",
    "Side",
    "SIDE_PRIORITY",
]
