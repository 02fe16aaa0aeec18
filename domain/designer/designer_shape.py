# Designer Shape - Component Definition Being Edited
"""
元件设计器中的元件定义

职责：
- 定义引脚类型、引脚、设计中的元件（四条边各自的有序引脚列表）
- 引脚校验：名称非空、元件内名称唯一、类型合法
- 维护引脚 order 在每条边内唯一且从 1 连续编号
- 与元件 JSON 互相转换

元件 JSON 结构：
    {
        "name": "ESP32",
        "id": "esp32-devkit",
        "description": "...",
        "category": "microcontroller",
        "pins": {"side1": [{"pinName": "VCC", "type": "power", "order": 1}], ...},
        "dimensions": {"width": 120, "height": 80}
    }
"""

import copy
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from domain.canvas.geometry import Side, SIDE_PRIORITY
from infrastructure.config.settings import (
    DEFAULT_SHAPE_HEIGHT,
    DEFAULT_SHAPE_WIDTH,
    MAX_SHAPE_DIMENSION,
    MIN_SHAPE_DIMENSION,
)


# 未知引脚类型使用的颜色
DEFAULT_PIN_COLOR = "#667eea"


class PinType(Enum):
    """引脚类型"""

    POWER = "power"
    GROUND = "ground"
    DIGITAL_IO = "digital_io"
    ANALOG_IO = "analog_io"
    SPECIAL = "special"

    @property
    def color(self) -> str:
        return _PIN_COLORS.get(self, DEFAULT_PIN_COLOR)

    @property
    def label(self) -> str:
        return _PIN_LABELS[self]

    @classmethod
    def from_value(cls, value: str) -> Optional["PinType"]:
        try:
            return cls(value)
        except ValueError:
            return None


_PIN_COLORS = {
    PinType.POWER: "#dc3545",
    PinType.GROUND: "#000000",
    PinType.DIGITAL_IO: "#28a745",
    PinType.ANALOG_IO: "#ffc107",
    PinType.SPECIAL: "#6f42c1",
}

_PIN_LABELS = {
    PinType.POWER: "电源",
    PinType.GROUND: "地",
    PinType.DIGITAL_IO: "数字I/O",
    PinType.ANALOG_IO: "模拟I/O",
    PinType.SPECIAL: "特殊",
}


@dataclass
class Pin:
    """引脚"""

    name: str
    type: PinType
    order: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {"pinName": self.name, "type": self.type.value, "order": self.order}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Pin":
        """
        从元件 JSON 解析引脚

        Raises:
            ValueError: 引脚类型未知
        """
        pin_type = PinType.from_value(str(data.get("type", "")))
        if pin_type is None:
            raise ValueError(f"未知的引脚类型: {data.get('type')}")
        name = data.get("pinName", data.get("name", ""))
        return cls(str(name).strip(), pin_type, int(data.get("order") or 0))


# ============================================================
# 校验
# ============================================================

def validate_pins(pins: List[Pin], reserved_names: Optional[set] = None) -> Tuple[bool, str]:
    """
    校验一组引脚

    Args:
        pins: 待校验的引脚列表
        reserved_names: 已被其他边占用的引脚名

    Returns:
        (是否有效, 错误信息)
    """
    reserved_names = reserved_names or set()
    seen = set()
    for index, pin in enumerate(pins, start=1):
        name = pin.name.strip()
        if not name:
            return False, f"第 {index} 个引脚名称不能为空"
        if not isinstance(pin.type, PinType):
            return False, f"引脚 {name} 的类型无效"
        if name in seen or name in reserved_names:
            return False, f"引脚名称重复: {name}"
        seen.add(name)
    return True, ""


def clamp_dimension(value: float) -> int:
    """元件尺寸限制在 [MIN_SHAPE_DIMENSION, MAX_SHAPE_DIMENSION]"""
    return int(max(MIN_SHAPE_DIMENSION, min(MAX_SHAPE_DIMENSION, round(value))))


def slugify_component_id(name: str) -> str:
    """由元件名称生成 ID（小写，非字母数字替换为连字符）"""
    slug = re.sub(r"[^0-9a-zA-Z一-鿿]+", "-", name.strip().lower()).strip("-")
    return slug or "component"


# ============================================================
# 设计中的元件
# ============================================================

@dataclass
class DesignerShape:
    """
    设计器中正在编辑的元件

    不变式：每条边内引脚 order 唯一，且从 1 连续编号。
    """

    name: str = ""
    component_id: str = ""
    description: str = ""
    category: str = "custom"
    width: int = DEFAULT_SHAPE_WIDTH
    height: int = DEFAULT_SHAPE_HEIGHT
    pins: Dict[Side, List[Pin]] = field(
        default_factory=lambda: {side: [] for side in SIDE_PRIORITY}
    )

    # ============================================================
    # 引脚查询
    # ============================================================

    def pins_on(self, side: Side) -> List[Pin]:
        """某条边的引脚（按 order 排序的副本）"""
        return sorted(copy.deepcopy(self.pins.get(side, [])), key=lambda p: p.order)

    @property
    def total_pins(self) -> int:
        return sum(len(pins) for pins in self.pins.values())

    def pin_names(self, exclude_side: Optional[Side] = None) -> set:
        return {
            pin.name
            for side, pins in self.pins.items()
            if side is not exclude_side
            for pin in pins
        }

    # ============================================================
    # 引脚编辑
    # ============================================================

    def set_side_pins(self, side: Side, pins: List[Pin]) -> Tuple[bool, str]:
        """
        替换某条边的全部引脚

        引脚按给定顺序重新编号。

        Returns:
            (是否成功, 错误信息)
        """
        ok, message = validate_pins(pins, self.pin_names(exclude_side=side))
        if not ok:
            return False, message

        self.pins[side] = [
            Pin(pin.name.strip(), pin.type, index)
            for index, pin in enumerate(pins, start=1)
        ]
        return True, ""

    def add_pin(self, side: Side, name: str, pin_type: PinType) -> Tuple[bool, str]:
        """在某条边末尾追加引脚"""
        current = self.pins_on(side)
        return self.set_side_pins(side, current + [Pin(name, pin_type)])

    def remove_pin(self, side: Side, order: int) -> bool:
        """删除某条边上指定 order 的引脚，其余引脚重新编号"""
        current = self.pins_on(side)
        remaining = [pin for pin in current if pin.order != order]
        if len(remaining) == len(current):
            return False
        self.pins[side] = remaining
        self.renumber(side)
        return True

    def renumber(self, side: Side) -> None:
        """按当前顺序把 order 重新编号为 1..n"""
        ordered = sorted(self.pins.get(side, []), key=lambda p: p.order)
        for index, pin in enumerate(ordered, start=1):
            pin.order = index
        self.pins[side] = ordered

    def clear_pins(self) -> None:
        self.pins = {side: [] for side in SIDE_PRIORITY}

    # ============================================================
    # 尺寸
    # ============================================================

    def set_dimensions(self, width: float, height: float) -> None:
        self.width = clamp_dimension(width)
        self.height = clamp_dimension(height)

    # ============================================================
    # 元件级校验与序列化
    # ============================================================

    def validate(self) -> Tuple[bool, List[str]]:
        """
        保存前的整体校验

        Returns:
            (是否有效, 错误信息列表)
        """
        errors = []
        if not self.name.strip():
            errors.append("元件名称不能为空")
        if self.total_pins == 0:
            errors.append("元件至少需要一个引脚")

        names = set()
        for side in SIDE_PRIORITY:
            ok, message = validate_pins(self.pins.get(side, []), names)
            if not ok:
                errors.append(f"{side.display_name}: {message}")
            names |= {pin.name for pin in self.pins.get(side, [])}
            orders = sorted(pin.order for pin in self.pins.get(side, []))
            if orders != list(range(1, len(orders) + 1)):
                errors.append(f"{side.display_name}: 引脚序号必须从 1 连续编号")
        return len(errors) == 0, errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "id": self.component_id or slugify_component_id(self.name),
            "description": self.description,
            "category": self.category,
            "pins": {
                side.value: [pin.to_dict() for pin in self.pins_on(side)]
                for side in SIDE_PRIORITY
            },
            "dimensions": {"width": self.width, "height": self.height},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DesignerShape":
        """
        从元件 JSON 构建

        Raises:
            ValueError: 引脚类型未知
        """
        dimensions = data.get("dimensions") or {}
        shape = cls(
            name=str(data.get("name", "")),
            component_id=str(data.get("id", "")),
            description=str(data.get("description", "")),
            category=str(data.get("category", "custom")),
        )
        shape.set_dimensions(
            dimensions.get("width", DEFAULT_SHAPE_WIDTH),
            dimensions.get("height", DEFAULT_SHAPE_HEIGHT),
        )
        raw_pins = data.get("pins") or {}
        for side in SIDE_PRIORITY:
            shape.pins[side] = [Pin.from_dict(p) for p in raw_pins.get(side.value, [])]
            shape.renumber(side)
        return shape


__all__ = [
    "PinType",
    "Pin",
    "DesignerShape",
    "DEFAULT_PIN_COLOR",
    "validate_pins",
    "clamp_dimension",
    "slugify_component_id",
]
