# Canvas State - Live Canvas Content
"""
画布状态 - 活动画布的元件、连线与视口

职责：
- 定义放置元件、连线、画布快照的数据结构
- CanvasState 是唯一的"活动画布"，由渲染器、交互、项目仓库显式共享
- 快照采用结构化深拷贝，保证项目之间不存在别名

设计原则：
- 画布内容的修改只经由 canvas_commands 中的命令执行
  （命令由 application.canvas_editor.CanvasEditor 统一调度并标记项目已修改）
- 视口由 ViewportTransform 持有，不属于可撤回的编辑

文件格式（项目文件中的对应字段）：
    {
        "components": [{"id", "componentId", "data", "position", "rotation", "direction", "properties"}],
        "connections": [{"id", "source": {...}, "target": {...}, ...}],
        "viewport": {"scale", "offsetX", "offsetY"}
    }
"""

import copy
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from domain.canvas.geometry import Point, Rect
from domain.canvas.viewport_transform import Viewport, ViewportTransform
from infrastructure.config.settings import (
    DEFAULT_COMPONENT_HEIGHT,
    DEFAULT_COMPONENT_WIDTH,
    DEFAULT_SURFACE_HEIGHT,
    DEFAULT_SURFACE_WIDTH,
)


# ============================================================
# 旋转与方向
# ============================================================

ROTATION_TO_DIRECTION = {0: "up", 90: "right", 180: "down", 270: "left"}
DIRECTION_TO_ROTATION = {v: k for k, v in ROTATION_TO_DIRECTION.items()}


def normalize_rotation(rotation: float) -> int:
    """规整为 0/90/180/270"""
    return int(round(rotation / 90.0)) * 90 % 360


def new_instance_id(prefix: str = "component") -> str:
    return f"{prefix}-{uuid.uuid4().hex[:8]}"


# ============================================================
# 数据结构
# ============================================================

@dataclass
class PlacedComponent:
    """
    画布上放置的元件实例

    Attributes:
        instance_id: 实例 ID（画布内唯一）
        component_id: 元件库中的元件 ID
        data: 元件定义（name, dimensions, pins 等），核心不解释其内容
        position: 元件中心的世界坐标
        rotation: 旋转角度（0/90/180/270）
        properties: 实例属性（阻值、标号等）
    """

    instance_id: str
    component_id: str
    data: Dict[str, Any] = field(default_factory=dict)
    position: Point = field(default_factory=lambda: Point(0.0, 0.0))
    rotation: int = 0
    properties: Dict[str, Any] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.data.get("name") or self.component_id

    @property
    def direction(self) -> str:
        return ROTATION_TO_DIRECTION.get(normalize_rotation(self.rotation), "up")

    @property
    def body_size(self) -> tuple:
        """未旋转时的 (宽, 高)"""
        dimensions = self.data.get("dimensions") or {}
        return (
            float(dimensions.get("width") or DEFAULT_COMPONENT_WIDTH),
            float(dimensions.get("height") or DEFAULT_COMPONENT_HEIGHT),
        )

    @property
    def body_rect(self) -> Rect:
        """未旋转的元件矩形（以中心为基准）"""
        width, height = self.body_size
        return Rect.centered_at(self.position, width, height)

    @property
    def bounds(self) -> Rect:
        """旋转后的外接矩形（旋转为 90° 的倍数，宽高互换即可）"""
        width, height = self.body_size
        if normalize_rotation(self.rotation) in (90, 270):
            width, height = height, width
        return Rect.centered_at(self.position, width, height)

    def contains(self, point: Point) -> bool:
        return self.bounds.contains(point)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.instance_id,
            "componentId": self.component_id,
            "data": copy.deepcopy(self.data),
            "position": self.position.to_dict(),
            "rotation": self.rotation,
            "direction": self.direction,
            "properties": copy.deepcopy(self.properties),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlacedComponent":
        """
        从项目文件条目构建

        同时接受导出格式 {instanceId, componentFile, position: [x, y], orientation}。

        Raises:
            ValueError: 条目不是对象或坐标无法解析
        """
        if not isinstance(data, dict):
            raise ValueError(f"元件条目必须是对象: {data!r}")
        definition = data.get("data") or {}
        if not isinstance(definition, dict):
            raise ValueError(f"元件定义必须是对象: {definition!r}")
        definition = copy.deepcopy(definition)
        rotation = data.get("rotation")
        if rotation is None:
            direction = data.get("direction") or data.get("orientation") or "up"
            rotation = DIRECTION_TO_ROTATION.get(direction, 0)
        component_file = str(data.get("componentFile") or "")
        if component_file.endswith(".json"):
            component_file = component_file[:-len(".json")]
        return cls(
            instance_id=str(data.get("id") or data.get("instanceId") or new_instance_id()),
            component_id=str(data.get("componentId") or definition.get("id") or component_file),
            data=definition,
            position=Point.from_dict(data.get("position")),
            rotation=normalize_rotation(float(rotation)),
            properties=copy.deepcopy(data.get("properties") or {}),
        )


@dataclass
class PinRef:
    """连线端点：某个元件实例上的某个引脚"""

    instance_id: str
    pin_name: str
    side: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        result = copy.deepcopy(self.extra)
        result.update({"componentId": self.instance_id, "pinName": self.pin_name})
        if self.side is not None:
            result["side"] = self.side
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PinRef":
        """导出格式以 instanceId 标识元件，优先于 componentId"""
        if data and not isinstance(data, dict):
            raise ValueError(f"连线端点必须是对象: {data!r}")
        data = dict(data or {})
        legacy_id = data.pop("instanceId", None)
        component_id = data.pop("componentId", None)
        instance_id = str(legacy_id or component_id or "")
        pin_name = str(data.pop("pinName", ""))
        side = data.pop("side", None)
        return cls(instance_id, pin_name, side, copy.deepcopy(data))


@dataclass
class Connection:
    """
    连线

    source/target 以外的字段（走线路径、样式等）原样保存在 extra 中
    """

    connection_id: str
    source: PinRef
    target: PinRef
    extra: Dict[str, Any] = field(default_factory=dict)

    def touches(self, instance_id: str) -> bool:
        return self.source.instance_id == instance_id or self.target.instance_id == instance_id

    def to_dict(self) -> Dict[str, Any]:
        result = copy.deepcopy(self.extra)
        result.update({
            "id": self.connection_id,
            "source": self.source.to_dict(),
            "target": self.target.to_dict(),
        })
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Connection":
        if not isinstance(data, dict):
            raise ValueError(f"连线条目必须是对象: {data!r}")
        data = dict(data)
        connection_id = str(data.pop("id", "") or new_instance_id("wire"))
        source = PinRef.from_dict(data.pop("source", {}))
        target = PinRef.from_dict(data.pop("target", {}))
        return cls(connection_id, source, target, copy.deepcopy(data))


@dataclass
class CanvasSnapshot:
    """
    画布快照：项目不活动时保存的画布内容与视口

    所有字段都是独立副本，不与活动画布或其他项目共享。
    """

    components: List[PlacedComponent] = field(default_factory=list)
    connections: List[Connection] = field(default_factory=list)
    viewport: Viewport = field(default_factory=Viewport)

    def copy(self) -> "CanvasSnapshot":
        return copy.deepcopy(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "components": [c.to_dict() for c in self.components],
            "connections": [c.to_dict() for c in self.connections],
            "viewport": self.viewport.to_dict(),
        }

    @classmethod
    def from_dict(
        cls,
        data: Optional[Dict[str, Any]],
        default_viewport: Optional[Viewport] = None,
    ) -> "CanvasSnapshot":
        """
        从项目文件内容构建快照

        Args:
            data: 项目文件中的 {components, connections, viewport}
            default_viewport: 文件中没有 viewport 字段时使用
        """
        data = data or {}
        if data.get("viewport"):
            viewport = Viewport.from_dict(data["viewport"])
        else:
            viewport = default_viewport.copy() if default_viewport else Viewport.default_for()
        return cls(
            components=[PlacedComponent.from_dict(c) for c in data.get("components") or []],
            connections=[Connection.from_dict(c) for c in data.get("connections") or []],
            viewport=viewport,
        )


# ============================================================
# 活动画布
# ============================================================

class CanvasState:
    """
    活动画布状态

    被渲染器（只读）、命令（读写）和项目仓库（快照/恢复）依次访问，
    所有访问发生在 UI 线程。
    """

    def __init__(self, surface_width: float = DEFAULT_SURFACE_WIDTH,
                 surface_height: float = DEFAULT_SURFACE_HEIGHT):
        self.components: List[PlacedComponent] = []
        self.connections: List[Connection] = []
        self.surface_width = surface_width
        self.surface_height = surface_height
        self.transform = ViewportTransform(Viewport.default_for(surface_height))
        self.selected_instance_id: Optional[str] = None
        self.selected_connection_id: Optional[str] = None

    # ============================================================
    # 快照与恢复
    # ============================================================

    def take_snapshot(self) -> CanvasSnapshot:
        """深拷贝当前画布内容与视口"""
        return CanvasSnapshot(
            components=copy.deepcopy(self.components),
            connections=copy.deepcopy(self.connections),
            viewport=self.transform.snapshot(),
        )

    def load_snapshot(self, snapshot: CanvasSnapshot) -> None:
        """用快照的深拷贝替换画布内容（原快照对象不会被画布引用）"""
        self.components = copy.deepcopy(snapshot.components)
        self.connections = copy.deepcopy(snapshot.connections)
        self.transform.set_viewport(snapshot.viewport)
        self.selected_instance_id = None
        self.selected_connection_id = None

    def clear(self) -> None:
        """清空画布并重置为默认视口"""
        self.components = []
        self.connections = []
        self.transform.reset(self.surface_height)
        self.selected_instance_id = None
        self.selected_connection_id = None

    def default_viewport(self) -> Viewport:
        return Viewport.default_for(self.surface_height)

    def set_surface_size(self, width: float, height: float) -> None:
        self.surface_width = width
        self.surface_height = height

    # ============================================================
    # 查询
    # ============================================================

    @property
    def selected_component(self) -> Optional[PlacedComponent]:
        if self.selected_instance_id is None:
            return None
        return self.find_component(self.selected_instance_id)

    @property
    def selected_connection(self) -> Optional[Connection]:
        if self.selected_connection_id is None:
            return None
        return self.find_connection(self.selected_connection_id)

    def find_component(self, instance_id: str) -> Optional[PlacedComponent]:
        for component in self.components:
            if component.instance_id == instance_id:
                return component
        return None

    def component_index(self, instance_id: str) -> int:
        for index, component in enumerate(self.components):
            if component.instance_id == instance_id:
                return index
        return -1

    def component_at(self, world_point: Point) -> Optional[PlacedComponent]:
        """返回包含该点的最上层元件（后添加的优先）"""
        for component in reversed(self.components):
            if component.contains(world_point):
                return component
        return None

    def find_connection(self, connection_id: str) -> Optional[Connection]:
        for connection in self.connections:
            if connection.connection_id == connection_id:
                return connection
        return None

    def connections_for(self, instance_id: str) -> List[Connection]:
        return [c for c in self.connections if c.touches(instance_id)]


__all__ = [
    "PlacedComponent",
    "PinRef",
    "Connection",
    "CanvasSnapshot",
    "CanvasState",
    "ROTATION_TO_DIRECTION",
    "normalize_rotation",
    "new_instance_id",
]
