# Canvas Wiring - Pin/Connection Picking and Orthogonal Routing
"""
连线几何

职责：
- 引脚命中：世界坐标点附近的引脚（已考虑元件旋转）
- 连线命中：点到折线各段的距离
- 正交走线：引脚 → 沿边法向引出 → 中点折线 → 引出 → 引脚
- 元件移动/旋转后重算相关连线的走线路径

走线路径以 [{x, y}, ...] 形式保存在 Connection.extra["path"] 中，
与项目文件格式一致。
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from domain.canvas.canvas_state import CanvasState, Connection, PinRef, PlacedComponent
from domain.canvas.geometry import Point, Side
from domain.designer.pin_layout import placed_pin_positions, rotate_about
from infrastructure.config.settings import (
    CONNECTION_HIT_TOLERANCE,
    PIN_HIT_RADIUS,
    WIRE_OUTLET_LENGTH,
)

# 未旋转时各边的外法向（Y 轴向下）
_SIDE_NORMALS = {
    Side.TOP: Point(0.0, -1.0),
    Side.RIGHT: Point(1.0, 0.0),
    Side.BOTTOM: Point(0.0, 1.0),
    Side.LEFT: Point(-1.0, 0.0),
}

# 撤回时表示"原本没有 path 字段"
_NO_PATH = object()


@dataclass
class PinHit:
    """命中的引脚"""

    instance_id: str
    pin_name: str
    side: Side
    position: Point

    def to_ref(self) -> PinRef:
        return PinRef(self.instance_id, self.pin_name, self.side.value)


# ============================================================
# 基础几何
# ============================================================

def side_normal(side: Side, rotation: float = 0) -> Point:
    """引脚所在边的外法向（已应用元件旋转）"""
    normal = _SIDE_NORMALS[side]
    rotated = rotate_about(normal, Point(0.0, 0.0), rotation)
    return Point(round(rotated.x, 9), round(rotated.y, 9))


def distance_to_segment(point: Point, start: Point, end: Point) -> float:
    dx, dy = end.x - start.x, end.y - start.y
    length_sq = dx * dx + dy * dy
    if length_sq == 0:
        return math.hypot(point.x - start.x, point.y - start.y)
    t = ((point.x - start.x) * dx + (point.y - start.y) * dy) / length_sq
    t = max(0.0, min(1.0, t))
    return math.hypot(point.x - (start.x + t * dx), point.y - (start.y + t * dy))


def orthogonal_route(start: Point, end: Point) -> List[Point]:
    """两点间的中点折线：水平距离较大时先水平，否则先垂直"""
    dx, dy = end.x - start.x, end.y - start.y
    if abs(dx) > abs(dy):
        mid_x = start.x + dx / 2
        return [start, Point(mid_x, start.y), Point(mid_x, end.y), end]
    mid_y = start.y + dy / 2
    return [start, Point(start.x, mid_y), Point(end.x, mid_y), end]


# ============================================================
# 引脚
# ============================================================

def pin_at(canvas: CanvasState, world_point: Point,
           radius: float = PIN_HIT_RADIUS,
           instance_id: Optional[str] = None) -> Optional[PinHit]:
    """
    返回 world_point 附近的引脚（最上层元件优先）

    Args:
        canvas: 画布
        world_point: 世界坐标
        radius: 检测半径（世界单位）
        instance_id: 只检测该元件的引脚
    """
    for component in reversed(canvas.components):
        if instance_id is not None and component.instance_id != instance_id:
            continue
        best: Optional[PinHit] = None
        best_distance = radius
        for name, (side, position) in placed_pin_positions(component).items():
            distance = math.hypot(world_point.x - position.x, world_point.y - position.y)
            if distance <= best_distance:
                best_distance = distance
                best = PinHit(component.instance_id, name, side, position)
        if best is not None:
            return best
    return None


def _endpoint(canvas: CanvasState, ref: PinRef):
    """(引脚坐标, 引出点)；元件不存在时为 None，引脚不存在时退化为元件中心"""
    component: Optional[PlacedComponent] = canvas.find_component(ref.instance_id)
    if component is None:
        return None
    pins = placed_pin_positions(component)
    if ref.pin_name not in pins:
        return component.position, component.position
    side, position = pins[ref.pin_name]
    normal = side_normal(side, component.rotation)
    outlet = Point(position.x + normal.x * WIRE_OUTLET_LENGTH,
                   position.y + normal.y * WIRE_OUTLET_LENGTH)
    return position, outlet


# ============================================================
# 连线
# ============================================================

def route_connection(canvas: CanvasState, connection: Connection) -> List[Point]:
    """按两端引脚当前位置计算走线；任一端元件不存在时返回空列表"""
    source = _endpoint(canvas, connection.source)
    target = _endpoint(canvas, connection.target)
    if source is None or target is None:
        return []
    source_pin, source_outlet = source
    target_pin, target_outlet = target
    return [source_pin] + orthogonal_route(source_outlet, target_outlet) + [target_pin]


def connection_points(canvas: CanvasState, connection: Connection) -> List[Point]:
    """连线折线：优先使用保存的走线路径，否则按引脚位置计算"""
    path = connection.extra.get("path") or []
    if len(path) >= 2:
        try:
            return [Point.from_dict(p) for p in path]
        except (TypeError, ValueError):
            pass
    return route_connection(canvas, connection)


def connection_at(canvas: CanvasState, world_point: Point,
                  tolerance: float = CONNECTION_HIT_TOLERANCE) -> Optional[Connection]:
    """返回 world_point 附近的连线（后添加的优先）"""
    for connection in reversed(canvas.connections):
        points = connection_points(canvas, connection)
        for start, end in zip(points, points[1:]):
            if distance_to_segment(world_point, start, end) <= tolerance:
                return connection
    return None


def reroute_connections(canvas: CanvasState, instance_id: str) -> Dict[str, Any]:
    """
    重算与元件相连的所有连线路径

    Returns:
        {连线 ID: 原 path}，供 restore_paths 撤回
    """
    previous: Dict[str, Any] = {}
    for connection in canvas.connections_for(instance_id):
        previous[connection.connection_id] = connection.extra.get("path", _NO_PATH)
        connection.extra["path"] = [p.to_dict() for p in route_connection(canvas, connection)]
    return previous


def restore_paths(canvas: CanvasState, previous: Dict[str, Any]) -> None:
    for connection_id, path in previous.items():
        connection = canvas.find_connection(connection_id)
        if connection is None:
            continue
        if path is _NO_PATH:
            connection.extra.pop("path", None)
        else:
            connection.extra["path"] = path


__all__ = [
    "PinHit",
    "side_normal",
    "distance_to_segment",
    "orthogonal_route",
    "pin_at",
    "route_connection",
    "connection_points",
    "connection_at",
    "reroute_connections",
    "restore_paths",
]
