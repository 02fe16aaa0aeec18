# Viewport Transform - Screen/World Coordinate Mapping
"""
视口变换 - 屏幕坐标与世界坐标的换算，以及缩放/平移状态

职责：
- 持有一个画布的视口状态（scale, offset_x, offset_y）
- screen_to_world / world_to_screen 换算
- 以锚点为中心的缩放、屏幕空间平移、视图重置

换算关系：
    world = (screen - offset) / scale
    screen = world * scale + offset

缩放顺序（必须严格遵守，否则视图会漂移）：
    1. 以当前 scale 求锚点的世界坐标
    2. scale *= factor，并限制在 [MIN_SCALE, MAX_SCALE]
    3. offset = 锚点屏幕坐标 - 锚点世界坐标 * 新 scale

使用示例：
    transform = ViewportTransform()
    transform.reset(surface_height=600)      # 原点位于左下角 (50, 550)
    transform.zoom(1.1, Point(320, 240))      # 滚轮放大
    world = transform.screen_to_world(Point(320, 240))
"""

from dataclasses import dataclass
from typing import Optional

from domain.canvas.geometry import Point, Rect
from infrastructure.config.settings import (
    BUTTON_ZOOM_IN_FACTOR,
    BUTTON_ZOOM_OUT_FACTOR,
    DEFAULT_ORIGIN_MARGIN,
    DEFAULT_SCALE,
    DEFAULT_SURFACE_HEIGHT,
    MAX_SCALE,
    MIN_SCALE,
)


def clamp_scale(scale: float) -> float:
    """将缩放比例限制在 [MIN_SCALE, MAX_SCALE]"""
    return max(MIN_SCALE, min(MAX_SCALE, scale))


@dataclass
class Viewport:
    """
    视口状态

    Attributes:
        scale: 缩放比例，始终位于 [0.1, 3.0]
        offset_x: 世界原点在屏幕上的 X 坐标
        offset_y: 世界原点在屏幕上的 Y 坐标
    """

    scale: float = DEFAULT_SCALE
    offset_x: float = 0.0
    offset_y: float = 0.0

    def copy(self) -> "Viewport":
        return Viewport(self.scale, self.offset_x, self.offset_y)

    def to_dict(self) -> dict:
        return {"scale": self.scale, "offsetX": self.offset_x, "offsetY": self.offset_y}

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "Viewport":
        """从项目文件的 viewport 字段解析，字段缺失时使用默认值"""
        data = data or {}
        return cls(
            scale=clamp_scale(float(data.get("scale", DEFAULT_SCALE))),
            offset_x=float(data.get("offsetX", 0.0)),
            offset_y=float(data.get("offsetY", 0.0)),
        )

    @classmethod
    def default_for(cls, surface_height: Optional[float] = None) -> "Viewport":
        """
        新项目的默认视口

        原点锚定在画布左下角并留出边距，而不是居中于原点。

        Args:
            surface_height: 画布高度，未知时使用 DEFAULT_SURFACE_HEIGHT
        """
        height = surface_height if surface_height else DEFAULT_SURFACE_HEIGHT
        return cls(
            scale=DEFAULT_SCALE,
            offset_x=float(DEFAULT_ORIGIN_MARGIN),
            offset_y=float(height - DEFAULT_ORIGIN_MARGIN),
        )


class ViewportTransform:
    """
    视口变换

    持有一个可变的 Viewport。调用方通过 snapshot() 获取独立副本，
    通过 set_viewport() 写入，不与外部共享内部对象。
    """

    def __init__(self, viewport: Optional[Viewport] = None):
        self._viewport = viewport.copy() if viewport else Viewport()
        self._viewport.scale = clamp_scale(self._viewport.scale)

    # ============================================================
    # 状态访问
    # ============================================================

    @property
    def scale(self) -> float:
        return self._viewport.scale

    @property
    def offset(self) -> Point:
        return Point(self._viewport.offset_x, self._viewport.offset_y)

    def snapshot(self) -> Viewport:
        """当前视口的独立副本"""
        return self._viewport.copy()

    def set_viewport(self, viewport: Viewport) -> None:
        """用给定视口覆盖当前状态（复制字段，不保留引用）"""
        self._viewport.scale = clamp_scale(viewport.scale)
        self._viewport.offset_x = viewport.offset_x
        self._viewport.offset_y = viewport.offset_y

    # ============================================================
    # 坐标换算
    # ============================================================

    def screen_to_world(self, point: Point) -> Point:
        scale = self._viewport.scale
        return Point(
            (point.x - self._viewport.offset_x) / scale,
            (point.y - self._viewport.offset_y) / scale,
        )

    def world_to_screen(self, point: Point) -> Point:
        scale = self._viewport.scale
        return Point(
            point.x * scale + self._viewport.offset_x,
            point.y * scale + self._viewport.offset_y,
        )

    def world_rect_to_screen(self, rect: Rect) -> Rect:
        top_left = self.world_to_screen(Point(rect.x, rect.y))
        scale = self._viewport.scale
        return Rect(top_left.x, top_left.y, rect.width * scale, rect.height * scale)

    def visible_world_rect(self, width: float, height: float) -> Rect:
        """
        画布可见区域对应的世界矩形

        Args:
            width: 画布宽度（屏幕像素）
            height: 画布高度（屏幕像素）
        """
        top_left = self.screen_to_world(Point(0, 0))
        scale = self._viewport.scale
        return Rect(top_left.x, top_left.y, width / scale, height / scale)

    # ============================================================
    # 缩放与平移
    # ============================================================

    def zoom(self, factor: float, center: Point) -> None:
        """
        以屏幕点 center 为锚点缩放

        锚点下的世界坐标在缩放前后保持不变。

        Args:
            factor: 缩放因子（>1 放大，<1 缩小）
            center: 锚点屏幕坐标
        """
        anchor = self.screen_to_world(center)
        self._viewport.scale = clamp_scale(self._viewport.scale * factor)
        self._viewport.offset_x = center.x - anchor.x * self._viewport.scale
        self._viewport.offset_y = center.y - anchor.y * self._viewport.scale

    def zoom_in(self, width: float, height: float) -> None:
        """以画布中心放大"""
        self.zoom(BUTTON_ZOOM_IN_FACTOR, Point(width / 2, height / 2))

    def zoom_out(self, width: float, height: float) -> None:
        """以画布中心缩小"""
        self.zoom(BUTTON_ZOOM_OUT_FACTOR, Point(width / 2, height / 2))

    def pan(self, dx: float, dy: float) -> None:
        """屏幕空间平移，与缩放无关"""
        self._viewport.offset_x += dx
        self._viewport.offset_y += dy

    def reset(self, surface_height: Optional[float] = None) -> None:
        """重置为左下角锚定的默认视图"""
        self.set_viewport(Viewport.default_for(surface_height))


__all__ = [
    "Viewport",
    "ViewportTransform",
    "clamp_scale",
]
