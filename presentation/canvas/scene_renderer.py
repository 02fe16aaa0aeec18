# Scene Renderer - Grid, Axes and Canvas Content
"""
场景渲染器

职责：
- 清空绘制表面，应用视口仿射变换 translate(offset) → scale(scale)
- 只在可见世界矩形内绘制固定周期的网格
- 绘制坐标轴、原点与 X/Y 标签
- 通过可插拔的内容绘制器绘制元件与连线

设计原则：
- 变换块前后成对 save()/restore()，即使内容绘制抛出异常也会恢复
- 线宽除以 scale，保证屏幕上恒定 1px
- 除绘制表面外不修改任何状态

使用示例：
    renderer = SceneRenderer()
    painter = QPainter(widget)
    renderer.render(painter, widget.width(), widget.height(), canvas.transform,
                    CircuitContentDrawer(canvas))
    painter.end()
"""

import math
import time
from typing import List, Optional, Tuple

from PyQt6.QtCore import QPointF, QRectF, Qt
from PyQt6.QtGui import QColor, QFont, QPainter, QPainterPath, QPen

from domain.canvas.canvas_state import CanvasState, Connection, PlacedComponent
from domain.canvas.geometry import Point, Rect, Side
from domain.canvas.viewport_transform import ViewportTransform
from domain.designer.designer_shape import DEFAULT_PIN_COLOR, PinType
from domain.canvas.wiring import connection_points
from domain.designer.pin_layout import PinLayoutCalculator, pin_box
from infrastructure.config.settings import (
    AXIS_EXTENT,
    AXIS_LABEL_FONT_SIZE,
    GRID_SIZE,
    ORIGIN_DOT_RADIUS,
)
from infrastructure.utils.logger import log_performance
from resources.theme import (
    CANVAS_THEME,
    COMPONENT_CORNER_RADIUS,
    LINE_WIDTH_AXIS,
    LINE_WIDTH_COMPONENT,
    LINE_WIDTH_COMPONENT_SELECTED,
    LINE_WIDTH_CONNECTION,
    LINE_WIDTH_GRID,
    LINE_WIDTH_SELECTION_BOX,
    SELECTION_BOX_PADDING,
    SELECTION_DASH,
)

# 单帧渲染超过该耗时（毫秒）时记录性能日志
SLOW_RENDER_MS = 50


# ============================================================
# 工具函数
# ============================================================

def grid_lines(rect: Rect, grid_size: float = GRID_SIZE) -> Tuple[List[float], List[float]]:
    """
    计算覆盖可见世界矩形的网格线坐标

    Args:
        rect: 可见世界矩形
        grid_size: 网格周期（世界单位）

    Returns:
        (竖线 X 坐标列表, 横线 Y 坐标列表)
    """
    if grid_size <= 0:
        return [], []
    start_x = math.floor(rect.x / grid_size)
    end_x = math.ceil(rect.right / grid_size)
    start_y = math.floor(rect.y / grid_size)
    end_y = math.ceil(rect.bottom / grid_size)
    xs = [i * grid_size for i in range(start_x, end_x + 1)]
    ys = [i * grid_size for i in range(start_y, end_y + 1)]
    return xs, ys


def scaled_pen(color: str, width_px: float, scale: float) -> QPen:
    """屏幕上宽度为 width_px 的画笔（已处于 scale 变换中）"""
    pen = QPen(QColor(color))
    pen.setWidthF(width_px / scale)
    return pen


def to_qrect(rect: Rect) -> QRectF:
    return QRectF(rect.x, rect.y, rect.width, rect.height)


def pin_color(pin_type: str) -> str:
    parsed = PinType.from_value(pin_type)
    return parsed.color if parsed else DEFAULT_PIN_COLOR


# ============================================================
# 内容绘制器
# ============================================================

class ContentDrawer:
    """
    内容绘制器基类

    draw() 在世界坐标系下调用（变换已应用），visible 为可见世界矩形。
    """

    def draw(self, painter: QPainter, transform: ViewportTransform, visible: Rect) -> None:
        raise NotImplementedError


class CircuitContentDrawer(ContentDrawer):
    """
    电路画布内容绘制器

    先绘制连线，再绘制元件（元件覆盖连线端点），最后绘制正在拖出的临时连线。

    Attributes:
        pending_wire: (起点引脚, 当前鼠标) 世界坐标，无临时连线时为 None
    """

    def __init__(self, canvas: CanvasState, theme: Optional[dict] = None):
        self._canvas = canvas
        self._theme = theme or CANVAS_THEME
        self.pending_wire: Optional[Tuple[Point, Point]] = None

    def draw(self, painter: QPainter, transform: ViewportTransform, visible: Rect) -> None:
        scale = transform.scale
        for connection in self._canvas.connections:
            self._draw_connection(painter, connection, scale)

        selected = self._canvas.selected_instance_id
        for component in self._canvas.components:
            if not component.bounds.intersects(visible):
                continue
            self._draw_component(painter, component, scale, component.instance_id == selected)

        if self.pending_wire is not None:
            self._draw_pending_wire(painter, scale)

    # ============================================================
    # 连线
    # ============================================================

    def connection_points(self, connection: Connection) -> List[Point]:
        return connection_points(self._canvas, connection)

    def _draw_connection(self, painter: QPainter, connection: Connection, scale: float) -> None:
        points = self.connection_points(connection)
        if len(points) < 2:
            return

        selected = connection.connection_id == self._canvas.selected_connection_id
        color = self._theme["connection_selected"] if selected else self._theme["connection"]
        width = LINE_WIDTH_CONNECTION + (2 if selected else 0)

        path = QPainterPath(QPointF(points[0].x, points[0].y))
        for point in points[1:]:
            path.lineTo(QPointF(point.x, point.y))

        painter.save()
        pen = scaled_pen(color, width, scale)
        pen.setCapStyle(Qt.PenCapStyle.RoundCap)
        pen.setJoinStyle(Qt.PenJoinStyle.RoundJoin)
        painter.setPen(pen)
        painter.setBrush(Qt.BrushStyle.NoBrush)
        painter.drawPath(path)
        painter.restore()

    def _draw_pending_wire(self, painter: QPainter, scale: float) -> None:
        start, end = self.pending_wire
        painter.save()
        pen = scaled_pen(self._theme["temp_connection"], LINE_WIDTH_CONNECTION, scale)
        pen.setDashPattern([SELECTION_DASH, SELECTION_DASH])
        painter.setPen(pen)
        painter.drawLine(QPointF(start.x, start.y), QPointF(end.x, end.y))
        painter.restore()

    # ============================================================
    # 元件
    # ============================================================

    def _draw_component(self, painter: QPainter, component: PlacedComponent,
                        scale: float, selected: bool) -> None:
        width, height = component.body_size
        local_rect = Rect(-width / 2, -height / 2, width, height)

        painter.save()
        painter.translate(component.position.x, component.position.y)
        if component.rotation:
            painter.rotate(component.rotation)

        if selected:
            painter.setPen(scaled_pen(self._theme["component_selected_border"],
                                      LINE_WIDTH_COMPONENT_SELECTED, scale))
            painter.setBrush(QColor(self._theme["component_selected_fill"]))
        else:
            painter.setPen(scaled_pen(self._theme["component_border"], LINE_WIDTH_COMPONENT, scale))
            painter.setBrush(QColor(self._theme["component_fill"]))
        radius = COMPONENT_CORNER_RADIUS / scale
        painter.drawRoundedRect(to_qrect(local_rect), radius, radius)

        self._draw_pins(painter, component, local_rect, scale)

        if selected:
            pen = scaled_pen(self._theme["selection_box"], LINE_WIDTH_SELECTION_BOX, scale)
            pen.setDashPattern([SELECTION_DASH, SELECTION_DASH])
            painter.setPen(pen)
            painter.setBrush(Qt.BrushStyle.NoBrush)
            painter.drawRect(to_qrect(local_rect.adjusted(SELECTION_BOX_PADDING / scale)))
        painter.restore()

        # 名称不跟随旋转
        painter.save()
        painter.setPen(QColor(self._theme["text"]))
        font = QFont(painter.font())
        font.setPixelSize(12)
        painter.setFont(font)
        painter.drawText(to_qrect(component.bounds), int(Qt.AlignmentFlag.AlignCenter), component.name)
        painter.restore()

    def _draw_pins(self, painter: QPainter, component: PlacedComponent,
                   local_rect: Rect, scale: float) -> None:
        raw_pins = component.data.get("pins") or {}
        if not raw_pins:
            return
        calculator = PinLayoutCalculator(local_rect)
        painter.setPen(scaled_pen(self._theme["pin_border"], 1, scale))
        for side_key, entries in raw_pins.items():
            side = Side.from_value(side_key)
            if side is None or not entries:
                continue
            ordered = sorted(entries, key=lambda p: p.get("order") or 0)
            for index, entry in enumerate(ordered):
                position = calculator.pin_position(side, index, len(ordered))
                painter.setBrush(QColor(pin_color(str(entry.get("type", "")))))
                painter.drawRect(to_qrect(pin_box(side, position)))


# ============================================================
# 场景渲染器
# ============================================================

class SceneRenderer:
    """
    场景渲染器

    Args:
        grid_size: 网格周期（世界单位）
        show_grid: 是否绘制网格
        theme: 颜色表，缺省使用 CANVAS_THEME
    """

    def __init__(self, grid_size: float = GRID_SIZE, show_grid: bool = True,
                 theme: Optional[dict] = None):
        self.grid_size = grid_size
        self.show_grid = show_grid
        self._theme = theme or CANVAS_THEME
        self._logger = None

    @property
    def logger(self):
        if self._logger is None:
            try:
                from infrastructure.utils.logger import get_logger
                self._logger = get_logger("scene_renderer")
            except Exception:
                pass
        return self._logger

    def render(
        self,
        painter: Optional[QPainter],
        width: float,
        height: float,
        transform: ViewportTransform,
        content_drawer: Optional[ContentDrawer] = None,
    ) -> bool:
        """
        渲染一帧

        Args:
            painter: 已 begin() 的 QPainter
            width: 表面宽度（屏幕像素）
            height: 表面高度（屏幕像素）
            transform: 视口变换
            content_drawer: 内容绘制器，可为 None

        Returns:
            bool: 是否完成绘制（绘制表面不可用时返回 False）
        """
        if painter is None or not painter.isActive():
            if self.logger:
                self.logger.warning("绘制表面不可用，跳过渲染")
            return False

        start = time.perf_counter()
        painter.fillRect(QRectF(0, 0, width, height), QColor(self._theme["background"]))

        scale = transform.scale
        offset = transform.offset
        visible = transform.visible_world_rect(width, height)

        painter.save()
        try:
            painter.translate(offset.x, offset.y)
            painter.scale(scale, scale)
            painter.setRenderHint(QPainter.RenderHint.Antialiasing, True)

            if self.show_grid:
                self.draw_grid(painter, visible, scale)
            self.draw_axes(painter, scale)
            if content_drawer is not None:
                content_drawer.draw(painter, transform, visible)
        finally:
            painter.restore()

        elapsed_ms = (time.perf_counter() - start) * 1000
        if elapsed_ms > SLOW_RENDER_MS:
            log_performance("canvas_render", elapsed_ms)
        return True

    # ============================================================
    # 网格与坐标轴
    # ============================================================

    def draw_grid(self, painter: QPainter, visible: Rect, scale: float) -> None:
        xs, ys = grid_lines(visible, self.grid_size)
        if not xs or not ys:
            return
        painter.setPen(scaled_pen(self._theme["grid"], LINE_WIDTH_GRID, scale))
        top, bottom = ys[0], ys[-1]
        left, right = xs[0], xs[-1]
        for x in xs:
            painter.drawLine(QPointF(x, top), QPointF(x, bottom))
        for y in ys:
            painter.drawLine(QPointF(left, y), QPointF(right, y))

    def draw_axes(self, painter: QPainter, scale: float) -> None:
        painter.setPen(scaled_pen(self._theme["axis"], LINE_WIDTH_AXIS, scale))
        painter.drawLine(QPointF(-AXIS_EXTENT, 0), QPointF(AXIS_EXTENT, 0))
        painter.drawLine(QPointF(0, -AXIS_EXTENT), QPointF(0, AXIS_EXTENT))

        radius = ORIGIN_DOT_RADIUS / scale
        painter.setPen(Qt.PenStyle.NoPen)
        painter.setBrush(QColor(self._theme["axis"]))
        painter.drawEllipse(QPointF(0, 0), radius, radius)
        painter.setBrush(Qt.BrushStyle.NoBrush)

        painter.setPen(QColor(self._theme["axis_label"]))
        font = QFont(painter.font())
        font.setPixelSize(max(1, round(AXIS_LABEL_FONT_SIZE / scale)))
        painter.setFont(font)
        box = AXIS_LABEL_FONT_SIZE * 2 / scale
        align = int(Qt.AlignmentFlag.AlignCenter)
        painter.drawText(QRectF(50 - box / 2, -10 - box / 2, box, box), align, "X")
        painter.drawText(QRectF(10 - box / 2, -50 - box / 2, box, box), align, "Y")


__all__ = [
    "SceneRenderer",
    "ContentDrawer",
    "CircuitContentDrawer",
    "grid_lines",
    "scaled_pen",
    "pin_color",
]
