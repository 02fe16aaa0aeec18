# Designer Controller - Component Designer Coordination
"""
元件设计器控制器

职责：
- 持有正在编辑的 DesignerShape、设计器自己的视口变换与引脚边选择状态机
- 把 DesignerCanvas 的点击/拖动/滚轮转换为边选择、平移、缩放
- 编辑引脚后按引脚数量自动扩展元件尺寸并重绘
- 元件定义的校验、导入与保存

绘制表面就绪：
- 构造时不要求绘制表面存在，状态机保持禁用
- attach_surface(None) 记录警告并保持禁用，设计器其余功能仍可用
- 表面发出 surface_ready（或已就绪）后启用交互

使用示例：
    controller = DesignerController()
    controller.attach_surface(designer_canvas)
    controller.add_pin(Side.TOP, "VCC", PinType.POWER)
"""

import asyncio
from typing import Any, Dict, List, Optional, Tuple

from PyQt6.QtCore import QPointF, QRectF, Qt
from PyQt6.QtGui import QColor, QFont, QPainter

from domain.canvas.geometry import Point, Rect, Side
from domain.canvas.viewport_transform import Viewport, ViewportTransform
from domain.designer.designer_shape import DesignerShape, Pin, PinType
from domain.designer.pin_layout import PinLayoutCalculator, fit_shape_to_pins, pin_box
from domain.designer.pin_side_interaction import PinSideInteraction
from infrastructure.config.settings import (
    CONFIG_HIT_THRESHOLD,
    DEFAULT_HIT_THRESHOLD,
    DEFAULT_SURFACE_HEIGHT,
    DEFAULT_SURFACE_WIDTH,
    WHEEL_ZOOM_IN_FACTOR,
    WHEEL_ZOOM_OUT_FACTOR,
)
from infrastructure.persistence.project_repository import ProjectRepository
from presentation.canvas.scene_renderer import ContentDrawer, SceneRenderer, scaled_pen, to_qrect
from resources.theme import (
    CANVAS_THEME,
    COMPONENT_CORNER_RADIUS,
    LINE_WIDTH_COMPONENT,
    LINE_WIDTH_SIDE_HIGHLIGHT,
)
from shared.event_types import EVENT_DESIGNER_SHAPE_CHANGED
from shared.models.persistence_result import LoadResult, SaveResult

# 引脚标签与引脚的距离（世界单位）
PIN_LABEL_OFFSET = 28
PIN_LABEL_FONT_SIZE = 10


# ============================================================
# 设计器内容绘制器
# ============================================================

class DesignerContentDrawer(ContentDrawer):
    """
    设计器内容绘制器

    绘制顺序：元件主体 → 选中边高亮 → 引脚（引脚覆盖边框）→ 元件名称
    """

    def __init__(self, shape: DesignerShape, rect: Rect, selected_side: Optional[Side],
                 theme: Optional[dict] = None):
        self._shape = shape
        self._rect = rect
        self._selected_side = selected_side
        self._theme = theme or CANVAS_THEME

    def draw(self, painter: QPainter, transform: ViewportTransform, visible: Rect) -> None:
        scale = transform.scale
        rect = self._rect

        painter.setPen(scaled_pen(self._theme["component_border"], LINE_WIDTH_COMPONENT, scale))
        painter.setBrush(QColor(self._theme["component_fill"]))
        radius = COMPONENT_CORNER_RADIUS / scale
        painter.drawRoundedRect(to_qrect(rect), radius, radius)

        if self._selected_side is not None:
            self._draw_selected_side(painter, scale)

        self._draw_pins(painter, scale)

        painter.setPen(QColor(self._theme["text"]))
        font = QFont(painter.font())
        font.setPixelSize(int(max(12, min(16, rect.width / 8))))
        painter.setFont(font)
        painter.drawText(to_qrect(rect), int(Qt.AlignmentFlag.AlignCenter),
                         self._shape.name or "未命名元件")

    def side_segment(self, side: Side) -> Tuple[Point, Point]:
        rect = self._rect
        if side is Side.TOP:
            return Point(rect.x, rect.y), Point(rect.right, rect.y)
        if side is Side.RIGHT:
            return Point(rect.right, rect.y), Point(rect.right, rect.bottom)
        if side is Side.BOTTOM:
            return Point(rect.x, rect.bottom), Point(rect.right, rect.bottom)
        return Point(rect.x, rect.y), Point(rect.x, rect.bottom)

    def _draw_selected_side(self, painter: QPainter, scale: float) -> None:
        start, end = self.side_segment(self._selected_side)
        pen = scaled_pen(self._theme["side_highlight"], LINE_WIDTH_SIDE_HIGHLIGHT, scale)
        pen.setCapStyle(Qt.PenCapStyle.RoundCap)
        painter.setPen(pen)
        painter.drawLine(QPointF(start.x, start.y), QPointF(end.x, end.y))

    def _draw_pins(self, painter: QPainter, scale: float) -> None:
        calculator = PinLayoutCalculator(self._rect)
        font = QFont(painter.font())
        font.setPixelSize(PIN_LABEL_FONT_SIZE)

        for placement in calculator.all_placements(self._shape):
            painter.setPen(scaled_pen(self._theme["pin_border"], 1, scale))
            painter.setBrush(QColor(placement.pin.type.color))
            painter.drawRect(to_qrect(pin_box(placement.side, placement.position)))

            painter.save()
            painter.setFont(font)
            painter.setPen(QColor(self._theme["text"]))
            self._draw_pin_label(painter, placement.side, placement.position, placement.pin.name)
            painter.restore()

    def _draw_pin_label(self, painter: QPainter, side: Side, position: Point, name: str) -> None:
        """上下边的标签纵向书写，左右边的标签横向书写"""
        width, height = 80.0, 14.0
        if side is Side.TOP:
            painter.translate(position.x, position.y - PIN_LABEL_OFFSET)
            painter.rotate(90)
            box = QRectF(-width / 2, -height / 2, width, height)
            align = Qt.AlignmentFlag.AlignCenter
        elif side is Side.BOTTOM:
            painter.translate(position.x, position.y + PIN_LABEL_OFFSET)
            painter.rotate(-90)
            box = QRectF(-width / 2, -height / 2, width, height)
            align = Qt.AlignmentFlag.AlignCenter
        elif side is Side.RIGHT:
            box = QRectF(position.x + PIN_LABEL_OFFSET, position.y - height / 2, width, height)
            align = Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignVCenter
        else:
            box = QRectF(position.x - PIN_LABEL_OFFSET - width, position.y - height / 2, width, height)
            align = Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter
        painter.drawText(box, int(align), name)


# ============================================================
# 设计器控制器
# ============================================================

class DesignerController:
    """
    元件设计器控制器

    Args:
        shape: 初始元件，缺省新建空元件
        renderer: 场景渲染器，缺省新建
        repository: 元件文件仓库
        event_bus: 事件总线，缺省时从 ServiceLocator 延迟获取
    """

    def __init__(
        self,
        shape: Optional[DesignerShape] = None,
        renderer: Optional[SceneRenderer] = None,
        repository: Optional[ProjectRepository] = None,
        event_bus=None,
    ):
        self._shape = shape or DesignerShape()
        self._renderer = renderer or SceneRenderer()
        self._repository = repository or ProjectRepository()
        self._event_bus = event_bus
        self._transform = ViewportTransform(Viewport(1.0, 0.0, 0.0))
        self._surface = None
        self._surface_warning_logged = False
        self._logger = None

        self._interaction = PinSideInteraction(
            redraw=self.request_redraw,
            event_bus=event_bus,
            threshold=self._configured_threshold(),
        )

    @property
    def event_bus(self):
        """延迟获取 EventBus"""
        if self._event_bus is None:
            try:
                from shared.service_locator import ServiceLocator
                from shared.service_names import SVC_EVENT_BUS
                self._event_bus = ServiceLocator.get_optional(SVC_EVENT_BUS)
            except Exception:
                pass
        return self._event_bus

    @property
    def logger(self):
        if self._logger is None:
            try:
                from infrastructure.utils.logger import get_logger
                self._logger = get_logger("designer_controller")
            except Exception:
                pass
        return self._logger

    def _configured_threshold(self) -> float:
        try:
            from shared.service_locator import ServiceLocator
            from shared.service_names import SVC_CONFIG_MANAGER
            config_manager = ServiceLocator.get_optional(SVC_CONFIG_MANAGER)
        except Exception:
            config_manager = None
        if config_manager is None:
            return DEFAULT_HIT_THRESHOLD
        return float(config_manager.get(CONFIG_HIT_THRESHOLD, DEFAULT_HIT_THRESHOLD))

    # ============================================================
    # 状态访问
    # ============================================================

    @property
    def shape(self) -> DesignerShape:
        return self._shape

    @property
    def transform(self) -> ViewportTransform:
        return self._transform

    @property
    def interaction(self) -> PinSideInteraction:
        return self._interaction

    @property
    def selected_side(self) -> Optional[Side]:
        return self._interaction.selected_side

    @property
    def is_active(self) -> bool:
        return self._interaction.enabled

    # ============================================================
    # 绘制表面
    # ============================================================

    def attach_surface(self, surface) -> bool:
        """
        绑定绘制表面

        Args:
            surface: DesignerCanvas，None 表示表面不存在

        Returns:
            bool: 是否绑定成功
        """
        if surface is None:
            if self.logger:
                self.logger.warning("元件设计器绘制表面不存在，设计器交互已禁用")
            self._interaction.disable()
            return False

        self._surface = surface
        surface.clicked.connect(self.handle_click)
        surface.dragged.connect(self.handle_drag)
        surface.wheel_scrolled.connect(self.handle_wheel)
        surface.set_render_callback(self.render)

        if surface.is_ready:
            self._activate()
        else:
            surface.surface_ready.connect(self._activate)
        return True

    def _activate(self) -> None:
        if self._interaction.enabled:
            return
        self._interaction.enable()
        if self.logger:
            self.logger.debug("元件设计器绘制表面已就绪")
        self.request_redraw()

    def surface_size(self) -> Tuple[float, float]:
        if self._surface is None:
            return float(DEFAULT_SURFACE_WIDTH), float(DEFAULT_SURFACE_HEIGHT)
        return float(self._surface.width()), float(self._surface.height())

    def request_redraw(self) -> None:
        if self._surface is not None:
            self._surface.update()

    def render(self, painter: QPainter, width: int, height: int) -> bool:
        drawer = DesignerContentDrawer(self._shape, self.shape_rect(), self.selected_side)
        return self._renderer.render(painter, width, height, self._transform, drawer)

    # ============================================================
    # 几何
    # ============================================================

    def shape_rect(self) -> Rect:
        """元件矩形（世界坐标），居中于绘制表面"""
        width, height = self.surface_size()
        return Rect(
            (width - self._shape.width) / 2,
            (height - self._shape.height) / 2,
            self._shape.width,
            self._shape.height,
        )

    def screen_shape_rect(self) -> Rect:
        """元件矩形（屏幕坐标），用于屏幕空间的边缘命中测试"""
        return self._transform.world_rect_to_screen(self.shape_rect())

    # ============================================================
    # 输入
    # ============================================================

    def handle_click(self, x: float, y: float) -> Optional[Side]:
        if not self._interaction.enabled:
            if not self._surface_warning_logged and self.logger:
                self.logger.warning("元件设计器尚未就绪，忽略点击")
                self._surface_warning_logged = True
            return None
        return self._interaction.click(self.screen_shape_rect(), Point(x, y))

    def handle_drag(self, dx: float, dy: float) -> None:
        self._transform.pan(dx, dy)
        self.request_redraw()

    def handle_wheel(self, x: float, y: float, delta: int) -> None:
        if delta == 0:
            return
        factor = WHEEL_ZOOM_IN_FACTOR if delta > 0 else WHEEL_ZOOM_OUT_FACTOR
        self._transform.zoom(factor, Point(x, y))
        self.request_redraw()

    def zoom_in(self) -> None:
        self._transform.zoom_in(*self.surface_size())
        self.request_redraw()

    def zoom_out(self) -> None:
        self._transform.zoom_out(*self.surface_size())
        self.request_redraw()

    def reset_view(self) -> None:
        self._transform.set_viewport(Viewport(1.0, 0.0, 0.0))
        self.request_redraw()

    # ============================================================
    # 元件编辑
    # ============================================================

    def set_side_pins(self, side: Side, pins: List[Pin]) -> Tuple[bool, str]:
        ok, message = self._shape.set_side_pins(side, pins)
        if ok:
            self._shape_changed()
        return ok, message

    def add_pin(self, side: Side, name: str, pin_type: PinType) -> Tuple[bool, str]:
        ok, message = self._shape.add_pin(side, name, pin_type)
        if ok:
            self._shape_changed()
        return ok, message

    def remove_pin(self, side: Side, order: int) -> bool:
        removed = self._shape.remove_pin(side, order)
        if removed:
            self._shape_changed()
        return removed

    def set_dimensions(self, width: float, height: float) -> None:
        self._shape.set_dimensions(width, height)
        self._shape_changed()

    def set_info(self, name: Optional[str] = None, description: Optional[str] = None,
                 category: Optional[str] = None) -> None:
        if name is not None:
            self._shape.name = name.strip()
        if description is not None:
            self._shape.description = description
        if category is not None:
            self._shape.category = category
        self._shape_changed()

    def reset_designer(self) -> None:
        """清空设计器：新元件、复位边选择与视图"""
        self._shape = DesignerShape()
        self._interaction.reset()
        self._transform.set_viewport(Viewport(1.0, 0.0, 0.0))
        self._shape_changed()

    def load_definition(self, definition: Dict[str, Any]) -> Tuple[bool, str]:
        """
        导入元件定义进行编辑

        Returns:
            (是否成功, 错误信息)
        """
        try:
            shape = DesignerShape.from_dict(definition)
        except (ValueError, TypeError, AttributeError) as e:
            if self.logger:
                self.logger.warning(f"元件定义无效: {e}")
            return False, str(e)
        self._shape = shape
        self._interaction.reset()
        self._shape_changed()
        return True, ""

    def to_definition(self) -> Dict[str, Any]:
        return self._shape.to_dict()

    # ============================================================
    # 元件文件
    # ============================================================

    async def save_component(self, path: Optional[str] = None) -> SaveResult:
        """校验并保存当前元件"""
        ok, errors = self._shape.validate()
        if not ok:
            return SaveResult.failed(path or "", "; ".join(errors))
        result = await asyncio.to_thread(self._repository.save_component, self.to_definition(), path)
        if not result.success and self.logger:
            self.logger.error(f"元件保存失败: {result.error_message}")
        return result

    async def open_component(self, path: str) -> LoadResult:
        """从文件导入元件"""
        result = await asyncio.to_thread(self._repository.load_component, path)
        if not result.success:
            return result
        ok, message = self.load_definition(result.data)
        if not ok:
            return LoadResult.parse_error(path, message)
        return result

    # ============================================================
    # 内部方法
    # ============================================================

    def _shape_changed(self) -> None:
        fit_shape_to_pins(self._shape)
        self.request_redraw()
        if self.event_bus:
            self.event_bus.publish(EVENT_DESIGNER_SHAPE_CHANGED, {
                "name": self._shape.name,
                "width": self._shape.width,
                "height": self._shape.height,
                "total_pins": self._shape.total_pins,
            }, source="designer_controller")


__all__ = [
    "DesignerController",
    "DesignerContentDrawer",
]
