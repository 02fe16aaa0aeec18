# Circuit Canvas View - Main Drawing Surface
"""
电路画布视图

职责：
- 作为主画布的绘制表面，把 Qt 输入事件翻译为视口操作或画布编辑
- 滚轮以光标为锚点缩放，拖动空白处平移，拖动元件移动
- 从选中元件的引脚拖出连线，在另一引脚上释放完成连接；点击连线选中
- 键盘：Delete/Backspace 删除选中元件或连线、R 旋转、Esc 取消选择、Ctrl+Z 撤回、Ctrl+Shift+Z / Ctrl+Y 重做
- 接收元件库拖放，在落点放置元件

信号：
- surface_ready: 首次显示时发出，控制器据此激活
- viewport_changed(dict): 视口变化时发出 {scale, offset_x, offset_y}
- mouse_world_position(float, float): 鼠标所在世界坐标（Y 轴上正下负）

设计原则：
- 视图不直接修改画布内容，所有修改经由 CanvasEditor
- 视口不属于项目内容，平移/缩放不标记项目已修改
"""

import itertools
import json
from typing import Optional

from PyQt6.QtCore import QPointF, Qt, pyqtSignal
from PyQt6.QtGui import QPainter
from PyQt6.QtWidgets import QWidget

from application.canvas_editor import CanvasEditor
from domain.canvas.canvas_state import CanvasState
from domain.canvas.geometry import Point
from domain.canvas.wiring import PinHit, connection_at, pin_at
from infrastructure.config.settings import (
    CLICK_MOVE_TOLERANCE,
    VIEWPORT_EVENT_THROTTLE_MS,
    WHEEL_ZOOM_IN_FACTOR,
    WHEEL_ZOOM_OUT_FACTOR,
)
from presentation.canvas.scene_renderer import CircuitContentDrawer, SceneRenderer
from shared.event_types import EVENT_CANVAS_VIEWPORT_CHANGED

# 元件库拖放使用的 MIME 类型，内容为元件定义 JSON
COMPONENT_MIME_TYPE = "application/x-circuit-component"


def _point(pos: QPointF) -> Point:
    return Point(pos.x(), pos.y())


class CircuitCanvasView(QWidget):
    """
    电路画布视图

    Args:
        canvas: 活动画布
        editor: 画布编辑器（唯一修改入口）
        renderer: 场景渲染器，缺省新建
    """

    surface_ready = pyqtSignal()
    viewport_changed = pyqtSignal(dict)
    mouse_world_position = pyqtSignal(float, float)

    _gesture_ids = itertools.count(1)

    def __init__(
        self,
        canvas: CanvasState,
        editor: CanvasEditor,
        renderer: Optional[SceneRenderer] = None,
        parent: Optional[QWidget] = None,
    ):
        super().__init__(parent)
        self._canvas = canvas
        self._editor = editor
        self._renderer = renderer or SceneRenderer()
        self._content_drawer = CircuitContentDrawer(canvas)

        self._ready = False
        self._press_pos: Optional[Point] = None
        self._last_pos: Optional[Point] = None
        self._panning = False
        self._drag_instance_id: Optional[str] = None
        self._drag_grab_offset = Point(0.0, 0.0)
        self._drag_gesture_id: Optional[int] = None
        self._wire_source: Optional[PinHit] = None

        self._event_bus = None
        self._logger = None

        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self.setMouseTracking(True)
        self.setAcceptDrops(True)
        self.setMinimumSize(200, 150)
        self.setCursor(Qt.CursorShape.OpenHandCursor)

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
                self._logger = get_logger("canvas_view")
            except Exception:
                pass
        return self._logger

    @property
    def is_ready(self) -> bool:
        return self._ready

    @property
    def renderer(self) -> SceneRenderer:
        return self._renderer

    @property
    def is_wiring(self) -> bool:
        """是否正在从引脚拖出连线"""
        return self._wire_source is not None

    # ============================================================
    # 视图操作（工具栏）
    # ============================================================

    def zoom_in(self) -> None:
        self._canvas.transform.zoom_in(self.width(), self.height())
        self._viewport_updated()

    def zoom_out(self) -> None:
        self._canvas.transform.zoom_out(self.width(), self.height())
        self._viewport_updated()

    def reset_view(self) -> None:
        self._canvas.transform.reset(self.height())
        self._viewport_updated()

    # ============================================================
    # Qt 事件
    # ============================================================

    def showEvent(self, event):
        super().showEvent(event)
        self._canvas.set_surface_size(self.width(), self.height())
        if not self._ready:
            self._ready = True
            self.surface_ready.emit()

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self._canvas.set_surface_size(self.width(), self.height())

    def paintEvent(self, event):
        painter = QPainter(self)
        try:
            self._renderer.render(
                painter, self.width(), self.height(),
                self._canvas.transform, self._content_drawer,
            )
        finally:
            painter.end()

    def wheelEvent(self, event):
        delta = event.angleDelta().y()
        if delta == 0:
            event.ignore()
            return
        factor = WHEEL_ZOOM_IN_FACTOR if delta > 0 else WHEEL_ZOOM_OUT_FACTOR
        self._canvas.transform.zoom(factor, _point(event.position()))
        self._viewport_updated()
        event.accept()

    def mousePressEvent(self, event):
        if event.button() != Qt.MouseButton.LeftButton:
            super().mousePressEvent(event)
            return

        screen = _point(event.position())
        self._press_pos = screen
        self._last_pos = screen
        world = self._canvas.transform.screen_to_world(screen)

        selected = self._canvas.selected_instance_id
        pin = pin_at(self._canvas, world, instance_id=selected) if selected else None
        if pin is not None:
            self._start_wire(pin, world)
            event.accept()
            return

        component = self._canvas.component_at(world)
        connection = connection_at(self._canvas, world) if component is None else None
        if component is not None:
            self._editor.select(component.instance_id)
            self._drag_instance_id = component.instance_id
            self._drag_grab_offset = world - component.position
            self._drag_gesture_id = next(self._gesture_ids)
            self.setCursor(Qt.CursorShape.SizeAllCursor)
        elif connection is not None:
            self._editor.select_connection(connection.connection_id)
        else:
            self._editor.select(None)
            self._panning = True
            self.setCursor(Qt.CursorShape.ClosedHandCursor)
        event.accept()

    def mouseMoveEvent(self, event):
        screen = _point(event.position())
        world = self._canvas.transform.screen_to_world(screen)
        self.mouse_world_position.emit(float(round(world.x)), float(round(-world.y)))

        if self._last_pos is None:
            return

        if self._wire_source is not None:
            self._content_drawer.pending_wire = (self._wire_source.position, world)
            self.update()
        elif self._panning:
            delta = screen - self._last_pos
            self._canvas.transform.pan(delta.x, delta.y)
            self._viewport_updated()
        elif self._drag_instance_id is not None:
            # 未超过点击容差前不产生移动命令
            if (screen - self._press_pos).manhattan_length() >= CLICK_MOVE_TOLERANCE:
                self._editor.move_component(
                    self._drag_instance_id,
                    world - self._drag_grab_offset,
                    gesture_id=self._drag_gesture_id,
                )
        self._last_pos = screen

    def mouseReleaseEvent(self, event):
        if event.button() != Qt.MouseButton.LeftButton:
            super().mouseReleaseEvent(event)
            return
        if self._wire_source is not None:
            world = self._canvas.transform.screen_to_world(_point(event.position()))
            self._finish_wire(pin_at(self._canvas, world))
        self._press_pos = None
        self._last_pos = None
        self._panning = False
        self._drag_instance_id = None
        self._drag_gesture_id = None
        self.setCursor(Qt.CursorShape.OpenHandCursor)

    def keyPressEvent(self, event):
        key = event.key()
        modifiers = event.modifiers()
        ctrl = bool(modifiers & Qt.KeyboardModifier.ControlModifier)
        shift = bool(modifiers & Qt.KeyboardModifier.ShiftModifier)

        if ctrl and key == Qt.Key.Key_Z:
            if shift:
                self._editor.redo()
            else:
                self._editor.undo()
        elif ctrl and key == Qt.Key.Key_Y:
            self._editor.redo()
        elif key in (Qt.Key.Key_Delete, Qt.Key.Key_Backspace):
            self._editor.remove_selected()
        elif key == Qt.Key.Key_R and not ctrl:
            self._editor.rotate_selected()
        elif key == Qt.Key.Key_Escape:
            if self._wire_source is not None:
                self._finish_wire(None)
            self._editor.select(None)
        else:
            super().keyPressEvent(event)
            return
        event.accept()

    # ============================================================
    # 拖放
    # ============================================================

    def dragEnterEvent(self, event):
        if event.mimeData().hasFormat(COMPONENT_MIME_TYPE):
            event.acceptProposedAction()
        else:
            event.ignore()

    def dragMoveEvent(self, event):
        if event.mimeData().hasFormat(COMPONENT_MIME_TYPE):
            event.acceptProposedAction()

    def dropEvent(self, event):
        raw = bytes(event.mimeData().data(COMPONENT_MIME_TYPE)).decode("utf-8")
        try:
            definition = json.loads(raw)
        except json.JSONDecodeError as e:
            if self.logger:
                self.logger.warning(f"拖放的元件数据无效: {e}")
            event.ignore()
            return
        if not isinstance(definition, dict):
            event.ignore()
            return

        world = self._canvas.transform.screen_to_world(_point(event.position()))
        if self._editor.add_component(definition, world) is not None:
            event.acceptProposedAction()
        else:
            event.ignore()

    # ============================================================
    # 内部方法
    # ============================================================

    def _start_wire(self, pin: PinHit, world: Point) -> None:
        self._wire_source = pin
        self._content_drawer.pending_wire = (pin.position, world)
        self.setCursor(Qt.CursorShape.CrossCursor)
        self.update()

    def _finish_wire(self, target: Optional[PinHit]) -> None:
        source = self._wire_source
        self._wire_source = None
        self._content_drawer.pending_wire = None
        if source is not None and target is not None:
            wire_id = self._editor.connect(source.to_ref(), target.to_ref())
            if wire_id is None and self.logger:
                self.logger.debug(f"连线未建立: {source.pin_name} -> {target.pin_name}")
        self.update()

    def _viewport_updated(self) -> None:
        viewport = self._canvas.transform.snapshot()
        data = {
            "scale": viewport.scale,
            "offset_x": viewport.offset_x,
            "offset_y": viewport.offset_y,
        }
        self.update()
        self.viewport_changed.emit(data)
        if self.event_bus:
            self.event_bus.publish_throttled(
                EVENT_CANVAS_VIEWPORT_CHANGED, data,
                throttle_ms=VIEWPORT_EVENT_THROTTLE_MS, source="canvas_view",
            )


__all__ = [
    "CircuitCanvasView",
    "COMPONENT_MIME_TYPE",
]
