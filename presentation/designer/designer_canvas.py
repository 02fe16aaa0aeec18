# Designer Canvas - Component Designer Drawing Surface
"""
元件设计器绘制表面

职责：
- 只负责把 Qt 输入事件转换为信号，并把绘制委托给控制器
- 首次显示时发出 surface_ready，控制器在此之前保持禁用

信号：
- surface_ready: 首次显示
- clicked(float, float): 单击（按下到释放移动小于点击容差）
- dragged(float, float): 拖动增量（屏幕像素）
- wheel_scrolled(float, float, int): 滚轮，参数为锚点坐标与 angleDelta().y()
"""

from typing import Callable, Optional

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtGui import QPainter
from PyQt6.QtWidgets import QWidget

from infrastructure.config.settings import CLICK_MOVE_TOLERANCE


class DesignerCanvas(QWidget):
    """元件设计器绘制表面"""

    surface_ready = pyqtSignal()
    clicked = pyqtSignal(float, float)
    dragged = pyqtSignal(float, float)
    wheel_scrolled = pyqtSignal(float, float, int)

    def __init__(self, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self._ready = False
        self._render_callback: Optional[Callable[[QPainter, int, int], None]] = None
        self._press_x = 0.0
        self._press_y = 0.0
        self._last_x = 0.0
        self._last_y = 0.0
        self._pressed = False
        self._moved = 0.0

        self.setMouseTracking(True)
        self.setMinimumSize(200, 150)
        self.setCursor(Qt.CursorShape.OpenHandCursor)

    @property
    def is_ready(self) -> bool:
        return self._ready

    def set_render_callback(self, callback: Optional[Callable[[QPainter, int, int], None]]) -> None:
        self._render_callback = callback
        self.update()

    # ============================================================
    # Qt 事件
    # ============================================================

    def showEvent(self, event):
        super().showEvent(event)
        if not self._ready:
            self._ready = True
            self.surface_ready.emit()

    def paintEvent(self, event):
        if self._render_callback is None:
            return
        painter = QPainter(self)
        try:
            self._render_callback(painter, self.width(), self.height())
        finally:
            painter.end()

    def mousePressEvent(self, event):
        if event.button() != Qt.MouseButton.LeftButton:
            return
        pos = event.position()
        self._pressed = True
        self._moved = 0.0
        self._press_x = self._last_x = pos.x()
        self._press_y = self._last_y = pos.y()
        self.setCursor(Qt.CursorShape.ClosedHandCursor)

    def mouseMoveEvent(self, event):
        if not self._pressed:
            return
        pos = event.position()
        dx, dy = pos.x() - self._last_x, pos.y() - self._last_y
        self._last_x, self._last_y = pos.x(), pos.y()
        self._moved += abs(dx) + abs(dy)
        self.dragged.emit(dx, dy)

    def mouseReleaseEvent(self, event):
        if event.button() != Qt.MouseButton.LeftButton or not self._pressed:
            return
        self._pressed = False
        self.setCursor(Qt.CursorShape.OpenHandCursor)
        if self._moved < CLICK_MOVE_TOLERANCE:
            self.clicked.emit(self._press_x, self._press_y)

    def wheelEvent(self, event):
        delta = event.angleDelta().y()
        if delta == 0:
            event.ignore()
            return
        pos = event.position()
        self.wheel_scrolled.emit(pos.x(), pos.y(), delta)
        event.accept()


__all__ = ["DesignerCanvas"]
