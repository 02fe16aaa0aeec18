# Main Window - Application Main Window
"""
主窗口类 - 应用程序主窗口框架

职责：
- 布局：左侧为项目标签栏 + 电路画布，右侧为元件设计器
- 工具栏：新建/打开/保存项目、撤回/重做、缩放/复位视图
- 状态栏：鼠标世界坐标、缩放比例、保存结果
- 关闭窗口时确认未保存项目并立即保存布局

委托关系：
- 项目标签同步委托给 ProjectTabBar
- 窗口状态持久化委托给 WindowStateManager（经 LayoutSaveTask 防抖）
- 元件设计器交互委托给 DesignerController

初始化顺序：
- Phase 2.2，依赖 Phase 1 注册的项目仓库、画布编辑器与持久化服务

设计原则：
- 延迟获取 ServiceLocator 中的服务
- 文件读写经 async_runtime.spawn 在融合事件循环中执行，不阻塞界面
"""

from typing import Any, Dict, Optional

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QAction, QKeySequence
from PyQt6.QtWidgets import (
    QFileDialog, QLabel, QMainWindow, QMessageBox,
    QSplitter, QVBoxLayout, QWidget,
)

from presentation.canvas.canvas_view import CircuitCanvasView
from presentation.designer.designer_canvas import DesignerCanvas
from presentation.designer.designer_controller import DesignerController
from presentation.project_tabs import ProjectTabBar
from presentation.window_state_manager import WindowStateManager
from shared.event_types import (
    EVENT_CANVAS_HISTORY_CHANGED,
    EVENT_PROJECT_CLOSED,
    EVENT_PROJECT_RENAMED,
    EVENT_PROJECT_SAVE_FAILED,
    EVENT_PROJECT_SAVED,
    EVENT_PROJECT_SWITCHED,
)

WINDOW_TITLE = "Circuit Canvas"

# 影响工具栏与状态栏显示的项目事件
_PROJECT_VIEW_EVENTS = (EVENT_PROJECT_SWITCHED, EVENT_PROJECT_CLOSED, EVENT_PROJECT_RENAMED)


class MainWindow(QMainWindow):
    """
    应用程序主窗口

    Args:
        store: 项目状态仓库，缺省从 ServiceLocator 获取
        editor: 画布编辑器，缺省从 ServiceLocator 获取
        persistence: 项目持久化服务，缺省从 ServiceLocator 获取
        layout_save_task: 布局保存任务，缺省从 ServiceLocator 获取
    """

    def __init__(self, store=None, editor=None, persistence=None, layout_save_task=None):
        super().__init__()

        self._event_bus = None
        self._logger = None

        self._store = store or self._locate("SVC_PROJECT_STORE")
        self._editor = editor or self._locate("SVC_CANVAS_EDITOR")
        self._persistence = persistence or self._locate("SVC_PROJECT_PERSISTENCE")

        self._splitters: Dict[str, QSplitter] = {}
        self._actions: Dict[str, QAction] = {}
        self._window_state_manager = WindowStateManager(self, layout_save_task)

        self._setup_window()
        self._setup_central_widget()
        self._setup_toolbar()
        self._setup_statusbar()
        self._connect_signals()
        self._subscribe_events()

        self._window_state_manager.restore_window_state(self._splitters)

    # ============================================================
    # 延迟获取服务
    # ============================================================

    @staticmethod
    def _locate(name_constant: str):
        from shared import service_names
        from shared.service_locator import ServiceLocator
        return ServiceLocator.get(getattr(service_names, name_constant))

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
        """延迟获取 Logger"""
        if self._logger is None:
            try:
                from infrastructure.utils.logger import get_logger
                self._logger = get_logger("main_window")
            except Exception:
                pass
        return self._logger

    @property
    def canvas_view(self) -> CircuitCanvasView:
        return self._canvas_view

    @property
    def designer(self) -> DesignerController:
        return self._designer

    @property
    def tab_bar(self) -> ProjectTabBar:
        return self._tab_bar

    # ============================================================
    # 窗口初始化
    # ============================================================

    def _setup_window(self):
        self.setWindowTitle(WINDOW_TITLE)
        self.setMinimumSize(1000, 700)
        self.resize(1400, 900)

    def _setup_central_widget(self):
        """
        水平分割：左侧项目标签 + 画布，右侧元件设计器
        """
        splitter = QSplitter(Qt.Orientation.Horizontal)

        left = QWidget()
        left_layout = QVBoxLayout(left)
        left_layout.setContentsMargins(0, 0, 0, 0)
        left_layout.setSpacing(0)
        self._tab_bar = ProjectTabBar(self._store, self._persistence)
        self._canvas_view = CircuitCanvasView(self._store.canvas, self._editor)
        left_layout.addWidget(self._tab_bar)
        left_layout.addWidget(self._canvas_view, 1)

        self._designer_canvas = DesignerCanvas()
        self._designer = DesignerController()
        self._designer.attach_surface(self._designer_canvas)

        splitter.addWidget(left)
        splitter.addWidget(self._designer_canvas)
        splitter.setStretchFactor(0, 3)
        splitter.setStretchFactor(1, 2)
        self._splitters["horizontal"] = splitter
        self.setCentralWidget(splitter)

        self._store.set_redraw_callback(self._canvas_view.update)
        self._store.set_confirm_close(self._tab_bar.confirm_close)
        self._editor.set_redraw_callback(self._canvas_view.update)

    def _setup_toolbar(self):
        toolbar = self.addToolBar("main")
        toolbar.setMovable(False)

        definitions = [
            ("new", "新建", QKeySequence.StandardKey.New, self.new_project),
            ("open", "打开", QKeySequence.StandardKey.Open, self.open_project),
            ("save", "保存", QKeySequence.StandardKey.Save, self.save_project),
            None,
            ("undo", "撤回", None, self._editor.undo),
            ("redo", "重做", None, self._editor.redo),
            None,
            ("zoom_in", "放大", None, self._canvas_view.zoom_in),
            ("zoom_out", "缩小", None, self._canvas_view.zoom_out),
            ("reset_view", "复位视图", None, self._canvas_view.reset_view),
        ]
        for definition in definitions:
            if definition is None:
                toolbar.addSeparator()
                continue
            key, text, shortcut, handler = definition
            action = QAction(text, self)
            if shortcut is not None:
                action.setShortcut(shortcut)
            action.triggered.connect(handler)
            toolbar.addAction(action)
            self._actions[key] = action

        self._update_history_actions()

    def _setup_statusbar(self):
        self._position_label = QLabel("X: 0  Y: 0")
        self._zoom_label = QLabel("100%")
        self.statusBar().addPermanentWidget(self._position_label)
        self.statusBar().addPermanentWidget(self._zoom_label)

    def _connect_signals(self):
        self._canvas_view.surface_ready.connect(self._on_canvas_ready)
        self._canvas_view.mouse_world_position.connect(self._on_mouse_position)
        self._canvas_view.viewport_changed.connect(self._on_viewport_changed)
        self._splitters["horizontal"].splitterMoved.connect(self._schedule_layout_save)

    def _subscribe_events(self):
        if not self.event_bus:
            return
        self.event_bus.subscribe(EVENT_PROJECT_SAVED, self._on_project_saved)
        self.event_bus.subscribe(EVENT_PROJECT_SAVE_FAILED, self._on_project_save_failed)
        self.event_bus.subscribe(EVENT_CANVAS_HISTORY_CHANGED, self._on_history_changed)
        for event_type in _PROJECT_VIEW_EVENTS:
            self.event_bus.subscribe(event_type, self._on_active_project_changed)

    # ============================================================
    # 项目操作
    # ============================================================

    def new_project(self):
        self._store.create_project()
        self._canvas_view.reset_view()

    def open_project(self):
        path = QFileDialog.getExistingDirectory(self, "打开项目")
        if not path:
            return
        from shared.async_runtime import spawn
        spawn(self._persistence.load_project(path), name="load_project", on_done=self._on_project_loaded)

    def save_project(self):
        project = self._store.active_project
        if project is None:
            return
        path = project.path
        if not path:
            path = QFileDialog.getExistingDirectory(self, "选择项目保存目录")
            if not path:
                return
        from shared.async_runtime import spawn
        spawn(self._persistence.save_project(project.id, path), name=f"save_project_{project.id}")

    # ============================================================
    # 信号与事件处理
    # ============================================================

    def _on_canvas_ready(self):
        # 画布尺寸已知后再建项目，默认视口才能锚定左下角
        if not self._store.projects:
            self._store.create_project()

    def _on_mouse_position(self, x: float, y: float):
        self._position_label.setText(f"X: {x:.0f}  Y: {y:.0f}")

    def _on_viewport_changed(self, viewport: Dict[str, Any]):
        self._zoom_label.setText(f"{viewport.get('scale', 1.0) * 100:.0f}%")

    def _on_project_loaded(self, result):
        if result.success:
            self.statusBar().showMessage(f"已打开: {result.file_path}", 3000)
        else:
            QMessageBox.warning(self, "打开项目", result.error_message or "项目加载失败")

    def _on_project_saved(self, event_data: Dict[str, Any]):
        data = event_data.get("data", {})
        self.statusBar().showMessage(f"已保存: {data.get('path')}", 3000)

    def _on_project_save_failed(self, event_data: Dict[str, Any]):
        data = event_data.get("data", {})
        QMessageBox.warning(self, "保存项目", data.get("message") or "项目保存失败")

    def _on_history_changed(self, event_data: Dict[str, Any]):
        self._update_history_actions()

    def _on_active_project_changed(self, event_data: Dict[str, Any]):
        """活动项目切换或关闭后，撤回按钮、缩放比例与标题跟随新的活动项目"""
        self._update_history_actions()
        self._zoom_label.setText(f"{self._store.canvas.transform.scale * 100:.0f}%")
        project = self._store.active_project
        self.setWindowTitle(f"{project.name} - {WINDOW_TITLE}" if project else WINDOW_TITLE)

    def _update_history_actions(self):
        if "undo" in self._actions:
            self._actions["undo"].setEnabled(self._editor.can_undo())
            self._actions["redo"].setEnabled(self._editor.can_redo())

    def _schedule_layout_save(self, *args):
        self._window_state_manager.schedule_save(self._splitters)

    # ============================================================
    # Qt 事件
    # ============================================================

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self._schedule_layout_save()

    def moveEvent(self, event):
        super().moveEvent(event)
        self._schedule_layout_save()

    def closeEvent(self, event):
        """窗口关闭事件"""
        if self._store.has_unsaved_projects():
            answer = QMessageBox.question(
                self,
                "退出",
                "有项目尚未保存，确定退出吗？",
                QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
                QMessageBox.StandardButton.No,
            )
            if answer != QMessageBox.StandardButton.Yes:
                event.ignore()
                return

        self._window_state_manager.save_window_state(self._splitters)
        self._tab_bar.unsubscribe_events()
        if self.event_bus:
            self.event_bus.unsubscribe(EVENT_PROJECT_SAVED, self._on_project_saved)
            self.event_bus.unsubscribe(EVENT_PROJECT_SAVE_FAILED, self._on_project_save_failed)
            self.event_bus.unsubscribe(EVENT_CANVAS_HISTORY_CHANGED, self._on_history_changed)
            for event_type in _PROJECT_VIEW_EVENTS:
                self.event_bus.unsubscribe(event_type, self._on_active_project_changed)
            self.event_bus.stop_throttle_timer()
        super().closeEvent(event)


__all__ = ["MainWindow"]
