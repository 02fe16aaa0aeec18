# Window State Manager - 窗口状态管理器
"""
窗口状态管理器 - 负责窗口位置/尺寸/分割比例的保存与恢复

职责：
- 采集窗口几何与分割器比例
- 布局变化时交给 LayoutSaveTask 防抖保存，关闭窗口时立即落盘
- 启动时从 ConfigManager 恢复上述状态

设计原则：
- 单一职责：仅负责窗口状态的持久化
- 延迟获取 ServiceLocator 中的服务
"""

from typing import Any, Dict, Optional

from PyQt6.QtWidgets import QMainWindow, QSplitter

from infrastructure.config.settings import CONFIG_SPLITTER_SIZES, CONFIG_WINDOW_GEOMETRY

# 分割器各区域的最小尺寸（画布区、设计器区）
MIN_SPLITTER_SIZES = (300, 200)


class WindowStateManager:
    """
    窗口状态管理器

    Args:
        main_window: 主窗口引用
        layout_save_task: 布局保存任务，缺省时从 ServiceLocator 延迟获取
    """

    def __init__(self, main_window: QMainWindow, layout_save_task=None):
        self._main_window = main_window
        self._layout_save_task = layout_save_task
        self._config_manager = None

    @property
    def config_manager(self):
        """延迟获取 ConfigManager"""
        if self._config_manager is None:
            try:
                from shared.service_locator import ServiceLocator
                from shared.service_names import SVC_CONFIG_MANAGER
                self._config_manager = ServiceLocator.get_optional(SVC_CONFIG_MANAGER)
            except Exception:
                pass
        return self._config_manager

    @property
    def layout_save_task(self):
        """延迟获取 LayoutSaveTask"""
        if self._layout_save_task is None:
            try:
                from shared.service_locator import ServiceLocator
                from shared.service_names import SVC_LAYOUT_SAVE_TASK
                self._layout_save_task = ServiceLocator.get_optional(SVC_LAYOUT_SAVE_TASK)
            except Exception:
                pass
        return self._layout_save_task

    def capture_layout(self, splitters: Dict[str, QSplitter]) -> Dict[str, Any]:
        """
        采集当前布局

        Returns:
            {CONFIG_WINDOW_GEOMETRY: [x, y, w, h], CONFIG_SPLITTER_SIZES: {...}}
        """
        geo = self._main_window.geometry()
        layout: Dict[str, Any] = {
            CONFIG_WINDOW_GEOMETRY: [geo.x(), geo.y(), geo.width(), geo.height()],
        }
        sizes = {
            name: splitter.sizes()
            for name, splitter in splitters.items()
            if all(s > 0 for s in splitter.sizes())
        }
        if sizes:
            layout[CONFIG_SPLITTER_SIZES] = sizes
        return layout

    def schedule_save(self, splitters: Dict[str, QSplitter]) -> None:
        """布局变化后调用，由 LayoutSaveTask 合并连续的变化"""
        if self.layout_save_task:
            self.layout_save_task.schedule(self.capture_layout(splitters))

    def save_window_state(self, splitters: Dict[str, QSplitter]) -> None:
        """立即保存（窗口关闭时调用）"""
        if self.layout_save_task:
            self.layout_save_task.schedule(self.capture_layout(splitters))
            self.layout_save_task.flush()
            return
        if not self.config_manager:
            return
        for key, value in self.capture_layout(splitters).items():
            self.config_manager.set(key, value, save=False)
        self.config_manager.save_config()

    def restore_window_state(self, splitters: Dict[str, QSplitter]) -> None:
        if not self.config_manager:
            return

        geometry = self.config_manager.get(CONFIG_WINDOW_GEOMETRY)
        if geometry:
            try:
                x, y, w, h = geometry
                self._main_window.setGeometry(int(x), int(y), int(w), int(h))
            except (ValueError, TypeError):
                pass

        self.restore_splitter_sizes(splitters)

    def restore_splitter_sizes(self, splitters: Dict[str, QSplitter]) -> None:
        if not self.config_manager:
            return

        splitter_sizes = self.config_manager.get(CONFIG_SPLITTER_SIZES)
        if not isinstance(splitter_sizes, dict):
            return

        for name, splitter in splitters.items():
            sizes = splitter_sizes.get(name)
            if not isinstance(sizes, list) or len(sizes) != len(MIN_SPLITTER_SIZES):
                continue
            valid = all(
                isinstance(s, (int, float)) and s >= MIN_SPLITTER_SIZES[i]
                for i, s in enumerate(sizes)
            )
            if valid:
                splitter.setSizes([int(s) for s in sizes])


__all__ = ["WindowStateManager"]
