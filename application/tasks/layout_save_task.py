# Layout Save Task - Debounced Window Layout Persistence
"""
窗口布局保存任务

职责：
- 合并窗口移动/缩放、分割器拖动等高频布局变化
- 静默期（默认 400ms）结束后一次性写入 ConfigManager

防抖语义：
- 每次 schedule() 都会重启单次定时器，替换尚未触发的保存
- 只保证最终稳定的布局被保存，不保证每个中间状态
- 关闭窗口时调用 flush() 立即写入尚未保存的布局

使用示例：
    task = LayoutSaveTask(parent=main_window)
    task.schedule({"window_geometry": [x, y, w, h]})
    ...
    task.flush()   # closeEvent 中
"""

from typing import Any, Dict, Optional

from PyQt6.QtCore import QObject, QTimer, pyqtSignal, pyqtSlot

from infrastructure.config.settings import (
    CONFIG_LAYOUT_DEBOUNCE_MS,
    LAYOUT_SAVE_DEBOUNCE_MS,
)
from shared.event_types import EVENT_LAYOUT_SAVED


class LayoutSaveTask(QObject):
    """
    防抖的窗口布局保存任务

    Signals:
        layout_saved(dict): 布局写入配置后发出，携带写入的键值
    """

    layout_saved = pyqtSignal(dict)

    def __init__(self, parent: Optional[QObject] = None, config_manager=None,
                 debounce_ms: Optional[int] = None):
        super().__init__(parent)

        # 待保存的布局：{config_key: value}，同一键的后续值覆盖之前的值
        self._pending: Dict[str, Any] = {}
        self._timer: Optional[QTimer] = None
        self._debounce_ms = debounce_ms

        self._config_manager = config_manager
        self._event_bus = None
        self._logger = None

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
                self._logger = get_logger("layout_save")
            except Exception:
                pass
        return self._logger

    @property
    def debounce_ms(self) -> int:
        if self._debounce_ms is not None:
            return self._debounce_ms
        if self.config_manager:
            return int(self.config_manager.get(CONFIG_LAYOUT_DEBOUNCE_MS, LAYOUT_SAVE_DEBOUNCE_MS))
        return LAYOUT_SAVE_DEBOUNCE_MS

    @property
    def has_pending(self) -> bool:
        return bool(self._pending)

    # ============================================================
    # 调度
    # ============================================================

    def schedule(self, layout: Dict[str, Any]) -> None:
        """
        请求保存布局（重启防抖定时器）

        Args:
            layout: {config_key: value}，如 {"window_geometry": [x, y, w, h]}
        """
        if not layout:
            return
        self._pending.update(layout)

        if self._timer is None:
            self._timer = QTimer(self)
            self._timer.setSingleShot(True)
            self._timer.timeout.connect(self._flush)

        self._timer.start(self.debounce_ms)

    def flush(self) -> bool:
        """
        立即写入待保存的布局

        Returns:
            bool: 是否有布局被写入
        """
        if self._timer is not None and self._timer.isActive():
            self._timer.stop()
        return self._flush()

    def cancel(self) -> None:
        """丢弃待保存的布局"""
        self._pending.clear()
        if self._timer is not None and self._timer.isActive():
            self._timer.stop()

    # ============================================================
    # 内部方法
    # ============================================================

    @pyqtSlot()
    def _flush(self) -> bool:
        if not self._pending:
            return False

        layout = self._pending.copy()
        self._pending.clear()

        if not self.config_manager:
            if self.logger:
                self.logger.warning("ConfigManager 不可用，布局未保存")
            return False

        for key, value in layout.items():
            self.config_manager.set(key, value, save=False)
        saved = self.config_manager.save_config()

        if not saved:
            if self.logger:
                self.logger.error("窗口布局保存失败")
            return False

        if self.logger:
            self.logger.debug(f"窗口布局已保存: {sorted(layout)}")
        self.layout_saved.emit(layout)
        if self.event_bus:
            self.event_bus.publish(EVENT_LAYOUT_SAVED, layout, source="layout_save_task")
        return True


__all__ = ["LayoutSaveTask"]
