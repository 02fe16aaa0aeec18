# Event Bus - Publish-Subscribe Communication
"""
事件总线 - 发布-订阅模式的跨组件通信

职责：
- 解耦画布核心与宿主 UI（标签栏、窗口标题、引脚编辑面板）
- handler 始终在主线程执行
- 高频事件（视口缩放/平移）节流合并

初始化顺序：
- Phase 0.3，创建并注册到 ServiceLocator

设计原则：
- publish() 可从任意线程调用（持久化线程回调），内部切换到主线程
- 单个 handler 异常不影响其他订阅者
- 没有 QApplication 时直接同步分发

使用示例：
    from shared.event_bus import EventBus
    from shared.event_types import EVENT_PROJECT_SWITCHED

    def on_switched(event):
        print(event["data"]["project_id"])

    event_bus.subscribe(EVENT_PROJECT_SWITCHED, on_switched)
    event_bus.publish(EVENT_PROJECT_SWITCHED, {"project_id": 2, "previous_id": 1})
"""

import threading
import time
from typing import Any, Callable, Dict, List, Optional

from PyQt6.QtCore import QObject, QMetaObject, QTimer, Qt, pyqtSlot
from PyQt6.QtWidgets import QApplication

from shared.event_types import CRITICAL_EVENTS


# 事件处理器类型
EventHandler = Callable[[Dict[str, Any]], None]

# 默认节流间隔（毫秒）
DEFAULT_THROTTLE_MS = 50

# 关键事件 handler 执行耗时告警阈值（毫秒）
CRITICAL_HANDLER_WARN_MS = 500


class EventBusReceiver(QObject):
    """
    事件接收器

    跨线程发布的事件先入队，再通过 QueuedConnection 在主线程取出执行
    """

    def __init__(self):
        super().__init__()
        self._pending_events: List[tuple] = []
        self._lock = threading.Lock()

    def queue_event(self, handler: EventHandler, event_data: Dict, event_type: str):
        with self._lock:
            self._pending_events.append((handler, event_data, event_type))

    @pyqtSlot()
    def process_pending_events(self):
        """处理待执行的事件（在主线程中调用）"""
        with self._lock:
            events = self._pending_events
            self._pending_events = []

        for handler, event_data, event_type in events:
            execute_handler(handler, event_data, event_type)


def execute_handler(handler: EventHandler, event_data: Dict, event_type: str) -> None:
    """执行单个 handler（异常隔离 + 关键事件耗时告警）"""
    start_time = time.time()
    try:
        handler(event_data)
    except Exception as e:
        handler_name = getattr(handler, '__name__', repr(handler))
        _get_logger().error(
            f"Handler '{handler_name}' failed for event '{event_type}': {e}"
        )
    finally:
        duration_ms = (time.time() - start_time) * 1000
        if event_type in CRITICAL_EVENTS and duration_ms > CRITICAL_HANDLER_WARN_MS:
            handler_name = getattr(handler, '__name__', repr(handler))
            _get_logger().warning(
                f"Handler '{handler_name}' for critical event '{event_type}' "
                f"took {duration_ms:.0f}ms"
            )


def _get_logger():
    from infrastructure.utils.logger import get_logger
    return get_logger("event_bus")


class EventBus:
    """
    事件总线

    线程安全说明：
    - 订阅表由 threading.Lock 保护
    - 主线程发布时同步分发，其他线程发布时排队到主线程
    """

    def __init__(self):
        self._subscribers: Dict[str, List[EventHandler]] = {}
        self._lock = threading.Lock()
        self._receiver = EventBusReceiver()

        # 节流缓冲区：{event_type: {"data": Any, "source": str}}
        self._throttle_buffer: Dict[str, Dict[str, Any]] = {}
        self._throttle_lock = threading.Lock()
        self._throttle_timer: Optional[QTimer] = None

    # ============================================================
    # 订阅管理
    # ============================================================

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        """
        订阅事件

        Args:
            event_type: 事件类型（使用 event_types.py 中的常量）
            handler: 事件处理函数，签名为 (event: Dict) -> None

        Raises:
            ValueError: handler 不可调用
        """
        if not callable(handler):
            raise ValueError(f"Handler must be callable: {handler}")

        with self._lock:
            handlers = self._subscribers.setdefault(event_type, [])
            if handler not in handlers:
                handlers.append(handler)

    def unsubscribe(self, event_type: str, handler: EventHandler) -> bool:
        """
        取消订阅

        Returns:
            bool: handler 存在并已移除时为 True
        """
        with self._lock:
            handlers = self._subscribers.get(event_type)
            if handlers and handler in handlers:
                handlers.remove(handler)
                return True
        return False

    def clear_all(self) -> None:
        """清空所有订阅（仅用于测试场景）"""
        with self._lock:
            self._subscribers.clear()

    # ============================================================
    # 发布
    # ============================================================

    def publish(self, event_type: str, data: Any = None, source: str = None) -> None:
        """
        发布事件

        Args:
            event_type: 事件类型
            data: 事件数据
            source: 发布者标识
        """
        event_data = {
            "type": event_type,
            "data": data,
            "timestamp": time.time(),
            "source": source,
        }

        with self._lock:
            handlers = list(self._subscribers.get(event_type, []))

        if not handlers:
            return

        if (QApplication.instance() is None
                or threading.current_thread() is threading.main_thread()):
            for handler in handlers:
                execute_handler(handler, event_data, event_type)
        else:
            for handler in handlers:
                self._receiver.queue_event(handler, event_data, event_type)
            QMetaObject.invokeMethod(
                self._receiver,
                "process_pending_events",
                Qt.ConnectionType.QueuedConnection,
            )

    def publish_throttled(
        self,
        event_type: str,
        data: Any = None,
        throttle_ms: int = DEFAULT_THROTTLE_MS,
        source: str = None,
    ) -> None:
        """
        发布节流事件

        时间窗口内的多次发布合并为一次，保留最新的 data。
        必须在主线程调用（视口事件均来自 UI 事件处理）。

        Args:
            event_type: 事件类型
            data: 事件数据
            throttle_ms: 节流间隔（毫秒）
            source: 发布者标识
        """
        with self._throttle_lock:
            self._throttle_buffer[event_type] = {"data": data, "source": source}

        if QApplication.instance() is None:
            # 无事件循环，直接刷新
            self._flush_throttle_buffer()
            return

        if self._throttle_timer is None:
            self._throttle_timer = QTimer()
            self._throttle_timer.setSingleShot(True)
            self._throttle_timer.timeout.connect(self._flush_throttle_buffer)

        if not self._throttle_timer.isActive():
            self._throttle_timer.start(throttle_ms)

    def _flush_throttle_buffer(self) -> None:
        with self._throttle_lock:
            pending = self._throttle_buffer
            self._throttle_buffer = {}

        for event_type, info in pending.items():
            self.publish(event_type, info["data"], info.get("source"))

    def stop_throttle_timer(self) -> None:
        """停止节流定时器并刷新剩余事件（应用关闭时调用）"""
        if self._throttle_timer:
            self._throttle_timer.stop()
            self._throttle_timer = None
        self._flush_throttle_buffer()


# ============================================================
# 模块导出
# ============================================================

__all__ = [
    "EventBus",
    "EventBusReceiver",
    "EventHandler",
    "execute_handler",
]
