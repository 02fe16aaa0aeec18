# Shared Kernel Layer
"""
共享内核层 - 被所有层依赖的跨层基础设施

包含：
- service_names: 服务名常量定义
- service_locator: 服务定位器（依赖注入容器）
- event_types: 事件类型常量定义
- event_bus: 事件总线（发布-订阅通信，含节流发布）
- async_runtime: qasync 融合事件循环与后台任务
- models/: 跨层数据模型（加载/保存结果）

依赖方向（严格遵守，避免循环依赖）：
- service_names.py, event_types.py: 纯常量定义，不依赖任何其他模块
- service_locator.py: 仅依赖 service_names.py
- event_bus.py: 依赖 event_types.py
- 其他模块可依赖以上所有，但不能被以上模块反向依赖
"""

from shared.service_names import (
    SVC_EVENT_BUS,
    SVC_CONFIG_MANAGER,
    SVC_PROJECT_REPOSITORY,
    SVC_PROJECT_STORE,
    SVC_CANVAS_EDITOR,
    SVC_PROJECT_PERSISTENCE,
    SVC_LAYOUT_SAVE_TASK,
)

from shared.service_locator import (
    ServiceLocator,
    ServiceNotFoundError,
)

from shared.event_bus import EventBus

__all__ = [
    # 服务名
    "SVC_EVENT_BUS",
    "SVC_CONFIG_MANAGER",
    "SVC_PROJECT_REPOSITORY",
    "SVC_PROJECT_STORE",
    "SVC_CANVAS_EDITOR",
    "SVC_PROJECT_PERSISTENCE",
    "SVC_LAYOUT_SAVE_TASK",
    # 服务定位器
    "ServiceLocator",
    "ServiceNotFoundError",
    # 事件总线
    "EventBus",
]
