# Service Name Constants
"""
服务名常量定义

职责：
- 集中定义所有服务名称常量
- 作为 ServiceLocator 注册和获取服务的键

设计原则：
- 纯常量定义，不依赖任何其他模块
- 所有服务名使用 SVC_ 前缀
- 按所属层分组

使用示例：
    from shared.service_names import SVC_EVENT_BUS
    event_bus = ServiceLocator.get(SVC_EVENT_BUS)
"""

# ============================================================
# 共享内核层服务
# ============================================================

# 事件总线 - 跨组件通信
SVC_EVENT_BUS = "event_bus"

# ============================================================
# 基础设施层服务
# ============================================================

# 配置管理器 - 统一配置访问
SVC_CONFIG_MANAGER = "config_manager"

# 项目文件仓库 - 项目/元件文件读写
SVC_PROJECT_REPOSITORY = "project_repository"

# ============================================================
# 应用层服务
# ============================================================

# 项目状态仓库 - 多项目管理与快照切换
SVC_PROJECT_STORE = "project_store"

# 画布编辑入口 - 唯一的画布修改通道
SVC_CANVAS_EDITOR = "canvas_editor"

# 项目持久化服务 - 按项目串行化的保存/加载
SVC_PROJECT_PERSISTENCE = "project_persistence"

# 布局保存任务 - 防抖保存窗口布局
SVC_LAYOUT_SAVE_TASK = "layout_save_task"


__all__ = [
    "SVC_EVENT_BUS",
    "SVC_CONFIG_MANAGER",
    "SVC_PROJECT_REPOSITORY",
    "SVC_PROJECT_STORE",
    "SVC_CANVAS_EDITOR",
    "SVC_PROJECT_PERSISTENCE",
    "SVC_LAYOUT_SAVE_TASK",
]
