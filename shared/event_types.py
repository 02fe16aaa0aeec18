# Event Type Constants
"""
事件类型常量定义

职责：
- 集中定义所有事件类型常量
- 避免字符串硬编码
- 作为 EventBus 发布和订阅事件的键

设计原则：
- 纯常量定义，不依赖任何其他模块
- 所有事件名使用 EVENT_ 前缀
- 命名规范：EVENT_{模块}_{动作}，全大写下划线分隔

使用示例：
    from shared.event_types import EVENT_PROJECT_SWITCHED
    event_bus.subscribe(EVENT_PROJECT_SWITCHED, on_project_switched)
"""

# ============================================================
# 初始化事件
# ============================================================

# 所有初始化完成
EVENT_INIT_COMPLETE = "init_complete"

# ============================================================
# 配置事件
# ============================================================

# 配置项变更
# 携带数据：
#   - key: str - 配置键
#   - old_value: Any - 旧值
#   - new_value: Any - 新值
EVENT_CONFIG_CHANGED = "config_changed"

# ============================================================
# 元件设计器事件
# ============================================================

# 元件边被选中（引脚编辑面板据此打开）
# 携带数据：
#   - side: str - 边标识（side1..side4）
#   - side_name: str - 边的显示名称
EVENT_DESIGNER_SIDE_ACTIVATED = "designer_side_activated"

# 取消边选中
# 携带数据：
#   - previous_side: str - 之前选中的边
EVENT_DESIGNER_SELECTION_CLEARED = "designer_selection_cleared"

# 设计器中的元件定义发生变化（引脚、尺寸、名称）
# 携带数据：
#   - name: str - 元件名称
#   - total_pins: int - 引脚总数
EVENT_DESIGNER_SHAPE_CHANGED = "designer_shape_changed"

# ============================================================
# 项目事件
# ============================================================

# 新建或打开项目
# 携带数据：
#   - project_id: int
#   - name: str
#   - path: str | None
EVENT_PROJECT_CREATED = "project_created"

# 活动项目切换
# 携带数据：
#   - project_id: int | None - 新的活动项目
#   - previous_id: int | None - 之前的活动项目
EVENT_PROJECT_SWITCHED = "project_switched"

# 项目进入“有未保存修改”状态
# 携带数据：
#   - project_id: int
EVENT_PROJECT_MODIFIED = "project_modified"

# 项目已保存
# 携带数据：
#   - project_id: int
#   - path: str | None
EVENT_PROJECT_SAVED = "project_saved"

# 项目保存失败
# 携带数据：
#   - project_id: int
#   - message: str
EVENT_PROJECT_SAVE_FAILED = "project_save_failed"

# 项目已关闭
# 携带数据：
#   - project_id: int
#   - active_id: int | None - 关闭后的活动项目
EVENT_PROJECT_CLOSED = "project_closed"

# 项目重命名
# 携带数据：
#   - project_id: int
#   - name: str
EVENT_PROJECT_RENAMED = "project_renamed"

# ============================================================
# 画布事件
# ============================================================

# 视口变化（缩放/平移），高频事件，使用节流发布
# 携带数据：
#   - scale: float
#   - offset_x: float
#   - offset_y: float
EVENT_CANVAS_VIEWPORT_CHANGED = "canvas_viewport_changed"

# 撤回/重做可用性变化
# 携带数据：
#   - can_undo: bool
#   - can_redo: bool
EVENT_CANVAS_HISTORY_CHANGED = "canvas_history_changed"

# 画布选中元件变化
# 携带数据：
#   - instance_id: str | None
EVENT_CANVAS_SELECTION_CHANGED = "canvas_selection_changed"

# ============================================================
# 布局事件
# ============================================================

# 窗口布局已保存
# 携带数据：
#   - keys: list - 保存的配置键
EVENT_LAYOUT_SAVED = "layout_saved"


# ============================================================
# 事件分组
# ============================================================

# 关键事件（handler 执行超过阈值时告警）
CRITICAL_EVENTS = frozenset({
    EVENT_INIT_COMPLETE,
    EVENT_PROJECT_SWITCHED,
    EVENT_PROJECT_CLOSED,
})


__all__ = [
    "EVENT_INIT_COMPLETE",
    "EVENT_CONFIG_CHANGED",
    "EVENT_DESIGNER_SIDE_ACTIVATED",
    "EVENT_DESIGNER_SELECTION_CLEARED",
    "EVENT_DESIGNER_SHAPE_CHANGED",
    "EVENT_PROJECT_CREATED",
    "EVENT_PROJECT_SWITCHED",
    "EVENT_PROJECT_MODIFIED",
    "EVENT_PROJECT_SAVED",
    "EVENT_PROJECT_SAVE_FAILED",
    "EVENT_PROJECT_CLOSED",
    "EVENT_PROJECT_RENAMED",
    "EVENT_CANVAS_VIEWPORT_CHANGED",
    "EVENT_CANVAS_HISTORY_CHANGED",
    "EVENT_CANVAS_SELECTION_CHANGED",
    "EVENT_LAYOUT_SAVED",
    "CRITICAL_EVENTS",
]
