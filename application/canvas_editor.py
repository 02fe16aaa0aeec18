# Canvas Editor - Single Mutation Entry Point
"""
画布编辑器 - 画布内容修改的唯一入口

职责：
- 在活动项目的撤回栈上执行画布命令
- 每次生效的修改（包括撤回/重做）都标记活动项目已修改
- 修改后请求重绘，并发布撤回栈状态变化事件

设计原则：
- 视图、快捷键、拖放等所有修改路径都经由本类，不直接写 CanvasState
- 没有活动项目时拒绝修改并记录警告

使用示例：
    editor = CanvasEditor(canvas, store, request_redraw=view.update)
    instance_id = editor.add_component(definition, Point(100, 80))
    editor.move_component(instance_id, Point(120, 80), gesture_id=1)
    editor.undo()
"""

import uuid
from typing import Any, Callable, Dict, Optional

from application.project_state_store import ProjectStateStore
from domain.canvas.canvas_commands import (
    AddComponentCommand,
    AddConnectionCommand,
    CanvasCommand,
    CommandHistory,
    MoveComponentCommand,
    RemoveComponentCommand,
    RemoveConnectionCommand,
    RotateComponentCommand,
    UpdatePropertiesCommand,
)
from domain.canvas.canvas_state import (
    CanvasState,
    Connection,
    PinRef,
    PlacedComponent,
    new_instance_id,
)
from domain.canvas.geometry import Point
from shared.event_types import EVENT_CANVAS_HISTORY_CHANGED, EVENT_CANVAS_SELECTION_CHANGED


class CanvasEditor:
    """
    画布编辑器

    Args:
        canvas: 活动画布
        store: 项目状态仓库（提供活动项目与撤回栈）
        request_redraw: 修改后的重绘回调
        event_bus: 事件总线，缺省时从 ServiceLocator 延迟获取
    """

    def __init__(
        self,
        canvas: CanvasState,
        store: ProjectStateStore,
        request_redraw: Optional[Callable[[], None]] = None,
        event_bus=None,
    ):
        self._canvas = canvas
        self._store = store
        self._request_redraw = request_redraw
        self._event_bus = event_bus
        self._logger = None

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
                self._logger = get_logger("canvas_editor")
            except Exception:
                pass
        return self._logger

    def set_redraw_callback(self, callback: Optional[Callable[[], None]]) -> None:
        self._request_redraw = callback

    @property
    def canvas(self) -> CanvasState:
        return self._canvas

    # ============================================================
    # 命令执行
    # ============================================================

    def execute(self, command: CanvasCommand) -> bool:
        """
        在活动项目上执行命令

        Returns:
            bool: 命令是否生效
        """
        history = self._active_history()
        if history is None:
            return False

        if not history.execute(command, self._canvas):
            if self.logger:
                self.logger.debug(f"命令未生效: {command.description}")
            return False

        self._after_mutation(history)
        return True

    def undo(self) -> bool:
        history = self._active_history()
        if history is None or history.undo(self._canvas) is None:
            return False
        self._after_mutation(history)
        return True

    def redo(self) -> bool:
        history = self._active_history()
        if history is None or history.redo(self._canvas) is None:
            return False
        self._after_mutation(history)
        return True

    def can_undo(self) -> bool:
        history = self._store.history_for()
        return history.can_undo if history else False

    def can_redo(self) -> bool:
        history = self._store.history_for()
        return history.can_redo if history else False

    # ============================================================
    # 便捷操作
    # ============================================================

    def add_component(
        self,
        definition: Dict[str, Any],
        position: Point,
        properties: Optional[Dict[str, Any]] = None,
    ) -> Optional[str]:
        """
        放置元件（拖放入口）

        Args:
            definition: 元件定义（元件库 JSON）
            position: 元件中心的世界坐标

        Returns:
            Optional[str]: 新实例 ID，失败时为 None
        """
        component = PlacedComponent(
            instance_id=new_instance_id(),
            component_id=str(definition.get("id", "")),
            data=definition,
            position=position,
            properties=dict(properties or {}),
        )
        command = AddComponentCommand(component)
        if not self.execute(command):
            return None
        return command.instance_id

    def remove_component(self, instance_id: str) -> bool:
        return self.execute(RemoveComponentCommand(instance_id))

    def move_component(self, instance_id: str, position: Point,
                       gesture_id: Optional[int] = None) -> bool:
        return self.execute(MoveComponentCommand(instance_id, position, gesture_id))

    def rotate_component(self, instance_id: str) -> bool:
        return self.execute(RotateComponentCommand(instance_id))

    def update_properties(self, instance_id: str, updates: Dict[str, Any]) -> bool:
        return self.execute(UpdatePropertiesCommand(instance_id, updates))

    def connect(self, source: PinRef, target: PinRef,
                extra: Optional[Dict[str, Any]] = None) -> Optional[str]:
        """连接两个引脚，返回连线 ID（同一引脚自连时返回 None）"""
        if (source.instance_id, source.pin_name) == (target.instance_id, target.pin_name):
            return None
        connection = Connection(f"wire-{uuid.uuid4().hex[:8]}", source, target, dict(extra or {}))
        if not self.execute(AddConnectionCommand(connection)):
            return None
        return connection.connection_id

    def remove_connection(self, connection_id: str) -> bool:
        return self.execute(RemoveConnectionCommand(connection_id))

    def remove_selected(self) -> bool:
        """删除选中的元件；没有选中元件时删除选中的连线"""
        selected = self._canvas.selected_instance_id
        if selected:
            return self.remove_component(selected)
        wire = self._canvas.selected_connection_id
        return self.remove_connection(wire) if wire else False

    def rotate_selected(self) -> bool:
        selected = self._canvas.selected_instance_id
        return self.rotate_component(selected) if selected else False

    # ============================================================
    # 选择（不属于内容修改，不标记已修改）
    # ============================================================

    def select(self, instance_id: Optional[str]) -> bool:
        """选中元件（None 取消所有选择），同时取消连线选择"""
        if instance_id is not None and self._canvas.find_component(instance_id) is None:
            return False
        return self._set_selection(instance_id, None)

    def select_connection(self, connection_id: Optional[str]) -> bool:
        """选中连线，同时取消元件选择"""
        if connection_id is not None and self._canvas.find_connection(connection_id) is None:
            return False
        return self._set_selection(None, connection_id)

    # ============================================================
    # 内部方法
    # ============================================================

    def _set_selection(self, instance_id: Optional[str], connection_id: Optional[str]) -> bool:
        if (instance_id, connection_id) == (self._canvas.selected_instance_id,
                                            self._canvas.selected_connection_id):
            return False
        self._canvas.selected_instance_id = instance_id
        self._canvas.selected_connection_id = connection_id
        self._redraw()
        self._publish(EVENT_CANVAS_SELECTION_CHANGED, {
            "instance_id": instance_id,
            "connection_id": connection_id,
        })
        return True

    def _active_history(self) -> Optional[CommandHistory]:
        project_id = self._store.active_project_id
        if project_id is None:
            if self.logger:
                self.logger.warning("没有活动项目，忽略画布修改")
            return None
        return self._store.history_for(project_id)

    def _after_mutation(self, history: CommandHistory) -> None:
        self._store.mark_modified(self._store.active_project_id)
        self._redraw()
        self._publish(EVENT_CANVAS_HISTORY_CHANGED, history.state().to_dict())

    def _redraw(self) -> None:
        if self._request_redraw is not None:
            self._request_redraw()

    def _publish(self, event_type: str, data: Dict[str, Any]) -> None:
        if self.event_bus:
            self.event_bus.publish(event_type, data, source="canvas_editor")


__all__ = ["CanvasEditor"]
