# Canvas Commands - Reversible Canvas Edits
"""
画布编辑命令 - 可撤回的离散编辑操作

职责：
- 将每一次画布内容修改建模为一个可执行、可撤回的命令
- CommandHistory 维护撤回/重做栈（每个项目一份）

设计原则：
- 命令只保存自身需要的数据副本，不引用画布中的活动对象
- 撤回语义仅为"撤销最后一条命令"
- 同一拖拽手势内对同一元件的连续移动合并为一条命令
- 移动/旋转元件时重算相连连线的走线，撤回时恢复原路径

使用示例：
    history = CommandHistory(max_steps=50)
    history.execute(AddComponentCommand(component), canvas)
    history.undo(canvas)
    history.redo(canvas)
"""

import copy
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from domain.canvas.canvas_state import (
    CanvasState,
    Connection,
    PlacedComponent,
    normalize_rotation,
)
from domain.canvas.geometry import Point
from domain.canvas.wiring import reroute_connections, restore_paths, route_connection
from infrastructure.config.settings import DEFAULT_MAX_UNDO_STEPS, ROTATION_STEP


class CanvasCommand:
    """
    画布命令基类

    子类实现 apply/revert。apply 返回 False 表示命令无法执行（如目标元件不存在），
    此时不会进入撤回栈。
    """

    description = "编辑"

    def apply(self, canvas: CanvasState) -> bool:
        raise NotImplementedError

    def revert(self, canvas: CanvasState) -> None:
        raise NotImplementedError

    def merge_with(self, other: "CanvasCommand") -> bool:
        """尝试把 other 合并进当前命令，成功返回 True"""
        return False


# ============================================================
# 元件命令
# ============================================================

class AddComponentCommand(CanvasCommand):
    """放置元件"""

    description = "放置元件"

    def __init__(self, component: PlacedComponent):
        self._component = copy.deepcopy(component)

    @property
    def instance_id(self) -> str:
        return self._component.instance_id

    def apply(self, canvas: CanvasState) -> bool:
        if canvas.find_component(self._component.instance_id) is not None:
            return False
        canvas.components.append(copy.deepcopy(self._component))
        return True

    def revert(self, canvas: CanvasState) -> None:
        index = canvas.component_index(self._component.instance_id)
        if index >= 0:
            del canvas.components[index]
        if canvas.selected_instance_id == self._component.instance_id:
            canvas.selected_instance_id = None


class RemoveComponentCommand(CanvasCommand):
    """删除元件及与其相连的所有连线"""

    description = "删除元件"

    def __init__(self, instance_id: str):
        self._instance_id = instance_id
        self._removed: Optional[Tuple[int, PlacedComponent]] = None
        self._removed_connections: List[Tuple[int, Connection]] = []

    def apply(self, canvas: CanvasState) -> bool:
        index = canvas.component_index(self._instance_id)
        if index < 0:
            return False

        self._removed = (index, canvas.components.pop(index))
        self._removed_connections = [
            (i, c) for i, c in enumerate(canvas.connections) if c.touches(self._instance_id)
        ]
        canvas.connections = [c for c in canvas.connections if not c.touches(self._instance_id)]
        if canvas.selected_connection is None:
            canvas.selected_connection_id = None
        if canvas.selected_instance_id == self._instance_id:
            canvas.selected_instance_id = None
        return True

    def revert(self, canvas: CanvasState) -> None:
        if self._removed is None:
            return
        index, component = self._removed
        canvas.components.insert(index, copy.deepcopy(component))
        for conn_index, connection in self._removed_connections:
            canvas.connections.insert(conn_index, copy.deepcopy(connection))


class MoveComponentCommand(CanvasCommand):
    """
    移动元件

    gesture_id 相同且目标元件相同的后续移动合并到本命令，
    一次拖拽只产生一条撤回记录。
    """

    description = "移动元件"

    def __init__(self, instance_id: str, new_position: Point, gesture_id: Optional[int] = None):
        self._instance_id = instance_id
        self._new_position = new_position
        self._old_position: Optional[Point] = None
        self._gesture_id = gesture_id
        self._previous_paths: Dict[str, Any] = {}

    def apply(self, canvas: CanvasState) -> bool:
        component = canvas.find_component(self._instance_id)
        if component is None:
            return False
        if self._old_position is None:
            self._old_position = component.position
        component.position = self._new_position
        self._previous_paths = reroute_connections(canvas, self._instance_id)
        return True

    def revert(self, canvas: CanvasState) -> None:
        component = canvas.find_component(self._instance_id)
        if component is not None and self._old_position is not None:
            component.position = self._old_position
        restore_paths(canvas, self._previous_paths)

    def merge_with(self, other: CanvasCommand) -> bool:
        if (isinstance(other, MoveComponentCommand)
                and self._gesture_id is not None
                and other._gesture_id == self._gesture_id
                and other._instance_id == self._instance_id):
            self._new_position = other._new_position
            return True
        return False


class RotateComponentCommand(CanvasCommand):
    """旋转元件（默认逆时针 90°）"""

    description = "旋转元件"

    def __init__(self, instance_id: str, delta: int = ROTATION_STEP):
        self._instance_id = instance_id
        self._delta = delta
        self._previous_paths: Dict[str, Any] = {}

    def apply(self, canvas: CanvasState) -> bool:
        component = canvas.find_component(self._instance_id)
        if component is None:
            return False
        component.rotation = normalize_rotation(component.rotation + self._delta)
        self._previous_paths = reroute_connections(canvas, self._instance_id)
        return True

    def revert(self, canvas: CanvasState) -> None:
        component = canvas.find_component(self._instance_id)
        if component is not None:
            component.rotation = normalize_rotation(component.rotation - self._delta)
        restore_paths(canvas, self._previous_paths)


class UpdatePropertiesCommand(CanvasCommand):
    """更新元件实例属性（浅合并）"""

    description = "修改属性"

    def __init__(self, instance_id: str, updates: Dict[str, Any]):
        self._instance_id = instance_id
        self._updates = copy.deepcopy(updates)
        self._previous: Optional[Dict[str, Any]] = None

    def apply(self, canvas: CanvasState) -> bool:
        component = canvas.find_component(self._instance_id)
        if component is None:
            return False
        self._previous = copy.deepcopy(component.properties)
        component.properties.update(copy.deepcopy(self._updates))
        return True

    def revert(self, canvas: CanvasState) -> None:
        component = canvas.find_component(self._instance_id)
        if component is not None and self._previous is not None:
            component.properties = copy.deepcopy(self._previous)


# ============================================================
# 连线命令
# ============================================================

class AddConnectionCommand(CanvasCommand):
    """新增连线（两端元件都必须存在，未给出走线路径时按引脚位置计算）"""

    description = "新增连线"

    def __init__(self, connection: Connection):
        self._connection = copy.deepcopy(connection)

    @property
    def connection_id(self) -> str:
        return self._connection.connection_id

    def apply(self, canvas: CanvasState) -> bool:
        source = canvas.find_component(self._connection.source.instance_id)
        target = canvas.find_component(self._connection.target.instance_id)
        if source is None or target is None:
            return False
        if canvas.find_connection(self._connection.connection_id) is not None:
            return False
        connection = copy.deepcopy(self._connection)
        if not connection.extra.get("path"):
            connection.extra["path"] = [p.to_dict() for p in route_connection(canvas, connection)]
        canvas.connections.append(connection)
        return True

    def revert(self, canvas: CanvasState) -> None:
        canvas.connections = [
            c for c in canvas.connections
            if c.connection_id != self._connection.connection_id
        ]
        if canvas.selected_connection_id == self._connection.connection_id:
            canvas.selected_connection_id = None


class RemoveConnectionCommand(CanvasCommand):
    """删除连线"""

    description = "删除连线"

    def __init__(self, connection_id: str):
        self._connection_id = connection_id
        self._removed: Optional[Tuple[int, Connection]] = None

    def apply(self, canvas: CanvasState) -> bool:
        for index, connection in enumerate(canvas.connections):
            if connection.connection_id == self._connection_id:
                self._removed = (index, canvas.connections.pop(index))
                if canvas.selected_connection_id == self._connection_id:
                    canvas.selected_connection_id = None
                return True
        return False

    def revert(self, canvas: CanvasState) -> None:
        if self._removed is not None:
            index, connection = self._removed
            canvas.connections.insert(index, copy.deepcopy(connection))


# ============================================================
# 撤回栈
# ============================================================

@dataclass
class HistoryState:
    """撤回栈状态（供工具栏按钮启用/禁用）"""

    can_undo: bool
    can_redo: bool
    undo_description: str = ""
    redo_description: str = ""

    def to_dict(self) -> dict:
        return {
            "can_undo": self.can_undo,
            "can_redo": self.can_redo,
            "undo_description": self.undo_description,
            "redo_description": self.redo_description,
        }


class CommandHistory:
    """
    撤回/重做栈

    - 执行新命令清空重做栈
    - 撤回栈超过 max_steps 时丢弃最早的命令
    """

    def __init__(self, max_steps: int = DEFAULT_MAX_UNDO_STEPS):
        self._max_steps = max(1, max_steps)
        self._undo_stack: List[CanvasCommand] = []
        self._redo_stack: List[CanvasCommand] = []

    @property
    def can_undo(self) -> bool:
        return bool(self._undo_stack)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo_stack)

    @property
    def undo_count(self) -> int:
        return len(self._undo_stack)

    def state(self) -> HistoryState:
        return HistoryState(
            can_undo=self.can_undo,
            can_redo=self.can_redo,
            undo_description=self._undo_stack[-1].description if self._undo_stack else "",
            redo_description=self._redo_stack[-1].description if self._redo_stack else "",
        )

    def execute(self, command: CanvasCommand, canvas: CanvasState) -> bool:
        """
        执行命令并压入撤回栈

        Returns:
            bool: 命令是否生效
        """
        if not command.apply(canvas):
            return False

        self._redo_stack.clear()
        if self._undo_stack and self._undo_stack[-1].merge_with(command):
            return True

        self._undo_stack.append(command)
        if len(self._undo_stack) > self._max_steps:
            self._undo_stack.pop(0)
        return True

    def undo(self, canvas: CanvasState) -> Optional[CanvasCommand]:
        if not self._undo_stack:
            return None
        command = self._undo_stack.pop()
        command.revert(canvas)
        self._redo_stack.append(command)
        return command

    def redo(self, canvas: CanvasState) -> Optional[CanvasCommand]:
        if not self._redo_stack:
            return None
        command = self._redo_stack.pop()
        command.apply(canvas)
        self._undo_stack.append(command)
        return command

    def clear(self) -> None:
        self._undo_stack.clear()
        self._redo_stack.clear()


__all__ = [
    "CanvasCommand",
    "AddComponentCommand",
    "RemoveComponentCommand",
    "MoveComponentCommand",
    "RotateComponentCommand",
    "UpdatePropertiesCommand",
    "AddConnectionCommand",
    "RemoveConnectionCommand",
    "CommandHistory",
    "HistoryState",
]
