# Pin Side Interaction - Designer Edge Selection State Machine
"""
引脚边选择状态机

职责：
- 消费边缘命中测试结果，驱动元件设计器中"选择一条边添加引脚"的交互
- 状态变化时请求重绘，并通过 EventBus 通知引脚编辑面板

状态转换：
    Idle + 点击(命中边 S)          → SideSelected(S)，发布 EVENT_DESIGNER_SIDE_ACTIVATED
    SideSelected(s) + 点击(S' ≠ s) → SideSelected(S')，发布 EVENT_DESIGNER_SIDE_ACTIVATED
    SideSelected(s) + 点击(s)      → 保持不变，不重复发布，不重绘
    SideSelected(s) + 点击(空白)   → Idle，发布 EVENT_DESIGNER_SELECTION_CLEARED
    Idle + 点击(空白)              → 保持不变
    任意状态 + reset               → Idle（之前有选中时发布 EVENT_DESIGNER_SELECTION_CLEARED）

绘制表面就绪前状态机处于禁用状态，点击被忽略。

使用示例：
    interaction = PinSideInteraction(redraw=canvas.update)
    interaction.enable()
    interaction.click(screen_rect, Point(50, 0))   # → Side.TOP
"""

from enum import Enum, auto
from typing import Callable, Optional

from domain.canvas.geometry import Point, Rect, Side
from domain.designer.edge_hit_tester import hit_test
from infrastructure.config.settings import DEFAULT_HIT_THRESHOLD
from shared.event_types import (
    EVENT_DESIGNER_SELECTION_CLEARED,
    EVENT_DESIGNER_SIDE_ACTIVATED,
)


class InteractionState(Enum):
    """状态机状态"""
    IDLE = auto()
    SIDE_SELECTED = auto()


class PinSideInteraction:
    """
    引脚边选择状态机

    Args:
        redraw: 状态变化时调用的重绘回调
        event_bus: 事件总线，缺省时从 ServiceLocator 延迟获取
        threshold: 边缘命中容差（屏幕像素）
    """

    def __init__(
        self,
        redraw: Optional[Callable[[], None]] = None,
        event_bus=None,
        threshold: float = DEFAULT_HIT_THRESHOLD,
    ):
        self._redraw = redraw
        self._event_bus = event_bus
        self._threshold = threshold
        self._selected_side: Optional[Side] = None
        self._enabled = False
        self._logger = None

    # ============================================================
    # 延迟获取服务
    # ============================================================

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
                self._logger = get_logger("pin_side_interaction")
            except Exception:
                pass
        return self._logger

    # ============================================================
    # 状态访问
    # ============================================================

    @property
    def state(self) -> InteractionState:
        if self._selected_side is None:
            return InteractionState.IDLE
        return InteractionState.SIDE_SELECTED

    @property
    def selected_side(self) -> Optional[Side]:
        return self._selected_side

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def threshold(self) -> float:
        return self._threshold

    @threshold.setter
    def threshold(self, value: float) -> None:
        self._threshold = max(1.0, float(value))

    def set_redraw_callback(self, redraw: Optional[Callable[[], None]]) -> None:
        self._redraw = redraw

    def enable(self) -> None:
        self._enabled = True

    def disable(self) -> None:
        self._enabled = False

    # ============================================================
    # 事件输入
    # ============================================================

    def click(self, shape_rect: Rect, point: Point) -> Optional[Side]:
        """
        处理一次点击

        Args:
            shape_rect: 元件矩形（屏幕坐标）
            point: 点击位置（屏幕坐标）

        Returns:
            Optional[Side]: 命中的边；禁用时始终返回 None
        """
        if not self._enabled:
            if self.logger:
                self.logger.debug("绘制表面未就绪，忽略点击")
            return None

        side = hit_test(shape_rect, point, self._threshold)
        self.handle_hit(side)
        return side

    def handle_hit(self, side: Optional[Side]) -> bool:
        """
        根据命中结果执行状态转换

        Returns:
            bool: 状态是否发生变化
        """
        previous = self._selected_side

        if side is None:
            if previous is None:
                return False
            self._selected_side = None
            self._after_transition()
            self._publish(EVENT_DESIGNER_SELECTION_CLEARED, {"previous_side": previous.value})
            return True

        if side is previous:
            # 重复点击同一条边：幂等
            return False

        self._selected_side = side
        self._after_transition()
        self._publish(EVENT_DESIGNER_SIDE_ACTIVATED, {
            "side": side.value,
            "side_name": side.display_name,
        })
        return True

    def reset(self) -> bool:
        """
        设计器清空时复位到 Idle

        Returns:
            bool: 状态是否发生变化
        """
        return self.handle_hit(None)

    # ============================================================
    # 内部方法
    # ============================================================

    def _after_transition(self) -> None:
        if self.logger:
            side = self._selected_side.display_name if self._selected_side else "无"
            self.logger.debug(f"边选择状态: {self.state.name} ({side})")
        if self._redraw is not None:
            self._redraw()

    def _publish(self, event_type: str, data: dict) -> None:
        if self.event_bus:
            self.event_bus.publish(event_type, data, source="pin_side_interaction")


__all__ = [
    "InteractionState",
    "PinSideInteraction",
]
