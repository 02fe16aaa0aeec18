# Circuit Canvas Domain
"""
电路画布域

包含：
- geometry.py: 点、矩形与元件边
- viewport_transform.py: 屏幕/世界坐标变换与缩放平移
- canvas_state.py: 放置的元件、连线与画布快照
- canvas_commands.py: 可撤回的画布编辑命令与撤回栈
- wiring.py: 引脚/连线命中测试与正交走线

命令与走线模块依赖元件设计域的引脚布局，需直接从子模块导入。
"""

from domain.canvas.geometry import Point, Rect, Side, SIDE_PRIORITY
from domain.canvas.viewport_transform import Viewport, ViewportTransform
from domain.canvas.canvas_state import (
    CanvasSnapshot,
    CanvasState,
    Connection,
    PinRef,
    PlacedComponent,
)

__all__ = [
    "Point",
    "Rect",
    "Side",
    "SIDE_PRIORITY",
    "Viewport",
    "ViewportTransform",
    "CanvasSnapshot",
    "CanvasState",
    "Connection",
    "PinRef",
    "PlacedComponent",
]
