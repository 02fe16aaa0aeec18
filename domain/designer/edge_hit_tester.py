# Edge Hit Tester - Shape Side Picking
"""
边缘命中测试 - 判断屏幕点击落在元件矩形的哪条边上

判定规则：
- 上边：|y - rect.y| < threshold 且 x ∈ [rect.x, rect.right]
- 右边：|x - rect.right| < threshold 且 y ∈ [rect.y, rect.bottom]
- 下边：|y - rect.bottom| < threshold 且 x ∈ [rect.x, rect.right]
- 左边：|x - rect.x| < threshold 且 y ∈ [rect.y, rect.bottom]

角点同时满足两条边时，按 上 → 右 → 下 → 左 的固定顺序取第一个。

threshold 为屏幕像素容差：调用方应传入屏幕坐标系下的矩形与点，
这样命中区域的视觉大小不随缩放变化。
"""

from typing import Optional

from domain.canvas.geometry import Point, Rect, Side, SIDE_PRIORITY
from infrastructure.config.settings import DEFAULT_HIT_THRESHOLD


def _hits_side(rect: Rect, point: Point, threshold: float, side: Side) -> bool:
    within_x = rect.x <= point.x <= rect.right
    within_y = rect.y <= point.y <= rect.bottom

    if side is Side.TOP:
        return abs(point.y - rect.y) < threshold and within_x
    if side is Side.RIGHT:
        return abs(point.x - rect.right) < threshold and within_y
    if side is Side.BOTTOM:
        return abs(point.y - rect.bottom) < threshold and within_x
    return abs(point.x - rect.x) < threshold and within_y


def hit_test(rect: Rect, point: Point, threshold: float = DEFAULT_HIT_THRESHOLD) -> Optional[Side]:
    """
    命中测试

    Args:
        rect: 元件矩形（屏幕坐标）
        point: 点击位置（屏幕坐标）
        threshold: 容差（像素）

    Returns:
        Optional[Side]: 命中的边，未命中返回 None
    """
    for side in SIDE_PRIORITY:
        if _hits_side(rect, point, threshold, side):
            return side
    return None


__all__ = ["hit_test"]
