"""边缘命中测试"""

import pytest

from domain.canvas.geometry import Point, Rect, Side
from domain.designer.edge_hit_tester import hit_test

RECT = Rect(0, 0, 100, 80)


@pytest.mark.parametrize("point, expected", [
    (Point(50, 0), Side.TOP),
    (Point(50, 5), Side.TOP),
    (Point(100, 40), Side.RIGHT),
    (Point(50, 80), Side.BOTTOM),
    (Point(0, 40), Side.LEFT),
    (Point(50, 40), None),
    (Point(50, -20), None),
])
def test_sides(point, expected):
    assert hit_test(RECT, point, 10) is expected


def test_corners_follow_fixed_priority():
    assert hit_test(RECT, Point(0, 0), 10) is Side.TOP
    assert hit_test(RECT, Point(100, 0), 10) is Side.TOP
    assert hit_test(RECT, Point(100, 80), 10) is Side.RIGHT
    assert hit_test(RECT, Point(0, 80), 10) is Side.BOTTOM


def test_threshold_is_strict():
    assert hit_test(RECT, Point(50, 10), 10) is None
    assert hit_test(RECT, Point(50, 9.99), 10) is Side.TOP


def test_outside_span_is_not_a_hit():
    # 上边延长线上，但超出 x 范围
    assert hit_test(RECT, Point(105, 2), 10) is Side.RIGHT
    assert hit_test(RECT, Point(120, 2), 10) is None


def test_default_threshold():
    assert hit_test(RECT, Point(50, 9)) is Side.TOP
    assert hit_test(RECT, Point(50, 11)) is None
