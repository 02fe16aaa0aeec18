# Theme - Canvas Color Definitions
"""
主题配色定义

职责：
- 定义画布、元件设计器与项目标签栏使用的颜色和线宽
- 仅实现浅色主题

说明：
- 线宽、圆角等以屏幕像素为单位，绘制时除以 scale 以保持屏幕上的恒定粗细
"""

from typing import Dict


# ============================================================
# 基础色彩
# ============================================================

COLOR_BG_PRIMARY = "#ffffff"      # 画布背景（纯白）
COLOR_BG_SECONDARY = "#f8f9fa"    # 面板背景（浅灰白）
COLOR_BORDER = "#e0e0e0"          # 边框/分隔线

COLOR_TEXT_PRIMARY = "#333333"    # 主文本
COLOR_TEXT_SECONDARY = "#666666"  # 次要文本

COLOR_ACCENT = "#2196f3"          # 强调色（选中、临时连线）
COLOR_ACCENT_LIGHT = "#e3f2fd"    # 选中元件填充


# ============================================================
# 画布
# ============================================================

COLOR_GRID = "#e0e0e0"            # 网格线
COLOR_AXIS = "#999999"            # 坐标轴与原点
COLOR_AXIS_LABEL = "#666666"      # 坐标轴标签

COLOR_COMPONENT_FILL = "#f0f0f0"  # 元件主体填充
COLOR_COMPONENT_BORDER = "#333333"

COLOR_CONNECTION = "#1976d2"      # 连线
COLOR_CONNECTION_SELECTED = "#ff4444"


# ============================================================
# 元件设计器
# ============================================================

COLOR_SIDE_HIGHLIGHT = "#ff4444"  # 选中边高亮（红色）
COLOR_PIN_BORDER = "#333333"


# ============================================================
# 线宽（屏幕像素）
# ============================================================

LINE_WIDTH_GRID = 1
LINE_WIDTH_AXIS = 1
LINE_WIDTH_COMPONENT = 2
LINE_WIDTH_COMPONENT_SELECTED = 3
LINE_WIDTH_SELECTION_BOX = 2
LINE_WIDTH_CONNECTION = 2
LINE_WIDTH_SIDE_HIGHLIGHT = 3

COMPONENT_CORNER_RADIUS = 4       # 元件主体圆角
SELECTION_BOX_PADDING = 6         # 选中框与元件的间距
SELECTION_DASH = 5                # 选中框虚线段长


# ============================================================
# 项目标签栏
# ============================================================

TAB_MODIFIED_MARK = "●"           # 未保存修改标记


# ============================================================
# 主题字典（便于批量访问）
# ============================================================

CANVAS_THEME: Dict[str, str] = {
    "background": COLOR_BG_PRIMARY,
    "grid": COLOR_GRID,
    "axis": COLOR_AXIS,
    "axis_label": COLOR_AXIS_LABEL,
    "component_fill": COLOR_COMPONENT_FILL,
    "component_border": COLOR_COMPONENT_BORDER,
    "component_selected_fill": COLOR_ACCENT_LIGHT,
    "component_selected_border": COLOR_ACCENT,
    "selection_box": COLOR_ACCENT,
    "connection": COLOR_CONNECTION,
    "connection_selected": COLOR_CONNECTION_SELECTED,
    "temp_connection": COLOR_ACCENT,
    "side_highlight": COLOR_SIDE_HIGHLIGHT,
    "pin_border": COLOR_PIN_BORDER,
    "text": COLOR_TEXT_PRIMARY,
}


__all__ = [
    "COLOR_BG_PRIMARY",
    "COLOR_BG_SECONDARY",
    "COLOR_BORDER",
    "COLOR_TEXT_PRIMARY",
    "COLOR_TEXT_SECONDARY",
    "COLOR_ACCENT",
    "COLOR_ACCENT_LIGHT",
    "COLOR_GRID",
    "COLOR_AXIS",
    "COLOR_AXIS_LABEL",
    "COLOR_COMPONENT_FILL",
    "COLOR_COMPONENT_BORDER",
    "COLOR_CONNECTION",
    "COLOR_CONNECTION_SELECTED",
    "COLOR_SIDE_HIGHLIGHT",
    "COLOR_PIN_BORDER",
    "LINE_WIDTH_GRID",
    "LINE_WIDTH_AXIS",
    "LINE_WIDTH_COMPONENT",
    "LINE_WIDTH_COMPONENT_SELECTED",
    "LINE_WIDTH_SELECTION_BOX",
    "LINE_WIDTH_CONNECTION",
    "LINE_WIDTH_SIDE_HIGHLIGHT",
    "COMPONENT_CORNER_RADIUS",
    "SELECTION_BOX_PADDING",
    "SELECTION_DASH",
    "TAB_MODIFIED_MARK",
    "CANVAS_THEME",
]
