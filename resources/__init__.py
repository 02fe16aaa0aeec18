# Resources Module
"""
UI 资源模块

包含：
- theme.py: 画布、元件设计器与标签栏的配色和线宽
"""

from .theme import (
    CANVAS_THEME,
    COLOR_ACCENT,
    COLOR_BG_PRIMARY,
    COLOR_TEXT_PRIMARY,
    TAB_MODIFIED_MARK,
)

__all__ = [
    "CANVAS_THEME",
    "COLOR_ACCENT",
    "COLOR_BG_PRIMARY",
    "COLOR_TEXT_PRIMARY",
    "TAB_MODIFIED_MARK",
]
