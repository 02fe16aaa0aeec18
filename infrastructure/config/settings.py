"""
默认设置常量定义

职责：定义系统级默认配置值，作为配置缺失时的回退
设计原则：纯常量定义，无业务逻辑，便于全局引用
"""

from pathlib import Path

# ============================================================
# 画布视口相关默认值
# ============================================================

MIN_SCALE = 0.1                      # 最小缩放比例
MAX_SCALE = 3.0                      # 最大缩放比例
DEFAULT_SCALE = 1.0                  # 默认缩放比例

WHEEL_ZOOM_IN_FACTOR = 1.1           # 滚轮向上（放大）
WHEEL_ZOOM_OUT_FACTOR = 0.9          # 滚轮向下（缩小）
BUTTON_ZOOM_IN_FACTOR = 1.2          # 放大按钮
BUTTON_ZOOM_OUT_FACTOR = 0.8         # 缩小按钮

# 新项目视口：原点锚定在左下角，留出边距
DEFAULT_ORIGIN_MARGIN = 50
DEFAULT_SURFACE_WIDTH = 800
DEFAULT_SURFACE_HEIGHT = 600         # 画布高度未知时使用（原点 Y = 600 - 50）

# ============================================================
# 场景绘制相关常量
# ============================================================

GRID_SIZE = 20                       # 网格周期（世界坐标单位）
AXIS_EXTENT = 1000                   # 坐标轴绘制范围（±1000）
ORIGIN_DOT_RADIUS = 3                # 原点圆点半径（屏幕像素）
AXIS_LABEL_FONT_SIZE = 12            # 坐标轴标签字号（屏幕像素）

# ============================================================
# 元件相关常量
# ============================================================

DEFAULT_COMPONENT_WIDTH = 80         # 元件缺省宽度
DEFAULT_COMPONENT_HEIGHT = 60        # 元件缺省高度
ROTATION_STEP = -90                  # 旋转步进（逆时针 90°）
DEFAULT_MAX_UNDO_STEPS = 50          # 每个项目的最大撤回步数

# ============================================================
# 元件设计器相关常量
# ============================================================

DEFAULT_HIT_THRESHOLD = 10           # 边缘点击容差（屏幕像素，不随缩放变化）
CLICK_MOVE_TOLERANCE = 3             # 按下到释放移动小于该值视为点击

PIN_HIT_RADIUS = 15                  # 画布上按下引脚的检测半径（世界单位）
CONNECTION_HIT_TOLERANCE = 8         # 连线点击容差（世界单位）
WIRE_OUTLET_LENGTH = 10              # 连线从引脚沿边法向引出的长度

PIN_SIZE = 12                        # 引脚尺寸
PIN_SPACING = 10                     # 引脚间距
PIN_MARGIN = 15                      # 引脚与边界的距离
PIN_AUTO_SIZE_STEP = 10              # 自动扩展尺寸的取整步长
PIN_AUTO_SIZE_MIN = 60               # 自动扩展后的最小尺寸

MIN_SHAPE_DIMENSION = 20             # 元件尺寸下限
MAX_SHAPE_DIMENSION = 500            # 元件尺寸上限
DEFAULT_SHAPE_WIDTH = 120            # 设计器新元件默认宽度（6 个网格）
DEFAULT_SHAPE_HEIGHT = 80            # 设计器新元件默认高度（4 个网格）

# ============================================================
# 项目相关常量
# ============================================================

DEFAULT_PROJECT_NAME_PREFIX = "未命名项目"
PROJECT_CONFIG_FILE = "circuit_config.json"   # 项目文件夹内的画布数据文件
COMPONENT_FILE_SUFFIX = ".json"

# ============================================================
# 持久化相关常量
# ============================================================

LAYOUT_SAVE_DEBOUNCE_MS = 400        # 窗口布局保存防抖间隔（毫秒）
VIEWPORT_EVENT_THROTTLE_MS = 50      # 视口变更事件节流间隔（毫秒）
MAX_RECENT_PROJECTS = 10             # 最近打开项目数量上限

# ============================================================
# 全局路径
# ============================================================

# 全局配置目录
GLOBAL_CONFIG_DIR = Path.home() / ".circuit_canvas"

# 全局配置文件
GLOBAL_CONFIG_FILE = GLOBAL_CONFIG_DIR / "config.json"

# 全局日志目录
GLOBAL_LOG_DIR = GLOBAL_CONFIG_DIR / "logs"

# 用户元件库目录
GLOBAL_COMPONENT_DIR = GLOBAL_CONFIG_DIR / "components"

# ============================================================
# 配置键名
# ============================================================

CONFIG_WINDOW_GEOMETRY = "window_geometry"
CONFIG_SPLITTER_SIZES = "splitter_sizes"
CONFIG_RECENT_PROJECTS = "recent_projects"
CONFIG_HIT_THRESHOLD = "designer_hit_threshold"
CONFIG_SHOW_GRID = "show_grid"
CONFIG_LAYOUT_DEBOUNCE_MS = "layout_debounce_ms"

# ============================================================
# 默认配置
# ============================================================

DEFAULT_CONFIG = {
    CONFIG_WINDOW_GEOMETRY: None,
    CONFIG_SPLITTER_SIZES: None,
    CONFIG_RECENT_PROJECTS: [],
    CONFIG_HIT_THRESHOLD: DEFAULT_HIT_THRESHOLD,
    CONFIG_SHOW_GRID: True,
    CONFIG_LAYOUT_DEBOUNCE_MS: LAYOUT_SAVE_DEBOUNCE_MS,
}
