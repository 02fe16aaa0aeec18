"""
统一日志管理器

职责：配置和管理应用日志系统，提供统一的日志规范和隐私信息过滤

初始化顺序：Phase 0.1，最先初始化，其他模块都依赖日志

使用方式：
    from infrastructure.utils.logger import setup_logger, get_logger

    # 程序启动时初始化
    setup_logger()

    # 在各模块中获取日志器
    logger = get_logger("my_module")
    logger.info("操作完成")

    # 记录性能日志
    log_performance("canvas_render", 12, "success")

    # 记录文件操作日志
    log_file_operation("write", "/path/to/circuit_config.json")
"""

import logging
import re
import sys
import threading
from datetime import datetime
from logging.handlers import RotatingFileHandler, TimedRotatingFileHandler
from pathlib import Path
from typing import Optional

# 导入配置常量
from infrastructure.config.settings import GLOBAL_LOG_DIR


# ============================================================
# 模块级状态变量
# ============================================================

_initialized: bool = False
_loggers: dict = {}
_lock = threading.Lock()

# 隐私信息匹配模式（用户主目录中的用户名）
_SENSITIVE_PATTERNS = [
    (re.compile(r'([A-Za-z]:\\Users\\)([^\\/\s]+)', re.IGNORECASE), r'\1***'),
    (re.compile(r'(/home/)([^/\s]+)'), r'\1***'),
    (re.compile(r'(/Users/)([^/\s]+)'), r'\1***'),
]

# 日志级别颜色（用于控制台输出）
_LEVEL_COLORS = {
    'DEBUG': '\033[36m',     # 青色
    'INFO': '\033[32m',      # 绿色
    'WARNING': '\033[33m',   # 黄色
    'ERROR': '\033[31m',     # 红色
    'CRITICAL': '\033[35m',  # 紫色
}
_RESET_COLOR = '\033[0m'

_LOG_FORMAT = '[%(asctime)s] [%(levelname)-8s] [%(name)-20s] [%(thread)d] %(message)s'
_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


# ============================================================
# 自定义格式化器
# ============================================================

class SensitiveInfoFilter(logging.Filter):
    """
    隐私信息过滤器

    将日志中的用户主目录替换为占位符，便于分享日志
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if record.msg:
            record.msg = sanitize_message(str(record.msg))
        if isinstance(record.args, tuple):
            record.args = tuple(
                sanitize_message(arg) if isinstance(arg, str) else arg
                for arg in record.args
            )
        return True


class ColoredFormatter(logging.Formatter):
    """
    彩色日志格式化器（用于控制台输出）

    格式：[时间] [级别] [模块名] [线程ID] 消息
    """

    def __init__(self, use_color: bool = True):
        self.use_color = use_color
        super().__init__(fmt=_LOG_FORMAT, datefmt=_DATE_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        if len(record.name) > 20:
            record.name = record.name[:17] + '...'

        formatted = super().format(record)

        if self.use_color and sys.stdout.isatty():
            color = _LEVEL_COLORS.get(record.levelname, '')
            if color:
                formatted = f"{color}{formatted}{_RESET_COLOR}"

        return formatted


class FileFormatter(logging.Formatter):
    """文件日志格式化器（无颜色）"""

    def __init__(self):
        super().__init__(fmt=_LOG_FORMAT, datefmt=_DATE_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        if len(record.name) > 20:
            record.name = record.name[:17] + '...'
        return super().format(record)


# ============================================================
# 核心功能
# ============================================================

def setup_logger(
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
    log_dir: Optional[Path] = None
) -> None:
    """
    初始化日志系统

    配置控制台和文件输出，设置隐私信息过滤。重复调用无副作用。

    Args:
        console_level: 控制台日志级别，默认 INFO
        file_level: 文件日志级别，默认 DEBUG
        log_dir: 日志目录，默认使用 GLOBAL_LOG_DIR
    """
    global _initialized

    with _lock:
        if _initialized:
            return

        if log_dir is None:
            log_dir = GLOBAL_LOG_DIR
        log_dir.mkdir(parents=True, exist_ok=True)

        root_logger = logging.getLogger()
        root_logger.setLevel(logging.DEBUG)
        root_logger.handlers.clear()

        sensitive_filter = SensitiveInfoFilter()

        # 控制台
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(console_level)
        console_handler.setFormatter(ColoredFormatter(use_color=True))
        console_handler.addFilter(sensitive_filter)
        root_logger.addHandler(console_handler)

        # 按大小轮转
        file_handler = RotatingFileHandler(
            log_dir / "app.log",
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setLevel(file_level)
        file_handler.setFormatter(FileFormatter())
        file_handler.addFilter(sensitive_filter)
        root_logger.addHandler(file_handler)

        # 按天轮转，保留 7 天
        daily_handler = TimedRotatingFileHandler(
            log_dir / "app_daily.log",
            when='midnight',
            interval=1,
            backupCount=7,
            encoding='utf-8'
        )
        daily_handler.setLevel(file_level)
        daily_handler.setFormatter(FileFormatter())
        daily_handler.addFilter(sensitive_filter)
        daily_handler.suffix = "%Y-%m-%d"
        root_logger.addHandler(daily_handler)

        _initialized = True

    # 锁外记录，避免死锁
    logging.getLogger("logger").info(f"日志系统初始化完成，日志目录: {log_dir}")


def get_logger(name: str) -> logging.Logger:
    """
    获取命名日志器

    如果日志系统未初始化，会自动初始化

    Args:
        name: 日志器名称（通常为模块名）

    Returns:
        logging.Logger: 配置好的日志器
    """
    if not _initialized:
        setup_logger()

    with _lock:
        if name not in _loggers:
            _loggers[name] = logging.getLogger(name)
        return _loggers[name]


# ============================================================
# 隐私信息过滤
# ============================================================

def sanitize_message(message: str) -> str:
    """
    过滤消息中的隐私信息

    Args:
        message: 原始消息

    Returns:
        str: 过滤后的消息
    """
    if not message:
        return message

    result = message
    for pattern, replacement in _SENSITIVE_PATTERNS:
        result = pattern.sub(replacement, result)
    return result


# ============================================================
# 性能日志
# ============================================================

def log_performance(
    operation: str,
    duration_ms: float,
    status: str = "success",
    extra: Optional[dict] = None
) -> None:
    """
    记录性能日志

    格式：[PERF] operation=xxx duration=xxxms status=xxx

    Args:
        operation: 操作名称（如 canvas_render, project_save）
        duration_ms: 耗时（毫秒）
        status: 状态（success/error）
        extra: 额外信息
    """
    logger = get_logger("performance")

    parts = [
        f"[PERF] operation={operation}",
        f"duration={duration_ms:.0f}ms",
        f"status={status}"
    ]
    if extra:
        for key, value in extra.items():
            parts.append(f"{key}={value}")

    logger.info(" ".join(parts))


def log_file_operation(
    operation: str,
    file_path: str,
    char_count: Optional[int] = None,
    success: bool = True
) -> None:
    """
    记录文件操作日志

    仅记录路径和字符数，不记录文件内容

    Args:
        operation: 操作类型（read/write）
        file_path: 文件路径
        char_count: 字符数（读写操作时）
        success: 是否成功
    """
    logger = get_logger("file")

    parts = [f"[FILE] operation={operation}", f"path={file_path}"]
    if char_count is not None:
        parts.append(f"chars={char_count}")
    parts.append(f"success={success}")

    if success:
        logger.debug(" ".join(parts))
    else:
        logger.warning(" ".join(parts))


# ============================================================
# 日志清理
# ============================================================

def cleanup_old_logs(log_dir: Optional[Path] = None, max_age_days: int = 7) -> int:
    """
    清理过期的日志文件

    Args:
        log_dir: 日志目录，默认使用 GLOBAL_LOG_DIR
        max_age_days: 最大保留天数，默认 7 天

    Returns:
        int: 删除的文件数量
    """
    if log_dir is None:
        log_dir = GLOBAL_LOG_DIR

    if not log_dir.exists():
        return 0

    deleted_count = 0
    cutoff_time = datetime.now().timestamp() - (max_age_days * 24 * 60 * 60)

    for pattern in ("*.log", "*.log.*"):
        for log_file in log_dir.glob(pattern):
            try:
                if log_file.stat().st_mtime < cutoff_time:
                    log_file.unlink()
                    deleted_count += 1
            except OSError as e:
                get_logger("logger").warning(f"删除日志文件失败: {log_file}, 错误: {e}")

    if deleted_count > 0:
        get_logger("logger").info(f"清理了 {deleted_count} 个过期日志文件")

    return deleted_count


# ============================================================
# 模块导出
# ============================================================

__all__ = [
    "setup_logger",
    "get_logger",
    "sanitize_message",
    "log_performance",
    "log_file_operation",
    "cleanup_old_logs",
]
