# Persistence Result - Unified Load/Save Result
"""
统一持久化结果数据类

职责：
- 定义项目/元件文件加载与保存的统一返回结构
- 明确区分"成功/文件缺失/解析错误/写入失败"等状态
- 持久化错误以结果值返回，不跨越核心与宿主的边界抛出异常

设计原则：
- 调用方通过检查 success 字段决定后续处理（提示用户、重试）
- 不自动重试，由宿主决定

使用示例：
    from shared.models.persistence_result import LoadResult, PersistenceErrorCode

    result = repository.load_project(path)
    if result.success:
        store.add_existing_project(result.data, path)
    elif result.error_code == PersistenceErrorCode.FILE_MISSING:
        show_warning(result.error_message)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Generic, Optional, TypeVar

T = TypeVar("T")


class PersistenceErrorCode(Enum):
    """持久化错误码"""

    FILE_MISSING = "FILE_MISSING"
    """文件不存在"""

    PARSE_ERROR = "PARSE_ERROR"
    """文件存在但解析失败"""

    PERMISSION_DENIED = "PERMISSION_DENIED"
    """无读写权限"""

    PATH_EMPTY = "PATH_EMPTY"
    """路径为空"""

    WRITE_FAILED = "WRITE_FAILED"
    """写入失败"""

    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    """未知错误"""


@dataclass
class LoadResult(Generic[T]):
    """
    统一文件加载结果

    Attributes:
        success: 是否成功
        data: 加载的数据（成功时有值）
        error_code: 错误码（失败时有值）
        error_message: 错误消息（失败时有值）
        file_path: 尝试加载的文件路径
    """

    success: bool
    data: Optional[T]
    error_code: Optional[PersistenceErrorCode]
    error_message: Optional[str]
    file_path: str

    # ============================================================
    # 工厂方法
    # ============================================================

    @classmethod
    def ok(cls, data: T, file_path: str) -> "LoadResult[T]":
        return cls(True, data, None, None, file_path)

    @classmethod
    def file_missing(cls, file_path: str) -> "LoadResult[Any]":
        return cls(
            False, None, PersistenceErrorCode.FILE_MISSING,
            f"文件不存在: {file_path}", file_path,
        )

    @classmethod
    def path_empty(cls) -> "LoadResult[Any]":
        return cls(False, None, PersistenceErrorCode.PATH_EMPTY, "文件路径为空", "")

    @classmethod
    def parse_error(cls, file_path: str, message: str) -> "LoadResult[Any]":
        return cls(
            False, None, PersistenceErrorCode.PARSE_ERROR,
            f"文件解析失败: {message}", file_path,
        )

    @classmethod
    def permission_denied(cls, file_path: str) -> "LoadResult[Any]":
        return cls(
            False, None, PersistenceErrorCode.PERMISSION_DENIED,
            f"无读取权限: {file_path}", file_path,
        )

    @classmethod
    def unknown_error(cls, file_path: str, message: str) -> "LoadResult[Any]":
        return cls(False, None, PersistenceErrorCode.UNKNOWN_ERROR, message, file_path)

    # ============================================================
    # 辅助方法
    # ============================================================

    def is_file_missing(self) -> bool:
        return self.error_code == PersistenceErrorCode.FILE_MISSING

    def get_data_or_default(self, default: T) -> T:
        return self.data if self.success and self.data is not None else default


@dataclass
class SaveResult:
    """
    统一文件保存结果

    对应宿主侧约定的 {success, error} 结构，见 to_dict()
    """

    success: bool
    file_path: str
    error_code: Optional[PersistenceErrorCode] = None
    error_message: Optional[str] = None

    @classmethod
    def ok(cls, file_path: str) -> "SaveResult":
        return cls(True, file_path)

    @classmethod
    def path_empty(cls) -> "SaveResult":
        return cls(False, "", PersistenceErrorCode.PATH_EMPTY, "未指定保存路径")

    @classmethod
    def failed(
        cls,
        file_path: str,
        message: str,
        error_code: PersistenceErrorCode = PersistenceErrorCode.WRITE_FAILED,
    ) -> "SaveResult":
        return cls(False, file_path, error_code, message)

    def to_dict(self) -> Dict[str, Any]:
        """转换为 {success, error} 字典"""
        return {
            "success": self.success,
            "error": self.error_message,
            "path": self.file_path,
        }


# ============================================================
# 模块导出
# ============================================================

__all__ = [
    "LoadResult",
    "SaveResult",
    "PersistenceErrorCode",
]
