# Shared Models
"""
共享数据模型

包含跨模块使用的通用数据结构。
"""

from shared.models.persistence_result import (
    LoadResult,
    PersistenceErrorCode,
    SaveResult,
)

__all__ = [
    "LoadResult",
    "SaveResult",
    "PersistenceErrorCode",
]
