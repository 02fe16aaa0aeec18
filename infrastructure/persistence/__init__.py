# Persistence
"""
持久化模块

包含：
- json_repository.py: JSON 文件读写（原子写入，统一结果类型）
- project_repository.py: 项目文件与元件文件

异步 I/O 说明：
- 仓库只提供同步接口，禁止 UI 线程直接调用
- 应用层通过 asyncio.to_thread() 将读写卸载到线程池
"""

from infrastructure.persistence.json_repository import JsonRepository
from infrastructure.persistence.project_repository import (
    ProjectRepository,
    resolve_project_file,
)

__all__ = [
    "JsonRepository",
    "ProjectRepository",
    "resolve_project_file",
]
