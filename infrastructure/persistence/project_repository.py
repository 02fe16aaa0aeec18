# Project Repository - Project and Component Files
"""
项目文件仓库 - 画布核心的持久化协作者

职责：
- 读写项目画布数据（项目文件夹内的 circuit_config.json）
- 读写元件设计器产出的元件定义文件
- 只关心 {components, connections, viewport} 结构，不解释元件内容

项目文件结构：
    {
        "projectName": "未命名项目1",
        "createdAt": "2025-01-01T12:00:00",
        "lastModified": "2025-01-01T12:30:00",
        "components": [...],
        "connections": [...],
        "viewport": {"scale": 1.0, "offsetX": 50, "offsetY": 550}
    }

路径约定：
- 传入目录时读写 <目录>/circuit_config.json
- 传入 .json 文件时直接读写该文件

初始化顺序：Phase 1.2，注册为 SVC_PROJECT_REPOSITORY
"""

from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Union

from infrastructure.config.settings import (
    COMPONENT_FILE_SUFFIX,
    GLOBAL_COMPONENT_DIR,
    PROJECT_CONFIG_FILE,
)
from infrastructure.persistence.json_repository import JsonRepository
from shared.models.persistence_result import LoadResult, SaveResult


def resolve_project_file(path: Union[str, Path]) -> Path:
    """项目路径对应的数据文件"""
    path = Path(path)
    if path.suffix.lower() == ".json":
        return path
    return path / PROJECT_CONFIG_FILE


class ProjectRepository:
    """
    项目文件仓库

    所有方法均为同步阻塞调用，应用层通过 asyncio.to_thread 调度。
    """

    def __init__(self, json_repository: Optional[JsonRepository] = None,
                 component_dir: Optional[Path] = None):
        self._json = json_repository or JsonRepository()
        self._component_dir = Path(component_dir) if component_dir else GLOBAL_COMPONENT_DIR

    # ============================================================
    # 项目
    # ============================================================

    def load_project(self, path: Union[str, Path]) -> LoadResult:
        """
        加载项目

        Returns:
            LoadResult: data 为项目文件字典（补齐 components/connections 字段，
                        并附带 path 与缺省的 projectName）
        """
        if not path:
            return LoadResult.path_empty()

        file_path = resolve_project_file(path)
        result = self._json.load_json(file_path)
        if not result.success:
            return result

        data = result.data
        if not isinstance(data, dict):
            return LoadResult.parse_error(str(file_path), "项目文件顶层必须是对象")
        if not isinstance(data.get("components", []), list) or \
                not isinstance(data.get("connections", []), list):
            return LoadResult.parse_error(str(file_path), "components/connections 必须是数组")
        for key in ("components", "connections"):
            if any(not isinstance(entry, dict) for entry in data.get(key, [])):
                return LoadResult.parse_error(str(file_path), f"{key} 中的条目必须是对象")
        if data.get("viewport") is not None and not isinstance(data["viewport"], dict):
            return LoadResult.parse_error(str(file_path), "viewport 必须是对象")

        data.setdefault("components", [])
        data.setdefault("connections", [])
        data.setdefault("projectName", Path(path).stem if Path(path).suffix else Path(path).name)
        data["path"] = str(path)
        return LoadResult.ok(data, str(file_path))

    def save_project(
        self,
        path: Union[str, Path],
        project_name: str,
        content: Dict[str, Any],
        created_at: Optional[str] = None,
    ) -> SaveResult:
        """
        保存项目

        Args:
            path: 项目目录或项目文件
            project_name: 项目名称
            content: CanvasSnapshot.to_dict() 的结果
            created_at: 项目创建时间（ISO 格式）
        """
        if not path:
            return SaveResult.path_empty()

        payload = {
            "projectName": project_name,
            "createdAt": created_at or datetime.now().isoformat(timespec="seconds"),
            "lastModified": datetime.now().isoformat(timespec="seconds"),
            "components": content.get("components", []),
            "connections": content.get("connections", []),
            "viewport": content.get("viewport"),
        }
        result = self._json.save_json(resolve_project_file(path), payload)
        # 宿主侧以项目路径（而非数据文件）标识项目
        result.file_path = str(path)
        return result

    # ============================================================
    # 元件
    # ============================================================

    def component_path(self, component_id: str) -> Path:
        return self._component_dir / f"{component_id}{COMPONENT_FILE_SUFFIX}"

    def load_component(self, path: Union[str, Path]) -> LoadResult:
        result = self._json.load_json(path)
        if result.success and not isinstance(result.data, dict):
            return LoadResult.parse_error(str(path), "元件文件顶层必须是对象")
        return result

    def save_component(self, definition: Dict[str, Any],
                       path: Optional[Union[str, Path]] = None) -> SaveResult:
        """
        保存元件定义

        Args:
            definition: DesignerShape.to_dict() 的结果
            path: 目标文件，缺省时保存到用户元件库
        """
        target = Path(path) if path else self.component_path(definition.get("id") or "component")
        return self._json.save_json(target, definition)


__all__ = [
    "ProjectRepository",
    "resolve_project_file",
]
