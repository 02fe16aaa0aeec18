# JSON Repository - JSON File Storage Operations
"""
JSON 存储操作

职责：
- 封装 JSON 文件的序列化/反序列化
- 读取返回 LoadResult，写入返回 SaveResult，不向调用方抛出异常

使用场景：
- circuit_config.json - 项目画布数据
- 元件库中的元件定义文件

使用示例：
    from infrastructure.persistence.json_repository import JsonRepository

    repo = JsonRepository()

    result = repo.load_json("circuit_config.json")
    if result.success:
        data = result.data

    saved = repo.save_json("circuit_config.json", {"components": []})
"""

import json
import os
from pathlib import Path
from typing import Any, Union

from infrastructure.utils.logger import log_file_operation
from shared.models.persistence_result import (
    LoadResult,
    PersistenceErrorCode,
    SaveResult,
)


class JsonRepository:
    """JSON 存储操作类"""

    def __init__(self):
        self._logger = None

    @property
    def logger(self):
        """延迟获取日志器"""
        if self._logger is None:
            try:
                from infrastructure.utils.logger import get_logger
                self._logger = get_logger("json_repository")
            except Exception:
                pass
        return self._logger

    # ============================================================
    # 核心功能
    # ============================================================

    def load_json(self, path: Union[str, Path], encoding: str = 'utf-8') -> LoadResult:
        """
        加载 JSON 文件

        Args:
            path: JSON 文件路径
            encoding: 文件编码

        Returns:
            LoadResult: 成功时 data 为解析后的对象
        """
        if not path:
            return LoadResult.path_empty()

        file_path = Path(path)
        if not file_path.exists():
            return LoadResult.file_missing(str(file_path))

        try:
            content = file_path.read_text(encoding=encoding)
            data = json.loads(content)
        except json.JSONDecodeError as e:
            if self.logger:
                self.logger.warning(f"JSON解析失败: {file_path} - {e}")
            log_file_operation("read", str(file_path), success=False)
            return LoadResult.parse_error(str(file_path), str(e))
        except PermissionError:
            log_file_operation("read", str(file_path), success=False)
            return LoadResult.permission_denied(str(file_path))
        except (OSError, UnicodeDecodeError) as e:
            if self.logger:
                self.logger.warning(f"JSON文件加载失败: {file_path} - {e}")
            log_file_operation("read", str(file_path), success=False)
            return LoadResult.unknown_error(str(file_path), str(e))

        log_file_operation("read", str(file_path), char_count=len(content))
        return LoadResult.ok(data, str(file_path))

    def save_json(
        self,
        path: Union[str, Path],
        data: Any,
        indent: int = 2,
        encoding: str = 'utf-8'
    ) -> SaveResult:
        """
        保存数据为 JSON 文件

        先写临时文件再替换，避免中途失败留下半个文件。

        Args:
            path: JSON 文件路径
            data: 要保存的数据
            indent: 缩进空格数
            encoding: 文件编码

        Returns:
            SaveResult: 保存结果
        """
        if not path:
            return SaveResult.path_empty()

        file_path = Path(path)
        try:
            content = json.dumps(data, indent=indent, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            if self.logger:
                self.logger.error(f"JSON序列化失败: {file_path} - {e}")
            return SaveResult.failed(str(file_path), f"数据无法序列化: {e}")

        tmp_path = file_path.with_name(file_path.name + ".tmp")
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(content, encoding=encoding)
            os.replace(tmp_path, file_path)
        except PermissionError:
            log_file_operation("write", str(file_path), success=False)
            return SaveResult.failed(
                str(file_path), f"无写入权限: {file_path}",
                PersistenceErrorCode.PERMISSION_DENIED,
            )
        except OSError as e:
            if self.logger:
                self.logger.error(f"JSON文件保存失败: {file_path} - {e}")
            log_file_operation("write", str(file_path), success=False)
            return SaveResult.failed(str(file_path), str(e))

        log_file_operation("write", str(file_path), char_count=len(content))
        return SaveResult.ok(str(file_path))


__all__ = ["JsonRepository"]
