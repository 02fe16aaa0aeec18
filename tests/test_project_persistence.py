"""项目文件仓库与持久化服务测试"""

import asyncio
import json
import threading

import pytest

from application.project_persistence import ProjectPersistenceService
from domain.canvas.canvas_state import PlacedComponent
from domain.canvas.geometry import Point
from infrastructure.persistence.project_repository import ProjectRepository, resolve_project_file
from shared.event_types import EVENT_PROJECT_SAVE_FAILED
from shared.models.persistence_result import PersistenceErrorCode, SaveResult


class GatedRepository(ProjectRepository):
    """保存在 gate 放行前阻塞，用于模拟慢速磁盘"""

    def __init__(self, component_dir):
        super().__init__(component_dir=component_dir)
        self.gate = threading.Event()
        self.saved_payloads = []

    def save_project(self, path, project_name, content, created_at=None):
        self.gate.wait(timeout=5)
        self.saved_payloads.append(content)
        return super().save_project(path, project_name, content, created_at)


class FailingRepository(ProjectRepository):
    def save_project(self, path, project_name, content, created_at=None):
        return SaveResult.failed(str(path), "磁盘已满")


@pytest.fixture
def repository(tmp_path):
    return ProjectRepository(component_dir=tmp_path / "components")


class TestProjectRepository:
    def test_resolve_project_file(self, tmp_path):
        assert resolve_project_file(tmp_path) == tmp_path / "circuit_config.json"
        assert resolve_project_file(tmp_path / "x.json") == tmp_path / "x.json"

    def test_save_then_load(self, repository, tmp_path):
        content = {
            "components": [{"id": "r1", "componentId": "res"}],
            "connections": [],
            "viewport": {"scale": 1.0, "offsetX": 50, "offsetY": 550},
        }
        result = repository.save_project(tmp_path / "proj", "Demo", content, "2025-01-01T00:00:00")
        assert result.success
        assert result.file_path == str(tmp_path / "proj")

        stored = json.loads((tmp_path / "proj" / "circuit_config.json").read_text(encoding="utf-8"))
        assert stored["projectName"] == "Demo"
        assert stored["createdAt"] == "2025-01-01T00:00:00"
        assert "lastModified" in stored

        loaded = repository.load_project(tmp_path / "proj")
        assert loaded.success
        assert loaded.data["components"] == content["components"]
        assert loaded.data["path"] == str(tmp_path / "proj")

    def test_load_fills_missing_fields(self, repository, tmp_path):
        project_dir = tmp_path / "bare"
        project_dir.mkdir()
        (project_dir / "circuit_config.json").write_text("{}", encoding="utf-8")
        loaded = repository.load_project(project_dir)
        assert loaded.data["components"] == []
        assert loaded.data["connections"] == []
        assert loaded.data["projectName"] == "bare"

    def test_load_missing(self, repository, tmp_path):
        result = repository.load_project(tmp_path / "nothing")
        assert not result.success
        assert result.is_file_missing()

    def test_load_rejects_bad_shape(self, repository, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"components": {}}), encoding="utf-8")
        result = repository.load_project(path)
        assert result.error_code is PersistenceErrorCode.PARSE_ERROR

    def test_load_rejects_non_object_entries(self, repository, tmp_path):
        path = tmp_path / "entries.json"
        path.write_text(json.dumps({"components": ["oops"], "connections": []}), encoding="utf-8")
        result = repository.load_project(path)
        assert result.error_code is PersistenceErrorCode.PARSE_ERROR

    def test_empty_path(self, repository):
        assert repository.load_project("").error_code is PersistenceErrorCode.PATH_EMPTY
        assert repository.save_project("", "x", {}).error_code is PersistenceErrorCode.PATH_EMPTY

    def test_component_files(self, repository, tmp_path):
        result = repository.save_component({"id": "led", "name": "LED"})
        assert result.success
        assert repository.component_path("led") == tmp_path / "components" / "led.json"
        assert repository.load_component(repository.component_path("led")).data["name"] == "LED"


class TestPersistenceService:
    def test_save_marks_saved(self, store, repository, tmp_path):
        service = ProjectPersistenceService(store, repository)
        project = store.create_project("Demo")
        store.mark_modified()

        result = asyncio.run(service.save_project(project.id, str(tmp_path / "demo")))
        assert result.success
        assert project.is_saved
        assert not project.is_modified
        assert project.path == str(tmp_path / "demo")

    def test_save_without_path(self, store, repository):
        service = ProjectPersistenceService(store, repository)
        store.create_project()
        result = asyncio.run(service.save_project())
        assert result.error_code is PersistenceErrorCode.PATH_EMPTY

    def test_save_unknown_project(self, store, repository):
        service = ProjectPersistenceService(store, repository)
        result = asyncio.run(service.save_project(99, "/tmp/x"))
        assert not result.success

    def test_edit_during_save_keeps_modified(self, store, tmp_path):
        repository = GatedRepository(tmp_path / "components")
        service = ProjectPersistenceService(store, repository)
        project = store.create_project()
        store.canvas.components.append(PlacedComponent("before", "res"))
        store.mark_modified()

        async def scenario():
            task = asyncio.create_task(service.save_project(project.id, str(tmp_path / "p")))
            await asyncio.sleep(0.05)
            assert service.is_saving(project.id)
            store.canvas.components.append(PlacedComponent("after", "res", position=Point(1, 1)))
            store.mark_modified()
            repository.gate.set()
            return await task

        result = asyncio.run(scenario())
        assert result.success
        assert project.is_saved
        assert project.is_modified
        saved_ids = [c["id"] for c in repository.saved_payloads[0]["components"]]
        assert saved_ids == ["before"]

    def test_close_waits_for_pending_save(self, store, tmp_path):
        repository = GatedRepository(tmp_path / "components")
        service = ProjectPersistenceService(store, repository)
        project = store.create_project()

        async def scenario():
            save = asyncio.create_task(service.save_project(project.id, str(tmp_path / "p")))
            await asyncio.sleep(0.05)
            close = asyncio.create_task(service.close_project(project.id))
            await asyncio.sleep(0.05)
            assert store.get_project(project.id) is not None
            repository.gate.set()
            return await save, await close

        save_result, closed = asyncio.run(scenario())
        assert save_result.success
        assert closed is True
        assert store.projects == []
        assert (tmp_path / "p" / "circuit_config.json").exists()

    def test_save_failure_publishes_event(self, store, tmp_path, recorder):
        recorder.listen(EVENT_PROJECT_SAVE_FAILED)
        service = ProjectPersistenceService(store, FailingRepository())
        project = store.create_project()
        store.mark_modified()

        result = asyncio.run(service.save_project(project.id, str(tmp_path / "p")))
        assert not result.success
        assert project.is_modified
        assert not project.is_saved
        assert recorder.of_type(EVENT_PROJECT_SAVE_FAILED) == [
            {"project_id": project.id, "message": "磁盘已满"}
        ]

    def test_load_adds_project_and_recent_entry(self, store, repository, tmp_path, config_manager):
        repository.save_project(tmp_path / "saved", "Saved", {
            "components": [{"id": "r1", "componentId": "res"}],
            "connections": [],
            "viewport": {"scale": 1.5, "offsetX": 0, "offsetY": 0},
        })
        service = ProjectPersistenceService(store, repository)

        result = asyncio.run(service.load_project(str(tmp_path / "saved")))
        assert result.success
        project = result.data
        assert store.active_project_id == project.id
        assert project.name == "Saved"
        assert store.viewport.scale == 1.5
        assert config_manager.get_recent_projects()[0] == str(tmp_path / "saved")

    def test_load_failure_adds_nothing(self, store, repository, tmp_path):
        service = ProjectPersistenceService(store, repository)
        result = asyncio.run(service.load_project(str(tmp_path / "missing")))
        assert not result.success
        assert store.projects == []

    def test_close_modified_needs_force(self, store, repository):
        service = ProjectPersistenceService(store, repository)
        project = store.create_project()
        store.mark_modified()
        assert asyncio.run(service.close_project(project.id)) is False
        assert asyncio.run(service.close_project(project.id, force=True)) is True

    def test_save_queued_behind_close_fails_cleanly(self, store, tmp_path):
        repository = GatedRepository(tmp_path / "components")
        service = ProjectPersistenceService(store, repository)
        project = store.create_project()

        async def scenario():
            first = asyncio.create_task(service.save_project(project.id, str(tmp_path / "p")))
            await asyncio.sleep(0.05)
            close = asyncio.create_task(service.close_project(project.id))
            await asyncio.sleep(0.01)
            second = asyncio.create_task(service.save_project(project.id, str(tmp_path / "p")))
            await asyncio.sleep(0.01)
            repository.gate.set()
            return await asyncio.gather(first, close, second, return_exceptions=True)

        first, closed, second = asyncio.run(scenario())
        assert not any(isinstance(r, BaseException) for r in (first, closed, second))
        assert first.success
        assert closed is True
        assert not second.success
        assert len(repository.saved_payloads) == 1
        assert not service.is_saving(project.id)
        assert store.projects == []

    def test_load_export_format(self, store, repository, tmp_path):
        project_file = tmp_path / "export.json"
        project_file.write_text(json.dumps({
            "projectName": "Export",
            "components": [
                {
                    "instanceId": "r1",
                    "componentFile": "res.json",
                    "position": [10, 20],
                    "orientation": "right",
                    "data": {"name": "RES"},
                },
                {"instanceId": "r2", "componentFile": "res.json", "position": [200, 20]},
            ],
            "connections": [
                {
                    "id": "w1",
                    "source": {"instanceId": "r1", "pinName": "A"},
                    "target": {"instanceId": "r2", "pinName": "K"},
                },
            ],
        }), encoding="utf-8")
        service = ProjectPersistenceService(store, repository)

        result = asyncio.run(service.load_project(str(project_file)))
        assert result.success
        component = store.canvas.find_component("r1")
        assert component.component_id == "res"
        assert component.position == Point(10, 20)
        assert component.rotation == 90
        wire = store.canvas.find_connection("w1")
        assert wire.touches("r1")
        assert wire.target.instance_id == "r2"

    def test_load_unparsable_position_adds_nothing(self, store, repository, tmp_path):
        project_file = tmp_path / "broken.json"
        project_file.write_text(json.dumps({
            "components": [{"id": "r1", "position": "abc"}],
        }), encoding="utf-8")
        service = ProjectPersistenceService(store, repository)

        result = asyncio.run(service.load_project(str(project_file)))
        assert result.error_code is PersistenceErrorCode.PARSE_ERROR
        assert store.projects == []
        assert store.active_project_id is None
