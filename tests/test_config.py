"""Tests for workflow settings and backend selection."""

import pytest

from agentflow import (
    FilePersistence,
    InMemoryPersistence,
    SQLitePersistence,
    Workflow,
    WorkflowConfigurationError,
)
from agentflow.config import WorkflowSettings, create_persistence
from agentflow.workflow import WorkflowEventType

from sample_nodes import FinishNode, StartNode


class TestWorkflowSettings:

    def test_defaults(self):
        settings = WorkflowSettings.get_default_instance(environ={})

        assert settings.persistence_backend == "memory"
        assert settings.persistence_prefix == "agentflow_workflow_"
        assert settings.persistence_ext == ".store"
        assert settings.max_steps == 0
        assert settings.log_events is True

    def test_environment_values_are_coerced(self, tmp_path):
        settings = WorkflowSettings.get_default_instance(environ={
            "AGENTFLOW_PERSISTENCE_BACKEND": "file",
            "AGENTFLOW_PERSISTENCE_DIR": str(tmp_path),
            "AGENTFLOW_MAX_STEPS": " 50 ",
            "AGENTFLOW_LOG_EVENTS": "off",
        })

        assert settings.persistence_backend == "file"
        assert settings.persistence_dir == str(tmp_path)
        assert settings.max_steps == 50
        assert settings.log_events is False

    def test_reads_process_environment(self, monkeypatch):
        monkeypatch.setenv("AGENTFLOW_PERSISTENCE_EXT", ".json")

        assert WorkflowSettings.get_default_instance().persistence_ext == ".json"

    @pytest.mark.parametrize("env, message", [
        ({"AGENTFLOW_MAX_STEPS": "many"}, "Invalid integer"),
        ({"AGENTFLOW_LOG_EVENTS": "maybe"}, "Invalid boolean"),
    ])
    def test_invalid_environment_values(self, env, message):
        with pytest.raises(WorkflowConfigurationError, match=message):
            WorkflowSettings.get_default_instance(environ=env)

    def test_dict_round_trip(self):
        settings = WorkflowSettings(persistence_backend="sqlite", sqlite_path="/tmp/x.db")

        assert WorkflowSettings.from_dict(settings.to_dict()) == settings

    def test_from_dict_ignores_unknown_keys(self, caplog):
        settings = WorkflowSettings.from_dict({"max_steps": 3, "colour": "blue"})

        assert settings.max_steps == 3
        assert "colour" in caplog.text

    def test_config_name(self):
        assert WorkflowSettings.get_config_name() == "workflow"


class TestCreatePersistence:

    def test_memory_backend(self):
        assert isinstance(create_persistence(WorkflowSettings()), InMemoryPersistence)

    def test_file_backend(self, tmp_path):
        settings = WorkflowSettings(
            persistence_backend="FILE",
            persistence_dir=str(tmp_path),
            persistence_prefix="p_",
            persistence_ext=".bin",
        )

        persistence = create_persistence(settings)

        assert isinstance(persistence, FilePersistence)
        assert persistence.path_for("abc") == tmp_path / "p_abc.bin"

    def test_sqlite_backend(self, tmp_path):
        settings = WorkflowSettings(
            persistence_backend="sqlite", sqlite_path=str(tmp_path / "wf.db")
        )

        assert isinstance(create_persistence(settings), SQLitePersistence)

    @pytest.mark.parametrize("settings, message", [
        (WorkflowSettings(persistence_backend="file"), "AGENTFLOW_PERSISTENCE_DIR must be set"),
        (WorkflowSettings(persistence_backend="sqlite"), "AGENTFLOW_SQLITE_PATH must be set"),
        (WorkflowSettings(persistence_backend="redis"), "Unknown persistence backend 'redis'"),
    ])
    def test_invalid_backends(self, settings, message):
        with pytest.raises(WorkflowConfigurationError, match=message):
            create_persistence(settings)


def test_workflow_from_settings(tmp_path):
    settings = WorkflowSettings(
        persistence_backend="file",
        persistence_dir=str(tmp_path),
        max_steps=1,
        log_events=False,
    )

    workflow = (
        Workflow.from_settings(settings, workflow_id="configured")
        .add_nodes([StartNode(), FinishNode()])
        .set_start(StartNode)
        .set_end(StartNode)
    )

    assert isinstance(workflow.persistence, FilePersistence)
    assert workflow.workflow_id == "configured"
    assert workflow.run().get("step") == "start"
    assert not workflow.events.has_handlers(WorkflowEventType.NODE_START)
