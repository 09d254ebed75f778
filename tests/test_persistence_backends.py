"""Contract tests shared by every persistence backend."""

import json
import math
import threading

import pytest

from agentflow import (
    FilePersistence,
    InMemoryPersistence,
    InterruptNotFoundError,
    PersistenceError,
    SQLitePersistence,
    StateSerializationError,
    WorkflowInterrupt,
    WorkflowState,
)


@pytest.fixture(params=["memory", "file", "sqlite"])
def persistence(request, tmp_path):
    if request.param == "memory":
        return InMemoryPersistence()
    if request.param == "file":
        return FilePersistence(tmp_path)
    return SQLitePersistence(tmp_path / "interrupts.db")


def make_interrupt(node="ReviewNode", **state):
    return WorkflowInterrupt({"question": "approve?"}, node, WorkflowState(state))


class TestPersistenceContract:

    def test_round_trip(self, persistence):
        interrupt = make_interrupt(
            value=8,
            nested={"items": [1, 2.5, None, True], "pair": (1, "a")},
        )

        persistence.save("wf-1", interrupt)
        loaded = persistence.load("wf-1")

        assert loaded == interrupt
        assert loaded.state.get("nested")["pair"] == (1, "a")
        assert list(loaded.state.all()) == ["value", "nested"]

    def test_non_finite_floats_round_trip(self, persistence):
        persistence.save("wf-1", make_interrupt(score=math.inf, floor=-math.inf, ratio=math.nan))

        state = persistence.load("wf-1").state

        assert state.get("score") == math.inf
        assert state.get("floor") == -math.inf
        assert math.isnan(state.get("ratio"))

    def test_last_write_wins(self, persistence):
        persistence.save("wf-1", make_interrupt("FirstNode", step=1))
        persistence.save("wf-1", make_interrupt("SecondNode", step=2))

        loaded = persistence.load("wf-1")

        assert loaded.current_node == "SecondNode"
        assert loaded.state.get("step") == 2

    def test_load_unknown_id(self, persistence):
        with pytest.raises(InterruptNotFoundError) as exc_info:
            persistence.load("missing")

        assert exc_info.value.workflow_id == "missing"
        assert isinstance(exc_info.value, PersistenceError)

    def test_delete(self, persistence):
        persistence.save("wf-1", make_interrupt())
        assert persistence.exists("wf-1")

        persistence.delete("wf-1")

        assert not persistence.exists("wf-1")
        with pytest.raises(InterruptNotFoundError):
            persistence.load("wf-1")

    def test_delete_unknown_id_is_noop(self, persistence):
        persistence.delete("never-saved")

    def test_ids_are_isolated(self, persistence):
        persistence.save("a", make_interrupt("NodeA"))
        persistence.save("b", make_interrupt("NodeB"))
        persistence.delete("a")

        assert persistence.load("b").current_node == "NodeB"

    def test_unserializable_state_is_rejected(self, persistence):
        interrupt = make_interrupt(handle=threading.Lock())

        with pytest.raises(StateSerializationError, match=r"\$\.handle"):
            persistence.save("wf-1", interrupt)
        assert not persistence.exists("wf-1")

    def test_concurrent_saves_for_distinct_ids(self, persistence):
        def save(i):
            persistence.save(f"wf-{i}", make_interrupt(f"Node{i}", index=i))

        threads = [threading.Thread(target=save, args=(i,)) for i in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        for i in range(10):
            assert persistence.load(f"wf-{i}").state.get("index") == i


class TestFilePersistenceBackend:

    def test_missing_directory(self, tmp_path):
        with pytest.raises(PersistenceError, match="does not exist"):
            FilePersistence(tmp_path / "nope")

    def test_directory_removed_after_construction(self, tmp_path):
        directory = tmp_path / "store"
        directory.mkdir()
        persistence = FilePersistence(directory)
        directory.rmdir()

        with pytest.raises(PersistenceError, match="does not exist"):
            persistence.save("wf-1", make_interrupt())

    def test_custom_prefix_and_extension(self, tmp_path):
        persistence = FilePersistence(tmp_path, prefix="flow_", ext=".json")

        persistence.save("abc", make_interrupt())

        path = tmp_path / "flow_abc.json"
        assert path.exists()
        document = json.loads(path.read_text(encoding="utf-8"))
        assert document["workflow_id"] == "abc"
        assert document["format_version"] == 1
        assert document["interrupt"]["current_node"] == "ReviewNode"

    def test_no_temporary_files_left_behind(self, tmp_path):
        persistence = FilePersistence(tmp_path)

        persistence.save("wf-1", make_interrupt())
        persistence.save("wf-1", make_interrupt())

        assert [p.name for p in tmp_path.iterdir()] == ["agentflow_workflow_wf-1.store"]

    @pytest.mark.parametrize("workflow_id", ["../escape", "a/b", "", "..", "with space"])
    def test_invalid_workflow_ids(self, tmp_path, workflow_id):
        persistence = FilePersistence(tmp_path)

        with pytest.raises(PersistenceError, match="Invalid workflow ID"):
            persistence.save(workflow_id, make_interrupt())

    def test_corrupted_file(self, tmp_path):
        persistence = FilePersistence(tmp_path)
        (tmp_path / "agentflow_workflow_bad.store").write_text("{not json", encoding="utf-8")

        with pytest.raises(PersistenceError, match="Corrupted interrupt record"):
            persistence.load("bad")


    def test_corrupted_state_payload(self, tmp_path):
        persistence = FilePersistence(tmp_path)
        persistence.save("bad", make_interrupt(by_id={1: "one"}))
        path = persistence.path_for("bad")
        document = json.loads(path.read_text(encoding="utf-8"))
        document["interrupt"]["state"]["by_id"]["items"] = [[1, 2, 3]]
        path.write_text(json.dumps(document), encoding="utf-8")

        with pytest.raises(PersistenceError, match="Corrupted dict payload"):
            persistence.load("bad")


class TestSQLitePersistenceBackend:

    def test_missing_directory(self, tmp_path):
        with pytest.raises(PersistenceError, match="does not exist"):
            SQLitePersistence(tmp_path / "nope" / "db.sqlite")

    def test_shared_database_between_instances(self, tmp_path):
        db_path = tmp_path / "shared.db"
        SQLitePersistence(db_path).save("wf-1", make_interrupt(value=1))

        assert SQLitePersistence(db_path).load("wf-1").state.get("value") == 1

    def test_list_suspended(self, tmp_path):
        persistence = SQLitePersistence(tmp_path / "db.sqlite")
        persistence.save("wf-1", make_interrupt("NodeA"))
        persistence.save("wf-2", make_interrupt("NodeB"))

        suspended = {row["workflow_id"]: row["current_node"] for row in persistence.list_suspended()}

        assert suspended == {"wf-1": "NodeA", "wf-2": "NodeB"}

    def test_invalid_table_name(self, tmp_path):
        with pytest.raises(PersistenceError, match="Invalid table name"):
            SQLitePersistence(tmp_path / "db.sqlite", table="drop table;")
