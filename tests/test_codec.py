from datetime import datetime

import pytest

from eztodo import codec
from eztodo.errors import CorruptData, PersistenceError
from eztodo.models import Todo


def make_todo(i: int, **overrides) -> Todo:
    ts = datetime(2025, 3, 10, 9, 0, i)
    fields = dict(id=f"t{i}", title=f"Task {i}", created_at=ts, updated_at=ts)
    fields.update(overrides)
    return Todo(**fields)


class TestLoad:
    def test_missing_file_is_empty(self, tmp_path):
        assert codec.load(tmp_path / "todos.json", Todo) == []

    def test_truncated_file_is_empty_and_kept_aside(self, tmp_path):
        path = tmp_path / "todos.json"
        path.write_text('[{"id": "t1", "title": "Buy mi', encoding="utf-8")

        assert codec.load(path, Todo) == []
        copies = list(tmp_path.glob("todos.json.corrupt-*"))
        assert len(copies) == 1
        assert copies[0].read_text(encoding="utf-8").startswith('[{"id": "t1"')

    def test_wrong_shape_is_empty(self, tmp_path):
        path = tmp_path / "todos.json"
        path.write_text('{"todos": []}', encoding="utf-8")
        assert codec.load(path, Todo) == []

    def test_empty_file_is_empty(self, tmp_path):
        path = tmp_path / "todos.json"
        path.write_bytes(b"")
        assert codec.load(path, Todo) == []

    def test_decode_raises_corrupt_data(self):
        with pytest.raises(CorruptData):
            codec.decode(b"not json", Todo)


class TestSave:
    def test_round_trip_preserves_order_and_fields(self, tmp_path):
        path = tmp_path / "todos.json"
        todos = [
            make_todo(3, completed=True, completed_at=datetime(2025, 3, 11, 8, 30)),
            make_todo(1, description="with details", priority="high"),
            make_todo(2, origin_plan_id="p1", due_date=datetime(2025, 3, 12)),
        ]
        codec.save(path, todos, Todo)

        loaded = codec.load(path, Todo)
        assert [t.model_dump() for t in loaded] == [t.model_dump() for t in todos]

    def test_overwrites_and_leaves_no_temp_file(self, tmp_path):
        path = tmp_path / "todos.json"
        codec.save(path, [make_todo(1), make_todo(2)], Todo)
        codec.save(path, [make_todo(3)], Todo)

        assert [t.id for t in codec.load(path, Todo)] == ["t3"]
        assert not (tmp_path / "todos.json.tmp").exists()

    def test_field_names_are_stable(self, tmp_path):
        path = tmp_path / "todos.json"
        codec.save(path, [make_todo(1)], Todo)
        text = path.read_text(encoding="utf-8")
        for key in ("id", "title", "completed", "created_at", "updated_at", "origin_plan_id"):
            assert f'"{key}"' in text

    def test_unwritable_location_raises_persistence_error(self, tmp_path):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("", encoding="utf-8")

        with pytest.raises(PersistenceError):
            codec.save(blocker / "todos.json", [make_todo(1)], Todo)
