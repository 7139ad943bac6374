from pathlib import Path

from eztodo.settings import get_settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in (
            "EZTODO_DATA_DIR",
            "EZTODO_PERSIST_HISTORY",
            "EZTODO_MAX_OCCURRENCES",
            "CORS_ALLOW_ORIGINS",
            "LOG_LEVEL",
            "EZTODO_LOG_DIR",
        ):
            monkeypatch.delenv(name, raising=False)

        settings = get_settings()
        assert settings.data_dir == Path("./data")
        assert settings.todos_path == Path("./data/todos.json")
        assert settings.plans_path == Path("./data/plans.json")
        assert settings.history_path == Path("./data/history.json")
        assert settings.max_occurrences_per_plan == 366
        assert settings.cors_allow_origins == ["*"]
        assert settings.log_level == "INFO"
        assert settings.log_dir is None

    def test_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("EZTODO_DATA_DIR", str(tmp_path))
        monkeypatch.setenv("EZTODO_PERSIST_HISTORY", "off")
        monkeypatch.setenv("EZTODO_MAX_OCCURRENCES", "10")
        monkeypatch.setenv("CORS_ALLOW_ORIGINS", "http://localhost:1420, tauri://localhost")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        settings = get_settings()
        assert settings.data_dir == tmp_path
        assert settings.history_path is None
        assert settings.max_occurrences_per_plan == 10
        assert settings.cors_allow_origins == ["http://localhost:1420", "tauri://localhost"]
        assert settings.log_level == "DEBUG"

    def test_bad_occurrence_cap_falls_back(self, monkeypatch):
        monkeypatch.setenv("EZTODO_MAX_OCCURRENCES", "zero")
        assert get_settings().max_occurrences_per_plan == 366
        monkeypatch.setenv("EZTODO_MAX_OCCURRENCES", "-5")
        assert get_settings().max_occurrences_per_plan == 366

    def test_memory_only_history(self, monkeypatch, tmp_path):
        from eztodo import commands
        from eztodo.state import AppState

        monkeypatch.setenv("EZTODO_PERSIST_HISTORY", "false")
        state = AppState.open(tmp_path)
        todo = commands.todo_create(state, {"title": "Done", "completed": True})
        assert [e.subject_id for e in commands.history_list(state)] == [todo.id]
        assert not (tmp_path / "history.json").exists()
