from datetime import datetime

from eztodo.history import HistoryLedger
from eztodo.models import HistoryEvent, SubjectKind


class TestHistoryLedger:
    def test_ordered_by_occurred_at_then_insertion(self, tmp_path):
        ledger = HistoryLedger(tmp_path / "history.json")
        ledger.append(SubjectKind.TODO, "t2", HistoryEvent.COMPLETED, occurred_at=datetime(2025, 3, 10, 12))
        ledger.append(SubjectKind.PLAN, "p1", HistoryEvent.GENERATED, occurred_at=datetime(2025, 3, 10, 8))
        ledger.append(SubjectKind.TODO, "t1", HistoryEvent.COMPLETED, occurred_at=datetime(2025, 3, 10, 12))

        assert [e.subject_id for e in ledger.list()] == ["p1", "t2", "t1"]

    def test_persists_across_reload(self, tmp_path):
        path = tmp_path / "history.json"
        first = HistoryLedger(path).append(SubjectKind.TODO, "t1", HistoryEvent.COMPLETED, title="Read")

        reloaded = HistoryLedger(path).list()
        assert [e.model_dump() for e in reloaded] == [first.model_dump()]

    def test_memory_only_ledger_writes_nothing(self, tmp_path):
        ledger = HistoryLedger(None, clock=lambda: datetime(2025, 3, 10))
        entry = ledger.append(SubjectKind.TODO, "t1", HistoryEvent.COMPLETED)
        assert entry.occurred_at == datetime(2025, 3, 10)
        assert len(ledger) == 1
        assert list(tmp_path.iterdir()) == []

    def test_colliding_id_factory_never_repeats_an_id(self, tmp_path):
        path = tmp_path / "history.json"
        HistoryLedger(path, id_factory=lambda: "a").append(SubjectKind.TODO, "t1", HistoryEvent.COMPLETED)

        sequence = iter(["a", "a", "b", "b", "c"])
        ledger = HistoryLedger(path, id_factory=lambda: next(sequence))
        ledger.append(SubjectKind.TODO, "t2", HistoryEvent.COMPLETED)
        ledger.append(SubjectKind.TODO, "t3", HistoryEvent.COMPLETED)

        assert [e.id for e in ledger.list()] == ["a", "b", "c"]

    def test_list_is_a_copy(self, tmp_path):
        ledger = HistoryLedger(None)
        ledger.append(SubjectKind.TODO, "t1", HistoryEvent.COMPLETED, title="Original")
        ledger.list()[0].title = "Changed"
        assert ledger.list()[0].title == "Original"

    def test_ledger_exposes_no_mutation_besides_append(self):
        ledger = HistoryLedger(None)
        for name in ("update", "delete", "remove", "clear"):
            assert not hasattr(ledger, name)
