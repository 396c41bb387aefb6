import pytest
from pydantic import ValidationError

from core.types import Answer
from evaluator.store import QuestionStore
from tests.conftest import make_record


@pytest.fixture
def store(tmp_path):
    store = QuestionStore(tmp_path / "questions.db")
    store.insert_questions(
        [make_record(category="prehistory", expected="B") for _ in range(3)]
        + [make_record(category="sociology", expected="C") for _ in range(2)]
    )
    return store


class TestQuestionStore:
    def test_find_by_category_respects_limit(self, store):
        records = store.find_by_category("prehistory", limit=2)

        assert len(records) == 2
        assert all(record.category == "prehistory" for record in records)

    def test_find_all_by_category(self, store):
        assert len(store.find_all_by_category("prehistory")) == 3
        assert len(store.find_all_by_category("sociology")) == 2
        assert store.find_all_by_category("computer_security") == []

    def test_new_records_are_unevaluated(self, store):
        record = store.find_all_by_category("sociology")[0]

        assert record.observed_answer is Answer.EMPTY
        assert record.response_latency_ms is None
        assert not record.evaluated

    def test_save_result_updates_only_result_fields(self, store):
        record = store.find_all_by_category("prehistory")[0]
        record.observed_answer = Answer.ERROR
        record.response_latency_ms = 120
        record.category = "sociology"
        store.save_result(record)

        reloaded = store.get(record.id)
        assert reloaded.observed_answer is Answer.ERROR
        assert reloaded.response_latency_ms == 120
        assert reloaded.category == "prehistory"

    def test_save_result_for_missing_record(self, store):
        record = make_record(record_id=999, observed="A", latency=1)

        with pytest.raises(LookupError):
            store.save_result(record)

    def test_reset_all_is_idempotent(self, store):
        for record in store.find_all_by_category("prehistory"):
            record.observed_answer = Answer.A
            record.response_latency_ms = 10
            store.save_result(record)

        assert store.reset_all() == 5
        first = [r.model_dump() for r in store.find_all_by_category("prehistory")]
        assert store.reset_all() == 5
        second = [r.model_dump() for r in store.find_all_by_category("prehistory")]

        assert first == second
        assert all(r["observed_answer"] == "" and r["response_latency_ms"] is None for r in second)

    def test_count_and_categories(self, store):
        assert store.count() == 5
        assert store.count("sociology") == 2
        assert store.categories() == ["prehistory", "sociology"]


class TestQuestionRecord:
    @pytest.mark.parametrize(
        "observed, latency",
        [("A", None), ("ERROR", None), ("", 15)],
    )
    def test_latency_must_track_answer(self, observed, latency):
        with pytest.raises(ValidationError):
            make_record(1, observed=observed, latency=latency)

    def test_consistent_pairs_are_accepted(self):
        assert make_record(1, observed="ERROR", latency=0).evaluated
        assert not make_record(1).evaluated
