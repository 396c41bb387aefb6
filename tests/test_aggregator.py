from core.types import AggregateResult
from evaluator.aggregator import Aggregator, aggregate
from tests.conftest import InMemoryStore, make_record


class TestAggregate:
    def test_half_correct(self):
        result = aggregate(
            [
                make_record(1, expected="A", observed="A", latency=100),
                make_record(2, expected="B", observed="A", latency=300),
            ]
        )

        assert result.accuracy_percent == 50.00
        assert result.avg_latency_ms == 200.00
        assert result.total == 2

    def test_zero_records(self):
        result = aggregate([])

        assert result == AggregateResult(accuracy_percent=0.0, avg_latency_ms=0.0, total=0)
        assert result.to_display() == {"accuracy": "0.00", "avgTime": "0.00"}

    def test_missing_latency_counts_as_zero(self):
        result = aggregate(
            [
                make_record(1, expected="A", observed="A", latency=90),
                make_record(2, expected="A"),
            ]
        )

        assert result.avg_latency_ms == 45.00
        assert result.accuracy_percent == 50.00

    def test_error_never_matches(self):
        result = aggregate([make_record(1, expected="C", observed="ERROR", latency=5)])

        assert result.accuracy_percent == 0.00

    def test_rounds_to_two_decimals(self):
        result = aggregate(
            [
                make_record(1, expected="A", observed="A", latency=1),
                make_record(2, expected="A", observed="B", latency=1),
                make_record(3, expected="A", observed="C", latency=2),
            ]
        )

        assert result.accuracy_percent == 33.33
        assert result.avg_latency_ms == 1.33
        assert result.to_display() == {"accuracy": "33.33", "avgTime": "1.33"}


class TestAggregator:
    def test_every_known_category_is_reported(self):
        store = InMemoryStore(
            [
                make_record(1, category="prehistory", expected="D", observed="D", latency=10),
                make_record(2, category="prehistory", expected="D", observed="B", latency=30),
            ]
        )
        results = Aggregator(store, ["computer_security", "prehistory", "sociology"]).compute_results()

        assert list(results) == ["computer_security", "prehistory", "sociology"]
        assert results["prehistory"].accuracy_percent == 50.00
        assert results["prehistory"].avg_latency_ms == 20.00
        assert results["sociology"] == AggregateResult()

    def test_not_limited_to_sample_size(self):
        store = InMemoryStore(
            [make_record(i, category="sociology", expected="A", observed="A", latency=1) for i in range(1, 81)]
        )
        results = Aggregator(store, ["sociology"]).compute_results()

        assert results["sociology"].total == 80
        assert results["sociology"].accuracy_percent == 100.00

    def test_partial_results_mid_run(self):
        store = InMemoryStore(
            [
                make_record(1, category="sociology", expected="A", observed="A", latency=4),
                make_record(2, category="sociology", expected="B"),
            ]
        )
        results = Aggregator(store, ["sociology"]).compute_results()

        assert results["sociology"].accuracy_percent == 50.00
        assert results["sociology"].avg_latency_ms == 2.00

    def test_explicit_empty_category_list(self):
        store = InMemoryStore([make_record(1, category="sociology")])

        assert Aggregator(store, ["sociology"]).compute_results([]) == {}
        assert Aggregator(store, []).compute_results() == {}
