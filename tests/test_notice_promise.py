"""Tests for notice_promise module."""

from notice_promise import Promise, first_rejected


class TestPromise:
    def test_new_promise_is_pending(self) -> None:
        promise = Promise()
        assert promise.is_pending
        assert not promise.is_resolved
        assert not promise.is_rejected
        assert promise.value == {}

    def test_resolved_value_is_payload(self) -> None:
        promise = Promise.resolved({"id": "123"})
        assert promise.is_resolved
        assert not promise.is_rejected
        assert promise.value == {"id": "123"}

    def test_rejected_value_is_error_mapping(self) -> None:
        promise = Promise.rejected("nope")
        assert promise.is_rejected
        assert promise.value == {"error": "nope"}

    def test_settles_only_once(self) -> None:
        promise = Promise().reject("first")
        promise.resolve("second")
        promise.reject("third")
        assert promise.value == {"error": "first"}

    def test_then_runs_immediately_when_resolved(self) -> None:
        seen = []
        Promise.resolved("ok").then(seen.append).rescue(seen.append)
        assert seen == ["ok"]

    def test_rescue_runs_immediately_when_rejected(self) -> None:
        seen = []
        Promise.rejected("bad").then(seen.append).rescue(seen.append)
        assert seen == ["bad"]

    def test_callbacks_queued_until_settled(self) -> None:
        resolved, rejected = [], []
        promise = Promise().then(resolved.append).rescue(rejected.append)
        assert resolved == [] and rejected == []

        promise.resolve(1)
        promise.resolve(2)
        assert resolved == [1]
        assert rejected == []

    def test_resolved_with_none_is_not_pending(self) -> None:
        promise = Promise.resolved(None)
        assert promise.is_resolved
        assert promise.value is None


class TestFirstRejected:
    def test_returns_first_rejection_and_stops(self) -> None:
        calls = []

        def check(name, ok):
            def run():
                calls.append(name)
                return Promise.resolved() if ok else Promise.rejected(name)
            return run

        result = first_rejected([check("a", True), check("b", False), check("c", False)])
        assert result.value == {"error": "b"}
        assert calls == ["a", "b"]

    def test_passes_input_through_when_all_resolve(self) -> None:
        subject = object()
        result = first_rejected([Promise.resolved, Promise.resolved], subject)
        assert result.is_resolved
        assert result.value is subject

    def test_no_checks_resolves(self) -> None:
        assert first_rejected([], "x").value == "x"
