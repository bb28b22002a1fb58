# tests/test_gateway.py
from unittest.mock import Mock

import pytest

from floatchat.errors import BackendError, TransportError
from floatchat.gateway import SUGGEST_FAILED_MESSAGE, QueryGateway
from floatchat.models import ChartKind, QueryResult
from floatchat.summaries import NO_RESULTS_MESSAGE
from floatchat.sync import ViewSynchronizer


@pytest.fixture
def client():
    return Mock()


@pytest.fixture
def sync():
    return ViewSynchronizer()


@pytest.fixture
def gateway(client, store, sync):
    return QueryGateway(client, store, sync, emojis=False)


class TestSubmit:
    @pytest.mark.parametrize("query", ["", "   ", None])
    def test_blank_query_is_noop(self, gateway, client, store, query):
        assert gateway.submit(query) is None
        assert len(store) == 1
        client.query.assert_not_called()

    def test_success_appends_summary_and_publishes(self, gateway, client, store, sync, float_result):
        client.query.return_value = float_result
        turn = gateway.submit("  active floats ")
        client.query.assert_called_once_with("active floats")

        user, bot = store.turns[-2:]
        assert user.role == "user" and user.content == "active floats"
        assert bot is turn
        assert bot.role == "bot" and not bot.error
        assert bot.data is float_result
        assert bot.original_query == "active floats"
        assert "Found 3 records" in bot.content

        assert sync.query_result is float_result
        assert len(sync.floats) == 3
        assert sync.chart.kind is ChartKind.QUERY_RESULTS
        assert not gateway.busy

    def test_backend_error_turn(self, gateway, client, store, sync):
        client.query.side_effect = BackendError("Query could not be translated")
        turn = gateway.submit("gibberish")
        assert turn.error
        assert turn.original_query == "gibberish"
        assert turn.data is None
        assert "**Error:** Query could not be translated" in turn.content
        assert "• Try rephrasing your question" in turn.content
        assert sync.query_result is None
        assert not gateway.busy

    def test_transport_error_turn(self, gateway, client):
        client.query.side_effect = TransportError()
        turn = gateway.submit("q")
        assert turn.error
        assert "Could not reach the FloatChat service." in turn.content

    def test_unexpected_exception_does_not_leak(self, gateway, client):
        client.query.side_effect = KeyError("results")
        turn = gateway.submit("q")
        assert turn.error
        assert "KeyError" not in turn.content
        assert "Something went wrong" in turn.content
        assert not gateway.busy

    def test_second_submit_while_in_flight_is_noop(self, gateway, client, store, generic_result):
        nested = []

        def slow_query(text):
            assert gateway.busy
            nested.append(gateway.submit("second"))
            return generic_result

        client.query.side_effect = slow_query
        turn = gateway.submit("first")
        assert nested == [None]
        assert client.query.call_count == 1
        assert [t.content for t in store if t.role == "user"] == ["first"]
        assert turn.data is generic_result

    def test_publish_failure_adds_no_result_turn(self, client, store, generic_result):
        sync = Mock()
        sync.set_query_result.side_effect = RuntimeError("view broke")
        gw = QueryGateway(client, store, sync)
        client.query.return_value = generic_result
        with pytest.raises(RuntimeError):
            gw.submit("q")
        assert not gw.busy
        assert store.last().role == "user"
        assert all(t.data is None for t in store)

    def test_views_updated_before_bot_turn(self, client, store, sync, float_result):
        seen = []
        original = sync.set_query_result

        def publish(result):
            seen.append(len(store))
            original(result)

        sync.set_query_result = publish
        gw = QueryGateway(client, store, sync)
        client.query.return_value = float_result
        gw.submit("floats")
        # welcome + user turn only when the views are updated
        assert seen == [2]
        assert store.last().data is float_result


class TestQueue:
    def test_enqueue_marks_busy_until_run(self, gateway, client, store, generic_result):
        client.query.return_value = generic_result
        assert gateway.enqueue("  avg temp ")
        assert gateway.busy
        assert gateway.queued == "avg temp"
        client.query.assert_not_called()

        turn = gateway.run_queued()
        client.query.assert_called_once_with("avg temp")
        assert turn.data is generic_result
        assert not gateway.busy
        assert gateway.queued is None

    def test_second_enqueue_is_noop(self, gateway, client, generic_result):
        client.query.return_value = generic_result
        assert gateway.enqueue("first")
        assert not gateway.enqueue("second")
        gateway.run_queued()
        assert [c.args[0] for c in client.query.call_args_list] == ["first"]

    @pytest.mark.parametrize("query", ["", "  ", None])
    def test_blank_enqueue(self, gateway, query):
        assert not gateway.enqueue(query)
        assert not gateway.busy

    def test_run_with_nothing_queued(self, gateway, client, store):
        assert gateway.run_queued() is None
        client.query.assert_not_called()
        assert len(store) == 1

    def test_queue_cleared_when_submit_raises(self, client, store, generic_result):
        sync = Mock()
        sync.set_query_result.side_effect = RuntimeError("view broke")
        gw = QueryGateway(client, store, sync)
        client.query.return_value = generic_result
        gw.enqueue("q")
        with pytest.raises(RuntimeError):
            gw.run_queued()
        assert not gw.busy
        assert gw.enqueue("again")


class TestTurnActions:
    def test_retry_resubmits_original_query(self, gateway, client, generic_result):
        client.query.side_effect = [TransportError(), generic_result]
        failed = gateway.submit("avg temp by region")
        again = gateway.retry(failed)
        assert client.query.call_count == 2
        assert client.query.call_args.args == ("avg temp by region",)
        assert not again.error

    def test_retry_without_query(self, gateway, store, client):
        assert gateway.retry(store.turns[0]) is None
        client.query.assert_not_called()

    def test_explain(self, gateway, generic_result):
        turn = gateway.explain(generic_result)
        assert "avg_temp: avg 27.700" in turn.content
        assert gateway.explain(QueryResult()).content == NO_RESULTS_MESSAGE

    def test_suggest(self, gateway, client):
        client.suggest.return_value = ["Show floats in the Arabian Sea"]
        turn = gateway.suggest("floats")
        client.suggest.assert_called_once_with("floats")
        assert turn.content == "Suggestions:\n\n1. Show floats in the Arabian Sea"

    def test_suggest_failure(self, gateway, client):
        client.suggest.side_effect = TransportError()
        turn = gateway.suggest("floats")
        assert turn.error
        assert turn.content == SUGGEST_FAILED_MESSAGE
