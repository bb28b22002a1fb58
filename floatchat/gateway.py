# floatchat/gateway.py — question in, transcript + views out
from __future__ import annotations

import logging
import threading
from typing import Optional

from floatchat.conversation import ConversationStore
from floatchat.errors import FloatChatError
from floatchat.models import ChatTurn, QueryResult
from floatchat.summaries import error_reply, insight_digest, short_summary, suggestions_reply
from floatchat.sync import ViewSynchronizer

logger = logging.getLogger(__name__)

SUGGEST_FAILED_MESSAGE = "❌ Failed to fetch suggestions."


class QueryGateway:
    """
    Sends questions to POST /api/query and records the outcome.

    Only one question may be in flight; a second submit while busy is a no-op.
    The UI queues a question with ``enqueue`` from a widget callback, so the
    next run starts out busy and draws its inputs disabled, then calls
    ``run_queued``. Success publishes the result to the views and then appends
    a summary turn; failure appends an error turn with next steps.
    """

    def __init__(self, client, store: ConversationStore, sync: ViewSynchronizer, emojis: bool = True):
        self.client = client
        self.store = store
        self.sync = sync
        self.emojis = emojis
        self._in_flight = threading.Lock()
        self._queued: Optional[str] = None

    @property
    def busy(self) -> bool:
        return self._in_flight.locked() or self._queued is not None

    @property
    def queued(self) -> Optional[str]:
        return self._queued

    def enqueue(self, query: Optional[str]) -> bool:
        """Hold a question for ``run_queued``. Blank input or a busy gateway is a no-op."""
        text = (query or "").strip()
        if not text or self.busy:
            return False
        self._queued = text
        return True

    def run_queued(self) -> Optional[ChatTurn]:
        text, self._queued = self._queued, None
        if text is None:
            return None
        return self.submit(text)

    def submit(self, query: Optional[str]) -> Optional[ChatTurn]:
        text = (query or "").strip()
        if not text:
            return None
        if not self._in_flight.acquire(blocking=False):
            logger.info("Query ignored: another query is still running")
            return None
        try:
            self.store.append("user", text)
            try:
                result = self.client.query(text)
            except FloatChatError as e:
                logger.error(f"Query failed ({type(e).__name__}): {e.user_message}")
                return self._error_turn(e, text)
            except Exception as e:
                logger.exception(f"Unexpected error while querying: {e}")
                return self._error_turn(FloatChatError(), text)

            reply = short_summary(result, text, emojis=self.emojis)
            self.sync.set_query_result(result)
            return self.store.append("bot", reply, data=result, original_query=text)
        finally:
            self._in_flight.release()

    def _error_turn(self, err: FloatChatError, query: str) -> ChatTurn:
        return self.store.append(
            "bot",
            error_reply(err, emojis=self.emojis),
            error=True,
            original_query=query,
        )

    # ---- turn actions ----
    def retry(self, turn: ChatTurn) -> Optional[ChatTurn]:
        if not turn.original_query:
            return None
        return self.submit(turn.original_query)

    def explain(self, result: Optional[QueryResult]) -> ChatTurn:
        return self.store.append("bot", insight_digest(result))

    def suggest(self, original_query: str) -> ChatTurn:
        try:
            suggestions = self.client.suggest(original_query)
        except FloatChatError as e:
            logger.error(f"Suggestion fetch failed: {e.user_message}")
            return self.store.append("bot", SUGGEST_FAILED_MESSAGE, error=True)
        return self.store.append("bot", suggestions_reply(suggestions, emojis=self.emojis))
