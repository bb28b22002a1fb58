# floatchat/conversation.py
from __future__ import annotations

import threading
import time
from typing import Callable, Iterator, List, Optional

from floatchat.models import ChatTurn, QueryResult

WELCOME_MESSAGE = (
    "🌊 Welcome to FloatChat AI! I'm your oceanographic data assistant.\n\n"
    "I can help you analyze ARGO float data with natural language queries. "
    "Here are some things you can ask me:\n\n"
    "🔍 **Data Queries:**\n"
    "• \"Show me all active ARGO floats\"\n"
    "• \"Get temperature profiles for float 6901234\"\n"
    "• \"Find floats near latitude 15.5, longitude 70.2\"\n\n"
    "📊 **Analysis:**\n"
    "• \"Compare salinity levels in different regions\"\n"
    "• \"Show me floats deployed in the last 6 months\"\n"
    "• \"What's the average temperature at 100m depth?\"\n\n"
    "Try clicking on the demo queries below or type your own question!"
)


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


class ConversationStore:
    """
    Append-only chat transcript.

    Turn ids come from the millisecond clock, bumped past the previous id when
    two turns land in the same tick, so they are unique and strictly increasing.
    """

    def __init__(self, welcome: Optional[str] = WELCOME_MESSAGE, clock: Callable[[], int] = _now_ms):
        self._turns: List[ChatTurn] = []
        self._last_id = 0
        self._clock = clock
        self._lock = threading.Lock()
        if welcome:
            self.append("bot", welcome)

    def _next_id(self) -> int:
        self._last_id = max(self._clock(), self._last_id + 1)
        return self._last_id

    def append(
        self,
        role: str,
        content: str,
        data: Optional[QueryResult] = None,
        error: bool = False,
        original_query: Optional[str] = None,
    ) -> ChatTurn:
        with self._lock:
            turn = ChatTurn(
                id=self._next_id(),
                role=role,
                content=content,
                data=data,
                error=error,
                original_query=original_query,
            )
            self._turns.append(turn)
        return turn

    def last(self) -> Optional[ChatTurn]:
        return self._turns[-1] if self._turns else None

    def find(self, turn_id: int) -> Optional[ChatTurn]:
        for t in self._turns:
            if t.id == turn_id:
                return t
        return None

    @property
    def turns(self) -> tuple:
        return tuple(self._turns)

    def __iter__(self) -> Iterator[ChatTurn]:
        return iter(tuple(self._turns))

    def __len__(self) -> int:
        return len(self._turns)
