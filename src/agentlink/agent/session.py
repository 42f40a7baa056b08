"""Conversation session: the ordered turn history shared with one model gateway."""

from typing import (
    List,
    Tuple,
)

from agentlink.core.schema import (
    Outbound,
    Reply,
    Turn,
)


class ChatSession:
    """
    Append-only conversation history.

    Every exchange with the model appends exactly one outbound turn (user text or tool result) and
    one inbound turn (text or tool request).  Only the tool loop writes to a session, and one
    session must not be driven by two loops at once.
    """

    def __init__(self) -> None:
        self._history: List[Turn] = []

    @property
    def history(self) -> Tuple[Turn, ...]:
        """A snapshot of the turns so far, oldest first."""
        return tuple(self._history)

    def record(self, outbound: Outbound, reply: Reply) -> None:
        """Append one completed exchange."""
        self._history.append(outbound)
        self._history.append(reply)

    def __len__(self) -> int:
        return len(self._history)
