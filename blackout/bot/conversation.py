"""
Conversation state — which field each subscriber is being asked for.

Ephemeral by nature: a restart empties the tracker, which simply drops any
pending prompt. Owned by the SchedulingEngine; nothing else writes to it.
"""

from __future__ import annotations

from blackout.bot.actions import Awaiting


class ConversationTracker:
    """
    Per-subscriber finite-state machine.

    Usage:
        tracker = ConversationTracker()
        tracker.begin(42, Awaiting.SCHEDULE_TIME)
        tracker.awaiting(42)   # Awaiting.SCHEDULE_TIME
        tracker.clear(42)
        tracker.awaiting(42)   # Awaiting.NONE
    """

    def __init__(self) -> None:
        self._awaiting: dict[int, Awaiting] = {}

    def awaiting(self, subscriber_id: int) -> Awaiting:
        return self._awaiting.get(subscriber_id, Awaiting.NONE)

    def begin(self, subscriber_id: int, field: Awaiting) -> None:
        """Any state → awaiting ``field``. Beginning NONE is the same as clear()."""
        if field is Awaiting.NONE:
            self.clear(subscriber_id)
        else:
            self._awaiting[subscriber_id] = field

    def clear(self, subscriber_id: int) -> Awaiting:
        """Drop any pending input. Returns what was pending."""
        return self._awaiting.pop(subscriber_id, Awaiting.NONE)

    def reset(self) -> None:
        self._awaiting.clear()

    def __len__(self) -> int:
        return len(self._awaiting)
