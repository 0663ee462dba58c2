"""
Actions — the explicit identity of every user command.

Inbound events carry an Action decoded from an inline-keyboard payload
("action:<tag>") or a slash command ("/stop"). Display labels live in the
text catalog and never take part in dispatch, so a label in any language
that happens to look like field input can't be mistaken for a command.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

PAYLOAD_PREFIX = "action:"


class Action(str, Enum):
    """Every command a subscriber can issue."""

    WELCOME = "welcome"
    ACTIVATE = "activate"
    DEACTIVATE = "deactivate"
    SET_BILLING_ID = "set_billing_id"
    SET_AUTH_TOKEN = "set_auth_token"
    SET_SCHEDULE_TIME = "set_schedule_time"
    SHOW_SETTINGS = "show_settings"
    CANCEL = "cancel"

    @property
    def payload(self) -> str:
        """Callback payload carried by the inline button for this action."""
        return f"{PAYLOAD_PREFIX}{self.value}"

    @classmethod
    def from_payload(cls, payload: str) -> "Action | None":
        if not payload.startswith(PAYLOAD_PREFIX):
            return None
        try:
            return cls(payload[len(PAYLOAD_PREFIX):])
        except ValueError:
            return None

    @classmethod
    def from_command(cls, text: str) -> "Action | None":
        """Decode "/cmd", "/cmd@BotName" or "/cmd args"; None for unknown commands."""
        if not text.startswith("/"):
            return None
        parts = text[1:].split(maxsplit=1)
        name = parts[0].split("@", 1)[0].lower() if parts else ""
        return SLASH_COMMANDS.get(name)


SLASH_COMMANDS: dict[str, Action] = {
    "start": Action.WELCOME,
    "activate": Action.ACTIVATE,
    "stop": Action.DEACTIVATE,
    "billid": Action.SET_BILLING_ID,
    "token": Action.SET_AUTH_TOKEN,
    "time": Action.SET_SCHEDULE_TIME,
    "settings": Action.SHOW_SETTINGS,
    "cancel": Action.CANCEL,
}


class Awaiting(str, Enum):
    """Which free-text input, if any, the next message is bound to."""

    NONE = "none"
    BILLING_ID = "billing_id"
    AUTH_TOKEN = "auth_token"
    SCHEDULE_TIME = "schedule_time"


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Keyboards
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

Keyboard = tuple[tuple[Action, ...], ...]

CANCEL_KEYBOARD: Keyboard = ((Action.CANCEL,),)


def main_menu(active: bool) -> Keyboard:
    """Main menu; the start/stop row follows the subscriber's active flag."""
    toggle = Action.DEACTIVATE if active else Action.ACTIVATE
    return (
        (Action.SET_BILLING_ID, Action.SET_AUTH_TOKEN),
        (Action.SET_SCHEDULE_TIME,),
        (toggle,),
        (Action.SHOW_SETTINGS,),
    )


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Inbound events
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


@dataclass(frozen=True)
class InboundEvent:
    """
    One decoded user event.

    Exactly one of ``action`` / ``text`` is set for a meaningful event;
    both None means the update carried nothing the bot acts on.
    """

    subscriber_id: int
    action: Action | None = None
    text: str | None = None

    @classmethod
    def from_message_text(cls, subscriber_id: int, text: str) -> "InboundEvent":
        """
        Slash commands become actions; unknown commands are dropped, not treated as input.

        Other text is kept as sent, blank included, so the engine decides what
        counts as a usable value.
        """
        stripped = text.strip()
        if stripped.startswith("/"):
            return cls(subscriber_id=subscriber_id, action=Action.from_command(stripped))
        return cls(subscriber_id=subscriber_id, text=text)

    @classmethod
    def from_payload(cls, subscriber_id: int, payload: str) -> "InboundEvent":
        return cls(subscriber_id=subscriber_id, action=Action.from_payload(payload))

    @property
    def is_empty(self) -> bool:
        return self.action is None and self.text is None
