"""Tests for blackout/notifications/telegram.py and the Bot API client."""

import json

import httpx
import pytest

from blackout.bot.actions import Action, main_menu
from blackout.bot.texts import Texts
from blackout.core.errors import TransportError
from blackout.notifications.telegram import TelegramNotifier
from blackout.platforms.telegram.client import TelegramClient


class RecordingTransport:
    """Handler for httpx.MockTransport that records Bot API calls."""

    def __init__(self, status: int = 200, body: dict | None = None) -> None:
        self.requests: list[httpx.Request] = []
        self.status = status
        self.body = body if body is not None else {"ok": True, "result": {"message_id": 1}}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status, json=self.body)

    def payload(self, index: int = -1) -> dict:
        return json.loads(self.requests[index].content)


def make_client(recorder: RecordingTransport) -> TelegramClient:
    return TelegramClient("123:ABC", transport=httpx.MockTransport(recorder))


@pytest.mark.asyncio
class TestTelegramClient:
    async def test_url_and_payload(self):
        recorder = RecordingTransport()
        client = make_client(recorder)
        await client.send_message(42, "hello")
        await client.close()

        request = recorder.requests[0]
        assert request.method == "POST"
        assert request.url.host == "api.telegram.org"
        assert request.url.path == "/bot123:ABC/sendMessage"
        assert recorder.payload() == {"chat_id": 42, "text": "hello"}

    async def test_ok_false_raises(self):
        recorder = RecordingTransport(
            status=403, body={"ok": False, "description": "Forbidden: bot was blocked by the user"}
        )
        client = make_client(recorder)
        with pytest.raises(TransportError) as exc:
            await client.send_message(42, "hello")
        assert exc.value.method == "sendMessage"
        assert "blocked" in str(exc.value)

    async def test_non_object_body_raises(self):
        recorder = RecordingTransport(body=[{"update_id": 1}])
        client = make_client(recorder)
        with pytest.raises(TransportError) as exc:
            await client.get_updates(offset=0, timeout=0)
        assert exc.value.method == "getUpdates"

    async def test_non_object_updates_are_skipped(self):
        recorder = RecordingTransport(body={"ok": True, "result": [{"update_id": 5}, "junk", 7]})
        client = make_client(recorder)
        assert await client.get_updates(offset=0, timeout=0) == [{"update_id": 5}]

    async def test_network_error_raises(self):
        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        client = TelegramClient("123:ABC", transport=httpx.MockTransport(handler))
        with pytest.raises(TransportError):
            await client.answer_callback_query("cb-1")

    async def test_get_updates(self):
        recorder = RecordingTransport(body={"ok": True, "result": [{"update_id": 5}]})
        client = make_client(recorder)
        updates = await client.get_updates(offset=5, timeout=0)
        assert updates == [{"update_id": 5}]
        payload = recorder.payload()
        assert payload["offset"] == 5
        assert payload["allowed_updates"] == ["message", "callback_query"]


@pytest.mark.asyncio
class TestTelegramNotifier:
    async def test_send_plain(self):
        recorder = RecordingTransport()
        notifier = TelegramNotifier(make_client(recorder), Texts("en"))

        assert notifier.name == "telegram"
        assert await notifier.send(42, "report") is True
        assert "reply_markup" not in recorder.payload()

    async def test_keyboard_carries_payloads_not_labels(self):
        recorder = RecordingTransport()
        notifier = TelegramNotifier(make_client(recorder), Texts("fa"))

        await notifier.send(42, "menu", main_menu(False))

        rows = recorder.payload()["reply_markup"]["inline_keyboard"]
        buttons = [button for row in rows for button in row]
        assert {"text": "▶️ شروع ربات", "callback_data": "action:activate"} in buttons
        assert all(b["callback_data"].startswith("action:") for b in buttons)

    async def test_failure_returns_false(self):
        recorder = RecordingTransport(status=400, body={"ok": False, "description": "chat not found"})
        notifier = TelegramNotifier(make_client(recorder), Texts("en"))
        assert await notifier.send(42, "report") is False


def test_render_keyboard_shape():
    notifier = TelegramNotifier(TelegramClient("123:ABC"), Texts("en"))
    rendered = notifier.render_keyboard(((Action.CANCEL,),))
    assert rendered == {
        "inline_keyboard": [[{"text": "❌ Cancel", "callback_data": "action:cancel"}]]
    }
