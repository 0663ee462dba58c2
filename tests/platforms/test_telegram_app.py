"""Tests for blackout/platforms/telegram/app.py"""

import asyncio
import json
from contextlib import suppress

import httpx
import pytest

from blackout.bot.actions import Action, InboundEvent
from blackout.bot.texts import Texts
from blackout.platforms.telegram import app as telegram_app
from blackout.platforms.telegram.app import TelegramPlatform, decode_update
from blackout.platforms.telegram.client import TelegramClient


def message_update(update_id: int, chat_id: int, text: str) -> dict:
    return {"update_id": update_id, "message": {"chat": {"id": chat_id}, "text": text}}


def callback_update(update_id: int, chat_id: int, data: str) -> dict:
    return {
        "update_id": update_id,
        "callback_query": {"id": f"cb-{update_id}", "data": data, "message": {"chat": {"id": chat_id}}},
    }


class FakeBotApi:
    """Async MockTransport handler: serves queued getUpdates batches, records everything."""

    def __init__(
        self,
        batches: list[list[dict]] | None = None,
        fail_polls: int = 0,
        raw_bodies: list | None = None,
    ) -> None:
        self.batches = list(batches or [])
        self.fail_polls = fail_polls
        self.raw_bodies = list(raw_bodies or [])
        self.calls: list[tuple[str, dict]] = []

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        method = request.url.path.rsplit("/", 1)[-1]
        payload = json.loads(request.content or b"{}")
        self.calls.append((method, payload))
        if method == "getUpdates":
            if self.fail_polls:
                self.fail_polls -= 1
                return httpx.Response(502, json={"ok": False, "description": "Bad Gateway"})
            if self.raw_bodies:
                return httpx.Response(200, json=self.raw_bodies.pop(0))
            if not self.batches:
                await asyncio.sleep(0.01)
                return httpx.Response(200, json={"ok": True, "result": []})
            return httpx.Response(200, json={"ok": True, "result": self.batches.pop(0)})
        return httpx.Response(200, json={"ok": True, "result": True})

    def methods(self) -> list[str]:
        return [method for method, _ in self.calls]


def make_platform(api: FakeBotApi) -> TelegramPlatform:
    client = TelegramClient("123:ABC", transport=httpx.MockTransport(api))
    return TelegramPlatform(client, Texts("en"), poll_timeout=0)


# ━━━ Decoding ━━━


class TestDecodeUpdate:
    def test_text_message(self):
        event = decode_update(message_update(1, 42, "12345"))
        assert event == InboundEvent(subscriber_id=42, text="12345")

    def test_slash_command(self):
        event = decode_update(message_update(1, 42, "/settings"))
        assert event == InboundEvent(subscriber_id=42, action=Action.SHOW_SETTINGS)

    def test_button_press(self):
        event = decode_update(callback_update(1, 42, "action:deactivate"))
        assert event == InboundEvent(subscriber_id=42, action=Action.DEACTIVATE)

    def test_message_without_text(self):
        update = {"update_id": 1, "message": {"chat": {"id": 42}, "sticker": {}}}
        assert decode_update(update) is None

    def test_unknown_payload(self):
        assert decode_update(callback_update(1, 42, "something-else")) is None

    def test_blank_text_reaches_the_engine(self):
        event = decode_update(message_update(1, 42, "   "))
        assert event == InboundEvent(subscriber_id=42, text="   ")

    def test_unknown_command(self):
        assert decode_update(message_update(1, 42, "/nope")) is None

    def test_unrelated_update(self):
        assert decode_update({"update_id": 1, "edited_message": {}}) is None


# ━━━ Dispatch ━━━


@pytest.mark.asyncio
class TestTelegramPlatform:
    async def test_callback_is_answered_and_dispatched(self):
        api = FakeBotApi()
        platform = make_platform(api)
        received: list[InboundEvent] = []

        async def handler(event):
            received.append(event)

        await platform.process_update(callback_update(7, 42, "action:activate"), handler)
        await platform.stop()

        assert received == [InboundEvent(subscriber_id=42, action=Action.ACTIVATE)]
        assert ("answerCallbackQuery", {"callback_query_id": "cb-7"}) in api.calls

    async def test_same_chat_is_handled_in_order(self):
        platform = make_platform(FakeBotApi())
        order: list[str] = []

        async def handler(event):
            if event.text == "first":
                await asyncio.sleep(0.05)
            order.append(event.text)

        await platform.process_update(message_update(1, 42, "first"), handler)
        await platform.process_update(message_update(2, 42, "second"), handler)
        await platform.stop()

        assert order == ["first", "second"]

    async def test_chats_do_not_block_each_other(self):
        platform = make_platform(FakeBotApi())
        released = asyncio.Event()

        async def handler(event):
            if event.subscriber_id == 1:
                await released.wait()
            else:
                released.set()

        await platform.process_update(message_update(1, 1, "slow"), handler)
        await platform.process_update(message_update(2, 2, "fast"), handler)
        await asyncio.wait_for(platform.stop(), timeout=1.0)

        assert released.is_set()

    async def test_handler_error_does_not_stop_processing(self):
        platform = make_platform(FakeBotApi())
        handled: list[str] = []

        async def handler(event):
            if event.text == "boom":
                raise RuntimeError("handler failed")
            handled.append(event.text)

        await platform.process_update(message_update(1, 42, "boom"), handler)
        await platform.process_update(message_update(2, 42, "after"), handler)
        await platform.stop()

        assert handled == ["after"]

    async def test_run_polls_registers_commands_and_advances_offset(self):
        api = FakeBotApi(batches=[[message_update(10, 42, "/start")]])
        platform = make_platform(api)
        got = asyncio.Event()
        received: list[InboundEvent] = []

        async def handler(event):
            received.append(event)
            got.set()

        runner = asyncio.create_task(platform.run(handler))
        await asyncio.wait_for(got.wait(), timeout=1.0)
        await asyncio.sleep(0.05)
        await platform.stop()
        runner.cancel()
        with suppress(asyncio.CancelledError):
            await runner

        assert api.methods()[0] == "setMyCommands"
        commands = api.calls[0][1]["commands"]
        assert {"command": "stop", "description": "Stop daily outage checks"} in commands
        assert received == [InboundEvent(subscriber_id=42, action=Action.WELCOME)]
        offsets = [payload["offset"] for method, payload in api.calls if method == "getUpdates"]
        assert offsets[0] == 0
        assert 11 in offsets[1:]

    async def test_polling_error_backs_off_and_retries(self, monkeypatch):
        monkeypatch.setattr(telegram_app, "ERROR_BACKOFF", 0.01)
        api = FakeBotApi(batches=[[message_update(3, 42, "/settings")]], fail_polls=2)
        platform = make_platform(api)
        got = asyncio.Event()

        async def handler(event):
            got.set()

        runner = asyncio.create_task(platform.run(handler))
        await asyncio.wait_for(got.wait(), timeout=1.0)
        await platform.stop()
        runner.cancel()
        with suppress(asyncio.CancelledError):
            await runner

        assert api.methods().count("getUpdates") >= 3

    async def test_non_object_poll_body_backs_off_and_retries(self, monkeypatch):
        monkeypatch.setattr(telegram_app, "ERROR_BACKOFF", 0.01)
        api = FakeBotApi(
            batches=[[message_update(4, 42, "/settings")]],
            raw_bodies=[["not", "an", "object"], "gateway says hi"],
        )
        platform = make_platform(api)
        got = asyncio.Event()

        async def handler(event):
            got.set()

        runner = asyncio.create_task(platform.run(handler))
        await asyncio.wait_for(got.wait(), timeout=1.0)
        await platform.stop()
        runner.cancel()
        with suppress(asyncio.CancelledError):
            await runner

        assert api.methods().count("getUpdates") >= 3
