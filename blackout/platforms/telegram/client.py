"""
TelegramClient — thin async wrapper over the Telegram Bot API.

Only the handful of methods the bot needs: getUpdates (long polling),
sendMessage, answerCallbackQuery and setMyCommands. Any failure
(network error, non-2xx, or an ``"ok": false`` body) raises TransportError.

An optional proxy (e.g. ``socks5://127.0.0.1:1080``) applies to Telegram
traffic only; the report endpoint is contacted directly.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from blackout.core.errors import TransportError

logger = logging.getLogger(__name__)

_TELEGRAM_API = "{base}/bot{token}/{method}"


class TelegramClient:
    """
    Async Telegram Bot API client.

    Usage:
        client = TelegramClient(token, proxy="socks5://127.0.0.1:1080")
        await client.send_message(chat_id, "hello")
        updates = await client.get_updates(offset=0, timeout=30)
        await client.close()
    """

    def __init__(
        self,
        token: str,
        api_base: str = "https://api.telegram.org",
        proxy: str | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._token = token.strip()
        self._api_base = api_base.rstrip("/")
        self._proxy = proxy or None
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            kwargs: dict[str, Any] = {"timeout": httpx.Timeout(self._timeout)}
            if self._transport is not None:
                kwargs["transport"] = self._transport
            elif self._proxy:
                kwargs["proxy"] = self._proxy
            self._client = httpx.AsyncClient(**kwargs)
            if self._proxy:
                logger.info(f"Using proxy for Telegram API: {self._proxy}")
        return self._client

    async def call(
        self,
        method: str,
        payload: dict[str, Any] | None = None,
        read_timeout: float | None = None,
    ) -> Any:
        """POST a Bot API method and return its ``result`` field."""
        client = await self._get_client()
        url = _TELEGRAM_API.format(base=self._api_base, token=self._token, method=method)
        timeout = None
        if read_timeout is not None:
            timeout = httpx.Timeout(self._timeout, read=read_timeout)

        try:
            if timeout is not None:
                response = await client.post(url, json=payload or {}, timeout=timeout)
            else:
                response = await client.post(url, json=payload or {})
        except httpx.HTTPError as e:
            raise TransportError(f"Telegram {method} failed: {e}", method=method) from e

        try:
            body = response.json()
        except ValueError as e:
            raise TransportError(
                f"Telegram {method} returned a non-JSON body (HTTP {response.status_code})",
                method=method,
            ) from e

        if not isinstance(body, dict):
            raise TransportError(
                f"Telegram {method} returned an unexpected body (HTTP {response.status_code})",
                method=method,
            )

        if response.status_code >= 400 or not body.get("ok"):
            description = body.get("description", "unknown error")
            raise TransportError(
                f"Telegram {method} error ({response.status_code}): {description}",
                method=method,
                details={"status_code": response.status_code},
            )
        return body.get("result")

    # ── Bot API methods ───────────────────────────────────────────────────────

    async def get_updates(self, offset: int, timeout: int = 30) -> list[dict]:
        """Long-poll for updates newer than ``offset``."""
        result = await self.call(
            "getUpdates",
            {
                "offset": offset,
                "timeout": timeout,
                "allowed_updates": ["message", "callback_query"],
            },
            # Leave headroom past the server-side long-poll window
            read_timeout=timeout + 10,
        )
        if not isinstance(result, list):
            return []
        return [update for update in result if isinstance(update, dict)]

    async def send_message(
        self,
        chat_id: int,
        text: str,
        reply_markup: dict | None = None,
    ) -> dict:
        payload: dict[str, Any] = {"chat_id": chat_id, "text": text}
        if reply_markup:
            payload["reply_markup"] = reply_markup
        return await self.call("sendMessage", payload)

    async def answer_callback_query(self, callback_query_id: str) -> None:
        await self.call("answerCallbackQuery", {"callback_query_id": callback_query_id})

    async def set_my_commands(self, commands: list[dict[str, str]]) -> None:
        await self.call("setMyCommands", {"commands": commands})

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None
