"""Webhook 推送（Slack / Discord）。

只在策略放行订单（amount 不为 None）时推送，每个周期每个交易对至多一次；
不在内部重试（Discord 429 限流按 retry_after 等待一次除外）。
"""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Any, Callable

import requests

from executor.base import STATUS_LABELS, Executor, render_text
from shared.errors import DeliveryFailure
from shared.models.models import Candle, SignalEvent, Status
from shared.utils.logging import setup_logger


class WebhookExecutor(Executor):
    """Webhook 推送基类：子类只负责渲染 payload。"""

    name = "webhook"

    def __init__(self, webhook_url: str, timeout: float = 10.0, logger=None):
        if not webhook_url:
            raise ValueError(f"{self.name} webhook_url is required")
        self.webhook_url = webhook_url
        self.timeout = timeout
        self.logger = logger or setup_logger(f"executor-{self.name}")

    def build_payload(self, event: SignalEvent, amount: float, candle: Candle | None) -> dict[str, Any]:
        raise NotImplementedError

    def _post(self, payload: dict[str, Any]) -> requests.Response:
        try:
            return requests.post(self.webhook_url, json=payload, timeout=self.timeout)
        except requests.RequestException as exc:
            raise DeliveryFailure(f"[{self.name}] post failed: {exc}") from exc

    def deliver(self, payload: dict[str, Any]) -> None:
        resp = self._post(payload)
        if resp.status_code >= 400:
            raise DeliveryFailure(f"[{self.name}] HTTP {resp.status_code}: {resp.text}")

    def execute(self, event: SignalEvent, amount: float | None = None, candle: Candle | None = None) -> dict:
        if amount is None:
            return {"status": "skipped", "pair": event.pair, "reason": "no_order"}
        self.deliver(self.build_payload(event, amount, candle))
        self.logger.info("[%s] sent %s %s", self.name, event.status.value, event.pair)
        return {"status": "sent", "pair": event.pair, "signal": event.status.value, "amount": amount}


class SlackExecutor(WebhookExecutor):
    """Slack incoming webhook（mrkdwn attachment）。"""

    name = "slack"

    def build_payload(self, event: SignalEvent, amount: float, candle: Candle | None) -> dict[str, Any]:
        label = STATUS_LABELS[event.status]
        return {
            "text": "",
            "type": "mrkdwn",
            "attachments": [
                {
                    "mrkdwn_in": ["text"],
                    "color": "good" if event.status is Status.BUY else "",
                    "text": render_text(event, amount, candle),
                    "fallback": f"{label} {event.pair}",
                }
            ],
        }


_DISCORD_COLORS = {
    Status.BUY: 0x2ECC71,   # 绿
    Status.HOLD: 0x3498DB,  # 蓝
    Status.QUIT: 0xE67E22,  # 橙
}


class DiscordExecutor(WebhookExecutor):
    """Discord webhook（embed）。"""

    name = "discord"

    def __init__(
        self,
        webhook_url: str,
        username: str | None = None,
        timeout: float = 10.0,
        sleep: Callable[[float], None] = time.sleep,
        logger=None,
    ):
        super().__init__(webhook_url, timeout=timeout, logger=logger)
        self.username = username
        self.sleep = sleep

    def build_payload(self, event: SignalEvent, amount: float, candle: Candle | None) -> dict[str, Any]:
        fields = [
            {"name": "pair", "value": event.pair, "inline": True},
            {"name": "amount", "value": str(amount), "inline": True},
        ]
        if candle is not None:
            fields.append({"name": "price", "value": str(candle.price), "inline": True})
        embed = {
            "title": f"{STATUS_LABELS[event.status]} {event.pair}",
            "timestamp": datetime.fromtimestamp(event.ts / 1000, tz=timezone.utc).isoformat(),
            "color": _DISCORD_COLORS[event.status],
            "fields": fields,
        }
        payload: dict[str, Any] = {"embeds": [embed]}
        if self.username:
            payload["username"] = self.username
        return payload

    def deliver(self, payload: dict[str, Any]) -> None:
        resp = self._post(payload)
        if resp.status_code == 429:
            try:
                data = resp.json()
            except ValueError:
                data = {}
            retry = float(data.get("retry_after", 1.5))
            self.logger.warning("[discord] 429 rate limited, retry_after=%ss", retry)
            self.sleep(retry)
            resp = self._post(payload)
        if resp.status_code >= 400:
            raise DeliveryFailure(f"[discord] HTTP {resp.status_code}: {resp.text}")
