"""Alarm notification channels for detection runs."""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Iterable, Mapping, Optional
from urllib import request

from .models import AlarmEvent

logger = logging.getLogger(__name__)


class AlertChannel:
    """Base alert destination."""

    def send(self, payload: Mapping[str, Any]) -> None:  # pragma: no cover - interface
        raise NotImplementedError


class LoggingChannel(AlertChannel):
    """Default alert channel emitting to the logger."""

    def __init__(self, level: int = logging.WARNING) -> None:
        self.level = level

    def send(self, payload: Mapping[str, Any]) -> None:
        logger.log(self.level, "[alarm] %s", json.dumps(payload, default=str))


class WebhookChannel(AlertChannel):
    """Posts alarms to an HTTP webhook."""

    def __init__(self, url: str, headers: Optional[Mapping[str, str]] = None, timeout: int = 5) -> None:
        self.url = url
        self.headers = {**({"Content-Type": "application/json"} if headers is None else headers)}
        self.timeout = timeout

    def send(self, payload: Mapping[str, Any]) -> None:  # pragma: no cover - network
        data = json.dumps(payload, default=str).encode("utf-8")
        req = request.Request(self.url, data=data, headers=self.headers)
        with request.urlopen(req, timeout=self.timeout) as resp:  # noqa: S310
            if resp.status >= 300:
                raise RuntimeError(f"Webhook returned {resp.status}")


class CallbackChannel(AlertChannel):
    """Hands alarms to a user-supplied callable (relay, GPIO line, test double)."""

    def __init__(self, callback: Callable[[Mapping[str, Any]], None]) -> None:
        self.callback = callback

    def send(self, payload: Mapping[str, Any]) -> None:
        self.callback(payload)


class AlertManager:
    """Fans each raised alarm out to every configured channel.

    A failing channel is logged and skipped so one broken destination does
    not stop detection.
    """

    def __init__(self, channels: Iterable[AlertChannel] = ()) -> None:
        self.channels = list(channels) or [LoggingChannel()]
        self.sent = 0

    def notify(self, event: AlarmEvent) -> None:
        payload = {"event": "alarm", "label": event.short_label(), **event.model_dump()}
        for channel in self.channels:
            try:
                channel.send(payload)
            except Exception:
                logger.exception("Alert channel %s failed", channel.__class__.__name__)
        self.sent += 1


def manager_from_config(cfg: Mapping[str, Any] | None) -> AlertManager:
    """Construct an AlertManager from config mapping."""

    channels_cfg = cfg.get("channels", []) if cfg else []

    channels: list[AlertChannel] = []
    for ch in channels_cfg:
        ctype = str(ch.get("type", "log")).lower()
        if ctype in {"log", "logging"}:
            level = getattr(logging, str(ch.get("level", "WARNING")).upper(), logging.WARNING)
            channels.append(LoggingChannel(level=level))
        elif ctype in {"webhook", "http"}:
            url = ch.get("url")
            if not url:
                raise ValueError("Webhook channel requires 'url'")
            channels.append(WebhookChannel(url=str(url), headers=ch.get("headers")))
        else:
            raise ValueError(f"Unknown alert channel type '{ctype}'")

    return AlertManager(channels=channels)
