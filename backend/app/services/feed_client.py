"""
Upstream Feed Client

Fetches the current weather + plot snapshot from the upstream HTTP endpoint
and normalizes it into a FeedSnapshot.

- fetch() is strict and raises FeedError subclasses
- fetch_snapshot() never raises; failures yield the default snapshot
"""
import logging
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from app.schemas.feed import FeedPlot, FeedSnapshot, WeatherReading, default_snapshot

logger = logging.getLogger(__name__)


class FeedError(Exception):
    """The upstream feed could not be read."""


class FeedTimeoutError(FeedError, TimeoutError):
    """No response within the configured bound."""


class MalformedResponseError(FeedError):
    """The payload is not JSON or lacks a weather object."""


def parse_snapshot(payload: Any) -> FeedSnapshot:
    """Normalize a decoded feed payload. Only plots without a usable id are dropped."""
    if not isinstance(payload, dict) or not isinstance(payload.get("sensores"), dict):
        raise MalformedResponseError("feed payload has no 'sensores' object")

    weather = WeatherReading.model_validate(payload["sensores"])

    raw_plots = payload.get("parcelas")
    if not isinstance(raw_plots, list):
        raw_plots = []

    plots = []
    for raw in raw_plots:
        if not isinstance(raw, dict):
            logger.warning("Skipping non-object plot record: %r", raw)
            continue
        try:
            plots.append(FeedPlot.model_validate(raw))
        except ValidationError as exc:
            logger.warning("Skipping invalid plot record %r: %s", raw.get("id"), exc.errors()[0]["msg"])
    return FeedSnapshot(weather=weather, plots=plots)


class FeedClient:
    def __init__(self, url: str, timeout: float = 10.0, transport: Optional[httpx.BaseTransport] = None) -> None:
        self.url = url
        self.timeout = timeout
        self.transport = transport

    def fetch(self) -> FeedSnapshot:
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.get(self.url)
                response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise FeedTimeoutError(f"feed request timed out after {self.timeout} seconds") from exc
        except httpx.HTTPStatusError as exc:
            raise FeedError(f"feed responded {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise FeedError(f"feed request failed: {exc}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise MalformedResponseError("feed payload is not valid JSON") from exc

        snapshot = parse_snapshot(payload)
        logger.info("Fetched feed snapshot with %d plots", len(snapshot.plots))
        return snapshot

    def fetch_snapshot(self) -> FeedSnapshot:
        try:
            return self.fetch()
        except Exception as exc:
            logger.error("Feed fetch failed, serving default snapshot: %s", exc)
            return default_snapshot()
