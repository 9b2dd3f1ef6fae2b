from __future__ import annotations

import json
import logging
import time
from typing import Any

from jenkinsfn.core.runtime.settings import Settings


def _now_ms() -> int:
    return int(time.time() * 1000)


def _dur_ms(t0: float, t1: float) -> int:
    return int((t1 - t0) * 1000)


def ensure_logging(settings: Settings) -> None:
    fmt = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    if (settings.log_format or "text").lower() == "json":
        # JSON payload already includes timestamp; keep formatter minimal.
        fmt = "%(message)s"
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format=fmt,
    )


def log_event(logger: logging.Logger, *, settings: Settings, level: int, event: str, **fields: Any) -> None:
    """Emit an event log.

    - text format: one-liner `event key=value ...`
    - json format: one JSON object per line
    """
    if settings.log_format.lower() == "json":
        payload = {"ts_ms": _now_ms(), "event": event, **fields}
        logger.log(level, json.dumps(payload, ensure_ascii=False, default=str))
        return

    parts = [event]
    for k, v in fields.items():
        parts.append(f"{k}={v}")
    logger.log(level, " ".join(parts))


class PassObserver:
    """Times one generation pass and emits its start and summary events."""

    def __init__(self, *, settings: Settings, logger: logging.Logger):
        self.settings = settings
        self.logger = logger
        self._t0: float | None = None

    def pass_start(self, **fields: Any) -> None:
        self._t0 = time.perf_counter()
        log_event(self.logger, settings=self.settings, level=logging.INFO, event="pass_start", **fields)

    def event(self, event: str, *, level: int = logging.INFO, **fields: Any) -> None:
        log_event(self.logger, settings=self.settings, level=level, event=event, **fields)

    def pass_end(self, *, summary: dict) -> int:
        dur = _dur_ms(self._t0, time.perf_counter()) if self._t0 is not None else 0
        log_event(self.logger, settings=self.settings, level=logging.INFO, event="pass_summary", duration_ms=dur, **summary)
        return dur
