import json
import logging
import uuid
from datetime import UTC, datetime
from typing import Any


class StructuredLogger:
    """A small wrapper that emits structured JSON events via the standard
    logging system. The JSON is written as the message so it flows through the
    configured handlers (stdout) and formatters.
    """

    def __init__(self, name: str = "artfolio"):
        self._logger = logging.getLogger(name)

    def _payload(self, event: str, **kwargs) -> dict[str, Any]:
        payload: dict[str, Any] = {"timestamp": datetime.now(UTC).isoformat(), "event": event}

        # `extra` dicts are merged at top level, everything else is kept as-is
        for k, v in kwargs.items():
            if k == "extra" and isinstance(v, dict):
                payload.update(v)
            else:
                payload[k] = v
        return payload

    def _emit(self, level: int, event: str, **kwargs) -> None:
        payload = self._payload(event, **kwargs)
        try:
            self._logger.log(level, json.dumps(payload, default=str))
        except (TypeError, ValueError):
            # Fallback to plain log if JSON serialization fails
            self._logger.log(level, "%s %s", event, kwargs)

    def log_event(self, event: str, **kwargs) -> None:
        """Emit a structured event. Common usage:

        logger.log_event("gallery_viewed", gallery_id=..., extra={...})
        """
        self._emit(logging.INFO, event, **kwargs)

    # Proxy common logging methods to the underlying logger for convenience
    def info(self, msg: str, *args, **kwargs):
        return self._logger.info(msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs):
        return self._logger.warning(msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs):
        return self._logger.error(msg, *args, **kwargs)


class RouteLogger(StructuredLogger):
    """Structured logger bound to one request.

    Every event carries the route and a freshly generated ``request_id`` which
    handlers echo back to the client as ``requestId``.
    """

    def __init__(self, route: str, name: str = "artfolio.request"):
        super().__init__(name)
        self.route = route
        self.request_id = str(uuid.uuid4())

    def _payload(self, event: str, **kwargs) -> dict[str, Any]:
        payload = super()._payload(event, **kwargs)
        payload["route"] = self.route
        payload["request_id"] = self.request_id
        return payload

    def info_event(self, event: str, **kwargs) -> None:
        self._emit(logging.INFO, event, **kwargs)

    def warning_event(self, event: str, **kwargs) -> None:
        self._emit(logging.WARNING, event, **kwargs)

    def error_event(self, event: str, **kwargs) -> None:
        self._emit(logging.ERROR, event, **kwargs)


def route_logger(route: str) -> RouteLogger:
    return RouteLogger(route)


__all__ = ["route_logger", "RouteLogger", "StructuredLogger"]
