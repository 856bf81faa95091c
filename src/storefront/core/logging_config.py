"""
Logging
Every module logs through structlog; stdlib handlers carry third-party output.
"""

import logging
import sys
from typing import Any

import orjson
import structlog
from pythonjsonlogger import jsonlogger

SERVICE_NAME = "storefront"

# Chatty libraries that only matter when debugging the runtime itself
QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


def _add_service(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def _orjson_serializer(obj: Any, **_: Any) -> str:
    return orjson.dumps(obj, default=str).decode()


def _stdlib_handler(json_logs: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    if json_logs:
        handler.setFormatter(
            jsonlogger.JsonFormatter(
                "%(asctime)s %(levelname)s %(name)s %(message)s",
                rename_fields={"levelname": "level", "asctime": "timestamp"},
            )
        )
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)-8s %(name)s | %(message)s"))
    return handler


def configure_logging(level: str = "INFO", json_logs: bool = False) -> None:
    """
    Install handlers and the structlog pipeline. Safe to call repeatedly.

    Args:
        level: Root log level name; unknown names fall back to INFO
        json_logs: Emit one JSON object per line instead of console output
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=log_level, handlers=[_stdlib_handler(json_logs)], force=True)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    renderer = (
        structlog.processors.JSONRenderer(serializer=_orjson_serializer)
        if json_logs
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            _add_service,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


class LogContext:
    """
    Bind fields such as store_id and request_id to every log line in scope.

    None values are skipped so optional identifiers never show up as nulls.
    """

    def __init__(self, **kwargs: Any):
        self.context = {k: v for k, v in kwargs.items() if v is not None}

    def __enter__(self) -> "LogContext":
        structlog.contextvars.bind_contextvars(**self.context)
        return self

    def __exit__(self, *args: Any) -> None:
        structlog.contextvars.unbind_contextvars(*self.context.keys())
