"""
hang: Logger Adapter
======================

What:  The minimal logging capability hang needs, plus an implementation
       over the standard library `logging` module.
How:   `Logger` is a structural Protocol: leveled methods taking
       printf-style arguments, and `with_fields()` returning a logger that
       attaches structured fields to every record. `FieldLogger` satisfies it
       using `logging.LoggerAdapter`.
Who:   Service, Dispatcher, built-in handlers and the Shutdown Listener log
       through this interface; any logging library can be plugged in by
       writing an adapter with the same shape.

Field rendering:
    Fields are passed to the handler as `extra` (so JSON formatters can pick
    them up) and appended to the message as `key=value` pairs. A field whose
    name is a LogRecord attribute (`module`, `process`, `name`, ...) is
    attached as `field_<name>`; its rendered text keeps the original key.

        2024-01-15T12:00:00 [DEBUG] hang: dispatch route=livecheck function=live_check
"""

import logging
import sys
from typing import Any, Mapping, MutableMapping, Optional, Protocol, Tuple, runtime_checkable

DEFAULT_LOGGER_NAME = "hang"

# Attribute names LogRecord refuses in `extra`
RESERVED_RECORD_KEYS = frozenset(
    logging.LogRecord("", logging.NOTSET, "", 0, "", (), None).__dict__
) | {"message", "asctime"}
RESERVED_FIELD_PREFIX = "field_"


@runtime_checkable
class Logger(Protocol):
    """Leveled logging with structured fields attachment."""

    def debug(self, msg: Any, *args: Any, **kwargs: Any) -> None: ...

    def info(self, msg: Any, *args: Any, **kwargs: Any) -> None: ...

    def warning(self, msg: Any, *args: Any, **kwargs: Any) -> None: ...

    def error(self, msg: Any, *args: Any, **kwargs: Any) -> None: ...

    def critical(self, msg: Any, *args: Any, **kwargs: Any) -> None: ...

    def with_fields(self, **fields: Any) -> "Logger": ...


class FieldLogger(logging.LoggerAdapter):
    """
    `logging.LoggerAdapter` carrying a dict of structured fields.

    with_fields() never mutates the receiver: it returns a new adapter over
    the same underlying logger with the merged fields, so a per-request logger
    can be derived from a shared one without leaking fields between requests.
    """

    def __init__(self, logger: logging.Logger, fields: Optional[Mapping[str, Any]] = None):
        super().__init__(logger, dict(fields or {}))

    @property
    def fields(self) -> Mapping[str, Any]:
        return dict(self.extra)

    def with_fields(self, **fields: Any) -> "FieldLogger":
        merged = dict(self.extra)
        merged.update(fields)
        return FieldLogger(self.logger, merged)

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        if not self.extra:
            return msg, kwargs
        extra = {_record_key(key): value for key, value in self.extra.items()}
        extra.update(kwargs.get("extra") or {})
        kwargs["extra"] = extra
        rendered = " ".join(f"{key}={value}" for key, value in self.extra.items())
        return f"{msg} {rendered}" if msg != "" else rendered, kwargs


def _record_key(key: str) -> str:
    return RESERVED_FIELD_PREFIX + key if key in RESERVED_RECORD_KEYS else key


def get_logger(name: str = DEFAULT_LOGGER_NAME, **fields: Any) -> FieldLogger:
    """Return a FieldLogger over `logging.getLogger(name)` with optional fields."""
    return FieldLogger(logging.getLogger(name), fields)


def setup_logging(level: str = "INFO") -> None:
    """
    Configure process-wide logging for a hang service.

    What:    Root logger to stdout with a timestamped, leveled format.
    When:    Called once by main.run() before the service is built.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # uvicorn logs every request at INFO; the access middleware already does
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
