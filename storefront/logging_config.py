"""Structured logging configuration."""

import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from pythonjsonlogger import jsonlogger

from storefront.config import settings

# Context keys the JSON log promotes to top-level fields when present.
CONTEXT_FIELDS = ("store_url", "platform", "product_id", "page", "job")


class StorefrontJsonFormatter(jsonlogger.JsonFormatter):
    """JSON records tagged with the site name and any storefront context."""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)

        log_record['ts'] = datetime.fromtimestamp(record.created, timezone.utc).isoformat()
        log_record['level'] = record.levelname
        log_record['site'] = settings.site_name
        log_record['at'] = f"{record.module}.{record.funcName}:{record.lineno}"

        context = log_record.pop('context', None) or {}
        for key in CONTEXT_FIELDS:
            if key in context:
                log_record[key] = context[key]


def setup_logging(log_dir: str | Path | None = None):
    """Configure console and JSON file logging.

    ``app.log`` gets everything at the configured level; ``error.log`` only
    errors. Both live under ``log_dir`` (default ``settings.log_dir``).
    """
    logs_dir = Path(log_dir or settings.log_dir)
    logs_dir.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, settings.log_level.upper()))
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)-7s %(name)s: %(message)s")
    )
    root_logger.addHandler(console_handler)

    json_formatter = StorefrontJsonFormatter("%(ts)s %(level)s %(name)s %(message)s")
    for filename, level in (("app.log", logging.DEBUG), ("error.log", logging.ERROR)):
        handler = logging.FileHandler(logs_dir / filename)
        handler.setLevel(level)
        handler.setFormatter(json_formatter)
        root_logger.addHandler(handler)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)

    return root_logger


class ContextLogger(logging.LoggerAdapter):
    """Carries storefront context (store, platform, product) onto each record."""

    def process(self, msg, kwargs):
        extra = dict(kwargs.get('extra') or {})
        extra['context'] = {**self.extra, **extra.get('context', {})}
        kwargs['extra'] = extra
        return msg, kwargs

    def bind(self, **context) -> "ContextLogger":
        """A child logger with ``context`` added to this one's."""
        return ContextLogger(self.logger, {**self.extra, **context})


def get_logger(name: str, **context) -> ContextLogger:
    """Logger for ``name`` tagging records with e.g. ``store_url`` or ``platform``."""
    return ContextLogger(logging.getLogger(name), context)
