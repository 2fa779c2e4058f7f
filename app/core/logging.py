import logging


class SecretsFilter(logging.Filter):
    """Mask credentials and raw upload payloads attached to log records."""

    BLOCKED_KEYS = {"password", "token", "data", "content"}

    def filter(self, record: logging.LogRecord) -> bool:
        for key in self.BLOCKED_KEYS:
            if hasattr(record, key):
                setattr(record, key, "[REDACTED]")
        return True


def configure_logging(level: int = logging.INFO) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    # Logger filters skip records propagated from child loggers; handler filters see them all.
    for handler in logging.getLogger().handlers:
        if not any(isinstance(existing, SecretsFilter) for existing in handler.filters):
            handler.addFilter(SecretsFilter())
