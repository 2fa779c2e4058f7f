import logging

import pytest

from app.core.logging import SecretsFilter, configure_logging


class _ListHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__()
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


@pytest.fixture
def root_handler():
    root = logging.getLogger()
    handler = _ListHandler()
    root.addHandler(handler)
    yield handler
    root.removeHandler(handler)


def test_secrets_redacted_on_child_logger_records(root_handler):
    configure_logging()

    logging.getLogger("app.services.users").warning(
        "login_failed", extra={"password": "hunter2", "token": "abc123", "email": "bob@example.com"}
    )

    record = root_handler.records[-1]
    assert record.password == "[REDACTED]"
    assert record.token == "[REDACTED]"
    assert record.email == "bob@example.com"


def test_configure_logging_does_not_stack_filters(root_handler):
    configure_logging()
    configure_logging()

    assert sum(isinstance(f, SecretsFilter) for f in root_handler.filters) == 1
