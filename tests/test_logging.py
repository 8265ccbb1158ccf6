import json
import logging
from collections.abc import Iterator

import httpx
import pytest

from mage_sdk.client import MageClient
from mage_sdk import logging as mage_logging
from mage_sdk.errors import MageHTTPStatusError
from mage_sdk.logging import JsonLogFormatter, configure_logging
from mage_sdk.types import Credential, EndpointGroup

_CREDENTIALS = {
    EndpointGroup.DOC_EXTRACT: Credential(public_key="pub-doc", secret_key="top-secret"),
}


def _client(handler: object) -> MageClient:
    return MageClient(
        credentials=_CREDENTIALS,
        base_url="http://mage.test/v1",
        transport=httpx.MockTransport(handler),  # type: ignore[arg-type]
    )


def test_request_log_includes_correlation_fields(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="mage.http")

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"code": 0, "message": "ok", "task_id": "task-7"})

    _client(handler).query_document("task-7")

    records = [r for r in caplog.records if getattr(r, "event_name", None) == "mage_request"]
    assert records
    record = records[-1]
    assert getattr(record, "endpoint", None) == "/mage/nlp/docextract/query"
    assert getattr(record, "endpoint_group", None) == "doc_extract"
    assert getattr(record, "status", None) == 200
    assert getattr(record, "code", None) == 0
    assert getattr(record, "task_id", None) == "task-7"
    assert getattr(record, "latency_ms", None) is not None
    assert "top-secret" not in caplog.text


def test_failed_request_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="mage.http")

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="boom")

    with pytest.raises(MageHTTPStatusError):
        _client(handler).query_document("task-8")

    failures = [
        r for r in caplog.records if getattr(r, "event_name", None) == "mage_request_failed"
    ]
    assert failures
    assert failures[-1].levelno == logging.WARNING
    assert failures[-1].exc_info is not None


def test_json_formatter_emits_extra_fields() -> None:
    record = logging.LogRecord(
        name="mage.http",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="mage_request",
        args=(),
        exc_info=None,
    )
    record.event_name = "mage_request"
    record.endpoint = "/document/ocr/general"
    record.latency_ms = 12.5

    payload = json.loads(JsonLogFormatter().format(record))

    assert payload["logger"] == "mage.http"
    assert payload["level"] == "INFO"
    assert payload["endpoint"] == "/document/ocr/general"
    assert payload["latency_ms"] == 12.5
    assert "code" not in payload


@pytest.fixture
def fresh_root_logger(monkeypatch: pytest.MonkeyPatch) -> Iterator[logging.Logger]:
    root_logger = logging.getLogger()
    original_level = root_logger.level
    original_handlers = [h for h in root_logger.handlers if type(h).__module__ != "_pytest.logging"]
    monkeypatch.setattr(mage_logging, "_LOGGING_CONFIGURED", False)
    yield root_logger
    for handler in list(root_logger.handlers):
        if isinstance(handler.formatter, JsonLogFormatter):
            root_logger.removeHandler(handler)
    for handler in original_handlers:
        if handler not in root_logger.handlers:
            root_logger.addHandler(handler)
    root_logger.setLevel(original_level)


def test_configure_logging_installs_json_handler_once(fresh_root_logger: logging.Logger) -> None:
    configure_logging("DEBUG")
    configure_logging("ERROR")

    assert len(fresh_root_logger.handlers) == 1
    assert isinstance(fresh_root_logger.handlers[0].formatter, JsonLogFormatter)
    assert fresh_root_logger.level == logging.DEBUG


def test_configure_logging_invalid_level_falls_back_to_info(
    fresh_root_logger: logging.Logger, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level(logging.WARNING, logger="mage.logging")

    configure_logging("bogus")

    assert fresh_root_logger.level == logging.INFO
    fallback_logs = [
        r
        for r in caplog.records
        if getattr(r, "event_name", None) == "invalid_log_level_fallback"
    ]
    assert fallback_logs
    assert getattr(fallback_logs[-1], "configured_level", None) == "bogus"


def test_configure_logging_reads_level_from_settings(
    fresh_root_logger: logging.Logger, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("MAGE_LOG_LEVEL", "warning")

    configure_logging()

    assert fresh_root_logger.level == logging.WARNING
