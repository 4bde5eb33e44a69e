import json
import logging

from cipherbench.config import CONFIG
from cipherbench.logging_utils import JsonFormatter, Metrics, configure_file_logger, get_logger


def _record(msg="hello", **extra):
    record = logging.LogRecord("cipherbench.test", logging.WARNING, __file__, 10, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_extra_fields():
    line = JsonFormatter().format(_record(variant="aes-gcm:256", iteration=3))
    payload = json.loads(line)
    assert payload["level"] == "WARNING"
    assert payload["msg"] == "hello"
    assert payload["variant"] == "aes-gcm:256"
    assert payload["iteration"] == 3
    assert "lineno" not in payload


def test_json_formatter_stringifies_unserialisable_extra():
    payload = json.loads(JsonFormatter().format(_record(raw=b"\x00\x01")))
    assert payload["raw"] == str(b"\x00\x01")


def test_get_logger_is_idempotent():
    first = get_logger("cipherbench.idempotent")
    second = get_logger("cipherbench.idempotent")
    assert first is second
    assert len(first.handlers) == 1
    assert first.propagate is False


def test_configure_file_logger(tmp_path):
    logger = get_logger("cipherbench.filelog")
    path = configure_file_logger(str(tmp_path / "logs" / "run.jsonl"), logger)
    configure_file_logger(str(path), logger)
    try:
        logger.warning("Suite done", extra={"passed": 8})
        file_handlers = [h for h in logger.handlers if isinstance(h, logging.FileHandler)]
        assert len(file_handlers) == 1
        file_handlers[0].flush()
        entry = json.loads(path.read_text().splitlines()[-1])
        assert entry["msg"] == "Suite done"
        assert entry["passed"] == 8
    finally:
        for handler in [h for h in logger.handlers if isinstance(h, logging.FileHandler)]:
            logger.removeHandler(handler)
            handler.close()


def test_metrics_snapshot_and_reset():
    metrics = Metrics()
    metrics.counter("iterations").inc(5)
    metrics.counter("iterations").inc()
    metrics.gauge("payload_size").set(1024)
    assert metrics.snapshot() == {"counters": {"iterations": 6}, "gauges": {"payload_size": 1024}}
    metrics.reset()
    assert metrics.snapshot() == {"counters": {}, "gauges": {}}


def test_get_logger_applies_configured_level(monkeypatch):
    monkeypatch.setitem(CONFIG, "LOG_LEVEL", "WARNING")
    assert get_logger("cipherbench.level.warning").level == logging.WARNING

    monkeypatch.setitem(CONFIG, "LOG_LEVEL", "debug")
    assert get_logger("cipherbench.level.debug").level == logging.DEBUG


def test_library_logger_stays_quiet_below_warning(monkeypatch):
    monkeypatch.setitem(CONFIG, "LOG_LEVEL", "WARNING")
    logger = get_logger("cipherbench.level.quiet")
    assert not logger.isEnabledFor(logging.INFO)
    assert logger.isEnabledFor(logging.WARNING)


def test_get_logger_falls_back_on_unknown_level(monkeypatch):
    monkeypatch.setitem(CONFIG, "LOG_LEVEL", "LOUD")
    assert get_logger("cipherbench.level.unknown").level == logging.WARNING
