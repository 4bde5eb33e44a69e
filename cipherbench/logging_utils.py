import json, logging, sys, time
from pathlib import Path
from typing import Any, Dict, Optional

from .config import CONFIG

_RESERVED = ("msg", "args", "exc_info", "exc_text", "stack_info", "stack_level", "created",
             "msecs", "relativeCreated", "levelno", "levelname", "pathname", "filename",
             "module", "lineno", "funcName", "thread", "threadName", "processName", "process",
             "taskName", "name")


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(record.created)),
            "level": record.levelname,
            "name": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        # Allow extra fields via record.__dict__ (filtered)
        for k, v in record.__dict__.items():
            if k not in _RESERVED:
                try:
                    json.dumps({k: v})
                    payload[k] = v
                except (TypeError, ValueError):
                    payload[k] = str(v)
        return json.dumps(payload)


def _configured_level() -> int:
    level = logging.getLevelName(str(CONFIG.get("LOG_LEVEL", "WARNING")).upper())
    return level if isinstance(level, int) else logging.WARNING


def get_logger(name: str = "cipherbench") -> logging.Logger:
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger
    logger.setLevel(_configured_level())
    h = logging.StreamHandler(sys.stdout)
    h.setFormatter(JsonFormatter())
    logger.addHandler(h)
    logger.propagate = False
    return logger


def configure_file_logger(path: str, logger: Optional[logging.Logger] = None) -> Path:
    """Mirror ``logger`` into a JSON-lines file; returns the resolved path."""
    logger = logger or get_logger()
    log_path = Path(path)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    for handler in logger.handlers:
        if isinstance(handler, logging.FileHandler) and Path(handler.baseFilename).resolve() == log_path.resolve():
            return log_path
    fh = logging.FileHandler(log_path, encoding="utf-8")
    fh.setFormatter(JsonFormatter())
    logger.addHandler(fh)
    return log_path


# Very small metrics hook (no deps)
class Counter:
    def __init__(self): self.value = 0
    def inc(self, n: int = 1): self.value += n


class Gauge:
    def __init__(self): self.value = 0
    def set(self, v: float): self.value = v


class Metrics:
    def __init__(self):
        self.counters = {}
        self.gauges = {}
    def counter(self, name: str) -> Counter:
        self.counters.setdefault(name, Counter()); return self.counters[name]
    def gauge(self, name: str) -> Gauge:
        self.gauges.setdefault(name, Gauge()); return self.gauges[name]
    def snapshot(self) -> Dict[str, Any]:
        return {
            "counters": {k: c.value for k, c in self.counters.items()},
            "gauges": {k: g.value for k, g in self.gauges.items()},
        }
    def reset(self) -> None:
        self.counters.clear(); self.gauges.clear()


METRICS = Metrics()
