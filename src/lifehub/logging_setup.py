import logging
import re

from .config import SETTINGS

_BEARER_RE = re.compile(r"(Bearer\s+)[A-Za-z0-9._~+/=-]+", re.IGNORECASE)
_TOKEN_QUERY_RE = re.compile(r"((?:token|key|apikey)=)[^&\s]+", re.IGNORECASE)


class SensitiveDataFilter(logging.Filter):
    """
    Logging filter that redacts credentials from log records.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = self._redact(record.msg)
        if record.args:
            if isinstance(record.args, dict):
                record.args = {k: self._redact_value(v) for k, v in record.args.items()}
            else:
                record.args = tuple(self._redact_value(a) for a in record.args)
        return True

    def _redact_value(self, value):
        if isinstance(value, str):
            return self._redact(value)
        return value

    @staticmethod
    def _redact(text: str) -> str:
        text = _BEARER_RE.sub(r"\1<REDACTED>", text)
        text = _TOKEN_QUERY_RE.sub(r"\1<REDACTED>", text)
        token = SETTINGS.REPLICATION_TOKEN
        if token:
            text = text.replace(token, "<REDACTED>")
        return text


def setup_logging(level: int | str | None = None) -> None:
    """
    Set up root logger with a stream handler and credential redaction.
    """
    root = logging.getLogger()
    if root.handlers:
        return  # already configured
    root.setLevel(level if level is not None else SETTINGS.LOG_LEVEL.upper())
    fmt = logging.Formatter("[%(asctime)s] %(levelname)s %(name)s: %(message)s")
    ch = logging.StreamHandler()
    ch.setFormatter(fmt)
    ch.addFilter(SensitiveDataFilter())
    root.addHandler(ch)
