import logging
import os


_old_factory = logging.getLogRecordFactory()

_LEVEL_COLORS = {
    "DEBUG": "\x1b[36m",
    "INFO": "\x1b[32m",
    "WARNING": "\x1b[33m",
    "ERROR": "\x1b[31m",
    "CRITICAL": "\x1b[1;31m",
}


def record_factory(*args, **kwargs):
    record = _old_factory(*args, **kwargs)
    color = _LEVEL_COLORS.get(record.levelname)
    record.levelname_colored = f"{color}{record.levelname}\x1b[0m" if color else record.levelname
    return record


logging.setLogRecordFactory(record_factory)
logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "WARNING").upper(),
    format="%(levelname_colored)s: %(name)s: %(message)s",
)
log = logging.getLogger("slpstream")
