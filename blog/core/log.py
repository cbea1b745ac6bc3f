from logging import getLogger, StreamHandler, Formatter, Logger
from sys import stdout

from blog.core.config import settings


log: Logger = getLogger("blog")


def setup_logging(level: str = settings.LOG_LEVEL) -> Logger:
    # single handler even if main is re-imported
    if not log.handlers:
        handler = StreamHandler(stdout)
        handler.setFormatter(Formatter("[%(asctime)s] %(levelname)s %(name)s: %(message)s"))
        log.addHandler(handler)
    log.setLevel(level.upper())
    return log
