"""
Root logging for the API process.
Everything goes to stdout; the platform's log drain picks it up. Loggers are named naturalpuff.<area>.
"""
import logging
import sys

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Third-party loggers that are too chatty at DEBUG
_QUIET = ("multipart", "python_multipart", "sqlalchemy.engine")


def setup_logging(level: int | str = logging.INFO, format_string: str = LOG_FORMAT) -> None:
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logging.basicConfig(level=level, format=format_string, stream=sys.stdout, force=True)
    for name in ("naturalpuff", "uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).setLevel(level)
    for name in _QUIET:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
