import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

_configured = False


def setup_logging(level: int = logging.DEBUG) -> None:
    """
    Configure the root logger once per process. Later calls only adjust the level.
    """
    global _configured
    root = logging.getLogger()
    root.setLevel(level)

    if _configured:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)

    # statement logging is controlled by SQL_ECHO, not LOG_LEVEL
    logging.getLogger("sqlalchemy.engine").setLevel(max(level, logging.WARNING))
    _configured = True
