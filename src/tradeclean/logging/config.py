import logging

_SHORT_LEVELS = {
    "DEBUG": "DBG",
    "INFO": "INF",
    "WARNING": "WRN",
    "ERROR": "ERR",
    "CRITICAL": "CRT",
}


class ProfessionalFormatter(logging.Formatter):
    def __init__(self):
        super().__init__(
            fmt="%(asctime)s | %(shortlevel)-3s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record) -> str:
        record.shortlevel = _SHORT_LEVELS.get(record.levelname, "???")
        return super().format(record)


def verbosity_to_level(verbose: int, quiet: bool = False) -> int:
    """Map -v/-q command line flags to a logging level (INFO by default)."""
    if quiet:
        return logging.WARNING
    return logging.DEBUG if verbose > 0 else logging.INFO


def configure_logging(level=logging.INFO) -> logging.Logger:
    """Install the run formatter on the root logger and return it.

    Calling this more than once only adjusts the level; the handler is added
    a single time so repeated runs in one process do not double-log.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    if not root_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(ProfessionalFormatter())
        root_logger.addHandler(handler)
    return root_logger
