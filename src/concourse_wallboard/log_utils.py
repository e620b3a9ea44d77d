import logging


class CallerFormatter(logging.Formatter):
    """
    Formatter that shows:
    - level
    - time
    - file and line number
    - function
    - message
    """

    default_format = (
        "[%(levelname)s] %(asctime)s "
        "%(filename)s:%(lineno)d "
        "%(funcName)s : "
        "%(message)s"
    )

    def __init__(self, fmt: str | None = None, datefmt: str | None = None):
        if fmt is None:
            fmt = self.default_format
        super().__init__(fmt=fmt, datefmt=datefmt, style="%")


def init_logging(level: str = "INFO") -> None:
    """Initialize logging configuration for the wallboard."""

    root_logger = logging.getLogger()
    root_logger.setLevel(level.upper())
    for handler in list(root_logger.handlers):
        if isinstance(handler.formatter, CallerFormatter):
            root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level.upper())
    console_handler.setFormatter(CallerFormatter())
    root_logger.addHandler(console_handler)

    # httpx logs every request at INFO; the client logs its own at DEBUG.
    logging.getLogger("httpx").setLevel(logging.WARNING)
