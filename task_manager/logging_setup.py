import logging
import sys
from pathlib import Path


_HANDLER_MARK = "_task_manager_handler"


def setup_logging(level: str = "info", log_file: str = "") -> None:
    """
    Configure root logging: a stderr handler and, when `log_file` is set, a
    file handler. Calling it again replaces the handlers it installed before.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    for h in list(root.handlers):
        if getattr(h, _HANDLER_MARK, False):
            root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        path = Path(log_file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(str(path), encoding="utf-8"))

    for h in handlers:
        h.setFormatter(fmt)
        setattr(h, _HANDLER_MARK, True)
        root.addHandler(h)
