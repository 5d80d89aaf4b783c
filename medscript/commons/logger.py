import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from loguru import logger


def setup_logging(root: Optional[str] = None, level: str = "INFO"):
    """Console sink on stderr (stdout carries the CLI report) plus an optional
    dated file sink under ``root``."""
    logger.remove()
    if root:
        logdir = Path(root) / datetime.now().strftime("%Y/%m/%d")
        logdir.mkdir(parents=True, exist_ok=True)
        logfile = logdir / "medscript.log"
        logger.add(
            str(logfile),
            rotation="00:00",
            retention="14 days",
            level=level,
            backtrace=True,
            diagnose=True,
        )
    logger.add(lambda m: print(m, end="", file=sys.stderr), level=level)
    return logger
