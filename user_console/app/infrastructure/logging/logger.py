import json
import logging
from collections.abc import Iterable
from datetime import datetime, timezone

ROOT_LOGGER = "user_console"


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger
    logger.setLevel(logging.INFO)
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    return logger


def configure_logging(level: str = "INFO") -> logging.Logger:
    logger = get_logger(ROOT_LOGGER)
    logger.setLevel(level.upper())
    return logger


def log_action(
    logger: logging.Logger,
    module: str,
    action: str,
    target_ids: Iterable[int] | None,
    outcome: str,
    error_code: str | None = None,
) -> None:
    level = logging.INFO if error_code is None else logging.WARNING
    logger.log(
        level,
        json.dumps(
            {
                "ts": datetime.now(timezone.utc).isoformat(),
                "level": logging.getLevelName(level),
                "module": module,
                "action": action,
                "target_ids": sorted(target_ids or ()),
                "outcome": outcome,
                "error_code": error_code,
            }
        ),
    )
