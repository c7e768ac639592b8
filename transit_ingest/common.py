from __future__ import annotations

import json
import logging
import sys
import uuid
from datetime import datetime
from typing import Any, Dict, Optional

RUN_ID = uuid.uuid4().hex

_LEVELS: Dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


class PrintLogger:
    """Structured logger that writes one JSON object per event.

    Events are named by a short snake_case message and carry keyword fields,
    e.g. ``logger.info("gtfsplus_table_validated", table="routes", issues=3)``.
    """

    def __init__(self, job_name: str, file_path: Optional[str] = None, level: int = logging.INFO) -> None:
        self.job_name = job_name
        self._logger = logging.getLogger(f"transit_ingest.{job_name}")
        self._logger.setLevel(level)
        if not self._logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(logging.Formatter("%(message)s"))
            self._logger.addHandler(handler)
        if file_path:
            file_handler = logging.FileHandler(file_path, encoding="utf-8")
            file_handler.setFormatter(logging.Formatter("%(message)s"))
            self._logger.addHandler(file_handler)

    def log(self, level: str, msg: str, **fields: Any) -> None:
        level_name = str(level).upper()
        payload: Dict[str, Any] = {
            "ts": datetime.now().astimezone().isoformat(timespec="seconds"),
            "level": "WARN" if level_name == "WARNING" else level_name,
            "job": self.job_name,
            "run_id": RUN_ID,
            "msg": msg,
        }
        payload.update({key: value for key, value in fields.items() if value is not None})
        self._logger.log(_LEVELS.get(level_name, logging.INFO), json.dumps(payload, default=str))

    def debug(self, msg: str, **fields: Any) -> None:
        self.log("DEBUG", msg, **fields)

    def info(self, msg: str, **fields: Any) -> None:
        self.log("INFO", msg, **fields)

    def warn(self, msg: str, **fields: Any) -> None:
        self.log("WARN", msg, **fields)

    warning = warn

    def error(self, msg: str, **fields: Any) -> None:
        self.log("ERROR", msg, **fields)


__all__ = ["PrintLogger", "RUN_ID"]
