# pos_bridge/services/sync_log.py
"""
Append-only log of every exchange with the POS.

Every line is timestamped to the microsecond and tagged with the direction of
the flow it belongs to:

    [2024-05-02 10:14:03.512345] #outgoing Requesting {POST} https://.../Customer/ with params:
    [2024-05-02 10:14:03.804112] #outgoing Response OK!
    [2024-05-02 10:15:11.000931] #incoming Simple update of product: Basmati with price per kilo: 4.2

The log is opened once (application startup or CLI command), flushed after
every entry and closed on shutdown.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from pos_bridge.core.enums import ResponseOutcome, SyncDirection

logger = logging.getLogger(__name__)


@dataclass
class SyncAttempt:
    """Audit record of one request sent to the POS"""
    method: str
    endpoint: str
    direction: SyncDirection = SyncDirection.OUTGOING
    request_body: Optional[Dict[str, Any]] = None
    outcome: Optional[ResponseOutcome] = None
    status_code: Optional[int] = None
    response_body: Any = None
    error: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def marker(self) -> str:
        if self.outcome == ResponseOutcome.TRANSPORT_FAILED:
            return f"Request failed: {self.error}"
        if self.status_code in (200, 201):
            return "Response OK!"
        return f"Response ERR: {self.status_code}!"


class MicrosecondFormatter(logging.Formatter):
    def formatTime(self, record, datefmt=None):
        return datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S.%f")


class SyncLog:
    LINE_FORMAT = "[%(asctime)s] %(message)s"

    def __init__(self, path: str):
        self.path = Path(path)
        # Detached logger: sync lines go to the sync log file only
        self._logger = logging.Logger("pos_bridge.sync_log", level=logging.INFO)
        self._handler: Optional[logging.FileHandler] = None

    @property
    def is_open(self) -> bool:
        return self._handler is not None

    def open(self) -> "SyncLog":
        if self._handler is None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            handler = logging.FileHandler(self.path, mode="a", encoding="utf-8")
            handler.setFormatter(MicrosecondFormatter(self.LINE_FORMAT))
            self._logger.addHandler(handler)
            self._handler = handler
            logger.info(f"Sync log opened at {self.path}")
        return self

    def close(self) -> None:
        if self._handler is not None:
            self._logger.removeHandler(self._handler)
            self._handler.close()
            self._handler = None
            logger.info(f"Sync log closed at {self.path}")

    def __enter__(self):
        return self.open()

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def write(self, line: str, direction: SyncDirection = SyncDirection.OUTGOING) -> None:
        if self._handler is None:
            self.open()
        self._logger.info(f"{direction.tag} {line}")

    def outgoing(self, line: str) -> None:
        self.write(line, SyncDirection.OUTGOING)

    def incoming(self, line: str) -> None:
        self.write(line, SyncDirection.INCOMING)

    def record(self, attempt: SyncAttempt) -> None:
        """Write the one-line outcome marker of a finished attempt"""
        self.write(attempt.marker, attempt.direction)
