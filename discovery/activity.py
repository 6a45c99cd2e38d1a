"""On-screen activity stream for the dashboard, mirrored into the application log."""

from collections import deque
from datetime import datetime

from loguru import logger

from discovery.models import AgentLog, LogType

_LOG_LEVELS = {
    "info": "INFO",
    "success": "SUCCESS",
    "warning": "WARNING",
    "error": "ERROR",
}


class ActivityLog:
    """Bounded stream of AgentLog entries, newest first."""

    def __init__(self, limit: int = 50):
        self.limit = limit
        self._entries: deque[AgentLog] = deque(maxlen=limit)

    def __len__(self) -> int:
        return len(self._entries)

    def add(self, message: str, type: LogType = "info") -> AgentLog:
        entry = AgentLog(
            timestamp=datetime.now().strftime("%H:%M:%S"),
            message=message,
            type=type,
        )
        self._entries.appendleft(entry)
        logger.bind(activity=True).log(_LOG_LEVELS.get(type, "INFO"), message)
        return entry

    def entries(self) -> list[AgentLog]:
        return list(self._entries)

    def clear(self) -> None:
        self._entries.clear()
