"""
Workdeck Planner Logging — Structured JSON file logs next to stdlib logging.

Implements:
- FileLogger: per-category log files with daily rotation
  ({directory}/{category}/{YYYY-MM-DD}.jsonl)
- Log entry builders for API calls, dashboard loads and task commands
- A module-level FileLogger singleton (init_logging / get_file_logger)

Human-readable messages still go through ``logging.getLogger(...)``; the
JSONL files are for later inspection (``FileLogger.query``).
"""

from __future__ import annotations

import json
import logging
import threading
from collections import defaultdict
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger("workdeck_planner.engine.logging")

LOG_CATEGORIES = ("api_calls", "loads", "commands")


class LogEntry:
    """A structured log entry destined for a specific category file."""

    __slots__ = ("category", "data")

    def __init__(self, category: str, data: Dict[str, Any]):
        self.category = category
        self.data = data

    def to_json(self) -> str:
        return json.dumps(self.data, default=str, separators=(",", ":"))


class FileLogger:
    """
    Writes structured JSON log entries to per-category files.

    Thread-safe — uses a lock per file path.
    """

    def __init__(self, log_dir: str = ".workdeck/logs"):
        self._log_dir = Path(log_dir)
        self._file_locks: Dict[str, threading.Lock] = defaultdict(threading.Lock)
        for cat in LOG_CATEGORIES:
            (self._log_dir / cat).mkdir(parents=True, exist_ok=True)

    def write(self, entry: LogEntry) -> None:
        """Append a single entry to today's file for its category."""
        if entry.category not in LOG_CATEGORIES:
            raise ValueError(f"Unknown log category: {entry.category}")
        file_path = self._resolve_path(entry.category)
        with self._file_locks[str(file_path)]:
            with open(file_path, "a", encoding="utf-8") as f:
                f.write(entry.to_json())
                f.write("\n")

    def _resolve_path(self, category: str, day: Optional[date] = None) -> Path:
        day = day or date.today()
        return self._log_dir / category / f"{day.isoformat()}.jsonl"

    @property
    def log_dir(self) -> Path:
        return self._log_dir

    def query(
        self,
        category: str,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        filters: Optional[Dict[str, Any]] = None,
        limit: int = 500,
    ) -> List[Dict[str, Any]]:
        """
        Read entries back from the JSONL files of a category.

        Args:
            category: One of LOG_CATEGORIES.
            start_date: Earliest day to include (defaults to 7 days ago).
            end_date: Latest day to include (defaults to today).
            filters: Exact-match filters on top-level keys.
            limit: Max number of entries to return.

        Returns:
            Parsed entries, oldest first.
        """
        end_date = end_date or date.today()
        start_date = start_date or end_date - timedelta(days=7)

        results: List[Dict[str, Any]] = []
        current = start_date
        while current <= end_date and len(results) < limit:
            path = self._resolve_path(category, current)
            if path.exists():
                results.extend(self._read_jsonl(path, filters, limit - len(results)))
            current += timedelta(days=1)
        return results

    @staticmethod
    def _read_jsonl(
        path: Path,
        filters: Optional[Dict[str, Any]],
        remaining: int,
    ) -> List[Dict[str, Any]]:
        entries: List[Dict[str, Any]] = []
        try:
            with open(path, "r", encoding="utf-8") as f:
                for line in f:
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        data = json.loads(line)
                    except json.JSONDecodeError:
                        continue
                    if filters and not all(data.get(k) == v for k, v in filters.items()):
                        continue
                    entries.append(data)
                    if len(entries) >= remaining:
                        break
        except OSError as exc:
            logger.warning("Could not read log file %s: %s", path, exc)
        return entries


# ---------------------------------------------------------------------------
# Log Entry Builders
# ---------------------------------------------------------------------------

def _base_entry(event: str, level: str, **extra: Any) -> Dict[str, Any]:
    entry: Dict[str, Any] = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "level": level,
        "event": event,
    }
    entry.update(extra)
    return entry


def log_api_call(
    method: str,
    path: str,
    status_code: Optional[int],
    duration_ms: float,
    success: bool,
    error: Optional[str] = None,
) -> LogEntry:
    """Build an outbound Workdeck API call entry."""
    data = _base_entry(
        event="api_call",
        level="INFO" if success else "ERROR",
        method=method,
        path=path,
        status_code=status_code,
        duration_ms=round(duration_ms, 2),
        success=success,
    )
    if error:
        data["error"] = error
    return LogEntry("api_calls", data)


def log_dashboard_load(
    phase: str,
    duration_ms: float,
    users: int = 0,
    projects: int = 0,
    offices: int = 0,
    members: int = 0,
    current_user_id: Optional[str] = None,
    error: Optional[str] = None,
) -> LogEntry:
    """Build a dashboard load entry (ready or failed)."""
    data = _base_entry(
        event="dashboard_loaded" if error is None else "dashboard_load_failed",
        level="INFO" if error is None else "ERROR",
        phase=phase,
        duration_ms=round(duration_ms, 2),
        users=users,
        projects=projects,
        offices=offices,
        members=members,
    )
    if current_user_id:
        data["current_user_id"] = current_user_id
    if error:
        data["error"] = error
    return LogEntry("loads", data)


def log_task_created(
    user_id: str,
    project_id: str,
    name: str,
    planned_hours: str,
    success: bool,
    error: Optional[str] = None,
) -> LogEntry:
    """Build a create-task command entry."""
    data = _base_entry(
        event="task_created" if success else "task_create_failed",
        level="INFO" if success else "ERROR",
        user_id=user_id,
        project_id=project_id,
        name=name,
        planned_hours=planned_hours,
    )
    if error:
        data["error"] = error
    return LogEntry("commands", data)


# ---------------------------------------------------------------------------
# Global FileLogger Singleton
# ---------------------------------------------------------------------------

_file_logger: Optional[FileLogger] = None


def init_logging(log_dir: str = ".workdeck/logs", level: str = "INFO") -> FileLogger:
    """Configure the package logger level and create the global FileLogger."""
    global _file_logger
    logging.getLogger("workdeck_planner").setLevel(level)
    _file_logger = FileLogger(log_dir=log_dir)
    return _file_logger


def get_file_logger() -> Optional[FileLogger]:
    return _file_logger


def shutdown_logging() -> None:
    global _file_logger
    _file_logger = None
