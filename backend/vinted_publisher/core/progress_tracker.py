"""
Simple in-memory progress tracker for background publish jobs.
Stores progress messages and the final outcome keyed by job_id.
"""
import threading
import time
from datetime import datetime
from typing import Any, Dict, List, Optional

from vinted_publisher.core.config import get_settings


class ProgressTracker:
    """Thread-safe progress message tracker"""

    def __init__(self, retention_seconds: float = 3600):
        self._progress: Dict[str, List[Dict[str, Any]]] = {}
        self._status: Dict[str, Dict[str, Any]] = {}  # job_id -> {status, result}
        self._finished_at: Dict[str, float] = {}
        self.retention_seconds = retention_seconds
        self._lock = threading.Lock()

    def start(self, job_id: str, message: str) -> None:
        """Register a new job in the processing state"""
        self.evict_finished()
        with self._lock:
            self._status[job_id] = {"status": "processing", "result": None}
        self.add_message(job_id, message, "info")

    def add_message(self, job_id: str, message: str, level: str = "info") -> None:
        """Add a progress message for a job"""
        with self._lock:
            self._progress.setdefault(job_id, []).append({
                "message": message,
                "level": level,  # info, warning, error, success
                "timestamp": datetime.utcnow().isoformat(),
            })

    def reporter(self, job_id: str):
        """Callback usable as a publisher progress hook for one job"""
        def report(message: str, level: str = "info") -> None:
            self.add_message(job_id, message, level)
        return report

    def finish(self, job_id: str, status: str, result: Optional[Dict[str, Any]] = None) -> None:
        """Record the terminal status (completed, failed, unknown) of a job"""
        with self._lock:
            self._status[job_id] = {"status": status, "result": result}
            self._finished_at[job_id] = time.monotonic()

    def get_progress(self, job_id: str) -> List[Dict[str, Any]]:
        """Get all progress messages for a job"""
        with self._lock:
            return list(self._progress.get(job_id, []))

    def get_latest_message(self, job_id: str) -> Optional[Dict[str, Any]]:
        """Get the latest progress message for a job"""
        with self._lock:
            messages = self._progress.get(job_id, [])
            return messages[-1] if messages else None

    def get_status(self, job_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            status = self._status.get(job_id)
            return dict(status) if status else None

    def clear(self, job_id: str) -> None:
        with self._lock:
            self._progress.pop(job_id, None)
            self._status.pop(job_id, None)
            self._finished_at.pop(job_id, None)

    def evict_finished(self) -> None:
        """Drop jobs that finished more than retention_seconds ago"""
        cutoff = time.monotonic() - self.retention_seconds
        with self._lock:
            expired = [job_id for job_id, at in self._finished_at.items() if at <= cutoff]
            for job_id in expired:
                self._progress.pop(job_id, None)
                self._status.pop(job_id, None)
                del self._finished_at[job_id]


# Global instance
progress_tracker = ProgressTracker(get_settings().progress_retention_seconds)
