"""File safety and timing helpers for configuration rewrites."""
import hashlib
import logging
import os
import tempfile
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Optional, Union

from filelock import FileLock

logger = logging.getLogger(__name__)

LOCK_DIR = Path(tempfile.gettempdir()) / "devenv_init-locks"


def lock_path_for(file_path: Union[str, Path], lock_dir: Path = LOCK_DIR) -> Path:
    """Lock file for ``file_path``, kept outside the config directory."""
    digest = hashlib.sha256(str(Path(file_path).resolve()).encode()).hexdigest()[:16]
    return lock_dir / f"{Path(file_path).name}.{digest}.lock"


class SafeFileOperation:
    """Context manager that serializes writers and replaces files atomically."""

    def __init__(
        self,
        file_path: Union[str, Path],
        timeout: int = 30,
        lock_dir: Path = LOCK_DIR,
    ):
        """Initialize safe file operation.

        Args:
            file_path: Path to the file to operate on
            timeout: Lock timeout in seconds
            lock_dir: Directory holding the lock file
        """
        self.file_path = Path(file_path)
        self.timeout = timeout
        self.lock_path = lock_path_for(self.file_path, Path(lock_dir))
        self.temp_path: Optional[Path] = None
        self.lock: Optional[FileLock] = None
        self._operation_log = []

    def __enter__(self):
        """Enter context manager."""
        self.lock_path.parent.mkdir(parents=True, exist_ok=True)
        self.lock = FileLock(self.lock_path, timeout=self.timeout)
        self.lock.acquire()
        logger.debug(f"Acquired lock for {self.file_path}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Exit context manager."""
        try:
            if exc_type is not None:
                logger.error(f"Operation on {self.file_path} failed: {exc_val}")

            if self.temp_path and self.temp_path.exists():
                logger.warning(f"Removing leftover temp file {self.temp_path}")
                os.remove(self.temp_path)

        finally:
            if self.lock:
                self.lock.release()
                logger.debug(f"Released lock for {self.file_path}")

    def _log_operation(self, operation: str, details: str):
        """Log operation for audit trail."""
        self._operation_log.append(
            {"timestamp": time.time(), "operation": operation, "details": details}
        )

    def get_temp_file(self) -> Path:
        """Get a temporary file in the same directory."""
        if self.temp_path is None:
            with tempfile.NamedTemporaryFile(
                dir=self.file_path.parent,
                prefix=f".{self.file_path.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                self.temp_path = Path(tmp.name)
            self._log_operation("temp_created", str(self.temp_path))

        return self.temp_path

    def atomic_replace(self, source: Union[str, Path]):
        """Atomically replace the target file with source."""
        source = Path(source)
        if not source.exists():
            raise FileNotFoundError(f"Source file not found: {source}")

        if self.file_path.exists():
            # Keep the original permission bits on the replacement.
            os.chmod(source, self.file_path.stat().st_mode & 0o7777)

        os.replace(source, self.file_path)
        logger.info(f"Atomically replaced {self.file_path}")
        self._log_operation("atomic_replace", f"{source} -> {self.file_path}")

    def get_operation_log(self) -> list[dict]:
        """Get operation log for debugging."""
        return self._operation_log.copy()


@contextmanager
def safe_edit_context(file_path: Union[str, Path], timeout: int = 30):
    """Context manager for safe file editing.

    Args:
        file_path: Path to file to edit
        timeout: Lock timeout in seconds

    Yields:
        SafeFileOperation instance
    """
    with SafeFileOperation(file_path, timeout) as safe_op:
        yield safe_op


class PerformanceMonitor:
    """Record how long named operations take."""

    def __init__(self):
        self.metrics = {}

    @contextmanager
    def measure_operation(self, operation_name: str):
        """Context manager to measure operation duration.

        Args:
            operation_name: Name of operation being measured
        """
        start_time = time.perf_counter()
        try:
            yield
        finally:
            duration = time.perf_counter() - start_time
            self._record_metric(operation_name, duration)

    def _record_metric(self, operation: str, duration: float):
        """Record performance metric."""
        if operation not in self.metrics:
            self.metrics[operation] = {
                "count": 0,
                "total_time": 0.0,
                "min_time": float("inf"),
                "max_time": 0.0,
                "last_time": 0.0,
            }

        metrics = self.metrics[operation]
        metrics["count"] += 1
        metrics["total_time"] += duration
        metrics["min_time"] = min(metrics["min_time"], duration)
        metrics["max_time"] = max(metrics["max_time"], duration)
        metrics["last_time"] = duration

    def get_stats(self, operation: str) -> dict:
        """Get statistics for an operation.

        Args:
            operation: Operation name

        Returns:
            Dictionary with performance statistics
        """
        if operation not in self.metrics:
            return {}

        metrics = self.metrics[operation]
        avg_time = metrics["total_time"] / metrics["count"]

        return {
            "count": metrics["count"],
            "total_time": metrics["total_time"],
            "average_time": avg_time,
            "min_time": metrics["min_time"],
            "max_time": metrics["max_time"],
            "last_time": metrics["last_time"],
        }
