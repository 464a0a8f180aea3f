"""Step announcements with timing."""
import logging
from collections.abc import Callable
from typing import Any, Optional

from ..core.safety import PerformanceMonitor

logger = logging.getLogger(__name__)


class Announcer:
    """Wraps each bootstrap step with start and completion log lines."""

    def __init__(self, monitor: Optional[PerformanceMonitor] = None):
        self.monitor = monitor or PerformanceMonitor()
        self.completed: list[str] = []

    def announced(self, title: str, action: Optional[Callable[[], Any]] = None) -> Any:
        """Run ``action`` between an announcement and a timing line.

        Args:
            title: Human-readable step name
            action: Zero-argument callable; None only announces

        Returns:
            Whatever the action returned

        Raises:
            Exception: Any failure of the action, after logging it
        """
        logger.info("-" * (len(title) + 2))
        logger.info(f"> {title}")

        result = None
        try:
            with self.monitor.measure_operation(title):
                if action is not None:
                    result = action()
        except Exception as e:
            logger.error(f"✘ {title} failed: {e}")
            raise

        elapsed_ms = int(self.monitor.get_stats(title)["last_time"] * 1000)
        logger.info(f"✔ {title} done ({elapsed_ms}ms)")
        self.completed.append(title)
        return result
