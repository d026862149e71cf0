"""Sinks receiving every tracked detection outcome"""
import threading
from pathlib import Path
from typing import List, Union

from config import logger
from src.core.models import DetectionOutcome


class InMemoryPerformanceStore:
    """Keeps outcomes in process; used by tests and the UI"""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._outcomes: List[DetectionOutcome] = []

    def append(self, outcome: DetectionOutcome) -> None:
        with self._lock:
            self._outcomes.append(outcome)

    def all(self) -> List[DetectionOutcome]:
        with self._lock:
            return list(self._outcomes)


class JsonlPerformanceStore:
    """
    Appends one camelCase JSON object per outcome to a file

    Args:
        path: Target file; parent directories are created on first use
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        logger.info(f"Recording detection outcomes to {self.path}")

    def append(self, outcome: DetectionOutcome) -> None:
        line = outcome.model_dump_json(by_alias=True)
        with self._lock:
            with self.path.open("a", encoding="utf-8") as fh:
                fh.write(line + "\n")

    def read(self) -> List[DetectionOutcome]:
        if not self.path.exists():
            return []
        with self.path.open("r", encoding="utf-8") as fh:
            return [DetectionOutcome.model_validate_json(line) for line in fh if line.strip()]
