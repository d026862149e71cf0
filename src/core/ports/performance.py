"""Ports (interface) for the detection performance sink"""
from typing import Protocol

from src.core.models import DetectionOutcome

class IPerformanceStore(Protocol):
    """Append-only sink for accuracy tracker records"""

    def append(self, outcome: DetectionOutcome) -> None:
        ...
