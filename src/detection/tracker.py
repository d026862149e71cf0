"""Accuracy tracking of detection results against ground truth"""
import itertools
import threading
from typing import List, Optional, Sequence

from src.core.models import DetectionOutcome, DetectionResult, TestSummary
from src.core.ports.performance import IPerformanceStore


class AccuracyTracker:
    """
    Append-only log of detection outcomes

    Appends take a short lock and receive a monotonic sequence number;
    readers get a copy of the log so they never block writers for long

    Attributes:
        store: Optional sink every outcome is forwarded to
    """

    def __init__(self, store: Optional[IPerformanceStore] = None) -> None:
        self.store = store
        self._lock = threading.Lock()
        self._sequence = itertools.count(1)
        self._log: List[DetectionOutcome] = []

    def _append(self, outcome: DetectionOutcome) -> DetectionOutcome:
        with self._lock:
            outcome = outcome.model_copy(update={"sequence": next(self._sequence)})
            self._log.append(outcome)
        if self.store is not None:
            self.store.append(outcome)
        return outcome

    def record(
        self,
        result: DetectionResult,
        expected: Optional[str] = None,
        name: Optional[str] = None,
        test_number: Optional[int] = None,
    ) -> DetectionOutcome:
        is_correct = None if expected is None else result.persona == expected
        return self._append(
            DetectionOutcome(
                test_number=test_number,
                name=name,
                expected=expected,
                detected=result.persona,
                confidence=result.confidence,
                method=result.method,
                project_type=result.project_type,
                is_correct=is_correct,
                accuracy=None if is_correct is None else float(is_correct),
            )
        )

    def record_failure(
        self,
        name: Optional[str],
        expected: Optional[str],
        error: str,
        test_number: Optional[int] = None,
    ) -> DetectionOutcome:
        return self._append(
            DetectionOutcome(
                test_number=test_number,
                name=name,
                expected=expected,
                error=error,
            )
        )

    def snapshot(self) -> List[DetectionOutcome]:
        with self._lock:
            return self._log[:]

    def __len__(self) -> int:
        with self._lock:
            return len(self._log)

    @staticmethod
    def summarize(results: Sequence[DetectionOutcome]) -> TestSummary:
        """
        Aggregate outcomes into a TestSummary

        Failed cases count towards failedTests only; accuracy is measured over
        successful cases that carry an expected persona
        """
        successful = [outcome for outcome in results if outcome.succeeded]
        labelled = [outcome for outcome in successful if outcome.expected is not None]
        correct = sum(1 for outcome in labelled if outcome.detected == outcome.expected)
        accuracy = round(correct / len(labelled) * 100, 2) if labelled else None
        return TestSummary(
            total_tests=len(results),
            successful_tests=len(successful),
            failed_tests=len(results) - len(successful),
            tests_with_expected=len(labelled),
            correct_predictions=correct,
            overall_accuracy=accuracy,
            results=tuple(results),
        )
