"""Timeout-bounded, failure-tolerant wrapper around a pluggable external classifier"""
import math
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from typing import Optional

from config import logger
from src.core.exceptions import ExternalClassifierUnavailable
from src.core.models import ExternalPrediction
from src.core.ports.classifier import IExternalClassifier
from src.core.registry import PersonaRegistry


@dataclass
class PendingPrediction:
    """External call in flight with the moment it must be answered by"""
    future: Future
    deadline: float


class ExternalClassifierAdapter:
    """
    Runs an external classifier on a worker thread so the caller can score
    rules meanwhile, and turns every failure into None

    Attributes:
        client: Any IExternalClassifier implementation
        registry: Used to reject predictions naming unknown personas
        timeout: Seconds allowed per call, measured from submission
        max_workers: Worker threads; a call that hangs past its deadline keeps
            its worker until the client returns
    """

    def __init__(
        self,
        client: IExternalClassifier,
        registry: PersonaRegistry,
        timeout: float = 3.0,
        max_workers: int = 4,
    ) -> None:
        self.client = client
        self.registry = registry
        self.timeout = timeout
        self.max_workers = max_workers
        self._in_flight = 0
        self._lock = threading.Lock()
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="external-classifier",
        )

    @property
    def name(self) -> str:
        return type(self.client).__name__

    @property
    def in_flight(self) -> int:
        with self._lock:
            return self._in_flight

    def _finished(self, _future: Optional[Future]) -> None:
        with self._lock:
            self._in_flight -= 1

    def submit(self, text: str) -> PendingPrediction:
        with self._lock:
            busy = self._in_flight
            self._in_flight += 1
        if busy >= self.max_workers:
            logger.warning(
                f"External classifier {self.name} pool saturated: {busy} calls in flight "
                f"for {self.max_workers} workers, this call will queue"
            )
        try:
            future = self._executor.submit(self.client.classify, text, self.timeout)
        except RuntimeError:
            self._finished(None)
            raise
        future.add_done_callback(self._finished)
        return PendingPrediction(future=future, deadline=time.monotonic() + self.timeout)

    def collect(self, pending: PendingPrediction) -> Optional[ExternalPrediction]:
        """
        Wait for the remaining time budget and validate the answer

        Returns:
            Clamped ExternalPrediction, or None on timeout, failure,
            an unknown persona or a non-numeric confidence
        """
        remaining = max(0.0, pending.deadline - time.monotonic())
        try:
            prediction = pending.future.result(timeout=remaining)
        except FutureTimeoutError:
            pending.future.cancel()
            logger.warning(f"External classifier {self.name} timed out after {self.timeout}s")
            return None
        except ExternalClassifierUnavailable as e:
            logger.warning(f"External classifier {self.name} unavailable: {e}")
            return None
        except Exception as e:
            logger.warning(f"External classifier {self.name} failed: {e!r}")
            return None
        return self._validate(prediction)

    def classify_external(self, text: str) -> Optional[ExternalPrediction]:
        return self.collect(self.submit(text))

    def _validate(self, prediction) -> Optional[ExternalPrediction]:
        if not isinstance(prediction, ExternalPrediction):
            logger.warning(f"External classifier {self.name} returned {type(prediction).__name__}")
            return None
        if not self.registry.has(prediction.persona):
            logger.warning(f"External classifier {self.name} named unknown persona '{prediction.persona}'")
            return None
        confidence = prediction.confidence
        if isinstance(confidence, bool) or not isinstance(confidence, (int, float)) or not math.isfinite(confidence):
            logger.warning(f"External classifier {self.name} returned non-numeric confidence {confidence!r}")
            return None
        return prediction.model_copy(update={"confidence": min(1.0, max(0.0, float(confidence)))})

    def shutdown(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)
