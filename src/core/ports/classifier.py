"""Ports (interface) for external persona classifiers"""
from typing import Protocol

from src.core.models import ExternalPrediction

class IExternalClassifier(Protocol):
    """Interface for a secondary, possibly remote, persona classifier"""

    def classify(self, text: str, timeout: float) -> ExternalPrediction:
        """
        Classify customer text into a persona

        Args:
            text (str): Combined customer text
            timeout (float): Seconds the call may take before it must give up

        Returns:
            ExternalPrediction: Persona name and confidence as reported by the classifier

        Raises:
            ExternalClassifierUnavailable: On transport, timeout or parse failure
        """
        ...
