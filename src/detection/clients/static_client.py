from src.core.models import ExternalPrediction


class StaticPersonaClassifier:
    """Fixed answer for local development and tests without model calls"""

    def __init__(self, persona: str, confidence: float = 0.5) -> None:
        self.persona = persona
        self.confidence = confidence

    def classify(self, text: str, timeout: float) -> ExternalPrediction:
        return ExternalPrediction(
            persona=self.persona,
            confidence=self.confidence,
            reasoning="static classifier",
        )
