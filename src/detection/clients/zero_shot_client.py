"""Local external persona classifier using a Hugging Face zero-shot pipeline"""
from config import logger
from src.core.exceptions import ExternalClassifierUnavailable, ModelNotLoadedError
from src.core.models import ExternalPrediction
from src.core.registry import PersonaRegistry


class ZeroShotPersonaClassifier:
    """
    Scores the text against every persona display name with an NLI model

    The label with the highest entailment probability becomes the prediction
    """

    def __init__(self, registry: PersonaRegistry, model_name: str) -> None:
        self.registry = registry
        self.model_name = model_name
        self.labels = {persona.display_name: persona.name for persona in registry.personas}
        logger.info(f"Loading model: {self.model_name}")

        try:
            import torch
            from transformers import pipeline

            self.pipeline = pipeline(
                "zero-shot-classification",
                model=self.model_name,
                device=0 if torch.cuda.is_available() else -1,
            )
        except Exception as e:
            logger.exception("Failed to load model")
            raise ModelNotLoadedError(
                message=f"Failed to load zero-shot model '{self.model_name}'"
            ) from e
        logger.info("Zero-shot model loaded")

    def classify(self, text: str, timeout: float) -> ExternalPrediction:
        # Local inference cannot be interrupted; the adapter enforces the timeout
        try:
            output = self.pipeline(text, candidate_labels=list(self.labels))
        except Exception as e:
            raise ExternalClassifierUnavailable(message=f"Zero-shot inference failed: {e!r}") from e
        label, score = output["labels"][0], output["scores"][0]
        return ExternalPrediction(
            persona=self.labels[label],
            confidence=float(score),
            reasoning=f"zero-shot label '{label}'",
        )
