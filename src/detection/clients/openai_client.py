"""External persona classifier backed by the OpenAI Chat Completions API"""
import json
import re
from typing import Optional

from openai import OpenAI

from config import logger
from src.core.exceptions import ExternalClassifierUnavailable
from src.core.models import ExternalPrediction
from src.core.registry import PersonaRegistry

_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)

SYSTEM_PROMPT = (
    "You are an expert customer persona analyst for smart home technology. "
    "Analyze customer communication to identify their specific persona type with high accuracy."
)


def build_prompt(text: str, registry: PersonaRegistry) -> str:
    persona_lines = []
    for persona in registry.personas:
        focus = ", ".join(term.term for term in persona.patterns.keywords[:5])
        persona_lines.append(f"- {persona.name} ({persona.type}): Focus areas: {focus or 'standard persona'}")
    personas = "\n".join(persona_lines)
    return (
        "Analyze the following customer communication and identify the most appropriate persona:\n\n"
        f"CUSTOMER INPUT:\n\"{text}\"\n\n"
        f"AVAILABLE PERSONAS:\n{personas}\n\n"
        "Please respond in this exact JSON format:\n"
        '{"persona": "detected_persona_name", "confidence": 0.85, '
        '"reasoning": "Brief explanation of why this persona was selected"}'
    )


def parse_prediction(content: Optional[str]) -> ExternalPrediction:
    """
    Pull the JSON object out of a chat reply

    Raises:
        ExternalClassifierUnavailable: If the reply holds no usable JSON object
    """
    match = _JSON_OBJECT.search(content or "")
    if match is None:
        raise ExternalClassifierUnavailable(message="No JSON found in classifier response")
    try:
        payload = json.loads(match.group(0))
        return ExternalPrediction(
            persona=str(payload["persona"]),
            confidence=float(payload["confidence"]),
            reasoning=payload.get("reasoning"),
        )
    except (ValueError, KeyError, TypeError) as e:
        raise ExternalClassifierUnavailable(message=f"Malformed classifier response: {e}") from e


class OpenAIPersonaClassifier:
    """Asks a chat model to name the persona and returns its JSON answer"""

    def __init__(
        self,
        registry: PersonaRegistry,
        api_key: Optional[str] = None,
        model: str = "gpt-4o-mini",
        client: Optional[OpenAI] = None,
    ) -> None:
        if client is None and not api_key:
            raise ExternalClassifierUnavailable(message="OpenAI API key is not configured")
        self.registry = registry
        self.model = model
        self.client = client or OpenAI(api_key=api_key)
        logger.info(f"OpenAI persona classifier ready with model {self.model}")

    def classify(self, text: str, timeout: float) -> ExternalPrediction:
        try:
            resp = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": build_prompt(text, self.registry)},
                ],
                temperature=0.1,
                max_tokens=500,
                timeout=timeout,
            )
        except Exception as e:
            raise ExternalClassifierUnavailable(message=f"OpenAI request failed: {e!r}") from e
        return parse_prediction(resp.choices[0].message.content)
