"""Weighted keyword, phrase and context-clue scoring of every registered persona"""
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from src.core.models import PROJECT_TYPES, WeightedTerm
from src.core.registry import PersonaRegistry
from src.detection.normalizer import NormalizedText, normalize_term


def _term_pattern(term: str) -> Optional[re.Pattern]:
    normalized = normalize_term(term)
    if not normalized:
        return None
    return re.compile(r"\b" + re.escape(normalized) + r"\b")


@dataclass(frozen=True)
class _CompiledTerm:
    term: str
    weight: float
    pattern: re.Pattern


def _compile_terms(terms: Tuple[WeightedTerm, ...]) -> Tuple[_CompiledTerm, ...]:
    compiled = []
    for entry in terms:
        pattern = _term_pattern(entry.term)
        if pattern is not None:
            compiled.append(_CompiledTerm(term=entry.term, weight=entry.weight, pattern=pattern))
    return tuple(compiled)


@dataclass(frozen=True)
class RuleClassification:
    """Raw per-persona scores plus the project types signalled by context clues"""
    scores: Dict[str, float] = field(default_factory=dict)
    context_types: Tuple[str, ...] = ()

    @property
    def max_score(self) -> float:
        return max(self.scores.values(), default=0.0)

    def leaders(self) -> List[str]:
        """Personas sharing the maximum score, in registry order"""
        top = self.max_score
        return [name for name, score in self.scores.items() if score == top]


class RuleBasedClassifier:
    """
    Scores each persona against normalized text

    score = sum of matched keyword weights
          + sum of phrase weight x occurrence count
          + the persona's confidence boost when a context clue of its project type is present

    Scores stay raw so that personas with richer vocabularies can outscore
    sparser ones when more of their terms appear

    Attributes:
        registry: PersonaRegistry the patterns are compiled from
    """

    def __init__(self, registry: PersonaRegistry) -> None:
        self.registry = registry
        self._keywords = {
            persona.name: _compile_terms(persona.patterns.keywords)
            for persona in registry.personas
        }
        self._phrases = {
            persona.name: _compile_terms(persona.patterns.phrases)
            for persona in registry.personas
        }
        self._type_clues = {}
        for project_type in PROJECT_TYPES:
            patterns = [_term_pattern(clue) for clue in registry.type_clues(project_type)]
            self._type_clues[project_type] = tuple(p for p in patterns if p is not None)

    def detect_context_types(self, normalized: NormalizedText) -> Tuple[str, ...]:
        """Project types with at least one context clue present in the text"""
        return tuple(
            project_type
            for project_type in PROJECT_TYPES
            if any(pattern.search(normalized.text) for pattern in self._type_clues[project_type])
        )

    def classify(
        self,
        normalized: NormalizedText,
        type_hint: Optional[str] = None,
    ) -> RuleClassification:
        """
        Score every registered persona

        Args:
            normalized: Output of the text normalizer
            type_hint: Optional caller-declared project type, used for tie-breaking only

        Returns:
            RuleClassification with scores in registry order
        """
        if normalized.is_empty:
            scores = {name: 0.0 for name in self.registry.names()}
            return RuleClassification(scores=scores, context_types=(type_hint,) if type_hint else ())

        text = normalized.text
        detected = self.detect_context_types(normalized)

        scores: Dict[str, float] = {}
        for persona in self.registry.personas:
            score = sum(k.weight for k in self._keywords[persona.name] if k.pattern.search(text))
            score += sum(p.weight * len(p.pattern.findall(text)) for p in self._phrases[persona.name])
            if persona.type in detected:
                score += persona.confidence_boost
            scores[persona.name] = round(score, 4)

        context_types = detected
        if type_hint and type_hint not in context_types:
            context_types = context_types + (type_hint,)
        return RuleClassification(scores=scores, context_types=context_types)
