"""Immutable persona registry loaded once at start-up"""
import json
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from pydantic import Field, ValidationError, model_validator

from src.core.exceptions import PersonaNotFoundError, RegistryLoadError
from src.core.models import EngineModel, PersonaConfig, TIERS


class PersonaRegistry(EngineModel):
    """
    Persona configs in declaration order plus the registry-level constants
    that keep classification and bundling deterministic

    Declaration order is significant: it breaks ties between personas with
    identical scores
    """
    personas: Tuple[PersonaConfig, ...] = Field(..., min_length=1)
    calibration_constant: float = Field(default=10.0, gt=0.0)
    external_margin: float = Field(default=0.15, ge=0.0, le=1.0)
    confidence_floor: float = Field(default=0.1, ge=0.0, le=1.0)
    default_persona: Optional[str] = "homeowner"
    default_confidence: float = Field(default=0.5, ge=0.0, le=1.0)
    budget_window: Tuple[float, float] = (0.8, 1.2)
    tier_target_factors: Dict[str, float] = Field(
        default_factory=lambda: {"good": 0.8, "better": 1.0, "best": 1.25}
    )
    exclusive_tag_groups: Tuple[str, ...] = ("hub",)
    category_hints: Dict[str, Tuple[str, ...]] = Field(default_factory=dict)
    reference_project_size: float = Field(default=2500.0, gt=0.0)
    large_project_threshold: float = Field(default=10000.0, gt=0.0)
    large_project_categories: Tuple[str, ...] = ("networking",)

    @model_validator(mode="after")
    def _consistent(self) -> "PersonaRegistry":
        names = [persona.name for persona in self.personas]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"duplicate persona names: {', '.join(duplicates)}")
        if self.default_persona is not None and self.default_persona not in names:
            raise ValueError(f"default persona '{self.default_persona}' is not registered")
        low, high = self.budget_window
        if not 0.0 <= low <= 1.0 <= high:
            raise ValueError(f"budget window {self.budget_window} must bracket 1.0")
        missing = [tier for tier in TIERS if tier not in self.tier_target_factors]
        if missing:
            raise ValueError(f"tier target factors missing for: {', '.join(missing)}")
        return self

    def names(self) -> List[str]:
        return [persona.name for persona in self.personas]

    def has(self, name: str) -> bool:
        return any(persona.name == name for persona in self.personas)

    def get(self, name: str) -> PersonaConfig:
        """
        Look up a persona by name

        Raises:
            PersonaNotFoundError: If the name is not registered
        """
        for persona in self.personas:
            if persona.name == name:
                return persona
        raise PersonaNotFoundError(
            message=f"Unknown persona: {name}. Available personas: {', '.join(self.names())}",
            persona=name,
        )

    def list(self, type: Optional[str] = None) -> List[PersonaConfig]:
        if type is None:
            return list(self.personas)
        return [persona for persona in self.personas if persona.type == type]

    def type_clues(self, type: str) -> Tuple[str, ...]:
        """Union of the context clues of every persona declaring this project type"""
        clues: List[str] = []
        for persona in self.list(type):
            for clue in persona.patterns.context_clues:
                if clue not in clues:
                    clues.append(clue)
        return tuple(clues)

    def known_categories(self) -> Tuple[str, ...]:
        categories: List[str] = []
        for persona in self.personas:
            for category in persona.required_categories:
                if category not in categories:
                    categories.append(category)
        for category in list(self.category_hints) + list(self.large_project_categories):
            if category not in categories:
                categories.append(category)
        return tuple(categories)

    def with_overrides(self, **overrides) -> "PersonaRegistry":
        """Return a copy with the given constants replaced; None values are ignored"""
        update = {key: value for key, value in overrides.items() if value is not None}
        if not update:
            return self
        return self.model_validate({**self.model_dump(), **update})


def load_registry(path: Union[str, Path]) -> PersonaRegistry:
    """
    Load and validate the persona registry from a JSON file

    Args:
        path: JSON file with a "personas" list and optional registry constants

    Returns:
        Validated, immutable PersonaRegistry

    Raises:
        RegistryLoadError: If the file is missing, not JSON, or fails validation
    """
    registry_path = Path(path)
    try:
        raw = json.loads(registry_path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise RegistryLoadError(message=f"Registry file not found: {registry_path}") from e
    except json.JSONDecodeError as e:
        raise RegistryLoadError(message=f"Registry file is not valid JSON: {registry_path}") from e

    try:
        return PersonaRegistry.model_validate(raw)
    except ValidationError as e:
        raise RegistryLoadError(
            message=f"Registry file failed validation: {registry_path}",
            errors=e.errors(include_url=False, include_context=False),
        ) from e


__all__ = ["PersonaRegistry", "load_registry"]
