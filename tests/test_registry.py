"""Tests for persona registry loading and validation."""

import json

import pytest
from pydantic import ValidationError

from conftest import make_persona, make_personas, make_registry
from config import CONFIG_DIR
from src.core import PersonaRegistry, RegistryLoadError, load_registry


@pytest.fixture
def shipped_registry():
    return load_registry(CONFIG_DIR / "personas.json")


class TestShippedRegistry:
    """Test the registry shipped in config/personas.json."""

    def test_loads_all_personas_in_order(self, shipped_registry):
        assert shipped_registry.names() == [
            "homeowner",
            "interior-designer",
            "builder",
            "architect",
            "cto-cio",
            "business-owner",
            "c-suite",
            "office-manager",
            "facilities-manager",
        ]
        assert len(shipped_registry.list("residential")) == 4
        assert len(shipped_registry.list("commercial")) == 5

    def test_key_features_json_string_is_parsed(self, shipped_registry):
        assert shipped_registry.get("homeowner").key_features == (
            "easy-to-use",
            "family-friendly",
            "energy-efficient",
            "security-focused",
        )

    def test_key_features_comma_string_is_split(self, shipped_registry):
        assert shipped_registry.get("builder").key_features[0] == "cost-effective"
        assert len(shipped_registry.get("builder").key_features) == 4

    def test_bare_strings_get_default_weights(self, shipped_registry):
        patterns = shipped_registry.get("homeowner").patterns

        assert patterns.keywords[0].weight == 1.0
        assert patterns.phrases[0].weight == 2.0

    def test_constants(self, shipped_registry):
        assert shipped_registry.calibration_constant == 10.0
        assert shipped_registry.external_margin == 0.15
        assert shipped_registry.default_persona == "homeowner"
        assert shipped_registry.budget_window == (0.8, 1.2)


class TestRegistryValidation:
    """Test PersonaRegistry validation rules."""

    def test_duplicate_names_rejected(self):
        personas = make_personas()
        with pytest.raises(ValidationError, match="duplicate persona names"):
            PersonaRegistry(personas=personas + (personas[0],))

    def test_unknown_default_rejected(self):
        with pytest.raises(ValidationError, match="default persona"):
            make_registry(default_persona="astronaut")

    def test_min_items_above_max_items_rejected(self):
        with pytest.raises(ValidationError):
            make_persona(min_items=5, max_items=3)

    def test_invalid_key_features_json_rejected(self):
        with pytest.raises(ValidationError):
            make_persona(key_features="[not json")

    def test_budget_range_must_be_ordered(self):
        with pytest.raises(ValidationError):
            make_persona(budget_range={"min": 10, "max": 5})

    def test_type_clues_union(self, registry):
        assert registry.type_clues("residential") == ("residential", "house", "designer")

    def test_with_overrides_ignores_none(self, registry):
        updated = registry.with_overrides(calibration_constant=20.0, external_margin=None)

        assert updated.calibration_constant == 20.0
        assert updated.external_margin == registry.external_margin
        assert registry.calibration_constant == 10.0
        assert registry.with_overrides(confidence_floor=None) is registry

    def test_camel_case_serialization(self, registry):
        dumped = registry.get("homeowner").model_dump(by_alias=True)

        assert dumped["tierPreference"] == "better"
        assert dumped["budgetRange"] == {"min": 5000.0, "max": 25000.0}


class TestLoadRegistry:
    """Test load_registry error handling."""

    def test_missing_file(self, tmp_path):
        with pytest.raises(RegistryLoadError) as exc:
            load_registry(tmp_path / "missing.json")

        assert exc.value.code == "CONFIGURATION_ERROR"

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "personas.json"
        path.write_text("{not json")

        with pytest.raises(RegistryLoadError):
            load_registry(path)

    def test_validation_errors_are_reported(self, tmp_path):
        path = tmp_path / "personas.json"
        path.write_text(json.dumps({"personas": [{"name": "x"}]}))

        with pytest.raises(RegistryLoadError) as exc:
            load_registry(path)

        assert exc.value.to_dict()["error"]["errors"]
