"""Tests for the calibration runner."""

import pytest

from config import settings
from src.core import InvalidInputError
from src.core.registry import load_registry
from src.detection import calibrate


class TestLoadCases:
    """Test sample loading."""

    def test_reads_csv(self, tmp_path):
        csv_path = tmp_path / "samples.csv"
        csv_path.write_text(
            "text,expected_persona,name,project_type\n"
            "my home,homeowner,First,\n"
            ",homeowner,Blank,\n"
            "office rooms,office-manager,,commercial\n",
            encoding="utf-8",
        )

        cases = calibrate.load_cases(csv_path)

        assert [c.text for c in cases] == ["my home", "office rooms"]
        assert cases[0].name == "First"
        assert cases[0].context == {}
        assert cases[1].name is None
        assert cases[1].context == {"project_type": "commercial"}

    def test_missing_explicit_csv_raises(self, tmp_path):
        with pytest.raises(InvalidInputError):
            calibrate.load_cases(tmp_path / "absent.csv")

    def test_falls_back_to_builtin_samples(self, tmp_path, monkeypatch):
        monkeypatch.setattr(calibrate, "_data_dir", lambda: tmp_path)

        cases = calibrate.load_cases()

        registry = load_registry(settings.registry_path)
        assert {c.expected_persona for c in cases} == set(registry.names())


class TestReport:
    """Test summary reporting."""

    def test_report_runs_on_bulk_summary(self, detection_service):
        summary = detection_service.run_bulk_test(calibrate._builtin_cases()[:2])

        calibrate.report(summary)

        assert summary.total_tests == 2
