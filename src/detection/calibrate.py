"""Measure rule-based detection accuracy on a labelled sample set"""
from __future__ import annotations

import argparse
import csv
from pathlib import Path
from typing import Optional

from config import logger, settings
from src.core import DetectionTestCase, InvalidInputError, TestSummary
from src.engine.container import get_detection_service, shutdown_engine


def _data_dir() -> Path:
    """Return the project data directory"""
    return Path(__file__).resolve().parent.parent.parent / "data"


def _load_csv_cases(csv_path: Path) -> list[DetectionTestCase]:
    """
    Read a CSV file with columns text, expected_persona and optional name, project_type

    Rows without text are skipped

    Args:
        csv_path: Path to the CSV file

    Returns:
        List of DetectionTestCase in file order
    """
    cases: list[DetectionTestCase] = []
    with open(csv_path, newline="", encoding="utf-8") as f:
        for r in csv.DictReader(f):
            text = (r.get("text") or "").strip()
            if not text:
                continue
            project_type = (r.get("project_type") or "").strip()
            cases.append(
                DetectionTestCase(
                    text=text,
                    expected_persona=(r.get("expected_persona") or "").strip() or None,
                    name=(r.get("name") or "").strip() or None,
                    context={"project_type": project_type} if project_type else {},
                )
            )
    return cases


def _builtin_cases() -> list[DetectionTestCase]:
    """
    Return built-in labelled samples when no CSV is available

    Returns:
        One or more samples per registered persona
    """
    samples = [
        ("Homeowner", "I want to make my home safer for my family and save on our monthly bills", "homeowner"),
        ("Designer", "My client wants an elegant, sophisticated look with hidden technology and custom finishes", "interior-designer"),
        ("Builder", "We are a contractor doing a new construction build with 40 units and need a standard package", "builder"),
        ("Architect", "The architectural plans call for infrastructure integrated into the building design and specifications", "architect"),
        ("CTO", "Our IT infrastructure needs enterprise network security, scalability and system integration", "cto-cio"),
        ("Owner", "As a small business owner I need to cut costs and keep my employees and customers happy", "business-owner"),
        ("Executive", "The board wants a strategic investment with a competitive advantage and clear ROI", "c-suite"),
        ("Office", "I manage the office and need easy scheduling for conference rooms and employee comfort", "office-manager"),
        ("Facilities", "Our facilities team handles building maintenance, HVAC and energy management across the campus", "facilities-manager"),
    ]
    return [
        DetectionTestCase(name=name, text=text, expected_persona=expected)
        for name, text, expected in samples
    ]


def load_cases(csv_path: Optional[Path] = None) -> list[DetectionTestCase]:
    """
    Load labelled samples from a CSV, falling back to the built-in set

    Raises:
        InvalidInputError: If an explicitly given CSV does not exist
    """
    if csv_path is not None:
        if not csv_path.exists():
            raise InvalidInputError(message=f"Sample file not found: {csv_path}")
    else:
        csv_path = _data_dir() / "persona_samples.csv"
        if not csv_path.exists():
            logger.warning("data/persona_samples.csv not found, using built-in list")
            return _builtin_cases()

    cases = _load_csv_cases(csv_path)
    logger.info(f"Loaded {len(cases)} samples from {csv_path}")
    return cases


def report(summary: TestSummary) -> None:
    for outcome in summary.results:
        if not outcome.succeeded:
            logger.warning(f"  {outcome.name}: failed ({outcome.error})")
        elif outcome.is_correct is False:
            logger.info(
                f"  {outcome.name}: expected {outcome.expected}, detected {outcome.detected} "
                f"({outcome.method}, confidence {outcome.confidence:.2f})"
            )
    logger.info(
        f"Accuracy: {summary.overall_accuracy}% "
        f"({summary.correct_predictions}/{summary.tests_with_expected} labelled, "
        f"{summary.failed_tests} failed)"
    )


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Measure persona detection accuracy on labelled samples")
    parser.add_argument("csv", nargs="?", type=Path, help="CSV with text,expected_persona[,name,project_type]")
    parser.add_argument("--workers", type=int, default=settings.bulk_test_workers)
    args = parser.parse_args()

    cases = load_cases(args.csv)
    if len(cases) < 30:
        logger.warning(
            f"Sample set is very small ({len(cases)} samples) - accuracy may not be reliable. Consider collecting more data"
        )

    try:
        summary = get_detection_service().run_bulk_test(cases, max_workers=args.workers)
    finally:
        shutdown_engine()
    report(summary)
