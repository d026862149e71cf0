"""Gradio web interface for persona detection and tiered recommendations"""
from __future__ import annotations

import json
from typing import Optional

import gradio as gr

from config import logger, settings
from src.core import AppError, InvalidInputError, TIERS
from src.engine import get_engine_service, shutdown_engine

SAMPLE_BULK_CASES = [
    {"name": "Family home", "text": "I want to protect my family and cut our monthly bills", "expectedPersona": "homeowner"},
    {"name": "IT lead", "text": "Our IT department needs network security and system integration", "expectedPersona": "cto-cio"},
]


def _optional_number(value) -> Optional[float]:
    # gr.Number yields None or 0 for an untouched field
    if value in (None, ""):
        return None
    return float(value)


def detect_ui(text: str, voice_transcript: str, project_type: str) -> dict:
    """
    Gradio handler for persona detection requests

    Args:
        text: Customer text input from UI
        voice_transcript: Optional transcript of a call
        project_type: "auto", "residential" or "commercial"

    Returns:
        DetectionResult fields on success, error dictionary on failure
    """
    logger.info("Received detection request")
    context = {}
    if voice_transcript and voice_transcript.strip():
        context["voice_transcript"] = voice_transcript
    if project_type and project_type != "auto":
        context["project_type"] = project_type

    try:
        result = get_engine_service().detect_persona(text or "", context)
        return result.model_dump(by_alias=True)
    except AppError as e:
        logger.warning(f"AppError: {e}")
        return e.to_dict()


def recommend_ui(
    persona: str,
    text: str,
    budget,
    project_size,
    preferred_tier: str,
    requirements: str,
) -> dict:
    """
    Gradio handler for recommendation requests

    Returns:
        RecommendationResult fields on success, error dictionary on failure
    """
    logger.info("Received recommendation request")
    try:
        result = get_engine_service().generate_recommendations(
            persona=None if persona in (None, "", "auto") else persona,
            text=text or None,
            budget=_optional_number(budget) or None,
            project_size=_optional_number(project_size) or None,
            preferred_tier=None if preferred_tier in (None, "", "auto") else preferred_tier,
            requirements=[r.strip() for r in (requirements or "").split(",") if r.strip()],
        )
        return result.model_dump(by_alias=True)
    except AppError as e:
        logger.warning(f"AppError: {e}")
        return e.to_dict()


def bulk_test_ui(cases_json: str) -> dict:
    """
    Gradio handler running a bulk accuracy test

    Args:
        cases_json: JSON list of {name, text, expectedPersona, context}

    Returns:
        TestSummary fields on success, error dictionary on failure
    """
    logger.info("Received bulk test request")
    try:
        try:
            cases = json.loads(cases_json or "[]")
        except json.JSONDecodeError as e:
            raise InvalidInputError(message=f"Test cases are not valid JSON: {e.msg}") from e
        if not isinstance(cases, list):
            raise InvalidInputError(message="Test cases must be a JSON list")
        summary = get_engine_service().run_bulk_test(cases, max_workers=settings.bulk_test_workers)
        return summary.model_dump(by_alias=True, mode="json")
    except AppError as e:
        logger.warning(f"AppError: {e}")
        return e.to_dict()


def build_demo() -> gr.TabbedInterface:
    personas = ["auto"] + [persona.name for persona in get_engine_service().list_personas()]

    detection = gr.Interface(
        fn=detect_ui,
        inputs=[
            gr.Textbox(label="Customer text", lines=4),
            gr.Textbox(label="Voice transcript (optional)", lines=3),
            gr.Radio(["auto", "residential", "commercial"], value="auto", label="Project type hint"),
        ],
        outputs=gr.JSON(label="Detection result"),
        description="Paste what the customer said or wrote to see the detected persona and per-persona scores",
    )
    recommendation = gr.Interface(
        fn=recommend_ui,
        inputs=[
            gr.Dropdown(personas, value="auto", label="Persona (auto = detect from text)"),
            gr.Textbox(label="Customer text", lines=4),
            gr.Number(label="Budget ($)", value=None),
            gr.Number(label="Project size (sq ft)", value=None),
            gr.Radio(["auto", *TIERS], value="auto", label="Preferred tier"),
            gr.Textbox(label="Requirements (comma separated)"),
        ],
        outputs=gr.JSON(label="Recommendation"),
        description="Generate good, better and best bundles for a persona",
    )
    bulk = gr.Interface(
        fn=bulk_test_ui,
        inputs=gr.Code(value=json.dumps(SAMPLE_BULK_CASES, indent=2), language="json", label="Test cases"),
        outputs=gr.JSON(label="Test summary"),
        description="Run labelled cases and report detection accuracy",
    )
    return gr.TabbedInterface(
        [detection, recommendation, bulk],
        ["Persona detection", "Recommendations", "Bulk test"],
        title="Persona & Recommendation Tester",
    )


if __name__ == "__main__":
    try:
        build_demo().launch()
    finally:
        shutdown_engine()
