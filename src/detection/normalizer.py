"""Text normalization shared by detection, pattern compilation and hint matching"""
import re
from dataclasses import dataclass
from typing import Optional, Tuple

_NOISE = re.compile(r"[^a-z0-9]+")

_AMOUNT = (
    r"(?<![\w.])(?P<whole>\d{1,3}(?:,\d{3})+|\d+)(?:\.(?P<fraction>\d+))?"
    r"\s*(?P<scale>k|m|thousand|million)?\b"
)
_BUDGET_WORD = re.compile(r"\bbudget\b", re.IGNORECASE)
_BUDGET_AMOUNT = re.compile(r"(?P<dollar>\$\s*)?" + _AMOUNT, re.IGNORECASE)
_DOLLAR_AMOUNT = re.compile(r"\$\s*" + _AMOUNT, re.IGNORECASE)
_YEAR = re.compile(r"(?:19|20)\d{2}")
# How far past the word "budget" an amount may appear
BUDGET_WINDOW_CHARS = 40
_SCALE = {"k": 1_000, "thousand": 1_000, "m": 1_000_000, "million": 1_000_000}


@dataclass(frozen=True)
class NormalizedText:
    """Lower-cased, punctuation-free view of a text with the original kept for display"""
    original: str
    text: str
    tokens: Tuple[str, ...]

    @property
    def is_empty(self) -> bool:
        return not self.tokens


def normalize_term(value: str) -> str:
    """
    Lower-case a string and replace every run of punctuation or whitespace with one space

    Used for both input text and pattern terms so that "whole-home" and
    "whole home" compare equal
    """
    return _NOISE.sub(" ", value.lower()).strip()


def normalize(text: str) -> NormalizedText:
    cleaned = normalize_term(text)
    return NormalizedText(original=text, text=cleaned, tokens=tuple(cleaned.split()))


def combine_text(text: Optional[str], voice_transcript: Optional[str] = None) -> str:
    """Join written text and a voice transcript into one blob"""
    return " ".join(part for part in (text, voice_transcript) if part)


def _parse_amount(match: re.Match) -> float:
    whole, fraction, scale = match.group("whole", "fraction", "scale")
    value = float(whole.replace(",", "") + (f".{fraction}" if fraction else ""))
    if scale:
        value *= _SCALE[scale.lower()]
    return value


def _budget_amount(text: str) -> Optional[re.Match]:
    for keyword in _BUDGET_WORD.finditer(text):
        window = text[keyword.end():keyword.end() + BUDGET_WINDOW_CHARS]
        plain = None
        for match in _BUDGET_AMOUNT.finditer(window):
            if match.group("dollar") or match.group("scale"):
                return match
            if plain is None and not _YEAR.fullmatch(match.group("whole")):
                plain = match
        if plain is not None:
            return plain
    return None


def extract_budget(text: Optional[str]) -> Optional[float]:
    """
    Find a stated budget in free text

    An amount shortly after the word "budget" wins over any other dollar
    amount. Near the keyword a "$" or scaled amount is preferred and a bare
    year such as 2024 is skipped; "$15,000", "15k" and "1.5 million" forms
    are understood

    Args:
        text: Raw customer text

    Returns:
        Budget in dollars, or None when no amount is stated
    """
    if not text:
        return None
    match = _budget_amount(text) or _DOLLAR_AMOUNT.search(text)
    if match is None:
        return None
    return _parse_amount(match)
