"""Parse free-form AI loan assessments into a structured Decision.

The model is asked to answer with labeled fields::

    1. Decision: APPROVED or REJECTED
    2. Confidence Level: 0-100
    3. Fairness Score: 0-100
    4. Explanation: two or three sentences

Nothing guarantees it does. Each field is extracted independently and falls
back to a fixed conservative default when missing or out of range, so an
unusable reply still yields a (reject-leaning) decision instead of an error.
"""

import re
from dataclasses import dataclass

from fairlend_db.enums import Prediction

DEFAULT_PREDICTION = Prediction.REJECTED
DEFAULT_CONFIDENCE = 75
DEFAULT_FAIRNESS_SCORE = 85

_SCORE_MIN = 0
_SCORE_MAX = 100

_LABELS = r"(?:Decision|Confidence Level|Fairness Score|Explanation)"
# Markdown emphasis around labels ("**Decision:** APPROVED") is common in replies.
_SEP = r"[\s*_]*"

_DECISION_RE = re.compile(rf"Decision{_SEP}:{_SEP}(APPROVED|REJECTED)\b", re.IGNORECASE)
# Scores are at most four digits so a runaway digit string never reaches int().
_CONFIDENCE_RE = re.compile(rf"Confidence Level{_SEP}:{_SEP}(\d{{1,4}})(?!\d)", re.IGNORECASE)
_FAIRNESS_RE = re.compile(rf"Fairness Score{_SEP}:{_SEP}(\d{{1,4}})(?!\d)", re.IGNORECASE)
_EXPLANATION_RE = re.compile(
    rf"Explanation{_SEP}:{_SEP}(.+?)"
    rf"(?=\n[ \t]*\n|\n[ \t]*(?:\d+\.[ \t]*)?{_SEP}{_LABELS}{_SEP}:|\Z)",
    re.IGNORECASE | re.DOTALL,
)


@dataclass(frozen=True)
class Decision:
    """Structured outcome of one AI assessment."""

    prediction: Prediction
    confidence: int
    fairness_score: int
    explanation: str


def _parse_score(pattern: re.Pattern, text: str, default: int) -> int:
    """Return the labeled score, or the default when absent or outside 0-100."""
    match = pattern.search(text)
    if match is None:
        return default
    value = int(match.group(1))
    if value < _SCORE_MIN or value > _SCORE_MAX:
        return default
    return value


def _parse_prediction(text: str) -> Prediction:
    match = _DECISION_RE.search(text)
    if match is None:
        return DEFAULT_PREDICTION
    if match.group(1).upper() == "APPROVED":
        return Prediction.APPROVED
    return Prediction.REJECTED


def _parse_explanation(text: str) -> str:
    match = _EXPLANATION_RE.search(text)
    if match is None:
        return text
    explanation = match.group(1).strip()
    return explanation or text


def parse(raw_text: str) -> Decision:
    """Extract a Decision from raw model output. Never raises."""
    text = raw_text or ""
    return Decision(
        prediction=_parse_prediction(text),
        confidence=_parse_score(_CONFIDENCE_RE, text, DEFAULT_CONFIDENCE),
        fairness_score=_parse_score(_FAIRNESS_RE, text, DEFAULT_FAIRNESS_SCORE),
        explanation=_parse_explanation(text),
    )
