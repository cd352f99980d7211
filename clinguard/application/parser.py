"""Convert a free-text model completion into an AnalysisResult.

The completion is expected to follow the strict output format of
``SYSTEM_PROMPT``. Each section is captured between its own marker and the
next marker the format guarantees, so sections are extracted in a fixed
order. Anything that fails to match falls back to a conservative default;
parsing never raises.
"""
import logging
import re
from typing import List, Optional

from clinguard.domain.models import (
    CausalSensitivity,
    ConfidenceLevel,
    Decision,
    HallucinationCheck,
    Plausibility,
)

from .prompts import (
    ANSWER_MARKER,
    CAUSAL_SENSITIVITY_MARKER,
    CONFIDENCE_MARKER,
    DECISION_MARKER,
    EVIDENCE_MARKER,
    HALLUCINATION_CHECK_MARKER,
    PLAUSIBILITY_MARKER,
    QUESTIONS_MARKER,
    RATIONALE_END_MARKERS,
    RATIONALE_MARKER,
    SELF_ASSESSMENT_MARKER,
)
from .schemas import AnalysisResult, SelfAssessment


logger = logging.getLogger(__name__)


DEFAULT_RATIONALE = "No rationale provided."

_FLAGS = re.IGNORECASE | re.DOTALL


def _choice(values) -> str:
    return "|".join(re.escape(v.value) for v in values)


def _block(start: str, *ends: str) -> re.Pattern:
    stop = "|".join(re.escape(e) for e in ends)
    return re.compile(rf"{re.escape(start)}\s*(.*?)(?={stop})", _FLAGS)


def _field(marker: str, values) -> re.Pattern:
    return re.compile(rf"{re.escape(marker)}\s*({_choice(values)})", re.IGNORECASE)


DECISION_RE = _field(DECISION_MARKER, Decision)
RATIONALE_RE = _block(RATIONALE_MARKER, *RATIONALE_END_MARKERS)
QUESTIONS_RE = _block(QUESTIONS_MARKER, SELF_ASSESSMENT_MARKER)
ANSWER_RE = _block(ANSWER_MARKER, EVIDENCE_MARKER)
EVIDENCE_RE = _block(EVIDENCE_MARKER, SELF_ASSESSMENT_MARKER)
PLAUSIBILITY_RE = _field(PLAUSIBILITY_MARKER, Plausibility)
CAUSAL_SENSITIVITY_RE = _field(CAUSAL_SENSITIVITY_MARKER, CausalSensitivity)
HALLUCINATION_CHECK_RE = _field(HALLUCINATION_CHECK_MARKER, HallucinationCheck)
CONFIDENCE_RE = _field(CONFIDENCE_MARKER, ConfidenceLevel)

_LIST_MARKER_RE = re.compile(r"^\s*- ")


def _capture(pattern: re.Pattern, text: str) -> Optional[str]:
    match = pattern.search(text)
    return match.group(1) if match else None


def _split_items(block: Optional[str]) -> List[str]:
    if block is None:
        return []
    items = []
    for line in block.split("\n"):
        cleaned = _LIST_MARKER_RE.sub("", line).strip()
        if cleaned:
            items.append(cleaned)
    return items


def _enum_field(pattern: re.Pattern, text: str, enum_cls, default):
    value = _capture(pattern, text)
    if value is None:
        logger.debug("No %s in completion, defaulting to %s", enum_cls.__name__, default.value)
        return default
    return enum_cls(value.upper())


def parse_self_assessment(text: str) -> SelfAssessment:
    return SelfAssessment(
        plausibility=_enum_field(PLAUSIBILITY_RE, text, Plausibility, Plausibility.LOW),
        causal_sensitivity=_enum_field(
            CAUSAL_SENSITIVITY_RE, text, CausalSensitivity, CausalSensitivity.SENSITIVE
        ),
        hallucination_check=_enum_field(
            HALLUCINATION_CHECK_RE, text, HallucinationCheck, HallucinationCheck.YES
        ),
        confidence=_enum_field(CONFIDENCE_RE, text, ConfidenceLevel, ConfidenceLevel.LOW),
    )


def parse_response(raw_text: Optional[str]) -> AnalysisResult:
    text = raw_text or ""

    decision_value = _capture(DECISION_RE, text)
    decision = Decision.ANSWER if decision_value and decision_value.upper() == "ANSWER" else Decision.ASK

    rationale = (_capture(RATIONALE_RE, text) or "").strip() or DEFAULT_RATIONALE

    questions: List[str] = []
    answer = ""
    evidence: List[str] = []
    if decision == Decision.ASK:
        questions = _split_items(_capture(QUESTIONS_RE, text))
    else:
        answer = (_capture(ANSWER_RE, text) or "").strip()
        evidence = _split_items(_capture(EVIDENCE_RE, text))

    return AnalysisResult(
        decision=decision,
        rationale=rationale,
        questions=questions or None,
        answer=answer or None,
        evidence=evidence or None,
        self_assessment=parse_self_assessment(text),
    )
