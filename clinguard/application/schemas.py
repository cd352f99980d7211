from typing import List, Optional
from pydantic import BaseModel, model_validator

from clinguard.domain.models import (
    CausalSensitivity,
    ConfidenceLevel,
    Decision,
    HallucinationCheck,
    Plausibility,
)


class SelfAssessment(BaseModel):
    # Defaults lean towards caution when the model omits a field.
    plausibility: Plausibility = Plausibility.LOW
    causal_sensitivity: CausalSensitivity = CausalSensitivity.SENSITIVE
    hallucination_check: HallucinationCheck = HallucinationCheck.YES
    confidence: ConfidenceLevel = ConfidenceLevel.LOW

    model_config = {"frozen": True}


class AnalysisResult(BaseModel):
    decision: Decision = Decision.ASK
    rationale: str
    questions: Optional[List[str]] = None
    answer: Optional[str] = None
    evidence: Optional[List[str]] = None
    image_reference: Optional[str] = None
    self_assessment: SelfAssessment = SelfAssessment()

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def check_decision_fields(self):
        if self.decision == Decision.ANSWER and self.questions is not None:
            raise ValueError("questions are only allowed when decision is ASK")
        if self.decision == Decision.ASK and (self.answer is not None or self.evidence is not None):
            raise ValueError("answer and evidence are only allowed when decision is ANSWER")
        return self
