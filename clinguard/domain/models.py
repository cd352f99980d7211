from enum import Enum
from typing import List
from pydantic import BaseModel, field_validator


class Decision(str, Enum):
    ASK = "ASK"
    ANSWER = "ANSWER"


class Plausibility(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class CausalSensitivity(str, Enum):
    SENSITIVE = "CAUSALLY SENSITIVE"
    INSENSITIVE = "CAUSALLY INSENSITIVE"


class HallucinationCheck(str, Enum):
    YES = "YES"
    NO = "NO"


class ConfidenceLevel(str, Enum):
    LOW = "LOW"
    MODERATE = "MODERATE"
    HIGH = "HIGH"


class AppMode(str, Enum):
    BENCHMARK = "BENCHMARK"
    USER = "USER"


class AnalysisRequest(BaseModel):
    note: str
    task: str
    history: List[str] = []

    model_config = {"frozen": True}

    @field_validator("note", "task")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return v.strip()


class ClinicalCase(BaseModel):
    id: str
    title: str
    note: str
    task: str

    model_config = {"frozen": True}
