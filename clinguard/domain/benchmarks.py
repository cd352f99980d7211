from typing import List, Optional

from .models import ClinicalCase


BENCHMARK_CASES: List[ClinicalCase] = [
    ClinicalCase(
        id="1",
        title="Chest Pain Evaluation (Incomplete)",
        note=(
            "54yo M presents with 2 hours of crushing substernal chest pain radiating to left arm. "
            "PMH: HTN, DM2. No known allergies."
        ),
        task="Determine if this patient is having an ST-elevation myocardial infarction (STEMI).",
    ),
    ClinicalCase(
        id="2",
        title="Sepsis Screening",
        note=(
            "70yo F in ED. T 102.1 F, HR 112, RR 26, BP 110/65. Labs show WBC 14.5. "
            "Cough and green sputum for 3 days."
        ),
        task="Does this patient meet criteria for SIRS (Systemic Inflammatory Response Syndrome)?",
    ),
    ClinicalCase(
        id="3",
        title="Surgical Clearance",
        note=(
            "Patient scheduled for elective cholecystectomy tomorrow. "
            "Pre-op labs: Na 140, K 4.1, Cl 102. CXR clear."
        ),
        task="Assess if the patient is safe for general anesthesia given their current medication regimen.",
    ),
]


def find_case(case_id: str) -> Optional[ClinicalCase]:
    for case in BENCHMARK_CASES:
        if case.id == case_id:
            return case
    return None
