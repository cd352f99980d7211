import pytest

from clinguard.application.errors import (
    CredentialExpiredError,
    ImageGenerationError,
    InferenceError,
)
from clinguard.application.prompts import SYSTEM_PROMPT
from clinguard.application.use_cases import ClinicalAnalysisUseCase
from clinguard.domain.models import Decision
from clinguard.domain.rules import SUPPLEMENTAL_DELIMITER


ANSWER_TEXT = (
    "Decision: ANSWER\n"
    "Rationale: Vitals stable.\n"
    "Answer:\nNo acute findings.\n"
    "Evidence:\n- HR 80\n"
    "Self-Assessment (STRICT FORMAT):\n"
    "Plausibility: HIGH\nCausal Sensitivity: CAUSALLY INSENSITIVE\n"
    "Hallucination Check: NO\nConfidence Level: HIGH"
)

SHORT_ASK_TEXT = (
    "Decision: ASK\n"
    "Rationale: Missing labs.\n"
    "Questions:\n- What is the WBC count?\n"
    "Self-Assessment (STRICT FORMAT):\n"
)

LONG_ASK_TEXT = SHORT_ASK_TEXT.replace(
    "Missing labs.",
    "Troponin, ECG findings and symptom onset time are all missing from the note.",
)


class DummyLLM:
    def __init__(self, response=ANSWER_TEXT, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def generate_text(self, prompt, system_instruction, temperature, reasoning_budget):
        self.calls.append({
            "prompt": prompt,
            "system_instruction": system_instruction,
            "temperature": temperature,
            "reasoning_budget": reasoning_budget,
        })
        if self.error:
            raise self.error
        return self.response


class DummyImages:
    def __init__(self, uri="data:image/png;base64,AAAA", error=None):
        self.uri = uri
        self.error = error
        self.prompts = []

    def generate_image(self, prompt, aspect_ratio):
        self.prompts.append((prompt, aspect_ratio))
        if self.error:
            raise self.error
        return self.uri


def test_evaluate_returns_parsed_result_with_image():
    llm, images = DummyLLM(), DummyImages()
    usecase = ClinicalAnalysisUseCase(llm=llm, image_generator=images)
    result = usecase.evaluate("HR 80, BP 120/80", "Any acute findings?")

    assert result.decision == Decision.ANSWER
    assert result.answer == "No acute findings."
    assert result.image_reference == "data:image/png;base64,AAAA"

    call = llm.calls[0]
    assert call["prompt"] == "Clinical Note: HR 80, BP 120/80\n\nTask: Any acute findings?"
    assert call["system_instruction"] == SYSTEM_PROMPT
    assert call["temperature"] == 0.1
    assert call["reasoning_budget"] == 2000

    prompt, aspect_ratio = images.prompts[0]
    assert "No acute findings." in prompt
    assert aspect_ratio == "16:9"


def test_short_ask_skips_image():
    images = DummyImages()
    usecase = ClinicalAnalysisUseCase(llm=DummyLLM(SHORT_ASK_TEXT), image_generator=images)
    result = usecase.evaluate("note", "task")
    assert result.decision == Decision.ASK
    assert result.image_reference is None
    assert images.prompts == []


def test_long_ask_rationale_requests_image_from_rationale():
    images = DummyImages()
    usecase = ClinicalAnalysisUseCase(llm=DummyLLM(LONG_ASK_TEXT), image_generator=images)
    result = usecase.evaluate("note", "task")
    assert result.image_reference is not None
    assert "Troponin, ECG findings" in images.prompts[0][0]


@pytest.mark.parametrize("error", [ImageGenerationError("quota"), ConnectionError("reset")])
def test_image_failure_is_swallowed(error):
    usecase = ClinicalAnalysisUseCase(llm=DummyLLM(), image_generator=DummyImages(error=error))
    result = usecase.evaluate("note", "task")
    assert result.decision == Decision.ANSWER
    assert result.image_reference is None


def test_empty_image_result_leaves_reference_absent():
    usecase = ClinicalAnalysisUseCase(llm=DummyLLM(), image_generator=DummyImages(uri=None))
    assert usecase.evaluate("note", "task").image_reference is None


def test_no_image_generator_configured():
    usecase = ClinicalAnalysisUseCase(llm=DummyLLM())
    assert usecase.evaluate("note", "task").image_reference is None


def test_history_is_appended_to_base_note():
    llm = DummyLLM()
    usecase = ClinicalAnalysisUseCase(llm=llm)
    usecase.evaluate("Base note.", "task", ["Answer to Q1: 9.1"])
    assert f"Base note.\n\n{SUPPLEMENTAL_DELIMITER}\nAnswer to Q1: 9.1" in llm.calls[0]["prompt"]


def test_transport_failure_raises_inference_error():
    usecase = ClinicalAnalysisUseCase(llm=DummyLLM(error=TimeoutError("timed out")))
    with pytest.raises(InferenceError) as exc_info:
        usecase.evaluate("note", "task")
    assert not isinstance(exc_info.value, CredentialExpiredError)
    assert isinstance(exc_info.value.__cause__, TimeoutError)


def test_expired_key_message_raises_credential_error():
    error = RuntimeError("404 Requested entity was not found.")
    usecase = ClinicalAnalysisUseCase(llm=DummyLLM(error=error))
    with pytest.raises(CredentialExpiredError):
        usecase.evaluate("note", "task")


def test_adapter_credential_error_passes_through():
    error = CredentialExpiredError("401 Unauthorized")
    usecase = ClinicalAnalysisUseCase(llm=DummyLLM(error=error))
    with pytest.raises(CredentialExpiredError) as exc_info:
        usecase.evaluate("note", "task")
    assert exc_info.value is error


@pytest.mark.parametrize("response", ["", "   \n", None])
def test_empty_response_raises_inference_error(response):
    usecase = ClinicalAnalysisUseCase(llm=DummyLLM(response=response))
    with pytest.raises(InferenceError):
        usecase.evaluate("note", "task")
