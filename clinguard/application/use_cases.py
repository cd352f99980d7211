import logging
from typing import List, Optional

from clinguard.domain.rules import compose_effective_note, image_seed, should_request_image
from clinguard.application.errors import (
    CredentialExpiredError,
    InferenceError,
    is_credential_expired,
)
from clinguard.application.parser import parse_response
from clinguard.application.ports import ImageGenerationPort, LLMPort
from clinguard.application.prompts import SYSTEM_PROMPT, build_image_prompt, build_user_prompt
from clinguard.application.schemas import AnalysisResult


logger = logging.getLogger(__name__)


DEFAULT_TEMPERATURE = 0.1
DEFAULT_REASONING_BUDGET = 2000
DEFAULT_ASPECT_RATIO = "16:9"


class ClinicalAnalysisUseCase:
    def __init__(
        self,
        llm: LLMPort,
        image_generator: Optional[ImageGenerationPort] = None,
        temperature: float = DEFAULT_TEMPERATURE,
        reasoning_budget: int = DEFAULT_REASONING_BUDGET,
        aspect_ratio: str = DEFAULT_ASPECT_RATIO,
    ):
        self.llm = llm
        self.image_generator = image_generator
        self.temperature = temperature
        self.reasoning_budget = reasoning_budget
        self.aspect_ratio = aspect_ratio

    def evaluate(self, note: str, task: str, history: Optional[List[str]] = None) -> AnalysisResult:
        """Run one analysis round.

        ``note`` is always the original base note; refinements pass the full
        accumulated ``history`` instead of a previously composed note.
        Raises InferenceError when the primary call fails or returns no text.
        """
        effective_note = compose_effective_note(note, history)
        prompt = build_user_prompt(effective_note, task)

        raw = self._complete(prompt)
        result = parse_response(raw)
        logger.info("Parsed decision %s (history entries: %d)", result.decision.value, len(history or []))

        if should_request_image(result.decision, result.rationale):
            image_reference = self._try_generate_image(image_seed(result.answer, result.rationale))
            if image_reference:
                result = result.model_copy(update={"image_reference": image_reference})

        return result

    def _complete(self, prompt: str) -> str:
        try:
            raw = self.llm.generate_text(
                prompt,
                system_instruction=SYSTEM_PROMPT,
                temperature=self.temperature,
                reasoning_budget=self.reasoning_budget,
            )
        except InferenceError:
            raise
        except Exception as e:
            logger.error("Inference call failed: %s", e)
            if is_credential_expired(str(e)):
                raise CredentialExpiredError(str(e)) from e
            raise InferenceError(str(e) or "Failed to analyze.") from e

        if not raw or not raw.strip():
            raise InferenceError("The model returned an empty response.")
        return raw

    def _try_generate_image(self, seed: str) -> Optional[str]:
        if self.image_generator is None:
            return None
        try:
            image_reference = self.image_generator.generate_image(
                build_image_prompt(seed), aspect_ratio=self.aspect_ratio
            )
        except Exception as e:
            logger.warning("Image generation failed: %s", e)
            return None
        if not image_reference:
            logger.info("Image model returned no image")
        return image_reference or None
