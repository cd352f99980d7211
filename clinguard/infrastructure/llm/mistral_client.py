import logging
from typing import Optional

from clinguard.application.errors import CredentialExpiredError
from clinguard.application.ports import LLMPort
from clinguard.infrastructure.config import Settings


logger = logging.getLogger(__name__)


class MistralLLMAdapter(LLMPort):
    def __init__(self, settings: Settings | None = None, api_key: Optional[str] = None):
        self.settings = settings or Settings()
        self._api_key = api_key or self.settings.mistral_api_key
        self._client = None
        self._model = self.settings.mistral_model
        self._init_client()

    def _init_client(self):
        if not self._api_key:
            logger.error("Mistral API key is missing.")
            self._client = None
            return
        try:
            from mistralai import Mistral
            self._client = Mistral(api_key=self._api_key)
        except Exception as e:
            logger.exception("Failed to initialize Mistral client: %s", e)
            self._client = None

    def generate_text(
        self,
        prompt: str,
        system_instruction: str,
        temperature: float,
        reasoning_budget: int,
    ) -> str:
        if not self._client:
            raise RuntimeError("Mistral client not initialized (missing API key or import error)")
        messages = [
            {"role": "system", "content": system_instruction},
            {"role": "user", "content": prompt},
        ]
        try:
            response = self._client.chat.complete(
                model=self._model,
                messages=messages,
                temperature=temperature,
                max_tokens=reasoning_budget,
            )
        except Exception as e:
            logger.exception("Mistral chat call failed: %s", e)
            if getattr(e, "status_code", None) == 401:
                raise CredentialExpiredError(str(e)) from e
            raise

        if not response or not response.choices:
            return ""
        return _content_text(response.choices[0].message.content)


def _content_text(content) -> str:
    # Reasoning models return a list of chunks instead of a plain string
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    parts = []
    for chunk in content:
        text = getattr(chunk, "text", None)
        if text is None and isinstance(chunk, dict):
            text = chunk.get("text")
        if text:
            parts.append(text)
    return "".join(parts)
