from typing import Optional, Protocol


class LLMPort(Protocol):
    def generate_text(
        self,
        prompt: str,
        system_instruction: str,
        temperature: float,
        reasoning_budget: int,
    ) -> str:
        """
        Sends one prompt with a system instruction and returns the raw completion text.
        """
        ...


class ImageGenerationPort(Protocol):
    def generate_image(self, prompt: str, aspect_ratio: str) -> Optional[str]:
        """
        Returns a data URI for the first generated image, or None when the model returned none.
        """
        ...


class CredentialPort(Protocol):
    def has_credential(self) -> bool:
        ...

    def request_credential(self, api_key: Optional[str] = None) -> None:
        ...

    def invalidate(self) -> None:
        ...
