import logging
from typing import Optional

from langchain_core.messages import HumanMessage

from clinguard.application.errors import ImageGenerationError
from clinguard.application.ports import ImageGenerationPort
from clinguard.infrastructure.config import Settings


logger = logging.getLogger(__name__)


class GeminiImageAdapter(ImageGenerationPort):
    def __init__(self, settings: Settings | None = None, model=None):
        self.settings = settings or Settings()
        self._model = model
        if self._model is None:
            self._init_model()

    def _init_model(self):
        api_key = self.settings.google_api_key
        if not api_key:
            logger.warning("Google API key is missing, image generation disabled.")
            return
        try:
            from langchain_google_genai import ChatGoogleGenerativeAI
            self._model = ChatGoogleGenerativeAI(
                model=self.settings.image_model,
                google_api_key=api_key,
                max_retries=1,
            )
        except Exception as e:
            logger.exception("Failed to initialize Gemini image model: %s", e)
            self._model = None

    @property
    def available(self) -> bool:
        return self._model is not None

    def generate_image(self, prompt: str, aspect_ratio: str) -> Optional[str]:
        if self._model is None:
            raise ImageGenerationError("Gemini image model not initialized")
        message = HumanMessage(content=f"{prompt} Aspect ratio {aspect_ratio}.")
        try:
            response = self._model.invoke(
                [message],
                generation_config=dict(response_modalities=["TEXT", "IMAGE"]),
            )
        except Exception as e:
            raise ImageGenerationError(str(e)) from e
        return _first_image_uri(response.content)


def _first_image_uri(content) -> Optional[str]:
    if not isinstance(content, list):
        return None
    for block in content:
        if not isinstance(block, dict):
            continue
        image_url = block.get("image_url")
        if image_url:
            url = image_url.get("url") if isinstance(image_url, dict) else image_url
            if url:
                return url
        if block.get("type") == "image" and block.get("base64"):
            mime_type = block.get("mime_type", "image/png")
            return f"data:{mime_type};base64,{block['base64']}"
    return None
