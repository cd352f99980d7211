import os
import logging

try:
    import streamlit as st  # type: ignore
    _HAS_STREAMLIT = True
except Exception:
    _HAS_STREAMLIT = False

logger = logging.getLogger(__name__)


def get_secret(name: str, default: str | None = None) -> str | None:
    # Prefer Streamlit secrets if available
    if _HAS_STREAMLIT:
        try:
            if name in st.secrets:
                return str(st.secrets.get(name))
        except Exception as e:
            # No secrets.toml present
            logger.debug("Streamlit secrets unavailable for %s: %s", name, e)
    # Fallback to environment variables
    return os.environ.get(name, default)


def _number(name: str, default, cast):
    raw = get_secret(name)
    if raw is None or raw == "":
        return default
    try:
        return cast(raw)
    except ValueError:
        logger.warning("Invalid value for %s: %r, using %r", name, raw, default)
        return default


class Settings:
    @property
    def mistral_api_key(self) -> str | None:
        return get_secret("MISTRAL_API_KEY")

    @property
    def mistral_model(self) -> str:
        return get_secret("MISTRAL_MODEL", "mistral-large-latest") or "mistral-large-latest"

    @property
    def google_api_key(self) -> str | None:
        return get_secret("GOOGLE_API_KEY")

    @property
    def image_model(self) -> str:
        return get_secret("IMAGE_MODEL", "gemini-2.5-flash-image") or "gemini-2.5-flash-image"

    @property
    def temperature(self) -> float:
        return _number("LLM_TEMPERATURE", 0.1, float)

    @property
    def reasoning_budget(self) -> int:
        return _number("REASONING_BUDGET", 2000, int)

    @property
    def image_aspect_ratio(self) -> str:
        return get_secret("IMAGE_ASPECT_RATIO", "16:9") or "16:9"

    @property
    def log_level(self) -> str:
        return get_secret("LOG_LEVEL", "INFO") or "INFO"
