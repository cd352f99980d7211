"""Errors raised across the analysis boundary."""

CREDENTIAL_EXPIRED_MARKER = "Requested entity was not found"


class InferenceError(RuntimeError):
    """The primary inference call failed or returned no text."""


class CredentialExpiredError(InferenceError):
    """The API credential is no longer accepted and must be selected again."""


class ImageGenerationError(RuntimeError):
    """Image generation failed. Never leaves the use case."""


def is_credential_expired(message: str) -> bool:
    return CREDENTIAL_EXPIRED_MARKER in (message or "")
