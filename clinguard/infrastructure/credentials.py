import logging
from typing import MutableMapping, Optional

from clinguard.application.ports import CredentialPort
from clinguard.infrastructure.config import Settings


logger = logging.getLogger(__name__)


class SessionCredentialStore(CredentialPort):
    """Tracks whether a usable API key has been selected for this session.

    ``storage`` is Streamlit's ``session_state`` in the app and a plain dict in tests.
    """

    FLAG_KEY = "has_api_key"
    KEY_KEY = "selected_api_key"

    def __init__(self, storage: MutableMapping, settings: Settings | None = None):
        self.storage = storage
        self.settings = settings or Settings()

    @property
    def api_key(self) -> Optional[str]:
        return self.storage.get(self.KEY_KEY) or self.settings.mistral_api_key

    def has_credential(self) -> bool:
        if self.FLAG_KEY not in self.storage:
            self.storage[self.FLAG_KEY] = bool(self.api_key)
        return bool(self.storage[self.FLAG_KEY])

    def request_credential(self, api_key: Optional[str] = None) -> None:
        if api_key and api_key.strip():
            self.storage[self.KEY_KEY] = api_key.strip()
        # Assume the selection succeeded; a rejected key surfaces on the next call.
        self.storage[self.FLAG_KEY] = bool(self.api_key)

    def invalidate(self) -> None:
        logger.info("Credential invalidated, re-selection required")
        self.storage.pop(self.KEY_KEY, None)
        self.storage[self.FLAG_KEY] = False
