"""Boolean user preferences kept alongside the core state."""

import logging

from ..errors import StorageError
from .store import KeyValueStore

logger = logging.getLogger(__name__)

SOUNDS_ENABLED = "sounds_enabled"
ONBOARDING_COMPLETE = "onboarding_complete"
MASCOT_ENABLED = "mascot_enabled"

DEFAULTS: dict[str, bool] = {
    SOUNDS_ENABLED: True,
    ONBOARDING_COMPLETE: False,
    MASCOT_ENABLED: True,
}


class Preferences:
    """Reads and writes the UI flags stored in the key-value store."""

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    def get_flag(self, key: str) -> bool:
        """Get a flag, falling back to its default when unset or unreadable."""
        default = DEFAULTS.get(key, False)
        try:
            value = self.store.get_json(key)
        except StorageError as e:
            logger.warning("Cannot read preference %s: %s", key, e)
            return default
        if isinstance(value, bool):
            return value
        return default

    def set_flag(self, key: str, value: bool) -> None:
        """Persist a flag. Storage failures are logged and ignored."""
        try:
            self.store.set_json(key, bool(value))
        except StorageError as e:
            logger.warning("Cannot save preference %s: %s", key, e)

    @property
    def sounds_enabled(self) -> bool:
        return self.get_flag(SOUNDS_ENABLED)

    @sounds_enabled.setter
    def sounds_enabled(self, value: bool) -> None:
        self.set_flag(SOUNDS_ENABLED, value)

    @property
    def onboarding_complete(self) -> bool:
        return self.get_flag(ONBOARDING_COMPLETE)

    @onboarding_complete.setter
    def onboarding_complete(self, value: bool) -> None:
        self.set_flag(ONBOARDING_COMPLETE, value)

    @property
    def mascot_enabled(self) -> bool:
        return self.get_flag(MASCOT_ENABLED)

    @mascot_enabled.setter
    def mascot_enabled(self, value: bool) -> None:
        self.set_flag(MASCOT_ENABLED, value)
