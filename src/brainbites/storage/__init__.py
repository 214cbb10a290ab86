"""Key-value persistence."""

from .preferences import Preferences
from .store import KeyValueStore
from .writer import BackgroundWriter

__all__ = ["BackgroundWriter", "KeyValueStore", "Preferences"]
