"""Device registry services"""

from flash_registry.services.registry import DeviceRegistry
from flash_registry.services.presence import PresenceTracker

__all__ = ["DeviceRegistry", "PresenceTracker"]
