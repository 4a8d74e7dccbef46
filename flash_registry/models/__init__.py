"""Database models"""

from flash_registry.models.device import Device
from flash_registry.models.access_log import DeviceAccessLog

__all__ = ["Device", "DeviceAccessLog"]
