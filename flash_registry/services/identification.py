"""Device identification by MAC address"""

from flash_registry.core.records import DeviceIdentification
from flash_registry.services.registry import DeviceRegistry


def generic_identification() -> DeviceIdentification:
    """Payload for devices the registry has never seen"""
    return DeviceIdentification(
        device_type="Generic ESP32",
        chip_family="ESP32",
        flash_size="Unknown",
        sensors=[],
        description="Unregistered device - generic firmware recommended",
        is_registered=False,
    )


def identify_device(registry: DeviceRegistry, mac_address: str) -> DeviceIdentification:
    """
    Identify a device from its MAC address

    Never fails for an unknown address; the generic payload is returned instead.
    """
    record = registry.get_device_by_mac(mac_address)
    if record is None:
        return generic_identification()

    device_type = record.device_type or f"{record.chip_type} Device"
    return DeviceIdentification(
        device_type=device_type,
        chip_family=record.chip_type,
        flash_size=record.flash_size or "Unknown",
        sensors=[],
        description=f"Registered {device_type}",
        is_registered=True,
    )
