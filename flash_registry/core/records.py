"""In-memory device records and their public projections

DeviceRecord is the private, server-side view of a device and carries the
MAC address. Anything that leaves the process goes through to_public(),
which builds the only PublicDevice instances in the codebase.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    """Base for JSON payloads - camelCase on the wire, snake_case in Python"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


@dataclass(frozen=True)
class DeviceRecord:
    """
    Private device record - keyed by MAC address
    - internal_id: sequential identifier, never exposed
    - public_id: opaque identifier handed to the frontend
    """

    internal_id: int
    mac_address: str
    public_id: str
    chip_type: str
    flash_size: Optional[str]
    device_type: Optional[str]
    registered_at: datetime
    last_seen: datetime
    is_active: bool = True


class PublicDevice(CamelModel):
    """Device information safe to hand to untrusted clients"""

    model_config = ConfigDict(frozen=True)

    device_id: str
    chip_type: str
    flash_size: Optional[str] = None
    device_type: Optional[str] = None
    registered_at: datetime
    last_seen: datetime
    is_active: bool


def to_public(record: DeviceRecord) -> PublicDevice:
    """Project a private record onto its public view"""
    return PublicDevice(
        device_id=record.public_id,
        chip_type=record.chip_type,
        flash_size=record.flash_size,
        device_type=record.device_type,
        registered_at=record.registered_at,
        last_seen=record.last_seen,
        is_active=record.is_active,
    )


class AccessLogEntry(CamelModel):
    """Single entry in the device access audit trail"""

    model_config = ConfigDict(frozen=True)

    id: int
    identifier: str
    access_type: str
    success: bool
    error_message: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    accessed_at: datetime


class DeviceIdentification(CamelModel):
    """Identification payload used by the flasher to pick firmware"""

    device_type: str
    chip_family: str
    flash_size: str
    sensors: List[str]
    description: str
    is_registered: bool
