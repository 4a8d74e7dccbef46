"""Pydantic schemas for API request/response validation

All payloads use camelCase field names on the wire, matching the
browser flasher.
"""

from pydantic import Field
from typing import Any, Dict, List, Optional

from flash_registry.core.records import AccessLogEntry, CamelModel, PublicDevice


# Device schemas
class DeviceRegisterRequest(CamelModel):
    """Device registration request from the flasher"""

    mac_address: str = Field(..., min_length=1, description="Hardware MAC address")
    chip_type: str = Field(..., min_length=1, description="Detected chip type")
    flash_size: Optional[str] = None
    device_type: Optional[str] = None


class DeviceRegisterResponse(CamelModel):
    """Device registration response"""

    success: bool = True
    device: PublicDevice
    message: str


class DeviceResponse(CamelModel):
    """Single device lookup response"""

    success: bool = True
    device: PublicDevice


class DeviceListResponse(CamelModel):
    """Active device listing"""

    success: bool = True
    devices: List[PublicDevice]
    count: int


class StatusResponse(CamelModel):
    """Generic success response"""

    success: bool = True
    message: str


class ErrorResponse(CamelModel):
    """Error envelope rendered by the app-level exception handlers"""

    success: bool = False
    error: str
    details: Optional[Any] = None


# Admin schemas
class AccessLogListResponse(CamelModel):
    """Access log listing"""

    success: bool = True
    logs: List[AccessLogEntry]
    count: int


class AccessStatsResponse(CamelModel):
    """Access counters"""

    total_accesses: int
    failures: int
    by_type: Dict[str, int]


# Health check
class HealthResponse(CamelModel):
    """Health check response"""

    status: str
    total_devices: int
    active_devices: int
    version: str
