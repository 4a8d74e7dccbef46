"""Device registration and management API routes"""

import logging
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Request

from flash_registry.core.dependencies import get_registry, get_tracker
from flash_registry.core.records import DeviceIdentification
from flash_registry.services import presence
from flash_registry.services.identification import identify_device
from flash_registry.services.presence import PresenceTracker
from flash_registry.services.registry import DeviceRegistry, DeviceValidationError
from flash_registry.api.schemas import (
    DeviceRegisterRequest,
    DeviceRegisterResponse,
    DeviceResponse,
    DeviceListResponse,
    StatusResponse,
    ErrorResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/devices",
    tags=["devices"],
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)

# Wire name of each sort option -> registry field
SORT_OPTIONS = {
    "lastSeen": "last_seen",
    "registeredAt": "registered_at",
    "chipType": "chip_type",
}


def _client_info(request: Request) -> dict:
    return {
        "ip_address": request.client.host if request.client else None,
        "user_agent": request.headers.get("user-agent"),
    }


@router.post("/register", response_model=DeviceRegisterResponse)
async def register_device(
    payload: DeviceRegisterRequest,
    request: Request,
    registry: DeviceRegistry = Depends(get_registry),
    tracker: PresenceTracker = Depends(get_tracker),
):
    """
    Register a new device or refresh an existing one
    Accepts the MAC address privately, returns only the public device ID
    """
    try:
        device = registry.register_device(
            payload.mac_address,
            payload.chip_type,
            flash_size=payload.flash_size,
            device_type=payload.device_type,
        )
    except DeviceValidationError as e:
        tracker.log_access(
            "unregistered", presence.REGISTER, False, str(e), **_client_info(request)
        )
        raise HTTPException(status_code=400, detail="Invalid device data")

    tracker.log_access(device.device_id, presence.REGISTER, True, **_client_info(request))

    return DeviceRegisterResponse(
        device=device, message="Device registered successfully"
    )


@router.get("/identify/{mac_address}", response_model=DeviceIdentification)
async def identify(
    mac_address: str,
    request: Request,
    registry: DeviceRegistry = Depends(get_registry),
    tracker: PresenceTracker = Depends(get_tracker),
):
    """Identify a device by MAC address (generic payload when unknown)"""
    identification = identify_device(registry, mac_address)

    record = registry.get_device_by_mac(mac_address)
    identifier = record.public_id if record else "unregistered"
    tracker.log_access(identifier, presence.IDENTIFY, True, **_client_info(request))

    return identification


@router.get("/{device_id}", response_model=DeviceResponse)
async def get_device(
    device_id: str,
    request: Request,
    registry: DeviceRegistry = Depends(get_registry),
    tracker: PresenceTracker = Depends(get_tracker),
):
    """Get device information by public device ID (no MAC address exposed)"""
    device = registry.get_device_by_id(device_id)

    if not device:
        raise HTTPException(status_code=404, detail="Device not found")

    tracker.touch_last_seen(device_id)
    tracker.log_access(device_id, presence.LOOKUP, True, **_client_info(request))

    return DeviceResponse(device=registry.get_device_by_id(device_id) or device)


@router.get("", response_model=DeviceListResponse)
async def list_devices(
    sort: Optional[Literal["lastSeen", "registeredAt", "chipType"]] = None,
    registry: DeviceRegistry = Depends(get_registry),
):
    """List all active devices"""
    devices = registry.list_active_devices(sort_by=SORT_OPTIONS.get(sort))
    return DeviceListResponse(devices=devices, count=len(devices))


@router.patch("/{device_id}/ping", response_model=StatusResponse)
async def ping_device(
    device_id: str,
    request: Request,
    registry: DeviceRegistry = Depends(get_registry),
    tracker: PresenceTracker = Depends(get_tracker),
):
    """Update device last_seen timestamp (heartbeat)"""
    if not registry.get_device_by_id(device_id):
        raise HTTPException(status_code=404, detail="Device not found")

    tracker.touch_last_seen(device_id)
    tracker.log_access(device_id, presence.PING, True, **_client_info(request))

    return StatusResponse(message="Device activity updated")


@router.delete("/{device_id}", response_model=StatusResponse)
async def deactivate_device(
    device_id: str,
    request: Request,
    registry: DeviceRegistry = Depends(get_registry),
    tracker: PresenceTracker = Depends(get_tracker),
):
    """Deactivate a device (soft delete, the record is kept)"""
    if not registry.deactivate(device_id):
        raise HTTPException(status_code=404, detail="Device not found")

    tracker.log_access(device_id, presence.DEACTIVATE, True, **_client_info(request))

    return StatusResponse(message="Device deactivated successfully")
