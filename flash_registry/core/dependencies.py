"""FastAPI dependencies for the registry objects held on app.state"""

from fastapi import Request

from flash_registry.services.registry import DeviceRegistry
from flash_registry.services.presence import PresenceTracker


def get_registry(request: Request) -> DeviceRegistry:
    return request.app.state.registry


def get_tracker(request: Request) -> PresenceTracker:
    return request.app.state.tracker
