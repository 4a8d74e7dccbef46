"""
Device API client - used by flashing scripts to talk to the registry

Every call returns an APIResult instead of raising, so a flashing run never
aborts because the registry is down.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

import requests
from pydantic import ValidationError

from flash_registry.core.records import DeviceIdentification
from flash_registry.services.identification import generic_identification

logger = logging.getLogger(__name__)


class TransientUnavailable(Exception):
    """The registry backend could not be reached"""


@dataclass
class APIResult:
    success: bool
    data: Any = None
    error: Optional[str] = None
    status_code: Optional[int] = None


class DeviceAPI:
    """Client for the device registry HTTP API"""

    def __init__(self, api_url, api_prefix="/api", timeout=5.0, session=None):
        self.base_url = api_url.rstrip("/") + api_prefix
        self.timeout = timeout
        self.session = session or requests.Session()

    def close(self):
        if self.session:
            self.session.close()

    def _request(self, method, path, **kwargs) -> APIResult:
        """
        Perform a request and wrap the JSON envelope

        Raises:
            TransientUnavailable: any transport failure (connection, timeout,
                broken stream, bad URL)
        """
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise TransientUnavailable(str(e)) from e

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        if not response.ok:
            return APIResult(
                success=False,
                data=body,
                error=body.get("error") or f"HTTP {response.status_code}",
                status_code=response.status_code,
            )

        return APIResult(
            success=body.get("success", True),
            data=body,
            error=body.get("error"),
            status_code=response.status_code,
        )

    def _call(self, action, method, path, **kwargs) -> APIResult:
        try:
            result = self._request(method, path, **kwargs)
        except TransientUnavailable as e:
            logger.error(f"{action} failed, registry unreachable: {e}")
            return APIResult(success=False, error=str(e))

        if not result.success:
            logger.error(f"{action} failed: {result.error}")
        return result

    def register_device(self, mac_address, chip_type, flash_size=None, device_type=None) -> APIResult:
        payload = {"macAddress": mac_address, "chipType": chip_type}
        if flash_size:
            payload["flashSize"] = flash_size
        if device_type:
            payload["deviceType"] = device_type
        return self._call("Device registration", "POST", "/devices/register", json=payload)

    def get_device(self, device_id) -> APIResult:
        return self._call("Get device", "GET", f"/devices/{device_id}")

    def list_active_devices(self, sort=None) -> APIResult:
        params = {"sort": sort} if sort else None
        return self._call("List devices", "GET", "/devices", params=params)

    def ping_device(self, device_id) -> APIResult:
        return self._call("Device ping", "PATCH", f"/devices/{device_id}/ping")

    def deactivate_device(self, device_id) -> APIResult:
        return self._call("Device deactivation", "DELETE", f"/devices/{device_id}")

    def identify_device(self, mac_address) -> DeviceIdentification:
        """
        Identify a device by MAC address

        Falls back to generic device info when the registry is unreachable
        or answers with an error.
        """
        try:
            result = self._request("GET", f"/devices/identify/{mac_address}")
        except TransientUnavailable as e:
            logger.warning(f"Registry unreachable, using generic device info: {e}")
            return generic_identification()

        if not result.success:
            logger.warning(f"Identification failed ({result.error}), using generic device info")
            return generic_identification()

        try:
            return DeviceIdentification.model_validate(result.data)
        except ValidationError:
            logger.warning("Unexpected identification payload, using generic device info")
            return generic_identification()
