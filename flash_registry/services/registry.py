"""In-memory device registry - MAC address to public device ID mapping"""

import logging
import secrets
import threading
from dataclasses import replace
from typing import Dict, List, Optional, Set

from flash_registry.core.records import (
    DeviceRecord,
    PublicDevice,
    to_public,
    utcnow,
)

logger = logging.getLogger(__name__)

MIN_PUBLIC_ID_LENGTH = 8

# Sort fields accepted by list_active_devices(), with their direction
SORT_FIELDS = {
    "last_seen": True,  # most recent first
    "registered_at": True,
    "chip_type": False,
}


class DeviceValidationError(ValueError):
    """Raised when registration data is missing or malformed"""


class DeviceRegistry:
    """
    Single source of truth for MAC address <-> public ID mapping

    Records are immutable and replaced wholesale on every change, so a
    reader always sees a complete record from a single write. Writes are
    serialized per MAC address; records for different MACs never contend.
    """

    def __init__(self, public_id_length: int = 12):
        if public_id_length < MIN_PUBLIC_ID_LENGTH:
            raise ValueError(
                f"public_id_length must be at least {MIN_PUBLIC_ID_LENGTH}"
            )
        self.public_id_length = public_id_length

        self._devices: Dict[str, DeviceRecord] = {}  # keyed by MAC, insertion ordered
        self._mac_by_public_id: Dict[str, str] = {}
        self._issued_ids: Set[str] = set()

        # Guards the lock table, id allocation and new-key insertion
        self._guard = threading.Lock()
        self._key_locks: Dict[str, threading.Lock] = {}
        self._next_internal_id = 1

    def _lock_for(self, mac_address: str) -> threading.Lock:
        with self._guard:
            lock = self._key_locks.get(mac_address)
            if lock is None:
                lock = threading.Lock()
                self._key_locks[mac_address] = lock
            return lock

    def _generate_public_id(self) -> str:
        """Generate a public ID never handed out before (caller holds the guard)"""
        while True:
            candidate = secrets.token_urlsafe(self.public_id_length)[: self.public_id_length]
            if candidate not in self._issued_ids:
                self._issued_ids.add(candidate)
                return candidate

    def _resolve_mac(self, identifier: str) -> Optional[str]:
        """Map a public ID or MAC address to the MAC key"""
        if identifier in self._devices:
            return identifier
        return self._mac_by_public_id.get(identifier)

    @staticmethod
    def _validate(mac_address, chip_type):
        if not isinstance(mac_address, str) or not mac_address.strip():
            raise DeviceValidationError("mac_address is required")
        if not isinstance(chip_type, str) or not chip_type.strip():
            raise DeviceValidationError("chip_type is required")

    def register_device(
        self,
        mac_address: str,
        chip_type: str,
        flash_size: Optional[str] = None,
        device_type: Optional[str] = None,
    ) -> PublicDevice:
        """
        Register a new device or refresh an existing one

        Args:
            mac_address: Hardware MAC address (private key)
            chip_type: Detected chip, always refreshed
            flash_size: Flash size, only refreshed when a value is given
            device_type: Board type, only refreshed when a value is given

        Returns:
            Public view of the device record

        Raises:
            DeviceValidationError: mac_address or chip_type missing
        """
        self._validate(mac_address, chip_type)

        with self._lock_for(mac_address):
            existing = self._devices.get(mac_address)
            now = utcnow()

            if existing:
                record = replace(
                    existing,
                    chip_type=chip_type,
                    flash_size=flash_size or existing.flash_size,
                    device_type=device_type or existing.device_type,
                    last_seen=now,
                    is_active=True,
                )
                self._devices[mac_address] = record
                logger.info(f"Refreshed device {record.public_id} ({chip_type})")
                return to_public(record)

            with self._guard:
                internal_id = self._next_internal_id
                self._next_internal_id += 1
                record = DeviceRecord(
                    internal_id=internal_id,
                    mac_address=mac_address,
                    public_id=self._generate_public_id(),
                    chip_type=chip_type,
                    flash_size=flash_size or None,
                    device_type=device_type or None,
                    registered_at=now,
                    last_seen=now,
                    is_active=True,
                )
                self._devices[mac_address] = record
                self._mac_by_public_id[record.public_id] = mac_address

            logger.info(f"Registered new device {record.public_id} ({chip_type})")
            return to_public(record)

    def get_device_by_id(self, public_id: str) -> Optional[PublicDevice]:
        """Look up a device by public ID without touching its timestamps"""
        mac_address = self._mac_by_public_id.get(public_id)
        if mac_address is None:
            return None
        return to_public(self._devices[mac_address])

    def get_device_by_mac(self, mac_address: str) -> Optional[DeviceRecord]:
        """Internal lookup by MAC address - never return this to a client"""
        return self._devices.get(mac_address)

    def list_active_devices(self, sort_by: Optional[str] = None) -> List[PublicDevice]:
        """
        List active devices

        Args:
            sort_by: Optional field to sort on (last_seen, registered_at,
                chip_type). Insertion order when omitted.

        Returns:
            Public views of all active devices
        """
        if sort_by is not None and sort_by not in SORT_FIELDS:
            raise ValueError(f"Unsupported sort field: {sort_by}")

        with self._guard:
            records = list(self._devices.values())

        active = [record for record in records if record.is_active]
        if sort_by is not None:
            active.sort(key=lambda r: getattr(r, sort_by), reverse=SORT_FIELDS[sort_by])

        return [to_public(record) for record in active]

    def deactivate(self, public_id: str) -> bool:
        """
        Mark a device inactive (soft delete)

        Returns:
            True if the device exists (already inactive included), False otherwise
        """
        mac_address = self._mac_by_public_id.get(public_id)
        if mac_address is None:
            return False

        with self._lock_for(mac_address):
            record = self._devices[mac_address]
            if record.is_active:
                self._devices[mac_address] = replace(record, is_active=False)
                logger.info(f"Deactivated device {public_id}")

        return True

    def mark_seen(self, identifier: str) -> bool:
        """
        Refresh last_seen for a device

        Args:
            identifier: Public ID or MAC address

        Returns:
            True if a matching record was updated
        """
        mac_address = self._resolve_mac(identifier)
        if mac_address is None:
            return False

        with self._lock_for(mac_address):
            record = self._devices[mac_address]
            self._devices[mac_address] = replace(record, last_seen=utcnow())

        return True

    def count(self) -> int:
        return len(self._devices)

    def count_active(self) -> int:
        with self._guard:
            records = list(self._devices.values())
        return sum(1 for record in records if record.is_active)
