"""
Presence tracking and access audit trail

Provides:
- last_seen refresh for devices identified by public ID or MAC address
- Append-only access log, read back most recent first
- Access statistics by type and outcome
"""

import logging
import threading
from typing import Dict, List, Optional

from flash_registry.core.records import AccessLogEntry, utcnow
from flash_registry.services.registry import DeviceRegistry

logger = logging.getLogger(__name__)

# Access types
CONNECTION = "connection"
REGISTER = "register"
LOOKUP = "lookup"
PING = "ping"
DEACTIVATE = "deactivate"
IDENTIFY = "identify"
FLASH = "flash"
ERASE = "erase"

ACCESS_TYPES = (CONNECTION, REGISTER, LOOKUP, PING, DEACTIVATE, IDENTIFY, FLASH, ERASE)


class PresenceTracker:
    """
    Records when devices were observed and keeps an access audit trail

    Entries are never mutated or removed; readers always get a snapshot.
    """

    def __init__(self, registry: DeviceRegistry):
        self.registry = registry

        self._entries: List[AccessLogEntry] = []
        self._lock = threading.Lock()
        self._next_id = 1

        # Statistics
        self._by_type: Dict[str, int] = {}
        self._failures = 0

    def touch_last_seen(self, identifier: str) -> None:
        """
        Record that a device was seen just now

        Unknown identifiers are ignored: pings from devices that are
        disconnecting or were never registered are expected.
        """
        if not self.registry.mark_seen(identifier):
            logger.debug(f"Ignoring presence update for unknown device {identifier}")

    def log_access(
        self,
        identifier: str,
        access_type: str,
        succeeded: bool,
        error_detail: Optional[str] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> AccessLogEntry:
        """
        Append an access event

        Args:
            identifier: Public device ID (or a placeholder for anonymous calls)
            access_type: One of ACCESS_TYPES
            succeeded: Outcome of the access
            error_detail: Optional failure description
            ip_address: Optional caller address
            user_agent: Optional caller user agent

        Returns:
            The stored log entry
        """
        if access_type not in ACCESS_TYPES:
            raise ValueError(f"Unknown access type: {access_type}")

        with self._lock:
            entry = AccessLogEntry(
                id=self._next_id,
                identifier=identifier,
                access_type=access_type,
                success=succeeded,
                error_message=error_detail,
                ip_address=ip_address,
                user_agent=user_agent,
                accessed_at=utcnow(),
            )
            self._next_id += 1
            self._entries.append(entry)

            self._by_type[access_type] = self._by_type.get(access_type, 0) + 1
            if not succeeded:
                self._failures += 1

        if not succeeded:
            logger.warning(f"Failed {access_type} for {identifier}: {error_detail}")

        return entry

    def get_access_logs(
        self, identifier: Optional[str] = None, limit: Optional[int] = None
    ) -> List[AccessLogEntry]:
        """
        Retrieve access log entries

        Args:
            identifier: Only return entries for this identifier
            limit: Maximum number of entries to return (most recent first)

        Returns:
            List of log entries, most recent first
        """
        with self._lock:
            logs = list(self._entries)

        if identifier is not None:
            logs = [log for log in logs if log.identifier == identifier]

        # Appended in order, so reversing gives most recent first
        logs.reverse()

        if limit is not None:
            logs = logs[:limit]

        return logs

    def get_statistics(self) -> Dict:
        """Get access statistics"""
        with self._lock:
            return {
                "total_accesses": len(self._entries),
                "failures": self._failures,
                "by_type": dict(self._by_type),
            }
