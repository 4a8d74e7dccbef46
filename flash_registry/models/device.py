"""Device model - persistent layout of the device registry"""

from sqlalchemy import Column, String, Integer, DateTime, Boolean
from sqlalchemy.sql import func
from flash_registry.core.database import Base


class Device(Base):
    """
    Device table - Private/public identity split
    - mac_address: Private hardware key, one row per MAC
    - public_id: Opaque identifier handed to clients, never reused
    """

    __tablename__ = "devices"

    id = Column(Integer, primary_key=True, index=True)

    # Private hardware identifier
    mac_address = Column(String(32), unique=True, nullable=False, index=True)

    # Public identifier
    public_id = Column(String(64), unique=True, nullable=False, index=True)

    # Device information
    chip_type = Column(String(64), nullable=False)
    flash_size = Column(String(32), nullable=True)
    device_type = Column(String(255), nullable=True)

    # Presence
    is_active = Column(Boolean, default=True, nullable=False)
    registered_at = Column(DateTime(timezone=True), server_default=func.now())
    last_seen = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<Device(public_id='{self.public_id}', chip_type='{self.chip_type}')>"
