"""Device access log model - append-only audit trail"""

from sqlalchemy import Column, String, Integer, DateTime, Boolean, Text
from sqlalchemy.sql import func
from flash_registry.core.database import Base


class DeviceAccessLog(Base):
    __tablename__ = "device_access_logs"

    id = Column(Integer, primary_key=True, index=True)
    identifier = Column(String(64), nullable=False, index=True)
    access_type = Column(String(32), nullable=False)  # register, ping, flash, ...
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(Text, nullable=True)
    success = Column(Boolean, nullable=False)
    error_message = Column(Text, nullable=True)
    accessed_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<DeviceAccessLog({self.access_type} {self.identifier} ok={self.success})>"
