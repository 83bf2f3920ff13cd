"""Push device registrations."""

from uuid import uuid4

from sqlalchemy import Column, String, DateTime, ForeignKey, Boolean
from sqlalchemy.orm import relationship

from portal_backend.core.base import Base
from portal_backend.core.custom_types import GUID, utcnow
from portal_backend.core.enums import DevicePlatform


class DeviceToken(Base):
    """FCM registration token; a token belongs to exactly one user at a time."""

    __tablename__ = "device_tokens"

    id = Column(GUID(), primary_key=True, default=uuid4)
    user_id = Column(GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(String(20), nullable=False)
    fcm_token = Column(String(512), unique=True, nullable=False)
    platform = Column(String(20), default=DevicePlatform.ANDROID.value, nullable=False)
    device_id = Column(String(255), nullable=True)
    enabled = Column(Boolean, default=True, nullable=False)
    last_used = Column(DateTime, default=utcnow, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User")

    def __repr__(self) -> str:
        return f"<DeviceToken(id={self.id}, user_id={self.user_id}, enabled={self.enabled})>"
