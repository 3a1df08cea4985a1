# progress_api/models.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, Column, DateTime, String

from .db import Base
from .schemas import PHASE_ORDER


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    user_id = Column(String(64), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True, unique=True, index=True)

    # Progress tracking
    current_phase = Column(String(32), nullable=False, default=PHASE_ORDER[0])
    phase_progress = Column(JSON, nullable=False, default=dict)  # {phase: PhaseState as camelCase dict}
    onboarding_completed = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)
