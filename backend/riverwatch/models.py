from sqlalchemy import Column, Integer, String, DateTime, Boolean, Index
from datetime import datetime
from .database import Base


class AlertRecord(Base):
    """Delivered notifications. Dedup state is never stored here."""

    __tablename__ = "alerts"

    id = Column(Integer, primary_key=True)
    alert_class = Column(String, nullable=False, index=True)  # ph | waste | flood | safety
    severity = Column(String, nullable=False)  # medium | high | critical
    entity_id = Column(String, nullable=True)

    title = Column(String, nullable=False)
    body = Column(String, nullable=False)
    read = Column(Boolean, default=False, index=True)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    read_at = Column(DateTime, nullable=True)


Index("idx_alerts_class_time", AlertRecord.alert_class, AlertRecord.created_at)
