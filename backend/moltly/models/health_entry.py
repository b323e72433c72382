# backend/moltly/models/health_entry.py
from sqlalchemy import Integer, String, Column, ForeignKey, Date, DateTime, Float, Text, JSON
from .base import Base, RecordMixin, utcnow


class HealthEntry(RecordMixin, Base):
    __tablename__ = "health_entries"
    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    specimen = Column(String, nullable=True)
    species = Column(String, nullable=True)
    date = Column(Date, nullable=False)
    weight = Column(Float, nullable=True)
    weight_unit = Column(String(2), nullable=True)  # g|oz
    enclosure_dimensions = Column(String, nullable=True)
    temperature = Column(Float, nullable=True)
    temperature_unit = Column(String(1), nullable=True)
    humidity = Column(Float, nullable=True)
    condition = Column(String, nullable=False, default="Stable")  # Stable|Observation|Critical
    behavior = Column(Text, nullable=True)
    health_issues = Column(Text, nullable=True)
    treatment = Column(Text, nullable=True)
    follow_up_date = Column(Date, nullable=True)
    notes = Column(Text, nullable=True)
    attachments = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    FIELDS = {
        "specimen": "specimen",
        "species": "species",
        "date": "date",
        "weight": "weight",
        "weightUnit": "weight_unit",
        "enclosureDimensions": "enclosure_dimensions",
        "temperature": "temperature",
        "temperatureUnit": "temperature_unit",
        "humidity": "humidity",
        "condition": "condition",
        "behavior": "behavior",
        "healthIssues": "health_issues",
        "treatment": "treatment",
        "followUpDate": "follow_up_date",
        "notes": "notes",
        "attachments": "attachments",
    }
