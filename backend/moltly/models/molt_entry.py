# backend/moltly/models/molt_entry.py
from sqlalchemy import Integer, String, Column, ForeignKey, Date, DateTime, Float, Text, JSON
from .base import Base, RecordMixin, utcnow


class MoltEntry(RecordMixin, Base):
    __tablename__ = "molt_entries"
    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    # molt | feeding | water | any custom label
    entry_type = Column(String(32), nullable=False, default="molt", index=True)
    specimen = Column(String, nullable=True)
    species = Column(String, nullable=True)
    date = Column(Date, nullable=False)
    stage = Column(String, nullable=True)  # molt only: Pre-molt|Molt|Post-molt
    old_size = Column(Float, nullable=True)
    new_size = Column(Float, nullable=True)
    humidity = Column(Float, nullable=True)
    temperature = Column(Float, nullable=True)
    temperature_unit = Column(String(1), nullable=True)  # C|F
    notes = Column(Text, nullable=True)
    reminder_date = Column(Date, nullable=True)
    # feeding only
    feeding_prey = Column(String, nullable=True)
    feeding_outcome = Column(String, nullable=True)
    feeding_amount = Column(String, nullable=True)
    attachments = Column(JSON, nullable=False, default=list)  # [{id,name,url,type,addedAt}]
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    FIELDS = {
        "entryType": "entry_type",
        "specimen": "specimen",
        "species": "species",
        "date": "date",
        "stage": "stage",
        "oldSize": "old_size",
        "newSize": "new_size",
        "humidity": "humidity",
        "temperature": "temperature",
        "temperatureUnit": "temperature_unit",
        "notes": "notes",
        "reminderDate": "reminder_date",
        "feedingPrey": "feeding_prey",
        "feedingOutcome": "feeding_outcome",
        "feedingAmount": "feeding_amount",
        "attachments": "attachments",
    }
