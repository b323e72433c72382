# backend/moltly/models/breeding_entry.py
from sqlalchemy import Integer, String, Column, ForeignKey, Date, DateTime, Text, JSON
from .base import Base, RecordMixin, utcnow


class BreedingEntry(RecordMixin, Base):
    __tablename__ = "breeding_entries"
    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    female_specimen = Column(String, nullable=True)
    male_specimen = Column(String, nullable=True)
    species = Column(String, nullable=True)
    pairing_date = Column(Date, nullable=False)
    status = Column(String, nullable=False, default="Planned")
    pairing_notes = Column(Text, nullable=True)
    egg_sac_date = Column(Date, nullable=True)
    egg_sac_status = Column(String, nullable=False, default="Not Laid")
    egg_sac_count = Column(Integer, nullable=True)
    hatch_date = Column(Date, nullable=True)
    sling_count = Column(Integer, nullable=True)
    follow_up_date = Column(Date, nullable=True)
    notes = Column(Text, nullable=True)
    attachments = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    FIELDS = {
        "femaleSpecimen": "female_specimen",
        "maleSpecimen": "male_specimen",
        "species": "species",
        "pairingDate": "pairing_date",
        "status": "status",
        "pairingNotes": "pairing_notes",
        "eggSacDate": "egg_sac_date",
        "eggSacStatus": "egg_sac_status",
        "eggSacCount": "egg_sac_count",
        "hatchDate": "hatch_date",
        "slingCount": "sling_count",
        "followUpDate": "follow_up_date",
        "notes": "notes",
        "attachments": "attachments",
    }
