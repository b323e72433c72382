# backend/moltly/models/research_stack.py
from sqlalchemy import Integer, String, Column, ForeignKey, DateTime, Boolean, Text, JSON
from .base import Base, RecordMixin, utcnow


class ResearchStack(RecordMixin, Base):
    __tablename__ = "research_stacks"
    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    species = Column(String, nullable=True)
    category = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    tags = Column(JSON, nullable=False, default=list)
    # notes are embedded; they live and die with the stack
    notes = Column(JSON, nullable=False, default=list)
    external_source = Column(String, nullable=True)
    external_id = Column(String, nullable=True, index=True)
    is_public = Column(Boolean, nullable=True)
    alias = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    FIELDS = {
        "name": "name",
        "species": "species",
        "category": "category",
        "description": "description",
        "tags": "tags",
        "notes": "notes",
        "externalSource": "external_source",
        "externalId": "external_id",
        "isPublic": "is_public",
        "alias": "alias",
    }
