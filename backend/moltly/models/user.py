# backend/moltly/models/user.py
from sqlalchemy import Integer, String, Column, DateTime
from .base import Base, utcnow


class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=True)
    email = Column(String, unique=True, nullable=True, index=True)  # lowercased
    username = Column(String, unique=True, nullable=True)  # ^[a-z0-9]{2,32}$
    password_hash = Column(String, nullable=True)
    # linked external provider account (used for the molt sync webhook and admin list)
    discord_id = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
