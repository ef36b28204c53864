from sqlalchemy.orm import declarative_base
from sqlalchemy import Column, Integer, String, DateTime, Text
from sqlalchemy.sql import func

Base = declarative_base()


class EventRow(Base):
    __tablename__ = "campus_events"
    position = Column(Integer, primary_key=True, autoincrement=False)  # insertion order
    event_id = Column(String, index=True, nullable=False)
    payload = Column(Text, nullable=False)       # interchange JSON of one record
    saved_at = Column(DateTime(timezone=True), server_default=func.now())


class CatalogState(Base):
    __tablename__ = "catalog_state"
    key = Column(String, primary_key=True)       # 'erased'
    value = Column(String, nullable=True)
    at = Column(DateTime(timezone=True), server_default=func.now())
