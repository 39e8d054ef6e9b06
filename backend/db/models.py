from datetime import datetime
from sqlalchemy import Column, Text, DateTime, Index
from db.database import Base


class Document(Base):
    """One JSON record of a named collection (habits, instances, tasks, ...)."""

    __tablename__ = "documents"

    collection = Column(Text, primary_key=True)
    doc_id = Column(Text, primary_key=True)
    body = Column(Text, nullable=False)  # JSON object
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index("ix_documents_collection", "collection"),
    )
