"""SQLAlchemy model of the documents table, used for migrations."""

from sqlalchemy import Column, Text, DateTime, Index, text
from sqlalchemy.dialects.postgresql import UUID, JSONB
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class Document(Base):
    """A JSON document belonging to a named collection."""
    __tablename__ = 'documents'
    
    id = Column(UUID(as_uuid=True), primary_key=True, server_default=text('gen_random_uuid()'))
    collection = Column(Text, nullable=False)
    body = Column(JSONB, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
    
    # Keyset sorts need the sort column and the primary key in one index
    __table_args__ = (
        Index('documents_collection_id', 'collection', 'id'),
        Index('documents_collection_created', 'collection', 'created_at', 'id'),
        Index('documents_collection_updated', 'collection', 'updated_at', 'id'),
        Index('documents_body_gin', 'body', postgresql_using='gin'),
    )
