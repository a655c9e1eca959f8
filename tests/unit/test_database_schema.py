"""Tests for the documents table model."""

from sqlalchemy.dialects import postgresql

from cursor_paginate.db.models import Base, Document


class TestDocumentModel:
    """Test the SQLAlchemy model backing PostgresDocumentStore."""
    
    def test_table_registered(self):
        assert "documents" in Base.metadata.tables
        assert Document.__table__ is Base.metadata.tables["documents"]
    
    def test_columns(self):
        columns = Document.__table__.columns
        
        assert set(columns.keys()) == {"id", "collection", "body", "created_at", "updated_at"}
        assert columns["id"].primary_key
        assert isinstance(columns["id"].type, postgresql.UUID)
        assert isinstance(columns["body"].type, postgresql.JSONB)
        assert columns["created_at"].type.timezone is True
        assert columns["updated_at"].type.timezone is True
        assert not any(column.nullable for column in columns if not column.primary_key)
    
    def test_columns_match_store(self):
        from cursor_paginate.store.postgres import COLUMNS, TABLE_NAME
        
        assert Document.__tablename__ == TABLE_NAME
        assert set(COLUMNS) <= set(Document.__table__.columns.keys())
    
    def test_keyset_indexes(self):
        indexes = {index.name: [c.name for c in index.columns] for index in Document.__table__.indexes}
        
        assert indexes["documents_collection_id"] == ["collection", "id"]
        assert indexes["documents_collection_created"] == ["collection", "created_at", "id"]
        assert indexes["documents_collection_updated"] == ["collection", "updated_at", "id"]
        assert indexes["documents_body_gin"] == ["body"]
    
    def test_sortable_columns_are_indexed_with_primary_key(self):
        from cursor_paginate.store.postgres import SORTABLE_COLUMNS
        
        indexed = {
            tuple(c.name for c in index.columns)
            for index in Document.__table__.indexes
        }
        for column in SORTABLE_COLUMNS:
            expected = ("collection", "id") if column == "id" else ("collection", column, "id")
            assert expected in indexed
