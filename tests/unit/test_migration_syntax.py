"""Tests for migration file syntax and structure."""

import importlib.util
from pathlib import Path

from cursor_paginate.db.models import Document


MIGRATIONS_DIR = Path(__file__).parent.parent.parent / "migrations"


def load_migration():
    migration_files = list((MIGRATIONS_DIR / "versions").glob("*_documents_table.py"))
    assert len(migration_files) == 1, "Should have exactly one documents table migration"
    
    spec = importlib.util.spec_from_file_location("migration", migration_files[0])
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


class TestMigrationSyntax:
    """Test that migration files are syntactically correct."""
    
    def test_documents_migration_imports(self):
        migration = load_migration()
        
        assert callable(migration.upgrade)
        assert callable(migration.downgrade)
        assert migration.revision == "5c2d0e7a91b4"
        assert migration.down_revision is None
    
    def test_indexes_match_model(self):
        migration = load_migration()
        model_indexes = {
            index.name: [c.name for c in index.columns]
            for index in Document.__table__.indexes
        }
        
        for name, columns in migration.KEYSET_INDEXES.items():
            assert model_indexes[name] == columns
    
    def test_alembic_env_syntax(self):
        content = (MIGRATIONS_DIR / "env.py").read_text()
        
        assert "from alembic import context" in content
        assert "def run_migrations_offline()" in content
        assert "def run_migrations_online()" in content
        assert "from cursor_paginate.db.models import Base" in content
